import re
import threading

import pytest

from kvstore_lib.buckets import BUCKET_ID_BYTES, BucketManager
from kvstore_lib.errors import BucketCollision
from kvstore_lib.keys import BUCKET_MARKER
from kvstore_lib.services.interfaces import BucketManagerProtocol
from kvstore_lib.storage import SQLiteEngine, StorageGateway


def _fixed(byte: int):
    return lambda n: bytes([byte]) * n


def test_bucket_id_shape(gateway):
    manager = BucketManager(gateway)
    assert isinstance(manager, BucketManagerProtocol)
    bucket = manager.create_bucket('abc123')
    assert re.fullmatch(r'[0-9a-f]{40}', bucket)
    assert BUCKET_ID_BYTES * 2 == len(bucket)


def test_marker_written(gateway):
    bucket = BucketManager(gateway).create_bucket('abc123')
    assert gateway.get(f'abc123/{bucket}') == BUCKET_MARKER


def test_two_buckets_are_distinct(gateway):
    manager = BucketManager(gateway)
    assert manager.create_bucket('abc123') != manager.create_bucket('abc123')


def test_forced_collision_raises_and_keeps_marker(gateway):
    manager = BucketManager(gateway, random_source=_fixed(0xDE))
    bucket = manager.create_bucket('abc123')
    assert bucket == 'de' * 20
    # pretend the marker carries something we can detect being overwritten
    gateway.put(f'abc123/{bucket}', b'original')

    with pytest.raises(BucketCollision) as exc:
        manager.create_bucket('abc123')
    assert bucket in str(exc.value)
    assert gateway.get(f'abc123/{bucket}') == b'original'


def test_same_id_under_other_token_is_not_a_collision(gateway):
    manager = BucketManager(gateway, random_source=_fixed(0x01))
    assert manager.create_bucket('abc123') == manager.create_bucket('xyz789')


def test_bucket_exists(gateway):
    manager = BucketManager(gateway)
    bucket = manager.create_bucket('abc123')
    assert manager.bucket_exists('abc123', bucket) is True
    assert manager.bucket_exists('xyz789', bucket) is False


def test_concurrent_creation_with_same_id_yields_one_winner(tmp_path):
    engine = SQLiteEngine(tmp_path / 'race.db')
    gateway = StorageGateway(engine)
    manager = BucketManager(gateway, random_source=_fixed(0x42))
    results = []
    lock = threading.Lock()

    def _create():
        try:
            outcome = manager.create_bucket('abc123')
        except BucketCollision:
            outcome = 'collision'
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=_create) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    engine.close()

    assert results.count('42' * 20) == 1
    assert results.count('collision') == 7
