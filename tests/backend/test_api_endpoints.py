import re

from fastapi.testclient import TestClient
from starlette.requests import ClientDisconnect, Request
import pytest

from kvstore_lib.main import create_app
from tests.helpers import container_of, stored_keys

TOKEN = 'abc123'
AUTH = {'Authorization': TOKEN}


def _create_bucket(client, headers=AUTH) -> str:
    r = client.post('/', headers=headers)
    assert r.status_code == 200
    return r.text


def test_landing_page_is_public(client):
    r = client.get('/')
    assert r.status_code == 200
    assert r.text == "Bobby's KV Store"


def test_landing_page_answers_head(client):
    r = client.head('/')
    assert r.status_code == 200


def test_example_scenario(client):
    bucket = _create_bucket(client)
    assert re.fullmatch(r'[0-9a-f]{40}', bucket)

    r = client.post(f'/{bucket}/file1', content=b'hello', headers=AUTH)
    assert r.status_code == 200

    r = client.get(f'/{bucket}/file1', headers=AUTH)
    assert r.status_code == 200
    assert r.content == b'hello'

    r = client.get(f'/{bucket}', headers=AUTH)
    assert r.status_code == 200
    assert r.text == 'file1\n'


def test_missing_value_is_404(client):
    bucket = _create_bucket(client)
    r = client.get(f'/{bucket}/nope', headers=AUTH)
    assert r.status_code == 404
    assert r.content == b''


def test_list_is_sorted_and_bare(client):
    bucket = _create_bucket(client)
    for key in ('zeta', 'alpha', 'mid'):
        client.post(f'/{bucket}/{key}', content=key.encode(), headers=AUTH)
    r = client.get(f'/{bucket}', headers=AUTH)
    assert r.text.splitlines() == ['alpha', 'mid', 'zeta']


def test_empty_bucket_lists_nothing(client):
    bucket = _create_bucket(client)
    r = client.get(f'/{bucket}', headers=AUTH)
    assert r.status_code == 200
    assert r.text == ''


def test_overwrite(client):
    bucket = _create_bucket(client)
    client.post(f'/{bucket}/k', content=b'one', headers=AUTH)
    client.post(f'/{bucket}/k', content=b'two', headers=AUTH)
    assert client.get(f'/{bucket}/k', headers=AUTH).content == b'two'


def test_empty_body_is_stored(client):
    bucket = _create_bucket(client)
    assert client.post(f'/{bucket}/empty', headers=AUTH).status_code == 200
    r = client.get(f'/{bucket}/empty', headers=AUTH)
    assert r.status_code == 200
    assert r.content == b''


def test_tokens_are_isolated(client):
    other = {'Authorization': 'abc124'}
    bucket = _create_bucket(client)
    client.post(f'/{bucket}/secret', content=b'x', headers=AUTH)
    assert client.get(f'/{bucket}/secret', headers=other).status_code == 404
    assert client.get(f'/{bucket}', headers=other).text == ''


def test_list_buckets(client):
    b1 = _create_bucket(client)
    b2 = _create_bucket(client)
    client.post(f'/{b1}/file', content=b'x', headers=AUTH)
    _create_bucket(client, headers={'Authorization': 'zzz999'})
    r = client.get('/buckets', headers=AUTH)
    assert r.status_code == 200
    assert r.text.splitlines() == sorted([b1, b2])


def test_bucket_collision_is_500(make_config):
    app = create_app(make_config(), random_source=lambda n: b'\xab' * n)
    with TestClient(app) as client:
        assert _create_bucket(client) == 'ab' * 20
        r = client.post('/', headers=AUTH)
        assert r.status_code == 500
        assert 'collision' in r.text
        assert stored_keys(client) == [f'{TOKEN}/{"ab" * 20}']


def test_separator_in_token_is_400(client):
    r = client.post('/', headers={'Authorization': 'ab/123'})
    assert r.status_code == 400
    assert stored_keys(client) == []


@pytest.mark.parametrize('bucket', ['buckets', 'health'])
def test_route_names_cannot_hold_items(client, bucket):
    r = client.post(f'/{bucket}/k1', content=b'v', headers=AUTH)
    assert r.status_code == 400
    assert 'reserved' in r.text
    assert stored_keys(client) == []


def test_client_disconnect_while_reading_body_is_500(client, monkeypatch):
    bucket = _create_bucket(client)

    async def _disconnect(self):
        raise ClientDisconnect()

    monkeypatch.setattr(Request, 'body', _disconnect)
    r = client.post(f'/{bucket}/k', content=b'v', headers=AUTH)
    assert r.status_code == 500
    assert 'error reading body' in r.text
    assert stored_keys(client) == [f'{TOKEN}/{bucket}']


def test_storage_failure_is_500_and_service_keeps_running(client, monkeypatch):
    bucket = _create_bucket(client)
    client.post(f'/{bucket}/k', content=b'v', headers=AUTH)

    engine = container_of(client).get('storage_gateway').engine
    original = engine.read_transaction

    def _broken():
        raise OSError('simulated disk failure')

    monkeypatch.setattr(engine, 'read_transaction', _broken)
    r = client.get(f'/{bucket}/k', headers=AUTH)
    assert r.status_code == 500
    assert 'simulated disk failure' in r.text

    monkeypatch.setattr(engine, 'read_transaction', original)
    r = client.get(f'/{bucket}/k', headers=AUTH)
    assert r.status_code == 200
    assert r.content == b'v'


def test_memory_backend_app(make_config):
    app = create_app(make_config(storage_backend='memory'))
    with TestClient(app) as client:
        bucket = _create_bucket(client)
        client.post(f'/{bucket}/k', content=b'v', headers=AUTH)
        assert client.get(f'/{bucket}/k', headers=AUTH).content == b'v'


def test_data_persists_across_app_restarts(make_config):
    with TestClient(create_app(make_config())) as client:
        bucket = _create_bucket(client)
        client.post(f'/{bucket}/k', content=b'kept', headers=AUTH)
    with TestClient(create_app(make_config())) as client:
        assert client.get(f'/{bucket}/k', headers=AUTH).content == b'kept'
