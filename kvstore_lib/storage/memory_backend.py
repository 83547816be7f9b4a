"""Simple memory-backed ordered engine.

Keeps a sorted list of keys next to a dict of values. One re-entrant lock
guards everything: a transaction holds it for its whole duration, which
gives snapshot reads and serialized writes for free. Write transactions
buffer their changes and apply them only on a clean exit.
"""
from bisect import bisect_left, insort
from contextlib import contextmanager
from threading import RLock
from typing import Dict, Iterator, List, Tuple

from kvstore_lib.errors import NotFound, ReadOnlyTransaction
from .base import OrderedKVEngine, Transaction


class MemoryTransaction(Transaction):
    def __init__(self, engine: "MemoryEngine", writable: bool) -> None:
        self._engine = engine
        self.writable = writable
        self._pending: Dict[bytes, bytes] = {}

    def get(self, key: bytes) -> bytes:
        if key in self._pending:
            return self._pending[key]
        try:
            return self._engine._values[key]
        except KeyError:
            raise NotFound(key.decode("utf-8", errors="replace"))

    def put(self, key: bytes, value: bytes) -> None:
        if not self.writable:
            raise ReadOnlyTransaction("put called on a read-only transaction")
        self._pending[bytes(key)] = bytes(value)

    def scan_prefix(self, prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        keys = self._engine._keys
        matched = []
        for key in keys[bisect_left(keys, prefix):]:
            if not key.startswith(prefix):
                break
            matched.append(key)
        if self._pending:
            extra = [k for k in self._pending if k.startswith(prefix) and k not in self._engine._values]
            matched = sorted(matched + extra)
        for key in matched:
            yield key, self.get(key)

    def _apply(self) -> None:
        for key, value in self._pending.items():
            if key not in self._engine._values:
                insort(self._engine._keys, key)
            self._engine._values[key] = value
        self._pending.clear()


class MemoryEngine(OrderedKVEngine):
    name = "memory"

    def __init__(self):
        self._lock = RLock()
        self._keys: List[bytes] = []
        self._values: Dict[bytes, bytes] = {}

    @contextmanager
    def read_transaction(self) -> Iterator[MemoryTransaction]:
        with self._lock:
            yield MemoryTransaction(self, writable=False)

    @contextmanager
    def write_transaction(self) -> Iterator[MemoryTransaction]:
        with self._lock:
            txn = MemoryTransaction(self, writable=True)
            yield txn
            txn._apply()

    def close(self) -> None:
        with self._lock:
            self._keys.clear()
            self._values.clear()
