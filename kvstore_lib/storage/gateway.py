"""Storage gateway: the only door from the services to the engine.

Services hand a callable to `read_transaction` / `write_transaction`; the
callable receives a `KeyspaceTransaction` that speaks text keys and byte
values. Engine-level exceptions are logged and re-raised as
`StorageFailure` so the HTTP layer can turn them into a 500 for the one
request without touching the process.
"""
from __future__ import annotations
import logging
from typing import Callable, ContextManager, Iterator, List, Tuple, TypeVar

from kvstore_lib.errors import KVStoreError, StorageFailure
from kvstore_lib.keys import decode, encode
from .base import OrderedKVEngine, Transaction

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyspaceTransaction:
    """Text-keyed view over an engine transaction."""

    def __init__(self, txn: Transaction) -> None:
        self._txn = txn

    def get(self, key: str) -> bytes:
        return self._txn.get(encode(key))

    def exists(self, key: str) -> bool:
        return self._txn.exists(encode(key))

    def put(self, key: str, value: bytes) -> None:
        self._txn.put(encode(key), value)

    def scan_prefix(self, prefix: str) -> Iterator[Tuple[str, bytes]]:
        for raw_key, value in self._txn.scan_prefix(encode(prefix)):
            yield decode(raw_key), value


class StorageGateway:
    def __init__(self, engine: OrderedKVEngine) -> None:
        self._engine = engine

    @property
    def engine(self) -> OrderedKVEngine:
        return self._engine

    def _run(self, opener: Callable[[], ContextManager[Transaction]], fn: Callable[[KeyspaceTransaction], T], kind: str) -> T:
        try:
            with opener() as txn:
                return fn(KeyspaceTransaction(txn))
        except KVStoreError:
            raise
        except self._engine.failure_types as e:
            logger.exception("%s transaction failed on %s engine", kind, self._engine.name)
            raise StorageFailure(f"error performing {kind} transaction: {e}") from e

    def read_transaction(self, fn: Callable[[KeyspaceTransaction], T]) -> T:
        """Run `fn` against a consistent read-only snapshot and return its result."""
        return self._run(self._engine.read_transaction, fn, "read")

    def write_transaction(self, fn: Callable[[KeyspaceTransaction], T]) -> T:
        """Run `fn` with read-write access; its writes commit atomically or not at all."""
        return self._run(self._engine.write_transaction, fn, "write")

    def get(self, key: str) -> bytes:
        return self.read_transaction(lambda txn: txn.get(key))

    def put(self, key: str, value: bytes) -> None:
        self.write_transaction(lambda txn: txn.put(key, value))

    def scan_prefix(self, prefix: str) -> List[Tuple[str, bytes]]:
        # Materialized inside the transaction; a scan never outlives its snapshot.
        return self.read_transaction(lambda txn: list(txn.scan_prefix(prefix)))

    def ping(self) -> bool:
        try:
            self.read_transaction(lambda txn: txn.exists(""))
        except StorageFailure:
            return False
        return True

    def close(self) -> None:
        self._engine.close()
