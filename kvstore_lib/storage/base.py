"""Ordered key-value engine interface.

Defines the capability set the rest of the application consumes from a
storage engine: snapshot read transactions, atomic read-modify-write
transactions and ascending prefix iteration over raw byte keys.
Implementations must be safe for concurrent use from many threads.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import ContextManager, Iterator, Tuple

from kvstore_lib.errors import NotFound


class Transaction(ABC):
    """Unit of work handed out by an engine.

    Only valid inside the `with` block that produced it.
    """

    writable: bool = False

    @abstractmethod
    def get(self, key: bytes) -> bytes:
        """Return the value stored at `key`.

        Must raise `kvstore_lib.errors.NotFound` if the key does not exist.
        """

    @abstractmethod
    def put(self, key: bytes, value: bytes) -> None:
        """Store `value` at `key`. Raise `ReadOnlyTransaction` on read-only transactions."""

    @abstractmethod
    def scan_prefix(self, prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        """Yield `(key, value)` pairs whose key starts with `prefix`,
        in ascending lexicographic byte order."""

    def exists(self, key: bytes) -> bool:
        try:
            self.get(key)
        except NotFound:
            return False
        return True


class OrderedKVEngine(ABC):
    """Abstract ordered key-value engine."""

    # Exception types signalling an engine-level failure. The gateway turns
    # them into `StorageFailure`.
    failure_types: Tuple[type, ...] = (OSError,)

    name: str = "abstract"

    @abstractmethod
    def read_transaction(self) -> ContextManager[Transaction]:
        """Open a read-only transaction seeing a consistent snapshot."""

    @abstractmethod
    def write_transaction(self) -> ContextManager[Transaction]:
        """Open a read-write transaction.

        Writes commit together when the block exits normally and are
        discarded when it raises. Write transactions are serialized.
        """

    @abstractmethod
    def close(self) -> None:
        """Release every resource held by the engine."""
