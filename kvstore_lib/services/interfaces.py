"""Central re-exports for package-local Protocols.

Canonical storage protocols live beside the storage implementations; the
service protocols are defined here.
"""
from typing import Iterator, Protocol, Tuple, runtime_checkable

from kvstore_lib.storage.interfaces import EngineProtocol, GatewayProtocol


@runtime_checkable
class BucketManagerProtocol(Protocol):
    def create_bucket(self, token: str) -> str: ...

    def bucket_exists(self, token: str, bucket: str) -> bool: ...


@runtime_checkable
class ValueStoreProtocol(Protocol):
    def set_value(self, token: str, bucket: str, key: str, value: bytes) -> None: ...

    def get_value(self, token: str, bucket: str, key: str) -> bytes: ...

    def list_values(self, token: str, bucket: str) -> Iterator[Tuple[str, bytes]]: ...

    def list_buckets(self, token: str) -> Iterator[str]: ...


__all__ = [
    "EngineProtocol",
    "GatewayProtocol",
    "BucketManagerProtocol",
    "ValueStoreProtocol",
]
