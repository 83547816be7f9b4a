from typing import Protocol, Any, Callable, ContextManager, Iterator, List, Tuple, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class EngineProtocol(Protocol):
    """Ordered engine protocol mirroring `kvstore_lib.storage.base.OrderedKVEngine`.

    Implementations should follow the semantics documented on the abstract
    base class (NotFound for missing keys, serialized write transactions,
    ascending prefix scans).
    """

    name: str

    def read_transaction(self) -> ContextManager[Any]: ...

    def write_transaction(self) -> ContextManager[Any]: ...

    def close(self) -> None: ...


@runtime_checkable
class GatewayProtocol(Protocol):
    """Surface of `kvstore_lib.storage.gateway.StorageGateway` used by services."""

    def read_transaction(self, fn: Callable[[Any], T]) -> T: ...

    def write_transaction(self, fn: Callable[[Any], T]) -> T: ...

    def get(self, key: str) -> bytes: ...

    def put(self, key: str, value: bytes) -> None: ...

    def scan_prefix(self, prefix: str) -> List[Tuple[str, bytes]]: ...

    def ping(self) -> bool: ...
