"""Services package: DI container and service interfaces."""
from .container import ServiceContainer
from .interfaces import (
    BucketManagerProtocol,
    EngineProtocol,
    GatewayProtocol,
    ValueStoreProtocol,
)

__all__ = [
    "ServiceContainer",
    "BucketManagerProtocol",
    "EngineProtocol",
    "GatewayProtocol",
    "ValueStoreProtocol",
]
