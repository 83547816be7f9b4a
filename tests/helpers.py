from typing import Any
from starlette.testclient import TestClient
from kvstore_lib.services.container import ServiceContainer


def register_service_on_client(client: TestClient, name: str, instance: Any) -> None:
    """Register (or replace) a service instance in the app's DI container.

    Usage in tests:
        from tests.helpers import register_service_on_client
        register_service_on_client(client, 'value_store', fake_store)
    """
    container = getattr(client.app.state, 'container', None)
    if container is None:
        container = ServiceContainer()
        client.app.state.container = container

    container.register_singleton(name, instance)


def container_of(client: TestClient) -> ServiceContainer:
    return client.app.state.container


def stored_keys(client: TestClient) -> list[str]:
    """Every storage key currently held by the app's engine."""
    gateway = container_of(client).get('storage_gateway')
    return [k for k, _ in gateway.scan_prefix('')]
