from typing import Any, Callable, Dict, List
import logging

logger = logging.getLogger(__name__)


class ServiceContainer:
    """A tiny, explicit DI container for singletons, factories and closers.

    Services are registered by key and resolved via `get`. Factories run
    once and their result is cached. Callables registered with
    `register_closer` run in reverse order on `close()`, which the app
    lifespan calls at shutdown.
    """

    def __init__(self) -> None:
        self._singletons: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._closers: List[Callable[[], None]] = []

    def register_singleton(self, key: str, instance: Any) -> None:
        self._singletons[key] = instance

    def register_factory(self, key: str, factory: Callable[[], Any]) -> None:
        self._factories[key] = factory

    def register_closer(self, closer: Callable[[], None]) -> None:
        self._closers.append(closer)

    def get(self, key: str) -> Any:
        if key in self._singletons:
            return self._singletons[key]
        if key in self._factories:
            inst = self._factories.pop(key)()
            self._singletons[key] = inst
            return inst
        raise KeyError(f"No service registered for key '{key}'")

    def close(self) -> None:
        while self._closers:
            closer = self._closers.pop()
            try:
                closer()
            except Exception:
                logger.exception("Service closer %r failed", closer)
