"""Application factory for the KV store FastAPI app.

This module exposes `create_app(config: Config) -> FastAPI`, which opens
the storage engine, composes the services, registers middleware, error
handlers and routers. Nothing happens at import time so tests can build
isolated apps.

    from kvstore_lib.main import create_app, Config
    app = create_app(Config(storage_backend='memory'))

The engine is opened once per app and closed by the app lifespan.
"""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable, Optional
import logging
import secrets

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response

from kvstore_lib.config import Config, has_feature_flag
from kvstore_lib.errors import (
    BodyReadFailure,
    BucketCollision,
    InvalidKeyComponent,
    KVStoreError,
    NotFound,
    StorageFailure,
)
from kvstore_lib.logging_config import configure_logging
from kvstore_lib.storage import StorageGateway, open_engine

__all__ = ["Config", "create_app"]

# Status code per error type; the first matching class in the MRO wins.
ERROR_STATUS = {
    NotFound: 404,
    InvalidKeyComponent: 400,
    BucketCollision: 500,
    StorageFailure: 500,
    BodyReadFailure: 500,
}


def _status_for(exc: KVStoreError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 500


def create_app(config: Config, random_source: Optional[Callable[[int], bytes]] = None) -> FastAPI:
    """Create and return a configured FastAPI application.

    `random_source` replaces `secrets.token_bytes` for bucket ids.
    """
    logger = configure_logging(Path(config.config_path) if config.config_path else None)

    engine = open_engine(config.storage_backend, data_dir=config.data_dir, db_file=config.db_file)
    gateway = StorageGateway(engine)

    from kvstore_lib.buckets import BucketManager
    from kvstore_lib.values import ValueStore
    bucket_manager = BucketManager(gateway, random_source=random_source or secrets.token_bytes)
    value_store = ValueStore(gateway)

    from kvstore_lib.services import ServiceContainer
    container = ServiceContainer()
    container.register_singleton("storage_gateway", gateway)
    container.register_singleton("bucket_manager", bucket_manager)
    container.register_singleton("value_store", value_store)
    container.register_closer(gateway.close)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down; releasing storage engine")
        app.state.container.close()

    app = FastAPI(title="KV Store Server", lifespan=lifespan)
    app.state.container = container
    app.state.token_length = config.token_length

    # Middleware added last runs first: log -> gate -> (brotli) -> routes.
    from kvstore_lib.middleware import BrotliCompression, RequestLogMiddleware, TokenGateMiddleware
    enable_brotli = config.enable_brotli if config.enable_brotli is not None else has_feature_flag('kvstore_use_brotli', config.config_path)
    if enable_brotli:
        logger.info("Brotli compression middleware is enabled")
        app.add_middleware(BrotliCompression)
    app.add_middleware(TokenGateMiddleware, token_length=config.token_length)
    app.add_middleware(RequestLogMiddleware)

    # Exception handlers
    @app.exception_handler(KVStoreError)
    async def kv_error_handler(request: Request, exc: KVStoreError):
        status = _status_for(exc)
        if isinstance(exc, NotFound):
            logger.debug("Not found: %s %s", request.method, request.url.path)
            return Response(status_code=status)
        if status >= 500:
            logger.error("Request %s %s failed: %s", request.method, request.url.path, exc)
        return PlainTextResponse(str(exc), status_code=status)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        if exc.status_code == 401:
            from kvstore_lib.middleware import unauthorized_response
            return unauthorized_response()
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    # Order matters: fixed paths before the `/{bucket}` catch-all.
    from kvstore_lib.server.api import router as server_router
    from kvstore_lib.buckets.api import router as buckets_router
    from kvstore_lib.values.api import router as values_router

    app.include_router(server_router)
    app.include_router(buckets_router)
    app.include_router(values_router)

    return app
