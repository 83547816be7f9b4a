"""Storage package: ordered engines and the gateway the services use."""
from __future__ import annotations
import logging
from pathlib import Path

from .base import OrderedKVEngine, Transaction
from .gateway import KeyspaceTransaction, StorageGateway
from .memory_backend import MemoryEngine
from .sqlite_backend import SQLiteEngine

logger = logging.getLogger(__name__)

DEFAULT_DB_FILE = "kvstore.db"


def open_engine(backend: str = "sqlite", data_dir: str | Path = "data", db_file: str = DEFAULT_DB_FILE) -> OrderedKVEngine:
    """Open the engine named by `backend` (`sqlite` or `memory`)."""
    if backend == "memory":
        logger.info("Using in-memory storage engine; data is lost on shutdown")
        return MemoryEngine()
    if backend == "sqlite":
        return SQLiteEngine(Path(data_dir) / db_file)
    raise ValueError(f"Unknown storage backend: {backend!r}")


__all__ = [
    "OrderedKVEngine",
    "Transaction",
    "KeyspaceTransaction",
    "StorageGateway",
    "MemoryEngine",
    "SQLiteEngine",
    "open_engine",
    "DEFAULT_DB_FILE",
]
