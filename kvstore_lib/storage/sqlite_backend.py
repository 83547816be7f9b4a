"""SQLite-backed ordered engine.

Stores raw byte keys and values in a single table ordered by key
(memcmp order), so prefix scans are a bounded range query.

- Table schema: kv(k BLOB PRIMARY KEY, v BLOB NOT NULL)
- WAL journal: readers never block the writer and each read transaction
  sees the snapshot taken at its first read.
- Writers use `BEGIN IMMEDIATE` so check-then-set sequences are serialized
  against concurrent writers.
- One connection per thread; the engine keeps track of them to close all
  of them on shutdown.
"""
from __future__ import annotations
import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from kvstore_lib.errors import NotFound, ReadOnlyTransaction
from .base import OrderedKVEngine, Transaction

logger = logging.getLogger(__name__)

DEFAULT_PRAGMAS = {
    "journal_mode": "WAL",
    "synchronous": "NORMAL",
    "temp_store": "MEMORY",
    "foreign_keys": "OFF",
}

# Seconds a writer waits for the write lock before sqlite reports "database is locked".
DEFAULT_BUSY_TIMEOUT = 5.0


def _prefix_hi(prefix: bytes) -> Optional[bytes]:
    """Return the smallest byte string greater than every key starting with `prefix`.

    Returns None when no such bound exists (empty prefix or all 0xFF).

    Example: b"ab/" -> b"ab0"; b"\\xff\\xff" -> None
    """
    p = bytearray(prefix)
    for i in range(len(p) - 1, -1, -1):
        if p[i] != 0xFF:
            p[i] += 1
            del p[i + 1:]
            return bytes(p)
    return None


def _migrate(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv (
            k BLOB PRIMARY KEY,
            v BLOB NOT NULL
        )
        """
    )


class SQLiteTransaction(Transaction):
    def __init__(self, conn: sqlite3.Connection, writable: bool) -> None:
        self._conn = conn
        self.writable = writable

    def get(self, key: bytes) -> bytes:
        cur = self._conn.execute("SELECT v FROM kv WHERE k = ?", (key,))
        row = cur.fetchone()
        cur.close()
        if row is None:
            raise NotFound(key.decode("utf-8", errors="replace"))
        return bytes(row[0])

    def exists(self, key: bytes) -> bool:
        cur = self._conn.execute("SELECT 1 FROM kv WHERE k = ? LIMIT 1", (key,))
        row = cur.fetchone()
        cur.close()
        return row is not None

    def put(self, key: bytes, value: bytes) -> None:
        if not self.writable:
            raise ReadOnlyTransaction("put called on a read-only transaction")
        self._conn.execute(
            "INSERT INTO kv(k, v) VALUES(?, ?) ON CONFLICT(k) DO UPDATE SET v=excluded.v",
            (key, bytes(value)),
        )

    def scan_prefix(self, prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        # Keys are BLOBs so comparisons are memcmp; the substr guard keeps the
        # scan correct when the prefix has no finite upper bound.
        hi = _prefix_hi(prefix)
        if not prefix:
            sql = "SELECT k, v FROM kv ORDER BY k"
            args: tuple = ()
        elif hi is not None:
            sql = "SELECT k, v FROM kv WHERE k >= ? AND k < ? ORDER BY k"
            args = (prefix, hi)
        else:
            sql = "SELECT k, v FROM kv WHERE substr(k, 1, ?) = ? ORDER BY k"
            args = (len(prefix), prefix)
        cur = self._conn.execute(sql, args)
        try:
            for k, v in cur:
                yield bytes(k), bytes(v)
        finally:
            cur.close()


class SQLiteEngine(OrderedKVEngine):
    """Ordered engine on top of a SQLite database file."""

    failure_types = (sqlite3.Error, OSError)
    name = "sqlite"

    def __init__(self, db_path: str | Path, *, pragmas: Optional[dict] = None,
                 busy_timeout: float = DEFAULT_BUSY_TIMEOUT) -> None:
        self.db_path = Path(db_path)
        if str(db_path) == ":memory:":
            raise ValueError("SQLiteEngine needs a file path; use MemoryEngine for in-memory storage")
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._pragmas = dict(DEFAULT_PRAGMAS)
        if pragmas:
            self._pragmas.update(pragmas)
        self._busy_timeout = busy_timeout
        self._local = threading.local()
        self._conns: List[sqlite3.Connection] = []
        self._lock = threading.Lock()
        self._closed = False
        # Open eagerly so a bad path fails at startup rather than on first request.
        self._connection()
        logger.info("Opened SQLite engine at %s", self.db_path)

    def _open_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            os.fspath(self.db_path),
            timeout=self._busy_timeout,
            isolation_level=None,       # autocommit; transactions are explicit
            check_same_thread=False,    # close() runs on the shutdown thread
        )
        for pragma, value in self._pragmas.items():
            conn.execute(f"PRAGMA {pragma}={value}")
        _migrate(conn)
        return conn

    def _connection(self) -> sqlite3.Connection:
        if self._closed:
            raise sqlite3.ProgrammingError("engine is closed")
        conn = getattr(self._local, "conn", None)
        if conn is None:
            conn = self._open_connection()
            self._local.conn = conn
            with self._lock:
                self._conns.append(conn)
        return conn

    @contextmanager
    def _transaction(self, begin: str, writable: bool) -> Iterator[SQLiteTransaction]:
        conn = self._connection()
        conn.execute(begin)
        try:
            yield SQLiteTransaction(conn, writable=writable)
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        else:
            conn.execute("COMMIT")

    def read_transaction(self):
        return self._transaction("BEGIN", writable=False)

    def write_transaction(self):
        return self._transaction("BEGIN IMMEDIATE", writable=True)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            conns, self._conns = self._conns, []
        for conn in conns:
            try:
                conn.close()
            except sqlite3.Error:
                logger.warning("Failed to close SQLite connection for %s", self.db_path, exc_info=True)
        logger.info("Closed SQLite engine at %s", self.db_path)
