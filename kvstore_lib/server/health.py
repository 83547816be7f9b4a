"""Server health utilities.

Provides `get_health` returning server status, start time, uptime in
seconds and whether the storage engine answers a read.
"""
from datetime import datetime, timezone
from typing import Optional
import time

from kvstore_lib.storage.interfaces import GatewayProtocol

# record process start time at import
_START_TIME = time.time()


def get_health(gateway: Optional[GatewayProtocol] = None, backend: Optional[str] = None) -> dict:
    """Return a dict representing server health.

    Fields:
    - status: 'ok' or 'error' (error when the storage check fails)
    - start_time: ISO 8601 UTC timestamp when the process started
    - uptime_seconds: integer seconds since start
    - storage_backend: configured engine name
    - storage: 'ok', 'error' or 'unknown' when no gateway is given
    """
    now = time.time()
    uptime = int(now - _START_TIME)
    start_dt = datetime.fromtimestamp(_START_TIME, tz=timezone.utc)

    storage = 'unknown'
    if gateway is not None:
        storage = 'ok' if gateway.ping() else 'error'

    return {
        "status": "error" if storage == 'error' else "ok",
        "start_time": start_dt.isoformat(),
        "uptime_seconds": uptime,
        "storage_backend": backend,
        "storage": storage,
    }
