"""Item storage scoped to (token, bucket)."""
from __future__ import annotations
import logging
from typing import Iterator, List, Tuple

from kvstore_lib.keys import (
    bucket_scan_prefix,
    compose_item_key,
    is_marker_suffix,
    strip_prefix,
    token_scan_prefix,
)
from kvstore_lib.storage.interfaces import GatewayProtocol

logger = logging.getLogger(__name__)


class ValueStore:
    def __init__(self, gateway: GatewayProtocol) -> None:
        self._gateway = gateway

    def set_value(self, token: str, bucket: str, key: str, value: bytes) -> None:
        """Write `value` at (token, bucket, key), replacing any previous value.

        The bucket does not have to exist.
        """
        storage_key = compose_item_key(token, bucket, key)
        self._gateway.write_transaction(lambda txn: txn.put(storage_key, bytes(value)))
        logger.debug("Set %s/%s (%d bytes)", bucket, key, len(value))

    def get_value(self, token: str, bucket: str, key: str) -> bytes:
        """Return the stored bytes. Raises `NotFound` when the key is absent."""
        storage_key = compose_item_key(token, bucket, key)
        return self._gateway.read_transaction(lambda txn: txn.get(storage_key))

    def list_values(self, token: str, bucket: str) -> Iterator[Tuple[str, bytes]]:
        """Yield `(key, value)` for every item in the bucket, in ascending key order.

        The listing is read in one snapshot; the returned iterator can be
        consumed once.
        """
        prefix = bucket_scan_prefix(token, bucket)

        def _scan(txn) -> List[Tuple[str, bytes]]:
            return [(strip_prefix(prefix, k), v) for k, v in txn.scan_prefix(prefix)]

        items = self._gateway.read_transaction(_scan)
        logger.debug("Listed %d items in bucket %s", len(items), bucket)
        return iter(items)

    def list_buckets(self, token: str) -> Iterator[str]:
        """Yield the ids of every bucket created under `token`, ascending."""
        prefix = token_scan_prefix(token)

        def _scan(txn) -> List[str]:
            suffixes = (strip_prefix(prefix, k) for k, _ in txn.scan_prefix(prefix))
            return [s for s in suffixes if is_marker_suffix(s)]

        return iter(self._gateway.read_transaction(_scan))
