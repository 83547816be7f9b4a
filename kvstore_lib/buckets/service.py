"""Bucket allocation.

A bucket is a random 20-byte identifier, hex-encoded, recorded under the
owning token with a marker value. The existence check and the marker
write run in one write transaction; a collision is reported to the caller
and never retried here.
"""
from __future__ import annotations
import logging
import secrets
from typing import Callable, Optional

from kvstore_lib.errors import BucketCollision
from kvstore_lib.keys import BUCKET_MARKER, compose_bucket_marker_key
from kvstore_lib.storage.gateway import KeyspaceTransaction
from kvstore_lib.storage.interfaces import GatewayProtocol

logger = logging.getLogger(__name__)

BUCKET_ID_BYTES = 20


class BucketManager:
    def __init__(self, gateway: GatewayProtocol, random_source: Optional[Callable[[int], bytes]] = None) -> None:
        self._gateway = gateway
        # Injected in tests to force collisions.
        self._random = random_source or secrets.token_bytes

    def new_bucket_id(self) -> str:
        return self._random(BUCKET_ID_BYTES).hex()

    def create_bucket(self, token: str) -> str:
        bucket = self.new_bucket_id()
        marker_key = compose_bucket_marker_key(token, bucket)

        def _create(txn: KeyspaceTransaction) -> str:
            if txn.exists(marker_key):
                raise BucketCollision(bucket)
            txn.put(marker_key, BUCKET_MARKER)
            return bucket

        try:
            created = self._gateway.write_transaction(_create)
        except BucketCollision:
            logger.warning("Bucket id collision for generated bucket %s", bucket)
            raise
        logger.info("Created bucket %s", created)
        return created

    def bucket_exists(self, token: str, bucket: str) -> bool:
        marker_key = compose_bucket_marker_key(token, bucket)
        return self._gateway.read_transaction(lambda txn: txn.exists(marker_key))
