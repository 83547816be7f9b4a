"""Exception types shared by the storage, bucket and value layers.

`create_app` maps each type to an HTTP status; see `kvstore_lib.main`.
"""


class KVStoreError(Exception):
    """Base class for all errors raised by the key-value core."""


class NotFound(KVStoreError, KeyError):
    """Requested key does not exist. An expected outcome, not a failure."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"key not found: {self.key}"


class BucketCollision(KVStoreError):
    """A freshly generated bucket id already exists under the token."""

    def __init__(self, bucket: str) -> None:
        super().__init__(f"error bucket name collision: {bucket}")
        self.bucket = bucket


class StorageFailure(KVStoreError):
    """The storage engine failed (I/O, corruption, locked database, ...)."""


class BodyReadFailure(KVStoreError):
    """The request body could not be read."""


class InvalidKeyComponent(KVStoreError, ValueError):
    """A token, bucket or item key would break the composite key layout."""


class ReadOnlyTransaction(KVStoreError, RuntimeError):
    """A write was attempted inside a read transaction."""
