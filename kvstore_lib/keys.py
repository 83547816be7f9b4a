"""Composite storage keys.

Every record lives in one flat, ordered key space:

    <token>/<bucket>            bucket marker (value: b"bucket")
    <token>/<bucket>/<key>      item

Scan prefixes always end with the separator so a token or bucket that is
a string prefix of another never matches the longer one. Components must
be non-empty and must not contain the separator; that makes every composed
key unambiguous and lets the number of separators tell markers and items
apart.
"""
from __future__ import annotations

from kvstore_lib.errors import InvalidKeyComponent

SEPARATOR = "/"
BUCKET_MARKER = b"bucket"
# Bucket names answered by fixed routes (`GET /buckets`, `GET /health`).
RESERVED_BUCKETS = frozenset({"buckets", "health"})


def validate_component(name: str, value: str) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidKeyComponent(f"{name} must be a non-empty string")
    if SEPARATOR in value:
        raise InvalidKeyComponent(f"{name} must not contain {SEPARATOR!r}: {value!r}")
    return value


def validate_bucket(bucket: str) -> str:
    validate_component("bucket", bucket)
    if bucket in RESERVED_BUCKETS:
        raise InvalidKeyComponent(f"bucket name {bucket!r} is reserved")
    return bucket


def compose_item_key(token: str, bucket: str, item_key: str) -> str:
    validate_component("token", token)
    validate_bucket(bucket)
    validate_component("key", item_key)
    return SEPARATOR.join((token, bucket, item_key))


def compose_bucket_marker_key(token: str, bucket: str) -> str:
    validate_component("token", token)
    validate_bucket(bucket)
    return SEPARATOR.join((token, bucket))


def bucket_scan_prefix(token: str, bucket: str) -> str:
    """Prefix matching every item of `bucket` but not the bucket marker."""
    return compose_bucket_marker_key(token, bucket) + SEPARATOR


def token_scan_prefix(token: str) -> str:
    validate_component("token", token)
    return token + SEPARATOR


def strip_prefix(prefix: str, storage_key: str) -> str:
    if not storage_key.startswith(prefix):
        raise ValueError(f"{storage_key!r} does not start with {prefix!r}")
    return storage_key[len(prefix):]


def is_marker_suffix(suffix: str) -> bool:
    """True for the part after `token/` that names a bucket marker."""
    return bool(suffix) and SEPARATOR not in suffix


def encode(key: str) -> bytes:
    return key.encode("utf-8")


def decode(raw: bytes) -> str:
    return raw.decode("utf-8")
