from .service import BucketManager, BUCKET_ID_BYTES

__all__ = ["BucketManager", "BUCKET_ID_BYTES"]
