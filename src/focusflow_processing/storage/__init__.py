"""Blob storage adapters.

Usage:
    from focusflow_processing.storage import create_blob_store

    store = create_blob_store(settings)
    obj = await store.upload("content-processed", "abc-bionic.json", data, "application/json")
    data = await store.download(obj.url)
"""

from focusflow_processing.config import Settings

from .base import BlobStore, StoredObject
from .exceptions import BlobNotFoundError, StorageConfigurationError, StorageError
from .local import LocalBlobStore
from .s3 import S3BlobStore


def create_blob_store(config: Settings) -> BlobStore:
    """Build the blob store selected by STORAGE_BACKEND.

    Raises:
        StorageConfigurationError: If the backend cannot be constructed
    """
    if config.storage_backend == "s3":
        return S3BlobStore(
            region=config.s3_region,
            endpoint_url=config.s3_endpoint_url,
            access_key_id=config.aws_access_key_id,
            secret_access_key=config.aws_secret_access_key,
        )
    if config.storage_backend == "local":
        if not config.local_storage_path:
            raise StorageConfigurationError("LOCAL_STORAGE_PATH is not configured")
        return LocalBlobStore(config.local_storage_path)
    raise StorageConfigurationError(f"Unknown storage backend: {config.storage_backend}")


__all__ = [
    "BlobStore",
    "StoredObject",
    "S3BlobStore",
    "LocalBlobStore",
    "StorageError",
    "BlobNotFoundError",
    "StorageConfigurationError",
    "create_blob_store",
]
