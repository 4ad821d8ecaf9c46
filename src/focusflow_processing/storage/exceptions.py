"""Custom exceptions for blob storage adapters."""


class StorageError(Exception):
    """Base exception for blob storage errors."""

    pass


class BlobNotFoundError(StorageError):
    """Referenced object does not exist."""

    pass


class StorageConfigurationError(StorageError):
    """Storage client cannot be constructed from the current configuration."""

    pass
