"""Custom exceptions for content extraction."""

from focusflow_processing.exceptions import ExtractionError


class NetworkError(ExtractionError):
    """Network-related errors (timeout, connection refused, HTTP error status)."""

    pass


class EmptyContentError(ExtractionError):
    """Extraction returned empty or minimal content."""

    pass


__all__ = ["ExtractionError", "NetworkError", "EmptyContentError"]
