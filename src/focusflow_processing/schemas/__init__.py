"""Pydantic schemas for records, artifacts and API request/response validation."""

from .bionic import (
    BionicDocument,
    Paragraph,
    Sentence,
    parse_bionic_document,
    serialize_bionic_document,
)
from .content import (
    SUCCESS_ONLY_FIELDS,
    ContentRecord,
    ContentStatus,
    ContentStatusResponse,
    InputType,
    OutputFormat,
    UsedPreferences,
)
from .health import HealthResponse
from .preferences import PREFERENCES_SCHEMA_VERSION, UserPreferences
from .processing import ProcessRequest

__all__ = [
    # Health
    "HealthResponse",
    # Content
    "ContentRecord",
    "ContentStatus",
    "ContentStatusResponse",
    "InputType",
    "OutputFormat",
    "UsedPreferences",
    "SUCCESS_ONLY_FIELDS",
    # Preferences
    "UserPreferences",
    "PREFERENCES_SCHEMA_VERSION",
    # Bionic
    "BionicDocument",
    "Paragraph",
    "Sentence",
    "parse_bionic_document",
    "serialize_bionic_document",
    # Processing
    "ProcessRequest",
]
