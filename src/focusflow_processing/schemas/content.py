"""Content record schemas.

A content record tracks one uploaded piece of content through its processing
lifecycle. It is keyed by ``(content_id, user_id)``; ``user_id`` is the
partition key of the metadata store.

Status state machine:
    UPLOADED -> PROCESSING (implicit) -> READY | FAILED

Invariants:
    - ``processed_storage_ref`` is set iff ``status == READY``
    - ``error_message`` is set iff ``status == FAILED``
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class InputType(str, Enum):
    """Kind of raw content a record holds."""

    PDF = "pdf"
    TEXT = "text"
    LINK = "link"
    VIDEO = "video"


class ContentStatus(str, Enum):
    """Processing status values."""

    UPLOADED = "UPLOADED"
    PROCESSING = "PROCESSING"
    READY = "READY"
    FAILED = "FAILED"


class OutputFormat(str, Enum):
    """Format of the processed artifact."""

    BIONIC_TEXT = "BIONIC_TEXT"


# Fields only present on a READY record; cleared when a run fails.
SUCCESS_ONLY_FIELDS = (
    "output_format",
    "processed_storage_ref",
    "processed_blob_name",
    "processed_container_name",
    "processed_at",
)


class UsedPreferences(BaseModel):
    """Snapshot of the preference fields that influenced a run."""

    detail_level: str | None = None
    preferred_output: str | None = None
    adhd_level: str | None = None


class ContentRecord(BaseModel):
    """Metadata-store entity for one piece of content."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=False)

    content_id: str = Field(description="Opaque unique content identifier")
    user_id: str = Field(description="Owning user (partition key)")
    input_type: InputType
    raw_storage_ref: str = Field(
        description="Object-storage URL, bare web URL, or inline raw text",
    )
    status: ContentStatus = ContentStatus.UPLOADED
    output_format: OutputFormat | None = None
    processed_storage_ref: str | None = None
    processed_blob_name: str | None = None
    processed_container_name: str | None = None
    error_message: str | None = None
    used_preferences: UsedPreferences | None = None
    uploaded_at: datetime | None = None
    processed_at: datetime | None = None

    # Run guard: at most one active run per record
    active_run_id: str | None = None
    run_started_at: datetime | None = None


class ContentStatusResponse(BaseModel):
    """Status view of a content record, polled by clients."""

    content_id: str
    input_type: InputType
    status: ContentStatus
    output_format: OutputFormat | None = None
    processed_storage_ref: str | None = None
    processed_blob_name: str | None = None
    processed_container_name: str | None = None
    error_message: str | None = None
    processed_at: datetime | None = None

    @classmethod
    def from_record(cls, record: ContentRecord) -> "ContentStatusResponse":
        return cls(
            content_id=record.content_id,
            input_type=record.input_type,
            status=record.status,
            output_format=record.output_format,
            processed_storage_ref=record.processed_storage_ref,
            processed_blob_name=record.processed_blob_name,
            processed_container_name=record.processed_container_name,
            error_message=record.error_message,
            processed_at=record.processed_at,
        )
