"""Content output database model."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from focusflow_processing.database import Base


class ContentOutput(Base):
    """One uploaded piece of content and its processing state.

    Design Decisions:

    1. Composite primary key (content_id, user_id):
       - Every read and write is a point operation by both keys, mirroring a
         user-partitioned document store
       - A user can never address another user's record by content_id alone

    2. Status stored as plain strings:
       - Values come from schemas.content.ContentStatus / InputType
       - Keeps the table portable between PostgreSQL and SQLite (tests)

    3. Run guard columns (active_run_id, run_started_at):
       - A run claims the record with a conditional UPDATE and releases it in
         its terminal write; a lease lets a crashed run be taken over
    """

    __tablename__ = "content_outputs"

    content_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)

    input_type: Mapped[str] = mapped_column(String(16), nullable=False)
    raw_storage_ref: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Object-storage URL, bare web URL, or inline text",
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="UPLOADED")

    # Set on success
    output_format: Mapped[str | None] = mapped_column(String(32), nullable=True)
    processed_storage_ref: Mapped[str | None] = mapped_column(Text, nullable=True)
    processed_blob_name: Mapped[str | None] = mapped_column(String(512), nullable=True)
    processed_container_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    used_preferences: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Set on failure
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    uploaded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Run guard
    active_run_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    run_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_content_outputs_user_status", "user_id", "status"),)

    def __repr__(self) -> str:
        return (
            f"<ContentOutput(content_id={self.content_id!r}, user_id={self.user_id!r}, "
            f"status={self.status!r})>"
        )
