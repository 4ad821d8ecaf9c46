"""User preferences database model."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from focusflow_processing.database import Base


class UserPreferenceRecord(Base):
    """Reading preferences for one user (one row per user)."""

    __tablename__ = "user_preferences"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    detail_level: Mapped[str | None] = mapped_column(String(32), nullable=True)
    preferred_output: Mapped[str | None] = mapped_column(String(32), nullable=True)
    adhd_level: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        comment="AI-derived ADHD level from the onboarding evaluation",
    )
    schema_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
