"""SQLAlchemy models for database schema."""

# Import all models here to ensure they are registered with Base.metadata

from .content import ContentOutput
from .preferences import UserPreferenceRecord

__all__ = [
    "ContentOutput",
    "UserPreferenceRecord",
]
