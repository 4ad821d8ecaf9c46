"""Read access to user reading preferences."""

from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from focusflow_processing.models.preferences import UserPreferenceRecord
from focusflow_processing.schemas.preferences import UserPreferences


class PreferencesStore(ABC):
    """Point read of preferences by user id."""

    @abstractmethod
    async def get(self, user_id: str) -> UserPreferences | None:
        """Return the user's preferences, or None when the user has none."""
        pass


class SqlPreferencesStore(PreferencesStore):
    """PreferencesStore backed by the user_preferences table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, user_id: str) -> UserPreferences | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserPreferenceRecord).where(UserPreferenceRecord.user_id == user_id)
            )
            row = result.scalar_one_or_none()
            return UserPreferences.model_validate(row) if row is not None else None

    async def save(self, preferences: UserPreferences) -> UserPreferences:
        """Insert or update a user's preferences."""
        async with self._session_factory() as session:
            row = await session.get(UserPreferenceRecord, preferences.user_id)
            if row is None:
                row = UserPreferenceRecord(user_id=preferences.user_id)
                session.add(row)
            row.detail_level = preferences.detail_level
            row.preferred_output = preferences.preferred_output
            row.adhd_level = preferences.adhd_level
            row.schema_version = preferences.schema_version
            await session.commit()
        return preferences
