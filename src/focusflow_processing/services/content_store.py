"""Metadata store for content records.

Design Decisions:

1. Point operations only:
   - get / replace / patch address one record by (content_id, user_id)
   - replace writes every column (full overwrite); patch sets only the
     given fields and leaves the rest untouched

2. Conditional writes for the run guard:
   - claim_run sets active_run_id only when no live run holds the record
     (null, or its lease expired)
   - replace / patch accept run_id and then only apply while that run still
     owns the record; otherwise RunConflictError

3. Short-lived sessions:
   - Each operation opens and commits its own session, so a pipeline run
     never holds a transaction open across slow LLM or storage calls

Error Handling:
- NotFoundError when the addressed record does not exist
- RunConflictError when a conditional write lost the record to another run
- Database errors propagate unchanged
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel
from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from focusflow_processing.exceptions import NotFoundError, RunConflictError
from focusflow_processing.models.content import ContentOutput
from focusflow_processing.schemas.content import ContentRecord

_KEY_FIELDS = ("content_id", "user_id")


def _to_column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return value.model_dump()
    return value


def _record_to_columns(record: ContentRecord) -> dict[str, Any]:
    return {name: _to_column_value(getattr(record, name)) for name in ContentRecord.model_fields}


class ContentStore(ABC):
    """Interface of the metadata store used by the pipeline."""

    @abstractmethod
    async def get(self, content_id: str, user_id: str) -> ContentRecord | None:
        """Point read; None when the record does not exist."""
        pass

    @abstractmethod
    async def create(self, record: ContentRecord) -> ContentRecord:
        """Insert a new record."""
        pass

    @abstractmethod
    async def replace(self, record: ContentRecord, run_id: str | None = None) -> ContentRecord:
        """Overwrite every field of an existing record."""
        pass

    @abstractmethod
    async def patch(
        self,
        content_id: str,
        user_id: str,
        fields: dict[str, Any],
        run_id: str | None = None,
    ) -> None:
        """Set the given fields, leaving all others untouched."""
        pass

    @abstractmethod
    async def claim_run(
        self,
        content_id: str,
        user_id: str,
        run_id: str,
        lease_seconds: int,
    ) -> bool:
        """Try to become the only active run for a record.

        Returns:
            True if claimed, False if another live run holds the record

        Raises:
            NotFoundError: If the record does not exist
        """
        pass


class SqlContentStore(ContentStore):
    """ContentStore backed by the content_outputs table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def _key_clause(content_id: str, user_id: str) -> tuple[Any, ...]:
        return (ContentOutput.content_id == content_id, ContentOutput.user_id == user_id)

    async def get(self, content_id: str, user_id: str) -> ContentRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ContentOutput).where(*self._key_clause(content_id, user_id))
            )
            row = result.scalar_one_or_none()
            return ContentRecord.model_validate(row) if row is not None else None

    async def create(self, record: ContentRecord) -> ContentRecord:
        async with self._session_factory() as session:
            session.add(ContentOutput(**_record_to_columns(record)))
            await session.commit()
        return record

    async def replace(self, record: ContentRecord, run_id: str | None = None) -> ContentRecord:
        values = {
            name: value
            for name, value in _record_to_columns(record).items()
            if name not in _KEY_FIELDS
        }
        await self._conditional_update(record.content_id, record.user_id, values, run_id)
        return record

    async def patch(
        self,
        content_id: str,
        user_id: str,
        fields: dict[str, Any],
        run_id: str | None = None,
    ) -> None:
        invalid = (set(fields) - set(ContentRecord.model_fields)) | (set(fields) & set(_KEY_FIELDS))
        if invalid:
            raise ValueError(f"Cannot patch fields: {sorted(invalid)}")

        values = {name: _to_column_value(value) for name, value in fields.items()}
        await self._conditional_update(content_id, user_id, values, run_id)

    async def claim_run(
        self,
        content_id: str,
        user_id: str,
        run_id: str,
        lease_seconds: int,
    ) -> bool:
        now = datetime.now(UTC)
        cutoff = now - timedelta(seconds=lease_seconds)
        stmt = (
            update(ContentOutput)
            .where(
                *self._key_clause(content_id, user_id),
                or_(
                    ContentOutput.active_run_id.is_(None),
                    ContentOutput.run_started_at.is_(None),
                    ContentOutput.run_started_at < cutoff,
                ),
            )
            .values(active_run_id=run_id, run_started_at=now)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()

        if result.rowcount == 1:
            return True
        if not await self._exists(content_id, user_id):
            raise NotFoundError(f"Content {content_id} not found")
        return False

    async def _conditional_update(
        self,
        content_id: str,
        user_id: str,
        values: dict[str, Any],
        run_id: str | None,
    ) -> None:
        conditions = list(self._key_clause(content_id, user_id))
        if run_id is not None:
            conditions.append(ContentOutput.active_run_id == run_id)

        async with self._session_factory() as session:
            result = await session.execute(update(ContentOutput).where(*conditions).values(**values))
            await session.commit()

        if result.rowcount == 1:
            return
        if not await self._exists(content_id, user_id):
            raise NotFoundError(f"Content {content_id} not found")
        raise RunConflictError(f"Run {run_id} no longer owns content {content_id}")

    async def _exists(self, content_id: str, user_id: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ContentOutput.content_id).where(*self._key_clause(content_id, user_id))
            )
            return result.scalar_one_or_none() is not None
