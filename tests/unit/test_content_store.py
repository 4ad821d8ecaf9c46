"""Unit tests for the SQL content and preferences stores (aiosqlite)."""

from datetime import UTC, datetime, timedelta

import pytest

from focusflow_processing.exceptions import NotFoundError, RunConflictError
from focusflow_processing.schemas.content import (
    ContentStatus,
    InputType,
    OutputFormat,
    UsedPreferences,
)
from focusflow_processing.schemas.preferences import UserPreferences


class TestContentStoreReads:
    """Tests for create() and get()."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, content_store, make_record) -> None:
        await make_record(content_id="c1", user_id="u1", input_type=InputType.PDF, raw_storage_ref="s3://raw/a.pdf")

        record = await content_store.get("c1", "u1")

        assert record is not None
        assert record.input_type is InputType.PDF
        assert record.status is ContentStatus.UPLOADED
        assert record.raw_storage_ref == "s3://raw/a.pdf"

    @pytest.mark.asyncio
    async def test_get_is_scoped_by_user(self, content_store, make_record) -> None:
        await make_record(content_id="c1", user_id="u1")

        assert await content_store.get("c1", "someone-else") is None


class TestContentStoreWrites:
    """Tests for replace() and patch()."""

    @pytest.mark.asyncio
    async def test_replace_overwrites_fields(self, content_store, make_record) -> None:
        record = await make_record(content_id="c1", user_id="u1")
        now = datetime.now(UTC)
        updated = record.model_copy(
            update={
                "status": ContentStatus.READY,
                "output_format": OutputFormat.BIONIC_TEXT,
                "processed_storage_ref": "local://content-processed/c1-bionic.json",
                "processed_at": now,
                "used_preferences": UsedPreferences(adhd_level="high"),
            }
        )

        await content_store.replace(updated)
        stored = await content_store.get("c1", "u1")

        assert stored.status is ContentStatus.READY
        assert stored.output_format is OutputFormat.BIONIC_TEXT
        assert stored.used_preferences == UsedPreferences(adhd_level="high")
        assert stored.processed_at is not None

    @pytest.mark.asyncio
    async def test_patch_leaves_other_fields(self, content_store, make_record) -> None:
        await make_record(content_id="c1", user_id="u1", raw_storage_ref="keep me")

        await content_store.patch("c1", "u1", {"status": ContentStatus.FAILED, "error_message": "boom"})
        stored = await content_store.get("c1", "u1")

        assert stored.status is ContentStatus.FAILED
        assert stored.error_message == "boom"
        assert stored.raw_storage_ref == "keep me"

    @pytest.mark.asyncio
    async def test_patch_missing_record_raises(self, content_store) -> None:
        with pytest.raises(NotFoundError):
            await content_store.patch("nope", "u1", {"error_message": "x"})

    @pytest.mark.asyncio
    async def test_patch_rejects_unknown_and_key_fields(self, content_store, make_record) -> None:
        await make_record(content_id="c1", user_id="u1")

        with pytest.raises(ValueError, match="Cannot patch"):
            await content_store.patch("c1", "u1", {"colour": "blue"})
        with pytest.raises(ValueError, match="Cannot patch"):
            await content_store.patch("c1", "u1", {"user_id": "u2"})


class TestRunClaims:
    """Tests for the run token guard."""

    @pytest.mark.asyncio
    async def test_second_claim_is_refused(self, content_store, make_record) -> None:
        await make_record(content_id="c1", user_id="u1")

        assert await content_store.claim_run("c1", "u1", "run-a", 900) is True
        assert await content_store.claim_run("c1", "u1", "run-b", 900) is False

        stored = await content_store.get("c1", "u1")
        assert stored.active_run_id == "run-a"

    @pytest.mark.asyncio
    async def test_expired_lease_can_be_taken_over(self, content_store, make_record) -> None:
        await make_record(content_id="c1", user_id="u1")
        await content_store.claim_run("c1", "u1", "run-a", 900)
        await content_store.patch(
            "c1", "u1", {"run_started_at": datetime.now(UTC) - timedelta(hours=1)}
        )

        assert await content_store.claim_run("c1", "u1", "run-b", 900) is True
        assert (await content_store.get("c1", "u1")).active_run_id == "run-b"

    @pytest.mark.asyncio
    async def test_claim_missing_record_raises(self, content_store) -> None:
        with pytest.raises(NotFoundError):
            await content_store.claim_run("nope", "u1", "run-a", 900)

    @pytest.mark.asyncio
    async def test_write_with_stale_run_id_conflicts(self, content_store, make_record) -> None:
        await make_record(content_id="c1", user_id="u1")
        await content_store.claim_run("c1", "u1", "run-a", 900)

        with pytest.raises(RunConflictError):
            await content_store.patch("c1", "u1", {"error_message": "late"}, run_id="run-b")

        await content_store.patch("c1", "u1", {"error_message": "on time"}, run_id="run-a")
        assert (await content_store.get("c1", "u1")).error_message == "on time"

    @pytest.mark.asyncio
    async def test_released_record_can_be_claimed_again(self, content_store, make_record) -> None:
        await make_record(content_id="c1", user_id="u1")
        await content_store.claim_run("c1", "u1", "run-a", 900)
        await content_store.patch(
            "c1", "u1", {"active_run_id": None, "run_started_at": None}, run_id="run-a"
        )

        assert await content_store.claim_run("c1", "u1", "run-b", 900) is True


class TestPreferencesStore:
    """Tests for SqlPreferencesStore."""

    @pytest.mark.asyncio
    async def test_missing_user_returns_none(self, preferences_store) -> None:
        assert await preferences_store.get("unknown") is None

    @pytest.mark.asyncio
    async def test_save_and_update(self, preferences_store) -> None:
        await preferences_store.save(UserPreferences(user_id="u1", adhd_level="low"))
        await preferences_store.save(
            UserPreferences(user_id="u1", adhd_level="high", detail_level="brief")
        )

        prefs = await preferences_store.get("u1")

        assert prefs.adhd_level == "high"
        assert prefs.detail_level == "brief"
        assert prefs.preferred_output is None
        assert prefs.schema_version == 1
        assert prefs.snapshot() == UsedPreferences(detail_level="brief", adhd_level="high")
