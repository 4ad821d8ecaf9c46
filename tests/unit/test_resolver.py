"""Unit tests for ContentResolver."""

from pathlib import Path

import pytest

from focusflow_processing.exceptions import ResolutionError
from focusflow_processing.processing.resolver import ContentResolver, ReferenceKind
from focusflow_processing.schemas.content import InputType
from focusflow_processing.storage import LocalBlobStore


class TestClassify:
    """Tests for reference classification."""

    def test_store_prefix_is_storage(self, blob_store: LocalBlobStore) -> None:
        resolver = ContentResolver(blob_store)

        assert resolver.classify("local://content-raw/a.pdf") is ReferenceKind.STORAGE

    def test_extra_prefix_is_storage(self) -> None:
        resolver = ContentResolver(None, ["https://files.example.com/"])

        assert resolver.classify("https://files.example.com/raw/a.pdf") is ReferenceKind.STORAGE

    def test_bare_url_is_url(self, blob_store: LocalBlobStore) -> None:
        resolver = ContentResolver(blob_store)

        assert resolver.classify("https://example.com/article") is ReferenceKind.URL

    def test_text_starting_with_url_is_inline(self, blob_store: LocalBlobStore) -> None:
        resolver = ContentResolver(blob_store)

        assert resolver.classify("https://example.com says hello") is ReferenceKind.INLINE

    def test_plain_text_is_inline(self) -> None:
        assert ContentResolver(None).classify("Just some notes.") is ReferenceKind.INLINE


class TestResolve:
    """Tests for resolve() and resolve_to_file()."""

    @pytest.mark.asyncio
    async def test_downloads_storage_ref(self, blob_store: LocalBlobStore) -> None:
        stored = await blob_store.upload("content-raw", "doc.txt", b"payload bytes")

        data = await ContentResolver(blob_store).resolve(stored.url)

        assert data == b"payload bytes"

    @pytest.mark.asyncio
    async def test_inline_text_is_returned_verbatim(self) -> None:
        assert await ContentResolver(None).resolve("  Notes ü  ") == "  Notes ü  ".encode()

    @pytest.mark.asyncio
    async def test_bare_url_is_returned_as_payload(self) -> None:
        data = await ContentResolver(None).resolve(" https://example.com/post ")

        assert data == b"https://example.com/post"

    @pytest.mark.asyncio
    async def test_bare_url_accepted_for_link(self) -> None:
        data = await ContentResolver(None).resolve("https://example.com/post", InputType.LINK)

        assert data == b"https://example.com/post"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("input_type", [InputType.PDF, InputType.TEXT, InputType.VIDEO])
    async def test_bare_url_rejected_for_other_kinds(self, input_type: InputType) -> None:
        with pytest.raises(ResolutionError, match="only supported for link content") as exc_info:
            await ContentResolver(None).resolve("https://example.com/report.pdf", input_type)

        assert input_type.value in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_storage_url_still_accepted_for_pdf(self, blob_store: LocalBlobStore) -> None:
        stored = await blob_store.upload("content-raw", "a.pdf", b"%PDF-bytes")

        assert await ContentResolver(blob_store).resolve(stored.url, InputType.PDF) == b"%PDF-bytes"

    @pytest.mark.asyncio
    async def test_missing_blob_raises(self, blob_store: LocalBlobStore) -> None:
        with pytest.raises(ResolutionError, match="does not exist"):
            await ContentResolver(blob_store).resolve("local://content-raw/missing.pdf")

    @pytest.mark.asyncio
    async def test_storage_ref_without_store_raises(self) -> None:
        resolver = ContentResolver(None, ["https://files.example.com/"])

        with pytest.raises(ResolutionError, match="not initialized"):
            await resolver.resolve("https://files.example.com/raw/a.pdf")

    @pytest.mark.asyncio
    async def test_foreign_storage_prefix_raises(self, blob_store: LocalBlobStore) -> None:
        resolver = ContentResolver(blob_store, ["https://files.example.com/"])

        with pytest.raises(ResolutionError, match="cannot read reference"):
            await resolver.resolve("https://files.example.com/raw/a.pdf")

    @pytest.mark.asyncio
    async def test_resolve_to_file_streams_blob(self, blob_store: LocalBlobStore, tmp_path: Path) -> None:
        stored = await blob_store.upload("content-raw", "clip.mp4", b"\x00video\x01")
        destination = tmp_path / "out.mp4"

        path = await ContentResolver(blob_store).resolve_to_file(stored.url, destination)

        assert path == destination
        assert destination.read_bytes() == b"\x00video\x01"

    @pytest.mark.asyncio
    async def test_resolve_to_file_missing_blob_raises(
        self, blob_store: LocalBlobStore, tmp_path: Path
    ) -> None:
        with pytest.raises(ResolutionError):
            await ContentResolver(blob_store).resolve_to_file(
                "local://content-raw/none.mp4", tmp_path / "out.mp4"
            )

    @pytest.mark.asyncio
    async def test_resolve_to_file_rejects_bare_url_for_video(self, tmp_path: Path) -> None:
        destination = tmp_path / "out.mp4"

        with pytest.raises(ResolutionError, match="only supported for link content"):
            await ContentResolver(None).resolve_to_file(
                "https://example.com/clip.mp4", destination, InputType.VIDEO
            )

        assert not destination.exists()
