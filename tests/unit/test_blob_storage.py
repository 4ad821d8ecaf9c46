"""Unit tests for blob storage backends."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from focusflow_processing.config import Settings
from focusflow_processing.storage import (
    BlobNotFoundError,
    LocalBlobStore,
    S3BlobStore,
    StorageConfigurationError,
    StorageError,
    create_blob_store,
)


def _client_error(code: str, operation: str = "GetObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def _mock_session(s3: MagicMock) -> MagicMock:
    """aioboto3.Session() stand-in whose client() yields ``s3``."""
    client_cm = MagicMock()
    client_cm.__aenter__ = AsyncMock(return_value=s3)
    client_cm.__aexit__ = AsyncMock(return_value=False)
    session = MagicMock()
    session.client.return_value = client_cm
    return session


class TestLocalBlobStore:
    """Tests for LocalBlobStore."""

    @pytest.mark.asyncio
    async def test_upload_then_download(self, blob_store: LocalBlobStore) -> None:
        stored = await blob_store.upload("content-raw", "user-1/doc.pdf", b"%PDF data")

        assert stored.url == "local://content-raw/user-1/doc.pdf"
        assert stored.size_bytes == 9
        assert blob_store.owns(stored.url)
        assert await blob_store.download(stored.url) == b"%PDF data"

    @pytest.mark.asyncio
    async def test_download_missing_raises_not_found(self, blob_store: LocalBlobStore) -> None:
        with pytest.raises(BlobNotFoundError):
            await blob_store.download("local://content-raw/missing.pdf")

    @pytest.mark.asyncio
    async def test_download_to_file(self, blob_store: LocalBlobStore, tmp_path: Path) -> None:
        stored = await blob_store.upload("videos", "clip.mp4", b"video")
        destination = tmp_path / "copy.mp4"

        await blob_store.download_to_file(stored.url, destination)

        assert destination.read_bytes() == b"video"

    @pytest.mark.asyncio
    async def test_path_escape_rejected(self, blob_store: LocalBlobStore) -> None:
        with pytest.raises(StorageError, match="escapes storage root"):
            await blob_store.download("local://content-raw/../../etc/passwd")

    @pytest.mark.asyncio
    async def test_ref_without_name_rejected(self, blob_store: LocalBlobStore) -> None:
        with pytest.raises(StorageError, match="missing container or name"):
            await blob_store.download("local://content-raw")


class TestS3References:
    """Tests for S3 reference parsing and configuration."""

    def test_default_base_url_uses_region(self) -> None:
        store = S3BlobStore(region="eu-west-1")

        assert store.base_url == "https://s3.eu-west-1.amazonaws.com"
        assert store.url_prefixes == ("https://s3.eu-west-1.amazonaws.com/", "s3://")

    def test_parse_path_style_url_decodes_key_once(self) -> None:
        store = S3BlobStore(region="us-east-1", endpoint_url="http://localhost:9000/")

        bucket, key = store.parse_ref("http://localhost:9000/content-raw/user%201/a%2520b.pdf")

        assert bucket == "content-raw"
        assert key == "user 1/a%20b.pdf"

    def test_parse_s3_scheme(self) -> None:
        store = S3BlobStore(region="us-east-1")

        assert store.parse_ref("s3://content-raw/user-1/doc.pdf") == ("content-raw", "user-1/doc.pdf")

    def test_object_url_round_trips(self) -> None:
        store = S3BlobStore(region="us-east-1", endpoint_url="http://localhost:9000")
        url = store.object_url("content-processed", "id 1-bionic.json")

        assert url == "http://localhost:9000/content-processed/id%201-bionic.json"
        assert store.parse_ref(url) == ("content-processed", "id 1-bionic.json")

    def test_foreign_ref_rejected(self) -> None:
        store = S3BlobStore(region="us-east-1")

        with pytest.raises(StorageError):
            store.parse_ref("https://example.com/content-raw/doc.pdf")

    def test_ref_without_key_rejected(self) -> None:
        with pytest.raises(StorageError, match="missing bucket or key"):
            S3BlobStore(region="us-east-1").parse_ref("s3://content-raw/")

    def test_empty_region_rejected(self) -> None:
        with pytest.raises(StorageConfigurationError):
            S3BlobStore(region="")

    def test_partial_credentials_rejected(self) -> None:
        with pytest.raises(StorageConfigurationError, match="set together"):
            S3BlobStore(region="us-east-1", access_key_id="AKIA")


class TestS3Operations:
    """Tests for S3BlobStore with a mocked aioboto3 session."""

    @pytest.mark.asyncio
    async def test_download(self) -> None:
        s3 = MagicMock()
        body = MagicMock()
        body.read = AsyncMock(return_value=b"raw bytes")
        s3.get_object = AsyncMock(return_value={"Body": body})

        with patch("focusflow_processing.storage.s3.aioboto3.Session", return_value=_mock_session(s3)):
            store = S3BlobStore(region="us-east-1")
            data = await store.download("s3://content-raw/user-1/doc.pdf")

        assert data == b"raw bytes"
        s3.get_object.assert_awaited_once_with(Bucket="content-raw", Key="user-1/doc.pdf")

    @pytest.mark.asyncio
    async def test_download_missing_key_raises_not_found(self) -> None:
        s3 = MagicMock()
        s3.get_object = AsyncMock(side_effect=_client_error("NoSuchKey"))

        with patch("focusflow_processing.storage.s3.aioboto3.Session", return_value=_mock_session(s3)):
            store = S3BlobStore(region="us-east-1")
            with pytest.raises(BlobNotFoundError):
                await store.download("s3://content-raw/missing.pdf")

    @pytest.mark.asyncio
    async def test_download_access_denied_raises_storage_error(self) -> None:
        s3 = MagicMock()
        s3.get_object = AsyncMock(side_effect=_client_error("AccessDenied"))

        with patch("focusflow_processing.storage.s3.aioboto3.Session", return_value=_mock_session(s3)):
            store = S3BlobStore(region="us-east-1")
            with pytest.raises(StorageError, match="AccessDenied") as exc_info:
                await store.download("s3://content-raw/secret.pdf")

        assert not isinstance(exc_info.value, BlobNotFoundError)

    @pytest.mark.asyncio
    async def test_download_to_file_streams_chunks(self, tmp_path: Path) -> None:
        s3 = MagicMock()
        body = MagicMock()
        body.read = AsyncMock(side_effect=[b"abc", b"def", b""])
        s3.get_object = AsyncMock(return_value={"Body": body})
        destination = tmp_path / "video.mp4"

        with patch("focusflow_processing.storage.s3.aioboto3.Session", return_value=_mock_session(s3)):
            store = S3BlobStore(region="us-east-1")
            await store.download_to_file("s3://videos/clip.mp4", destination)

        assert destination.read_bytes() == b"abcdef"
        assert body.read.await_count == 3

    @pytest.mark.asyncio
    async def test_operations_log_structured_events(self) -> None:
        s3 = MagicMock()
        body = MagicMock()
        body.read = AsyncMock(return_value=b"raw bytes")
        s3.get_object = AsyncMock(return_value={"Body": body})
        s3.head_bucket = AsyncMock()
        s3.put_object = AsyncMock()

        with (
            patch("focusflow_processing.storage.s3.aioboto3.Session", return_value=_mock_session(s3)),
            patch("focusflow_processing.storage.s3.logger") as mock_logger,
        ):
            store = S3BlobStore(region="us-east-1")
            await store.download("s3://content-raw/user-1/doc.pdf")
            await store.upload("content-processed", "c1-bionic.json", b"{}")

        mock_logger.info.assert_any_call(
            "s3_download_ok", bucket="content-raw", key="user-1/doc.pdf", size=9
        )
        mock_logger.info.assert_any_call(
            "s3_upload_ok", bucket="content-processed", key="c1-bionic.json", size=2
        )

    @pytest.mark.asyncio
    async def test_upload_creates_missing_bucket(self) -> None:
        s3 = MagicMock()
        s3.head_bucket = AsyncMock(side_effect=_client_error("404", "HeadBucket"))
        s3.create_bucket = AsyncMock()
        s3.put_object = AsyncMock()

        with patch("focusflow_processing.storage.s3.aioboto3.Session", return_value=_mock_session(s3)):
            store = S3BlobStore(region="eu-west-1")
            stored = await store.upload(
                "content-processed", "abc-bionic.json", b"{}", content_type="application/json"
            )

        s3.create_bucket.assert_awaited_once_with(
            Bucket="content-processed",
            CreateBucketConfiguration={"LocationConstraint": "eu-west-1"},
        )
        s3.put_object.assert_awaited_once_with(
            Bucket="content-processed",
            Key="abc-bionic.json",
            Body=b"{}",
            ContentType="application/json",
        )
        assert stored.url == "https://s3.eu-west-1.amazonaws.com/content-processed/abc-bionic.json"
        assert stored.size_bytes == 2

    @pytest.mark.asyncio
    async def test_existing_bucket_checked_once(self) -> None:
        s3 = MagicMock()
        s3.head_bucket = AsyncMock()
        s3.create_bucket = AsyncMock()
        s3.put_object = AsyncMock()

        with patch("focusflow_processing.storage.s3.aioboto3.Session", return_value=_mock_session(s3)):
            store = S3BlobStore(region="us-east-1")
            await store.upload("content-processed", "a.json", b"1")
            await store.upload("content-processed", "b.json", b"2")

        s3.head_bucket.assert_awaited_once()
        s3.create_bucket.assert_not_awaited()
        assert s3.put_object.await_count == 2

    @pytest.mark.asyncio
    async def test_upload_failure_raises_storage_error(self) -> None:
        s3 = MagicMock()
        s3.head_bucket = AsyncMock()
        s3.put_object = AsyncMock(side_effect=_client_error("InternalError", "PutObject"))

        with patch("focusflow_processing.storage.s3.aioboto3.Session", return_value=_mock_session(s3)):
            store = S3BlobStore(region="us-east-1")
            with pytest.raises(StorageError, match="InternalError"):
                await store.upload("content-processed", "a.json", b"1")


class TestCreateBlobStore:
    """Tests for the backend factory."""

    def test_local_backend(self, tmp_path: Path) -> None:
        config = Settings(storage_backend="local", local_storage_path=str(tmp_path))

        assert isinstance(create_blob_store(config), LocalBlobStore)

    def test_s3_backend(self) -> None:
        config = Settings(storage_backend="s3", s3_region="us-east-1", s3_endpoint_url="http://minio:9000")

        store = create_blob_store(config)

        assert isinstance(store, S3BlobStore)
        assert store.owns("http://minio:9000/content-raw/doc.pdf")
