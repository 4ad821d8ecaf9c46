"""S3-compatible blob storage using aioboto3.

References are path-style URLs:

    {endpoint}/{bucket}/{url-quoted key}

e.g. ``https://s3.eu-west-1.amazonaws.com/content-raw/user-1/report.pdf``.
The first path segment is the bucket (container), the rest is the key.
``s3://bucket/key`` references are accepted as well. Path-style addressing
keeps the same URL shape for AWS, MinIO and LocalStack endpoints.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote, unquote, urlparse

import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from focusflow_processing.logging_config import get_logger

from .base import DOWNLOAD_CHUNK_SIZE, BlobStore, StoredObject
from .exceptions import BlobNotFoundError, StorageConfigurationError, StorageError

logger = get_logger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchBucket", "NotFound", "404"}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3BlobStore(BlobStore):
    """Async S3 operations for raw uploads and processed artifacts.

    One instance is created at process start and shared by all runs; each
    operation opens a short-lived client from the shared aioboto3 session.
    """

    def __init__(
        self,
        region: str,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
    ) -> None:
        if not region:
            raise StorageConfigurationError("S3 region is not configured")
        if bool(access_key_id) != bool(secret_access_key):
            raise StorageConfigurationError(
                "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set together"
            )

        self.region = region
        self.endpoint_url = endpoint_url
        self.base_url = (endpoint_url or f"https://s3.{region}.amazonaws.com").rstrip("/")
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._session = aioboto3.Session()
        self._known_buckets: set[str] = set()

    # ------------------------------------------------------------------
    # Reference helpers
    # ------------------------------------------------------------------

    @property
    def url_prefixes(self) -> tuple[str, ...]:
        return (f"{self.base_url}/", "s3://")

    def object_url(self, bucket: str, key: str) -> str:
        return f"{self.base_url}/{bucket}/{quote(key)}"

    def parse_ref(self, ref: str) -> tuple[str, str]:
        """Split a reference into (bucket, key).

        The key is URL-decoded exactly once.

        Raises:
            StorageError: If the reference does not belong to this store
        """
        ref = ref.strip()
        if ref.startswith("s3://"):
            parsed = urlparse(ref)
            bucket, key = parsed.netloc, parsed.path.lstrip("/")
        elif ref.startswith(f"{self.base_url}/"):
            path = urlparse(ref).path
            base_path = urlparse(self.base_url).path.rstrip("/")
            bucket, _, key = path[len(base_path) :].lstrip("/").partition("/")
        else:
            raise StorageError(f"Not an S3 reference for {self.base_url}: {ref}")

        if not bucket or not key:
            raise StorageError(f"Reference is missing bucket or key: {ref}")
        return bucket, unquote(key)

    def _client(self):
        """Return a scoped async S3 client context manager."""
        return self._session.client(
            "s3",
            region_name=self.region,
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self._access_key_id,
            aws_secret_access_key=self._secret_access_key,
            config=Config(s3={"addressing_style": "path"}),
        )

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    async def download(self, ref: str) -> bytes:
        bucket, key = self.parse_ref(ref)
        try:
            async with self._client() as s3:
                response = await s3.get_object(Bucket=bucket, Key=key)
                data = await response["Body"].read()
        except ClientError as e:
            raise self._translate(e, bucket, key) from e
        except BotoCoreError as e:
            raise StorageError(f"S3 download failed for {bucket}/{key}: {e}") from e

        logger.info("s3_download_ok", bucket=bucket, key=key, size=len(data))
        return data

    async def download_to_file(self, ref: str, destination: Path) -> Path:
        bucket, key = self.parse_ref(ref)
        written = 0
        try:
            async with self._client() as s3:
                response = await s3.get_object(Bucket=bucket, Key=key)
                body = response["Body"]
                with destination.open("wb") as fh:
                    while chunk := await body.read(DOWNLOAD_CHUNK_SIZE):
                        fh.write(chunk)
                        written += len(chunk)
        except ClientError as e:
            raise self._translate(e, bucket, key) from e
        except BotoCoreError as e:
            raise StorageError(f"S3 download failed for {bucket}/{key}: {e}") from e

        logger.info(
            "s3_streamed_download_ok",
            bucket=bucket,
            key=key,
            size=written,
            destination=str(destination),
        )
        return destination

    async def upload(
        self,
        container: str,
        name: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> StoredObject:
        try:
            async with self._client() as s3:
                await self._ensure_bucket(s3, container)
                await s3.put_object(
                    Bucket=container,
                    Key=name,
                    Body=data,
                    ContentType=content_type,
                )
        except ClientError as e:
            raise StorageError(
                f"S3 upload failed for {container}/{name}: {_error_code(e) or e}"
            ) from e
        except BotoCoreError as e:
            raise StorageError(f"S3 upload failed for {container}/{name}: {e}") from e

        logger.info("s3_upload_ok", bucket=container, key=name, size=len(data))
        return StoredObject(
            url=self.object_url(container, name),
            container=container,
            name=name,
            size_bytes=len(data),
        )

    async def _ensure_bucket(self, s3, bucket: str) -> None:
        """Create the bucket on first use if it does not exist."""
        if bucket in self._known_buckets:
            return
        try:
            await s3.head_bucket(Bucket=bucket)
        except ClientError as e:
            if _error_code(e) not in _NOT_FOUND_CODES:
                raise
            params: dict = {"Bucket": bucket}
            if self.region != "us-east-1":
                params["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
            await s3.create_bucket(**params)
            logger.info("s3_bucket_created", bucket=bucket)
        self._known_buckets.add(bucket)

    @staticmethod
    def _translate(error: ClientError, bucket: str, key: str) -> StorageError:
        if _error_code(error) in _NOT_FOUND_CODES:
            return BlobNotFoundError(f"Blob not found: {bucket}/{key}")
        return StorageError(f"S3 request failed for {bucket}/{key}: {_error_code(error) or error}")
