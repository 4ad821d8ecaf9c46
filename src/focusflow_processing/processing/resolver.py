"""Resolve a content record's raw storage reference to its payload.

A ``raw_storage_ref`` is one of:

- an object-storage reference (prefix owned by the blob store or listed in
  STORAGE_URL_PREFIXES): the object is downloaded
- a bare http(s) URL: the URL itself is the payload (link inputs fetch it);
  other input kinds reject it, since their payload must be stored or inline
- anything else: inline raw text, returned as UTF-8 bytes
"""

from collections.abc import Sequence
from enum import Enum
from pathlib import Path

from focusflow_processing.exceptions import ResolutionError
from focusflow_processing.logging_config import get_logger
from focusflow_processing.schemas.content import InputType
from focusflow_processing.storage import BlobNotFoundError, BlobStore, StorageError

logger = get_logger(__name__)


class ReferenceKind(str, Enum):
    """How a raw storage reference is interpreted."""

    STORAGE = "storage"
    URL = "url"
    INLINE = "inline"


class ContentResolver:
    """Turns raw storage references into bytes or local files."""

    def __init__(
        self,
        blob_store: BlobStore | None,
        extra_storage_prefixes: Sequence[str] = (),
    ) -> None:
        self._blob_store = blob_store
        prefixes = list(extra_storage_prefixes)
        if blob_store is not None:
            prefixes.extend(blob_store.url_prefixes)
        self.storage_prefixes: tuple[str, ...] = tuple(prefixes)

    def classify(self, raw_storage_ref: str) -> ReferenceKind:
        ref = raw_storage_ref.strip()
        if any(ref.startswith(prefix) for prefix in self.storage_prefixes):
            return ReferenceKind.STORAGE
        if ref.lower().startswith(("http://", "https://")) and not any(c.isspace() for c in ref):
            return ReferenceKind.URL
        return ReferenceKind.INLINE

    async def resolve(self, raw_storage_ref: str, input_type: InputType | None = None) -> bytes:
        """Resolve a reference to an in-memory payload.

        When ``input_type`` is given, a bare URL is only accepted for links.

        Raises:
            ResolutionError: If a storage reference cannot be downloaded, or a
                bare URL is given for a non-link input kind
        """
        kind = self.classify(raw_storage_ref)
        self._check_kind(kind, input_type, raw_storage_ref)
        if kind is ReferenceKind.STORAGE:
            store = self._require_store(raw_storage_ref)
            try:
                data = await store.download(raw_storage_ref.strip())
            except BlobNotFoundError as e:
                raise ResolutionError(f"Referenced content does not exist: {e}") from e
            except StorageError as e:
                raise ResolutionError(f"Content download failed: {e}") from e
            logger.debug("reference_resolved", kind=kind.value, size=len(data))
            return data

        if kind is ReferenceKind.URL:
            return raw_storage_ref.strip().encode("utf-8")
        return raw_storage_ref.encode("utf-8")

    async def resolve_to_file(
        self,
        raw_storage_ref: str,
        destination: Path,
        input_type: InputType | None = None,
    ) -> Path:
        """Resolve a reference into a local file, streaming storage objects.

        Raises:
            ResolutionError: If a storage reference cannot be downloaded
        """
        if self.classify(raw_storage_ref) is not ReferenceKind.STORAGE:
            destination.write_bytes(await self.resolve(raw_storage_ref, input_type))
            return destination

        store = self._require_store(raw_storage_ref)
        try:
            return await store.download_to_file(raw_storage_ref.strip(), destination)
        except BlobNotFoundError as e:
            raise ResolutionError(f"Referenced content does not exist: {e}") from e
        except StorageError as e:
            raise ResolutionError(f"Content download failed: {e}") from e

    @staticmethod
    def _check_kind(
        kind: ReferenceKind, input_type: InputType | None, raw_storage_ref: str
    ) -> None:
        if kind is ReferenceKind.URL and input_type not in (None, InputType.LINK):
            raise ResolutionError(
                f"Web URL references are only supported for link content, not {input_type.value}: "
                f"{raw_storage_ref.strip()[:200]}"
            )

    def _require_store(self, raw_storage_ref: str) -> BlobStore:
        if self._blob_store is None:
            raise ResolutionError(
                "Blob storage client is not initialized; check storage configuration"
            )
        if not self._blob_store.owns(raw_storage_ref):
            raise ResolutionError(
                f"Configured blob store cannot read reference: {raw_storage_ref.strip()[:200]}"
            )
        return self._blob_store
