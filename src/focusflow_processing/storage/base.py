"""Abstract base class for blob storage backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

DOWNLOAD_CHUNK_SIZE = 1024 * 1024  # 1 MiB per read when streaming to disk


@dataclass(frozen=True)
class StoredObject:
    """Location of an uploaded object.

    Attributes:
        url: Dereferenceable reference, accepted back by download()
        container: Logical container (bucket / directory)
        name: Object name within the container
        size_bytes: Uploaded size
    """

    url: str
    container: str
    name: str
    size_bytes: int


class BlobStore(ABC):
    """Narrow interface the pipeline uses to reach object storage.

    References are plain strings (URLs) so they can be stored on a content
    record and handed back later.
    """

    @property
    @abstractmethod
    def url_prefixes(self) -> tuple[str, ...]:
        """Reference prefixes this store can dereference."""
        pass

    def owns(self, ref: str) -> bool:
        """Check whether a reference points into this store."""
        ref = ref.strip()
        return any(ref.startswith(prefix) for prefix in self.url_prefixes)

    @abstractmethod
    async def download(self, ref: str) -> bytes:
        """Download an object fully into memory.

        Raises:
            BlobNotFoundError: If the object does not exist
            StorageError: On any other backend failure
        """
        pass

    @abstractmethod
    async def download_to_file(self, ref: str, destination: Path) -> Path:
        """Stream an object to a local file without buffering it whole.

        Raises:
            BlobNotFoundError: If the object does not exist
            StorageError: On any other backend failure
        """
        pass

    @abstractmethod
    async def upload(
        self,
        container: str,
        name: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> StoredObject:
        """Upload an object, creating the container if needed.

        Uploading the same name twice overwrites the earlier object.

        Raises:
            StorageError: On backend failure
        """
        pass
