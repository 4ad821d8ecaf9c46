"""Filesystem blob storage for development and tests.

References look like ``local://{container}/{name}`` and map to
``{base_path}/{container}/{name}``.
"""

import asyncio
import shutil
from pathlib import Path

from .base import BlobStore, StoredObject
from .exceptions import BlobNotFoundError, StorageError

SCHEME = "local://"


class LocalBlobStore(BlobStore):
    """Store blobs as files under a base directory."""

    def __init__(self, base_path: str | Path) -> None:
        self.base_path = Path(base_path).resolve()

    @property
    def url_prefixes(self) -> tuple[str, ...]:
        return (SCHEME,)

    def _path_for(self, ref: str) -> Path:
        ref = ref.strip()
        if not ref.startswith(SCHEME):
            raise StorageError(f"Not a local storage reference: {ref}")

        container, _, name = ref[len(SCHEME) :].partition("/")
        if not container or not name:
            raise StorageError(f"Reference is missing container or name: {ref}")

        path = (self.base_path / container / name).resolve()
        if not path.is_relative_to(self.base_path):
            raise StorageError(f"Reference escapes storage root: {ref}")
        return path

    async def download(self, ref: str) -> bytes:
        path = self._path_for(ref)
        if not path.is_file():
            raise BlobNotFoundError(f"Blob not found: {ref}")
        return await asyncio.to_thread(path.read_bytes)

    async def download_to_file(self, ref: str, destination: Path) -> Path:
        path = self._path_for(ref)
        if not path.is_file():
            raise BlobNotFoundError(f"Blob not found: {ref}")
        await asyncio.to_thread(shutil.copyfile, path, destination)
        return destination

    async def upload(
        self,
        container: str,
        name: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> StoredObject:
        ref = f"{SCHEME}{container}/{name}"
        path = self._path_for(ref)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as e:
            raise StorageError(f"Local upload failed for {ref}: {e}") from e

        return StoredObject(url=ref, container=container, name=name, size_bytes=len(data))
