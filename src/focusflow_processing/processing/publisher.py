"""Upload finished Bionic documents to object storage."""

from dataclasses import dataclass

from focusflow_processing.exceptions import PublishError
from focusflow_processing.logging_config import get_logger
from focusflow_processing.schemas.bionic import BionicDocument, serialize_bionic_document
from focusflow_processing.storage import BlobStore, StorageError

logger = get_logger(__name__)

ARTIFACT_CONTENT_TYPE = "application/json"


def artifact_blob_name(content_id: str) -> str:
    return f"{content_id}-bionic.json"


@dataclass(frozen=True)
class PublishedArtifact:
    """Location of an uploaded artifact."""

    storage_ref: str
    blob_name: str
    container_name: str


class ArtifactPublisher:
    """Writes ``{content_id}-bionic.json`` to the processed container.

    Uploads overwrite, so re-publishing the same content id is idempotent.
    """

    def __init__(self, blob_store: BlobStore | None, container: str = "content-processed") -> None:
        self._blob_store = blob_store
        self.container = container

    async def publish(self, document: BionicDocument, content_id: str) -> PublishedArtifact:
        """Serialize and upload a document.

        Raises:
            PublishError: If storage is not configured or the upload fails
        """
        if self._blob_store is None:
            raise PublishError("Blob storage client is not initialized; check storage configuration")

        blob_name = artifact_blob_name(content_id)
        payload = serialize_bionic_document(document)
        try:
            stored = await self._blob_store.upload(
                self.container,
                blob_name,
                payload,
                content_type=ARTIFACT_CONTENT_TYPE,
            )
        except StorageError as e:
            raise PublishError(f"Failed to upload processed content: {e}") from e

        logger.info(
            "artifact_published",
            content_id=content_id,
            container=self.container,
            blob_name=blob_name,
            size=stored.size_bytes,
        )
        return PublishedArtifact(
            storage_ref=stored.url,
            blob_name=blob_name,
            container_name=self.container,
        )
