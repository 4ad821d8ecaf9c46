"""Content processing: resolve, summarize, transform, publish.

Usage:
    from focusflow_processing.processing import PdfPipeline

    outcome = await pipeline.run(content_id, user_id)
"""

from .bionic import BionicTransformer
from .chunking import chunk_text
from .orchestrator import (
    PIPELINE_CLASSES,
    ContentPipeline,
    LinkPipeline,
    PdfPipeline,
    RunOutcome,
    TextPipeline,
    VideoPipeline,
)
from .publisher import ArtifactPublisher, PublishedArtifact, artifact_blob_name
from .resolver import ContentResolver, ReferenceKind
from .summarizer import Summarizer

__all__ = [
    # Components
    "ContentResolver",
    "ReferenceKind",
    "Summarizer",
    "BionicTransformer",
    "ArtifactPublisher",
    "PublishedArtifact",
    "artifact_blob_name",
    "chunk_text",
    # Pipelines
    "ContentPipeline",
    "PdfPipeline",
    "TextPipeline",
    "LinkPipeline",
    "VideoPipeline",
    "PIPELINE_CLASSES",
    "RunOutcome",
]
