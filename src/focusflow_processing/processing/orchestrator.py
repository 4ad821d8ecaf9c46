"""Per-kind content processing pipelines.

Each pipeline drives one content record through:

    resolve -> extract -> preferences -> summarize -> transform -> publish -> finalize

and leaves it READY (artifact published, record replaced) or FAILED
(``error_message`` set, success-only fields cleared). ``run()`` never raises:
the caller observes the result through the record and the returned
RunOutcome.

Design Decisions:

1. Run token:
   - Before touching the record a run claims ``active_run_id`` through the
     content store; a second run on the same record is skipped while the
     first one holds an unexpired lease
   - Terminal writes are conditional on the claimed token, so a run that
     lost its lease cannot overwrite a newer run's result

2. Best-effort preferences:
   - Preference lookup failures are logged and processing continues with
     default prompts

3. Variants differ only in extraction:
   - PDF, text and link resolve the payload into memory
   - Video streams the payload to a temporary file and transcribes it
"""

import tempfile
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

import structlog

from focusflow_processing.exceptions import (
    NotFoundError,
    PipelineCancelledError,
    PipelineError,
    RunConflictError,
)
from focusflow_processing.extraction import BaseExtractor, VideoExtractor
from focusflow_processing.logging_config import get_logger
from focusflow_processing.schemas.content import (
    SUCCESS_ONLY_FIELDS,
    ContentRecord,
    ContentStatus,
    InputType,
    OutputFormat,
)
from focusflow_processing.schemas.preferences import UserPreferences
from focusflow_processing.services.content_store import ContentStore
from focusflow_processing.services.preferences_store import PreferencesStore
from focusflow_processing.tasks.registry import RunHandle

from .bionic import BionicTransformer
from .publisher import ArtifactPublisher, PublishedArtifact
from .resolver import ContentResolver
from .summarizer import Summarizer

logger = get_logger(__name__)

RUN_SKIPPED_MESSAGE = "Content is already being processed by another run"


@dataclass(frozen=True)
class RunOutcome:
    """Result of one pipeline run.

    Attributes:
        content_id: Processed content id
        run_id: Run token used for the run
        succeeded: True when the record ended READY
        status: Record status written by this run (None if nothing was written)
        error_message: Failure or skip reason
        skipped: True when another run held the record
        processed_storage_ref: Artifact reference on success
    """

    content_id: str
    run_id: str
    succeeded: bool
    status: ContentStatus | None = None
    error_message: str | None = None
    skipped: bool = False
    processed_storage_ref: str | None = None


class ContentPipeline:
    """Orchestrates the processing of one content record.

    Subclasses fix the input kind; the extractor passed in must handle it.
    """

    input_type: InputType
    kind_label: str

    def __init__(
        self,
        content_store: ContentStore,
        preferences_store: PreferencesStore | None,
        resolver: ContentResolver,
        extractor: BaseExtractor,
        summarizer: Summarizer,
        transformer: BionicTransformer,
        publisher: ArtifactPublisher,
        run_lease_seconds: int = 900,
    ) -> None:
        self._content_store = content_store
        self._preferences_store = preferences_store
        self._resolver = resolver
        self._extractor = extractor
        self._summarizer = summarizer
        self._transformer = transformer
        self._publisher = publisher
        self.run_lease_seconds = run_lease_seconds

    async def run(
        self,
        content_id: str,
        user_id: str,
        output_style: str | None = None,
        record: ContentRecord | None = None,
        handle: RunHandle | None = None,
    ) -> RunOutcome:
        """Process one record end to end. Never raises."""
        run_id = handle.run_id if handle is not None else str(uuid4())
        log = logger.bind(
            content_id=content_id,
            user_id=user_id,
            input_type=self.input_type.value,
            run_id=run_id,
        )

        try:
            if record is None:
                record = await self._content_store.get(content_id, user_id)
            if record is None:
                raise NotFoundError(f"Content {content_id} not found")
            claimed = await self._content_store.claim_run(
                content_id, user_id, run_id, self.run_lease_seconds
            )
        except NotFoundError as e:
            log.warning("content_not_found")
            return RunOutcome(content_id=content_id, run_id=run_id, succeeded=False, error_message=str(e))
        except Exception as e:
            log.exception("run_claim_failed")
            return RunOutcome(
                content_id=content_id,
                run_id=run_id,
                succeeded=False,
                error_message=str(e) or self.failure_message,
            )

        if not claimed:
            log.info("run_skipped", reason="active_run")
            return RunOutcome(
                content_id=content_id,
                run_id=run_id,
                succeeded=False,
                status=record.status,
                error_message=RUN_SKIPPED_MESSAGE,
                skipped=True,
            )

        if record.input_type is not self.input_type:
            log.warning("input_type_mismatch", record_input_type=record.input_type.value)

        log.info("processing_started")
        try:
            artifact = await self._process(record, output_style, run_id, handle, log)
        except Exception as e:
            message = str(e) or self.failure_message
            if isinstance(e, PipelineError):
                log.warning("processing_failed", error_type=type(e).__name__, error=message)
            else:
                log.exception("processing_failed_unexpectedly", error=message)
            status = await self._mark_failed(content_id, user_id, run_id, message, log)
            return RunOutcome(
                content_id=content_id,
                run_id=run_id,
                succeeded=False,
                status=status,
                error_message=message,
            )

        log.info("processing_completed", processed_storage_ref=artifact.storage_ref)
        return RunOutcome(
            content_id=content_id,
            run_id=run_id,
            succeeded=True,
            status=ContentStatus.READY,
            processed_storage_ref=artifact.storage_ref,
        )

    @property
    def failure_message(self) -> str:
        return f"{self.kind_label} processing failed"

    async def _process(
        self,
        record: ContentRecord,
        output_style: str | None,
        run_id: str,
        handle: RunHandle | None,
        log: structlog.stdlib.BoundLogger,
    ) -> PublishedArtifact:
        self._step(handle, "resolve")
        text = await self.extract_text(record, handle)
        log.debug("text_extracted", chars=len(text))

        self._step(handle, "preferences")
        preferences = await self._load_preferences(record.user_id, log)

        self._step(handle, "summarize")
        summary = await self._summarizer.summarize(text, preferences, output_style)
        log.debug("summary_ready", chars=len(summary))

        self._step(handle, "transform")
        document = await self._transformer.to_bionic(summary, preferences)

        self._step(handle, "publish")
        artifact = await self._publisher.publish(document, record.content_id)

        self._step(handle, "finalize")
        await self._mark_ready(record, artifact, preferences, run_id)
        return artifact

    async def extract_text(self, record: ContentRecord, handle: RunHandle | None) -> str:
        """Resolve the record's payload and extract its plain text."""
        payload = await self._resolver.resolve(record.raw_storage_ref, self.input_type)
        self._step(handle, "extract")
        return await self._extractor.extract(payload)

    async def _load_preferences(
        self, user_id: str, log: structlog.stdlib.BoundLogger
    ) -> UserPreferences | None:
        if self._preferences_store is None:
            return None
        try:
            return await self._preferences_store.get(user_id)
        except Exception as e:
            log.warning("preferences_lookup_failed", error=str(e))
            return None

    async def _mark_ready(
        self,
        record: ContentRecord,
        artifact: PublishedArtifact,
        preferences: UserPreferences | None,
        run_id: str,
    ) -> None:
        latest = await self._content_store.get(record.content_id, record.user_id)
        if latest is None:
            raise NotFoundError(f"Content {record.content_id} not found")

        updated = latest.model_copy(
            update={
                "status": ContentStatus.READY,
                "output_format": OutputFormat.BIONIC_TEXT,
                "processed_storage_ref": artifact.storage_ref,
                "processed_blob_name": artifact.blob_name,
                "processed_container_name": artifact.container_name,
                "processed_at": datetime.now(UTC),
                "used_preferences": preferences.snapshot() if preferences else None,
                "error_message": None,
                "active_run_id": None,
                "run_started_at": None,
            }
        )
        await self._content_store.replace(updated, run_id=run_id)

    async def _mark_failed(
        self,
        content_id: str,
        user_id: str,
        run_id: str,
        message: str,
        log: structlog.stdlib.BoundLogger,
    ) -> ContentStatus | None:
        fields: dict[str, Any] = {name: None for name in SUCCESS_ONLY_FIELDS}
        fields.update(
            status=ContentStatus.FAILED,
            error_message=message,
            active_run_id=None,
            run_started_at=None,
        )
        try:
            await self._content_store.patch(content_id, user_id, fields, run_id=run_id)
        except RunConflictError:
            log.warning("failure_not_recorded", reason="run_token_lost")
            return None
        except Exception:
            log.exception("failure_not_recorded")
            return None
        return ContentStatus.FAILED

    @staticmethod
    def _step(handle: RunHandle | None, step: str) -> None:
        if handle is None:
            return
        if handle.is_cancelled():
            raise PipelineCancelledError()
        handle.set_step(step)


class PdfPipeline(ContentPipeline):
    input_type = InputType.PDF
    kind_label = "PDF"


class TextPipeline(ContentPipeline):
    input_type = InputType.TEXT
    kind_label = "Text"


class LinkPipeline(ContentPipeline):
    input_type = InputType.LINK
    kind_label = "Link"


class VideoPipeline(ContentPipeline):
    """Streams the video to a temporary file before transcription."""

    input_type = InputType.VIDEO
    kind_label = "Video"

    def __init__(self, *args: Any, temp_dir: str | Path | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        if not isinstance(self._extractor, VideoExtractor):
            raise TypeError("VideoPipeline requires a VideoExtractor")
        self._video_extractor: VideoExtractor = self._extractor
        self.temp_dir = temp_dir

    async def extract_text(self, record: ContentRecord, handle: RunHandle | None) -> str:
        with tempfile.TemporaryDirectory(prefix="video-", dir=self.temp_dir) as workdir:
            path = await self._resolver.resolve_to_file(
                record.raw_storage_ref, Path(workdir) / "payload.mp4", self.input_type
            )
            self._step(handle, "extract")
            return await self._video_extractor.extract_file(path)


PIPELINE_CLASSES: dict[InputType, type[ContentPipeline]] = {
    InputType.PDF: PdfPipeline,
    InputType.TEXT: TextPipeline,
    InputType.LINK: LinkPipeline,
    InputType.VIDEO: VideoPipeline,
}
