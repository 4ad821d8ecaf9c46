"""Processing entry points: schedule pipeline runs per input kind.

Design Decisions:

1. Explicit wiring:
   - build_processing_service() constructs every pipeline component from
     settings plus the clients created in the application lifespan
   - Tests construct ProcessingService directly with fakes

2. Fire and return:
   - trigger_processing_*() schedules the run on the RunRegistry and returns
     its RunProgress immediately; the outcome is observed on the content
     record or through the registry
"""

from pathlib import Path

import httpx
from openai import AsyncOpenAI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from focusflow_processing.config import Settings
from focusflow_processing.extraction import (
    BaseExtractor,
    LinkExtractor,
    PDFExtractor,
    TextExtractor,
    VideoExtractor,
)
from focusflow_processing.llm import LLMProvider
from focusflow_processing.logging_config import get_logger
from focusflow_processing.processing import (
    PIPELINE_CLASSES,
    ArtifactPublisher,
    BionicTransformer,
    ContentPipeline,
    ContentResolver,
    Summarizer,
    VideoPipeline,
)
from focusflow_processing.schemas.content import ContentRecord, InputType
from focusflow_processing.storage import BlobStore
from focusflow_processing.tasks.registry import RunHandle, RunProgress, RunRegistry

from .content_store import ContentStore, SqlContentStore
from .preferences_store import PreferencesStore, SqlPreferencesStore

logger = get_logger(__name__)


class ProcessingService:
    """Schedules content pipeline runs on a RunRegistry."""

    def __init__(
        self,
        pipelines: dict[InputType, ContentPipeline],
        registry: RunRegistry,
        content_store: ContentStore,
    ) -> None:
        self._pipelines = pipelines
        self.registry = registry
        self.content_store = content_store

    def pipeline_for(self, input_type: InputType) -> ContentPipeline:
        """Return the pipeline for an input kind.

        Raises:
            ValueError: If no pipeline is configured for the kind
        """
        try:
            return self._pipelines[input_type]
        except KeyError:
            raise ValueError(f"No pipeline configured for input type {input_type.value}") from None

    def trigger_processing(
        self,
        input_type: InputType,
        content_id: str,
        user_id: str,
        output_style: str | None = None,
        record: ContentRecord | None = None,
    ) -> RunProgress:
        """Schedule a run and return as soon as it is queued.

        Must be called from inside a running event loop.
        """
        pipeline = self.pipeline_for(input_type)

        async def run(handle: RunHandle):
            return await pipeline.run(
                content_id,
                user_id,
                output_style=output_style,
                record=record,
                handle=handle,
            )

        progress = self.registry.submit(input_type.value, content_id, run)
        logger.info(
            "processing_triggered",
            content_id=content_id,
            user_id=user_id,
            input_type=input_type.value,
            run_id=progress.run_id,
        )
        return progress

    def trigger_processing_pdf(
        self,
        content_id: str,
        user_id: str,
        output_style: str | None = None,
        record: ContentRecord | None = None,
    ) -> RunProgress:
        return self.trigger_processing(InputType.PDF, content_id, user_id, output_style, record)

    def trigger_processing_text(
        self,
        content_id: str,
        user_id: str,
        output_style: str | None = None,
        record: ContentRecord | None = None,
    ) -> RunProgress:
        return self.trigger_processing(InputType.TEXT, content_id, user_id, output_style, record)

    def trigger_processing_link(
        self,
        content_id: str,
        user_id: str,
        output_style: str | None = None,
        record: ContentRecord | None = None,
    ) -> RunProgress:
        return self.trigger_processing(InputType.LINK, content_id, user_id, output_style, record)

    def trigger_processing_video(
        self,
        content_id: str,
        user_id: str,
        output_style: str | None = None,
        record: ContentRecord | None = None,
    ) -> RunProgress:
        return self.trigger_processing(InputType.VIDEO, content_id, user_id, output_style, record)


def build_processing_service(
    config: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    blob_store: BlobStore | None,
    llm_provider: LLMProvider | None,
    registry: RunRegistry,
    transcription_client: AsyncOpenAI | None = None,
    http_client: httpx.AsyncClient | None = None,
    video_temp_dir: str | Path | None = None,
) -> ProcessingService:
    """Wire a ProcessingService from settings and shared clients.

    A missing blob store or LLM provider does not prevent construction; runs
    that need them fail with a configuration message on the record.
    """
    content_store = SqlContentStore(session_factory)
    preferences_store: PreferencesStore = SqlPreferencesStore(session_factory)
    resolver = ContentResolver(blob_store, config.storage_url_prefix_list)
    summarizer = Summarizer(
        llm_provider,
        chunk_size=config.summary_chunk_size,
        single_pass_max_chars=config.summary_single_pass_max_chars,
        temperature=config.llm_temperature,
        max_tokens=config.llm_max_tokens,
    )
    transformer = BionicTransformer(
        llm_provider,
        emphasis_ratio=config.bionic_emphasis_ratio,
        temperature=config.llm_temperature,
        max_tokens=config.llm_max_tokens,
    )
    publisher = ArtifactPublisher(blob_store, config.processed_container)

    extractors: dict[InputType, BaseExtractor] = {
        InputType.PDF: PDFExtractor(min_size_bytes=config.pdf_min_size_bytes),
        InputType.TEXT: TextExtractor(),
        InputType.LINK: LinkExtractor(
            timeout_seconds=config.link_fetch_timeout_seconds,
            user_agent=config.link_user_agent,
            min_content_length=config.link_min_content_length,
            client=http_client,
        ),
        InputType.VIDEO: VideoExtractor(
            transcription_client, model=config.transcription_model, temp_dir=video_temp_dir
        ),
    }

    pipelines: dict[InputType, ContentPipeline] = {}
    for input_type, pipeline_cls in PIPELINE_CLASSES.items():
        kwargs = {"temp_dir": video_temp_dir} if pipeline_cls is VideoPipeline else {}
        pipelines[input_type] = pipeline_cls(
            content_store,
            preferences_store,
            resolver,
            extractors[input_type],
            summarizer,
            transformer,
            publisher,
            run_lease_seconds=config.run_lease_seconds,
            **kwargs,
        )

    return ProcessingService(pipelines, registry, content_store)
