"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from openai import AsyncOpenAI
from sqlalchemy import text

from .config import settings
from .database import create_engine, create_session_factory, init_models
from .llm import LLMProvider, LLMProviderError
from .llm.providers import get_llm_provider
from .logging_config import configure_logging, get_logger
from .routers import health_router, processing_router
from .services.processing_service import build_processing_service
from .storage import BlobStore, StorageConfigurationError, create_blob_store
from .tasks.registry import RunRegistry

# Configure structured logging at application startup
configure_logging(log_level=settings.log_level, json_logs=settings.json_logs)

# Configure SQLAlchemy logging level (suppress INFO logs like "BEGIN", "COMMIT")
logging.getLogger("sqlalchemy.engine").setLevel(
    getattr(logging, settings.sqlalchemy_log_level.upper())
)
logging.getLogger("sqlalchemy.pool").setLevel(
    getattr(logging, settings.sqlalchemy_log_level.upper())
)

logger = get_logger(__name__)


def _build_blob_store() -> BlobStore | None:
    try:
        return create_blob_store(settings)
    except StorageConfigurationError as e:
        logger.warning("blob_store_unavailable", error=str(e))
        return None


def _build_llm_provider() -> LLMProvider | None:
    try:
        return get_llm_provider(settings)
    except (LLMProviderError, ValueError) as e:
        logger.warning("llm_provider_unavailable", error=str(e))
        return None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager.

    Builds every service client once and stores it on ``app.state``.
    Missing storage or LLM configuration does not stop startup; runs that
    need them end FAILED with a configuration message.
    """
    logger.info("service_starting", app_name=settings.app_name, version=settings.app_version)

    engine = create_engine(settings.database_url, echo=settings.debug)
    session_factory = create_session_factory(engine)

    # Database is optional at startup; /health reports degraded status
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        if settings.auto_create_tables:
            await init_models(engine)
        logger.info("database_connected")
    except Exception as e:
        logger.warning("database_connection_failed", error=str(e))

    transcription_client = (
        AsyncOpenAI(api_key=settings.openai_api_key) if settings.openai_api_key else None
    )
    http_client = httpx.AsyncClient(follow_redirects=True)
    registry = RunRegistry(max_finished_runs=settings.run_history_limit)

    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.registry = registry
    app.state.processing_service = build_processing_service(
        settings,
        session_factory,
        blob_store=_build_blob_store(),
        llm_provider=_build_llm_provider(),
        registry=registry,
        transcription_client=transcription_client,
        http_client=http_client,
    )

    yield

    logger.info("service_stopping", active_runs=registry.active_count)
    await registry.shutdown()
    await http_client.aclose()
    if transcription_client is not None:
        await transcription_client.close()
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Health check router (no prefix)
app.include_router(health_router)

# Processing API
app.include_router(processing_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "FocusFlow Processing Service API"}
