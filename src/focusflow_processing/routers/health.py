"""Health check endpoints."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from focusflow_processing.config import settings
from focusflow_processing.database import get_db
from focusflow_processing.logging_config import get_logger
from focusflow_processing.schemas.health import HealthResponse

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    description=(
        "Returns service health status including database connectivity and "
        "the number of active pipeline runs. No authentication required."
    ),
)
async def health_check(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> HealthResponse:
    """Health check endpoint.

    Always answers 200; an unreachable database is reported as "degraded"
    so monitors can tell a dead service from a partially working one.
    """
    database_status = "disconnected"
    try:
        await db.execute(text("SELECT 1"))
        database_status = "connected"
    except Exception as e:
        logger.warning("health_database_check_failed", error=str(e))

    registry = getattr(request.app.state, "registry", None)
    return HealthResponse(
        status="ok" if database_status == "connected" else "degraded",
        version=settings.app_version,
        database=database_status,
        active_runs=registry.active_count if registry is not None else 0,
    )
