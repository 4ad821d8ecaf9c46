"""Content processing endpoints.

Design Decisions:

1. Endpoint Structure:
   - POST /api/v1/content/{content_id}/process - schedule a run (202)
   - GET /api/v1/content/{content_id}/status - poll the record's status
   - GET /api/v1/runs/{run_id} - poll one run's progress

2. Caller identity:
   - The owning user arrives in the X-User-Id header; authentication happens
     upstream of this service

3. Error Handling:
   - 404 when the content record (or run) does not exist
   - Pipeline failures never surface as HTTP errors; they land on the
     record as status=FAILED with an error_message
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from focusflow_processing.exceptions import NotFoundError
from focusflow_processing.schemas.content import ContentRecord, ContentStatusResponse
from focusflow_processing.schemas.processing import ProcessRequest
from focusflow_processing.services.processing_service import ProcessingService
from focusflow_processing.tasks.registry import RunProgress, RunRegistry

router = APIRouter(prefix="/api/v1", tags=["processing"])

UserId = Annotated[str, Header(alias="X-User-Id", min_length=1)]


def get_processing_service(request: Request) -> ProcessingService:
    """FastAPI dependency returning the service built in the lifespan."""
    return request.app.state.processing_service


def get_registry(request: Request) -> RunRegistry:
    return request.app.state.registry


async def _load_record(service: ProcessingService, content_id: str, user_id: str) -> ContentRecord:
    record = await service.content_store.get(content_id, user_id)
    if record is None:
        raise NotFoundError(f"Content {content_id} not found")
    return record


@router.post(
    "/content/{content_id}/process",
    response_model=RunProgress,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Trigger processing of a content record",
)
async def trigger_processing(
    content_id: str,
    user_id: UserId,
    body: ProcessRequest | None = None,
    service: ProcessingService = Depends(get_processing_service),
) -> RunProgress:
    """Schedule the pipeline matching the record's input type.

    Returns as soon as the run is scheduled. A run triggered while another
    one holds the record is skipped by the pipeline without changing it.
    """
    try:
        record = await _load_record(service, content_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    output_style = body.output_style if body is not None else None
    return service.trigger_processing(
        record.input_type,
        content_id,
        user_id,
        output_style=output_style,
        record=record,
    )


@router.get(
    "/content/{content_id}/status",
    response_model=ContentStatusResponse,
    summary="Get processing status of a content record",
)
async def get_content_status(
    content_id: str,
    user_id: UserId,
    service: ProcessingService = Depends(get_processing_service),
) -> ContentStatusResponse:
    try:
        record = await _load_record(service, content_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return ContentStatusResponse.from_record(record)


@router.get(
    "/runs/{run_id}",
    response_model=RunProgress,
    summary="Get progress of a pipeline run",
)
async def get_run(
    run_id: str,
    registry: RunRegistry = Depends(get_registry),
) -> RunProgress:
    progress = registry.get_run(run_id)
    if progress is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Run {run_id} not found")
    return progress
