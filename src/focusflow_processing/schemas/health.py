"""Health check response schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response.

    ``status`` is "degraded" when the metadata store is unreachable; the
    service still answers so monitors can tell "dead" from "degraded".
    """

    status: Literal["ok", "degraded", "error"] = Field(
        ...,
        description="Service health status",
        examples=["ok"],
    )
    version: str = Field(
        ...,
        description="API version",
        examples=["0.1.0"],
    )
    database: Literal["connected", "disconnected"] = Field(
        ...,
        description="Database connection status",
        examples=["connected"],
    )
    active_runs: int = Field(
        default=0,
        description="Pipeline runs currently scheduled or executing",
        ge=0,
    )
