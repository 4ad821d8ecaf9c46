"""Processing trigger request schemas."""

from pydantic import BaseModel, Field


class ProcessRequest(BaseModel):
    """Request body for triggering processing of a content record."""

    output_style: str | None = Field(
        default=None,
        max_length=200,
        description="Free-form style hint passed to the summary prompt",
        examples=["bullet points", "plain prose"],
    )
