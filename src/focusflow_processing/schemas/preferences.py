"""User preference schemas."""

from pydantic import BaseModel, ConfigDict, Field

from .content import UsedPreferences

PREFERENCES_SCHEMA_VERSION = 1


class UserPreferences(BaseModel):
    """Per-user reading preferences.

    All fields are optional; a missing field has no influence on prompts.
    ``adhd_level`` is derived by an AI evaluation outside this service.
    """

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    detail_level: str | None = Field(default=None, examples=["brief", "standard", "detailed"])
    preferred_output: str | None = Field(default=None, examples=["bionic", "bullets"])
    adhd_level: str | None = Field(default=None, examples=["low", "moderate", "high"])
    schema_version: int = PREFERENCES_SCHEMA_VERSION

    def snapshot(self) -> UsedPreferences:
        """Fields recorded on the content record after a run."""
        return UsedPreferences(
            detail_level=self.detail_level,
            preferred_output=self.preferred_output,
            adhd_level=self.adhd_level,
        )
