"""
Pydantic models for the Project entity.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator


class ProjectModel(BaseModel):
    """
    Immutable snapshot of a stored project.

    The registry never mutates a snapshot in place; transitions produce a new
    copy via ``model_copy(update=...)`` which is then written back.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    title: str
    description: str
    logo_url: str
    is_active: bool
    is_suspended: bool = False
    interest_count: int = Field(default=0, ge=0)
    interest_emails: tuple[str, ...] = ()
    created_at: datetime
    updated_at: datetime | None = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        # SQLite hands back naive datetimes for timezone-aware columns
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _interest_ledger_consistent(self) -> "ProjectModel":
        if len(self.interest_emails) != self.interest_count:
            raise ValueError(
                f"interest_count={self.interest_count} does not match "
                f"{len(self.interest_emails)} recorded emails"
            )
        return self


class ProjectPayload(BaseModel):
    """Mutable fields accepted by create and update."""

    title: str
    description: str
    logo_url: str
    is_active: StrictBool

    @field_validator("title", "description", "logo_url")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class ProjectListResponse(BaseModel):
    projects: list[ProjectModel]
    total_count: int
