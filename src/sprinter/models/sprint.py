"""Pydantic models for sprints."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from sprinter.models.enums import SprintStatus


class SprintCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=200)
    goal: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class SprintUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=200)
    goal: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class SprintComplete(BaseModel):
    """Where unfinished items go; None sends them to the backlog."""

    model_config = ConfigDict(extra="forbid")

    target_sprint_id: str | None = None


class SprintResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sprint_id: str
    project_id: str
    name: str
    goal: str | None
    status: SprintStatus
    start_date: date | None
    end_date: date | None
    completed_at: datetime | None
