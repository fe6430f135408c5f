"""Pydantic models for work items, comments and dependencies."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from sprinter.models.enums import DependencyType, Priority, WorkItemStatus, WorkItemType


# ── Request models ─────────────────────────────────────────────────────────────

class WorkItemCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: WorkItemType
    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    assignee_id: str | None = None
    parent_id: str | None = None
    sprint_id: str | None = None
    start_date: date | None = None
    due_date: date | None = None
    story_points: int | None = Field(None, ge=0)
    estimated_hours: float | None = Field(None, ge=0)


class WorkItemUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = None
    priority: Priority | None = None
    assignee_id: str | None = None
    start_date: date | None = None
    due_date: date | None = None
    story_points: int | None = Field(None, ge=0)
    estimated_hours: float | None = Field(None, ge=0)


class StatusChange(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: WorkItemStatus


class ProgressChange(BaseModel):
    model_config = ConfigDict(extra="forbid")

    progress_pct: int


class HoursLog(BaseModel):
    model_config = ConfigDict(extra="forbid")

    hours: float


class CommentBody(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str = Field(min_length=1)


class DependencyCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    predecessor_id: str
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lag_days: int = 0


# ── Response models ────────────────────────────────────────────────────────────

class WorkItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    work_item_id: str
    item_key: str
    project_id: str
    item_number: int
    type: WorkItemType
    title: str
    description: str | None
    status: WorkItemStatus
    priority: Priority
    sprint_id: str | None
    parent_id: str | None
    assignee_id: str | None
    reporter_id: str
    story_points: int | None
    estimated_hours: float | None
    logged_hours: float
    progress_pct: int
    completed_at: datetime | None


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    comment_id: str
    work_item_id: str
    author_id: str
    content: str
    edited: bool
    created_at: datetime


class DependencyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    dependency_id: str
    predecessor_id: str
    successor_id: str
    dependency_type: DependencyType
    lag_days: int
