"""Pydantic models for projects and memberships."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from sprinter.models.enums import ProjectRole, ProjectStatus


# ── Request models ─────────────────────────────────────────────────────────────

class ProjectCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    key: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class ProjectUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    status: ProjectStatus | None = None
    start_date: date | None = None
    end_date: date | None = None


class MemberAdd(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: str
    role: ProjectRole = ProjectRole.TEAM_MEMBER


class MemberRoleUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: ProjectRole


# ── Response models ────────────────────────────────────────────────────────────

class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    project_id: str
    project_key: str
    name: str
    description: str | None
    status: ProjectStatus
    parent_id: str | None
    owner_id: str
    start_date: date | None
    end_date: date | None
    created_at: datetime


class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    member_id: str
    project_id: str
    user_id: str
    project_role: ProjectRole


class EffectiveRoleResponse(BaseModel):
    project_id: str
    user_id: str
    role: ProjectRole | None
