"""Project, subproject and membership API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.dependencies import get_current_user_id, get_db
from sprinter.models.project import (
    EffectiveRoleResponse,
    MemberAdd,
    MemberResponse,
    MemberRoleUpdate,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
)
from sprinter.services import members, projects
from sprinter.services.access import effective_role, require_access

router = APIRouter(tags=["Projects"])


@router.post("/projects", status_code=201)
async def create_project(
    body: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await projects.create_project(
        db,
        actor_id,
        body.key,
        body.name,
        description=body.description,
        start_date=body.start_date,
        end_date=body.end_date,
    )
    await db.commit()
    return ProjectResponse.model_validate(row).model_dump(mode="json")


@router.get("/projects")
async def list_projects(
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> list[dict]:
    rows = await projects.list_projects_for_user(db, actor_id)
    return [ProjectResponse.model_validate(r).model_dump(mode="json") for r in rows]


@router.get("/projects/{project_id}")
async def get_project(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await projects.get_project(db, project_id)
    await require_access(db, project_id, actor_id)
    return ProjectResponse.model_validate(row).model_dump(mode="json")


@router.patch("/projects/{project_id}")
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await projects.update_project(db, actor_id, project_id, **body.model_dump(exclude_unset=True))
    await db.commit()
    return ProjectResponse.model_validate(row).model_dump(mode="json")


@router.post("/projects/{project_id}/archive")
async def archive_project(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await projects.archive_project(db, actor_id, project_id)
    await db.commit()
    return ProjectResponse.model_validate(row).model_dump(mode="json")


@router.post("/projects/{project_id}/subprojects", status_code=201)
async def create_subproject(
    project_id: str,
    body: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await projects.create_subproject(
        db,
        actor_id,
        project_id,
        body.key,
        body.name,
        description=body.description,
        start_date=body.start_date,
        end_date=body.end_date,
    )
    await db.commit()
    return ProjectResponse.model_validate(row).model_dump(mode="json")


@router.get("/projects/{project_id}/subprojects")
async def list_subprojects(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> list[dict]:
    rows = await projects.list_subprojects(db, actor_id, project_id)
    return [ProjectResponse.model_validate(r).model_dump(mode="json") for r in rows]


@router.get("/projects/{project_id}/role")
async def get_effective_role(
    project_id: str,
    user_id: str | None = None,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    """Effective role of ``user_id`` (default: the caller) on the project."""
    await projects.get_project(db, project_id)
    subject = user_id or actor_id
    if subject != actor_id:
        await require_access(db, project_id, actor_id)
    role = await effective_role(db, project_id, subject)
    return EffectiveRoleResponse(project_id=project_id, user_id=subject, role=role).model_dump(mode="json")


# ── Members ────────────────────────────────────────────────────────────────────

@router.get("/projects/{project_id}/members")
async def list_members(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> list[dict]:
    rows = await members.list_members(db, actor_id, project_id)
    return [MemberResponse.model_validate(r).model_dump(mode="json") for r in rows]


@router.post("/projects/{project_id}/members", status_code=201)
async def add_member(
    project_id: str,
    body: MemberAdd,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await members.add_member(db, actor_id, project_id, body.user_id, body.role)
    await db.commit()
    return MemberResponse.model_validate(row).model_dump(mode="json")


@router.put("/projects/{project_id}/members/{user_id}")
async def update_member_role(
    project_id: str,
    user_id: str,
    body: MemberRoleUpdate,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> dict:
    row = await members.update_member_role(db, actor_id, project_id, user_id, body.role)
    await db.commit()
    return MemberResponse.model_validate(row).model_dump(mode="json")


@router.delete("/projects/{project_id}/members/{user_id}", status_code=204)
async def remove_member(
    project_id: str,
    user_id: str,
    db: AsyncSession = Depends(get_db),
    actor_id: str = Depends(get_current_user_id),
) -> None:
    await members.remove_member(db, actor_id, project_id, user_id)
    await db.commit()
