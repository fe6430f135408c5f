"""Project hierarchy: creation, key validation and the item-number allocator."""

import logging
import re
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.db.models.project import ProjectRow
from sprinter.errors.exceptions import AccessDeniedError, NotFoundError, ValidationError
from sprinter.models.enums import ProjectRole, ProjectStatus
from sprinter.repositories.project_repo import ProjectMemberRepository, ProjectRepository
from sprinter.repositories.user_repo import UserRepository
from sprinter.services.access import require_access, require_manage_access
from sprinter.services.id_generator import generate_id

logger = logging.getLogger(__name__)

PROJECT_KEY_PATTERN = re.compile(r"^[A-Z][A-Z0-9]{1,9}$")


def normalize_project_key(key: str) -> str:
    """Uppercase ``key`` and check it is a letter followed by 1-9 letters/digits."""
    normalized = (key or "").strip().upper()
    if not PROJECT_KEY_PATTERN.match(normalized):
        raise ValidationError(
            "Project key must start with a letter followed by 1-9 letters or digits",
            details={"key": key},
        )
    return normalized


def suggest_project_key(name: str) -> str:
    """Suggest a key from a project name: "Web Shop Redesign" -> "WSR"."""
    words = (name or "").upper().split()
    if not words:
        return "PRJ"
    if len(words) == 1:
        cleaned = re.sub(r"[^A-Z0-9]", "", words[0])
        return cleaned[:4] if len(cleaned) >= 2 and cleaned[0].isalpha() else "PRJ"

    initials = ""
    for word in words:
        cleaned = re.sub(r"[^A-Z0-9]", "", word)
        if cleaned:
            initials += cleaned[0]
        if len(initials) >= 4:
            break
    if len(initials) < 2 or not initials[0].isalpha():
        return "PRJ"
    return initials


async def get_project(session: AsyncSession, project_id: str) -> ProjectRow:
    project = await ProjectRepository(session).get(project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


async def get_project_by_key(session: AsyncSession, actor_id: str, project_key: str) -> ProjectRow:
    project = await ProjectRepository(session).get_by_key(project_key)
    if project is None:
        raise NotFoundError("Project", project_key)
    await require_access(session, project.project_id, actor_id)
    return project


async def _insert_project(
    session: AsyncSession,
    actor_id: str,
    key: str,
    name: str,
    description: str | None,
    start_date: date | None,
    end_date: date | None,
    parent_id: str | None,
) -> ProjectRow:
    repo = ProjectRepository(session)
    project_key = normalize_project_key(key)
    if await repo.key_exists(project_key):
        raise ValidationError(f"Project key '{project_key}' is already in use")
    if not name or not name.strip():
        raise ValidationError("Project name is required")
    if start_date and end_date and end_date < start_date:
        raise ValidationError("Project end date cannot be before its start date")

    project = await repo.create(
        project_id=generate_id("proj_"),
        project_key=project_key,
        name=name.strip(),
        description=description,
        status=ProjectStatus.ACTIVE,
        start_date=start_date,
        end_date=end_date,
        parent_id=parent_id,
        owner_id=actor_id,
        item_counter=0,
    )
    # Every project starts with its creator as a direct manager
    await ProjectMemberRepository(session).create(
        member_id=generate_id("mem_"),
        project_id=project.project_id,
        user_id=actor_id,
        project_role=ProjectRole.MANAGER,
    )
    return project


async def create_project(
    session: AsyncSession,
    actor_id: str,
    key: str,
    name: str,
    description: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> ProjectRow:
    """Create a root project owned and managed by ``actor_id``."""
    actor = await UserRepository(session).get(actor_id)
    if actor is None or not actor.is_active:
        raise AccessDeniedError("Only active users can create projects")

    project = await _insert_project(session, actor_id, key, name, description, start_date, end_date, None)
    logger.info("Created project %s (%s)", project.name, project.project_key)
    return project


async def create_subproject(
    session: AsyncSession,
    actor_id: str,
    parent_id: str,
    key: str,
    name: str,
    description: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> ProjectRow:
    """Create a project under ``parent_id``; the actor must manage the parent."""
    parent = await get_project(session, parent_id)
    await require_manage_access(session, parent_id, actor_id)

    project = await _insert_project(
        session, actor_id, key, name, description, start_date, end_date, parent.project_id
    )
    logger.info(
        "Created subproject %s (%s) under %s",
        project.name,
        project.project_key,
        parent.project_key,
    )
    return project


async def update_project(
    session: AsyncSession,
    actor_id: str,
    project_id: str,
    *,
    name: str | None = None,
    description: str | None = None,
    status: ProjectStatus | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> ProjectRow:
    project = await get_project(session, project_id)
    await require_manage_access(session, project_id, actor_id)

    new_start = start_date if start_date is not None else project.start_date
    new_end = end_date if end_date is not None else project.end_date
    if new_start and new_end and new_end < new_start:
        raise ValidationError("Project end date cannot be before its start date")
    if name is not None and not name.strip():
        raise ValidationError("Project name is required")

    if name is not None:
        project.name = name.strip()
    if description is not None:
        project.description = description
    if status is not None:
        project.status = status
    project.start_date = new_start
    project.end_date = new_end
    await session.flush()
    return project


async def archive_project(session: AsyncSession, actor_id: str, project_id: str) -> ProjectRow:
    project = await get_project(session, project_id)
    await require_manage_access(session, project_id, actor_id)
    project.status = ProjectStatus.ARCHIVED
    await session.flush()
    logger.info("Archived project %s (%s)", project.name, project.project_key)
    return project


async def list_projects_for_user(session: AsyncSession, actor_id: str) -> list[ProjectRow]:
    """Root projects visible to the actor: all of them for admins, direct memberships otherwise."""
    actor = await UserRepository(session).get(actor_id)
    if actor is None or not actor.is_active:
        return []
    repo = ProjectRepository(session)
    if actor.is_admin:
        return await repo.list_roots()
    return await repo.list_roots_for_user(actor_id)


async def list_subprojects(session: AsyncSession, actor_id: str, parent_id: str) -> list[ProjectRow]:
    await get_project(session, parent_id)
    await require_access(session, parent_id, actor_id)
    return await ProjectRepository(session).list_children(parent_id)


async def next_item_number(session: AsyncSession, project_id: str) -> int:
    """Allocate the next per-project item number. Pure allocation; numbers are never reused."""
    number = await ProjectRepository(session).next_item_number(project_id)
    if number is None:
        raise NotFoundError("Project", project_id)
    return number
