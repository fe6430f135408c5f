"""Project membership management and the last-manager guard."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.db.models.project import ProjectMemberRow
from sprinter.errors.exceptions import NotFoundError, ValidationError
from sprinter.models.enums import ProjectRole
from sprinter.repositories.project_repo import ProjectMemberRepository
from sprinter.services.access import require_access, require_manage_access
from sprinter.services.id_generator import generate_id
from sprinter.services.projects import get_project
from sprinter.services.users import get_user

logger = logging.getLogger(__name__)

LAST_MANAGER_MESSAGE = "Project must retain at least one manager"


async def _ensure_not_last_manager(repo: ProjectMemberRepository, member: ProjectMemberRow) -> None:
    # Only direct managers of this exact project count; inherited ones do not.
    if member.project_role != ProjectRole.MANAGER:
        return
    if await repo.count_managers(member.project_id) <= 1:
        raise ValidationError(
            LAST_MANAGER_MESSAGE,
            details={"project_id": member.project_id, "user_id": member.user_id},
        )


async def list_members(session: AsyncSession, actor_id: str, project_id: str) -> list[ProjectMemberRow]:
    await get_project(session, project_id)
    await require_access(session, project_id, actor_id)
    return await ProjectMemberRepository(session).list_for_project(project_id)


async def add_member(
    session: AsyncSession,
    actor_id: str,
    project_id: str,
    user_id: str,
    role: ProjectRole,
) -> ProjectMemberRow:
    """Grant ``user_id`` a direct role; an existing membership has its role changed instead."""
    project = await get_project(session, project_id)
    await require_manage_access(session, project_id, actor_id)

    repo = ProjectMemberRepository(session)
    existing = await repo.get(project_id, user_id)
    if existing is not None:
        return await _change_role(repo, existing, role)

    user = await get_user(session, user_id)
    if not user.is_active:
        raise ValidationError(f"User '{user.username}' is deactivated")

    member = await repo.create(
        member_id=generate_id("mem_"),
        project_id=project_id,
        user_id=user_id,
        project_role=role,
    )
    logger.info("Added %s to project %s as %s", user.username, project.project_key, role)
    return member


async def update_member_role(
    session: AsyncSession,
    actor_id: str,
    project_id: str,
    user_id: str,
    role: ProjectRole,
) -> ProjectMemberRow:
    await get_project(session, project_id)
    await require_manage_access(session, project_id, actor_id)

    repo = ProjectMemberRepository(session)
    member = await repo.get(project_id, user_id)
    if member is None:
        raise NotFoundError("Project member", user_id)
    return await _change_role(repo, member, role)


async def _change_role(
    repo: ProjectMemberRepository,
    member: ProjectMemberRow,
    role: ProjectRole,
) -> ProjectMemberRow:
    if member.project_role == role:
        return member
    await _ensure_not_last_manager(repo, member)
    old_role = member.project_role
    member.project_role = role
    await repo.session.flush()
    logger.info(
        "Changed role of user %s in project %s: %s -> %s",
        member.user_id,
        member.project_id,
        old_role,
        role,
    )
    return member


async def remove_member(session: AsyncSession, actor_id: str, project_id: str, user_id: str) -> None:
    await get_project(session, project_id)
    await require_manage_access(session, project_id, actor_id)

    repo = ProjectMemberRepository(session)
    member = await repo.get(project_id, user_id)
    if member is None:
        raise NotFoundError("Project member", user_id)

    await _ensure_not_last_manager(repo, member)
    await repo.delete(member)
    logger.info("Removed user %s from project %s", user_id, project_id)
