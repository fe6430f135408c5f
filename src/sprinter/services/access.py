"""Effective-role resolution and the project access checks built on it.

A user's role in a project is their direct membership there, or failing
that the direct membership in the nearest ancestor project. Roles are not
merged along the chain: the first membership found walking upward wins,
even when a more distant ancestor grants more. System administrators are
treated as MANAGER everywhere; deactivated users have no access anywhere.
"""

import logging
from collections.abc import Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.errors.exceptions import AccessDeniedError
from sprinter.models.enums import ProjectRole, SystemRole
from sprinter.repositories.project_repo import ProjectMemberRepository, ProjectRepository
from sprinter.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


def resolve_effective_role(
    project_id: str,
    parents: Mapping[str, str | None],
    direct_roles: Mapping[str, ProjectRole],
) -> ProjectRole | None:
    """Walk from ``project_id`` up the ``parents`` mapping; return the first direct role.

    Args:
        project_id: Project the role is requested for.
        parents: ``{project_id: parent_id}``; roots map to None.
        direct_roles: ``{project_id: role}`` for the user's direct memberships.
    """
    visited: set[str] = set()
    current: str | None = project_id
    while current is not None and current not in visited:
        role = direct_roles.get(current)
        if role is not None:
            return role
        visited.add(current)
        current = parents.get(current)
    return None


async def effective_role(session: AsyncSession, project_id: str, user_id: str) -> ProjectRole | None:
    """Return the role ``user_id`` effectively holds in ``project_id``, or None for no access."""
    user = await UserRepository(session).get(user_id)
    if user is None or not user.is_active:
        return None
    if user.system_role == SystemRole.ADMIN:
        return ProjectRole.MANAGER

    parents = await ProjectRepository(session).parent_map(project_id)
    roles = await ProjectMemberRepository(session).direct_roles(user_id, list(parents))
    return resolve_effective_role(project_id, parents, roles)


async def require_access(session: AsyncSession, project_id: str, user_id: str) -> ProjectRole:
    role = await effective_role(session, project_id, user_id)
    if role is None:
        logger.debug("No role for user %s in project %s", user_id, project_id)
        raise AccessDeniedError("You do not have access to this project", details={"project_id": project_id})
    return role


async def require_content_edit_access(session: AsyncSession, project_id: str, user_id: str) -> ProjectRole:
    """Observers may read and comment but not change content."""
    role = await require_access(session, project_id, user_id)
    if not role.can_edit_content:
        raise AccessDeniedError(
            "You are not allowed to edit content in this project",
            details={"project_id": project_id, "role": str(role)},
        )
    return role


async def require_manage_access(session: AsyncSession, project_id: str, user_id: str) -> ProjectRole:
    role = await require_access(session, project_id, user_id)
    if not role.can_manage_project:
        raise AccessDeniedError(
            "Only a project manager can change this setting",
            details={"project_id": project_id, "role": str(role)},
        )
    return role
