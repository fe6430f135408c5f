"""User provisioning and deactivation."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.db.models.user import UserRow
from sprinter.errors.exceptions import AccessDeniedError, NotFoundError, ValidationError
from sprinter.models.enums import SystemRole
from sprinter.repositories.user_repo import UserRepository
from sprinter.services.id_generator import generate_id

logger = logging.getLogger(__name__)


async def get_user(session: AsyncSession, user_id: str) -> UserRow:
    user = await UserRepository(session).get(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


async def create_user(
    session: AsyncSession,
    username: str,
    email: str,
    display_name: str,
    system_role: SystemRole = SystemRole.USER,
) -> UserRow:
    repo = UserRepository(session)
    username = username.strip()
    email = email.strip().lower()
    if await repo.exists_with(username, email):
        raise ValidationError(f"User '{username}' or e-mail '{email}' is already registered")

    user = await repo.create(
        user_id=generate_id("usr_"),
        username=username,
        email=email,
        display_name=display_name.strip(),
        system_role=system_role,
        is_active=True,
    )
    logger.info("Created user %s (%s)", user.username, user.system_role)
    return user


async def deactivate_user(session: AsyncSession, actor_id: str, user_id: str) -> UserRow:
    """Administrators only. The user keeps memberships but resolves to no access."""
    actor = await UserRepository(session).get(actor_id)
    if actor is None or not actor.is_active or not actor.is_admin:
        raise AccessDeniedError("Only an administrator can deactivate users")
    if actor_id == user_id:
        raise ValidationError("Administrators cannot deactivate themselves")

    user = await get_user(session, user_id)
    user.is_active = False
    await session.flush()
    logger.info("Deactivated user %s", user.username)
    return user
