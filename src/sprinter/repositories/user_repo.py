"""Repository for User records."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.db.models.user import UserRow
from sprinter.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, UserRow)

    async def get(self, user_id: str) -> UserRow | None:
        return await self.get_by_id("user_id", user_id)

    async def exists_with(self, username: str, email: str) -> bool:
        stmt = select(UserRow.user_id).where(
            or_(UserRow.username == username, UserRow.email == email)
        )
        result = await self.session.execute(stmt)
        return result.first() is not None
