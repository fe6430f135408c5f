"""Sprint repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.db.models.sprint import SprintRow
from sprinter.models.enums import SprintStatus
from sprinter.repositories.base import BaseRepository


class SprintRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, SprintRow)

    async def get(self, sprint_id: str) -> SprintRow | None:
        return await self.get_by_id("sprint_id", sprint_id)

    async def list_for_project(self, project_id: str) -> list[SprintRow]:
        stmt = (
            select(SprintRow)
            .where(SprintRow.project_id == project_id)
            .order_by(SprintRow.start_date.desc(), SprintRow.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_active(self, project_id: str) -> SprintRow | None:
        stmt = select(SprintRow).where(
            SprintRow.project_id == project_id,
            SprintRow.status == SprintStatus.ACTIVE,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
