"""Work item, dependency and comment repositories."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.db.models.project import ProjectRow
from sprinter.db.models.work_item import CommentRow, WorkItemDependencyRow, WorkItemRow
from sprinter.models.enums import WorkItemStatus
from sprinter.repositories.base import BaseRepository


class WorkItemRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, WorkItemRow)

    async def get(self, work_item_id: str) -> WorkItemRow | None:
        return await self.get_by_id("work_item_id", work_item_id)

    async def get_by_number(self, project_key: str, item_number: int) -> WorkItemRow | None:
        stmt = (
            select(WorkItemRow)
            .join(ProjectRow, ProjectRow.project_id == WorkItemRow.project_id)
            .where(
                func.upper(ProjectRow.project_key) == project_key.upper(),
                WorkItemRow.item_number == item_number,
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_backlog(self, project_id: str) -> list[WorkItemRow]:
        stmt = (
            select(WorkItemRow)
            .where(WorkItemRow.project_id == project_id, WorkItemRow.sprint_id.is_(None))
            .order_by(WorkItemRow.item_number)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_sprint(self, sprint_id: str) -> list[WorkItemRow]:
        stmt = (
            select(WorkItemRow)
            .where(WorkItemRow.sprint_id == sprint_id)
            .order_by(WorkItemRow.item_number)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def move_sprint_items(
        self,
        sprint_id: str,
        target_sprint_id: str | None,
        *,
        unfinished_only: bool,
    ) -> list[WorkItemRow]:
        """Relink the sprint's items to ``target_sprint_id`` (None = backlog).

        With ``unfinished_only`` the DONE/CANCELLED items keep their link.
        Returns the moved rows.
        """
        moved = [
            item
            for item in await self.list_for_sprint(sprint_id)
            if not (unfinished_only and item.status.is_terminal)
        ]
        for item in moved:
            item.sprint_id = target_sprint_id
        await self.session.flush()
        return moved

    async def count_by_status(self, project_id: str) -> dict[WorkItemStatus, int]:
        stmt = (
            select(WorkItemRow.status, func.count())
            .where(WorkItemRow.project_id == project_id)
            .group_by(WorkItemRow.status)
        )
        result = await self.session.execute(stmt)
        return {status: count for status, count in result.all()}

    async def story_points_by_status(self, sprint_id: str) -> dict[WorkItemStatus, int]:
        stmt = (
            select(WorkItemRow.status, func.coalesce(func.sum(WorkItemRow.story_points), 0))
            .where(WorkItemRow.sprint_id == sprint_id)
            .group_by(WorkItemRow.status)
        )
        result = await self.session.execute(stmt)
        return {status: int(points) for status, points in result.all()}


class WorkItemDependencyRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, WorkItemDependencyRow)

    async def get(self, dependency_id: str) -> WorkItemDependencyRow | None:
        return await self.get_by_id("dependency_id", dependency_id)

    async def exists_between(self, predecessor_id: str, successor_id: str) -> bool:
        stmt = select(WorkItemDependencyRow.dependency_id).where(
            WorkItemDependencyRow.predecessor_id == predecessor_id,
            WorkItemDependencyRow.successor_id == successor_id,
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def list_for_successor(self, successor_id: str) -> list[WorkItemDependencyRow]:
        return await self.list_by_field("successor_id", successor_id)


class CommentRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, CommentRow)

    async def get(self, comment_id: str) -> CommentRow | None:
        return await self.get_by_id("comment_id", comment_id)

    async def list_for_work_item(self, work_item_id: str) -> list[CommentRow]:
        stmt = (
            select(CommentRow)
            .where(CommentRow.work_item_id == work_item_id)
            .order_by(CommentRow.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
