"""Project and project membership repositories."""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.db.models.project import ProjectMemberRow, ProjectRow
from sprinter.models.enums import ProjectRole, ProjectStatus
from sprinter.repositories.base import BaseRepository


class ProjectRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ProjectRow)

    async def get(self, project_id: str) -> ProjectRow | None:
        return await self.get_by_id("project_id", project_id)

    async def get_for_update(self, project_id: str) -> ProjectRow | None:
        """Load the project row with a row lock held until the transaction ends."""
        stmt = select(ProjectRow).where(ProjectRow.project_id == project_id).with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_key(self, project_key: str) -> ProjectRow | None:
        stmt = select(ProjectRow).where(func.upper(ProjectRow.project_key) == project_key.upper())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def key_exists(self, project_key: str) -> bool:
        return await self.get_by_key(project_key) is not None

    async def list_roots(self) -> list[ProjectRow]:
        stmt = (
            select(ProjectRow)
            .where(ProjectRow.parent_id.is_(None), ProjectRow.status != ProjectStatus.ARCHIVED)
            .order_by(ProjectRow.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_roots_for_user(self, user_id: str) -> list[ProjectRow]:
        stmt = (
            select(ProjectRow)
            .join(ProjectMemberRow, ProjectMemberRow.project_id == ProjectRow.project_id)
            .where(
                ProjectMemberRow.user_id == user_id,
                ProjectRow.parent_id.is_(None),
                ProjectRow.status != ProjectStatus.ARCHIVED,
            )
            .order_by(ProjectRow.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_children(self, parent_id: str) -> list[ProjectRow]:
        stmt = select(ProjectRow).where(ProjectRow.parent_id == parent_id).order_by(ProjectRow.name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def parent_map(self, project_id: str) -> dict[str, str | None]:
        """Return ``{project_id: parent_id}`` for the project and all of its ancestors.

        Unknown project ids yield an empty mapping. A revisited id ends the walk.
        """
        parents: dict[str, str | None] = {}
        current: str | None = project_id
        while current is not None and current not in parents:
            result = await self.session.execute(
                select(ProjectRow.parent_id).where(ProjectRow.project_id == current)
            )
            row = result.first()
            if row is None:
                break
            parents[current] = row.parent_id
            current = row.parent_id
        return parents

    async def next_item_number(self, project_id: str) -> int | None:
        """Atomically advance the project's item counter and return the new value.

        One UPDATE ... RETURNING statement; the row lock it takes serializes
        concurrent allocations in the same project. Returns None for an
        unknown project. A ProjectRow already loaded in this session keeps
        its old ``item_counter`` value.
        """
        stmt = (
            update(ProjectRow)
            .where(ProjectRow.project_id == project_id)
            .values(item_counter=ProjectRow.item_counter + 1)
            .returning(ProjectRow.item_counter)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


class ProjectMemberRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ProjectMemberRow)

    async def get(self, project_id: str, user_id: str) -> ProjectMemberRow | None:
        stmt = select(ProjectMemberRow).where(
            ProjectMemberRow.project_id == project_id,
            ProjectMemberRow.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_project(self, project_id: str) -> list[ProjectMemberRow]:
        return await self.list_by_field("project_id", project_id)

    async def direct_roles(self, user_id: str, project_ids: list[str]) -> dict[str, ProjectRole]:
        """Direct memberships of one user across the given projects."""
        if not project_ids:
            return {}
        stmt = select(ProjectMemberRow.project_id, ProjectMemberRow.project_role).where(
            ProjectMemberRow.user_id == user_id,
            ProjectMemberRow.project_id.in_(project_ids),
        )
        result = await self.session.execute(stmt)
        return {row.project_id: row.project_role for row in result}

    async def count_managers(self, project_id: str) -> int:
        """Count direct MANAGER memberships; inherited managers are not included."""
        stmt = select(func.count()).select_from(ProjectMemberRow).where(
            ProjectMemberRow.project_id == project_id,
            ProjectMemberRow.project_role == ProjectRole.MANAGER,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
