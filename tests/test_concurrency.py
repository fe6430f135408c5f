"""Concurrent writers against a file-backed database.

Each writer runs in its own session and connection so the guarded updates
are exercised across real transactions rather than one shared connection.
"""

import asyncio

import pytest
from sqlalchemy import func, select

from sprinter.db.models.project import ProjectRow
from sprinter.db.models.sprint import SprintRow
from sprinter.db.models.work_item import WorkItemRow
from sprinter.errors.exceptions import ValidationError
from sprinter.models.enums import SprintStatus, WorkItemType
from sprinter.services import projects, sprints, work_items
from sprinter.services.users import create_user

WRITERS = 12


async def _seed_project(factory, key):
    async with factory() as session:
        user = await create_user(session, "alice", "alice@example.com", "Alice")
        project = await projects.create_project(session, user.user_id, key, key.title())
        await session.commit()
        return user.user_id, project.project_id


@pytest.mark.asyncio
async def test_concurrent_creates_get_distinct_numbers(file_session_factory):
    user_id, project_id = await _seed_project(file_session_factory, "RACE")

    async def writer(n: int) -> int:
        async with file_session_factory() as session:
            item = await work_items.create_work_item(
                session, user_id, project_id, WorkItemType.TASK, f"Task {n}"
            )
            await session.commit()
            return item.item_number

    numbers = await asyncio.gather(*(writer(n) for n in range(WRITERS)))

    assert sorted(numbers) == list(range(1, WRITERS + 1))
    async with file_session_factory() as session:
        counter = await session.scalar(select(ProjectRow.item_counter).where(ProjectRow.project_id == project_id))
        stored = (await session.scalars(select(WorkItemRow.item_number))).all()
    assert counter == WRITERS
    assert sorted(stored) == list(range(1, WRITERS + 1))


@pytest.mark.asyncio
async def test_concurrent_starts_leave_one_active_sprint(file_session_factory):
    user_id, project_id = await _seed_project(file_session_factory, "DUEL")
    async with file_session_factory() as session:
        first = await sprints.create_sprint(session, user_id, project_id, "Sprint A")
        second = await sprints.create_sprint(session, user_id, project_id, "Sprint B")
        await session.commit()
        sprint_ids = [first.sprint_id, second.sprint_id]

    async def starter(sprint_id: str) -> SprintStatus:
        async with file_session_factory() as session:
            sprint = await sprints.start_sprint(session, user_id, sprint_id)
            await session.commit()
            return sprint.status

    results = await asyncio.gather(*(starter(s) for s in sprint_ids), return_exceptions=True)

    assert [r for r in results if r == SprintStatus.ACTIVE] == [SprintStatus.ACTIVE]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], ValidationError)
    assert "already active" in failures[0].message

    async with file_session_factory() as session:
        active = await session.scalar(
            select(func.count())
            .select_from(SprintRow)
            .where(SprintRow.project_id == project_id, SprintRow.status == SprintStatus.ACTIVE)
        )
    assert active == 1
