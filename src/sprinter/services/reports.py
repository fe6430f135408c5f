"""Progress reporting over work item statuses.

DONE and CANCELLED both count as completed in every percentage.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.models.enums import WorkItemStatus
from sprinter.repositories.work_item_repo import WorkItemRepository
from sprinter.services.access import require_access
from sprinter.services.projects import get_project
from sprinter.services.sprints import get_sprint


def completion_percent(counts: dict[WorkItemStatus, int]) -> int:
    total = sum(counts.values())
    if total == 0:
        return 0
    done = sum(count for status, count in counts.items() if status.is_terminal)
    return done * 100 // total


async def project_status_counts(
    session: AsyncSession, actor_id: str, project_id: str
) -> dict[WorkItemStatus, int]:
    """Item count per status, with every status present."""
    await get_project(session, project_id)
    await require_access(session, project_id, actor_id)
    counts = await WorkItemRepository(session).count_by_status(project_id)
    return {status: counts.get(status, 0) for status in WorkItemStatus}


async def project_completion_percent(session: AsyncSession, actor_id: str, project_id: str) -> int:
    return completion_percent(await project_status_counts(session, actor_id, project_id))


async def sprint_points_by_status(
    session: AsyncSession, actor_id: str, sprint_id: str
) -> dict[WorkItemStatus, int]:
    """Story points per status in a sprint (burn-down input)."""
    sprint = await get_sprint(session, sprint_id)
    await require_access(session, sprint.project_id, actor_id)
    points = await WorkItemRepository(session).story_points_by_status(sprint_id)
    return {status: points.get(status, 0) for status in WorkItemStatus}
