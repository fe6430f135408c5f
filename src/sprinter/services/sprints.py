"""Sprint lifecycle: planning, start, completion, cancellation and item assignment."""

import logging
from datetime import date, datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.db.models.sprint import SprintRow
from sprinter.db.models.work_item import WorkItemRow
from sprinter.errors.exceptions import NotFoundError, ValidationError
from sprinter.models.enums import SprintAction, SprintStatus, WorkItemType
from sprinter.repositories.project_repo import ProjectRepository
from sprinter.repositories.sprint_repo import SprintRepository
from sprinter.repositories.work_item_repo import WorkItemRepository
from sprinter.services.access import (
    require_access,
    require_content_edit_access,
    require_manage_access,
)
from sprinter.services.id_generator import generate_id
from sprinter.services.projects import get_project
from sprinter.services.workflow import next_sprint_status

logger = logging.getLogger(__name__)


def _check_dates(start_date: date | None, end_date: date | None) -> None:
    if start_date and end_date and end_date < start_date:
        raise ValidationError("Sprint end date cannot be before its start date")


async def get_sprint(session: AsyncSession, sprint_id: str) -> SprintRow:
    sprint = await SprintRepository(session).get(sprint_id)
    if sprint is None:
        raise NotFoundError("Sprint", sprint_id)
    return sprint


async def list_sprints(session: AsyncSession, actor_id: str, project_id: str) -> list[SprintRow]:
    await get_project(session, project_id)
    await require_access(session, project_id, actor_id)
    return await SprintRepository(session).list_for_project(project_id)


async def get_active_sprint(session: AsyncSession, actor_id: str, project_id: str) -> SprintRow | None:
    await get_project(session, project_id)
    await require_access(session, project_id, actor_id)
    return await SprintRepository(session).get_active(project_id)


async def create_sprint(
    session: AsyncSession,
    actor_id: str,
    project_id: str,
    name: str,
    goal: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> SprintRow:
    project = await get_project(session, project_id)
    await require_manage_access(session, project_id, actor_id)
    if not name or not name.strip():
        raise ValidationError("Sprint name is required")
    _check_dates(start_date, end_date)

    sprint = await SprintRepository(session).create(
        sprint_id=generate_id("spr_"),
        project_id=project_id,
        name=name.strip(),
        goal=goal,
        status=SprintStatus.PLANNING,
        start_date=start_date,
        end_date=end_date,
    )
    logger.info("Created sprint '%s' in project %s", sprint.name, project.project_key)
    return sprint


async def update_sprint(
    session: AsyncSession,
    actor_id: str,
    sprint_id: str,
    *,
    name: str | None = None,
    goal: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> SprintRow:
    sprint = await get_sprint(session, sprint_id)
    await require_manage_access(session, sprint.project_id, actor_id)
    if sprint.is_terminal:
        raise ValidationError("A completed or cancelled sprint cannot be modified")
    if name is not None and not name.strip():
        raise ValidationError("Sprint name is required")

    new_start = start_date if start_date is not None else sprint.start_date
    new_end = end_date if end_date is not None else sprint.end_date
    _check_dates(new_start, new_end)

    if name is not None:
        sprint.name = name.strip()
    if goal is not None:
        sprint.goal = goal
    sprint.start_date = new_start
    sprint.end_date = new_end
    await session.flush()
    return sprint


async def start_sprint(session: AsyncSession, actor_id: str, sprint_id: str) -> SprintRow:
    """PLANNING -> ACTIVE, provided the project has no other active sprint."""
    sprint = await get_sprint(session, sprint_id)
    await require_manage_access(session, sprint.project_id, actor_id)
    new_status = next_sprint_status(sprint.status, SprintAction.START)

    # Serialize concurrent starts in the same project on the project row
    await ProjectRepository(session).get_for_update(sprint.project_id)
    active = await SprintRepository(session).get_active(sprint.project_id)
    if active is not None:
        raise ValidationError(
            "Another sprint is already active in this project",
            details={"active_sprint_id": active.sprint_id},
        )

    sprint.status = new_status
    if sprint.start_date is None:
        sprint.start_date = date.today()
    try:
        await session.flush()
    except IntegrityError as exc:
        # Lost the race against a concurrent start that the lock did not cover
        raise ValidationError("Another sprint is already active in this project") from exc

    logger.info("Started sprint '%s' (%s)", sprint.name, sprint.sprint_id)
    return sprint


async def complete_sprint(
    session: AsyncSession,
    actor_id: str,
    sprint_id: str,
    target_sprint_id: str | None = None,
) -> SprintRow:
    """ACTIVE -> COMPLETED.

    Unfinished items move to ``target_sprint_id`` or, when it is None, to the
    backlog. DONE and CANCELLED items stay linked to the completed sprint.
    """
    sprint = await get_sprint(session, sprint_id)
    await require_manage_access(session, sprint.project_id, actor_id)
    new_status = next_sprint_status(sprint.status, SprintAction.COMPLETE)

    if target_sprint_id is not None:
        target = await get_sprint(session, target_sprint_id)
        if target.sprint_id == sprint.sprint_id:
            raise ValidationError("Unfinished items cannot be moved into the sprint being completed")
        if target.project_id != sprint.project_id:
            raise ValidationError("Target sprint belongs to a different project")
        if target.is_terminal:
            raise ValidationError("Cannot move items into a completed or cancelled sprint")

    moved = await WorkItemRepository(session).move_sprint_items(
        sprint_id, target_sprint_id, unfinished_only=True
    )
    sprint.status = new_status
    sprint.completed_at = datetime.now(timezone.utc)
    await session.flush()

    logger.info(
        "Completed sprint '%s', moved %d unfinished items to %s",
        sprint.name,
        len(moved),
        target_sprint_id or "backlog",
    )
    return sprint


async def cancel_sprint(session: AsyncSession, actor_id: str, sprint_id: str) -> SprintRow:
    """PLANNING/ACTIVE -> CANCELLED; every item, finished or not, returns to the backlog."""
    sprint = await get_sprint(session, sprint_id)
    await require_manage_access(session, sprint.project_id, actor_id)
    new_status = next_sprint_status(sprint.status, SprintAction.CANCEL)

    moved = await WorkItemRepository(session).move_sprint_items(
        sprint_id, None, unfinished_only=False
    )
    sprint.status = new_status
    await session.flush()

    logger.info("Cancelled sprint '%s', %d items returned to backlog", sprint.name, len(moved))
    return sprint


async def _get_work_item(session: AsyncSession, work_item_id: str) -> WorkItemRow:
    item = await WorkItemRepository(session).get(work_item_id)
    if item is None:
        raise NotFoundError("Work item", work_item_id)
    return item


def check_sprint_assignment(sprint: SprintRow, item_project_id: str, item_type: WorkItemType) -> None:
    """Raise ValidationError unless an item of ``item_type`` may be scheduled into ``sprint``."""
    if sprint.project_id != item_project_id:
        raise ValidationError("Sprint belongs to a different project")
    if sprint.is_terminal:
        raise ValidationError("Items cannot be added to a completed or cancelled sprint")
    if not item_type.is_sprintable:
        raise ValidationError(f"Work items of type {item_type} cannot be assigned to a sprint")


async def add_work_item_to_sprint(
    session: AsyncSession,
    actor_id: str,
    sprint_id: str,
    work_item_id: str,
) -> WorkItemRow:
    sprint = await get_sprint(session, sprint_id)
    item = await _get_work_item(session, work_item_id)
    await require_content_edit_access(session, item.project_id, actor_id)
    check_sprint_assignment(sprint, item.project_id, item.type)

    item.sprint_id = sprint.sprint_id
    await session.flush()
    return item


async def remove_work_item_from_sprint(
    session: AsyncSession,
    actor_id: str,
    work_item_id: str,
) -> WorkItemRow:
    """Move the item back to the backlog. Always allowed for content editors."""
    item = await _get_work_item(session, work_item_id)
    await require_content_edit_access(session, item.project_id, actor_id)
    item.sprint_id = None
    await session.flush()
    return item
