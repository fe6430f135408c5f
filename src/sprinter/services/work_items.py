"""Work item ledger: numbering, status workflow, comments and dependencies."""

import logging
from datetime import date, datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from sprinter.db.models.work_item import CommentRow, WorkItemDependencyRow, WorkItemRow
from sprinter.errors.exceptions import AccessDeniedError, NotFoundError, ValidationError
from sprinter.models.enums import DependencyType, Priority, WorkItemStatus, WorkItemType
from sprinter.repositories.user_repo import UserRepository
from sprinter.repositories.work_item_repo import (
    CommentRepository,
    WorkItemDependencyRepository,
    WorkItemRepository,
)
from sprinter.services.access import (
    require_access,
    require_content_edit_access,
    require_manage_access,
)
from sprinter.services.id_generator import generate_id, parse_item_key
from sprinter.services.projects import get_project, next_item_number
from sprinter.services.sprints import check_sprint_assignment, get_sprint
from sprinter.services.users import get_user
from sprinter.services.workflow import completion_timestamp

logger = logging.getLogger(__name__)


def _check_dates(start_date: date | None, due_date: date | None) -> None:
    if start_date and due_date and due_date < start_date:
        raise ValidationError("Due date cannot be before the start date")


async def _load(session: AsyncSession, work_item_id: str) -> WorkItemRow:
    item = await WorkItemRepository(session).get(work_item_id)
    if item is None:
        raise NotFoundError("Work item", work_item_id)
    return item


async def get_work_item(session: AsyncSession, actor_id: str, work_item_id: str) -> WorkItemRow:
    item = await _load(session, work_item_id)
    await require_access(session, item.project_id, actor_id)
    return item


async def get_work_item_by_key(session: AsyncSession, actor_id: str, key: str) -> WorkItemRow:
    """Resolve an item key such as ``PROJ-42``."""
    parsed = parse_item_key(key)
    if parsed is None:
        raise NotFoundError("Work item", key)
    item = await WorkItemRepository(session).get_by_number(*parsed)
    if item is None:
        raise NotFoundError("Work item", key)
    await require_access(session, item.project_id, actor_id)
    return item


async def list_backlog(session: AsyncSession, actor_id: str, project_id: str) -> list[WorkItemRow]:
    await get_project(session, project_id)
    await require_access(session, project_id, actor_id)
    return await WorkItemRepository(session).list_backlog(project_id)


async def list_sprint_items(session: AsyncSession, actor_id: str, sprint_id: str) -> list[WorkItemRow]:
    sprint = await get_sprint(session, sprint_id)
    await require_access(session, sprint.project_id, actor_id)
    return await WorkItemRepository(session).list_for_sprint(sprint_id)


async def create_work_item(
    session: AsyncSession,
    actor_id: str,
    project_id: str,
    item_type: WorkItemType,
    title: str,
    *,
    description: str | None = None,
    priority: Priority = Priority.MEDIUM,
    assignee_id: str | None = None,
    parent_id: str | None = None,
    sprint_id: str | None = None,
    start_date: date | None = None,
    due_date: date | None = None,
    story_points: int | None = None,
    estimated_hours: float | None = None,
) -> WorkItemRow:
    """Create a work item in TO_DO and give it the project's next item number.

    Everything is validated before the number is allocated. The new item's
    ``item_key`` (e.g. ``PROJ-42``) is its external identifier.
    """
    project = await get_project(session, project_id)
    await require_content_edit_access(session, project_id, actor_id)

    if not title or not title.strip():
        raise ValidationError("Title is required")
    _check_dates(start_date, due_date)
    if story_points is not None and story_points < 0:
        raise ValidationError("Story points cannot be negative")
    if assignee_id is not None:
        await get_user(session, assignee_id)
    if parent_id is not None:
        parent = await _load(session, parent_id)
        if parent.project_id != project_id:
            raise ValidationError("Parent work item belongs to a different project")
    if sprint_id is not None:
        sprint = await get_sprint(session, sprint_id)
        check_sprint_assignment(sprint, project_id, item_type)

    number = await next_item_number(session, project_id)
    item = await WorkItemRepository(session).create(
        work_item_id=generate_id("wi_"),
        project_id=project_id,
        project=project,
        item_number=number,
        type=item_type,
        title=title.strip(),
        description=description,
        status=WorkItemStatus.TO_DO,
        priority=priority,
        assignee_id=assignee_id,
        reporter_id=actor_id,
        parent_id=parent_id,
        sprint_id=sprint_id,
        start_date=start_date,
        due_date=due_date,
        story_points=story_points,
        estimated_hours=estimated_hours,
        logged_hours=0.0,
        progress_pct=0,
    )
    logger.info("Created work item %s (%s)", item.item_key, item.type)
    return item


async def update_work_item(
    session: AsyncSession,
    actor_id: str,
    work_item_id: str,
    *,
    title: str | None = None,
    description: str | None = None,
    priority: Priority | None = None,
    assignee_id: str | None = None,
    start_date: date | None = None,
    due_date: date | None = None,
    story_points: int | None = None,
    estimated_hours: float | None = None,
) -> WorkItemRow:
    """Update descriptive fields; None leaves a field unchanged. Number and project never change."""
    item = await _load(session, work_item_id)
    await require_content_edit_access(session, item.project_id, actor_id)

    if title is not None and not title.strip():
        raise ValidationError("Title is required")
    _check_dates(
        start_date if start_date is not None else item.start_date,
        due_date if due_date is not None else item.due_date,
    )
    if story_points is not None and story_points < 0:
        raise ValidationError("Story points cannot be negative")
    if assignee_id is not None:
        await get_user(session, assignee_id)

    changes = {
        "title": title.strip() if title is not None else None,
        "description": description,
        "priority": priority,
        "assignee_id": assignee_id,
        "start_date": start_date,
        "due_date": due_date,
        "story_points": story_points,
        "estimated_hours": estimated_hours,
    }
    for field, value in changes.items():
        if value is not None:
            setattr(item, field, value)
    await session.flush()
    return item


async def change_status(
    session: AsyncSession,
    actor_id: str,
    work_item_id: str,
    new_status: WorkItemStatus,
) -> WorkItemRow:
    """Set any status from any other; only the completion timestamp follows the target."""
    item = await _load(session, work_item_id)
    await require_content_edit_access(session, item.project_id, actor_id)

    old_status = item.status
    item.completed_at = completion_timestamp(
        new_status, item.completed_at, datetime.now(timezone.utc)
    )
    item.status = new_status
    await session.flush()
    logger.debug("Work item %s status %s -> %s", item.item_key, old_status, new_status)
    return item


async def change_progress(
    session: AsyncSession,
    actor_id: str,
    work_item_id: str,
    progress_pct: int | None,
) -> WorkItemRow:
    item = await _load(session, work_item_id)
    await require_content_edit_access(session, item.project_id, actor_id)
    item.progress_pct = max(0, min(100, progress_pct or 0))
    await session.flush()
    return item


async def log_hours(session: AsyncSession, actor_id: str, work_item_id: str, hours: float) -> WorkItemRow:
    item = await _load(session, work_item_id)
    await require_content_edit_access(session, item.project_id, actor_id)
    if hours <= 0:
        raise ValidationError("Logged hours must be positive")
    item.logged_hours = (item.logged_hours or 0.0) + hours
    await session.flush()
    return item


async def delete_work_item(session: AsyncSession, actor_id: str, work_item_id: str) -> None:
    """Managers only. The item number is not returned to the project counter."""
    item = await _load(session, work_item_id)
    await require_manage_access(session, item.project_id, actor_id)
    key = item.item_key
    await WorkItemRepository(session).delete(item)
    logger.info("Deleted work item %s", key)


# ── Comments ───────────────────────────────────────────────────────────────────

async def add_comment(session: AsyncSession, actor_id: str, work_item_id: str, content: str) -> CommentRow:
    """Any role may comment, observers included."""
    item = await _load(session, work_item_id)
    await require_access(session, item.project_id, actor_id)
    if not content or not content.strip():
        raise ValidationError("Comment cannot be empty")

    return await CommentRepository(session).create(
        comment_id=generate_id("cmt_"),
        work_item_id=item.work_item_id,
        author_id=actor_id,
        content=content.strip(),
        edited=False,
    )


async def list_comments(session: AsyncSession, actor_id: str, work_item_id: str) -> list[CommentRow]:
    item = await _load(session, work_item_id)
    await require_access(session, item.project_id, actor_id)
    return await CommentRepository(session).list_for_work_item(work_item_id)


async def _load_own_comment(session: AsyncSession, actor_id: str, comment_id: str) -> CommentRow:
    comment = await CommentRepository(session).get(comment_id)
    if comment is None:
        raise NotFoundError("Comment", comment_id)
    actor = await UserRepository(session).get(actor_id)
    if actor is None or not actor.is_active:
        raise AccessDeniedError("Only active users can change comments")
    if comment.author_id != actor_id and not actor.is_admin:
        raise AccessDeniedError("Only the author can change this comment")
    return comment


async def update_comment(session: AsyncSession, actor_id: str, comment_id: str, content: str) -> CommentRow:
    comment = await _load_own_comment(session, actor_id, comment_id)
    if not content or not content.strip():
        raise ValidationError("Comment cannot be empty")
    comment.content = content.strip()
    comment.edited = True
    await session.flush()
    return comment


async def delete_comment(session: AsyncSession, actor_id: str, comment_id: str) -> None:
    comment = await _load_own_comment(session, actor_id, comment_id)
    await CommentRepository(session).delete(comment)


# ── Dependencies ───────────────────────────────────────────────────────────────

async def add_dependency(
    session: AsyncSession,
    actor_id: str,
    predecessor_id: str,
    successor_id: str,
    dependency_type: DependencyType = DependencyType.FINISH_TO_START,
    lag_days: int = 0,
) -> WorkItemDependencyRow:
    predecessor = await _load(session, predecessor_id)
    successor = await _load(session, successor_id)
    await require_access(session, predecessor.project_id, actor_id)
    await require_content_edit_access(session, successor.project_id, actor_id)

    if predecessor_id == successor_id:
        raise ValidationError("A work item cannot depend on itself")
    repo = WorkItemDependencyRepository(session)
    if await repo.exists_between(predecessor_id, successor_id):
        raise ValidationError("These work items are already linked")

    return await repo.create(
        dependency_id=generate_id("dep_"),
        predecessor_id=predecessor_id,
        successor_id=successor_id,
        dependency_type=dependency_type,
        lag_days=lag_days,
    )


async def remove_dependency(session: AsyncSession, actor_id: str, dependency_id: str) -> None:
    repo = WorkItemDependencyRepository(session)
    dependency = await repo.get(dependency_id)
    if dependency is None:
        raise NotFoundError("Dependency", dependency_id)
    successor = await _load(session, dependency.successor_id)
    await require_content_edit_access(session, successor.project_id, actor_id)
    await repo.delete(dependency)


async def list_dependencies(session: AsyncSession, actor_id: str, work_item_id: str) -> list[WorkItemDependencyRow]:
    """Links in which the item is the successor."""
    item = await _load(session, work_item_id)
    await require_access(session, item.project_id, actor_id)
    return await WorkItemDependencyRepository(session).list_for_successor(work_item_id)
