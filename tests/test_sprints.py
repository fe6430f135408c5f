"""Tests for the sprint lifecycle.

Covers:
- the transition table (start / complete / cancel)
- at most one active sprint per project
- completion moves unfinished items to the backlog or a target sprint
- cancellation returns every item to the backlog
- sprint assignment rules (project, terminal sprints, item types)
"""

import pytest

from sprinter.errors.exceptions import AccessDeniedError, ValidationError
from sprinter.models.enums import (
    ProjectRole,
    SprintAction,
    SprintStatus,
    WorkItemStatus,
    WorkItemType,
)
from sprinter.services import members, projects, sprints, work_items
from sprinter.services.workflow import SPRINT_TRANSITIONS, next_sprint_status


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "current, action, expected",
    [
        (SprintStatus.PLANNING, SprintAction.START, SprintStatus.ACTIVE),
        (SprintStatus.ACTIVE, SprintAction.COMPLETE, SprintStatus.COMPLETED),
        (SprintStatus.PLANNING, SprintAction.CANCEL, SprintStatus.CANCELLED),
        (SprintStatus.ACTIVE, SprintAction.CANCEL, SprintStatus.CANCELLED),
    ],
)
def test_allowed_transitions(current, action, expected):
    assert next_sprint_status(current, action) == expected


def test_every_other_transition_rejected():
    for current in SprintStatus:
        for action in SprintAction:
            if (current, action) in SPRINT_TRANSITIONS:
                continue
            with pytest.raises(ValidationError):
                next_sprint_status(current, action)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def board(db_session, make_user):
    """Project BRD managed by alice, bob is a team member."""
    alice = await make_user("alice")
    bob = await make_user("bob")
    project = await projects.create_project(db_session, alice, "BRD", "Board")
    await members.add_member(db_session, alice, project.project_id, bob, ProjectRole.TEAM_MEMBER)
    await db_session.commit()
    return alice, bob, project.project_id


async def _task(db_session, actor, project_id, title, sprint_id=None, item_type=WorkItemType.TASK):
    return await work_items.create_work_item(
        db_session, actor, project_id, item_type, title, sprint_id=sprint_id
    )


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_sprint_starts_in_planning(db_session, board):
    alice, _, project_id = board
    sprint = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1", goal="Ship it")
    assert sprint.status == SprintStatus.PLANNING
    assert sprint.goal == "Ship it"


@pytest.mark.asyncio
async def test_only_manager_runs_sprints(db_session, board):
    alice, bob, project_id = board
    with pytest.raises(AccessDeniedError):
        await sprints.create_sprint(db_session, bob, project_id, "Sprint 1")
    sprint = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1")
    with pytest.raises(AccessDeniedError):
        await sprints.start_sprint(db_session, bob, sprint.sprint_id)


@pytest.mark.asyncio
async def test_start_sets_start_date(db_session, board):
    alice, _, project_id = board
    sprint = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1")
    started = await sprints.start_sprint(db_session, alice, sprint.sprint_id)
    assert started.status == SprintStatus.ACTIVE
    assert started.start_date is not None


@pytest.mark.asyncio
async def test_single_active_sprint_per_project(db_session, board):
    alice, _, project_id = board
    first = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1")
    second = await sprints.create_sprint(db_session, alice, project_id, "Sprint 2")
    await sprints.start_sprint(db_session, alice, first.sprint_id)

    with pytest.raises(ValidationError, match="already active"):
        await sprints.start_sprint(db_session, alice, second.sprint_id)
    assert second.status == SprintStatus.PLANNING

    await sprints.complete_sprint(db_session, alice, first.sprint_id)
    await sprints.start_sprint(db_session, alice, second.sprint_id)
    active = await sprints.get_active_sprint(db_session, alice, project_id)
    assert active.sprint_id == second.sprint_id


@pytest.mark.asyncio
async def test_active_sprints_in_different_projects(db_session, board):
    alice, _, project_id = board
    other = await projects.create_project(db_session, alice, "OTHER", "Other")
    a = await sprints.create_sprint(db_session, alice, project_id, "A")
    b = await sprints.create_sprint(db_session, alice, other.project_id, "B")
    await sprints.start_sprint(db_session, alice, a.sprint_id)
    await sprints.start_sprint(db_session, alice, b.sprint_id)
    assert a.status == b.status == SprintStatus.ACTIVE


@pytest.mark.asyncio
async def test_complete_moves_unfinished_items_to_backlog(db_session, board):
    alice, bob, project_id = board
    sprint = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1")
    done = await _task(db_session, bob, project_id, "Done", sprint.sprint_id)
    todo_a = await _task(db_session, bob, project_id, "Todo A", sprint.sprint_id)
    todo_b = await _task(db_session, bob, project_id, "Todo B", sprint.sprint_id)
    await work_items.change_status(db_session, bob, done.work_item_id, WorkItemStatus.DONE)
    await sprints.start_sprint(db_session, alice, sprint.sprint_id)

    completed = await sprints.complete_sprint(db_session, alice, sprint.sprint_id, None)
    await db_session.commit()

    assert completed.status == SprintStatus.COMPLETED
    assert completed.completed_at is not None
    assert done.sprint_id == sprint.sprint_id
    assert todo_a.sprint_id is None and todo_b.sprint_id is None
    backlog = await work_items.list_backlog(db_session, alice, project_id)
    assert {i.work_item_id for i in backlog} == {todo_a.work_item_id, todo_b.work_item_id}


@pytest.mark.asyncio
async def test_complete_moves_unfinished_items_to_target(db_session, board):
    alice, bob, project_id = board
    current = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1")
    upcoming = await sprints.create_sprint(db_session, alice, project_id, "Sprint 2")
    cancelled = await _task(db_session, bob, project_id, "Dropped", current.sprint_id)
    review = await _task(db_session, bob, project_id, "In review", current.sprint_id)
    await work_items.change_status(db_session, bob, cancelled.work_item_id, WorkItemStatus.CANCELLED)
    await work_items.change_status(db_session, bob, review.work_item_id, WorkItemStatus.IN_REVIEW)
    await sprints.start_sprint(db_session, alice, current.sprint_id)

    await sprints.complete_sprint(db_session, alice, current.sprint_id, upcoming.sprint_id)

    assert cancelled.sprint_id == current.sprint_id
    assert review.sprint_id == upcoming.sprint_id


@pytest.mark.asyncio
async def test_complete_rejects_bad_targets(db_session, board):
    alice, _, project_id = board
    other = await projects.create_project(db_session, alice, "OTHER", "Other")
    foreign = await sprints.create_sprint(db_session, alice, other.project_id, "Foreign")
    closed = await sprints.create_sprint(db_session, alice, project_id, "Closed")
    await sprints.cancel_sprint(db_session, alice, closed.sprint_id)
    sprint = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1")
    await sprints.start_sprint(db_session, alice, sprint.sprint_id)

    for target in (sprint.sprint_id, foreign.sprint_id, closed.sprint_id):
        with pytest.raises(ValidationError):
            await sprints.complete_sprint(db_session, alice, sprint.sprint_id, target)
    assert sprint.status == SprintStatus.ACTIVE


@pytest.mark.asyncio
async def test_complete_requires_active_sprint(db_session, board):
    alice, _, project_id = board
    sprint = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1")
    with pytest.raises(ValidationError, match="Only an active sprint"):
        await sprints.complete_sprint(db_session, alice, sprint.sprint_id)


@pytest.mark.asyncio
async def test_cancel_unlinks_every_item(db_session, board):
    alice, bob, project_id = board
    sprint = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1")
    done = await _task(db_session, bob, project_id, "Done", sprint.sprint_id)
    todo = await _task(db_session, bob, project_id, "Todo", sprint.sprint_id)
    await work_items.change_status(db_session, bob, done.work_item_id, WorkItemStatus.DONE)
    await sprints.start_sprint(db_session, alice, sprint.sprint_id)

    cancelled = await sprints.cancel_sprint(db_session, alice, sprint.sprint_id)

    assert cancelled.status == SprintStatus.CANCELLED
    assert done.sprint_id is None and todo.sprint_id is None
    with pytest.raises(ValidationError, match="already closed"):
        await sprints.cancel_sprint(db_session, alice, sprint.sprint_id)


@pytest.mark.asyncio
async def test_terminal_sprint_cannot_be_modified(db_session, board):
    alice, _, project_id = board
    sprint = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1")
    await sprints.cancel_sprint(db_session, alice, sprint.sprint_id)
    with pytest.raises(ValidationError):
        await sprints.update_sprint(db_session, alice, sprint.sprint_id, name="Renamed")


@pytest.mark.asyncio
async def test_update_sprint_rejects_inverted_dates(db_session, board):
    from datetime import date

    alice, _, project_id = board
    sprint = await sprints.create_sprint(
        db_session, alice, project_id, "Sprint 1", start_date=date(2024, 3, 4)
    )
    with pytest.raises(ValidationError):
        await sprints.update_sprint(db_session, alice, sprint.sprint_id, end_date=date(2024, 3, 1))
    updated = await sprints.update_sprint(db_session, alice, sprint.sprint_id, end_date=date(2024, 3, 15))
    assert updated.end_date == date(2024, 3, 15)


# ---------------------------------------------------------------------------
# Assignment
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("item_type", [WorkItemType.EPIC, WorkItemType.ARTICLE])
async def test_epics_and_articles_are_not_sprintable(db_session, board, item_type):
    alice, bob, project_id = board
    sprint = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1")
    item = await _task(db_session, bob, project_id, "Big thing", item_type=item_type)

    with pytest.raises(ValidationError):
        await sprints.add_work_item_to_sprint(db_session, bob, sprint.sprint_id, item.work_item_id)
    with pytest.raises(ValidationError):
        await _task(db_session, bob, project_id, "Direct", sprint.sprint_id, item_type=item_type)


@pytest.mark.asyncio
async def test_add_and_remove_sprint_item(db_session, board):
    alice, bob, project_id = board
    sprint = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1")
    story = await _task(db_session, bob, project_id, "Story", item_type=WorkItemType.STORY)

    await sprints.add_work_item_to_sprint(db_session, bob, sprint.sprint_id, story.work_item_id)
    assert [i.work_item_id for i in await work_items.list_sprint_items(db_session, bob, sprint.sprint_id)] == [
        story.work_item_id
    ]

    await sprints.remove_work_item_from_sprint(db_session, bob, story.work_item_id)
    assert story.sprint_id is None


@pytest.mark.asyncio
async def test_cannot_add_to_sprint_of_other_project(db_session, board):
    alice, bob, project_id = board
    other = await projects.create_project(db_session, alice, "OTHER", "Other")
    foreign = await sprints.create_sprint(db_session, alice, other.project_id, "Foreign")
    item = await _task(db_session, bob, project_id, "Task")
    with pytest.raises(ValidationError):
        await sprints.add_work_item_to_sprint(db_session, alice, foreign.sprint_id, item.work_item_id)


@pytest.mark.asyncio
async def test_cannot_add_to_closed_sprint(db_session, board):
    alice, bob, project_id = board
    sprint = await sprints.create_sprint(db_session, alice, project_id, "Sprint 1")
    await sprints.cancel_sprint(db_session, alice, sprint.sprint_id)
    item = await _task(db_session, bob, project_id, "Task")
    with pytest.raises(ValidationError):
        await sprints.add_work_item_to_sprint(db_session, bob, sprint.sprint_id, item.work_item_id)
