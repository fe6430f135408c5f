"""Transition tables for sprints and work items.

Sprints follow a strict state machine; every allowed (status, action) pair
is listed in ``SPRINT_TRANSITIONS`` and anything absent is rejected.

Work items are deliberately permissive: any status may follow any other.
Only the completion timestamp is tied to the target status.
"""

from datetime import datetime

from sprinter.errors.exceptions import ValidationError
from sprinter.models.enums import SprintAction, SprintStatus, WorkItemStatus

SPRINT_TRANSITIONS: dict[tuple[SprintStatus, SprintAction], SprintStatus] = {
    (SprintStatus.PLANNING, SprintAction.START): SprintStatus.ACTIVE,
    (SprintStatus.ACTIVE, SprintAction.COMPLETE): SprintStatus.COMPLETED,
    (SprintStatus.PLANNING, SprintAction.CANCEL): SprintStatus.CANCELLED,
    (SprintStatus.ACTIVE, SprintAction.CANCEL): SprintStatus.CANCELLED,
}

_REJECTIONS = {
    SprintAction.START: "Only a sprint in planning can be started",
    SprintAction.COMPLETE: "Only an active sprint can be completed",
    SprintAction.CANCEL: "Sprint is already closed",
}


def next_sprint_status(current: SprintStatus, action: SprintAction) -> SprintStatus:
    """Look up the target status for ``action``; raise ValidationError when not allowed."""
    try:
        return SPRINT_TRANSITIONS[(current, action)]
    except KeyError:
        raise ValidationError(
            _REJECTIONS[action],
            details={"status": str(current), "action": str(action)},
        ) from None


def completion_timestamp(
    new_status: WorkItemStatus,
    current: datetime | None,
    now: datetime,
) -> datetime | None:
    """Completion timestamp a work item carries after moving to ``new_status``.

    DONE stamps ``now`` unless already stamped, CANCELLED keeps whatever is
    there, and every non-terminal status clears it.
    """
    if new_status == WorkItemStatus.DONE:
        return current or now
    if new_status == WorkItemStatus.CANCELLED:
        return current
    return None
