"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from sprinter.db.models.user import UserRow
from sprinter.db.models.project import ProjectRow, ProjectMemberRow
from sprinter.db.models.sprint import SprintRow
from sprinter.db.models.work_item import CommentRow, WorkItemDependencyRow, WorkItemRow

__all__ = [
    "UserRow",
    "ProjectRow",
    "ProjectMemberRow",
    "SprintRow",
    "WorkItemRow",
    "WorkItemDependencyRow",
    "CommentRow",
]
