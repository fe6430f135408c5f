"""String enums for roles, lifecycle states and work-item classification."""

from enum import StrEnum


class SystemRole(StrEnum):
    ADMIN = "ADMIN"
    USER = "USER"


class ProjectRole(StrEnum):
    MANAGER = "MANAGER"
    TEAM_MEMBER = "TEAM_MEMBER"
    OBSERVER = "OBSERVER"

    @property
    def can_edit_content(self) -> bool:
        return self in (ProjectRole.MANAGER, ProjectRole.TEAM_MEMBER)

    @property
    def can_manage_project(self) -> bool:
        return self is ProjectRole.MANAGER


class ProjectStatus(StrEnum):
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class SprintStatus(StrEnum):
    PLANNING = "PLANNING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (SprintStatus.COMPLETED, SprintStatus.CANCELLED)


class SprintAction(StrEnum):
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"


class WorkItemStatus(StrEnum):
    TO_DO = "TO_DO"
    IN_PROGRESS = "IN_PROGRESS"
    IN_REVIEW = "IN_REVIEW"
    DONE = "DONE"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkItemStatus.DONE, WorkItemStatus.CANCELLED)


class WorkItemType(StrEnum):
    TASK = "TASK"
    ISSUE = "ISSUE"
    STORY = "STORY"
    EPIC = "EPIC"
    ARTICLE = "ARTICLE"

    @property
    def is_sprintable(self) -> bool:
        # Epics track through their children; articles are not scheduled work.
        return self in (WorkItemType.TASK, WorkItemType.ISSUE, WorkItemType.STORY)


class Priority(StrEnum):
    LOWEST = "LOWEST"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    HIGHEST = "HIGHEST"
    CRITICAL = "CRITICAL"


class DependencyType(StrEnum):
    FINISH_TO_START = "FINISH_TO_START"
    START_TO_START = "START_TO_START"
    FINISH_TO_FINISH = "FINISH_TO_FINISH"
    START_TO_FINISH = "START_TO_FINISH"
    BLOCKS = "BLOCKS"
