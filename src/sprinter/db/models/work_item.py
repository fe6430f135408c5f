"""Work item, dependency and comment tables."""

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sprinter.db.base import Base, TimestampMixin, enum_column
from sprinter.db.models.project import ProjectRow
from sprinter.models.enums import DependencyType, Priority, WorkItemStatus, WorkItemType


class WorkItemRow(Base, TimestampMixin):
    __tablename__ = "work_items"
    __table_args__ = (
        UniqueConstraint("project_id", "item_number", name="uq_work_item_number"),
    )

    work_item_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_number: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[WorkItemType] = mapped_column(enum_column(WorkItemType), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[WorkItemStatus] = mapped_column(
        enum_column(WorkItemStatus), nullable=False, default=WorkItemStatus.TO_DO
    )
    priority: Mapped[Priority] = mapped_column(
        enum_column(Priority), nullable=False, default=Priority.MEDIUM
    )
    sprint_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("sprints.sprint_id", ondelete="SET NULL"), nullable=True, index=True
    )
    parent_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("work_items.work_item_id", ondelete="CASCADE"), nullable=True, index=True
    )
    assignee_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True, index=True
    )
    reporter_id: Mapped[str] = mapped_column(String(128), ForeignKey("users.user_id"), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    story_points: Mapped[int | None] = mapped_column(Integer, nullable=True)
    estimated_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    logged_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    progress_pct: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Eager so the item key is available without a lazy load under asyncio
    project: Mapped[ProjectRow] = relationship(lazy="joined")

    @property
    def item_key(self) -> str:
        return f"{self.project.project_key}-{self.item_number}"


class WorkItemDependencyRow(Base, TimestampMixin):
    __tablename__ = "work_item_dependencies"
    __table_args__ = (
        UniqueConstraint("predecessor_id", "successor_id", name="uq_work_item_dependency"),
    )

    dependency_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    predecessor_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("work_items.work_item_id", ondelete="CASCADE"), nullable=False, index=True
    )
    successor_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("work_items.work_item_id", ondelete="CASCADE"), nullable=False, index=True
    )
    dependency_type: Mapped[DependencyType] = mapped_column(
        enum_column(DependencyType), nullable=False, default=DependencyType.FINISH_TO_START
    )
    lag_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class CommentRow(Base, TimestampMixin):
    __tablename__ = "comments"

    comment_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    work_item_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("work_items.work_item_id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id: Mapped[str] = mapped_column(String(128), ForeignKey("users.user_id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    edited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
