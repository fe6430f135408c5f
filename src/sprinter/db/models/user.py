"""User table."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from sprinter.db.base import Base, TimestampMixin, enum_column
from sprinter.models.enums import SystemRole


class UserRow(Base, TimestampMixin):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    system_role: Mapped[SystemRole] = mapped_column(
        enum_column(SystemRole), nullable=False, default=SystemRole.USER
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def is_admin(self) -> bool:
        return self.system_role == SystemRole.ADMIN
