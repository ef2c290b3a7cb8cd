# File: app/models/task.py

"""
Task model.

User and team references are soft: deleting a user or a team leaves its
tasks in place, so the columns carry no database-level foreign key and the
relationships resolve to None once the target is gone.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin
from app.models.enums import TaskPriority, TaskStatus

if TYPE_CHECKING:
    from app.models.team import Team
    from app.models.user import User


def _enum_values(enum_cls):
    return [m.value for m in enum_cls]


class Task(TimestampMixin, Base):
    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    assigned_to_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    priority: Mapped[TaskPriority] = mapped_column(
        Enum(TaskPriority, values_callable=_enum_values, name="task_priority"),
        default=TaskPriority.MEDIUM,
        nullable=False,
    )
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, values_callable=_enum_values, name="task_status"),
        default=TaskStatus.TODO,
        nullable=False,
    )
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_by_id: Mapped[int] = mapped_column(Integer, nullable=False)
    team_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    assigned_to: Mapped[Optional["User"]] = relationship(
        "User",
        primaryjoin="foreign(Task.assigned_to_id) == User.id",
        lazy="joined",
        viewonly=True,
    )
    created_by: Mapped[Optional["User"]] = relationship(
        "User",
        primaryjoin="foreign(Task.created_by_id) == User.id",
        lazy="joined",
        viewonly=True,
    )
    team: Mapped[Optional["Team"]] = relationship(
        "Team",
        primaryjoin="foreign(Task.team_id) == Team.id",
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Task id={self.id} title={self.title!r} status={self.status.value!r}>"
