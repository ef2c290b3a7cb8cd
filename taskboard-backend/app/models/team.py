# File: app/models/team.py

"""
Team model.

`members` (the team_members association table) is the authoritative member
list. `User.team_id` mirrors it and is kept in sync by the team service.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.user import User


team_members = Table(
    "team_members",
    Base.metadata,
    Column("team_id", ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Team(TimestampMixin, Base):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    # Soft reference: the creator may later be deleted.
    created_by_id: Mapped[int] = mapped_column(Integer, nullable=False)

    members: Mapped[list["User"]] = relationship(
        "User",
        secondary=team_members,
        lazy="selectin",
        order_by="User.id",
    )
    created_by: Mapped[Optional["User"]] = relationship(
        "User",
        primaryjoin="foreign(Team.created_by_id) == User.id",
        lazy="joined",
        viewonly=True,
    )

    @property
    def member_ids(self) -> set[int]:
        return {m.id for m in self.members}

    def __repr__(self) -> str:
        return f"<Team id={self.id} name={self.name!r}>"
