# File: app/models/user.py

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin
from app.models.enums import Role

if TYPE_CHECKING:
    from app.models.team import Team


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, values_callable=lambda e: [m.value for m in e], name="user_role"),
        default=Role.TEAM_MEMBER,
        nullable=False,
    )

    # Back-reference to the team whose member list holds this user.
    # Written only by app.services.team_service.
    team_id: Mapped[int | None] = mapped_column(
        ForeignKey("teams.id"),
        nullable=True,
        index=True,
    )

    # Set to 1 on the account created while the table was empty. The unique
    # constraint makes "first user becomes Admin" race-free.
    bootstrap_slot: Mapped[int | None] = mapped_column(Integer, unique=True, nullable=True)

    team: Mapped[Optional["Team"]] = relationship("Team", foreign_keys=[team_id])

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role.value!r}>"
