# File: app/services/team_service.py

"""
Team membership coordination.

A team's member list (team_members) is the source of truth. Each user's
`team_id` is a back-reference that must always point at the one team whose
list contains that user. Every write that touches membership goes through
this module so both sides move together:

  - create_team / update_team / delete_team run the team write and the
    back-reference updates in one transaction
  - move_user is the single-user variant used by user administration
  - reconcile_memberships re-derives every back-reference from the member
    lists, for drift left by older data or out-of-band writes
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.team import Team, team_members
from app.models.user import User
from app.services.access_policy import Principal

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    relinked: List[int] = field(default_factory=list)
    cleared: List[int] = field(default_factory=list)
    # (user_id, team_id) pairs removed from a duplicate member list
    dropped: List[tuple[int, int]] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.relinked or self.cleared or self.dropped)


# -----------------------------
# Helpers
# -----------------------------

def get_team(db: Session, team_id: int) -> Team:
    team = db.get(Team, team_id)
    if team is None:
        raise NotFoundError("Team not found")
    return team


def _name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    stmt = select(Team.id).where(Team.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Team.id != exclude_id)
    return db.scalar(stmt) is not None


def _load_users(db: Session, user_ids: Iterable[int]) -> List[User]:
    ids = list(dict.fromkeys(user_ids))
    if not ids:
        return []
    users = db.scalars(select(User).where(User.id.in_(ids)).order_by(User.id)).all()
    missing = set(ids) - {u.id for u in users}
    if missing:
        raise ValidationError(f"Unknown user id(s): {', '.join(str(i) for i in sorted(missing))}")
    return list(users)


def _set_team_reference(db: Session, user_ids: Iterable[int], team_id: Optional[int]) -> None:
    ids = list(user_ids)
    if ids:
        db.execute(update(User).where(User.id.in_(ids)).values(team_id=team_id))


def _detach_from_other_teams(db: Session, team: Team, user_ids: Iterable[int]) -> None:
    """Take `user_ids` off every member list other than `team`'s."""
    ids = set(user_ids)
    if not ids:
        return
    others = db.scalars(
        select(Team)
        .join(team_members, team_members.c.team_id == Team.id)
        .where(team_members.c.user_id.in_(sorted(ids)), Team.id != team.id)
        .distinct()
    ).all()
    for other in others:
        moved = sorted(other.member_ids & ids)
        other.members = [m for m in other.members if m.id not in ids]
        other.updated_at = datetime.now(timezone.utc)
        logger.info("Moving users %s off team id=%s", moved, other.id)


def _commit(db: Session, what: str, conflict: str = "Team already exists") -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(conflict) from exc
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Rolled back %s; membership left unchanged", what)
        raise


# -----------------------------
# Team operations
# -----------------------------

def list_teams(db: Session) -> List[Team]:
    return list(db.scalars(select(Team).order_by(Team.name)).all())


def get_my_team(db: Session, principal: Principal) -> Team:
    if principal.team_id is None:
        raise NotFoundError("You are not assigned to any team")
    team = db.get(Team, principal.team_id)
    if team is None:
        raise NotFoundError("Team not found")
    return team


def create_team(db: Session, *, name: str, member_ids: Iterable[int], creator_id: int) -> Team:
    if _name_taken(db, name):
        raise ConflictError("Team already exists")

    members = _load_users(db, member_ids)
    team = Team(name=name, created_by_id=creator_id, members=members)
    db.add(team)
    try:
        db.flush()
    except IntegrityError as exc:
        # lost a race on the unique name
        db.rollback()
        raise ConflictError("Team already exists") from exc

    member_id_list = [u.id for u in members]
    _detach_from_other_teams(db, team, member_id_list)
    _set_team_reference(db, member_id_list, team.id)
    _commit(db, f"create of team {name!r}")

    db.refresh(team)
    logger.info("Created team id=%s name=%r members=%s", team.id, team.name, member_id_list)
    return team


def update_team(
    db: Session,
    team_id: int,
    *,
    name: Optional[str] = None,
    member_ids: Optional[Iterable[int]] = None,
) -> Team:
    """
    Rename a team and/or replace its member list.

    The member list is replaced wholesale: `member_ids=None` or `[]` leaves
    the team empty. Users dropped from the list lose their back-reference,
    users added gain it, users on both sides are not touched.
    """
    team = get_team(db, team_id)
    if name and name != team.name and _name_taken(db, name, exclude_id=team.id):
        raise ConflictError("Team already exists")

    requested = _load_users(db, member_ids or [])
    current_ids = team.member_ids
    requested_ids = {u.id for u in requested}
    removed = current_ids - requested_ids
    added = requested_ids - current_ids

    _set_team_reference(db, removed, None)
    _detach_from_other_teams(db, team, added)
    _set_team_reference(db, added, team.id)

    if name:
        team.name = name
    team.members = requested
    team.updated_at = datetime.now(timezone.utc)
    _commit(db, f"update of team id={team_id}")

    db.refresh(team)
    logger.info(
        "Updated team id=%s added=%s removed=%s", team.id, sorted(added), sorted(removed)
    )
    return team


def delete_team(db: Session, team_id: int) -> None:
    team = get_team(db, team_id)
    member_ids = team.member_ids

    # References are cleared before the team row goes away. Users pointing
    # at the team without being listed (drift) are cleared too.
    db.execute(
        update(User)
        .where(or_(User.id.in_(sorted(member_ids)), User.team_id == team.id))
        .values(team_id=None)
    )
    db.delete(team)
    _commit(db, f"delete of team id={team_id}", conflict="Team is still referenced")
    logger.info("Deleted team id=%s former members=%s", team_id, sorted(member_ids))


# -----------------------------
# Single-user membership change
# -----------------------------

def move_user(db: Session, user: User, team_id: Optional[int]) -> None:
    """
    Put `user` on team `team_id` (or on no team for None).

    Flushes but does not commit; the caller owns the transaction.
    """
    target = None
    if team_id is not None:
        target = db.get(Team, team_id)
        if target is None:
            raise ValidationError("Team not found")

    listed_on = db.scalars(
        select(Team)
        .join(team_members, team_members.c.team_id == Team.id)
        .where(team_members.c.user_id == user.id)
    ).all()
    for team in listed_on:
        if target is not None and team.id == target.id:
            continue
        team.members = [m for m in team.members if m.id != user.id]
        team.updated_at = datetime.now(timezone.utc)

    if target is not None and user.id not in target.member_ids:
        target.members.append(user)
        target.updated_at = datetime.now(timezone.utc)

    user.team_id = target.id if target is not None else None
    db.flush()
    logger.info("Moved user id=%s to team id=%s", user.id, user.team_id)


# -----------------------------
# Repair
# -----------------------------

def reconcile_memberships(db: Session) -> ReconcileReport:
    """
    Recompute every User.team_id from the team member lists.

    A user listed on several teams stays on the most recently updated one
    and is dropped from the others.
    """
    report = ReconcileReport()
    owner: dict[int, int] = {}

    teams = db.scalars(select(Team).order_by(Team.updated_at.desc(), Team.id.desc())).all()
    for team in teams:
        keep = []
        for member in team.members:
            if member.id in owner:
                report.dropped.append((member.id, team.id))
                logger.warning(
                    "User id=%s listed on teams %s and %s; keeping %s",
                    member.id, owner[member.id], team.id, owner[member.id],
                )
            else:
                owner[member.id] = team.id
                keep.append(member)
        if len(keep) != len(team.members):
            team.members = keep

    for user in db.scalars(select(User).order_by(User.id)).all():
        expected = owner.get(user.id)
        if user.team_id == expected:
            continue
        logger.warning(
            "User id=%s points at team %s but is listed on %s; repairing",
            user.id, user.team_id, expected,
        )
        if expected is None:
            report.cleared.append(user.id)
        else:
            report.relinked.append(user.id)
        user.team_id = expected

    if report.changed:
        db.commit()
    return report
