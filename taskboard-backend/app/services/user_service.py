# File: app/services/user_service.py

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.errors import ConflictError, NotFoundError
from app.models.user import User
from app.schemas.user import UserUpdate
from app.services import team_service

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def list_users(db: Session) -> List[User]:
    stmt = select(User).options(selectinload(User.team)).order_by(User.id)
    return list(db.scalars(stmt).all())


def _email_taken(db: Session, email: str, user_id: int) -> bool:
    return db.scalar(select(User.id).where(User.email == email, User.id != user_id)) is not None


def update_user(db: Session, user_id: int, patch: UserUpdate) -> User:
    """
    Admin edit of a user. The password is never touched here.

    A `team_id` in the patch, null included, moves the user between teams
    through the team service so the member lists follow.
    """
    user = get_user(db, user_id)

    if patch.email and patch.email != user.email:
        if _email_taken(db, patch.email, user.id):
            raise ConflictError("Email already in use")
        user.email = patch.email
    if patch.name:
        user.name = patch.name
    if patch.role:
        user.role = patch.role

    try:
        if "team_id" in patch.model_fields_set and patch.team_id != user.team_id:
            team_service.move_user(db, user, patch.team_id)
        db.commit()
    except IntegrityError as exc:
        # another request took the email between the check and the commit
        db.rollback()
        raise ConflictError("Email already in use") from exc
    db.refresh(user)
    logger.info("Updated user id=%s", user.id)
    return user


def delete_user(db: Session, user_id: int) -> None:
    user = get_user(db, user_id)
    # drop from every member list first so no team keeps a dangling member
    team_service.move_user(db, user, None)
    db.delete(user)
    db.commit()
    logger.info("Deleted user id=%s", user_id)
