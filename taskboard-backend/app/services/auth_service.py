# File: app/services/auth_service.py

"""
Authentication service.

  - Registration (first account becomes Admin)
  - Password verification
  - Token issuance and revocation
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, UnauthenticatedError
from app.core.security import (
    TokenClaims,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.models.enums import Role
from app.models.revoked_token import RevokedToken
from app.models.user import User

logger = logging.getLogger(__name__)

BOOTSTRAP_SLOT = 1


def _email_taken(db: Session, email: str) -> bool:
    return db.scalar(select(User.id).where(User.email == email)) is not None


def _no_accounts_yet(db: Session) -> bool:
    return db.scalar(select(func.count(User.id))) == 0


def register_user(db: Session, *, name: str, email: str, password: str) -> User:
    """
    Create an account. The account created while no users exist is Admin,
    all later ones are Team Members.

    The Admin grant claims the unique `bootstrap_slot`; if two first
    registrations race, the loser's insert violates the constraint and it is
    retried as a Team Member.
    """
    if _email_taken(db, email):
        raise ConflictError("User already exists")

    password_hash = hash_password(password)
    is_first_account = _no_accounts_yet(db)

    user = _insert_user(db, name=name, email=email, password_hash=password_hash, first=is_first_account)
    if user is None and is_first_account:
        user = _insert_user(db, name=name, email=email, password_hash=password_hash, first=False)
    if user is None:
        raise ConflictError("User already exists")

    logger.info("Registered user id=%s role=%s", user.id, user.role.value)
    return user


def _insert_user(db: Session, *, name: str, email: str, password_hash: str, first: bool) -> User | None:
    user = User(
        name=name,
        email=email,
        password_hash=password_hash,
        role=Role.ADMIN if first else Role.TEAM_MEMBER,
        bootstrap_slot=BOOTSTRAP_SLOT if first else None,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return None
    db.refresh(user)
    return user


def authenticate_user(db: Session, *, email: str, password: str) -> User:
    """
    Look up a user by email and verify the password.

    Unknown email and wrong password raise the same error.
    """
    user = db.scalar(select(User).where(User.email == email))
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", email)
        raise UnauthenticatedError("Invalid email or password")
    return user


def issue_token(user: User) -> str:
    return create_access_token(user.id)


def is_revoked(db: Session, jti: str) -> bool:
    return db.get(RevokedToken, jti) is not None


def resolve_token(db: Session, token: str | None) -> TokenClaims:
    if not token:
        raise UnauthenticatedError("Not authorized, no token")
    claims = decode_access_token(token)
    if is_revoked(db, claims.jti):
        raise UnauthenticatedError("Not authorized, token revoked")
    return claims


def revoke_token(db: Session, claims: TokenClaims) -> None:
    if is_revoked(db, claims.jti):
        return
    db.add(RevokedToken(jti=claims.jti, expires_at=claims.expires_at))
    db.commit()
    logger.info("Revoked token for user id=%s", claims.user_id)


def purge_expired_tokens(db: Session) -> int:
    """Drop revocation records whose tokens have expired anyway."""
    expired = db.scalars(
        select(RevokedToken).where(RevokedToken.expires_at < datetime.now(timezone.utc))
    ).all()
    for row in expired:
        db.delete(row)
    db.commit()
    return len(expired)


def get_profile(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
