# File: app/api/deps.py

from collections.abc import Callable, Generator
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import UnauthenticatedError
from app.core.security import TokenClaims
from app.db.session import SessionLocal
from app.models.user import User
from app.services import auth_service
from app.services.access_policy import (
    AccessPolicy,
    Action,
    Principal,
    ResourceKind,
    get_access_policy,
)

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a SQLAlchemy session.

    Usage in route functions:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_policy() -> AccessPolicy:
    return get_access_policy()


def get_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Session credential from the `Authorization: Bearer` header or the auth cookie."""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.auth_cookie_name)


def get_token_claims(
    token: Optional[str] = Depends(get_token),
    db: Session = Depends(get_db),
) -> TokenClaims:
    return auth_service.resolve_token(db, token)


def get_current_principal(
    claims: TokenClaims = Depends(get_token_claims),
    db: Session = Depends(get_db),
) -> Principal:
    user = db.get(User, claims.user_id)
    if user is None:
        raise UnauthenticatedError("Not authorized, user no longer exists")
    return Principal(id=user.id, role=user.role, team_id=user.team_id)


def require(kind: ResourceKind, action: Action) -> Callable[..., Principal]:
    """
    Route-level role gate.

        principal: Principal = Depends(require(ResourceKind.TEAM, Action.CREATE))
    """

    def dependency(
        principal: Principal = Depends(get_current_principal),
        policy: AccessPolicy = Depends(get_policy),
    ) -> Principal:
        policy.enforce(principal, action, kind)
        return principal

    return dependency
