# File: app/api/v1/routes_auth.py

"""
Auth API routes.

The session credential is a JWT returned in the login body and also set as
an httponly cookie, so both the dashboard (cookie) and API clients
(Authorization: Bearer) can use it.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_token, get_token_claims
from app.core.config import settings
from app.core.errors import UnauthenticatedError
from app.core.security import TokenClaims, decode_access_token
from app.schemas.auth import LoginRequest, LoginResponse, Message, RegisterRequest
from app.schemas.user import UserSummary
from app.services import auth_service

router = APIRouter()


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="strict",
        max_age=settings.access_token_expire_minutes * 60,
    )


@router.post(
    "/register",
    response_model=LoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
def register(payload: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    user = auth_service.register_user(
        db, name=payload.name, email=payload.email, password=payload.password
    )
    token = auth_service.issue_token(user)
    _set_auth_cookie(response, token)
    return LoginResponse(
        **UserSummary.model_validate(user).model_dump(), access_token=token
    )


@router.post("/login", response_model=LoginResponse, summary="Log in and get a session token")
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = auth_service.authenticate_user(db, email=payload.email, password=payload.password)
    token = auth_service.issue_token(user)
    _set_auth_cookie(response, token)
    return LoginResponse(
        **UserSummary.model_validate(user).model_dump(), access_token=token
    )


@router.post("/logout", response_model=Message, summary="Log out and revoke the session token")
def logout(
    response: Response,
    token: Optional[str] = Depends(get_token),
    db: Session = Depends(get_db),
):
    """
    Revoke the caller's token if one was sent and clear the cookie.

    Logging out without a (valid) token still succeeds.
    """
    if token:
        try:
            claims = decode_access_token(token)
        except UnauthenticatedError:
            claims = None
        if claims is not None:
            auth_service.revoke_token(db, claims)
    response.delete_cookie(settings.auth_cookie_name)
    return Message(message="Logged out successfully")


@router.get("/profile", response_model=UserSummary, summary="Current user's profile")
def profile(
    claims: TokenClaims = Depends(get_token_claims),
    db: Session = Depends(get_db),
):
    return auth_service.get_profile(db, claims.user_id)
