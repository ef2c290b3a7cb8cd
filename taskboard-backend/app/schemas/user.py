# File: app/schemas/user.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.enums import Role

MAX_PASSWORD_BYTES = 72


class UserBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr


class UserCreate(UserBase):
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, v: str) -> str:
        # bcrypt only reads the first 72 bytes and refuses longer input
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class UserUpdate(BaseModel):
    """
    Admin-side user edit. Absent fields keep their value.

    `team_id` is special: sending it (even as null) is a membership change,
    so callers check `model_fields_set` rather than the value.
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    team_id: Optional[int] = None


# -----------------------------
# Embedded references
# -----------------------------

class UserBrief(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class UserRef(UserBrief):
    email: EmailStr
    role: Role


class TeamRef(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


# -----------------------------
# Responses
# -----------------------------

class UserSummary(BaseModel):
    """What the dashboard keeps as "the logged-in user"."""

    id: int
    name: str
    email: EmailStr
    role: Role
    team_id: Optional[int] = None

    class Config:
        from_attributes = True


class UserRead(UserSummary):
    team: Optional[TeamRef] = None
    created_at: datetime
    updated_at: datetime
