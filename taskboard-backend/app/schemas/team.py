# File: app/schemas/team.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.user import UserBrief, UserRef


class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    members: List[int] = []


class TeamUpdate(BaseModel):
    # members replaces the whole list; omitted or [] empties the team
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    members: Optional[List[int]] = None


class TeamRead(BaseModel):
    id: int
    name: str
    members: List[UserRef]
    created_by: Optional[UserBrief] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
