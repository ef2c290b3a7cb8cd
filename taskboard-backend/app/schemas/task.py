# File: app/schemas/task.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums import TaskPriority, TaskStatus
from app.schemas.user import UserBrief


class TaskBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    due_date: datetime


class TaskCreate(TaskBase):
    assigned_to: int
    team_id: int


class TaskUpdate(BaseModel):
    """Partial update: absent or null fields keep the task's current value."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    assigned_to: Optional[int] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None
    team_id: Optional[int] = None


class TaskAssignee(UserBrief):
    email: str


class TaskRead(TaskBase):
    id: int
    assigned_to_id: int
    assigned_to: Optional[TaskAssignee] = None
    created_by_id: int
    created_by: Optional[UserBrief] = None
    team_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
