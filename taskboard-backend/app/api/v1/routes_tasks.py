# File: app/api/v1/routes_tasks.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_principal, get_db, get_policy, require
from app.schemas.auth import Message
from app.schemas.task import TaskCreate, TaskRead, TaskUpdate
from app.services import task_service
from app.services.access_policy import AccessPolicy, Action, Principal, ResourceKind

router = APIRouter()


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task (Admin, Team Lead)",
)
def create_task(
    payload: TaskCreate,
    principal: Principal = Depends(require(ResourceKind.TASK, Action.CREATE)),
    policy: AccessPolicy = Depends(get_policy),
    db: Session = Depends(get_db),
):
    return task_service.create_task(db, payload, principal, policy)


@router.get("", response_model=list[TaskRead], summary="List the tasks visible to the caller")
def list_tasks(
    principal: Principal = Depends(require(ResourceKind.TASK, Action.LIST)),
    policy: AccessPolicy = Depends(get_policy),
    db: Session = Depends(get_db),
):
    """
    Admins see every task, Team Leads their team's tasks (none without a
    team), Team Members the tasks assigned to them.
    """
    return task_service.list_tasks(db, principal, policy)


@router.put("/{task_id}", response_model=TaskRead, summary="Update a task")
def update_task(
    task_id: int,
    payload: TaskUpdate,
    principal: Principal = Depends(get_current_principal),
    policy: AccessPolicy = Depends(get_policy),
    db: Session = Depends(get_db),
):
    """
    Team Members may only change the status of tasks assigned to them; other
    fields in their payload are ignored.
    """
    return task_service.update_task(db, task_id, payload, principal, policy)


@router.delete("/{task_id}", response_model=Message, summary="Delete a task (Admin, Team Lead)")
def delete_task(
    task_id: int,
    principal: Principal = Depends(require(ResourceKind.TASK, Action.DELETE)),
    policy: AccessPolicy = Depends(get_policy),
    db: Session = Depends(get_db),
):
    task_service.delete_task(db, task_id, principal, policy)
    return Message(message="Task removed")
