# File: app/services/task_service.py

import logging
from typing import Any, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.models.task import Task
from app.models.team import Team
from app.models.user import User
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.access_policy import AccessPolicy, Action, Principal, ResourceKind

logger = logging.getLogger(__name__)

# patch field -> model attribute
_FIELD_COLUMNS = {
    "title": "title",
    "description": "description",
    "assigned_to": "assigned_to_id",
    "priority": "priority",
    "status": "status",
    "due_date": "due_date",
    "team_id": "team_id",
}


def _check_references(db: Session, *, assigned_to: Any = None, team_id: Any = None) -> None:
    if assigned_to is not None and db.get(User, assigned_to) is None:
        raise ValidationError("Assignee not found")
    if team_id is not None and db.get(Team, team_id) is None:
        raise ValidationError("Team not found")


def get_task(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return task


def list_tasks(db: Session, principal: Principal, policy: AccessPolicy) -> List[Task]:
    stmt = (
        select(Task)
        .where(policy.task_visibility(principal))
        .order_by(Task.due_date, Task.id)
    )
    return list(db.scalars(stmt).unique().all())


def create_task(db: Session, payload: TaskCreate, creator: Principal, policy: AccessPolicy) -> Task:
    policy.enforce(creator, Action.CREATE, ResourceKind.TASK, payload.team_id)
    _check_references(db, assigned_to=payload.assigned_to, team_id=payload.team_id)

    task = Task(
        title=payload.title,
        description=payload.description,
        assigned_to_id=payload.assigned_to,
        priority=payload.priority,
        status=payload.status,
        due_date=payload.due_date,
        team_id=payload.team_id,
        created_by_id=creator.id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("User id=%s created task id=%s for team id=%s", creator.id, task.id, task.team_id)
    return task


def update_task(
    db: Session,
    task_id: int,
    patch: TaskUpdate,
    principal: Principal,
    policy: AccessPolicy,
) -> Task:
    """
    Apply `patch` to a task within what the caller's role may change.

    Fields the role may not change are dropped silently, and absent or null
    fields keep their current value, so a patch can never clear a field.
    """
    task = get_task(db, task_id)
    policy.enforce(principal, Action.UPDATE, ResourceKind.TASK, task)

    allowed = policy.mutable_task_fields(principal)
    changes = {
        name: value
        for name, value in patch.model_dump(exclude_unset=True).items()
        if name in allowed and value is not None
    }
    ignored = set(patch.model_fields_set) - set(changes)
    if ignored:
        logger.debug("Ignoring task fields %s from user id=%s", sorted(ignored), principal.id)

    if "team_id" in changes and changes["team_id"] != task.team_id:
        # moving a task places it in the destination team, same rules as creating it there
        policy.enforce(principal, Action.CREATE, ResourceKind.TASK, changes["team_id"])

    _check_references(db, assigned_to=changes.get("assigned_to"), team_id=changes.get("team_id"))

    for name, value in changes.items():
        setattr(task, _FIELD_COLUMNS[name], value)

    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, task_id: int, principal: Principal, policy: AccessPolicy) -> None:
    task = get_task(db, task_id)
    policy.enforce(principal, Action.DELETE, ResourceKind.TASK, task)
    db.delete(task)
    db.commit()
    logger.info("User id=%s deleted task id=%s", principal.id, task_id)
