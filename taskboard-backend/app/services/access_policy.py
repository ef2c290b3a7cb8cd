# File: app/services/access_policy.py

"""
Role-scoped access rules.

Two layers:

  - ROLE_GRANTS: which roles may attempt an action on a resource kind at
    all (the route-level gate).
  - AccessPolicy.authorize(): the gate plus the per-resource checks
    (a Team Member only touches tasks assigned to them, "my team" needs a
    team, the optional team scoping of Team Leads).

List reads are filtered by `task_visibility()`, which returns a SQL
predicate so the filtering happens in the query.
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, FrozenSet, Optional

from sqlalchemy import false, true
from sqlalchemy.sql.elements import ColumnElement

from app.core.config import LeadTaskScope, settings
from app.core.errors import AppError, ForbiddenError, NotFoundError, UnauthenticatedError
from app.models.enums import Role
from app.models.task import Task


class ResourceKind(str, Enum):
    TASK = "task"
    TEAM = "team"
    USER = "user"


class Action(str, Enum):
    CREATE = "create"
    LIST = "list"
    LIST_OWN = "list_own"
    UPDATE = "update"
    DELETE = "delete"


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


_DENY_ERRORS: dict[DenyReason, type[AppError]] = {
    DenyReason.UNAUTHENTICATED: UnauthenticatedError,
    DenyReason.FORBIDDEN: ForbiddenError,
    DenyReason.NOT_FOUND: NotFoundError,
}


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as resolved from the session token."""

    id: int
    role: Role
    team_id: Optional[int] = None


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None
    message: str = ""

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, reason: DenyReason, message: str) -> "Decision":
        return cls(False, reason, message)

    def raise_for_deny(self) -> None:
        if not self.allowed:
            raise _DENY_ERRORS[self.reason](self.message)


_ALL_ROLES = frozenset(Role)
_MANAGERS = frozenset({Role.ADMIN, Role.TEAM_LEAD})
_ADMIN_ONLY = frozenset({Role.ADMIN})

ROLE_GRANTS: dict[tuple[ResourceKind, Action], FrozenSet[Role]] = {
    (ResourceKind.TASK, Action.CREATE): _MANAGERS,
    (ResourceKind.TASK, Action.LIST): _ALL_ROLES,
    (ResourceKind.TASK, Action.UPDATE): _ALL_ROLES,
    (ResourceKind.TASK, Action.DELETE): _MANAGERS,
    (ResourceKind.TEAM, Action.CREATE): _ADMIN_ONLY,
    (ResourceKind.TEAM, Action.LIST): _MANAGERS,
    (ResourceKind.TEAM, Action.LIST_OWN): _ALL_ROLES,
    (ResourceKind.TEAM, Action.UPDATE): _ADMIN_ONLY,
    (ResourceKind.TEAM, Action.DELETE): _ADMIN_ONLY,
    (ResourceKind.USER, Action.LIST): _ADMIN_ONLY,
    (ResourceKind.USER, Action.UPDATE): _ADMIN_ONLY,
    (ResourceKind.USER, Action.DELETE): _ADMIN_ONLY,
}

# Task fields each role may change through an update. Anything else in the
# patch is dropped without error.
TASK_FIELDS = frozenset(
    {"title", "description", "assigned_to", "priority", "status", "due_date", "team_id"}
)
MUTABLE_TASK_FIELDS: dict[Role, FrozenSet[str]] = {
    Role.ADMIN: TASK_FIELDS,
    Role.TEAM_LEAD: TASK_FIELDS,
    Role.TEAM_MEMBER: frozenset({"status"}),
}


class AccessPolicy:
    def __init__(self, lead_task_scope: LeadTaskScope = LeadTaskScope.GLOBAL) -> None:
        self.lead_task_scope = LeadTaskScope(lead_task_scope)

    def authorize(
        self,
        principal: Optional[Principal],
        action: Action,
        kind: ResourceKind,
        resource: Any = None,
    ) -> Decision:
        """
        Decide whether `principal` may perform `action` on `kind`.

        `resource` is the concrete record for per-record checks: a Task for
        task update/delete, the task's target team id (int) for task create
        (also used when an update moves a task to another team).
        Without it only the role gate is evaluated.
        """
        if principal is None:
            return Decision.deny(DenyReason.UNAUTHENTICATED, "Not authorized, no token")

        granted = ROLE_GRANTS.get((kind, action), frozenset())
        if principal.role not in granted:
            return Decision.deny(
                DenyReason.FORBIDDEN,
                f"User role {principal.role.value} is not authorized to access this route",
            )

        if kind is ResourceKind.TEAM and action is Action.LIST_OWN and principal.team_id is None:
            return Decision.deny(DenyReason.NOT_FOUND, "You are not assigned to any team")

        if kind is ResourceKind.TASK and resource is not None:
            return self._authorize_task(principal, action, resource)

        return Decision.allow()

    def _authorize_task(self, principal: Principal, action: Action, resource: Any) -> Decision:
        if principal.role is Role.TEAM_MEMBER:
            if action is Action.UPDATE and resource.assigned_to_id != principal.id:
                return Decision.deny(DenyReason.FORBIDDEN, "Not authorized to update this task")
            return Decision.allow()

        if principal.role is Role.TEAM_LEAD and self.lead_task_scope is LeadTaskScope.TEAM:
            if action is Action.CREATE:
                if resource != principal.team_id:
                    return Decision.deny(
                        DenyReason.FORBIDDEN, "Team Leads can only place tasks in their own team"
                    )
            elif principal.team_id is None or resource.team_id != principal.team_id:
                # Out-of-team tasks are not visible to the lead, so don't reveal them.
                return Decision.deny(DenyReason.NOT_FOUND, "Task not found")

        return Decision.allow()

    def enforce(
        self,
        principal: Optional[Principal],
        action: Action,
        kind: ResourceKind,
        resource: Any = None,
    ) -> None:
        self.authorize(principal, action, kind, resource).raise_for_deny()

    def task_visibility(self, principal: Principal) -> ColumnElement[bool]:
        if principal.role is Role.ADMIN:
            return true()
        if principal.role is Role.TEAM_LEAD:
            if principal.team_id is None:
                return false()
            return Task.team_id == principal.team_id
        return Task.assigned_to_id == principal.id

    def mutable_task_fields(self, principal: Principal) -> FrozenSet[str]:
        return MUTABLE_TASK_FIELDS[principal.role]


@lru_cache
def get_access_policy() -> AccessPolicy:
    return AccessPolicy(settings.lead_task_scope)
