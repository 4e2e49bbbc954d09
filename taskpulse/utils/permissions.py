# taskpulse/utils/permissions.py
"""
Authorization decisions for every (actor, action, resource) triple.

Everything here is a pure function of the actor and the ownership fields of
the resource (department_id, manager_id, team, assigned_to_id,
created_by_id). Nothing is read from or written to the database, so the
same inputs always produce the same decision.
"""

import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Set

from taskpulse.models.user import Role


@dataclass(frozen=True)
class Actor:
    """The authenticated identity performing an operation"""
    id: str
    role: Role
    department_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER


class ResourceKind(str, enum.Enum):
    USER = "user"
    DEPARTMENT = "department"
    PROJECT = "project"
    TASK = "task"


class Action(str, enum.Enum):
    LIST = "list"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ADD_MEMBER = "add_member"
    REMOVE_MEMBER = "remove_member"
    UPDATE_STATUS = "update_status"


class Decision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW


class ListScope(str, enum.Enum):
    """Server-side filter a list operation must apply for an actor"""
    ALL = "all"
    SELF = "self"
    SAME_DEPARTMENT = "same_department"
    MANAGER_OR_TEAM = "manager_or_team"
    ASSIGNEE_OR_CREATOR = "assignee_or_creator"


def _allow(condition: bool) -> Decision:
    return Decision.ALLOW if condition else Decision.DENY


def _same_department(actor: Actor, target) -> bool:
    return bool(actor.department_id) and getattr(target, "department_id", None) == actor.department_id


def team_member_ids(project) -> Set[str]:
    team: Iterable[Any] = getattr(project, "team", None) or []
    return {member.id for member in team}


def _is_project_manager(actor: Actor, project) -> bool:
    return project is not None and project.manager_id == actor.id


def _is_task_party(actor: Actor, task) -> bool:
    return task is not None and actor.id in (task.assigned_to_id, task.created_by_id)


# ---- Users ----

# fields a manager may edit on another user of their department
PROFILE_FIELDS = frozenset({"display_name", "position", "phone_number", "department_id"})
# fields a user may additionally edit on their own account
CREDENTIAL_FIELDS = frozenset({"email", "password"})


def _user_decision(actor: Actor, action: Action, user, changes: Set[str]) -> Decision:
    if action == Action.LIST:
        return Decision.ALLOW
    if action in (Action.CREATE, Action.DELETE):
        return _allow(actor.is_admin)
    if user is None:
        return Decision.DENY

    is_self = user.id == actor.id
    manages_target = actor.is_manager and _same_department(actor, user)

    if action == Action.READ:
        return _allow(actor.is_admin or manages_target or is_self)
    if action == Action.UPDATE:
        if actor.is_admin:
            return Decision.ALLOW
        # only admins change roles or edit admin accounts
        if "role" in changes or getattr(user, "role", None) == Role.ADMIN:
            return Decision.DENY
        if is_self:
            return _allow(changes <= PROFILE_FIELDS | CREDENTIAL_FIELDS)
        return _allow(manages_target and changes <= PROFILE_FIELDS)
    return Decision.DENY


# ---- Departments ----

def _department_decision(actor: Actor, action: Action, department, changes: Set[str]) -> Decision:
    if action in (Action.LIST, Action.READ):
        return Decision.ALLOW
    if action in (Action.CREATE, Action.UPDATE, Action.DELETE):
        return _allow(actor.is_admin)
    if action in (Action.ADD_MEMBER, Action.REMOVE_MEMBER):
        if actor.is_admin:
            return Decision.ALLOW
        return _allow(actor.is_manager and department is not None and department.manager_id == actor.id)
    return Decision.DENY


# ---- Projects ----

def _project_decision(actor: Actor, action: Action, project, changes: Set[str]) -> Decision:
    if action == Action.LIST:
        return Decision.ALLOW
    if action == Action.CREATE:
        return _allow(actor.is_admin or actor.is_manager)
    if actor.is_admin:
        return _allow(action in (Action.READ, Action.UPDATE, Action.DELETE,
                                 Action.ADD_MEMBER, Action.REMOVE_MEMBER))
    if project is None:
        return Decision.DENY
    if action == Action.READ:
        return _allow(_is_project_manager(actor, project) or actor.id in team_member_ids(project))
    if action in (Action.UPDATE, Action.DELETE, Action.ADD_MEMBER, Action.REMOVE_MEMBER):
        return _allow(_is_project_manager(actor, project))
    return Decision.DENY


# ---- Tasks ----

def _task_decision(actor: Actor, action: Action, task, changes: Set[str]) -> Decision:
    if action == Action.LIST:
        return Decision.ALLOW
    if action == Action.CREATE:
        return _allow(actor.is_admin or actor.is_manager)
    if actor.is_admin:
        return _allow(action in (Action.READ, Action.UPDATE, Action.DELETE, Action.UPDATE_STATUS))
    if task is None:
        return Decision.DENY
    if action in (Action.READ, Action.UPDATE, Action.DELETE):
        return _allow(_is_task_party(actor, task))
    if action == Action.UPDATE_STATUS:
        # the creator alone does not get status rights
        return _allow(task.assigned_to_id == actor.id)
    return Decision.DENY


_DECISIONS: Dict[ResourceKind, Callable[[Actor, Action, Any, Set[str]], Decision]] = {
    ResourceKind.USER: _user_decision,
    ResourceKind.DEPARTMENT: _department_decision,
    ResourceKind.PROJECT: _project_decision,
    ResourceKind.TASK: _task_decision,
}


def can_perform(
    actor: Actor,
    action: Action,
    kind: ResourceKind,
    resource=None,
    changes: Optional[Iterable[str]] = None,
) -> Decision:
    """Decide whether actor may perform action on resource.

    resource is the pre-mutation entity (None for list/create); changes is the
    set of field names an update would actually modify.
    """
    return _DECISIONS[kind](actor, action, resource, set(changes or ()))


def list_scope(actor: Actor, kind: ResourceKind) -> ListScope:
    """Visibility filter for list operations"""
    if actor.is_admin or kind == ResourceKind.DEPARTMENT:
        return ListScope.ALL
    if kind == ResourceKind.USER:
        if actor.is_manager and actor.department_id:
            return ListScope.SAME_DEPARTMENT
        return ListScope.SELF
    if kind == ResourceKind.PROJECT:
        return ListScope.MANAGER_OR_TEAM
    return ListScope.ASSIGNEE_OR_CREATOR
