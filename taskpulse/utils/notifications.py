# taskpulse/utils/notifications.py
"""
Recipient fan-out for notification events, and the hand-off to the dispatcher
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from taskpulse.models import Department, Project, Task, User
from taskpulse.services.notifier import EventKind, NotificationDispatcher, NotificationEvent, Recipient

logger = logging.getLogger(__name__)


def unique_users(*groups: Iterable[Optional[User]]) -> List[User]:
    """Flatten groups of users, dropping None and repeated ids, keeping first-seen order"""
    seen = set()
    users = []
    for group in groups:
        for user in group:
            if user is None or user.id in seen:
                continue
            seen.add(user.id)
            users.append(user)
    return users


def department_recipients(department: Department, admins: List[User],
                          employee: Optional[User] = None) -> List[User]:
    """Affected employee (for membership events), the department manager, then all admins"""
    return unique_users([employee], [department.manager], admins)


def project_recipients(project: Project, admins: List[User],
                       member: Optional[User] = None) -> List[User]:
    """Membership events reach the member; create/update reach the whole team"""
    if member is not None:
        return unique_users([member], [project.manager], admins)
    return unique_users([project.manager], project.team, admins)


def task_recipients(kind: EventKind, task: Task, admins: List[User]) -> List[User]:
    if kind == EventKind.TASK_CREATE:
        return unique_users([task.assignee, task.creator])
    return unique_users(admins, [task.assignee, task.creator])


def publish(dispatcher: NotificationDispatcher, users: Iterable[User], kind: EventKind,
            data: Dict[str, Any]) -> int:
    """Queue one event per recipient. Returns how many were queued."""
    queued = 0
    for user in users:
        recipient = Recipient(user_id=user.id, email=user.email, name=user.display_name)
        if dispatcher.enqueue(NotificationEvent(recipient=recipient, kind=kind, data=dict(data))):
            queued += 1
    logger.debug(f"Queued {queued} {kind.value} notifications")
    return queued
