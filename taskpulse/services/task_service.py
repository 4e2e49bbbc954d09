# taskpulse/services/task_service.py
import logging
from typing import List, Optional

from taskpulse.exceptions import ValidationError
from taskpulse.models import Task, TaskStatus
from taskpulse.schemas.task import TaskCreate, TaskUpdate
from taskpulse.services.base import BaseService
from taskpulse.services.notifier import EventKind
from taskpulse.utils.notifications import task_recipients
from taskpulse.utils.permissions import Action, Actor, ResourceKind, list_scope

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "priority", "status", "due_date", "assigned_to",
                   "dependencies", "attachments")


class TaskService(BaseService):
    kind = ResourceKind.TASK
    label = "task"

    def list_tasks(self, actor: Actor, project_id: Optional[str] = None,
                   assigned_to_id: Optional[str] = None, status: Optional[str] = None) -> List[Task]:
        self.authorize(actor, Action.LIST)
        return self.store.tasks.list(actor, list_scope(actor, self.kind), project_id=project_id,
                                     assigned_to_id=assigned_to_id, status=status)

    def get_task(self, actor: Actor, task_id: str) -> Task:
        task = self.get_or_404(self.store.tasks, task_id)
        self.authorize(actor, Action.READ, task, message="Not authorized to view this task")
        return task

    def _event_data(self, actor: Actor, task: Task) -> dict:
        return {
            "task_id": task.id,
            "task_title": task.title,
            "status": task.status.value,
            "priority": task.priority.value,
            "due_date": task.due_date.date().isoformat(),
            "assignee_name": task.assignee.display_name,
            "actor_name": self.actor_name(actor),
        }

    def create_task(self, actor: Actor, data: TaskCreate) -> Task:
        self.authorize(actor, Action.CREATE, message="Only admins and managers can create tasks")

        self.validator.require_user(data.assigned_to, "assigned_to")
        if data.project_id is not None:
            self.validator.require_project(data.project_id, "project_id")
        dependency_ids = self.validator.require_tasks(data.dependencies)

        task = Task(
            title=data.title,
            description=data.description,
            priority=data.priority,
            status=data.status,
            due_date=data.due_date,
            assigned_to_id=data.assigned_to,
            created_by_id=actor.id,
            project_id=data.project_id,
            attachments=list(data.attachments),
        )
        task.dependencies = self.store.tasks.find_many(dependency_ids)
        with self.transaction():
            self.store.tasks.add(task)
        self.db.refresh(task)
        logger.info(f"Task {task.id} created by {actor.id}, assigned to {task.assigned_to_id}")

        self.notify(task_recipients(EventKind.TASK_CREATE, task, []), EventKind.TASK_CREATE,
                    self._event_data(actor, task))
        return task

    def update_task(self, actor: Actor, task_id: str, data: TaskUpdate) -> Task:
        task = self.get_or_404(self.store.tasks, task_id)
        self.authorize(actor, Action.UPDATE, task, message="Not authorized to update this task")

        updates = data.model_dump(exclude_unset=True)
        for name in REQUIRED_FIELDS:
            if name in updates and updates[name] is None:
                raise ValidationError(f"{name} cannot be empty", field=name)

        dependency_ids = updates.pop("dependencies", None)
        if "assigned_to" in updates:
            updates["assigned_to_id"] = updates.pop("assigned_to")
        changes = self.changed_fields(task, updates)

        if "assigned_to_id" in changes:
            self.validator.require_user(changes["assigned_to_id"], "assigned_to")
        if changes.get("project_id") is not None:
            self.validator.require_project(changes["project_id"], "project_id")
        dependencies = None
        if dependency_ids is not None:
            self.validator.require_tasks(dependency_ids)
            self.validator.check_no_cycle(task.id, dependency_ids)
            dependencies = self.store.tasks.find_many(dependency_ids)

        with self.transaction():
            for name, value in changes.items():
                setattr(task, name, value)
            if dependencies is not None:
                task.dependencies = dependencies
        self.db.refresh(task)
        logger.info(f"Task {task.id} updated by {actor.id}: {sorted(changes)}")

        self.notify(task_recipients(EventKind.TASK_UPDATE, task, self.store.users.admins()),
                    EventKind.TASK_UPDATE, self._event_data(actor, task))
        return task

    def delete_task(self, actor: Actor, task_id: str) -> None:
        task = self.get_or_404(self.store.tasks, task_id)
        self.authorize(actor, Action.DELETE, task, message="Not authorized to delete this task")

        # the task row is gone after commit, so resolve recipients first
        recipients = task_recipients(EventKind.TASK_DELETE, task, self.store.users.admins())
        data = self._event_data(actor, task)

        with self.transaction():
            self.store.tasks.detach(task.id)
            self.store.tasks.delete(task)
        logger.info(f"Task {task_id} deleted by {actor.id}")

        self.notify(recipients, EventKind.TASK_DELETE, data)

    def update_status(self, actor: Actor, task_id: str, status: TaskStatus) -> Task:
        task = self.get_or_404(self.store.tasks, task_id)
        self.authorize(actor, Action.UPDATE_STATUS, task,
                       message="Not authorized to update this task status")

        old_status = task.status
        with self.transaction():
            task.status = status
        self.db.refresh(task)
        logger.info(f"Task {task.id} status {old_status.value} -> {task.status.value} by {actor.id}")

        data = self._event_data(actor, task)
        data["old_status"] = old_status.value
        self.notify(task_recipients(EventKind.TASK_STATUS_UPDATE, task, self.store.users.admins()),
                    EventKind.TASK_STATUS_UPDATE, data)
        return task
