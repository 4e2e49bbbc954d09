# taskpulse/services/project_service.py
import logging
from typing import List, Optional

from taskpulse.exceptions import ValidationError
from taskpulse.models import Project
from taskpulse.schemas.project import ProjectCreate, ProjectUpdate
from taskpulse.services.base import BaseService
from taskpulse.services.notifier import EventKind
from taskpulse.utils.notifications import project_recipients
from taskpulse.utils.permissions import Action, Actor, ResourceKind, list_scope

logger = logging.getLogger(__name__)

# Fields that may not be cleared by an update
REQUIRED_FIELDS = ("name", "description", "start_date", "end_date", "manager_id",
                   "department_id", "status", "priority")


class ProjectService(BaseService):
    kind = ResourceKind.PROJECT
    label = "project"

    def list_projects(self, actor: Actor, department_id: Optional[str] = None,
                      status: Optional[str] = None) -> List[Project]:
        self.authorize(actor, Action.LIST)
        return self.store.projects.list(actor, list_scope(actor, self.kind),
                                        department_id=department_id, status=status)

    def get_project(self, actor: Actor, project_id: str) -> Project:
        project = self.get_or_404(self.store.projects, project_id)
        self.authorize(actor, Action.READ, project, message="Not authorized to view this project")
        return project

    def _notify(self, actor: Actor, project: Project, kind: EventKind, member=None) -> None:
        recipients = project_recipients(project, self.store.users.admins(), member)
        data = {
            "project_id": project.id,
            "project_name": project.name,
            "status": project.status.value,
            "start_date": project.start_date.date().isoformat(),
            "end_date": project.end_date.date().isoformat(),
            "actor_name": self.actor_name(actor),
        }
        if member is not None:
            data["member_name"] = member.display_name
        self.notify(recipients, kind, data)

    def create_project(self, actor: Actor, data: ProjectCreate) -> Project:
        self.authorize(actor, Action.CREATE, message="Only admins and managers can create projects")

        self.validator.require_department(data.department_id, "department_id")
        self.validator.require_user(data.manager_id, "manager_id")
        team = self.validator.require_users(data.team, "team")
        self.validator.check_date_range(data.start_date, data.end_date)

        project = Project(
            name=data.name,
            description=data.description,
            status=data.status,
            start_date=data.start_date,
            end_date=data.end_date,
            manager_id=data.manager_id,
            department_id=data.department_id,
            priority=data.priority,
            budget=data.budget,
        )
        project.team = team
        with self.transaction():
            self.store.projects.add(project)
        self.db.refresh(project)
        logger.info(f"Project {project.id} created by {actor.id}")

        self._notify(actor, project, EventKind.PROJ_CREATE)
        return project

    def update_project(self, actor: Actor, project_id: str, data: ProjectUpdate) -> Project:
        project = self.get_or_404(self.store.projects, project_id)
        # decided on the stored manager, before any manager_id change is applied
        self.authorize(actor, Action.UPDATE, project, message="Not authorized to update this project")

        updates = data.model_dump(exclude_unset=True)
        for name in REQUIRED_FIELDS:
            if name in updates and updates[name] is None:
                raise ValidationError(f"{name} cannot be empty", field=name)

        team_ids = updates.pop("team", None)
        changes = self.changed_fields(project, updates)

        if "department_id" in changes:
            self.validator.require_department(changes["department_id"], "department_id")
        if "manager_id" in changes:
            self.validator.require_user(changes["manager_id"], "manager_id")
        team = self.validator.require_users(team_ids, "team") if team_ids is not None else None
        if "start_date" in changes or "end_date" in changes:
            self.validator.check_date_range(changes.get("start_date", project.start_date),
                                            changes.get("end_date", project.end_date))

        with self.transaction():
            for name, value in changes.items():
                setattr(project, name, value)
            if team is not None:
                project.team = team
        self.db.refresh(project)
        logger.info(f"Project {project.id} updated by {actor.id}: {sorted(changes)}")

        self._notify(actor, project, EventKind.PROJ_UPDATE)
        return project

    def delete_project(self, actor: Actor, project_id: str) -> None:
        project = self.get_or_404(self.store.projects, project_id)
        self.authorize(actor, Action.DELETE, project, message="Not authorized to delete this project")

        with self.transaction():
            self.store.projects.detach(project.id)
            self.store.projects.delete(project)
        logger.info(f"Project {project_id} deleted by {actor.id}")

    def add_member(self, actor: Actor, project_id: str, user_id: str) -> Project:
        project = self.get_or_404(self.store.projects, project_id)
        self.authorize(actor, Action.ADD_MEMBER, project, message="Not authorized to modify team")
        member = self.validator.require_user(user_id, "user_id")

        with self.transaction():
            added = self.store.projects.add_member(project.id, member.id)
            self.validator.require_added(added, "user_id", member.id)
        self.db.refresh(project)
        logger.info(f"User {member.id} added to project {project.id} by {actor.id}")

        self._notify(actor, project, EventKind.PROJ_ADD_MEMBER, member)
        return project

    def remove_member(self, actor: Actor, project_id: str, user_id: str) -> Project:
        project = self.get_or_404(self.store.projects, project_id)
        self.authorize(actor, Action.REMOVE_MEMBER, project, message="Not authorized to modify team")
        member = self.validator.require_user(user_id, "user_id")

        with self.transaction():
            removed = self.store.projects.remove_member(project.id, member.id)
            self.validator.require_removed(removed, "user_id", member.id)
        self.db.refresh(project)
        logger.info(f"User {member.id} removed from project {project.id} by {actor.id}")

        self._notify(actor, project, EventKind.PROJ_REMOVE_MEMBER, member)
        return project
