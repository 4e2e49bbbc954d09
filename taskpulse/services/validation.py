# taskpulse/services/validation.py
"""
Referential and structural checks that run before a mutation is applied.

Every check raises ValidationError naming the offending field; nothing is
written until all checks for an operation have passed.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from taskpulse.exceptions import ValidationError
from taskpulse.models import Department, Project, User
from taskpulse.repositories import EntityStore


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ReferenceValidator:
    def __init__(self, store: EntityStore):
        self.store = store

    def require_user(self, user_id: str, field: str) -> User:
        user = self.store.users.get(user_id)
        if user is None:
            raise ValidationError(f"{field}: user {user_id} not found", field=field)
        return user

    def require_department(self, department_id: str, field: str = "department") -> Department:
        department = self.store.departments.get(department_id)
        if department is None:
            raise ValidationError(f"{field}: department {department_id} not found", field=field)
        return department

    def require_project(self, project_id: str, field: str = "project") -> Project:
        project = self.store.projects.get(project_id)
        if project is None:
            raise ValidationError(f"{field}: project {project_id} not found", field=field)
        return project

    @staticmethod
    def require_distinct(ids: Iterable[str], field: str) -> List[str]:
        ids = list(ids)
        if len(set(ids)) != len(ids):
            raise ValidationError(f"{field}: duplicate ids are not allowed", field=field)
        return ids

    def require_users(self, user_ids: Iterable[str], field: str) -> List[User]:
        user_ids = self.require_distinct(user_ids, field)
        missing = self.store.users.missing_ids(user_ids)
        if missing:
            raise ValidationError(f"{field}: users not found: {', '.join(sorted(missing))}", field=field)
        return self.store.users.find_many(user_ids)

    def require_tasks(self, task_ids: Iterable[str], field: str = "dependencies") -> List[str]:
        task_ids = self.require_distinct(task_ids, field)
        missing = self.store.tasks.missing_ids(task_ids)
        if missing:
            raise ValidationError(f"{field}: tasks not found: {', '.join(sorted(missing))}", field=field)
        return task_ids

    @staticmethod
    def check_date_range(start_date: datetime, end_date: datetime) -> None:
        if _as_utc(end_date) <= _as_utc(start_date):
            raise ValidationError("end_date must be after start_date", field="end_date")

    def check_no_cycle(self, task_id: Optional[str], dependency_ids: Iterable[str]) -> None:
        """A task may not depend on itself, directly or through other tasks"""
        dependency_ids = list(dependency_ids)
        if task_id is None:
            # a task that does not exist yet cannot be reached from anything
            return
        if task_id in dependency_ids:
            raise ValidationError("dependencies: a task cannot depend on itself", field="dependencies")
        if self.store.tasks.reaches(dependency_ids, task_id):
            raise ValidationError("dependencies: this change would create a dependency cycle",
                                  field="dependencies")

    @staticmethod
    def require_added(added: bool, field: str, member_id: str) -> None:
        if not added:
            raise ValidationError(f"{field}: {member_id} is already a member", field=field)

    @staticmethod
    def require_removed(removed: bool, field: str, member_id: str) -> None:
        if not removed:
            raise ValidationError(f"{field}: {member_id} is not a member", field=field)
