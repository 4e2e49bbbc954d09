# taskpulse/repositories/project.py
from typing import List, Optional

from sqlalchemy import delete, or_, update

from taskpulse.models import Project, Task, User, project_team
from taskpulse.repositories.base import BaseRepository
from taskpulse.utils.permissions import Actor, ListScope


class ProjectRepository(BaseRepository[Project]):
    model = Project

    def list(
        self,
        actor: Actor,
        scope: ListScope,
        department_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Project]:
        query = self.db.query(Project)
        if department_id:
            query = query.filter(Project.department_id == department_id)
        if status:
            query = query.filter(Project.status == status)
        if scope == ListScope.MANAGER_OR_TEAM:
            query = query.filter(or_(
                Project.manager_id == actor.id,
                Project.team.any(User.id == actor.id),
            ))
        return query.order_by(Project.start_date).all()

    def add_member(self, project_id: str, user_id: str) -> bool:
        return self._add_membership(project_team, "project_id", "user_id", project_id, user_id)

    def remove_member(self, project_id: str, user_id: str) -> bool:
        return self._remove_membership(project_team, "project_id", "user_id", project_id, user_id)

    def detach(self, project_id: str) -> None:
        """Clear team rows and unlink tasks before a delete"""
        self.db.execute(delete(project_team).where(project_team.c.project_id == project_id))
        self.db.execute(update(Task).where(Task.project_id == project_id).values(project_id=None))
