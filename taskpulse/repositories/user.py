# taskpulse/repositories/user.py
from typing import List, Optional

from sqlalchemy import delete, or_, update

from taskpulse.models import Department, Project, Role, Task, User, department_employees, project_team
from taskpulse.repositories.base import BaseRepository
from taskpulse.utils.permissions import Actor, ListScope


class UserRepository(BaseRepository[User]):
    model = User

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def get_by_matricule(self, matricule: str) -> Optional[User]:
        return self.db.query(User).filter(User.matricule == matricule).first()

    def list(self, actor: Actor, scope: ListScope) -> List[User]:
        query = self.db.query(User)
        if scope == ListScope.SAME_DEPARTMENT:
            query = query.filter(or_(User.department_id == actor.department_id, User.id == actor.id))
        elif scope == ListScope.SELF:
            query = query.filter(User.id == actor.id)
        return query.order_by(User.display_name).all()

    def admins(self) -> List[User]:
        return self.db.query(User).filter(User.role == Role.ADMIN).order_by(User.created_at).all()

    def count_required_references(self, user_id: str) -> int:
        """Projects managed plus tasks assigned to or created by the user"""
        projects = self.db.query(Project).filter(Project.manager_id == user_id).count()
        tasks = self.db.query(Task).filter(
            or_(Task.assigned_to_id == user_id, Task.created_by_id == user_id)
        ).count()
        return projects + tasks

    def clear_optional_references(self, user_id: str) -> None:
        """Drop memberships and managerships that may legally become empty"""
        self.db.execute(delete(department_employees).where(department_employees.c.user_id == user_id))
        self.db.execute(delete(project_team).where(project_team.c.user_id == user_id))
        self.db.execute(
            update(Department).where(Department.manager_id == user_id).values(manager_id=None)
        )
