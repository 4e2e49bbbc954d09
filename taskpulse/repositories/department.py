# taskpulse/repositories/department.py
from typing import List, Optional

from sqlalchemy import delete, update

from taskpulse.models import Department, Project, User, department_employees
from taskpulse.repositories.base import BaseRepository


class DepartmentRepository(BaseRepository[Department]):
    model = Department

    def get_by_name(self, name: str) -> Optional[Department]:
        return self.db.query(Department).filter(Department.name == name).first()

    def list(self) -> List[Department]:
        return self.db.query(Department).order_by(Department.name).all()

    def add_employee(self, department_id: str, user_id: str) -> bool:
        return self._add_membership(department_employees, "department_id", "user_id",
                                    department_id, user_id)

    def remove_employee(self, department_id: str, user_id: str) -> bool:
        return self._remove_membership(department_employees, "department_id", "user_id",
                                       department_id, user_id)

    def count_projects(self, department_id: str) -> int:
        return self.db.query(Project).filter(Project.department_id == department_id).count()

    def detach(self, department_id: str) -> None:
        """Clear employee rows and users' department_id before a delete"""
        self.db.execute(
            delete(department_employees).where(department_employees.c.department_id == department_id)
        )
        self.db.execute(
            update(User).where(User.department_id == department_id).values(department_id=None)
        )
