# taskpulse/services/department_service.py
import logging
from typing import List

from taskpulse.exceptions import ConflictError, ValidationError
from taskpulse.models import Department
from taskpulse.schemas.department import DepartmentCreate, DepartmentUpdate
from taskpulse.services.base import BaseService
from taskpulse.services.notifier import EventKind
from taskpulse.utils.notifications import department_recipients
from taskpulse.utils.permissions import Action, Actor, ResourceKind

logger = logging.getLogger(__name__)


class DepartmentService(BaseService):
    kind = ResourceKind.DEPARTMENT
    label = "department"

    def list_departments(self, actor: Actor) -> List[Department]:
        self.authorize(actor, Action.LIST)
        return self.store.departments.list()

    def get_department(self, actor: Actor, department_id: str) -> Department:
        department = self.get_or_404(self.store.departments, department_id)
        self.authorize(actor, Action.READ, department)
        return department

    def _notify(self, actor: Actor, department: Department, kind: EventKind, employee=None) -> None:
        recipients = department_recipients(department, self.store.users.admins(), employee)
        data = {
            "department_id": department.id,
            "department_name": department.name,
            "actor_name": self.actor_name(actor),
        }
        if employee is not None:
            data["employee_name"] = employee.display_name
        self.notify(recipients, kind, data)

    def create_department(self, actor: Actor, data: DepartmentCreate) -> Department:
        self.authorize(actor, Action.CREATE, message="Only admins can create departments")
        if self.store.departments.get_by_name(data.name):
            raise ConflictError("Department name already exists")
        if data.manager_id is not None:
            self.validator.require_user(data.manager_id, "manager_id")

        department = Department(
            name=data.name,
            type=data.type,
            description=data.description,
            manager_id=data.manager_id,
        )
        with self.transaction("Department name already exists"):
            self.store.departments.add(department)
        self.db.refresh(department)
        logger.info(f"Department {department.id} created by {actor.id}")

        self._notify(actor, department, EventKind.DEPT_CREATE)
        return department

    def update_department(self, actor: Actor, department_id: str, data: DepartmentUpdate) -> Department:
        department = self.get_or_404(self.store.departments, department_id)
        self.authorize(actor, Action.UPDATE, department, message="Only admins can update departments")

        updates = data.model_dump(exclude_unset=True)
        for name in ("name", "type"):
            if name in updates and not updates[name]:
                raise ValidationError(f"{name} cannot be empty", field=name)
        changes = self.changed_fields(department, updates)

        if "name" in changes:
            existing = self.store.departments.get_by_name(changes["name"])
            if existing and existing.id != department.id:
                raise ConflictError("Department name already exists")
        if changes.get("manager_id") is not None:
            self.validator.require_user(changes["manager_id"], "manager_id")

        with self.transaction("Department name already exists"):
            for name, value in changes.items():
                setattr(department, name, value)
        self.db.refresh(department)
        logger.info(f"Department {department.id} updated by {actor.id}: {sorted(changes)}")

        self._notify(actor, department, EventKind.DEPT_UPDATE)
        return department

    def delete_department(self, actor: Actor, department_id: str) -> None:
        department = self.get_or_404(self.store.departments, department_id)
        self.authorize(actor, Action.DELETE, department, message="Only admins can delete departments")
        if self.store.departments.count_projects(department.id):
            raise ConflictError("Department still has projects; move or delete them first")

        with self.transaction():
            self.store.departments.detach(department.id)
            self.store.departments.delete(department)
        logger.info(f"Department {department_id} deleted by {actor.id}")

    def add_employee(self, actor: Actor, department_id: str, employee_id: str) -> Department:
        department = self.get_or_404(self.store.departments, department_id)
        self.authorize(actor, Action.ADD_MEMBER, department,
                       message="Only admins or this department's manager can add employees")
        employee = self.validator.require_user(employee_id, "employee_id")

        with self.transaction():
            added = self.store.departments.add_employee(department.id, employee.id)
            self.validator.require_added(added, "employee_id", employee.id)
        self.db.refresh(department)
        logger.info(f"Employee {employee.id} added to department {department.id} by {actor.id}")

        self._notify(actor, department, EventKind.DEPT_ADD_EMPLOYEE, employee)
        return department

    def remove_employee(self, actor: Actor, department_id: str, employee_id: str) -> Department:
        department = self.get_or_404(self.store.departments, department_id)
        self.authorize(actor, Action.REMOVE_MEMBER, department,
                       message="Only admins or this department's manager can remove employees")
        employee = self.validator.require_user(employee_id, "employee_id")

        with self.transaction():
            removed = self.store.departments.remove_employee(department.id, employee.id)
            self.validator.require_removed(removed, "employee_id", employee.id)
        self.db.refresh(department)
        logger.info(f"Employee {employee.id} removed from department {department.id} by {actor.id}")

        self._notify(actor, department, EventKind.DEPT_REMOVE_EMPLOYEE, employee)
        return department
