# taskpulse/routers/department.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from taskpulse.database import get_db
from taskpulse.schemas.department import DepartmentCreate, DepartmentEmployee, DepartmentOut, DepartmentUpdate
from taskpulse.services.department_service import DepartmentService
from taskpulse.services.notifier import NotificationDispatcher, get_dispatcher
from taskpulse.utils.auth import get_current_actor
from taskpulse.utils.permissions import Actor

router = APIRouter()


def get_department_service(db: Session = Depends(get_db),
                           dispatcher: NotificationDispatcher = Depends(get_dispatcher)) -> DepartmentService:
    return DepartmentService(db, dispatcher)


@router.get("/", response_model=List[DepartmentOut])
def get_departments(actor: Actor = Depends(get_current_actor),
                    service: DepartmentService = Depends(get_department_service)):
    return service.list_departments(actor)


@router.get("/{department_id}", response_model=DepartmentOut)
def get_department(department_id: str, actor: Actor = Depends(get_current_actor),
                   service: DepartmentService = Depends(get_department_service)):
    return service.get_department(actor, department_id)


@router.post("/", response_model=DepartmentOut, status_code=status.HTTP_201_CREATED)
def create_department(department: DepartmentCreate, actor: Actor = Depends(get_current_actor),
                      service: DepartmentService = Depends(get_department_service)):
    """Create a department - admin only"""
    return service.create_department(actor, department)


@router.put("/{department_id}", response_model=DepartmentOut)
def update_department(department_id: str, department_update: DepartmentUpdate,
                      actor: Actor = Depends(get_current_actor),
                      service: DepartmentService = Depends(get_department_service)):
    """Update a department - admin only"""
    return service.update_department(actor, department_id, department_update)


@router.delete("/{department_id}")
def delete_department(department_id: str, actor: Actor = Depends(get_current_actor),
                      service: DepartmentService = Depends(get_department_service)):
    """Delete a department - admin only"""
    service.delete_department(actor, department_id)
    return {"message": "Department deleted successfully"}


@router.post("/{department_id}/employees", response_model=DepartmentOut)
def add_employee(department_id: str, body: DepartmentEmployee, actor: Actor = Depends(get_current_actor),
                 service: DepartmentService = Depends(get_department_service)):
    """Add an employee - admin or the department's own manager"""
    return service.add_employee(actor, department_id, body.employee_id)


@router.delete("/{department_id}/employees", response_model=DepartmentOut)
def remove_employee(department_id: str, body: DepartmentEmployee, actor: Actor = Depends(get_current_actor),
                    service: DepartmentService = Depends(get_department_service)):
    """Remove an employee - admin or the department's own manager"""
    return service.remove_employee(actor, department_id, body.employee_id)
