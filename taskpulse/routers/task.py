# taskpulse/routers/task.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from taskpulse.database import get_db
from taskpulse.models.task import TaskStatus
from taskpulse.schemas.task import TaskCreate, TaskOut, TaskStatusUpdate, TaskUpdate
from taskpulse.services.notifier import NotificationDispatcher, get_dispatcher
from taskpulse.services.task_service import TaskService
from taskpulse.utils.auth import get_current_actor
from taskpulse.utils.permissions import Actor

router = APIRouter()


def get_task_service(db: Session = Depends(get_db),
                     dispatcher: NotificationDispatcher = Depends(get_dispatcher)) -> TaskService:
    return TaskService(db, dispatcher)


@router.get("/", response_model=List[TaskOut])
def get_all_tasks(
    project: Optional[str] = Query(default=None),
    assigned_to: Optional[str] = Query(default=None),
    status: Optional[TaskStatus] = Query(default=None),
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service),
):
    """Get tasks with role-based visibility

    - admin: every task
    - everyone else: tasks they are assigned to or created
    """
    return service.list_tasks(actor, project_id=project, assigned_to_id=assigned_to, status=status)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: str, actor: Actor = Depends(get_current_actor),
             service: TaskService = Depends(get_task_service)):
    return service.get_task(actor, task_id)


@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(task_data: TaskCreate, actor: Actor = Depends(get_current_actor),
                service: TaskService = Depends(get_task_service)):
    """Create a task - admins and managers; the caller becomes its creator"""
    return service.create_task(actor, task_data)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(task_id: str, task_update: TaskUpdate, actor: Actor = Depends(get_current_actor),
                service: TaskService = Depends(get_task_service)):
    """Update a task - admin, assignee or creator"""
    return service.update_task(actor, task_id, task_update)


@router.delete("/{task_id}")
def delete_task(task_id: str, actor: Actor = Depends(get_current_actor),
                service: TaskService = Depends(get_task_service)):
    """Delete a task - admin, assignee or creator"""
    service.delete_task(actor, task_id)
    return {"message": "Task deleted successfully"}


@router.patch("/{task_id}/status", response_model=TaskOut)
def update_task_status(task_id: str, body: TaskStatusUpdate, actor: Actor = Depends(get_current_actor),
                       service: TaskService = Depends(get_task_service)):
    """Change only the status - admin or assignee"""
    return service.update_status(actor, task_id, body.status)
