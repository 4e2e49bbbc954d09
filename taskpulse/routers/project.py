# taskpulse/routers/project.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from taskpulse.database import get_db
from taskpulse.models.project import ProjectStatus
from taskpulse.schemas.project import ProjectCreate, ProjectMember, ProjectOut, ProjectUpdate
from taskpulse.services.notifier import NotificationDispatcher, get_dispatcher
from taskpulse.services.project_service import ProjectService
from taskpulse.utils.auth import get_current_actor
from taskpulse.utils.permissions import Actor

router = APIRouter()


def get_project_service(db: Session = Depends(get_db),
                        dispatcher: NotificationDispatcher = Depends(get_dispatcher)) -> ProjectService:
    return ProjectService(db, dispatcher)


@router.get("/", response_model=List[ProjectOut])
def get_all_projects(
    department: Optional[str] = Query(default=None),
    status: Optional[ProjectStatus] = Query(default=None),
    actor: Actor = Depends(get_current_actor),
    service: ProjectService = Depends(get_project_service),
):
    """Admins see every project; everyone else only projects they manage or belong to"""
    return service.list_projects(actor, department_id=department, status=status)


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(project_id: str, actor: Actor = Depends(get_current_actor),
                service: ProjectService = Depends(get_project_service)):
    return service.get_project(actor, project_id)


@router.post("/", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(project_data: ProjectCreate, actor: Actor = Depends(get_current_actor),
                   service: ProjectService = Depends(get_project_service)):
    """Create a new project - admins and managers"""
    return service.create_project(actor, project_data)


@router.put("/{project_id}", response_model=ProjectOut)
def update_project(project_id: str, project_update: ProjectUpdate, actor: Actor = Depends(get_current_actor),
                   service: ProjectService = Depends(get_project_service)):
    """Update a project - admins or the project's manager"""
    return service.update_project(actor, project_id, project_update)


@router.delete("/{project_id}")
def delete_project(project_id: str, actor: Actor = Depends(get_current_actor),
                   service: ProjectService = Depends(get_project_service)):
    service.delete_project(actor, project_id)
    return {"message": "Project deleted successfully"}


@router.post("/{project_id}/team", response_model=ProjectOut)
def add_team_member(project_id: str, body: ProjectMember, actor: Actor = Depends(get_current_actor),
                    service: ProjectService = Depends(get_project_service)):
    return service.add_member(actor, project_id, body.user_id)


@router.delete("/{project_id}/team", response_model=ProjectOut)
def remove_team_member(project_id: str, body: ProjectMember, actor: Actor = Depends(get_current_actor),
                       service: ProjectService = Depends(get_project_service)):
    return service.remove_member(actor, project_id, body.user_id)
