from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from taskpulse.models.project import Priority, ProjectStatus
from taskpulse.models.task import TaskStatus
from .user import UserBasic


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str
    start_date: datetime
    end_date: datetime
    manager_id: str
    department_id: str
    team: List[str] = []
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: Priority = Priority.MEDIUM
    budget: Optional[float] = Field(default=None, ge=0)


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    manager_id: Optional[str] = Field(default=None, min_length=1)
    department_id: Optional[str] = Field(default=None, min_length=1)
    team: Optional[List[str]] = None
    status: Optional[ProjectStatus] = None
    priority: Optional[Priority] = None
    budget: Optional[float] = Field(default=None, ge=0)


class ProjectTask(BaseModel):
    id: str
    title: str
    status: TaskStatus

    model_config = {
        "from_attributes": True
    }


class ProjectOut(BaseModel):
    id: str
    name: str
    description: str
    status: ProjectStatus
    start_date: datetime
    end_date: datetime
    manager_id: str
    department_id: str
    priority: Priority
    budget: Optional[float] = None
    manager: UserBasic
    team: List[UserBasic]
    tasks: List[ProjectTask] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class ProjectMember(BaseModel):
    user_id: str
