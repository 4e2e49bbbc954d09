from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from taskpulse.models.project import Priority
from taskpulse.models.task import TaskStatus
from .user import UserBasic


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    due_date: datetime
    assigned_to: str
    project_id: Optional[str] = Field(default=None, min_length=1)
    dependencies: List[str] = []
    attachments: List[str] = []


# created_by is set once at creation and never updated
class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = Field(default=None, min_length=1)
    project_id: Optional[str] = Field(default=None, min_length=1)
    dependencies: Optional[List[str]] = None
    attachments: Optional[List[str]] = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskDependency(BaseModel):
    id: str
    title: str
    status: TaskStatus

    model_config = {
        "from_attributes": True
    }


class TaskOut(BaseModel):
    id: str
    title: str
    description: str
    priority: Priority
    status: TaskStatus
    due_date: datetime
    attachments: List[str] = []

    # Who created it and who it is assigned to
    created_by_id: str
    creator: UserBasic
    assigned_to_id: str
    assignee: UserBasic

    project_id: Optional[str] = None
    dependencies: List[TaskDependency] = []

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }
