from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from .user import UserBasic


class DepartmentCreate(BaseModel):
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    description: Optional[str] = None
    manager_id: Optional[str] = Field(default=None, min_length=1)


class DepartmentUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    manager_id: Optional[str] = Field(default=None, min_length=1)


class DepartmentOut(BaseModel):
    id: str
    name: str
    type: str
    description: Optional[str] = None
    manager_id: Optional[str] = None
    manager: Optional[UserBasic] = None
    employees: List[UserBasic] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class DepartmentEmployee(BaseModel):
    employee_id: str
