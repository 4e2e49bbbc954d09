from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from taskpulse.models.user import Role


class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    display_name: str = Field(min_length=1)
    matricule: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)
    position: Optional[str] = None


class UserCreate(UserRegister):
    role: Role = Role.EMPLOYEE
    department_id: Optional[str] = Field(default=None, min_length=1)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserBasic(BaseModel):
    id: str
    display_name: str
    email: str

    model_config = {
        "from_attributes": True
    }


class UserOut(BaseModel):
    id: str
    email: str
    display_name: str
    role: Role
    matricule: str
    phone_number: str
    department_id: Optional[str] = None
    position: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)
    display_name: Optional[str] = None
    matricule: Optional[str] = None
    phone_number: Optional[str] = None
    department_id: Optional[str] = Field(default=None, min_length=1)
    position: Optional[str] = None
    role: Optional[Role] = None
