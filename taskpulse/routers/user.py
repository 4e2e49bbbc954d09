# taskpulse/routers/user.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from taskpulse.database import get_db
from taskpulse.schemas.user import UserCreate, UserOut, UserUpdate
from taskpulse.services.notifier import NotificationDispatcher, get_dispatcher
from taskpulse.services.user_service import UserService
from taskpulse.utils.auth import get_current_actor
from taskpulse.utils.permissions import Actor

router = APIRouter()


def get_user_service(db: Session = Depends(get_db),
                     dispatcher: NotificationDispatcher = Depends(get_dispatcher)) -> UserService:
    return UserService(db, dispatcher)


@router.get("/", response_model=List[UserOut])
def get_all_users(actor: Actor = Depends(get_current_actor), service: UserService = Depends(get_user_service)):
    """Admins see everyone, managers their department, employees only themselves"""
    return service.list_users(actor)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, actor: Actor = Depends(get_current_actor),
             service: UserService = Depends(get_user_service)):
    return service.get_user(actor, user_id)


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate, actor: Actor = Depends(get_current_actor),
                service: UserService = Depends(get_user_service)):
    """Create a new user - admin only"""
    return service.create_user(actor, user)


@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: str, user_update: UserUpdate, actor: Actor = Depends(get_current_actor),
                service: UserService = Depends(get_user_service)):
    """Admins update anyone; managers their department; everyone themselves. Roles are admin-only."""
    return service.update_user(actor, user_id, user_update)


@router.delete("/{user_id}")
def delete_user(user_id: str, actor: Actor = Depends(get_current_actor),
                service: UserService = Depends(get_user_service)):
    """Delete a user - admin only"""
    service.delete_user(actor, user_id)
    return {"message": "User deleted successfully"}
