# taskpulse/utils/auth.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from taskpulse.database import get_db
from taskpulse.exceptions import UnauthenticatedError
from taskpulse.models.user import User
from taskpulse.utils.permissions import Actor
from taskpulse.utils.security import decode_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def user_from_token(token: Optional[str], db: Session, refresh: bool = False) -> User:
    """Resolve a bearer token to its user or raise UnauthenticatedError"""
    if not token:
        raise UnauthenticatedError("No authentication token, access denied")
    payload = decode_token(token, refresh=refresh)
    if payload is None or not payload.get("sub"):
        raise UnauthenticatedError("Could not validate credentials")

    user = db.get(User, payload["sub"])
    if user is None:
        raise UnauthenticatedError("User not found")
    return user


def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    return user_from_token(token, db)


def get_current_actor(request: Request, user: User = Depends(get_current_user)) -> Actor:
    # read back by the 500 handler
    request.state.actor_id = user.id
    return Actor(id=user.id, role=user.role, department_id=user.department_id)
