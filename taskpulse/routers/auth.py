from fastapi import APIRouter, Cookie, Depends, Response, status
from sqlalchemy.orm import Session
from typing import Optional

from taskpulse.config.settings import settings
from taskpulse.database import get_db
from taskpulse.exceptions import UnauthenticatedError
from taskpulse.models.user import User
from taskpulse.schemas.tokens import Token
from taskpulse.schemas.user import UserLogin, UserOut, UserRegister
from taskpulse.services.notifier import NotificationDispatcher, get_dispatcher
from taskpulse.services.user_service import UserService
from taskpulse.utils.auth import get_current_user, user_from_token
from taskpulse.utils.security import create_access_token, create_refresh_token, verify_password

router = APIRouter()

REFRESH_COOKIE = "refreshToken"


def _issue_tokens(user: User, response: Response) -> dict:
    response.set_cookie(
        REFRESH_COOKIE,
        create_refresh_token(data={"sub": user.id}),
        httponly=True,
        secure=settings.SECURE_COOKIES,
        samesite="strict",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )
    return {
        "access_token": create_access_token(data={"sub": user.id}),
        "token_type": "bearer",
        "user": user,
    }


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(user: UserRegister, response: Response, db: Session = Depends(get_db),
             dispatcher: NotificationDispatcher = Depends(get_dispatcher)):
    new_user = UserService(db, dispatcher).register(user)
    return _issue_tokens(new_user, response)


@router.post("/login", response_model=Token)
def login(user: UserLogin, response: Response, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == user.email.lower()).first()
    if not db_user or not verify_password(user.password, db_user.password_hash):
        raise UnauthenticatedError("Invalid credentials")
    return _issue_tokens(db_user, response)


@router.post("/refresh-token", response_model=Token)
def refresh_token(response: Response, db: Session = Depends(get_db),
                  refresh: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE)):
    if not refresh:
        raise UnauthenticatedError("Refresh token not found")
    user = user_from_token(refresh, db, refresh=True)
    return _issue_tokens(user, response)


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(REFRESH_COOKIE)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
