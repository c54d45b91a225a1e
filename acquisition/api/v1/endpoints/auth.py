import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from acquisition.core.config import settings
from acquisition.core.db import get_db
from acquisition.core.security import create_access_token
from acquisition.models.user import User
from acquisition.schemas.auth import AuthOut, MessageOut, SigninIn, SignupIn
from acquisition.schemas.user import UserOut
from acquisition.services.users import authenticate_user, create_user

log = logging.getLogger(__name__)
router = APIRouter(prefix="/auth")


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "strict",
    }


def _issue_token(response: Response, user: User) -> str:
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.jwt_expires_minutes * 60,
        **_cookie_options(),
    )
    return token


@router.post("/signup", response_model=AuthOut, status_code=201)
async def signup(payload: SignupIn, response: Response, db: AsyncSession = Depends(get_db)) -> AuthOut:
    user = await create_user(
        db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    token = _issue_token(response, user)
    log.info("user registered: %s", user.id)
    return AuthOut(user=UserOut.model_validate(user), access_token=token)


@router.post("/signin", response_model=AuthOut)
async def signin(payload: SigninIn, response: Response, db: AsyncSession = Depends(get_db)) -> AuthOut:
    user = await authenticate_user(db, email=payload.email, password=payload.password)
    token = _issue_token(response, user)
    log.info("user signed in: %s", user.id)
    return AuthOut(user=UserOut.model_validate(user), access_token=token)


@router.post("/signout", response_model=MessageOut)
async def signout(response: Response) -> MessageOut:
    response.delete_cookie(key=settings.auth_cookie_name, **_cookie_options())
    return MessageOut(message="Signed out successfully")
