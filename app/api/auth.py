"""
Compare AI — Authentication API

Session-cookie registration, login and logout.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request, Response, status

from app.api.deps import SESSION_USER_KEY, get_auth_service, get_current_user
from app.models.user import User
from app.schemas.user import UserLogin, UserRegister, UserResponse
from app.services.auth_service import AuthService

logger = structlog.get_logger("compare_ai.api.auth")

router = APIRouter()


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account and log in",
)
async def register(
    payload: UserRegister,
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> User:
    user = await auth.register(
        username=payload.username,
        password=payload.password,
        accept_policy=payload.accept_policy,
    )
    request.session[SESSION_USER_KEY] = user.id
    return user


@router.post("/login", response_model=UserResponse, summary="Log in")
async def login(
    payload: UserLogin,
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> User:
    user = await auth.authenticate(payload.username, payload.password)
    request.session[SESSION_USER_KEY] = user.id
    logger.info("user_logged_in", user_id=user.id)
    return user


@router.post("/logout", summary="Log out")
async def logout(request: Request) -> Response:
    request.session.clear()
    return Response(status_code=status.HTTP_200_OK)


@router.get("/user", response_model=UserResponse, summary="Current user")
async def current_user(user: User = Depends(get_current_user)) -> User:
    return user
