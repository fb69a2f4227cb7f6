# backend/app/routes/v1/auth.py
"""
Authentication routes - API v1

Versioned authentication endpoints under /v1/auth.

Endpoints:
    GET /self          → Service health
    POST /register     → Account registration (rate limited)
    POST /login        → Email/password login returning a bearer token (rate limited)
    GET /me            → Current user
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ...api.dependencies import get_current_user
from ...core.constants import ResponseMessage
from ...core.exceptions import DomainException, handle_domain_exception
from ...database import get_db
from ...middleware.rate_limiter import rate_limit_auth
from ...models.user import User
from ...schemas.base import ApiResponse
from ...schemas.user import AuthTokenResponse, LoginRequest, RegisterRequest, UserResponse
from ...services.auth_service import AuthService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["auth-v1"])


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


@router.get("/self", response_model=ApiResponse[None])
async def auth_self(request: Request):
    return ApiResponse[None].build(request, None, ResponseMessage.service("Authentication"))


@router.post(
    "/register",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_auth)],
)
async def register(
    request: Request,
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    try:
        user = await asyncio.to_thread(
            auth_service.register,
            payload.name,
            payload.email,
            payload.password,
            payload.become_seller,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[UserResponse].build(
        request, UserResponse.model_validate(user), "Registration successful", status.HTTP_201_CREATED
    )


@router.post(
    "/login",
    response_model=ApiResponse[AuthTokenResponse],
    dependencies=[Depends(rate_limit_auth)],
)
async def login(
    request: Request,
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    try:
        result = await asyncio.to_thread(auth_service.authenticate, payload.email, payload.password)
    except DomainException as e:
        handle_domain_exception(e)
    logger.info("User %s logged in", result["user"].id)
    return ApiResponse[AuthTokenResponse].build(
        request, AuthTokenResponse.model_validate(result), ResponseMessage.LOGIN_SUCCESS
    )


@router.get("/me", response_model=ApiResponse[UserResponse])
async def me(request: Request, current_user: User = Depends(get_current_user)):
    return ApiResponse[UserResponse].build(request, UserResponse.model_validate(current_user))
