# backend/app/routes/v1/admin.py
"""
Admin user management routes - API v1

Endpoints under /v1/admin (admin only):
    GET /users                  → Paginated accounts with search and role filter
    PATCH /users/{id}/suspend   → Deactivate an account
    PATCH /users/{id}/activate  → Reactivate an account
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ...api.dependencies import require_admin
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ResponseMessage
from ...core.enums import RoleName
from ...core.exceptions import DomainException, handle_domain_exception
from ...database import get_db
from ...models.user import User
from ...schemas.base import ApiResponse, PaginationMeta
from ...schemas.user import UserListResponse, UserResponse
from ...services.user_admin_service import UserAdminService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin-v1"])


def get_user_admin_service(db: Session = Depends(get_db)) -> UserAdminService:
    return UserAdminService(db)


@router.get("/users", response_model=ApiResponse[UserListResponse])
async def list_users(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, max_length=100),
    role: Optional[RoleName] = Query(None),
    _: User = Depends(require_admin),
    service: UserAdminService = Depends(get_user_admin_service),
):
    result = await asyncio.to_thread(
        service.list_users, page=page, limit=limit, search=search, role=role.value if role else None
    )
    data = UserListResponse(
        users=[UserResponse.model_validate(user) for user in result.items],
        pagination=PaginationMeta.from_page(result),
    )
    return ApiResponse[UserListResponse].build(request, data)


async def _set_active(request: Request, service: UserAdminService, admin: User, user_id: str, active: bool):
    try:
        user = await asyncio.to_thread(service.set_active, admin, user_id, active)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[UserResponse].build(
        request, UserResponse.model_validate(user), ResponseMessage.UPDATED
    )


@router.patch("/users/{user_id}/suspend", response_model=ApiResponse[UserResponse])
async def suspend_user(
    request: Request,
    user_id: str,
    admin: User = Depends(require_admin),
    service: UserAdminService = Depends(get_user_admin_service),
):
    return await _set_active(request, service, admin, user_id, False)


@router.patch("/users/{user_id}/activate", response_model=ApiResponse[UserResponse])
async def activate_user(
    request: Request,
    user_id: str,
    admin: User = Depends(require_admin),
    service: UserAdminService = Depends(get_user_admin_service),
):
    return await _set_active(request, service, admin, user_id, True)
