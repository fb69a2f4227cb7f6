# backend/app/routes/v1/promocode.py
"""
Promocode routes - API v1

Endpoints under /v1/promocode:
    POST /                          → Create (seller/admin)
    GET /                           → List own codes, or all codes for admins
    GET /public                     → Active public codes in their window
    GET /applicable?productIds=a,b  → Public codes grouped by how they apply
    GET /validate/{code}            → Check a code for the caller
    GET /{id}                       → Single code (owner/admin)
    PUT /{id}                       → Partial update (owner/admin)
    DELETE /{id}                    → Delete an unused code (owner/admin)
    PATCH /{id}/toggle-status       → Flip isActive (owner/admin)
    GET /{id}/stats                 → Redemption history (owner/admin)
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.orm import Session

from ...api.dependencies import get_current_user, require_seller_or_admin
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ResponseMessage
from ...core.enums import CreatorType
from ...core.exceptions import DomainException, handle_domain_exception
from ...database import get_db
from ...models.user import User
from ...schemas.base import ApiResponse, PaginationMeta
from ...schemas.promocode import (
    ApplicablePromocodesResponse,
    PromocodeCreate,
    PromocodeListResponse,
    PromocodeResponse,
    PromocodeSummary,
    PromocodeUpdate,
    PromocodeUsageStats,
)
from ...services.promocode_service import PromocodeService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["promocode-v1"])


def get_promocode_service(db: Session = Depends(get_db)) -> PromocodeService:
    return PromocodeService(db)


def _listing(result) -> PromocodeListResponse:
    return PromocodeListResponse(
        promocodes=[PromocodeResponse.model_validate(code) for code in result.items],
        pagination=PaginationMeta.from_page(result),
    )


@router.post("", response_model=ApiResponse[PromocodeResponse], status_code=status.HTTP_201_CREATED)
async def create_promocode(
    request: Request,
    payload: PromocodeCreate,
    current_user: User = Depends(require_seller_or_admin),
    service: PromocodeService = Depends(get_promocode_service),
):
    try:
        promocode = await asyncio.to_thread(service.create, current_user, payload.model_dump())
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[PromocodeResponse].build(
        request,
        PromocodeResponse.model_validate(promocode),
        "Promocode created successfully",
        status.HTTP_201_CREATED,
    )


@router.get("", response_model=ApiResponse[PromocodeListResponse])
async def list_promocodes(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    created_by_type: Optional[CreatorType] = Query(None, alias="createdByType"),
    current_user: User = Depends(require_seller_or_admin),
    service: PromocodeService = Depends(get_promocode_service),
):
    result = await asyncio.to_thread(
        service.list,
        current_user,
        page=page,
        limit=limit,
        is_active=is_active,
        created_by_type=created_by_type.value if created_by_type else None,
    )
    return ApiResponse[PromocodeListResponse].build(request, _listing(result))


@router.get("/public", response_model=ApiResponse[PromocodeListResponse])
async def public_promocodes(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    service: PromocodeService = Depends(get_promocode_service),
):
    result = await asyncio.to_thread(service.public, page=page, limit=limit)
    return ApiResponse[PromocodeListResponse].build(request, _listing(result))


@router.get("/applicable", response_model=ApiResponse[ApplicablePromocodesResponse])
async def applicable_promocodes(
    request: Request,
    product_ids: str = Query(..., alias="productIds", description="Comma separated product ids"),
    service: PromocodeService = Depends(get_promocode_service),
):
    ids: List[str] = product_ids.split(",")
    try:
        result = await asyncio.to_thread(service.applicable, ids)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[ApplicablePromocodesResponse].build(
        request, ApplicablePromocodesResponse.model_validate(result)
    )


@router.get("/validate/{code}", response_model=ApiResponse[PromocodeSummary])
async def validate_promocode(
    request: Request,
    code: str = Path(..., min_length=1, max_length=20),
    current_user: User = Depends(get_current_user),
    service: PromocodeService = Depends(get_promocode_service),
):
    try:
        summary = await asyncio.to_thread(service.validate, code, current_user)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[PromocodeSummary].build(
        request, PromocodeSummary.model_validate(summary), "Promocode is valid"
    )


@router.get("/{id}", response_model=ApiResponse[PromocodeResponse])
async def get_promocode(
    request: Request,
    id: str,
    current_user: User = Depends(require_seller_or_admin),
    service: PromocodeService = Depends(get_promocode_service),
):
    try:
        promocode = await asyncio.to_thread(service.get, id, current_user)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[PromocodeResponse].build(request, PromocodeResponse.model_validate(promocode))


@router.put("/{id}", response_model=ApiResponse[PromocodeResponse])
async def update_promocode(
    request: Request,
    id: str,
    payload: PromocodeUpdate,
    current_user: User = Depends(require_seller_or_admin),
    service: PromocodeService = Depends(get_promocode_service),
):
    try:
        promocode = await asyncio.to_thread(
            service.update, id, current_user, payload.model_dump(exclude_unset=True)
        )
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[PromocodeResponse].build(
        request, PromocodeResponse.model_validate(promocode), ResponseMessage.UPDATED
    )


@router.delete("/{id}", response_model=ApiResponse[None])
async def delete_promocode(
    request: Request,
    id: str,
    current_user: User = Depends(require_seller_or_admin),
    service: PromocodeService = Depends(get_promocode_service),
):
    try:
        await asyncio.to_thread(service.delete, id, current_user)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[None].build(request, None, ResponseMessage.DELETED)


@router.api_route(
    "/{id}/toggle-status", methods=["PATCH", "POST"], response_model=ApiResponse[PromocodeResponse]
)
async def toggle_promocode_status(
    request: Request,
    id: str,
    current_user: User = Depends(require_seller_or_admin),
    service: PromocodeService = Depends(get_promocode_service),
):
    try:
        promocode = await asyncio.to_thread(service.toggle_status, id, current_user)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[PromocodeResponse].build(
        request, PromocodeResponse.model_validate(promocode), ResponseMessage.UPDATED
    )


@router.get("/{id}/stats", response_model=ApiResponse[PromocodeUsageStats])
async def promocode_usage_stats(
    request: Request,
    id: str,
    current_user: User = Depends(require_seller_or_admin),
    service: PromocodeService = Depends(get_promocode_service),
):
    try:
        stats = await asyncio.to_thread(service.usage_stats, id, current_user)
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[PromocodeUsageStats].build(request, PromocodeUsageStats.model_validate(stats))
