# backend/app/routes/v1/taxonomy.py
"""
Shared router builder for the taxonomy resources - API v1

Categories, industries and tools expose the same endpoints; each module
calls build_taxonomy_router with its model and schemas.

Endpoints:
    POST /                          → Create (admin)
    GET /                           → Paginated list
    GET /active                     → Active rows sorted by name
    GET /analytics                  → Overview counters (admin)
    GET /{id}                       → Single row
    PUT /{id}                       → Partial update (admin)
    DELETE /{id}                    → Soft delete (admin)
    PATCH /{id}/toggle-status       → Flip isActive (admin)
    PATCH /{id}/restore             → Undo soft delete (admin)
"""

import asyncio
import logging
from typing import Callable, Optional, Type

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.orm import Session

from ...api.dependencies import require_admin
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ULID_PATH_PATTERN, ResponseMessage
from ...core.enums import SortOrder
from ...core.exceptions import DomainException, handle_domain_exception
from ...database import get_db
from ...models.taxonomy import TaxonomyMixin
from ...models.user import User
from ...schemas.base import ApiResponse, PaginationMeta
from ...schemas.taxonomy import TaxonomyAnalyticsResponse, TaxonomyResponse
from ...services.taxonomy_service import TaxonomyService

logger = logging.getLogger(__name__)


def build_taxonomy_router(
    *,
    model: Type[TaxonomyMixin],
    tag: str,
    plural: str,
    create_schema,
    update_schema,
    response_schema: Type[TaxonomyResponse],
    list_schema,
) -> APIRouter:
    # V1 router - no prefix here, will be added when mounting in main.py
    router = APIRouter(tags=[tag])

    def get_service(db: Session = Depends(get_db)) -> TaxonomyService:
        return TaxonomyService(db, model)

    def one(entity) -> TaxonomyResponse:
        return response_schema.model_validate(entity)

    @router.post(
        "",
        response_model=ApiResponse[response_schema],
        status_code=status.HTTP_201_CREATED,
    )
    async def create(
        request: Request,
        payload: create_schema,
        _: User = Depends(require_admin),
        service: TaxonomyService = Depends(get_service),
    ):
        try:
            entity = await asyncio.to_thread(service.create, payload.model_dump())
        except DomainException as e:
            handle_domain_exception(e)
        return ApiResponse[response_schema].build(
            request, one(entity), ResponseMessage.CREATED, status.HTTP_201_CREATED
        )

    @router.get("", response_model=ApiResponse[list_schema])
    async def list_all(
        request: Request,
        page: int = Query(1, ge=1),
        limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
        sort_by: str = Query("name", alias="sortBy"),
        sort_order: SortOrder = Query(SortOrder.ASC, alias="sortOrder"),
        search: Optional[str] = Query(None, max_length=100),
        is_active: Optional[bool] = Query(None, alias="isActive"),
        service: TaxonomyService = Depends(get_service),
    ):
        try:
            result = await asyncio.to_thread(
                service.list,
                page=page,
                limit=limit,
                sort_by=sort_by,
                sort_order=sort_order,
                search=search,
                is_active=is_active,
            )
        except DomainException as e:
            handle_domain_exception(e)
        data = list_schema(
            **{plural: [one(entity) for entity in result.items]},
            pagination=PaginationMeta.from_page(result),
        )
        return ApiResponse[list_schema].build(request, data)

    @router.get("/active", response_model=ApiResponse[list[response_schema]])
    async def list_active(request: Request, service: TaxonomyService = Depends(get_service)):
        entities = await asyncio.to_thread(service.list_active)
        return ApiResponse[list[response_schema]].build(request, [one(entity) for entity in entities])

    @router.get("/analytics", response_model=ApiResponse[TaxonomyAnalyticsResponse])
    async def analytics(
        request: Request,
        _: User = Depends(require_admin),
        service: TaxonomyService = Depends(get_service),
    ):
        result = await asyncio.to_thread(service.analytics)
        return ApiResponse[TaxonomyAnalyticsResponse].build(
            request, TaxonomyAnalyticsResponse.model_validate(result)
        )

    def entity_endpoint(method: Callable, message: str = ResponseMessage.SUCCESS):
        async def endpoint(
            request: Request,
            id: str = Path(..., pattern=ULID_PATH_PATTERN),
            _: User = Depends(require_admin),
            service: TaxonomyService = Depends(get_service),
        ):
            try:
                entity = await asyncio.to_thread(method, service, id)
            except DomainException as e:
                handle_domain_exception(e)
            return ApiResponse[response_schema].build(request, one(entity), message)

        return endpoint

    @router.get("/{id}", response_model=ApiResponse[response_schema])
    async def get_one(
        request: Request,
        id: str = Path(..., pattern=ULID_PATH_PATTERN),
        service: TaxonomyService = Depends(get_service),
    ):
        try:
            entity = await asyncio.to_thread(service.get, id)
        except DomainException as e:
            handle_domain_exception(e)
        return ApiResponse[response_schema].build(request, one(entity))

    @router.put("/{id}", response_model=ApiResponse[response_schema])
    async def update(
        request: Request,
        payload: update_schema,
        id: str = Path(..., pattern=ULID_PATH_PATTERN),
        _: User = Depends(require_admin),
        service: TaxonomyService = Depends(get_service),
    ):
        try:
            entity = await asyncio.to_thread(service.update, id, payload.model_dump(exclude_unset=True))
        except DomainException as e:
            handle_domain_exception(e)
        return ApiResponse[response_schema].build(request, one(entity), ResponseMessage.UPDATED)

    @router.delete("/{id}", response_model=ApiResponse[None])
    async def delete(
        request: Request,
        id: str = Path(..., pattern=ULID_PATH_PATTERN),
        _: User = Depends(require_admin),
        service: TaxonomyService = Depends(get_service),
    ):
        try:
            await asyncio.to_thread(service.delete, id)
        except DomainException as e:
            handle_domain_exception(e)
        return ApiResponse[None].build(request, None, ResponseMessage.DELETED)

    router.add_api_route(
        "/{id}/toggle-status",
        entity_endpoint(TaxonomyService.toggle_status, ResponseMessage.UPDATED),
        methods=["PATCH"],
        response_model=ApiResponse[response_schema],
        name=f"toggle_{tag}_status",
    )
    router.add_api_route(
        "/{id}/restore",
        entity_endpoint(TaxonomyService.restore, ResponseMessage.UPDATED),
        methods=["PATCH"],
        response_model=ApiResponse[response_schema],
        name=f"restore_{tag}",
    )

    return router
