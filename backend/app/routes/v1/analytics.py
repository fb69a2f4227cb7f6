# backend/app/routes/v1/analytics.py
"""
Analytics ingestion routes - API v1

Endpoints under /v1/analytics:
    GET /self           → Service health
    POST /events        → Ingest a batch from the client queue (optional auth, rate limited)
    GET /events         → Browse stored events (admin)
    GET /stats          → Counters for a period (admin)
    DELETE /events      → Delete every stored event (admin)
"""

import asyncio
from datetime import datetime
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ...api.dependencies import get_current_user_optional, require_admin
from ...core.constants import ResponseMessage
from ...core.enums import StatsPeriod
from ...core.exceptions import DomainException, handle_domain_exception
from ...database import get_db
from ...middleware.rate_limiter import get_client_ip, rate_limit_analytics
from ...models.user import User
from ...schemas.analytics import (
    ClearEventsResponse,
    EventListResponse,
    EventResponse,
    IngestRequest,
    IngestResponse,
    OffsetPagination,
    StatsResponse,
)
from ...schemas.base import ApiResponse
from ...services.analytics_service import AnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analytics-v1"])


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


@router.get("/self", response_model=ApiResponse[None])
async def analytics_self(request: Request):
    return ApiResponse[None].build(request, None, ResponseMessage.service("Analytics Events"))


@router.post(
    "/events",
    response_model=ApiResponse[IngestResponse],
    dependencies=[Depends(rate_limit_analytics)],
)
async def ingest_events(
    request: Request,
    payload: IngestRequest,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        count = await asyncio.to_thread(
            service.ingest,
            [event.model_dump() for event in payload.events],
            user_id=current_user.id if current_user else None,
            ip=get_client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
    except DomainException as e:
        handle_domain_exception(e)
    return ApiResponse[IngestResponse].build(
        request, IngestResponse(count=count), "Events tracked successfully"
    )


@router.get("/events", response_model=ApiResponse[EventListResponse])
async def list_events(
    request: Request,
    event_type: str = Query("all", alias="type"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    _: User = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        window = await asyncio.to_thread(
            service.list_events,
            event_type=event_type,
            limit=limit,
            offset=offset,
            start=start_date,
            end=end_date,
        )
    except DomainException as e:
        handle_domain_exception(e)
    data = EventListResponse(
        events=[EventResponse.model_validate(event) for event in window.events],
        pagination=OffsetPagination(
            total=window.total,
            limit=limit,
            offset=offset,
            has_more=window.total > offset + limit,
        ),
    )
    return ApiResponse[EventListResponse].build(request, data)


@router.get("/stats", response_model=ApiResponse[StatsResponse])
async def event_stats(
    request: Request,
    period: StatsPeriod = Query(StatsPeriod.TODAY),
    _: User = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    result = await asyncio.to_thread(service.stats, period)
    return ApiResponse[StatsResponse].build(request, StatsResponse.model_validate(result))


@router.delete("/events", response_model=ApiResponse[ClearEventsResponse])
async def clear_events(
    request: Request,
    _: User = Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
):
    deleted = await asyncio.to_thread(service.clear)
    return ApiResponse[ClearEventsResponse].build(
        request, ClearEventsResponse(deleted_count=deleted), "Analytics events cleared"
    )
