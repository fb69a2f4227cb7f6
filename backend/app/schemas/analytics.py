"""Schemas for client analytics ingestion and reporting."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..core.enums import AnalyticsEventType, StatsPeriod
from ..core.timezone_utils import ensure_utc, from_millis
from .base import CamelModel


class EventIn(CamelModel):
    """
    One event as produced by the browser queue.

    Clients send the timestamp as epoch milliseconds; ISO-8601 strings are
    accepted too. Unknown keys are ignored so older clients keep working.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore",
    )

    id: Optional[str] = Field(None, max_length=64)
    type: AnalyticsEventType = AnalyticsEventType.CUSTOM
    name: Optional[str] = Field(None, max_length=200)
    properties: Dict[str, Any] = Field(default_factory=dict)
    timestamp: Optional[Union[int, float, datetime]] = None
    session_id: Optional[str] = Field(None, max_length=64)
    user_id: Optional[str] = Field(None, max_length=64)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value):
        if value is None:
            return None
        if isinstance(value, (int, float)):
            return from_millis(value)
        return ensure_utc(value)


class IngestRequest(CamelModel):
    events: List[EventIn] = Field(..., min_length=1)


class IngestResponse(CamelModel):
    count: int


class EventResponse(CamelModel):
    id: str
    client_event_id: Optional[str] = None
    type: str
    name: Optional[str] = None
    properties: Dict[str, Any] = Field(default_factory=dict)
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    timestamp: datetime
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: Optional[datetime] = None


class OffsetPagination(CamelModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class EventListResponse(CamelModel):
    events: List[EventResponse]
    pagination: OffsetPagination


class EventStats(CamelModel):
    total_events: int
    page_views: int
    successful_page_views: int
    error_page_views: int
    clicks: int
    errors: int
    forms: int
    unique_sessions: int
    unique_users: int


class DateRange(CamelModel):
    start: Optional[datetime] = None
    end: datetime


class StatsResponse(CamelModel):
    stats: EventStats
    period: StatsPeriod
    date_range: DateRange


class ClearEventsResponse(CamelModel):
    deleted_count: int
