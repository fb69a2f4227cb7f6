# backend/app/services/analytics_service.py
"""
Analytics Service for client events.

Batches posted by the browser queue are stored as-is apart from the
request context the server knows better than the client: the caller's
user id, IP address and user agent.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import StatsPeriod
from ..core.exceptions import ValidationException
from ..core.timezone_utils import ensure_utc, period_range, utc_now
from ..repositories.analytics_event_repository import EventWindow
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 500


class AnalyticsService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_analytics_event_repository(db)

    @BaseService.measure_operation("ingest_events")
    def ingest(
        self,
        events: List[Dict[str, Any]],
        *,
        user_id: Optional[str] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> int:
        """
        Store a batch of events.

        Args:
            events: Validated event dicts (id, type, name, properties, timestamp, session_id, user_id)
            user_id: Authenticated caller; overrides whatever the client claimed
            ip: Client address
            user_agent: Client user agent header

        Returns:
            Number of events stored
        """
        if not events:
            raise ValidationException("At least one event is required")
        if len(events) > settings.analytics_max_batch_size:
            raise ValidationException(
                f"Batch exceeds the maximum of {settings.analytics_max_batch_size} events",
                code="BATCH_TOO_LARGE",
            )

        received_at = utc_now()
        rows = [
            {
                "client_event_id": event.get("id"),
                "type": event["type"],
                "name": event.get("name"),
                "properties": event.get("properties") or {},
                "session_id": event.get("session_id"),
                "user_id": user_id or event.get("user_id"),
                "timestamp": event.get("timestamp") or received_at,
                "ip": ip,
                "user_agent": (user_agent or "")[:500] or None,
                "created_at": received_at,
            }
            for event in events
        ]

        with self.transaction():
            count = self.repository.bulk_insert(rows)

        logger.debug("Stored %d analytics events", count)
        return count

    def list_events(
        self,
        *,
        event_type: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> EventWindow:
        if limit < 1 or offset < 0:
            raise ValidationException("Invalid pagination parameters")
        if event_type == "all":
            event_type = None
        return self.repository.list_events(
            event_type=event_type,
            limit=min(limit, MAX_LIST_LIMIT),
            offset=offset,
            start=ensure_utc(start),
            end=ensure_utc(end),
        )

    def stats(self, period: StatsPeriod = StatsPeriod.TODAY) -> Dict[str, Any]:
        start, end = period_range(period)
        return {
            "stats": self.repository.stats(start, end),
            "period": period,
            "date_range": {"start": start, "end": end},
        }

    def clear(self) -> int:
        with self.transaction():
            deleted = self.repository.delete_all()
        self.log_operation("clear_analytics_events", deleted=deleted)
        return deleted
