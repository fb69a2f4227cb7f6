"""Repository for ingested client analytics events."""

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import distinct, func
from sqlalchemy.orm import Query, Session

from ..core.enums import AnalyticsEventType
from ..models.analytics_event import AnalyticsEvent
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


@dataclass
class EventWindow:
    events: List[AnalyticsEvent]
    total: int


class AnalyticsEventRepository(BaseRepository[AnalyticsEvent]):
    def __init__(self, db: Session) -> None:
        super().__init__(db, AnalyticsEvent)

    def bulk_insert(self, rows: List[Dict[str, Any]]) -> int:
        self.db.add_all([AnalyticsEvent(**row) for row in rows])
        self.flush()
        return len(rows)

    def _windowed(
        self,
        start: Optional[datetime],
        end: Optional[datetime],
        event_type: Optional[str] = None,
        column=AnalyticsEvent.timestamp,
    ) -> Query:
        query = self.db.query(AnalyticsEvent)
        if event_type:
            query = query.filter(AnalyticsEvent.type == event_type)
        if start is not None:
            query = query.filter(column >= start)
        if end is not None:
            query = query.filter(column <= end)
        return query

    def list_events(
        self,
        *,
        event_type: Optional[str],
        limit: int,
        offset: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> EventWindow:
        query = self._windowed(start, end, event_type, column=AnalyticsEvent.created_at)
        total = query.count()
        events = (
            query.order_by(AnalyticsEvent.created_at.desc(), AnalyticsEvent.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return EventWindow(events=events, total=total)

    def stats(self, start: Optional[datetime], end: Optional[datetime]) -> Dict[str, int]:
        """Counters over events received inside the window."""
        base = self._windowed(start, end, column=AnalyticsEvent.created_at)
        by_type = dict(
            base.with_entities(AnalyticsEvent.type, func.count(AnalyticsEvent.id))
            .group_by(AnalyticsEvent.type)
            .all()
        )
        status = AnalyticsEvent.properties["status"].as_string()
        page_view_statuses = dict(
            base.filter(AnalyticsEvent.type == AnalyticsEventType.PAGEVIEW.value)
            .with_entities(status, func.count(AnalyticsEvent.id))
            .group_by(status)
            .all()
        )
        unique_sessions = base.with_entities(func.count(distinct(AnalyticsEvent.session_id))).scalar() or 0
        unique_users = (
            base.filter(AnalyticsEvent.user_id.isnot(None))
            .with_entities(func.count(distinct(AnalyticsEvent.user_id)))
            .scalar()
            or 0
        )
        return {
            "total_events": sum(by_type.values()),
            "page_views": by_type.get(AnalyticsEventType.PAGEVIEW.value, 0),
            "successful_page_views": page_view_statuses.get("success", 0),
            "error_page_views": page_view_statuses.get("error", 0),
            "clicks": by_type.get(AnalyticsEventType.CLICK.value, 0),
            "errors": by_type.get(AnalyticsEventType.ERROR.value, 0),
            "forms": by_type.get(AnalyticsEventType.FORM.value, 0),
            "unique_sessions": unique_sessions,
            "unique_users": unique_users,
        }

    def delete_all(self) -> int:
        deleted = self.db.query(AnalyticsEvent).delete(synchronize_session=False)
        self.flush()
        return deleted

