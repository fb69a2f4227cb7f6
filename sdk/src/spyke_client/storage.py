"""
Persistent client state.

LocalStorage is a small string key/value store kept in SQLite through
SQLAlchemy, in memory when no path is configured. AnalyticsStorage keeps the
pending event list under a single key and caps it.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

metadata = MetaData()

kv_store = Table(
    "kv_store",
    metadata,
    Column("key", String(255), primary_key=True),
    Column("value", Text, nullable=False),
)


class LocalStorage:
    def __init__(self, path: str | None = None) -> None:
        if path:
            self.engine = create_engine(f"sqlite:///{path}")
        else:
            self.engine = create_engine(
                "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
            )
        metadata.create_all(self.engine)

    def get_item(self, key: str) -> str | None:
        with self.engine.connect() as conn:
            return conn.execute(select(kv_store.c.value).where(kv_store.c.key == key)).scalar()

    def set_item(self, key: str, value: str) -> None:
        stmt = insert(kv_store).values(key=key, value=value)
        stmt = stmt.on_conflict_do_update(index_elements=[kv_store.c.key], set_={"value": value})
        with self.engine.begin() as conn:
            conn.execute(stmt)

    def remove_item(self, key: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(kv_store).where(kv_store.c.key == key))

    def clear(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(kv_store))

    def get_json(self, key: str, default: Any = None) -> Any:
        raw = self.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable value stored under %s", key)
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value))

    def close(self) -> None:
        self.engine.dispose()


class AnalyticsStorage:
    """Pending analytics events, oldest first, never more than max_events."""

    def __init__(self, storage: LocalStorage, key: str, max_events: int) -> None:
        self.storage = storage
        self.key = key
        self.max_events = max_events

    def get_events(self) -> list[dict[str, Any]]:
        events = self.storage.get_json(self.key, [])
        return events if isinstance(events, list) else []

    def add_event(self, event: dict[str, Any]) -> None:
        events = self.get_events()
        events.append(event)
        # oldest events are evicted first
        self.storage.set_json(self.key, events[-self.max_events :])

    def remove_events(self, event_ids: Iterable[str]) -> None:
        sent = set(event_ids)
        remaining = [event for event in self.get_events() if event.get("id") not in sent]
        self.storage.set_json(self.key, remaining)

    def clear(self) -> None:
        self.storage.remove_item(self.key)
