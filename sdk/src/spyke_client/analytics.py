"""
Client-side analytics queue.

Events are queued in memory and mirrored into persistent storage, then
delivered to a sink in batches: when the queue reaches batch_size, when the
batch timer fires, straight away for errors, and on shutdown. Tracking calls
never raise and never wait on the network.
"""

from __future__ import annotations

import asyncio
import logging
import traceback
from typing import Any, Coroutine, Mapping

from .api_client import ApiClient
from .config import Settings
from .sinks import BackendSink, EventSink
from .storage import AnalyticsStorage, LocalStorage
from .utils import generate_id, now_ms, sanitize_properties

logger = logging.getLogger(__name__)

CONSENT_GRANTED = "granted"
CONSENT_DENIED = "denied"
USER_ID_KEY = "userId"


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Analytics:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        storage: LocalStorage | None = None,
        sink: EventSink | None = None,
        client: ApiClient | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.local_storage = storage or LocalStorage(self.settings.storage_path)
        self.storage = AnalyticsStorage(
            self.local_storage, self.settings.queue_key, self.settings.max_stored_events
        )
        if sink is None:
            sink = BackendSink(client or ApiClient(self.settings, self.local_storage))
        self.sink = sink

        self.queue: list[dict[str, Any]] = []
        self.initialized = False
        self.is_online = True
        self.session_id = generate_id()
        self.local_storage.set_item(self.settings.session_key, self.session_id)

        self._timer: asyncio.TimerHandle | None = None
        self._pending: set[asyncio.Task] = set()
        self._send_lock = asyncio.Lock()
        self._consent_generation = 0

    def _debug(self, message: str, *args: Any) -> None:
        if self.settings.debug:
            logger.debug(message, *args)

    # Lifecycle

    def init(self) -> None:
        """Reload events persisted by an earlier run. Safe to call twice."""
        if self.initialized:
            return
        stored = self.storage.get_events()
        if stored:
            self.queue.extend(stored)
            self._schedule_batch()
        self.initialized = True
        self._debug("Analytics initialized with %d stored events", len(stored))

    async def shutdown(self) -> None:
        """Deliver whatever is queued, even while offline."""
        self._cancel_timer()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self.flush(force=True)

    # Consent

    def should_track(self) -> bool:
        if not self.settings.analytics_enabled:
            return False
        if self.settings.respect_do_not_track and self.settings.do_not_track:
            return False
        return self.local_storage.get_item(self.settings.consent_key) != CONSENT_DENIED

    def set_consent(self, consent: bool) -> None:
        self.local_storage.set_item(
            self.settings.consent_key, CONSENT_GRANTED if consent else CONSENT_DENIED
        )
        if not consent:
            self._consent_generation += 1
            self.storage.clear()
            self.queue.clear()
            self._cancel_timer()

    def get_consent(self) -> bool:
        return self.local_storage.get_item(self.settings.consent_key) != CONSENT_DENIED

    def set_online(self, online: bool) -> None:
        self.is_online = online
        if online:
            self._spawn(self.flush())

    # Tracking

    def _event(self, event_type: str, name: str, properties: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "id": generate_id(),
            "type": event_type,
            "name": name,
            "properties": sanitize_properties(properties),
            "timestamp": now_ms(),
            "sessionId": self.session_id,
            "userId": self.local_storage.get_item(USER_ID_KEY),
        }

    def identify(self, user_id: str, properties: Mapping[str, Any] | None = None) -> None:
        if not self.should_track():
            return
        self.local_storage.set_item(USER_ID_KEY, user_id)
        self.track("User Identified", properties)

    def track(self, name: str, properties: Mapping[str, Any] | None = None) -> None:
        if not self.should_track():
            self._debug("Analytics tracking disabled by user preference")
            return
        self._add_to_queue(self._event("custom", name, properties or {}))

    def track_page_view(self, data: Mapping[str, Any] | None = None) -> None:
        if self.should_track():
            self._add_to_queue(self._event("pageview", "Page View", data or {}))

    def track_click(self, target: str, data: Mapping[str, Any] | None = None) -> None:
        if self.should_track():
            properties = {"element": target, "timestamp": now_ms(), **(data or {})}
            self._add_to_queue(self._event("click", "Element Click", properties))

    def track_form(self, form_data: Mapping[str, Any]) -> None:
        if self.should_track():
            name = f"Form {form_data.get('action', 'submit')}"
            self._add_to_queue(self._event("form", name, form_data))

    def track_error(self, error: BaseException | Mapping[str, Any]) -> None:
        if not self.should_track():
            return
        if isinstance(error, BaseException):
            properties: Mapping[str, Any] = {
                "message": str(error),
                "errorType": type(error).__name__,
                "stack": "".join(traceback.format_exception(error)),
            }
        else:
            properties = error
        self._add_to_queue(self._event("error", "Error", properties))
        self._spawn(self.flush())

    def track_performance(self, metrics: Mapping[str, Any]) -> None:
        if self.should_track():
            self._add_to_queue(self._event("performance", "Performance Metrics", metrics))

    # Queue

    def _add_to_queue(self, event: dict[str, Any]) -> None:
        self.queue.append(event)
        self.storage.add_event(event)
        self._debug("Analytics event queued: %s", event["name"])

        if len(self.queue) >= self.settings.batch_size:
            self._spawn(self.flush())
        else:
            self._schedule_batch()

    def _schedule_batch(self) -> None:
        if self._timer is not None:
            return
        loop = _running_loop()
        # without a loop the events wait in storage for the next flush
        if loop is None:
            return
        self._timer = loop.call_later(self.settings.batch_interval, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        self._spawn(self.flush())

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        loop = _running_loop()
        if loop is None:
            coro.close()
            return
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush(self, force: bool = False) -> int:
        """
        Send the queued events as one batch.

        Returns the number of events delivered. On failure the batch goes
        back to the front of the queue, stays in storage and a new timer is
        scheduled, unless consent was withdrawn while the send was in flight.
        """
        async with self._send_lock:
            if not self.should_track():
                return 0
            if not self.is_online and not force:
                return 0
            if not self.queue:
                return 0

            events = list(self.queue)
            self.queue.clear()
            self._cancel_timer()
            generation = self._consent_generation

            try:
                await self.sink.send(events)
            except Exception:
                logger.warning("Failed to send analytics batch of %d events", len(events), exc_info=True)
                if generation != self._consent_generation or not self.should_track():
                    self._debug("Consent withdrawn during send, dropping %d events", len(events))
                    return 0
                self.queue[:0] = events
                self._schedule_batch()
                return 0

            self.storage.remove_events(event["id"] for event in events)
            self._debug("Analytics batch sent: %d events", len(events))
            return len(events)
