import asyncio

import pytest

from spyke_client.analytics import Analytics
from spyke_client.config import Settings
from spyke_client.sinks import RecordingSink


@pytest.fixture
def analytics(settings, storage, sink):
    return Analytics(settings, storage=storage, sink=sink)


async def settle(analytics: Analytics) -> None:
    while analytics._pending:
        await asyncio.gather(*analytics._pending)


def test_disabled_and_do_not_track_are_no_ops(storage, sink):
    for settings in (Settings(analytics_enabled=False), Settings(do_not_track=True)):
        analytics = Analytics(settings, storage=storage, sink=sink)
        analytics.track("Signed Up")
        analytics.track_page_view({"path": "/"})
        assert analytics.queue == []
        assert analytics.storage.get_events() == []


def test_do_not_track_can_be_ignored(storage, sink):
    settings = Settings(do_not_track=True, respect_do_not_track=False)
    analytics = Analytics(settings, storage=storage, sink=sink)
    analytics.track("Signed Up")
    assert len(analytics.queue) == 1


def test_event_shape_and_sanitizing(analytics):
    analytics.identify("user-1", {"plan": "pro", "password": "x"})
    analytics.track_click("button#buy", {"contact": "jane@example.com"})

    identified, click = analytics.queue
    assert identified["name"] == "User Identified"
    assert identified["type"] == "custom"
    assert identified["properties"] == {"plan": "pro"}
    assert identified["userId"] == "user-1"
    assert identified["sessionId"] == analytics.session_id
    assert isinstance(identified["timestamp"], int)
    assert click["type"] == "click"
    assert click["properties"]["element"] == "button#buy"
    assert click["properties"]["contact"] == "[EMAIL]"


def test_consent(analytics):
    assert analytics.get_consent() is True
    analytics.track("Viewed")

    analytics.set_consent(False)
    assert analytics.get_consent() is False
    assert analytics.queue == []
    assert analytics.storage.get_events() == []
    assert analytics.local_storage.get_item("analytics_consent") == "denied"

    analytics.track("Ignored")
    assert analytics.queue == []

    analytics.set_consent(True)
    analytics.track("Counted")
    assert [e["name"] for e in analytics.queue] == ["Counted"]


def test_stored_events_are_capped(storage, sink):
    analytics = Analytics(
        Settings(batch_size=100, max_stored_events=5), storage=storage, sink=sink
    )
    for n in range(7):
        analytics.track(f"event {n}")

    assert len(analytics.queue) == 7
    assert [e["name"] for e in analytics.storage.get_events()] == [f"event {n}" for n in range(2, 7)]


@pytest.mark.asyncio
async def test_full_batch_flushes(analytics, sink):
    for n in range(3):
        analytics.track(f"event {n}")
    await settle(analytics)

    assert [len(batch) for batch in sink.batches] == [3]
    assert analytics.queue == []
    assert analytics.storage.get_events() == []


@pytest.mark.asyncio
async def test_timer_flushes(storage, sink):
    analytics = Analytics(Settings(batch_interval=0.05), storage=storage, sink=sink)
    analytics.track_page_view({"path": "/products"})
    assert sink.batches == []

    await asyncio.sleep(0.2)
    await settle(analytics)
    assert [e["type"] for e in sink.events] == ["pageview"]


@pytest.mark.asyncio
async def test_errors_flush_immediately(analytics, sink):
    try:
        raise ValueError("boom")
    except ValueError as e:
        analytics.track_error(e)
    await settle(analytics)

    (event,) = sink.events
    assert event["type"] == "error"
    assert event["properties"]["message"] == "boom"
    assert event["properties"]["errorType"] == "ValueError"
    assert "Traceback" in event["properties"]["stack"]


@pytest.mark.asyncio
async def test_offline_holds_events_until_online(analytics, sink):
    analytics.set_online(False)
    for n in range(4):
        analytics.track(f"event {n}")
    await settle(analytics)
    assert sink.batches == []
    assert len(analytics.queue) == 4

    analytics.set_online(True)
    await settle(analytics)
    assert len(sink.events) == 4


@pytest.mark.asyncio
async def test_failed_send_requeues_at_front(analytics, sink):
    sink.fail_next = 1
    analytics.track("first")

    assert await analytics.flush() == 0
    assert [e["name"] for e in analytics.queue] == ["first"]
    assert [e["name"] for e in analytics.storage.get_events()] == ["first"]

    analytics.track("second")
    assert await analytics.flush() == 2
    assert [e["name"] for e in sink.events] == ["first", "second"]
    assert analytics.storage.get_events() == []


class StalledSink(RecordingSink):
    """Holds every send until released, then succeeds or fails like RecordingSink."""

    def __init__(self) -> None:
        super().__init__()
        self.sending = asyncio.Event()
        self.release = asyncio.Event()

    async def send(self, events):
        self.sending.set()
        await self.release.wait()
        await super().send(events)


@pytest.mark.asyncio
async def test_withdrawn_consent_drops_batch_that_failed_in_flight(settings, storage):
    sink = StalledSink()
    sink.fail_next = 1
    analytics = Analytics(settings, storage=storage, sink=sink)
    analytics.track("before consent withdrawn")

    sending = asyncio.create_task(analytics.flush())
    await sink.sending.wait()
    analytics.set_consent(False)
    sink.release.set()

    assert await sending == 0
    assert analytics.queue == []
    assert analytics.storage.get_events() == []

    assert await analytics.flush(force=True) == 0
    analytics.set_consent(True)
    assert await analytics.flush() == 0
    assert sink.events == []


@pytest.mark.asyncio
async def test_flush_is_a_no_op_without_consent(analytics, sink):
    analytics.track("queued")
    analytics.local_storage.set_item(analytics.settings.consent_key, "denied")

    assert await analytics.flush(force=True) == 0
    assert sink.batches == []


@pytest.mark.asyncio
async def test_init_reloads_and_shutdown_forces(settings, storage, sink):
    earlier = Analytics(settings, storage=storage, sink=sink)
    earlier.set_online(False)
    earlier.track("left over")

    later = Analytics(settings, storage=storage, sink=sink)
    later.init()
    later.init()
    assert [e["name"] for e in later.queue] == ["left over"]

    later.set_online(False)
    await later.shutdown()
    assert [e["name"] for e in sink.events] == ["left over"]


def test_tracking_without_event_loop(analytics):
    analytics.track_error({"message": "render failed"})
    analytics.track_form({"action": "submit", "formId": "signup"})
    analytics.track_performance({"pageLoadTime": 420})

    assert [e["name"] for e in analytics.queue] == ["Error", "Form submit", "Performance Metrics"]
