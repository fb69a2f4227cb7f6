"""Client analytics ingestion and admin reporting."""

import time

from app.models.analytics_event import AnalyticsEvent


def _batch():
    now_ms = int(time.time() * 1000)
    return {
        "events": [
            {
                "id": "evt-1",
                "type": "pageview",
                "name": "page_view",
                "properties": {"path": "/products", "status": "success"},
                "timestamp": now_ms,
                "sessionId": "session-a",
            },
            {
                "id": "evt-2",
                "type": "click",
                "name": "add_to_cart",
                "properties": {"productId": "p-1"},
                "timestamp": now_ms,
                "sessionId": "session-a",
                "somethingNew": "ignored",
            },
        ]
    }


def test_self_check(client):
    res = client.get("/v1/analytics/self")
    assert res.status_code == 200
    assert res.json()["success"] is True


def test_anonymous_ingest(client, db):
    res = client.post("/v1/analytics/events", json=_batch(), headers={"User-Agent": "pytest-agent"})

    assert res.status_code == 200
    assert res.json()["data"] == {"count": 2}
    stored = db.query(AnalyticsEvent).order_by(AnalyticsEvent.client_event_id).all()
    assert [event.client_event_id for event in stored] == ["evt-1", "evt-2"]
    assert stored[0].user_id is None
    assert stored[0].user_agent == "pytest-agent"


def test_ingest_stamps_signed_in_user(client, db, buyer, auth_headers_buyer):
    client.post("/v1/analytics/events", json=_batch(), headers=auth_headers_buyer)

    assert {event.user_id for event in db.query(AnalyticsEvent).all()} == {buyer.id}


def test_empty_batch_rejected(client):
    res = client.post("/v1/analytics/events", json={"events": []})
    assert res.status_code == 400
    assert res.json()["code"] == "validation_error"


def test_admin_reporting(client, auth_headers_admin):
    client.post("/v1/analytics/events", json=_batch())

    events = client.get(
        "/v1/analytics/events", params={"type": "click"}, headers=auth_headers_admin
    ).json()["data"]
    assert [event["name"] for event in events["events"]] == ["add_to_cart"]
    assert events["pagination"] == {"total": 1, "limit": 100, "offset": 0, "hasMore": False}

    stats = client.get(
        "/v1/analytics/stats", params={"period": "all"}, headers=auth_headers_admin
    ).json()["data"]
    assert stats["period"] == "all"
    assert stats["stats"]["totalEvents"] == 2
    assert stats["stats"]["pageViews"] == 1
    assert stats["stats"]["clicks"] == 1
    assert stats["stats"]["uniqueSessions"] == 1

    cleared = client.delete("/v1/analytics/events", headers=auth_headers_admin).json()["data"]
    assert cleared == {"deletedCount": 2}


def test_reporting_requires_admin(client, auth_headers_seller):
    assert client.get("/v1/analytics/events", headers=auth_headers_seller).status_code == 403
    assert client.get("/v1/analytics/stats").status_code == 401
    assert client.delete("/v1/analytics/events", headers=auth_headers_seller).status_code == 403
