import json

import pytest
import respx

from spyke_client.api import (
    AnalyticsApi,
    AuthApi,
    CartApi,
    CategoriesApi,
    ProductsApi,
    PromocodeApi,
    PurchaseApi,
)

API_URL = "https://api.spyke.test"


def _envelope(data):
    return {"success": True, "statusCode": 200, "message": "ok", "data": data}


@pytest.mark.asyncio
@respx.mock
async def test_login_persists_session(client):
    respx.post(f"{API_URL}/v1/auth/login").respond(
        200,
        json=_envelope(
            {
                "accessToken": "jwt",
                "tokenType": "bearer",
                "expiresIn": 3600,
                "user": {"id": "u1", "roles": ["user"]},
            }
        ),
    )

    result = await AuthApi(client).login("a@example.com", "secret-pass")

    assert result["accessToken"] == "jwt"
    assert client.get_current_token() == "jwt"
    assert client.storage.get_json("roles") == ["user"]
    assert client.storage.get_item("loginTime") is not None


@pytest.mark.asyncio
@respx.mock
async def test_taxonomy_calls(client):
    listing = respx.get(f"{API_URL}/v1/categories").respond(200, json=_envelope({"categories": []}))
    toggle = respx.patch(f"{API_URL}/v1/categories/c1/toggle-status").respond(
        200, json=_envelope({"id": "c1", "isActive": False})
    )

    categories = CategoriesApi(client)
    assert await categories.list(search="mark", is_active=True) == {"categories": []}
    assert listing.calls[0].request.url.params["isActive"] == "true"
    assert (await categories.toggle_status("c1"))["isActive"] is False
    assert toggle.called


@pytest.mark.asyncio
@respx.mock
async def test_cart_for_signed_out_caller(client):
    respx.get(f"{API_URL}/v1/purchase/cart").respond(401, json={"message": "Not authenticated"})

    assert await CartApi(client).get() == {"items": [], "totalItems": 0, "totalAmount": 0}


@pytest.mark.asyncio
@respx.mock
async def test_checkout_and_promocodes(client):
    checkout = respx.post(f"{API_URL}/v1/purchase/create").respond(
        201, json=_envelope({"id": "p1", "paymentStatus": "pending"})
    )
    applicable = respx.get(f"{API_URL}/v1/promocode/applicable").respond(
        200, json=_envelope({"totalCount": 0})
    )

    purchase = await PurchaseApi(client).checkout(payment_reference="INV-1")
    assert purchase["id"] == "p1"
    assert json.loads(checkout.calls[0].request.content) == {"paymentReference": "INV-1"}

    await PromocodeApi(client).applicable(["a", "b"])
    assert applicable.calls[0].request.url.params["productIds"] == "a,b"


@pytest.mark.asyncio
@respx.mock
async def test_analytics_endpoints(client):
    stats = respx.get(f"{API_URL}/v1/analytics/stats").respond(200, json=_envelope({"period": "week"}))
    cleared = respx.delete(f"{API_URL}/v1/analytics/events").respond(
        200, json=_envelope({"deletedCount": 4})
    )

    api = AnalyticsApi(client)
    assert (await api.get_stats("week"))["period"] == "week"
    assert stats.calls[0].request.url.params["period"] == "week"
    assert await api.clear_events() == {"deletedCount": 4}
    assert cleared.called


@pytest.mark.asyncio
@respx.mock
async def test_product_feedback_and_moderation(client):
    review = respx.post(f"{API_URL}/v1/products/p1/review").respond(
        201, json=_envelope({"id": "r1", "rating": 5})
    )
    favorite = respx.post(f"{API_URL}/v1/products/p1/favorite").respond(
        200, json=_envelope({"isFavorited": False, "favorites": 0})
    )
    status = respx.patch(f"{API_URL}/v1/products/p1/status").respond(
        200, json=_envelope({"id": "p1", "status": "rejected"})
    )
    submit = respx.post(f"{API_URL}/v1/products/p1/submit-for-review").respond(
        200, json=_envelope({"id": "p1", "status": "pending_review"})
    )

    api = ProductsApi(client)
    assert (await api.review("p1", 5, "Great"))["id"] == "r1"
    assert json.loads(review.calls[0].request.content) == {"rating": 5, "comment": "Great"}

    assert await api.favorite("p1", False) == {"isFavorited": False, "favorites": 0}
    assert json.loads(favorite.calls[0].request.content) == {"isFavorited": False}

    await api.update_status("p1", "rejected", reason="Add examples")
    assert json.loads(status.calls[0].request.content) == {"status": "rejected", "reason": "Add examples"}

    await api.submit_for_review("p1")
    assert json.loads(submit.calls[0].request.content) == {}


@pytest.mark.asyncio
@respx.mock
async def test_product_discovery_listings(client):
    high_rated = respx.get(f"{API_URL}/v1/products/high-rated").respond(200, json=_envelope([]))
    discovery = respx.get(f"{API_URL}/v1/products/discovery").respond(
        200, json=_envelope({"featured": [], "totalSections": 4})
    )

    api = ProductsApi(client)
    assert await api.high_rated(min_reviews=5) == []
    assert high_rated.calls[0].request.url.params["minReviews"] == "5"
    assert (await api.discovery())["totalSections"] == 4
    assert discovery.called
