"""Promocode routes under /v1/promocode."""

from datetime import timedelta

from app.core.timezone_utils import utc_now


def _payload(code="SPRING10", **overrides):
    body = {
        "code": code,
        "discountType": "percentage",
        "discountValue": 10,
        "validUntil": (utc_now() + timedelta(days=30)).isoformat(),
        "isPublic": True,
    }
    body.update(overrides)
    return body


def test_seller_creates_code(client, auth_headers_seller):
    res = client.post("/v1/promocode", json=_payload("spring10"), headers=auth_headers_seller)

    assert res.status_code == 201
    data = res.json()["data"]
    assert data["code"] == "SPRING10"
    assert data["createdByType"] == "seller"


def test_seller_global_code_forbidden(client, auth_headers_seller):
    res = client.post("/v1/promocode", json=_payload(isGlobal=True), headers=auth_headers_seller)
    assert res.status_code == 403


def test_percentage_over_100_is_invalid(client, auth_headers_admin):
    res = client.post("/v1/promocode", json=_payload(discountValue=150), headers=auth_headers_admin)
    assert res.status_code == 400


def test_buyer_cannot_create(client, auth_headers_buyer):
    assert client.post("/v1/promocode", json=_payload(), headers=auth_headers_buyer).status_code == 403


def test_duplicate_code(client, auth_headers_admin):
    client.post("/v1/promocode", json=_payload(), headers=auth_headers_admin)
    res = client.post("/v1/promocode", json=_payload("spring10"), headers=auth_headers_admin)
    assert res.status_code == 400
    assert res.json()["code"] == "DUPLICATE_CODE"


def test_validate_for_signed_in_user(client, make_promocode, auth_headers_buyer):
    make_promocode(code="WELCOME", usage_limit=5)

    res = client.get("/v1/promocode/validate/welcome", headers=auth_headers_buyer)
    assert res.status_code == 200
    assert res.json()["data"]["remainingUses"] == 5

    missing = client.get("/v1/promocode/validate/NOPE", headers=auth_headers_buyer)
    assert missing.status_code == 400
    assert client.get("/v1/promocode/validate/welcome").status_code == 401


def test_public_listing(client, make_promocode):
    make_promocode(code="OPEN")
    make_promocode(code="SECRET", is_public=False)

    data = client.get("/v1/promocode/public").json()["data"]
    assert [p["code"] for p in data["promocodes"]] == ["OPEN"]


def test_code_created_without_visibility_flag_is_public(client, auth_headers_seller):
    body = _payload("DEFAULTPUB")
    del body["isPublic"]

    created = client.post("/v1/promocode", json=body, headers=auth_headers_seller)
    assert created.status_code == 201
    assert created.json()["data"]["isPublic"] is True

    listed = client.get("/v1/promocode/public").json()["data"]
    assert [p["code"] for p in listed["promocodes"]] == ["DEFAULTPUB"]


def test_applicable_grouping(client, make_product, make_promocode):
    product = make_product()
    make_promocode(code="ALL", is_global=True)
    make_promocode(code="ONLYTHIS", applicable_products=[product.id])

    res = client.get("/v1/promocode/applicable", params={"productIds": f"{product.id},"})
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["requestedProducts"] == [product.id]
    assert [p["code"] for p in data["applicablePromocodes"]["global"]] == ["ALL"]
    assert [p["code"] for p in data["applicablePromocodes"]["productSpecific"]] == ["ONLYTHIS"]
    assert data["totalCount"] == 2


def test_toggle_update_stats_delete(client, auth_headers_seller, auth_headers_other_seller):
    created = client.post("/v1/promocode", json=_payload(), headers=auth_headers_seller).json()["data"]
    path = f"/v1/promocode/{created['id']}"

    assert client.get(path, headers=auth_headers_other_seller).status_code == 403

    toggled = client.patch(f"{path}/toggle-status", headers=auth_headers_seller)
    assert toggled.json()["data"]["isActive"] is False

    updated = client.put(path, json={"description": "Spring sale"}, headers=auth_headers_seller)
    assert updated.json()["data"]["description"] == "Spring sale"

    stats = client.get(f"{path}/stats", headers=auth_headers_seller).json()["data"]
    assert stats["totalUsages"] == 0
    assert stats["usageHistory"] == []

    assert client.delete(path, headers=auth_headers_seller).status_code == 200
    assert client.get(path, headers=auth_headers_seller).status_code == 404


def test_admin_list_filters(client, auth_headers_admin, auth_headers_seller):
    client.post("/v1/promocode", json=_payload("ADMIN1"), headers=auth_headers_admin)
    client.post("/v1/promocode", json=_payload("SELLER1"), headers=auth_headers_seller)

    everything = client.get("/v1/promocode", headers=auth_headers_admin).json()["data"]
    assert everything["pagination"]["totalItems"] == 2

    sellers = client.get(
        "/v1/promocode", params={"createdByType": "seller"}, headers=auth_headers_admin
    ).json()["data"]
    assert [p["code"] for p in sellers["promocodes"]] == ["SELLER1"]
