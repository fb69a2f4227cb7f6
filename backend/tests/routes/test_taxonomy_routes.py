"""
Category, industry and tool routes under /v1.

The three resources share one router builder, so the contract tests run
against each of them.
"""

import pytest

from app.models.taxonomy import Category, Industry, Tool

RESOURCES = [
    ("/v1/categories", "categories", "Package"),
    ("/v1/industries", "industries", "Building"),
    ("/v1/tools", "tools", "Wrench"),
]


@pytest.fixture(params=RESOURCES, ids=[r[1] for r in RESOURCES])
def resource(request):
    return request.param


def test_create_then_list_sorted_by_name(client, auth_headers_admin):
    for name in ("Writing", "Marketing", "Analytics"):
        res = client.post(
            "/v1/categories", json={"name": name, "icon": "Package"}, headers=auth_headers_admin
        )
        assert res.status_code == 201

    res = client.get("/v1/categories")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert [c["name"] for c in body["data"]["categories"]] == ["Analytics", "Marketing", "Writing"]
    assert body["data"]["pagination"]["totalItems"] == 3
    assert "isDeleted" not in body["data"]["categories"][0]


def test_marketing_round_trip_then_conflict(client, auth_headers_admin):
    payload = {"name": "Marketing", "icon": "Package"}

    created = client.post("/v1/categories", json=payload, headers=auth_headers_admin)
    assert created.status_code == 201
    assert created.json()["data"]["productCount"] == 0

    listed = client.get("/v1/categories").json()["data"]["categories"]
    assert [c["name"] for c in listed] == ["Marketing"]

    again = client.post("/v1/categories", json=payload, headers=auth_headers_admin)
    assert again.status_code == 409
    assert again.json()["success"] is False


def test_duplicate_name_case_insensitive(client, auth_headers_admin, resource):
    path, _, default_icon = resource
    first = client.post(path, json={"name": "Automation"}, headers=auth_headers_admin)
    assert first.status_code == 201
    assert first.json()["data"]["icon"] == default_icon

    res = client.post(path, json={"name": "  AUTOMATION "}, headers=auth_headers_admin)
    assert res.status_code == 409


def test_delete_with_products_is_rejected(client, db, auth_headers_admin, resource):
    path, _, _ = resource
    created = client.post(path, json={"name": "Busy"}, headers=auth_headers_admin).json()["data"]

    model = {"/v1/categories": Category, "/v1/industries": Industry, "/v1/tools": Tool}[path]
    db.get(model, created["id"]).product_count = 2
    db.commit()

    res = client.delete(f"{path}/{created['id']}", headers=auth_headers_admin)
    assert res.status_code == 400
    assert res.json()["code"] == "HAS_PRODUCTS"


def test_delete_hides_resource(client, auth_headers_admin, resource):
    path, plural, _ = resource
    created = client.post(path, json={"name": "Idle"}, headers=auth_headers_admin).json()["data"]

    res = client.delete(f"{path}/{created['id']}", headers=auth_headers_admin)
    assert res.status_code == 200

    assert client.get(f"{path}/{created['id']}").status_code == 404
    assert client.get(f"{path}/active").json()["data"] == []
    assert client.get(path).json()["data"][plural] == []

    restored = client.patch(f"{path}/{created['id']}/restore", headers=auth_headers_admin)
    assert restored.status_code == 200
    assert restored.json()["data"]["isActive"] is True


def test_toggle_status_twice_restores(client, auth_headers_admin, resource):
    path, _, _ = resource
    created = client.post(path, json={"name": "Flip"}, headers=auth_headers_admin).json()["data"]

    first = client.patch(f"{path}/{created['id']}/toggle-status", headers=auth_headers_admin)
    second = client.patch(f"{path}/{created['id']}/toggle-status", headers=auth_headers_admin)

    assert first.json()["data"]["isActive"] is False
    assert second.json()["data"]["isActive"] is True


def test_update_partial_and_conflict(client, auth_headers_admin):
    first = client.post("/v1/tools", json={"name": "Zapier"}, headers=auth_headers_admin).json()["data"]
    client.post("/v1/tools", json={"name": "Make"}, headers=auth_headers_admin)

    res = client.put(
        f"/v1/tools/{first['id']}",
        json={"description": "Workflow automation"},
        headers=auth_headers_admin,
    )
    assert res.status_code == 200
    assert res.json()["data"]["name"] == "Zapier"
    assert res.json()["data"]["description"] == "Workflow automation"

    clash = client.put(f"/v1/tools/{first['id']}", json={"name": "make"}, headers=auth_headers_admin)
    assert clash.status_code == 409


def test_writes_require_admin(client, auth_headers_seller):
    assert client.post("/v1/categories", json={"name": "Nope"}).status_code == 401
    res = client.post("/v1/categories", json={"name": "Nope"}, headers=auth_headers_seller)
    assert res.status_code == 403


def test_validation_errors_are_400_with_fields(client, auth_headers_admin):
    res = client.post("/v1/categories", json={"name": "x"}, headers=auth_headers_admin)

    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["errors"][0]["field"] == "name"


def test_list_search_and_active_filter(client, auth_headers_admin):
    client.post("/v1/industries", json={"name": "Healthcare"}, headers=auth_headers_admin)
    client.post(
        "/v1/industries", json={"name": "Real Estate", "isActive": False}, headers=auth_headers_admin
    )

    searched = client.get("/v1/industries", params={"search": "health"}).json()["data"]
    assert [i["name"] for i in searched["industries"]] == ["Healthcare"]

    inactive = client.get("/v1/industries", params={"isActive": "false"}).json()["data"]
    assert [i["name"] for i in inactive["industries"]] == ["Real Estate"]


def test_taxonomy_analytics_admin_only(client, auth_headers_admin, auth_headers_buyer):
    client.post("/v1/categories", json={"name": "Marketing"}, headers=auth_headers_admin)

    assert client.get("/v1/categories/analytics", headers=auth_headers_buyer).status_code == 403
    res = client.get("/v1/categories/analytics", headers=auth_headers_admin)
    assert res.status_code == 200
    assert res.json()["data"]["overview"]["total"] == 1


def test_malformed_id_is_rejected(client):
    assert client.get("/v1/categories/not-a-ulid").status_code == 400
