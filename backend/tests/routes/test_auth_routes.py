"""Registration, login and the current-user endpoint."""

from app.models.user import User


def test_register(client, db):
    res = client.post(
        "/v1/auth/register",
        json={"name": "Ada Lovelace", "email": "Ada@Example.com", "password": "Str0ngPass!", "becomeSeller": True},
    )

    assert res.status_code == 201
    data = res.json()["data"]
    assert data["email"] == "ada@example.com"
    assert data["roles"] == ["user", "seller"]
    assert "hashedPassword" not in data
    assert db.query(User).filter_by(email="ada@example.com").one().hashed_password != "Str0ngPass!"


def test_register_duplicate_email(client, buyer):
    res = client.post(
        "/v1/auth/register",
        json={"name": "Someone", "email": buyer.email, "password": "Str0ngPass!"},
    )
    assert res.status_code == 409
    assert res.json()["code"] == "EMAIL_TAKEN"


def test_register_short_password(client):
    res = client.post(
        "/v1/auth/register", json={"name": "Someone", "email": "x@example.com", "password": "short"}
    )
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "password"


def test_login_and_me(client, buyer, test_password):
    res = client.post("/v1/auth/login", json={"email": buyer.email, "password": test_password})

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["tokenType"] == "bearer"
    assert data["user"]["id"] == buyer.id

    me = client.get("/v1/auth/me", headers={"Authorization": f"Bearer {data['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["data"]["lastLoginAt"] is not None


def test_login_wrong_password(client, buyer):
    res = client.post("/v1/auth/login", json={"email": buyer.email, "password": "nope-nope"})

    assert res.status_code == 401
    body = res.json()
    assert body["message"] == "Invalid email or password"
    assert body["code"] == "INVALID_CREDENTIALS"


def test_suspended_account(client, db, buyer, test_password, auth_headers_buyer):
    buyer.is_active = False
    db.commit()

    login = client.post("/v1/auth/login", json={"email": buyer.email, "password": test_password})
    assert login.status_code == 401
    assert login.json()["code"] == "ACCOUNT_DEACTIVATED"
    assert client.get("/v1/auth/me", headers=auth_headers_buyer).status_code == 401


def test_me_rejects_bad_token(client):
    res = client.get("/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401
    assert res.json()["success"] is False
