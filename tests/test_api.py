"""
HTTP API tests against the assembled application
"""

import pytest
from fastapi.testclient import TestClient

from account_service.core.app_factory import create_application
from account_service.core.config import Settings

from .conftest import STRONG_PASSWORD, TEST_SECRET

REGISTER_FORM = {
    "email": "alice@example.com",
    "password": STRONG_PASSWORD,
    "firstName": "Alice",
    "lastName": "Walker",
}


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "accounts.db"))
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("JWT_EXPIRE", "7d")
    for key in ("SMTP_HOST", "SMTP_USERNAME", "SMTP_FROM_EMAIL", "CLOUDINARY_CLOUD_NAME", "ADMIN_EMAIL"):
        monkeypatch.delenv(key, raising=False)

    app = create_application(Settings())
    with TestClient(app) as test_client:
        yield test_client


def _users(client):
    return client.app.state.container.users


def _register(client, **overrides):
    return client.post("/api/auth/register", data={**REGISTER_FORM, **overrides})


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "OK"


def test_register_returns_token_and_public_view(client):
    response = _register(client, role="GUIDE", phone="+15551234567")
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["token"]
    user = body["data"]["user"]
    assert user["email"] == "alice@example.com"
    assert user["role"] == "GUIDE"
    assert user["isEmailVerified"] is False
    assert "password" not in user
    assert "passwordHash" not in user
    assert not any("Token" in key for key in user)


def test_register_validation_errors(client):
    response = _register(client, password="weak", firstName="A")
    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "error"
    assert {error["field"] for error in body["errors"]} == {"firstName", "password"}


def test_register_rejects_password_beyond_hash_limit(client):
    response = _register(client, password="Aa1!" + "x" * 80)
    assert response.status_code == 400
    assert response.json()["errors"] == [
        {"field": "password", "code": "too_long", "message": "Password cannot exceed 72 bytes"}
    ]
    assert _users(client).find_by_email("alice@example.com") is None


def test_register_duplicate_email(client):
    _register(client)
    response = _register(client)
    assert response.status_code == 409
    assert response.json()["message"] == "User already exists with this email"


def test_login_and_me(client):
    _register(client)
    response = client.post("/api/auth/login", json={"email": "alice@example.com", "password": STRONG_PASSWORD})
    assert response.status_code == 200
    token = response.json()["data"]["token"]

    me = client.get("/api/auth/me", headers=_bearer(token))
    assert me.status_code == 200
    assert me.json()["data"]["user"]["lastLoginAt"] is not None


def test_login_failures_share_one_message(client):
    _register(client)
    wrong = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Wr0ng!Pass"})
    unknown = client.post("/api/auth/login", json={"email": "bob@example.com", "password": STRONG_PASSWORD})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["message"] == "No token provided, authorization denied"

    response = client.get("/api/auth/me", headers=_bearer("garbage"))
    assert response.status_code == 401


def test_verify_email_flow(client):
    _register(client)
    token = _users(client).find_by_email("alice@example.com").email_verification_token

    response = client.get("/api/auth/verify-email", params={"token": token})
    assert response.status_code == 200
    assert _users(client).find_by_email("alice@example.com").is_email_verified is True

    replay = client.get("/api/auth/verify-email", params={"token": token})
    assert replay.status_code == 400
    assert replay.json()["message"] == "Invalid or expired verification token"


def test_forgot_and_reset_password(client):
    _register(client)
    response = client.post("/api/auth/forgot-password", json={"email": "alice@example.com"})
    assert response.status_code == 200
    token = _users(client).find_by_email("alice@example.com").password_reset_token

    response = client.post(
        "/api/auth/reset-password", params={"token": token}, json={"password": "N3w!Passw0rd"}
    )
    assert response.status_code == 200

    login = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "N3w!Passw0rd"})
    assert login.status_code == 200


def test_forgot_password_unknown_email(client):
    response = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})
    assert response.status_code == 404


def test_update_profile_and_password(client):
    token = _register(client).json()["data"]["token"]

    profile = client.patch("/api/auth/update-profile", data={"lastName": "Smith"}, headers=_bearer(token))
    assert profile.status_code == 200
    assert profile.json()["data"]["user"]["lastName"] == "Smith"
    assert profile.json()["data"]["user"]["firstName"] == "Alice"

    rejected = client.patch(
        "/api/auth/update-password",
        json={"currentPassword": "Wr0ng!Pass", "password": "N3w!Passw0rd"},
        headers=_bearer(token),
    )
    assert rejected.status_code == 400
    assert rejected.json()["message"].startswith("Current password is incorrect")

    accepted = client.patch(
        "/api/auth/update-password",
        json={"currentPassword": STRONG_PASSWORD, "password": "N3w!Passw0rd"},
        headers=_bearer(token),
    )
    assert accepted.status_code == 200


def test_suspended_account_is_refused(client):
    token = _register(client).json()["data"]["token"]
    user = _users(client).find_by_email("alice@example.com")
    _users(client).update(user.id, {"status": "SUSPENDED"})

    assert client.get("/api/auth/me", headers=_bearer(token)).status_code == 403
    login = client.post("/api/auth/login", json={"email": "alice@example.com", "password": STRONG_PASSWORD})
    assert login.status_code == 403
