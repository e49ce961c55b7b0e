"""Tests for honeypot/api/users.py and the auth gate in honeypot/api/deps.py."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from honeypot.config import settings
from tests.helpers import bearer, of_type, read_structured, suspicious

REGISTRATION = {
    "username": "newbie",
    "email": "newbie@example.com",
    "password": "longenough",
    "firstName": "New",
    "lastName": "Bie",
}


class TestRegister:
    """POST /api/users/register"""

    @pytest.mark.asyncio
    async def test_success(self, client, activity):
        resp = await client.post("/api/users/register", json=REGISTRATION)

        assert resp.status_code == 201
        body = resp.json()
        assert body["email"] == "newbie@example.com"
        assert body["first_name"] == "New"
        assert body["role"] == "user"
        assert body["token"]

        (attempt,) = of_type(read_structured(activity), "AUTH_ATTEMPT")
        assert attempt["details"]["success"] is True
        assert attempt["details"]["email"] == "newbie@example.com"
        assert attempt["user_id"] == body["id"]

    @pytest.mark.asyncio
    async def test_missing_fields(self, client, activity):
        resp = await client.post("/api/users/register", json={"email": "half@example.com"})

        assert resp.status_code == 400
        (event,) = suspicious(read_structured(activity), "REGISTER_MISSING_FIELDS")
        assert event["details"]["details"] == {
            "email": "half@example.com",
            "missing": ["username", "password", "first_name", "last_name"],
        }
        assert of_type(read_structured(activity), "AUTH_ATTEMPT") == []

    @pytest.mark.asyncio
    async def test_weak_password(self, client, activity):
        resp = await client.post("/api/users/register", json={**REGISTRATION, "password": "abc"})

        assert resp.status_code == 400
        assert len(suspicious(read_structured(activity), "REGISTER_WEAK_PASSWORD")) == 1

    @pytest.mark.asyncio
    async def test_duplicate_is_a_failed_attempt(self, client, activity, make_user):
        await make_user(email="newbie@example.com", username="someone")

        resp = await client.post("/api/users/register", json=REGISTRATION)

        assert resp.status_code == 400
        assert resp.json()["detail"] == "User already exists"
        (attempt,) = of_type(read_structured(activity), "AUTH_ATTEMPT")
        assert attempt["details"]["success"] is False
        assert attempt["user_id"] == "unknown"


class TestLogin:
    """POST /api/users/login"""

    @pytest.mark.asyncio
    async def test_success_records_identified_attempt(self, client, activity, make_user):
        user = await make_user(email="user@example.com", password="secret123")

        resp = await client.post("/api/users/login", json={"email": "user@example.com", "password": "secret123"})

        assert resp.status_code == 200
        assert resp.json()["token"]
        (attempt,) = of_type(read_structured(activity), "AUTH_ATTEMPT")
        assert attempt["details"]["success"] is True
        assert attempt["details"]["email"] == "user@example.com"
        assert attempt["user_id"] != "unknown"
        assert attempt["user_id"] == user.id

    @pytest.mark.asyncio
    async def test_session_header_carried_into_attempt(self, client, activity, make_user):
        await make_user(email="user@example.com", password="secret123")

        await client.post(
            "/api/users/login",
            json={"email": "user@example.com", "password": "secret123"},
            headers={"x-session-id": "guest-77"},
        )

        (attempt,) = of_type(read_structured(activity), "AUTH_ATTEMPT")
        assert attempt["session_id"] == "guest-77"

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, activity, make_user):
        await make_user(email="user@example.com", password="secret123")

        resp = await client.post("/api/users/login", json={"email": "user@example.com", "password": "guess"})

        assert resp.status_code == 401
        (attempt,) = of_type(read_structured(activity), "AUTH_ATTEMPT")
        assert attempt["details"]["success"] is False

    @pytest.mark.asyncio
    async def test_unknown_email(self, client, activity):
        resp = await client.post("/api/users/login", json={"email": "ghost@example.com", "password": "x"})

        assert resp.status_code == 401
        (attempt,) = of_type(read_structured(activity), "AUTH_ATTEMPT")
        assert attempt["details"]["success"] is False
        assert attempt["user_id"] == "unknown"

    @pytest.mark.asyncio
    async def test_missing_fields(self, client, activity):
        resp = await client.post("/api/users/login", json={"email": "user@example.com"})

        assert resp.status_code == 400
        assert len(suspicious(read_structured(activity), "LOGIN_MISSING_FIELDS")) == 1


class TestProfile:
    """GET/PUT /api/users/profile"""

    @pytest.mark.asyncio
    async def test_get_profile(self, client, activity, make_user):
        user = await make_user()

        resp = await client.get("/api/users/profile", headers=bearer(user.id))

        assert resp.status_code == 200
        assert resp.json()["email"] == "user@example.com"
        accesses = of_type(read_structured(activity), "API_ACCESS")
        assert [a["details"]["endpoint"] for a in accesses] == ["/api/users/profile", "/api/users/profile"]
        assert all(a["user_id"] == user.id for a in accesses)

    @pytest.mark.asyncio
    async def test_update_profile(self, client, activity, make_user):
        user = await make_user()

        resp = await client.put(
            "/api/users/profile",
            headers=bearer(user.id),
            json={"firstName": "Renamed", "address": {"city": "Springfield"}},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["first_name"] == "Renamed"
        assert body["last_name"] == "User"
        assert body["address"]["city"] == "Springfield"
        assert body["token"]
        assert of_type(read_structured(activity), "API_ACCESS")[-1]["details"]["method"] == "PUT"

    @pytest.mark.asyncio
    async def test_password_change_takes_effect(self, client, make_user):
        user = await make_user(password="secret123")

        await client.put("/api/users/profile", headers=bearer(user.id), json={"password": "changed456"})
        resp = await client.post("/api/users/login", json={"email": "user@example.com", "password": "changed456"})

        assert resp.status_code == 200


class TestAuthGate:
    """Every way the bearer-token gate turns a request away."""

    @pytest.mark.asyncio
    async def test_no_token(self, client, activity):
        resp = await client.get("/api/users/profile")

        assert resp.status_code == 401
        assert resp.json()["detail"] == "Not authorized, no token"
        (event,) = suspicious(read_structured(activity), "AUTH_NO_TOKEN")
        assert event["details"]["details"]["url"] == "/api/users/profile"

    @pytest.mark.asyncio
    async def test_non_bearer_scheme(self, client, activity):
        resp = await client.get("/api/users/profile", headers={"Authorization": "Basic dXNlcjpwdw=="})

        assert resp.status_code == 401
        assert len(suspicious(read_structured(activity), "AUTH_NO_TOKEN")) == 1

    @pytest.mark.asyncio
    async def test_invalid_token(self, client, activity):
        resp = await client.get("/api/users/profile", headers={"Authorization": "Bearer abcdefghijklmnop"})

        assert resp.status_code == 401
        assert resp.json()["detail"] == "Not authorized, token invalid"
        (event,) = suspicious(read_structured(activity), "AUTH_TOKEN_ERROR")
        assert event["details"]["details"]["token"] == "abcdefghij..."

    @pytest.mark.asyncio
    async def test_expired_token(self, client, activity, make_user):
        user = await make_user()
        past = datetime.now(UTC) - timedelta(days=1)
        token = jwt.encode(
            {"id": user.id, "iat": past - timedelta(days=30), "exp": past},
            settings.security.jwt_secret,
            algorithm=settings.security.jwt_algorithm,
        )

        resp = await client.get("/api/users/profile", headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 401
        assert resp.json()["detail"] == "Not authorized, token expired"
        (event,) = suspicious(read_structured(activity), "AUTH_TOKEN_ERROR")
        assert event["details"]["details"]["error"] == "ExpiredSignatureError"

    @pytest.mark.asyncio
    async def test_user_no_longer_exists(self, client, activity):
        resp = await client.get("/api/users/profile", headers=bearer(999))

        assert resp.status_code == 401
        assert len(suspicious(read_structured(activity), "AUTH_USER_NOT_FOUND")) == 1
