# tests/test_auth_api.py
import pytest
from sqlalchemy.exc import OperationalError

import teamcal.api.v1.auth as auth_module
from teamcal.config import settings
from teamcal.core.errors import StorageError

from conftest import FakeLimiter, login


@pytest.mark.asyncio
async def test_login_sets_http_only_cookie(client, users):
    response = await login(client, "alice@example.com")

    assert response.json()["user"] == {
        "id": users["alice"].id, "name": "Alice", "email": "alice@example.com", "role": "USER",
    }
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"{settings.SESSION_COOKIE_NAME}=")
    assert "HttpOnly" in set_cookie
    assert "Max-Age=604800" in set_cookie
    assert "samesite=lax" in set_cookie.lower()


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"email": ""}, {"email": "   "}])
async def test_login_requires_email(client, users, body):
    response = await client.post("/auth/login", json=body)
    assert response.status_code == 400
    assert response.json()["error"] == "Email is required"


@pytest.mark.asyncio
async def test_login_unknown_email(client, users):
    response = await client.post("/auth/login", json={"email": "nobody@example.com"})
    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


@pytest.mark.asyncio
async def test_me_round_trip(client, users):
    assert (await client.get("/auth/me")).json() == {"user": None}

    await login(client, "admin@example.com")
    me = await client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["role"] == "ADMIN"
    assert "x-ratelimit-remaining" in me.headers

    logout = await client.post("/auth/logout")
    assert logout.json() == {"success": True}
    assert (await client.get("/auth/me")).json() == {"user": None}


@pytest.mark.asyncio
async def test_logout_without_session_succeeds(client):
    response = await client.post("/auth/logout")
    assert response.status_code == 200
    assert response.json() == {"success": True}


@pytest.mark.asyncio
async def test_tampered_cookie_is_anonymous(client, users):
    client.cookies.set(settings.SESSION_COOKIE_NAME, "forged.token.value")
    assert (await client.get("/auth/me")).json() == {"user": None}
    assert (await client.get("/users")).status_code == 401


@pytest.mark.asyncio
async def test_me_rate_limited(client, limiter: FakeLimiter):
    limiter.limit = 2
    for _ in range(2):
        assert (await client.get("/auth/me")).status_code == 200
    response = await client.get("/auth/me")
    assert response.status_code == 429
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_me_reports_database_error(client, users, monkeypatch):
    await login(client, "alice@example.com")

    async def broken(db, token):
        raise StorageError("Database unavailable while resolving identity")

    monkeypatch.setattr(auth_module, "resolve_user", broken)
    response = await client.get("/auth/me")

    assert response.status_code == 500
    body = response.json()
    assert body["user"] is None
    assert body["error"] == "DatabaseError"


@pytest.mark.asyncio
async def test_gate_storage_failure_is_500_not_401(client, users, monkeypatch):
    await login(client, "alice@example.com")

    async def failing_get(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("db down"))

    monkeypatch.setattr("sqlalchemy.ext.asyncio.AsyncSession.get", failing_get)
    response = await client.get("/users")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
