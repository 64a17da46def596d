"""Integration tests for login, current-account and health endpoints."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from studybuddy_api.api.v1.auth import router as auth_router
from studybuddy_api.core.config import get_settings
from studybuddy_api.core.dependencies import get_async_session
from studybuddy_api.models import Role

PASSWORD = "correct-horse-battery"


@pytest.fixture
async def client(async_session, settings) -> AsyncGenerator[AsyncClient]:
    app = FastAPI()
    app.include_router(auth_router, prefix="/api/v1")
    app.dependency_overrides[get_async_session] = lambda: async_session
    app.dependency_overrides[get_settings] = lambda: settings
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def _login(client: AsyncClient, username: str, password: str = PASSWORD):
    return await client.post("/api/v1/auth/login", data={"username": username, "password": password})


class TestLogin:
    async def test_health(self, client) -> None:
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    async def test_login_and_me(self, client, student) -> None:
        resp = await _login(client, "student_one")
        assert resp.status_code == 200
        token = resp.json()["access_token"]

        me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["username"] == "student_one"
        assert me.json()["last_login_at"] is not None

    async def test_wrong_password(self, client, student) -> None:
        resp = await _login(client, "student_one", "not-the-password")
        assert resp.status_code == 401

    @pytest.mark.parametrize(
        "fields",
        [
            {"is_deleted": True, "is_active": False},
            {"banned_at": datetime(2026, 1, 1, tzinfo=UTC), "is_active": False},
            {"suspended_until": datetime.now(UTC) + timedelta(days=2)},
            {"is_active": False},
        ],
    )
    async def test_moderated_accounts_cannot_log_in(self, client, make_user, fields) -> None:
        await make_user("moderated", Role.STUDENT, **fields)
        resp = await _login(client, "moderated")
        assert resp.status_code == 401

    async def test_lapsed_suspension_can_log_in(self, client, make_user) -> None:
        await make_user("returning", Role.STUDENT, suspended_until=datetime.now(UTC) - timedelta(seconds=5))
        resp = await _login(client, "returning")
        assert resp.status_code == 200

    async def test_token_stops_working_after_ban(self, client, async_session, student) -> None:
        token = (await _login(client, "student_one")).json()["access_token"]
        student.banned_at = datetime.now(UTC)
        await async_session.commit()

        me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 401
