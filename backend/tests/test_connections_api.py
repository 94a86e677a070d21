"""
Tests for the connection and schema endpoints:
/api/connections/*, /api/db/status, /api/initial-data, /health and /settings
"""

from __future__ import annotations

from pathlib import Path

import pytest
from dotenv import dotenv_values
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.pool import StaticPool

from dashboard.config import DatabaseCredentials, Settings
from dashboard.database import Database
from dashboard.dependencies import get_database
from dashboard.services.provisioning import PROVISIONED_TABLES

UNREACHABLE = {"host": "127.0.0.1", "port": 1, "database": "ads", "user": "ads", "password": "secret"}


# ---------------------------------------------------------------------------
# Status and pages
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_initial_data(client: AsyncClient):
    response = await client.get("/api/initial-data")

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Server is running"
    assert data["timestamp"]


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_settings_page_is_served(client: AsyncClient):
    response = await client.get("/settings")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert 'id="sql-form"' in response.text
    assert 'id="meta-api-form"' in response.text

    script = await client.get("/static/settings.js")
    assert script.status_code == 200
    assert "/api/connections/test-and-save" in script.text


@pytest.mark.asyncio
async def test_missing_database_returns_503(client: AsyncClient):
    """Without a configured pool the data endpoints answer 503."""
    from dashboard.main import app

    app.dependency_overrides.pop(get_database)

    response = await client.get("/api/clients")

    assert response.status_code == 503


# ---------------------------------------------------------------------------
# POST /api/connections/test-sql
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_sql_connection_success(client: AsyncClient):
    response = await client.post("/api/connections/test-sql")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["timestamp"]


@pytest.mark.asyncio
async def test_sql_connection_failure(client: AsyncClient):
    from dashboard.main import app

    unreachable = Database.from_credentials(DatabaseCredentials(host="127.0.0.1", port=1))
    app.dependency_overrides[get_database] = lambda: unreachable
    try:
        response = await client.post("/api/connections/test-sql")
    finally:
        await unreachable.dispose()

    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["error_kind"] == "connection_refused"


# ---------------------------------------------------------------------------
# POST /api/connections/test-and-save
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_test_and_save_refused_writes_nothing(client: AsyncClient, app_settings: Settings):
    response = await client.post("/api/connections/test-and-save", json={**UNREACHABLE, "save": True})

    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["saved"] is False
    assert data["error_kind"] == "connection_refused"
    assert not Path(app_settings.credentials_file).exists()


@pytest.mark.asyncio
async def test_test_and_save_persists_and_switches_database(
    client: AsyncClient,
    database: Database,
    app_settings: Settings,
    monkeypatch,
):
    """A successful save writes the dotenv file and makes the new pool active."""
    from dashboard.main import app

    submitted = []

    def fake_from_credentials(cls, credentials, **kwargs):
        submitted.append(credentials)
        return database

    monkeypatch.setattr(Database, "from_credentials", classmethod(fake_from_credentials))

    try:
        response = await client.post(
            "/api/connections/test-and-save",
            json={"host": "db.internal", "port": 6543, "database": "ads", "user": "dashboard",
                  "password": "s3cret", "save": True},
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Connection successful and credentials saved",
            "saved": True,
            "error_kind": None,
        }
        assert app.state.database is database
    finally:
        if hasattr(app.state, "database"):
            del app.state.database

    assert submitted == [
        DatabaseCredentials(host="db.internal", port=6543, database="ads", user="dashboard", password="s3cret")
    ]
    values = dotenv_values(app_settings.credentials_file)
    assert values["POSTGRES_HOST"] == "db.internal"
    assert values["POSTGRES_PORT"] == "6543"
    assert values["POSTGRES_DB"] == "ads"
    assert values["POSTGRES_USER"] == "dashboard"
    assert values["POSTGRES_PASSWORD"] == "s3cret"


@pytest.mark.asyncio
async def test_test_and_save_without_save_flag(client: AsyncClient, app_settings: Settings, monkeypatch):
    candidate = Database.from_url("sqlite+aiosqlite://")
    monkeypatch.setattr(Database, "from_credentials", classmethod(lambda cls, credentials, **kw: candidate))

    response = await client.post("/api/connections/test-and-save", json={**UNREACHABLE, "save": False})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["saved"] is False
    assert not Path(app_settings.credentials_file).exists()


@pytest.mark.asyncio
async def test_test_and_save_validates_port(client: AsyncClient):
    response = await client.post("/api/connections/test-and-save", json={**UNREACHABLE, "port": 70000})

    assert response.status_code == 422


# ---------------------------------------------------------------------------
# Schema status
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_db_status_reports_existing_tables(client: AsyncClient):
    response = await client.post("/api/db/status")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert [t["table"] for t in data["tables"]] == list(PROVISIONED_TABLES)
    assert all(t["exists"] and not t["created"] for t in data["tables"])


@pytest.mark.asyncio
async def test_check_tables_creates_missing_tables(client: AsyncClient):
    from dashboard.main import app

    fresh = Database.from_url("sqlite+aiosqlite://", poolclass=StaticPool)
    app.dependency_overrides[get_database] = lambda: fresh
    try:
        response = await client.post("/api/connections/check-tables")
    finally:
        await fresh.dispose()

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert [t["table"] for t in data["tables"]] == list(PROVISIONED_TABLES)
    assert all(t["created"] and t["error"] is None for t in data["tables"])


@pytest.mark.asyncio
async def test_open_session_survives_database_swap(
    client: AsyncClient,
    database: Database,
    tmp_path,
    monkeypatch,
):
    """A session checked out from the old pool keeps working after the switch."""
    from dashboard.main import app

    previous = Database.from_url(f"sqlite+aiosqlite:///{tmp_path / 'previous.db'}")
    app.state.database = previous
    monkeypatch.setattr(Database, "from_credentials", classmethod(lambda cls, credentials, **kw: database))

    try:
        async with previous.acquire() as session:
            assert (await session.execute(select(1))).scalar_one() == 1

            response = await client.post("/api/connections/test-and-save", json={**UNREACHABLE, "save": True})
            assert response.status_code == 200
            assert app.state.database is database

            assert (await session.execute(select(2))).scalar_one() == 2
    finally:
        del app.state.database
        await previous.dispose()
