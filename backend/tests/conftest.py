"""
Shared test fixtures for the dashboard backend test suite.

NOTE: This test suite uses aiosqlite as the async SQLite driver so that tests
run against an in-memory database instead of a real PostgreSQL instance.
Make sure ``aiosqlite`` is installed:

    pip install -e ".[test]"

It is declared in ``pyproject.toml`` under ``[project.optional-dependencies] test``.
"""

from __future__ import annotations

from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

from dashboard.config import Settings, get_settings
from dashboard.database import Base, Database
from dashboard.dependencies import get_database
from dashboard.schemas.clients import ClientIn
from dashboard.services.persistence import save_clients

# Import all models so Base.metadata has every table registered.
import dashboard.models  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ---------------------------------------------------------------------------
# Type-adaptation: teach SQLAlchemy to compile PG types for the SQLite dialect.
# ---------------------------------------------------------------------------

@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"


def make_test_database() -> Database:
    """In-memory SQLite database. StaticPool keeps every session on the one
    connection so they all see the same tables."""
    database = Database.from_url(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        # SQLite needs ``check_same_thread=False`` when used with async.
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(database.engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        """Enforce foreign keys (and their ON DELETE actions) like PostgreSQL."""
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return database


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def empty_database() -> AsyncGenerator[Database, None]:
    """A database with no tables at all."""
    database = make_test_database()
    yield database
    await database.dispose()


@pytest_asyncio.fixture()
async def database(empty_database: Database) -> AsyncGenerator[Database, None]:
    """A database with every dashboard table created."""
    async with empty_database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield empty_database


@pytest.fixture()
def app_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        credentials_file=str(tmp_path / "sql_credentials.env"),
    )


@pytest_asyncio.fixture()
async def client(database: Database, app_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """
    FastAPI test client that uses ``httpx.AsyncClient`` with ``ASGITransport``.
    ``get_database`` is overridden to inject the test database and
    ``get_settings`` to keep the credentials file inside ``tmp_path``.
    """
    from dashboard.main import app

    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_settings] = lambda: app_settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def seeded_clients(database: Database) -> list[ClientIn]:
    """Two stored clients: ``acme`` and ``globex``."""
    clients = [
        ClientIn(id="acme", name="Acme Corp", currency="usd", meta_account_name="Acme - Main"),
        ClientIn(id="globex", name="Globex", logo="https://cdn.example.com/globex.png"),
    ]
    await save_clients(database, clients)
    return clients


@pytest.fixture()
def make_record() -> Callable[..., dict]:
    """Build a performance row as the importer sends it."""

    def _make(unique_id: str, day: str = "2026-01-05", **overrides) -> dict:
        record = {
            "unique_id": unique_id,
            "day": day,
            "account_name": "Acme - Main",
            "campaign_name": "Spring Sale",
            "ad_set_name": "Broad 25-44",
            "ad_name": "Video A",
            "age": "25-34",
            "gender": "female",
            "spend": 10.5,
            "impressions": 1000,
            "reach": 800,
            "clicks_all": 20,
            "link_clicks": 12,
            "purchases": 1,
            "purchase_value": 42.0,
        }
        record.update(overrides)
        return record

    return _make
