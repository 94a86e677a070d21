import logging
import ssl
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import AsyncIterator

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from dashboard.config import DatabaseCredentials
from dashboard.exceptions import ErrorKind, classify_error, describe_error

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


@dataclass
class ConnectionTestResult:
    success: bool
    message: str
    timestamp: str | None = None
    error_kind: ErrorKind | None = None


class Database:
    """Owns the connection pool for one set of credentials.

    Built once at application startup and disposed on shutdown; request
    handlers get it through ``dashboard.dependencies.get_database``.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(cls, url: str, **engine_kwargs) -> "Database":
        return cls(create_async_engine(url, **engine_kwargs))

    @classmethod
    def from_credentials(
        cls,
        credentials: DatabaseCredentials,
        *,
        use_ssl: bool = False,
        echo: bool = False,
    ) -> "Database":
        # Managed Postgres hosts require SSL; asyncpg needs an ssl.SSLContext
        connect_args = {}
        if use_ssl:
            ssl_ctx = ssl.create_default_context()
            ssl_ctx.check_hostname = False
            ssl_ctx.verify_mode = ssl.CERT_NONE
            connect_args["ssl"] = ssl_ctx

        return cls.from_url(
            credentials.async_url,
            echo=echo,
            pool_pre_ping=True,
            connect_args=connect_args,
        )

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; its connection goes back to the pool on every exit path."""
        async with self.session_factory() as session:
            try:
                yield session
            finally:
                await session.close()

    async def test_connection(self) -> ConnectionTestResult:
        """Probe the server with ``SELECT now()``. Failures are classified, not raised."""
        try:
            async with self.engine.connect() as conn:
                server_time = (await conn.execute(select(func.now()))).scalar_one()
        except Exception as e:
            kind = classify_error(e)
            logger.warning("Database connection test failed (%s): %s", kind.value, e)
            return ConnectionTestResult(
                success=False,
                message=describe_error(kind, e),
                error_kind=kind,
            )

        timestamp = server_time.isoformat() if isinstance(server_time, datetime) else str(server_time)
        logger.info("Database connection test succeeded (server time %s)", timestamp)
        return ConnectionTestResult(
            success=True,
            message="Successfully connected to PostgreSQL",
            timestamp=timestamp,
        )

    async def dispose(self) -> None:
        await self.engine.dispose()
