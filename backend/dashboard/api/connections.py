"""SQL connection checks, credential saving and on-demand schema provisioning."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from dashboard.config import Settings, get_settings
from dashboard.database import Database
from dashboard.dependencies import get_database
from dashboard.limiter import limiter
from dashboard.schemas.connections import (
    ConnectionTestResponse,
    SaveConnectionResponse,
    SchemaStatusResponse,
    SqlCredentialsRequest,
)
from dashboard.services.credentials import save_credentials
from dashboard.services.provisioning import provision_tables

logger = logging.getLogger(__name__)
router = APIRouter()


def _connection_test_limit() -> str:
    return get_settings().connection_test_rate_limit


async def schema_status(database: Database) -> SchemaStatusResponse:
    tables = await provision_tables(database)
    return SchemaStatusResponse(success=all(t.error is None for t in tables), tables=tables)


@router.post("/test-sql", response_model=ConnectionTestResponse)
@limiter.limit(_connection_test_limit)
async def test_sql_connection(
    request: Request,
    database: Database = Depends(get_database),
):
    """Probe the configured database and return the server time."""
    result = await database.test_connection()
    response = ConnectionTestResponse(
        success=result.success,
        message=result.message,
        timestamp=result.timestamp,
        error_kind=result.error_kind,
    )
    if not result.success:
        return JSONResponse(status_code=500, content=response.model_dump(mode="json"))
    return response


@router.post("/test-and-save", response_model=SaveConnectionResponse)
@limiter.limit(_connection_test_limit)
async def test_and_save_connection(
    request: Request,
    data: SqlCredentialsRequest,
    settings: Settings = Depends(get_settings),
):
    """Test the submitted credentials; with ``save`` set, persist them and
    switch the application over to the new database."""
    credentials = data.to_credentials()
    candidate = Database.from_credentials(credentials, use_ssl=settings.postgres_ssl)
    result = await candidate.test_connection()

    if not result.success:
        await candidate.dispose()
        response = SaveConnectionResponse(
            success=False,
            message=result.message,
            saved=False,
            error_kind=result.error_kind,
        )
        return JSONResponse(status_code=500, content=response.model_dump(mode="json"))

    if not data.save:
        await candidate.dispose()
        return SaveConnectionResponse(success=True, message=result.message, saved=False)

    try:
        save_credentials(credentials, settings.credentials_file)
    except OSError as e:
        logger.exception("Could not write credentials file %s", settings.credentials_file)
        await candidate.dispose()
        response = SaveConnectionResponse(
            success=False,
            message=f"Connected, but the credentials could not be saved: {e}",
            saved=False,
        )
        return JSONResponse(status_code=500, content=response.model_dump(mode="json"))

    previous = getattr(request.app.state, "database", None)
    request.app.state.database = candidate
    if previous is not None:
        # Checked-in connections close now; sessions still open on the old pool
        # finish their work and their connections close when returned
        await previous.dispose()
    logger.info("Switched to database %s@%s:%s/%s", credentials.user, credentials.host, credentials.port, credentials.database)

    return SaveConnectionResponse(
        success=True,
        message="Connection successful and credentials saved",
        saved=True,
    )


@router.post("/check-tables", response_model=SchemaStatusResponse)
async def check_tables(database: Database = Depends(get_database)):
    """Check every dashboard table and create the missing ones."""
    return await schema_status(database)
