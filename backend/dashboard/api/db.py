from fastapi import APIRouter, Depends

from dashboard.api.connections import schema_status
from dashboard.database import Database
from dashboard.dependencies import get_database
from dashboard.schemas.connections import SchemaStatusResponse

router = APIRouter()


@router.post("/status", response_model=SchemaStatusResponse)
async def db_status(database: Database = Depends(get_database)):
    """Per-table schema status for the settings page."""
    return await schema_status(database)
