from fastapi import APIRouter, Depends, Response, status

from dashboard.database import Database
from dashboard.dependencies import get_database
from dashboard.schemas.performance import PerformanceDataRequest
from dashboard.services.persistence import save_performance_data

router = APIRouter()


@router.post("", status_code=status.HTTP_204_NO_CONTENT)
async def post_performance_data(
    data: PerformanceDataRequest,
    database: Database = Depends(get_database),
):
    """Store performance rows keyed by client id. Known unique ids are skipped."""
    await save_performance_data(database, data)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
