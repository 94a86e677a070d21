from fastapi import APIRouter, Depends, Response, status

from dashboard.database import Database
from dashboard.dependencies import get_database
from dashboard.schemas.looker import LookerDataRequest
from dashboard.services.persistence import save_looker_data

router = APIRouter()


@router.post("", status_code=status.HTTP_204_NO_CONTENT)
async def post_looker_data(
    data: LookerDataRequest,
    database: Database = Depends(get_database),
):
    await save_looker_data(database, data)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
