from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from dashboard.database import Database
from dashboard.dependencies import get_database
from dashboard.schemas.clients import (
    CampaignSummaryResponse,
    ClientIn,
    ClientMetricsResponse,
    ClientResponse,
)
from dashboard.schemas.looker import LookerCreativeResponse
from dashboard.schemas.performance import PerformanceRecordResponse
from dashboard.services import persistence, queries

router = APIRouter()


def _check_period(start_date: date | None, end_date: date | None) -> None:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")


@router.post("", status_code=status.HTTP_204_NO_CONTENT)
async def save_clients(
    clients: list[ClientIn],
    database: Database = Depends(get_database),
):
    """Replace the stored client list with the submitted one."""
    await persistence.save_clients(database, clients)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=list[ClientResponse])
async def list_clients(database: Database = Depends(get_database)):
    return await queries.list_clients(database)


@router.get("/{client_id}/performance", response_model=list[PerformanceRecordResponse])
async def performance_history(
    client_id: str,
    limit: int | None = Query(None, ge=1, le=10000),
    database: Database = Depends(get_database),
):
    return await queries.get_performance_history(database, client_id, limit=limit)


@router.get("/{client_id}/metrics", response_model=ClientMetricsResponse)
async def client_metrics(
    client_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
    database: Database = Depends(get_database),
):
    _check_period(start_date, end_date)
    return await queries.get_client_metrics(database, client_id, start_date, end_date)


@router.get("/{client_id}/top-campaigns", response_model=list[CampaignSummaryResponse])
async def top_campaigns(
    client_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
    database: Database = Depends(get_database),
):
    _check_period(start_date, end_date)
    return await queries.get_top_campaigns(database, client_id, start_date, end_date)


@router.get("/{client_id}/looker-data", response_model=list[LookerCreativeResponse])
async def looker_data(client_id: str, database: Database = Depends(get_database)):
    return await queries.get_looker_data(database, client_id)
