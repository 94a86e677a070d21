"""Read-side queries for the dashboard views."""

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.database import Database
from dashboard.exceptions import PersistenceError
from dashboard.models.client import Client
from dashboard.models.looker import LookerAdCreative
from dashboard.models.performance import PerformanceRecord
from dashboard.schemas.clients import CampaignSummaryResponse, ClientMetricsResponse

logger = logging.getLogger(__name__)

TOP_CAMPAIGNS_LIMIT = 5


@asynccontextmanager
async def _read_session(database: Database, operation: str) -> AsyncIterator[AsyncSession]:
    async with database.acquire() as session:
        try:
            yield session
        except Exception as e:
            logger.error("%s failed: %s", operation, e)
            raise PersistenceError.from_exception(operation, e) from e


def _ratio(numerator, denominator) -> float:
    if not denominator:
        return 0.0
    return round(float(numerator) / float(denominator), 4)


def _in_period(query: Select, start_date: date | None, end_date: date | None) -> Select:
    if start_date is not None:
        query = query.where(PerformanceRecord.day >= start_date)
    if end_date is not None:
        query = query.where(PerformanceRecord.day <= end_date)
    return query


async def list_clients(database: Database) -> list[Client]:
    async with _read_session(database, "list_clients") as session:
        result = await session.execute(select(Client).order_by(Client.name))
        return list(result.scalars().all())


async def get_performance_history(
    database: Database,
    client_id: str,
    limit: int | None = None,
) -> list[PerformanceRecord]:
    """Performance rows for a client, most recent day first."""
    query = (
        select(PerformanceRecord)
        .where(PerformanceRecord.client_id == client_id)
        .order_by(PerformanceRecord.day.desc(), PerformanceRecord.id.desc())
    )
    if limit:
        query = query.limit(limit)

    async with _read_session(database, "get_performance_history") as session:
        result = await session.execute(query)
        return list(result.scalars().all())


async def get_client_metrics(
    database: Database,
    client_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
) -> ClientMetricsResponse:
    """Aggregate spend and conversions with derived ROAS, CPA, AOV and CTR."""
    query = _in_period(
        select(
            func.coalesce(func.sum(PerformanceRecord.spend), 0),
            func.coalesce(func.sum(PerformanceRecord.impressions), 0),
            func.coalesce(func.sum(PerformanceRecord.clicks_all), 0),
            func.coalesce(func.sum(PerformanceRecord.purchases), 0),
            func.coalesce(func.sum(PerformanceRecord.purchase_value), 0),
        ).where(PerformanceRecord.client_id == client_id),
        start_date,
        end_date,
    )

    async with _read_session(database, "get_client_metrics") as session:
        spend, impressions, clicks, purchases, purchase_value = (await session.execute(query)).one()

    return ClientMetricsResponse(
        client_id=client_id,
        start_date=start_date,
        end_date=end_date,
        spend=round(float(spend), 2),
        impressions=int(impressions),
        clicks=int(clicks),
        purchases=int(purchases),
        purchase_value=round(float(purchase_value), 2),
        roas=_ratio(purchase_value, spend),
        cpa=_ratio(spend, purchases),
        aov=_ratio(purchase_value, purchases),
        ctr=_ratio(clicks * 100, impressions),
    )


async def get_top_campaigns(
    database: Database,
    client_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[CampaignSummaryResponse]:
    """The client's highest-spend campaigns with their ROAS."""
    spend = func.coalesce(func.sum(PerformanceRecord.spend), 0).label("spend")
    query = _in_period(
        select(
            PerformanceRecord.campaign_name,
            spend,
            func.coalesce(func.sum(PerformanceRecord.impressions), 0),
            func.coalesce(func.sum(PerformanceRecord.purchases), 0),
            func.coalesce(func.sum(PerformanceRecord.purchase_value), 0),
        ).where(PerformanceRecord.client_id == client_id),
        start_date,
        end_date,
    )
    query = (
        query.group_by(PerformanceRecord.campaign_name)
        .order_by(spend.desc())
        .limit(TOP_CAMPAIGNS_LIMIT)
    )

    async with _read_session(database, "get_top_campaigns") as session:
        rows = (await session.execute(query)).all()

    return [
        CampaignSummaryResponse(
            campaign_name=campaign_name,
            spend=round(float(campaign_spend), 2),
            impressions=int(impressions),
            purchases=int(purchases),
            purchase_value=round(float(purchase_value), 2),
            roas=_ratio(purchase_value, campaign_spend),
        )
        for campaign_name, campaign_spend, impressions, purchases, purchase_value in rows
    ]


async def get_looker_data(database: Database, client_id: str) -> list[LookerAdCreative]:
    async with _read_session(database, "get_looker_data") as session:
        result = await session.execute(
            select(LookerAdCreative)
            .where(LookerAdCreative.client_id == client_id)
            .order_by(LookerAdCreative.ad_name)
        )
        return list(result.scalars().all())
