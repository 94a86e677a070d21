"""Bulk writes for clients, performance rows and Looker creatives.

Every operation runs in a single transaction: all rows are written and
committed, or the transaction is rolled back and ``PersistenceError`` raised.
"""

import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, AsyncIterator, Mapping, Sequence

from sqlalchemy import Numeric, delete
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.database import Database
from dashboard.exceptions import PersistenceError
from dashboard.models.client import Client
from dashboard.models.looker import LookerAdCreative
from dashboard.models.performance import PerformanceRecord
from dashboard.schemas.clients import ClientIn
from dashboard.schemas.looker import LookerCreativeIn
from dashboard.schemas.performance import PerformanceRecordIn

logger = logging.getLogger(__name__)

clients_table = Client.__table__
performance_table = PerformanceRecord.__table__
looker_table = LookerAdCreative.__table__

# Bound as Decimal so asyncpg encodes them as NUMERIC without float rounding
_NUMERIC_COLUMNS = frozenset(
    column.name for column in performance_table.columns if isinstance(column.type, Numeric)
)


def _insert_for(database: Database):
    """INSERT construct with ON CONFLICT support for the database's dialect."""
    if database.dialect_name == "sqlite":
        return sqlite_insert
    return pg_insert


@asynccontextmanager
async def _write_transaction(database: Database, operation: str) -> AsyncIterator[AsyncSession]:
    async with database.acquire() as session:
        try:
            async with session.begin():
                yield session
        except Exception as e:
            logger.error("%s rolled back: %s", operation, e)
            raise PersistenceError.from_exception(operation, e) from e


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

async def save_clients(database: Database, clients: Sequence[ClientIn | Mapping[str, Any]]) -> int:
    """Replace the stored clients with ``clients``. Returns the number stored.

    Afterwards the table holds exactly the submitted clients. Clients missing
    from the list are deleted and their performance and Looker rows cascade.
    Clients that are kept are updated in place, so their ``created_at`` and
    their performance and Looker rows survive the save.
    """
    by_id: dict[str, dict] = {}
    for client in clients:
        if not isinstance(client, ClientIn):
            client = ClientIn.model_validate(client)
        by_id[client.id] = client.model_dump()
    rows = list(by_id.values())

    insert = _insert_for(database)
    async with _write_transaction(database, "save_clients") as session:
        stmt = delete(clients_table)
        if rows:
            stmt = stmt.where(clients_table.c.id.not_in(list(by_id)))
        removed = (await session.execute(stmt)).rowcount

        if rows:
            upsert = insert(clients_table)
            upsert = upsert.on_conflict_do_update(
                index_elements=[clients_table.c.id],
                set_={
                    "name": upsert.excluded.name,
                    "logo": upsert.excluded.logo,
                    "currency": upsert.excluded.currency,
                    "meta_account_name": upsert.excluded.meta_account_name,
                    "updated_at": upsert.excluded.updated_at,
                },
            )
            await session.execute(upsert, rows)

    logger.info("Saved %d clients (%s removed)", len(rows), removed)
    return len(rows)


# ---------------------------------------------------------------------------
# Performance data
# ---------------------------------------------------------------------------

def _performance_row(client_id: str, record: PerformanceRecordIn | Mapping[str, Any]) -> dict:
    if not isinstance(record, PerformanceRecordIn):
        record = PerformanceRecordIn.model_validate(record)
    row = record.model_dump()
    row["client_id"] = client_id
    for name in _NUMERIC_COLUMNS.intersection(row):
        row[name] = Decimal(str(row[name]))
    return row


async def save_performance_data(
    database: Database,
    data: Mapping[str, Sequence[PerformanceRecordIn | Mapping[str, Any]]],
) -> int:
    """Insert performance rows per client. Rows whose unique_id is already
    stored are skipped, never updated. Returns the number of rows submitted."""
    rows = [
        _performance_row(client_id, record)
        for client_id, records in data.items()
        for record in records
    ]
    if not rows:
        logger.info("save_performance_data: nothing to save")
        return 0

    insert = _insert_for(database)
    async with _write_transaction(database, "save_performance_data") as session:
        stmt = insert(performance_table).on_conflict_do_nothing(
            index_elements=[performance_table.c.unique_id],
        )
        await session.execute(stmt, rows)

    logger.info("Saved %d performance rows for %d clients", len(rows), len(data))
    return len(rows)


# ---------------------------------------------------------------------------
# Looker creatives
# ---------------------------------------------------------------------------

async def save_looker_data(
    database: Database,
    data: Mapping[str, Mapping[str, LookerCreativeIn | Mapping[str, Any]]],
) -> int:
    """Upsert creatives keyed by (client_id, ad_name); existing rows are overwritten."""
    rows = []
    for client_id, ads in data.items():
        for ad_name, creative in ads.items():
            if not isinstance(creative, LookerCreativeIn):
                creative = LookerCreativeIn.model_validate(creative)
            rows.append({
                "client_id": client_id,
                "ad_name": ad_name,
                "image_url": creative.image_url,
                "ad_preview_link": creative.ad_preview_link,
            })
    if not rows:
        logger.info("save_looker_data: nothing to save")
        return 0

    insert = _insert_for(database)
    async with _write_transaction(database, "save_looker_data") as session:
        stmt = insert(looker_table)
        stmt = stmt.on_conflict_do_update(
            index_elements=[looker_table.c.client_id, looker_table.c.ad_name],
            set_={
                "image_url": stmt.excluded.image_url,
                "ad_preview_link": stmt.excluded.ad_preview_link,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await session.execute(stmt, rows)

    logger.info("Saved %d Looker creatives for %d clients", len(rows), len(data))
    return len(rows)
