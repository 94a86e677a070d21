"""Ensure the dashboard tables exist.

Each table is checked and created on its own; a failure on one table is
recorded in its status and the remaining tables are still processed.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import Table, inspect
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.schema import CreateIndex, CreateTable
from sqlalchemy.sql.base import Executable

from dashboard.database import Base, Database
from dashboard.exceptions import classify_error, describe_error
from dashboard.schemas.connections import TableStatus

logger = logging.getLogger(__name__)

# Creation order matters: clients is referenced by the other tables
PROVISIONED_TABLES = (
    "clients",
    "performance_data",
    "looker_data",
    "import_history",
    "logs",
    "reports",
)


@dataclass(frozen=True)
class TableDefinition:
    name: str
    statements: tuple[Executable, ...]

    @classmethod
    def from_table(cls, table: Table) -> "TableDefinition":
        statements: list[Executable] = [CreateTable(table)]
        statements.extend(CreateIndex(index) for index in sorted(table.indexes, key=lambda i: i.name))
        return cls(name=table.name, statements=tuple(statements))


def default_table_definitions() -> list[TableDefinition]:
    import dashboard.models  # noqa: F401  registers every table on Base.metadata

    return [TableDefinition.from_table(Base.metadata.tables[name]) for name in PROVISIONED_TABLES]


async def _table_exists(conn: AsyncConnection, name: str) -> bool:
    return await conn.run_sync(lambda sync_conn: inspect(sync_conn).has_table(name))


async def provision_table(database: Database, definition: TableDefinition) -> TableStatus:
    try:
        async with database.engine.connect() as conn:
            if await _table_exists(conn, definition.name):
                return TableStatus(table=definition.name, exists=True, created=False)

        # Own transaction per table: a failed CREATE must not poison the next one
        async with database.engine.begin() as conn:
            for statement in definition.statements:
                await conn.execute(statement)
    except Exception as e:
        kind = classify_error(e)
        logger.error("Provisioning table %s failed (%s): %s", definition.name, kind.value, e)
        return TableStatus(
            table=definition.name,
            exists=False,
            created=False,
            error=describe_error(kind, e),
        )

    logger.info("Created table %s", definition.name)
    return TableStatus(table=definition.name, exists=False, created=True)


async def provision_tables(
    database: Database,
    definitions: Sequence[TableDefinition] | None = None,
) -> list[TableStatus]:
    """Check every table in order and create the missing ones."""
    if definitions is None:
        definitions = default_table_definitions()

    statuses = [await provision_table(database, definition) for definition in definitions]

    created = [s.table for s in statuses if s.created]
    failed = [s.table for s in statuses if s.error]
    logger.info(
        "Schema check: %d tables, %d created%s",
        len(statuses),
        len(created),
        f", failed: {', '.join(failed)}" if failed else "",
    )
    return statuses
