"""PostgreSQL execution ledger (asyncpg).

Table layout (created by :meth:`PostgresLedger.init` when missing)::

    CREATE TABLE "tasks" (
        name     character varying(256) NOT NULL,
        md5      character varying(128) NOT NULL,
        executed timestamp with time zone NOT NULL DEFAULT now(),
        PRIMARY KEY (name)
    )

Each call opens and closes its own connection; ``append_record`` returns
only after the INSERT has committed.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from dbupdater.core.database import connect, quote_identifier, require_url
from dbupdater.core.logging import get_logger
from dbupdater.core.models import ExecutionRecord, Task

DEFAULT_TABLE = "tasks"

_TABLE_EXISTS_SQL = """
    SELECT 1 FROM information_schema.tables
    WHERE table_schema = current_schema() AND table_name = $1
"""


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class PostgresLedger:
    """Ledger stored in a PostgreSQL table.

    Parameters
    ----------
    database_url
        PostgreSQL URL; ``postgresql+asyncpg://`` and ``sslmode`` are
        normalized.
    table
        Ledger table name (default ``tasks``).
    """

    def __init__(
        self,
        database_url: str | None,
        *,
        table: str = DEFAULT_TABLE,
        logger: Any = None,
    ) -> None:
        self.database_url = database_url
        self.table = table
        self._quoted = quote_identifier(table)
        self._logger = logger or get_logger(__name__)

    def __repr__(self) -> str:
        return f"PostgresLedger(table={self.table!r})"

    async def init(self) -> None:
        """Create the ledger table if it doesn't exist."""
        url = require_url(self.database_url, "PostgresLedger")
        async with connect(url) as conn:
            if await conn.fetchval(_TABLE_EXISTS_SQL, self.table):
                self._logger.debug("ledger.postgres.table_found", table=self.table)
                return

            self._logger.debug("ledger.postgres.table_missing", table=self.table)
            await conn.execute(
                f"""
                CREATE TABLE {self._quoted} (
                    name character varying(256) NOT NULL,
                    md5 character varying(128) NOT NULL,
                    executed timestamp with time zone NOT NULL DEFAULT now(),
                    PRIMARY KEY (name)
                )
                """
            )
            self._logger.info("ledger.postgres.table_created", table=self.table)

    async def list_records(self) -> list[ExecutionRecord]:
        url = require_url(self.database_url, "PostgresLedger")
        async with connect(url) as conn:
            rows = await conn.fetch(f'SELECT "name", "md5", "executed" FROM {self._quoted}')

        records = [
            ExecutionRecord(name=row["name"], fingerprint=row["md5"], executed_at=_as_utc(row["executed"]))
            for row in rows
        ]
        self._logger.debug("ledger.postgres.records_listed", count=len(records))
        return records

    async def append_record(self, task: Task, *, executed_at: datetime) -> ExecutionRecord:
        url = require_url(self.database_url, "PostgresLedger")
        async with connect(url) as conn:
            await conn.execute(
                f"INSERT INTO {self._quoted} (name, md5, executed) VALUES ($1, $2, $3)",
                task.name,
                task.fingerprint,
                _as_utc(executed_at),
            )
        return ExecutionRecord(name=task.name, fingerprint=task.fingerprint, executed_at=executed_at)


__all__ = ["PostgresLedger", "DEFAULT_TABLE"]
