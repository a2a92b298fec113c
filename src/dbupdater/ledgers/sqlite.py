"""SQLite execution ledger.

Uses the stdlib ``sqlite3`` driver, one short-lived connection per call,
run in a worker thread so the event loop is never blocked. Each append is
committed before the call returns.

Table layout (created by :meth:`SqliteLedger.init` when missing)::

    CREATE TABLE "tasks" (
        name     TEXT NOT NULL PRIMARY KEY,
        md5      TEXT NOT NULL,
        executed TEXT NOT NULL
    )
"""

from __future__ import annotations

import asyncio
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from dbupdater.core.database import quote_identifier
from dbupdater.core.logging import get_logger
from dbupdater.core.models import ExecutionRecord, Task

DEFAULT_TABLE = "tasks"


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class SqliteLedger:
    """Ledger stored in a table of a SQLite database file.

    Parameters
    ----------
    path
        Database file. ``:memory:`` is not supported because every call
        opens its own connection.
    table
        Ledger table name.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        table: str = DEFAULT_TABLE,
        logger: Any = None,
    ) -> None:
        self.path = str(path)
        self.table = table
        self._quoted = quote_identifier(table)
        self._logger = logger or get_logger(__name__)

    def __repr__(self) -> str:
        return f"SqliteLedger({self.path!r}, table={self.table!r})"

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path)

    # ------------------------------------------------------------------
    # ExecutionLedger protocol
    # ------------------------------------------------------------------

    async def init(self) -> None:
        """Create the ledger table if it doesn't exist."""
        created = await asyncio.to_thread(self._ensure_table)
        if created:
            self._logger.info("ledger.sqlite.table_created", table=self.table, path=self.path)
        else:
            self._logger.debug("ledger.sqlite.table_found", table=self.table, path=self.path)

    async def list_records(self) -> list[ExecutionRecord]:
        rows = await asyncio.to_thread(self._select_all)
        records = [
            ExecutionRecord(name=name, fingerprint=md5, executed_at=_parse_timestamp(executed))
            for name, md5, executed in rows
        ]
        self._logger.debug("ledger.sqlite.records_listed", count=len(records))
        return records

    async def append_record(self, task: Task, *, executed_at: datetime) -> ExecutionRecord:
        await asyncio.to_thread(self._insert, task, executed_at)
        return ExecutionRecord(name=task.name, fingerprint=task.fingerprint, executed_at=executed_at)

    # ------------------------------------------------------------------
    # Internal helpers (run in worker threads)
    # ------------------------------------------------------------------

    def _ensure_table(self) -> bool:
        conn = self._connect()
        try:
            exists = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
                (self.table,),
            ).fetchone()
            if exists:
                return False
            conn.execute(
                f"""
                CREATE TABLE {self._quoted} (
                    name TEXT NOT NULL PRIMARY KEY,
                    md5 TEXT NOT NULL,
                    executed TEXT NOT NULL
                )
                """
            )
            conn.commit()
            return True
        finally:
            conn.close()

    def _select_all(self) -> list[tuple[str, str, str]]:
        conn = self._connect()
        try:
            cursor = conn.execute(f"SELECT name, md5, executed FROM {self._quoted} ORDER BY executed, name")
            return cursor.fetchall()
        finally:
            conn.close()

    def _insert(self, task: Task, executed_at: datetime) -> None:
        conn = self._connect()
        try:
            conn.execute(
                f"INSERT INTO {self._quoted} (name, md5, executed) VALUES (?, ?, ?)",
                (task.name, task.fingerprint, executed_at.isoformat()),
            )
            conn.commit()
        finally:
            conn.close()


__all__ = ["SqliteLedger", "DEFAULT_TABLE"]
