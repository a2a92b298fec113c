"""SQLite executor - runs ``*.sql`` task files with ``executescript``."""

from __future__ import annotations

import asyncio
import re
import sqlite3
from pathlib import Path
from typing import Any

from dbupdater.core.models import Task
from dbupdater.executors.base import PatternExecutor, suffix_pattern


class SqliteSqlExecutor(PatternExecutor):
    """Runs SQL scripts against a SQLite database file.

    With ``transactional=True`` (default) the script is wrapped in
    ``BEGIN``/``COMMIT``; a failing statement leaves the database
    unchanged. Disable it for scripts that manage transactions themselves.
    """

    default_pattern = suffix_pattern(".sql")

    def __init__(
        self,
        path: str | Path,
        pattern: str | re.Pattern[str] | None = None,
        *,
        transactional: bool = True,
        logger: Any = None,
    ) -> None:
        super().__init__(pattern, logger=logger)
        self.path = str(path)
        self.transactional = transactional

    async def run(self, task: Task, content: str) -> None:
        self._logger.debug("executor.sqlite_sql.executing", task=task.name, path=self.path)
        await asyncio.to_thread(self._execute, content)

    def _execute(self, content: str) -> None:
        script = f"BEGIN;\n{content}\n;COMMIT;" if self.transactional else content
        conn = sqlite3.connect(self.path)
        try:
            conn.executescript(script)
        finally:
            # an uncommitted BEGIN is rolled back on close
            conn.close()


__all__ = ["SqliteSqlExecutor"]
