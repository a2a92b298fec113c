"""
PostgreSQL executors (asyncpg).

Two task flavours, told apart by file name:

- ``*.postgres-file-sql.sql`` - a SQL script, sent as one multi-statement
  query inside a transaction.
- ``*.postgres-file-py.py`` - a Python module defining ``run(conn)``
  (plain or ``async``), called with an asyncpg connection inside a
  transaction.

A failing task rolls back its own transaction, so it leaves no partial
effect behind and can simply be fixed and re-run.

Example task file ``004_backfill.postgres-file-py.py``::

    async def run(conn):
        rows = await conn.fetch("SELECT id FROM users WHERE slug IS NULL")
        for row in rows:
            await conn.execute("UPDATE users SET slug = $1 WHERE id = $2",
                               f"user-{row['id']}", row["id"])
"""

from __future__ import annotations

import importlib.abc
import importlib.machinery
import importlib.util
import inspect
import re
import sys
import types
from typing import Any

from dbupdater.core.database import connect, require_url
from dbupdater.core.models import Task
from dbupdater.executors.base import PatternExecutor, suffix_pattern

SQL_SUFFIX = ".postgres-file-sql.sql"
PYTHON_SUFFIX = ".postgres-file-py.py"


class PostgresSqlExecutor(PatternExecutor):
    """Runs SQL task files against PostgreSQL."""

    default_pattern = suffix_pattern(SQL_SUFFIX)

    def __init__(
        self,
        database_url: str | None,
        pattern: str | re.Pattern[str] | None = None,
        *,
        logger: Any = None,
    ) -> None:
        super().__init__(pattern, logger=logger)
        self.database_url = database_url

    async def run(self, task: Task, content: str) -> None:
        url = require_url(self.database_url, type(self).__name__)
        async with connect(url) as conn:
            self._logger.debug("executor.postgres_sql.executing", task=task.name, sql=content)
            async with conn.transaction():
                await conn.execute(content)


class PostgresPythonExecutor(PatternExecutor):
    """Runs Python task files that define ``run(conn)``."""

    default_pattern = suffix_pattern(PYTHON_SUFFIX)

    def __init__(
        self,
        database_url: str | None,
        pattern: str | re.Pattern[str] | None = None,
        *,
        logger: Any = None,
    ) -> None:
        super().__init__(pattern, logger=logger)
        self.database_url = database_url

    async def run(self, task: Task, content: str) -> None:
        url = require_url(self.database_url, type(self).__name__)
        entrypoint = load_entrypoint(task, content)
        async with connect(url) as conn:
            self._logger.debug("executor.postgres_py.executing", task=task.name)
            async with conn.transaction():
                outcome = entrypoint(conn)
                if inspect.isawaitable(outcome):
                    await outcome


class _TaskLoader(importlib.abc.Loader):
    """Loads a module from task content instead of a file on disk."""

    def __init__(self, task: Task, content: str) -> None:
        self.task = task
        self.content = content

    def create_module(self, spec: importlib.machinery.ModuleSpec) -> None:
        return None

    def exec_module(self, module: types.ModuleType) -> None:
        code = compile(self.content, self.task.name, "exec")
        exec(code, module.__dict__)


def load_entrypoint(task: Task, content: str, name: str = "run") -> Any:
    """Import ``content`` as a module and return its ``run`` callable.

    The module is registered in ``sys.modules`` under
    ``dbupdater_task_<name>`` so dataclasses and pickling resolve it.

    Raises:
        SyntaxError: If the content is not valid Python.
        TypeError: If the module defines no callable ``run``.
    """
    module_name = "dbupdater_task_" + re.sub(r"\W", "_", task.name)
    spec = importlib.util.spec_from_loader(module_name, _TaskLoader(task, content))
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        del sys.modules[spec.name]
        raise

    entrypoint = getattr(module, name, None)
    if not callable(entrypoint):
        raise TypeError(f"Task {task.name} does not define a callable {name}(conn)")
    return entrypoint


__all__ = [
    "PostgresSqlExecutor",
    "PostgresPythonExecutor",
    "load_entrypoint",
    "SQL_SUFFIX",
    "PYTHON_SUFFIX",
]
