"""Tests for the PostgreSQL executors with a mocked asyncpg connection."""

import sys
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from dbupdater.core.errors import ConfigurationError
from dbupdater.core.models import Task
from dbupdater.executors import PostgresPythonExecutor, PostgresSqlExecutor
from dbupdater.executors.postgres import load_entrypoint

URL = "postgresql://localhost/app"


@pytest.fixture()
def conn():
    c = MagicMock()
    c.execute = AsyncMock()
    c.transaction = MagicMock(return_value=MagicMock())
    return c


@pytest.fixture()
def patched_connect(conn):
    @asynccontextmanager
    async def fake_connect(url, **kwargs):
        yield conn

    with patch("dbupdater.executors.postgres.connect", fake_connect):
        yield


class TestClaims:
    @pytest.mark.parametrize(
        ("name", "sql", "py"),
        [
            ("001_init.postgres-file-sql.sql", True, False),
            ("002_fix.postgres-file-py.py", False, True),
            ("003_plain.sql", False, False),
            ("004.postgres-file-sql.sql.bak", False, False),
        ],
    )
    def test_default_patterns(self, name, sql, py):
        assert PostgresSqlExecutor(URL).claims(name) is sql
        assert PostgresPythonExecutor(URL).claims(name) is py

    def test_custom_pattern(self):
        assert PostgresSqlExecutor(URL, r"\.sql$").claims("003_plain.sql")


class TestSqlExecutor:
    @pytest.mark.asyncio
    async def test_runs_script_in_transaction(self, conn, patched_connect):
        await PostgresSqlExecutor(URL).run(Task("a.postgres-file-sql.sql", "f"), "CREATE TABLE t (id int);")
        conn.transaction.assert_called_once()
        conn.execute.assert_awaited_once_with("CREATE TABLE t (id int);")

    @pytest.mark.asyncio
    async def test_propagates_failure(self, conn, patched_connect):
        conn.execute.side_effect = RuntimeError("syntax error")
        with pytest.raises(RuntimeError, match="syntax error"):
            await PostgresSqlExecutor(URL).run(Task("a", "f"), "BROKEN")

    @pytest.mark.asyncio
    async def test_requires_url(self):
        with pytest.raises(ConfigurationError, match="PostgresSqlExecutor"):
            await PostgresSqlExecutor(None).run(Task("a", "f"), "SELECT 1")


class TestPythonExecutor:
    @pytest.mark.asyncio
    async def test_async_entrypoint(self, conn, patched_connect):
        content = "async def run(conn):\n    await conn.execute('SELECT 1')\n"
        await PostgresPythonExecutor(URL).run(Task("a.postgres-file-py.py", "f"), content)
        conn.execute.assert_awaited_once_with("SELECT 1")
        conn.transaction.assert_called_once()

    @pytest.mark.asyncio
    async def test_sync_entrypoint(self, conn, patched_connect):
        content = "def run(conn):\n    conn.marker = 'ran'\n"
        await PostgresPythonExecutor(URL).run(Task("b.postgres-file-py.py", "f"), content)
        assert conn.marker == "ran"

    @pytest.mark.asyncio
    async def test_missing_entrypoint(self, conn, patched_connect):
        with pytest.raises(TypeError, match="does not define a callable run"):
            await PostgresPythonExecutor(URL).run(Task("c.postgres-file-py.py", "f"), "x = 1\n")
        conn.transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_requires_url(self):
        with pytest.raises(ConfigurationError):
            await PostgresPythonExecutor("").run(Task("a", "f"), "def run(conn): pass")


class TestLoadEntrypoint:
    def test_returns_run(self):
        fn = load_entrypoint(Task("t.py", "f"), "def run(conn):\n    return conn * 2\n")
        assert fn(21) == 42

    def test_module_name_derived_from_task(self):
        fn = load_entrypoint(Task("004-fix.postgres-file-py.py", "f"), "def run(conn):\n    return __name__\n")
        assert fn(None) == "dbupdater_task_004_fix_postgres_file_py_py"

    def test_syntax_error(self):
        with pytest.raises(SyntaxError):
            load_entrypoint(Task("bad.py", "f"), "def run(:\n")

    def test_non_callable_run(self):
        with pytest.raises(TypeError):
            load_entrypoint(Task("t.py", "f"), "run = 3\n")

    def test_registered_as_module(self):
        fn = load_entrypoint(Task("005_mod.postgres-file-py.py", "f"), "def run(conn):\n    return None\n")
        module = sys.modules["dbupdater_task_005_mod_postgres_file_py_py"]
        assert module.run is fn
        assert module.__spec__.name == module.__name__

    def test_dataclass_with_postponed_annotations(self):
        content = (
            "from __future__ import annotations\n"
            "from dataclasses import dataclass\n"
            "\n"
            "@dataclass(slots=True)\n"
            "class Row:\n"
            "    id: int\n"
            "\n"
            "def run(conn):\n"
            "    return Row(conn).id\n"
        )
        assert load_entrypoint(Task("006_rows.py", "f"), content)(7) == 7

    def test_failed_import_not_left_registered(self):
        with pytest.raises(ZeroDivisionError):
            load_entrypoint(Task("007_boom.py", "f"), "x = 1 / 0\n")
        assert "dbupdater_task_007_boom_py" not in sys.modules
