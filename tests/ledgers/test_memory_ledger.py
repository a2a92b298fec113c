"""Tests for the in-memory ledger."""

from datetime import UTC, datetime

import pytest

from conftest import record
from dbupdater.core.models import ExecutionRecord, Task
from dbupdater.ledgers import InMemoryLedger


class TestInMemoryLedger:
    @pytest.mark.asyncio
    async def test_init(self):
        ledger = InMemoryLedger()
        assert not ledger.initialized
        await ledger.init()
        assert ledger.initialized

    @pytest.mark.asyncio
    async def test_seeded_records(self):
        ledger = InMemoryLedger([record("a", "f")])
        assert [r.name for r in await ledger.list_records()] == ["a"]

    @pytest.mark.asyncio
    async def test_append(self):
        ledger = InMemoryLedger()
        when = datetime(2024, 1, 2, tzinfo=UTC)
        rec = await ledger.append_record(Task("a", "f"), executed_at=when)
        assert rec == ExecutionRecord("a", "f", when)
        assert ledger.names == ["a"]

    @pytest.mark.asyncio
    async def test_list_returns_copy(self):
        ledger = InMemoryLedger([record("a", "f")])
        (await ledger.list_records()).clear()
        assert ledger.names == ["a"]
