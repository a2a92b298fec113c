"""
Shared pytest fixtures and helpers for dbupdater tests.

This module provides:
- Stub task sources with explicit fingerprints
- Recording / failing executors
- A deterministic, strictly increasing clock
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import structlog

from dbupdater.core.models import ExecutionRecord, Task
from dbupdater.ledgers.memory import InMemoryLedger


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.path).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Test doubles
# =============================================================================


class StubSource:
    """Task source returning fixed tasks and contents."""

    def __init__(
        self,
        tasks: Iterable[Task],
        contents: dict[str, str] | None = None,
        *,
        fail_content: Iterable[str] = (),
        fail_list: Exception | None = None,
    ) -> None:
        self.tasks = list(tasks)
        self.contents = contents or {}
        self.fail_content = set(fail_content)
        self.fail_list = fail_list
        self.init_calls = 0
        self.fetched: list[str] = []

    async def init(self) -> None:
        self.init_calls += 1

    async def list_tasks(self) -> list[Task]:
        if self.fail_list is not None:
            raise self.fail_list
        return list(self.tasks)

    async def get_content(self, task: Task) -> str:
        self.fetched.append(task.name)
        if task.name in self.fail_content:
            raise OSError(f"cannot read {task.name}")
        return self.contents.get(task.name, f"-- {task.name}")


class FailingLedger(InMemoryLedger):
    """In-memory ledger whose reads or appends can be made to fail."""

    def __init__(
        self,
        records: Iterable[ExecutionRecord] = (),
        *,
        fail_append: Iterable[str] = (),
        fail_list: Exception | None = None,
    ) -> None:
        super().__init__(records)
        self.fail_append = set(fail_append)
        self.fail_list = fail_list

    async def list_records(self) -> list[ExecutionRecord]:
        if self.fail_list is not None:
            raise self.fail_list
        return await super().list_records()

    async def append_record(self, task: Task, *, executed_at: datetime) -> ExecutionRecord:
        if task.name in self.fail_append:
            raise ConnectionError("ledger unavailable")
        return await super().append_record(task, executed_at=executed_at)


class RecordingExecutor:
    """Executor that records every claim check and run, in order."""

    def __init__(
        self,
        predicate: Callable[[str], bool] = lambda name: True,
        *,
        fail: Iterable[str] = (),
        log: list[str] | None = None,
    ) -> None:
        self.predicate = predicate
        self.fail = set(fail)
        self.claimed: list[str] = []
        self.ran: list[str] = [] if log is None else log
        self.contents: dict[str, str] = {}

    def claims(self, name: str) -> bool:
        self.claimed.append(name)
        return self.predicate(name)

    async def run(self, task: Task, content: str) -> None:
        if task.name in self.fail:
            raise RuntimeError(f"{task.name} exploded")
        self.ran.append(task.name)
        self.contents[task.name] = content


def make_clock(start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
    """Return a clock producing strictly increasing UTC timestamps."""
    current = [start or datetime(2024, 1, 1, tzinfo=UTC)]

    def clock() -> datetime:
        value = current[0]
        current[0] = value + step
        return value

    return clock


def record(name: str, fingerprint: str, when: datetime | None = None) -> ExecutionRecord:
    return ExecutionRecord(
        name=name,
        fingerprint=fingerprint,
        executed_at=when or datetime(2023, 6, 1, tzinfo=UTC),
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo ``configure_logging`` calls made by CLI tests."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def clock():
    return make_clock()


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def abc_tasks() -> list[Task]:
    return [Task("A", "fa"), Task("B", "fb"), Task("C", "fc")]
