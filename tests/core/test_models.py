"""Tests for the shared value types."""

from dataclasses import FrozenInstanceError
from datetime import UTC, datetime

import pytest

from dbupdater.core.models import ExecutionRecord, RunPlan, RunReport, Task


class TestTask:
    def test_immutable(self):
        task = Task("a.sql", "f")
        with pytest.raises(FrozenInstanceError):
            task.name = "b.sql"

    def test_equality_by_value(self):
        assert Task("a", "f") == Task("a", "f")
        assert Task("a", "f") != Task("a", "g")


class TestExecutionRecord:
    def test_to_dict(self):
        when = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
        rec = ExecutionRecord("a.sql", "f", when)
        assert rec.to_dict() == {
            "name": "a.sql",
            "fingerprint": "f",
            "executed_at": "2024-03-01T12:00:00+00:00",
        }


class TestRunReport:
    def test_changed(self):
        assert RunReport(executed=("a",)).changed
        assert not RunReport(skipped=("a",)).changed


class TestRunPlan:
    def test_up_to_date(self):
        assert RunPlan().up_to_date
        assert not RunPlan(pending=(Task("a", "f"),)).up_to_date

    def test_to_dict(self):
        when = datetime(2024, 1, 1, tzinfo=UTC)
        plan = RunPlan(pending=(Task("b", "fb"),), applied=(ExecutionRecord("a", "fa", when),))
        assert plan.to_dict() == {
            "pending": [{"name": "b", "fingerprint": "fb"}],
            "applied": [{"name": "a", "fingerprint": "fa", "executed_at": when.isoformat()}],
        }
