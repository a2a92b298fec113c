"""Tests for dbupdater.core.errors module."""

import pytest

from dbupdater.core.errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ExecutionError,
    IntegrityError,
    IntegrityViolation,
    LedgerReadError,
    LedgerWriteError,
    NoExecutorError,
    RunCancelledError,
    SourceReadError,
    TaskError,
    UpdaterError,
    as_updater_error,
)


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.run_id is None
        assert ctx.task is None
        assert ctx.metadata == {}
        assert ctx.to_dict() == {}

    def test_to_dict_skips_none_and_flattens_metadata(self):
        ctx = ErrorContext(run_id="r1", task="001.sql", metadata={"attempt": 1})
        assert ctx.to_dict() == {"run_id": "r1", "task": "001.sql", "attempt": 1}


class TestUpdaterError:
    """Test the base error class."""

    def test_default_category_is_internal(self):
        err = UpdaterError("boom")
        assert err.category == ErrorCategory.INTERNAL
        assert err.message == "boom"
        assert str(err) == "boom"

    def test_never_retryable(self):
        assert UpdaterError("x").retryable is False
        assert ExecutionError("a.sql").retryable is False

    def test_cause_is_chained(self):
        cause = ValueError("bad")
        err = UpdaterError("wrapped", cause=cause)
        assert err.cause is cause
        assert err.__cause__ is cause

    def test_with_context_sets_known_fields_and_metadata(self):
        err = UpdaterError("x").with_context(run_id="abc", table="tasks")
        assert err.context.run_id == "abc"
        assert err.context.metadata == {"table": "tasks"}

    def test_with_context_returns_self(self):
        err = UpdaterError("x")
        assert err.with_context(executor="E") is err

    def test_to_dict(self):
        err = UpdaterError("x", cause=KeyError("k")).with_context(task="t")
        data = err.to_dict()
        assert data["error_type"] == "UpdaterError"
        assert data["message"] == "x"
        assert data["category"] == "INTERNAL"
        assert data["context"] == {"task": "t"}
        assert data["cause"] == "KeyError: 'k'"

    def test_repr(self):
        assert repr(ConfigurationError("no ledger")) == "ConfigurationError('no ledger', category=CONFIG)"


class TestConfigurationError:
    def test_key(self):
        err = ConfigurationError("Execution ledger is not set", key="ledger")
        assert err.key == "ledger"
        assert err.category == ErrorCategory.CONFIG


class TestIntegrityError:
    """Each violation kind renders its own message."""

    def test_duplicate_task_names(self):
        err = IntegrityError(IntegrityViolation.DUPLICATE_TASK_NAMES, names=["a", "b"])
        assert str(err) == "Task set contains duplicate names: a, b"
        assert err.names == ("a", "b")
        assert err.name is None

    def test_duplicate_record_names(self):
        err = IntegrityError(IntegrityViolation.DUPLICATE_RECORD_NAMES, names=["a"])
        assert str(err) == "Ledger contains duplicate names: a"

    def test_orphan_records(self):
        err = IntegrityError(IntegrityViolation.ORPHAN_RECORDS, names=["z.sql"])
        assert str(err) == "Ledger holds records for unknown tasks: z.sql"

    def test_fingerprint_mismatch(self):
        err = IntegrityError(
            IntegrityViolation.FINGERPRINT_MISMATCH,
            names=["a.sql"],
            expected="f1",
            actual="f2",
        )
        assert str(err) == "Task a.sql was executed with fingerprint f1 but is now f2"
        assert err.name == "a.sql"
        assert err.category == ErrorCategory.INTEGRITY

    def test_to_dict_includes_violation_details(self):
        err = IntegrityError(
            IntegrityViolation.FINGERPRINT_MISMATCH, names=["a"], expected="f1", actual="f2"
        )
        data = err.to_dict()
        assert data["kind"] == "FINGERPRINT_MISMATCH"
        assert data["names"] == ["a"]
        assert data["expected"] == "f1"
        assert data["actual"] == "f2"

    def test_custom_message(self):
        err = IntegrityError(IntegrityViolation.ORPHAN_RECORDS, names=["z"], message="custom")
        assert str(err) == "custom"


class TestTaskErrors:
    """Per-task errors carry the task name in both attribute and context."""

    @pytest.mark.parametrize(
        ("error", "category", "message"),
        [
            (NoExecutorError("a.sql"), ErrorCategory.DISPATCH, "No executor found for task a.sql"),
            (ExecutionError("a.sql"), ErrorCategory.EXECUTION, "Task a.sql failed"),
            (
                SourceReadError("a.sql"),
                ErrorCategory.SOURCE,
                "Failed to read content of task a.sql",
            ),
            (
                LedgerWriteError("a.sql"),
                ErrorCategory.LEDGER,
                "Task a.sql ran but could not be recorded in the ledger",
            ),
        ],
    )
    def test_named_errors(self, error, category, message):
        assert isinstance(error, TaskError)
        assert error.task_name == "a.sql"
        assert error.context.task == "a.sql"
        assert error.category == category
        assert error.message == message

    def test_source_read_error_without_task(self):
        err = SourceReadError(None)
        assert err.task_name is None
        assert err.context.task is None
        assert err.message == "Failed to read task source"

    def test_ledger_read_error(self):
        err = LedgerReadError(cause=OSError("disk"))
        assert err.category == ErrorCategory.LEDGER
        assert err.task_name is None
        assert isinstance(err.__cause__, OSError)

    def test_run_cancelled(self):
        err = RunCancelledError("c.sql", executed=["a.sql", "b.sql"], reason="deadline exceeded")
        assert err.executed == ("a.sql", "b.sql")
        assert err.message == "Run deadline exceeded before task c.sql"
        assert err.category == ErrorCategory.CANCELLED


class TestAsUpdaterError:
    def test_typed_error_unchanged(self):
        err = NoExecutorError("a")
        assert as_updater_error(err) is err

    def test_foreign_exception_wrapped_as_internal(self):
        cause = RuntimeError("x")
        err = as_updater_error(cause)
        assert err.category == ErrorCategory.INTERNAL
        assert err.message == "Unexpected RuntimeError: x"
        assert err.__cause__ is cause
