"""Name-pattern matching shared by the bundled executors."""

from __future__ import annotations

import re
from typing import Any

from dbupdater.core.logging import get_logger


class PatternExecutor:
    """Claims task names matching a regular expression.

    ``claims`` is a pure predicate (``re.search`` on the name); the
    subclass supplies ``run``.
    """

    default_pattern: str = r"(?!)"

    def __init__(self, pattern: str | re.Pattern[str] | None = None, *, logger: Any = None) -> None:
        self.pattern = re.compile(pattern if pattern is not None else self.default_pattern)
        self._logger = logger or get_logger(type(self).__module__)

    def claims(self, name: str) -> bool:
        match = self.pattern.search(name) is not None
        if match:
            self._logger.debug("executor.claimed", task=name, executor=type(self).__name__)
        return match

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.pattern.pattern!r})"


def suffix_pattern(suffix: str) -> str:
    """Regex matching names that end with ``suffix``."""
    return re.escape(suffix) + "$"


__all__ = ["PatternExecutor", "suffix_pattern"]
