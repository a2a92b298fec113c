"""Executors - backends that claim tasks by name and run their content."""

from dbupdater.executors.base import PatternExecutor, suffix_pattern
from dbupdater.executors.callable import CallableExecutor
from dbupdater.executors.postgres import PostgresPythonExecutor, PostgresSqlExecutor
from dbupdater.executors.sqlite import SqliteSqlExecutor

__all__ = [
    "PatternExecutor",
    "suffix_pattern",
    "CallableExecutor",
    "PostgresSqlExecutor",
    "PostgresPythonExecutor",
    "SqliteSqlExecutor",
]
