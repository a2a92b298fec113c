"""Reconciliation engine and executor dispatch."""

from dbupdater.engine.reconciler import Reconciler, reconcile, utc_now, validate
from dbupdater.engine.registry import ExecutorRegistry

__all__ = ["Reconciler", "reconcile", "validate", "utc_now", "ExecutorRegistry"]
