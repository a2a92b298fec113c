"""Execution ledgers - durable record of which tasks already ran."""

from dbupdater.ledgers.memory import InMemoryLedger
from dbupdater.ledgers.postgres import PostgresLedger
from dbupdater.ledgers.sqlite import SqliteLedger

__all__ = ["InMemoryLedger", "PostgresLedger", "SqliteLedger"]
