"""
Settings for dbupdater applications.

The engine itself takes no configuration; these settings wire the bundled
backends for the CLI and for :func:`dbupdater.wiring.build_reconciler`.

All fields can be set via ``DBUPDATER_*`` environment variables (e.g.
``DBUPDATER_DATABASE_URL=postgresql://localhost/app``) or a ``.env`` file.

Examples:
    >>> from dbupdater.core.settings import UpdaterSettings
    >>> settings = UpdaterSettings(database_url="sqlite:///app.db")
    >>> settings.ledger_table
    'tasks'

Tags:
    settings, configuration, pydantic, environment, dbupdater
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class UpdaterSettings(BaseSettings):
    """dbupdater configuration.

    Fields
    ──────
    tasks_dir         : Directory holding the task files
    database_url      : Ledger/executor database (postgresql:// or sqlite:///)
    ledger_table      : Name of the ledger table
    read_concurrency  : Max concurrent file reads while fingerprinting
    log_level         : Structlog log level
    json_logs         : Force JSON (True) or console (False) logs; auto if unset
    """

    model_config = SettingsConfigDict(
        env_prefix="DBUPDATER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Task source ──────────────────────────────────────────────
    tasks_dir: Path = Field(default=Path("tasks"))
    read_concurrency: int = Field(default=5, ge=1)

    # ── Ledger / executors ───────────────────────────────────────
    database_url: str = Field(default="", description="postgresql:// or sqlite:/// URL")
    ledger_table: str = Field(default="tasks", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


__all__ = ["UpdaterSettings"]
