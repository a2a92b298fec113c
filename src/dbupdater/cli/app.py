"""
Root Typer application for the dbupdater CLI.

Commands
--------
run      Execute outstanding tasks
status   Show applied and pending tasks without executing anything
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from typer import Typer

from dbupdater.cli.utils import load_settings, output_result
from dbupdater.core.errors import UpdaterError
from dbupdater.core.logging import configure_logging
from dbupdater.core.result import Err, Ok
from dbupdater.wiring import build_reconciler

app = Typer(
    name="dbupdater",
    help="dbupdater - run one-time setup tasks exactly once, in order.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from dbupdater import __version__

        typer.echo(f"dbupdater {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """dbupdater CLI - reconcile task files against the execution ledger."""


TasksDirOption = typer.Option(None, "--tasks-dir", "-t", help="Tasks directory")
DatabaseOption = typer.Option(None, "--database-url", "-d", help="postgresql:// or sqlite:/// URL")
TableOption = typer.Option(None, "--table", help="Ledger table name")
LogLevelOption = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR")
JsonOption = typer.Option(False, "--json", help="JSON output")


@app.command()
def run(
    tasks_dir: Path | None = TasksDirOption,
    database_url: str | None = DatabaseOption,
    table: str | None = TableOption,
    log_level: str | None = LogLevelOption,
    json_out: bool = JsonOption,
) -> None:
    """Execute every task not yet recorded in the ledger."""
    settings = load_settings(
        tasks_dir=tasks_dir, database_url=database_url, table=table, log_level=log_level
    )
    configure_logging(level=settings.log_level, json_format=settings.json_logs)

    try:
        reconciler = build_reconciler(settings)
    except UpdaterError as exc:
        output_result(Err(exc), as_json=json_out)
        return
    result = asyncio.run(reconciler.run())

    rows: list[tuple[str, ...]] = []
    if isinstance(result, Ok):
        rows = [(name, "executed") for name in result.value.executed]
        rows += [(name, "skipped") for name in result.value.skipped]
    output_result(result, as_json=json_out, title="Run", rows=rows, columns=("task", "outcome"))


@app.command()
def status(
    tasks_dir: Path | None = TasksDirOption,
    database_url: str | None = DatabaseOption,
    table: str | None = TableOption,
    log_level: str | None = LogLevelOption,
    json_out: bool = JsonOption,
) -> None:
    """Show which tasks are applied and which are pending."""
    settings = load_settings(
        tasks_dir=tasks_dir, database_url=database_url, table=table, log_level=log_level
    )
    configure_logging(level=settings.log_level, json_format=settings.json_logs)

    try:
        reconciler = build_reconciler(settings)
    except UpdaterError as exc:
        output_result(Err(exc), as_json=json_out)
        return
    result = asyncio.run(reconciler.plan())

    rows: list[tuple[str, ...]] = []
    if isinstance(result, Ok):
        rows = [(r.name, "applied", r.executed_at.isoformat()) for r in result.value.applied]
        rows += [(t.name, "pending", "") for t in result.value.pending]
    output_result(result, as_json=json_out, title="Status", rows=rows, columns=("task", "state", "executed"))


if __name__ == "__main__":
    app()
