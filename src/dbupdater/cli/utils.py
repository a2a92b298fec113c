"""
CLI utility helpers - settings resolution and output formatting.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dbupdater.core.errors import UpdaterError
from dbupdater.core.result import Err, Result
from dbupdater.core.settings import UpdaterSettings

console = Console()
err_console = Console(stderr=True, soft_wrap=True)


def load_settings(
    *,
    tasks_dir: Path | None = None,
    database_url: str | None = None,
    table: str | None = None,
    log_level: str | None = None,
) -> UpdaterSettings:
    """Merge command-line overrides over ``DBUPDATER_*`` settings."""
    overrides: dict[str, Any] = {
        "tasks_dir": tasks_dir,
        "database_url": database_url,
        "ledger_table": table,
        "log_level": log_level,
    }
    try:
        return UpdaterSettings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as exc:
        err_console.print(f"[bold red]Invalid configuration[/bold red]: {exc}")
        raise typer.Exit(code=2) from exc


def output_error(error: Exception) -> NoReturn:
    """Print an error and its cause chain, then exit with code 1."""
    if isinstance(error, UpdaterError):
        err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}")
    else:
        err_console.print(f"[bold red]Error[/bold red]: {escape(str(error))}")

    cause = error.__cause__
    while cause is not None:
        err_console.print(f"  caused by {type(cause).__name__}: {escape(str(cause))}")
        cause = cause.__cause__
    raise typer.Exit(code=1)


def output_result(
    result: Result[Any],
    *,
    as_json: bool = False,
    title: str = "",
    rows: list[tuple[str, ...]] | None = None,
    columns: tuple[str, ...] = (),
) -> None:
    """Render a ``Result`` to the terminal."""
    if isinstance(result, Err):
        if as_json:
            console.print_json(json.dumps(result.to_dict(), default=str))
            raise typer.Exit(code=1)
        output_error(result.error)

    if as_json:
        console.print_json(json.dumps(result.to_dict(), default=str))
        return

    table = Table(title=title, show_header=True)
    for column in columns:
        table.add_column(column)
    for row in rows or []:
        table.add_row(*row)
    console.print(table)
