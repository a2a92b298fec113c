"""dbupdater command-line interface."""

from dbupdater.cli.app import app

__all__ = ["app"]
