#!/usr/bin/env python3
"""Appforge CLI - a ready-to-run Rails application in one command."""
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from appforge import __version__
from appforge.cli_support import (
    handle_cli_error,
    handle_usage_error,
    is_mock,
    print_summary,
    setup_file_logging,
    split_gems,
)
from appforge.core.errors import AppforgeError
from appforge.models.options import Database, Options

app = typer.Typer(
    name="appforge",
    help="""Appforge - a ready-to-run Rails application in one command

Generates the app, lays the Appforge templates over it, installs gems,
sets up the database and optionally deploys to Heroku.

Quick start:
  appforge myapp                          # SQLite, no deploy
  appforge myapp -d postgresql -g devise  # Postgres plus an extra gem
  appforge myapp --heroku myapp-staging   # Also deploy to Heroku
""",
    add_completion=False,
)

console = Console()


def _version_callback(value: bool):
    if value:
        console.print(f"Appforge v{__version__}")
        raise typer.Exit()


@app.command()
def new(
    target: Path = typer.Argument(..., help="Directory for the new application"),
    database: Database = typer.Option(
        Database.SQLITE3, "--database", "-d", case_sensitive=False, help="Database backend"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Generate over an existing directory"),
    gems: Optional[List[str]] = typer.Option(
        None, "--gems", "-g", help="Extra gems, comma separated (repeatable)"
    ),
    heroku: Optional[str] = typer.Option(None, "--heroku", help="Deploy to this Heroku app"),
    strict: bool = typer.Option(
        False, "--strict", help="Exit non-zero when install, database or deploy steps fail"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log commands without running them"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Write a log to this file"),
    version: Optional[bool] = typer.Option(
        None, "--version", "-v", callback=_version_callback, is_eager=True,
        help="Show version and exit",
    ),
):
    """Create a new Appforge application in TARGET."""
    from appforge.scaffold.core import Provisioner

    try:
        options = Options(
            target=target,
            database=database,
            force=force,
            extra_dependencies=split_gems(gems),
            deploy_target=heroku,
            strict=strict,
            dry_run=dry_run or is_mock(),
        )
    except ValidationError as e:
        handle_usage_error(e, console)

    setup_file_logging(log_file=log_file, verbose=verbose)

    try:
        run = Provisioner(options).run()
    except (AppforgeError, OSError) as e:
        handle_cli_error(e, console, verbose=verbose)

    print_summary(console, run)

    if options.strict and run.soft_failures:
        raise typer.Exit(1)


def main():
    app()


if __name__ == "__main__":
    main()
