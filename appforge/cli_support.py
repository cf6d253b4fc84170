"""Shared utilities for the Appforge CLI."""
from __future__ import annotations

import os
from typing import Iterable, List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from appforge.models.run import Run


def is_mock() -> bool:
    """Return True when the CLI runs in mock mode."""
    return os.environ.get("APPFORGE_MOCK") == "1"


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up file logging for CLI commands.

    Args:
        log_file: Path to log file (optional)
        verbose: Enable verbose logging
    """
    from appforge.core.logger import set_verbose
    from appforge.core.logger import setup_file_logging as _setup_file_logging
    _setup_file_logging(log_file=log_file, verbose=verbose)
    set_verbose(verbose)


def split_gems(values: Optional[Iterable[str]]) -> List[str]:
    """Flatten repeated and comma separated --gems values, keeping order."""
    gems = []
    for value in values or []:
        gems.extend(part.strip() for part in value.split(",") if part.strip())
    return gems


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {e}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def handle_usage_error(e: ValidationError, console: Console) -> None:
    """Report invalid options the way Typer reports bad flags."""
    for error in e.errors():
        field = ".".join(str(part) for part in error["loc"]) or "options"
        console.print(f"[red]Invalid {field}:[/red] {error['msg']}")
    console.print("Try 'appforge --help' for help.")
    raise typer.Exit(2)


def print_summary(console: Console, run: Run) -> None:
    """Print the executed steps and what to do next."""
    table = Table(title="Provisioning steps")
    table.add_column("Step", style="cyan")
    table.add_column("Command")
    table.add_column("Status")

    for step, spec, result in run.executions:
        if result.ok:
            status = "[green]✓ ok[/green]"
        elif step in run.soft_steps:
            status = f"[yellow]⚠ exit {result.returncode}[/yellow]"
        else:
            status = f"[red]✗ exit {result.returncode}[/red]"
        table.add_row(step, spec.command_line, status)

    console.print(table)

    for step in run.soft_failures:
        print_warning(console, f"Step '{step}' failed; see the output above")

    print_success(console, f"Your app is ready in {run.target_path}")
    console.print("\n[cyan]Next steps:[/cyan]")
    console.print(f"  1. cd {run.target_path}")
    console.print("  2. rails server")
    if run.options.deploy_target:
        console.print(f"  3. heroku open --app {run.options.deploy_target}")


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting."""
    console.print(f"[green]{prefix}[/green] {message}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    """Print warning message with consistent formatting."""
    console.print(f"[yellow]{prefix}[/yellow] {message}")
