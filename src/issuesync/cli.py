"""
Command-line interface for issuesync.

This module provides the Typer-based CLI for mirroring GitHub issues
into a directory of Markdown files.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .api_client import ApiClient
from .exceptions import IssueSyncError, TransportError
from .models import DEFAULT_BASE_URL, ClientConfig, SyncResult
from .repository import discover_repo
from .sync import IssueSync

# Create Typer app
app = typer.Typer(
    name="issuesync",
    help="Mirror GitHub issues and pull requests into Markdown files",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()
error_console = Console(stderr=True)


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def setup_logging(level: LogLevel, verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    log_level = getattr(logging, level.value.upper())

    if verbose:
        log_level = min(log_level, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"issuesync version {__version__}")
        raise typer.Exit


def report_error(error: IssueSyncError) -> None:
    """Print an error, and the response body for API failures, to stderr."""
    error_console.print(f"[red]Aborted:[/red] {error.message}")
    if isinstance(error, TransportError) and error.body:
        error_console.print(error.body, markup=False, highlight=False)
    if error.hint:
        error_console.print(f"[dim]Hint: {error.hint}[/dim]")


@app.command()
def sync(
    repo: Annotated[
        str | None,
        typer.Argument(
            help="Repository in owner/repo format (default: from .git/config)",
            show_default=False,
        ),
    ] = None,
    dest: Annotated[
        Path,
        typer.Option(
            "-d",
            "--dest",
            help="Directory receiving the issue files",
        ),
    ] = Path("issues"),
    token: Annotated[
        str | None,
        typer.Option(
            "--token",
            help="GitHub API token (or set GITHUB_TOKEN env var)",
            envvar="GITHUB_TOKEN",
            show_default=False,
        ),
    ] = None,
    base_url: Annotated[
        str,
        typer.Option(
            "--base-url",
            help="GitHub API endpoint",
        ),
    ] = DEFAULT_BASE_URL,
    timeout: Annotated[
        int,
        typer.Option(
            "--timeout",
            help="API timeout in seconds",
            min=10,
            max=300,
        ),
    ] = 60,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be written without writing it",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "-v",
            "--verbose",
            help="Log each request and the remaining rate limit",
        ),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Log HTTP request and response headers",
        ),
    ] = False,
    log_level: Annotated[
        LogLevel,
        typer.Option(
            "--log-level",
            help="Set log level",
        ),
    ] = LogLevel.WARNING,
    _version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """
    Download issues and pull requests into a directory.

    Every issue is stored with its comments as "<number>.md"; open pull
    requests also get "<number>.patch". Only issues updated since the
    newest local file are fetched.

    If the rate limit runs out, wait for it to reset and run the command
    again; it continues where it left off.

    Examples:

        issuesync

        issuesync owner/repo -d issues

        issuesync owner/repo --dry-run -v
    """
    setup_logging(LogLevel.DEBUG if debug else log_level, verbose)

    try:
        if repo is None:
            repo = discover_repo()

        config = ClientConfig.from_env(
            os.environ,
            token=token,
            base_url=base_url,
            timeout=float(timeout),
            verbose=verbose,
            debug=debug,
        )

        if dry_run:
            console.print("[yellow]Dry run mode - no files will be written[/yellow]")
        console.print(f"Syncing [bold]{repo}[/bold] -> [bold]{dest}[/bold]")

        with ApiClient(config) as client:
            result = IssueSync(client).run(repo, dest, dry_run=dry_run)

        _display_result(result)

    except IssueSyncError as e:
        report_error(e)
        raise typer.Exit(1) from None
    except KeyboardInterrupt:
        error_console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(130) from None


@app.command()
def check(
    token: Annotated[
        str | None,
        typer.Option(
            "--token",
            help="GitHub API token (or set GITHUB_TOKEN env var)",
            envvar="GITHUB_TOKEN",
            show_default=False,
        ),
    ] = None,
    base_url: Annotated[
        str,
        typer.Option("--base-url", help="GitHub API endpoint"),
    ] = DEFAULT_BASE_URL,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show detailed status"),
    ] = False,
) -> None:
    """
    Check that the GitHub API is reachable and show the rate limit.
    """
    setup_logging(LogLevel.WARNING, verbose)

    config = ClientConfig.from_env(os.environ, token=token, base_url=base_url, verbose=verbose)

    with console.status("Checking GitHub API connection..."):
        try:
            with ApiClient(config) as client:
                core = client.rate_limit()
        except IssueSyncError as e:
            error_console.print(f"[red]✗[/red] {e.message}")
            if e.hint:
                error_console.print(f"  [dim]Hint: {e.hint}[/dim]")
            raise typer.Exit(1) from None

    auth = "authenticated" if config.token else "unauthenticated"
    console.print(f"[green]✓[/green] Connected to {config.base_url} ({auth})")
    remaining = f"{core.get('remaining')}/{core.get('limit')}"
    console.print(f"[green]✓[/green] Rate limit: {remaining} requests remaining")


def _display_result(result: SyncResult) -> None:
    """Display sync result as a formatted table."""
    action_word = "Would sync" if result.dry_run else "Synced"

    summary = Table.grid(padding=(0, 2))
    summary.add_column(style="bold")
    summary.add_column()

    summary.add_row("Since:", result.since.isoformat() if result.since else "-")
    summary.add_row("Changed issues:", str(result.total_issues))
    summary.add_row("Documents written:", f"[green]{result.documents_written}[/green]")
    summary.add_row("Documents up to date:", str(result.documents_skipped))
    summary.add_row("Patches written:", f"[green]{result.patches_written}[/green]")
    summary.add_row("Patches up to date:", str(result.patches_skipped))

    panel = Panel(
        summary,
        title=f"{action_word} {result.repo}",
        border_style="green",
    )
    console.print(panel)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
