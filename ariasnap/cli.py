"""CLI entry point for ARIA snapshot capture and validation."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ariasnap.models.config import DEFAULT_CONFIG_PATH, EnvironmentConfigError, SnapshotConfig
from ariasnap.models.snapshot_result import MODE_CAPTURE, BatchResult
from ariasnap.orchestrator import SnapshotOrchestrator
from ariasnap.url_utils import MalformedTargetError

console = Console()


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(path: str) -> SnapshotConfig:
    try:
        return SnapshotConfig.load_or_default(path)
    except EnvironmentConfigError as e:
        console.print(f"[red]Invalid environment: {e}[/red]")
        sys.exit(1)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Invalid config {path}: {e}[/red]")
        sys.exit(1)


def _run_or_exit(fn, *args, **kwargs) -> dict:
    try:
        return fn(*args, **kwargs)
    except (FileNotFoundError, MalformedTargetError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _print_summary(result: BatchResult, reports: dict[str, str]) -> None:
    table = Table(title="Snapshot Summary" if result.mode == MODE_CAPTURE else "Validation Summary")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    if result.mode == MODE_CAPTURE:
        table.add_row("Successful", f"[green]{len(result.captured)}[/green]")
        table.add_row("Failed", f"[red]{len(result.unsuccessful)}[/red]")
    else:
        table.add_row("Passed", f"[green]{len(result.passed)}[/green]")
        table.add_row("Failed", f"[red]{len(result.failed)}[/red]")
        table.add_row("Missing", f"[yellow]{len(result.missing)}[/yellow]")
        table.add_row("Errors", f"[red]{len(result.errors)}[/red]")
        table.add_row("Success Rate", f"{result.success_rate:.2f}%")
    table.add_row("Total", str(result.total_urls))
    table.add_row("Duration", f"{result.duration_seconds:.2f}s")
    table.add_row("Speed", f"{result.throughput:.2f}/sec")
    console.print(table)

    for fmt, path in reports.items():
        console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")


def _finish(run: dict) -> None:
    result: BatchResult = run["result"]
    _print_summary(result, run["reports"])
    if result.has_issues:
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Accessibility-tree snapshot capture and regression validation"""
    setup_logging(verbose)


@cli.command("create-all")
@click.option("--sequential", is_flag=True, help="Process URLs one at a time")
@click.option("--concurrency", "-j", type=click.IntRange(min=1), default=None,
              help="Override max_concurrent from the config")
@click.option("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config file path")
def create_all(sequential: bool, concurrency: int | None, config: str) -> None:
    """Create or update snapshots for every URL in the URL list."""
    cfg = _load_config(config)
    orchestrator = SnapshotOrchestrator(cfg)
    _finish(_run_or_exit(orchestrator.create_all, sequential=sequential, concurrency=concurrency))


@cli.command()
@click.argument("url")
@click.option("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config file path")
def create(url: str, config: str) -> None:
    """Create or update the snapshot for a single URL."""
    cfg = _load_config(config)
    orchestrator = SnapshotOrchestrator(cfg)
    _finish(_run_or_exit(orchestrator.create_one, url))


@cli.command()
@click.argument("pattern")
@click.option("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config file path")
def update(pattern: str, config: str) -> None:
    """Update snapshot(s) whose URL matches PATTERN (exact, substring, or regex)."""
    cfg = _load_config(config)
    orchestrator = SnapshotOrchestrator(cfg)
    run = _run_or_exit(orchestrator.update_matching, pattern)
    if not run["result"].total_urls:
        console.print(f"[yellow]No URLs found matching: {pattern}[/yellow]")
        sys.exit(1)
    _finish(run)


@cli.command()
@click.option("--concurrency", "-j", type=click.IntRange(min=1), default=None,
              help="Override max_concurrent from the config")
@click.option("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config file path")
def validate(concurrency: int | None, config: str) -> None:
    """Validate every URL against its stored snapshot."""
    cfg = _load_config(config)
    orchestrator = SnapshotOrchestrator(cfg)
    _finish(_run_or_exit(orchestrator.validate_all, concurrency=concurrency))


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config file path")
def report(config: str) -> None:
    """Rebuild the HTML view from the latest validation JSON report."""
    cfg = _load_config(config)
    orchestrator = SnapshotOrchestrator(cfg)
    try:
        path = orchestrator.render_latest_report()
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    console.print(f"[green]HTML report:[/green] [blue]{path}[/blue]")


@cli.command()
@click.option("--urls-file", "-u", default="public_urls.txt", help="URL list file")
@click.option("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config file path")
def init(urls_file: str, config: str) -> None:
    """Create a default configuration file."""
    config_path = Path(config)
    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    cfg = SnapshotConfig(urls_file=urls_file)
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nAdd one URL per line to the URL list, then run:")
    console.print("  [blue]ariasnap create-all[/blue]")
    console.print("  [blue]ariasnap validate[/blue]")


if __name__ == "__main__":
    cli()
