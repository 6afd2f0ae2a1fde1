"""Click CLI for taskgate — exercise and inspect the throttled dispatcher."""

from __future__ import annotations

import asyncio
import logging
import sys
import time

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from taskgate.config.hierarchy import load_config_hierarchy
from taskgate.config.schema import DispatcherConfig

console = Console()
error_console = Console(stderr=True)


def _resolve_log_level(verbosity: int, configured: str | None = None) -> int:
    """Pick the log level: -v flags win, then the configured level, then WARNING."""
    if verbosity == 1:
        return logging.INFO
    if verbosity >= 2:
        return logging.DEBUG
    return logging.getLevelNamesMapping().get(str(configured).upper(), logging.WARNING)


def _setup_logging(verbosity: int, configured: str | None = None) -> None:
    """Configure logging based on verbosity level and the configured log_level."""
    logging.basicConfig(
        level=_resolve_log_level(verbosity, configured),
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


@click.group()
@click.version_option(package_name="taskgate")
def cli() -> None:
    """taskgate — throttled async task dispatcher."""


@cli.command()
@click.option("-n", "--tasks", type=int, default=20, show_default=True, help="Tasks to submit.")
@click.option(
    "--duration", type=float, default=0.05, show_default=True, help="Seconds each task runs."
)
@click.option(
    "--fail-every", type=int, default=0, help="Make every k-th task raise (0 = never)."
)
@click.option("--max-concurrent", type=int, default=None, help="Override max in-flight tasks.")
@click.option("--rps", type=int, default=None, help="Override starts per window.")
@click.option("--window", type=float, default=None, help="Override window length (seconds).")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def simulate(
    tasks: int,
    duration: float,
    fail_every: int,
    max_concurrent: int | None,
    rps: int | None,
    window: float | None,
    verbose: int,
) -> None:
    """Run synthetic tasks through the dispatcher and report throttling."""
    config = load_config_hierarchy(
        max_concurrent=max_concurrent,
        requests_per_second=rps,
        window_seconds=window,
    )
    _setup_logging(verbose, config.get("log_level"))

    try:
        settings = DispatcherConfig(**config)
    except ValidationError as e:
        error_console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)

    try:
        summary = asyncio.run(_simulate(settings, tasks, duration, fail_every))
    except Exception as e:
        error_console.print(f"[red]Error during simulation:[/red] {e}")
        sys.exit(1)

    table = Table(title="Simulation Summary", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    for name, value in summary.items():
        table.add_row(name, value)
    console.print(table)


async def _simulate(
    settings: DispatcherConfig,
    tasks: int,
    duration: float,
    fail_every: int,
) -> dict[str, str]:
    queue = settings.build_queue()
    starts: list[float] = []
    running = 0
    peak = 0

    async def work(index: int) -> int:
        nonlocal running, peak
        starts.append(time.monotonic())
        running += 1
        peak = max(peak, running)
        try:
            await asyncio.sleep(duration)
            if fail_every and (index + 1) % fail_every == 0:
                raise RuntimeError(f"synthetic failure in task {index}")
            return index
        finally:
            running -= 1

    began = time.monotonic()
    outcomes = await queue.map(work, range(tasks))
    elapsed = time.monotonic() - began

    failed = sum(1 for o in outcomes if isinstance(o, BaseException))
    return {
        "Max concurrent": str(settings.max_concurrent),
        "Starts per window": f"{settings.requests_per_second} / {settings.window_seconds:g}s",
        "Submitted": str(tasks),
        "Succeeded": str(tasks - failed),
        "Failed": str(failed),
        "Peak concurrency": str(peak),
        "Max starts in a window": str(_max_in_window(starts, settings.window_seconds)),
        "Rate-limit wait (s)": f"{queue.stats.rate_wait_seconds:.2f}",
        "Elapsed (s)": f"{elapsed:.2f}",
    }


def _max_in_window(timestamps: list[float], window: float) -> int:
    """Largest number of timestamps falling in any half-open window of ``window`` seconds."""
    ordered = sorted(timestamps)
    best = 0
    lo = 0
    for hi, ts in enumerate(ordered):
        while ordered[lo] <= ts - window:
            lo += 1
        best = max(best, hi - lo + 1)
    return best


@cli.command("config")
def show_config() -> None:
    """Show the resolved configuration."""
    config = load_config_hierarchy()

    table = Table(title="Resolved Configuration", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    for key in sorted(config):
        table.add_row(key, str(config[key]))

    console.print(table)


@cli.command("validate-config")
@click.argument("config_yaml", type=click.Path(exists=True))
def validate_config(config_yaml: str) -> None:
    """Validate a taskgate YAML config file."""
    from taskgate.config.loader import load_config_yaml

    try:
        config = load_config_yaml(config_yaml)
        console.print(
            f"[green]Valid config:[/green] max_concurrent={config.max_concurrent}, "
            f"requests_per_second={config.requests_per_second}"
        )
    except Exception as e:
        error_console.print(f"[red]Invalid config:[/red] {e}")
        sys.exit(1)


def main() -> None:
    """Entry point for the CLI."""
    cli()
