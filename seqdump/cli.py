"""seqdump CLI — dump a sequential ID range into categorized files.

Usage:
    seqdump                                 # Resume from the checkpoint, 32 threads
    seqdump -t 64 -o dumps                  # 64 threads, output under ./dumps
    seqdump -s 16816356000000 -e 16816357000000
    seqdump --url-template 'http://localhost:8080/e/{id}'

Every option can also be given through a ``SEQDUMP_<OPTION>`` environment
variable, e.g. ``SEQDUMP_THREADS=128``.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import click

from seqdump import __version__
from seqdump.common.exceptions import SetupError
from seqdump.data_types import (
    DEFAULT_NUM_WORKERS,
    DEFAULT_START_ID,
    DEFAULT_TIMEOUT,
    DEFAULT_URL_TEMPLATE,
    MAX_ID,
    MAX_NUM_WORKERS,
    Category,
    DumpSettings,
    RunStats,
)
from seqdump.driver.signals import (
    install_signal_handlers,
    restore_signal_handlers,
)
from seqdump.driver.sync_driver import SyncDriver


def configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _echo_summary(stats: RunStats) -> None:
    click.echo(f"IDs:       {stats.start_id} .. {stats.next_id}")
    click.echo(f"Fetched:   {stats.fetched}")
    for category in Category:
        click.echo(f"  {category.value}:    {stats.saved(category)}")
    click.echo(f"Not found: {stats.not_found}")
    if stats.unexpected:
        click.echo(f"Unexpected status: {stats.unexpected}")
    if stats.write_errors:
        click.echo(f"Write errors:      {stats.write_errors}")
    if stats.failed_workers:
        click.echo(f"Workers stopped by transport errors: {stats.failed_workers}")


@click.command(
    context_settings={
        "help_option_names": ["-h", "--help"],
        "auto_envvar_prefix": "SEQDUMP",
    }
)
@click.version_option(__version__, "-V", "--version", prog_name="seqdump")
@click.option(
    "-t",
    "--threads",
    type=click.IntRange(1, MAX_NUM_WORKERS),
    default=DEFAULT_NUM_WORKERS,
    show_default=True,
    help="Number of worker threads.",
)
@click.option(
    "-o",
    "--out-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Output directory.",
)
@click.option(
    "-s",
    "--start-id",
    type=click.IntRange(0, MAX_ID),
    default=None,
    help=(
        "First ID to fetch. Overrides the checkpoint "
        f"(default: checkpoint, else {DEFAULT_START_ID})."
    ),
)
@click.option(
    "-e",
    "--end-id",
    type=click.IntRange(0, MAX_ID),
    default=MAX_ID,
    help="Stop before this ID (default: non-stop).",
)
@click.option(
    "--url-template",
    default=DEFAULT_URL_TEMPLATE,
    show_default=True,
    help="URL to fetch, with an {id} placeholder.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0.0, min_open=True),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Per-request timeout in seconds.",
)
@click.option("--user-agent", default=None, help="User-Agent header.")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def cli(
    threads: int,
    out_dir: Path,
    start_id: int | None,
    end_id: int,
    url_template: str,
    timeout: float,
    user_agent: str | None,
    verbose: bool,
) -> None:
    """Dump a sequential ID range into day1/, day2/ and misc/.

    Interrupt, terminate or hangup stops the workers after their in-flight
    requests and saves the next ID to misc/last_tid, so the next run
    resumes where this one left off.
    """
    configure_logging(verbose)

    settings = DumpSettings(
        out_dir=out_dir,
        num_workers=threads,
        start_id=start_id,
        end_id=end_id,
        url_template=url_template,
        timeout=timeout,
        user_agent=user_agent,
    )

    stop_event = threading.Event()
    saved_handlers = install_signal_handlers(stop_event)
    try:
        driver = SyncDriver(settings, stop_event=stop_event)
        stats = driver.run()
    except SetupError as e:
        raise click.ClickException(str(e)) from e
    finally:
        restore_signal_handlers(saved_handlers)

    _echo_summary(stats)


def main() -> None:
    """Entry point for the ``seqdump`` console script."""
    cli()
