"""Test utilities for driver tests."""

import threading
from collections.abc import Callable
from pathlib import Path

from seqdump.data_types import FetchResult


def collect_results() -> tuple[Callable[[FetchResult], None], list[FetchResult]]:
    """Create a callback that collects fetch results in a list.

    Pass the callback as the driver's on_result parameter and inspect the
    list after run() returns. The callback is safe to call from several
    worker threads at once.

    Returns:
        A tuple of (callback_function, results_list).

    Example:
        callback, results = collect_results()
        driver = SyncDriver(settings, on_result=callback)
        driver.run()
        assert len(results) > 0
    """
    results: list[FetchResult] = []
    lock = threading.Lock()

    def callback(result: FetchResult) -> None:
        with lock:
            results.append(result)

    return callback, results


def read_checkpoint(out_dir: Path) -> int:
    """Read the checkpoint a run left under ``out_dir``."""
    return int((out_dir / "misc" / "last_tid").read_text().strip())


def saved_files(out_dir: Path, category: str) -> list[str]:
    """List the file names written under one category directory."""
    directory = out_dir / category
    return sorted(
        p.name for p in directory.iterdir() if p.suffix == ".html"
    )
