"""Data types shared between the dump driver and its collaborators.

This module defines the ID bounds, the result of a single fetch, the
categories payloads are sorted into, and the settings for one run. These
types are designed to be:

1. Immutable - Dataclasses with frozen=True
2. Exhaustive - Category is an Enum so handlers can match every case
3. Plain - No behaviour beyond small derived properties
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# IDs are unsigned 64-bit integers.
MAX_ID = 2**64 - 1

# The ticket sale opened at 2023-04-16 16:00:00 GMT+7; IDs below this
# value were never issued.
DEFAULT_START_ID = 16816356000000

DEFAULT_NUM_WORKERS = 32
MAX_NUM_WORKERS = 1024
DEFAULT_URL_TEMPLATE = "https://eticket.kiostix.com/e/{id}"
DEFAULT_TIMEOUT = 30.0

CHECKPOINT_FILENAME = "last_tid"
OUTPUT_EXTENSION = ".html"


class Category(Enum):
    """Classification bucket for a fetched payload.

    The value is the name of the directory, under the output root, that
    payloads of this category are written to.
    """

    DAY1 = "day1"
    DAY2 = "day2"
    MISC = "misc"

    @property
    def marker(self) -> bytes | None:
        """The substring that selects this category, if any."""
        return _MARKERS.get(self)


_MARKERS: dict[Category, bytes] = {
    Category.DAY1: b"Day 1",
    Category.DAY2: b"Day 2",
}


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one completed HTTP exchange.

    Transport failures never produce a FetchResult; they are raised as
    TransportError by the request manager.

    Attributes:
        item_id: The ID that was fetched.
        status_code: Final HTTP status after redirects.
        content: Full response body.
        url: The URL that was requested.
    """

    item_id: int
    status_code: int
    content: bytes
    url: str

    @property
    def ok(self) -> bool:
        return self.status_code == 200

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


@dataclass(frozen=True)
class DumpSettings:
    """Configuration for a single dump run.

    Attributes:
        out_dir: Root under which the category directories live.
        num_workers: Number of worker threads.
        start_id: Explicit first ID. None means resume from the checkpoint,
            or DEFAULT_START_ID when there is no checkpoint.
        end_id: Exclusive upper bound on fetched IDs.
        url_template: URL with an ``{id}`` placeholder.
        timeout: Per-request timeout in seconds. None disables it.
        user_agent: Optional User-Agent header value.
    """

    out_dir: Path = field(default_factory=lambda: Path("."))
    num_workers: int = DEFAULT_NUM_WORKERS
    start_id: int | None = None
    end_id: int = MAX_ID
    url_template: str = DEFAULT_URL_TEMPLATE
    timeout: float | None = DEFAULT_TIMEOUT
    user_agent: str | None = None


@dataclass
class WorkerStats:
    """Counters kept by one worker over its lifetime."""

    fetched: int = 0
    not_found: int = 0
    unexpected: int = 0
    write_errors: int = 0
    saved: dict[Category, int] = field(
        default_factory=lambda: {category: 0 for category in Category}
    )
    transport_error: str | None = None

    @property
    def total_saved(self) -> int:
        return sum(self.saved.values())


@dataclass
class RunStats:
    """Summary of a finished run, merged from every worker's stats."""

    start_id: int
    next_id: int
    workers: list[WorkerStats] = field(default_factory=list)

    @property
    def fetched(self) -> int:
        return sum(w.fetched for w in self.workers)

    @property
    def not_found(self) -> int:
        return sum(w.not_found for w in self.workers)

    @property
    def unexpected(self) -> int:
        return sum(w.unexpected for w in self.workers)

    @property
    def write_errors(self) -> int:
        return sum(w.write_errors for w in self.workers)

    @property
    def failed_workers(self) -> int:
        return sum(1 for w in self.workers if w.transport_error is not None)

    def saved(self, category: Category) -> int:
        return sum(w.saved[category] for w in self.workers)
