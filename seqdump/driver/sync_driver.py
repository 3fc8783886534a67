"""Threaded driver that walks a sequential ID range.

The driver owns the shared WorkCursor, starts one thread per worker, waits
for all of them, and saves the checkpoint.

- Each worker owns one SyncRequestManager for its whole lifetime and loops:
  take the next ID from the cursor, fetch it, hand 200 bodies to the
  CategorySink, ignore 404s, log anything else.
- A worker stops when the stop event is set, when the ID it draws reaches
  the end bound, or when a fetch fails at the transport level. A transport
  failure ends only the worker that hit it.
- The stop event is checked once per iteration, never mid-fetch.
- The checkpoint is read once before the workers start and written once
  after they have all finished.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from seqdump.common.exceptions import SetupError, TransportError
from seqdump.common.request_manager import (
    SyncRequestManager,
    validate_url_template,
)
from seqdump.data_types import (
    DEFAULT_START_ID,
    MAX_ID,
    MAX_NUM_WORKERS,
    DumpSettings,
    FetchResult,
    RunStats,
    WorkerStats,
)
from seqdump.driver.checkpoint import (
    CheckpointStore,
    default_checkpoint_path,
)
from seqdump.driver.cursor import WorkCursor
from seqdump.driver.sink import CategorySink

logger = logging.getLogger(__name__)


class SyncDriver:
    """Threaded driver for dumping a sequential ID range.

    Example usage:
        stop_event = threading.Event()
        install_signal_handlers(stop_event)

        driver = SyncDriver(
            DumpSettings(out_dir=Path("out"), num_workers=8),
            stop_event=stop_event,
        )
        stats = driver.run()
    """

    def __init__(
        self,
        settings: DumpSettings | None = None,
        request_manager_factory: Callable[[], SyncRequestManager]
        | None = None,
        on_result: Callable[[FetchResult], None] | None = None,
        on_run_start: Callable[[int], None] | None = None,
        on_run_complete: Callable[[RunStats], None] | None = None,
        stop_event: threading.Event | None = None,
    ) -> None:
        """Initialize the driver.

        Args:
            settings: Run configuration. Defaults to DumpSettings().
            request_manager_factory: Optional callable returning a fresh
                SyncRequestManager. Called once per worker. If not provided,
                managers are built from the settings.
            on_result: Optional callback invoked from the worker thread after
                each completed fetch has been handled. Receives the
                FetchResult.
            on_run_start: Optional callback invoked before the workers start.
                Receives the first ID that will be dispensed.
            on_run_complete: Optional callback invoked after the checkpoint
                has been saved. Receives the RunStats.
            stop_event: Optional threading.Event for graceful shutdown. When
                set, each worker stops after finishing its in-flight request.

        Raises:
            SetupError: If the settings are invalid.
        """
        self.settings = settings or DumpSettings()
        self._validate_settings()

        self.request_manager_factory = (
            request_manager_factory or self._default_request_manager
        )
        self.on_result = on_result
        self.on_run_start = on_run_start
        self.on_run_complete = on_run_complete
        self.stop_event = stop_event or threading.Event()

        self.cursor = WorkCursor(DEFAULT_START_ID)
        self.sink = CategorySink(self.settings.out_dir)
        self.checkpoint = CheckpointStore(
            default_checkpoint_path(self.settings.out_dir)
        )

    @property
    def end_id(self) -> int:
        return self.settings.end_id

    def _validate_settings(self) -> None:
        settings = self.settings
        if not 1 <= settings.num_workers <= MAX_NUM_WORKERS:
            raise SetupError(
                f"Number of workers must be between 1 and {MAX_NUM_WORKERS}, "
                f"got {settings.num_workers}"
            )
        if settings.start_id is not None and not (
            0 <= settings.start_id <= MAX_ID
        ):
            raise SetupError(f"Start ID {settings.start_id} is out of range")
        if not 0 <= settings.end_id <= MAX_ID:
            raise SetupError(f"End ID {settings.end_id} is out of range")
        validate_url_template(settings.url_template)

    def _default_request_manager(self) -> SyncRequestManager:
        return SyncRequestManager(
            url_template=self.settings.url_template,
            timeout=self.settings.timeout,
            user_agent=self.settings.user_agent,
        )

    def _resolve_start_id(self) -> int:
        """Pick the first ID: explicit start, then checkpoint, then default."""
        if self.settings.start_id is not None:
            return self.settings.start_id

        loaded = self.checkpoint.load()
        if loaded is not None:
            logger.info(f"Resuming from last ID {loaded}")
            return loaded
        return DEFAULT_START_ID

    def _next_id(self, start_id: int) -> int:
        """Next ID to assign: the cursor clamped to the end bound, never below start."""
        return max(start_id, min(self.cursor.value, self.end_id))

    def _create_request_managers(self) -> list[SyncRequestManager]:
        managers: list[SyncRequestManager] = []
        try:
            for _ in range(self.settings.num_workers):
                managers.append(self.request_manager_factory())
        except (OSError, ValueError) as e:
            for manager in managers:
                manager.close()
            raise SetupError(f"Failed to initialize HTTP client: {e}") from e
        return managers

    def run(self) -> RunStats:
        """Run all workers until the range is exhausted or a stop is requested.

        Returns:
            RunStats for the finished run.

        Raises:
            SetupError: If output directories, HTTP clients or worker threads
                cannot be created.
        """
        self.sink.prepare()

        start_id = self._resolve_start_id()
        self.cursor.reset(start_id)

        if self.on_run_start:
            self.on_run_start(start_id)

        managers = self._create_request_managers()
        worker_stats = [WorkerStats() for _ in managers]
        threads: list[threading.Thread] = []

        logger.info(
            f"Starting {len(managers)} workers at ID {start_id}",
            extra={"start_id": start_id, "end_id": self.end_id},
        )

        try:
            for index, (manager, stats) in enumerate(
                zip(managers, worker_stats)
            ):
                thread = threading.Thread(
                    target=self._worker_loop,
                    args=(manager, stats),
                    name=f"seqdump-worker-{index}",
                )
                try:
                    thread.start()
                except RuntimeError as e:
                    self.stop_event.set()
                    for unused in managers[index:]:
                        unused.close()
                    raise SetupError(
                        f"Failed to create worker thread {index}: {e}"
                    ) from e
                threads.append(thread)
        finally:
            for thread in threads:
                thread.join()
            if threads:
                self.checkpoint.save(self._next_id(start_id))

        run_stats = RunStats(
            start_id=start_id,
            next_id=self._next_id(start_id),
            workers=worker_stats,
        )

        if self.on_run_complete:
            self.on_run_complete(run_stats)

        return run_stats

    def _worker_loop(
        self, request_manager: SyncRequestManager, stats: WorkerStats
    ) -> None:
        """Fetch IDs from the shared cursor until told to stop."""
        try:
            while not self.stop_event.is_set():
                item_id = self.cursor.next()
                if item_id >= self.end_id:
                    break

                try:
                    result = request_manager.fetch(item_id)
                except TransportError as e:
                    logger.error(
                        e.message,
                        extra={"item_id": e.item_id, "url": e.url},
                    )
                    stats.transport_error = e.message
                    break

                stats.fetched += 1
                self.handle_result(result, stats)

                if self.on_result:
                    self.on_result(result)
        finally:
            request_manager.close()

    def handle_result(self, result: FetchResult, stats: WorkerStats) -> None:
        """Persist, ignore or log one fetch result according to its status."""
        if result.ok:
            category = self.sink.persist(result.item_id, result.content)
            if category is None:
                stats.write_errors += 1
            else:
                stats.saved[category] += 1
        elif result.not_found:
            stats.not_found += 1
        else:
            stats.unexpected += 1
            logger.error(
                f"Unexpected HTTP response code {result.status_code} "
                f"for ID {result.item_id}",
                extra={"item_id": result.item_id, "url": result.url},
            )

