"""Wiring of operating-system signals to a cooperative stop event.

Interrupt, terminate and hangup set the event; workers notice it at the
top of their next loop iteration. SIGPIPE is ignored so a closed output
pipe does not kill the process.
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable
from types import FrameType
from typing import Any

logger = logging.getLogger(__name__)

STOP_SIGNAL_NAMES = ("SIGINT", "SIGTERM", "SIGHUP")

# Previous handlers, keyed by signal number.
SavedHandlers = dict[int, Any]


def _available(names: tuple[str, ...]) -> list[signal.Signals]:
    return [getattr(signal, name) for name in names if hasattr(signal, name)]


def make_stop_handler(
    stop_event: threading.Event,
) -> Callable[[int, FrameType | None], None]:
    """Build a signal handler that sets ``stop_event``."""

    def handler(signum: int, frame: FrameType | None) -> None:
        if not stop_event.is_set():
            logger.info(
                f"Received {signal.Signals(signum).name}, "
                "stopping after in-flight requests"
            )
        stop_event.set()

    return handler


def install_signal_handlers(stop_event: threading.Event) -> SavedHandlers:
    """Install the stop handlers and ignore SIGPIPE.

    Must be called from the main thread.

    Args:
        stop_event: Event to set when a stop signal arrives.

    Returns:
        The handlers that were replaced, for restore_signal_handlers().
    """
    handler = make_stop_handler(stop_event)
    saved: SavedHandlers = {}
    for sig in _available(STOP_SIGNAL_NAMES):
        saved[sig] = signal.signal(sig, handler)
    for sig in _available(("SIGPIPE",)):
        saved[sig] = signal.signal(sig, signal.SIG_IGN)
    return saved


def restore_signal_handlers(saved: SavedHandlers) -> None:
    """Put back handlers returned by install_signal_handlers()."""
    for sig, previous in saved.items():
        # None means the handler was not installed from Python.
        signal.signal(sig, signal.SIG_DFL if previous is None else previous)
