"""Shared ID cursor handed out to worker threads."""

from __future__ import annotations

import threading


class WorkCursor:
    """Monotonically increasing counter shared by all workers.

    ``next()`` is a fetch-and-add: it returns the current value and
    advances it by one in a single step, so every caller gets a distinct
    value and the values handed out form one contiguous range starting at
    the initial value. The cursor enforces no upper bound; callers compare
    what they get against their own end bound.

    Example::

        cursor = WorkCursor(1000)
        cursor.next()   # 1000
        cursor.next()   # 1001
        cursor.value    # 1002
    """

    def __init__(self, initial: int = 0) -> None:
        self._value = initial
        self._lock = threading.Lock()

    def next(self) -> int:
        """Return the next unassigned ID and advance the cursor."""
        with self._lock:
            value = self._value
            self._value = value + 1
        return value

    @property
    def value(self) -> int:
        """The next ID that ``next()`` would hand out."""
        with self._lock:
            return self._value

    def reset(self, value: int) -> None:
        """Overwrite the cursor. Only call while no worker is running."""
        with self._lock:
            self._value = value
