"""Durable storage for the resume point of a dump run.

The checkpoint is a single decimal integer, optionally followed by a
newline, naming the next ID a future run should fetch. It is read once when
a run starts and written once when it ends.
"""

from __future__ import annotations

import logging
from pathlib import Path

from seqdump.data_types import CHECKPOINT_FILENAME, MAX_ID, Category

logger = logging.getLogger(__name__)


def default_checkpoint_path(out_dir: Path) -> Path:
    """Return the checkpoint location for an output root."""
    return Path(out_dir) / Category.MISC.value / CHECKPOINT_FILENAME


class CheckpointStore:
    """Reads and writes the checkpoint file.

    Neither operation raises on I/O failure. A checkpoint that cannot be
    read means "start from the default"; one that cannot be written means
    the next run re-fetches IDs it has already seen, which only overwrites
    files with the same content.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the store.

        Args:
            path: Location of the checkpoint file.
        """
        self.path = Path(path)

    def load(self) -> int | None:
        """Read the checkpoint.

        Returns:
            The stored ID, or None if the file is missing, unreadable, or
            does not hold an unsigned 64-bit integer.
        """
        try:
            text = self.path.read_text(encoding="ascii")
        except FileNotFoundError:
            logger.debug(f"No checkpoint at {self.path}")
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read checkpoint {self.path}: {e}")
            return None

        try:
            value = int(text.strip())
        except ValueError:
            logger.warning(
                f"Failed to parse checkpoint {self.path}",
                extra={"content": text[:64]},
            )
            return None

        if not 0 <= value <= MAX_ID:
            logger.warning(
                f"Checkpoint {self.path} holds out-of-range value {value}"
            )
            return None
        return value

    def save(self, value: int) -> bool:
        """Overwrite the checkpoint with ``value``.

        Args:
            value: The next ID a future run should fetch.

        Returns:
            True if the file was written, False if the write failed.
        """
        logger.info(f"Saving last ID {value} to {self.path}")
        try:
            self.path.write_text(f"{value}\n", encoding="ascii")
        except OSError as e:
            logger.error(f"Failed to write checkpoint {self.path}: {e}")
            return False
        return True
