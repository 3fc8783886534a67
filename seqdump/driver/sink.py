"""Classification and persistence of fetched payloads.

Payloads are sorted by a substring test and written verbatim under the
output root::

    <out_dir>/day1/<id>.html
    <out_dir>/day2/<id>.html
    <out_dir>/misc/<id>.html

The ``misc`` directory also holds the checkpoint file.
"""

from __future__ import annotations

import logging
from pathlib import Path

from seqdump.common.exceptions import SetupError
from seqdump.data_types import OUTPUT_EXTENSION, Category

logger = logging.getLogger(__name__)


def classify(content: bytes) -> Category:
    """Pick the category for a payload.

    "Day 2" is checked first, so a payload containing both markers is
    classified as day 2.

    Args:
        content: The raw response body.

    Returns:
        The matching Category, or Category.MISC when no marker is present.
    """
    for category in (Category.DAY2, Category.DAY1):
        marker = category.marker
        if marker is not None and marker in content:
            return category
    return Category.MISC


class CategorySink:
    """Writes payloads into per-category directories.

    Writes for distinct IDs never touch the same path, so no locking is
    needed. Re-persisting an ID overwrites the previous file.
    """

    def __init__(self, out_dir: Path) -> None:
        """Initialize the sink.

        Args:
            out_dir: Root directory containing the category directories.
        """
        self.out_dir = Path(out_dir)

    def directory(self, category: Category) -> Path:
        """Return the directory for a category."""
        return self.out_dir / category.value

    def path_for(self, item_id: int, category: Category) -> Path:
        """Return the file path an ID is written to for a category."""
        return self.directory(category) / f"{item_id}{OUTPUT_EXTENSION}"

    def prepare(self) -> None:
        """Create the category directories if they are missing.

        Raises:
            SetupError: If a directory cannot be created.
        """
        for category in Category:
            path = self.directory(category)
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise SetupError(
                    f"Failed to create directory {path}: {e}"
                ) from e

    def persist(self, item_id: int, content: bytes) -> Category | None:
        """Classify a payload and write it to its category directory.

        Write failures are logged and reported by returning None; they are
        never raised, so one bad write does not stop a worker.

        Args:
            item_id: The ID the payload was fetched for.
            content: The raw response body.

        Returns:
            The category written to, or None if the write failed.
        """
        category = classify(content)
        if category is Category.MISC:
            logger.error(f"Unknown day for ID {item_id}")
        else:
            logger.debug(f"Saving ID {item_id} as {category.value}")

        file_path = self.path_for(item_id, category)
        try:
            file_path.write_bytes(content)
        except OSError as e:
            logger.error(
                f"Failed to write {file_path}: {e}",
                extra={"item_id": item_id, "category": category.value},
            )
            return None
        return category
