"""Bundle number counter and serial number formatting.

Serials read ``<yy><month letter><counter>``, e.g. ``25A17`` for the
seventeenth number issued when the counter was consumed in January 2025.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bundletrack.db.models import SequenceCounterState

logger = logging.getLogger(__name__)

BUNDLE_COUNTER = "bundle_number"
MONTH_LETTERS = "ABCDEFGHIJKL"

# Row locks are a no-op on SQLite, so allocations in this process also
# go through a single lock.
_allocation_lock = threading.Lock()


class SequenceCounterError(RuntimeError):
    """Stored counter value cannot be used to allocate a serial."""

    pass


def parse_counter_value(text: str) -> int:
    """Parse a counter value made of plain ASCII digits.

    Signs, underscores and other forms ``int()`` would accept are refused,
    since the value is embedded verbatim in serials.

    Raises:
        ValueError: If the text is not a non-negative decimal number.
    """
    if not (text.isascii() and text.isdigit()):
        raise ValueError(f"Not a counter value: {text!r}")
    return int(text)


def make_serial(counter_value: int, today: date) -> str:
    """Format a serial number from a counter value and a date.

    Args:
        counter_value: Number taken from the counter.
        today: Date of allocation.

    Returns:
        str: Serial such as "25A17".
    """
    return f"{today.year % 100:02d}{MONTH_LETTERS[today.month - 1]}{counter_value}"


class SequenceCounter:
    """Persisted counter seeding bundle serial numbers.

    Attributes:
        db: Database session.
        name: Counter row name.
    """

    def __init__(self, db: Session, name: str = BUNDLE_COUNTER):
        """Initialize the counter.

        Args:
            db: Database session.
            name: Counter row name.
        """
        self.db = db
        self.name = name

    def _get_row(self, lock: bool = False) -> SequenceCounterState | None:
        stmt = select(SequenceCounterState).where(SequenceCounterState.name == self.name)
        if lock:
            stmt = stmt.with_for_update()
        return self.db.execute(
            stmt.execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def read(self) -> str:
        """Read the stored value.

        Returns:
            str: Stored value, or "" if absent or unreadable.
        """
        try:
            row = self._get_row()
        except SQLAlchemyError as e:
            logger.error(f"Failed to read counter '{self.name}': {e}")
            self.db.rollback()
            return ""
        return row.value if row else ""

    def write(self, value: str) -> None:
        """Overwrite the stored value.

        Args:
            value: New value.
        """
        with _allocation_lock:
            row = self._get_row(lock=True)
            if row is None:
                self.db.add(SequenceCounterState(name=self.name, value=value))
            else:
                row.value = value
            self.db.commit()
        logger.info(f"Counter '{self.name}' set to {value}")

    def ensure_initialized(self, initial: str) -> bool:
        """Seed the counter if it has never been written.

        Args:
            initial: Value to seed.

        Returns:
            bool: True if the counter was created.
        """
        if self._get_row() is not None:
            return False
        self.db.add(SequenceCounterState(name=self.name, value=initial))
        self.db.commit()
        logger.info(f"Initialized counter '{self.name}' with value: {initial}")
        return True

    @contextmanager
    def reserve(self) -> Iterator[int]:
        """Take the current value for a unit of work.

        The row is locked and advanced by one inside the session's open
        transaction. The caller commits that transaction together with the
        record that consumes the number; if the block raises, the
        transaction is rolled back and the number is handed out again.

        Yields:
            int: The allocated counter value.

        Raises:
            SequenceCounterError: If the stored value is missing or not an integer.
        """
        with _allocation_lock:
            row = self._get_row(lock=True)
            raw = row.value.strip() if row else ""
            try:
                current = parse_counter_value(raw)
            except ValueError:
                self.db.rollback()
                raise SequenceCounterError(
                    f"Counter '{self.name}' holds a non-numeric value: {raw!r}"
                ) from None

            row.value = str(current + 1)
            try:
                yield current
            except Exception:
                self.db.rollback()
                raise
