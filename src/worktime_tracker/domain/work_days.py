"""Work-day calendar encoding: weekday indices 0-6 with Sunday=0."""

from datetime import date
from typing import FrozenSet, Iterable, Union

ALL_WEEKDAYS = frozenset(range(7))
DEFAULT_WORK_DAYS = frozenset({1, 2, 3, 4, 5})

WorkDaysInput = Union[str, Iterable[int]]


def weekday_index(day: date) -> int:
    """Return the weekday of ``day`` with Sunday=0 ... Saturday=6."""
    return day.isoweekday() % 7


def parse_work_days(value: WorkDaysInput) -> FrozenSet[int]:
    """Parse a comma-separated string or an iterable of ints into a weekday set.

    Raises:
        ValueError: if the set is empty or contains anything outside 0-6
    """
    if isinstance(value, str):
        items = [item.strip() for item in value.split(",") if item.strip()]
        try:
            days = frozenset(int(item) for item in items)
        except ValueError:
            raise ValueError(f"work days must be integers 0-6, got {value!r}") from None
    else:
        days = frozenset()
        for item in value:
            if isinstance(item, bool) or not isinstance(item, int):
                raise ValueError(f"work days must be integers 0-6, got {item!r}")
            days = days | {item}

    if not days:
        raise ValueError("at least one work day is required")
    if not days <= ALL_WEEKDAYS:
        raise ValueError(f"work days must be within 0-6, got {sorted(days)}")
    return days


def format_work_days(days: Iterable[int]) -> str:
    """Encode a weekday set in its persisted comma-separated form."""
    return ",".join(str(day) for day in sorted(set(days)))
