"""Date ranges over UTC calendar days and resolution of symbolic periods."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, Optional, Union

from ..core.clock import Clock
from ..core.enums import Period
from ..core.errors import ValidationError

PERIOD_DAYS = {
    Period.WEEK: 7,
    Period.MONTH: 30,
    Period.YEAR: 365,
}

DAY_START = time(0, 0, 0, 0, tzinfo=timezone.utc)
DAY_END = time(23, 59, 59, 999000, tzinfo=timezone.utc)


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of instants covering whole UTC calendar days."""

    start: datetime
    end: datetime

    @classmethod
    def from_dates(cls, start_date: date, end_date: date) -> "DateRange":
        """Build the range from ``start_date`` 00:00:00.000 to ``end_date`` 23:59:59.999 UTC."""
        if start_date > end_date:
            raise ValidationError(
                f"start date {start_date.isoformat()} is after end date {end_date.isoformat()}"
            )
        return cls(
            start=datetime.combine(start_date, DAY_START),
            end=datetime.combine(end_date, DAY_END),
        )

    @property
    def start_date(self) -> date:
        return self.start.astimezone(timezone.utc).date()

    @property
    def end_date(self) -> date:
        return self.end.astimezone(timezone.utc).date()

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end

    def days(self) -> Iterator[date]:
        """Yield every calendar day in the range, ascending."""
        start_date = self.start_date
        for offset in range(self.day_count()):
            yield start_date + timedelta(days=offset)

    def day_count(self) -> int:
        return (self.end_date - self.start_date).days + 1


class DateRangeResolver:
    """Maps ``week``/``month``/``year`` onto concrete ranges ending today (UTC)."""

    def __init__(self, clock: Clock):
        self._clock = clock

    def resolve(self, period: Union[str, Period]) -> DateRange:
        """Return the last N calendar days ending today inclusive.

        Raises:
            ValidationError: for an unknown period name
        """
        try:
            resolved = Period(period)
        except ValueError:
            raise ValidationError(
                f"Period must be one of: {', '.join(p.value for p in Period)}"
            ) from None

        today = self._clock.now().astimezone(timezone.utc).date()
        start_date = today - timedelta(days=PERIOD_DAYS[resolved] - 1)
        return DateRange.from_dates(start_date, today)

    def resolve_range(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        period: Optional[Union[str, Period]] = None,
    ) -> DateRange:
        """Resolve either a symbolic period or an explicit pair of dates.

        Raises:
            ValidationError: if neither a period nor both dates are given
        """
        if period is not None:
            return self.resolve(period)
        if start_date is None or end_date is None:
            raise ValidationError("start_date and end_date are required when no period is given")
        return DateRange.from_dates(start_date, end_date)
