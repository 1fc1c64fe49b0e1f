"""
Pure work-statistics functions.

Everything here operates on already-loaded sessions and tracker settings and
has no side effects. Hours are carried at full precision and rounded only when
building the output records.

Known limitation: a session that crosses midnight is attributed entirely to
the UTC date of its start time.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Protocol, Set, AbstractSet

from ..core.enums import ProgressStatus
from .periods import DateRange
from .work_days import weekday_index

HOURS_QUANTUM = Decimal("0.01")


class SessionLike(Protocol):
    start_time: datetime
    duration_minutes: int


class TrackerLike(Protocol):
    target_hours: float

    @property
    def work_day_set(self) -> AbstractSet[int]: ...


def round_hours(value: float) -> float:
    """Round to 2 decimals, ties away from zero."""
    return float(Decimal(str(value)).quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP))


def minutes_to_hours(minutes: float) -> float:
    return minutes / 60


def utc_date(instant: datetime) -> date:
    """UTC calendar date of an instant (naive values are taken as UTC)."""
    if instant.tzinfo is None:
        return instant.date()
    return instant.astimezone(timezone.utc).date()


def bucket_daily_minutes(sessions: Iterable[SessionLike]) -> Dict[date, int]:
    """Sum session minutes per UTC start date."""
    totals: Dict[date, int] = defaultdict(int)
    for session in sessions:
        totals[utc_date(session.start_time)] += session.duration_minutes
    return dict(totals)


def count_daily_sessions(sessions: Iterable[SessionLike]) -> Dict[date, int]:
    """Number of sessions per UTC start date."""
    counts: Dict[date, int] = defaultdict(int)
    for session in sessions:
        counts[utc_date(session.start_time)] += 1
    return dict(counts)


def count_work_days(date_range: DateRange, work_days: AbstractSet[int]) -> int:
    """Days in the range whose weekday (Sunday=0) is a work day."""
    return sum(1 for day in date_range.days() if weekday_index(day) in work_days)


@dataclass(frozen=True)
class WorkBalance:
    """Unrounded result of the work-day calendar walk."""

    total_work_days: int
    total_work_minutes: int
    target_work_hours: float

    @property
    def total_work_hours(self) -> float:
        return minutes_to_hours(self.total_work_minutes)

    @property
    def work_debt(self) -> float:
        return max(0.0, self.target_work_hours - self.total_work_hours)

    @property
    def work_advance(self) -> float:
        return max(0.0, self.total_work_hours - self.target_work_hours)


@dataclass(frozen=True)
class WorkStats:
    """Per-tracker statistics as reported to callers."""

    work_debt: float
    work_advance: float
    total_work_days: int
    total_work_hours: float
    target_work_hours: float

    @classmethod
    def empty(cls) -> "WorkStats":
        return cls(
            work_debt=0.0,
            work_advance=0.0,
            total_work_days=0,
            total_work_hours=0.0,
            target_work_hours=0.0,
        )

    @classmethod
    def from_balance(cls, balance: WorkBalance) -> "WorkStats":
        return cls(
            work_debt=round_hours(balance.work_debt),
            work_advance=round_hours(balance.work_advance),
            total_work_days=balance.total_work_days,
            total_work_hours=round_hours(balance.total_work_hours),
            target_work_hours=round_hours(balance.target_work_hours),
        )


def compute_work_balance(
    daily_minutes: Dict[date, int],
    date_range: DateRange,
    work_days: AbstractSet[int],
    target_hours: float,
) -> WorkBalance:
    """Walk the range day by day.

    Every day's minutes count toward hours worked; only work days count toward
    the target.
    """
    total_work_days = 0
    total_minutes = 0
    for day in date_range.days():
        if weekday_index(day) in work_days:
            total_work_days += 1
        total_minutes += daily_minutes.get(day, 0)

    return WorkBalance(
        total_work_days=total_work_days,
        total_work_minutes=total_minutes,
        target_work_hours=total_work_days * target_hours,
    )


@dataclass(frozen=True)
class DailyTotal:
    """One calendar day of the daily series."""

    date: date
    total_minutes: int
    total_hours: float
    session_count: int


def build_daily_totals(
    sessions: Iterable[SessionLike], date_range: DateRange
) -> List[DailyTotal]:
    """One entry per day of the range, ascending, zero-filled."""
    sessions = list(sessions)
    minutes = bucket_daily_minutes(sessions)
    counts = count_daily_sessions(sessions)
    return [
        DailyTotal(
            date=day,
            total_minutes=minutes.get(day, 0),
            total_hours=round_hours(minutes_to_hours(minutes.get(day, 0))),
            session_count=counts.get(day, 0),
        )
        for day in date_range.days()
    ]


@dataclass(frozen=True)
class TotalHours:
    """Worked vs target hours over a range for a set of trackers."""

    start_date: date
    end_date: date
    total_hours: float
    target_hours: float
    hours_difference: float
    status: ProgressStatus
    tracker_count: int


def compute_target_hours(trackers: Iterable[TrackerLike], date_range: DateRange) -> float:
    """Sum of each tracker's own work-day count times its daily target."""
    return sum(
        count_work_days(date_range, tracker.work_day_set) * tracker.target_hours
        for tracker in trackers
    )


def compute_total_hours(
    sessions: Iterable[SessionLike],
    trackers: List[TrackerLike],
    date_range: DateRange,
) -> TotalHours:
    """Aggregate worked minutes and per-tracker targets over ``date_range``."""
    worked_minutes = sum(
        session.duration_minutes
        for session in sessions
        if date_range.start_date <= utc_date(session.start_time) <= date_range.end_date
    )
    worked = minutes_to_hours(worked_minutes)
    target = compute_target_hours(trackers, date_range)

    return TotalHours(
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        total_hours=round_hours(worked),
        target_hours=round_hours(target),
        hours_difference=round_hours(abs(worked - target)),
        status=ProgressStatus.AHEAD if worked >= target else ProgressStatus.BEHIND,
        tracker_count=len(trackers),
    )


@dataclass(frozen=True)
class TrendPoint:
    """Worked vs target hours for one day, with the running difference."""

    date: date
    worked_hours: float
    target_hours: float
    difference: float
    cumulative_difference: float


def build_productivity_trend(
    sessions: Iterable[SessionLike],
    trackers: List[TrackerLike],
    date_range: DateRange,
) -> List[TrendPoint]:
    """Daily worked hours against the summed daily target of the trackers."""
    minutes = bucket_daily_minutes(sessions)
    calendars: List[Set[int]] = [set(tracker.work_day_set) for tracker in trackers]

    points = []
    cumulative = 0.0
    for day in date_range.days():
        weekday = weekday_index(day)
        worked = minutes_to_hours(minutes.get(day, 0))
        target = sum(
            tracker.target_hours
            for tracker, calendar in zip(trackers, calendars)
            if weekday in calendar
        )
        difference = worked - target
        cumulative += difference
        points.append(
            TrendPoint(
                date=day,
                worked_hours=round_hours(worked),
                target_hours=round_hours(target),
                difference=round_hours(difference),
                cumulative_difference=round_hours(cumulative),
            )
        )
    return points
