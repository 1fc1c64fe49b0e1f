"""Work statistics over completed sessions.

Loading happens here; the arithmetic lives in ``domain.stats``.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Union
from uuid import UUID

from ..core.clock import Clock, SystemClock
from ..core.enums import Period
from ..core.errors import NotFoundError
from ..core.result import returns_result
from ..db.models import Tracker
from ..domain.periods import DateRange, DateRangeResolver
from ..domain.stats import (
    DailyTotal,
    TotalHours,
    TrendPoint,
    WorkStats,
    build_daily_totals,
    build_productivity_trend,
    bucket_daily_minutes,
    compute_total_hours,
    compute_work_balance,
    utc_date,
)
from ..repositories.interfaces import TrackerRepository
from ..utils.logging_config import get_logger

logger = get_logger('stats')

PeriodArg = Optional[Union[str, Period]]


@dataclass(frozen=True)
class DailyTotalsReport:
    start_date: date
    end_date: date
    days: List[DailyTotal]


@dataclass(frozen=True)
class ProductivityTrend:
    start_date: date
    end_date: date
    points: List[TrendPoint]


class StatsEngine:
    """Read-only aggregation of sessions against tracker targets."""

    def __init__(self, repository: TrackerRepository, clock: Optional[Clock] = None):
        self.repository = repository
        self.clock = clock or SystemClock()
        self.resolver = DateRangeResolver(self.clock)

    async def _get_owned_tracker(self, user_id: str, tracker_id: UUID) -> Tracker:
        tracker = await self.repository.find_tracker(tracker_id)
        if tracker is None or tracker.user_id != user_id:
            raise NotFoundError(f"Tracker {tracker_id} not found for user {user_id}")
        return tracker

    async def _contributing_trackers(
        self, user_id: str, tracker_id: Optional[UUID]
    ) -> List[Tracker]:
        """The scoped tracker whatever its archive state, else all active trackers."""
        if tracker_id is not None:
            return [await self._get_owned_tracker(user_id, tracker_id)]
        trackers = await self.repository.list_trackers(user_id)
        return [t for t in trackers if not t.archived]

    @returns_result("stats")
    async def compute_work_stats(self, tracker_id: UUID) -> WorkStats:
        """Debt/advance from the first session's date through today."""
        tracker = await self.repository.find_tracker(tracker_id)
        if tracker is None:
            raise NotFoundError(f"Tracker {tracker_id} not found")

        sessions = await self.repository.list_sessions(tracker_id)
        if not sessions:
            return WorkStats.empty()

        today = utc_date(self.clock.now())
        first_day = min(utc_date(s.start_time) for s in sessions)
        # A session stamped in the future still gets a non-empty range
        date_range = DateRange.from_dates(first_day, max(first_day, today))

        balance = compute_work_balance(
            bucket_daily_minutes(sessions),
            date_range,
            tracker.work_day_set,
            tracker.target_hours,
        )
        logger.debug(
            f"Tracker {tracker_id}: {balance.total_work_days} work days, "
            f"{balance.total_work_minutes} minutes since {first_day.isoformat()}"
        )
        return WorkStats.from_balance(balance)

    @returns_result("stats")
    async def get_daily_totals(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        tracker_id: Optional[UUID] = None,
        period: PeriodArg = None,
    ) -> DailyTotalsReport:
        """Zero-filled per-day totals; archived trackers are included."""
        date_range = self.resolver.resolve_range(start_date, end_date, period)
        if tracker_id is not None:
            await self._get_owned_tracker(user_id, tracker_id)

        sessions = await self.repository.list_sessions_for_user(user_id, date_range, tracker_id)
        return DailyTotalsReport(
            start_date=date_range.start_date,
            end_date=date_range.end_date,
            days=build_daily_totals(sessions, date_range),
        )

    @returns_result("stats")
    async def get_total_hours(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        tracker_id: Optional[UUID] = None,
        period: PeriodArg = None,
    ) -> TotalHours:
        date_range = self.resolver.resolve_range(start_date, end_date, period)
        trackers = await self._contributing_trackers(user_id, tracker_id)
        sessions = await self._sessions_of(user_id, date_range, trackers)
        return compute_total_hours(sessions, trackers, date_range)

    @returns_result("stats")
    async def get_productivity_trend(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        tracker_id: Optional[UUID] = None,
        period: PeriodArg = None,
    ) -> ProductivityTrend:
        date_range = self.resolver.resolve_range(start_date, end_date, period)
        trackers = await self._contributing_trackers(user_id, tracker_id)
        sessions = await self._sessions_of(user_id, date_range, trackers)
        return ProductivityTrend(
            start_date=date_range.start_date,
            end_date=date_range.end_date,
            points=build_productivity_trend(sessions, trackers, date_range),
        )

    async def _sessions_of(self, user_id: str, date_range: DateRange, trackers: List[Tracker]):
        if len(trackers) == 1:
            return await self.repository.list_sessions_for_user(
                user_id, date_range, trackers[0].id
            )
        wanted = {t.id for t in trackers}
        sessions = await self.repository.list_sessions_for_user(user_id, date_range)
        return [s for s in sessions if s.tracker_id in wanted]
