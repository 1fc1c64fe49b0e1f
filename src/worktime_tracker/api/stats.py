"""Work statistics API endpoints."""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from ..services.stats_engine import StatsEngine
from .dependencies import get_stats_engine
from .middleware import unwrap_result
from .schemas import (
    DailyTotalsResponse,
    ProblemDetails,
    ProductivityTrendResponse,
    TotalHoursResponse,
    WorkStatsResponse,
)

router = APIRouter(prefix="/v1", tags=["stats"])

RANGE_ERRORS = {
    404: {"model": ProblemDetails, "description": "Tracker not found for this user"},
    422: {"model": ProblemDetails, "description": "Missing or invalid date range"},
}


class RangeQuery:
    """Explicit date range query parameters shared by the report endpoints."""

    def __init__(
        self,
        start_date: Optional[date] = Query(None, description="First day, inclusive (UTC)"),
        end_date: Optional[date] = Query(None, description="Last day, inclusive (UTC)"),
        tracker_id: Optional[UUID] = Query(None, description="Restrict to one tracker"),
    ):
        self.start_date = start_date
        self.end_date = end_date
        self.tracker_id = tracker_id


@router.get(
    "/trackers/{tracker_id}/stats",
    response_model=WorkStatsResponse,
    responses={404: RANGE_ERRORS[404]},
)
async def get_tracker_stats(
    tracker_id: UUID,
    engine: StatsEngine = Depends(get_stats_engine),
) -> WorkStatsResponse:
    """
    Work debt and work advance of a tracker.

    Covers every day from the first recorded session through today. Hours
    worked on rest days still count as worked.
    """
    stats = unwrap_result(await engine.compute_work_stats(tracker_id))
    return WorkStatsResponse.model_validate(stats)


@router.get(
    "/users/{user_id}/daily-totals",
    response_model=DailyTotalsResponse,
    responses=RANGE_ERRORS,
)
async def get_daily_totals(
    user_id: str,
    query: RangeQuery = Depends(),
    engine: StatsEngine = Depends(get_stats_engine),
) -> DailyTotalsResponse:
    """Per-day totals over an explicit range, one entry per day."""
    report = await engine.get_daily_totals(
        user_id,
        start_date=query.start_date,
        end_date=query.end_date,
        tracker_id=query.tracker_id,
    )
    return DailyTotalsResponse.model_validate(unwrap_result(report))


@router.get(
    "/users/{user_id}/daily-totals/{period}",
    response_model=DailyTotalsResponse,
    responses=RANGE_ERRORS,
)
async def get_daily_totals_for_period(
    user_id: str,
    period: str,
    tracker_id: Optional[UUID] = Query(None),
    engine: StatsEngine = Depends(get_stats_engine),
) -> DailyTotalsResponse:
    """Per-day totals over the last week, month or year."""
    report = await engine.get_daily_totals(user_id, tracker_id=tracker_id, period=period)
    return DailyTotalsResponse.model_validate(unwrap_result(report))


@router.get(
    "/users/{user_id}/total-hours",
    response_model=TotalHoursResponse,
    responses=RANGE_ERRORS,
)
async def get_total_hours(
    user_id: str,
    query: RangeQuery = Depends(),
    engine: StatsEngine = Depends(get_stats_engine),
) -> TotalHoursResponse:
    """
    Worked hours against target hours over an explicit range.

    Without ``tracker_id`` all non-archived trackers of the user contribute.
    """
    totals = await engine.get_total_hours(
        user_id,
        start_date=query.start_date,
        end_date=query.end_date,
        tracker_id=query.tracker_id,
    )
    return TotalHoursResponse.model_validate(unwrap_result(totals))


@router.get(
    "/users/{user_id}/total-hours/{period}",
    response_model=TotalHoursResponse,
    responses=RANGE_ERRORS,
)
async def get_total_hours_for_period(
    user_id: str,
    period: str,
    tracker_id: Optional[UUID] = Query(None),
    engine: StatsEngine = Depends(get_stats_engine),
) -> TotalHoursResponse:
    totals = await engine.get_total_hours(user_id, tracker_id=tracker_id, period=period)
    return TotalHoursResponse.model_validate(unwrap_result(totals))


@router.get(
    "/users/{user_id}/productivity-trend",
    response_model=ProductivityTrendResponse,
    responses=RANGE_ERRORS,
)
async def get_productivity_trend(
    user_id: str,
    query: RangeQuery = Depends(),
    engine: StatsEngine = Depends(get_stats_engine),
) -> ProductivityTrendResponse:
    """Daily worked vs target hours with a running difference."""
    trend = await engine.get_productivity_trend(
        user_id,
        start_date=query.start_date,
        end_date=query.end_date,
        tracker_id=query.tracker_id,
    )
    return ProductivityTrendResponse.model_validate(unwrap_result(trend))


@router.get(
    "/users/{user_id}/productivity-trend/{period}",
    response_model=ProductivityTrendResponse,
    responses=RANGE_ERRORS,
)
async def get_productivity_trend_for_period(
    user_id: str,
    period: str,
    tracker_id: Optional[UUID] = Query(None),
    engine: StatsEngine = Depends(get_stats_engine),
) -> ProductivityTrendResponse:
    trend = await engine.get_productivity_trend(user_id, tracker_id=tracker_id, period=period)
    return ProductivityTrendResponse.model_validate(unwrap_result(trend))
