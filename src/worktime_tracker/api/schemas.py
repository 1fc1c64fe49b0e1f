"""Pydantic models for API request/response validation."""

from datetime import date, datetime
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator

from ..core.enums import ProgressStatus
from ..domain.work_days import parse_work_days


# Base response models
class BaseResponse(BaseModel):
    """Base response model with common fields."""

    model_config = ConfigDict(from_attributes=True)


class ProblemDetails(BaseModel):
    """RFC 9457 Problem Details for HTTP APIs."""

    type: str = Field(description="A URI reference that identifies the problem type")
    title: str = Field(
        description="A short, human-readable summary of the problem type"
    )
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(
        None, description="A human-readable explanation specific to this occurrence"
    )
    instance: Optional[str] = Field(
        None, description="A URI reference that identifies the specific occurrence"
    )
    kind: Optional[str] = Field(None, description="Error kind reported by the service")


# Tracker schemas
class TrackerCreate(BaseModel):
    """Schema for creating a new tracker."""

    user_id: str = Field(description="Owner of the tracker")
    tracker_name: str = Field(description="Display name of the tracker")
    target_hours: float = Field(description="Target hours per work day")
    description: str = Field("", description="Free-form description")
    work_days: Optional[Union[List[int], str]] = Field(
        None,
        description="Weekday indices counted toward the target (Sunday=0), "
        "as a list or a comma-separated string",
    )


class TrackerUpdate(BaseModel):
    """Schema for updating a tracker; only fields that are sent are changed."""

    tracker_name: Optional[str] = None
    target_hours: Optional[float] = None
    description: Optional[str] = None
    work_days: Optional[Union[List[int], str]] = None


class TrackerResponse(BaseResponse):
    """Schema for tracker response."""

    id: UUID
    user_id: str
    tracker_name: str
    target_hours: float
    description: str
    work_days: List[int]
    archived: bool
    created_at: datetime
    updated_at: datetime

    @field_validator("work_days", mode="before")
    @classmethod
    def decode_work_days(cls, value):
        if isinstance(value, str):
            return sorted(parse_work_days(value))
        return value


class TrackerListResponse(BaseModel):
    trackers: List[TrackerResponse]


# Session schemas
class ActiveSessionResponse(BaseResponse):
    """Schema for a running session."""

    id: UUID
    tracker_id: UUID
    start_time: datetime


class ActiveSessionWithTracker(ActiveSessionResponse):
    tracker: TrackerResponse


class ActiveSessionListResponse(BaseModel):
    active_sessions: List[ActiveSessionWithTracker]


class StartResponse(BaseResponse):
    """Schema for the outcome of starting a tracker."""

    active_session: ActiveSessionResponse
    already_running: bool = Field(
        description="True when the tracker was already running and nothing changed"
    )


class SessionResponse(BaseResponse):
    """Schema for a completed session."""

    id: UUID
    tracker_id: UUID
    start_time: datetime
    end_time: datetime
    duration_minutes: int


class SessionListResponse(BaseModel):
    sessions: List[SessionResponse]


# Statistics schemas
class WorkStatsResponse(BaseResponse):
    """Work debt and advance of a tracker since its first session."""

    work_debt: float
    work_advance: float
    total_work_days: int
    total_work_hours: float
    target_work_hours: float


class DailyTotalResponse(BaseResponse):
    date: date
    total_minutes: int
    total_hours: float
    session_count: int


class DailyTotalsResponse(BaseResponse):
    """One entry per calendar day of the range, zero-filled."""

    start_date: date
    end_date: date
    days: List[DailyTotalResponse]


class TotalHoursResponse(BaseResponse):
    """Worked vs target hours over a range."""

    start_date: date
    end_date: date
    total_hours: float
    target_hours: float
    hours_difference: float
    status: ProgressStatus
    tracker_count: int


class TrendPointResponse(BaseResponse):
    date: date
    worked_hours: float
    target_hours: float
    difference: float
    cumulative_difference: float


class ProductivityTrendResponse(BaseResponse):
    start_date: date
    end_date: date
    points: List[TrendPointResponse]


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
