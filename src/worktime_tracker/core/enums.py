"""Enums for the work-time tracker application."""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories reported by the lifecycle and stats components."""

    NOT_FOUND = "not_found"
    NO_ACTIVE_SESSION = "no_active_session"
    VALIDATION_ERROR = "validation_error"
    STORAGE_ERROR = "storage_error"


class Period(str, Enum):
    """Predefined reporting periods."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ProgressStatus(str, Enum):
    """Whether worked hours meet the target over a range."""

    AHEAD = "ahead"
    BEHIND = "behind"


class TrackerEvent(str, Enum):
    """Event names published on lifecycle transitions."""

    TRACKER_CREATED = "tracker:created"
    TRACKER_UPDATED = "tracker:updated"
    TRACKER_DELETED = "tracker:deleted"
    TRACKER_ARCHIVED = "tracker:archived"
    SESSION_STARTED = "session:started"
    SESSION_STOPPED = "session:stopped"
    STATS_UPDATED = "stats:updated"
