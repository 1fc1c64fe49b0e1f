"""Exception hierarchy used inside the lifecycle and stats components.

Services raise these internally; the result boundary in ``core.result`` turns
them into ``Err`` values so callers never see an exception.
"""

from .enums import ErrorKind


class TrackerServiceError(Exception):
    """Base exception carrying the error kind reported to callers."""

    kind: ErrorKind = ErrorKind.STORAGE_ERROR


class NotFoundError(TrackerServiceError):
    """Tracker or session does not exist."""

    kind = ErrorKind.NOT_FOUND


class NoActiveSessionError(TrackerServiceError):
    """Stop was requested for a tracker that is not running."""

    kind = ErrorKind.NO_ACTIVE_SESSION


class ValidationError(TrackerServiceError):
    """Malformed input: missing field, unknown period, bad target hours."""

    kind = ErrorKind.VALIDATION_ERROR


class StorageError(TrackerServiceError):
    """Backing store failure, including an aborted transaction."""

    kind = ErrorKind.STORAGE_ERROR


class RepositoryError(StorageError):
    """Raised by repository implementations when the store rejects an operation."""

    pass


class DuplicateActiveSessionError(RepositoryError):
    """An active session already exists for the tracker."""

    pass
