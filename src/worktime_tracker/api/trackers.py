"""Tracker management and session lifecycle API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ..services.session_lifecycle import SessionLifecycle
from .dependencies import get_session_lifecycle
from .middleware import unwrap_result
from .schemas import (
    ActiveSessionListResponse,
    ActiveSessionWithTracker,
    ProblemDetails,
    SessionListResponse,
    SessionResponse,
    StartResponse,
    TrackerCreate,
    TrackerListResponse,
    TrackerResponse,
    TrackerUpdate,
)

router = APIRouter(prefix="/v1", tags=["trackers"])

NOT_FOUND = {404: {"model": ProblemDetails, "description": "Tracker not found"}}


@router.post(
    "/trackers",
    response_model=TrackerResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Tracker created successfully"},
        422: {"model": ProblemDetails, "description": "Validation error"},
    },
)
async def create_tracker(
    tracker_data: TrackerCreate,
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> TrackerResponse:
    """
    Create a new tracker.

    ``work_days`` defaults to Monday through Friday when omitted.
    """
    result = await lifecycle.create_tracker(
        user_id=tracker_data.user_id,
        tracker_name=tracker_data.tracker_name,
        target_hours=tracker_data.target_hours,
        description=tracker_data.description,
        work_days=tracker_data.work_days,
    )
    return TrackerResponse.model_validate(unwrap_result(result))


@router.get("/trackers", response_model=TrackerListResponse)
async def list_trackers(
    user_id: str = Query(..., description="Owner of the trackers"),
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> TrackerListResponse:
    """List the trackers of a user, most recently updated first."""
    trackers = unwrap_result(await lifecycle.list_trackers(user_id))
    return TrackerListResponse(
        trackers=[TrackerResponse.model_validate(t) for t in trackers]
    )


@router.patch(
    "/trackers/{tracker_id}",
    response_model=TrackerResponse,
    responses={
        **NOT_FOUND,
        422: {"model": ProblemDetails, "description": "Validation error"},
    },
)
async def update_tracker(
    tracker_id: UUID,
    changes: TrackerUpdate,
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> TrackerResponse:
    result = await lifecycle.update_tracker(
        tracker_id, **changes.model_dump(exclude_unset=True)
    )
    return TrackerResponse.model_validate(unwrap_result(result))


@router.delete(
    "/trackers/{tracker_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
)
async def delete_tracker(
    tracker_id: UUID,
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> Response:
    """Delete a tracker together with its sessions and any running session."""
    unwrap_result(await lifecycle.delete_tracker(tracker_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/trackers/{tracker_id}/start", response_model=StartResponse, responses=NOT_FOUND)
async def start_tracker(
    tracker_id: UUID,
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> StartResponse:
    """
    Start timing a tracker.

    Starting a tracker that is already running succeeds without changes and
    reports ``already_running``.
    """
    outcome = unwrap_result(await lifecycle.start(tracker_id))
    return StartResponse.model_validate(outcome)


@router.post(
    "/trackers/{tracker_id}/stop",
    response_model=SessionResponse,
    responses={
        **NOT_FOUND,
        409: {"model": ProblemDetails, "description": "Tracker is not running"},
    },
)
async def stop_tracker(
    tracker_id: UUID,
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> SessionResponse:
    """Stop a running tracker and return the recorded session."""
    session = unwrap_result(await lifecycle.stop(tracker_id))
    return SessionResponse.model_validate(session)


@router.post("/trackers/{tracker_id}/archive", response_model=TrackerResponse, responses=NOT_FOUND)
async def archive_tracker(
    tracker_id: UUID,
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> TrackerResponse:
    return TrackerResponse.model_validate(unwrap_result(await lifecycle.archive(tracker_id)))


@router.post("/trackers/{tracker_id}/unarchive", response_model=TrackerResponse, responses=NOT_FOUND)
async def unarchive_tracker(
    tracker_id: UUID,
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> TrackerResponse:
    return TrackerResponse.model_validate(unwrap_result(await lifecycle.unarchive(tracker_id)))


@router.get("/trackers/{tracker_id}/sessions", response_model=SessionListResponse, responses=NOT_FOUND)
async def list_sessions(
    tracker_id: UUID,
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> SessionListResponse:
    """List the completed sessions of a tracker, oldest first."""
    sessions = unwrap_result(await lifecycle.list_sessions(tracker_id))
    return SessionListResponse(
        sessions=[SessionResponse.model_validate(s) for s in sessions]
    )


@router.get("/users/{user_id}/active-sessions", response_model=ActiveSessionListResponse)
async def list_active_sessions(
    user_id: str,
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> ActiveSessionListResponse:
    """List the running sessions of a user with their trackers."""
    active_sessions = unwrap_result(await lifecycle.list_active_sessions(user_id))
    return ActiveSessionListResponse(
        active_sessions=[ActiveSessionWithTracker.model_validate(a) for a in active_sessions]
    )
