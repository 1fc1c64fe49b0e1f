"""FastAPI dependencies wiring services to their collaborators."""

from fastapi import Depends

from ..config import get_config
from ..core.clock import Clock, SystemClock
from ..events.publisher import EventPublisher, WebSocketEventPublisher
from ..events.websocket_manager import websocket_manager
from ..repositories.dependencies import get_tracker_repository
from ..repositories.interfaces import TrackerRepository
from ..services.session_lifecycle import SessionLifecycle
from ..services.stats_engine import StatsEngine

_system_clock = SystemClock()
_websocket_publisher = WebSocketEventPublisher(websocket_manager)


def get_clock() -> Clock:
    return _system_clock


def get_event_publisher() -> EventPublisher:
    return _websocket_publisher


def get_session_lifecycle(
    repository: TrackerRepository = Depends(get_tracker_repository),
    publisher: EventPublisher = Depends(get_event_publisher),
    clock: Clock = Depends(get_clock),
) -> SessionLifecycle:
    """Get a SessionLifecycle bound to the request's repository."""
    return SessionLifecycle(
        repository,
        publisher=publisher,
        clock=clock,
        default_work_days=get_config().app.default_work_days,
    )


def get_stats_engine(
    repository: TrackerRepository = Depends(get_tracker_repository),
    clock: Clock = Depends(get_clock),
) -> StatsEngine:
    """Get a StatsEngine bound to the request's repository."""
    return StatsEngine(repository, clock=clock)
