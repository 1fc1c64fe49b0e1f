"""In-memory implementation of the repository interface for testing."""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Callable, Dict, List, Optional
from uuid import UUID, uuid4

from .interfaces import TrackerRepository
from ..core.errors import DuplicateActiveSessionError, RepositoryError
from ..db.models import Tracker, ActiveSession, WorkSession
from ..domain.periods import DateRange

TRACKER_FIELDS = {
    "tracker_name",
    "target_hours",
    "description",
    "work_days",
    "archived",
    "updated_at",
}


class MemoryTrackerRepository(TrackerRepository):
    """In-memory implementation of TrackerRepository.

    Transactions are serialized by an asyncio lock; writes inside a transaction
    record undo steps that are replayed in reverse if the block raises.
    """

    def __init__(self):
        self._trackers: Dict[UUID, Tracker] = {}
        self._active_sessions: Dict[UUID, ActiveSession] = {}  # tracker_id -> ActiveSession
        self._sessions: Dict[UUID, WorkSession] = {}
        self._lock = asyncio.Lock()
        self._undo_log: Optional[List[Callable[[], None]]] = None
        self._owner: Optional[asyncio.Task] = None

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if self._owner is not None and self._owner is asyncio.current_task():
            # Nested block joins the outer transaction
            yield
            return

        async with self._lock:
            self._undo_log = []
            self._owner = asyncio.current_task()
            try:
                yield
            except BaseException:
                for undo in reversed(self._undo_log):
                    undo()
                raise
            finally:
                self._undo_log = None
                self._owner = None

    def _record_undo(self, undo: Callable[[], None]) -> None:
        # Writes made by other tasks during a transaction are not part of it
        if self._undo_log is not None and self._owner is asyncio.current_task():
            self._undo_log.append(undo)

    # Trackers

    async def create_tracker(
        self,
        user_id: str,
        tracker_name: str,
        target_hours: float,
        description: str,
        work_days: str,
        created_at: datetime,
    ) -> Tracker:
        """Create a new tracker."""
        tracker = Tracker(
            id=uuid4(),
            user_id=user_id,
            tracker_name=tracker_name,
            target_hours=target_hours,
            description=description,
            work_days=work_days,
            archived=False,
            created_at=created_at,
            updated_at=created_at,
        )
        self._trackers[tracker.id] = tracker
        self._record_undo(lambda: self._trackers.pop(tracker.id, None))
        return tracker

    async def find_tracker(self, tracker_id: UUID) -> Optional[Tracker]:
        """Get a tracker by ID."""
        return self._trackers.get(tracker_id)

    async def update_tracker(self, tracker_id: UUID, patch: Dict[str, Any]) -> Optional[Tracker]:
        """Apply a field patch to a tracker."""
        unknown = set(patch) - TRACKER_FIELDS
        if unknown:
            raise RepositoryError(f"Cannot update tracker fields: {sorted(unknown)}")

        tracker = self._trackers.get(tracker_id)
        if tracker is None:
            return None

        previous = {name: getattr(tracker, name) for name in patch}
        for name, value in patch.items():
            setattr(tracker, name, value)

        def undo() -> None:
            for name, value in previous.items():
                setattr(tracker, name, value)

        self._record_undo(undo)
        return tracker

    async def delete_tracker(self, tracker_id: UUID) -> bool:
        """Delete a tracker."""
        tracker = self._trackers.pop(tracker_id, None)
        if tracker is None:
            return False
        self._record_undo(lambda: self._trackers.__setitem__(tracker_id, tracker))
        return True

    async def list_trackers(self, user_id: str) -> List[Tracker]:
        """Get all trackers of a user, most recently updated first."""
        trackers = [t for t in self._trackers.values() if t.user_id == user_id]
        trackers.sort(key=lambda t: t.updated_at, reverse=True)
        return trackers

    # Active sessions

    async def create_active_session(self, tracker_id: UUID, start_time: datetime) -> ActiveSession:
        """Create the active session of a tracker."""
        if tracker_id not in self._trackers:
            raise RepositoryError(f"Tracker {tracker_id} does not exist")
        if tracker_id in self._active_sessions:
            raise DuplicateActiveSessionError(
                f"Tracker {tracker_id} already has an active session"
            )

        active = ActiveSession(id=uuid4(), tracker_id=tracker_id, start_time=start_time)
        self._active_sessions[tracker_id] = active
        self._record_undo(lambda: self._active_sessions.pop(tracker_id, None))
        return active

    async def find_active_session(self, tracker_id: UUID) -> Optional[ActiveSession]:
        """Get the active session of a tracker."""
        return self._active_sessions.get(tracker_id)

    async def delete_active_session(self, tracker_id: UUID) -> bool:
        """Delete the active session of a tracker."""
        active = self._active_sessions.pop(tracker_id, None)
        if active is None:
            return False
        self._record_undo(lambda: self._active_sessions.__setitem__(tracker_id, active))
        return True

    async def list_active_sessions(self, user_id: str) -> List[ActiveSession]:
        """Get the active sessions of all trackers of a user."""
        sessions = []
        for tracker_id, active in self._active_sessions.items():
            tracker = self._trackers.get(tracker_id)
            if tracker is not None and tracker.user_id == user_id:
                active.tracker = tracker
                sessions.append(active)
        sessions.sort(key=lambda a: a.start_time)
        return sessions

    # Completed sessions

    async def create_session(
        self,
        tracker_id: UUID,
        start_time: datetime,
        end_time: datetime,
        duration_minutes: int,
    ) -> WorkSession:
        """Record a completed session."""
        if tracker_id not in self._trackers:
            raise RepositoryError(f"Tracker {tracker_id} does not exist")

        session = WorkSession(
            id=uuid4(),
            tracker_id=tracker_id,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=duration_minutes,
        )
        self._sessions[session.id] = session
        self._record_undo(lambda: self._sessions.pop(session.id, None))
        return session

    async def list_sessions(
        self, tracker_id: UUID, date_range: Optional[DateRange] = None
    ) -> List[WorkSession]:
        """Get sessions of a tracker ordered by start time."""
        sessions = [
            s for s in self._sessions.values()
            if s.tracker_id == tracker_id
            and (date_range is None or date_range.contains(s.start_time))
        ]
        sessions.sort(key=lambda s: s.start_time)
        return sessions

    async def list_sessions_for_user(
        self,
        user_id: str,
        date_range: DateRange,
        tracker_id: Optional[UUID] = None,
    ) -> List[WorkSession]:
        """Get sessions of a user's trackers starting inside the range."""
        owned = {
            t.id for t in self._trackers.values()
            if t.user_id == user_id and (tracker_id is None or t.id == tracker_id)
        }
        sessions = [
            s for s in self._sessions.values()
            if s.tracker_id in owned and date_range.contains(s.start_time)
        ]
        sessions.sort(key=lambda s: s.start_time)
        return sessions

    async def delete_sessions(self, tracker_id: UUID) -> int:
        """Delete all sessions of a tracker."""
        removed = {
            session_id: s for session_id, s in self._sessions.items()
            if s.tracker_id == tracker_id
        }
        for session_id in removed:
            del self._sessions[session_id]
        self._record_undo(lambda: self._sessions.update(removed))
        return len(removed)
