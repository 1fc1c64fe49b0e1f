"""Abstract repository interfaces for data access layer."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence
from uuid import UUID

from ..db.models import Tracker, ActiveSession, WorkSession
from ..domain.periods import DateRange


class BaseRepository(ABC):
    """Base repository interface with transaction support."""

    @abstractmethod
    def transaction(self) -> Any:
        """Async context manager grouping writes into one all-or-nothing unit.

        Writes issued inside the block become visible together when the block
        exits normally and are discarded when it raises. Nested blocks join
        the outermost one.
        """
        pass

    async def run_transaction(
        self, operations: Sequence[Callable[[], Awaitable[Any]]]
    ) -> List[Any]:
        """Run async callables in order as a single transaction and return their results."""
        results = []
        async with self.transaction():
            for operation in operations:
                results.append(await operation())
        return results


class TrackerRepository(BaseRepository):
    """Repository interface for trackers, completed sessions and active sessions."""

    # Trackers

    @abstractmethod
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
        pass

    @abstractmethod
    async def find_tracker(self, tracker_id: UUID) -> Optional[Tracker]:
        """Get a tracker by ID."""
        pass

    @abstractmethod
    async def update_tracker(self, tracker_id: UUID, patch: Dict[str, Any]) -> Optional[Tracker]:
        """Apply a field patch to a tracker; returns None if it does not exist."""
        pass

    @abstractmethod
    async def delete_tracker(self, tracker_id: UUID) -> bool:
        """Delete a tracker row. Sessions must already be gone."""
        pass

    @abstractmethod
    async def list_trackers(self, user_id: str) -> List[Tracker]:
        """Get all trackers of a user, most recently updated first."""
        pass

    # Active sessions

    @abstractmethod
    async def create_active_session(self, tracker_id: UUID, start_time: datetime) -> ActiveSession:
        """Create the active session of a tracker.

        Raises:
            DuplicateActiveSessionError: if the tracker already has one
        """
        pass

    @abstractmethod
    async def find_active_session(self, tracker_id: UUID) -> Optional[ActiveSession]:
        """Get the active session of a tracker."""
        pass

    @abstractmethod
    async def delete_active_session(self, tracker_id: UUID) -> bool:
        """Delete the active session of a tracker; False if there was none."""
        pass

    @abstractmethod
    async def list_active_sessions(self, user_id: str) -> List[ActiveSession]:
        """Get the active sessions of all trackers of a user."""
        pass

    # Completed sessions

    @abstractmethod
    async def create_session(
        self,
        tracker_id: UUID,
        start_time: datetime,
        end_time: datetime,
        duration_minutes: int,
    ) -> WorkSession:
        """Record a completed session."""
        pass

    @abstractmethod
    async def list_sessions(
        self, tracker_id: UUID, date_range: Optional[DateRange] = None
    ) -> List[WorkSession]:
        """Get sessions of a tracker ordered by start time, optionally by start in range."""
        pass

    @abstractmethod
    async def list_sessions_for_user(
        self,
        user_id: str,
        date_range: DateRange,
        tracker_id: Optional[UUID] = None,
    ) -> List[WorkSession]:
        """Get sessions of a user's trackers starting inside the range."""
        pass

    @abstractmethod
    async def delete_sessions(self, tracker_id: UUID) -> int:
        """Delete all sessions of a tracker and return how many were removed."""
        pass

