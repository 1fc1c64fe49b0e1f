"""SQLAlchemy concrete implementation of the repository interface."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, desc, select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from .interfaces import TrackerRepository
from .memory_impl import TRACKER_FIELDS
from ..core.errors import DuplicateActiveSessionError, RepositoryError
from ..db.models import Tracker, ActiveSession, WorkSession
from ..domain.periods import DateRange
from ..utils.logging_config import get_logger

logger = get_logger('database')


class SQLAlchemyTrackerRepository(TrackerRepository):
    """SQLAlchemy implementation of TrackerRepository.

    Outside a transaction every write commits on its own. Inside
    ``transaction()`` writes are only flushed and the block commits or rolls
    back as a whole.
    """

    def __init__(self, session: Session):
        self._session = session
        self._in_transaction = False

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if self._in_transaction:
            yield
            return

        self._in_transaction = True
        try:
            yield
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise RepositoryError(f"Transaction aborted: {e}") from e
        except BaseException:
            self._session.rollback()
            raise
        finally:
            self._in_transaction = False

    def _write(self) -> None:
        """Flush inside a transaction, commit otherwise."""
        try:
            if self._in_transaction:
                self._session.flush()
            else:
                self._session.commit()
        except SQLAlchemyError:
            if not self._in_transaction:
                self._session.rollback()
            raise

    def _read(self, statement):
        try:
            return self._session.execute(statement)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Query failed: {e}") from e

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
        try:
            self._session.add(tracker)
            self._write()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to create tracker: {e}") from e
        return tracker

    async def find_tracker(self, tracker_id: UUID) -> Optional[Tracker]:
        """Get a tracker by ID."""
        return self._read(
            select(Tracker).where(Tracker.id == tracker_id)
        ).scalar_one_or_none()

    async def update_tracker(self, tracker_id: UUID, patch: Dict[str, Any]) -> Optional[Tracker]:
        """Apply a field patch to a tracker."""
        unknown = set(patch) - TRACKER_FIELDS
        if unknown:
            raise RepositoryError(f"Cannot update tracker fields: {sorted(unknown)}")

        tracker = await self.find_tracker(tracker_id)
        if tracker is None:
            return None

        try:
            for name, value in patch.items():
                setattr(tracker, name, value)
            self._write()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to update tracker {tracker_id}: {e}") from e
        return tracker

    async def delete_tracker(self, tracker_id: UUID) -> bool:
        """Delete a tracker row."""
        try:
            result = self._session.execute(delete(Tracker).where(Tracker.id == tracker_id))
            self._write()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to delete tracker {tracker_id}: {e}") from e
        return result.rowcount > 0

    async def list_trackers(self, user_id: str) -> List[Tracker]:
        """Get all trackers of a user, most recently updated first."""
        return list(
            self._read(
                select(Tracker)
                .where(Tracker.user_id == user_id)
                .order_by(desc(Tracker.updated_at))
            ).scalars().all()
        )

    # Active sessions

    async def create_active_session(self, tracker_id: UUID, start_time: datetime) -> ActiveSession:
        """Create the active session of a tracker."""
        active = ActiveSession(id=uuid4(), tracker_id=tracker_id, start_time=start_time)
        try:
            self._session.add(active)
            self._write()
        except IntegrityError as e:
            if self._in_transaction:
                # The failed flush leaves the session unusable until rollback
                self._session.rollback()
            existing = await self.find_active_session(tracker_id)
            if existing is not None:
                raise DuplicateActiveSessionError(
                    f"Tracker {tracker_id} already has an active session"
                ) from e
            raise RepositoryError(f"Failed to create active session: {e}") from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to create active session: {e}") from e
        return active

    async def find_active_session(self, tracker_id: UUID) -> Optional[ActiveSession]:
        """Get the active session of a tracker."""
        return self._read(
            select(ActiveSession).where(ActiveSession.tracker_id == tracker_id)
        ).scalar_one_or_none()

    async def delete_active_session(self, tracker_id: UUID) -> bool:
        """Delete the active session of a tracker."""
        try:
            result = self._session.execute(
                delete(ActiveSession).where(ActiveSession.tracker_id == tracker_id)
            )
            self._write()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to delete active session: {e}") from e
        return result.rowcount > 0

    async def list_active_sessions(self, user_id: str) -> List[ActiveSession]:
        """Get the active sessions of all trackers of a user."""
        return list(
            self._read(
                select(ActiveSession)
                .join(Tracker, ActiveSession.tracker_id == Tracker.id)
                .options(joinedload(ActiveSession.tracker))
                .where(Tracker.user_id == user_id)
                .order_by(ActiveSession.start_time)
            ).scalars().all()
        )

    # Completed sessions

    async def create_session(
        self,
        tracker_id: UUID,
        start_time: datetime,
        end_time: datetime,
        duration_minutes: int,
    ) -> WorkSession:
        """Record a completed session."""
        session = WorkSession(
            id=uuid4(),
            tracker_id=tracker_id,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=duration_minutes,
        )
        try:
            self._session.add(session)
            self._write()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to record session: {e}") from e
        return session

    async def list_sessions(
        self, tracker_id: UUID, date_range: Optional[DateRange] = None
    ) -> List[WorkSession]:
        """Get sessions of a tracker ordered by start time."""
        query = select(WorkSession).where(WorkSession.tracker_id == tracker_id)
        if date_range is not None:
            query = query.where(
                and_(
                    WorkSession.start_time >= date_range.start,
                    WorkSession.start_time <= date_range.end,
                )
            )
        return list(self._read(query.order_by(WorkSession.start_time)).scalars().all())

    async def list_sessions_for_user(
        self,
        user_id: str,
        date_range: DateRange,
        tracker_id: Optional[UUID] = None,
    ) -> List[WorkSession]:
        """Get sessions of a user's trackers starting inside the range."""
        query = (
            select(WorkSession)
            .join(Tracker, WorkSession.tracker_id == Tracker.id)
            .where(
                and_(
                    Tracker.user_id == user_id,
                    WorkSession.start_time >= date_range.start,
                    WorkSession.start_time <= date_range.end,
                )
            )
        )
        if tracker_id is not None:
            query = query.where(WorkSession.tracker_id == tracker_id)
        return list(self._read(query.order_by(WorkSession.start_time)).scalars().all())

    async def delete_sessions(self, tracker_id: UUID) -> int:
        """Delete all sessions of a tracker."""
        try:
            result = self._session.execute(
                delete(WorkSession).where(WorkSession.tracker_id == tracker_id)
            )
            self._write()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to delete sessions of {tracker_id}: {e}") from e
        logger.debug(f"Deleted {result.rowcount} sessions of tracker {tracker_id}")
        return result.rowcount
