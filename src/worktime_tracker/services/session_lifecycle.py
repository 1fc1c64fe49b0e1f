"""
Session lifecycle of trackers.

A tracker is either Stopped (no active session) or Running (exactly one active
session). ``start`` and ``stop`` move between the two; closing a session writes
the completed session, removes the active one and touches the tracker as one
transaction.
"""

import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Optional, Union
from uuid import UUID

from ..core.clock import Clock, SystemClock
from ..core.enums import TrackerEvent
from ..core.errors import (
    DuplicateActiveSessionError,
    NoActiveSessionError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from ..core.result import returns_result
from ..db.models import ActiveSession, Tracker, WorkSession
from ..domain.work_days import DEFAULT_WORK_DAYS, format_work_days, parse_work_days
from ..events.publisher import EventPublisher, NullEventPublisher
from ..repositories.interfaces import TrackerRepository
from ..utils.logging_config import get_logger

logger = get_logger('lifecycle')

UPDATABLE_FIELDS = ("tracker_name", "target_hours", "description", "work_days")


@dataclass(frozen=True)
class SessionStartResult:
    """Outcome of ``start``: the active session and whether it already existed."""

    active_session: ActiveSession
    already_running: bool


def _require_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def _validate_target_hours(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("target_hours must be a number")
    if not math.isfinite(value) or value <= 0:
        raise ValidationError("target_hours must be greater than 0")
    return float(value)


def _validate_work_days(value: Union[str, Iterable[int]]) -> str:
    try:
        return format_work_days(parse_work_days(value))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid work_days: {e}") from None


class SessionLifecycle:
    """Start/stop state machine plus tracker management.

    Every public method returns ``Ok``/``Err``; nothing raises past it.
    """

    def __init__(
        self,
        repository: TrackerRepository,
        publisher: Optional[EventPublisher] = None,
        clock: Optional[Clock] = None,
        default_work_days: Union[str, Iterable[int]] = DEFAULT_WORK_DAYS,
    ):
        self.repository = repository
        self.publisher = publisher or NullEventPublisher()
        self.clock = clock or SystemClock()
        self.default_work_days = _validate_work_days(default_work_days)

    async def _get_tracker(self, tracker_id: UUID) -> Tracker:
        tracker = await self.repository.find_tracker(tracker_id)
        if tracker is None:
            raise NotFoundError(f"Tracker {tracker_id} not found")
        return tracker

    async def _publish(self, event: TrackerEvent, payload: Dict[str, Any]) -> None:
        """Publish without letting notification failures affect the operation."""
        try:
            await self.publisher.publish(event.value, payload)
        except Exception as e:
            logger.warning(f"Failed to publish {event.value}: {e}")

    # Tracker management

    @returns_result("lifecycle")
    async def create_tracker(
        self,
        user_id: str,
        tracker_name: str,
        target_hours: float,
        description: str = "",
        work_days: Optional[Union[str, Iterable[int]]] = None,
    ) -> Tracker:
        user_id = _require_text(user_id, "user_id")
        tracker_name = _require_text(tracker_name, "tracker_name")
        target_hours = _validate_target_hours(target_hours)
        if description is None:
            description = ""
        if not isinstance(description, str):
            raise ValidationError("description must be a string")
        encoded_days = (
            self.default_work_days if work_days is None else _validate_work_days(work_days)
        )

        tracker = await self.repository.create_tracker(
            user_id=user_id,
            tracker_name=tracker_name,
            target_hours=target_hours,
            description=description,
            work_days=encoded_days,
            created_at=self.clock.now(),
        )
        logger.info(f"Added tracker {tracker.id} for user {user_id}")

        await self._publish(
            TrackerEvent.TRACKER_CREATED,
            {"user_id": user_id, "tracker_id": str(tracker.id), "tracker_name": tracker_name},
        )
        return tracker

    @returns_result("lifecycle")
    async def update_tracker(self, tracker_id: UUID, **changes: Any) -> Tracker:
        """Patch name, target hours, description or work days of a tracker."""
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if not changes:
            raise ValidationError("No fields to update")

        patch: Dict[str, Any] = {}
        if "tracker_name" in changes:
            patch["tracker_name"] = _require_text(changes["tracker_name"], "tracker_name")
        if "target_hours" in changes:
            patch["target_hours"] = _validate_target_hours(changes["target_hours"])
        if "description" in changes:
            if not isinstance(changes["description"], str):
                raise ValidationError("description must be a string")
            patch["description"] = changes["description"]
        if "work_days" in changes:
            patch["work_days"] = _validate_work_days(changes["work_days"])

        tracker = await self._get_tracker(tracker_id)
        patch["updated_at"] = self.clock.now()
        tracker = await self.repository.update_tracker(tracker_id, patch)
        if tracker is None:
            raise NotFoundError(f"Tracker {tracker_id} not found")

        await self._publish(
            TrackerEvent.TRACKER_UPDATED,
            {
                "user_id": tracker.user_id,
                "tracker_id": str(tracker_id),
                "fields": sorted(k for k in patch if k != "updated_at"),
            },
        )
        return tracker

    @returns_result("lifecycle")
    async def list_trackers(self, user_id: str) -> List[Tracker]:
        return await self.repository.list_trackers(user_id)

    @returns_result("lifecycle")
    async def list_active_sessions(self, user_id: str) -> List[ActiveSession]:
        return await self.repository.list_active_sessions(user_id)

    @returns_result("lifecycle")
    async def list_sessions(self, tracker_id: UUID) -> List[WorkSession]:
        await self._get_tracker(tracker_id)
        return await self.repository.list_sessions(tracker_id)

    # State machine

    @returns_result("lifecycle")
    async def start(self, tracker_id: UUID) -> SessionStartResult:
        """Start timing a tracker.

        Starting a running tracker is a successful no-op that keeps the original
        start time. A start that loses a concurrent race ends up the same way.
        """
        await self._get_tracker(tracker_id)
        now = self.clock.now()

        existing = await self.repository.find_active_session(tracker_id)
        if existing is not None:
            await self.repository.update_tracker(tracker_id, {"updated_at": now})
            return SessionStartResult(active_session=existing, already_running=True)

        try:
            async with self.repository.transaction():
                active = await self.repository.create_active_session(tracker_id, now)
                tracker = await self.repository.update_tracker(tracker_id, {"updated_at": now})
        except DuplicateActiveSessionError:
            existing = await self.repository.find_active_session(tracker_id)
            if existing is None:
                raise StorageError(f"Active session of tracker {tracker_id} vanished during start")
            logger.info(f"Tracker {tracker_id} was started concurrently, keeping existing session")
            return SessionStartResult(active_session=existing, already_running=True)

        logger.info(f"Started tracker {tracker_id} at {now.isoformat()}")
        await self._publish(
            TrackerEvent.SESSION_STARTED,
            {
                "user_id": tracker.user_id,
                "tracker_id": str(tracker_id),
                "start_time": now.isoformat(),
            },
        )
        return SessionStartResult(active_session=active, already_running=False)

    @returns_result("lifecycle")
    async def stop(self, tracker_id: UUID) -> WorkSession:
        """Close the running session of a tracker and record it."""
        tracker = await self._get_tracker(tracker_id)
        active = await self.repository.find_active_session(tracker_id)
        if active is None:
            raise NoActiveSessionError(f"No active session found for tracker {tracker_id}")

        start_time = active.start_time
        end_time = self.clock.now()
        duration_minutes = max(0, (end_time - start_time) // timedelta(minutes=1))

        async with self.repository.transaction():
            session = await self.repository.create_session(
                tracker_id=tracker_id,
                start_time=start_time,
                end_time=end_time,
                duration_minutes=duration_minutes,
            )
            if not await self.repository.delete_active_session(tracker_id):
                raise NoActiveSessionError(
                    f"Active session of tracker {tracker_id} was already closed"
                )
            await self.repository.update_tracker(tracker_id, {"updated_at": end_time})

        logger.info(f"Stopped tracker {tracker_id} after {duration_minutes} minutes")

        payload = {"user_id": tracker.user_id, "tracker_id": str(tracker_id)}
        await self._publish(
            TrackerEvent.SESSION_STOPPED,
            {
                **payload,
                "session_id": str(session.id),
                "start_time": start_time.isoformat(),
                "end_time": end_time.isoformat(),
                "duration_minutes": duration_minutes,
            },
        )
        await self._publish(TrackerEvent.STATS_UPDATED, payload)
        return session

    async def _set_archived(self, tracker_id: UUID, archived: bool) -> Tracker:
        tracker = await self._get_tracker(tracker_id)
        tracker = await self.repository.update_tracker(tracker_id, {"archived": archived})
        if tracker is None:
            raise NotFoundError(f"Tracker {tracker_id} not found")
        logger.info(f"Tracker {tracker_id} archived={archived}")
        await self._publish(
            TrackerEvent.TRACKER_ARCHIVED,
            {"user_id": tracker.user_id, "tracker_id": str(tracker_id), "archived": archived},
        )
        return tracker

    @returns_result("lifecycle")
    async def archive(self, tracker_id: UUID) -> Tracker:
        return await self._set_archived(tracker_id, True)

    @returns_result("lifecycle")
    async def unarchive(self, tracker_id: UUID) -> Tracker:
        return await self._set_archived(tracker_id, False)

    @returns_result("lifecycle")
    async def delete_tracker(self, tracker_id: UUID) -> UUID:
        """Remove sessions, the active session and the tracker, in that order."""
        tracker = await self._get_tracker(tracker_id)
        user_id = tracker.user_id

        removed_sessions, _, _ = await self.repository.run_transaction(
            [
                lambda: self.repository.delete_sessions(tracker_id),
                lambda: self.repository.delete_active_session(tracker_id),
                lambda: self.repository.delete_tracker(tracker_id),
            ]
        )
        logger.info(f"Deleted tracker {tracker_id} with {removed_sessions} sessions")

        await self._publish(
            TrackerEvent.TRACKER_DELETED,
            {"user_id": user_id, "tracker_id": str(tracker_id)},
        )
        return tracker_id
