"""SQLAlchemy models for the work-time tracker."""

from datetime import datetime, timezone
from typing import FrozenSet
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from sqlalchemy.types import CHAR, TypeDecorator

from ..domain.work_days import parse_work_days
from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GUID(TypeDecorator):
    """Platform-independent GUID type using CHAR(36) outside PostgreSQL."""

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID())
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, UUID):
            return value
        return UUID(value)


class UTCDateTime(TypeDecorator):
    """Stores naive UTC and hands back timezone-aware UTC datetimes."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Tracker(Base):
    """A named activity with a daily target and a work-day calendar."""

    __tablename__ = "trackers"

    id = Column(GUID(), primary_key=True, default=uuid4)
    user_id = Column(String(255), nullable=False)
    tracker_name = Column(String(255), nullable=False)
    target_hours = Column(Float, nullable=False)
    description = Column(Text, nullable=False, default="")
    work_days = Column(String(20), nullable=False, default="1,2,3,4,5")  # Sunday=0
    archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime(), nullable=False, default=_utcnow)
    updated_at = Column(UTCDateTime(), nullable=False, default=_utcnow)

    # Relationships
    sessions = relationship(
        "WorkSession", back_populates="tracker", cascade="all, delete-orphan"
    )
    active_session = relationship(
        "ActiveSession",
        back_populates="tracker",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("ix_tracker_user_id", "user_id"),)

    @property
    def work_day_set(self) -> FrozenSet[int]:
        """Configured work days as a set of weekday indices."""
        return parse_work_days(self.work_days)

    def __repr__(self) -> str:
        return f"<Tracker(id={self.id}, name='{self.tracker_name}', user='{self.user_id}')>"


class ActiveSession(Base):
    """The running session of a tracker; at most one per tracker."""

    __tablename__ = "active_sessions"

    id = Column(GUID(), primary_key=True, default=uuid4)
    tracker_id = Column(
        GUID(),
        ForeignKey("trackers.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    start_time = Column(UTCDateTime(), nullable=False)

    tracker = relationship("Tracker", back_populates="active_session")

    def __repr__(self) -> str:
        return f"<ActiveSession(tracker_id={self.tracker_id}, start_time={self.start_time})>"


class WorkSession(Base):
    """A completed, immutable timing interval."""

    __tablename__ = "sessions"

    id = Column(GUID(), primary_key=True, default=uuid4)
    tracker_id = Column(
        GUID(), ForeignKey("trackers.id", ondelete="CASCADE"), nullable=False
    )
    start_time = Column(UTCDateTime(), nullable=False)
    end_time = Column(UTCDateTime(), nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    tracker = relationship("Tracker", back_populates="sessions")

    __table_args__ = (
        Index("ix_session_tracker_start", "tracker_id", "start_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<WorkSession(tracker_id={self.tracker_id}, start_time={self.start_time}, "
            f"duration_minutes={self.duration_minutes})>"
        )
