"""Dependency injection for repository layer."""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..db.database import get_db
from .interfaces import TrackerRepository
from .sqlalchemy_impl import SQLAlchemyTrackerRepository


def get_tracker_repository(db: Session = Depends(get_db)) -> TrackerRepository:
    """Get Tracker repository instance bound to the request's database session."""
    return SQLAlchemyTrackerRepository(db)
