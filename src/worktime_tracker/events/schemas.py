"""WebSocket message schemas for real-time updates."""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, Field


class WebSocketMessage(BaseModel):
    """Base WebSocket message format."""

    type: str
    data: Dict[str, Any]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
