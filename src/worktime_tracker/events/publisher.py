"""Publishers that notify interested parties about tracker changes."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

from .schemas import WebSocketMessage
from .websocket_manager import WebSocketManager
from ..utils.logging_config import get_logger

logger = get_logger('events')


class EventPublisher(ABC):
    """Fire-and-forget notification interface."""

    @abstractmethod
    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        """Publish an event. Payloads carry at least ``user_id``."""
        pass


class NullEventPublisher(EventPublisher):
    """Publisher that drops every event."""

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        logger.debug(f"Dropping event {event_name}")


class RecordingEventPublisher(EventPublisher):
    """Publisher that keeps every event in order, for inspection."""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        self.events.append((event_name, payload))

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def clear(self) -> None:
        self.events.clear()


class WebSocketEventPublisher(EventPublisher):
    """Broadcasts events to the WebSocket connections of the payload's user."""

    def __init__(self, manager: WebSocketManager):
        self.manager = manager

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        user_id = payload.get("user_id")
        if user_id is None:
            logger.warning(f"Event {event_name} has no user_id, not broadcasting")
            return

        message = WebSocketMessage(type=event_name, data=payload)
        await self.manager.broadcast_to_user(str(user_id), message)
        logger.debug(f"Broadcast {event_name} to user {user_id}")
