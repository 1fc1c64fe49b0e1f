"""WebSocket connection manager for real-time tracker updates."""

import json
import time
from dataclasses import dataclass, field
from typing import Dict, List

from fastapi import WebSocket

from .schemas import WebSocketMessage
from ..utils.logging_config import get_logger

logger = get_logger('websocket')


@dataclass
class WebSocketConnection:
    """WebSocket connection with metadata."""

    websocket: WebSocket
    user_id: str
    connected_at: float = field(default_factory=time.time)


class WebSocketManager:
    """Keeps WebSocket connections grouped by user and broadcasts to them."""

    def __init__(self):
        # Dict[user_id, Dict[WebSocket, WebSocketConnection]]
        self.active_connections: Dict[str, Dict[WebSocket, WebSocketConnection]] = {}

    async def connect(self, websocket: WebSocket, user_id: str):
        """Accept a WebSocket connection and register it for the user."""
        await websocket.accept()

        self.active_connections.setdefault(user_id, {})[websocket] = WebSocketConnection(
            websocket=websocket, user_id=user_id
        )

        logger.info(
            f"WebSocket connected for user {user_id}. Total connections: {len(self.active_connections[user_id])}"
        )

        await websocket.send_text(
            json.dumps(
                {
                    "type": "connection_established",
                    "data": {"user_id": user_id, "server_time": time.time()},
                }
            )
        )

    def disconnect(self, websocket: WebSocket, user_id: str):
        """Remove a WebSocket connection of the user."""
        connections = self.active_connections.get(user_id)
        if connections is None or websocket not in connections:
            return

        del connections[websocket]
        if not connections:
            del self.active_connections[user_id]

        logger.info(f"WebSocket disconnected for user {user_id}")

    async def broadcast_to_user(self, user_id: str, message: WebSocketMessage):
        """Send a message to every connection of a user, dropping dead ones."""
        if user_id not in self.active_connections:
            return

        connections = dict(self.active_connections[user_id])  # Avoid mutation during iteration
        message_json = json.dumps(message.model_dump(), default=str)

        failed_connections = []
        for websocket in connections:
            try:
                await websocket.send_text(message_json)
            except Exception as e:
                logger.warning(f"Failed to send message to WebSocket (user {user_id}): {e}")
                failed_connections.append(websocket)

        for websocket in failed_connections:
            self.disconnect(websocket, user_id)

    def get_connection_count(self, user_id: str) -> int:
        """Get the number of active connections for a user."""
        return len(self.active_connections.get(user_id, {}))

    def get_total_connections(self) -> int:
        """Get the total number of active connections across all users."""
        return sum(len(connections) for connections in self.active_connections.values())

    def get_connected_users(self) -> List[str]:
        return list(self.active_connections)


# Global WebSocket manager instance
websocket_manager = WebSocketManager()
