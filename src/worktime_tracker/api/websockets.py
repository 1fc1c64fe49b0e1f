"""WebSocket API endpoint for real-time tracker updates."""

import json
import time

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..events.websocket_manager import websocket_manager
from ..utils.logging_config import get_logger

logger = get_logger('websocket')

router = APIRouter(prefix="/v1/ws", tags=["websockets"])


@router.websocket("/{user_id}")
async def websocket_endpoint(websocket: WebSocket, user_id: str):
    """
    WebSocket endpoint streaming the tracker events of one user.

    Every lifecycle event whose payload belongs to ``user_id`` is pushed as
    ``{"type": ..., "data": ..., "timestamp": ...}``. Clients may send
    ``ping`` (plain text or ``{"type": "ping"}``) to get a ``pong`` back.
    """
    await websocket_manager.connect(websocket, user_id)

    try:
        while True:
            message = await websocket.receive_text()

            if message.strip() == "ping":
                await websocket.send_text("pong")
                continue

            try:
                data = json.loads(message)
            except json.JSONDecodeError:
                logger.debug(f"Ignoring non-JSON message from user {user_id}")
                continue

            if isinstance(data, dict) and data.get("type") == "ping":
                await websocket.send_text(
                    json.dumps({"type": "pong", "data": {"server_time": time.time()}})
                )
            else:
                logger.debug(f"Ignoring message from user {user_id}: {message[:100]}")

    except WebSocketDisconnect:
        logger.info(f"WebSocket client of user {user_id} disconnected")
    finally:
        websocket_manager.disconnect(websocket, user_id)
