"""Best-effort live push of notifications over websockets.

A client connects to ``/ws/notifications?token=<jwt>``. The token is decoded
once; the socket is then registered under the account id until it
disconnects. Pushes to accounts without a live socket are dropped, the REST
notification list stays the record of truth.
"""
import logging
import threading
from typing import Dict, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from .auth import decode_token

logger = logging.getLogger(__name__)

NEW_NOTIFICATION_EVENT = "new_notification"

router = APIRouter(tags=["realtime"])


class ConnectionManager:
    def __init__(self):
        self._connections: Dict[int, WebSocket] = {}
        # Handlers may run on threadpool workers as well as on the event loop
        self._lock = threading.Lock()

    def register(self, user_id: int, websocket: WebSocket):
        with self._lock:
            self._connections[user_id] = websocket
        logger.info("User connected: %s", user_id)

    def unregister(self, user_id: int, websocket: WebSocket):
        with self._lock:
            if self._connections.get(user_id) is websocket:
                del self._connections[user_id]
        logger.info("User disconnected: %s", user_id)

    def get(self, user_id: int) -> Optional[WebSocket]:
        with self._lock:
            return self._connections.get(user_id)

    async def send_notification(self, user_id: int, notification: dict) -> bool:
        """Push to the user's socket if one is registered; True when sent"""
        websocket = self.get(user_id)
        if websocket is None:
            return False
        try:
            await websocket.send_json({"event": NEW_NOTIFICATION_EVENT, "data": notification})
        except Exception as e:
            logger.warning("Dropping live notification for user %s: %s", user_id, e)
            self.unregister(user_id, websocket)
            return False
        return True


manager = ConnectionManager()


@router.websocket("/ws/notifications")
async def notifications_socket(websocket: WebSocket, token: Optional[str] = None):
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    try:
        identity = decode_token(token)
    except ValueError as e:
        logger.info("Rejected socket connection: %s", e)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    manager.register(identity.id, websocket)
    try:
        while True:
            # Inbound messages are ignored; receiving keeps the disconnect observable
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        manager.unregister(identity.id, websocket)
