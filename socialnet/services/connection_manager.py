"""
WebSocket Connection Manager
"""

from typing import Dict, Set

from fastapi import WebSocket

from socialnet.core.logging import get_logger

logger = get_logger(__name__)


class ConnectionManager:
    def __init__(self):
        # user_id -> open websockets (one per tab/device)
        self.active_connections: Dict[str, Set[WebSocket]] = {}

    async def connect(self, user_id: str, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.setdefault(user_id, set()).add(websocket)
        logger.info("ws.connected", user_id=user_id, connections=len(self.active_connections[user_id]))

    def disconnect(self, user_id: str, websocket: WebSocket):
        if user_id in self.active_connections:
            self.active_connections[user_id].discard(websocket)
            if not self.active_connections[user_id]:
                del self.active_connections[user_id]
        logger.info("ws.disconnected", user_id=user_id)

    def is_online(self, user_id: str) -> bool:
        return user_id in self.active_connections

    async def send_to_user(self, user_id: str, message: dict) -> int:
        """Push to every open socket of the user; returns how many got it"""
        delivered = 0
        for connection in list(self.active_connections.get(user_id, ())):
            try:
                await connection.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning("ws.send_failed", user_id=user_id, error=str(e))
                self.disconnect(user_id, connection)
        return delivered


manager = ConnectionManager()
