from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from socialnet.core.logging import bind_user_id, get_logger
from socialnet.core.token import verify_token
from socialnet.services.connection_manager import manager

router = APIRouter(tags=["websocket"])
logger = get_logger(__name__)

# Application-defined close code for failed authentication
WS_CLOSE_UNAUTHORIZED = 4003


@router.websocket("/ws/notifications")
async def notifications_websocket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
):
    """
    Real-time notification stream. Authenticate with ?token=<access token>.
    """
    user_id = verify_token(token) if token else None
    if not user_id:
        logger.info("ws.auth_failed", path=websocket.url.path)
        await websocket.close(code=WS_CLOSE_UNAUTHORIZED)
        return

    bind_user_id(user_id)
    await manager.connect(user_id, websocket)
    try:
        await websocket.send_json({"type": "connected", "data": {"user_id": user_id}})
        while True:
            message = await websocket.receive_json()
            if message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        manager.disconnect(user_id, websocket)
    except Exception as e:
        logger.error("ws.error", user_id=user_id, error=str(e))
        manager.disconnect(user_id, websocket)
