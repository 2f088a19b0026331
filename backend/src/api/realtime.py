# pyright: reportMissingTypeStubs=false
"""
Real-time WebSocket endpoint.

Clients connect with `?token=<access token>` and then only receive events
(`newNotification`, `appointmentStatusChanged`). Anything the client sends
is ignored.
"""

import logging

from fastapi import APIRouter, WebSocket, status
from fastapi.websockets import WebSocketDisconnect

from services.jwt_service import jwt_service
from services.realtime_hub import realtime_hub

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def realtime_events(websocket: WebSocket):
    """Subscribe the authenticated user to push events."""
    token = websocket.query_params.get("token")
    payload = jwt_service.verify_token(token) if token else None
    if payload is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = payload.user_id
    await realtime_hub.connect(websocket, user_id)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await realtime_hub.disconnect(websocket, user_id)
