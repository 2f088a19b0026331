"""
Real-time push hub.

Keeps the WebSocket connections of each user and fans events out to them.
Synchronous callers (services running in the threadpool or in background
tasks) use `emit`, which schedules the send on the event loop captured when
the application started. Having no connected session is not an error.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class RealtimeHub:
    """Manage WebSocket sessions per user id."""

    def __init__(self) -> None:
        self._clients: Dict[int, Set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Remember the loop that owns the WebSocket connections."""
        self._loop = loop

    async def connect(self, websocket: WebSocket, user_id: int) -> None:
        await websocket.accept()
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        async with self._lock:
            self._clients[user_id].add(websocket)
        logger.debug(f"Realtime session opened for user {user_id}")

    async def disconnect(self, websocket: WebSocket, user_id: int) -> None:
        async with self._lock:
            clients = self._clients.get(user_id)
            if clients:
                clients.discard(websocket)
                if not clients:
                    self._clients.pop(user_id, None)
        logger.debug(f"Realtime session closed for user {user_id}")

    def is_connected(self, user_id: int) -> bool:
        return bool(self._clients.get(user_id))

    async def send(self, user_id: int, event: str, payload: Mapping[str, Any]) -> int:
        """
        Send an event to every session of a user, dropping sessions that fail.

        Returns:
            Number of sessions that received the event
        """
        async with self._lock:
            clients: List[WebSocket] = list(self._clients.get(user_id, set()))
        if not clients:
            return 0
        message = {"event": event, "data": dict(payload)}
        delivered = 0
        dead: List[WebSocket] = []
        for ws in clients:
            try:
                await ws.send_json(message)
                delivered += 1
            except Exception:
                dead.append(ws)
        if dead:
            async with self._lock:
                remaining = self._clients.get(user_id)
                if remaining:
                    for ws in dead:
                        remaining.discard(ws)
                    if not remaining:
                        self._clients.pop(user_id, None)
        return delivered

    def emit(self, user_id: int, event: str, payload: Mapping[str, Any]) -> bool:
        """
        Push an event to a user from synchronous code.

        Returns:
            True if the user had at least one connected session and the send was scheduled
        """
        if not self.is_connected(user_id):
            logger.debug(f"No realtime session for user {user_id}, '{event}' not pushed")
            return False
        if self._loop is None or self._loop.is_closed():
            logger.debug(f"Realtime loop unavailable, '{event}' not pushed to user {user_id}")
            return False
        asyncio.run_coroutine_threadsafe(self.send(user_id, event, payload), self._loop)
        return True


# Process-wide hub shared by the WebSocket route and the services
realtime_hub = RealtimeHub()
