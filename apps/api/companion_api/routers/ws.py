"""WebSocket transport for visitor sessions."""

from __future__ import annotations

from typing import Any
import asyncio
import logging
import threading

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from packages.companion_core.sim.gateway import SessionChannel
from packages.companion_core.sim.hub import Hub
from packages.companion_core.sim.sessions import LobbyFullError


logger = logging.getLogger("companion_api.ws")
router = APIRouter(tags=["ws"])

_FRAME_TEXT = "text"
_FRAME_CLOSE = "close"

# About six seconds of ticks at the default rate.
MAX_PENDING_FRAMES = 64


class WebSocketChannel(SessionChannel):
    """Thread-safe outbound queue for one WebSocket.

    Frames may be queued from any thread; a writer task on the connection's
    event loop drains them in order. At most ``max_pending`` text frames wait
    at once. Further frames are dropped until the client catches up, so a
    visitor that stops reading costs bounded memory.
    """

    def __init__(
        self,
        websocket: WebSocket,
        loop: asyncio.AbstractEventLoop,
        *,
        max_pending: int = MAX_PENDING_FRAMES,
    ) -> None:
        self._websocket = websocket
        self._loop = loop
        self._queue: asyncio.Queue[tuple[str, Any]] = asyncio.Queue()
        self._max_pending = max(1, int(max_pending))
        self._pending = 0
        self._pending_lock = threading.Lock()
        self._dropped = 0
        self._open = True

    def _enqueue(self, frame: tuple[str, Any]) -> bool:
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, frame)
        except RuntimeError:
            self._open = False
            return False
        return True

    def send_text(self, text: str) -> bool:
        if not self._open:
            return False
        with self._pending_lock:
            if self._pending >= self._max_pending:
                self._dropped += 1
                if self._dropped == 1:
                    logger.warning("[WS] Client is not reading; dropping frames beyond %d", self._max_pending)
                return False
            self._pending += 1
        if not self._enqueue((_FRAME_TEXT, text)):
            with self._pending_lock:
                self._pending -= 1
            return False
        return True

    def close(self, code: int, reason: str) -> None:
        if not self._open:
            return
        self._open = False
        self._enqueue((_FRAME_CLOSE, (code, reason)))

    def mark_closed(self) -> None:
        self._open = False

    async def pump(self) -> None:
        try:
            while True:
                kind, value = await self._queue.get()
                if kind == _FRAME_CLOSE:
                    code, reason = value
                    await self._websocket.close(code=code, reason=reason)
                    return
                with self._pending_lock:
                    self._pending -= 1
                    self._dropped = 0
                await self._websocket.send_text(value)
        except Exception as exc:
            self._open = False
            logger.debug("[WS] Writer stopped: %s", exc)


@router.websocket("/ws")
@router.websocket("/")
async def session_socket(websocket: WebSocket) -> None:
    hub: Hub = websocket.app.state.hub
    await websocket.accept()
    channel = WebSocketChannel(websocket, asyncio.get_running_loop())
    try:
        session = hub.connect(channel)
    except LobbyFullError as exc:
        logger.warning("[WS] Refusing connection: %s", exc)
        await websocket.close(code=exc.close_code, reason=exc.reason)
        return

    writer = asyncio.create_task(channel.pump())
    try:
        while True:
            message = await websocket.receive()
            if message.get("type") == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is not None:
                hub.handle_message(session.id, raw)
    except WebSocketDisconnect:
        pass
    except Exception as exc:
        logger.warning("[WS] Transport error for %s: %s", session.id, exc)
    finally:
        channel.mark_closed()
        hub.disconnect(session.id)
        writer.cancel()
