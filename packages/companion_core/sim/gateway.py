"""Best-effort fan-out of encoded frames to session channels."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable
import logging

from .protocol import encode_message

if TYPE_CHECKING:
    from .sessions import Session


logger = logging.getLogger("companion_core.gateway")


class SessionChannel(ABC):
    """Transport handle for one live connection."""

    @abstractmethod
    def send_text(self, text: str) -> bool:
        """Queue a text frame; return False when the channel is no longer open."""

    @abstractmethod
    def close(self, code: int, reason: str) -> None:
        raise NotImplementedError


class BroadcastGateway:
    def _deliver(self, session: "Session", text: str) -> bool:
        try:
            return bool(session.channel.send_text(text))
        except Exception as exc:
            logger.debug("[GATEWAY] Send to %s failed: %s", session.id, exc)
            return False

    def send(self, session: "Session", message_type: str, payload: dict[str, Any]) -> bool:
        return self._deliver(session, encode_message(message_type, payload))

    def broadcast(self, sessions: Iterable["Session"], message_type: str, payload: dict[str, Any]) -> int:
        text = encode_message(message_type, payload)
        delivered = 0
        for session in sessions:
            if self._deliver(session, text):
                delivered += 1
        return delivered

    def close(self, session: "Session", code: int, reason: str) -> None:
        try:
            session.channel.close(code, reason)
        except Exception as exc:
            logger.debug("[GATEWAY] Close of %s failed: %s", session.id, exc)
