"""Process-wide owner of sessions, world state and operator state."""

from __future__ import annotations

from typing import Any, Callable
import logging
import threading
import time

from pydantic import BaseModel

from packages.companion_core.dna.blend import average_signatures, lerp_signatures
from packages.companion_core.dna.signature import NEUTRAL_SIGNATURE

from .constants import CROSS_INFLUENCE, IDENTITY_PULL, MAX_USERS, QUESTIONS
from .gateway import BroadcastGateway, SessionChannel
from .operator import OperatorController
from .protocol import (
    MSG_IDENTITY_CONFIRMED,
    MSG_OPERATOR,
    MSG_OPERATOR_STATE,
    MSG_PING,
    MSG_PONG,
    MSG_PRESENCE,
    MSG_RESET,
    MSG_SUBMIT_IDENTITY,
    MSG_TICK,
    MSG_UPDATE_INTENT,
    MSG_WELCOME,
    IntentPayload,
    OperatorPayload,
    SubmitIdentityPayload,
    decode_message,
)
from .sessions import LobbyFullError, Session, SessionRegistry
from .world import WorldState, aggregate_world


logger = logging.getLogger("companion_core.hub")


def _peer_view(session: Session) -> dict[str, Any]:
    signature = session.signature
    return {
        "id": session.id,
        "color": list(signature.color),
        "innerGlow": signature.inner_glow,
        "glossiness": signature.glossiness,
        "breathAmt": signature.breath_amount,
    }


class Hub:
    """Session registry, world and operator state behind a single lock.

    Message handling and simulation steps may arrive from different threads
    (the ASGI loop and the clock thread); the re-entrant lock makes each of
    them one indivisible step against the shared state.

    The lock is a plain thread lock, so the event loop blocks while a step
    holds it. A step only builds frames and queues them on channels, never
    awaiting a socket, which keeps the wait to a full lobby's fan-out.
    """

    def __init__(
        self,
        *,
        max_users: int = MAX_USERS,
        cross_influence: float = CROSS_INFLUENCE,
        identity_pull: float = IDENTITY_PULL,
        time_source: Callable[[], float] = time.time,
    ) -> None:
        self.registry = SessionRegistry(capacity=max_users)
        self.operator = OperatorController(self.registry)
        self.gateway = BroadcastGateway()
        self.world = WorldState()
        self.cross_influence = float(cross_influence)
        self.identity_pull = float(identity_pull)
        self._time_source = time_source
        self._lock = threading.RLock()

    def _now_ms(self) -> int:
        return int(self._time_source() * 1000)

    def _broadcast_presence(self) -> None:
        self.gateway.broadcast(
            self.registry,
            MSG_PRESENCE,
            {"lobbyCount": self.registry.lobby_count(), "total": len(self.registry)},
        )

    # Connection lifecycle

    def connect(self, channel: SessionChannel) -> Session:
        with self._lock:
            try:
                session = self.registry.open(channel, joined_at=self._now_ms())
            except LobbyFullError:
                logger.warning("[HUB] Connection refused: %d/%d sessions", len(self.registry), self.registry.capacity)
                raise
            logger.info("[HUB] %s connected (%d total)", session.id, len(self.registry))
            self.gateway.send(
                session,
                MSG_WELCOME,
                {
                    "sessionId": session.id,
                    "world": self.world.as_dict(),
                    "neutralDNA": NEUTRAL_SIGNATURE.to_wire(),
                    "questions": [dict(q) for q in QUESTIONS],
                },
            )
            self._broadcast_presence()
            return session

    def disconnect(self, session_id: str) -> bool:
        with self._lock:
            session = self.registry.close(session_id)
            if session is None:
                return False
            logger.info("[HUB] %s left (%d remaining)", session.id, len(self.registry))
            self._broadcast_presence()
            return True

    def close_all(self, *, code: int, reason: str) -> int:
        with self._lock:
            sessions = list(self.registry)
            for session in sessions:
                self.gateway.close(session, code, reason)
            return len(sessions)

    # Inbound messages

    def handle_message(self, session_id: str, raw: str | bytes) -> bool:
        """Apply one inbound frame. Returns False when the frame was dropped."""
        decoded = decode_message(raw)
        if decoded is None:
            return False
        message_type, payload = decoded
        with self._lock:
            session = self.registry.get(session_id)
            if session is None:
                return False
            self._dispatch(session, message_type, payload)
            return True

    def _dispatch(self, session: Session, message_type: str, payload: BaseModel) -> None:
        if message_type == MSG_SUBMIT_IDENTITY and isinstance(payload, SubmitIdentityPayload):
            self._submit_identity(session, payload)
        elif message_type == MSG_UPDATE_INTENT and isinstance(payload, IntentPayload):
            session.retarget(payload.to_intent())
        elif message_type == MSG_OPERATOR and isinstance(payload, OperatorPayload):
            self._operator(payload.action)
        elif message_type == MSG_PING:
            self.gateway.send(session, MSG_PONG, {"ts": self._now_ms()})

    def _submit_identity(self, session: Session, payload: SubmitIdentityPayload) -> None:
        signature = session.enter_lobby(payload.to_identity(session.intent))
        logger.info("[HUB] %s -> lobby (%d in lobby)", session.id, self.registry.lobby_count())
        self.gateway.send(session, MSG_IDENTITY_CONFIRMED, {"dna": signature.to_wire()})
        self._broadcast_presence()

    def _operator(self, action: str) -> None:
        if action == "pause":
            state = self.operator.toggle_pause()
            logger.info("[HUB] Operator %s", "PAUSED" if state.paused else "RESUMED")
            self.gateway.broadcast(self.registry, MSG_OPERATOR_STATE, state.as_dict())
        elif action == "reset":
            touched = self.operator.reset()
            logger.info("[HUB] Operator RESET (%d sessions)", touched)
            self.gateway.broadcast(self.registry, MSG_RESET, {})

    # Simulation

    def step(self) -> bool:
        """Advance the simulation by one tick. Returns False while paused."""
        with self._lock:
            if self.operator.paused:
                return False
            self.world.tick += 1
            lobby = self.registry.lobby()
            self.world.lobby_count = len(lobby)

            if len(lobby) > 1:
                field_average = average_signatures([session.signature for session in lobby])
                for session in lobby:
                    pulled = lerp_signatures(session.signature, field_average, self.cross_influence)
                    session.signature = lerp_signatures(pulled, session.target_signature, self.identity_pull)

            self.world = aggregate_world(self.world, lobby)
            self._broadcast_tick(lobby)
            return True

    def _broadcast_tick(self, lobby: list[Session]) -> None:
        world = self.world.as_dict()
        peers = [(session.id, _peer_view(session)) for session in lobby]
        for session in lobby:
            others = [view for peer_id, view in peers if peer_id != session.id]
            self.gateway.send(
                session,
                MSG_TICK,
                {"world": world, "myDNA": session.signature.to_wire(), "others": others},
            )

    def status(self) -> dict[str, Any]:
        with self._lock:
            return {
                "status": "ok",
                "total": len(self.registry),
                "lobby": self.registry.lobby_count(),
                "world": self.world.as_dict(),
                "operator": self.operator.state.as_dict(),
            }
