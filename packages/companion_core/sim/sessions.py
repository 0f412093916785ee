"""Per-connection session records and the capacity-bounded registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Optional
import time

from packages.companion_core.dna.signature import (
    NEUTRAL_SIGNATURE,
    Identity,
    Intent,
    Signature,
    generate_signature,
)

from .constants import FULL_CLOSE_CODE, FULL_CLOSE_REASON, MAX_USERS

if TYPE_CHECKING:
    from .gateway import SessionChannel


STAGE_WELCOME = "welcome"
STAGE_IDENTITY = "identity"
STAGE_LOBBY = "lobby"


def _now_ms() -> int:
    return int(time.time() * 1000)


class LobbyFullError(RuntimeError):
    def __init__(self, capacity: int) -> None:
        super().__init__(f"Session capacity reached ({capacity})")
        self.capacity = capacity
        self.close_code = FULL_CLOSE_CODE
        self.reason = FULL_CLOSE_REASON


@dataclass
class Session:
    """Live state for one connected visitor."""

    id: str
    channel: "SessionChannel"
    joined_at: int
    stage: str = STAGE_WELCOME
    identity: Optional[Identity] = None
    intent: Intent = field(default_factory=Intent)
    signature: Signature = NEUTRAL_SIGNATURE
    target_signature: Signature = NEUTRAL_SIGNATURE

    @property
    def in_lobby(self) -> bool:
        return self.stage == STAGE_LOBBY

    def enter_lobby(self, identity: Identity) -> Signature:
        self.identity = identity
        self.intent = identity.intent
        self.signature = generate_signature(identity)
        self.target_signature = self.signature
        self.stage = STAGE_LOBBY
        return self.signature

    def retarget(self, intent: Intent) -> None:
        """Store a new intent; only the target moves, never the live signature."""
        self.intent = intent
        if self.identity is None:
            return
        self.identity = self.identity.with_intent(intent)
        self.target_signature = generate_signature(self.identity)

    def reset(self) -> None:
        self.stage = STAGE_WELCOME
        self.identity = None
        self.signature = NEUTRAL_SIGNATURE
        self.target_signature = NEUTRAL_SIGNATURE


class SessionRegistry:
    def __init__(self, *, capacity: int = MAX_USERS) -> None:
        self.capacity = max(1, int(capacity))
        self._sessions: dict[str, Session] = {}
        self._counter = 0

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def _next_id(self) -> str:
        self._counter += 1
        return f"P{self._counter:03d}"

    def open(self, channel: "SessionChannel", *, joined_at: int | None = None) -> Session:
        if len(self._sessions) >= self.capacity:
            raise LobbyFullError(self.capacity)
        session = Session(
            id=self._next_id(),
            channel=channel,
            joined_at=_now_ms() if joined_at is None else int(joined_at),
        )
        self._sessions[session.id] = session
        return session

    def close(self, session_id: str) -> Session | None:
        return self._sessions.pop(session_id, None)

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def lobby(self) -> list[Session]:
        return [session for session in self._sessions.values() if session.in_lobby]

    def lobby_count(self) -> int:
        return sum(1 for session in self._sessions.values() if session.in_lobby)

    def reset_all(self) -> int:
        for session in self._sessions.values():
            session.reset()
        return len(self._sessions)
