"""Shared world summary aggregated from the lobby."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Protocol, Sequence
import math

from packages.companion_core.dna.signature import Intent, Signature


MOOD_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (0.75, "SURGE"),
    (0.60, "PULSE"),
    (0.45, "BLOOM"),
    (0.35, "DRIFT"),
    (0.25, "ERODE"),
    (0.15, "STILL"),
)


class LobbyMember(Protocol):
    intent: Intent
    signature: Signature


@dataclass
class WorldState:
    mood: str = "DRIFT"
    ai: int = 40
    artist: int = 35
    user: int = 25
    energy: float = 0.5
    density: float = 0.5
    lobby_count: int = 0
    tick: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "mood": self.mood,
            "ai": self.ai,
            "artist": self.artist,
            "user": self.user,
            "energy": self.energy,
            "density": self.density,
            "lobbyCount": self.lobby_count,
            "tick": self.tick,
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def classify_mood(energy: float) -> str:
    """Map mean inner glow to a mood band; each threshold is exclusive."""
    for threshold, mood in MOOD_THRESHOLDS:
        if energy > threshold:
            return mood
    return "VOID"


def aggregate_world(world: WorldState, lobby: Sequence[LobbyMember]) -> WorldState:
    """Return ``world`` updated from the lobby members.

    An empty lobby only zeroes ``lobby_count``; the last aggregate is kept so the
    installation does not snap to a default mood when everyone leaves.
    """
    n = len(lobby)
    if n == 0:
        return replace(world, lobby_count=0)

    ai = artist = user = 0.0
    glow = gloss = 0.0
    for member in lobby:
        ai += member.intent.ai
        artist += member.intent.artist
        user += member.intent.user
        glow += member.signature.inner_glow
        gloss += member.signature.glossiness

    energy = glow / n
    return replace(
        world,
        ai=_round_half_up(ai / n),
        artist=_round_half_up(artist / n),
        user=_round_half_up(user / n),
        energy=energy,
        density=gloss / n,
        mood=classify_mood(energy),
        lobby_count=n,
    )
