"""Identity-to-signature ("DNA") derivation for visitor blobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable
import math
import struct

from .color import hsl_to_rgb
from .rng import Mulberry32, to_int32


SIGNATURE_WAVE_COUNT = 6
BLENDED_VECTOR_FIELDS = ("color", "freqs", "amps", "phases")
BLENDED_SCALAR_FIELDS = ("glossiness", "transparency", "iridescence_base", "inner_glow")

_WIRE_SCALAR_NAMES = {
    "glossiness": "glossiness",
    "transparency": "transparency",
    "iridescence_base": "iridBase",
    "inner_glow": "innerGlow",
    "breath_frequency": "breathFreq",
    "breath_amount": "breathAmt",
    "rotation_rate_x": "rotXRate",
    "rotation_rate_y": "rotYRate",
    "rotation_rate_z": "rotZRate",
}

DEFAULT_INTENT_AI = 33
DEFAULT_INTENT_ARTIST = 33
DEFAULT_INTENT_USER = 34


@dataclass(frozen=True)
class Intent:
    ai: int = DEFAULT_INTENT_AI
    artist: int = DEFAULT_INTENT_ARTIST
    user: int = DEFAULT_INTENT_USER

    def as_dict(self) -> dict[str, int]:
        return {"ai": self.ai, "artist": self.artist, "user": self.user}


@dataclass(frozen=True)
class Identity:
    answers: tuple[str, ...] = ()
    image_hash: int = 0
    intent: Intent = field(default_factory=Intent)

    def with_intent(self, intent: Intent) -> "Identity":
        return Identity(answers=self.answers, image_hash=self.image_hash, intent=intent)

    def as_dict(self) -> dict[str, Any]:
        return {
            "answers": list(self.answers),
            "imageHash": self.image_hash,
            "intent": self.intent.as_dict(),
        }


@dataclass(frozen=True)
class Signature:
    """Full visual appearance vector for one participant."""

    color: tuple[float, ...]
    freqs: tuple[float, ...]
    amps: tuple[float, ...]
    phases: tuple[float, ...]
    glossiness: float
    transparency: float
    iridescence_base: float
    inner_glow: float
    breath_frequency: float
    breath_amount: float
    rotation_rate_x: float
    rotation_rate_y: float
    rotation_rate_z: float

    def to_wire(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "color": list(self.color),
            "freqs": list(self.freqs),
            "amps": list(self.amps),
            "phases": list(self.phases),
        }
        for attr, wire_name in _WIRE_SCALAR_NAMES.items():
            out[wire_name] = getattr(self, attr)
        return out


NEUTRAL_SIGNATURE = Signature(
    color=(0.72, 0.88, 1.0),
    freqs=(1.0,) * SIGNATURE_WAVE_COUNT,
    amps=(0.04,) * SIGNATURE_WAVE_COUNT,
    phases=(0.0,) * SIGNATURE_WAVE_COUNT,
    glossiness=0.95,
    transparency=0.85,
    iridescence_base=0.12,
    inner_glow=0.08,
    breath_frequency=0.4,
    breath_amount=0.006,
    rotation_rate_x=0.0003,
    rotation_rate_y=0.0008,
    rotation_rate_z=0.0002,
)


def identity_seed(answers: Iterable[str], image_hash: int = 0) -> int:
    """Fold the joined answers into a non-negative 32-bit seed.

    Characters are consumed as UTF-16 code units, the same units a browser
    ``charCodeAt`` walk would see.
    """
    text = " ".join(str(answer) for answer in answers)
    seed = int(image_hash or 0)
    encoded = text.encode("utf-16-le", "surrogatepass")
    for (code_unit,) in struct.iter_unpack("<H", encoded):
        seed = to_int32((seed << 5) - seed + code_unit)
    return abs(seed)


def generate_signature(identity: Identity) -> Signature:
    """Derive the blob signature for an identity submission.

    The draw order is fixed; changing it changes every visitor's blob.
    """
    rng = Mulberry32(identity_seed(identity.answers, identity.image_hash))
    hue = rng() * 360
    color = hsl_to_rgb(hue, 0.5 + rng() * 0.5, 0.55 + rng() * 0.3)

    ai_w = identity.intent.ai / 100
    art_w = identity.intent.artist / 100
    usr_w = identity.intent.user / 100

    freqs = tuple(0.6 + rng() * 2.2 + ai_w * 0.8 for _ in range(SIGNATURE_WAVE_COUNT))
    amps = tuple(0.06 + rng() * 0.18 + art_w * 0.07 for _ in range(SIGNATURE_WAVE_COUNT))
    phases = tuple(rng() * math.pi * 2 * (1 + usr_w * 0.5) for _ in range(SIGNATURE_WAVE_COUNT))

    return Signature(
        color=color,
        freqs=freqs,
        amps=amps,
        phases=phases,
        glossiness=0.3 + rng() * 0.6 + ai_w * 0.1,
        transparency=0.3 + rng() * 0.5,
        iridescence_base=0.15 + rng() * 0.55 + art_w * 0.15,
        inner_glow=0.15 + rng() * 0.6 + usr_w * 0.15,
        breath_frequency=0.3 + rng() * 0.5,
        breath_amount=0.01 + rng() * 0.02,
        rotation_rate_x=(rng() - 0.5) * 0.0014,
        rotation_rate_y=0.0008 + rng() * 0.0018,
        rotation_rate_z=(rng() - 0.5) * 0.0009,
    )
