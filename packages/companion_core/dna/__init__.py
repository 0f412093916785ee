"""Visual signature ("DNA") primitives for Companion blobs."""

from .blend import average_signatures, lerp_signatures
from .color import hsl_to_rgb
from .rng import Mulberry32
from .signature import (
    NEUTRAL_SIGNATURE,
    Identity,
    Intent,
    Signature,
    generate_signature,
    identity_seed,
)

__all__ = [
    "average_signatures",
    "lerp_signatures",
    "hsl_to_rgb",
    "Mulberry32",
    "NEUTRAL_SIGNATURE",
    "Identity",
    "Intent",
    "Signature",
    "generate_signature",
    "identity_seed",
]
