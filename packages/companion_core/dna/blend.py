"""Field-wise blending of signatures."""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from .signature import BLENDED_SCALAR_FIELDS, BLENDED_VECTOR_FIELDS, NEUTRAL_SIGNATURE, Signature


def average_signatures(signatures: Sequence[Signature]) -> Signature | None:
    """Mean of the blended fields; non-blended scalars are left neutral."""
    if not signatures:
        return None
    n = len(signatures)
    first = signatures[0]
    vector_sums = {name: [0.0] * len(getattr(first, name)) for name in BLENDED_VECTOR_FIELDS}
    scalar_sums = {name: 0.0 for name in BLENDED_SCALAR_FIELDS}
    for signature in signatures:
        for name, sums in vector_sums.items():
            for idx, value in enumerate(getattr(signature, name)):
                sums[idx] += value
        for name in scalar_sums:
            scalar_sums[name] += getattr(signature, name)

    changes: dict[str, object] = {}
    for name, sums in vector_sums.items():
        changes[name] = tuple(value / n for value in sums)
    for name, total in scalar_sums.items():
        changes[name] = total / n
    return replace(NEUTRAL_SIGNATURE, **changes)


def lerp_signatures(a: Signature, b: Signature, t: float) -> Signature:
    changes: dict[str, object] = {}
    for name in BLENDED_VECTOR_FIELDS:
        changes[name] = tuple(x + (y - x) * t for x, y in zip(getattr(a, name), getattr(b, name)))
    for name in BLENDED_SCALAR_FIELDS:
        x = getattr(a, name)
        changes[name] = x + (getattr(b, name) - x) * t
    return replace(a, **changes)
