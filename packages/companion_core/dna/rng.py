"""Deterministic 32-bit pseudo-random generator used for signature derivation."""

from __future__ import annotations


_MASK_32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_DIVISOR = 4294967296.0


def to_int32(value: int) -> int:
    value &= _MASK_32
    if value >= 0x80000000:
        return value - 0x100000000
    return value


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK_32


class Mulberry32:
    """Mulberry32 generator producing uniform floats in [0, 1).

    State is kept as an unsigned 32-bit integer; every intermediate product is
    truncated the same way a browser engine truncates ``Math.imul`` so output
    sequences match the installation's client bit for bit.
    """

    def __init__(self, seed: int) -> None:
        self._state = int(seed) & _MASK_32

    @property
    def state(self) -> int:
        return self._state

    def next_float(self) -> float:
        self._state = (self._state + _INCREMENT) & _MASK_32
        state = self._state
        t = _imul(state ^ (state >> 15), state | 1)
        t = ((t + _imul(t ^ (t >> 7), t | 61)) & _MASK_32) ^ t
        return ((t ^ (t >> 14)) & _MASK_32) / _DIVISOR

    __call__ = next_float
