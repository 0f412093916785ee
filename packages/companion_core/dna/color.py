"""Colour space helpers."""

from __future__ import annotations


def _hue_to_rgb(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(hue_degrees: float, saturation: float, lightness: float) -> tuple[float, float, float]:
    """Convert HSL (hue in degrees, s/l in [0, 1]) to RGB components in [0, 1]."""
    h = hue_degrees / 360
    s = saturation
    l = lightness
    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q
    return (
        _hue_to_rgb(p, q, h + 1 / 3),
        _hue_to_rgb(p, q, h),
        _hue_to_rgb(p, q, h - 1 / 3),
    )
