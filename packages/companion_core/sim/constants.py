"""Tunables and fixed content for the exhibition simulation."""

from __future__ import annotations


TICK_HZ = 10
MAX_USERS = 50
CROSS_INFLUENCE = 0.004
IDENTITY_PULL = 0.012

FULL_CLOSE_CODE = 1013
FULL_CLOSE_REASON = "Full"
SHUTDOWN_CLOSE_CODE = 1001
SHUTDOWN_CLOSE_REASON = "Server shutting down"

QUESTIONS: tuple[dict[str, str], ...] = (
    {
        "id": "q1",
        "prompt": "What brought you here today?",
        "placeholder": "A word, a feeling, a reason…",
    },
    {
        "id": "q2",
        "prompt": "What are you carrying with you?",
        "placeholder": "Something on your mind, body, or soul…",
    },
    {
        "id": "q3",
        "prompt": "What do you want to leave behind?",
        "placeholder": "Let it dissolve here…",
    },
)
