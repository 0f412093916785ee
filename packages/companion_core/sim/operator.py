"""Operator pause/reset controls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .sessions import SessionRegistry


@dataclass
class OperatorState:
    paused: bool = False
    safe_mode: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {"paused": self.paused, "safeMode": self.safe_mode}


class OperatorController:
    def __init__(self, registry: SessionRegistry) -> None:
        self._registry = registry
        self.state = OperatorState()

    @property
    def paused(self) -> bool:
        return self.state.paused

    def toggle_pause(self) -> OperatorState:
        self.state.paused = not self.state.paused
        return self.state

    def reset(self) -> int:
        """Send every session back to the welcome stage; returns sessions touched."""
        return self._registry.reset_all()
