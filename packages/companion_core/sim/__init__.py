"""Session, world and broadcast runtime for the Companion installation."""

from .gateway import BroadcastGateway, SessionChannel
from .hub import Hub
from .operator import OperatorController, OperatorState
from .sessions import (
    STAGE_IDENTITY,
    STAGE_LOBBY,
    STAGE_WELCOME,
    LobbyFullError,
    Session,
    SessionRegistry,
)
from .world import WorldState, aggregate_world, classify_mood

__all__ = [
    "BroadcastGateway",
    "SessionChannel",
    "Hub",
    "OperatorController",
    "OperatorState",
    "STAGE_IDENTITY",
    "STAGE_LOBBY",
    "STAGE_WELCOME",
    "LobbyFullError",
    "Session",
    "SessionRegistry",
    "WorldState",
    "aggregate_world",
    "classify_mood",
]
