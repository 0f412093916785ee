"""Environment-driven server settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from packages.companion_core.sim.constants import MAX_USERS, TICK_HZ


DEFAULT_PORT = 8080
DEFAULT_HOST = "0.0.0.0"
DEFAULT_INDEX_HTML = "companion.html"


def _truthy_env(name: str, default: bool = False) -> bool:
    raw = str(os.environ.get(name) or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _first_non_empty(*values: str | None) -> str | None:
    for value in values:
        if value and value.strip():
            return value.strip()
    return None


def _bounded_int_env(name: str, *, default: int, lower: int, upper: int) -> int:
    raw = _first_non_empty(os.environ.get(name))
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(lower, min(upper, value))


@dataclass(frozen=True)
class ServerSettings:
    host: str
    port: int
    max_users: int
    tick_hz: int
    autostart_clock: bool
    cors_origins: tuple[str, ...]
    index_html_path: Path


def load_settings() -> ServerSettings:
    origins = tuple(
        origin.strip()
        for origin in (os.environ.get("COMPANION_CORS_ORIGINS") or "*").split(",")
        if origin.strip()
    )
    return ServerSettings(
        host=_first_non_empty(os.environ.get("COMPANION_HOST")) or DEFAULT_HOST,
        port=_bounded_int_env("PORT", default=DEFAULT_PORT, lower=1, upper=65535),
        max_users=_bounded_int_env("COMPANION_MAX_USERS", default=MAX_USERS, lower=1, upper=1000),
        tick_hz=_bounded_int_env("COMPANION_TICK_HZ", default=TICK_HZ, lower=1, upper=60),
        autostart_clock=_truthy_env("COMPANION_AUTOSTART_CLOCK", default=True),
        cors_origins=origins or ("*",),
        index_html_path=Path(_first_non_empty(os.environ.get("COMPANION_INDEX_HTML")) or DEFAULT_INDEX_HTML),
    )
