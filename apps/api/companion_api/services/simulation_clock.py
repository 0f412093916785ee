"""Background fixed-rate clock driving hub simulation steps."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import threading
import time
import uuid

from packages.companion_core.sim.constants import TICK_HZ
from packages.companion_core.sim.hub import Hub


logger = logging.getLogger("companion_api.simulation_clock")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class SimulationClock:
    def __init__(self, hub: Hub, *, tick_hz: float = TICK_HZ) -> None:
        self._hub = hub
        self._interval_seconds = 1.0 / max(0.1, float(tick_hz))
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._state_lock = threading.Lock()
        self._steps_run = 0
        self._last_step_at: str | None = None
        self._last_error: str | None = None
        self._instance_id = f"clock-{uuid.uuid4().hex[:12]}"

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    def start(self) -> bool:
        with self._state_lock:
            if self._thread and self._thread.is_alive():
                return False
            self._stop_event.clear()
            thread = threading.Thread(
                target=self._run_loop,
                name="companion-simulation-clock",
                daemon=True,
            )
            thread.start()
            self._thread = thread
            logger.info("[CLOCK] Simulation clock started at %.1f Hz", 1.0 / self._interval_seconds)
            return True

    def stop(self, *, join_timeout_seconds: float = 3.0) -> bool:
        with self._state_lock:
            thread = self._thread
            if not thread:
                return False
            self._stop_event.set()
        thread.join(timeout=max(0.1, float(join_timeout_seconds)))
        with self._state_lock:
            if self._thread is thread:
                self._thread = None
        logger.info("[CLOCK] Simulation clock stopped after %d steps", self._steps_run)
        return True

    def status(self) -> dict[str, object]:
        with self._state_lock:
            running = bool(self._thread and self._thread.is_alive())
        return {
            "running": running,
            "instance_id": self._instance_id,
            "interval_seconds": self._interval_seconds,
            "steps_run": self._steps_run,
            "last_step_at": self._last_step_at,
            "last_error": self._last_error,
        }

    def run_once(self) -> bool:
        """Run one hub step; never raises."""
        try:
            advanced = self._hub.step()
        except Exception as exc:
            self._last_error = f"{exc.__class__.__name__}: {exc}"
            logger.exception("[CLOCK] Simulation step failed: %s", exc)
            return False
        if advanced:
            self._steps_run += 1
            self._last_step_at = _utc_now_iso()
        return advanced

    def _run_loop(self) -> None:
        next_deadline = time.monotonic()
        while not self._stop_event.is_set():
            self.run_once()
            next_deadline += self._interval_seconds
            now = time.monotonic()
            if next_deadline < now:
                # Fell behind; restart the cadence from now.
                next_deadline = now
            self._stop_event.wait(next_deadline - now)
