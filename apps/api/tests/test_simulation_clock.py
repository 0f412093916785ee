#!/usr/bin/env python3

from __future__ import annotations

import time
import unittest

from apps.api.companion_api.services.simulation_clock import SimulationClock
from packages.companion_core.sim.hub import Hub


class ExplodingHub(Hub):
    def step(self) -> bool:
        raise RuntimeError("boom")


def _wait_for(predicate, *, timeout_seconds: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout_seconds
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class SimulationClockTests(unittest.TestCase):
    def test_interval_follows_rate(self) -> None:
        self.assertAlmostEqual(SimulationClock(Hub()).interval_seconds, 0.1)
        self.assertAlmostEqual(SimulationClock(Hub(), tick_hz=20).interval_seconds, 0.05)

    def test_run_once_advances_hub(self) -> None:
        hub = Hub()
        clock = SimulationClock(hub)
        self.assertTrue(clock.run_once())
        self.assertEqual(hub.world.tick, 1)
        status = clock.status()
        self.assertEqual(status["steps_run"], 1)
        self.assertIsNotNone(status["last_step_at"])
        self.assertFalse(status["running"])

    def test_run_once_while_paused_counts_nothing(self) -> None:
        hub = Hub()
        hub.operator.toggle_pause()
        clock = SimulationClock(hub)
        self.assertFalse(clock.run_once())
        self.assertEqual(hub.world.tick, 0)
        self.assertEqual(clock.status()["steps_run"], 0)

    def test_step_errors_are_logged_not_raised(self) -> None:
        clock = SimulationClock(ExplodingHub())
        with self.assertLogs("companion_api.simulation_clock", level="ERROR"):
            self.assertFalse(clock.run_once())
        self.assertEqual(clock.status()["last_error"], "RuntimeError: boom")

    def test_start_and_stop(self) -> None:
        hub = Hub()
        clock = SimulationClock(hub, tick_hz=50)
        self.assertTrue(clock.start())
        try:
            self.assertFalse(clock.start())
            self.assertTrue(clock.status()["running"])
            self.assertTrue(_wait_for(lambda: hub.world.tick >= 3))
        finally:
            self.assertTrue(clock.stop())
        frozen = hub.world.tick
        time.sleep(0.1)
        self.assertEqual(hub.world.tick, frozen)
        self.assertFalse(clock.status()["running"])
        self.assertFalse(clock.stop())

    def test_loop_survives_failing_steps(self) -> None:
        clock = SimulationClock(ExplodingHub(), tick_hz=50)
        with self.assertLogs("companion_api.simulation_clock", level="ERROR"):
            clock.start()
            try:
                self.assertTrue(_wait_for(lambda: clock.status()["last_error"] is not None))
                self.assertTrue(clock.status()["running"])
            finally:
                clock.stop()


if __name__ == "__main__":
    unittest.main()
