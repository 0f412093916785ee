#!/usr/bin/env python3

from __future__ import annotations

import unittest
from types import SimpleNamespace

from packages.companion_core.dna.blend import average_signatures, lerp_signatures
from packages.companion_core.dna.signature import (
    BLENDED_SCALAR_FIELDS,
    BLENDED_VECTOR_FIELDS,
    NEUTRAL_SIGNATURE,
    Identity,
    Intent,
    generate_signature,
)
from packages.companion_core.sim.world import WorldState, aggregate_world, classify_mood


def _signature(*answers: str, **intent: int):
    return generate_signature(Identity(answers=answers, intent=Intent(**intent)))


class BlendTests(unittest.TestCase):
    def setUp(self) -> None:
        self.a = _signature("river")
        self.b = _signature("ember", ai=90)

    def test_average_of_empty_is_none(self) -> None:
        self.assertIsNone(average_signatures([]))

    def test_average_is_field_mean(self) -> None:
        avg = average_signatures([self.a, self.b])
        assert avg is not None
        for name in BLENDED_VECTOR_FIELDS:
            for got, x, y in zip(getattr(avg, name), getattr(self.a, name), getattr(self.b, name)):
                self.assertAlmostEqual(got, (x + y) / 2)
        for name in BLENDED_SCALAR_FIELDS:
            self.assertAlmostEqual(getattr(avg, name), (getattr(self.a, name) + getattr(self.b, name)) / 2)

    def test_average_ignores_order(self) -> None:
        forward = average_signatures([self.a, self.b])
        backward = average_signatures([self.b, self.a])
        assert forward is not None and backward is not None
        for name in BLENDED_SCALAR_FIELDS:
            self.assertAlmostEqual(getattr(forward, name), getattr(backward, name))

    def test_average_leaves_unblended_fields_neutral(self) -> None:
        avg = average_signatures([self.a, self.b])
        assert avg is not None
        self.assertEqual(avg.breath_frequency, NEUTRAL_SIGNATURE.breath_frequency)
        self.assertEqual(avg.rotation_rate_y, NEUTRAL_SIGNATURE.rotation_rate_y)

    def test_lerp_endpoints(self) -> None:
        self.assertEqual(lerp_signatures(self.a, self.b, 0.0), self.a)
        full = lerp_signatures(self.a, self.b, 1.0)
        for name in BLENDED_VECTOR_FIELDS:
            for got, want in zip(getattr(full, name), getattr(self.b, name)):
                self.assertAlmostEqual(got, want, places=12)
        for name in BLENDED_SCALAR_FIELDS:
            self.assertAlmostEqual(getattr(full, name), getattr(self.b, name), places=12)

    def test_lerp_copies_unblended_fields_from_first(self) -> None:
        mid = lerp_signatures(self.a, self.b, 0.5)
        self.assertEqual(mid.breath_amount, self.a.breath_amount)
        self.assertEqual(mid.breath_frequency, self.a.breath_frequency)
        self.assertEqual(mid.rotation_rate_x, self.a.rotation_rate_x)
        self.assertAlmostEqual(mid.inner_glow, (self.a.inner_glow + self.b.inner_glow) / 2)

    def test_blending_does_not_touch_inputs(self) -> None:
        a_before, b_before = self.a, self.b
        snapshot_a = self.a.to_wire()
        lerp_signatures(self.a, self.b, 0.3)
        average_signatures([self.a, self.b])
        self.assertIs(self.a, a_before)
        self.assertIs(self.b, b_before)
        self.assertEqual(self.a.to_wire(), snapshot_a)


class MoodTests(unittest.TestCase):
    def test_boundaries_fall_to_lower_band(self) -> None:
        table = {
            0.80: "SURGE",
            0.75: "PULSE",
            0.60: "BLOOM",
            0.45: "DRIFT",
            0.35: "ERODE",
            0.25: "STILL",
            0.15: "VOID",
            0.10: "VOID",
        }
        for energy, mood in table.items():
            self.assertEqual(classify_mood(energy), mood, energy)


class AggregateWorldTests(unittest.TestCase):
    @staticmethod
    def _member(ai: int, artist: int, user: int, glow: float, gloss: float) -> SimpleNamespace:
        signature = SimpleNamespace(inner_glow=glow, glossiness=gloss)
        return SimpleNamespace(intent=Intent(ai=ai, artist=artist, user=user), signature=signature)

    def test_empty_lobby_keeps_previous_aggregate(self) -> None:
        world = WorldState(mood="BLOOM", ai=70, artist=20, user=10, energy=0.5, density=0.7, lobby_count=4, tick=9)
        out = aggregate_world(world, [])
        self.assertEqual(out.lobby_count, 0)
        self.assertEqual(out.mood, "BLOOM")
        self.assertEqual((out.ai, out.artist, out.user), (70, 20, 10))
        self.assertEqual(out.energy, 0.5)
        self.assertEqual(out.tick, 9)

    def test_means_and_mood(self) -> None:
        lobby = [
            self._member(33, 10, 0, 0.9, 0.4),
            self._member(34, 20, 100, 0.7, 0.6),
        ]
        out = aggregate_world(WorldState(), lobby)
        self.assertEqual(out.ai, 34)
        self.assertEqual(out.artist, 15)
        self.assertEqual(out.user, 50)
        self.assertAlmostEqual(out.energy, 0.8)
        self.assertAlmostEqual(out.density, 0.5)
        self.assertEqual(out.mood, "SURGE")
        self.assertEqual(out.lobby_count, 2)

    def test_wire_shape(self) -> None:
        self.assertEqual(
            WorldState().as_dict(),
            {
                "mood": "DRIFT",
                "ai": 40,
                "artist": 35,
                "user": 25,
                "energy": 0.5,
                "density": 0.5,
                "lobbyCount": 0,
                "tick": 0,
            },
        )


if __name__ == "__main__":
    unittest.main()
