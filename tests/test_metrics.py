import unittest

import numpy as np

from handfield.core.metrics import HandMetricsExtractor
from handfield.core.types import ContinuousHandMetrics
from hand_fixtures import MockHand, fist, open_hand, pinch_hand

DT = 1.0 / 60.0

UNIT_FIELDS = (
    "confidence", "speed", "openness", "pinch_strength", "finger_spread",
    "thumb_curl", "index_curl", "middle_curl", "ring_curl", "pinky_curl",
    "point_strength", "grip_strength", "energy", "tension", "expressiveness",
)


class TestHandMetrics(unittest.TestCase):
    def setUp(self):
        self.extractor = HandMetricsExtractor()

    def _hold(self, coords, frames=60):
        m = None
        for _ in range(frames):
            m = self.extractor.extract(coords, dt=DT)
        return m

    def assertBounded(self, m: ContinuousHandMetrics):
        for name in UNIT_FIELDS:
            value = getattr(m, name)
            self.assertTrue(0.0 <= value <= 1.0, f"{name}={value}")
        for v in (m.position, m.pinch_position):
            self.assertTrue(-1.0 <= v.x <= 1.0 and -1.0 <= v.y <= 1.0)
            self.assertTrue(-3.0 <= v.z <= 3.0)
        self.assertIn(m.palm_facing_camera, (-1, 1))
        for v in (m.palm_normal, m.point_direction):
            self.assertAlmostEqual(np.linalg.norm(v.as_array()), 1.0, places=6)

    def test_open_hand(self):
        """Straight fingers: no curl, openness rises to 1, nothing gripped or pinched."""
        m = self._hold(open_hand(), frames=120)
        self.assertTrue(m.is_present)
        for curl in m.finger_curls:
            self.assertAlmostEqual(curl, 0.0, places=6)
        self.assertGreater(m.openness, 0.99)
        self.assertAlmostEqual(m.pinch_strength, 0.0)
        self.assertAlmostEqual(m.grip_strength, 0.0)
        self.assertGreater(m.finger_spread, 0.5)
        self.assertEqual(len(m.landmarks), 21)

    def test_open_hand_orientation(self):
        m = self._hold(open_hand(), frames=30)
        self.assertEqual(m.palm_facing_camera, 1)
        self.assertAlmostEqual(m.palm_normal.z, 1.0, places=6)
        self.assertAlmostEqual(m.palm_tilt, 0.0, places=6)
        # Index points up the image, which is +y in display space
        self.assertGreater(m.point_direction.y, 0.9)

    def test_fist_grips(self):
        m = self._hold(fist())
        self.assertGreater(m.grip_strength, 0.6)
        self.assertLess(m.openness, 0.3)
        self.assertGreater(m.tension, 0.6)

    def test_pinch(self):
        """Thumb and index tips 0.01 apart -> full pinch, weak grip."""
        m = self._hold(pinch_hand())
        self.assertAlmostEqual(m.pinch_strength, 1.0)
        self.assertLess(m.grip_strength, 0.4)
        grip_fist = HandMetricsExtractor().extract(fist(), dt=DT).grip_strength
        self.assertLess(m.grip_strength, grip_fist)
        # Pinch point sits between the two tips (display x of 0.35 is -0.3)
        self.assertAlmostEqual(m.pinch_position.x, -0.3, places=6)

    def test_pinch_released_beyond_far_distance(self):
        coords = pinch_hand()
        coords[4, :2] = coords[8, :2] + np.array([0.0, 0.15])
        m = self._hold(coords, frames=5)
        self.assertEqual(m.pinch_strength, 0.0)

    def test_bounds_on_random_frames(self):
        rng = np.random.default_rng(3)
        for _ in range(300):
            coords = rng.random((21, 3))
            coords[:, 2] = (coords[:, 2] - 0.5) * 0.2
            self.assertBounded(self.extractor.extract(coords, dt=DT))

    def test_mediapipe_object_input(self):
        m = self.extractor.extract(MockHand(open_hand()), dt=DT, confidence=0.8)
        self.assertTrue(m.is_present)
        self.assertAlmostEqual(m.confidence, 0.8)

    def test_absence_is_empty_and_idempotent(self):
        """No hand: the canonical empty value, energy only fades."""
        rng = np.random.default_rng(5)
        for _ in range(20):
            self.extractor.extract(rng.random((21, 3)), dt=DT)
        self.assertGreater(self.extractor.energy, 0.0)

        previous = self.extractor.energy
        for _ in range(10):
            m = self.extractor.extract(None, dt=DT)
            self.assertEqual(m, ContinuousHandMetrics.empty(energy=m.energy, openness=0.6))
            self.assertFalse(m.is_present)
            self.assertGreater(m.energy, 0.0)
            self.assertLess(m.energy, previous)
            previous = m.energy

    def test_malformed_frame_reads_as_absent(self):
        self._hold(open_hand(), frames=5)
        m = self.extractor.extract(open_hand()[:20], dt=DT)
        self.assertFalse(m.is_present)
        self.assertEqual(m.openness, 0.6)

    def test_energy_fades_after_rest(self):
        """Gentle motion, then 2 s perfectly still at 60 Hz -> energy < 0.01."""
        for i in range(60):
            self.extractor.extract(open_hand(offset=(0.002 * i, 0.0, 0.0)), dt=DT)
        self.assertGreater(self.extractor.energy, 0.01)

        still = open_hand(offset=(0.002 * 59, 0.0, 0.0))
        m = self._hold(still, frames=120)
        self.assertLess(m.energy, 0.01)

    def test_fast_motion_builds_energy(self):
        m = None
        for i in range(10):
            m = self.extractor.extract(open_hand(offset=(0.03 * i, 0.0, 0.0)), dt=DT)
        self.assertGreater(m.speed, 0.2)
        self.assertGreater(m.velocity.x, 0.0)
        self.assertGreater(m.energy, 0.2)

    def test_first_frame_has_no_velocity(self):
        m = self.extractor.extract(open_hand(offset=(0.3, 0.0, 0.0)), dt=DT)
        self.assertEqual(m.speed, 0.0)
        self.assertEqual(m.velocity.x, 0.0)

    def test_closer_hand_is_negative_depth(self):
        """A larger apparent hand means closer to the camera."""
        small = open_hand()
        big = (small - small[0]) * 2.0 + small[0]
        far = HandMetricsExtractor().extract(small, dt=DT)
        near = HandMetricsExtractor().extract(big, dt=DT)
        self.assertLess(near.depth, far.depth)
        self.assertLess(near.depth, 0.0)
        self.assertAlmostEqual(near.position.z, near.depth)

    def test_reset_discards_history(self):
        self._hold(fist(), frames=30)
        self.extractor.energy = 0.7
        self.extractor.reset()
        self.assertEqual(self.extractor.energy, 0.0)
        # Without history the first open frame passes straight through
        m = self.extractor.extract(open_hand(), dt=DT)
        self.assertAlmostEqual(m.index_curl, 0.0, places=6)
        self.assertGreater(m.openness, 0.99)


if __name__ == '__main__':
    unittest.main()
