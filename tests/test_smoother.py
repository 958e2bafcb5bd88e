import unittest

import numpy as np

from handfield.core.smoother import Channel, Rate, Smoother, SmootherBank


class TestSmoother(unittest.TestCase):
    def setUp(self):
        self.default = Smoother(Rate.DEFAULT, alpha=0.35)

    def test_first_observation_passes_through(self):
        """No history -> the raw value is returned unchanged."""
        self.assertEqual(self.default.smooth_scalar(Channel.GRIP, 0.42), 0.42)
        v = self.default.smooth_vector(Channel.POSITION, [0.1, -0.2, 0.3])
        np.testing.assert_allclose(v, [0.1, -0.2, 0.3])

    def test_first_observation_is_exact(self):
        """Values that do not survive alpha * x + (1 - alpha) * x bit-for-bit."""
        for raw in (0.42, 0.1, 1.0 / 3.0, 0.7):
            self.default.reset()
            self.assertEqual(self.default.smooth_scalar(Channel.GRIP, raw), raw)
        raw = np.array([0.42, 0.1, 1.0 / 3.0])
        np.testing.assert_array_equal(self.default.smooth_vector(Channel.VELOCITY, raw), raw)

    def test_ema_formula(self):
        self.default.smooth_scalar(Channel.GRIP, 0.0)
        self.assertAlmostEqual(self.default.smooth_scalar(Channel.GRIP, 1.0), 0.35)
        self.assertAlmostEqual(self.default.smooth_scalar(Channel.GRIP, 1.0), 0.35 + 0.65 * 0.35)

    def test_converges_within_ten_ticks(self):
        """alpha 0.35: a step input is within 2% after 10 ticks."""
        self.default.smooth_scalar(Channel.SPREAD, 0.0)
        value = 0.0
        for _ in range(10):
            value = self.default.smooth_scalar(Channel.SPREAD, 1.0)
        self.assertLess(abs(1.0 - value), 0.02)

    def test_channels_are_independent(self):
        self.default.smooth_scalar(Channel.GRIP, 1.0)
        self.assertEqual(self.default.smooth_scalar(Channel.SPREAD, 0.0), 0.0)

    def test_vector_output_is_a_copy(self):
        out = self.default.smooth_vector(Channel.POSITION, [1.0, 1.0, 1.0])
        out[:] = 99.0
        np.testing.assert_allclose(self.default.peek(Channel.POSITION), [1.0, 1.0, 1.0])

    def test_wrong_kind_raises(self):
        with self.assertRaises(ValueError):
            self.default.smooth_vector(Channel.GRIP, [0.0, 0.0, 0.0])
        with self.assertRaises(ValueError):
            self.default.smooth_scalar(Channel.POSITION, 0.0)

    def test_wrong_rate_raises(self):
        """A channel is only ever smoothed by the smoother of its own rate."""
        with self.assertRaises(ValueError):
            self.default.smooth_scalar(Channel.PINCH, 1.0)
        with self.assertRaises(ValueError):
            Smoother(Rate.SLOW).smooth_scalar(Channel.GRIP, 1.0)

    def test_invalid_alpha(self):
        with self.assertRaises(ValueError):
            Smoother(Rate.FAST, alpha=0.0)
        with self.assertRaises(ValueError):
            Smoother(Rate.FAST, alpha=1.5)

    def test_reset_clears_history(self):
        self.default.smooth_scalar(Channel.GRIP, 1.0)
        self.default.reset()
        self.assertIsNone(self.default.peek(Channel.GRIP))
        self.assertEqual(self.default.smooth_scalar(Channel.GRIP, 0.2), 0.2)


class TestSmootherBank(unittest.TestCase):
    def test_routes_by_rate(self):
        bank = SmootherBank()
        bank(Channel.PINCH, 0.0)
        bank(Channel.OPENNESS, 0.0)
        self.assertAlmostEqual(bank(Channel.PINCH, 1.0), 0.6)
        self.assertAlmostEqual(bank(Channel.OPENNESS, 1.0), 0.15)
        self.assertIsNotNone(bank.fast.peek(Channel.PINCH))
        self.assertIsNone(bank.default.peek(Channel.PINCH))

    def test_every_channel_has_one_policy(self):
        bank = SmootherBank()
        for channel in Channel:
            raw = np.zeros(3) if channel.is_vector else 0.0
            bank(channel, raw)  # must not raise
        self.assertIs(Channel.PINCH.rate, Rate.FAST)
        self.assertIs(Channel.OPENNESS.rate, Rate.SLOW)
        self.assertIs(Channel.TENSION.rate, Rate.SLOW)

    def test_reset_all(self):
        bank = SmootherBank()
        bank(Channel.PINCH, 1.0)
        bank(Channel.GRIP, 1.0)
        bank(Channel.DEPTH, 1.0)
        bank.reset()
        for smoother in (bank.fast, bank.default, bank.slow):
            for channel in (Channel.PINCH, Channel.GRIP, Channel.DEPTH):
                self.assertIsNone(smoother.peek(channel))


if __name__ == '__main__':
    unittest.main()
