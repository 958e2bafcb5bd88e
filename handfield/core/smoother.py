"""
HandField Signal Conditioning Layer.
Exponential smoothing over a closed, typed set of metric channels.
"""

from enum import Enum
from typing import Dict, Optional

import numpy as np

from handfield.config import CONFIG


class Rate(Enum):
    FAST = "ALPHA_FAST"
    DEFAULT = "ALPHA_DEFAULT"
    SLOW = "ALPHA_SLOW"


class Channel(Enum):
    """
    Every smoothed metric, with its shape (scalar/vector) and its rate.
    A channel has exactly one smoothing policy.
    """
    # (name, is_vector, rate)
    DEPTH = ("depth", False, Rate.SLOW)
    POSITION = ("position", True, Rate.DEFAULT)
    VELOCITY = ("velocity", True, Rate.DEFAULT)

    THUMB_CURL = ("thumb_curl", False, Rate.DEFAULT)
    INDEX_CURL = ("index_curl", False, Rate.DEFAULT)
    MIDDLE_CURL = ("middle_curl", False, Rate.DEFAULT)
    RING_CURL = ("ring_curl", False, Rate.DEFAULT)
    PINKY_CURL = ("pinky_curl", False, Rate.DEFAULT)
    OPENNESS = ("openness", False, Rate.SLOW)

    PINCH = ("pinch", False, Rate.FAST)
    PINCH_POSITION = ("pinch_position", True, Rate.DEFAULT)
    SPREAD = ("spread", False, Rate.DEFAULT)

    PALM_NORMAL = ("palm_normal", True, Rate.DEFAULT)
    PALM_FACING = ("palm_facing", False, Rate.SLOW)

    POINT_DIRECTION = ("point_direction", True, Rate.DEFAULT)
    POINT_STRENGTH = ("point_strength", False, Rate.DEFAULT)
    GRIP = ("grip", False, Rate.DEFAULT)
    TENSION = ("tension", False, Rate.SLOW)
    EXPRESSIVENESS = ("expressiveness", False, Rate.DEFAULT)

    def __init__(self, label: str, is_vector: bool, rate: Rate):
        self.label = label
        self.is_vector = is_vector
        self.rate = rate


class Smoother:
    """
    EMA over named channels: smoothed = alpha * raw + (1 - alpha) * previous.
    The first observation of a channel passes through unchanged.
    """

    def __init__(self, rate: Rate, alpha: Optional[float] = None, config=None):
        cfg = config or CONFIG
        self.rate = rate
        self.alpha = float(alpha if alpha is not None else cfg[rate.value])
        if not 0.0 < self.alpha <= 1.0:
            raise ValueError(f"Smoothing factor must be in (0, 1], got {self.alpha}")
        self._scalars: Dict[Channel, float] = {}
        self._vectors: Dict[Channel, np.ndarray] = {}

    def _check(self, channel: Channel, vector: bool):
        if channel.is_vector != vector:
            kind = "vector" if channel.is_vector else "scalar"
            raise ValueError(f"{channel.name} is a {kind} channel")
        if channel.rate is not self.rate:
            raise ValueError(
                f"{channel.name} is smoothed at {channel.rate.name}, not {self.rate.name}")

    def smooth_scalar(self, channel: Channel, raw: float) -> float:
        self._check(channel, vector=False)
        raw = float(raw)
        prev = self._scalars.get(channel)
        smoothed = raw if prev is None else self.alpha * raw + (1.0 - self.alpha) * prev
        self._scalars[channel] = smoothed
        return smoothed

    def smooth_vector(self, channel: Channel, raw) -> np.ndarray:
        self._check(channel, vector=True)
        raw = np.array(raw, dtype=np.float64)
        prev = self._vectors.get(channel)
        smoothed = raw if prev is None else self.alpha * raw + (1.0 - self.alpha) * prev
        self._vectors[channel] = smoothed
        # Hand out a copy so callers cannot mutate the filter state
        return smoothed.copy()

    def peek(self, channel: Channel):
        """Last emitted value of a channel, or None if it has no history."""
        store = self._vectors if channel.is_vector else self._scalars
        value = store.get(channel)
        if value is None:
            return None
        return value.copy() if channel.is_vector else value

    def reset(self):
        self._scalars.clear()
        self._vectors.clear()


class SmootherBank:
    """The three smoothers the extractor uses, routed by each channel's rate."""

    def __init__(self, config=None):
        self.fast = Smoother(Rate.FAST, config=config)
        self.default = Smoother(Rate.DEFAULT, config=config)
        self.slow = Smoother(Rate.SLOW, config=config)
        self._by_rate = {
            Rate.FAST: self.fast,
            Rate.DEFAULT: self.default,
            Rate.SLOW: self.slow,
        }

    def __call__(self, channel: Channel, raw):
        smoother = self._by_rate[channel.rate]
        if channel.is_vector:
            return smoother.smooth_vector(channel, raw)
        return smoother.smooth_scalar(channel, raw)

    def reset(self):
        for smoother in self._by_rate.values():
            smoother.reset()
