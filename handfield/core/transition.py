"""
HandField Shape Transition State.
Idle | Transitioning, modelled as explicit variants so snapshot data only
exists while a morph is running.
"""
import logging
import math
from dataclasses import dataclass, replace
from typing import Optional, Union

import numpy as np

from handfield.config import CONFIG

logger = logging.getLogger(__name__)


def ease_in_out_quart(t: float) -> float:
    t = min(1.0, max(0.0, t))
    if t < 0.5:
        return 8.0 * t ** 4
    return 1.0 - (-2.0 * t + 2.0) ** 4 / 2.0


@dataclass(frozen=True)
class Idle:
    progress: float = 1.0


@dataclass(frozen=True, eq=False)
class Transitioning:
    started_at: float
    previous_targets: np.ndarray   # (N, 3) snapshot of the targets being left
    impulses: np.ndarray           # (N, 3) radial ejection vectors
    progress: float = 0.0

    @property
    def eased(self) -> float:
        return ease_in_out_quart(self.progress)


TransitionState = Union[Idle, Transitioning]


class TransitionMachine:
    """
    Owns the morph timeline and the (independent) flash timeline.

    start()   - Idle/Transitioning -> Transitioning (fresh snapshot + impulses)
    advance() - updates progress; Transitioning -> Idle once progress hits 1
    """

    def __init__(self, rng: np.random.Generator, config=None):
        self.cfg = config or CONFIG
        self.rng = rng
        self.state: TransitionState = Idle()
        self._flash_started_at: Optional[float] = None

    @property
    def is_transitioning(self) -> bool:
        return isinstance(self.state, Transitioning)

    @property
    def progress(self) -> float:
        return self.state.progress

    def start(self, previous_targets: np.ndarray, now: float) -> Transitioning:
        n = len(previous_targets)
        self.state = Transitioning(
            started_at=now,
            previous_targets=np.array(previous_targets, dtype=np.float32, copy=True),
            impulses=self._ejection_impulses(n),
        )
        self._flash_started_at = now
        logger.debug("Transition started at t=%.3f for %d particles", now, n)
        return self.state

    def advance(self, now: float) -> TransitionState:
        if isinstance(self.state, Transitioning):
            elapsed = now - self.state.started_at
            duration = self.cfg["TRANSITION_DURATION"]
            progress = min(1.0, max(0.0, elapsed / duration))
            # The field clock is a running float sum; absorb its rounding at the end
            if elapsed >= duration - self.cfg["EPSILON"]:
                self.state = Idle()
                logger.debug("Transition complete at t=%.3f", now)
            else:
                self.state = replace(self.state, progress=progress)
        return self.state

    def elapsed(self, now: float) -> float:
        if isinstance(self.state, Transitioning):
            return max(0.0, now - self.state.started_at)
        return 0.0

    def ejection_decay(self, now: float) -> float:
        """Impulse envelope: linear ramp-down x exponential ramp-up, zero after the window."""
        if not isinstance(self.state, Transitioning):
            return 0.0
        t = self.elapsed(now)
        ramp_down = max(0.0, 1.0 - t / self.cfg["EJECTION_WINDOW"])
        ramp_up = 1.0 - math.exp(-t * self.cfg["EJECTION_RISE"])
        return ramp_down * ramp_up

    def flash_intensity(self, now: float) -> float:
        if self._flash_started_at is None:
            return 0.0
        flash = 1.0 - (now - self._flash_started_at) / self.cfg["FLASH_WINDOW"]
        if flash <= 0.0:
            self._flash_started_at = None
            return 0.0
        return min(1.0, flash)

    def _ejection_impulses(self, n: int) -> np.ndarray:
        theta = self.rng.uniform(0.0, 2.0 * np.pi, n)
        phi = np.arccos(self.rng.uniform(-1.0, 1.0, n))
        magnitude = self.rng.uniform(self.cfg["EJECTION_MIN"], self.cfg["EJECTION_MAX"], n)
        return np.stack([
            magnitude * np.sin(phi) * np.cos(theta),
            magnitude * np.cos(phi),
            magnitude * np.sin(phi) * np.sin(theta),
        ], axis=-1).astype(np.float32)
