"""
HandField Particle Simulator.
============================

Per render frame, for all N particles at once:
1. Nominal target from the active shape (morphed while Transitioning).
2. Breathing (always on).
3. Hand forces folded in pipeline order (only while a hand is present).
4. Damped spring: v += (target - x) * lerp; v *= damping; x += v.

Bounded targets plus damping < 1 keep every particle bounded for any
combination of metrics; nothing here raises during normal operation.
"""

import colorsys
import logging
from typing import Optional, Sequence

import numpy as np

from handfield.config import CONFIG, TWO_PI
from handfield.core import forces
from handfield.core.geometry import GeometrySampler
from handfield.core.interfaces import IMetricsConsumer
from handfield.core.transition import TransitionMachine, Transitioning
from handfield.core.types import ContinuousHandMetrics, FieldFrame, ParticleShape

logger = logging.getLogger(__name__)


class ParticleField(IMetricsConsumer):
    """
    Owns the particle arrays and the shape-transition machine.

    Attributes:
        positions (np.ndarray): (N, 3) float32, mutated in place every step.
        velocities (np.ndarray): (N, 3) float32.
        phases (np.ndarray): (N,) fixed per-particle oscillation offsets.
        seeds (np.ndarray): (N, 3) fixed per-particle response scales in [-1, 1].
    """

    def __init__(self, count: Optional[int] = None, shape: ParticleShape = ParticleShape.GALAXY,
                 color: Optional[Sequence[float]] = None, config=None,
                 rng: Optional[np.random.Generator] = None):
        self.cfg = config or CONFIG
        n = int(count if count is not None else self.cfg["PARTICLE_COUNT"])
        if n < 1:
            raise ValueError(f"Particle budget must be at least 1, got {n}")

        self.rng = rng if rng is not None else np.random.default_rng(self.cfg["RANDOM_SEED"])
        self.sampler = GeometrySampler(radius=self.cfg["SHAPE_RADIUS"], rng=self.rng)

        # Allocated once; particles are re-targeted, never re-created
        spread = self.cfg["INITIAL_SPREAD"]
        self.positions = ((self.rng.random((n, 3)) - 0.5) * spread).astype(np.float32)
        self.velocities = np.zeros((n, 3), dtype=np.float32)
        self.phases = self.rng.uniform(0.0, TWO_PI, n)
        self.seeds = self.rng.uniform(-1.0, 1.0, (n, 3))
        self.indices = np.arange(n)

        self.shape = shape
        self.targets = self.sampler.sample(shape, n)
        self.color = self._validate_color(color if color is not None else self.cfg["BASE_COLORS"][0])
        self.transition = TransitionMachine(self.rng, config=self.cfg)

        self.time = 0.0
        self._spin = 0.0
        self._metrics = ContinuousHandMetrics.empty()
        logger.info("Particle field ready: %d particles, shape %s", n, shape.value)

    # --- INPUTS ---
    @property
    def count(self) -> int:
        return len(self.positions)

    def on_metrics(self, metrics: ContinuousHandMetrics) -> None:
        """Latest tracking snapshot; used by the next step() without explicit metrics."""
        self._metrics = metrics

    def set_shape(self, shape: ParticleShape) -> bool:
        """Re-targets the field. Returns True when a transition was started."""
        if shape == self.shape:
            return False
        snapshot = self._morphed_targets()
        self.targets = self.sampler.sample(shape, self.count)
        logger.info("Shape change %s -> %s", self.shape.value, shape.value)
        self.shape = shape
        self.transition.start(snapshot, self.time)
        return True

    def set_color(self, color: Sequence[float]) -> None:
        self.color = self._validate_color(color)

    @staticmethod
    def _validate_color(color: Sequence[float]):
        rgb = tuple(float(c) for c in color)
        if len(rgb) != 3:
            raise ValueError(f"Color must be an RGB triple, got {color!r}")
        return tuple(min(1.0, max(0.0, c)) for c in rgb)

    @property
    def transition_progress(self) -> float:
        return self.transition.progress

    @property
    def is_transitioning(self) -> bool:
        return self.transition.is_transitioning

    # --- SIMULATION ---
    def step(self, dt: float, metrics: Optional[ContinuousHandMetrics] = None) -> FieldFrame:
        """Advances the field by `dt` seconds and returns the global render state."""
        cfg = self.cfg
        m = metrics if metrics is not None else self._metrics
        dt = max(0.0, float(dt)) if np.isfinite(dt) else 0.0
        self.time += dt
        self.transition.advance(self.time)

        target = self._transition_targets()

        hand = self._to_scene(m.position.as_array())
        pinch = self._to_scene(m.pinch_position.as_array())
        positions = self.positions.astype(np.float64)
        particles = forces.ParticleState(
            positions=positions,
            phases=self.phases,
            seeds=self.seeds,
            indices=self.indices,
            dist_to_hand=np.linalg.norm(positions - hand, axis=1),
        )
        ctx = forces.FieldContext(metrics=m, time=self.time, hand=hand, pinch=pinch,
                                  config=cfg, rng=self.rng)

        target = forces.breathe(ctx, particles, target)
        if m.is_present:
            target = forces.apply_forces(ctx, particles, target)

        # Spring integration
        lerp = cfg["LERP_PRESENT"] if m.is_present else cfg["LERP_ABSENT"]
        if self.transition.is_transitioning:
            lerp = max(lerp, cfg["LERP_TRANSITION"])
        lerp += m.expressiveness * cfg["LERP_EXPRESSIVE"]
        damping = (cfg["DAMPING_BASE"] + m.openness * cfg["DAMPING_OPENNESS"]
                   - m.grip_strength * cfg["DAMPING_GRIP"] - m.energy * cfg["DAMPING_ENERGY"])
        damping = min(cfg["DAMPING_MAX"], max(cfg["DAMPING_MIN"], damping))

        self.velocities += ((target - positions) * lerp).astype(np.float32)
        self.velocities *= np.float32(damping)
        self.positions += self.velocities

        return self._frame(m, dt)

    def _to_scene(self, v: np.ndarray) -> np.ndarray:
        # Negative depth = closer to the camera = towards the viewer (+z)
        cfg = self.cfg
        return np.array([v[0] * cfg["HAND_SCALE"], v[1] * cfg["HAND_SCALE"],
                         -v[2] * cfg["HAND_DEPTH_SCALE"]])

    def _morphed_targets(self) -> np.ndarray:
        """Shape targets as currently blended (no ejection / swirl)."""
        targets = self.targets.astype(np.float64)
        state = self.transition.state
        if isinstance(state, Transitioning):
            prev = state.previous_targets.astype(np.float64)
            targets = prev + (targets - prev) * state.eased
        return targets

    def _transition_targets(self) -> np.ndarray:
        target = self._morphed_targets()
        state = self.transition.state
        if not isinstance(state, Transitioning):
            return target

        cfg = self.cfg
        target += state.impulses * self.transition.ejection_decay(self.time)
        swirl_angle = self.phases + self.time * cfg["SWIRL_SPEED"]
        swirl = (1.0 - state.progress) * cfg["SWIRL_GAIN"]
        target[:, 0] += np.cos(swirl_angle) * self.seeds[:, 0] * swirl
        target[:, 2] += np.sin(swirl_angle) * self.seeds[:, 2] * swirl
        return target

    # --- GLOBAL SIDE EFFECTS ---
    def _frame(self, m: ContinuousHandMetrics, dt: float) -> FieldFrame:
        cfg = self.cfg
        self._spin += dt * (cfg["SPIN_BASE"] + cfg["SPIN_GRIP"] * m.grip_strength)

        state = self.transition.state
        wobble = 0.0
        if isinstance(state, Transitioning):
            elapsed = self.transition.elapsed(self.time)
            wobble = np.sin(elapsed * cfg["WOBBLE_FREQ"]) * cfg["WOBBLE_GAIN"] * (1.0 - state.eased)

        flash = self.transition.flash_intensity(self.time)
        point_size = (cfg["POINT_SIZE"] + m.energy * cfg["POINT_SIZE_ENERGY"]
                      + (1.0 - m.openness) * cfg["POINT_SIZE_CLOSED"] + flash * cfg["POINT_SIZE_FLASH"])
        opacity = min(1.0, cfg["OPACITY_BASE"] + m.energy * cfg["OPACITY_ENERGY"]
                      + flash * cfg["OPACITY_FLASH"])

        return FieldFrame(
            time=self.time,
            rotation_y=float(self._spin + wobble),
            rotation_z=float(self.time * cfg["ROLL_RATE"] + m.palm_tilt * cfg["ROLL_TILT"]),
            point_size=float(point_size),
            opacity=float(opacity),
            light_intensity=float(flash * cfg["LIGHT_PEAK"]),
            flash_intensity=float(flash),
            transition_progress=float(state.progress),
            is_transitioning=isinstance(state, Transitioning),
            color=self._tint(m),
        )

    def _tint(self, m: ContinuousHandMetrics):
        """Energy saturates, pinch warms, openness cools the base colour."""
        if not m.is_present:
            return self.color
        cfg = self.cfg
        h, l, s = colorsys.rgb_to_hls(*self.color)
        s = min(1.0, s + m.energy * cfg["TINT_SATURATION"])
        h = (h + m.pinch_strength * cfg["TINT_PINCH_HUE"] - m.openness * cfg["TINT_OPEN_HUE"] + 1.0) % 1.0
        return tuple(float(c) for c in colorsys.hls_to_rgb(h, l, s))
