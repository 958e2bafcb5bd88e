"""
HandField Force Pipeline.
========================

Every force is a pure function `(ctx, particles, target) -> new target`,
vectorized over all N particles. The hand forces are folded left to right
in the order of HAND_FORCES; that order is part of the instrument's feel
(expansion before attraction before vortex...).

A force whose triggering metric is below its threshold returns the
target untouched (same object), so an idle signal costs nothing.
"""

from dataclasses import dataclass
from functools import reduce
from typing import Callable, Dict, Sequence, Tuple

import numpy as np

from handfield.core.types import ContinuousHandMetrics


@dataclass(frozen=True, eq=False)
class FieldContext:
    """Per-frame inputs shared by every particle."""
    metrics: ContinuousHandMetrics
    time: float
    hand: np.ndarray        # (3,) hand position in scene units
    pinch: np.ndarray       # (3,) pinch point in scene units
    config: Dict
    rng: np.random.Generator


@dataclass(frozen=True, eq=False)
class ParticleState:
    """Read-only per-particle view for this frame."""
    positions: np.ndarray       # (N, 3)
    phases: np.ndarray          # (N,)
    seeds: np.ndarray           # (N, 3)
    indices: np.ndarray         # (N,)
    dist_to_hand: np.ndarray    # (N,)


Force = Callable[[FieldContext, ParticleState, np.ndarray], np.ndarray]


def _proximity(dist: np.ndarray, radius: float) -> np.ndarray:
    """1 at the hand, 0 at `radius` and beyond."""
    return np.clip(1.0 - dist / radius, 0.0, None)


# --- ALWAYS ON ---
def breathe(ctx: FieldContext, p: ParticleState, target: np.ndarray) -> np.ndarray:
    """Idle breathing; a tense hand stills it."""
    cfg = ctx.config
    breath = np.sin(ctx.time * cfg["BREATH_FREQ"] + p.phases) * cfg["BREATH_AMPLITUDE"]
    breath *= 1.0 - ctx.metrics.tension
    return target + p.seeds * breath[:, None]


# --- HAND FORCES (in pipeline order) ---
def expansion(ctx: FieldContext, p: ParticleState, target: np.ndarray) -> np.ndarray:
    """Openness scales the whole silhouette about the origin."""
    cfg = ctx.config
    factor = cfg["EXPAND_MIN"] + cfg["EXPAND_GAIN"] * ctx.metrics.openness
    radius = np.linalg.norm(target, axis=1)
    scale = np.where(radius > cfg["EXPAND_MIN_RADIUS"], factor, 1.0)
    return target * scale[:, None]


def pinch_attraction(ctx: FieldContext, p: ParticleState, target: np.ndarray) -> np.ndarray:
    cfg = ctx.config
    strength = ctx.metrics.pinch_strength
    if strength <= cfg["PINCH_THRESHOLD"]:
        return target

    dist = np.linalg.norm(p.positions - ctx.pinch, axis=1)
    pull = strength * cfg["PINCH_PULL"] / np.maximum(cfg["PINCH_MIN_DIST"], dist)
    mix = np.minimum(1.0, pull * cfg["PINCH_MIX"])[:, None]
    out = target * (1.0 - mix) + ctx.pinch * mix

    if strength > cfg["SPIRAL_THRESHOLD"]:
        angle = ctx.time * cfg["SPIRAL_SPEED"] + p.phases
        radius = np.where(dist < cfg["SPIRAL_RADIUS"], dist * cfg["SPIRAL_GAIN"] * strength, 0.0)
        out[:, 0] += np.cos(angle) * radius
        out[:, 2] += np.sin(angle) * radius
    return out


def vortex(ctx: FieldContext, p: ParticleState, target: np.ndarray) -> np.ndarray:
    """Grip spins nearby targets around the hand on the horizontal plane."""
    cfg = ctx.config
    grip = ctx.metrics.grip_strength
    if grip <= cfg["VORTEX_THRESHOLD"]:
        return target

    proximity = _proximity(p.dist_to_hand, cfg["VORTEX_RADIUS"])
    angle = ctx.time * grip * cfg["VORTEX_STRENGTH"] * proximity
    cos_a = np.cos(angle * cfg["VORTEX_TWIST"])
    sin_a = np.sin(angle * cfg["VORTEX_TWIST"])

    hx, hz = ctx.hand[0], ctx.hand[2]
    rel_x = target[:, 0] - hx
    rel_z = target[:, 2] - hz
    out = target.copy()
    out[:, 0] = hx + rel_x * cos_a - rel_z * sin_a
    out[:, 2] = hz + rel_x * sin_a + rel_z * cos_a
    out[:, 1] += np.sin(angle + p.phases) * proximity * grip * cfg["VORTEX_LIFT"]
    return out


def turbulence(ctx: FieldContext, p: ParticleState, target: np.ndarray) -> np.ndarray:
    cfg = ctx.config
    m = ctx.metrics
    amount = m.finger_spread * cfg["TURBULENCE_SPREAD"] + m.energy * cfg["TURBULENCE_ENERGY"]
    if amount <= cfg["TURBULENCE_THRESHOLD"]:
        return target

    freq = cfg["TURBULENCE_FREQ"] + m.energy * cfg["TURBULENCE_FREQ_ENERGY"]
    phase = p.phases * 5.0
    noise = np.stack([
        np.sin(ctx.time * freq + phase),
        np.cos(ctx.time * freq * 1.1 + phase),
        np.sin(ctx.time * freq * 0.9 + phase),
    ], axis=-1)
    return target + noise * p.seeds * amount


def drift(ctx: FieldContext, p: ParticleState, target: np.ndarray) -> np.ndarray:
    """Palm tilt pushes the whole field sideways, palm pitch up/down."""
    cfg = ctx.config
    m = ctx.metrics
    dx = m.palm_tilt * m.expressiveness * cfg["DRIFT_X"]
    dy = m.palm_normal.y * m.expressiveness * cfg["DRIFT_Y"]
    if abs(dx) <= cfg["EPSILON"] and abs(dy) <= cfg["EPSILON"]:
        return target
    return target + np.array([dx, dy, 0.0])


def pointing_beam(ctx: FieldContext, p: ParticleState, target: np.ndarray) -> np.ndarray:
    cfg = ctx.config
    m = ctx.metrics
    if m.point_strength <= cfg["BEAM_THRESHOLD"]:
        return target

    proximity = _proximity(p.dist_to_hand, cfg["BEAM_RADIUS"])
    if not np.any(proximity > 0.0):
        return target

    # Index modulo spreads particles along the beam instead of bunching them
    slots = cfg["BEAM_SLOTS"]
    progress = (p.indices % slots) / slots
    reach = cfg["BEAM_LENGTH"] * m.point_strength * progress
    beam = ctx.hand + m.point_direction.as_array() * reach[:, None]

    mix = (proximity * m.point_strength * cfg["BEAM_MIX"])[:, None]
    out = target * (1.0 - mix) + beam * mix
    scatter = np.where(proximity > 0.0, progress * cfg["BEAM_SCATTER"], 0.0)
    out[:, 0] += p.seeds[:, 0] * scatter
    out[:, 1] += p.seeds[:, 1] * scatter
    return out


def finger_wave(ctx: FieldContext, p: ParticleState, target: np.ndarray) -> np.ndarray:
    """Curled fingers ripple the field; a fully open hand is calm."""
    cfg = ctx.config
    m = ctx.metrics
    closed = 1.0 - m.openness
    curls = (m.index_curl, m.middle_curl, m.ring_curl, m.pinky_curl)
    if closed <= cfg["EPSILON"] or max(curls) <= cfg["EPSILON"]:
        return target

    wave = np.zeros(len(target))
    for curl, (freq, phase_mul) in zip(curls, cfg["WAVE_FINGERS"]):
        wave += curl * np.sin(ctx.time * freq + p.phases * phase_mul)
    out = target.copy()
    out[:, 1] += wave * cfg["WAVE_GAIN"] * closed
    return out


def velocity_trail(ctx: FieldContext, p: ParticleState, target: np.ndarray) -> np.ndarray:
    cfg = ctx.config
    m = ctx.metrics
    if m.speed <= cfg["TRAIL_THRESHOLD"]:
        return target

    strength = m.speed * _proximity(p.dist_to_hand, cfg["TRAIL_RADIUS"]) * cfg["TRAIL_GAIN"]
    out = target.copy()
    out[:, 0] += m.velocity.x * strength
    out[:, 1] += m.velocity.y * strength
    return out


def tension_jitter(ctx: FieldContext, p: ParticleState, target: np.ndarray) -> np.ndarray:
    cfg = ctx.config
    m = ctx.metrics
    if m.tension <= cfg["JITTER_THRESHOLD"]:
        return target

    amount = (m.tension - 0.5) * 2.0 * m.energy
    if amount <= 0.0:
        return target
    noise = ctx.rng.random(target.shape) - 0.5
    return target + noise * amount * cfg["JITTER_GAIN"]


HAND_FORCES: Tuple[Tuple[str, Force], ...] = (
    ("expansion", expansion),
    ("pinch_attraction", pinch_attraction),
    ("vortex", vortex),
    ("turbulence", turbulence),
    ("drift", drift),
    ("pointing_beam", pointing_beam),
    ("finger_wave", finger_wave),
    ("velocity_trail", velocity_trail),
    ("tension_jitter", tension_jitter),
)


def apply_forces(ctx: FieldContext, particles: ParticleState, target: np.ndarray,
                 pipeline: Sequence[Tuple[str, Force]] = HAND_FORCES) -> np.ndarray:
    """Folds the pipeline over the running target."""
    return reduce(lambda running, entry: entry[1](ctx, particles, running), pipeline, target)
