"""
HandField Shape Geometry.
Pure target-point samplers: shape -> (N, 3) float32 array of scene points.
"""

import numpy as np

from handfield.config import CONFIG
from handfield.core.types import ParticleShape


def _ball(rng: np.random.Generator, n: int, radius: float) -> np.ndarray:
    """Uniform volume sampling (cube-root radius avoids centre clustering)."""
    theta = rng.uniform(0.0, 2.0 * np.pi, n)
    phi = np.arccos(rng.uniform(-1.0, 1.0, n))
    r = radius * np.cbrt(rng.random(n))
    return np.stack([
        r * np.sin(phi) * np.cos(theta),
        r * np.sin(phi) * np.sin(theta),
        r * np.cos(phi),
    ], axis=-1)


def _signed_cube(rng: np.random.Generator, n: int) -> np.ndarray:
    """Scatter biased towards 0: |u|^3 with a random sign, in [-0.5, 0.5]."""
    sign = np.where(rng.random(n) < 0.5, 1.0, -1.0)
    return rng.random(n) ** 3 * sign * 0.5


class GeometrySampler:
    """
    Stateless apart from its random generator.

    Example:
        sampler = GeometrySampler(rng=np.random.default_rng(7))
        targets = sampler.sample(ParticleShape.GALAXY, 15000)
    """

    def __init__(self, radius: float = None, rng: np.random.Generator = None):
        self.radius = float(radius if radius is not None else CONFIG["SHAPE_RADIUS"])
        self.rng = rng if rng is not None else np.random.default_rng()
        self._samplers = {
            ParticleShape.SPHERE: self._sphere,
            ParticleShape.HEART: self._heart,
            ParticleShape.GALAXY: self._galaxy,
            ParticleShape.FLOWER: self._flower,
            ParticleShape.ENTITY: self._entity,
        }

    def sample(self, shape: ParticleShape, count: int) -> np.ndarray:
        if count < 1:
            raise ValueError(f"Particle count must be positive, got {count}")
        try:
            sampler = self._samplers[shape]
        except KeyError:
            raise ValueError(f"Unsupported shape: {shape!r}") from None
        return sampler(int(count)).astype(np.float32)

    def _sphere(self, n: int) -> np.ndarray:
        return _ball(self.rng, n, self.radius)

    def _heart(self, n: int) -> np.ndarray:
        t = self.rng.uniform(0.0, 2.0 * np.pi, n)
        # Cube root fills the inside instead of only the outline
        scale = 0.25 * np.cbrt(self.rng.random(n))
        hx = 16.0 * np.sin(t) ** 3
        hy = 13.0 * np.cos(t) - 5.0 * np.cos(2 * t) - 2.0 * np.cos(3 * t) - np.cos(4 * t)
        z = (self.rng.random(n) - 0.5) * 2.0 * scale * 5.0
        return np.stack([hx * scale, hy * scale, z], axis=-1)

    def _galaxy(self, n: int, arms: int = 5) -> np.ndarray:
        i = np.arange(n)
        spin = i / n * arms
        branch = (i % arms) / arms * 2.0 * np.pi
        radius = self.rng.random(n) * self.radius * 1.5
        angle = branch + spin * 3.0
        return np.stack([
            np.cos(angle) * radius + _signed_cube(self.rng, n),
            _signed_cube(self.rng, n) * 2.0,  # flattened disc
            np.sin(angle) * radius + _signed_cube(self.rng, n),
        ], axis=-1)

    def _flower(self, n: int) -> np.ndarray:
        # Phyllotaxis: golden-angle steps down a sphere
        golden = np.pi * (3.0 - np.sqrt(5.0))
        i = np.arange(n)
        y = 1.0 - (i / max(1, n - 1)) * 2.0
        ring = np.sqrt(np.clip(1.0 - y * y, 0.0, None)) * self.radius
        theta = golden * i
        warp = 1.0 + np.sin(theta * 5.0) * 0.5 * 0.2  # petals
        return np.stack([
            np.cos(theta) * ring * warp,
            y * self.radius,
            np.sin(theta) * ring * warp,
        ], axis=-1)

    def _entity(self, n: int) -> np.ndarray:
        """Abstract meditator: head, cylinder body, flattened base."""
        pts = np.empty((n, 3))
        part = self.rng.random(n)
        head = part < 0.2
        body = (part >= 0.2) & (part < 0.6)
        base = part >= 0.6

        k = int(head.sum())
        head_pts = _ball(self.rng, k, 0.8)
        # Head is a shell: push the volume samples onto the surface
        norms = np.linalg.norm(head_pts, axis=1, keepdims=True)
        head_pts = head_pts / np.maximum(norms, 1e-9) * 0.8
        head_pts[:, 1] += 2.5
        pts[head] = head_pts

        k = int(body.sum())
        r = 1.2 * np.sqrt(self.rng.random(k))
        theta = self.rng.uniform(0.0, 2.0 * np.pi, k)
        pts[body] = np.stack([
            r * np.cos(theta),
            (self.rng.random(k) - 0.5) * 2.5 + 1.0,
            r * np.sin(theta),
        ], axis=-1)

        k = int(base.sum())
        r = 2.5 * np.sqrt(self.rng.random(k))
        theta = self.rng.uniform(0.0, 2.0 * np.pi, k)
        pts[base] = np.stack([
            r * np.cos(theta),
            (self.rng.random(k) - 0.5) * 0.8 - 0.5,
            r * np.sin(theta),
        ], axis=-1)
        return pts
