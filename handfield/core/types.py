"""
HandField Types.
Central definition of Data Contracts to prevent circular imports.
"""
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Tuple

import numpy as np


# --- GEOMETRY TYPES ---
@dataclass(frozen=True)
class Vec3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_array(cls, arr) -> "Vec3":
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


class HandLandmark(IntEnum):
    """MediaPipe Hands joint indices (wrist + 4 joints per finger)."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


NUM_LANDMARKS = 21


class ParticleShape(Enum):
    SPHERE = "Sphere"
    HEART = "Heart"
    GALAXY = "Galaxy"
    FLOWER = "Flower"
    ENTITY = "Entity"

    @classmethod
    def from_label(cls, raw_label: str) -> "ParticleShape":
        if not raw_label or not isinstance(raw_label, str):
            raise ValueError(f"Invalid shape label: {raw_label!r}")
        clean = raw_label.strip().lower()
        for member in cls:
            if member.value.lower() == clean or member.name.lower() == clean:
                return member
        raise ValueError(f"Unknown shape: {raw_label!r}")


# --- METRICS TYPES ---
@dataclass(frozen=True)
class ContinuousHandMetrics:
    """
    Read-only snapshot of one tracking tick.

    Bounded scalars live in [0, 1]. Position x/y live in [-1, 1] and
    position z (== depth) in [-DEPTH_LIMIT, DEPTH_LIMIT]; negative depth
    means the hand is closer to the camera than the reference distance.
    """
    is_present: bool = False
    confidence: float = 0.0

    position: Vec3 = Vec3()
    velocity: Vec3 = Vec3()
    speed: float = 0.0

    openness: float = 0.6
    pinch_strength: float = 0.0
    pinch_position: Vec3 = Vec3()
    finger_spread: float = 0.0

    palm_normal: Vec3 = Vec3(0.0, 0.0, 1.0)
    palm_facing_camera: int = 1
    palm_tilt: float = 0.0

    thumb_curl: float = 0.0
    index_curl: float = 0.0
    middle_curl: float = 0.0
    ring_curl: float = 0.0
    pinky_curl: float = 0.0

    point_direction: Vec3 = Vec3(0.0, -1.0, 0.0)
    point_strength: float = 0.0

    grip_strength: float = 0.0

    energy: float = 0.0
    tension: float = 0.0
    expressiveness: float = 0.0

    depth: float = 0.0
    hand_size: float = 0.0

    landmarks: Tuple[Vec3, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls, energy: float = 0.0, openness: float = 0.6) -> "ContinuousHandMetrics":
        """Canonical 'no hand' value. Energy is carried so it can fade out."""
        return cls(energy=energy, openness=openness)

    @property
    def finger_curls(self) -> Tuple[float, float, float, float, float]:
        return (self.thumb_curl, self.index_curl, self.middle_curl,
                self.ring_curl, self.pinky_curl)


# --- SIMULATION TYPES ---
@dataclass(frozen=True)
class FieldFrame:
    """Global (non per-particle) render state produced by one simulator step."""
    time: float
    rotation_y: float
    rotation_z: float
    point_size: float
    opacity: float
    light_intensity: float
    flash_intensity: float
    transition_progress: float
    is_transitioning: bool
    color: Tuple[float, float, float]
