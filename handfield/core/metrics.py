"""
HandField Metrics Extractor.
============================

Maps one 21-joint landmark frame to one ContinuousHandMetrics snapshot.

Instead of discrete gestures the hand is read like an instrument: every
finger position moves a continuous, smoothed control signal. Each signal
goes through exactly one smoother (see smoother.Channel), picked for its
latency / stability trade-off:
* FAST    - pinch (must feel immediate).
* DEFAULT - per-frame geometry (curls, spread, pointing, grip...).
* SLOW    - openness, tension, depth, palm sign (must not flicker).
"""

import logging
import time
from typing import Any, Optional

import numpy as np

from handfield.config import CONFIG
from handfield.core.smoother import Channel, SmootherBank
from handfield.core.types import ContinuousHandMetrics, HandLandmark as L, Vec3
from handfield.hand_utils import landmarks_to_array, to_display_space

logger = logging.getLogger(__name__)

# (MCP, PIP, TIP) for the four long fingers, in curl order
FINGER_JOINTS = (
    (L.INDEX_MCP, L.INDEX_PIP, L.INDEX_TIP),
    (L.MIDDLE_MCP, L.MIDDLE_PIP, L.MIDDLE_TIP),
    (L.RING_MCP, L.RING_PIP, L.RING_TIP),
    (L.PINKY_MCP, L.PINKY_PIP, L.PINKY_TIP),
)
CURL_CHANNELS = (Channel.INDEX_CURL, Channel.MIDDLE_CURL, Channel.RING_CURL, Channel.PINKY_CURL)
SPREAD_PAIRS = ((L.INDEX_TIP, L.MIDDLE_TIP), (L.MIDDLE_TIP, L.RING_TIP), (L.RING_TIP, L.PINKY_TIP))


def _unit(value: float) -> float:
    return float(min(1.0, max(0.0, value)))


def _band(value: float, zero_at: float, one_at: float) -> float:
    """Linear map of `value` so that zero_at -> 0 and one_at -> 1, clamped."""
    return _unit((value - zero_at) / (one_at - zero_at))


def _normalize(v: np.ndarray, fallback, eps: float) -> np.ndarray:
    length = float(np.linalg.norm(v))
    if length < eps:
        return np.asarray(fallback, dtype=np.float64)
    return v / length


class HandMetricsExtractor:
    """
    Owns three smoothers plus the velocity / energy accumulator state.

    Call `extract()` once per tracking tick and `reset()` whenever the
    tracking session restarts.
    """

    def __init__(self, config=None):
        self.cfg = config or CONFIG
        self.smooth = SmootherBank(config=self.cfg)
        self.energy = 0.0
        self._last_position: Optional[np.ndarray] = None
        self._last_time: Optional[float] = None
        self._hand_present = False

    # --- LIFECYCLE ---
    def reset(self):
        """Discards smoother history and energy (tracking session restart)."""
        self.smooth.reset()
        self.energy = 0.0
        self._last_position = None
        self._last_time = None
        self._hand_present = False
        logger.info("Metrics extractor reset")

    def _elapsed(self, dt: Optional[float]) -> float:
        now = time.perf_counter()
        if dt is None:
            dt = (now - self._last_time) if self._last_time is not None else self.cfg["NOMINAL_DT"]
        self._last_time = now
        if not np.isfinite(dt) or dt <= 0:
            dt = self.cfg["NOMINAL_DT"]
        return max(float(dt), self.cfg["MIN_DT"])

    def _drop_hand(self):
        # Smoother history is stale once the stream breaks; energy is kept so it fades out.
        if self._hand_present:
            logger.debug("Hand lost, clearing smoother history (energy %.3f kept)", self.energy)
        self.smooth.reset()
        self._last_position = None
        self._hand_present = False

    # --- MAIN ENTRY ---
    def extract(self, raw_landmarks: Any, dt: Optional[float] = None,
                confidence: Optional[float] = None) -> ContinuousHandMetrics:
        """
        Pipeline: Validate -> Depth -> Motion -> Curls -> Pinch/Spread -> Palm -> Composites.

        Args:
            raw_landmarks: 21-joint frame (MediaPipe object, objects with x/y/z,
                or numbers), or None when no hand is tracked.
            dt: Seconds since the previous call. Measured when omitted.
            confidence: Optional tracker score for this hand.
        """
        cfg = self.cfg
        dt = self._elapsed(dt)
        eps = cfg["EPSILON"]

        # 1. Energy fades every tick, hand or not
        self.energy *= cfg["ENERGY_DECAY"] ** (dt / cfg["ENERGY_TICK"])

        lm = landmarks_to_array(raw_landmarks)
        if lm is None:
            self._drop_hand()
            return ContinuousHandMetrics.empty(energy=self.energy,
                                               openness=cfg["NEUTRAL_OPENNESS"])
        if not self._hand_present:
            logger.debug("Hand acquired")
        self._hand_present = True

        wrist = lm[L.WRIST]
        display = to_display_space(lm)

        # 2. Depth from apparent hand size (MediaPipe z is wrist-relative)
        hand_size = float(np.linalg.norm(lm[L.MIDDLE_MCP] - wrist))
        raw_depth = (cfg["REF_HAND_SIZE"] / max(cfg["MIN_HAND_SIZE"], hand_size) - 1.0) * cfg["DEPTH_SCALE"]
        limit = cfg["DEPTH_LIMIT"]
        depth = self.smooth(Channel.DEPTH, float(np.clip(raw_depth, -limit, limit)))

        # 3. Position & velocity
        position = self.smooth(Channel.POSITION, [display[L.WRIST, 0], display[L.WRIST, 1], depth])
        if self._last_position is None:
            raw_velocity = np.zeros(3)
        else:
            raw_velocity = (position - self._last_position) / dt
        v_lim = cfg["VELOCITY_LIMIT"]
        velocity = self.smooth(Channel.VELOCITY, np.clip(raw_velocity, -v_lim, v_lim))
        # Z excluded: size-based depth is too noisy to drive speed
        speed = _unit(np.hypot(velocity[0], velocity[1]) / cfg["SPEED_SCALE"])
        self._last_position = position

        self.energy = _unit(self.energy + speed * cfg["ENERGY_GAIN"])

        # 4. Finger curls
        thumb_raw, finger_raw = self._finger_curls(lm)
        thumb_curl = _unit(self.smooth(Channel.THUMB_CURL, thumb_raw))
        curls = [_unit(self.smooth(ch, raw)) for ch, raw in zip(CURL_CHANNELS, finger_raw)]
        index_curl, middle_curl, ring_curl, pinky_curl = curls
        mean_curl = float(np.mean(curls))

        # Thumb left out: its curl is geometrically the noisiest
        openness = _unit(self.smooth(Channel.OPENNESS, 1.0 - mean_curl))

        # 5. Pinch
        thumb_tip, index_tip = lm[L.THUMB_TIP], lm[L.INDEX_TIP]
        pinch_dist = float(np.linalg.norm(thumb_tip - index_tip))
        raw_pinch = 1.0 - _band(pinch_dist, cfg["PINCH_NEAR"], cfg["PINCH_FAR"])
        pinch = _unit(self.smooth(Channel.PINCH, raw_pinch))

        mid = (display[L.THUMB_TIP] + display[L.INDEX_TIP]) / 2.0
        pinch_z = np.clip(depth + mid[2] * cfg["LANDMARK_Z_SCALE"], -limit, limit)
        pinch_position = self.smooth(Channel.PINCH_POSITION, [mid[0], mid[1], pinch_z])

        # 6. Spread
        gaps = [np.linalg.norm(lm[a] - lm[b]) for a, b in SPREAD_PAIRS]
        spread = _unit(self.smooth(Channel.SPREAD,
                                   _band(float(np.mean(gaps)), cfg["SPREAD_NEAR"], cfg["SPREAD_FAR"])))

        # 7. Palm orientation
        normal = self._palm_normal(lm, eps)
        palm_normal = _normalize(self.smooth(Channel.PALM_NORMAL, normal), (0.0, 0.0, 1.0), eps)
        facing = self.smooth(Channel.PALM_FACING, 1.0 if normal[2] > 0 else -1.0)
        palm_facing = 1 if facing >= 0 else -1
        palm_tilt = float(palm_normal[0])

        # 8. Pointing (screen-space y is up)
        direction = lm[L.INDEX_TIP] - lm[L.INDEX_MCP]
        direction[1] = -direction[1]
        direction = _normalize(direction, (0.0, -1.0, 0.0), eps)
        point_direction = _normalize(self.smooth(Channel.POINT_DIRECTION, direction),
                                     (0.0, -1.0, 0.0), eps)
        raw_point = (1.0 - index_curl) * (middle_curl + ring_curl + pinky_curl) / 3.0
        point_strength = _unit(self.smooth(Channel.POINT_STRENGTH, raw_point))

        # 9. Grip: curled fingers only count when not pinching
        raw_grip = mean_curl * (1.0 - cfg["GRIP_PINCH_RELIEF"] * raw_pinch)
        grip = _unit(self.smooth(Channel.GRIP, raw_grip))

        # 10. Composites
        raw_tension = max(pinch, grip, abs(openness - 0.5) * 2.0)
        tension = _unit(self.smooth(Channel.TENSION, raw_tension))

        raw_expr = min(1.0, abs(openness - cfg["NEUTRAL_OPENNESS"])
                       + 0.3 * pinch + 0.3 * point_strength + 0.4 * speed)
        expressiveness = _unit(self.smooth(Channel.EXPRESSIVENESS, raw_expr))

        # 11. Skeleton in display space, z as depth + wrist-relative offset
        skeleton = display.copy()
        skeleton[:, 2] = np.clip(depth + lm[:, 2] * cfg["LANDMARK_Z_SCALE"], -limit, limit)

        if confidence is None:
            confidence = cfg["CONFIDENCE"]

        return ContinuousHandMetrics(
            is_present=True,
            confidence=_unit(confidence),
            position=Vec3.from_array(position),
            velocity=Vec3.from_array(velocity),
            speed=speed,
            openness=openness,
            pinch_strength=pinch,
            pinch_position=Vec3.from_array(pinch_position),
            finger_spread=spread,
            palm_normal=Vec3.from_array(palm_normal),
            palm_facing_camera=palm_facing,
            palm_tilt=palm_tilt,
            thumb_curl=thumb_curl,
            index_curl=index_curl,
            middle_curl=middle_curl,
            ring_curl=ring_curl,
            pinky_curl=pinky_curl,
            point_direction=Vec3.from_array(point_direction),
            point_strength=point_strength,
            grip_strength=grip,
            energy=self.energy,
            tension=tension,
            expressiveness=expressiveness,
            depth=depth,
            hand_size=hand_size,
            landmarks=tuple(Vec3.from_array(row) for row in skeleton),
        )

    # --- GEOMETRY ---
    def _finger_curls(self, lm: np.ndarray):
        """
        Raw (unsmoothed) curls: thumb separately, then index..pinky.

        Thumb: 2D distance tip -> index MCP, closer means more curled.
        Others: tip reach vs 1.3x MCP reach from the wrist, plus a fixed
        penalty when the tip hangs below its PIP (image y grows downwards).
        """
        cfg = self.cfg
        eps = cfg["EPSILON"]
        wrist = lm[L.WRIST]

        thumb_gap = float(np.linalg.norm(lm[L.THUMB_TIP, :2] - lm[L.INDEX_MCP, :2]))
        thumb = 1.0 - min(1.0, thumb_gap / cfg["THUMB_CURL_RANGE"])

        curls = []
        for mcp, pip, tip in FINGER_JOINTS:
            mcp_reach = float(np.linalg.norm(lm[mcp] - wrist))
            tip_reach = float(np.linalg.norm(lm[tip] - wrist))
            curl = 1.0 - min(1.0, tip_reach / max(eps, mcp_reach * cfg["CURL_REACH_RATIO"]))
            if lm[tip, 1] > lm[pip, 1]:
                curl += cfg["CURL_FOLD_PENALTY"]
            curls.append(_unit(curl))
        return _unit(thumb), curls

    @staticmethod
    def _palm_normal(lm: np.ndarray, eps: float) -> np.ndarray:
        across = lm[L.PINKY_MCP] - lm[L.INDEX_MCP]
        along = lm[L.WRIST] - lm[L.MIDDLE_MCP]
        return _normalize(np.cross(across, along), (0.0, 0.0, 1.0), eps)
