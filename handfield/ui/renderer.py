"""
HandField Renderer.
Projects the particle field onto an OpenCV canvas with additive blending.
"""

import cv2
import numpy as np

from handfield.config import CONFIG
from handfield.core.types import ContinuousHandMetrics, FieldFrame

# Skeleton edges for the preview (MediaPipe hand topology)
HAND_EDGES = (
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (5, 9), (9, 10), (10, 11), (11, 12),
    (9, 13), (13, 14), (14, 15), (15, 16),
    (13, 17), (0, 17), (17, 18), (18, 19), (19, 20),
)


def rotation_matrix(rot_y: float, rot_z: float) -> np.ndarray:
    cy, sy = np.cos(rot_y), np.sin(rot_y)
    cz, sz = np.cos(rot_z), np.sin(rot_z)
    ry = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
    rz = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])
    return rz @ ry


class FieldRenderer:
    def __init__(self, width=None, height=None, config=None):
        self.cfg = config or CONFIG
        self.w = int(width or self.cfg["WINDOW_WIDTH"])
        self.h = int(height or self.cfg["WINDOW_HEIGHT"])

        # --- THEME COLORS (BGR) ---
        self.C_BG = (5, 2, 2)
        self.C_CYAN = (255, 255, 0)

    def project(self, positions: np.ndarray, frame: FieldFrame):
        """Returns pixel coords (N, 2) int and per-point depth weights (N,)."""
        cfg = self.cfg
        world = positions.astype(np.float64) @ rotation_matrix(frame.rotation_y, frame.rotation_z).T
        # Camera sits on +z looking towards the origin
        depth = cfg["CAMERA_DISTANCE"] - world[:, 2]
        visible = depth > 0.1
        depth = np.where(visible, depth, 0.1)
        f = cfg["FOCAL_LENGTH"] * self.h / 720.0
        x = world[:, 0] / depth * f + self.w / 2
        y = -world[:, 1] / depth * f + self.h / 2
        pts = np.stack([x, y], axis=-1).astype(np.int32)
        weight = np.where(visible, cfg["CAMERA_DISTANCE"] / depth, 0.0)
        return pts, weight

    def render(self, positions: np.ndarray, frame: FieldFrame) -> np.ndarray:
        pts, weight = self.project(positions, frame)
        inside = (pts[:, 0] >= 0) & (pts[:, 0] < self.w) & (pts[:, 1] >= 0) & (pts[:, 1] < self.h)
        pts, weight = pts[inside], weight[inside]

        # Additive accumulation: dense regions glow
        glow = np.zeros((self.h, self.w), dtype=np.float32)
        np.add.at(glow, (pts[:, 1], pts[:, 0]), weight * frame.opacity)
        radius = max(1, int(round(frame.point_size * 10)))
        glow = cv2.GaussianBlur(glow, (0, 0), radius)
        glow = np.clip(glow * (4.0 + frame.light_intensity), 0.0, 1.0)

        r, g, b = frame.color
        canvas = np.empty((self.h, self.w, 3), dtype=np.float32)
        canvas[..., 0] = glow * b
        canvas[..., 1] = glow * g
        canvas[..., 2] = glow * r
        out = (canvas * 255.0).astype(np.uint8)
        out = cv2.add(out, np.full_like(out, self.C_BG))
        return out

    def draw_preview(self, canvas: np.ndarray, camera_frame: np.ndarray,
                     metrics: ContinuousHandMetrics) -> None:
        """Camera thumbnail in the bottom-right corner, skeleton on top."""
        if camera_frame is None:
            return
        scale = self.cfg["PREVIEW_SCALE"]
        pw, ph = int(self.w * scale), int(self.h * scale)
        thumb = cv2.resize(camera_frame, (pw, ph))

        if metrics.is_present and metrics.landmarks:
            # Display space (-1..1, y up) -> thumbnail pixels
            pix = [(int((lm.x + 1) / 2 * pw), int((1 - lm.y) / 2 * ph)) for lm in metrics.landmarks]
            for a, b in HAND_EDGES:
                cv2.line(thumb, pix[a], pix[b], self.C_CYAN, 1)

        x, y = self.w - pw - 20, self.h - ph - 20
        canvas[y:y + ph, x:x + pw] = thumb
        cv2.rectangle(canvas, (x, y), (x + pw, y + ph), self.C_CYAN, 1)

    def draw_fps(self, canvas, fps):
        cv2.putText(canvas, f"{int(fps)} FPS", (canvas.shape[1] - 100, 40),
                    cv2.FONT_HERSHEY_PLAIN, 1.2, self.C_CYAN, 1)
