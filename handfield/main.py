"""
HandField - Main Entry Point.
============================

Host loop for the particle instrument. It wires the layers together:
1. Perception: threaded camera + MediaPipe Hands (single dominant hand).
2. Signal: HandTrackingSession -> ContinuousHandMetrics.
3. Simulation: ParticleField consumes the latest metrics every frame.
4. Presentation: FieldRenderer draws the field and a camera preview.

Usage:
    $ python -m handfield.main
Keys:
    1-5  select shape      C  cycle base colour
    R    restart tracking  ESC quit
"""
import logging
import threading
import time
from typing import Optional

import cv2
import mediapipe as mp
import numpy as np

from handfield.config import CONFIG
from handfield.core.field import ParticleField
from handfield.core.types import ParticleShape
from handfield.tracking import HandTrackingSession
from handfield.ui.renderer import FieldRenderer

logger = logging.getLogger(__name__)

SHAPE_KEYS = {ord(str(i + 1)): shape for i, shape in enumerate(ParticleShape)}


class CameraStream:
    """Latest-frame camera source; the tracker only ever sees the newest image."""

    def __init__(self, index: int, fps: int):
        self._cap = cv2.VideoCapture(index)
        self._cap.set(cv2.CAP_PROP_FPS, fps)
        self._latest: Optional[np.ndarray] = None
        self._guard = threading.Lock()
        self.alive = self._cap.isOpened()
        if not self.alive:
            logger.error("Camera %d could not be opened", index)
            return
        threading.Thread(target=self._pump, name="camera", daemon=True).start()

    def _pump(self):
        while self.alive:
            ok, image = self._cap.read()
            if not ok:
                logger.error("Camera stream ended")
                self.alive = False
                return
            with self._guard:
                self._latest = image

    def latest(self) -> Optional[np.ndarray]:
        with self._guard:
            return None if self._latest is None else self._latest.copy()

    def close(self):
        self.alive = False
        self._cap.release()


def main():
    logging.basicConfig(level=CONFIG["LOG_LEVEL"],
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")
    print("HANDFIELD: ONLINE")
    print("   -> Keys 1-5 select the shape, 'C' cycles colour, 'R' restarts tracking")
    print("   -> Press 'ESC' to Exit")

    window_name = "HandField"
    cv2.namedWindow(window_name)

    renderer = FieldRenderer()
    field = ParticleField(shape=ParticleShape.from_label(CONFIG["INITIAL_SHAPE"]))
    session = HandTrackingSession()
    session.subscribe(field)

    cam = CameraStream(CONFIG["CAMERA_INDEX"], CONFIG["TARGET_FPS"])
    mp_hands = mp.solutions.hands
    hands = mp_hands.Hands(
        max_num_hands=1,
        min_detection_confidence=CONFIG["MP_MIN_DETECTION_CONFIDENCE"],
        min_tracking_confidence=CONFIG["MP_MIN_TRACKING_CONFIDENCE"],
        model_complexity=1,
    )

    color_idx = 0
    prev_time = time.monotonic()

    try:
        while cam.alive and session.running:
            camera_frame = cam.latest()
            if camera_frame is None:
                continue

            # --- 1. PERCEPTION (mirror for intuitive interaction) ---
            camera_frame = cv2.flip(camera_frame, 1)
            results = hands.process(cv2.cvtColor(camera_frame, cv2.COLOR_BGR2RGB))

            landmarks, score = None, None
            if results.multi_hand_landmarks:
                landmarks = results.multi_hand_landmarks[0]
                if results.multi_handedness:
                    score = results.multi_handedness[0].classification[0].score

            # --- 2. SIGNAL ---
            metrics = session.process(landmarks, timestamp=time.monotonic(), confidence=score)

            # --- 3. SIMULATION ---
            now = time.monotonic()
            dt = now - prev_time
            prev_time = now
            frame = field.step(dt)

            # --- 4. PRESENTATION ---
            canvas = renderer.render(field.positions, frame)
            renderer.draw_preview(canvas, camera_frame, metrics)
            renderer.draw_fps(canvas, 1.0 / dt if dt > 0 else 0.0)
            cv2.imshow(window_name, canvas)

            k = cv2.waitKey(1) & 0xFF
            if k == 27:
                session.stop()
            elif k in SHAPE_KEYS:
                field.set_shape(SHAPE_KEYS[k])
            elif k == ord('c'):
                color_idx = (color_idx + 1) % len(CONFIG["BASE_COLORS"])
                field.set_color(CONFIG["BASE_COLORS"][color_idx])
            elif k == ord('r'):
                session.restart()

    finally:
        if session.running:
            session.stop()
        hands.close()
        cam.close()
        cv2.destroyAllWindows()
        print("HANDFIELD: OFFLINE")


if __name__ == "__main__":
    main()
