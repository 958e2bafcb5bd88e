"""
Synthetic 21-joint hands in MediaPipe's normalized image space (y grows downwards).
"""
import numpy as np

WRIST = (0.50, 0.80, 0.0)

# Thumb: CMC, MCP, IP, TIP (spread away from the palm)
THUMB_OPEN = [(0.44, 0.75, 0.0), (0.38, 0.70, 0.0), (0.32, 0.64, 0.0), (0.26, 0.58, 0.0)]
THUMB_TUCKED = [(0.44, 0.75, 0.0), (0.40, 0.70, 0.0), (0.38, 0.66, 0.0), (0.36, 0.62, 0.0)]

# Long fingers: MCP, PIP, DIP, TIP
INDEX_OPEN = [(0.44, 0.60, 0.0), (0.43, 0.50, 0.0), (0.425, 0.45, 0.0), (0.42, 0.40, 0.0)]
MIDDLE_OPEN = [(0.49, 0.59, 0.0), (0.49, 0.48, 0.0), (0.49, 0.43, 0.0), (0.49, 0.37, 0.0)]
RING_OPEN = [(0.54, 0.60, 0.0), (0.55, 0.50, 0.0), (0.555, 0.45, 0.0), (0.56, 0.40, 0.0)]
PINKY_OPEN = [(0.58, 0.62, 0.0), (0.60, 0.54, 0.0), (0.61, 0.50, 0.0), (0.62, 0.46, 0.0)]

INDEX_CURLED = [(0.44, 0.60, 0.0), (0.43, 0.55, 0.0), (0.44, 0.62, 0.0), (0.46, 0.70, 0.0)]
MIDDLE_CURLED = [(0.49, 0.59, 0.0), (0.49, 0.54, 0.0), (0.495, 0.62, 0.0), (0.50, 0.70, 0.0)]
RING_CURLED = [(0.54, 0.60, 0.0), (0.54, 0.55, 0.0), (0.535, 0.62, 0.0), (0.53, 0.70, 0.0)]
PINKY_CURLED = [(0.58, 0.62, 0.0), (0.58, 0.57, 0.0), (0.57, 0.63, 0.0), (0.56, 0.70, 0.0)]

# Index bent towards the thumb, tips 0.01 apart
INDEX_PINCHING = [(0.44, 0.60, 0.0), (0.40, 0.52, 0.0), (0.37, 0.50, 0.0), (0.35, 0.50, 0.0)]
THUMB_PINCHING = [(0.44, 0.75, 0.0), (0.40, 0.68, 0.0), (0.37, 0.58, 0.0), (0.35, 0.51, 0.0)]


def build_hand(thumb, index, middle, ring, pinky, offset=(0.0, 0.0, 0.0)) -> np.ndarray:
    pts = [WRIST] + list(thumb) + list(index) + list(middle) + list(ring) + list(pinky)
    return np.array(pts, dtype=np.float64) + np.asarray(offset, dtype=np.float64)


def open_hand(offset=(0.0, 0.0, 0.0)) -> np.ndarray:
    return build_hand(THUMB_OPEN, INDEX_OPEN, MIDDLE_OPEN, RING_OPEN, PINKY_OPEN, offset)


def fist(offset=(0.0, 0.0, 0.0)) -> np.ndarray:
    return build_hand(THUMB_TUCKED, INDEX_CURLED, MIDDLE_CURLED, RING_CURLED, PINKY_CURLED, offset)


def pinch_hand(offset=(0.0, 0.0, 0.0)) -> np.ndarray:
    return build_hand(THUMB_PINCHING, INDEX_PINCHING, MIDDLE_CURLED, RING_CURLED, PINKY_CURLED, offset)


class MockLandmark:
    """Mimics mediapipe NormalizedLandmark"""
    def __init__(self, x, y, z):
        self.x, self.y, self.z = x, y, z


class MockHand:
    """Mimics mediapipe NormalizedLandmarkList"""
    def __init__(self, coords):
        self.landmark = [MockLandmark(*row) for row in coords]
