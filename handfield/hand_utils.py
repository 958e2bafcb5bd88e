"""
HandField Landmark Processing Utilities.
========================================

Handles the structural normalization of hand data before it reaches the
metrics extractor. The tracker can hand us three different things:
1. A MediaPipe NormalizedLandmarkList (has `.landmark`).
2. A plain sequence of landmark objects (each with `.x`, `.y`, `.z`).
3. Raw numbers (a (21, 3) array, nested lists, or a flat 63-float vector).

Everything is funnelled into one (21, 3) float64 array, or None when the
frame cannot be trusted. A bad frame is treated as "no hand", never an error.
"""

import logging
from typing import Any, Optional

import numpy as np

from handfield.core.types import NUM_LANDMARKS

logger = logging.getLogger(__name__)


def landmarks_to_array(landmark_list: Any) -> Optional[np.ndarray]:
    """
    Converts a tracker frame into a (21, 3) coordinate matrix.

    Returns None for missing, short, or non-finite frames.
    """
    if landmark_list is None:
        return None

    # 1. Unwrap MediaPipe's container object
    if hasattr(landmark_list, "landmark"):
        landmark_list = landmark_list.landmark

    try:
        # 2. Data Structuring: objects -> numpy, numbers -> numpy
        if len(landmark_list) and hasattr(landmark_list[0], "x"):
            coords = np.array([[lm.x, lm.y, getattr(lm, "z", 0.0)] for lm in landmark_list],
                              dtype=np.float64)
        else:
            coords = np.asarray(landmark_list, dtype=np.float64)
            if coords.ndim == 1 and coords.size % 3 == 0:
                coords = coords.reshape(-1, 3)
    except (TypeError, ValueError):
        logger.debug("Rejected landmark frame: not numeric")
        return None

    # 3. Validation (malformed == absent)
    if coords.ndim != 2 or coords.shape[1] != 3 or coords.shape[0] < NUM_LANDMARKS:
        logger.debug("Rejected landmark frame with shape %s", coords.shape)
        return None
    coords = coords[:NUM_LANDMARKS]
    if not np.all(np.isfinite(coords)):
        logger.debug("Rejected landmark frame with non-finite coordinates")
        return None

    return coords


def to_display_space(coords: np.ndarray) -> np.ndarray:
    """
    Maps normalized camera coordinates (0..1, y down) into the symmetric
    display space (-1..1, y up). Z is left untouched.
    """
    out = np.array(coords, dtype=np.float64, copy=True)
    out[..., 0] = np.clip((out[..., 0] - 0.5) * 2.0, -1.0, 1.0)
    out[..., 1] = np.clip(-(out[..., 1] - 0.5) * 2.0, -1.0, 1.0)
    return out
