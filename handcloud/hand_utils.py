"""
HandCloud Landmark Processing Utilities.
========================================

The detector hands us skeletons in several shapes:
1. MediaPipe `NormalizedLandmarkList` objects (`.landmark` of points).
2. Plain sequences of point objects with `.x`, `.y`, `.z`.
3. Raw lists / arrays of floats (21x3 or flat 63).

Everything downstream works on a single (21, 3) float NumPy matrix.
"""

import numpy as np
from typing import Any

from handcloud.config import NUM_LANDMARKS
from handcloud.core.types import MalformedLandmarksError


def to_landmark_array(landmark_list: Any) -> np.ndarray:
    """
    Converts any supported landmark container into a (21, 3) float matrix.

    Raises:
        MalformedLandmarksError: wrong point count or non-finite coordinates.
    """
    if landmark_list is None:
        raise MalformedLandmarksError("No landmarks")

    # MediaPipe result -> point sequence
    if hasattr(landmark_list, 'landmark'):
        landmark_list = landmark_list.landmark

    try:
        if len(landmark_list) > 0 and hasattr(landmark_list[0], 'x'):
            coords = np.array([[lm.x, lm.y, lm.z] for lm in landmark_list], dtype=float)
        else:
            coords = np.asarray(landmark_list, dtype=float)
    except (TypeError, ValueError) as exc:
        raise MalformedLandmarksError(f"Unreadable landmarks: {exc}") from exc

    # Only (21, 3) or flat (63,) are hands; a transposed or re-blocked 63 is not
    if coords.shape == (NUM_LANDMARKS * 3,):
        coords = coords.reshape(NUM_LANDMARKS, 3)
    if coords.shape != (NUM_LANDMARKS, 3):
        raise MalformedLandmarksError(
            f"Expected {NUM_LANDMARKS}x3 landmarks, got shape {coords.shape}"
        )
    if not np.all(np.isfinite(coords)):
        raise MalformedLandmarksError("Non-finite landmark coordinates")

    return coords


def distance3d(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(a - b))


def synthetic_hand(wrist_x: float = 0.5, pinch: float = 1.0, depth: float = 0.0,
                   curl: float = 0.0, pinch_extent: float = 0.2) -> np.ndarray:
    """
    Builds a flat, upright (21, 3) skeleton for labs and tests.

    Args:
        wrist_x: horizontal wrist position (normalized).
        pinch: thumb-index gap as a fraction of `pinch_extent`.
        depth: z of every point.
        curl: 0 = fingers straight up, 1 = fingertips folded down to wrist height.
    """
    wrist_y, mcp_y, open_tip_y = 0.8, 0.65, 0.45
    tip_y = open_tip_y + curl * (wrist_y - open_tip_y)

    pts = np.zeros((NUM_LANDMARKS, 3))
    pts[:, 2] = depth
    pts[0, :2] = (wrist_x, wrist_y)

    # Index, middle, ring, pinky: MCP -> PIP -> DIP -> TIP in a straight column
    for finger, dx in zip(range(1, 5), (-0.03, -0.01, 0.01, 0.03)):
        base = finger * 4 + 1
        for joint, frac in enumerate((0.0, 1 / 3, 2 / 3, 1.0)):
            pts[base + joint, :2] = (wrist_x + dx, mcp_y + (tip_y - mcp_y) * frac)

    # Thumb ends `pinch * pinch_extent` to the left of the index tip
    thumb_tip = pts[8, :2] - (pinch * pinch_extent, 0.0)
    for joint, frac in zip((1, 2, 3, 4), (0.25, 0.5, 0.75, 1.0)):
        pts[joint, :2] = pts[0, :2] + (thumb_tip - pts[0, :2]) * frac
    return pts
