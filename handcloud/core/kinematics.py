"""
HandCloud Kinematics (Hand Signal Extractor).
Turns one 21-point skeleton into a smoothed ControlSignal.
"""
import math
from typing import Mapping, Tuple

import numpy as np

from handcloud.config import CONFIG, CURL_FINGERS, LANDMARKS
from handcloud.core.stabilizer import smooth
from handcloud.core.types import ControlSignal, HandFilterState
from handcloud.hand_utils import distance3d


def pinch_amount(lms: np.ndarray, max_extent: float) -> float:
    """Thumb(4) to Index(8) distance normalized to [0, 1]. 1 = fully open."""
    dist = distance3d(lms[LANDMARKS["THUMB_TIP"]], lms[LANDMARKS["INDEX_TIP"]])
    return min(1.0, max(0.0, dist / max_extent))


def palm_rotation(lms: np.ndarray, sensitivity: float) -> Tuple[float, float]:
    """
    Palm direction (Middle Tip - Wrist) as two angles.
    X: pitch from the z/y plane, Y: yaw from the x/y plane.
    """
    vx, vy, vz = lms[LANDMARKS["MIDDLE_TIP"]] - lms[LANDMARKS["WRIST"]]
    return math.atan2(vz, vy) * sensitivity, math.atan2(vx, vy) * sensitivity


def curl_amount(lms: np.ndarray) -> float:
    """
    How closed the hand is (fist detection), averaged over the 4 fingers.
    A finger counts as curled when its tip is closer to the wrist than its MCP.
    """
    wrist = lms[LANDMARKS["WRIST"]]
    total = 0.0
    for tip, mcp in CURL_FINGERS:
        mcp_dist = distance3d(lms[mcp], wrist)
        if mcp_dist <= 1e-9:
            continue  # Degenerate skeleton, no curl information
        total += max(0.0, 1.0 - distance3d(lms[tip], wrist) / mcp_dist)
    return min(1.0, max(0.0, total / len(CURL_FINGERS)))


class HandSignalExtractor:
    """
    Stateless worker: all memory lives in the HandFilterState passed per call,
    so one extractor can serve both roles.
    """

    def __init__(self, config: Mapping = CONFIG):
        self.pos_alpha = config["POSITION_SMOOTHING"]
        self.gesture_alpha = config["GESTURE_SMOOTHING"]
        self.pinch_extent = config["PINCH_MAX_EXTENT"]
        self.depth_sens = config["DEPTH_SENSITIVITY"]
        self.rot_sens = config["ROTATION_SENSITIVITY"]

    def extract(self, lms: np.ndarray, state: HandFilterState) -> ControlSignal:
        """
        Pipeline: Center -> Baseline -> Smooth -> Pinch -> Rotation -> Zoom -> Curl.

        Args:
            lms: validated (21, 3) landmark matrix.
            state: the role's filter memory (mutated in place).
        """
        center = lms[LANDMARKS["WRIST"]]

        # 1. Depth reference is relative to where the hand (re)appeared
        if state.baseline_z is None:
            state.baseline_z = float(center[2])
        state.detected = True

        # 2. Position
        state.position = smooth(state.position, center, self.pos_alpha)

        # 3. Pinch
        state.pinch = smooth(state.pinch, pinch_amount(lms, self.pinch_extent), self.gesture_alpha)

        # 4. Rotation
        raw_rot = np.array(palm_rotation(lms, self.rot_sens))
        state.rotation = smooth(state.rotation, raw_rot, self.gesture_alpha)

        # 5. Zoom (positive = closer to the camera than the baseline)
        zoom = (state.baseline_z - state.position[2]) * self.depth_sens

        x, y, z = (float(v) for v in state.position)
        return ControlSignal(
            position=(x, y, z),
            pinch=float(state.pinch),
            rotation=(float(state.rotation[0]), float(state.rotation[1])),
            zoom=float(zoom),
            curl=curl_amount(lms),
            detected=True,
        )
