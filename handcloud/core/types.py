"""
HandCloud Types.
Central definition of Data Contracts to prevent circular imports.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np


# --- ERRORS ---
class MalformedLandmarksError(ValueError):
    """A landmark set that cannot be a 21-point hand skeleton."""


class DetectorInitError(RuntimeError):
    """Camera or hand detector could not be started. Fatal for a session."""


# --- ROLES ---
class Role(Enum):
    LEFT = "left"
    RIGHT = "right"

    @property
    def title(self) -> str:
        return self.value.capitalize()


# --- DETECTOR INPUT ---
@dataclass
class RawHand:
    landmarks: Any  # (21, 3) array, MediaPipe landmark list, or list of points
    label: str = ""  # "Left" / "Right" as reported by the detector


@dataclass
class HandLandmarkFrame:
    hands: List[RawHand] = field(default_factory=list)
    timestamp: float = 0.0


# --- SIGNAL TYPES ---
@dataclass
class HandFilterState:
    """
    Persistent smoothing memory for one role.
    Stale values are retained while the role is not detected.
    """
    position: np.ndarray = field(default_factory=lambda: np.array([0.5, 0.5, 0.5]))
    pinch: float = 1.0
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(2))
    baseline_z: Optional[float] = None
    detected: bool = False

    def mark_lost(self):
        """Detection gap: the depth baseline is re-captured on the next detection."""
        self.detected = False
        self.baseline_z = None

    def reset(self):
        self.position = np.array([0.5, 0.5, 0.5])
        self.pinch = 1.0
        self.rotation = np.zeros(2)
        self.baseline_z = None
        self.detected = False


@dataclass(frozen=True)
class ControlSignal:
    position: Tuple[float, float, float] = (0.5, 0.5, 0.5)
    pinch: float = 1.0
    rotation: Tuple[float, float] = (0.0, 0.0)
    zoom: float = 0.0
    curl: float = 0.0
    detected: bool = True


@dataclass(frozen=True)
class RoleAssignment:
    left: Optional[ControlSignal] = None
    right: Optional[ControlSignal] = None

    @property
    def left_detected(self) -> bool:
        return self.left is not None and self.left.detected

    @property
    def right_detected(self) -> bool:
        return self.right is not None and self.right.detected

    @property
    def both_detected(self) -> bool:
        return self.left_detected and self.right_detected

    def signal(self, role: Role) -> Optional[ControlSignal]:
        return self.left if role is Role.LEFT else self.right

    def is_detected(self, role: Role) -> bool:
        return self.left_detected if role is Role.LEFT else self.right_detected

    def status_text(self) -> str:
        found = [role.title for role in Role if self.is_detected(role)]
        if not found:
            return "No hand detected"
        return " + ".join(found) + " Hand Detected"


# --- LAYOUT TYPES ---
class Layout(Enum):
    IDLE = "IDLE"
    LEFT_SOLO = "LEFT_SOLO"
    RIGHT_SOLO = "RIGHT_SOLO"
    DUAL = "DUAL"


@dataclass
class LayoutParams:
    x_offset: float = 0.0
    opacity: float = 0.0
    radius_scale: float = 1.0
    wave_amount: float = 0.0

    @classmethod
    def from_config(cls, entry: Dict[str, float]) -> "LayoutParams":
        return cls(entry["x"], entry["opacity"], entry["scale"], entry["wave"])


# --- OBJECT STATE ---
@dataclass
class VisualState:
    hue: float = 0.75
    wave_amount: float = 0.0        # 0 = perfect sphere, >0 = wavy
    radius_scale: float = 1.0       # 1.0 = center size, 0.5 = side size
    spin_multiplier: float = 1.0    # 1 = normal, >1 = fast
    opacity: float = 1.0            # Master opacity


@dataclass
class TransformState:
    scale: float = 1.0
    rotation_x: float = 0.0
    rotation_y: float = 0.0
    zoom: float = 0.0


# --- RENDER OUTPUT ---
@dataclass
class GroupTransform:
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    scale: float = 1.0


@dataclass
class RingFrame:
    positions: np.ndarray
    colors: np.ndarray
    rotation: Tuple[float, float, float]
    point_size: float
    opacity: float


@dataclass
class CloudFrame:
    transform: GroupTransform
    positions: np.ndarray
    colors: np.ndarray
    sizes: np.ndarray
    point_size: float
    opacity: float
    visible: bool
    rings: List[RingFrame] = field(default_factory=list)


@dataclass
class GlowFrame:
    inner_radius: float
    outer_radius: float
    rotation: Tuple[float, float, float]
    scale: float
    color: Tuple[float, float, float]
    opacity: float


@dataclass
class AmbientFrame:
    positions: np.ndarray
    color: Tuple[float, float, float]
    opacity: float


@dataclass
class FrameOutput:
    time: float
    layout: Layout
    status: str
    objects: Dict[Role, CloudFrame]
    glow: Optional[GlowFrame] = None
    ambient: Optional[AmbientFrame] = None
    fps: float = 0.0
