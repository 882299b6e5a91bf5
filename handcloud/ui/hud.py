"""
HandCloud HUD / OpenCV Renderer.
Draws the engine's FrameOutput: projected particles with an additive glow,
the status line, FPS and a mirrored webcam inset with the tracked skeletons.
"""

import math
from typing import Any, Dict, Mapping, Optional, Tuple

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.framework.formats import landmark_pb2

from handcloud.config import CONFIG
from handcloud.core.interfaces import IRenderer
from handcloud.core.types import FrameOutput, GroupTransform, HandLandmarkFrame, Layout
from handcloud.render.point_cloud import hsl_to_rgb

SKELETON_BGR = (246, 92, 139)


def euler_matrix(rx: float, ry: float, rz: float) -> np.ndarray:
    """XYZ-order Euler rotation (R = Rx @ Ry @ Rz)."""
    cx, sx = math.cos(rx), math.sin(rx)
    cy, sy = math.cos(ry), math.sin(ry)
    cz, sz = math.cos(rz), math.sin(rz)
    rot_x = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]])
    rot_y = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    rot_z = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]])
    return rot_x @ rot_y @ rot_z


def to_world(points: np.ndarray, group: GroupTransform, local_rotation: Optional[Tuple] = None) -> np.ndarray:
    pts = points
    if local_rotation is not None:
        pts = pts @ euler_matrix(*local_rotation).T
    return (pts @ euler_matrix(*group.rotation).T) * group.scale + np.asarray(group.position)


class OpenCvRenderer(IRenderer):
    def __init__(self, window_name: str = "HandCloud", config: Mapping = CONFIG):
        self.cfg = config
        self.window_name = window_name
        self.w, self.h = config["CANVAS_WIDTH"], config["CANVAS_HEIGHT"]
        self.focal = (self.h / 2) / math.tan(math.radians(config["CAMERA_FOV"]) / 2)
        self.cam_z = config["CAMERA_DISTANCE"]
        self.background = np.array(config["BACKGROUND_BGR"], dtype=np.float32)
        self.preview: Optional[np.ndarray] = None
        self.show_preview = True
        self.canvas = np.zeros((self.h, self.w, 3), dtype=np.uint8)
        cv2.namedWindow(self.window_name)

    # --- PROJECTION ---
    def project(self, world: np.ndarray):
        """Perspective camera on +Z looking at the origin. Returns (u, v, depth, valid)."""
        depth = self.cam_z - world[:, 2]
        valid = depth > 0.1
        safe = np.where(valid, depth, 1.0)
        u = (self.w / 2 + self.focal * world[:, 0] / safe).astype(np.int32)
        v = (self.h / 2 - self.focal * world[:, 1] / safe).astype(np.int32)
        valid &= (u >= 0) & (u < self.w) & (v >= 0) & (v < self.h)
        return u, v, depth, valid

    def _splat(self, layer: np.ndarray, world: np.ndarray, rgb: np.ndarray, opacity: float):
        u, v, _, valid = self.project(world)
        bgr = np.asarray(rgb, dtype=np.float32)[..., ::-1] * opacity
        if bgr.ndim == 2:
            bgr = bgr[valid]
        np.add.at(layer, (v[valid], u[valid]), bgr)

    # --- IRenderer ---
    def render(self, frame: FrameOutput) -> None:
        layer = np.zeros((self.h, self.w, 3), dtype=np.float32)

        if frame.ambient is not None:
            self._splat(layer, frame.ambient.positions, frame.ambient.color, frame.ambient.opacity)

        if frame.glow is not None and frame.glow.opacity > 0.005:
            self._draw_glow(layer, frame.glow)

        point_px = 1
        for cloud in frame.objects.values():
            if not cloud.visible:
                continue
            self._splat(layer, to_world(cloud.positions, cloud.transform), cloud.colors, cloud.opacity)
            for ring in cloud.rings:
                world = to_world(ring.positions, cloud.transform, ring.rotation)
                self._splat(layer, world, ring.colors, ring.opacity)
            point_px = max(point_px, int(round(cloud.point_size * cloud.transform.scale * self.focal / self.cam_z)))

        # Point footprint, then bloom
        kernel = np.ones((point_px, point_px), np.uint8)
        layer = cv2.dilate(layer, kernel)
        bloom = cv2.GaussianBlur(layer, (0, 0), self.cfg["BLOOM_SIGMA"])
        composed = self.background + (layer + bloom * self.cfg["BLOOM_STRENGTH"]) * 255.0
        self.canvas = np.clip(composed, 0, 255).astype(np.uint8)

        self._draw_overlay(frame)
        cv2.imshow(self.window_name, self.canvas)

    def close(self) -> None:
        cv2.destroyWindow(self.window_name)

    # --- DECORATIONS ---
    def _draw_glow(self, layer: np.ndarray, glow):
        mid = (glow.inner_radius + glow.outer_radius) / 2
        angles = np.linspace(0, 2 * np.pi, 64, endpoint=False)
        circle = np.column_stack([mid * np.cos(angles), mid * np.sin(angles), np.zeros_like(angles)])
        world = to_world(circle, GroupTransform(rotation=glow.rotation, scale=glow.scale))
        u, v, _, valid = self.project(world)
        if not np.all(valid):
            return
        thickness = max(1, int((glow.outer_radius - glow.inner_radius) * self.focal / self.cam_z))
        color = tuple(float(c) * glow.opacity for c in glow.color[::-1])
        cv2.polylines(layer, [np.column_stack([u, v])], True, color, thickness, cv2.LINE_8)

    def _draw_overlay(self, frame: FrameOutput):
        img = self.canvas
        detected = frame.layout is not Layout.IDLE
        color = (0, 255, 0) if detected else (200, 200, 200)
        cv2.putText(img, frame.status, (20, self.h - 50), cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2)
        cv2.putText(img, f"MODE: {frame.layout.value}", (20, self.h - 20), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 0), 1)
        cv2.putText(img, f"{int(round(frame.fps))} FPS", (20, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 255), 2)

        if self.show_preview and self.preview is not None:
            ph, pw = self.preview.shape[:2]
            x0, y0 = self.w - pw - 20, 20
            img[y0:y0 + ph, x0:x0 + pw] = self.preview
            cv2.rectangle(img, (x0, y0), (x0 + pw, y0 + ph), SKELETON_BGR, 1)

    def set_preview(self, frame: np.ndarray, hands: Optional[HandLandmarkFrame] = None):
        """Stores a downscaled webcam frame (BGR) with the detected skeletons drawn on it."""
        h, w = frame.shape[:2]
        pw = self.cfg["PREVIEW_WIDTH"]
        preview = cv2.resize(frame, (pw, int(h * pw / w)))
        if hands is not None:
            for hand in hands.hands:
                draw_hand(preview, hand.landmarks)
        self.preview = preview

    def toggle_preview(self):
        self.show_preview = not self.show_preview


# --- WEBCAM SKELETONS ---
def pack_landmarks(coords: np.ndarray) -> landmark_pb2.NormalizedLandmarkList:
    """(21, 3) matrix -> MediaPipe landmark list, so drawing_utils can render it."""
    packed = landmark_pb2.NormalizedLandmarkList()
    for x, y, z in coords:
        packed.landmark.add(x=float(x), y=float(y), z=float(z))
    return packed


def gradient_specs(count: int = 21) -> Dict[int, Any]:
    """Per-landmark DrawingSpec: purple at the wrist -> cyan at the pinky tip."""
    specs = {}
    for i in range(count):
        r, g, b = hsl_to_rgb((280 - i / count * 100) / 360, 0.8, 0.6)
        color = (int(b * 255), int(g * 255), int(r * 255))
        specs[i] = mp.solutions.drawing_utils.DrawingSpec(color=color, thickness=-1, circle_radius=2)
    return specs


def draw_hand(img: np.ndarray, landmarks: Any):
    """Draws one skeleton. Accepts a MediaPipe landmark list or a (21, 3) matrix."""
    if not hasattr(landmarks, 'landmark'):
        landmarks = pack_landmarks(np.asarray(landmarks, dtype=float).reshape(-1, 3))
    mp_draw = mp.solutions.drawing_utils
    mp_draw.draw_landmarks(
        img, landmarks, mp.solutions.hands.HAND_CONNECTIONS,
        gradient_specs(len(landmarks.landmark)),
        mp_draw.DrawingSpec(color=SKELETON_BGR, thickness=1),
    )
