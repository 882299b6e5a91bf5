"""
HandCloud Point Cloud (Procedural Point Animator).
==================================================

One controlled object = a Fibonacci sphere of particles plus a few flat
orbital rings. Rest positions are generated once and frozen; every frame the
rendered buffers are recomputed from them.

Key Concept: "Stable vs Dynamic"
1. **Stable:** the sphere breathes uniformly, rings barely wobble, and the
   group spins on its own.
2. **Dynamic:** two travelling sine waves ripple the surface, rings get
   chaotic, and rotation is handed over to the user's hand.
The object's wave amount (driven by the layout) blends the two.
"""

import colorsys
import math
from dataclasses import replace
from typing import List, Mapping, Optional, Tuple

import numpy as np

from handcloud.config import CONFIG
from handcloud.core.stabilizer import lerp_toward, smooth
from handcloud.core.types import (
    CloudFrame,
    GroupTransform,
    RingFrame,
    TransformState,
    VisualState,
)

GOLDEN_RATIO = (1 + math.sqrt(5)) / 2

# Ring wobble frequencies (angle multipliers / time speeds)
RING_Y_FREQ, RING_Y_SPEED = 3.0, 2.0
RING_R_FREQ, RING_R_SPEED = 5.0, 1.5
RING_SPIN_X, RING_SPIN_Y = 0.1, 0.05


def clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[float, float, float]:
    """Hue wraps around, lightness is clamped."""
    return colorsys.hls_to_rgb(h % 1.0, clamp01(l), clamp01(s))


def fibonacci_sphere(count: int, radius: float) -> np.ndarray:
    """
    Near-uniform points on a sphere surface (golden-angle spiral).
    Returns a (count, 3) matrix; every row has norm == radius.
    """
    i = np.arange(count, dtype=float)
    theta = 2 * np.pi * i / GOLDEN_RATIO
    phi = np.arccos(1 - 2 * (i + 0.5) / count)
    return np.column_stack([
        radius * np.sin(phi) * np.cos(theta),
        radius * np.sin(phi) * np.sin(theta),
        radius * np.cos(phi),
    ])


def ring_rest_positions(index: int, config: Mapping = CONFIG) -> Tuple[np.ndarray, np.ndarray, float]:
    """Flat circle (y = 0) of points for orbital ring `index`. Returns (points, angles, radius)."""
    radius = config["SPHERE_RADIUS"] + (index + 1) * config["RING_SPACING"]
    segments = config["RING_BASE_SEGMENTS"] + index * config["RING_SEGMENT_STEP"]
    angles = np.arange(segments, dtype=float) / segments * 2 * np.pi
    points = np.column_stack([radius * np.cos(angles), np.zeros(segments), radius * np.sin(angles)])
    return points, angles, radius


def sphere_colors(rest: np.ndarray, radius: float, base_hsl: Tuple[float, float, float]) -> np.ndarray:
    """Vertical gradient: hue and lightness rise toward the top of the sphere."""
    h, s, l = base_hsl
    t = (rest[:, 1] / radius + 1) / 2
    return np.array([hsl_to_rgb(h + v * 0.2, s, l + v * 0.2) for v in t])


def _freeze(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


class OrbitalRing:
    def __init__(self, index: int, config: Mapping = CONFIG):
        self.index = index
        self.cfg = config
        rest, angles, radius = ring_rest_positions(index, config)
        self.rest_positions = _freeze(rest)
        self.angles = _freeze(angles)
        self.radius = radius
        self.positions = rest.copy()

        base_h = config["BASE_COLOR_HSL"][0]
        color = hsl_to_rgb((base_h + 0.5 + index * 0.05) % 1, 0.8, 0.6)
        self.colors = np.tile(color, (len(angles), 1))

        # Alternate spin direction per ring
        self.direction = 1.0 if index % 2 == 0 else -1.0
        self.rotation = (0.0, 0.0, 0.0)

    def animate(self, time: float, wave_influence: float):
        stable = self.cfg["RING_STABLE_CHAOS"]
        dynamic = self.cfg["RING_DYNAMIC_CHAOS"]
        chaos = stable + (dynamic - stable) * wave_influence

        a = self.angles
        y_offset = np.sin(a * RING_Y_FREQ + time * RING_Y_SPEED + self.index) * chaos
        r = self.radius + np.sin(a * RING_R_FREQ + time * RING_R_SPEED) * (chaos * 0.5)

        self.positions[:, 0] = r * np.cos(a)
        self.positions[:, 1] = y_offset
        self.positions[:, 2] = r * np.sin(a)

        self.rotation = (time * RING_SPIN_X * self.direction, time * RING_SPIN_Y, 0.0)


class PointCloudObject:
    """
    A sphere + rings group with its own visual mode and interactive transform.

    Attributes:
        visual / visual_target (VisualState): crossfaded look (hue, wave, size, opacity).
        transform / transform_target (TransformState): hand-driven scale, rotation, zoom.
        group (GroupTransform): last computed group-level transform.
    """

    def __init__(self, hue: Optional[float] = None, opacity: float = 1.0, config: Mapping = CONFIG):
        self.cfg = config
        radius = config["SPHERE_RADIUS"]
        count = config["SPHERE_SEGMENTS"] * config["SPHERE_RINGS"]
        rng = np.random.default_rng(config["RANDOM_SEED"])

        # --- GEOMETRY (rest positions are immutable) ---
        self.rest_positions = _freeze(fibonacci_sphere(count, radius))
        self.positions = self.rest_positions.copy()
        self.base_colors = _freeze(sphere_colors(self.rest_positions, radius, config["BASE_COLOR_HSL"]))
        self.colors = self.base_colors.copy()
        self.sizes = config["POINT_SIZE"] + (rng.random(count) - 0.5) * config["POINT_SIZE_VARIATION"]
        self.rings: List[OrbitalRing] = [OrbitalRing(i, config) for i in range(config["RING_COUNT"])]

        # --- STATE ---
        base_hue = config["BASE_COLOR_HSL"][0] if hue is None else hue
        self.visual = VisualState(hue=base_hue, opacity=opacity)
        self.visual_target = replace(self.visual)
        self.transform = TransformState()
        self.transform_target = TransformState()
        self.x_offset = 0.0

        # --- DERIVED (per frame) ---
        self.group = GroupTransform()
        self.point_size = config["POINT_SIZE"]
        self.sphere_opacity = config["SPHERE_OPACITY"] * opacity
        self.ring_opacity = config["RING_OPACITY"] * opacity
        self.visible = opacity > config["VISIBILITY_THRESHOLD"]

    # --- CONTROL API ---
    def set_visual_state(self, hue=None, wave_amount=None, radius_scale=None, spin_speed=None, opacity=None):
        """Sets targets only; `update` crossfades toward them."""
        t = self.visual_target
        if hue is not None: t.hue = hue
        if wave_amount is not None: t.wave_amount = wave_amount
        if radius_scale is not None: t.radius_scale = radius_scale
        if spin_speed is not None: t.spin_multiplier = spin_speed
        if opacity is not None: t.opacity = opacity

    def set_scale(self, scale: float):
        lo, hi = self.cfg["SCALE_LIMITS"]
        self.transform_target.scale = min(hi, max(lo, scale))

    def set_rotation(self, x: float, y: float):
        self.transform_target.rotation_x = x
        self.transform_target.rotation_y = y

    def set_zoom(self, zoom: float):
        lo, hi = self.cfg["ZOOM_LIMITS"]
        self.transform_target.zoom = min(hi, max(lo, zoom))

    def set_x_offset(self, x: float):
        self.x_offset = x

    @property
    def wave_influence(self) -> float:
        return clamp01(self.visual.wave_amount * 2)

    # --- FRAME UPDATE ---
    def update(self, time: float) -> CloudFrame:
        cfg = self.cfg

        # 1. Crossfade visual mode
        v = lerp_toward(self.visual, self.visual_target, cfg["VISUAL_LERP"])

        # 2. Opacity & culling
        self.sphere_opacity = cfg["SPHERE_OPACITY"] * v.opacity
        self.ring_opacity = cfg["RING_OPACITY"] * v.opacity
        self.visible = v.opacity > cfg["VISIBILITY_THRESHOLD"]

        # 3. Interactive transforms
        tr, goal = self.transform, self.transform_target
        tr.scale = smooth(tr.scale, goal.scale, cfg["SCALE_LERP"])
        tr.rotation_x = smooth(tr.rotation_x, goal.rotation_x, cfg["ROTATION_LERP"])
        tr.rotation_y = smooth(tr.rotation_y, goal.rotation_y, cfg["ROTATION_LERP"])
        tr.zoom = smooth(tr.zoom, goal.zoom, cfg["ZOOM_LERP"])

        # 4. Group transform: auto spin when stable, hand control when dynamic
        wave_influence = self.wave_influence
        user_influence = clamp01(v.wave_amount * cfg["USER_ROTATION_GAIN"])
        auto_spin = time * cfg["AUTO_SPIN_SPEED"] * v.spin_multiplier
        wobble = math.sin(time * cfg["WOBBLE_SPEED"]) * cfg["WOBBLE_AMOUNT"]
        self.group = GroupTransform(
            position=(self.x_offset, 0.0, tr.zoom),
            rotation=(wobble * (1 - user_influence) + tr.rotation_x * user_influence,
                      auto_spin + tr.rotation_y,
                      0.0),
            scale=tr.scale * v.radius_scale,
        )

        # 5. Points (skipped while culled)
        if self.visible:
            self._animate_sphere(time, wave_influence, v.spin_multiplier)
            for ring in self.rings:
                ring.animate(time, wave_influence)

        # 6. Pulse & Color
        pulse = 1 + math.sin(time * cfg["PULSE_SPEED"]) * cfg["PULSE_AMOUNT"] * v.spin_multiplier
        self.point_size = cfg["POINT_SIZE"] * pulse
        cycle = math.sin(time * cfg["HUE_CYCLE_SPEED"]) * cfg["HUE_CYCLE_AMOUNT"] * wave_influence
        tint = hsl_to_rgb(v.hue + cycle, 0.8, 0.6)
        np.multiply(self.base_colors, tint, out=self.colors)

        return self.frame()

    def _animate_sphere(self, time: float, wave_influence: float, spin: float):
        rest = self.rest_positions
        ws, wa = self.cfg["WAVE_SPEED"], self.cfg["WAVE_AMOUNT"]

        # Stable: uniform breathing
        breathe = 1 + math.sin(time * self.cfg["BREATHE_SPEED"]) * self.cfg["BREATHE_AMOUNT"] * spin

        # Dynamic: two orthogonal travelling waves, phase depends on the point
        dynamic = (1
                   + np.sin(rest[:, 1] * 4 + time * ws) * wa
                   + np.cos(rest[:, 0] * 3 + time * ws * 0.7) * wa * 0.5)

        factor = breathe + (dynamic - breathe) * wave_influence
        np.multiply(rest, factor[:, np.newaxis], out=self.positions)

    def frame(self) -> CloudFrame:
        ring_size = self.cfg["POINT_SIZE"] * self.cfg["RING_POINT_SIZE_FACTOR"]
        return CloudFrame(
            transform=self.group,
            positions=self.positions,
            colors=self.colors,
            sizes=self.sizes,
            point_size=self.point_size,
            opacity=self.sphere_opacity,
            visible=self.visible,
            rings=[RingFrame(r.positions, r.colors, r.rotation, ring_size, self.ring_opacity) for r in self.rings],
        )
