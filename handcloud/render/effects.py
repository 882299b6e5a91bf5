"""
HandCloud Ambient Effects.
Background dust and the glow ring around the center stage.
"""

import math
from typing import Mapping, Optional

import numpy as np

from handcloud.config import CONFIG
from handcloud.core.stabilizer import smooth
from handcloud.core.types import AmbientFrame, GlowFrame
from handcloud.render.point_cloud import hsl_to_rgb

AMBIENT_RGB = (0.545, 0.361, 0.965)  # 0x8b5cf6


class AmbientParticles:
    """Slowly drifting particles in a spherical shell around the scene."""

    def __init__(self, count: Optional[int] = None, config: Mapping = CONFIG, seed: Optional[int] = None):
        self.count = count if count is not None else config["AMBIENT_COUNT"]
        self.min_radius = config["AMBIENT_MIN_RADIUS"]
        self.max_radius = config["AMBIENT_MAX_RADIUS"]
        rng = np.random.default_rng(config["RANDOM_SEED"] if seed is None else seed)

        radius = self.min_radius + rng.random(self.count) * (self.max_radius - self.min_radius)
        theta = rng.random(self.count) * 2 * np.pi
        phi = np.arccos(2 * rng.random(self.count) - 1)
        self.positions = np.column_stack([
            radius * np.sin(phi) * np.cos(theta),
            radius * np.sin(phi) * np.sin(theta),
            radius * np.cos(phi),
        ])
        self.velocities = (rng.random((self.count, 3)) - 0.5) * 0.01
        self._phase = np.arange(self.count, dtype=float)
        self.opacity = 0.3

    def update(self, time: float) -> AmbientFrame:
        i = self._phase
        drift = np.column_stack([
            np.sin(time + i),
            np.cos(time * 0.7 + i),
            np.sin(time * 0.5 + i),
        ]) * 0.002
        self.positions += self.velocities + drift

        # Wrap around: anything that floated too far restarts on the inner shell
        dist = np.linalg.norm(self.positions, axis=1)
        far = dist > self.max_radius
        if np.any(far):
            self.positions[far] *= (self.min_radius / dist[far])[:, np.newaxis]

        self.opacity = 0.2 + math.sin(time * 0.5) * 0.1
        return AmbientFrame(self.positions, AMBIENT_RGB, self.opacity)


class GlowRing:
    """Flat halo behind the center object. Faded out by the engine in DUAL."""

    def __init__(self, config: Mapping = CONFIG):
        self.inner_radius = config["GLOW_INNER_RADIUS"]
        self.outer_radius = config["GLOW_OUTER_RADIUS"]
        self.opacity = config["GLOW_OPACITY_SOLO"]
        self.rotation = (math.pi / 2, 0.0, 0.0)
        self.scale = 1.0
        self.color = hsl_to_rgb(0.75, 0.8, 0.5)

    def fade_toward(self, target: float, factor: float):
        self.opacity = smooth(self.opacity, target, factor)

    def update(self, time: float) -> GlowFrame:
        self.rotation = (math.pi / 2 + math.sin(time * 0.3) * 0.1, 0.0, time * 0.2)
        self.scale = 1 + math.sin(time * 0.8) * 0.05
        self.color = hsl_to_rgb((0.75 + time * 0.02) % 1, 0.8, 0.5)
        return GlowFrame(self.inner_radius, self.outer_radius, self.rotation, self.scale, self.color, self.opacity)
