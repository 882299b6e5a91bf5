"""
HandCloud Engine (The Conductor).
Acts as the central nervous system: detector frames in, renderable frames out.

One `tick` per displayed frame. The detector callback only parks its result;
the next tick consumes it, so the engine is never entered twice at once.
"""

import logging
from typing import Dict, Mapping, Optional

from handcloud.config import CONFIG, ROLE_HUES
from handcloud.core.interfaces import IRenderer
from handcloud.core.role_assigner import HandRoleAssigner
from handcloud.core.state_manager import LayoutStateMachine
from handcloud.core.types import (
    ControlSignal,
    FrameOutput,
    HandLandmarkFrame,
    Layout,
    Role,
    RoleAssignment,
)
from handcloud.render.effects import AmbientParticles, GlowRing
from handcloud.render.point_cloud import PointCloudObject

logger = logging.getLogger(__name__)


class VisualEngine:
    def __init__(self, renderer: Optional[IRenderer] = None, config: Mapping = CONFIG):
        self.cfg = config
        self.renderer = renderer

        # Signal chain
        self.assigner = HandRoleAssigner(config=config)
        self.layout = LayoutStateMachine(config)

        # Scene (created hidden; the layout fades them in)
        self.objects: Dict[Role, PointCloudObject] = {
            role: PointCloudObject(hue=ROLE_HUES[role.value], opacity=0.0, config=config)
            for role in Role
        }
        self.ambient = AmbientParticles(config=config)
        self.glow = GlowRing(config)

        # Hand data (persists until the detector reports again)
        self.assignment = RoleAssignment()
        self._pending: Optional[HandLandmarkFrame] = None

        # Clock
        self._epoch: Optional[float] = None
        self._last_time: Optional[float] = None
        self.paused = False

        # FPS
        self.fps = 0.0
        self._fps_frames = 0
        self._fps_since: Optional[float] = None

        self.last_output: Optional[FrameOutput] = None

    # --- DETECTOR SIDE ---
    def on_landmarks(self, frame: HandLandmarkFrame):
        """Detector callback. A newer frame replaces an unconsumed one."""
        self._pending = frame

    @property
    def status(self) -> str:
        return self.assignment.status_text()

    # --- LOOP CONTROL ---
    def pause(self):
        if not self.paused:
            logger.info("Frame loop paused")
        self.paused = True

    def resume(self):
        """Continue from the current state; the paused gap does not count as elapsed time."""
        if self.paused:
            logger.info("Frame loop resumed")
        self.paused = False
        self._last_time = None

    def reset_tracking(self):
        self.assigner.reset()

    # --- FRAME ---
    def tick(self, now: float) -> Optional[FrameOutput]:
        """
        Pipeline: Consume Hands -> Select Layout -> Crossfade -> Map Controls -> Animate -> Render.

        Args:
            now: wall-clock seconds (monotonic).
        """
        if self.paused:
            return None

        if self._epoch is None:
            self._epoch = now
        dt = 0.0 if self._last_time is None else max(0.0, now - self._last_time)
        self._last_time = now
        time = now - self._epoch

        # 1. Hands
        if self._pending is not None:
            self.assignment = self.assigner.process(self._pending)
            self._pending = None
        hands = self.assignment

        # 2. Layout
        layout = self.layout.update(hands.left_detected, hands.right_detected, dt)

        # 3. Layout -> objects
        for role, obj in self.objects.items():
            params = self.layout.current[role]
            obj.set_x_offset(params.x_offset)
            obj.set_visual_state(
                opacity=params.opacity,
                radius_scale=params.radius_scale,
                wave_amount=params.wave_amount,
            )

        # 4. Strict control mapping: left hand -> left object, right -> right
        for role, obj in self.objects.items():
            signal = hands.signal(role)
            if signal is not None and signal.detected:
                self._apply_control(obj, signal)

        # 5. Glow ring stays for solo/idle, fades out in DUAL
        glow_target = self.cfg["GLOW_OPACITY_DUAL"] if layout is Layout.DUAL else self.cfg["GLOW_OPACITY_SOLO"]
        self.glow.fade_toward(glow_target, self.layout.step_factor)

        # 6. Animate
        clouds = {role: obj.update(time) for role, obj in self.objects.items()}
        output = FrameOutput(
            time=time,
            layout=layout,
            status=hands.status_text(),
            objects=clouds,
            glow=self.glow.update(time),
            ambient=self.ambient.update(time),
            fps=self._measure_fps(now),
        )
        self.last_output = output

        if self.renderer is not None:
            self.renderer.render(output)
        return output

    def _apply_control(self, obj: PointCloudObject, signal: ControlSignal):
        obj.set_scale(self.cfg["PINCH_SCALE_BASE"] + signal.pinch * self.cfg["PINCH_SCALE_GAIN"])
        obj.set_rotation(*signal.rotation)
        obj.set_zoom(signal.zoom)

    def _measure_fps(self, now: float) -> float:
        if self._fps_since is None:
            self._fps_since = now
        self._fps_frames += 1
        elapsed = now - self._fps_since
        if elapsed > self.cfg["FPS_WINDOW"]:
            self.fps = self._fps_frames / elapsed
            self._fps_frames = 0
            self._fps_since = now
        return self.fps

    def close(self):
        if self.renderer is not None:
            self.renderer.close()
