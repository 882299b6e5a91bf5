"""
HandCloud Layout State Machine.
Picks a layout from the detection pattern and crossfades both objects toward it.
"""
import logging
from typing import Dict, Mapping, Optional

from handcloud.config import CONFIG, INITIAL_LAYOUT, LAYOUT_TARGETS
from handcloud.core.stabilizer import frame_factor, lerp_toward
from handcloud.core.types import Layout, LayoutParams, Role

logger = logging.getLogger(__name__)


def select_layout(left_detected: bool, right_detected: bool) -> Layout:
    """Pure transition function. No history: one frame decides."""
    if left_detected and right_detected:
        return Layout.DUAL
    if left_detected:
        return Layout.LEFT_SOLO
    if right_detected:
        return Layout.RIGHT_SOLO
    return Layout.IDLE


def load_targets(table: Mapping = LAYOUT_TARGETS) -> Dict[Layout, Dict[Role, LayoutParams]]:
    return {
        layout: {role: LayoutParams.from_config(table[layout.value][role.value]) for role in Role}
        for layout in Layout
    }


class LayoutStateMachine:
    def __init__(self, config: Mapping = CONFIG, targets: Optional[Mapping] = None):
        self.rate = config["LAYOUT_LERP_RATE"]
        self.max_step = config["LAYOUT_MAX_STEP"]
        self.grace = config.get("LAYOUT_DROPOUT_GRACE", 0)
        self.targets = load_targets(targets or LAYOUT_TARGETS)

        # --- INTERPOLATED STATE (the only persistent layout memory) ---
        self.layout = Layout.IDLE
        self.current: Dict[Role, LayoutParams] = {
            role: LayoutParams.from_config(INITIAL_LAYOUT) for role in Role
        }
        self.step_factor = 0.0

        # Ticks since each role was last seen (starts "long ago")
        self._gaps = {role: self.grace + 1 for role in Role}

    def _held(self, role: Role, detected: bool) -> bool:
        """Detection with optional dropout grace. grace=0 -> raw detection."""
        if detected:
            self._gaps[role] = 0
        else:
            self._gaps[role] = min(self._gaps[role] + 1, self.grace + 1)
        return self._gaps[role] <= self.grace

    def update(self, left_detected: bool, right_detected: bool, dt: float) -> Layout:
        """
        Selects the layout for this tick and advances every current value
        toward that layout's targets, whether or not the layout changed.
        """
        selected = select_layout(
            self._held(Role.LEFT, left_detected),
            self._held(Role.RIGHT, right_detected),
        )
        if selected is not self.layout:
            logger.debug("Layout %s -> %s", self.layout.value, selected.value)
            self.layout = selected

        self.step_factor = frame_factor(self.rate, dt, self.max_step)
        target = self.targets[selected]
        for role, params in self.current.items():
            lerp_toward(params, target[role], self.step_factor)

        return selected

    def target_for(self, role: Role) -> LayoutParams:
        return self.targets[self.layout][role]
