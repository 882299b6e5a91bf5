"""
HandCloud Role Assignment.
Maps 0..2 detected hands onto the fixed LEFT / RIGHT roles.

With two hands the on-screen order wins over the detector's handedness label
(labels flicker when hands cross or the frame is mirrored). With a single
hand there is nothing to sort against, so the label is trusted.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from handcloud.config import CONFIG, LANDMARKS
from handcloud.core.kinematics import HandSignalExtractor
from handcloud.core.types import (
    HandFilterState,
    HandLandmarkFrame,
    MalformedLandmarksError,
    RawHand,
    Role,
    RoleAssignment,
)
from handcloud.hand_utils import to_landmark_array

logger = logging.getLogger(__name__)

_LABELS = {"left": Role.LEFT, "right": Role.RIGHT}


def _wrist_x(hand: RawHand) -> float:
    return float(hand.landmarks[LANDMARKS["WRIST"]][0])


def assign_roles(hands: Sequence[RawHand]) -> Dict[Role, RawHand]:
    """
    Pure role resolution. Expects hands whose landmarks are (21, 3) arrays.
    """
    if len(hands) > 2:
        logger.warning("%d hands detected, only the first two are used", len(hands))
        hands = hands[:2]

    if len(hands) == 2:
        left, right = sorted(hands, key=_wrist_x)
        return {Role.LEFT: left, Role.RIGHT: right}

    if len(hands) == 1:
        hand = hands[0]
        role = _LABELS.get((hand.label or "").strip().lower())
        if role is None:
            logger.warning("Ignoring hand with unknown label %r", hand.label)
            return {}
        return {role: hand}

    return {}


class HandRoleAssigner:
    """
    Owns the per-role filter memory and produces one RoleAssignment per
    detector frame.
    """

    def __init__(self, extractor: Optional[HandSignalExtractor] = None, config: Mapping = CONFIG):
        self.extractor = extractor or HandSignalExtractor(config)
        self.filters: Dict[Role, HandFilterState] = {role: HandFilterState() for role in Role}

    def _validate(self, hands: Sequence[RawHand]) -> List[RawHand]:
        valid = []
        for hand in hands:
            try:
                lms = to_landmark_array(hand.landmarks)
            except MalformedLandmarksError as exc:
                logger.warning("Rejected %s hand: %s", hand.label or "unlabelled", exc)
                continue
            valid.append(RawHand(lms, hand.label))
        return valid

    def process(self, frame: Optional[HandLandmarkFrame]) -> RoleAssignment:
        hands = self._validate(frame.hands) if frame is not None else []
        assigned = assign_roles(hands)

        signals = {}
        for role, state in self.filters.items():
            hand = assigned.get(role)
            if hand is None:
                state.mark_lost()
                continue
            signals[role] = self.extractor.extract(hand.landmarks, state)

        return RoleAssignment(left=signals.get(Role.LEFT), right=signals.get(Role.RIGHT))

    def reset(self):
        for state in self.filters.values():
            state.reset()

    def reset_baseline(self):
        """Re-capture the depth reference on the next detection of each role."""
        for state in self.filters.values():
            state.baseline_z = None