import unittest
import numpy as np
from handcloud.core.role_assigner import HandRoleAssigner, assign_roles
from handcloud.core.types import HandLandmarkFrame, RawHand, Role, RoleAssignment, ControlSignal
from handcloud.hand_utils import synthetic_hand


def frame(*hands):
    return HandLandmarkFrame([RawHand(synthetic_hand(x), label) for x, label in hands])


class TestAssignRoles(unittest.TestCase):
    def test_two_hands_sorted_by_screen_position(self):
        """Labels are ignored with two hands: leftmost wrist is LEFT."""
        hands = [RawHand(synthetic_hand(0.8), "Left"), RawHand(synthetic_hand(0.2), "Right")]
        roles = assign_roles(hands)
        self.assertAlmostEqual(roles[Role.LEFT].landmarks[0, 0], 0.2)
        self.assertAlmostEqual(roles[Role.RIGHT].landmarks[0, 0], 0.8)

    def test_single_hand_trusts_label(self):
        roles = assign_roles([RawHand(synthetic_hand(0.9), "Left")])
        self.assertEqual(list(roles), [Role.LEFT])
        roles = assign_roles([RawHand(synthetic_hand(0.1), "right")])
        self.assertEqual(list(roles), [Role.RIGHT])

    def test_single_hand_unknown_label(self):
        with self.assertLogs("handcloud.core.role_assigner", level="WARNING"):
            roles = assign_roles([RawHand(synthetic_hand(0.5), "Ambidextrous")])
        self.assertEqual(roles, {})

    def test_no_hands(self):
        self.assertEqual(assign_roles([]), {})

    def test_extra_hands_dropped(self):
        hands = [RawHand(synthetic_hand(x), "Left") for x in (0.6, 0.3, 0.1)]
        with self.assertLogs("handcloud.core.role_assigner", level="WARNING"):
            roles = assign_roles(hands)
        # First two only: 0.1 never makes it in
        self.assertAlmostEqual(roles[Role.LEFT].landmarks[0, 0], 0.3)
        self.assertAlmostEqual(roles[Role.RIGHT].landmarks[0, 0], 0.6)


class TestHandRoleAssigner(unittest.TestCase):
    def setUp(self):
        self.assigner = HandRoleAssigner()

    def test_both_roles(self):
        out = self.assigner.process(frame((0.7, "Left"), (0.3, "Right")))
        self.assertTrue(out.both_detected)
        self.assertLess(out.left.position[0], out.right.position[0])

    def test_missing_role_keeps_stale_values(self):
        for _ in range(5):
            self.assigner.process(frame((0.2, "Left")))
        state = self.assigner.filters[Role.LEFT]
        last_pos = state.position.copy()

        out = self.assigner.process(frame())
        self.assertFalse(out.left_detected)
        self.assertIsNone(out.left)
        self.assertFalse(state.detected)
        self.assertIsNone(state.baseline_z)
        np.testing.assert_array_equal(state.position, last_pos)

    def test_none_frame(self):
        out = self.assigner.process(None)
        self.assertEqual(out, RoleAssignment())

    def test_malformed_hand_skipped(self):
        bad = RawHand(np.zeros((20, 3)), "Right")
        good = RawHand(synthetic_hand(0.4), "Left")
        with self.assertLogs("handcloud.core.role_assigner", level="WARNING"):
            out = self.assigner.process(HandLandmarkFrame([bad, good]))
        self.assertTrue(out.left_detected)
        self.assertFalse(out.right_detected)

    def test_transposed_hand_not_detected(self):
        transposed = RawHand(synthetic_hand(0.3).T, "Left")
        with self.assertLogs("handcloud.core.role_assigner", level="WARNING"):
            out = self.assigner.process(HandLandmarkFrame([transposed]))
        self.assertFalse(out.left_detected)
        self.assertFalse(self.assigner.filters[Role.LEFT].detected)

    def test_accepts_mediapipe_style_hands(self):
        """Landmark objects (.landmark of points with x/y/z) pass straight through."""
        class Point:
            def __init__(self, x, y, z):
                self.x, self.y, self.z = x, y, z

        class Landmarks:
            def __init__(self, pts):
                self.landmark = [Point(*p) for p in pts]

        out = self.assigner.process(HandLandmarkFrame([RawHand(Landmarks(synthetic_hand(0.6)), "Right")]))
        self.assertTrue(out.right_detected)

    def test_reset_baseline(self):
        self.assigner.process(frame((0.3, "Left"), (0.7, "Right")))
        self.assigner.reset_baseline()
        for state in self.assigner.filters.values():
            self.assertIsNone(state.baseline_z)

    def test_reset(self):
        self.assigner.process(frame((0.3, "Left")))
        self.assigner.reset()
        state = self.assigner.filters[Role.LEFT]
        self.assertFalse(state.detected)
        self.assertEqual(state.pinch, 1.0)
        np.testing.assert_array_equal(state.position, [0.5, 0.5, 0.5])


class TestStatusText(unittest.TestCase):
    def test_messages(self):
        sig = ControlSignal()
        self.assertEqual(RoleAssignment().status_text(), "No hand detected")
        self.assertEqual(RoleAssignment(left=sig).status_text(), "Left Hand Detected")
        self.assertEqual(RoleAssignment(right=sig).status_text(), "Right Hand Detected")
        self.assertEqual(RoleAssignment(sig, sig).status_text(), "Left + Right Hand Detected")


if __name__ == '__main__':
    unittest.main()
