import math
import unittest
import numpy as np
from handcloud.core.kinematics import HandSignalExtractor, pinch_amount, palm_rotation, curl_amount
from handcloud.core.types import HandFilterState
from handcloud.config import CONFIG
from handcloud.hand_utils import synthetic_hand


class TestGestureGeometry(unittest.TestCase):
    def test_pinch_normalized(self):
        """Half the max extent reads as 0.5."""
        self.assertAlmostEqual(pinch_amount(synthetic_hand(pinch=0.5), 0.2), 0.5)
        self.assertAlmostEqual(pinch_amount(synthetic_hand(pinch=0.0), 0.2), 0.0)

    def test_pinch_clamped(self):
        """A gap wider than the extent saturates at 1."""
        self.assertEqual(pinch_amount(synthetic_hand(pinch=3.0), 0.2), 1.0)

    def test_palm_rotation(self):
        """atan2 on the wrist -> middle tip vector, scaled by sensitivity."""
        lms = np.zeros((21, 3))
        lms[12] = (0.0, 1.0, 1.0)
        rot_x, rot_y = palm_rotation(lms, 2.0)
        self.assertAlmostEqual(rot_x, math.pi / 2)
        self.assertAlmostEqual(rot_y, 0.0)

        lms[12] = (1.0, 1.0, 0.0)
        rot_x, rot_y = palm_rotation(lms, 1.0)
        self.assertAlmostEqual(rot_x, 0.0)
        self.assertAlmostEqual(rot_y, math.pi / 4)

    def test_curl_open_vs_fist(self):
        self.assertEqual(curl_amount(synthetic_hand(curl=0.0)), 0.0)
        fist = curl_amount(synthetic_hand(curl=1.0))
        self.assertGreater(fist, 0.5)
        self.assertLessEqual(fist, 1.0)

    def test_curl_bounded_for_random_skeletons(self):
        """Any finite skeleton yields a curl inside [0, 1]."""
        rng = np.random.default_rng(3)
        for _ in range(200):
            value = curl_amount(rng.random((21, 3)))
            self.assertGreaterEqual(value, 0.0)
            self.assertLessEqual(value, 1.0)

    def test_curl_degenerate_skeleton(self):
        """All points on the wrist -> no curl information, no division error."""
        self.assertEqual(curl_amount(np.zeros((21, 3))), 0.0)


class TestHandSignalExtractor(unittest.TestCase):
    def setUp(self):
        self.extractor = HandSignalExtractor(CONFIG)
        self.state = HandFilterState()

    def test_first_detection_captures_baseline(self):
        sig = self.extractor.extract(synthetic_hand(depth=-0.05), self.state)
        self.assertTrue(sig.detected)
        self.assertTrue(self.state.detected)
        self.assertAlmostEqual(self.state.baseline_z, -0.05)

        # Baseline stays while the hand is tracked
        self.extractor.extract(synthetic_hand(depth=-0.2), self.state)
        self.assertAlmostEqual(self.state.baseline_z, -0.05)

    def test_baseline_recaptured_after_gap(self):
        self.extractor.extract(synthetic_hand(depth=0.0), self.state)
        self.state.mark_lost()
        self.assertIsNone(self.state.baseline_z)
        self.extractor.extract(synthetic_hand(depth=-0.1), self.state)
        self.assertAlmostEqual(self.state.baseline_z, -0.1)

    def test_position_smoothing(self):
        """Wrist is the center, smoothed at 0.3 from the initial (0.5, 0.5, 0.5)."""
        sig = self.extractor.extract(synthetic_hand(wrist_x=0.2, depth=0.0), self.state)
        self.assertAlmostEqual(sig.position[0], 0.5 + (0.2 - 0.5) * 0.3)
        self.assertAlmostEqual(sig.position[1], 0.5 + (0.8 - 0.5) * 0.3)
        self.assertAlmostEqual(sig.position[2], 0.5 * 0.7)

    def test_pinch_smoothing(self):
        """Pinch starts open (1.0) and moves at the gesture factor."""
        sig = self.extractor.extract(synthetic_hand(pinch=0.0), self.state)
        self.assertAlmostEqual(sig.pinch, 0.8)

    def test_zoom_positive_when_closer(self):
        """Moving toward the camera (smaller z) than the baseline zooms in."""
        for _ in range(60):
            sig = self.extractor.extract(synthetic_hand(depth=0.0), self.state)
        self.assertAlmostEqual(sig.zoom, 0.0, places=4)

        for _ in range(60):
            sig = self.extractor.extract(synthetic_hand(depth=-0.1), self.state)
        self.assertGreater(sig.zoom, 0.0)
        self.assertAlmostEqual(sig.zoom, 0.1 * CONFIG["DEPTH_SENSITIVITY"], places=4)

    def test_outputs_bounded(self):
        """Pinch and curl stay inside [0, 1] for arbitrary finite input."""
        rng = np.random.default_rng(11)
        for _ in range(100):
            sig = self.extractor.extract(rng.normal(0.5, 2.0, (21, 3)), self.state)
            self.assertTrue(0.0 <= sig.pinch <= 1.0)
            self.assertTrue(0.0 <= sig.curl <= 1.0)


if __name__ == '__main__':
    unittest.main()
