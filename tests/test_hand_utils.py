import unittest
import numpy as np
from handcloud.core.types import MalformedLandmarksError
from handcloud.hand_utils import to_landmark_array, synthetic_hand


# Mock for MediaPipe Landmark structure
class MockLandmark:
    def __init__(self, x, y, z):
        self.x = x
        self.y = y
        self.z = z


class MockHand:
    def __init__(self, points):
        self.landmark = [MockLandmark(*p) for p in points]


class TestLandmarkConversion(unittest.TestCase):
    def setUp(self):
        self.points = synthetic_hand(0.4)

    def test_accepts_numpy(self):
        out = to_landmark_array(self.points)
        self.assertEqual(out.shape, (21, 3))
        np.testing.assert_allclose(out, self.points)

    def test_accepts_flat_list(self):
        """63 floats (CSV style) -> 21x3."""
        out = to_landmark_array(self.points.flatten().tolist())
        self.assertEqual(out.shape, (21, 3))

    def test_accepts_mediapipe_objects(self):
        mp_like = MockHand(self.points)
        np.testing.assert_allclose(to_landmark_array(mp_like), self.points)
        np.testing.assert_allclose(to_landmark_array(mp_like.landmark), self.points)

    def test_rejects_wrong_count(self):
        with self.assertRaises(MalformedLandmarksError):
            to_landmark_array(self.points[:20])
        with self.assertRaises(MalformedLandmarksError):
            to_landmark_array([])

    def test_rejects_other_shapes_of_63(self):
        """63 values are only a hand as 21x3 or flat; transposed / re-blocked are not."""
        with self.assertRaises(MalformedLandmarksError):
            to_landmark_array(self.points.T)
        with self.assertRaises(MalformedLandmarksError):
            to_landmark_array(np.zeros((7, 9)))
        with self.assertRaises(MalformedLandmarksError):
            to_landmark_array(self.points.reshape(1, 21, 3))

    def test_rejects_non_finite(self):
        bad = self.points.copy()
        bad[3, 1] = np.nan
        with self.assertRaises(MalformedLandmarksError):
            to_landmark_array(bad)

    def test_rejects_garbage(self):
        with self.assertRaises(MalformedLandmarksError):
            to_landmark_array(None)
        with self.assertRaises(MalformedLandmarksError):
            to_landmark_array([[0.1, 0.2], [0.3]])


class TestSyntheticHand(unittest.TestCase):
    def test_pinch_gap(self):
        """Thumb tip sits pinch * extent away from the index tip."""
        pts = synthetic_hand(0.5, pinch=0.5, pinch_extent=0.2)
        self.assertAlmostEqual(float(np.linalg.norm(pts[4] - pts[8])), 0.1)

    def test_wrist_and_depth(self):
        pts = synthetic_hand(0.25, depth=-0.1)
        self.assertAlmostEqual(pts[0, 0], 0.25)
        self.assertTrue(np.all(pts[:, 2] == -0.1))


if __name__ == '__main__':
    unittest.main()
