"""
Squat Feature Extractor
=======================
Maps a full MediaPipe landmark set to the 20-dimensional squat feature vector.

Input:  33 landmarks (x, y normalized to [0, 1])
Output: Vector (20,) float32
        [0:16]  x, y of R-shoulder, L-shoulder, R-hip, L-hip,
                R-knee, L-knee, R-ankle, L-ankle
        [16:20] flexion angles: R-knee, L-knee, R-hip, L-hip (degrees)
"""

import math
from collections import OrderedDict
from typing import Dict, Sequence, Tuple

import numpy as np

from utils.angle_calculator import AngleCalculator


# MediaPipe landmark indices, in canonical feature order
SQUAT_LANDMARKS = OrderedDict([
    ('right_shoulder', 12),
    ('left_shoulder', 11),
    ('right_hip', 24),
    ('left_hip', 23),
    ('right_knee', 26),
    ('left_knee', 25),
    ('right_ankle', 28),
    ('left_ankle', 27),
])

MIN_LANDMARKS = max(SQUAT_LANDMARKS.values()) + 1  # 29

FEATURE_NAMES = [
    f"{name}_{axis}" for name in SQUAT_LANDMARKS for axis in ('x', 'y')
] + [f"{name}_angle" for name in AngleCalculator.ANGLE_ORDER]  # 20


class ExtractionError(ValueError):
    """Landmarks are missing, malformed or out of range."""


class SquatFeatureExtractor:
    """Build squat feature vectors from pose landmarks."""

    @staticmethod
    def _read_point(landmarks, index: int) -> Tuple[float, float]:
        """Read (x, y) from a landmark object or an array row."""
        lm = landmarks[index]
        if hasattr(lm, 'x') and hasattr(lm, 'y'):
            x, y = lm.x, lm.y
        else:
            x, y = lm[0], lm[1]
        x, y = float(x), float(y)
        if not (math.isfinite(x) and math.isfinite(y)):
            raise ExtractionError(f"Landmark {index} has non-finite coordinates ({x}, {y})")
        return x, y

    @classmethod
    def read_joints(cls, landmarks: Sequence) -> Dict[str, Tuple[float, float]]:
        """
        Read the 8 squat joints from a landmark sequence.

        Args:
            landmarks: List of Landmark objects (with .x, .y) or array (N, >=2)

        Returns:
            OrderedDict joint name -> (x, y), in canonical feature order

        Raises:
            ExtractionError: If the landmark set cannot provide all 8 joints
        """
        if landmarks is None:
            raise ExtractionError("No landmarks")

        try:
            count = len(landmarks)
        except TypeError as e:
            raise ExtractionError(f"Landmarks are not a sequence: {e}") from e

        if count < MIN_LANDMARKS:
            raise ExtractionError(
                f"Expected at least {MIN_LANDMARKS} landmarks, got {count}"
            )

        try:
            return OrderedDict(
                (name, cls._read_point(landmarks, idx))
                for name, idx in SQUAT_LANDMARKS.items()
            )
        except ExtractionError:
            raise
        except (IndexError, KeyError, TypeError, ValueError) as e:
            raise ExtractionError(f"Malformed landmarks: {e}") from e

    @classmethod
    def extract(cls, landmarks: Sequence) -> np.ndarray:
        """
        Extract the 20-feature vector.

        Args:
            landmarks: List of Landmark objects (with .x, .y) or array (N, >=2)

        Returns:
            numpy array shape (20,), dtype float32

        Raises:
            ExtractionError: If landmarks are missing or malformed
        """
        joints = cls.read_joints(landmarks)
        angles = AngleCalculator.calculate_squat_angles(joints)

        features = [coord for point in joints.values() for coord in point]
        features.extend(angles.angles_vector)

        # Model input is float32, so coordinates match the landmarks at float32 precision
        return np.array(features, dtype=np.float32)


extract_features = SquatFeatureExtractor.extract


# Test module
if __name__ == "__main__":
    print("Testing SquatFeatureExtractor...")

    from collections import namedtuple
    Landmark = namedtuple('Landmark', ['x', 'y', 'z', 'visibility'])

    test_landmarks = [Landmark(0.5, 0.5, 0.0, 0.0)] * 33
    test_landmarks[11] = Landmark(0.55, 0.3, 0, 0.9)
    test_landmarks[12] = Landmark(0.45, 0.3, 0, 0.9)
    test_landmarks[23] = Landmark(0.55, 0.5, 0, 0.9)
    test_landmarks[24] = Landmark(0.45, 0.5, 0, 0.9)
    test_landmarks[25] = Landmark(0.6, 0.7, 0, 0.9)
    test_landmarks[26] = Landmark(0.4, 0.7, 0, 0.9)
    test_landmarks[27] = Landmark(0.55, 0.9, 0, 0.9)
    test_landmarks[28] = Landmark(0.45, 0.9, 0, 0.9)

    features = extract_features(test_landmarks)
    for name, value in zip(FEATURE_NAMES, features):
        print(f"  {name}: {value:.3f}")

    print("\n✓ Test completed!")
