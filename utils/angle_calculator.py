"""
Angle Calculator Utility
Calculates joint angles from pose landmarks.
"""

import math
from typing import Dict, List, Sequence
from dataclasses import dataclass


@dataclass
class AngleResult:
    """Result of angle calculation."""
    angles_degrees: Dict[str, float]
    angles_vector: List[float]


class AngleCalculator:
    """
    Calculate joint angles from 2D pose landmarks.

    Uses 4 flexion angles for squat classification:
    - right_knee, left_knee
    - right_hip, left_hip

    A flexion angle is 180 minus the interior angle, so a fully
    extended joint reads 0 degrees.
    """

    # Angle definitions: (point_a, vertex, point_b)
    ANGLE_DEFINITIONS = {
        'right_knee': ('right_hip', 'right_knee', 'right_ankle'),
        'left_knee': ('left_hip', 'left_knee', 'left_ankle'),
        'right_hip': ('right_shoulder', 'right_hip', 'right_knee'),
        'left_hip': ('left_shoulder', 'left_hip', 'left_knee'),
    }

    # Order of angles in vector representation
    ANGLE_ORDER = ['right_knee', 'left_knee', 'right_hip', 'left_hip']

    @staticmethod
    def calculate_angle(
        point_a: Sequence[float],
        vertex: Sequence[float],
        point_b: Sequence[float]
    ) -> float:
        """
        Calculate interior angle at vertex between point_a and point_b.

        Args:
            point_a: First point (x, y)
            vertex: Vertex point where angle is measured
            point_b: Second point (x, y)

        Returns:
            Angle in degrees [0, 180]
        """
        radians = (
            math.atan2(point_b[1] - vertex[1], point_b[0] - vertex[0])
            - math.atan2(point_a[1] - vertex[1], point_a[0] - vertex[0])
        )
        angle = abs(math.degrees(radians))

        # Reflex correction
        if angle > 180.0:
            angle = 360.0 - angle

        return angle

    @classmethod
    def flexion_angle(
        cls,
        point_a: Sequence[float],
        vertex: Sequence[float],
        point_b: Sequence[float]
    ) -> float:
        """Flexion angle at vertex: 0 when straight, 180 when fully folded."""
        return 180.0 - cls.calculate_angle(point_a, vertex, point_b)

    @classmethod
    def calculate_squat_angles(cls, points: Dict[str, Sequence[float]]) -> AngleResult:
        """
        Calculate the 4 squat flexion angles.

        Args:
            points: Dictionary mapping joint names to (x, y) points.
                    Must contain shoulders, hips, knees and ankles.

        Returns:
            AngleResult with degrees and ordered vector

        Raises:
            KeyError: If a required joint is missing
        """
        angles_degrees = {}

        for angle_name, (pt_a_name, vertex_name, pt_b_name) in cls.ANGLE_DEFINITIONS.items():
            angles_degrees[angle_name] = cls.flexion_angle(
                points[pt_a_name],
                points[vertex_name],
                points[pt_b_name]
            )

        angles_vector = [angles_degrees[name] for name in cls.ANGLE_ORDER]

        return AngleResult(
            angles_degrees=angles_degrees,
            angles_vector=angles_vector
        )
