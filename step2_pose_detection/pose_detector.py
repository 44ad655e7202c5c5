"""
Step 2: Pose Detection with MediaPipe
Nhiệm vụ: Xác định 33 điểm (keypoints) trên cơ thể người
"""

import cv2
import numpy as np
from typing import List, Optional, NamedTuple

import config


class Landmark(NamedTuple):
    """Một điểm landmark trên cơ thể."""
    x: float  # Normalized [0, 1]
    y: float  # Normalized [0, 1]
    z: float  # Depth
    visibility: float  # Confidence


def landmarks_from_results(results) -> Optional[List[Landmark]]:
    """Convert a MediaPipe Pose result to a Landmark list, None if no pose."""
    if results is None or not results.pose_landmarks:
        return None

    landmarks = [
        Landmark(lm.x, lm.y, lm.z, lm.visibility)
        for lm in results.pose_landmarks.landmark
    ]
    return landmarks or None


class PoseDetector:
    """Detect pose và keypoints sử dụng MediaPipe."""

    def __init__(self,
                 min_detection_confidence: float = config.MIN_DETECTION_CONFIDENCE,
                 min_tracking_confidence: float = config.MIN_TRACKING_CONFIDENCE,
                 model_complexity: int = config.MODEL_COMPLEXITY):
        """
        Khởi tạo MediaPipe Pose.

        Args:
            min_detection_confidence: Ngưỡng confidence cho detection
            min_tracking_confidence: Ngưỡng confidence cho tracking
            model_complexity: 0, 1 hoặc 2
        """
        import mediapipe as mp

        self.mp_pose = mp.solutions.pose
        self.pose = self.mp_pose.Pose(
            static_image_mode=False,  # Video mode for better tracking
            model_complexity=model_complexity,
            smooth_landmarks=config.SMOOTH_LANDMARKS,
            enable_segmentation=False,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence
        )

    def detect_all_landmarks(self, frame: np.ndarray) -> Optional[List[Landmark]]:
        """
        Detect tất cả 33 landmarks.

        Args:
            frame: Ảnh BGR

        Returns:
            List 33 Landmark, None nếu không detect được
        """
        # MediaPipe cần RGB
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

        # Tăng performance
        rgb_frame.flags.writeable = False
        results = self.pose.process(rgb_frame)

        return landmarks_from_results(results)

    def close(self):
        """Giải phóng resources."""
        self.pose.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
