"""
Utils: Visualization
Các hàm hỗ trợ vẽ và hiển thị cho Squat Check AI
"""

import cv2
import numpy as np
from typing import Optional, Sequence, Tuple

import config
from step3_feature_extraction import SQUAT_LANDMARKS


# Skeleton lines between the squat joints
SQUAT_CONNECTIONS = [
    ('right_shoulder', 'left_shoulder'),
    ('right_shoulder', 'right_hip'),
    ('left_shoulder', 'left_hip'),
    ('right_hip', 'left_hip'),
    ('right_hip', 'right_knee'),
    ('left_hip', 'left_knee'),
    ('right_knee', 'right_ankle'),
    ('left_knee', 'left_ankle'),
]

# Neutral, Correct Pose, Incorrect Pose
CLASS_COLORS = {
    0: config.COLOR_WHITE,
    1: config.COLOR_GREEN,
    2: config.COLOR_RED,
}


def draw_squat_skeleton(frame: np.ndarray, landmarks: Optional[Sequence]) -> np.ndarray:
    """
    Vẽ skeleton của 8 khớp squat lên frame.

    Args:
        frame: Frame ảnh BGR
        landmarks: List 33 Landmark (normalized), hoặc None
    """
    frame_copy = frame.copy()
    if landmarks is None or len(landmarks) <= max(SQUAT_LANDMARKS.values()):
        return frame_copy

    h, w = frame_copy.shape[:2]
    points = {
        name: (int(landmarks[idx].x * w), int(landmarks[idx].y * h))
        for name, idx in SQUAT_LANDMARKS.items()
    }

    for a, b in SQUAT_CONNECTIONS:
        cv2.line(frame_copy, points[a], points[b], config.COLOR_GREEN, 2)

    for point in points.values():
        cv2.circle(frame_copy, point, 4, config.COLOR_GREEN, -1)
        cv2.circle(frame_copy, point, 4, config.COLOR_WHITE, 1)

    return frame_copy


def draw_angle_indicator(
    frame: np.ndarray,
    angle: float,
    position: Tuple[int, int],
    label: str = "Angle"
) -> np.ndarray:
    """Vẽ giá trị góc gập (degrees) tại vị trí cho trước."""
    frame_copy = frame.copy()

    text = f"{label}: {angle:.0f} deg"
    cv2.putText(frame_copy, text, position,
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, config.COLOR_WHITE, 1)

    return frame_copy


def format_result_text(analysis, classifier_ready: bool = True) -> Tuple[str, Tuple[int, int, int]]:
    """
    Text và màu cho kết quả của một frame.

    Args:
        analysis: FrameAnalysis, hoặc None nếu chưa có frame nào
        classifier_ready: False while the classifier is still loading
    """
    if not classifier_ready:
        return "Loading classifier...", config.COLOR_ORANGE
    if analysis is None:
        return "Waiting for frames...", config.COLOR_WHITE
    if not analysis.pose_detected:
        return "No pose detected", config.COLOR_ORANGE

    result = analysis.result
    if result is None or result.is_error:
        return "No usable classification", config.COLOR_ORANGE

    color = CLASS_COLORS.get(result.class_index, config.COLOR_WHITE)
    return f"Pose: {result.label}, Confidence: {result.confidence:.2f}", color


def draw_result_panel(frame: np.ndarray, text: str, color: Tuple[int, int, int]) -> np.ndarray:
    """Vẽ kết quả phân loại ở cuối frame."""
    frame_copy = frame.copy()
    h, w = frame_copy.shape[:2]

    cv2.rectangle(frame_copy, (5, h - 50), (w - 5, h - 5), config.COLOR_BLACK, -1)
    cv2.rectangle(frame_copy, (5, h - 50), (w - 5, h - 5), color, 2)
    cv2.putText(frame_copy, text, (15, h - 20),
                cv2.FONT_HERSHEY_SIMPLEX, config.FONT_SCALE, color, 2)

    return frame_copy


def draw_fps(frame: np.ndarray, fps: float, analysis_fps: float = None) -> np.ndarray:
    """Vẽ FPS counter."""
    frame_copy = frame.copy()
    h, w = frame_copy.shape[:2]

    text = f"FPS: {fps:.0f}"
    if analysis_fps is not None:
        text += f" | AI: {analysis_fps:.0f}"
    cv2.putText(frame_copy, text, (w - 180, 30),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, config.COLOR_WHITE, 1)

    return frame_copy
