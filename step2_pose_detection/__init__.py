"""
Step 2: Pose Detection
======================
MediaPipe Pose: frame BGR -> 33 landmarks, hoặc None nếu không có người.
"""

from .pose_detector import PoseDetector, Landmark, landmarks_from_results

__all__ = ['PoseDetector', 'Landmark', 'landmarks_from_results']
