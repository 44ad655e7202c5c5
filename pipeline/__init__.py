"""
Squat Check Pipeline

4-Step Pipeline:
1. Frame Capture - Capture frames from webcam/video
2. Pose Detection - Estimate 33 landmarks using MediaPipe
3. Feature Extraction - 20 squat features
4. Squat Classification - TorchScript MLP (Neutral / Correct Pose / Incorrect Pose)
"""

from .async_analyzer import AsyncSquatAnalyzer, ClassifierLoader, FrameAnalysis, NO_POSE

__all__ = [
    'AsyncSquatAnalyzer',
    'ClassifierLoader',
    'FrameAnalysis',
    'NO_POSE',
]
