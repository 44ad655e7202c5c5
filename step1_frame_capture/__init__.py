"""
Step 1: Frame Capture
=====================
Webcam, video file hoặc ảnh -> frame BGR.
"""

from .frame_capture import FrameCapture, WebcamCapture, VideoFileCapture, ImageCapture

__all__ = ['FrameCapture', 'WebcamCapture', 'VideoFileCapture', 'ImageCapture']
