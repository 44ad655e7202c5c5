"""
Step 1: Frame Capture
Nhiệm vụ: Lấy frame BGR từ webcam, file video hoặc một ảnh.
"""

import cv2
import numpy as np
from abc import ABC, abstractmethod
from typing import Iterator, Optional

import config


class FrameCapture(ABC):
    """Nguồn frame cho pipeline."""

    @abstractmethod
    def get_frame(self) -> Optional[np.ndarray]:
        """Return the next BGR frame, None when the source is exhausted."""

    @abstractmethod
    def release(self) -> None:
        pass

    def frames(self) -> Iterator[np.ndarray]:
        """Yield frames until the source runs out."""
        while True:
            frame = self.get_frame()
            if frame is None:
                break
            yield frame

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()


class WebcamCapture(FrameCapture):
    """Capture frames từ webcam real-time."""

    def __init__(self,
                 camera_id: int = config.CAMERA_ID,
                 width: int = config.CAMERA_WIDTH,
                 height: int = config.CAMERA_HEIGHT,
                 fps: int = config.TARGET_FPS):
        """
        Args:
            camera_id: ID của camera (0 = camera mặc định)
            width: Chiều rộng frame
            height: Chiều cao frame
            fps: FPS mong muốn (camera có thể bỏ qua)
        """
        self.camera_id = camera_id
        self.cap = cv2.VideoCapture(camera_id)

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self.cap.set(cv2.CAP_PROP_FPS, fps)

        if not self.cap.isOpened():
            raise RuntimeError(f"Cannot open camera {camera_id}")

    def get_frame(self) -> Optional[np.ndarray]:
        ret, frame = self.cap.read()
        return frame if ret else None

    def get_fps(self) -> float:
        """Lấy FPS thực tế của camera."""
        return self.cap.get(cv2.CAP_PROP_FPS)

    def release(self) -> None:
        if self.cap.isOpened():
            self.cap.release()


class VideoFileCapture(WebcamCapture):
    """Capture frames from a video file."""

    def __init__(self, video_path: str):
        self.video_path = video_path
        self.cap = cv2.VideoCapture(video_path)
        if not self.cap.isOpened():
            raise RuntimeError(f"Cannot open video {video_path}")
        self.total_frames = int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT))


class ImageCapture(FrameCapture):
    """Yield a single image once."""

    def __init__(self, image_path: str):
        self.image_path = image_path
        self.image = cv2.imread(image_path)
        if self.image is None:
            raise RuntimeError(f"Cannot read image {image_path}")

    def get_frame(self) -> Optional[np.ndarray]:
        image, self.image = self.image, None
        return image

    def release(self) -> None:
        self.image = None
