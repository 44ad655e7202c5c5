"""
Async Squat Analyzer
====================

- ClassifierLoader: builds the SquatClassifier on a background thread.
  Until it is ready, classify() returns ERROR_RESULT.
- AsyncSquatAnalyzer: one analysis thread, keep-only-latest frame queue.
  Each frame goes pose detection -> feature extraction -> classification,
  and the FrameAnalysis is cached and handed to the sink.
"""

import threading
import time
from queue import Queue, Empty, Full
from typing import Callable, List, NamedTuple, Optional

import numpy as np

from step3_feature_extraction import ExtractionError, extract_features
from step4_squat_classifier import ClassificationResult, ERROR_RESULT, SquatClassifier


class FrameAnalysis(NamedTuple):
    """Outcome of one frame. landmarks is None when no pose was found."""
    landmarks: Optional[List]
    result: Optional[ClassificationResult]

    @property
    def pose_detected(self) -> bool:
        return self.landmarks is not None


NO_POSE = FrameAnalysis(landmarks=None, result=None)


class ClassifierLoader:
    """Build a SquatClassifier in the background."""

    def __init__(self, factory: Callable[[], SquatClassifier]):
        """
        Args:
            factory: Callable building the classifier, e.g.
                     lambda: SquatClassifier(AssetManager("assets"))
        """
        self._factory = factory
        self._classifier: Optional[SquatClassifier] = None
        self._ready = threading.Event()
        self._lock = threading.Lock()
        self._closed = False
        self.error: Optional[BaseException] = None
        self.thread = None

    def start(self) -> 'ClassifierLoader':
        self.thread = threading.Thread(
            target=self._load, name="classifier-loader", daemon=True
        )
        self.thread.start()
        return self

    def _load(self):
        try:
            classifier = self._factory()
        except Exception as e:
            self.error = e
            print(f"Failed to initialize classifier: {e}")
        else:
            with self._lock:
                if self._closed:
                    classifier.close()
                else:
                    self._classifier = classifier
                    print("Classifier initialized successfully")
        finally:
            self._ready.set()

    @property
    def classifier(self) -> Optional[SquatClassifier]:
        return self._classifier

    @property
    def is_ready(self) -> bool:
        return self._classifier is not None

    def wait(self, timeout: float = None) -> SquatClassifier:
        """
        Block until loading finishes.

        Raises:
            TimeoutError: If loading is still running after timeout
            Exception: The construction error, if loading failed
        """
        if not self._ready.wait(timeout):
            raise TimeoutError("Classifier is still loading")
        if self.error is not None:
            raise self.error
        if self._classifier is None:
            raise RuntimeError("Classifier was closed")
        return self._classifier

    def classify(self, features) -> ClassificationResult:
        classifier = self._classifier
        if classifier is None:
            return ERROR_RESULT
        return classifier.classify(features)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            classifier, self._classifier = self._classifier, None
        if classifier is not None:
            classifier.close()


class AsyncSquatAnalyzer:
    """Background thread for squat analysis."""

    def __init__(
        self,
        pose_detector,
        classifier,
        sink: Optional[Callable[[FrameAnalysis], None]] = None
    ):
        """
        Args:
            pose_detector: Object with detect_all_landmarks(frame) -> list or None
            classifier: Object with classify(features) -> ClassificationResult
                        (SquatClassifier or ClassifierLoader)
            sink: Optional callback receiving every FrameAnalysis
        """
        self.pose_detector = pose_detector
        self.classifier = classifier
        self.sink = sink

        # Keep only the latest frame
        self.frame_queue = Queue(maxsize=1)

        self.latest_result: Optional[FrameAnalysis] = None
        self.result_lock = threading.Lock()

        self.running = False
        self.thread = None
        self.analysis_fps = 0.0
        self.dropped_frames = 0

    def start(self):
        """Start background analysis thread."""
        self.running = True
        self.thread = threading.Thread(
            target=self._analysis_loop, name="squat-analyzer", daemon=True
        )
        self.thread.start()

    def stop(self, timeout: float = 1.0) -> bool:
        """
        Stop analysis thread.

        Returns:
            True if the thread has exited. False if it is still busy with a
            frame; the thread is kept so stop() can be called again.
        """
        self.running = False
        if self.thread:
            self.thread.join(timeout=timeout)
            if self.thread.is_alive():
                print("Analysis thread still running after stop")
                return False
            self.thread = None
        return True

    def submit_frame(self, frame: np.ndarray) -> None:
        """Submit frame for analysis (non-blocking). Replaces a pending frame."""
        try:
            self.frame_queue.get_nowait()
            self.dropped_frames += 1
        except Empty:
            pass
        try:
            self.frame_queue.put_nowait(frame.copy())
        except Full:
            # Another producer filled the slot first
            self.dropped_frames += 1

    def get_latest_result(self):
        """Get latest analysis result (non-blocking)."""
        with self.result_lock:
            return self.latest_result, self.analysis_fps

    def analyze_frame(self, frame: np.ndarray) -> FrameAnalysis:
        """Run pose detection, feature extraction and classification on one frame."""
        landmarks = self.pose_detector.detect_all_landmarks(frame)
        if landmarks is None or len(landmarks) == 0:
            return NO_POSE

        try:
            features = extract_features(landmarks)
        except ExtractionError as e:
            print(f"Error extracting features: {e}")
            return FrameAnalysis(landmarks=landmarks, result=ERROR_RESULT)

        result = self.classifier.classify(features)
        return FrameAnalysis(landmarks=landmarks, result=result)

    def _analysis_loop(self):
        """Main analysis loop running in background."""
        prev_time = time.time()

        while self.running:
            try:
                frame = self.frame_queue.get(timeout=0.1)
            except Empty:
                continue

            try:
                analysis = self.analyze_frame(frame)
            except Exception as e:
                print(f"Frame analysis failed: {e}")
                continue

            curr_time = time.time()
            fps = 1.0 / (curr_time - prev_time + 1e-6)
            prev_time = curr_time

            with self.result_lock:
                self.latest_result = analysis
                self.analysis_fps = fps

            if self.sink is not None:
                try:
                    self.sink(analysis)
                except Exception as e:
                    print(f"Result sink failed: {e}")
