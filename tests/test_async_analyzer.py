"""
Tests for pipeline/async_analyzer.py and the end-to-end frame pipeline.

The pose detector is a fake returning synthetic landmarks; the classifier
is a real SquatClassifier over scripted stub models.

Usage:
    pytest tests/test_async_analyzer.py -v
"""

import threading
import time

import numpy as np
import pytest

from conftest import ConstantScores, STANDING_JOINTS, make_landmarks, write_assets
from pipeline import AsyncSquatAnalyzer, ClassifierLoader, FrameAnalysis, NO_POSE
from step4_squat_classifier import ERROR_RESULT, ScalerParamsError, SquatClassifier


FEATURES = [0.5] * 16 + [90.0, 90.0, 60.0, 60.0]
FRAME = np.zeros((48, 64, 3), dtype=np.uint8)


class FakePoseDetector:
    """Returns the same landmarks for every frame, records frames seen."""

    def __init__(self, landmarks):
        self.landmarks = landmarks
        self.frames = []

    def detect_all_landmarks(self, frame):
        self.frames.append(frame)
        return self.landmarks


class RecordingClassifier:
    def __init__(self, result):
        self.result = result
        self.calls = []

    def classify(self, features):
        self.calls.append(features)
        return self.result


# ClassifierLoader

class TestClassifierLoader:

    def test_sentinel_before_ready_then_real_result(self, tmp_path):
        assets = write_assets(tmp_path)
        gate = threading.Event()

        def factory():
            gate.wait(5.0)
            return SquatClassifier(assets, use_gpu=False, num_threads=1)

        loader = ClassifierLoader(factory).start()
        assert not loader.is_ready
        assert loader.classify(FEATURES) == ERROR_RESULT
        with pytest.raises(TimeoutError):
            loader.wait(timeout=0.01)

        gate.set()
        classifier = loader.wait(timeout=10.0)
        assert loader.is_ready
        assert loader.classifier is classifier
        assert loader.classify(FEATURES).label == "Correct Pose"
        loader.close()

    def test_construction_error_surfaces(self, tmp_path):
        assets = write_assets(tmp_path, scaler={'mean': [0.0] * 20})
        loader = ClassifierLoader(lambda: SquatClassifier(assets, use_gpu=False)).start()

        with pytest.raises(ScalerParamsError):
            loader.wait(timeout=10.0)
        assert isinstance(loader.error, ScalerParamsError)
        assert loader.classify(FEATURES) == ERROR_RESULT

    def test_close_returns_sentinel(self, tmp_path):
        assets = write_assets(tmp_path)
        loader = ClassifierLoader(
            lambda: SquatClassifier(assets, use_gpu=False, num_threads=1)
        ).start()
        classifier = loader.wait(timeout=10.0)

        loader.close()
        assert loader.classify(FEATURES) == ERROR_RESULT
        assert not classifier.is_ready

    def test_close_before_load_finishes_closes_classifier(self, tmp_path):
        assets = write_assets(tmp_path)
        gate = threading.Event()
        built = []

        def factory():
            gate.wait(5.0)
            classifier = SquatClassifier(assets, use_gpu=False, num_threads=1)
            built.append(classifier)
            return classifier

        loader = ClassifierLoader(factory).start()
        loader.close()
        gate.set()
        loader.thread.join(10.0)

        assert not built[0].is_ready
        assert loader.classify(FEATURES) == ERROR_RESULT
        with pytest.raises(RuntimeError):
            loader.wait(timeout=1.0)


# AsyncSquatAnalyzer

class TestAnalyzeFrame:

    def test_no_pose(self):
        classifier = RecordingClassifier(ERROR_RESULT)
        analyzer = AsyncSquatAnalyzer(FakePoseDetector(None), classifier)

        analysis = analyzer.analyze_frame(FRAME)
        assert analysis == NO_POSE
        assert not analysis.pose_detected
        assert analysis.result is None
        assert classifier.calls == []

    def test_empty_landmarks_is_no_pose(self):
        analyzer = AsyncSquatAnalyzer(FakePoseDetector([]), RecordingClassifier(ERROR_RESULT))
        assert analyzer.analyze_frame(FRAME) == NO_POSE

    def test_extraction_error_gives_sentinel(self):
        landmarks = make_landmarks(STANDING_JOINTS)[:20]
        classifier = RecordingClassifier(ERROR_RESULT)
        analyzer = AsyncSquatAnalyzer(FakePoseDetector(landmarks), classifier)

        analysis = analyzer.analyze_frame(FRAME)
        assert analysis.pose_detected
        assert analysis.result == ERROR_RESULT
        assert classifier.calls == []

    def test_features_reach_classifier(self):
        landmarks = make_landmarks(STANDING_JOINTS)
        classifier = RecordingClassifier(ERROR_RESULT)
        AsyncSquatAnalyzer(FakePoseDetector(landmarks), classifier).analyze_frame(FRAME)

        (features,) = classifier.calls
        assert features.shape == (20,)
        assert features[0] == pytest.approx(STANDING_JOINTS[12][0])


class TestEndToEnd:

    def test_straight_pose_identity_scaler(self, tmp_path):
        # Knees and hips straight: raw 180 degrees -> 0 flexion
        assets = write_assets(tmp_path, model=ConstantScores([0.05, 0.9, 0.05]))
        classifier = SquatClassifier(assets, use_gpu=False, num_threads=1)
        landmarks = make_landmarks(STANDING_JOINTS)
        analyzer = AsyncSquatAnalyzer(FakePoseDetector(landmarks), classifier)

        analysis = analyzer.analyze_frame(FRAME)

        assert analysis.result.label == "Correct Pose"
        assert analysis.result.confidence == pytest.approx(0.9, abs=1e-6)
        assert analysis.result.class_index == 1
        classifier.close()

    def test_closed_classifier_keeps_pipeline_alive(self, tmp_path):
        classifier = SquatClassifier(write_assets(tmp_path), use_gpu=False, num_threads=1)
        analyzer = AsyncSquatAnalyzer(
            FakePoseDetector(make_landmarks(STANDING_JOINTS)), classifier
        )
        classifier.close()
        assert analyzer.analyze_frame(FRAME).result == ERROR_RESULT


class BlockingPoseDetector:
    """Holds the analysis thread inside detection until released."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def detect_all_landmarks(self, frame):
        self.entered.set()
        self.release.wait(5.0)
        return None


class TestBackgroundThread:

    def test_stop_reports_busy_thread(self):
        detector = BlockingPoseDetector()
        analyzer = AsyncSquatAnalyzer(detector, RecordingClassifier(ERROR_RESULT))
        analyzer.start()
        analyzer.submit_frame(FRAME)
        assert detector.entered.wait(5.0)

        try:
            assert analyzer.stop(timeout=0.05) is False
            assert analyzer.thread is not None
            assert analyzer.thread.is_alive()
        finally:
            detector.release.set()

        assert analyzer.stop(timeout=5.0) is True
        assert analyzer.thread is None

    def test_stop_without_start(self):
        analyzer = AsyncSquatAnalyzer(FakePoseDetector(None), RecordingClassifier(ERROR_RESULT))
        assert analyzer.stop() is True

    def test_submit_keeps_only_latest(self):
        analyzer = AsyncSquatAnalyzer(FakePoseDetector(None), RecordingClassifier(ERROR_RESULT))
        frames = [np.full((4, 4, 3), i, dtype=np.uint8) for i in range(3)]
        for frame in frames:
            analyzer.submit_frame(frame)

        assert analyzer.frame_queue.qsize() == 1
        assert analyzer.dropped_frames == 2
        np.testing.assert_array_equal(analyzer.frame_queue.get_nowait(), frames[-1])

    def test_submit_copies_frame(self):
        analyzer = AsyncSquatAnalyzer(FakePoseDetector(None), RecordingClassifier(ERROR_RESULT))
        frame = np.zeros((4, 4, 3), dtype=np.uint8)
        analyzer.submit_frame(frame)
        frame[:] = 255
        assert analyzer.frame_queue.get_nowait().max() == 0

    def test_sink_receives_results(self):
        received = []
        done = threading.Event()

        def sink(analysis):
            received.append(analysis)
            done.set()

        expected = ERROR_RESULT._replace(label="Neutral", confidence=0.6, class_index=0)
        analyzer = AsyncSquatAnalyzer(
            FakePoseDetector(make_landmarks(STANDING_JOINTS)),
            RecordingClassifier(expected),
            sink=sink
        )
        analyzer.start()
        try:
            analyzer.submit_frame(FRAME)
            assert done.wait(5.0)
        finally:
            analyzer.stop()

        assert isinstance(received[0], FrameAnalysis)
        assert received[0].result == expected
        latest, _ = analyzer.get_latest_result()
        assert latest == received[0]

    def test_failing_sink_does_not_stop_thread(self):
        calls = []

        def sink(analysis):
            calls.append(analysis)
            raise ValueError("display gone")

        analyzer = AsyncSquatAnalyzer(
            FakePoseDetector(None), RecordingClassifier(ERROR_RESULT), sink=sink
        )
        analyzer.start()
        try:
            analyzer.submit_frame(FRAME)
            deadline = time.time() + 5.0
            while not calls and time.time() < deadline:
                time.sleep(0.01)
            analyzer.submit_frame(FRAME)
            while len(calls) < 2 and time.time() < deadline:
                time.sleep(0.01)
        finally:
            analyzer.stop()

        assert len(calls) == 2
