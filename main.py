"""
Squat Check AI - Real-time Squat Posture Classification
=======================================================

Pipeline:
1. Frame Capture - Webcam / video / image (OpenCV)
2. Pose Detection - MediaPipe Pose (33 landmarks)
3. Feature Extraction - 16 coordinates + 4 flexion angles
4. Squat Classifier - TorchScript MLP -> Neutral / Correct Pose / Incorrect Pose

The display loop runs on the main thread; analysis runs on a background
thread that only keeps the latest frame. The classifier loads in the
background and frames show "Loading classifier..." until it is ready.

Usage:
    python main.py                     # Webcam
    python main.py --video path.mp4    # Video file
    python main.py --image path.jpg    # Single image
    python main.py --cpu --threads 2   # Force CPU backend

Controls:
    Q / ESC - Quit
    S       - Save screenshot
"""

import argparse
import sys
import time
from typing import Optional

import cv2

import config
from step1_frame_capture import WebcamCapture, VideoFileCapture, ImageCapture
from step2_pose_detection import PoseDetector
from step3_feature_extraction import SquatFeatureExtractor, ExtractionError
from step4_squat_classifier import AssetManager, SquatClassifier
from pipeline import AsyncSquatAnalyzer, ClassifierLoader
from utils.angle_calculator import AngleCalculator
from utils.visualization import (
    draw_squat_skeleton, draw_angle_indicator, draw_result_panel, draw_fps,
    format_result_text
)


class SquatCheckApp:
    """Real-time squat check: capture, background analysis, display."""

    def __init__(
        self,
        assets_dir: str = config.ASSETS_DIR,
        use_gpu: Optional[bool] = config.USE_GPU,
        num_threads: int = config.NUM_THREADS
    ):
        print("=" * 50)
        print("Initializing Squat Check AI...")
        print("=" * 50)

        print("  [1/3] Loading squat classifier (background)...")
        assets = AssetManager(assets_dir)
        self.loader = ClassifierLoader(
            lambda: SquatClassifier(assets, use_gpu=use_gpu, num_threads=num_threads)
        ).start()

        print("  [2/3] Initializing MediaPipe Pose...")
        self.pose_detector = PoseDetector()

        print("  [3/3] Starting analyzer...")
        self.analyzer = AsyncSquatAnalyzer(self.pose_detector, self.loader)

        print("Pipeline ready!\n")

    def render(self, frame, analysis, fps: float = None, analysis_fps: float = None):
        """Draw skeleton, knee angles and result text on a frame."""
        annotated = frame
        if analysis is not None and analysis.pose_detected:
            annotated = draw_squat_skeleton(annotated, analysis.landmarks)
            try:
                joints = SquatFeatureExtractor.read_joints(analysis.landmarks)
                angles = AngleCalculator.calculate_squat_angles(joints).angles_degrees
                annotated = draw_angle_indicator(annotated, angles['right_knee'], (10, 60), "R-knee")
                annotated = draw_angle_indicator(annotated, angles['left_knee'], (10, 85), "L-knee")
            except ExtractionError:
                pass

        text, color = format_result_text(
            analysis, classifier_ready=self.loader.is_ready or self.loader.error is not None
        )
        annotated = draw_result_panel(annotated, text, color)

        if fps is not None:
            annotated = draw_fps(annotated, fps, analysis_fps)
        return annotated

    def run_image(self, image_path: str) -> None:
        """Classify a single image synchronously and show the result."""
        with ImageCapture(image_path) as capture:
            frame = capture.get_frame()

        try:
            self.loader.wait()
        except Exception as e:
            print(f"Error: classifier unavailable: {e}")
            return

        analysis = self.analyzer.analyze_frame(frame)
        text, _ = format_result_text(analysis)
        print(f"\nResult: {text}")

        annotated = self.render(frame, analysis)
        output_path = 'output_result.jpg'
        cv2.imwrite(output_path, annotated)
        print(f"Saved result to: {output_path}")

        cv2.imshow('Result', annotated)
        cv2.waitKey(0)
        cv2.destroyAllWindows()

    def run_stream(self, capture) -> None:
        """Display loop: submit frames, draw the latest analysis."""
        self.analyzer.start()

        fps = 0.0
        prev_time = time.time()
        screenshot_count = 0

        try:
            for frame in capture.frames():
                self.analyzer.submit_frame(frame)
                analysis, analysis_fps = self.analyzer.get_latest_result()

                curr_time = time.time()
                fps = 0.9 * fps + 0.1 / (curr_time - prev_time + 1e-6)
                prev_time = curr_time

                annotated = self.render(frame, analysis, fps, analysis_fps)
                cv2.imshow(config.WINDOW_NAME, annotated)

                key = cv2.waitKey(1) & 0xFF
                if key in (ord('q'), 27):
                    break
                elif key == ord('s'):
                    screenshot_count += 1
                    path = f"screenshot_{screenshot_count:03d}.jpg"
                    cv2.imwrite(path, annotated)
                    print(f"Saved screenshot: {path}")
        finally:
            self.analyzer.stop()
            capture.release()
            cv2.destroyAllWindows()

        if self.loader.error is not None:
            print(f"Classifier failed to load: {self.loader.error}")

    def close(self):
        """Release resources."""
        stopped = self.analyzer.stop()
        self.loader.close()
        # The analysis thread may still be inside MediaPipe
        if stopped or self.analyzer.stop(timeout=5.0):
            self.pose_detector.close()


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Squat Check AI - Real-time Squat Posture Classification',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    input_group = parser.add_mutually_exclusive_group()
    input_group.add_argument('--video', type=str, help='Path to video file')
    input_group.add_argument('--image', type=str, help='Path to image file')
    input_group.add_argument('--camera', type=int, default=config.CAMERA_ID,
                             help='Camera ID for webcam mode')

    parser.add_argument('--assets', type=str, default=config.ASSETS_DIR,
                        help='Directory with squat_model.pt and scaler_params.json')
    parser.add_argument('--cpu', action='store_true',
                        help='Force the CPU backend')
    parser.add_argument('--threads', type=int, default=config.NUM_THREADS,
                        help='Threads for the CPU backend')

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    app = SquatCheckApp(
        assets_dir=args.assets,
        use_gpu=False if args.cpu else config.USE_GPU,
        num_threads=args.threads
    )

    try:
        if args.image:
            app.run_image(args.image)
        elif args.video:
            app.run_stream(VideoFileCapture(args.video))
        else:
            app.run_stream(WebcamCapture(camera_id=args.camera))
    except RuntimeError as e:
        print(f"Error: {e}")
        return 1
    finally:
        app.close()

    return 0


if __name__ == '__main__':
    sys.exit(main())
