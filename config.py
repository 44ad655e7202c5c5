"""
Squat Check AI Configuration
============================

Central configuration file for all pipeline parameters.
"""

# =============================================================================
# Camera Settings
# =============================================================================
CAMERA_ID = 0
CAMERA_WIDTH = 640
CAMERA_HEIGHT = 480
TARGET_FPS = 30

# =============================================================================
# MediaPipe Pose Settings
# =============================================================================
MIN_DETECTION_CONFIDENCE = 0.5
MIN_TRACKING_CONFIDENCE = 0.5
MODEL_COMPLEXITY = 1
SMOOTH_LANDMARKS = True

# =============================================================================
# Squat Classifier Settings
# =============================================================================
ASSETS_DIR = "assets"
MODEL_PATH = "squat_model.pt"        # TorchScript, input (1, 20) -> output (1, 3)
SCALER_PATH = "scaler_params.json"   # {"mean": [...], "scale": [...]}

NUM_FEATURES = 20
NUM_THREADS = 4    # CPU backend threads when no GPU is available
USE_GPU = None     # None=auto-detect, True/False to force

# =============================================================================
# Display Settings
# =============================================================================
WINDOW_NAME = "Squat Check AI - Real-time Analysis"
FONT_SCALE = 0.7

# Colors (BGR format)
COLOR_GREEN = (0, 255, 0)
COLOR_ORANGE = (0, 165, 255)
COLOR_RED = (0, 0, 255)
COLOR_WHITE = (255, 255, 255)
COLOR_BLACK = (0, 0, 0)
