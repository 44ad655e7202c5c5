"""
Squat Classifier - TorchScript MLP
==================================
Phân loại tư thế squat từ vector 20 features.

Input:  Vector (20,) - 16 tọa độ + 4 góc gập
Output: ClassificationResult (label, confidence, class_index)

Per-frame failures never raise: they return ERROR_RESULT (class_index = -1)
so the live frame loop keeps running.
"""

from typing import NamedTuple, Optional, Sequence

import numpy as np

import config
from .assets import AssetManager
from .backends import InferenceBackend, create_backend
from .scaler import ScalerParams, load_scaler_params, scale_features


# Class order of the model output
CLASS_NAMES = (
    "Neutral",          # 0
    "Correct Pose",     # 1
    "Incorrect Pose",   # 2
)


class ClassificationResult(NamedTuple):
    """Kết quả phân loại tư thế."""
    label: str           # Tên class
    confidence: float    # Score của class được chọn
    class_index: int     # Index của class (0-2), -1 nếu lỗi

    @property
    def is_error(self) -> bool:
        return self.class_index == -1


ERROR_RESULT = ClassificationResult(label="Error", confidence=0.0, class_index=-1)


class SquatClassifier:
    """
    Classify squat posture from a 20-feature vector.

    Loads the scaler params and the TorchScript model once at construction.
    Construction errors (missing or malformed assets) propagate; classify()
    reports every failure as ERROR_RESULT.
    """

    def __init__(
        self,
        assets: AssetManager,
        model_name: str = config.MODEL_PATH,
        scaler_name: str = config.SCALER_PATH,
        use_gpu: Optional[bool] = config.USE_GPU,
        num_threads: int = config.NUM_THREADS
    ):
        """
        Khởi tạo SquatClassifier.

        Args:
            assets: Resolver for the model and scaler artifacts
            model_name: Asset name of the TorchScript model
            scaler_name: Asset name of the scaler params JSON
            use_gpu: True/False to force, None to auto-detect
            num_threads: Threads for the CPU backend

        Raises:
            FileNotFoundError: If an asset is missing
            ScalerParamsError: If the scaler params are malformed
            RuntimeError: If the model cannot be loaded
        """
        self._backend: Optional[InferenceBackend] = None

        try:
            with assets.open(scaler_name) as f:
                self.scaler_params: ScalerParams = load_scaler_params(f)

            model_bytes = assets.read_bytes(model_name)
            self._backend = create_backend(
                model_bytes,
                use_gpu=use_gpu,
                num_threads=num_threads
            )
        except Exception as e:
            print(f"Failed to initialize SquatClassifier: {e}")
            raise

        self.backend_name = self._backend.name
        print(f"Loaded model from {model_name} ({self.backend_name.upper()})")

    @property
    def is_ready(self) -> bool:
        return self._backend is not None

    def classify(self, features: Sequence[float]) -> ClassificationResult:
        """
        Phân loại tư thế từ vector features.

        Args:
            features: Raw (unscaled) feature vector, length 20

        Returns:
            ClassificationResult, or ERROR_RESULT on any failure
        """
        try:
            count = len(features)
        except TypeError:
            count = -1

        if count != config.NUM_FEATURES:
            print(f"Invalid input features length: {count}")
            return ERROR_RESULT

        # Read once: close() may run concurrently
        backend = self._backend
        if backend is None:
            return ERROR_RESULT

        try:
            scaled = scale_features(features, self.scaler_params)
            scores = backend.run(scaled.astype(np.float32))
        except Exception as e:
            print(f"Inference failed: {e}")
            return ERROR_RESULT

        if scores.shape != (len(CLASS_NAMES),) or not np.all(np.isfinite(scores)):
            print(f"Invalid model output: {scores}")
            return ERROR_RESULT

        class_index = int(np.argmax(scores))  # first max wins ties

        return ClassificationResult(
            label=CLASS_NAMES[class_index],
            confidence=float(scores[class_index]),
            class_index=class_index
        )

    def close(self) -> None:
        """Giải phóng model. classify() returns ERROR_RESULT afterwards."""
        backend, self._backend = self._backend, None
        if backend is not None:
            backend.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
