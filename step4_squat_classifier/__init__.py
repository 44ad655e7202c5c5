"""
Step 4: Squat Classifier
========================
Phân loại tư thế squat từ vector 20 features bằng MLP (TorchScript).

Hỗ trợ 3 class:
- Neutral
- Correct Pose
- Incorrect Pose
"""

from .assets import AssetManager
from .backends import InferenceBackend, GpuBackend, CpuBackend, create_backend
from .classifier import SquatClassifier, ClassificationResult, ERROR_RESULT, CLASS_NAMES
from .scaler import ScalerParams, ScalerParamsError, load_scaler_params, scale_features

__all__ = [
    'AssetManager',
    'InferenceBackend',
    'GpuBackend',
    'CpuBackend',
    'create_backend',
    'SquatClassifier',
    'ClassificationResult',
    'ERROR_RESULT',
    'CLASS_NAMES',
    'ScalerParams',
    'ScalerParamsError',
    'load_scaler_params',
    'scale_features',
]
