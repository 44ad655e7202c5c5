"""
Step 3: Feature Extraction
==========================
Chuyển 33 landmarks thành vector 20 features cho squat classifier.

- 16 tọa độ (x, y) của vai, hông, gối, cổ chân (phải/trái)
- 4 góc gập: gối phải, gối trái, hông phải, hông trái
"""

from .feature_extractor import (
    SquatFeatureExtractor,
    ExtractionError,
    extract_features,
    FEATURE_NAMES,
    SQUAT_LANDMARKS,
)

__all__ = [
    'SquatFeatureExtractor',
    'ExtractionError',
    'extract_features',
    'FEATURE_NAMES',
    'SQUAT_LANDMARKS',
]
