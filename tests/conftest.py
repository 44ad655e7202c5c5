"""
Shared fixtures: synthetic landmarks, scripted stub models and asset dirs.

Stub models are real TorchScript modules saved to tmp_path, so the
classifier loads them exactly like a trained model.
"""

import json
from collections import namedtuple
from typing import List

import pytest
import torch
import torch.nn as nn

from step4_squat_classifier import AssetManager, SquatClassifier


Landmark = namedtuple('Landmark', ['x', 'y', 'z', 'visibility'])


# HELPERS: Synthetic landmark generation

def make_landmarks(joints=None, count=33):
    """
    33 landmarks at the frame center, with the squat joints overridden.

    MediaPipe indices:
        11 = left shoulder     12 = right shoulder
        23 = left hip          24 = right hip
        25 = left knee         26 = right knee
        27 = left ankle        28 = right ankle
    """
    lm = [Landmark(0.5, 0.5, 0.0, 1.0) for _ in range(count)]
    for idx, (x, y) in (joints or {}).items():
        lm[idx] = Landmark(x, y, 0.0, 1.0)
    return lm


# Deep squat side view: knees folded forward, torso leaning
SQUAT_JOINTS = {
    12: (0.42, 0.40),  # right shoulder
    11: (0.46, 0.40),  # left shoulder
    24: (0.40, 0.65),  # right hip
    23: (0.44, 0.65),  # left hip
    26: (0.60, 0.66),  # right knee
    25: (0.64, 0.66),  # left knee
    28: (0.45, 0.90),  # right ankle
    27: (0.49, 0.90),  # left ankle
}

# Standing straight: shoulder, hip, knee, ankle on one vertical line per side
STANDING_JOINTS = {
    12: (0.45, 0.30),
    11: (0.55, 0.30),
    24: (0.45, 0.55),
    23: (0.55, 0.55),
    26: (0.45, 0.72),
    25: (0.55, 0.72),
    28: (0.45, 0.90),
    27: (0.55, 0.90),
}


# HELPERS: Stub TorchScript models

class ConstantScores(nn.Module):
    """Returns the same class scores for every input."""

    def __init__(self, scores: List[float]):
        super().__init__()
        self.register_buffer('scores', torch.tensor([scores], dtype=torch.float32))

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.scores.expand(x.size(0), -1)


class FirstThreeFeatures(nn.Module):
    """Echoes the first 3 (scaled) features as class scores."""

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return x[:, :3]


def save_scripted(module: nn.Module, path) -> None:
    torch.jit.script(module).save(str(path))


def write_assets(root, model=None, mean=None, scale=None, scaler=None):
    """
    Write squat_model.pt and scaler_params.json into root.

    Args:
        model: nn.Module to script, or raw bytes for a broken model
        mean, scale: Scaler lists (default identity)
        scaler: Full JSON object, overrides mean/scale
    """
    if model is None:
        model = ConstantScores([0.1, 0.7, 0.2])
    if isinstance(model, bytes):
        (root / 'squat_model.pt').write_bytes(model)
    else:
        save_scripted(model, root / 'squat_model.pt')

    if scaler is None:
        scaler = {
            'mean': mean if mean is not None else [0.0] * 20,
            'scale': scale if scale is not None else [1.0] * 20,
        }
    (root / 'scaler_params.json').write_text(json.dumps(scaler))
    return AssetManager(root)


# FIXTURES

@pytest.fixture
def squat_landmarks():
    return make_landmarks(SQUAT_JOINTS)


@pytest.fixture
def standing_landmarks():
    return make_landmarks(STANDING_JOINTS)


@pytest.fixture
def make_classifier(tmp_path):
    """Factory: build a CPU SquatClassifier over freshly written assets."""
    created = []

    def _make(**kwargs):
        assets = write_assets(tmp_path, **kwargs)
        classifier = SquatClassifier(assets, use_gpu=False, num_threads=1)
        created.append(classifier)
        return classifier

    yield _make

    for classifier in created:
        classifier.close()
