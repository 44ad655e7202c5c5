"""
Feature Scaler
==============
Standardization replayed from training: (x - mean) / scale per feature.

The params come from `scaler_params.json`, exported together with the model:
    {"mean": [20 floats], "scale": [20 floats]}
"""

import json
from dataclasses import dataclass
from typing import IO, Mapping, Sequence, Union

import numpy as np

import config


class ScalerParamsError(ValueError):
    """Scaler params artifact is missing keys or holds invalid values."""


@dataclass(frozen=True, eq=False)
class ScalerParams:
    """Per-feature mean and scale, read-only after construction."""
    mean: np.ndarray
    scale: np.ndarray

    def __post_init__(self):
        mean = self._validate('mean', self.mean)
        scale = self._validate('scale', self.scale)

        if np.any(scale == 0.0):
            zeros = np.flatnonzero(scale == 0.0).tolist()
            raise ScalerParamsError(f"Scale is zero at feature(s) {zeros}")

        object.__setattr__(self, 'mean', mean)
        object.__setattr__(self, 'scale', scale)

    @staticmethod
    def _validate(key: str, values) -> np.ndarray:
        try:
            arr = np.array(values, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise ScalerParamsError(f"'{key}' is not a list of numbers: {e}") from e

        if arr.shape != (config.NUM_FEATURES,):
            raise ScalerParamsError(
                f"'{key}' must have {config.NUM_FEATURES} values, got shape {arr.shape}"
            )
        if not np.all(np.isfinite(arr)):
            raise ScalerParamsError(f"'{key}' contains non-finite values")

        arr.flags.writeable = False
        return arr

    @classmethod
    def from_dict(cls, data: Mapping) -> 'ScalerParams':
        if not isinstance(data, Mapping):
            raise ScalerParamsError("Scaler params must be a JSON object")
        for key in ('mean', 'scale'):
            if key not in data:
                raise ScalerParamsError(f"'{key}' not found in scaler params")
        return cls(mean=data['mean'], scale=data['scale'])

    @classmethod
    def identity(cls) -> 'ScalerParams':
        """mean=0, scale=1: scaling leaves features unchanged."""
        return cls(mean=np.zeros(config.NUM_FEATURES), scale=np.ones(config.NUM_FEATURES))


def load_scaler_params(stream: Union[IO[str], IO[bytes]]) -> ScalerParams:
    """
    Load scaler params from a JSON stream.

    Raises:
        ScalerParamsError: If the document is not valid JSON or fails validation
    """
    try:
        data = json.load(stream)
    except ValueError as e:
        raise ScalerParamsError(f"Invalid scaler params JSON: {e}") from e

    params = ScalerParams.from_dict(data)
    print(f"Scaler parameters loaded: mean length={len(params.mean)}, "
          f"scale length={len(params.scale)}")
    return params


def scale_features(features: Sequence[float], params: ScalerParams) -> np.ndarray:
    """
    Standardize features: output[i] = (features[i] - mean[i]) / scale[i].

    Raises:
        ValueError: If the feature count does not match the params
    """
    x = np.asarray(features, dtype=np.float64)
    if x.shape != params.mean.shape:
        raise ValueError(
            f"Expected {params.mean.shape[0]} features, got shape {x.shape}"
        )
    return (x - params.mean) / params.scale
