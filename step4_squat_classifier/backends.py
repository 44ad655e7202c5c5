"""
Inference Backends
==================
Interchangeable execution strategies for the TorchScript squat model.

- GpuBackend: CUDA device
- CpuBackend: multi-threaded CPU

The backend is chosen once when the classifier is built. Both run the same
graph, so outputs agree up to floating-point execution differences.
"""

import io
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np
import torch

import config


class InferenceBackend(ABC):
    """Runs the model on one feature vector and returns the raw class scores."""

    name = "base"

    @abstractmethod
    def run(self, features: np.ndarray) -> np.ndarray:
        """
        Args:
            features: Scaled feature vector, shape (20,)

        Returns:
            Class scores, shape (num_classes,)
        """

    @abstractmethod
    def close(self) -> None:
        """Release the model and any device resources."""


class TorchScriptBackend(InferenceBackend):
    """Backend running a TorchScript module on a torch device."""

    name = "torchscript"

    def __init__(self, model_bytes: bytes, device: str):
        self.device = torch.device(device)
        self.model = torch.jit.load(io.BytesIO(model_bytes), map_location=self.device)
        self.model.eval()

    def run(self, features: np.ndarray) -> np.ndarray:
        model = self.model
        if model is None:
            raise RuntimeError(f"{self.name} backend is closed")

        with torch.no_grad():
            x = torch.from_numpy(np.asarray(features, dtype=np.float32)).reshape(1, -1)
            scores = model(x.to(self.device))  # (1, num_classes)
        return scores.detach().cpu().numpy().reshape(-1)

    def close(self) -> None:
        self.model = None


class GpuBackend(TorchScriptBackend):
    """Run on CUDA."""

    name = "gpu"

    def __init__(self, model_bytes: bytes, device: str = "cuda"):
        super().__init__(model_bytes, device)

    def close(self) -> None:
        super().close()
        torch.cuda.empty_cache()


class CpuBackend(TorchScriptBackend):
    """Run on CPU with a fixed number of intra-op threads."""

    name = "cpu"

    def __init__(self, model_bytes: bytes, num_threads: int = config.NUM_THREADS):
        torch.set_num_threads(num_threads)
        self.num_threads = num_threads
        super().__init__(model_bytes, "cpu")


def gpu_available() -> bool:
    return torch.cuda.is_available()


def create_backend(
    model_bytes: bytes,
    use_gpu: Optional[bool] = None,
    num_threads: int = config.NUM_THREADS
) -> InferenceBackend:
    """
    Select and build the inference backend.

    Args:
        model_bytes: Serialized TorchScript model
        use_gpu: True/False to force, None to auto-detect
        num_threads: Threads for the CPU backend

    Returns:
        GpuBackend if CUDA is usable, else CpuBackend
    """
    if use_gpu is None:
        use_gpu = gpu_available()

    if use_gpu:
        if gpu_available():
            try:
                backend = GpuBackend(model_bytes)
                print("GPU acceleration enabled")
                return backend
            except RuntimeError as e:
                print(f"GPU backend failed ({e}), falling back to CPU")
        else:
            print("GPU requested but CUDA is not available, using CPU")

    backend = CpuBackend(model_bytes, num_threads=num_threads)
    print(f"Using CPU backend ({num_threads} threads)")
    return backend
