"""
Inference adapters for the externally served detection model.
"""

from __future__ import annotations

from models.config import ModelConfig

from .backend import InferenceBackend
from .binding import OutputBinding
from .tfserving_backend import TFServingBackend, TFServingConfig


def create_backend_from_config(model_cfg: ModelConfig) -> InferenceBackend:
    """Factory: build the backend selected by `model.backend`."""
    binding = OutputBinding.from_config(model_cfg.outputs)
    if model_cfg.backend == "tflite":
        from .tflite_backend import TFLiteBackend, TFLiteConfig

        if not model_cfg.path:
            raise ValueError("model.path is required when model.backend is 'tflite'")
        return TFLiteBackend(TFLiteConfig(model_path=model_cfg.path, binding=binding))
    if model_cfg.backend == "tfserving":
        return TFServingBackend(
            TFServingConfig(
                url=model_cfg.url,
                model_name=model_cfg.name,
                timeout=model_cfg.timeout,
                binding=binding,
            )
        )
    raise ValueError(f"Unknown model backend: {model_cfg.backend}")


__all__ = [
    "InferenceBackend",
    "OutputBinding",
    "TFServingBackend",
    "TFServingConfig",
    "create_backend_from_config",
]
