"""
Model input/output codec.
"""

from .tensor_codec import TensorCodec, HWC_AXES

__all__ = ["TensorCodec", "HWC_AXES"]
