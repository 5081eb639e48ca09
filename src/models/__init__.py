"""
Typed models for the live detection application.

Frames, raw inference outputs, detections, the class catalog, configuration,
and the error taxonomy shared by every stage of the loop.
"""

from .frame import FrameData
from .tensors import RawOutputSet
from .detection import Detection, BoundingBox, Proposal
from .catalog import ClassCatalog, ClassEntry
from .errors import (
    DetectionLoopError,
    SourceUnavailable,
    UnsupportedFrameShape,
    InferenceError,
    UnknownClass,
    IllegalTransition,
    ConfigError,
)
from .config import (
    Config,
    CameraConfig,
    ModelConfig,
    OutputSlotsConfig,
    DetectionConfig,
    OverlayConfig,
    DisplayConfig,
    LoopConfig,
    WebConfig,
)

__all__ = [
    # Frame / tensors
    "FrameData",
    "RawOutputSet",
    # Detection
    "Detection",
    "BoundingBox",
    "Proposal",
    "ClassCatalog",
    "ClassEntry",
    # Errors
    "DetectionLoopError",
    "SourceUnavailable",
    "UnsupportedFrameShape",
    "InferenceError",
    "UnknownClass",
    "IllegalTransition",
    "ConfigError",
    # Config
    "Config",
    "CameraConfig",
    "ModelConfig",
    "OutputSlotsConfig",
    "DetectionConfig",
    "OverlayConfig",
    "DisplayConfig",
    "LoopConfig",
    "WebConfig",
]
