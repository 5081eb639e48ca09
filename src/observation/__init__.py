"""
Observation layer: where frames come from.

This layer abstracts the capture device (camera, video file, remote stream)
from the detection loop. Each source implements the FrameSource interface
and returns immutable FrameData snapshots.
"""

from .base import FrameSource, ObservationConfig
from .opencv_source import OpenCVFrameSource, OpenCVSourceConfig, create_source_from_config

__all__ = [
    "FrameSource",
    "ObservationConfig",
    "OpenCVFrameSource",
    "OpenCVSourceConfig",
    "create_source_from_config",
]
