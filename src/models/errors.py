"""
Error taxonomy for the detection loop.

Fatal errors stop the loop (there is nothing sensible left to do);
recoverable errors end the current cycle early and the loop retries on the
next display tick.
"""

from __future__ import annotations


class DetectionLoopError(Exception):
    """Base class for all detection loop errors."""

    fatal: bool = True


class SourceUnavailable(DetectionLoopError):
    """The capture device was never initialized, was released, or was lost."""


class UnsupportedFrameShape(DetectionLoopError):
    """A frame does not have the (H, W, 3) layout the model expects."""


class InferenceError(DetectionLoopError):
    """The inference backend failed (model unavailable, shape mismatch, timeout)."""

    fatal = False


class UnknownClass(DetectionLoopError):
    """A class index is outside the class catalog (model/catalog version skew)."""

    def __init__(self, class_id: int, catalog_size: int):
        self.class_id = class_id
        self.catalog_size = catalog_size
        super().__init__(
            f"Class id {class_id} is outside the class catalog (1..{catalog_size})"
        )


class IllegalTransition(DetectionLoopError):
    """The loop scheduler attempted an out-of-order state transition."""


class ConfigError(ValueError):
    """Configuration could not be loaded or failed validation."""
