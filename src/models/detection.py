"""
Detection models for object detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in on-screen pixel coordinates of the displayed video.

    Attributes:
        x: Left edge x coordinate.
        y: Top edge y coordinate.
        width: Box width (may be negative for degenerate model output).
        height: Box height (may be negative for degenerate model output).
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return as (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    def as_int_tuple(self) -> Tuple[int, int, int, int]:
        """Return as integer (x, y, width, height) tuple."""
        return (int(self.x), int(self.y), int(self.width), int(self.height))

    @classmethod
    def from_corners(cls, x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        """Create from two corners."""
        return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1)


@dataclass(frozen=True)
class Proposal:
    """
    One candidate detection emitted by inference, before thresholding.

    Attributes:
        score: Model confidence (0-1).
        class_id: 1-based class index.
        bbox: Box already converted to on-screen pixel coordinates.
    """
    score: float
    class_id: int
    bbox: BoundingBox


@dataclass(frozen=True)
class Detection:
    """
    A labeled detection ready for rendering.

    Attributes:
        class_id: 1-based class index from the model.
        label: Human-readable class name from the class catalog.
        color: Color tag from the class catalog (e.g. "red").
        score: Detection confidence (0-1).
        bbox: Bounding box in on-screen pixel coordinates.
    """
    class_id: int
    label: str
    color: str
    score: float
    bbox: BoundingBox

    @property
    def score_text(self) -> str:
        """Score with fixed 4-decimal precision."""
        return f"{self.score:.4f}"

    @property
    def caption(self) -> str:
        """Label text drawn on the overlay, e.g. "NoMask 85.34%"."""
        # Percent is computed from the 4-decimal display score
        return f"{self.label} {100 * float(self.score_text):.2f}%"

    def to_dict(self) -> dict:
        return {
            "class_id": self.class_id,
            "label": self.label,
            "color": self.color,
            "score": self.score_text,
            "bbox": list(self.bbox.as_tuple()),
        }
