"""
Drawing surface for the detection overlay.

A transparent RGBA canvas the size of the displayed video, drawn with
OpenCV primitives. The canvas is the only shared mutable state of the
loop and is written by the overlay renderer once per cycle.
"""

from __future__ import annotations

import threading
from typing import Optional, Tuple

import cv2
import numpy as np

from .colors import parse_color

FONT_FACE = cv2.FONT_HERSHEY_SIMPLEX


class DrawingSurface:
    """
    Args:
        width: Canvas width in pixels (equals the displayed video width).
        height: Canvas height in pixels (equals the displayed video height).
        font_size: Glyph height in pixels used by measure_text/fill_text.
    """

    def __init__(self, width: int, height: int, font_size: int = 16):
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.font_size = font_size
        self.font_thickness = 1
        self.font_scale = cv2.getFontScaleFromHeight(FONT_FACE, font_size, self.font_thickness)
        self._canvas = np.zeros((height, width, 4), dtype=np.uint8)
        self._lock = threading.Lock()

    @property
    def dimensions(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)

    def clear(self) -> None:
        with self._lock:
            self._canvas[:] = 0

    def stroke_rect(self, x: float, y: float, w: float, h: float, color: str, line_width: int = 1) -> None:
        """Outline a rectangle given by its top-left corner and size."""
        pt1, pt2 = self._corners(x, y, w, h)
        with self._lock:
            cv2.rectangle(self._canvas, pt1, pt2, self._rgba(color), line_width)

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None:
        pt1, pt2 = self._corners(x, y, w, h)
        with self._lock:
            cv2.rectangle(self._canvas, pt1, pt2, self._rgba(color), cv2.FILLED)

    def measure_text(self, text: str) -> int:
        """Rendered width of text in pixels."""
        (tw, _), _ = cv2.getTextSize(text, FONT_FACE, self.font_scale, self.font_thickness)
        return tw

    def fill_text(self, text: str, x: float, y: float, color: str) -> None:
        """Draw text with its top edge at y."""
        origin = (int(round(x)), int(round(y)) + self.font_size)
        with self._lock:
            cv2.putText(
                self._canvas, text, origin, FONT_FACE, self.font_scale,
                self._rgba(color), self.font_thickness, cv2.LINE_AA,
            )

    def snapshot(self) -> np.ndarray:
        """Copy of the RGBA canvas."""
        with self._lock:
            return self._canvas.copy()

    def composite(self, frame: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Blend the overlay onto an RGB frame scaled to the surface size.

        Returns:
            RGB uint8 image of shape (height, width, 3).
        """
        if frame.shape[1] != self.width or frame.shape[0] != self.height:
            frame = cv2.resize(frame, (self.width, self.height))
        overlay = self.snapshot()
        alpha = overlay[..., 3:4].astype(np.float32) / 255.0
        blended = overlay[..., :3].astype(np.float32) * alpha + frame[..., :3].astype(np.float32) * (1.0 - alpha)
        result = blended.astype(np.uint8)
        if out is not None:
            out[:] = result
            return out
        return result

    @staticmethod
    def _rgba(color: str) -> Tuple[int, int, int, int]:
        r, g, b = parse_color(color)
        return (r, g, b, 255)

    @staticmethod
    def _corners(x: float, y: float, w: float, h: float) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        x1, x2 = sorted((x, x + w))
        y1, y2 = sorted((y, y + h))
        return (int(round(x1)), int(round(y1))), (int(round(x2)), int(round(y2)))
