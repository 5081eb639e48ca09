"""
Overlay renderer: draws labeled boxes for one frame's detections.
"""

from __future__ import annotations

import logging
from typing import Sequence

from models.config import OverlayConfig
from models.detection import Detection
from .surface import DrawingSurface


class OverlayRenderer:
    """
    Draws detections onto a DrawingSurface in two passes.

    Pass one draws every box outline and label background; pass two draws
    every caption. A later detection's label background therefore never
    covers an earlier detection's caption.
    """

    def __init__(self, config: OverlayConfig):
        self.config = config

    def render(self, detections: Sequence[Detection], surface: DrawingSurface) -> None:
        cfg = self.config
        surface.clear()

        for det in detections:
            x, y, w, h = det.bbox.as_tuple()
            surface.stroke_rect(x, y, w, h, det.color, cfg.line_width)

            text_width = surface.measure_text(det.caption)
            surface.fill_rect(x, y, text_width + cfg.padding, cfg.font_size + cfg.padding, cfg.label_background)

        for det in detections:
            surface.fill_text(det.caption, det.bbox.x, det.bbox.y, cfg.text_color)

        if detections:
            logging.debug(f"Rendered {len(detections)} detections on {surface.dimensions} surface")
