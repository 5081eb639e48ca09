"""
Local preview window.

Shows the displayed video with the overlay composited on top. Registered
as a loop callback when running with --display.
"""

from __future__ import annotations

import logging
from typing import List

import cv2

from models.detection import Detection
from models.frame import FrameData
from .surface import DrawingSurface


class WindowPresenter:
    def __init__(self, surface: DrawingSurface, title: str = "Real-Time Object Detection"):
        self.surface = surface
        self.title = title
        self.quit_requested = False
        self._opened = False

    def __call__(self, frame_data: FrameData, detections: List[Detection]) -> None:
        composed = self.surface.composite(frame_data.frame)
        cv2.imshow(self.title, cv2.cvtColor(composed, cv2.COLOR_RGB2BGR))
        self._opened = True
        key = cv2.waitKey(1) & 0xFF
        if key == ord('q'):
            logging.info("Preview window: quit requested")
            self.quit_requested = True

    def close(self) -> None:
        if self._opened:
            cv2.destroyWindow(self.title)
            self._opened = False
