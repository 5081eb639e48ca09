"""
State shared between the detection loop and the status web server.

The loop runs on the asyncio thread and the web server on its own thread,
so everything here is guarded by a lock.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from models.detection import Detection
from models.frame import FrameData
from overlay.surface import DrawingSurface


class SharedState:
    def __init__(self, surface: Optional[DrawingSurface] = None):
        self._surface = surface
        self._lock = threading.Lock()
        self._frame: Optional[np.ndarray] = None
        self._detections: List[Dict[str, Any]] = []
        self._config: Optional[Dict[str, Any]] = None
        self._stats_provider: Optional[Callable[[], Dict[str, Any]]] = None
        self.system_stats: Dict[str, Any] = {
            "state": None,
            "fps": 0.0,
            "start_time": time.time(),
            "last_frame_ts": None,
            "cycle_count": 0,
            "skipped_cycles": 0,
            "inference_ms": None,
        }

    def on_cycle(self, frame_data: FrameData, detections: List[Detection]) -> None:
        """Loop callback: keep the latest composited frame and detections."""
        composed = self._surface.composite(frame_data.frame) if self._surface else frame_data.frame.copy()
        with self._lock:
            self._frame = composed
            self._detections = [d.to_dict() for d in detections]
            self.system_stats["last_frame_ts"] = frame_data.timestamp

    def get_frame(self) -> Optional[np.ndarray]:
        """Latest composited RGB frame, or None before the first cycle."""
        with self._lock:
            return None if self._frame is None else self._frame.copy()

    def get_detections(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._detections)

    def set_config(self, config: Dict[str, Any]) -> None:
        with self._lock:
            self._config = config

    def get_config_copy(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            return None if self._config is None else dict(self._config)

    def set_stats_provider(self, provider: Callable[[], Dict[str, Any]]) -> None:
        """Read live loop statistics from provider (e.g. DetectionLoop.snapshot)."""
        self._stats_provider = provider

    def get_system_stats_copy(self) -> Dict[str, Any]:
        live = self._stats_provider() if self._stats_provider else {}
        with self._lock:
            merged = dict(self.system_stats)
        for key in ("state", "fps", "cycle_count", "skipped_cycles", "inference_ms"):
            if key in live:
                merged[key] = live[key]
        return merged
