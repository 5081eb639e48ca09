"""
FrameSource interface for the live video stream.

A frame source wraps a capture device and hands out snapshots of the
current frame on demand. The detection loop never iterates a source; it
pulls exactly one frame per cycle with current_frame().
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from models.errors import SourceUnavailable
from models.frame import FrameData


@dataclass
class ObservationConfig:
    """
    Base configuration for frame sources.

    Attributes:
        source_id: Identifier for this source (e.g., "front-camera").
        resolution: Requested capture resolution as (width, height). None = device default.
        fps: Requested capture rate. None = device default.
        ready_timeout: Seconds to wait for the first frame before giving up.
        metadata: Additional source-specific configuration.
    """
    source_id: str = "default"
    resolution: Optional[tuple[int, int]] = None
    fps: Optional[int] = None
    ready_timeout: float = 10.0
    metadata: Dict[str, Any] = field(default_factory=dict)


class FrameSource(ABC):
    """
    Abstract base class for frame sources.

    Lifecycle:
        1. Create instance with config
        2. Call open() to acquire the device
        3. Await wait_ready() until the stream delivers frames
        4. Call current_frame() once per loop cycle
        5. Call close() to release the device

    Can also be used as a context manager:
        with OpenCVFrameSource(config) as source:
            await source.wait_ready()
            frame_data = source.current_frame()
    """

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False
        self._released = False
        self._frame_index = 0

    @property
    def source_id(self) -> str:
        """Identifier for this source."""
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        """Whether the source is currently open."""
        return self._is_open

    @property
    def frame_index(self) -> int:
        """Number of frames delivered since open."""
        return self._frame_index

    @abstractmethod
    def open(self) -> None:
        """
        Acquire the capture device.

        Raises:
            SourceUnavailable: If the device cannot be opened.
        """

    @abstractmethod
    def _grab(self) -> Optional[FrameData]:
        """Read one frame from the device; None if nothing is available."""

    @abstractmethod
    def close(self) -> None:
        """Release the capture device. Safe to call multiple times."""

    def current_frame(self) -> FrameData:
        """
        Snapshot the current frame of the live stream.

        Raises:
            SourceUnavailable: If the source was never opened, has been
                released, or the device stopped delivering frames.
        """
        if self._released:
            raise SourceUnavailable(f"Source {self.source_id} has been released")
        if not self._is_open:
            raise SourceUnavailable(f"Source {self.source_id} was never opened")
        frame_data = self._grab()
        if frame_data is None:
            raise SourceUnavailable(f"Source {self.source_id} delivered no frame")
        return frame_data

    async def wait_ready(self, poll_interval: float = 0.05) -> None:
        """
        Wait until the stream delivers its first frame.

        Raises:
            SourceUnavailable: If the source is not open or no frame arrives
                within the configured ready_timeout.
        """
        if not self._is_open:
            raise SourceUnavailable(f"Source {self.source_id} was never opened")
        deadline = time.monotonic() + self._config.ready_timeout
        while True:
            if await asyncio.to_thread(self._probe):
                logging.info(f"Frame source ready: source_id={self.source_id}")
                return
            if time.monotonic() >= deadline:
                raise SourceUnavailable(
                    f"Source {self.source_id} not ready after {self._config.ready_timeout}s"
                )
            await asyncio.sleep(poll_interval)

    def _probe(self) -> bool:
        """Return True once the device can deliver frames."""
        return self._grab() is not None

    def __enter__(self) -> "FrameSource":
        """Context manager entry - opens the source."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes the source."""
        self.close()
