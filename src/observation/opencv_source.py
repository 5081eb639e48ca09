"""
OpenCV-based frame source.

Supports:
- USB webcams (device_id as int, e.g., 0)
- RTSP/IP cameras (device_id as str URL)
- Video files (device_id as file path)

Frames are delivered in RGB order, which is what the detection model
expects; OpenCV itself captures BGR.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import cv2
import numpy as np

from models.errors import SourceUnavailable
from models.frame import FrameData
from .base import FrameSource, ObservationConfig
from .rtsp_utils import sanitize_url


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Configuration for OpenCV-based frame sources.

    Attributes:
        device_id: Camera index (int), RTSP URL (str), or file path (str).
        rtsp_transport: Transport protocol for RTSP ("tcp" or "udp").
        buffer_size: OpenCV capture buffer size (keeps live feeds current).
        max_retries: Maximum attempts for device initialization.
        facing_mode: Which camera the device is ("user" front, "environment"
            rear). Reported in status only; device_id selects the device.
        rotate: Rotation in degrees (0, 90, 180, 270).
        flip_vertical: Flip frame vertically.
        mirror: Flip frame horizontally.
    """
    device_id: Union[int, str] = 0
    rtsp_transport: str = "tcp"
    buffer_size: int = 1
    max_retries: int = 3
    facing_mode: str = "user"
    rotate: int = 0
    flip_vertical: bool = False
    mirror: bool = False

    @classmethod
    def from_camera_config(cls, camera_cfg: Dict[str, Any], source_id: str = "camera") -> "OpenCVSourceConfig":
        """
        Adapter: Create OpenCVSourceConfig from the camera config dict.

        Args:
            camera_cfg: Camera configuration dict (from config.yaml).
            source_id: Identifier for this source.
        """
        resolution = camera_cfg.get("resolution")
        if resolution:
            resolution = tuple(resolution)

        return cls(
            source_id=source_id,
            resolution=resolution,
            fps=camera_cfg.get("fps"),
            ready_timeout=float(camera_cfg.get("ready_timeout", 10.0)),
            device_id=camera_cfg.get("device_id", 0),
            rtsp_transport=camera_cfg.get("rtsp_transport", "tcp"),
            buffer_size=camera_cfg.get("buffer_size", 1),
            max_retries=camera_cfg.get("max_retries", 3),
            facing_mode=camera_cfg.get("facing_mode", "user"),
            rotate=camera_cfg.get("rotate", 0) or 0,
            flip_vertical=camera_cfg.get("flip_vertical", False),
            mirror=camera_cfg.get("mirror", False),
        )


class OpenCVFrameSource(FrameSource):
    """
    OpenCV-based frame source for cameras and video files.

    Wraps cv2.VideoCapture and returns each frame as an immutable RGB
    FrameData snapshot.

    Example:
        config = OpenCVSourceConfig(device_id=0, resolution=(640, 480))
        with OpenCVFrameSource(config) as source:
            frame_data = source.current_frame()
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def device_id(self) -> Union[int, str]:
        return self._opencv_config.device_id

    @property
    def is_rtsp(self) -> bool:
        """Check if this is an RTSP stream."""
        return isinstance(self.device_id, str) and (
            self.device_id.startswith("rtsp://") or
            self.device_id.startswith("rtsps://")
        )

    @property
    def is_file(self) -> bool:
        """Check if this is a video file."""
        return (
            isinstance(self.device_id, str) and
            not self.is_rtsp and
            os.path.exists(self.device_id)
        )

    def open(self) -> None:
        """Open the capture device."""
        if self._is_open:
            return
        if self._released:
            raise SourceUnavailable(f"Source {self.source_id} has been released")

        self._initialize(retry_count=0)
        self._is_open = True
        self._frame_index = 0

        logging.info(
            f"OpenCVFrameSource opened: source_id={self.source_id}, "
            f"device={sanitize_url(self.device_id)}, resolution={self._opencv_config.resolution}"
        )

    def _initialize(self, retry_count: int = 0) -> None:
        """Initialize the capture device, retrying with backoff."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None

        if retry_count > 0:
            wait_time = min(2 ** retry_count, 10)
            logging.info(
                f"Retrying initialization (attempt {retry_count + 1}/"
                f"{self._opencv_config.max_retries}) after {wait_time}s"
            )
            time.sleep(wait_time)

        if self.is_rtsp:
            logging.info(f"Setting RTSP transport to: {self._opencv_config.rtsp_transport}")
            os.environ["OPENCV_FFMPEG_CAPTURE_OPTIONS"] = (
                f"rtsp_transport;{self._opencv_config.rtsp_transport}"
            )

        self._cap = cv2.VideoCapture(self.device_id)

        if not self._cap.isOpened():
            if retry_count < self._opencv_config.max_retries - 1:
                logging.warning(f"Failed to open device {sanitize_url(self.device_id)}, retrying...")
                return self._initialize(retry_count + 1)
            self._cap.release()
            self._cap = None
            raise SourceUnavailable(
                f"Failed to open device {sanitize_url(self.device_id)} after "
                f"{self._opencv_config.max_retries} attempts"
            )

        if isinstance(self.device_id, int) and self._opencv_config.resolution:
            w, h = self._opencv_config.resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
            if self._opencv_config.fps:
                self._cap.set(cv2.CAP_PROP_FPS, self._opencv_config.fps)
            self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self._opencv_config.buffer_size)

            actual_w = self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)
            actual_h = self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)
            logging.info(f"Camera actual resolution: ({actual_w}x{actual_h})")

    def _grab(self) -> Optional[FrameData]:
        """Read the latest frame from the device."""
        if self._cap is None:
            return None

        ret, frame = self._cap.read()
        if not ret or frame is None:
            if self.is_file:
                logging.info("End of video file reached")
            else:
                logging.warning(f"Failed to read frame from {sanitize_url(self.device_id)}")
            return None

        frame = self._apply_transforms(frame)
        self._frame_index += 1

        return FrameData(
            frame=frame,
            width=frame.shape[1],
            height=frame.shape[0],
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def _apply_transforms(self, frame: np.ndarray) -> np.ndarray:
        """Convert to RGB and apply configured rotation/mirroring."""
        cfg = self._opencv_config

        if frame.ndim == 3 and frame.shape[2] == 3:
            frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

        if cfg.rotate == 90:
            frame = cv2.rotate(frame, cv2.ROTATE_90_CLOCKWISE)
        elif cfg.rotate == 180:
            frame = cv2.rotate(frame, cv2.ROTATE_180)
        elif cfg.rotate == 270:
            frame = cv2.rotate(frame, cv2.ROTATE_90_COUNTERCLOCKWISE)

        mirror = cfg.mirror
        if mirror or cfg.flip_vertical:
            if mirror and cfg.flip_vertical:
                flip_code = -1
            elif mirror:
                flip_code = 1
            else:
                flip_code = 0
            frame = cv2.flip(frame, flip_code)

        return frame

    def close(self) -> None:
        """Close the capture device and release resources."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        if self._is_open:
            logging.info(f"OpenCVFrameSource closed: source_id={self.source_id}")
        self._is_open = False
        self._released = True


def create_source_from_config(camera_cfg: Dict[str, Any], source_id: str = "camera") -> OpenCVFrameSource:
    """Factory: build the frame source described by the camera config section."""
    return OpenCVFrameSource(OpenCVSourceConfig.from_camera_config(camera_cfg, source_id=source_id))
