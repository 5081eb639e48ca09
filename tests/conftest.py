"""
Pytest configuration and shared fixtures.
"""

import asyncio
import os
import sys
import time

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models.catalog import ClassCatalog, DEFAULT_CLASSES  # noqa: E402
from models.errors import InferenceError  # noqa: E402
from models.frame import FrameData  # noqa: E402
from models.tensors import RawOutputSet  # noqa: E402
from observation.base import FrameSource, ObservationConfig  # noqa: E402


def make_raw_outputs(rows):
    """
    Build a RawOutputSet from (score, class_id, (y, x, h, w)) rows.
    """
    scores = np.array([[r[0] for r in rows]], dtype=np.float32)
    classes = np.array([[r[1] for r in rows]], dtype=np.float32)
    boxes = np.array([[list(r[2]) for r in rows]], dtype=np.float32).reshape(1, len(rows), 4)
    return RawOutputSet(scores=scores, boxes=boxes, classes=classes)


class StaticSource(FrameSource):
    """Source that always returns the same frame once opened."""

    def __init__(self, frame=None, source_id="test"):
        super().__init__(ObservationConfig(source_id=source_id, ready_timeout=0.5))
        self._pixels = frame if frame is not None else np.zeros((500, 600, 3), dtype=np.uint8)
        self.grabs = 0

    def open(self) -> None:
        self._is_open = True

    def _grab(self):
        self.grabs += 1
        self._frame_index += 1
        return FrameData.from_numpy(self._pixels.copy(), time.time(), self._frame_index, self.source_id)

    def close(self) -> None:
        self._is_open = False
        self._released = True


class FakeBackend:
    """Inference backend returning canned outputs (or raising canned errors)."""

    def __init__(self, outputs=None, delay=0.0):
        self.outputs = list(outputs or [])
        self.delay = delay
        self.calls = 0
        self.active = 0
        self.max_active = 0
        self.ready_calls = 0
        self.closed = False
        self.last_tensor = None

    async def wait_ready(self):
        self.ready_calls += 1

    async def infer(self, tensor):
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.last_tensor = tensor
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            result = self.outputs.pop(0) if len(self.outputs) > 1 else self.outputs[0]
            if isinstance(result, Exception):
                raise result
            return result
        finally:
            self.active -= 1

    def close(self):
        self.closed = True


@pytest.fixture
def catalog():
    return ClassCatalog.from_list(DEFAULT_CLASSES)


@pytest.fixture
def rgb_frame():
    pixels = np.random.randint(0, 256, (500, 600, 3), dtype=np.uint8)
    return FrameData.from_numpy(pixels, timestamp=time.time(), frame_index=1, source="test")


@pytest.fixture
def raw_outputs():
    return make_raw_outputs([
        (0.95, 1, (0.1, 0.2, 0.5, 0.6)),
        (0.40, 2, (0.0, 0.0, 0.1, 0.1)),
        (0.8534, 3, (0.2, 0.3, 0.6, 0.7)),
    ])


@pytest.fixture
def inference_error():
    return InferenceError("model unavailable")


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  device_id: 0
  resolution: [600, 500]
  facing_mode: "user"

model:
  backend: "tfserving"
  url: "http://127.0.0.1:8501"
  name: "mask_detector"
  outputs:
    scores: 1
    boxes: 7
    classes: 5

detection:
  threshold: 0.85

display:
  width: 600
  height: 500

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [600, 500],
            "facing_mode": "user",
        },
        "model": {
            "backend": "tfserving",
            "url": "http://127.0.0.1:8501",
            "name": "mask_detector",
            "outputs": {"scores": 1, "boxes": 7, "classes": 5},
        },
        "detection": {
            "threshold": 0.85,
            "classes": [dict(c) for c in DEFAULT_CLASSES],
        },
        "display": {"width": 600, "height": 500, "refresh_hz": 60},
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
