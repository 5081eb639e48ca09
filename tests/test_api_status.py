"""
Tests for the status API (/api/status, /api/health, /api/frame.jpg).
"""

import time

import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient

from models.detection import BoundingBox, Detection
from models.frame import FrameData
from overlay.surface import DrawingSurface
from web.app import create_app
from web.routes.api import _compute_warnings
from web.state import SharedState


def _detection():
    return Detection(class_id=3, label="NoMask", color="black", score=0.8534,
                     bbox=BoundingBox(x=10, y=20, width=30, height=40))


def _frame_data(ts=None):
    pixels = np.full((50, 60, 3), 100, dtype=np.uint8)
    return FrameData.from_numpy(pixels, timestamp=ts or time.time(), frame_index=1, source="test")


class TestComputeWarnings:
    """Tests for warning computation logic."""

    def test_no_warnings_when_healthy(self):
        assert _compute_warnings(last_frame_age_s=0.5, skipped_cycles=1, cycle_count=10) == []

    def test_camera_stale_warning(self):
        """camera_stale when last_frame_age > 2s but <= 10s."""
        assert _compute_warnings(last_frame_age_s=5.0) == ["camera_stale"]

    def test_camera_offline_warning(self):
        """camera_offline when last_frame_age > 10s or no frame yet."""
        assert _compute_warnings(last_frame_age_s=15.0) == ["camera_offline"]
        assert _compute_warnings(last_frame_age_s=None) == ["camera_offline"]

    def test_inference_failing_warning(self):
        warnings = _compute_warnings(last_frame_age_s=0.5, skipped_cycles=5, cycle_count=2)
        assert warnings == ["inference_failing"]


@pytest.fixture
def shared():
    return SharedState(DrawingSurface(60, 50))


@pytest.fixture
def client(shared):
    return TestClient(create_app(shared))


class TestStatusEndpoint:
    def test_before_first_cycle(self, client):
        response = client.get("/api/status")

        assert response.status_code == 200
        data = response.json()
        assert data["running"] is False
        assert data["cycle_count"] == 0
        assert data["detections"] == []
        assert "camera_offline" in data["warnings"]

    def test_after_cycle(self, client, shared):
        shared.on_cycle(_frame_data(), [_detection()])
        shared.set_stats_provider(lambda: {
            "state": "scheduled",
            "fps": 29.5,
            "cycle_count": 12,
            "skipped_cycles": 1,
            "inference_ms": 41.0,
        })

        data = client.get("/api/status").json()

        assert data["running"] is True
        assert data["state"] == "scheduled"
        assert data["cycle_count"] == 12
        assert data["fps"] == pytest.approx(29.5)
        assert data["warnings"] == []
        assert data["detections"] == [{
            "class_id": 3,
            "label": "NoMask",
            "color": "black",
            "score": "0.8534",
            "bbox": [10.0, 20.0, 30.0, 40.0],
        }]
        assert data["last_frame_age_s"] < 2


class TestHealthEndpoint:
    def test_reports_configured_model(self, client, shared, valid_config):
        shared.set_config(valid_config)

        data = client.get("/api/health").json()

        assert data["model"]["backend"] == "tfserving"
        assert data["model"]["name"] == "mask_detector"
        assert data["camera"]["facing_mode"] == "user"
        assert data["log_path"] == "logs/test.log"
        assert data["python"]


class TestFrameEndpoint:
    def test_no_frame_yet(self, client):
        response = client.get("/api/frame.jpg")
        assert response.status_code == 503

    def test_composited_jpeg(self, client, shared):
        shared._surface.fill_rect(0, 0, 10, 10, "red")
        shared.on_cycle(_frame_data(), [])

        response = client.get("/api/frame.jpg")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        image = cv2.imdecode(np.frombuffer(response.content, dtype=np.uint8), cv2.IMREAD_COLOR)
        assert image.shape == (50, 60, 3)
        # BGR after decoding: the red corner has a high R channel
        assert image[5, 5, 2] > 200
        assert image[30, 30, 2] < 150
