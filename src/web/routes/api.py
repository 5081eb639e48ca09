from __future__ import annotations

import platform
import time
from typing import List, Optional

import cv2
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from ..api_models import HealthResponse, StatusResponse
from ..state import SharedState

router = APIRouter()


def _compute_warnings(last_frame_age_s: Optional[float], skipped_cycles: int = 0, cycle_count: int = 0) -> List[str]:
    """
    Warning flags for the status endpoint.

    Thresholds:
    - camera_stale: last_frame_age_s > 2
    - camera_offline: last_frame_age_s > 10, or no frame yet
    - inference_failing: more skipped cycles than completed ones
    """
    warnings = []
    if last_frame_age_s is None or last_frame_age_s > 10:
        warnings.append("camera_offline")
    elif last_frame_age_s > 2:
        warnings.append("camera_stale")

    if skipped_cycles > cycle_count:
        warnings.append("inference_failing")

    return warnings


def _state(request: Request) -> SharedState:
    return request.app.state.shared


@router.get("/health", response_model=HealthResponse)
def health(request: Request):
    cfg = _state(request).get_config_copy() or {}
    model_cfg = cfg.get("model", {}) or {}
    camera_cfg = cfg.get("camera", {}) or {}
    return {
        "timestamp": time.time(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "model": {k: model_cfg.get(k) for k in ("backend", "url", "name", "path") if k in model_cfg},
        "camera": {k: camera_cfg.get(k) for k in ("facing_mode", "resolution") if k in camera_cfg},
        "log_path": cfg.get("log_path"),
    }


@router.get("/status", response_model=StatusResponse)
def status(request: Request):
    now = time.time()
    shared = _state(request)
    stats = shared.get_system_stats_copy()

    last_frame_ts = stats.get("last_frame_ts")
    last_frame_age = now - last_frame_ts if last_frame_ts else None
    start_time = stats.get("start_time")
    cycle_count = int(stats.get("cycle_count") or 0)
    skipped = int(stats.get("skipped_cycles") or 0)
    warnings = _compute_warnings(last_frame_age, skipped, cycle_count)

    return {
        "state": stats.get("state"),
        "running": "camera_offline" not in warnings,
        "cycle_count": cycle_count,
        "skipped_cycles": skipped,
        "fps": float(stats.get("fps") or 0.0),
        "inference_ms": stats.get("inference_ms"),
        "last_frame_age_s": last_frame_age,
        "uptime_seconds": int(now - start_time) if start_time else None,
        "detections": shared.get_detections(),
        "warnings": warnings,
    }


@router.get("/frame.jpg")
def frame_jpeg(request: Request):
    frame = _state(request).get_frame()
    if frame is None:
        raise HTTPException(status_code=503, detail="No frame available yet")
    ok, buf = cv2.imencode(".jpg", cv2.cvtColor(frame, cv2.COLOR_RGB2BGR))
    if not ok:
        raise HTTPException(status_code=500, detail="JPEG encoding failed")
    return Response(content=buf.tobytes(), media_type="image/jpeg")
