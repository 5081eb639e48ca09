from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class DetectionModel(BaseModel):
    class_id: int
    label: str
    color: str
    score: str = Field(..., description="Score with 4-decimal precision")
    bbox: List[float] = Field(..., description="[x, y, width, height] in display pixels")


class StatusResponse(BaseModel):
    """
    Compact loop status optimized for frontend polling.
    """
    state: Optional[str] = Field(None, description="Loop scheduler state")
    running: bool = Field(..., description="True if frames are flowing")
    cycle_count: int = Field(0, description="Completed cycles")
    skipped_cycles: int = Field(0, description="Cycles ended early by recoverable errors")
    fps: float = Field(0.0, description="Recent cycle rate")
    inference_ms: Optional[float] = Field(None, description="Last inference latency")
    last_frame_age_s: Optional[float] = Field(None, description="Seconds since last rendered frame")
    uptime_seconds: Optional[int] = None
    detections: List[DetectionModel] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list, description="Active warnings")


class HealthResponse(BaseModel):
    timestamp: float
    platform: str
    python: str
    model: Dict[str, object] = Field(default_factory=dict)
    camera: Dict[str, object] = Field(default_factory=dict)
    log_path: Optional[str] = None
