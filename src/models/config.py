"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .catalog import DEFAULT_CLASSES, ClassCatalog


@dataclass
class CameraConfig:
    """Camera configuration."""
    device_id: Union[int, str] = 0
    resolution: Optional[List[int]] = None
    fps: Optional[int] = None
    facing_mode: str = "user"
    rotate: int = 0
    flip_vertical: bool = False
    mirror: bool = False
    ready_timeout: float = 10.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution"),
            fps=d.get("fps"),
            facing_mode=d.get("facing_mode", "user"),
            rotate=d.get("rotate", 0) or 0,
            flip_vertical=d.get("flip_vertical", False),
            mirror=d.get("mirror", False),
            ready_timeout=float(d.get("ready_timeout", 10.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "facing_mode": self.facing_mode,
            "rotate": self.rotate,
            "flip_vertical": self.flip_vertical,
            "mirror": self.mirror,
            "ready_timeout": self.ready_timeout,
        }


def _slot(value: Any) -> Union[int, str]:
    """Output slots are positions (ints) or output names (strings)."""
    if isinstance(value, str) and not value.isdigit():
        return value
    return int(value)


@dataclass
class OutputSlotsConfig:
    """Output slots (position or name) of the served model."""
    scores: Union[int, str] = 1
    boxes: Union[int, str] = 7
    classes: Union[int, str] = 5

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OutputSlotsConfig":
        return cls(
            scores=_slot(d.get("scores", 1)),
            boxes=_slot(d.get("boxes", 7)),
            classes=_slot(d.get("classes", 5)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"scores": self.scores, "boxes": self.boxes, "classes": self.classes}


@dataclass
class ModelConfig:
    """Inference backend configuration."""
    backend: str = "tfserving"
    url: str = "http://127.0.0.1:8501"
    name: str = "mask_detector"
    path: Optional[str] = None
    input_dtype: str = "int32"
    timeout: float = 5.0
    outputs: OutputSlotsConfig = field(default_factory=OutputSlotsConfig)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModelConfig":
        return cls(
            backend=d.get("backend", "tfserving"),
            url=d.get("url", "http://127.0.0.1:8501"),
            name=d.get("name", "mask_detector"),
            path=d.get("path"),
            input_dtype=d.get("input_dtype", "int32"),
            timeout=float(d.get("timeout", 5.0)),
            outputs=OutputSlotsConfig.from_dict(d.get("outputs", {}) or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "url": self.url,
            "name": self.name,
            "path": self.path,
            "input_dtype": self.input_dtype,
            "timeout": self.timeout,
            "outputs": self.outputs.to_dict(),
        }


@dataclass
class DetectionConfig:
    """Thresholding and class catalog configuration."""
    threshold: float = 0.85
    classes: List[Dict[str, Any]] = field(default_factory=lambda: [dict(c) for c in DEFAULT_CLASSES])

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            threshold=float(d.get("threshold", 0.85)),
            classes=d.get("classes") or [dict(c) for c in DEFAULT_CLASSES],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"threshold": self.threshold, "classes": self.classes}

    def catalog(self) -> ClassCatalog:
        return ClassCatalog.from_list(self.classes)


@dataclass
class OverlayConfig:
    """Overlay drawing style."""
    font_size: int = 16
    padding: int = 4
    line_width: int = 4
    label_background: str = "#00FFFF"
    text_color: str = "#000000"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OverlayConfig":
        return cls(
            font_size=int(d.get("font_size", 16)),
            padding=int(d.get("padding", 4)),
            line_width=int(d.get("line_width", 4)),
            label_background=d.get("label_background", "#00FFFF"),
            text_color=d.get("text_color", "#000000"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "font_size": self.font_size,
            "padding": self.padding,
            "line_width": self.line_width,
            "label_background": self.label_background,
            "text_color": self.text_color,
        }


@dataclass
class DisplayConfig:
    """Displayed video size and refresh pacing."""
    width: int = 600
    height: int = 500
    refresh_hz: float = 60.0
    window: bool = False
    window_title: str = "Real-Time Object Detection"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DisplayConfig":
        return cls(
            width=int(d.get("width", 600)),
            height=int(d.get("height", 500)),
            refresh_hz=float(d.get("refresh_hz", 60.0)),
            window=bool(d.get("window", False)),
            window_title=d.get("window_title", "Real-Time Object Detection"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "refresh_hz": self.refresh_hz,
            "window": self.window,
            "window_title": self.window_title,
        }


@dataclass
class LoopConfig:
    """Loop scheduler policy."""
    max_consecutive_failures: int = 0
    stats_log_interval: float = 60.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LoopConfig":
        return cls(
            max_consecutive_failures=int(d.get("max_consecutive_failures", 0)),
            stats_log_interval=float(d.get("stats_log_interval", 60.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_consecutive_failures": self.max_consecutive_failures,
            "stats_log_interval": self.stats_log_interval,
        }


@dataclass
class WebConfig:
    """Status API configuration."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=bool(d.get("enabled", True)),
            host=d.get("host", "0.0.0.0"),
            port=int(d.get("port", 5000)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    loop: LoopConfig = field(default_factory=LoopConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/live_detection.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
            model=ModelConfig.from_dict(d.get("model", {}) or {}),
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            overlay=OverlayConfig.from_dict(d.get("overlay", {}) or {}),
            display=DisplayConfig.from_dict(d.get("display", {}) or {}),
            loop=LoopConfig.from_dict(d.get("loop", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            log_path=d.get("log_path", "logs/live_detection.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary."""
        return {
            "camera": self.camera.to_dict(),
            "model": self.model.to_dict(),
            "detection": self.detection.to_dict(),
            "overlay": self.overlay.to_dict(),
            "display": self.display.to_dict(),
            "loop": self.loop.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
