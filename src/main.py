"""
Live object detection overlay.

Captures frames from a camera, runs them through an externally served
detection model, and draws labeled boxes over the video, paced by the
display refresh.

Usage:
    python src/main.py --config config/config.yaml --display

Arguments:
    --config: Path to configuration file
    --display: Show a local preview window with the overlay
    --no-web: Do not start the status API
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
import threading
from typing import Any, Dict, Optional, Tuple

import uvicorn
import yaml

from codec.tensor_codec import TensorCodec
from detection.filter import DetectionFilter, FilterConfig
from inference import create_backend_from_config
from models.config import Config
from models.errors import ConfigError, DetectionLoopError
from observation import create_source_from_config
from ops.logging import setup_logging
from overlay.colors import parse_color
from overlay.renderer import OverlayRenderer
from overlay.surface import DrawingSurface
from overlay.window import WindowPresenter
from pipeline.clock import RefreshClock
from pipeline.engine import DetectionLoop
from web.app import create_app
from web.state import SharedState

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)

    Raises:
        ConfigError: If a config file exists but cannot be parsed.
    """
    config_dir = os.path.dirname(config_path)
    base_path = os.path.join(config_dir, "default.yaml")
    local_overrides_path = os.path.join(config_dir, "config.yaml")

    layers = [base_path, local_overrides_path]
    if os.path.abspath(config_path) not in {os.path.abspath(p) for p in layers}:
        layers.append(config_path)

    merged: Dict[str, Any] = {}
    for path in layers:
        if not os.path.exists(path):
            continue
        try:
            with open(path, "r") as f:
                merged = _deep_merge(merged, yaml.safe_load(f) or {})
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load configuration from {path}: {e}") from e
    return merged


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['camera', 'model', 'detection', 'display', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    camera = config.get('camera') or {}
    device_id = camera.get('device_id', 0)
    if not isinstance(device_id, (int, str)):
        return False, "camera.device_id must be an integer (index) or string (URL/path)"
    if isinstance(device_id, int) and device_id < 0:
        return False, "camera.device_id integer must be non-negative"
    if camera.get('facing_mode', 'user') not in ('user', 'environment'):
        return False, "camera.facing_mode must be one of: user, environment"
    for key in ('mirror', 'flip_vertical'):
        if key in camera and not isinstance(camera[key], bool):
            return False, f"camera.{key} must be true or false"
    resolution = camera.get('resolution')
    if resolution is not None:
        if not isinstance(resolution, list) or len(resolution) != 2:
            return False, "camera.resolution must be a list of [width, height]"
        if not all(isinstance(x, int) and x > 0 for x in resolution):
            return False, "camera.resolution values must be positive integers"

    model = config.get('model') or {}
    backend = model.get('backend', 'tfserving')
    if backend not in ('tfserving', 'tflite'):
        return False, "model.backend must be one of: tfserving, tflite"
    if backend == 'tflite' and not model.get('path'):
        return False, "model.path is required when model.backend is 'tflite'"
    if backend == 'tfserving' and not model.get('url'):
        return False, "model.url is required when model.backend is 'tfserving'"
    outputs = model.get('outputs') or {}
    for slot in ('scores', 'boxes', 'classes'):
        if slot in outputs and not isinstance(outputs[slot], (int, str)):
            return False, f"model.outputs.{slot} must be an output index or name"

    detection = config.get('detection') or {}
    threshold = detection.get('threshold', 0.85)
    if not isinstance(threshold, (int, float)) or not (0 <= threshold <= 1):
        return False, "detection.threshold must be between 0 and 1"
    classes = detection.get('classes')
    if classes is not None:
        if not isinstance(classes, list) or not classes:
            return False, "detection.classes must be a non-empty list"
        for i, entry in enumerate(classes):
            if not isinstance(entry, dict) or not entry.get('name'):
                return False, f"detection.classes[{i}] must have a name"
            try:
                parse_color(str(entry.get('color', 'red')))
            except ValueError:
                return False, f"detection.classes[{i}].color is not a recognized color"

    display = config.get('display') or {}
    for key in ('width', 'height'):
        value = display.get(key)
        if value is not None and (not isinstance(value, int) or value <= 0):
            return False, f"display.{key} must be a positive integer"
    refresh_hz = display.get('refresh_hz', 60)
    if not isinstance(refresh_hz, (int, float)) or refresh_hz <= 0:
        return False, "display.refresh_hz must be a positive number"

    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def build_loop(cfg: Config) -> DetectionLoop:
    """Wire source, backend, codec, filter, renderer and clock into a loop."""
    source = create_source_from_config(cfg.camera.to_dict(), source_id="main-camera")
    backend = create_backend_from_config(cfg.model)
    codec = TensorCodec(input_dtype=cfg.model.input_dtype)
    detection_filter = DetectionFilter(
        FilterConfig(threshold=cfg.detection.threshold, catalog=cfg.detection.catalog())
    )
    surface = DrawingSurface(cfg.display.width, cfg.display.height, font_size=cfg.overlay.font_size)
    renderer = OverlayRenderer(cfg.overlay)
    clock = RefreshClock(cfg.display.refresh_hz)
    return DetectionLoop(source, backend, codec, detection_filter, renderer, surface, clock, cfg.loop)


def start_web_server(shared: SharedState, host: str, port: int) -> threading.Thread:
    def run_web_app():
        uvicorn.run(create_app(shared), host=host, port=port, log_level="warning")

    web_thread = threading.Thread(target=run_web_app, daemon=True)
    web_thread.start()
    logging.info(f"Status API started on {host}:{port}")
    return web_thread


async def run_loop(loop: DetectionLoop, presenter: Optional[WindowPresenter] = None) -> None:
    """Run the detection loop until it stops or the process is asked to terminate."""
    task = asyncio.current_task()
    use_signals = sys.platform != "win32"
    if use_signals:
        asyncio.get_running_loop().add_signal_handler(signal.SIGTERM, task.cancel)

    if presenter is not None:
        def stop_on_quit(frame_data, detections):
            if presenter.quit_requested:
                loop.stop()
        loop.add_callback(stop_on_quit)

    loop.source.open()
    try:
        await loop.run()
    finally:
        if use_signals:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGTERM)
        loop.source.close()
        loop.backend.close()
        if presenter is not None:
            presenter.close()


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Live object detection overlay')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--display', action='store_true',
                        help='Show a local preview window')
    parser.add_argument('--no-web', action='store_true',
                        help='Do not start the status API')
    parser.add_argument('--log-level', type=str, choices=VALID_LOG_LEVELS,
                        help='Override log_level from the config file')
    args = parser.parse_args()

    try:
        raw_config = load_config(args.config)
    except ConfigError as e:
        logging.error(str(e))
        sys.exit(1)
    if args.log_level:
        raw_config['log_level'] = args.log_level

    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    cfg = Config.from_dict(raw_config)
    setup_logging(cfg.log_path, cfg.log_level)
    logging.info("Starting live object detection")

    loop = build_loop(cfg)

    presenter = None
    if args.display or cfg.display.window:
        presenter = WindowPresenter(loop.surface, cfg.display.window_title)
        loop.add_callback(presenter)

    if cfg.web.enabled and not args.no_web:
        shared = SharedState(loop.surface)
        shared.set_config(cfg.to_dict())
        shared.set_stats_provider(loop.snapshot)
        loop.add_callback(shared.on_cycle)
        start_web_server(shared, cfg.web.host, cfg.web.port)

    try:
        asyncio.run(run_loop(loop, presenter))
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
    except asyncio.CancelledError:
        logging.info("Shutdown requested")
    except DetectionLoopError as e:
        logging.error(f"Fatal: {type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
