#!/usr/bin/env python3
"""
Check the configured detection model end to end on a single image.

This utility helps verify that:
1. The model server (or .tflite file) is reachable and ready
2. The configured output slots match the exported graph
3. Detections decode, filter and render as expected

Usage:
    python tools/check_model.py --image path/to/image.jpg
    python tools/check_model.py --image face.jpg --config config/config.yaml --threshold 0.5
"""

import argparse
import asyncio
import os
import sys
import time

# Add project directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

import cv2

from codec.tensor_codec import TensorCodec
from detection.filter import DetectionFilter, FilterConfig
from inference import create_backend_from_config
from main import load_config
from models.config import Config
from models.errors import DetectionLoopError
from models.frame import FrameData
from overlay.renderer import OverlayRenderer
from overlay.surface import DrawingSurface


async def check_model(cfg: Config, image_path: str, output_path: str) -> int:
    bgr = cv2.imread(image_path)
    if bgr is None:
        print(f"❌ Failed to load image: {image_path}")
        return 1
    frame = FrameData.from_numpy(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB), timestamp=time.time(), source=image_path)
    print(f"🖼️  Image: {frame.width}x{frame.height}")

    backend = create_backend_from_config(cfg.model)
    codec = TensorCodec(input_dtype=cfg.model.input_dtype)
    detection_filter = DetectionFilter(
        FilterConfig(threshold=cfg.detection.threshold, catalog=cfg.detection.catalog())
    )
    surface = DrawingSurface(cfg.display.width, cfg.display.height, font_size=cfg.overlay.font_size)

    try:
        print(f"📦 Waiting for model backend '{cfg.model.backend}'...")
        await backend.wait_ready()

        start = time.time()
        raw = await backend.infer(codec.encode(frame))
        print(f"   Inference: {(time.time() - start) * 1000:.1f}ms, proposals={raw.proposal_count}")

        proposals = codec.decode(raw, cfg.display.width, cfg.display.height)
        best = sorted(proposals, key=lambda p: p.score, reverse=True)[:5]
        for p in best:
            print(f"   proposal class={p.class_id} score={p.score:.4f} bbox={p.bbox.as_int_tuple()}")

        detections = detection_filter.filter(proposals)
        print(f"\n🔍 {len(detections)} detection(s) above {cfg.detection.threshold}")
        for d in detections:
            print(f"   {d.caption} at {d.bbox.as_int_tuple()}")

        OverlayRenderer(cfg.overlay).render(detections, surface)
    except DetectionLoopError as e:
        print(f"❌ {type(e).__name__}: {e}")
        return 1
    finally:
        backend.close()

    composed = surface.composite(frame.frame)
    cv2.imwrite(output_path, cv2.cvtColor(composed, cv2.COLOR_RGB2BGR))
    print(f"\n✅ Saved overlay to: {output_path}")
    return 0


def main():
    parser = argparse.ArgumentParser(description='Check detection model on one image')
    parser.add_argument('--image', type=str, required=True,
                        help='Image file to run through the model')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--threshold', type=float, default=None,
                        help='Override detection.threshold')
    parser.add_argument('--output', type=str, default=None,
                        help='Where to save the overlay (default: <image>_detected.jpg)')
    args = parser.parse_args()

    raw_config = load_config(args.config)
    if args.threshold is not None:
        raw_config.setdefault('detection', {})['threshold'] = args.threshold
    cfg = Config.from_dict(raw_config)

    output_path = args.output or args.image.rsplit('.', 1)[0] + "_detected.jpg"
    return asyncio.run(check_model(cfg, args.image, output_path))


if __name__ == "__main__":
    sys.exit(main())
