"""
Smoke tests for typed models.
"""

import time

import numpy as np
import pytest

from models.catalog import ClassCatalog, ClassEntry, DEFAULT_CLASSES
from models.config import Config, DisplayConfig, ModelConfig, OutputSlotsConfig
from models.detection import BoundingBox, Detection
from models.errors import InferenceError, SourceUnavailable, UnknownClass, UnsupportedFrameShape
from models.frame import FrameData
from models.tensors import RawOutputSet


class TestFrameData:
    def test_from_numpy(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        fd = FrameData.from_numpy(frame, timestamp=123.0, frame_index=5, source="cam")
        assert fd.width == 640
        assert fd.height == 480
        assert fd.size == (640, 480)
        assert fd.channels == 3
        assert fd.frame_index == 5

    def test_pixels_are_read_only(self):
        fd = FrameData.from_numpy(np.zeros((4, 4, 3), dtype=np.uint8), timestamp=time.time())
        with pytest.raises(ValueError):
            fd.frame[0, 0, 0] = 1

    def test_frozen(self):
        fd = FrameData.from_numpy(np.zeros((4, 4, 3), dtype=np.uint8), timestamp=time.time())
        with pytest.raises(AttributeError):
            fd.width = 10

    def test_grayscale_channels(self):
        fd = FrameData.from_numpy(np.zeros((4, 4), dtype=np.uint8), timestamp=time.time())
        assert fd.channels == 1


class TestBoundingBox:
    def test_corners(self):
        bbox = BoundingBox(x=10, y=20, width=30, height=40)
        assert bbox.x2 == 40
        assert bbox.y2 == 60
        assert bbox.as_tuple() == (10, 20, 30, 40)

    def test_from_corners(self):
        bbox = BoundingBox.from_corners(120, 50, 300, 300)
        assert bbox.as_tuple() == (120, 50, 180, 250)

    def test_as_int_tuple(self):
        bbox = BoundingBox(x=10.7, y=20.2, width=30.9, height=40.1)
        assert bbox.as_int_tuple() == (10, 20, 30, 40)


class TestDetection:
    def _detection(self, score):
        return Detection(class_id=3, label="NoMask", color="black", score=score,
                         bbox=BoundingBox(0, 0, 10, 10))

    def test_caption_two_decimal_percent(self):
        assert self._detection(0.8534).caption == "NoMask 85.34%"

    def test_score_text_four_decimals(self):
        assert self._detection(0.9).score_text == "0.9000"
        assert self._detection(0.123456).score_text == "0.1235"

    def test_caption_uses_display_score(self):
        # 0.99996 displays as 1.0000, so the caption reads 100.00%
        assert self._detection(0.99996).caption == "NoMask 100.00%"

    def test_to_dict(self):
        d = self._detection(0.8534).to_dict()
        assert d["label"] == "NoMask"
        assert d["score"] == "0.8534"
        assert d["bbox"] == [0, 0, 10, 10]


class TestRawOutputSet:
    def test_valid_shapes(self):
        raw = RawOutputSet(
            scores=np.zeros((1, 5)),
            boxes=np.zeros((1, 5, 4)),
            classes=np.ones((1, 5)),
        )
        assert raw.proposal_count == 5
        assert len(raw.arrays()) == 3

    def test_flat_classes_are_reshaped(self):
        raw = RawOutputSet(scores=np.zeros((1, 3)), boxes=np.zeros((1, 3, 4)), classes=np.ones(3))
        assert raw.classes.shape == (1, 3)

    def test_mismatched_boxes(self):
        with pytest.raises(ValueError, match="boxes"):
            RawOutputSet(scores=np.zeros((1, 3)), boxes=np.zeros((1, 4, 4)), classes=np.ones((1, 3)))

    def test_scores_need_batch_axis(self):
        with pytest.raises(ValueError, match="scores"):
            RawOutputSet(scores=np.zeros(3), boxes=np.zeros((1, 3, 4)), classes=np.ones((1, 3)))


class TestClassCatalog:
    def test_positional_lookup(self, catalog):
        # Rows are looked up by position, not by their own id field
        assert catalog.lookup(1).name == "MaskWhite"
        assert catalog.lookup(2).name == "MaskBlue"
        assert catalog.lookup(3).name == "NoMask"
        assert catalog.lookup(3).color == "black"

    @pytest.mark.parametrize("class_id", [0, -1, 4, 100])
    def test_out_of_range(self, catalog, class_id):
        with pytest.raises(UnknownClass) as exc_info:
            catalog.lookup(class_id)
        assert exc_info.value.class_id == class_id
        assert exc_info.value.catalog_size == 3

    def test_round_trip_list(self):
        catalog = ClassCatalog.from_list(DEFAULT_CLASSES)
        assert catalog.to_list() == DEFAULT_CLASSES
        assert len(catalog) == 3

    def test_entry_defaults(self):
        entry = ClassEntry.from_dict({"name": "Person"})
        assert entry.color == "red"


class TestErrors:
    def test_fatal_flags(self):
        assert SourceUnavailable("x").fatal is True
        assert UnsupportedFrameShape("x").fatal is True
        assert UnknownClass(9, 3).fatal is True
        assert InferenceError("x").fatal is False


class TestConfig:
    def test_defaults(self):
        cfg = Config.from_dict({})
        assert cfg.detection.threshold == 0.85
        assert cfg.display.width == 600
        assert cfg.display.height == 500
        assert cfg.model.outputs.boxes == 7
        assert cfg.model.outputs.scores == 1
        assert cfg.model.outputs.classes == 5
        assert len(cfg.detection.catalog()) == 3

    def test_named_output_slots(self):
        slots = OutputSlotsConfig.from_dict({"scores": "detection_scores", "boxes": "7", "classes": 5})
        assert slots.scores == "detection_scores"
        assert slots.boxes == 7
        assert slots.classes == 5

    def test_round_trip(self, valid_config):
        cfg = Config.from_dict(valid_config)
        again = Config.from_dict(cfg.to_dict())
        assert again == cfg

    def test_model_config(self):
        model = ModelConfig.from_dict({"backend": "tflite", "path": "m.tflite", "timeout": 2})
        assert model.backend == "tflite"
        assert model.timeout == 2.0

    def test_display_config(self):
        display = DisplayConfig.from_dict({"refresh_hz": 30})
        assert display.refresh_hz == 30.0
        assert display.window is False
