"""
Tests for the tensor codec (frame encoding, output decoding).
"""

import time

import numpy as np
import pytest

from codec.tensor_codec import HWC_AXES, TensorCodec
from models.errors import UnsupportedFrameShape
from models.frame import FrameData

from conftest import make_raw_outputs


def _frame(shape, dtype=np.uint8):
    pixels = np.random.randint(0, 256, shape).astype(dtype)
    return FrameData.from_numpy(pixels, timestamp=time.time())


class TestEncode:
    @pytest.mark.parametrize("height,width", [(500, 600), (1, 1), (480, 640), (7, 3)])
    def test_shape_and_values(self, height, width):
        frame = _frame((height, width, 3))
        tensor = TensorCodec().encode(frame)

        assert tensor.shape == (1, height, width, 3)
        assert tensor.dtype == np.int32
        np.testing.assert_array_equal(tensor[0], frame.frame.astype(np.int32))

    def test_values_stay_in_pixel_range(self, rgb_frame):
        tensor = TensorCodec().encode(rgb_frame)
        assert tensor.min() >= 0
        assert tensor.max() <= 255

    def test_axis_order_is_identity(self):
        assert HWC_AXES == (0, 1, 2)
        pixels = np.arange(2 * 3 * 3, dtype=np.uint8).reshape(2, 3, 3)
        tensor = TensorCodec().encode(FrameData.from_numpy(pixels, timestamp=0.0))
        assert tensor[0, 1, 2, 0] == pixels[1, 2, 0]
        assert tensor[0, 0, 1, 2] == pixels[0, 1, 2]

    def test_output_is_contiguous_copy(self, rgb_frame):
        tensor = TensorCodec().encode(rgb_frame)
        assert tensor.flags.c_contiguous
        assert not np.shares_memory(tensor, rgb_frame.frame)

    def test_deterministic(self, rgb_frame):
        codec = TensorCodec()
        np.testing.assert_array_equal(codec.encode(rgb_frame), codec.encode(rgb_frame))

    def test_configurable_integer_dtype(self, rgb_frame):
        tensor = TensorCodec(input_dtype="uint8").encode(rgb_frame)
        assert tensor.dtype == np.uint8

    def test_float_dtype_rejected(self):
        with pytest.raises(ValueError, match="integer"):
            TensorCodec(input_dtype="float32")

    @pytest.mark.parametrize("shape", [(10, 10, 1), (10, 10, 4), (10, 10, 2), (10, 10)])
    def test_unsupported_channel_depth(self, shape):
        with pytest.raises(UnsupportedFrameShape):
            TensorCodec().encode(_frame(shape))


class TestDecode:
    def test_regression_box(self):
        """(y=0.1, x=0.2, h=0.5, w=0.6) on a 600x500 display."""
        raw = make_raw_outputs([(0.9, 1, (0.1, 0.2, 0.5, 0.6))])

        proposals = TensorCodec().decode(raw, display_width=600, display_height=500)

        bbox = proposals[0].bbox
        # x1 = 0.2*600, y1 = 0.1*500, x2 = 0.6*500, y2 = 0.5*600
        assert bbox.x == pytest.approx(120)
        assert bbox.y == pytest.approx(50)
        assert bbox.width == pytest.approx(180)
        assert bbox.height == pytest.approx(250)

    def test_second_corner_crosses_axes(self):
        raw = make_raw_outputs([(0.9, 1, (0.0, 0.0, 1.0, 0.5))])

        bbox = TensorCodec().decode(raw, display_width=800, display_height=200)[0].bbox

        # x2 = w * height, y2 = h * width
        assert bbox.x2 == pytest.approx(0.5 * 200)
        assert bbox.y2 == pytest.approx(1.0 * 800)

    def test_one_proposal_per_row_regardless_of_score(self, raw_outputs):
        proposals = TensorCodec().decode(raw_outputs, 600, 500)
        assert len(proposals) == raw_outputs.proposal_count
        assert [p.score for p in proposals] == pytest.approx([0.95, 0.40, 0.8534])

    def test_classes_become_ints(self, raw_outputs):
        proposals = TensorCodec().decode(raw_outputs, 600, 500)
        assert [p.class_id for p in proposals] == [1, 2, 3]
        assert all(isinstance(p.class_id, int) for p in proposals)

    def test_empty_outputs(self):
        raw = make_raw_outputs([])
        assert TensorCodec().decode(raw, 600, 500) == []
