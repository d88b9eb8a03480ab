"""
Unit tests for image loading and conversion helpers.
"""

import io

import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from utils.image_utils import (
    bytes_to_image,
    ensure_uint8,
    from_uint8_scale,
    get_image_info,
    image_to_bytes,
    is_unit_float,
    load_image,
    to_pil,
    validate_image,
)


def create_test_image(width=32, height=24):
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :width // 2] = (255, 0, 0)
    image[:, width // 2:] = (0, 0, 255)
    return image


class TestEnsureUint8:
    """Test bit depth normalization."""

    def test_uint8_unchanged(self):
        image = create_test_image()
        assert ensure_uint8(image) is image

    def test_uint16_scaled(self):
        image = np.array([[0, 257, 65535]], dtype=np.uint16)
        assert list(ensure_uint8(image)[0]) == [0, 1, 255]

    def test_unit_float_scaled(self):
        image = np.array([[0.0, 0.5, 1.0]], dtype=np.float32)
        assert list(ensure_uint8(image)[0]) == [0, 127, 255]

    def test_float_out_of_range_clipped(self):
        image = np.array([[-10.0, 300.0, np.nan]], dtype=np.float64)
        assert list(ensure_uint8(image)[0]) == [0, 255, 0]


class TestScaleHelpers:
    """Test float range detection and mapping back from 8 bits."""

    def test_is_unit_float(self):
        assert is_unit_float(np.array([[0.0, 1.0]], dtype=np.float32))
        assert not is_unit_float(np.array([[0.0, 2.0]], dtype=np.float32))
        assert not is_unit_float(np.array([[0, 1]], dtype=np.uint8))

    def test_from_uint8_scale(self):
        assert from_uint8_scale([200, 255], np.zeros(1, dtype=np.uint16)) == [51400.0, 65535.0]
        assert from_uint8_scale([51], np.zeros(1, dtype=np.float32)) == pytest.approx([0.2])
        assert from_uint8_scale([51], np.array([100.0])) == [51.0]
        assert from_uint8_scale([51], np.zeros(1, dtype=np.uint8)) == [51.0]


class TestEncoding:
    """Test encoding and decoding keeps band order."""

    def test_png_round_trip_keeps_rgb(self):
        image = create_test_image()
        decoded = bytes_to_image(image_to_bytes(image, "PNG"))
        assert np.array_equal(decoded, image)

    def test_png_keeps_alpha(self):
        image = np.zeros((8, 8, 4), dtype=np.uint8)
        image[:] = (10, 20, 30, 40)
        decoded = bytes_to_image(image_to_bytes(image, "PNG"))
        assert tuple(decoded[0, 0]) == (10, 20, 30, 40)

    def test_load_from_stream(self):
        image = create_test_image()
        decoded = load_image(io.BytesIO(image_to_bytes(image)))
        assert decoded.shape == image.shape

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "image.png"
        path.write_bytes(image_to_bytes(create_test_image()))
        assert tuple(load_image(str(path))[0, 0]) == (255, 0, 0)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError):
            load_image(str(tmp_path / "missing.png"))

    def test_bad_bytes(self):
        with pytest.raises(ValueError):
            bytes_to_image(b"not an image")

    def test_unsupported_source(self):
        with pytest.raises(ValueError):
            load_image(42)


class TestValidation:
    """Test image validation and info."""

    def test_valid(self):
        assert validate_image(create_test_image()) == (True, "OK")

    @pytest.mark.parametrize("image", [
        None,
        [[1, 2], [3, 4]],
        np.zeros((0, 4, 3), dtype=np.uint8),
        np.zeros((2, 2, 2, 2), dtype=np.uint8),
        np.array([[np.nan]], dtype=np.float32),
        np.array([[np.inf]], dtype=np.float32),
    ])
    def test_invalid(self, image):
        valid, message = validate_image(image)
        assert not valid
        assert message

    def test_image_info(self):
        info = get_image_info(create_test_image(32, 16))
        assert info["width"] == 32
        assert info["height"] == 16
        assert info["channels"] == 3
        assert info["aspect_ratio"] == 2.0

    def test_to_pil(self):
        assert to_pil(create_test_image()).mode == "RGB"
        assert to_pil(np.zeros((4, 4, 1), dtype=np.uint8)).mode == "L"
        assert to_pil(np.zeros((4, 4, 4), dtype=np.uint8)).mode == "RGBA"
