"""
Unit tests for color values and ink folding.
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis.color import Color, ink_for_bands


class TestInkForBands:
    """Test folding a color to an image's band count."""

    def test_single_band_uses_luma_weights(self):
        """RGB folds to Rec. 709 luminance."""
        ink = ink_for_bands([10, 20, 30], 1)
        assert ink == pytest.approx([0.2126 * 10 + 0.7152 * 20 + 0.0722 * 30])

    def test_single_band_white_stays_white(self):
        assert ink_for_bands([255, 255, 255], 1) == pytest.approx([255.0])

    def test_four_bands_append_opaque_alpha(self):
        assert ink_for_bands([1, 2, 3], 4) == [1.0, 2.0, 3.0, 255.0]

    def test_four_bands_replace_given_alpha(self):
        assert ink_for_bands([1, 2, 3, 9], 4) == [1.0, 2.0, 3.0, 255.0]

    def test_three_bands_pass_rgb_through(self):
        assert ink_for_bands([1, 2, 3, 4], 3) == [1.0, 2.0, 3.0]

    def test_grey_value_expands_to_rgb(self):
        assert ink_for_bands([100], 3) == [100.0, 100.0, 100.0]

    def test_grey_value_folds_to_itself(self):
        assert ink_for_bands([100], 1) == pytest.approx([100.0])

    def test_two_bands_pass_rgb_through(self):
        assert ink_for_bands([10, 20, 30], 2) == [10.0, 20.0, 30.0]

    def test_five_bands_pass_rgb_through(self):
        assert ink_for_bands([10, 20, 30, 40], 5) == [10.0, 20.0, 30.0]

    def test_empty_color_rejected(self):
        with pytest.raises(ValueError):
            ink_for_bands([], 3)


class TestColor:
    """Test the Color value object."""

    def test_rgb_accessors(self):
        color = Color.from_rgb(10, 20, 30)
        assert (color.red, color.green, color.blue) == (10.0, 20.0, 30.0)
        assert color.alpha is None

    def test_alpha_accessor(self):
        assert Color([1, 2, 3, 4]).alpha == 4.0

    def test_grey_color_accessors(self):
        color = Color([7])
        assert color.red == color.green == color.blue == 7.0

    def test_constants(self):
        assert Color.WHITE.ink(4) == [255.0, 255.0, 255.0, 255.0]
        assert Color.BLACK.as_tuple() == (0.0, 0.0, 0.0)

    def test_equality_and_indexing(self):
        color = Color([1, 2, 3])
        assert color == Color((1.0, 2.0, 3.0))
        assert len(color) == 3
        assert color[1] == 2.0
