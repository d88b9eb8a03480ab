"""
Unit tests for edge strip collection and histogram voting.
"""

import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis.edge_histogram import EdgeHistogramVoter, edge_strip_regions
from engine import NumpyPixelEngine, Rectangle


MAJORITY = (200, 200, 200)
MINORITY = (20, 40, 160)


def create_cross_image(size=100, line_width=8):
    """
    Majority color with minority-colored lines reaching all four edges.

    With 10px strips the lines cover 320 of the 3600 strip pixels (under 10%).
    """
    image = np.zeros((size, size, 3), dtype=np.uint8)
    image[:] = MAJORITY
    mid = size // 2
    image[:, mid:mid + line_width] = MINORITY
    image[mid:mid + line_width, :] = MINORITY
    return image


class EmptyStripEngine(NumpyPixelEngine):
    """Engine reporting a zero-sized image so no strips can be cut."""

    def dimensions(self, image):
        return 0, 0, 3


@pytest.fixture
def voter():
    return EdgeHistogramVoter(NumpyPixelEngine())


class TestEdgeStripRegions:
    """Test the edge strip layout."""

    def test_four_strips(self):
        regions = edge_strip_regions(100, 100, 10)
        assert regions == [
            Rectangle(0, 0, 100, 10),
            Rectangle(0, 90, 100, 10),
            Rectangle(0, 10, 10, 80),
            Rectangle(90, 10, 10, 80),
        ]
        assert sum(r.area for r in regions) == 3600

    def test_strips_do_not_overlap(self):
        counts = np.zeros((70, 90), dtype=np.int32)
        for r in edge_strip_regions(90, 70, 15):
            counts[r.y:r.bottom, r.x:r.right] += 1
        assert counts.max() == 1

    def test_short_image_has_no_side_strips(self):
        regions = edge_strip_regions(50, 15, 10)
        assert regions == [Rectangle(0, 0, 50, 10), Rectangle(0, 10, 50, 5)]

    def test_narrow_image_side_strips_do_not_overlap(self):
        regions = edge_strip_regions(15, 100, 10)
        assert Rectangle(0, 10, 10, 80) in regions
        assert Rectangle(10, 10, 5, 80) in regions

    def test_strip_width_clamped(self):
        regions = edge_strip_regions(10, 10, 0)
        assert regions[0] == Rectangle(0, 0, 10, 1)
        assert len(regions) == 4


class TestBucketKeys:
    """Test quantization of pixels into bucket keys."""

    def test_default_step(self, voter):
        pixels = np.array([[0, 0, 0], [255, 255, 255], [40, 70, 100]], dtype=np.uint8)
        assert list(voter.bucket_keys(pixels)) == [0, 7 * 64 + 7 * 8 + 7, 1 * 64 + 2 * 8 + 3]

    def test_only_three_bands_in_key(self, voter):
        pixels = np.array([[40, 70, 100, 0], [40, 70, 100, 255]], dtype=np.uint8)
        keys = voter.bucket_keys(pixels)
        assert keys[0] == keys[1]

    def test_greyscale(self, voter):
        assert list(voter.bucket_keys(np.array([[100]], dtype=np.uint8))) == [3]

    def test_custom_step(self):
        voter = EdgeHistogramVoter(NumpyPixelEngine(), {"quantize_step": 64})
        assert voter.levels == 4
        assert list(voter.bucket_keys(np.array([[255, 0, 64]], dtype=np.uint8))) == [3 * 16 + 0 + 1]

    def test_invalid_step(self):
        with pytest.raises(ValueError):
            EdgeHistogramVoter(NumpyPixelEngine(), {"quantize_step": 0})


class TestProminentEdgeColor:
    """Test the histogram vote."""

    def test_majority_bucket_wins(self, voter):
        color = voter.prominent_edge_color(create_cross_image(), 10)
        assert color == pytest.approx(list(MAJORITY))

    def test_vote_details(self, voter):
        vote = voter.vote(create_cross_image(), 10)
        assert vote.total_pixels == 3600
        assert vote.bucket_count == 3600 - 320
        assert sum(vote.buckets.values()) == 3600
        assert len(vote.buckets) == 2

    def test_bucket_mean(self, voter):
        """Colors inside one bucket are averaged."""
        image = np.zeros((40, 40, 3), dtype=np.uint8)
        image[:, :20] = (200, 200, 200)
        image[:, 20:] = (210, 210, 210)
        color = voter.prominent_edge_color(image, 5)
        assert color == pytest.approx([205.0, 205.0, 205.0])

    def test_tie_goes_to_lowest_key(self, voter):
        image = np.zeros((40, 40, 3), dtype=np.uint8)
        image[:, :20] = (10, 10, 10)
        image[:, 20:] = (250, 250, 250)

        vote = voter.vote(image, 10)
        assert len(set(vote.buckets.values())) == 1
        assert vote.bucket_key == 0
        assert vote.color == pytest.approx([10.0, 10.0, 10.0])

    def test_alpha_is_averaged(self, voter):
        image = np.zeros((30, 30, 4), dtype=np.uint8)
        image[:] = (50, 60, 70, 128)
        assert voter.prominent_edge_color(image, 5) == pytest.approx([50.0, 60.0, 70.0, 128.0])

    def test_float_strips_share_one_scale(self, voter):
        """Strips of a 0-255 float image stay on that scale even when dark."""
        image = np.full((60, 60, 3), 0.8, dtype=np.float64)
        image[20:40, 20:40] = 250.0
        assert voter.prominent_edge_color(image, 10) == pytest.approx([0.0, 0.0, 0.0])

    def test_sixteen_bit_color_on_eight_bit_scale(self, voter):
        image = create_cross_image().astype(np.uint16) * 257
        assert voter.prominent_edge_color(image, 10) == pytest.approx(list(MAJORITY))

    def test_no_strips_falls_back_to_average(self):
        voter = EdgeHistogramVoter(EmptyStripEngine())
        image = np.zeros((10, 10, 3), dtype=np.uint8)
        image[:] = (1, 2, 3)
        vote = voter.vote(image, 5)
        assert vote.color == pytest.approx([1.0, 2.0, 3.0])
        assert vote.bucket_key is None

    def test_repeatable(self, voter):
        image = create_cross_image()
        assert voter.prominent_edge_color(image, 10) == voter.prominent_edge_color(image, 10)
