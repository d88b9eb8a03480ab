"""
Edge histogram voting.

Fallback for images whose content reaches every edge: pixels from strips
along the border are quantized into color buckets and the mean color of the
most populated bucket wins.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from config import get_section
from engine.base import PixelEngine, Rectangle
from .statistics import StatisticsEngine

logger = logging.getLogger(__name__)

# Only the color bands take part in the bucket key; alpha and extra bands are averaged
KEY_BANDS = 3


@dataclass
class EdgeVote:
    """Result of a histogram vote over the edge strips."""
    color: List[float]
    bucket_key: Optional[int] = None
    bucket_count: int = 0
    total_pixels: int = 0
    buckets: Dict[int, int] = field(default_factory=dict)


def edge_strip_regions(width: int, height: int, strip_width: int) -> List[Rectangle]:
    """
    Non-overlapping strips along the image border.

    Top and bottom strips span the full width. Left and right strips are only
    added when the image is taller than two strips, and cover the rows in
    between so the corners are sampled once.
    """
    sw = max(1, int(strip_width))

    top = Rectangle(0, 0, width, min(sw, height))
    bottom_y = max(height - sw, top.bottom)
    regions = [top, Rectangle(0, bottom_y, width, height - bottom_y)]

    if height > 2 * sw:
        side_height = height - 2 * sw
        left = Rectangle(0, sw, min(sw, width), side_height)
        right_x = max(width - sw, left.right)
        regions += [left, Rectangle(right_x, sw, width - right_x, side_height)]

    return [r for r in regions if not r.is_empty]


class EdgeHistogramVoter:
    """Picks the dominant quantized color along the image edges."""

    def __init__(self,
                 engine: PixelEngine,
                 config: Optional[Dict[str, Any]] = None,
                 statistics: Optional[StatisticsEngine] = None):
        """
        Initialize voter with configuration.

        Args:
            engine: Pixel engine used for crops and pixel access
            config: Histogram configuration dictionary ("quantize_step")
            statistics: Statistics engine for the empty-strip fallback
        """
        self.engine = engine
        self.config = get_section({"histogram": config or {}}, "histogram")
        self.statistics = statistics or StatisticsEngine(engine)

        step = int(self.config["quantize_step"])
        if step <= 0:
            raise ValueError(f"quantize_step must be positive, got {step}")
        self.step = step
        self.levels = 255 // step + 1

    def prominent_edge_color(self, image: Any, strip_width: int) -> List[float]:
        """Mean color of the most frequent edge bucket."""
        return self.vote(image, strip_width).color

    def vote(self, image: Any, strip_width: int) -> EdgeVote:
        """
        Quantize edge strip pixels and tally them per bucket.

        Ties between buckets go to the lowest bucket key.

        Args:
            image: Image understood by the pixel engine
            strip_width: Strip width in pixels; values below 1 are clamped to 1

        Returns:
            EdgeVote with the winning color and the bucket tallies
        """
        width, height, _ = self.engine.dimensions(image)
        pixels = self._collect(image, edge_strip_regions(width, height, strip_width))

        if pixels is None:
            logger.debug("No edge pixels collected; using the whole-image average")
            return EdgeVote(color=self.statistics.average_color(image))

        keys = self.bucket_keys(pixels)
        unique_keys, inverse, counts = np.unique(keys, return_inverse=True, return_counts=True)
        # unique_keys is sorted, so argmax picks the lowest key among ties
        winner = int(np.argmax(counts))
        members = pixels[inverse.reshape(-1) == winner]
        color = [float(v) for v in members.mean(axis=0)]

        logger.debug(
            f"Edge vote: bucket {int(unique_keys[winner])} won with "
            f"{int(counts[winner])}/{len(keys)} pixels -> {color}"
        )
        return EdgeVote(
            color=color,
            bucket_key=int(unique_keys[winner]),
            bucket_count=int(counts[winner]),
            total_pixels=int(len(keys)),
            buckets={int(k): int(c) for k, c in zip(unique_keys, counts)},
        )

    def bucket_keys(self, pixels: np.ndarray) -> np.ndarray:
        """
        Fold the first color bands of each pixel into one integer key.

        Args:
            pixels: (N, bands) array of 8-bit values

        Returns:
            (N,) int64 array of bucket keys
        """
        keys = np.zeros(len(pixels), dtype=np.int64)
        for band in range(min(pixels.shape[1], KEY_BANDS)):
            keys = keys * self.levels + pixels[:, band].astype(np.int64) // self.step
        return keys

    def _collect(self, image: Any, regions: List[Rectangle]) -> Optional[np.ndarray]:
        samples = []
        for region in regions:
            with self.engine.pixel_data(self.engine.crop(image, region)) as buffer:
                samples.append(buffer.to_array().reshape(-1, buffer.bands))

        if not samples:
            return None
        pixels = np.concatenate(samples)
        return pixels if len(pixels) else None
