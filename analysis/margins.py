"""
Margin sampling: weighted average color of the area around a trim rectangle.

The margin is split into at most four disjoint regions. The left and right
regions only span the rows of the trim rectangle, so the corners are counted
once (by the top or bottom region) and never twice.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import numpy as np

from engine.base import BackendFailure, PixelEngine, Rectangle
from .statistics import StatisticsEngine

logger = logging.getLogger(__name__)


@dataclass
class MarginSample:
    """Outcome of the preferred (trim + margins) detection path."""
    color: Optional[List[float]] = None
    trim: Optional[Rectangle] = None
    regions: List[Rectangle] = field(default_factory=list)
    pixel_count: int = 0
    failure: Optional[str] = None


def touches_all_edges(trim: Rectangle, width: int, height: int) -> bool:
    """True when the trim rectangle leaves no margin on any side."""
    return (trim.x <= 0 and trim.y <= 0
            and trim.right >= width and trim.bottom >= height)


def margin_regions(trim: Rectangle, width: int, height: int) -> List[Rectangle]:
    """
    Decompose the area outside `trim` into disjoint rectangles.

    Args:
        trim: Content rectangle; clamped into the image first
        width: Image width
        height: Image height

    Returns:
        Up to four regions (top, bottom, left, right) that, together with the
        clamped trim rectangle, cover every pixel of the image exactly once
    """
    tx = min(max(trim.x, 0), width)
    ty = min(max(trim.y, 0), height)
    tr = min(max(trim.right, tx), width)
    tb = min(max(trim.bottom, ty), height)
    th = tb - ty

    regions = []
    if ty > 0:
        regions.append(Rectangle(0, 0, width, ty))
    if tb < height:
        regions.append(Rectangle(0, tb, width, height - tb))
    if tx > 0 and th > 0:
        regions.append(Rectangle(0, ty, tx, th))
    if tr < width and th > 0:
        regions.append(Rectangle(tr, ty, width - tr, th))
    return [r for r in regions if not r.is_empty]


class MarginSampler:
    """Computes the background color from the margins of a trim rectangle."""

    def __init__(self, engine: PixelEngine, statistics: Optional[StatisticsEngine] = None):
        self.engine = engine
        self.statistics = statistics or StatisticsEngine(engine)

    def background_color_from_trim(self, image: Any, trim: Rectangle) -> Optional[List[float]]:
        """
        Pixel-count weighted average color of the margins around `trim`.

        Args:
            image: Image understood by the pixel engine
            trim: Content rectangle

        Returns:
            Per-band color, or None when there are no margins to sample
        """
        width, height, _ = self.engine.dimensions(image)
        if touches_all_edges(trim, width, height):
            return None

        color, _ = self._weighted_average(image, margin_regions(trim, width, height))
        return color

    def _weighted_average(self, image: Any, regions: List[Rectangle]):
        total = 0
        weighted = None
        for region in regions:
            count = region.area
            average = np.asarray(self.statistics.average_color(self.engine.crop(image, region)))
            contribution = average * count
            weighted = contribution if weighted is None else weighted + contribution
            total += count

        if total == 0:
            return None, 0
        return [float(v) for v in weighted / total], total

    def sample(self, image: Any, trim_detector) -> MarginSample:
        """
        Run trim detection with default parameters and sample its margins.

        A BackendFailure in either step is reported in the result instead of
        being raised.

        Args:
            image: Image understood by the pixel engine
            trim_detector: TrimDetector bound to the same engine

        Returns:
            MarginSample whose color is None when no usable margins exist
        """
        try:
            trim = trim_detector.find_trim(image)
            width, height, _ = self.engine.dimensions(image)

            if touches_all_edges(trim, width, height):
                logger.debug(f"Content reaches every edge {trim.as_tuple()}; no margins")
                return MarginSample(trim=trim)

            regions = margin_regions(trim, width, height)
            color, total = self._weighted_average(image, regions)
        except BackendFailure as exc:
            logger.warning(f"Margin sampling failed, treating as no margins: {exc}")
            return MarginSample(failure=str(exc))

        return MarginSample(color=color, trim=trim, regions=regions, pixel_count=total)
