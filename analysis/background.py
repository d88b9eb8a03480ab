"""
Background color detection.

Preferred path: find the content rectangle and average its margins.
Fallback: histogram vote over the edge strips.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from config import get_section
from engine.base import PixelEngine, Rectangle
from .edge_histogram import EdgeHistogramVoter
from .margins import MarginSampler
from .statistics import StatisticsEngine
from .trim import TrimDetector

logger = logging.getLogger(__name__)

SOURCE_AVERAGE = "average"
SOURCE_MARGINS = "margins"
SOURCE_EDGE_HISTOGRAM = "edge_histogram"


@dataclass
class BackgroundDetection:
    """Detected background color and the path that produced it."""
    color: List[float]
    source: str
    trim: Optional[Rectangle] = None
    margin_failure: Optional[str] = None


class BackgroundColorDetector:
    """Orchestrates trim detection, margin sampling and edge voting."""

    def __init__(self, engine: PixelEngine, config: Optional[Dict[str, Any]] = None):
        """
        Initialize detector with configuration.

        Args:
            engine: Pixel engine shared by all steps
            config: Full configuration dictionary (sections "trim",
                "histogram", "detector"); missing values use the defaults
        """
        self.engine = engine
        self.config = get_section(config, "detector")

        self.statistics = StatisticsEngine(engine)
        self.trim_detector = TrimDetector(engine, get_section(config, "trim"))
        self.margin_sampler = MarginSampler(engine, self.statistics)
        self.edge_voter = EdgeHistogramVoter(engine, get_section(config, "histogram"), self.statistics)

    def detect_background_color(self, image: Any, strip_width: Optional[int] = None) -> List[float]:
        """
        Detect the background color of an image.

        Args:
            image: Image understood by the pixel engine
            strip_width: Edge strip width; defaults to the configured value,
                values below 1 are clamped to 1

        Returns:
            Per-band background color
        """
        return self.detect(image, strip_width).color

    def detect(self, image: Any, strip_width: Optional[int] = None) -> BackgroundDetection:
        """Detect the background color and report which path was used."""
        if strip_width is None:
            strip_width = self.config["strip_width"]
        sw = max(1, int(strip_width))

        width, height, _ = self.engine.dimensions(image)
        if width <= 2 * sw or height <= 2 * sw:
            # Strips would overlap or run past the image
            logger.debug(f"{width}x{height} image too small for {sw}px strips; using average color")
            return BackgroundDetection(color=self.statistics.average_color(image), source=SOURCE_AVERAGE)

        sample = self.margin_sampler.sample(image, self.trim_detector)
        if sample.color is not None:
            logger.debug(f"Background from {len(sample.regions)} margin regions: {sample.color}")
            return BackgroundDetection(color=sample.color, source=SOURCE_MARGINS, trim=sample.trim)

        color = self.edge_voter.prominent_edge_color(image, sw)
        logger.debug(f"No usable margins; edge histogram vote gave {color}")
        return BackgroundDetection(
            color=color,
            source=SOURCE_EDGE_HISTOGRAM,
            trim=sample.trim,
            margin_failure=sample.failure,
        )
