"""
High level entry point bundling statistics, trim and background detection.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np

from config import get_default_config, merge_configs
from engine.base import PixelEngine, Rectangle
from engine.numpy_engine import NumpyPixelEngine
from .background import BackgroundColorDetector
from .color import OPAQUE_ALPHA, Color
from .statistics import ImageStatistics

logger = logging.getLogger(__name__)


@dataclass
class BackgroundAnalysis:
    """Result from a full background analysis."""
    width: int
    height: int
    bands: int
    statistics: ImageStatistics
    trim: Rectangle
    background_color: List[float]
    source: str
    processing_time: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "bands": self.bands,
            "statistics": self.statistics.to_dict(),
            "trim": list(self.trim.as_tuple()),
            "background_color": [round(v, 3) for v in self.background_color],
            "source": self.source,
            "processing_time": round(self.processing_time, 4),
        }


class BackgroundAnalyzer:
    """
    Background color and content bounds for images.

    Supports:
    - Global statistics and per-band average color
    - Trim rectangle detection against a known or guessed background
    - Background color detection (margins first, edge histogram fallback)
    - Trimming to content and padding with the detected background
    - Thread-pooled batch analysis
    """

    def __init__(self,
                 config: Optional[Dict[str, Any]] = None,
                 engine: Optional[PixelEngine] = None):
        """
        Initialize analyzer with configuration.

        Args:
            config: Configuration dictionary, merged over DEFAULT_CONFIG
            engine: Pixel engine; a NumpyPixelEngine is created if omitted
        """
        self.config = merge_configs(get_default_config(), config or {})
        self.engine = engine or NumpyPixelEngine()
        self.detector = BackgroundColorDetector(self.engine, self.config)

    def find_trim(self,
                  image: Any,
                  threshold: Optional[float] = None,
                  background: Optional[Sequence[float]] = None) -> Rectangle:
        return self.detector.trim_detector.find_trim(image, threshold, background)

    def statistics(self, image: Any) -> ImageStatistics:
        return self.detector.statistics.statistics(image)

    def average_color(self, image: Any) -> List[float]:
        return self.detector.statistics.average_color(image)

    def detect_background_color(self, image: Any, strip_width: Optional[int] = None) -> List[float]:
        return self.detector.detect_background_color(image, strip_width)

    def analyze(self, image: Any, strip_width: Optional[int] = None) -> BackgroundAnalysis:
        """
        Run statistics, trim and background detection on one image.

        Args:
            image: Image understood by the pixel engine
            strip_width: Edge strip width for background detection

        Returns:
            BackgroundAnalysis with all results and timing
        """
        start_time = time.time()

        width, height, bands = self.engine.dimensions(image)
        stats = self.statistics(image)
        detection = self.detector.detect(image, strip_width)
        # The small-image path skips trim detection, so run it here for the report
        trim = detection.trim if detection.trim is not None else self.find_trim(image)

        processing_time = time.time() - start_time
        logger.info(
            f"Analyzed {width}x{height}x{bands} image in {processing_time:.3f}s: "
            f"background={[round(v, 1) for v in detection.color]} via {detection.source}"
        )

        return BackgroundAnalysis(
            width=width,
            height=height,
            bands=bands,
            statistics=stats,
            trim=trim,
            background_color=detection.color,
            source=detection.source,
            processing_time=processing_time,
        )

    def trim(self,
             image: np.ndarray,
             threshold: Optional[float] = None,
             background: Optional[Sequence[float]] = None) -> np.ndarray:
        """
        Crop an image to its content rectangle.

        Args:
            image: Input image
            threshold: Trim threshold, defaults to the configured value
            background: Background color; guessed by the engine if omitted

        Returns:
            Copy of the content region, or a copy of the whole image when no
            content differs from the background
        """
        rect = self.find_trim(image, threshold, background)
        if rect.is_empty:
            return np.array(image, copy=True)
        # Slice the source, not engine.crop(), to keep its dtype and layout
        return np.array(image[rect.y:rect.bottom, rect.x:rect.right], copy=True)

    def pad_with_background(self,
                            image: np.ndarray,
                            top: int = 0,
                            left: int = 0,
                            bottom: int = 0,
                            right: int = 0,
                            color: Optional[Sequence[float]] = None) -> np.ndarray:
        """
        Pad an image, filling the new area with its background color.

        Args:
            image: Input image
            top, left, bottom, right: Padding in pixels
            color: Fill color on the 8-bit scale; the detected background
                color if omitted

        Returns:
            New padded image with the dtype of the input
        """
        _, _, bands = self.engine.dimensions(image)
        if color is None:
            fill = self.detect_background_color(image)
        else:
            fill = self._fill_for_bands(Color(color), bands)
        return self.engine.pad(image, top, left, bottom, right, fill)

    @staticmethod
    def _fill_for_bands(color: Color, bands: int) -> List[float]:
        # Grey + alpha canvases need a fill of their own length
        if bands == 2:
            return color.ink(1) + [OPAQUE_ALPHA]
        return color.ink(bands)

    def analyze_many(self,
                     images: Iterable[Any],
                     max_workers: Optional[int] = None) -> List[BackgroundAnalysis]:
        """
        Analyze independent images on a thread pool.

        Args:
            images: Images to analyze
            max_workers: Pool size, defaults to the configured batch size

        Returns:
            Analyses in the same order as the input images
        """
        workers = max_workers or self.config["batch"]["max_workers"]
        with ThreadPoolExecutor(max_workers=max(1, int(workers))) as executor:
            return list(executor.map(self.analyze, images))
