"""
Trim detection: bounding box of content that differs from the background.
"""

import logging
from typing import Any, Dict, Optional, Sequence

import cv2
import numpy as np

from config import get_section
from engine.base import PixelEngine, Rectangle
from .color import ink_for_bands

logger = logging.getLogger(__name__)


class TrimDetector:
    """
    Finds the content rectangle by scanning inward from each edge.

    A row or column belongs to the margin while every pixel in it stays
    within `threshold` of the background on every band.
    """

    def __init__(self, engine: PixelEngine, config: Optional[Dict[str, Any]] = None):
        """
        Initialize trim detector with configuration.

        Args:
            engine: Pixel engine used for pixel access
            config: Trim configuration dictionary ("threshold", "median_size")
        """
        self.engine = engine
        self.config = get_section({"trim": config or {}}, "trim")

        median_size = int(self.config["median_size"])
        if median_size < 0 or (median_size and median_size % 2 == 0):
            raise ValueError(f"median_size must be 0 or a positive odd number, got {median_size}")

    def find_trim(self,
                  image: Any,
                  threshold: Optional[float] = None,
                  background: Optional[Sequence[float]] = None) -> Rectangle:
        """
        Find the bounding box of non-background content.

        Args:
            image: Image understood by the pixel engine
            threshold: Largest per-band difference still treated as background;
                negative values are clamped to 0
            background: Background color; folded to the image's band count.
                When omitted the engine's default background is used.

        Returns:
            Content rectangle, empty when nothing differs from the background
        """
        if threshold is None:
            threshold = self.config["threshold"]
        threshold = max(0.0, float(threshold))

        _, _, bands = self.engine.dimensions(image)
        if background is not None and len(background) > 0:
            ink = ink_for_bands(background, bands)
        else:
            ink = self.engine.default_background(image)

        with self.engine.pixel_data(image) as buffer:
            exceeds = self._content_mask(buffer.to_array(), ink, threshold)

        rows = np.flatnonzero(exceeds.any(axis=1))
        if rows.size == 0:
            logger.debug("No pixel differs from the background; nothing to trim to")
            return Rectangle.empty()
        cols = np.flatnonzero(exceeds.any(axis=0))

        top, bottom = int(rows[0]), int(rows[-1]) + 1
        left, right = int(cols[0]), int(cols[-1]) + 1
        trim = Rectangle(left, top, right - left, bottom - top)

        logger.debug(f"Trim rectangle {trim.as_tuple()} (threshold={threshold}, ink={ink})")
        return trim

    def _content_mask(self, pixels: np.ndarray, ink: Sequence[float], threshold: float) -> np.ndarray:
        """Boolean (H, W) mask of pixels exceeding the threshold on any band."""
        median_size = int(self.config["median_size"])
        if median_size > 1:
            pixels = self._median_filter(pixels, median_size)

        n = min(pixels.shape[2], len(ink))
        diff = np.abs(pixels[:, :, :n].astype(np.float64) - np.asarray(ink[:n], dtype=np.float64))
        return diff.max(axis=2) > threshold

    @staticmethod
    def _median_filter(pixels: np.ndarray, size: int) -> np.ndarray:
        # medianBlur only takes 1, 3 or 4 channels, so filter band by band
        bands = [cv2.medianBlur(np.ascontiguousarray(pixels[:, :, b]), size)
                 for b in range(pixels.shape[2])]
        return np.stack(bands, axis=2)
