"""
Pixel engine backed by numpy arrays and OpenCV.

Images are numpy arrays of shape (H, W) or (H, W, B) already in RGB / RGBA /
greyscale band order (see utils.image_utils.load_image).
"""

import logging
from typing import Any, List, Sequence, Tuple

import cv2
import numpy as np

from .base import (
    BackendFailure,
    PixelEngine,
    Rectangle,
    STAT_COLUMNS,
    STAT_DEVIATION,
    STAT_MAX,
    STAT_MEAN,
    STAT_MIN,
    STAT_SUM,
    STAT_SUM2,
)
from utils.image_utils import ensure_uint8, from_uint8_scale

logger = logging.getLogger(__name__)


class NumpyPixelEngine(PixelEngine):
    """
    In-process pixel engine.

    Holds no per-image state, so one instance can serve several threads as
    long as each thread works on its own image.
    """

    def _as_array(self, image: Any) -> np.ndarray:
        """Validate an image and return it as a 3-D (H, W, B) array view."""
        if not isinstance(image, np.ndarray):
            raise BackendFailure(f"Unsupported image type: {type(image).__name__}")

        if image.ndim == 2:
            image = image[:, :, np.newaxis]
        elif image.ndim != 3:
            raise BackendFailure(f"Image has invalid dimensions: {image.shape}")

        if image.size == 0:
            raise BackendFailure(f"Image is empty: {image.shape}")

        return image

    @staticmethod
    def _read_only(array: np.ndarray) -> np.ndarray:
        view = array.view()
        view.flags.writeable = False
        return view

    def dimensions(self, image: Any) -> Tuple[int, int, int]:
        arr = self._as_array(image)
        h, w, bands = arr.shape
        return w, h, bands

    def crop(self, image: Any, rect: Rectangle) -> np.ndarray:
        """
        Extract a region of the 8-bit data as a read-only view.

        The whole image is converted before slicing, so every crop of one
        image shares the same scale.

        Args:
            image: Source image
            rect: Region to extract, must be non-empty and inside the image

        Returns:
            Read-only (h, w, bands) uint8 array
        """
        arr = self._as_array(image)
        h, w = arr.shape[:2]

        if rect.is_empty:
            raise BackendFailure(f"Cannot crop an empty region: {rect.as_tuple()}")
        if rect.x < 0 or rect.y < 0 or rect.right > w or rect.bottom > h:
            raise BackendFailure(
                f"Crop region {rect.as_tuple()} lies outside the {w}x{h} image"
            )

        region = self._prepare_pixels(arr)[rect.y:rect.bottom, rect.x:rect.right]
        return self._read_only(region)

    def band_stats(self, image: Any) -> np.ndarray:
        """
        Compute min, max, sum, sum of squares, mean and deviation per band.

        Statistics are taken over the same 8-bit data pixel_data() hands out.
        Deviation is the sample standard deviation (n - 1 denominator).

        Returns:
            Array of shape (bands + 1, STAT_COLUMNS); row 0 is all bands
        """
        arr = self._prepare_pixels(image)
        h, w, bands = arr.shape

        try:
            values = arr.reshape(h * w, bands).astype(np.float64)
        except (ValueError, TypeError, MemoryError) as exc:
            raise BackendFailure(f"Could not read pixel data: {exc}") from exc

        table = np.zeros((bands + 1, STAT_COLUMNS), dtype=np.float64)

        # Per band rows
        table[1:, STAT_MIN] = values.min(axis=0)
        table[1:, STAT_MAX] = values.max(axis=0)
        table[1:, STAT_SUM] = values.sum(axis=0)
        table[1:, STAT_SUM2] = np.square(values).sum(axis=0)

        # All bands combined
        table[0, STAT_MIN] = table[1:, STAT_MIN].min()
        table[0, STAT_MAX] = table[1:, STAT_MAX].max()
        table[0, STAT_SUM] = table[1:, STAT_SUM].sum()
        table[0, STAT_SUM2] = table[1:, STAT_SUM2].sum()

        counts = np.full(bands + 1, float(h * w))
        counts[0] *= bands

        table[:, STAT_MEAN] = table[:, STAT_SUM] / counts
        table[:, STAT_DEVIATION] = self._deviation(table[:, STAT_SUM], table[:, STAT_SUM2], counts)

        return table

    @staticmethod
    def _deviation(sums: np.ndarray, sums2: np.ndarray, counts: np.ndarray) -> np.ndarray:
        deviation = np.zeros_like(sums)
        multi = counts > 1
        # Rounding can push a zero variance slightly below zero
        variance = np.clip(
            (sums2[multi] - sums[multi] ** 2 / counts[multi]) / (counts[multi] - 1), 0.0, None
        )
        deviation[multi] = np.sqrt(variance)
        return deviation

    def _prepare_pixels(self, image: Any) -> np.ndarray:
        arr = self._as_array(image)
        try:
            return np.ascontiguousarray(ensure_uint8(arr))
        except (ValueError, TypeError, MemoryError) as exc:
            raise BackendFailure(f"Could not convert pixel data to 8 bits: {exc}") from exc

    def default_background(self, image: Any) -> List[float]:
        """
        Use the top-left pixel, as libvips find_trim does by default.

        Read on the 8-bit scale so it can be compared with pixel_data().
        """
        return self.pixel_values(image, 0, 0)

    def pixel_values(self, image: Any, x: int, y: int) -> List[float]:
        arr = self._as_array(image)
        h, w = arr.shape[:2]
        if not (0 <= x < w and 0 <= y < h):
            raise BackendFailure(f"Pixel ({x}, {y}) lies outside the {w}x{h} image")
        return [float(v) for v in self._prepare_pixels(arr)[y, x]]

    def pad(self, image: Any, top: int, left: int, bottom: int, right: int,
            fill: Sequence[float]) -> np.ndarray:
        """
        Place the image on a larger canvas filled with a constant color.

        Args:
            image: Source image
            top, left, bottom, right: Padding in pixels (non-negative)
            fill: One value per band of the image, on the 8-bit scale

        Returns:
            New padded array with the same dtype and layout as the input
        """
        arr = self._as_array(image)
        bands = arr.shape[2]

        if min(top, left, bottom, right) < 0:
            raise BackendFailure(f"Padding must not be negative: {(top, left, bottom, right)}")
        if len(fill) != bands:
            raise BackendFailure(f"Fill has {len(fill)} values for a {bands}-band image")

        value = from_uint8_scale(fill, arr)

        # cv2.copyMakeBorder handles at most 4 channels
        if bands <= 4:
            try:
                padded = cv2.copyMakeBorder(
                    np.ascontiguousarray(arr), top, bottom, left, right,
                    cv2.BORDER_CONSTANT, value=value
                )
            except cv2.error as exc:
                raise BackendFailure(f"Padding failed: {exc}") from exc
            # OpenCV drops the channel axis of single-band images
            if padded.ndim == 2:
                padded = padded[:, :, np.newaxis]
        else:
            h, w = arr.shape[:2]
            fill_values = np.asarray(value, dtype=np.float64)
            if np.issubdtype(arr.dtype, np.integer):
                info = np.iinfo(arr.dtype)
                fill_values = np.clip(np.rint(fill_values), info.min, info.max)
            padded = np.empty((h + top + bottom, w + left + right, bands), dtype=arr.dtype)
            padded[:] = fill_values.astype(arr.dtype)
            padded[top:top + h, left:left + w] = arr

        logger.debug(f"Padded {arr.shape} to {padded.shape}")

        if image.ndim == 2:
            return padded[:, :, 0]
        return padded
