"""
Pixel engine interface.

The analysis code never touches decoded pixels directly. Everything it needs
(region crops, per-band statistics, raw 8-bit access) goes through an engine
object that is handed to it, so engine-wide settings stay out of the analysis.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, List, Sequence, Tuple

import numpy as np


# Columns of the band statistics table returned by PixelEngine.band_stats()
STAT_MIN = 0
STAT_MAX = 1
STAT_SUM = 2
STAT_SUM2 = 3
STAT_MEAN = 4
STAT_DEVIATION = 5
STAT_COLUMNS = 6


class BackendFailure(Exception):
    """The pixel engine could not produce pixel data or statistics."""


@dataclass(frozen=True)
class Rectangle:
    """Integer pixel rectangle. Zero width or height means no content."""
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Rectangle size must not be negative: {self.width}x{self.height}")

    @classmethod
    def empty(cls) -> "Rectangle":
        return cls(0, 0, 0, 0)

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class PixelBuffer:
    """
    Read-only snapshot of decoded 8-bit pixel data.

    Only valid inside the PixelEngine.pixel_data() context that produced it.
    """
    data: memoryview  # Row-major bytes, read-only
    width: int
    height: int
    bytes_per_row: int
    bands: int

    def to_array(self) -> np.ndarray:
        """
        Copy the buffer into a (height, width, bands) uint8 array.

        The copy owns its memory, so it stays usable after the pixel_data()
        context has released the buffer.
        """
        flat = np.frombuffer(self.data, dtype=np.uint8)
        rows = flat.reshape(self.height, self.bytes_per_row)
        return rows[:, :self.width * self.bands].reshape(self.height, self.width, self.bands).copy()


class PixelEngine(ABC):
    """Capability the analysis components depend on."""

    @abstractmethod
    def dimensions(self, image: Any) -> Tuple[int, int, int]:
        """Return (width, height, bands)."""

    @abstractmethod
    def crop(self, image: Any, rect: Rectangle) -> Any:
        """Extract a rectangular sub-region of the 8-bit data as a read-only image."""

    @abstractmethod
    def band_stats(self, image: Any) -> np.ndarray:
        """
        Per-band statistics table of shape (bands + 1, STAT_COLUMNS).

        Row 0 covers all bands combined, row i covers band i - 1.
        """

    @abstractmethod
    def _prepare_pixels(self, image: Any) -> np.ndarray:
        """Return a C-contiguous (H, W, B) uint8 array for raw access."""

    @abstractmethod
    def default_background(self, image: Any) -> List[float]:
        """The engine's own guess at the background color, one value per band."""

    @abstractmethod
    def pixel_values(self, image: Any, x: int, y: int) -> List[float]:
        """Read one pixel, one 8-bit value per band."""

    @abstractmethod
    def pad(self, image: Any, top: int, left: int, bottom: int, right: int,
            fill: Sequence[float]) -> Any:
        """Place the image on a larger canvas filled with `fill` (8-bit scale)."""

    @contextmanager
    def pixel_data(self, image: Any) -> Iterator[PixelBuffer]:
        """
        Scoped raw access to 8-bit pixel data.

        The buffer is released when the block exits, whether normally or by
        an exception.
        """
        prepared = self._prepare_pixels(image)
        height, width, bands = prepared.shape
        view = memoryview(prepared.reshape(-1)).toreadonly()
        try:
            yield PixelBuffer(data=view, width=width, height=height,
                              bytes_per_row=width * bands, bands=bands)
        finally:
            view.release()
