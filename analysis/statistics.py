"""
Image statistics over all pixels and bands.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List

from engine.base import PixelEngine, STAT_DEVIATION, STAT_MAX, STAT_MEAN, STAT_MIN


@dataclass(frozen=True)
class ImageStatistics:
    """Global statistics, all bands combined."""
    min: float
    max: float
    mean: float
    standard_deviation: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


class StatisticsEngine:
    """Reads global and per-band statistics through a pixel engine."""

    def __init__(self, engine: PixelEngine):
        self.engine = engine

    def statistics(self, image: Any) -> ImageStatistics:
        """
        Global min, max, mean and standard deviation.

        Args:
            image: Image understood by the pixel engine

        Returns:
            ImageStatistics computed across every band of every pixel
        """
        combined = self.engine.band_stats(image)[0]
        return ImageStatistics(
            min=float(combined[STAT_MIN]),
            max=float(combined[STAT_MAX]),
            mean=float(combined[STAT_MEAN]),
            standard_deviation=float(combined[STAT_DEVIATION]),
        )

    def average_color(self, image: Any) -> List[float]:
        """Arithmetic mean of each band, one value per band."""
        table = self.engine.band_stats(image)
        return [float(v) for v in table[1:, STAT_MEAN]]
