"""Background color and trim detection."""

from .color import Color, ink_for_bands
from .statistics import ImageStatistics, StatisticsEngine
from .trim import TrimDetector
from .margins import MarginSample, MarginSampler, margin_regions
from .edge_histogram import EdgeHistogramVoter, EdgeVote, edge_strip_regions
from .background import BackgroundColorDetector, BackgroundDetection
from .analyzer import BackgroundAnalyzer, BackgroundAnalysis

__all__ = [
    'Color',
    'ink_for_bands',
    'ImageStatistics',
    'StatisticsEngine',
    'TrimDetector',
    'MarginSample',
    'MarginSampler',
    'margin_regions',
    'EdgeHistogramVoter',
    'EdgeVote',
    'edge_strip_regions',
    'BackgroundColorDetector',
    'BackgroundDetection',
    'BackgroundAnalyzer',
    'BackgroundAnalysis'
]
