"""Pixel engines used by the analysis modules."""

from .base import BackendFailure, PixelBuffer, PixelEngine, Rectangle
from .numpy_engine import NumpyPixelEngine

__all__ = [
    'BackendFailure',
    'PixelBuffer',
    'PixelEngine',
    'Rectangle',
    'NumpyPixelEngine'
]
