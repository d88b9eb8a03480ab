"""Utility modules for image loading and visualization."""

from .image_utils import (
    load_image,
    bytes_to_image,
    image_to_bytes,
    ensure_uint8,
    is_unit_float,
    from_uint8_scale,
    validate_image,
    to_pil,
    get_image_info
)
from .visualization import (
    color_to_hex,
    draw_trim_overlay,
    create_side_by_side,
    create_bucket_vote_chart,
    create_margin_breakdown_chart,
    create_channel_histogram
)

__all__ = [
    'load_image',
    'bytes_to_image',
    'image_to_bytes',
    'ensure_uint8',
    'is_unit_float',
    'from_uint8_scale',
    'validate_image',
    'to_pil',
    'get_image_info',
    'color_to_hex',
    'draw_trim_overlay',
    'create_side_by_side',
    'create_bucket_vote_chart',
    'create_margin_breakdown_chart',
    'create_channel_histogram'
]
