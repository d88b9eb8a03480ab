"""
Configuration system for background detection.
Provides defaults that work for typical scanned photos, product shots and screenshots.
"""

import copy
from typing import Dict, Any, Optional


# Default configuration - works out-of-the-box for most images
DEFAULT_CONFIG = {
    # Trim detection
    "trim": {
        "threshold": 10.0,  # Max per-band difference still counted as background
        "median_size": 0,  # 0 disables; odd kernel size for noise suppression
    },

    # Edge histogram voting
    "histogram": {
        "quantize_step": 32,  # Bucket width per band on the 0-255 scale
    },

    # Background color detection
    "detector": {
        "strip_width": 10,  # Edge strip width in pixels
    },

    # Batch analysis
    "batch": {
        "max_workers": 4,
    },
}


def get_default_config() -> Dict[str, Any]:
    """Return a copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge override config into base config.

    Args:
        base: Base configuration dictionary
        override: Override values to apply

    Returns:
        Merged configuration
    """
    result = copy.deepcopy(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result


def get_section(config: Optional[Dict[str, Any]], name: str) -> Dict[str, Any]:
    """
    Return one configuration section with defaults filled in.

    Args:
        config: Full configuration dictionary (may be None or partial)
        name: Section name, e.g. "trim" or "histogram"

    Returns:
        Section dictionary merged over its defaults
    """
    if name not in DEFAULT_CONFIG:
        raise ValueError(f"Unknown configuration section: {name}")

    section = (config or {}).get(name) or {}
    return merge_configs(DEFAULT_CONFIG[name], section)
