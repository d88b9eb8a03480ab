"""
Visualization utilities for inspecting trim and background detection.
"""

import cv2
import numpy as np
from typing import List, Tuple, Sequence
import plotly.graph_objects as go

from engine.base import Rectangle
from .image_utils import ensure_uint8

CHANNEL_COLORS = ["#e74c3c", "#2ecc71", "#3498db", "#7f8c8d"]


def color_to_hex(values: Sequence[float]) -> str:
    """
    Format a color vector as a CSS hex string.

    Args:
        values: 1 value (grey) or 3+ values (RGB, extra bands ignored)

    Returns:
        String like "#ff8000"
    """
    if len(values) < 3:
        values = [values[0]] * 3
    r, g, b = (int(np.clip(round(v), 0, 255)) for v in values[:3])
    return f"#{r:02x}{g:02x}{b:02x}"


def _to_rgb(image: np.ndarray) -> np.ndarray:
    """8-bit RGB copy of an RGB, RGBA or greyscale image."""
    img = ensure_uint8(image)
    if img.ndim == 3 and img.shape[2] == 1:
        img = img[:, :, 0]
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
    if img.shape[2] == 2:
        return cv2.cvtColor(np.ascontiguousarray(img[:, :, 0]), cv2.COLOR_GRAY2RGB)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_RGBA2RGB)
    return np.ascontiguousarray(img[:, :, :3]).copy()


def draw_trim_overlay(image: np.ndarray,
                      trim: Rectangle,
                      regions: Sequence[Rectangle] = (),
                      color: Tuple[int, int, int] = (233, 69, 96),
                      thickness: int = 2) -> np.ndarray:
    """
    Draw the trim rectangle and shade the sampled margin regions.

    Args:
        image: Input image (RGB, RGBA or greyscale)
        trim: Content rectangle to outline
        regions: Margin regions to shade
        color: Outline color (RGB)
        thickness: Outline thickness in pixels

    Returns:
        New RGB image with the overlay
    """
    canvas = _to_rgb(image)

    # Shade margins so their extent is visible
    if regions:
        shade = canvas.copy()
        for region in regions:
            cv2.rectangle(shade, (region.x, region.y),
                          (region.right - 1, region.bottom - 1), (52, 152, 219), -1)
        canvas = cv2.addWeighted(shade, 0.25, canvas, 0.75, 0)

    if not trim.is_empty:
        cv2.rectangle(canvas, (trim.x, trim.y),
                      (trim.right - 1, trim.bottom - 1), color, thickness)

    return canvas


def create_side_by_side(images: List[np.ndarray],
                        labels: List[str],
                        max_height: int = 400) -> np.ndarray:
    """
    Create side-by-side comparison of multiple images.

    Args:
        images: List of images (RGB, RGBA or greyscale)
        labels: List of labels for each image
        max_height: Maximum height of output

    Returns:
        Combined RGB image
    """
    if len(images) != len(labels):
        raise ValueError("Number of images must match number of labels")

    resized = []
    for img, label in zip(images, labels):
        rgb = _to_rgb(img)
        h, w = rgb.shape[:2]
        scale = min(1.0, max_height / h)
        rgb = cv2.resize(rgb, (max(1, int(w * scale)), max(1, int(h * scale))),
                         interpolation=cv2.INTER_AREA)
        cv2.putText(rgb, label, (10, 25), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
        resized.append(rgb)

    # Pad to the tallest image
    target_h = max(img.shape[0] for img in resized)
    padded = [cv2.copyMakeBorder(img, 0, target_h - img.shape[0], 0, 0,
                                 cv2.BORDER_CONSTANT, value=(0, 0, 0)) for img in resized]

    return np.hstack(padded)


def create_bucket_vote_chart(buckets: dict,
                             step: int = 32,
                             bands: int = 3,
                             top_n: int = 12) -> go.Figure:
    """
    Bar chart of the most populated edge color buckets.

    Args:
        buckets: Mapping of bucket key to pixel count
        step: Quantization step used to build the keys
        bands: Number of bands folded into each key (1-3)
        top_n: Number of buckets to show

    Returns:
        Plotly figure
    """
    levels = 255 // step + 1
    key_bands = max(1, min(bands, 3))
    ranked = sorted(buckets.items(), key=lambda item: (-item[1], item[0]))[:top_n]

    labels, counts, colors = [], [], []
    for key, count in ranked:
        # Unfold the key into per-band bucket centres
        indices = []
        remainder = key
        for _ in range(key_bands):
            indices.append(remainder % levels)
            remainder //= levels
        centres = [min(255, i * step + step // 2) for i in reversed(indices)]

        labels.append(f"#{key}")
        counts.append(count)
        colors.append(color_to_hex(centres))

    fig = go.Figure(
        go.Bar(
            x=labels,
            y=counts,
            marker=dict(color=colors, line=dict(color="#333333", width=1)),
            hovertemplate="Bucket %{x}<br>%{y} pixels<extra></extra>",
        )
    )

    fig.update_layout(
        title="Edge Color Buckets",
        xaxis_title="Bucket",
        yaxis_title="Pixels",
        template="plotly_white",
        margin=dict(l=30, r=30, t=50, b=30),
    )

    return fig


def create_margin_breakdown_chart(regions: Sequence[Rectangle]) -> go.Figure:
    """
    Pie chart of pixel counts per margin region.

    Args:
        regions: Margin regions as returned by margin_regions()

    Returns:
        Plotly figure
    """
    labels = [f"{r.width}x{r.height} @ ({r.x}, {r.y})" for r in regions]
    values = [r.area for r in regions]

    fig = go.Figure(
        go.Pie(
            labels=labels,
            values=values,
            hole=0.4,
            textinfo="percent",
        )
    )

    fig.update_layout(
        title="Margin Pixel Weights",
        template="plotly_white",
        margin=dict(l=30, r=30, t=50, b=30),
    )

    return fig


def create_channel_histogram(image: np.ndarray) -> go.Figure:
    """
    Per-band histogram of an image.

    Args:
        image: Input image (RGB, RGBA or greyscale)

    Returns:
        Plotly figure
    """
    img = ensure_uint8(image)
    if img.ndim == 2:
        img = img[:, :, np.newaxis]

    names = ["Red", "Green", "Blue", "Alpha"] if img.shape[2] >= 3 else ["Luminance", "Alpha"]

    fig = go.Figure()
    for band in range(img.shape[2]):
        hist = cv2.calcHist([np.ascontiguousarray(img[:, :, band])], [0], None, [256], [0, 256]).flatten()
        name = names[band] if band < len(names) else f"Band {band}"
        fig.add_trace(
            go.Scatter(
                x=list(range(256)),
                y=hist,
                name=name,
                fill='tozeroy',
                line=dict(color=CHANNEL_COLORS[band % len(CHANNEL_COLORS)], width=1),
            )
        )

    fig.update_layout(
        title="Band Histograms",
        xaxis_title="Pixel Value",
        yaxis_title="Frequency",
        template="plotly_white",
        hovermode="x unified",
    )

    return fig
