"""
Background Inspector - Streamlit Application

Upload an image to see its detected background color, the content rectangle
found by trim detection, and the evidence behind both.
"""

import json
import logging
from typing import Any, Dict

import streamlit as st
import numpy as np

from config import get_default_config, merge_configs
from analysis import BackgroundAnalyzer, Color, margin_regions
from analysis.background import SOURCE_EDGE_HISTOGRAM, SOURCE_MARGINS
from engine import BackendFailure
from utils.image_utils import load_image, image_to_bytes, get_image_info, validate_image, to_pil
from utils.visualization import (
    color_to_hex,
    draw_trim_overlay,
    create_side_by_side,
    create_bucket_vote_chart,
    create_margin_breakdown_chart,
    create_channel_histogram
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

PAD_FILLS = {
    "Detected background": None,
    "White": Color.WHITE,
    "Black": Color.BLACK,
}

# Page configuration
st.set_page_config(
    page_title="Background Inspector",
    page_icon="🎯",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        text-align: center;
        margin-bottom: 0.5rem;
    }

    .sub-header {
        color: #a8a8b3;
        text-align: center;
        font-size: 1.1rem;
        margin-bottom: 2rem;
    }

    .swatch {
        width: 100%;
        height: 80px;
        border-radius: 12px;
        border: 1px solid rgba(0, 0, 0, 0.2);
    }
</style>
""", unsafe_allow_html=True)


def build_config(threshold: float, median_size: int, strip_width: int, step: int) -> Dict[str, Any]:
    """Build the analyzer configuration from sidebar values."""
    return merge_configs(get_default_config(), {
        "trim": {"threshold": threshold, "median_size": median_size},
        "detector": {"strip_width": strip_width},
        "histogram": {"quantize_step": step},
    })


def display_swatch(label: str, values) -> None:
    """Show a color swatch with its per-band values."""
    st.markdown(f"**{label}**")
    st.markdown(
        f'<div class="swatch" style="background:{color_to_hex(values)}"></div>',
        unsafe_allow_html=True
    )
    st.code(", ".join(f"{v:.1f}" for v in values))


def display_analysis(image: np.ndarray, analyzer: BackgroundAnalyzer, strip_width: int) -> None:
    """Run the analysis and render all results."""
    analysis = analyzer.analyze(image, strip_width)
    stats = analysis.statistics

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Min", f"{stats.min:.0f}")
    col2.metric("Max", f"{stats.max:.0f}")
    col3.metric("Mean", f"{stats.mean:.1f}")
    col4.metric("Std Dev", f"{stats.standard_deviation:.1f}")

    st.markdown("---")

    regions = margin_regions(analysis.trim, analysis.width, analysis.height)
    overlay = draw_trim_overlay(image, analysis.trim, regions)

    left, right = st.columns([2, 1])
    with left:
        st.image(to_pil(overlay), caption=f"Trim rectangle {analysis.trim.as_tuple()}", use_container_width=True)
    with right:
        display_swatch("Detected background", analysis.background_color)
        st.caption(f"Source: {analysis.source} · {analysis.processing_time * 1000:.0f} ms")
        display_swatch("Average color", analyzer.average_color(image))

    tab_margins, tab_votes, tab_hist, tab_trim = st.tabs(
        ["Margins", "Edge Votes", "Histograms", "Trim & Pad"]
    )

    with tab_margins:
        if analysis.source == SOURCE_MARGINS and regions:
            st.plotly_chart(create_margin_breakdown_chart(regions), use_container_width=True)
        else:
            st.info("No margins were sampled for this image.")

    with tab_votes:
        vote = analyzer.detector.edge_voter.vote(image, strip_width)
        if vote.buckets:
            st.plotly_chart(
                create_bucket_vote_chart(vote.buckets, analyzer.detector.edge_voter.step, analysis.bands),
                use_container_width=True
            )
            st.caption(
                f"Winning bucket #{vote.bucket_key}: {vote.bucket_count}/{vote.total_pixels} pixels"
                + (" (used)" if analysis.source == SOURCE_EDGE_HISTOGRAM else " (not used)")
            )
        else:
            st.info("Image too small for edge strips.")

    with tab_hist:
        st.plotly_chart(create_channel_histogram(image), use_container_width=True)

    with tab_trim:
        pad = st.slider("Padding (px)", 0, 200, 40)
        fill_choice = st.radio("Fill", list(PAD_FILLS), horizontal=True)
        fill = PAD_FILLS[fill_choice] or Color(analysis.background_color)
        trimmed = analyzer.trim(image)
        padded = analyzer.pad_with_background(trimmed, pad, pad, pad, pad, fill)
        st.image(to_pil(create_side_by_side([image, trimmed, padded], ["Original", "Trimmed", "Padded"])),
                 use_container_width=True)
        st.download_button(
            "⬇️ Download padded PNG",
            data=image_to_bytes(padded, "PNG"),
            file_name="padded.png",
            mime="image/png"
        )

    st.download_button(
        "⬇️ Download report (JSON)",
        data=json.dumps(analysis.to_dict(), indent=2),
        file_name="background_report.json",
        mime="application/json"
    )


def main():
    """Main application entry point."""
    st.markdown('<h1 class="main-header">Background Inspector</h1>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Find the background color and content bounds of any image</p>',
                unsafe_allow_html=True)

    defaults = get_default_config()

    with st.sidebar:
        st.markdown("## ⚙️ Settings")

        st.markdown("### Trim Detection")
        threshold = st.slider("Threshold", 0.0, 100.0, float(defaults["trim"]["threshold"]), 0.5)
        median_size = st.selectbox("Median filter", [0, 3, 5, 7], index=0,
                                   help="Suppress isolated noisy pixels before scanning")

        st.markdown("### Background Detection")
        strip_width = st.slider("Edge strip width (px)", 1, 100, int(defaults["detector"]["strip_width"]))
        step = st.selectbox("Quantization step", [8, 16, 32, 64], index=2)

    uploaded_file = st.file_uploader(
        "Upload an image",
        type=['jpg', 'jpeg', 'png', 'bmp', 'tiff', 'webp'],
        help="Supported formats: JPG, PNG, BMP, TIFF, WebP"
    )

    if uploaded_file is None:
        st.info("👆 Upload an image to get started")
        return

    try:
        image = load_image(uploaded_file.read())
    except ValueError as e:
        st.error(f"Could not load image: {e}")
        return

    is_valid, message = validate_image(image)
    if not is_valid:
        st.error(message)
        return

    info = get_image_info(image)
    st.caption(f"{info['width']}×{info['height']} · {info['channels']} band(s) · {info['dtype']}")

    analyzer = BackgroundAnalyzer(build_config(threshold, median_size, strip_width, step))

    try:
        with st.spinner("🔍 Analyzing image..."):
            display_analysis(image, analyzer, strip_width)
    except BackendFailure as e:
        logger.error(f"Analysis failed: {e}")
        st.error(f"Analysis failed: {e}")


if __name__ == "__main__":
    main()
