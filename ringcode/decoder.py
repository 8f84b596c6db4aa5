"""Image decoder for ring codes.

Decodes a capture back to text by:
1. Building five grayscale variants (luminance, equalized, normalized,
   two gamma curves)
2. Assuming the code is centered in the frame and fills its shorter side
3. Sweeping inversion, bias, threshold mode and anchor shift for every
   variant, sampling each ring at the layout's mid radii
4. Returning the first hypothesis whose header checksum and redundancy
   block validate

The core works on an in-memory pixel buffer; ``decode_image`` is a thin
front door that opens encoded image bytes with Pillow first.
"""

from __future__ import annotations

import io
from dataclasses import dataclass

import numpy as np
import structlog
from PIL import Image

from .layout import LAYOUT, Layout
from .preprocess import VARIANT_NAMES, preprocess_variants
from .search import (
    DecodeHypothesis,
    DecodeStatus,
    HypothesisSearch,
    ProgressCallback,
    SearchConfig,
)

logger = structlog.get_logger(__name__)

__all__ = ["DecodeResult", "DecodeStatus", "decode", "decode_image", "decode_pixels"]


@dataclass
class DecodeResult:
    """Result of decoding a ring code capture.

    Attributes:
        text: Decoded text, or None if decode failed.
        status: How the search ended.
        hypothesis: The hypothesis that validated, if any.
        hypotheses_tried: Number of hypotheses evaluated.
        corrected_errors: Byte errors repaired by Reed-Solomon frames.
        error: Error message if decode failed.
    """

    text: str | None
    status: DecodeStatus
    hypothesis: DecodeHypothesis | None = None
    hypotheses_tried: int = 0
    corrected_errors: int = 0
    error: str | None = None


def decode_pixels(
    pixels: np.ndarray,
    progress: ProgressCallback | None = None,
    config: SearchConfig | None = None,
    layout: Layout = LAYOUT,
) -> DecodeResult:
    """Decode a ring code from a pixel buffer.

    Args:
        pixels: uint8 array of shape (H, W, 4) RGBA or (H, W, 3) RGB.
        progress: Called with a percentage once per preprocessing variant
            and with 100 when the search ends.
        config: Worker count and search limits.
        layout: Ring layout.

    Returns:
        DecodeResult; ``text`` is None unless status is DECODED.

    Raises:
        ValueError: If pixels is not an image-shaped array.
    """
    arr = np.asarray(pixels)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) pixel array, got {arr.shape}")

    h, w = arr.shape[:2]
    if min(h, w) <= 2 * layout.quiet_zone:
        logger.warning("decode_image_too_small", width=w, height=h)
        return DecodeResult(
            text=None,
            status=DecodeStatus.NOT_STARTED,
            error=f"Image too small: {w}x{h} (need more than {2 * layout.quiet_zone} px per side)",
        )

    surfaces = preprocess_variants(arr.astype(np.uint8, copy=False))
    search = HypothesisSearch(surfaces, layout, config, progress)
    outcome = search.run()

    if outcome.status is DecodeStatus.DECODED:
        hypothesis = outcome.hypothesis
        logger.info(
            "decode_success",
            variant=hypothesis.variant,
            variant_name=VARIANT_NAMES[hypothesis.variant],
            inverted=hypothesis.inverted,
            mode=hypothesis.mode.value,
            bias=hypothesis.bias,
            anchor=hypothesis.anchor,
            hypotheses=outcome.hypotheses_tried,
            corrected=outcome.frame.corrected,
        )
        return DecodeResult(
            text=outcome.frame.text,
            status=outcome.status,
            hypothesis=hypothesis,
            hypotheses_tried=outcome.hypotheses_tried,
            corrected_errors=outcome.frame.corrected,
        )

    if outcome.status is DecodeStatus.LIMIT_REACHED:
        logger.warning("decode_search_limit_reached", hypotheses=outcome.hypotheses_tried)
        error = "Search stopped at its hypothesis or time limit before a frame validated"
    else:
        logger.warning("decode_search_exhausted", hypotheses=outcome.hypotheses_tried)
        error = "No valid ring code found -- no hypothesis produced a valid frame"

    return DecodeResult(
        text=None,
        status=outcome.status,
        hypotheses_tried=outcome.hypotheses_tried,
        error=error,
    )


def decode(
    pixels: np.ndarray,
    progress: ProgressCallback | None = None,
    config: SearchConfig | None = None,
) -> str | None:
    """Decode a pixel buffer straight to text (None on failure)."""
    return decode_pixels(pixels, progress, config).text


def decode_image(
    image_bytes: bytes,
    progress: ProgressCallback | None = None,
    config: SearchConfig | None = None,
) -> DecodeResult:
    """Decode a ring code from encoded image bytes.

    Supports anything Pillow opens (PNG, JPEG, WebP, ...). Transparent
    regions are composited onto white before decoding.

    Args:
        image_bytes: Raw image bytes.
        progress: Progress callback, see ``decode_pixels``.
        config: Search configuration.

    Returns:
        DecodeResult with text, status and optional error.
    """
    try:
        img = Image.open(io.BytesIO(image_bytes)).convert("RGBA")
    except Exception as e:
        logger.warning("decode_image_open_failed", error=str(e))
        return DecodeResult(
            text=None,
            status=DecodeStatus.NOT_STARTED,
            error=f"Cannot open image: {e}",
        )

    white_bg = Image.new("RGBA", img.size, (255, 255, 255, 255))
    composited = Image.alpha_composite(white_bg, img)
    return decode_pixels(np.array(composited), progress, config)
