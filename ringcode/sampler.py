"""Ring sampling and intensity thresholding.

For every sector of a ring, the sampler averages pixels along the ring's
mid-line:

- Only the central ANGLE_KEEP_FRAC of the sector's angular span is used,
  so neighboring sectors do not bleed in
- ANGLE_SAMPLES equally spaced angles across that span
- At each angle, RADIUS_TAP pixels on either side of the mid radius
- Taps outside the image are skipped; a sector with no valid tap reads
  as 255 (background)

Lower intensity means "more likely painted".  Two threshold strategies
turn intensities into bits; both are scaled by a bias factor and map
values below the threshold to 1.
"""

from __future__ import annotations

import math
from enum import Enum

import numpy as np

ANGLE_KEEP_FRAC = 0.70
ANGLE_SAMPLES = 8
RADIUS_TAP = 2

PERCENTILE_LOW = 0.30
PERCENTILE_HIGH = 0.70


class ThresholdMode(Enum):
    PERCENTILE = "percentile"
    HISTOGRAM_SPLIT = "histogram_split"


def sample_ring(
    gray: np.ndarray,
    center: tuple[float, float],
    radius: float,
    sector_count: int,
    shift: float = 0.0,
) -> np.ndarray:
    """Mean intensity of every sector of one ring.

    Args:
        gray: 8-bit grayscale image, shape (H, W).
        center: (cx, cy) of the code in pixel coordinates.
        radius: Mid radius of the ring in pixels.
        sector_count: Number of sectors in the ring.
        shift: Angular anchor offset, in sectors of this ring.

    Returns:
        float64 array of length sector_count.
    """
    h, w = gray.shape
    cx, cy = center
    seg = 2 * math.pi / sector_count
    pad = (1.0 - ANGLE_KEEP_FRAC) * 0.5

    sectors = np.arange(sector_count, dtype=np.float64)[:, None]
    a0 = (sectors + pad + shift) * seg
    a1 = (sectors + 1 - pad + shift) * seg
    angles = a0 + (a1 - a0) * np.linspace(0.0, 1.0, ANGLE_SAMPLES)[None, :]

    radii = radius + np.arange(-RADIUS_TAP, RADIUS_TAP + 1, dtype=np.float64)
    cos_a = np.cos(angles)[:, :, None]
    sin_a = np.sin(angles)[:, :, None]
    # Round half up, shape (sectors, angles, radial taps)
    xs = np.floor(cx + radii * cos_a + 0.5).astype(np.int64)
    ys = np.floor(cy + radii * sin_a + 0.5).astype(np.int64)

    valid = (xs >= 0) & (xs < w) & (ys >= 0) & (ys < h)
    taps = gray[np.clip(ys, 0, h - 1), np.clip(xs, 0, w - 1)].astype(np.float64)
    sums = np.where(valid, taps, 0.0).sum(axis=(1, 2))
    counts = valid.sum(axis=(1, 2))

    out = np.full(sector_count, 255.0)
    np.divide(sums, counts, out=out, where=counts > 0)
    return out


def percentile_threshold(values: np.ndarray) -> float:
    """Midpoint of the 30th and 70th percentile intensities."""
    ordered = np.sort(values)
    n = len(ordered)
    p_low = ordered[int(n * PERCENTILE_LOW)]
    p_high = ordered[int(n * PERCENTILE_HIGH)]
    return float(p_low + p_high) / 2.0


def histogram_split_threshold(levels: np.ndarray) -> float:
    """Otsu split of 8-bit levels, placed in the gap between the classes.

    The Otsu level ``t`` maximizes between-class variance of the classes
    ``<= t`` and ``> t``.  The returned threshold sits midway between the
    highest level in the lower class and the lowest level in the upper
    one, so ``value < threshold`` selects exactly the lower class.  When
    no split exists (a single level) the lowest level is returned, which
    classifies every value as background.
    """
    levels = np.asarray(levels, dtype=np.int64)
    lo = int(levels.min())

    hist = np.bincount(levels, minlength=256).astype(np.float64)
    bins = np.arange(256, dtype=np.float64)
    total = float(len(levels))
    sum_total = float(np.dot(bins, hist))

    weight_bg = np.cumsum(hist)
    weight_fg = total - weight_bg
    sum_bg = np.cumsum(bins * hist)

    split = (weight_bg > 0) & (weight_fg > 0)
    if not np.any(split):
        return float(lo)

    mean_bg = np.divide(sum_bg, weight_bg, out=np.zeros(256), where=split)
    mean_fg = np.divide(sum_total - sum_bg, weight_fg, out=np.zeros(256), where=split)
    variance = np.where(split, weight_bg * weight_fg * (mean_bg - mean_fg) ** 2, 0.0)
    otsu_t = int(np.argmax(variance))

    lower = levels[levels <= otsu_t]
    upper = levels[levels > otsu_t]
    if len(lower) and len(upper):
        return (int(lower.max()) + int(upper.min())) / 2.0
    return float(otsu_t)


def intensities_to_bits(
    values: np.ndarray,
    mode: ThresholdMode,
    bias: float = 1.0,
    inverted: bool = False,
) -> np.ndarray:
    """Threshold sector intensities into bits.

    Args:
        values: Per-sector intensities from ``sample_ring``.
        mode: Threshold strategy.
        bias: Multiplier applied to the threshold.
        inverted: Flip every resulting bit.

    Returns:
        uint8 array of 0s and 1s.
    """
    if mode is ThresholdMode.PERCENTILE:
        threshold = percentile_threshold(values) * bias
        bits = values < threshold
    else:
        levels = np.clip(np.floor(values + 0.5), 0, 255).astype(np.int64)
        threshold = histogram_split_threshold(levels) * bias
        bits = levels < threshold

    if inverted:
        bits = ~bits
    return bits.astype(np.uint8)
