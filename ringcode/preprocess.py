"""Grayscale preprocessing variants for the decoder.

A capture is turned into a fixed, ordered list of 8-bit grayscale
surfaces.  The search visits them in this order, so results are
reproducible for identical pixels:

    0  luminance (0.299 R + 0.587 G + 0.114 B)
    1  histogram-equalized luminance
    2  min-max normalized luminance
    3  gamma 0.7 of the equalized surface
    4  gamma 1.3 of the equalized surface
"""

from __future__ import annotations

import numpy as np

GAMMAS = (0.7, 1.3)

VARIANT_NAMES = ("gray", "equalized", "normalized", "gamma_0.7", "gamma_1.3")


def _round_to_u8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


def to_grayscale(pixels: np.ndarray) -> np.ndarray:
    """Luminance of an RGB or RGBA image; alpha is ignored.

    Args:
        pixels: uint8 array of shape (H, W, 3) or (H, W, 4), or an
            already-gray (H, W) array.

    Returns:
        uint8 array of shape (H, W).

    Raises:
        ValueError: If the array shape is not an image.
    """
    arr = np.asarray(pixels)
    if arr.ndim == 2:
        return arr.astype(np.uint8, copy=True)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) pixel array, got {arr.shape}")
    rgb = arr[:, :, :3].astype(np.float64)
    gray = 0.299 * rgb[:, :, 0] + 0.587 * rgb[:, :, 1] + 0.114 * rgb[:, :, 2]
    return np.clip(np.rint(gray), 0, 255).astype(np.uint8)


def equalize(gray: np.ndarray) -> np.ndarray:
    """Global histogram equalization.

    A uniform image has nothing to spread and is returned unchanged.
    """
    hist = np.bincount(gray.ravel(), minlength=256)
    cdf = np.cumsum(hist)
    total = gray.size
    nonzero = np.flatnonzero(cdf)
    if len(nonzero) == 0:
        return gray.copy()
    cdf_min = cdf[nonzero[0]]
    if total == cdf_min:
        return gray.copy()
    lut = _round_to_u8((cdf - cdf_min) / (total - cdf_min) * 255.0)
    return lut[gray]


def normalize(gray: np.ndarray) -> np.ndarray:
    """Stretch intensities to the full 0-255 range."""
    lo = int(gray.min())
    hi = int(gray.max())
    if hi == lo:
        return gray.copy()
    return _round_to_u8((gray.astype(np.float64) - lo) / (hi - lo) * 255.0)


def adjust_gamma(gray: np.ndarray, gamma: float) -> np.ndarray:
    """Apply ``out = (in / 255) ** (1 / gamma) * 255`` through a lookup table."""
    inv = 1.0 / max(gamma, 1e-6)
    lut = _round_to_u8(np.power(np.arange(256) / 255.0, inv) * 255.0)
    return lut[gray]


def preprocess_variants(pixels: np.ndarray) -> list[np.ndarray]:
    """Build the ordered grayscale variants of a capture."""
    gray = to_grayscale(pixels)
    equalized = equalize(gray)
    return [
        gray,
        equalized,
        normalize(gray),
        *(adjust_gamma(equalized, g) for g in GAMMAS),
    ]
