"""RingCode -- concentric-ring visual codes for short text.

Encodes text into a fixed 1344-bit frame laid out over six concentric
rings of annular sectors, and recovers it from a raster capture by
sweeping preprocessing, threshold and rotation hypotheses until a frame
header and redundancy block validate.

The frame layout is fixed, so independent encoder and decoder implementations
interoperate bit for bit.
"""

from .decoder import DecodeResult, DecodeStatus, decode, decode_image, decode_pixels
from .encoder import encode
from .errors import PayloadTooLarge
from .redundancy import RedundancyScheme
from .renderer import render_image, render_png, render_svg

__all__ = [
    "DecodeResult",
    "DecodeStatus",
    "PayloadTooLarge",
    "RedundancyScheme",
    "decode",
    "decode_image",
    "decode_pixels",
    "encode",
    "render_image",
    "render_png",
    "render_svg",
]
