"""Text encoder for ring codes.

Converts text into the full-capacity bitstream consumed by the renderer.

Encoding algorithm:
1. Convert text to UTF-8 bytes
2. Zero-pad to the payload capacity of the chosen ECC level
3. Append the redundancy block (parity or Reed-Solomon)
4. Prepend the start pattern and the 7-byte header
5. Zero-pad to the layout capacity (1344 bits)

Bits are laid out ring by ring, innermost first; within a ring bit ``s``
lands in angular sector ``s``.
"""

from __future__ import annotations

import structlog

from .frame import DEFAULT_ECC_LEVEL, ECC_BYTES, encode_frame, max_payload_bytes
from .layout import LAYOUT, Layout
from .redundancy import RedundancyScheme

logger = structlog.get_logger(__name__)


def encode(
    text: str | bytes,
    ecc_level: int = DEFAULT_ECC_LEVEL,
    scheme: RedundancyScheme = RedundancyScheme.PARITY,
    layout: Layout = LAYOUT,
) -> list[int]:
    """Encode text into a ring code bitstream.

    Args:
        text: Text to encode, or raw payload bytes.
        ecc_level: ECC level 0-3 (8/16/32/64 redundancy bytes).
        scheme: Redundancy scheme written into the frame.
        layout: Ring layout.

    Returns:
        List of ``layout.total_capacity_bits()`` bits.

    Raises:
        PayloadTooLarge: If the text exceeds the level's capacity.
        ValueError: If the text is empty or the ECC level is unknown.
    """
    payload = text.encode("utf-8") if isinstance(text, str) else bytes(text)

    logger.debug(
        "encoding_text",
        payload_bytes=len(payload),
        ecc_level=ecc_level,
        scheme=scheme.name,
    )

    return encode_frame(payload, ecc_level, scheme, layout)


def capacity_table(layout: Layout = LAYOUT) -> dict[int, int]:
    """Maximum payload bytes for every ECC level."""
    return {level: max_payload_bytes(level, layout) for level in ECC_BYTES}
