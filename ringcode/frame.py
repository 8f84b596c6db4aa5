"""Frame codec: the single source of truth for the ring code wire format.

A frame fills the whole layout capacity (1344 bits):

    start pattern (32 bits) | header (7 bytes) | codeword | zero padding

Header bytes, all big-endian:

    0    version            3 = parity redundancy, 4 = Reed-Solomon
    1    ecc level          0-3
    2-3  payload length     bytes of text actually carried
    4-5  redundancy length  bytes of redundancy after the padded payload
    6    checksum           sum of bytes 0-5 modulo 256

The codeword is the payload zero-padded to the level's payload capacity,
followed by the redundancy block.  The start pattern is a landmark for
the eye only; the decoder skips it without checking.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from . import redundancy
from .bits import bits_to_bytes, bytes_to_bits, checksum8
from .errors import (
    FrameRejected,
    HeaderChecksumMismatch,
    InsufficientBits,
    PayloadLengthInvalid,
    PayloadTooLarge,
    RedundancyValidationFailed,
)
from .layout import HEADER_BYTES, LAYOUT, Layout
from .redundancy import RedundancyScheme

logger = structlog.get_logger(__name__)

# Redundancy bytes per ECC level
ECC_BYTES: dict[int, int] = {0: 8, 1: 16, 2: 32, 3: 64}

DEFAULT_ECC_LEVEL = 2


@dataclass(frozen=True)
class FrameHeader:
    """Parsed 7-byte frame header."""

    version: int
    ecc_level: int
    payload_length: int
    redundancy_length: int
    checksum: int

    @classmethod
    def build(
        cls,
        version: int,
        ecc_level: int,
        payload_length: int,
        redundancy_length: int,
    ) -> FrameHeader:
        """Create a header with a freshly computed checksum."""
        body = _header_body(version, ecc_level, payload_length, redundancy_length)
        return cls(version, ecc_level, payload_length, redundancy_length, checksum8(body))

    @classmethod
    def from_bytes(cls, data: bytes) -> FrameHeader:
        if len(data) != HEADER_BYTES:
            raise ValueError(f"Header must be {HEADER_BYTES} bytes, got {len(data)}")
        return cls(
            version=data[0],
            ecc_level=data[1],
            payload_length=int.from_bytes(data[2:4], "big"),
            redundancy_length=int.from_bytes(data[4:6], "big"),
            checksum=data[6],
        )

    def to_bytes(self) -> bytes:
        body = _header_body(
            self.version, self.ecc_level, self.payload_length, self.redundancy_length
        )
        return body + bytes([self.checksum])

    @property
    def checksum_ok(self) -> bool:
        return checksum8(self.to_bytes()[:6]) == self.checksum


def _header_body(version: int, ecc_level: int, payload_length: int, redundancy_length: int) -> bytes:
    return (
        bytes([version, ecc_level])
        + payload_length.to_bytes(2, "big")
        + redundancy_length.to_bytes(2, "big")
    )


@dataclass(frozen=True)
class DecodedFrame:
    """A validated frame.

    Attributes:
        header: Parsed header.
        text: Payload decoded as UTF-8 (invalid sequences replaced).
        payload: Raw payload bytes, truncated to the declared length.
        corrected: Byte errors repaired by the redundancy layer.
    """

    header: FrameHeader
    text: str
    payload: bytes
    corrected: int = 0


def ecc_bytes_for(ecc_level: int) -> int:
    """Redundancy byte count for an ECC level.

    Raises:
        ValueError: If ecc_level is not 0-3.
    """
    if ecc_level not in ECC_BYTES:
        valid = ", ".join(str(k) for k in ECC_BYTES)
        raise ValueError(f"Unknown ecc level {ecc_level}. Valid levels: {valid}")
    return ECC_BYTES[ecc_level]


def max_payload_bytes(ecc_level: int, layout: Layout = LAYOUT) -> int:
    """Largest payload, in bytes, that fits at *ecc_level*."""
    ecc = ecc_bytes_for(ecc_level)
    return (layout.data_capacity_bits() - ecc * 8) // 8


def encode_frame(
    text_bytes: bytes,
    ecc_level: int = DEFAULT_ECC_LEVEL,
    scheme: RedundancyScheme = RedundancyScheme.PARITY,
    layout: Layout = LAYOUT,
) -> list[int]:
    """Frame a payload into a full-capacity bitstream.

    Args:
        text_bytes: Payload bytes (typically UTF-8 text).
        ecc_level: ECC level 0-3, selecting 8/16/32/64 redundancy bytes.
        scheme: Redundancy scheme; also written as the header version.
        layout: Ring layout providing the capacity.

    Returns:
        List of exactly ``layout.total_capacity_bits()`` bits.

    Raises:
        PayloadTooLarge: If the payload exceeds the level's capacity.
        ValueError: If the payload is empty or the level is unknown.
    """
    ecc = ecc_bytes_for(ecc_level)
    limit = max_payload_bytes(ecc_level, layout)
    if not text_bytes:
        raise ValueError("Empty payload")
    if len(text_bytes) > limit:
        raise PayloadTooLarge(len(text_bytes), limit, ecc_level)

    padded = bytes(text_bytes).ljust(limit, b"\x00")
    codeword = padded + redundancy.append(scheme, padded, ecc)
    header = FrameHeader.build(scheme.version, ecc_level, len(text_bytes), ecc)

    capacity = layout.total_capacity_bits()
    bits = list(layout.start_pattern) + bytes_to_bits(header.to_bytes()) + bytes_to_bits(codeword)
    if len(bits) < capacity:
        bits.extend([0] * (capacity - len(bits)))

    logger.debug(
        "frame_encoded",
        payload_bytes=len(text_bytes),
        ecc_level=ecc_level,
        ecc_bytes=ecc,
        scheme=scheme.name,
    )
    return bits[:capacity]


def read_frame(bits: Sequence[int], layout: Layout = LAYOUT) -> DecodedFrame:
    """Parse and validate a linear bitstream.

    Args:
        bits: Bitstream in layout order (list or numpy array).
        layout: Ring layout providing the framing sizes.

    Returns:
        DecodedFrame for a valid frame.

    Raises:
        InsufficientBits: The stream is too short for the declared frame.
        HeaderChecksumMismatch: Header checksum does not match bytes 0-5.
        PayloadLengthInvalid: Declared lengths are impossible.
        RedundancyValidationFailed: The redundancy layer rejected the codeword.
    """
    start = len(layout.start_pattern)
    data_start = start + layout.header_bits
    if len(bits) < data_start:
        raise InsufficientBits(f"Need {data_start} bits for a header, got {len(bits)}")

    header_bytes = bits_to_bytes(bits[start:data_start])
    header = FrameHeader.from_bytes(header_bytes)
    if not header.checksum_ok:
        raise HeaderChecksumMismatch(
            f"Header checksum {header.checksum:#04x} != {checksum8(header_bytes[:6]):#04x}"
        )

    scheme = RedundancyScheme.for_version(header.version)

    if header.payload_length <= 0:
        raise PayloadLengthInvalid("Payload length must be positive")

    capacity_bytes = layout.data_capacity_bits() // 8
    if header.payload_length + header.redundancy_length > capacity_bytes:
        raise PayloadLengthInvalid(
            f"Payload {header.payload_length} + redundancy {header.redundancy_length} "
            f"exceeds {capacity_bytes} bytes"
        )

    if scheme is RedundancyScheme.REED_SOLOMON:
        # Reed-Solomon covers the whole padded payload, so the level must be real
        if ECC_BYTES.get(header.ecc_level) != header.redundancy_length:
            raise PayloadLengthInvalid(
                f"Redundancy length {header.redundancy_length} does not match "
                f"ecc level {header.ecc_level}"
            )
        codeword_len = max_payload_bytes(header.ecc_level, layout) + header.redundancy_length
    else:
        codeword_len = header.payload_length + header.redundancy_length

    need = codeword_len * 8
    if data_start + need > len(bits):
        raise InsufficientBits(f"Need {data_start + need} bits, got {len(bits)}")

    codeword = bits_to_bytes(bits[data_start : data_start + need])
    result = redundancy.validate(scheme, codeword, header.redundancy_length)
    if result is None:
        raise RedundancyValidationFailed(f"{scheme.name} validation rejected the codeword")

    payload = result.data[: header.payload_length]
    return DecodedFrame(
        header=header,
        text=payload.decode("utf-8", errors="replace"),
        payload=payload,
        corrected=result.corrected,
    )


def decode_frame(bits: Sequence[int], layout: Layout = LAYOUT) -> str | None:
    """Recover the text of a frame, or None if the bitstream is rejected."""
    frame = try_read_frame(bits, layout)
    return frame.text if frame is not None else None


def try_read_frame(bits: Sequence[int], layout: Layout = LAYOUT) -> DecodedFrame | None:
    """Like read_frame, but returns None instead of raising a rejection."""
    try:
        return read_frame(bits, layout)
    except FrameRejected:
        return None
