"""Exception taxonomy for ring code framing.

Encode-time errors are fatal to the call. Frame rejections are raised by
``frame.read_frame`` and turned into a plain ``None`` by
``frame.decode_frame``: during a decode search each one only disqualifies
a single hypothesis.
"""

from __future__ import annotations


class RingCodeError(ValueError):
    """Base class for ring code errors."""


class PayloadTooLarge(RingCodeError):
    """Text does not fit in the payload capacity of the requested ECC level."""

    def __init__(self, size: int, limit: int, ecc_level: int):
        super().__init__(
            f"Text too long: {size} > {limit} bytes (ecc level {ecc_level})"
        )
        self.size = size
        self.limit = limit
        self.ecc_level = ecc_level


class FrameRejected(RingCodeError):
    """A bitstream does not hold a valid frame."""


class InsufficientBits(FrameRejected):
    pass


class HeaderChecksumMismatch(FrameRejected):
    pass



class PayloadLengthInvalid(FrameRejected):
    pass


class RedundancyValidationFailed(FrameRejected):
    pass
