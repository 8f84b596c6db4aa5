"""Ring layout shared by the encoder and the decoder.

The layout is a fixed table of sector counts per ring plus the geometry
fractions that place each ring on a square canvas.  Both directions use
the same radius formula, so a rendered code can be sampled back without
any calibration marks beyond the canvas center.

Ring bands are laid out from the center outwards:

    pitch = (size / 2 - QUIET_ZONE) / (ring_count + 1)
    band  = [pitch * (i + RING_INNER_FRAC), pitch * (i + RING_OUTER_FRAC)]
"""

from __future__ import annotations

from dataclasses import dataclass

SECTORS = (128, 192, 256, 256, 256, 256)
START_PATTERN = (1, 0) * 16
HEADER_BYTES = 7
HEADER_BITS = HEADER_BYTES * 8
QUIET_ZONE = 48
RING_INNER_FRAC = 0.50
RING_OUTER_FRAC = 0.95
ARC_FILL_FRAC = 0.92


@dataclass(frozen=True)
class Layout:
    """Immutable ring geometry and framing sizes.

    Attributes:
        sectors: Sector count of each ring, innermost first.
        start_pattern: Framing landmark bits written before the header.
        header_bits: Header length in bits.
        quiet_zone: Blank margin in pixels between the canvas edge and
            the outermost ring pitch.
        inner_frac: Inner edge of a ring band as a fraction of the pitch.
        outer_frac: Outer edge of a ring band as a fraction of the pitch.
        arc_fill: Fraction of a sector's angular width painted for a 1 bit.
    """

    sectors: tuple[int, ...] = SECTORS
    start_pattern: tuple[int, ...] = START_PATTERN
    header_bits: int = HEADER_BITS
    quiet_zone: int = QUIET_ZONE
    inner_frac: float = RING_INNER_FRAC
    outer_frac: float = RING_OUTER_FRAC
    arc_fill: float = ARC_FILL_FRAC

    @property
    def ring_count(self) -> int:
        return len(self.sectors)

    def total_capacity_bits(self) -> int:
        """Total number of sectors across all rings."""
        return sum(self.sectors)

    def data_capacity_bits(self) -> int:
        """Bits left for the codeword after the start pattern and header."""
        return self.total_capacity_bits() - len(self.start_pattern) - self.header_bits

    def ring_pitch(self, size: float) -> float:
        """Radial distance between consecutive rings on a canvas of *size*.

        Raises:
            ValueError: If the canvas leaves no room inside the quiet zone.
        """
        usable = size / 2.0 - self.quiet_zone
        if usable <= 0:
            raise ValueError(
                f"Canvas size {size} too small: must exceed twice the quiet zone "
                f"({2 * self.quiet_zone} px)"
            )
        return usable / (self.ring_count + 1)

    def ring_band(self, ring_index: int, size: float) -> tuple[float, float]:
        """Inner and outer radius of a ring's painted band."""
        if not 0 <= ring_index < self.ring_count:
            raise ValueError(f"ring_index must be 0-{self.ring_count - 1}, got {ring_index}")
        pitch = self.ring_pitch(size)
        return pitch * (ring_index + self.inner_frac), pitch * (ring_index + self.outer_frac)

    def mid_radius(self, ring_index: int, size: float) -> float:
        """Radius of the mid-line of a ring, used for painting and sampling."""
        inner, outer = self.ring_band(ring_index, size)
        return (inner + outer) / 2.0

    def ring_mid_radii(self, size: float) -> list[float]:
        return [self.mid_radius(i, size) for i in range(self.ring_count)]

    def ring_offsets(self) -> list[int]:
        """Index of the first bit of each ring in the linear bitstream."""
        offsets = []
        start = 0
        for count in self.sectors:
            offsets.append(start)
            start += count
        return offsets


LAYOUT = Layout()


def total_capacity_bits() -> int:
    return LAYOUT.total_capacity_bits()


def data_capacity_bits() -> int:
    return LAYOUT.data_capacity_bits()


def mid_radius(ring_index: int, size: float) -> float:
    return LAYOUT.mid_radius(ring_index, size)
