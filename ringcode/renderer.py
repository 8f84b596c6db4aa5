"""SVG and raster rendering for ring codes.

Both renderers draw from the same sector geometry, so a PNG and an SVG
of the same bitstream hold the same arcs at the same radii:

- Background: the style's background color over the whole canvas
- 1 bits: an annular wedge in the style's foreground color, spanning
  ARC_FILL_FRAC of the sector, centered in it, between the ring band's
  inner and outer radii
- 0 bits: nothing (background shows through)

Angles grow clockwise from the positive x axis (canvas y points down),
matching the decoder's sampler.
"""

from __future__ import annotations

import io
import math
from collections.abc import Sequence

import structlog
from PIL import Image, ImageDraw

from .layout import LAYOUT, Layout
from .styles import DEFAULT_STYLE, select_style

logger = structlog.get_logger(__name__)

DEFAULT_SIZE = 1600

# Below this size the first ring's sectors are too narrow for the decoder's
# ±2 px sampler, and neighboring sectors bleed into each other
MIN_DECODABLE_SIZE = 1600

# Maximum arc length in pixels between polygon vertices on raster arcs
ARC_STEP_PX = 1.0


def compute_sector_arcs(
    bits: Sequence[int],
    size: int,
    layout: Layout = LAYOUT,
) -> list[dict]:
    """Compute the painted wedge of every 1 bit.

    Args:
        bits: Bitstream in layout order. May be shorter than the capacity.
        size: Canvas size in pixels (square).
        layout: Ring layout.

    Returns:
        List of arc dicts with keys:
        - ring_index, sector_index: position of the bit
        - start_angle, end_angle: radians, clockwise from +x
        - inner_radius, outer_radius: band radii in pixels

    Raises:
        ValueError: If there are more bits than sectors or the canvas is
            too small for the quiet zone.
    """
    capacity = layout.total_capacity_bits()
    if len(bits) > capacity:
        raise ValueError(f"Too many bits: {len(bits)} (capacity {capacity})")

    arcs: list[dict] = []
    offsets = layout.ring_offsets()
    for ring_idx, sectors in enumerate(layout.sectors):
        inner, outer = layout.ring_band(ring_idx, size)
        step = 2 * math.pi / sectors
        inset = step * (1 - layout.arc_fill) / 2
        for s in range(sectors):
            bit_idx = offsets[ring_idx] + s
            if bit_idx >= len(bits):
                return arcs
            if bits[bit_idx] == 1:
                arcs.append(
                    {
                        "ring_index": ring_idx,
                        "sector_index": s,
                        "start_angle": s * step + inset,
                        "end_angle": (s + 1) * step - inset,
                        "inner_radius": inner,
                        "outer_radius": outer,
                    }
                )
    return arcs


def _arc_path(cx: float, cy: float, arc: dict) -> str:
    """SVG path for one wedge: outer arc, radial line, inner arc, close."""
    a0 = arc["start_angle"]
    a1 = arc["end_angle"]
    r_out = arc["outer_radius"]
    r_in = arc["inner_radius"]

    x0o = cx + r_out * math.cos(a0)
    y0o = cy + r_out * math.sin(a0)
    x1o = cx + r_out * math.cos(a1)
    y1o = cy + r_out * math.sin(a1)
    x1i = cx + r_in * math.cos(a1)
    y1i = cy + r_in * math.sin(a1)
    x0i = cx + r_in * math.cos(a0)
    y0i = cy + r_in * math.sin(a0)

    large_arc = 1 if (a1 - a0) > math.pi else 0

    return (
        f"M{x0o:.2f},{y0o:.2f} "
        f"A{r_out:.2f},{r_out:.2f} 0 {large_arc} 1 {x1o:.2f},{y1o:.2f} "
        f"L{x1i:.2f},{y1i:.2f} "
        f"A{r_in:.2f},{r_in:.2f} 0 {large_arc} 0 {x0i:.2f},{y0i:.2f} Z"
    )


def render_svg(
    bits: Sequence[int],
    size: int = DEFAULT_SIZE,
    style: str = DEFAULT_STYLE,
    layout: Layout = LAYOUT,
) -> str:
    """Render a bitstream as an SVG string.

    Args:
        bits: Bitstream from ``encode``.
        size: Output size in pixels (width = height).
        style: Style key (see ``styles.STYLES``).
        layout: Ring layout.

    Returns:
        Complete SVG document as a string.
    """
    colors = select_style(style)
    arcs = compute_sector_arcs(bits, size, layout)
    cx = cy = size / 2.0

    svg_parts: list[str] = [
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'viewBox="0 0 {size} {size}" '
        f'width="{size}" height="{size}">',
        f'  <rect width="{size}" height="{size}" fill="{colors.background}"/>',
    ]
    for arc in arcs:
        svg_parts.append(f'  <path d="{_arc_path(cx, cy, arc)}" fill="{colors.foreground}"/>')
    svg_parts.append("</svg>")

    logger.debug("svg_rendered", style=style, arc_count=len(arcs), size=size)
    return "\n".join(svg_parts)


def _arc_points(
    cx: float, cy: float, radius: float, a0: float, a1: float, steps: int
) -> list[tuple[float, float]]:
    return [
        (
            cx + radius * math.cos(a0 + (a1 - a0) * i / steps),
            cy + radius * math.sin(a0 + (a1 - a0) * i / steps),
        )
        for i in range(steps + 1)
    ]


def render_image(
    bits: Sequence[int],
    size: int = DEFAULT_SIZE,
    style: str = DEFAULT_STYLE,
    layout: Layout = LAYOUT,
) -> Image.Image:
    """Render a bitstream as an RGB Pillow image.

    Wedges are drawn as polygons whose arcs are subdivided finely enough
    that no vertex is more than ARC_STEP_PX apart.  No antialiasing is
    applied, so the image holds exactly the style's two colors.

    Images smaller than MIN_DECODABLE_SIZE render fine but do not decode
    reliably; a warning is logged for them.
    """
    colors = select_style(style)
    if size < MIN_DECODABLE_SIZE:
        logger.warning("render_size_below_decodable", size=size, minimum=MIN_DECODABLE_SIZE)
    arcs = compute_sector_arcs(bits, size, layout)
    cx = cy = size / 2.0

    img = Image.new("RGB", (size, size), colors.background)
    draw = ImageDraw.Draw(img)
    for arc in arcs:
        a0 = arc["start_angle"]
        a1 = arc["end_angle"]
        steps = max(2, math.ceil((a1 - a0) * arc["outer_radius"] / ARC_STEP_PX))
        outer = _arc_points(cx, cy, arc["outer_radius"], a0, a1, steps)
        inner = _arc_points(cx, cy, arc["inner_radius"], a1, a0, steps)
        draw.polygon(outer + inner, fill=colors.foreground)

    logger.debug("image_rendered", style=style, arc_count=len(arcs), size=size)
    return img


def render_png(
    bits: Sequence[int],
    size: int = DEFAULT_SIZE,
    style: str = DEFAULT_STYLE,
    layout: Layout = LAYOUT,
) -> bytes:
    """Render a bitstream as PNG bytes."""
    img = render_image(bits, size, style, layout)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    png_bytes = buf.getvalue()

    logger.debug("png_rendered", style=style, size=size, bytes=len(png_bytes))
    return png_bytes
