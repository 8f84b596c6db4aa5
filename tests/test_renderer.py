"""Tests for ring code SVG/PNG rendering."""

import io
import math
import re

import pytest
from PIL import Image
from structlog.testing import capture_logs

from ringcode.encoder import encode
from ringcode.layout import LAYOUT
from ringcode.renderer import (
    DEFAULT_SIZE,
    compute_sector_arcs,
    render_image,
    render_png,
    render_svg,
)
from ringcode.styles import STYLES, hex_to_rgb, select_style


def _single_bit(index: int) -> list[int]:
    bits = [0] * LAYOUT.total_capacity_bits()
    bits[index] = 1
    return bits


class TestSectorArcs:
    def test_one_arc_per_set_bit(self):
        bits = encode("hello, ring")
        arcs = compute_sector_arcs(bits, 800)
        assert len(arcs) == sum(bits)

    def test_first_arc_is_start_pattern(self):
        arcs = compute_sector_arcs(encode("hi"), 800)
        step = 2 * math.pi / 128
        inset = step * (1 - LAYOUT.arc_fill) / 2
        first = arcs[0]
        assert first["ring_index"] == 0
        assert first["sector_index"] == 0
        assert first["start_angle"] == pytest.approx(inset)
        assert first["end_angle"] == pytest.approx(step - inset)
        assert (first["inner_radius"], first["outer_radius"]) == LAYOUT.ring_band(0, 800)

    def test_bit_position_maps_to_ring_and_sector(self):
        arcs = compute_sector_arcs(_single_bit(128 + 192 + 5), 800)
        assert len(arcs) == 1
        assert arcs[0]["ring_index"] == 2
        assert arcs[0]["sector_index"] == 5

    def test_arcs_stay_inside_their_sector(self):
        for arc in compute_sector_arcs(encode("sector bounds", 0), 800):
            step = 2 * math.pi / LAYOUT.sectors[arc["ring_index"]]
            assert arc["start_angle"] > arc["sector_index"] * step
            assert arc["end_angle"] < (arc["sector_index"] + 1) * step
            assert arc["end_angle"] - arc["start_angle"] < math.pi

    def test_short_bitstream_is_allowed(self):
        arcs = compute_sector_arcs([1, 1, 0, 1], 800)
        assert [a["sector_index"] for a in arcs] == [0, 1, 3]

    def test_too_many_bits_raises(self):
        with pytest.raises(ValueError, match="Too many bits"):
            compute_sector_arcs([0] * 1345, 800)

    def test_tiny_canvas_raises(self):
        with pytest.raises(ValueError, match="too small"):
            compute_sector_arcs(encode("hi"), 96)


class TestRenderSVG:
    def test_render_svg_produces_valid_svg(self):
        svg = render_svg(encode("hello"), 512, "classic")
        assert svg.startswith("<svg")
        assert svg.endswith("</svg>")
        assert "xmlns" in svg

    def test_render_svg_respects_size(self):
        svg = render_svg(encode("hello"), 256, "classic")
        assert 'width="256"' in svg
        assert 'height="256"' in svg
        assert 'viewBox="0 0 256 256"' in svg

    def test_render_svg_default_size_1600(self):
        svg = render_svg(encode("hello"))
        assert 'width="1600"' in svg

    def test_one_path_per_set_bit(self):
        bits = encode("hello, ring", 1)
        svg = render_svg(bits, 800, "classic")
        assert svg.count("<path") == sum(bits)

    def test_background_rect(self):
        svg = render_svg(encode("hello"), 800, "ocean")
        assert '<rect width="800" height="800" fill="#148CC8"/>' in svg

    def test_only_style_colors(self):
        for style in STYLES:
            svg = render_svg(encode("colors"), 400, style.key)
            fills = set(re.findall(r'fill="([^"]+)"', svg))
            assert fills == {style.background, style.foreground}

    def test_paths_use_small_arcs(self):
        svg = render_svg(encode("hello"), 800, "classic")
        for path in re.findall(r'd="([^"]+)"', svg):
            flags = re.findall(r"A[\d.]+,[\d.]+ 0 (\d) (\d)", path)
            assert flags == [("0", "1"), ("0", "0")]

    def test_unknown_style_raises(self):
        with pytest.raises(ValueError, match="Unknown style"):
            render_svg(encode("hello"), 800, "vaporwave")


class TestRenderImage:
    def test_image_size_and_mode(self):
        img = render_image(encode("hello"), 300, "classic")
        assert img.size == (300, 300)
        assert img.mode == "RGB"

    def test_only_two_colors_for_every_style(self):
        bits = encode("two colors only")
        for style in STYLES:
            img = render_image(bits, 256, style.key)
            colors = {color for _count, color in img.getcolors(maxcolors=256)}
            assert colors <= {hex_to_rgb(style.background), hex_to_rgb(style.foreground)}

    def test_set_bit_paints_its_sector(self):
        # Ring 1 sector 0: mid radius ~185 px on a 1600 px canvas
        img = render_image(_single_bit(128), 1600, "classic")
        assert img.getpixel((985, 803)) == (0, 0, 0)
        assert img.getpixel((985, 809)) == (255, 255, 255)

    def test_clear_bitstream_is_background(self):
        img = render_image([0] * 1344, 256, "lava")
        assert img.getcolors() == [(256 * 256, hex_to_rgb(select_style("lava").background))]


class TestRenderPNG:
    def test_render_png_produces_png(self):
        png_bytes = render_png(encode("hello"), 256)
        assert png_bytes[:4] == b"\x89PNG"

    def test_render_png_respects_size(self):
        png_bytes = render_png(encode("hello"), 320, "neon")
        assert Image.open(io.BytesIO(png_bytes)).size == (320, 320)

    def test_render_png_matches_image(self):
        bits = encode("hello")
        png = Image.open(io.BytesIO(render_png(bits, 256, "seal"))).convert("RGB")
        assert list(png.getdata()) == list(render_image(bits, 256, "seal").getdata())


class TestDecodableSize:
    def test_small_image_logs_warning(self):
        with capture_logs() as logs:
            render_image(encode("hi"), 800, "classic")
        assert any(e["event"] == "render_size_below_decodable" for e in logs)

    def test_default_size_renders_without_warning(self):
        with capture_logs() as logs:
            img = render_image(encode("hi"))
        assert img.size == (DEFAULT_SIZE, DEFAULT_SIZE)
        assert not any(e["event"] == "render_size_below_decodable" for e in logs)
