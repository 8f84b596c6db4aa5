"""Tests for color styles."""

import re

import pytest

from ringcode.styles import STYLE_INDEX, STYLES, hex_to_rgb, select_style


class TestStyles:
    def test_twelve_styles(self):
        assert len(STYLES) == 12
        assert len(STYLE_INDEX) == len(STYLES)

    def test_style_keys(self):
        expected = {
            "classic",
            "cyber",
            "solar",
            "noir",
            "seal",
            "ocean",
            "neon",
            "forest",
            "slate",
            "gradient",
            "ice",
            "lava",
        }
        assert set(STYLE_INDEX.keys()) == expected

    def test_colors_are_hex(self):
        pattern = re.compile(r"^#[0-9A-F]{6}$")
        for style in STYLES:
            assert pattern.match(style.background), style.key
            assert pattern.match(style.foreground), style.key

    def test_colors_differ(self):
        for style in STYLES:
            assert style.background != style.foreground

    def test_select_known_style(self):
        style = select_style("cyber")
        assert style.name == "Cyber"
        assert style.background == "#081020"
        assert style.foreground == "#00DCFF"

    def test_select_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown style"):
            select_style("rainbow")


class TestHexToRgb:
    def test_black_white(self):
        assert hex_to_rgb("#000000") == (0, 0, 0)
        assert hex_to_rgb("#FFFFFF") == (255, 255, 255)

    def test_mixed(self):
        assert hex_to_rgb("#00DCFF") == (0, 220, 255)
