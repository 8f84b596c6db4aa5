#!/usr/bin/env python3
"""Basic usage example for ringcode.

Demonstrates encoding text into a ring code and decoding it back.

Usage:
    python examples/basic_usage.py
"""

import os
import sys

import numpy as np

# Add parent directory to path for direct script execution
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ringcode.decoder import decode_image, decode_pixels
from ringcode.encoder import capacity_table, encode
from ringcode.redundancy import RedundancyScheme
from ringcode.renderer import render_image, render_png, render_svg
from ringcode.search import SearchConfig
from ringcode.styles import STYLES


def example_basic_roundtrip():
    """Encode text and decode it back from a PNG."""
    print("=" * 60)
    print("Example 1: Basic Encode/Decode Roundtrip")
    print("=" * 60)

    text = "Hello from the rings!"
    print(f"  Input text:  {text}")
    print(f"  UTF-8 bytes: {len(text.encode('utf-8'))}")

    bits = encode(text, ecc_level=2)
    print(f"  Bits:        {len(bits)} ({sum(bits)} painted)")

    png_bytes = render_png(bits, size=1600, style="classic")
    print(f"  PNG size:    {len(png_bytes)} bytes")

    result = decode_image(png_bytes)
    print(f"  Decoded:     {result.text}")
    print(f"  Status:      {result.status.value}")
    print(f"  Hypotheses:  {result.hypotheses_tried}")
    print(f"  Match:       {result.text == text}")
    print()


def example_capacity():
    """Show how much text fits at each ECC level."""
    print("=" * 60)
    print("Example 2: Capacity per ECC Level")
    print("=" * 60)

    for level, limit in capacity_table().items():
        print(f"  Level {level}: up to {limit:3d} bytes")
    print()


def example_styles():
    """Render the same code in every style."""
    print("=" * 60)
    print("Example 3: Color Styles")
    print("=" * 60)

    bits = encode("styled")
    for style in STYLES:
        svg = render_svg(bits, size=256, style=style.key)
        print(f"  Style: {style.key:10s}  SVG length: {len(svg):6d} chars")
    print()


def example_rotated_capture():
    """Decode a rotated, dark-styled capture with Reed-Solomon redundancy."""
    print("=" * 60)
    print("Example 4: Rotated Capture, Reed-Solomon Frame")
    print("=" * 60)

    text = "rotation does not matter"
    bits = encode(text, ecc_level=3, scheme=RedundancyScheme.REED_SOLOMON)
    img = render_image(bits, size=1600, style="noir")
    rotated = img.rotate(-22.5, fillcolor=(0x20, 0x20, 0x20))

    result = decode_pixels(np.array(rotated), config=SearchConfig(workers=4))
    print(f"  Decoded:     {result.text}")
    if result.hypothesis is not None:
        print(f"  Hypothesis:  {result.hypothesis.as_dict()}")
    print(f"  Corrected:   {result.corrected_errors} bytes")
    print()


if __name__ == "__main__":
    example_basic_roundtrip()
    example_capacity()
    example_styles()
    example_rotated_capture()
    print("All examples completed successfully.")
