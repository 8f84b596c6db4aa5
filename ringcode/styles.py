"""Color styles for rendered ring codes.

A style only changes the two colors a code is painted with. It has no
effect on the bit layout; the decoder recovers polarity on its own by
trying both inverted and non-inverted thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Style:
    """A named color pair.

    Attributes:
        key: Lookup key used by the API (e.g. "cyber").
        background: Canvas background as a #RRGGBB string.
        foreground: Fill color of 1-bit sectors as a #RRGGBB string.
        name: Human-readable display name.
    """

    key: str
    background: str
    foreground: str
    name: str


STYLES: list[Style] = [
    Style(key="classic", background="#FFFFFF", foreground="#000000", name="Classic"),
    Style(key="cyber", background="#081020", foreground="#00DCFF", name="Cyber"),
    Style(key="solar", background="#FFEBB4", foreground="#B47800", name="Solar"),
    Style(key="noir", background="#202020", foreground="#BE1E1E", name="Noir"),
    Style(key="seal", background="#F2E6CD", foreground="#961414", name="Seal"),
    Style(key="ocean", background="#148CC8", foreground="#321450", name="Ocean"),
    Style(key="neon", background="#0F1914", foreground="#00FFB4", name="Neon"),
    Style(key="forest", background="#DCD2A0", foreground="#5A4614", name="Forest"),
    Style(key="slate", background="#D2D2D2", foreground="#1E1E23", name="Slate"),
    Style(key="gradient", background="#F0F5FF", foreground="#000000", name="Gradient"),
    Style(key="ice", background="#DCF5FF", foreground="#005AB4", name="Ice"),
    Style(key="lava", background="#280000", foreground="#FF5A0A", name="Lava"),
]

STYLE_INDEX: dict[str, Style] = {s.key: s for s in STYLES}

DEFAULT_STYLE = "cyber"


def select_style(style_name: str) -> Style:
    """Select a style by key.

    Raises:
        ValueError: If style_name is not recognized.
    """
    if style_name not in STYLE_INDEX:
        valid = ", ".join(STYLE_INDEX.keys())
        raise ValueError(f"Unknown style '{style_name}'. Valid styles: {valid}")
    return STYLE_INDEX[style_name]


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Convert a hex color string to (r, g, b) tuple."""
    h = hex_color.lstrip("#")
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))
