from __future__ import annotations

import re

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"
_HEX_COLOR_RE = re.compile(HEX_COLOR_PATTERN)

DEFAULT_COLOR = "#000000"
HIGHLIGHTER_COLOR = "#ffeb3b"


def is_hex_color(value: str | None) -> bool:
    return bool(value) and _HEX_COLOR_RE.match(value) is not None


def normalize_hex_color(value: str) -> str:
    if not is_hex_color(value):
        raise ValueError(f"Color must be #rrggbb, got {value!r}")
    return value.lower()


def hex_to_rgb(value: str) -> tuple[float, float, float]:
    """Convert ``#rrggbb`` into channels in [0, 1]. Callers validate first."""
    r = int(value[1:3], 16) / 255
    g = int(value[3:5], 16) / 255
    b = int(value[5:7], 16) / 255
    return (r, g, b)
