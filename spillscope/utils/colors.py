"""
Color parsing helpers shared by the raster and chart back-ends.

Colors are configured as CSS strings (``#RRGGBB``, ``#RRGGBBAA`` or
``rgba(r, g, b, a)``) and converted to channel tuples at draw time.
"""

import re
from typing import Tuple

RGBA = Tuple[int, int, int, float]

_RGBA_PATTERN = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([0-9]*\.?[0-9]+)\s*)?\)$"
)


def parse_color(value: str) -> RGBA:
    """
    Parse a CSS color string into ``(r, g, b, alpha)``.

    Args:
        value: ``#RGB``, ``#RRGGBB``, ``#RRGGBBAA`` or ``rgb()/rgba()`` string

    Returns:
        Tuple of 0-255 channels and an alpha in [0, 1]

    Raises:
        ValueError: If the string is not a recognised color
    """
    text = str(value).strip()
    if text.startswith("#"):
        digits = text[1:]
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) not in (6, 8) or not re.fullmatch(r"[0-9a-fA-F]+", digits):
            raise ValueError(f"Invalid hex color: {value!r}")
        r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
        alpha = int(digits[6:8], 16) / 255.0 if len(digits) == 8 else 1.0
        return r, g, b, alpha

    match = _RGBA_PATTERN.match(text)
    if not match:
        raise ValueError(f"Invalid color: {value!r}")
    r, g, b = (int(match.group(i)) for i in (1, 2, 3))
    if max(r, g, b) > 255:
        raise ValueError(f"Color channel out of range: {value!r}")
    alpha = float(match.group(4)) if match.group(4) is not None else 1.0
    if not 0.0 <= alpha <= 1.0:
        raise ValueError(f"Alpha out of range: {value!r}")
    return r, g, b, alpha


def to_bgr(value: str) -> Tuple[Tuple[int, int, int], float]:
    """Convert a CSS color to an OpenCV BGR triple plus its alpha."""
    r, g, b, alpha = parse_color(value)
    return (b, g, r), alpha


def to_hex(value: str) -> str:
    """Return the opaque ``#RRGGBB`` form of a CSS color."""
    r, g, b, _ = parse_color(value)
    return f"#{r:02X}{g:02X}{b:02X}"


def color_opacity(value: str) -> float:
    """Return the alpha component of a CSS color."""
    return parse_color(value)[3]


def is_valid_color(value: str) -> bool:
    try:
        parse_color(value)
    except ValueError:
        return False
    return True
