"""
Color tags used by the class catalog and overlay style.
"""

from __future__ import annotations

from typing import Dict, Tuple

RGB = Tuple[int, int, int]

NAMED_COLORS: Dict[str, RGB] = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "lime": (0, 255, 0),
    "green": (0, 128, 0),
    "blue": (0, 0, 255),
    "yellow": (255, 255, 0),
    "cyan": (0, 255, 255),
    "aqua": (0, 255, 255),
    "magenta": (255, 0, 255),
    "orange": (255, 165, 0),
    "purple": (128, 0, 128),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
}


def parse_color(value: str) -> RGB:
    """
    Parse a color tag: a name from NAMED_COLORS, "#RGB" or "#RRGGBB".

    Raises:
        ValueError: If the tag is not recognized.
    """
    tag = value.strip().lower()
    if tag in NAMED_COLORS:
        return NAMED_COLORS[tag]
    if tag.startswith("#"):
        digits = tag[1:]
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        if len(digits) == 6:
            try:
                return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
            except ValueError:
                pass
    raise ValueError(f"Unrecognized color: {value!r}")
