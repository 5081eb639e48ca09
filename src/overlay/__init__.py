"""
Overlay rendering onto a display-sized drawing surface.
"""

from .colors import parse_color, NAMED_COLORS
from .surface import DrawingSurface
from .renderer import OverlayRenderer

__all__ = ["parse_color", "NAMED_COLORS", "DrawingSurface", "OverlayRenderer"]
