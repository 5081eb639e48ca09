"""
Detection filtering: thresholds proposals and attaches class labels/colors.
"""

from .filter import DetectionFilter, FilterConfig

__all__ = ["DetectionFilter", "FilterConfig"]
