"""Image decoding and derived metadata."""

from .analyzer import ImageAnalyzer, format_hex_color

__all__ = ["ImageAnalyzer", "format_hex_color"]
