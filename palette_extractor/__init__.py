"""
Palette Extractor

Extracts representative color palettes from images with median-cut
quantization and keeps saved palettes in a durable, newest-first store.
"""

__version__ = "1.0.0"
