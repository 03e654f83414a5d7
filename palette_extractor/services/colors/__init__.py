"""
Palette Extractor Colors Module

Provides pixel sampling, median-cut quantization, hex encoding and the
extraction orchestrator that combines them into an ordered palette.
"""

__version__ = "1.0.0"
