"""
Palette extraction service.

Composes pixel sampling, median-cut quantization and hex encoding into a
single call. Errors from the sampler and quantizer propagate unchanged;
an InsufficientColorsWarning only shortens the palette.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from palette_extractor.config import config
from palette_extractor.services.colors.hex_codec import to_hex
from palette_extractor.services.colors.median_cut import quantize_with_populations
from palette_extractor.services.colors.sampling import PixelBuffer, sample_pixels
from palette_extractor.services.imaging import decode_image
from palette_extractor.services.observability import performance_monitor


@dataclass
class PaletteExtraction:
    """Palette plus the figures behind it."""
    colors: List[str]
    ratios: List[float]
    requested_k: int
    sampled_pixels: int
    width: int
    height: int
    warnings: List[str] = field(default_factory=list)


def extract_palette(buffer: PixelBuffer,
                    k: Optional[int] = None,
                    max_samples: Optional[int] = None) -> PaletteExtraction:
    """
    Extract a palette with per-color population ratios.

    Args:
        buffer: Decoded image
        k: Number of colors wanted (default from config)
        max_samples: Sampler bound (default from config)

    Returns:
        PaletteExtraction with 1..k colors ordered by dominance

    Raises:
        EmptyImageError: If the image has nothing to sample
        InvalidKError: If k < 1
    """
    if k is None:
        k = config.DEFAULT_K

    logger.info(f"Starting palette extraction with k={k} on {buffer.width}x{buffer.height} image")

    with performance_monitor("pixel_sampling", pixel_count=buffer.pixel_count):
        pixels = sample_pixels(buffer, max_samples=max_samples)

    with performance_monitor("median_cut", pixel_count=len(pixels), color_count=k):
        representatives, populations = quantize_with_populations(pixels, k)

    colors = [to_hex(pixel) for pixel in representatives]
    total = sum(populations)
    ratios = [population / total for population in populations]

    notes = []
    if len(colors) < k:
        notes.append(f"Image has only {len(colors)} distinct color(s); palette shortened from {k}")

    logger.info(f"Extracted palette {colors}")
    return PaletteExtraction(
        colors=colors,
        ratios=ratios,
        requested_k=k,
        sampled_pixels=len(pixels),
        width=buffer.width,
        height=buffer.height,
        warnings=notes
    )


def extract(buffer: PixelBuffer,
            k: Optional[int] = None,
            max_samples: Optional[int] = None) -> List[str]:
    """Extract an ordered palette of canonical hex colors from a decoded image."""
    return extract_palette(buffer, k=k, max_samples=max_samples).colors


def extract_from_bytes(image_bytes: bytes,
                       k: Optional[int] = None,
                       max_samples: Optional[int] = None) -> PaletteExtraction:
    """
    Decode an encoded image and extract its palette.

    Raises:
        ImageDecodeError: If the bytes are not a supported image
        EmptyImageError: If the image has nothing to sample
        InvalidKError: If k < 1
    """
    buffer = decode_image(image_bytes)
    return extract_palette(buffer, k=k, max_samples=max_samples)
