"""
Pixel sampling for palette extraction.

Bounds quantization cost by reducing a decoded image to at most
``max_samples`` pixels, taken at a uniform stride over the whole image.
"""
from dataclasses import dataclass
from typing import Optional

import numpy as np
from loguru import logger

from palette_extractor.config import config
from palette_extractor.errors import EmptyImageError


@dataclass(frozen=True)
class PixelBuffer:
    """
    A decoded image: ``pixels`` has shape (height, width, 3) for RGB or
    (height, width, 4) for RGBA, dtype uint8.
    """
    width: int
    height: int
    pixels: np.ndarray

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Wrap an (H, W, 3|4) array, converting it to uint8."""
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ValueError(f"Expected (height, width, 3|4) array, got shape {array.shape}")
        if array.dtype != np.uint8:
            array = np.clip(array, 0, 255).astype(np.uint8)
        height, width = array.shape[:2]
        return cls(width=width, height=height, pixels=array)

    @property
    def has_alpha(self) -> bool:
        return self.pixels.ndim == 3 and self.pixels.shape[-1] == 4

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


def sample_pixels(buffer: PixelBuffer,
                  max_samples: Optional[int] = None,
                  alpha_threshold: Optional[int] = None) -> np.ndarray:
    """
    Sample pixels from a decoded image for color quantization.

    Args:
        buffer: Decoded image
        max_samples: Upper bound on returned pixels (default from config)
        alpha_threshold: Pixels with alpha below this are skipped when the
            buffer carries an alpha channel (default from config)

    Returns:
        RGB pixels array (N, 3) uint8 in row-major image order

    Raises:
        EmptyImageError: If the image has no pixels, or no opaque ones
        ValueError: If max_samples is not a positive integer
    """
    if max_samples is None:
        max_samples = config.MAX_SAMPLES
    if alpha_threshold is None:
        alpha_threshold = config.ALPHA_THRESHOLD
    if not config.validate_max_samples(max_samples):
        raise ValueError(f"max_samples must be a positive integer, got {max_samples}")

    if buffer.pixel_count == 0:
        raise EmptyImageError(f"Image has no pixels ({buffer.width}x{buffer.height})")

    flat = buffer.pixels.reshape(-1, buffer.pixels.shape[-1])
    if buffer.has_alpha:
        opaque = flat[:, 3] >= alpha_threshold
        rgb = flat[opaque, :3]
        logger.debug(f"Alpha filter: kept {len(rgb)}/{len(flat)} pixels")
        if len(rgb) == 0:
            raise EmptyImageError("Image has no opaque pixels to sample")
    else:
        rgb = flat

    total = len(rgb)
    if total <= max_samples:
        return np.ascontiguousarray(rgb, dtype=np.uint8)

    # Evenly spaced positions across the whole image, first pixel included
    indices = (np.arange(max_samples, dtype=np.int64) * total) // max_samples
    logger.info(f"Downsampled {total} pixels to {max_samples} (stride ~{total / max_samples:.1f})")
    return np.ascontiguousarray(rgb[indices], dtype=np.uint8)
