"""
Alternate extraction strategies.

An alternate strategy is any callable taking encoded image bytes and
returning hex color strings, for example a vision-model client. Its output
is untrusted: it is accepted whole or rejected whole.
"""
from typing import Callable, List, Optional, Sequence

from loguru import logger

from palette_extractor.config import config
from palette_extractor.errors import InvalidPaletteError, MalformedHexError
from palette_extractor.services.colors.hex_codec import normalize_hex

ExtractionStrategy = Callable[[bytes], Sequence[str]]


def validate_strategy_colors(colors: Sequence[str], max_colors: Optional[int] = None) -> List[str]:
    """
    Validate and canonicalize a strategy's colors.

    Raises:
        MalformedHexError: If any entry is not a hex color; nothing is returned
        InvalidPaletteError: If the result is empty or longer than max_colors
    """
    if max_colors is None:
        max_colors = config.MAX_K

    if isinstance(colors, str) or not isinstance(colors, Sequence):
        raise InvalidPaletteError(f"Strategy must return a list of hex strings, got {type(colors).__name__}")
    if not 1 <= len(colors) <= max_colors:
        raise InvalidPaletteError(f"Strategy returned {len(colors)} colors, expected 1-{max_colors}")

    return [normalize_hex(color) for color in colors]


def run_strategy(strategy: ExtractionStrategy, image_bytes: bytes) -> List[str]:
    """
    Run an alternate strategy and return its validated palette.

    Errors raised by the strategy itself propagate unchanged.
    """
    name = getattr(strategy, "__name__", type(strategy).__name__)
    raw = strategy(image_bytes)

    try:
        palette = validate_strategy_colors(raw)
    except (MalformedHexError, InvalidPaletteError) as e:
        logger.warning(f"Discarding result of strategy {name}: {e}")
        raise

    logger.info(f"Strategy {name} produced palette {palette}")
    return palette
