"""
Hex color codec.

Converts RGB pixels to canonical lowercase ``#rrggbb`` strings and parses
``#rrggbb`` / ``#rgb`` strings (any case) back into pixels.
"""
import re
from typing import Iterable, List, NamedTuple

from palette_extractor.errors import MalformedHexError

HEX_INPUT_RE = re.compile(r"#([0-9a-fA-F]{6}|[0-9a-fA-F]{3})")
CANONICAL_HEX_RE = re.compile(r"#[0-9a-f]{6}")


class Pixel(NamedTuple):
    """An 8-bit RGB color value."""
    r: int
    g: int
    b: int


def to_hex(pixel) -> str:
    """
    Convert an RGB triple to canonical lowercase hex.

    Args:
        pixel: Pixel, tuple or array-like of three 0-255 integers

    Returns:
        Hex string in format #rrggbb

    Raises:
        ValueError: If the triple is not three channels within 0-255
    """
    channels = [int(c) for c in pixel]
    if len(channels) != 3 or any(c < 0 or c > 255 for c in channels):
        raise ValueError(f"Not an 8-bit RGB triple: {tuple(channels)}")
    r, g, b = channels
    return f"#{r:02x}{g:02x}{b:02x}"


def from_hex(value: str) -> Pixel:
    """
    Parse a hex color string into a Pixel.

    Accepts #rrggbb and the #rgb shorthand (each digit doubled), in any case.

    Raises:
        MalformedHexError: If value does not have either shape
    """
    if not isinstance(value, str):
        raise MalformedHexError(value)
    match = HEX_INPUT_RE.fullmatch(value)
    if match is None:
        raise MalformedHexError(value)

    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(d * 2 for d in digits)
    return Pixel(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def normalize_hex(value: str) -> str:
    """Return the canonical #rrggbb form of any accepted hex string."""
    return to_hex(from_hex(value))


def is_canonical_hex(value: str) -> bool:
    """Check that a string is already lowercase #rrggbb."""
    return isinstance(value, str) and CANONICAL_HEX_RE.fullmatch(value) is not None


def normalize_palette(colors: Iterable[str]) -> List[str]:
    """
    Normalize every color of a palette.

    All-or-nothing: the first malformed entry raises and nothing is returned.
    """
    return [normalize_hex(color) for color in colors]
