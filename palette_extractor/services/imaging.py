"""
Palette Extractor Imaging Utilities
Handles image byte validation, data URIs and decoding into pixel buffers.
"""
import base64
import binascii
import io
from typing import Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from palette_extractor.config import config
from palette_extractor.errors import ImageDecodeError
from palette_extractor.services.colors.sampling import PixelBuffer


def sniff_mime_type(file_bytes: bytes) -> Optional[str]:
    """
    Detect the image type from magic bytes.

    Returns:
        MIME type string, or None if the bytes match no supported format
    """
    if file_bytes.startswith(b'\xff\xd8\xff'):
        return "image/jpeg"
    if file_bytes.startswith(b'\x89PNG\r\n\x1a\n'):
        return "image/png"
    if len(file_bytes) >= 12 and file_bytes[:4] == b'RIFF' and file_bytes[8:12] == b'WEBP':
        return "image/webp"
    return None


def validate_image_bytes(file_bytes: bytes) -> str:
    """
    Validate size and magic bytes of an encoded image.

    Returns:
        Detected MIME type

    Raises:
        ImageDecodeError: For empty, oversized or unsupported data
    """
    if len(file_bytes) < 8:
        raise ImageDecodeError("File too small or corrupt")

    if len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise ImageDecodeError(f"File too large. Maximum size: {config.MAX_FILE_MB}MB")

    mime_type = sniff_mime_type(file_bytes)
    if mime_type not in config.SUPPORTED_MIME_TYPES:
        raise ImageDecodeError(
            f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}",
            unsupported_type=True
        )
    return mime_type


def decode_image(file_bytes: bytes) -> PixelBuffer:
    """
    Decode an encoded image into a pixel buffer.

    Images with transparency are kept as RGBA so the sampler can skip
    transparent pixels; everything else is converted to RGB.

    Raises:
        ImageDecodeError: If the bytes are not a supported, decodable image
    """
    validate_image_bytes(file_bytes)

    try:
        with Image.open(io.BytesIO(file_bytes)) as pil_image:
            has_alpha = pil_image.mode in ("RGBA", "LA", "PA") or "transparency" in pil_image.info
            pil_image = pil_image.convert("RGBA" if has_alpha else "RGB")
            array = np.array(pil_image, dtype=np.uint8)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Failed to decode image: {str(e)}") from e

    return PixelBuffer.from_array(array)


def parse_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """
    Split a ``data:<mime>;base64,<payload>`` URI.

    Returns:
        Tuple of (mime type, decoded bytes)

    Raises:
        ImageDecodeError: If the URI is not a base64 data URI
    """
    if not data_uri.startswith("data:") or "," not in data_uri:
        raise ImageDecodeError("Expected a data URI of the form data:<mime>;base64,<data>")

    header, payload = data_uri[5:].split(",", 1)
    if not header.endswith(";base64"):
        raise ImageDecodeError("Only base64 data URIs are supported")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 image data: {str(e)}") from e
    return header[:-len(";base64")], data


def to_data_uri(file_bytes: bytes, mime_type: Optional[str] = None) -> str:
    """Encode image bytes as a base64 data URI, sniffing the type if not given."""
    mime_type = mime_type or sniff_mime_type(file_bytes) or "application/octet-stream"
    return f"data:{mime_type};base64,{base64.b64encode(file_bytes).decode('ascii')}"
