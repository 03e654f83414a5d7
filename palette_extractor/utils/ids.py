"""
Palette Extractor ID Utilities
Generate unique, time-ordered identifiers for saved palettes and requests.
"""
import time
import uuid


def generate_palette_id() -> str:
    """
    Generate a unique palette identifier.

    The millisecond timestamp prefix keeps ids roughly ordered by creation;
    the random suffix distinguishes ids created in the same millisecond.

    Returns:
        Id string like "1729300000000-3f9a1c2b"
    """
    millis = time.time_ns() // 1_000_000
    return f"{millis}-{uuid.uuid4().hex[:8]}"


def generate_request_id(prefix: str = "req") -> str:
    """Generate a short id for correlating log lines of one request."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def extract_timestamp_from_palette_id(palette_id: str) -> int:
    """
    Extract the millisecond timestamp from a palette id.

    Args:
        palette_id: Palette id string

    Returns:
        Milliseconds since the epoch, or 0 if the id has no timestamp prefix
    """
    head = palette_id.split("-", 1)[0]
    return int(head) if head.isdigit() else 0
