"""
Palette Extractor Configuration
Manages environment variables and defaults for extraction and storage.
"""
import numbers
import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Configuration class for the palette extractor services."""

    # Quantization defaults
    DEFAULT_K: int = int(os.environ.get("PALETTE_DEFAULT_K", "8"))
    MAX_K: int = int(os.environ.get("PALETTE_MAX_K", "8"))

    # Sampling
    MAX_SAMPLES: int = int(os.environ.get("PALETTE_MAX_SAMPLES", "20000"))
    ALPHA_THRESHOLD: int = int(os.environ.get("PALETTE_ALPHA_THRESHOLD", "125"))

    # Palette store
    STORE_PATH: str = os.environ.get("PALETTE_STORE_PATH", "data/palettes.json")
    STORE_KEY: str = "color-palette-extractor-saved-palettes"

    # Uploads
    MAX_FILE_MB: int = int(os.environ.get("PALETTE_MAX_FILE_MB", "10"))
    SUPPORTED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp"]

    # Logging
    LOG_LEVEL: str = os.environ.get("PALETTE_LOG_LEVEL", "INFO")

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get("PALETTE_ALLOWED_ORIGINS", "http://localhost:3000")

    @classmethod
    def validate_k(cls, k: int) -> bool:
        """Validate requested palette size for the HTTP surface."""
        return 1 <= k <= cls.MAX_K

    @classmethod
    def validate_max_samples(cls, max_samples: int) -> bool:
        """Validate sampler bound: a positive integer, bools excluded."""
        if isinstance(max_samples, bool) or not isinstance(max_samples, numbers.Integral):
            return False
        return max_samples >= 1

    @classmethod
    def allowed_origins(cls) -> List[str]:
        return [origin.strip() for origin in cls.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Global config instance
config = Config()
