"""
Palette Extractor Schemas
Pydantic models for saved palettes and API request/response validation.
"""
from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from palette_extractor.config import config
from palette_extractor.services.colors.hex_codec import normalize_palette
from palette_extractor.utils.ids import extract_timestamp_from_palette_id


def _check_palette(colors: List[str]) -> List[str]:
    if not 1 <= len(colors) <= config.MAX_K:
        raise ValueError(f"palette must have 1-{config.MAX_K} colors, got {len(colors)}")
    return normalize_palette(colors)


class SavedPalette(BaseModel):
    """A palette the user chose to keep, with the image it came from."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Opaque unique identifier")
    colors: List[str] = Field(..., description="Canonical #rrggbb colors, dominant first")
    source_image: str = Field(
        ...,
        alias="sourceImage",
        description="URI of the original image, usually a base64 data URI"
    )

    @field_validator("colors")
    @classmethod
    def validate_colors(cls, v):
        return _check_palette(v)

    @property
    def created_at(self) -> datetime:
        """Creation time recovered from the id."""
        millis = extract_timestamp_from_palette_id(self.id)
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)

    def to_record(self) -> dict:
        """Persisted representation: {id, colors, sourceImage}."""
        return self.model_dump(by_alias=True)


class ColorEntry(BaseModel):
    """Single color in an extracted palette with its population ratio."""
    hex: str = Field(..., pattern=r"^#[0-9a-f]{6}$", description="Canonical hex color")
    ratio: float = Field(..., ge=0.0, le=1.0, description="Share of sampled pixels in this color's box")


class ExtractResponse(BaseModel):
    """Response of the extract endpoint."""
    width: int = Field(..., description="Image width in pixels")
    height: int = Field(..., description="Image height in pixels")
    k: int = Field(..., description="Requested number of colors")
    sampled_pixels: int = Field(..., description="Pixels fed to the quantizer")
    colors: List[str] = Field(..., description="Palette as canonical hex colors")
    palette: List[ColorEntry] = Field(..., description="Palette with population ratios")
    source_image: str = Field(..., alias="sourceImage", description="Data URI of the uploaded image")
    warnings: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class SavePaletteRequest(BaseModel):
    """Body of the save endpoint."""
    colors: List[str] = Field(..., description="Hex colors (#rgb or #rrggbb, any case)")
    source_image: str = Field(..., alias="sourceImage", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class PaletteListResponse(BaseModel):
    """Saved palettes, newest first."""
    count: int
    palettes: List[SavedPalette]


class DeleteResponse(BaseModel):
    """Outcome of a delete; deleting an unknown id is not an error."""
    id: str
    deleted: bool


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("palette-extractor", description="Service name")
    saved_palettes: int = Field(..., description="Number of palettes in the store")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")
