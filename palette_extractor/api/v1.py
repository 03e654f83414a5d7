"""
Palette Extractor v1 API Routes
Exposes extraction and the saved-palette store over HTTP.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from palette_extractor.config import config
from palette_extractor.errors import (
    EmptyImageError,
    ImageDecodeError,
    InvalidKError,
    InvalidPaletteError,
    MalformedHexError,
    StorageIOError,
)
from palette_extractor.schemas import (
    ColorEntry,
    DeleteResponse,
    ExtractResponse,
    PaletteListResponse,
    SavedPalette,
    SavePaletteRequest,
)
from palette_extractor.services.colors.extraction import extract_from_bytes
from palette_extractor.services.imaging import to_data_uri
from palette_extractor.services.observability import get_metrics_collector
from palette_extractor.services.palette_store import PaletteStore, get_palette_store
from palette_extractor.utils.ids import generate_request_id
from palette_extractor.utils.logging import get_logger

router = APIRouter(prefix="/v1", tags=["Palettes"])
log = get_logger()


def get_store() -> PaletteStore:
    """Dependency returning the process-wide palette store."""
    return get_palette_store()


@router.post("/palettes/extract",
             response_model=ExtractResponse,
             summary="Extract Palette",
             description="Upload an image and get its dominant colors, most populous first")
async def extract_palette_endpoint(
    file: UploadFile = File(..., description="JPEG, PNG or WEBP image"),
    k: int = Query(config.DEFAULT_K, ge=1, le=config.MAX_K, description="Number of colors"),
    max_samples: int = Query(config.MAX_SAMPLES, ge=1, le=200000, description="Maximum pixels to sample")
) -> ExtractResponse:
    request_id = generate_request_id("extract")
    content = await file.read()
    log.info("Extraction requested", extra={"request_id": request_id, "bytes": len(content), "k": k})

    try:
        result = extract_from_bytes(content, k=k, max_samples=max_samples)
    except ImageDecodeError as e:
        code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE if e.unsupported_type else status.HTTP_400_BAD_REQUEST
        raise HTTPException(status_code=code, detail=str(e))
    except (EmptyImageError, InvalidKError) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    log.info("Extraction complete", extra={"request_id": request_id, "colors": len(result.colors)})
    return ExtractResponse(
        width=result.width,
        height=result.height,
        k=result.requested_k,
        sampled_pixels=result.sampled_pixels,
        colors=result.colors,
        palette=[ColorEntry(hex=c, ratio=r) for c, r in zip(result.colors, result.ratios)],
        source_image=to_data_uri(content),
        warnings=result.warnings
    )


@router.get("/palettes", response_model=PaletteListResponse, summary="List Saved Palettes")
def list_palettes(store: PaletteStore = Depends(get_store)) -> PaletteListResponse:
    palettes = store.list()
    return PaletteListResponse(count=len(palettes), palettes=palettes)


@router.post("/palettes",
             response_model=SavedPalette,
             status_code=status.HTTP_201_CREATED,
             summary="Save Palette")
def save_palette(body: SavePaletteRequest, store: PaletteStore = Depends(get_store)) -> SavedPalette:
    try:
        return store.save(body.colors, body.source_image)
    except (MalformedHexError, InvalidPaletteError) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except StorageIOError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.get("/palettes/{palette_id}", response_model=SavedPalette, summary="Get Saved Palette")
def get_palette(palette_id: str, store: PaletteStore = Depends(get_store)) -> SavedPalette:
    palette = store.get(palette_id)
    if palette is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Palette {palette_id} not found")
    return palette


@router.delete("/palettes/{palette_id}", response_model=DeleteResponse, summary="Delete Saved Palette")
def delete_palette(palette_id: str, store: PaletteStore = Depends(get_store)) -> DeleteResponse:
    try:
        deleted = store.delete(palette_id)
    except StorageIOError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return DeleteResponse(id=palette_id, deleted=deleted)


@router.get("/metrics", summary="Pipeline Metrics")
def get_metrics() -> Dict[str, Any]:
    """Aggregated timing statistics per pipeline stage."""
    return get_metrics_collector().get_all_stats()
