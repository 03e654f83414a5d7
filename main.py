from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from palette_extractor import __version__
from palette_extractor.api.v1 import get_store, router as v1_router
from palette_extractor.config import config
from palette_extractor.schemas import HealthResponse
from palette_extractor.services.palette_store import PaletteStore
from palette_extractor.utils.logging import get_logger

log = get_logger()

app = FastAPI(
    title="Color Palette Extractor",
    description="Extract dominant color palettes from images and keep the ones you like",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"]
)

app.include_router(v1_router)


@app.get("/healthz", response_model=HealthResponse)
def health_check(store: PaletteStore = Depends(get_store)):
    """Health check endpoint"""
    return HealthResponse(version=__version__, saved_palettes=len(store.list()))


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Color Palette Extractor API",
        "version": __version__,
        "docs": "/docs"
    }


log.info("Palette extractor API ready", extra={"store_path": config.STORE_PATH})
