"""
Test configuration and fixtures for palette extractor tests.
"""
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from main import app
from palette_extractor.api.v1 import get_store
from palette_extractor.services.observability import reset_metrics
from palette_extractor.services.palette_store import PaletteStore


def encode_png(array: np.ndarray) -> bytes:
    """Encode an (H, W, 3|4) uint8 array as PNG bytes."""
    buffer = io.BytesIO()
    Image.fromarray(array.astype(np.uint8)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def store_path(tmp_path):
    """Path of a palette store file inside a temporary directory."""
    return tmp_path / "store" / "palettes.json"


@pytest.fixture
def store(store_path):
    """Fresh, loaded palette store."""
    palette_store = PaletteStore(store_path)
    palette_store.load()
    return palette_store


@pytest.fixture
def test_client(store):
    """Test client for the FastAPI app, backed by a temporary store."""
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def red_blue_array():
    """4x4 image: top two rows pure red, bottom two rows pure blue."""
    img = np.zeros((4, 4, 3), dtype=np.uint8)
    img[:2] = (255, 0, 0)
    img[2:] = (0, 0, 255)
    return img


@pytest.fixture
def stripes_array():
    """60x80 image of six vertical stripes of distinct colors."""
    colors = [
        (230, 57, 70), (241, 250, 238), (168, 218, 220),
        (69, 123, 157), (29, 53, 87), (255, 183, 3)
    ]
    img = np.zeros((60, 80, 3), dtype=np.uint8)
    bounds = np.linspace(0, 80, len(colors) + 1).astype(int)
    for color, x0, x1 in zip(colors, bounds[:-1], bounds[1:]):
        img[:, x0:x1] = color
    return img


@pytest.fixture(autouse=True)
def reset_metrics_between_tests():
    """Reset metrics before each test."""
    reset_metrics()


@pytest.fixture
def make_png():
    """Factory turning an (H, W, 3|4) array into PNG bytes."""
    return encode_png
