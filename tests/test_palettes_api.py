"""
API integration tests for the palette endpoints.

Tests the complete HTTP surface:
- Extraction from uploaded images
- Saving, listing, fetching and deleting palettes
- Parameter validation and error mapping
"""
import numpy as np
import pytest

from palette_extractor.errors import StorageIOError


def _upload(data, name="image.png", content_type="image/png"):
    return {"file": (name, data, content_type)}


class TestExtractEndpoint:
    """Test POST /v1/palettes/extract"""

    def test_extract_red_blue(self, test_client, make_png, red_blue_array):
        response = test_client.post("/v1/palettes/extract?k=2", files=_upload(make_png(red_blue_array)))

        assert response.status_code == 200
        data = response.json()
        assert data["colors"] == ["#ff0000", "#0000ff"]
        assert [entry["hex"] for entry in data["palette"]] == data["colors"]
        assert [entry["ratio"] for entry in data["palette"]] == pytest.approx([0.5, 0.5])
        assert data["width"] == 4 and data["height"] == 4
        assert data["k"] == 2
        assert data["sampled_pixels"] == 16
        assert data["sourceImage"].startswith("data:image/png;base64,")
        assert data["warnings"] == []

    def test_default_k(self, test_client, make_png, stripes_array):
        response = test_client.post("/v1/palettes/extract", files=_upload(make_png(stripes_array)))

        assert response.status_code == 200
        data = response.json()
        assert data["k"] == 8
        assert len(data["colors"]) == 6
        assert len(data["warnings"]) == 1

    def test_max_samples_param(self, test_client, make_png, stripes_array):
        response = test_client.post(
            "/v1/palettes/extract?k=6&max_samples=500", files=_upload(make_png(stripes_array))
        )
        assert response.status_code == 200
        assert response.json()["sampled_pixels"] == 500

    @pytest.mark.parametrize("k", [0, -1, 9])
    def test_k_out_of_range(self, test_client, make_png, red_blue_array, k):
        response = test_client.post(f"/v1/palettes/extract?k={k}", files=_upload(make_png(red_blue_array)))
        assert response.status_code == 422

    def test_unsupported_media_type(self, test_client):
        response = test_client.post(
            "/v1/palettes/extract", files=_upload(b"GIF89a" + b"\x00" * 64, "image.gif", "image/gif")
        )
        assert response.status_code == 415

    def test_corrupt_image(self, test_client):
        response = test_client.post(
            "/v1/palettes/extract", files=_upload(b"\x89PNG\r\n\x1a\n" + b"\x00" * 32)
        )
        assert response.status_code == 400

    def test_fully_transparent_image(self, test_client, make_png):
        img = np.zeros((8, 8, 4), dtype=np.uint8)
        response = test_client.post("/v1/palettes/extract", files=_upload(make_png(img)))
        assert response.status_code == 422

    def test_missing_file(self, test_client):
        response = test_client.post("/v1/palettes/extract")
        assert response.status_code == 422


class TestPaletteCrud:
    """Test the saved palette endpoints"""

    def test_list_empty(self, test_client):
        response = test_client.get("/v1/palettes")
        assert response.status_code == 200
        assert response.json() == {"count": 0, "palettes": []}

    def test_save_then_list(self, test_client):
        response = test_client.post("/v1/palettes", json={
            "colors": ["#FF0000", "#0f0"],
            "sourceImage": "data:image/png;base64,AAAA"
        })

        assert response.status_code == 201
        saved = response.json()
        assert saved["colors"] == ["#ff0000", "#00ff00"]
        assert saved["sourceImage"] == "data:image/png;base64,AAAA"
        assert saved["id"]

        listing = test_client.get("/v1/palettes").json()
        assert listing["count"] == 1
        assert listing["palettes"] == [saved]

    def test_newest_first(self, test_client):
        ids = []
        for color in ("#111111", "#222222", "#333333"):
            response = test_client.post("/v1/palettes", json={"colors": [color], "sourceImage": "x"})
            ids.append(response.json()["id"])

        listing = test_client.get("/v1/palettes").json()
        assert [p["id"] for p in listing["palettes"]] == list(reversed(ids))

    def test_get_by_id(self, test_client):
        saved = test_client.post("/v1/palettes", json={"colors": ["#abcdef"], "sourceImage": "x"}).json()

        response = test_client.get(f"/v1/palettes/{saved['id']}")
        assert response.status_code == 200
        assert response.json() == saved

    def test_get_unknown_id(self, test_client):
        assert test_client.get("/v1/palettes/does-not-exist").status_code == 404

    def test_delete(self, test_client):
        saved = test_client.post("/v1/palettes", json={"colors": ["#abcdef"], "sourceImage": "x"}).json()

        response = test_client.delete(f"/v1/palettes/{saved['id']}")
        assert response.status_code == 200
        assert response.json() == {"id": saved["id"], "deleted": True}

        again = test_client.delete(f"/v1/palettes/{saved['id']}")
        assert again.status_code == 200
        assert again.json() == {"id": saved["id"], "deleted": False}
        assert test_client.get("/v1/palettes").json()["count"] == 0

    @pytest.mark.parametrize("body", [
        {"colors": ["#ff0000", "red"], "sourceImage": "x"},
        {"colors": [], "sourceImage": "x"},
        {"colors": ["#000000"] * 9, "sourceImage": "x"},
        {"colors": ["#000000"], "sourceImage": ""},
        {"colors": ["#000000"]},
    ])
    def test_save_invalid(self, test_client, body):
        response = test_client.post("/v1/palettes", json=body)
        assert response.status_code == 422
        assert test_client.get("/v1/palettes").json()["count"] == 0

    def test_save_storage_failure(self, test_client, store, monkeypatch):
        def broken_write(palettes):
            raise StorageIOError("disk full")

        monkeypatch.setattr(store, "_write", broken_write)
        response = test_client.post("/v1/palettes", json={"colors": ["#000000"], "sourceImage": "x"})

        assert response.status_code == 503
        assert store.list() == []

    def test_extract_then_save(self, test_client, make_png, red_blue_array):
        extracted = test_client.post(
            "/v1/palettes/extract?k=2", files=_upload(make_png(red_blue_array))
        ).json()

        response = test_client.post("/v1/palettes", json={
            "colors": extracted["colors"],
            "sourceImage": extracted["sourceImage"]
        })

        assert response.status_code == 201
        assert response.json()["colors"] == ["#ff0000", "#0000ff"]


class TestMetricsEndpoint:
    """Test GET /v1/metrics"""

    def test_metrics_after_extraction(self, test_client, make_png, red_blue_array):
        test_client.post("/v1/palettes/extract?k=2", files=_upload(make_png(red_blue_array)))

        response = test_client.get("/v1/metrics")
        assert response.status_code == 200
        data = response.json()
        assert "pixel_sampling" in data["operations"]
        assert "median_cut" in data["operations"]
        assert data["total_errors"] == 0
