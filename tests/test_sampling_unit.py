"""
Unit tests for pixel sampling.
"""
import numpy as np
import pytest

from palette_extractor.errors import EmptyImageError
from palette_extractor.services.colors.sampling import PixelBuffer, sample_pixels


class TestPixelBuffer:
    """Test pixel buffer construction"""

    def test_from_array_rgb(self):
        buffer = PixelBuffer.from_array(np.zeros((3, 5, 3), dtype=np.uint8))
        assert (buffer.width, buffer.height) == (5, 3)
        assert buffer.pixel_count == 15
        assert not buffer.has_alpha

    def test_from_array_rgba(self):
        buffer = PixelBuffer.from_array(np.zeros((2, 2, 4), dtype=np.uint8))
        assert buffer.has_alpha

    def test_from_array_clips_and_converts(self):
        buffer = PixelBuffer.from_array(np.full((1, 1, 3), 300, dtype=np.int32))
        assert buffer.pixels.dtype == np.uint8
        assert buffer.pixels[0, 0].tolist() == [255, 255, 255]

    def test_from_array_rejects_bad_shapes(self):
        with pytest.raises(ValueError):
            PixelBuffer.from_array(np.zeros((4, 4), dtype=np.uint8))
        with pytest.raises(ValueError):
            PixelBuffer.from_array(np.zeros((4, 4, 2), dtype=np.uint8))


class TestSamplePixels:
    """Test sampling behavior"""

    def test_small_image_returns_all_pixels_in_order(self):
        img = np.arange(2 * 3 * 3, dtype=np.uint8).reshape(2, 3, 3)
        pixels = sample_pixels(PixelBuffer.from_array(img), max_samples=100)

        assert pixels.shape == (6, 3)
        assert pixels.dtype == np.uint8
        np.testing.assert_array_equal(pixels, img.reshape(-1, 3))

    def test_max_samples_limit_respected(self):
        img = np.random.default_rng(0).integers(0, 256, size=(100, 100, 3), dtype=np.uint8)
        pixels = sample_pixels(PixelBuffer.from_array(img), max_samples=1000)
        assert pixels.shape == (1000, 3)

    def test_sampling_is_deterministic(self):
        img = np.random.default_rng(1).integers(0, 256, size=(64, 64, 3), dtype=np.uint8)
        buffer = PixelBuffer.from_array(img)
        np.testing.assert_array_equal(
            sample_pixels(buffer, max_samples=500),
            sample_pixels(buffer, max_samples=500)
        )

    def test_stride_covers_whole_image(self):
        """Each quarter of the image contributes a quarter of the sample."""
        img = np.zeros((100, 100, 3), dtype=np.uint8)
        img[:25] = (255, 0, 0)
        img[25:50] = (0, 255, 0)
        img[50:75] = (0, 0, 255)
        img[75:] = (255, 255, 0)

        pixels = sample_pixels(PixelBuffer.from_array(img), max_samples=400)

        colors, counts = np.unique(pixels, axis=0, return_counts=True)
        assert len(colors) == 4
        assert counts.tolist() == [100, 100, 100, 100]

    def test_first_pixel_always_sampled(self):
        img = np.zeros((50, 50, 3), dtype=np.uint8)
        img[0, 0] = (9, 9, 9)
        pixels = sample_pixels(PixelBuffer.from_array(img), max_samples=7)
        assert pixels[0].tolist() == [9, 9, 9]

    def test_transparent_pixels_skipped(self):
        img = np.zeros((2, 2, 4), dtype=np.uint8)
        img[0, 0] = (255, 0, 0, 255)
        img[0, 1] = (0, 255, 0, 0)
        img[1, 0] = (0, 0, 255, 200)
        img[1, 1] = (9, 9, 9, 10)

        pixels = sample_pixels(PixelBuffer.from_array(img), max_samples=100, alpha_threshold=125)

        assert pixels.tolist() == [[255, 0, 0], [0, 0, 255]]

    def test_zero_size_image_raises(self):
        buffer = PixelBuffer.from_array(np.zeros((0, 10, 3), dtype=np.uint8))
        with pytest.raises(EmptyImageError):
            sample_pixels(buffer, max_samples=10)

    def test_fully_transparent_image_raises(self):
        buffer = PixelBuffer.from_array(np.zeros((4, 4, 4), dtype=np.uint8))
        with pytest.raises(EmptyImageError):
            sample_pixels(buffer, max_samples=10)

    @pytest.mark.parametrize("bad", [0, -5, 2.5, True, "10"])
    def test_invalid_max_samples(self, bad):
        buffer = PixelBuffer.from_array(np.zeros((2, 2, 3), dtype=np.uint8))
        with pytest.raises(ValueError):
            sample_pixels(buffer, max_samples=bad)
