"""Tests for raster ingestion."""
import pytest
import numpy as np
from PIL import Image
from pbnvec.raster_ingest import Bitmap, ingest, ingest_from_array
from pbnvec.types import Color, PreconditionError, VectorizationError


class TestIngestFromArray:
    """Test building bitmaps from arrays."""

    def test_rgb_array(self):
        pixels = np.zeros((2, 3, 3), dtype=np.uint8)
        pixels[1, 2] = [10, 20, 30]
        bitmap = ingest_from_array(pixels)
        assert bitmap.width == 3
        assert bitmap.height == 2
        assert bitmap.color_at(2, 1) == Color(10, 20, 30)
        assert bitmap.color_at(0, 0) == Color(0, 0, 0)

    def test_rgba_composited_on_white(self):
        pixels = np.zeros((1, 2, 4), dtype=np.uint8)
        pixels[0, 1] = [0, 0, 0, 255]
        bitmap = ingest_from_array(pixels)
        assert bitmap.color_at(0, 0) == Color(255, 255, 255)
        assert bitmap.color_at(1, 0) == Color(0, 0, 0)

    def test_grayscale_and_float(self):
        bitmap = ingest_from_array(np.full((2, 2), 1.0))
        assert bitmap.color_at(1, 1) == Color(255, 255, 255)

    def test_rejects_bad_channels(self):
        with pytest.raises(VectorizationError):
            ingest_from_array(np.zeros((2, 2, 2), dtype=np.uint8))

    def test_out_of_range_pixel(self):
        bitmap = ingest_from_array(np.zeros((2, 2, 3), dtype=np.uint8))
        with pytest.raises(PreconditionError):
            bitmap.color_at(2, 0)
        with pytest.raises(PreconditionError):
            bitmap.color_at(0, -1)

    def test_pixels_are_read_only(self):
        bitmap = Bitmap(np.zeros((2, 2, 3), dtype=np.uint8))
        with pytest.raises(ValueError):
            bitmap.pixels[0, 0, 0] = 1


class TestIngest:
    """Test loading image files."""

    def test_png_round_trip(self, tmp_path):
        pixels = np.zeros((4, 5, 3), dtype=np.uint8)
        pixels[:, 3:] = [0, 0, 255]
        path = tmp_path / "split.png"
        Image.fromarray(pixels).save(path)

        bitmap = ingest(path)
        assert (bitmap.width, bitmap.height) == (5, 4)
        assert bitmap.color_at(4, 0) == Color(0, 0, 255)
        assert bitmap.color_at(0, 3) == Color(0, 0, 0)
        assert bitmap.unique_colors() == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ingest(tmp_path / "missing.png")

    def test_directory(self, tmp_path):
        with pytest.raises(VectorizationError):
            ingest(tmp_path)

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "notes.png"
        path.write_text("not an image")
        with pytest.raises(VectorizationError):
            ingest(path)
