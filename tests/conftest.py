"""
Pytest configuration and shared fixtures for Color Isolator tests.
"""

from io import BytesIO

import numpy as np
import pytest
from PIL import Image as PILImage

from color_isolator.models.pixel_buffer import PixelBuffer


@pytest.fixture(autouse=True)
def default_tolerance(monkeypatch):
    """Keep a developer's .env / shell from changing the default tolerance."""
    monkeypatch.setenv("SIMILARITY_TOLERANCE", "30")


@pytest.fixture
def make_buffer():
    """Build a PixelBuffer from a flat list of (r, g, b, a) tuples."""
    def _make(pixels, width, height):
        data = np.array(pixels, dtype=np.uint8).reshape(-1)
        return PixelBuffer(width, height, data)
    return _make


@pytest.fixture
def random_buffer():
    def _make(width, height, seed=0):
        rng = np.random.default_rng(seed)
        data = rng.integers(0, 256, size=width * height * 4, dtype=np.uint8)
        return PixelBuffer(width, height, data)
    return _make


@pytest.fixture
def png_bytes():
    """Encode an (H, W, C) uint8 array as PNG bytes with Pillow."""
    def _encode(arr):
        out = BytesIO()
        PILImage.fromarray(np.ascontiguousarray(arr, dtype=np.uint8)).save(out, format="PNG")
        return out.getvalue()
    return _encode


@pytest.fixture
def sample_rgba():
    """4x3 RGBA image: a red stripe on the left, blue elsewhere, one translucent pixel."""
    arr = np.zeros((3, 4, 4), dtype=np.uint8)
    arr[:, :] = (20, 40, 200, 255)
    arr[:, 0] = (220, 30, 30, 255)
    arr[2, 3] = (225, 35, 28, 128)
    return arr
