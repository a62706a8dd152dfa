from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np

from ..errors import DimensionMismatch

CHANNELS = 4  # R, G, B, A


@dataclass(eq=False)
class PixelBuffer:
    """
    Flat RGBA pixel data: row-major, channel-interleaved, uint8.
    No OpenCV / Pillow logic in this file.
    """
    width: int
    height: int
    data: np.ndarray  # Shape (width * height * 4,), dtype uint8.
    path: Path | None = None  # Source of the image, if any.

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise DimensionMismatch(f"Negative dimensions: {self.width}x{self.height}")
        if not isinstance(self.data, np.ndarray) or self.data.dtype != np.uint8:
            raise DimensionMismatch("PixelBuffer data must be a uint8 numpy array")
        if self.data.ndim != 1:
            raise DimensionMismatch(f"PixelBuffer data must be flat, got shape {self.data.shape}")
        expected = self.width * self.height * CHANNELS
        if self.data.size != expected:
            raise DimensionMismatch(
                f"Data length {self.data.size} != {self.width}x{self.height}x{CHANNELS} = {expected}"
            )

    # ─── Constructors ──────────────────────────────────────────────
    @classmethod
    def zeros(cls, width: int, height: int) -> "PixelBuffer":
        return cls(width, height, np.zeros(width * height * CHANNELS, dtype=np.uint8))

    @classmethod
    def from_pixels(cls, pixels: np.ndarray, path: Path | None = None) -> "PixelBuffer":
        """Wrap an (H, W, 4) uint8 array. The array is copied."""
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise DimensionMismatch(f"Expected (H, W, 4) pixels, got {pixels.shape}")
        height, width = pixels.shape[:2]
        data = np.ascontiguousarray(pixels, dtype=np.uint8).reshape(-1).copy()
        return cls(width, height, data, path)

    # ─── Views / helpers ───────────────────────────────────────────
    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def pixels(self) -> np.ndarray:
        """(H, W, 4) view sharing memory with ``data``."""
        return self.data.reshape(self.height, self.width, CHANNELS)

    def same_shape(self, other: "PixelBuffer") -> bool:
        return self.width == other.width and self.height == other.height

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, self.data.copy(), self.path)

    def __len__(self) -> int:
        return self.data.size
