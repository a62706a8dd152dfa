from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Coordinate:
    x: int  # column, 0 ≤ x < width
    y: int  # row,    0 ≤ y < height

    def in_bounds(self, width: int, height: int) -> bool:
        return 0 <= self.x < width and 0 <= self.y < height

    @classmethod
    def from_display(
        cls,
        x: float,
        y: float,
        display_size: Tuple[float, float],
        buffer_size: Tuple[int, int],
    ) -> "Coordinate":
        """
        Map a click on a scaled rendering back into pixel space.

        Args:
            x, y: click position relative to the rendering's top-left corner.
            display_size: (width, height) the image was shown at.
            buffer_size: (width, height) of the underlying PixelBuffer.

        Returns:
            Coordinate: floored and clamped into the buffer grid.
        """
        disp_w, disp_h = display_size
        buf_w, buf_h = buffer_size
        if disp_w <= 0 or disp_h <= 0:
            raise ValueError(f"Invalid display size: {display_size}")

        px = int(x * buf_w / disp_w)
        py = int(y * buf_h / disp_h)
        px = min(max(px, 0), max(buf_w - 1, 0))
        py = min(max(py, 0), max(buf_h - 1, 0))
        return cls(px, py)
