# services/color_sampler.py
from typing import Tuple, Union

from ..errors import EmptyBuffer, OutOfBounds
from ..models.color import Color
from ..models.coordinate import Coordinate
from ..models.pixel_buffer import CHANNELS, PixelBuffer


class ColorSampler:
    """Reads the color under a pixel coordinate. Never mutates the buffer."""

    @staticmethod
    def _as_coordinate(coord: Union[Coordinate, Tuple[int, int]]) -> Coordinate:
        if isinstance(coord, Coordinate):
            return coord
        x, y = coord
        return Coordinate(int(x), int(y))

    def sample(
        self,
        buffer: PixelBuffer,
        coord: Union[Coordinate, Tuple[int, int]],
    ) -> Color:
        """
        Args:
            buffer (PixelBuffer): A fully decoded, non-empty buffer.
            coord (Coordinate | tuple): Pixel-space (x, y).

        Returns:
            Color: The four channels stored at ``(y * width + x) * 4``.

        Raises:
            EmptyBuffer: width or height is 0.
            OutOfBounds: coord lies outside [0, width) × [0, height).
        """
        if buffer.is_empty:
            raise EmptyBuffer(f"Cannot sample a {buffer.width}x{buffer.height} buffer")

        coord = self._as_coordinate(coord)
        if not coord.in_bounds(buffer.width, buffer.height):
            raise OutOfBounds(
                f"({coord.x}, {coord.y}) outside {buffer.width}x{buffer.height} buffer"
            )

        i = (coord.y * buffer.width + coord.x) * CHANNELS
        r, g, b, a = buffer.data[i:i + CHANNELS]
        return Color(int(r), int(g), int(b), int(a))
