import dataclasses

import numpy as np
import pytest

from color_isolator.errors import DimensionMismatch
from color_isolator.models.color import Color
from color_isolator.models.coordinate import Coordinate
from color_isolator.models.pixel_buffer import PixelBuffer


class TestColor:

    def test_alpha_defaults_to_opaque(self):
        assert Color(1, 2, 3).as_tuple() == (1, 2, 3, 255)

    @pytest.mark.parametrize("channels", [(-1, 0, 0), (0, 256, 0), (0, 0, 0, 300)])
    def test_out_of_range_channel_rejected(self, channels):
        with pytest.raises(ValueError):
            Color(*channels)

    @pytest.mark.parametrize("bad", [1.5, "10", True])
    def test_non_integer_channel_rejected(self, bad):
        with pytest.raises(ValueError):
            Color(bad, 0, 0)

    def test_numpy_scalars_are_normalised(self):
        color = Color(np.uint8(7), np.int64(8), np.uint8(9), np.uint8(10))
        assert type(color.red) is int
        assert color == Color(7, 8, 9, 10)
        assert hash(color) == hash(Color(7, 8, 9, 10))

    def test_is_immutable(self):
        color = Color(1, 2, 3)
        with pytest.raises(dataclasses.FrozenInstanceError):
            color.red = 9

    def test_rgb_drops_alpha(self):
        assert Color(1, 2, 3, 4).rgb == (1, 2, 3)

    @pytest.mark.parametrize("color, css", [
        (Color(255, 0, 0), "rgba(255, 0, 0, 1)"),
        (Color(0, 0, 0, 0), "rgba(0, 0, 0, 0)"),
        (Color(10, 20, 30, 51), "rgba(10, 20, 30, 0.2)"),
        (Color(1, 2, 3, 128), "rgba(1, 2, 3, 0.5019607843137255)"),
    ])
    def test_to_css(self, color, css):
        assert color.to_css() == css

    @pytest.mark.parametrize("text, expected", [
        ("10,20,30", Color(10, 20, 30)),
        (" 10, 20, 30, 40 ", Color(10, 20, 30, 40)),
        ("#ff8000", Color(255, 128, 0)),
        ("#FF000080", Color(255, 0, 0, 128)),
    ])
    def test_parse(self, text, expected):
        assert Color.parse(text) == expected

    @pytest.mark.parametrize("text", ["", "red", "1,2", "1,2,3,4,5", "#fff", "#gg0000", "1,2,999"])
    def test_parse_rejects_garbage(self, text):
        with pytest.raises(ValueError):
            Color.parse(text)


class TestCoordinate:

    def test_in_bounds(self):
        assert Coordinate(0, 0).in_bounds(1, 1)
        assert Coordinate(9, 9).in_bounds(10, 10)
        assert not Coordinate(10, 0).in_bounds(10, 10)
        assert not Coordinate(-1, 5).in_bounds(10, 10)

    def test_from_display_scales_down(self):
        coord = Coordinate.from_display(199.9, 99.9, (200, 100), (100, 50))
        assert coord == Coordinate(99, 49)

    def test_from_display_identity(self):
        assert Coordinate.from_display(3, 4, (10, 10), (10, 10)) == Coordinate(3, 4)

    def test_from_display_clamps_into_grid(self):
        assert Coordinate.from_display(-5, 500, (20, 20), (10, 10)) == Coordinate(0, 9)

    def test_from_display_rejects_zero_display(self):
        with pytest.raises(ValueError):
            Coordinate.from_display(1, 1, (0, 10), (10, 10))


class TestPixelBuffer:

    def test_zeros_has_four_channels_per_pixel(self):
        buf = PixelBuffer.zeros(5, 3)
        assert len(buf) == 5 * 3 * 4
        assert buf.pixels.shape == (3, 5, 4)

    def test_length_mismatch_rejected(self):
        with pytest.raises(DimensionMismatch):
            PixelBuffer(2, 2, np.zeros(15, dtype=np.uint8))

    def test_wrong_dtype_rejected(self):
        with pytest.raises(DimensionMismatch):
            PixelBuffer(1, 1, np.zeros(4, dtype=np.int32))

    def test_non_flat_data_rejected(self):
        with pytest.raises(DimensionMismatch):
            PixelBuffer(2, 1, np.zeros((1, 2, 4), dtype=np.uint8))

    def test_zero_sized_buffer_can_be_constructed(self):
        buf = PixelBuffer.zeros(0, 4)
        assert buf.is_empty
        assert len(buf) == 0

    def test_pixels_view_is_row_major(self):
        data = np.arange(2 * 3 * 4, dtype=np.uint8)
        buf = PixelBuffer(3, 2, data)
        # row 1, column 2 → flat index (1 * 3 + 2) * 4 = 20
        assert buf.pixels[1, 2].tolist() == [20, 21, 22, 23]

    def test_from_pixels_copies(self):
        arr = np.full((2, 2, 4), 9, dtype=np.uint8)
        buf = PixelBuffer.from_pixels(arr)
        arr[0, 0, 0] = 0
        assert buf.data[0] == 9
        assert (buf.width, buf.height) == (2, 2)

    def test_from_pixels_rejects_rgb(self):
        with pytest.raises(DimensionMismatch):
            PixelBuffer.from_pixels(np.zeros((2, 2, 3), dtype=np.uint8))

    def test_copy_is_independent(self):
        buf = PixelBuffer.zeros(1, 1)
        dup = buf.copy()
        dup.data[0] = 255
        assert buf.data[0] == 0

    def test_same_shape(self):
        assert PixelBuffer.zeros(3, 2).same_shape(PixelBuffer.zeros(3, 2))
        assert not PixelBuffer.zeros(3, 2).same_shape(PixelBuffer.zeros(2, 3))
