from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Tuple
import numpy as np


@dataclass(frozen=True)
class Color:
    """
    Immutable RGBA value object, every channel an int in [0, 255].
    Alpha is carried for display only; similarity never looks at it.
    """
    red: int
    green: int
    blue: int
    alpha: int = 255

    def __post_init__(self):
        for name in ("red", "green", "blue", "alpha"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if not 0 <= value <= 255:
                raise ValueError(f"{name} must be in [0, 255], got {value}")
            # normalise numpy scalars so equality and hashing stay plain-int
            object.__setattr__(self, name, int(value))

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return self.red, self.green, self.blue

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return self.red, self.green, self.blue, self.alpha

    def to_css(self) -> str:
        """Swatch string, e.g. ``rgba(255, 0, 0, 1)``."""
        if self.alpha in (0, 255):
            alpha_txt = str(self.alpha // 255)
        else:
            # shortest round-trip repr, same digits a browser prints
            alpha_txt = repr(self.alpha / 255)
        return f"rgba({self.red}, {self.green}, {self.blue}, {alpha_txt})"

    @classmethod
    def from_sequence(cls, channels: Sequence[int]) -> "Color":
        if len(channels) not in (3, 4):
            raise ValueError(f"Expected 3 or 4 channels, got {len(channels)}")
        return cls(*(int(c) for c in channels))

    @classmethod
    def parse(cls, text: str) -> "Color":
        """
        Accepts ``"r,g,b"``, ``"r,g,b,a"``, ``"#rrggbb"`` or ``"#rrggbbaa"``.
        """
        text = text.strip()
        if text.startswith("#"):
            hex_part = text[1:]
            if len(hex_part) not in (6, 8):
                raise ValueError(f"Invalid hex color: {text!r}")
            try:
                channels = [int(hex_part[i:i + 2], 16) for i in range(0, len(hex_part), 2)]
            except ValueError:
                raise ValueError(f"Invalid hex color: {text!r}") from None
            return cls.from_sequence(channels)

        try:
            channels = [int(part) for part in text.split(",")]
        except ValueError:
            raise ValueError(f"Invalid color: {text!r}") from None
        return cls.from_sequence(channels)
