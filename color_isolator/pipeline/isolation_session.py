from __future__ import annotations

from typing import Optional, Tuple, Union
import logging

from ..errors import EmptyBuffer
from ..models.color import Color
from ..models.coordinate import Coordinate
from ..models.pixel_buffer import PixelBuffer
from ..services.color_sampler import ColorSampler
from ..services.isolation_transform import IsolationTransform
from .isolate_color import isolate_color

logger = logging.getLogger(__name__)


class IsolationSession:
    """
    Caller-owned state for one user: decode → sample → isolate → display.

    Loading a new image invalidates the reference color. Nothing re-runs
    implicitly; the caller asks for a render when it wants one.
    """

    def __init__(
        self,
        session_id: str,
        sampler: ColorSampler | None = None,
        transform: IsolationTransform | None = None,
    ):
        self.session_id = session_id
        self.source: Optional[PixelBuffer] = None
        self.reference: Optional[Color] = None
        self.sampler = sampler or ColorSampler()
        self.transform = transform or IsolationTransform()

    def load(self, source: PixelBuffer) -> None:
        self.source = source
        self.reference = None
        logger.info(f"Session {self.session_id}: loaded {source.width}x{source.height} image")

    def select(self, coord: Union[Coordinate, Tuple[int, int]]) -> Color:
        """Sample the pixel at *coord* and make it the reference color."""
        if self.source is None:
            raise EmptyBuffer("No image loaded")
        self.reference = self.sampler.sample(self.source, coord)
        logger.info(f"Session {self.session_id}: selected {self.reference.to_css()}")
        return self.reference

    def render(self, tolerance: float | None = None) -> Optional[PixelBuffer]:
        """Isolated rendering, or None while no color is selected."""
        if self.source is None:
            raise EmptyBuffer("No image loaded")
        return isolate_color(self.source, self.reference,
                             tolerance=tolerance, transform=self.transform)

    def clear(self) -> None:
        self.source = None
        self.reference = None
