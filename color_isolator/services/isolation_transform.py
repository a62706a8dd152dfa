from __future__ import annotations

import logging
import numpy as np

from ..errors import DimensionMismatch, EmptyBuffer
from ..models.color import Color
from ..models.pixel_buffer import CHANNELS, PixelBuffer
from .similarity_classifier import SimilarityClassifier, validate_tolerance

logger = logging.getLogger(__name__)


class IsolationTransform:
    """
    Keeps pixels similar to a reference color, grays out everything else.

    *   Stateless per call: same source + reference → same output.
    *   Never writes into the source; the result is a new buffer (or the
        caller-supplied ``out`` buffer).
    *   Every output pixel depends only on its own source pixel.
    """

    def __init__(self, classifier: SimilarityClassifier | None = None):
        self.classifier = classifier or SimilarityClassifier()

    @property
    def tolerance(self) -> float:
        return self.classifier.tolerance

    @staticmethod
    def grayscale(pixels: np.ndarray) -> np.ndarray:
        """
        Own-average gray: (r, g, b, a) → (avg, avg, avg, a),
        avg = floor((r + g + b) / 3). Not luminance-weighted.
        """
        avg = (pixels[..., :3].astype(np.uint16).sum(axis=-1) // 3).astype(np.uint8)
        gray = np.empty_like(pixels)
        gray[..., 0] = avg
        gray[..., 1] = avg
        gray[..., 2] = avg
        gray[..., 3] = pixels[..., 3]
        return gray

    # ─── Public API ────────────────────────────────────────────────
    def isolate(
        self,
        source: PixelBuffer,
        reference: Color,
        tolerance: float | None = None,
        out: PixelBuffer | None = None,
    ) -> PixelBuffer:
        """
        Single pass over *source*.

        Args:
            source: Non-empty buffer, treated as read-only.
            reference: Color to keep. (0, 0, 0, 0) is a legitimate color.
            tolerance: Overrides the classifier's tolerance for this call.
            out: Optional buffer to write into instead of allocating.

        Returns:
            PixelBuffer: same dimensions as *source*.

        Raises:
            EmptyBuffer: zero-sized source.
            DimensionMismatch: *out* has different dimensions.
            ValueError: negative tolerance, or *out* aliases *source*.
        """
        # validate everything before touching a single pixel
        if source.is_empty:
            raise EmptyBuffer(f"Cannot isolate a {source.width}x{source.height} buffer")
        tolerance = self.tolerance if tolerance is None else validate_tolerance(tolerance)
        if out is not None:
            if not out.same_shape(source):
                raise DimensionMismatch(
                    f"Output is {out.width}x{out.height}, source is {source.width}x{source.height}"
                )
            if np.shares_memory(out.data, source.data):
                raise ValueError("Output buffer must not share memory with the source")
        else:
            out = PixelBuffer.zeros(source.width, source.height)

        src = source.data.reshape(-1, CHANNELS)
        keep = self.classifier.similarity_mask(src, reference, tolerance)
        isolated = np.where(keep[:, None], src, self.grayscale(src))
        out.data[...] = isolated.reshape(-1)

        logger.debug(
            f"Isolated {reference.to_css()} (tol={tolerance}): "
            f"kept {int(keep.sum())}/{keep.size} pixels"
        )
        return out
