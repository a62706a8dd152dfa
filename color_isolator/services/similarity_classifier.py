# services/similarity_classifier.py
import math
import os
import logging

import numpy as np
from dotenv import load_dotenv

from ..models.color import Color

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 30.0


def validate_tolerance(tolerance: float) -> float:
    tolerance = float(tolerance)
    if math.isnan(tolerance) or tolerance < 0:
        raise ValueError(f"Tolerance must be a non-negative number, got {tolerance}")
    return tolerance


class SimilarityClassifier:
    """
    Flat Euclidean distance in raw RGB space, alpha ignored.

    Two colors match iff distance < tolerance (strict), so a tolerance of 0
    never matches anything, not even the color itself.
    """

    def __init__(self, tolerance: float = None):
        if tolerance is None:
            tolerance = os.getenv("SIMILARITY_TOLERANCE", str(DEFAULT_TOLERANCE))
        self.tolerance = validate_tolerance(tolerance)
        logger.debug(f"SimilarityClassifier initialized with tolerance={self.tolerance}")

    # ─── Scalar API ────────────────────────────────────────────────
    @staticmethod
    def distance(a: Color, b: Color) -> float:
        dr = a.red - b.red
        dg = a.green - b.green
        db = a.blue - b.blue
        return math.sqrt(dr * dr + dg * dg + db * db)

    def is_similar(self, a: Color, b: Color, tolerance: float = None) -> bool:
        """
        Args:
            a, b (Color): Colors to compare, in either order.
            tolerance (float): Overrides the configured tolerance for this call.

        Returns:
            True if the RGB distance is strictly below the tolerance.
        """
        if tolerance is None:
            tolerance = self.tolerance
        return self.distance(a, b) < tolerance

    # ─── Vectorised API ────────────────────────────────────────────
    def similarity_mask(
        self,
        pixels: np.ndarray,
        reference: Color,
        tolerance: float = None,
    ) -> np.ndarray:
        """
        Classify every pixel of a (..., 4) uint8 array against *reference*.
        Same arithmetic as ``is_similar`` (exact integer squares, float64
        square root, strict comparison) so both paths always agree.
        """
        if tolerance is None:
            tolerance = self.tolerance
        ref = np.array(reference.rgb, dtype=np.int32)
        diff = pixels[..., :3].astype(np.int32) - ref
        dist_sq = np.einsum("...c,...c->...", diff, diff)
        return np.sqrt(dist_sq.astype(np.float64)) < tolerance
