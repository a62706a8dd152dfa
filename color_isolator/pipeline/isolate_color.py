# pipeline/isolate_color.py
from __future__ import annotations

from pathlib import Path
from typing import Collection, Iterable, List, Optional
import os
import logging

from dotenv import load_dotenv
from tqdm import tqdm

from ..errors import OutOfBounds
from ..models.color import Color
from ..models.coordinate import Coordinate
from ..models.pixel_buffer import PixelBuffer
from ..services.color_sampler import ColorSampler
from ..services.image_service import ImageService
from ..services.isolation_transform import IsolationTransform

# ------------------------------------------------------------------
# env‑vars
load_dotenv()
ISOLATED_SUFFIX = os.getenv("ISOLATED_SUFFIX", "_isolated")
OUTPUT_EXT      = ".png"                                   # keeps alpha

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
def isolate_color(
    source: PixelBuffer,
    reference: Optional[Color],
    *,
    tolerance: float | None = None,
    transform: IsolationTransform | None = None,
) -> Optional[PixelBuffer]:
    """
    One explicit isolation pass.

    Returns None when no reference color has been selected yet; there is
    nothing to render in that state.
    """
    if reference is None:
        return None
    transform = transform or IsolationTransform()
    return transform.isolate(source, reference, tolerance)


def output_path_for(
    source: PixelBuffer,
    output_dir: str | Path,
    index: int,
    taken: Collection[Path] = (),
) -> Path:
    """
    ``<stem>_isolated.png``; a repeated stem (a/photo.png, b/photo.png,
    x.png + x.jpg) gets a counter: ``photo_1_isolated.png``.
    """
    stem = source.path.stem if source.path else f"image_{index:03d}"
    path = Path(output_dir) / f"{stem}{ISOLATED_SUFFIX}{OUTPUT_EXT}"
    n = 1
    while path in taken:
        path = Path(output_dir) / f"{stem}_{n}{ISOLATED_SUFFIX}{OUTPUT_EXT}"
        n += 1
    return path


def isolate_gallery(
    gallery: Iterable[PixelBuffer],
    output_dir: str | Path,
    *,
    reference: Color | None = None,
    at: Coordinate | None = None,
    tolerance: float | None = None,
    transform: IsolationTransform | None = None,
    sampler: ColorSampler | None = None,
    image_service: ImageService | None = None,
) -> List[Path]:
    """
    For every PixelBuffer in *gallery*:
        • pick the reference (fixed *reference*, or sampled at *at*)
        • run the isolation pass
        • save ``<stem>_isolated.png`` into *output_dir*
    Images where *at* falls outside the frame are skipped.
    Returns the written paths.
    """
    if (reference is None) == (at is None):
        raise ValueError("Pass exactly one of reference= or at=")

    transform = transform or IsolationTransform()
    sampler = sampler or ColorSampler()
    image_service = image_service or ImageService()

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    taken = set()
    for i, source in enumerate(tqdm(gallery, desc="isolate", unit="img", ncols=70)):
        if at is not None:
            try:
                ref = sampler.sample(source, at)
            except OutOfBounds as err:
                logger.warning(f"Skipping {source.path or i}: {err}")
                continue
        else:
            ref = reference

        isolated = transform.isolate(source, ref, tolerance)
        target = output_path_for(source, output_dir, i, taken=taken)
        taken.add(target)
        written.append(image_service.save(isolated, target))

    logger.info(f"Isolated {len(written)} images into {output_dir}")
    return written
