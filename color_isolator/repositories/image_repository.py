from pathlib import Path
from typing import Union, Iterable, List, Iterator
import logging
import os

import numpy as np
import cv2
from PIL import Image as PILImage
from dotenv import load_dotenv

from ..errors import ImageDecodeError
from ..models.pixel_buffer import PixelBuffer

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_VALID_EXTS = ".png,.jpg,.jpeg,.bmp,.webp,.tif,.tiff"


class ImageRepository:
    """
    Handles file I/O for PixelBuffer entities.
    Everything leaving this class is 8-bit RGBA, row-major, interleaved.
    """
    def __init__(self):
        exts = os.getenv("VALID_IMAGE_EXTENSIONS", DEFAULT_VALID_EXTS)
        self.VALID_EXTS = {ext.strip().lower() for ext in exts.split(",") if ext.strip()}
        self.JPEG_QUALITY = int(os.getenv("JPEG_QUALITY", "95"))

    @staticmethod
    def _to_rgba(arr: np.ndarray) -> np.ndarray:
        """
        Normalise whatever OpenCV decoded (gray, BGR, BGRA, 8/16-bit)
        into (H, W, 4) uint8 RGBA.
        """
        if arr.dtype == np.uint16:
            arr = (arr >> 8).astype(np.uint8)
        elif arr.dtype != np.uint8:
            raise ImageDecodeError(f"Unsupported pixel depth: {arr.dtype}")

        if arr.ndim == 2:
            return cv2.cvtColor(arr, cv2.COLOR_GRAY2RGBA)
        channels = arr.shape[2]
        if channels == 1:
            return cv2.cvtColor(arr[:, :, 0], cv2.COLOR_GRAY2RGBA)
        if channels == 3:
            return cv2.cvtColor(arr, cv2.COLOR_BGR2RGBA)
        if channels == 4:
            return cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
        raise ImageDecodeError(f"Unsupported channel count: {channels}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> PixelBuffer:
        path = Path(path)
        arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise FileNotFoundError(f"Image not found or unreadable: {path}")

        return PixelBuffer.from_pixels(cls._to_rgba(arr), path=path)

    @classmethod
    def decode(cls, data: bytes) -> PixelBuffer:
        """Decode an in-memory upload. Raises ImageDecodeError on junk."""
        if not data:
            raise ImageDecodeError("Empty image data")

        raw = np.frombuffer(data, dtype=np.uint8)
        try:
            arr = cv2.imdecode(raw, cv2.IMREAD_UNCHANGED)
        except cv2.error as err:
            raise ImageDecodeError(f"Could not decode image: {err}") from err
        if arr is None:
            raise ImageDecodeError("Data is not a supported image format")

        return PixelBuffer.from_pixels(cls._to_rgba(arr))

    def save(self, buffer: PixelBuffer, path: Union[str, Path, None] = None) -> Path:
        path = Path(path) if path is not None else buffer.path
        if path is None:
            raise ValueError("No destination path given and buffer has no path")

        pil_image = PILImage.fromarray(np.ascontiguousarray(buffer.pixels))
        if path.suffix.lower() in (".jpg", ".jpeg"):
            # JPEG has no alpha channel
            pil_image.convert("RGB").save(path, quality=self.JPEG_QUALITY)
        else:
            pil_image.save(path)
        return path

    def is_valid_ext(self, path: Union[str, Path]) -> bool:
        return Path(path).suffix.lower() in self.VALID_EXTS

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
        exclude: Union[str, Path, None] = None,
    ) -> Iterator[PixelBuffer]:
        """
        Yield PixelBuffer objects one at a time.  Nothing accumulates in memory.
        Files under *exclude* (e.g. an output folder nested in *folder*) are skipped.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"
        excluded = Path(exclude).resolve() if exclude is not None else None

        for p in sorted(folder.glob(pattern)):
            if p.suffix.lower() not in allowed:
                logger.debug(f"Skipping due to extension: {p}")
                continue
            if not p.is_file():
                logger.debug(f"Skipping because not file: {p}")
                continue
            if excluded is not None and excluded in p.resolve().parents:
                logger.debug(f"Skipping output file: {p}")
                continue
            try:
                yield self.load(p)
            except (FileNotFoundError, ImageDecodeError) as err:
                logger.warning(f"Skipping {p.name}: {err}")

    def load_dir(
        self, folder: Union[str, Path], *, recursive=False, exts=None
    ) -> List[PixelBuffer]:
        return list(self.iter_dir(folder, recursive=recursive, exts=exts))
