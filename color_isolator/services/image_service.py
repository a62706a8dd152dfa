from pathlib import Path
from typing import Iterable, Iterator, Union
from io import BytesIO
import base64
import logging

import numpy as np
from PIL import Image as PILImage

from ..models.pixel_buffer import PixelBuffer
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)


class ImageService:
    """I/O helpers.  No classification logic here."""
    def __init__(self):
        self.image_repository = ImageRepository()

    def load(self, path: Union[str, Path]) -> PixelBuffer:
        """Load a single image from disk into a PixelBuffer."""
        return self.image_repository.load(path)

    def decode(self, data: bytes) -> PixelBuffer:
        """Decode uploaded bytes; raises ImageDecodeError when it is not an image."""
        return self.image_repository.decode(data)

    def is_valid_ext(self, path: Union[str, Path]) -> bool:
        return self.image_repository.is_valid_ext(path)

    def stream_gallery(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
        exclude: Union[str, Path, None] = None,
    ) -> Iterator[PixelBuffer]:
        """
        Yield images lazily instead of returning a gigantic list.
        """
        return self.image_repository.iter_dir(folder,
                                              recursive=recursive,
                                              exts=exts,
                                              exclude=exclude)

    def save(self, buffer: PixelBuffer, path: Union[str, Path, None] = None) -> Path:
        """
        Business-level method to save the buffer to a specific path.
        """
        saved = self.image_repository.save(buffer, path)
        logger.info(f"Saved {buffer.width}x{buffer.height} image to {saved}")
        return saved

    def to_pil_image(self, buffer: PixelBuffer) -> PILImage.Image:
        """
        Convert PixelBuffer → RGBA PIL Image object.
        """
        return PILImage.fromarray(np.ascontiguousarray(buffer.pixels))

    def to_base64(self, buffer: PixelBuffer) -> str:
        """PNG data URL for JSON responses. PNG keeps alpha intact."""
        out = BytesIO()
        self.to_pil_image(buffer).save(out, format="PNG")
        encoded = base64.b64encode(out.getvalue()).decode("utf-8")
        return f"data:image/png;base64,{encoded}"
