from __future__ import annotations
from pathlib import Path
from typing import Iterable, Iterator, List, Union
import logging
import os

import numpy as np
from dotenv import load_dotenv
from PIL import Image as PILImage

from ..models.errors import ImageError
from ..models.instrumentation import Instrumentation, NullInstrumentation
from ..models.pixel_buffer import PixelBuffer
from ..models.result import Result
from ..repositories.image_repository import ImageRepository

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageService:
    """
    Lifecycle and I/O for PixelBuffers.  No pixel algorithms here.

    Every buffer created or loaded through one service shares that
    service's Instrumentation, so `pixel_accesses` totals their traffic.
    """
    def __init__(self, instrumentation: Instrumentation | None = None):
        if instrumentation is None:
            enabled = os.getenv("GRAYMAP_INSTRUMENTATION", "1").strip().lower() not in ("0", "false", "no")
            instrumentation = Instrumentation() if enabled else NullInstrumentation()
        self.instrumentation = instrumentation
        self.image_repository = ImageRepository()

    @property
    def pixel_accesses(self) -> int:
        return self.instrumentation.count

    def create_image(self, width: int, height: int, maxval: int,
                     path: Union[str, Path] = None) -> PixelBuffer:
        return self.image_repository.create_image(width, height, maxval, path, self.instrumentation)

    def from_array(self, pixels: np.ndarray, maxval: int = 255) -> PixelBuffer:
        """
        Build a buffer from a (H, W) array.  Fractional levels round half
        up; levels outside [0, maxval] saturate.
        """
        pixels = np.asarray(pixels)
        height, width = pixels.shape
        img = self.create_image(width, height, maxval)
        if not np.issubdtype(pixels.dtype, np.integer):
            pixels = np.floor(pixels + 0.5)
        img.grid[:] = np.clip(pixels, 0, maxval).astype(np.uint8)
        return img

    def release(self, image: PixelBuffer) -> None:
        self.image_repository.release(image)

    def load(self, path: str | Path) -> PixelBuffer:
        """Load a single P5 graymap from disk."""
        return self.image_repository.load(path, self.instrumentation)

    def save(self, image: PixelBuffer, path: str | Path | None = None) -> Path:
        return self.image_repository.save(image, path)

    def try_load(self, path: str | Path) -> Result[PixelBuffer]:
        """
        Like load, but report failure as a Result carrying the cause and
        the preserved errno instead of raising.
        """
        try:
            return Result(value=self.load(path))
        except ImageError as err:
            logger.debug("Load failed: %s", err)
            return Result(error=err)

    def try_save(self, image: PixelBuffer, path: str | Path | None = None) -> Result[Path]:
        try:
            return Result(value=self.save(image, path))
        except ImageError as err:
            logger.debug("Save failed: %s", err)
            return Result(error=err)

    def stream_gallery(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[PixelBuffer]:
        """
        Yield graymaps lazily instead of returning a gigantic list.
        """
        return self.image_repository.iter_dir(folder,
                                              recursive=recursive,
                                              exts=exts,
                                              instrumentation=self.instrumentation)

    def save_gallery(self, gallery: Iterable[PixelBuffer]) -> List[Path]:
        return [self.save(img) for img in gallery]

    def get_image_dimensions(self, img: PixelBuffer):
        return img.shape

    def get_stats(self, img: PixelBuffer):
        return img.stats()

    # ─── Pillow interop ────────────────────────────────────────────
    def to_pil_image(self, img: PixelBuffer) -> PILImage.Image:
        """
        Convert PixelBuffer → mode "L" PIL Image.
        Levels are copied as-is (not rescaled from maxval to 255).
        """
        return PILImage.fromarray(np.ascontiguousarray(img.grid))

    def from_pil_image(self, pil_img: PILImage.Image, maxval: int = 255) -> PixelBuffer:
        """
        Convert any PIL Image → PixelBuffer via Pillow's grayscale
        conversion.  Levels above maxval saturate.
        """
        gray = np.asarray(pil_img.convert("L"), dtype=np.uint8)
        return self.from_array(gray, maxval)
