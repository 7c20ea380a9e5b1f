from __future__ import annotations
import logging

import numpy as np

from ..models.errors import require
from ..models.pixel_buffer import PixelBuffer
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)


class GeometryService:
    """
    Transforms that move pixels around.

    rotate / mirror / crop return a *new* PixelBuffer and leave the source
    untouched; paste / blend modify the destination in place.
    Allocation failures surface as AllocationError.

    Pixel traffic is reported to the buffers' instrumentation as one
    access per sample read plus one per sample written.
    """

    def __init__(self):
        self.image_repository = ImageRepository()

    def _new_like(self, img: PixelBuffer, width: int, height: int) -> PixelBuffer:
        return self.image_repository.create_image(width, height, img.maxval,
                                                  instrumentation=img.instrumentation)

    def rotate(self, img: PixelBuffer) -> PixelBuffer:
        """
        90° anti-clockwise rotation.  Source (x, y) lands on
        (y, width-1-x), so the result is height x width.
        """
        out = self._new_like(img, img.height, img.width)
        out.grid[:] = np.rot90(img.grid)
        img.instrumentation.increment(2 * img.size)
        logger.debug("rotate %dx%d -> %dx%d", img.width, img.height, out.width, out.height)
        return out

    def mirror(self, img: PixelBuffer) -> PixelBuffer:
        """Left-right flip.  Same width and height as the source."""
        out = self._new_like(img, img.width, img.height)
        out.grid[:] = img.grid[:, ::-1]
        img.instrumentation.increment(2 * img.size)
        logger.debug("mirror %dx%d", img.width, img.height)
        return out

    def crop(self, img: PixelBuffer, x: int, y: int, w: int, h: int) -> PixelBuffer:
        """
        Copy the w x h rectangle whose top-left corner is (x, y).
        The rectangle must lie inside img.
        """
        require(img.valid_rect(x, y, w, h),
                f"crop rectangle ({x}, {y}, {w}, {h}) outside {img.width}x{img.height} image")
        out = self._new_like(img, w, h)
        out.grid[:] = img.grid[y:y + h, x:x + w]
        img.instrumentation.increment(2 * out.size)
        logger.debug("crop (%d, %d, %d, %d)", x, y, w, h)
        return out

    @staticmethod
    def _check_overlay(dst: PixelBuffer, x: int, y: int, src: PixelBuffer) -> None:
        require(src is not dst, "source and destination must be different buffers")
        require(dst.valid_rect(x, y, src.width, src.height),
                f"{src.width}x{src.height} image does not fit at ({x}, {y}) "
                f"in {dst.width}x{dst.height} image")

    def paste(self, dst: PixelBuffer, x: int, y: int, src: PixelBuffer) -> None:
        """Copy src into dst with its top-left corner at (x, y)."""
        require(src.maxval <= dst.maxval,
                f"cannot paste maxval {src.maxval} image into maxval {dst.maxval} image")
        self._check_overlay(dst, x, y, src)
        dst.grid[y:y + src.height, x:x + src.width] = src.grid
        dst.instrumentation.increment(2 * src.size)
        logger.debug("paste %dx%d at (%d, %d)", src.width, src.height, x, y)

    def blend(self, dst: PixelBuffer, x: int, y: int, src: PixelBuffer, alpha: float) -> None:
        """
        Blend src into dst at (x, y):  src*alpha + dst*(1-alpha), rounded
        half up.  alpha outside [0, 1] is allowed; results saturate to
        [0, dst.maxval].
        """
        self._check_overlay(dst, x, y, src)
        region = dst.grid[y:y + src.height, x:x + src.width]
        mixed = np.floor(src.grid * float(alpha) + region * (1.0 - float(alpha)) + 0.5)
        region[:] = np.clip(mixed, 0, dst.maxval).astype(np.uint8)
        dst.instrumentation.increment(3 * src.size)
        logger.debug("blend %dx%d at (%d, %d) alpha=%.3f", src.width, src.height, x, y, alpha)
