from __future__ import annotations
import logging

import numpy as np

from ..models.errors import require
from ..models.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


class IntensityService:
    """
    Per-pixel level transforms.  All of them work in place over the
    whole buffer, allocate nothing and never fail.
    """

    @staticmethod
    def negative(img: PixelBuffer) -> None:
        """Photographic negative: level -> maxval - level."""
        samples = img.samples
        samples[:] = img.maxval - samples
        logger.debug("negative on %dx%d", img.width, img.height)

    @staticmethod
    def threshold(img: PixelBuffer, thr: int) -> None:
        """Levels >= thr become maxval (white), the rest 0 (black)."""
        samples = img.samples
        samples[:] = np.where(samples >= thr, img.maxval, 0).astype(np.uint8)
        logger.debug("threshold %d on %dx%d", thr, img.width, img.height)

    @staticmethod
    def brighten(img: PixelBuffer, factor: float) -> None:
        """
        Multiply every level by factor, rounding half up and saturating
        at maxval.  factor < 1 darkens.
        """
        require(factor >= 0.0, f"brighten factor must be >= 0, got {factor}")
        samples = img.samples
        scaled = np.floor(samples * float(factor) + 0.5)
        samples[:] = np.minimum(scaled, img.maxval).astype(np.uint8)
        logger.debug("brighten x%.3f on %dx%d", factor, img.width, img.height)
