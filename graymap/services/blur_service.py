from __future__ import annotations
import logging
import time

import numpy as np

from ..models.errors import require
from ..models.pixel_buffer import PixelBuffer
from ..models.summed_area_table import SummedAreaTable

logger = logging.getLogger(__name__)


class BlurService:
    """
    Mean filter over a (2dx+1) x (2dy+1) window, computed from a
    summed-area table so the cost does not depend on the window size.
    """

    @staticmethod
    def window_area(img: PixelBuffer, x: int, y: int, dx: int, dy: int) -> int:
        """Number of pixels averaged for (x, y) once the window is clipped."""
        require(img.valid_pos(x, y), f"position ({x}, {y}) outside {img.width}x{img.height} image")
        require(dx >= 0 and dy >= 0, f"blur radii must be >= 0, got dx={dx}, dy={dy}")
        lo_x, hi_x = max(x - dx, 0), min(x + dx, img.width - 1)
        lo_y, hi_y = max(y - dy, 0), min(y + dy, img.height - 1)
        return (hi_x - lo_x + 1) * (hi_y - lo_y + 1)

    @staticmethod
    def blur(img: PixelBuffer, dx: int, dy: int) -> float:
        """
        Replace every pixel, in place, by the rounded mean of the window
        [x-dx, x+dx] x [y-dy, y+dy] clipped to the image.

        Every window is summed from the original levels before anything is
        written back.

        Returns the elapsed wall time in seconds.
        """
        require(dx >= 0 and dy >= 0, f"blur radii must be >= 0, got dx={dx}, dy={dy}")
        start = time.perf_counter()
        if img.size == 0:
            return time.perf_counter() - start

        grid = img.grid
        sums, areas = SummedAreaTable(grid).window_sums(dx, dy)
        grid[:] = np.floor(sums / areas + 0.5).astype(np.uint8)
        img.instrumentation.increment(2 * img.size)

        elapsed = time.perf_counter() - start
        logger.debug("blur dx=%d dy=%d on %dx%d took %.6fs", dx, dy, img.width, img.height, elapsed)
        return elapsed
