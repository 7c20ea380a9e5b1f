from __future__ import annotations
from typing import Tuple
import numpy as np


class SummedAreaTable:
    """
    2D prefix sums of a (height, width) array, for O(1) rectangle sums.

    table[y, x] holds the sum of every sample at (x', y') with x' < x and
    y' < y, i.e. the table is padded with a leading row and column of
    zeros so corner lookups never go out of range.
    """

    def __init__(self, grid: np.ndarray):
        if grid.ndim != 2:
            raise ValueError("SummedAreaTable requires a 2D array")
        self.height, self.width = grid.shape
        sums = np.cumsum(np.cumsum(grid, axis=0, dtype=np.int64), axis=1)
        self.table = np.pad(sums, ((1, 0), (1, 0)), mode="constant")

    def rect_sum(self, x0: int, y0: int, x1: int, y1: int) -> int:
        """Sum over the inclusive rectangle [x0, x1] x [y0, y1]."""
        t = self.table
        return int(t[y1 + 1, x1 + 1] - t[y0, x1 + 1] - t[y1 + 1, x0] + t[y0, x0])

    @staticmethod
    def _clipped(n: int, d: int) -> Tuple[np.ndarray, np.ndarray]:
        centre = np.arange(n)
        return np.maximum(centre - d, 0), np.minimum(centre + d, n - 1)

    def window_sums(self, dx: int, dy: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        For every pixel, the sum and the area of the (2dx+1) x (2dy+1)
        window centred on it, clipped to the array bounds.
        Returns two (height, width) int64 arrays: (sums, areas).
        """
        lo_x, hi_x = self._clipped(self.width, dx)
        lo_y, hi_y = self._clipped(self.height, dy)
        t = self.table
        sums = (t[np.ix_(hi_y + 1, hi_x + 1)]
                - t[np.ix_(lo_y, hi_x + 1)]
                - t[np.ix_(hi_y + 1, lo_x)]
                + t[np.ix_(lo_y, lo_x)])
        areas = np.outer(hi_y - lo_y + 1, hi_x - lo_x + 1)
        return sums, areas
