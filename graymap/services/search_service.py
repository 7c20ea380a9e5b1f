from __future__ import annotations
import logging

import numpy as np

from ..models.errors import require
from ..models.pixel_buffer import PixelBuffer
from ..models.search_result import ComparisonCounter, SearchResult

logger = logging.getLogger(__name__)


class SearchService:
    """
    Exhaustive subimage search.  The number of pixel-pair comparisons is
    tracked per search, so separate searches never share a count.
    """

    @staticmethod
    def match_subimage(
        haystack: PixelBuffer,
        x: int,
        y: int,
        needle: PixelBuffer,
        counter: ComparisonCounter | None = None,
    ) -> bool:
        """
        True if needle equals the region of haystack whose top-left corner
        is (x, y).  Pixels are compared in raster order and the comparison
        stops at the first mismatch; every pair examined, the mismatching
        one included, is added to counter.
        """
        require(haystack.valid_rect(x, y, needle.width, needle.height),
                f"{needle.width}x{needle.height} needle does not fit at ({x}, {y}) "
                f"in {haystack.width}x{haystack.height} haystack")
        region = haystack.grid[y:y + needle.height, x:x + needle.width]
        mismatches = np.flatnonzero(region.ravel() != needle.samples)
        compared = int(mismatches[0]) + 1 if mismatches.size else needle.size

        if counter is not None:
            counter.add(compared)
        haystack.instrumentation.increment(2 * compared)
        return mismatches.size == 0

    def locate_subimage(self, haystack: PixelBuffer, needle: PixelBuffer) -> SearchResult:
        """
        First position, scanning candidate top-left corners row by row,
        where needle occurs inside haystack.
        """
        counter = ComparisonCounter()
        last_y = haystack.height - needle.height
        last_x = haystack.width - needle.width
        if last_x < 0 or last_y < 0:
            return SearchResult(found=False, comparisons=0)

        for i in range(last_y + 1):
            for j in range(last_x + 1):
                if self.match_subimage(haystack, j, i, needle, counter):
                    logger.debug("needle found at (%d, %d) after %d comparisons", j, i, counter.count)
                    return SearchResult(found=True, x=j, y=i, comparisons=counter.count)

        logger.debug("needle not found after %d comparisons", counter.count)
        return SearchResult(found=False, comparisons=counter.count)
