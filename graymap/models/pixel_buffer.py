from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple
import numpy as np

from .errors import require
from .instrumentation import Instrumentation, NullInstrumentation

PIX_MAX = 255


@dataclass(eq=False)
class PixelBuffer:
    """
    8-bit graymap: width x height samples in a flat raster scan
    (left to right, top to bottom), each sample in [0, maxval].

    Pixel (x, y) lives at pixels[y * width + x].
    """
    width: int
    height: int
    maxval: int
    pixels: np.ndarray | None  # Shape (width*height,), dtype uint8.
    path: Path | None = None   # Where the buffer was loaded from / saves to.
    instrumentation: Instrumentation = field(default_factory=NullInstrumentation, repr=False)

    def __post_init__(self):
        require(self.width >= 0, f"width must be >= 0, got {self.width}")
        require(self.height >= 0, f"height must be >= 0, got {self.height}")
        require(0 < self.maxval <= PIX_MAX, f"maxval must be in (0, {PIX_MAX}], got {self.maxval}")
        require(self.pixels is not None, "pixel storage missing")
        require(self.pixels.dtype == np.uint8 and self.pixels.ndim == 1,
                "pixels must be a flat uint8 array")
        require(self.pixels.size == self.width * self.height,
                f"expected {self.width * self.height} samples, got {self.pixels.size}")
        require(self.pixels.size == 0 or int(self.pixels.max()) <= self.maxval,
                f"samples must not exceed maxval {self.maxval}")

    # ── Lifecycle ────────────────────────────────────────────────────
    @property
    def released(self) -> bool:
        return self.pixels is None

    def release(self) -> None:
        """Drop the pixel storage.  Calling it again is a no-op."""
        self.pixels = None

    def _live(self) -> np.ndarray:
        require(self.pixels is not None, "use of a released PixelBuffer")
        return self.pixels

    # ── Geometry queries ─────────────────────────────────────────────
    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width), numpy order."""
        return self.height, self.width

    def valid_pos(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def valid_rect(self, x: int, y: int, w: int, h: int) -> bool:
        """
        True if the w x h rectangle with top-left corner (x, y) lies
        completely inside the image.  Zero-area rectangles are not valid.
        """
        return self.valid_pos(x, y) and self.valid_pos(x + w - 1, y + h - 1)

    # ── Sample access ────────────────────────────────────────────────
    @property
    def samples(self) -> np.ndarray:
        """Flat raster-scan view of the storage."""
        return self._live()

    @property
    def grid(self) -> np.ndarray:
        """(height, width) view sharing storage with `samples`."""
        return self._live().reshape(self.height, self.width)

    def index(self, x: int, y: int) -> int:
        require(self.valid_pos(x, y), f"position ({x}, {y}) outside {self.width}x{self.height} image")
        return y * self.width + x

    def get_pixel(self, x: int, y: int) -> int:
        pixels = self._live()
        i = self.index(x, y)
        self.instrumentation.increment(1)
        return int(pixels[i])

    def set_pixel(self, x: int, y: int, level: int) -> None:
        pixels = self._live()
        i = self.index(x, y)
        require(0 <= level <= self.maxval, f"level {level} outside [0, {self.maxval}]")
        self.instrumentation.increment(1)
        pixels[i] = level

    def stats(self) -> Tuple[int, int]:
        """(min, max) gray level.  An empty image reports (0, 0)."""
        pixels = self._live()
        if pixels.size == 0:
            return 0, 0
        return int(pixels.min()), int(pixels.max())

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.width, self.height, self.maxval,
                           self._live().copy(), self.path, self.instrumentation)

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and self.maxval == other.maxval
                and np.array_equal(self._live(), other._live()))
