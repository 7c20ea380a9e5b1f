from __future__ import annotations
from pathlib import Path
from typing import Union, Iterable, List, Iterator
import logging
import os

import numpy as np
from dotenv import load_dotenv

from ..models.errors import AllocationError, ImageError, RasterFormatError, RasterIOError, require
from ..models.instrumentation import Instrumentation, NullInstrumentation
from ..models.pixel_buffer import PixelBuffer, PIX_MAX

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

MAGIC = b"P5"
_WHITESPACE = b" \t\n\v\f\r"
_DIGITS = b"0123456789"


class _HeaderReader:
    """
    Cursor over the raw file bytes for the ASCII part of a P5 header.
    Comments run from '#' to end-of-line and may sit between any tokens.
    """

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def _peek(self) -> int | None:
        return self.data[self.pos] if self.pos < len(self.data) else None

    def skip_whitespace(self) -> None:
        while self._peek() is not None and self._peek() in _WHITESPACE:
            self.pos += 1

    def skip_comments(self) -> int:
        skipped = 0
        self.skip_whitespace()
        while self._peek() == ord("#"):
            eol = self.data.find(b"\n", self.pos)
            self.pos = len(self.data) if eol < 0 else eol + 1
            skipped += 1
            self.skip_whitespace()
        return skipped

    def read_magic(self) -> bytes:
        tag = self.data[self.pos:self.pos + len(MAGIC)]
        self.pos += len(tag)
        return tag

    def read_int(self) -> int | None:
        self.skip_whitespace()
        start = self.pos
        while self._peek() is not None and self._peek() in _DIGITS:
            self.pos += 1
        if self.pos == start:
            return None
        return int(self.data[start:self.pos])

    def read_separator(self) -> bool:
        """Consume exactly one byte, which must be whitespace."""
        c = self._peek()
        if c is None or c not in _WHITESPACE:
            return False
        self.pos += 1
        return True


class ImageRepository:
    """
    Handles file I/O and storage for PixelBuffer entities.
    The only persistent format is raw 8-bit PGM (magic "P5").
    """
    def __init__(self):
        exts = os.getenv("VALID_IMAGE_EXTENSIONS", ".pgm,.pnm")
        self.VALID_EXTS = {ext.strip().lower() for ext in exts.split(",") if ext.strip()}

    @staticmethod
    def create_image(
        width: int,
        height: int,
        maxval: int,
        path: Union[str, Path] = None,
        instrumentation: Instrumentation | None = None,
    ) -> PixelBuffer:
        """
        Allocate a zero-filled width x height buffer.
        Raises AllocationError if the storage cannot be obtained.
        """
        require(width >= 0, f"width must be >= 0, got {width}")
        require(height >= 0, f"height must be >= 0, got {height}")
        require(0 < maxval <= PIX_MAX, f"maxval must be in (0, {PIX_MAX}], got {maxval}")
        try:
            pixels = np.zeros(width * height, dtype=np.uint8)
        except (MemoryError, OverflowError, ValueError) as err:
            raise AllocationError(f"Cannot allocate {width}x{height} image") from err
        return PixelBuffer(
            width=width,
            height=height,
            maxval=maxval,
            pixels=pixels,
            path=Path(path) if path is not None else None,
            instrumentation=instrumentation or NullInstrumentation(),
        )

    @staticmethod
    def release(image: PixelBuffer) -> None:
        image.release()

    @staticmethod
    def decode(
        data: bytes,
        instrumentation: Instrumentation | None = None,
        path: Path | None = None,
    ) -> PixelBuffer:
        """
        Parse the bytes of a P5 file into a new PixelBuffer.
        Raises RasterFormatError naming the first thing that is wrong.
        """
        reader = _HeaderReader(data)
        if reader.read_magic() != MAGIC:
            raise RasterFormatError("Invalid file format", path=path)
        reader.skip_comments()
        width = reader.read_int()
        if width is None:
            raise RasterFormatError("Invalid width", path=path)
        reader.skip_comments()
        height = reader.read_int()
        if height is None:
            raise RasterFormatError("Invalid height", path=path)
        reader.skip_comments()
        maxval = reader.read_int()
        if maxval is None or not 0 < maxval <= PIX_MAX:
            raise RasterFormatError("Invalid maxval", path=path)
        if not reader.read_separator():
            raise RasterFormatError("Whitespace expected", path=path)

        body = data[reader.pos:reader.pos + width * height]
        if len(body) != width * height:
            raise RasterFormatError("Reading pixels", path=path)

        samples = np.frombuffer(body, dtype=np.uint8)
        if samples.size and int(samples.max()) > maxval:
            raise RasterFormatError("Pixel exceeds maxval", path=path)

        img = ImageRepository.create_image(width, height, maxval, path, instrumentation)
        img.samples[:] = samples
        img.instrumentation.increment(img.size)
        return img

    @staticmethod
    def _header(image: PixelBuffer) -> bytes:
        return f"P5\n{image.width} {image.height}\n{image.maxval}\n".encode("ascii")

    @staticmethod
    def encode(image: PixelBuffer) -> bytes:
        data = ImageRepository._header(image) + image.samples.tobytes()
        image.instrumentation.increment(image.size)
        return data

    @staticmethod
    def load(path: Union[str, Path], instrumentation: Instrumentation | None = None) -> PixelBuffer:
        path = Path(path)
        try:
            with open(path, "rb") as fh:
                data = fh.read()
        except OSError as err:
            raise RasterIOError("Open failed", err.errno, path) from err

        img = ImageRepository.decode(data, instrumentation, path)
        logger.debug("Loaded %dx%d graymap from %s", img.width, img.height, path)
        return img

    @staticmethod
    def _write_all(fh, data: bytes, cause: str, path: Path) -> None:
        view = memoryview(data)
        while view:
            try:
                written = fh.write(view)
            except OSError as err:
                raise RasterIOError(cause, err.errno, path) from err
            if not written:
                raise RasterIOError(cause, path=path)
            view = view[written:]

    @staticmethod
    def save(image: PixelBuffer, path: Union[str, Path, None] = None) -> Path:
        """
        Write image to path (or image.path).  On failure a truncated file
        may be left behind.
        """
        path = Path(path) if path is not None else image.path
        require(path is not None, "no destination path given")
        header = ImageRepository._header(image)
        body = image.samples.tobytes()

        try:
            fh = open(path, "wb", buffering=0)
        except OSError as err:
            raise RasterIOError("Open failed", err.errno, path) from err
        with fh:
            ImageRepository._write_all(fh, header, "Writing header failed", path)
            ImageRepository._write_all(fh, body, "Writing pixels failed", path)
        image.instrumentation.increment(image.size)
        logger.debug("Saved %dx%d graymap to %s", image.width, image.height, path)
        return path

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
        instrumentation: Instrumentation | None = None,
    ) -> Iterator[PixelBuffer]:
        """
        Yield PixelBuffers one at a time.  Files that fail to load are
        logged and skipped.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"

        for p in sorted(folder.glob(pattern)):
            if p.suffix.lower() not in allowed or not p.is_file():
                logger.debug("Skipping %s", p)
                continue
            try:
                img = self.load(p, instrumentation)
            except ImageError as err:
                logger.warning("Skipping %s: %s", p.name, err)
                continue
            yield img

    def load_dir(
        self, folder: Union[str, Path], *, recursive=False, exts=None, instrumentation=None
    ) -> List[PixelBuffer]:
        return list(self.iter_dir(folder, recursive=recursive, exts=exts,
                                  instrumentation=instrumentation))
