from __future__ import annotations


class ContractError(AssertionError):
    """
    A violated precondition: bad coordinates, bad dimensions, a released
    buffer, an aliased paste.  A caller that trips one has a bug.
    """


def require(condition: bool, message: str) -> None:
    if not condition:
        raise ContractError(message)


class ImageError(Exception):
    """
    Recoverable resource / I/O failure.

    cause : human-readable failure cause ("Open failed", "Invalid width" ...)
    errno : platform error code of the underlying failure, if any.
    """

    def __init__(self, cause: str, errno: int | None = None, path=None):
        self.cause = cause
        self.errno = errno
        self.path = path
        super().__init__(self._describe())

    def _describe(self) -> str:
        msg = self.cause
        if self.path is not None:
            msg = f"{msg}: {self.path}"
        if self.errno is not None:
            msg = f"{msg} (errno {self.errno})"
        return msg


class AllocationError(ImageError):
    """Pixel storage could not be obtained."""


class RasterIOError(ImageError):
    """The raster file could not be opened, read or written."""


class RasterFormatError(ImageError):
    """The raster file is not a valid 8-bit P5 graymap."""
