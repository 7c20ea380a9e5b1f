from __future__ import annotations
from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import ImageError

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """
    Either a value or the ImageError that prevented it.
    Used by the try_* helpers that report failure instead of raising.
    """
    value: T | None = None
    error: ImageError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def cause(self) -> str | None:
        return self.error.cause if self.error else None

    @property
    def errno(self) -> int | None:
        return self.error.errno if self.error else None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value
