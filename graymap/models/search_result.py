from __future__ import annotations
from dataclasses import dataclass


@dataclass
class ComparisonCounter:
    """Pixel-pair comparisons made during one subimage search."""
    count: int = 0

    def add(self, n: int) -> None:
        self.count += n


@dataclass
class SearchResult:
    """
    Outcome of a subimage search.  x / y are None when nothing matched.
    """
    found: bool
    x: int | None = None
    y: int | None = None
    comparisons: int = 0  # Pixel pairs compared over the whole search.

    @property
    def position(self):
        return (self.x, self.y) if self.found else None
