from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict

PIXMEM = "pixmem"


@dataclass
class Instrumentation:
    """
    Named operation counters.  Only one is used by the library:
    "pixmem", the number of pixel memory accesses.
    """
    counters: Dict[str, int] = field(default_factory=lambda: {PIXMEM: 0})

    def increment(self, n: int = 1, name: str = PIXMEM) -> None:
        self.counters[name] = self.counters.get(name, 0) + n

    def reset(self) -> None:
        for name in self.counters:
            self.counters[name] = 0

    @property
    def count(self) -> int:
        return self.counters.get(PIXMEM, 0)


class NullInstrumentation(Instrumentation):
    """Instrumentation switched off: every increment is dropped."""

    def increment(self, n: int = 1, name: str = PIXMEM) -> None:
        pass
