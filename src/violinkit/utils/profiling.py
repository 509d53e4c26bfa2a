"""Per-stage timing for the view model pipeline.

Each pipeline stage runs inside ``StageProfiler.stage(name)``; the profiler
collects one ProfileEntry per stage and logs the timing at DEBUG level on the
injected logger (silent unless the application configured logging).
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from violinkit.utils.logging import get_logger


@dataclass(frozen=True)
class ProfileEntry:
    """Timing summary for one pipeline stage."""

    name: str
    start: float  # epoch seconds
    end: float  # epoch seconds
    duration_ms: float

    def to_dict(self) -> dict[str, float | str]:
        return {
            "name": self.name,
            "start": self.start,
            "end": self.end,
            "duration_ms": self.duration_ms,
        }


class StageProfiler:
    """Collects ProfileEntry records for a single pipeline run."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or get_logger(__name__)
        self._entries: list[ProfileEntry] = []

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        """Time the enclosed block and record it under ``name``."""
        wall_start = time.time()
        t0 = time.perf_counter()
        self._logger.debug("Starting %s", name)
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - t0) * 1000.0
            entry = ProfileEntry(
                name=name,
                start=wall_start,
                end=wall_start + duration_ms / 1000.0,
                duration_ms=duration_ms,
            )
            self._entries.append(entry)
            self._logger.debug("Finished %s in %.3f ms", name, duration_ms)

    @property
    def entries(self) -> tuple[ProfileEntry, ...]:
        return tuple(self._entries)

    def total_ms(self) -> float:
        return sum(e.duration_ms for e in self._entries)
