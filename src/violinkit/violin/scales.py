"""Linear and band scales for axis geometry.

LinearScale follows the d3 linear scale conventions the rendering layer
expects: "nice" domains rounded to a tick step, human-friendly tick values
(1, 2 or 5 times a power of ten) and optional clamping.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

import numpy as np


def tick_step(start: float, stop: float, count: int) -> float:
    """Return a 1/2/5 x 10^k tick step giving roughly ``count`` ticks over [start, stop]."""
    span = abs(stop - start)
    if span == 0 or not math.isfinite(span) or count < 1:
        return 0.0
    step = 10.0 ** math.floor(math.log10(span / count))
    err = count / span * step
    if err <= 0.15:
        step *= 10
    elif err <= 0.35:
        step *= 5
    elif err <= 0.75:
        step *= 2
    return step


def _step_decimals(step: float) -> int:
    return max(0, -int(math.floor(math.log10(step)))) + 1


def ticks(start: float, stop: float, count: int) -> np.ndarray:
    """Nice tick values inside [start, stop] (ascending)."""
    lo, hi = min(start, stop), max(start, stop)
    step = tick_step(lo, hi, count)
    if step == 0.0:
        return np.array([lo], dtype=float)
    first = math.ceil(lo / step)
    last = math.floor(hi / step)
    values = np.arange(first, last + 1, dtype=float) * step
    return np.round(values, _step_decimals(step))


def nice_domain(start: float, stop: float, count: int = 10) -> tuple[float, float]:
    """Extend [start, stop] outward to multiples of the tick step."""
    lo, hi = min(start, stop), max(start, stop)
    step = tick_step(lo, hi, count)
    if step == 0.0:
        return lo, hi
    decimals = _step_decimals(step)
    return (
        round(math.floor(lo / step) * step, decimals),
        round(math.ceil(hi / step) * step, decimals),
    )


@dataclass(frozen=True)
class LinearScale:
    """Maps a continuous domain onto a continuous pixel range."""

    domain: tuple[float, float]
    range: tuple[float, float]
    clamp: bool = False

    def __call__(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        d0, d1 = self.domain
        r0, r1 = self.range
        x_arr = np.asarray(x, dtype=float)
        if d1 == d0:
            out = np.full_like(x_arr, r0)
        else:
            t = (x_arr - d0) / (d1 - d0)
            if self.clamp:
                t = np.clip(t, 0.0, 1.0)
            out = r0 + t * (r1 - r0)
        return float(out) if np.ndim(out) == 0 else out

    def nice(self, count: int = 10) -> "LinearScale":
        return LinearScale(nice_domain(*self.domain, count), self.range, self.clamp)

    def ticks(self, count: int = 10) -> np.ndarray:
        return ticks(self.domain[0], self.domain[1], count)


@dataclass(frozen=True)
class BandLayout:
    """Rounded, unpadded ordinal bands across a pixel width."""

    band_width: float
    offsets: tuple[float, ...]


def band_layout(n: int, width: float) -> BandLayout:
    """Split ``width`` into ``n`` integer-width bands centred in the range."""
    if n < 1 or width <= 0:
        return BandLayout(band_width=0.0, offsets=())
    step = math.floor(width / n)
    start = math.floor((width - step * n) / 2 + 0.5)  # half-up, as d3 rounds
    return BandLayout(band_width=float(step), offsets=tuple(float(start + i * step) for i in range(n)))
