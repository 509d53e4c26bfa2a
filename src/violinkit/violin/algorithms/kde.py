"""
Kernel density estimation with tail convergence: pure numpy.

For each evaluation point x:

    y(x) = mean over samples v of window((x - v) / bandwidth)

The window carries its own normalization; y is not divided by the bandwidth,
because only the shape of the curve matters for the silhouette.

Boundary policies
-----------------
Clamp:
    Keep grid points inside [sample min, sample max] with y > 0, add the
    density at the exact extents, and close the curve with zero points at
    both extents. Nothing lies outside the sample extent.

Converge (default):
    0. The sample extents join the grid, so a narrow spike (a constant
       series) is sampled even when it falls between ticks.
    1. interpolate_min is the closest grid point below the sample min whose
       density is negligible (<= DENSITY_EPSILON); interpolate_max likewise
       above the sample max.
    2. If the grid has no such point, find_convergence_point() walks outward
       from the extent in steps of bandwidth * 2**k until the density is
       negligible, then bisects back towards the data. If MAX_EXPANSIONS is
       exhausted the sample extent itself is used (logged as a warning).
    3. Zero points are inserted at both convergence locations if the grid
       does not already contain them.
    4. A keep/discard predicate drops everything before interpolate_min and
       everything after the first point reaching interpolate_max; y is forced
       to 0 at both ends.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

import numpy as np

from violinkit.utils.logging import get_logger
from violinkit.violin.algorithms.kernels import KernelSpec
from violinkit.violin.models import DensityPoint
from violinkit.violin.scales import LinearScale, ticks

logger = get_logger(__name__)

# Density at or below this value counts as converged.
DENSITY_EPSILON = 1e-4

# Outward doubling steps before giving up on convergence (2**32 bandwidths).
MAX_EXPANSIONS = 32

# Bisection steps between the last non-negligible and first negligible point.
MAX_BISECTIONS = 48

# Samples per chunk when evaluating the density, bounding memory use.
_CHUNK_SIZE = 4096


class Limit(Enum):
    MIN = -1
    MAX = 1


@dataclass(frozen=True)
class DensityResult:
    points: tuple[DensityPoint, ...]
    interpolate_min: float
    interpolate_max: float


def evaluation_grid(domain: tuple[float, float], resolution: int) -> np.ndarray:
    """Nice tick values across the value-axis domain used as evaluation points."""
    return ticks(domain[0], domain[1], resolution)


def evaluate_density(
    samples: Sequence[float],
    window: Callable[[np.ndarray], np.ndarray],
    bandwidth: float,
    xs: Sequence[float],
) -> np.ndarray:
    """Mean kernel response at each x in xs."""
    v = np.asarray(samples, dtype=float)
    x = np.atleast_1d(np.asarray(xs, dtype=float))
    if len(v) == 0:
        return np.zeros_like(x)
    total = np.zeros_like(x)
    for start in range(0, len(v), _CHUNK_SIZE):
        chunk = v[start:start + _CHUNK_SIZE]
        total += window((x[:, None] - chunk[None, :]) / bandwidth).sum(axis=1)
    return total / len(v)


def density_function(
    samples: Sequence[float],
    window: Callable[[np.ndarray], np.ndarray],
    bandwidth: float,
) -> Callable[[float], float]:
    """Density at a single point, for root searches."""
    v = np.asarray(samples, dtype=float)

    def _density(x: float) -> float:
        return float(evaluate_density(v, window, bandwidth, [x])[0])

    return _density


def find_convergence_point(
    extent: float,
    limit: Limit,
    density: Callable[[float], float],
    bandwidth: float,
    *,
    logger: logging.Logger = logger,
) -> tuple[float, bool]:
    """Closest point beyond ``extent`` (in the ``limit`` direction) with negligible density.

    Returns:
        (x, converged). When no negligible point is found within
        MAX_EXPANSIONS doublings, returns (extent, False).
    """
    direction = limit.value
    near = extent
    far: Optional[float] = None
    for k in range(MAX_EXPANSIONS):
        candidate = extent + direction * bandwidth * (2.0 ** k)
        if density(candidate) <= DENSITY_EPSILON:
            far = candidate
            break
        near = candidate
    if far is None:
        logger.warning(
            f"Density did not converge beyond {limit.name.lower()} {extent} after "
            f"{MAX_EXPANSIONS} expansions; using sample extent"
        )
        return extent, False

    tolerance = bandwidth * 1e-6
    for _ in range(MAX_BISECTIONS):
        if abs(far - near) <= tolerance:
            break
        mid = (near + far) / 2.0
        if density(mid) <= DENSITY_EPSILON:
            far = mid
        else:
            near = mid
    return far, True


def _grid_convergence(
    xs: np.ndarray,
    ys: np.ndarray,
    sample_min: float,
    sample_max: float,
) -> tuple[Optional[float], Optional[float]]:
    below = xs[(xs < sample_min) & (ys <= DENSITY_EPSILON)]
    above = xs[(xs > sample_max) & (ys <= DENSITY_EPSILON)]
    imin = float(below.max()) if len(below) else None
    imax = float(above.min()) if len(above) else None
    return imin, imax


def _with_extents(xs: np.ndarray, sample_min: float, sample_max: float) -> np.ndarray:
    """Grid plus the sample extents, sorted, so narrow spikes between ticks are sampled."""
    extents = [x for x in {sample_min, sample_max} if not np.any(xs == x)]
    return np.sort(np.append(xs, extents), kind="stable")


def _insert_zero(xs: np.ndarray, ys: np.ndarray, x: float) -> tuple[np.ndarray, np.ndarray]:
    if np.any(xs == x):
        return xs, ys
    return np.append(xs, x), np.append(ys, 0.0)


def _to_points(xs: np.ndarray, ys: np.ndarray) -> tuple[DensityPoint, ...]:
    return tuple(DensityPoint(float(x), float(y)) for x, y in zip(xs, ys))


def converge_density(
    samples: Sequence[float],
    kernel: KernelSpec,
    bandwidth: float,
    grid: np.ndarray,
    *,
    series: str = "",
    logger: logging.Logger = logger,
) -> DensityResult:
    """Density curve whose tails are forced to zero at the convergence points."""
    v = np.asarray(samples, dtype=float)
    sample_min, sample_max = float(v.min()), float(v.max())
    xs = _with_extents(np.asarray(grid, dtype=float), sample_min, sample_max)
    ys = evaluate_density(v, kernel.window, bandwidth, xs)

    imin, imax = _grid_convergence(xs, ys, sample_min, sample_max)
    logger.debug(f"[{series}] Grid convergence: min={imin}, max={imax} (samples {sample_min}..{sample_max})")
    if imin is None or imax is None:
        density = density_function(v, kernel.window, bandwidth)
        if imin is None:
            imin, _ = find_convergence_point(sample_min, Limit.MIN, density, bandwidth, logger=logger)
        if imax is None:
            imax, _ = find_convergence_point(sample_max, Limit.MAX, density, bandwidth, logger=logger)
        logger.debug(f"[{series}] Searched convergence: min={imin}, max={imax}")

    xs, ys = _insert_zero(xs, ys, imin)
    xs, ys = _insert_zero(xs, ys, imax)
    order = np.argsort(xs, kind="stable")
    xs, ys = xs[order], ys[order]

    ys = np.where((xs <= imin) | (xs >= imax), 0.0, ys)
    reached_max = np.cumsum(xs >= imax)
    keep = (xs >= imin) & (reached_max <= 1)
    return DensityResult(_to_points(xs[keep], ys[keep]), imin, imax)


def clamp_density(
    samples: Sequence[float],
    kernel: KernelSpec,
    bandwidth: float,
    grid: np.ndarray,
) -> DensityResult:
    """Density curve hard-truncated at the sample extent."""
    v = np.asarray(samples, dtype=float)
    sample_min, sample_max = float(v.min()), float(v.max())
    xs = np.asarray(grid, dtype=float)
    ys = evaluate_density(v, kernel.window, bandwidth, xs)

    inside = (xs > sample_min) & (xs < sample_max) & (ys > 0)
    edge_min, edge_max = evaluate_density(v, kernel.window, bandwidth, [sample_min, sample_max])
    if sample_min == sample_max:
        out_x = np.array([sample_min, sample_min, sample_min])
        out_y = np.array([0.0, edge_min, 0.0])
    else:
        out_x = np.concatenate([[sample_min, sample_min], xs[inside], [sample_max, sample_max]])
        out_y = np.concatenate([[0.0, edge_min], ys[inside], [edge_max, 0.0]])
    return DensityResult(_to_points(out_x, out_y), sample_min, sample_max)


def estimate_density(
    samples: Sequence[float],
    kernel: KernelSpec,
    bandwidth: float,
    grid: np.ndarray,
    *,
    clamp: bool = False,
    series: str = "",
    logger: logging.Logger = logger,
) -> DensityResult:
    """Density curve for one category under the chosen boundary policy.

    Empty sample sets yield an empty curve with NaN convergence points.

    Raises:
        ValueError: If bandwidth is not strictly positive.
    """
    if not (bandwidth > 0 and math.isfinite(bandwidth)):
        raise ValueError(f"bandwidth must be positive, got {bandwidth!r}")
    if len(samples) == 0:
        logger.debug(f"[{series}] No samples; skipping density estimation")
        return DensityResult((), math.nan, math.nan)
    if clamp:
        return clamp_density(samples, kernel, bandwidth, grid)
    return converge_density(samples, kernel, bandwidth, grid, series=series, logger=logger)


def extended_domain(
    domain: tuple[float, float],
    results: Sequence[DensityResult],
) -> tuple[float, float]:
    """Grow the value-axis domain to contain every convergence point."""
    lo, hi = domain
    for r in results:
        if math.isfinite(r.interpolate_min) and r.interpolate_min < lo:
            lo = r.interpolate_min
        if math.isfinite(r.interpolate_max) and r.interpolate_max > hi:
            hi = r.interpolate_max
    return lo, hi


def silhouette_scale(points: Sequence[DensityPoint], violin_width: float) -> LinearScale:
    """Linear scale from density [0, max y] to [0, half the violin width]."""
    max_y = max((p.y for p in points), default=0.0)
    return LinearScale(domain=(0.0, max_y), range=(0.0, violin_width / 2.0), clamp=True)
