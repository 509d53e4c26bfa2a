"""
Bandwidth estimation (Silverman's rule-of-thumb) with manual override.

    sigma               = min(deviation, iqr / 1.349)
    bandwidthSilverman  = factor * sigma * n ** (-1/5)
    bandwidthActual     = override (if enabled and positive) else bandwidthSilverman

An undefined deviation (single sample) is ignored when taking the minimum.
When sigma is zero or undefined (constant data) it is clamped to
SIGMA_EPSILON so the bandwidth stays strictly positive.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional

from violinkit.utils.logging import get_logger
from violinkit.violin.models import Statistics

logger = get_logger(__name__)

IQR_NORMAL_SCALE = 1.349
SIGMA_EPSILON = 1e-3


@dataclass(frozen=True)
class Bandwidth:
    silverman: float
    actual: float


def robust_sigma(deviation: float, iqr: float, *, logger: logging.Logger = logger) -> float:
    """Spread estimate used by Silverman's rule, clamped to SIGMA_EPSILON."""
    candidates = [v for v in (deviation, iqr / IQR_NORMAL_SCALE) if v is not None and math.isfinite(v)]
    sigma = min(candidates) if candidates else 0.0
    if sigma <= 0.0:
        logger.debug(f"Degenerate spread (deviation={deviation}, iqr={iqr}); clamping sigma to {SIGMA_EPSILON}")
        return SIGMA_EPSILON
    return sigma


def silverman_bandwidth(
    statistics: Statistics,
    factor: float,
    *,
    logger: logging.Logger = logger,
) -> float:
    """Silverman bandwidth for the sample set summarized by statistics.

    Raises:
        ValueError: If the sample set is empty.
    """
    n = statistics.count
    if n < 1:
        raise ValueError("Cannot derive a bandwidth from an empty sample set")
    sigma = robust_sigma(statistics.deviation, statistics.iqr, logger=logger)
    return factor * sigma * n ** (-1.0 / 5.0)


def _valid_override(override: Optional[float], *, logger: logging.Logger) -> Optional[float]:
    if override is None:
        return None
    if not math.isfinite(override) or override <= 0:
        logger.warning(f"Ignoring non-positive manual bandwidth {override!r}")
        return None
    return float(override)


def estimate_bandwidth(
    statistics: Statistics,
    factor: float,
    *,
    specify_bandwidth: bool = False,
    override: Optional[float] = None,
    logger: logging.Logger = logger,
) -> Bandwidth:
    """Derive (silverman, actual) bandwidth for a sample set."""
    silverman = silverman_bandwidth(statistics, factor, logger=logger)
    manual = _valid_override(override, logger=logger) if specify_bandwidth else None
    return Bandwidth(silverman=silverman, actual=manual if manual is not None else silverman)


def with_bandwidth(statistics: Statistics, bandwidth: Bandwidth) -> Statistics:
    """Return a copy of statistics carrying the given bandwidth values."""
    return replace(
        statistics,
        bandwidth_silverman=bandwidth.silverman,
        bandwidth_actual=bandwidth.actual,
    )


def category_bandwidth(
    name: str,
    statistics: Statistics,
    global_bandwidth: Bandwidth,
    factor: float,
    *,
    by_category: bool,
    specify_bandwidth: bool,
    manual_bandwidth: Optional[float],
    category_overrides: dict[str, float],
    logger: logging.Logger = logger,
) -> Bandwidth:
    """Bandwidth for one category.

    Categories inherit the global bandwidth unless by_category is set, in which
    case their own Silverman value is used, or (with specify_bandwidth) their
    per-category override falling back to the manual bandwidth.
    """
    if not by_category or statistics.count < 1:
        return global_bandwidth
    silverman = silverman_bandwidth(statistics, factor, logger=logger)
    if specify_bandwidth:
        override = category_overrides.get(name, manual_bandwidth)
        manual = _valid_override(override, logger=logger)
        if manual is not None:
            return Bandwidth(silverman=silverman, actual=manual)
    return Bandwidth(silverman=silverman, actual=silverman)
