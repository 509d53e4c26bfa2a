"""
Category aggregation: pandas/numpy.

Turns a flat sample table (measure column + optional category column) into
ordered Category snapshots with per-category Statistics, plus Statistics over
the whole retained sample set.

Steps:
  1. Coerce the measure to numeric and record category keys in first-seen order.
  2. Apply the category limit (keep the first N distinct keys).
  3. Per category: drop null/non-finite values, sort ascending, compute stats.
  4. Sort categories with a comparator resolved once from SORT_KEYS.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import numpy as np
import pandas as pd

from violinkit.utils.logging import get_logger
from violinkit.violin.colours import assign_colours
from violinkit.violin.models import Category, DisplayName, Statistics
from violinkit.violin.settings import ComboPlotType, SortBy, SortOrder, ViolinSettings

logger = get_logger(__name__)

VALUE_COLUMN = "value"
CATEGORY_COLUMN = "category"

# Name given to samples whose category key is missing.
BLANK_CATEGORY = "(Blank)"

# Name of the single synthetic category used when no category column exists.
SYNTHETIC_CATEGORY = ""


@dataclass(frozen=True)
class Aggregation:
    """Output of the aggregation stage."""

    categories: tuple[Category, ...]
    statistics: Statistics
    has_category_names: bool
    categories_reduced: bool

    @property
    def total_count(self) -> int:
        return self.statistics.count


# -----------------------------------------------------------------------------
# Input helpers
# -----------------------------------------------------------------------------


def samples_frame(
    values: Sequence[Any],
    categories: Optional[Sequence[Any]] = None,
) -> pd.DataFrame:
    """Build the sample table from plain sequences.

    Raises:
        ValueError: If categories is given with a different length than values.
    """
    data: dict[str, Any] = {VALUE_COLUMN: list(values)}
    if categories is not None:
        if len(categories) != len(values):
            raise ValueError(
                f"categories has {len(categories)} entries but values has {len(values)}"
            )
        data[CATEGORY_COLUMN] = list(categories)
    return pd.DataFrame(data)


def prepare_samples(
    df: pd.DataFrame,
    value_col: str,
    category_col: Optional[str],
) -> pd.DataFrame:
    """Build a tmp dataframe with columns ``value`` (float, NaN if unusable) and ``category`` (str).

    Rows keep their original order so that category first-seen order is
    preserved. Values that cannot be parsed or are infinite become NaN.

    Raises:
        ValueError: If value_col (or a given category_col) is missing from df.
    """
    if value_col not in df.columns:
        raise ValueError(f"df must contain measure column {value_col!r}")
    if category_col is not None and category_col not in df.columns:
        raise ValueError(f"df must contain category column {category_col!r}")

    value = pd.to_numeric(df[value_col], errors="coerce").astype(float)
    value = value.where(np.isfinite(value), np.nan)
    if category_col is None:
        category = pd.Series([SYNTHETIC_CATEGORY] * len(df), index=df.index)
    else:
        raw = df[category_col]
        category = raw.where(raw.notna(), BLANK_CATEGORY).astype(str)
    return pd.DataFrame({VALUE_COLUMN: value, CATEGORY_COLUMN: category}).reset_index(drop=True)


# -----------------------------------------------------------------------------
# Statistics
# -----------------------------------------------------------------------------


def compute_statistics(values: np.ndarray) -> Statistics:
    """Statistics for a 1-D array of finite values (any order).

    Quantiles use numpy's default linear interpolation. Bandwidth fields are
    left NaN; the bandwidth stage fills them in.
    """
    v = np.sort(np.asarray(values, dtype=float))
    n = len(v)
    if n == 0:
        return Statistics()
    q05, q25, q50, q75, q95 = np.quantile(v, [0.05, 0.25, 0.5, 0.75, 0.95])
    vmin = float(v[0])
    vmax = float(v[-1])
    return Statistics(
        count=n,
        min=vmin,
        max=vmax,
        mean=float(np.mean(v)),
        median=float(q50),
        quartile1=float(q25),
        quartile3=float(q75),
        confidence_lower=float(q05),
        confidence_upper=float(q95),
        deviation=float(np.std(v, ddof=1)) if n > 1 else math.nan,
        iqr=float(q75 - q25),
        span=vmax - vmin,
    )


def aggregate_duplicates(values: np.ndarray) -> tuple[tuple[float, int], ...]:
    """Collapse repeated values into (value, count) pairs, ascending by value."""
    uniq, counts = np.unique(np.asarray(values, dtype=float), return_counts=True)
    return tuple((float(u), int(c)) for u, c in zip(uniq, counts))


# -----------------------------------------------------------------------------
# Sorting
# -----------------------------------------------------------------------------

SORT_KEYS: dict[SortBy, Callable[[Category], Any]] = {
    SortBy.CATEGORY: lambda c: c.name,
    SortBy.SAMPLES: lambda c: c.statistics.count,
    SortBy.MEDIAN: lambda c: c.statistics.median,
    SortBy.MEAN: lambda c: c.statistics.mean,
    SortBy.MIN: lambda c: c.statistics.min,
    SortBy.MAX: lambda c: c.statistics.max,
}

SORT_REVERSE: dict[SortOrder, bool] = {
    SortOrder.ASCENDING: False,
    SortOrder.DESCENDING: True,
}


def _sortable(value: Any) -> bool:
    return not (isinstance(value, float) and math.isnan(value))


def sort_categories(
    categories: Sequence[Category],
    sort_by: SortBy,
    sort_order: SortOrder,
) -> tuple[Category, ...]:
    """Stable sort; categories without a defined key (empty ones) go last."""
    key = SORT_KEYS[sort_by]
    reverse = SORT_REVERSE[sort_order]
    ranked = [c for c in categories if _sortable(key(c))]
    unranked = [c for c in categories if not _sortable(key(c))]
    return tuple(sorted(ranked, key=key, reverse=reverse)) + tuple(unranked)


# -----------------------------------------------------------------------------
# Aggregation
# -----------------------------------------------------------------------------


def aggregate(
    df: pd.DataFrame,
    settings: ViolinSettings,
    *,
    value_col: str = VALUE_COLUMN,
    category_col: Optional[str] = None,
    logger: logging.Logger = logger,
) -> Aggregation:
    """Group samples into categories and compute statistics.

    Raises:
        ValueError: If the named columns are missing from df.
    """
    tmp = prepare_samples(df, value_col, category_col)
    has_category_names = category_col is not None

    keys = list(pd.unique(tmp[CATEGORY_COLUMN]))
    categories_reduced = False
    limit = settings.category_limit
    if has_category_names and len(keys) > limit:
        logger.info(f"Category limit of {limit} reached ({len(keys)} distinct categories); truncating")
        keys = keys[:limit]
        tmp = tmp[tmp[CATEGORY_COLUMN].isin(keys)]
        categories_reduced = True

    valid = tmp.dropna(subset=[VALUE_COLUMN])
    grouped = {str(k): sub[VALUE_COLUMN].to_numpy() for k, sub in valid.groupby(CATEGORY_COLUMN, sort=False)}
    colours = assign_colours([str(k) for k in keys], settings)
    want_aggregated = settings.data_points.plot_type is ComboPlotType.BARCODE

    categories: list[Category] = []
    for i, key in enumerate(keys):
        name = str(key)
        values = np.sort(grouped.get(name, np.array([], dtype=float)))
        if len(values) == 0:
            logger.debug(f"Category {name!r} has no valid samples")
        categories.append(
            Category(
                name=name,
                display_name=DisplayName(formatted_name=name),
                sort_order=i,
                colour=colours[name],
                samples=tuple(float(v) for v in values),
                statistics=compute_statistics(values),
                samples_aggregated=aggregate_duplicates(values) if want_aggregated else (),
            )
        )

    if has_category_names:
        sorted_categories = sort_categories(categories, settings.sort_by, settings.sort_order)
    else:
        sorted_categories = tuple(categories)

    logger.debug(f"Aggregated {len(valid)} samples into {len(sorted_categories)} categories")
    return Aggregation(
        categories=sorted_categories,
        statistics=compute_statistics(valid[VALUE_COLUMN].to_numpy()),
        has_category_names=has_category_names,
        categories_reduced=categories_reduced,
    )
