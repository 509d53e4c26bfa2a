"""
ViewModel assembly: run the full pipeline for one data update.

    aggregate -> bandwidth -> layout (pass 1) -> density -> layout (pass 2) -> scales

The density stage may push the value-axis domain outward (convergence points
beyond the data extent); the second layout pass resolves axis geometry against
the extended domain. Every stage is timed into ViewModel.profiling.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

import pandas as pd

from violinkit.utils.logging import get_logger
from violinkit.utils.profiling import StageProfiler
from violinkit.violin.algorithms.aggregate import VALUE_COLUMN, aggregate
from violinkit.violin.algorithms.bandwidth import (
    category_bandwidth,
    estimate_bandwidth,
    with_bandwidth,
)
from violinkit.violin.algorithms.kde import (
    DensityResult,
    estimate_density,
    evaluation_grid,
    extended_domain,
    silhouette_scale,
)
from violinkit.violin.algorithms.kernels import get_kernel
from violinkit.violin.layout import resolve_layout
from violinkit.violin.models import Category, ViewModel
from violinkit.violin.settings import ViolinSettings
from violinkit.violin.text_measurement import ApproximateTextMeasurer, TextMeasurer

logger = get_logger(__name__)

DEFAULT_VIEWPORT_WIDTH = 600.0
DEFAULT_VIEWPORT_HEIGHT = 400.0


def _input_unusable(
    data: Optional[pd.DataFrame],
    value_col: str,
    category_col: Optional[str],
    logger: logging.Logger,
) -> bool:
    if data is None or len(data) == 0:
        logger.info("No data supplied; nothing to render")
        return True
    if value_col not in data.columns:
        logger.info(f"Measure column {value_col!r} not in data; nothing to render")
        return True
    if category_col is not None and category_col not in data.columns:
        logger.info(f"Category column {category_col!r} not in data; nothing to render")
        return True
    return False


def build_view_model(
    data: Optional[pd.DataFrame],
    settings: Optional[ViolinSettings] = None,
    *,
    value_col: str = VALUE_COLUMN,
    category_col: Optional[str] = None,
    viewport_width: float = DEFAULT_VIEWPORT_WIDTH,
    viewport_height: float = DEFAULT_VIEWPORT_HEIGHT,
    measure_name: Optional[str] = None,
    measurer: Optional[TextMeasurer] = None,
    logger: logging.Logger = logger,
) -> ViewModel:
    """Build the ViewModel for a sample table.

    Args:
        data: Sample table with a measure column and optional category column.
        settings: Plot settings; defaults to ViolinSettings().
        value_col: Measure column name.
        category_col: Category column name, or None for a single violin.
        viewport_width: Available width in px.
        viewport_height: Available height in px.
        measure_name: Measure display name for the value-axis title (defaults to value_col).
        measurer: Text measurer for layout; defaults to ApproximateTextMeasurer.
        logger: Logger for pipeline diagnostics.

    Returns:
        ViewModel. should_render is False when the input is unusable (no data,
        missing columns, no valid numeric values); no exception is raised.
    """
    settings = settings or ViolinSettings()
    measurer = measurer or ApproximateTextMeasurer()
    profiler = StageProfiler(logger)

    if _input_unusable(data, value_col, category_col, logger):
        return ViewModel.empty(profiler.entries)

    with profiler.stage("aggregate"):
        aggregation = aggregate(
            data,
            settings,
            value_col=value_col,
            category_col=category_col,
            logger=logger,
        )
    if aggregation.statistics.is_empty:
        logger.info(f"No valid values in {value_col!r}; nothing to render")
        return ViewModel.empty(profiler.entries)

    violin = settings.violin
    kernel = get_kernel(violin.kernel)

    with profiler.stage("bandwidth"):
        global_bandwidth = estimate_bandwidth(
            aggregation.statistics,
            kernel.factor,
            specify_bandwidth=violin.specify_bandwidth,
            override=violin.bandwidth,
            logger=logger,
        )
        statistics = with_bandwidth(aggregation.statistics, global_bandwidth)
        categories: list[Category] = []
        for c in aggregation.categories:
            if c.statistics.is_empty:
                categories.append(c)
                continue
            bandwidth = category_bandwidth(
                c.name,
                c.statistics,
                global_bandwidth,
                kernel.factor,
                by_category=violin.bandwidth_by_category and aggregation.has_category_names,
                specify_bandwidth=violin.specify_bandwidth,
                manual_bandwidth=violin.bandwidth,
                category_overrides=violin.category_bandwidths,
                logger=logger,
            )
            categories.append(replace(c, statistics=with_bandwidth(c.statistics, bandwidth)))
        logger.debug(
            f"Bandwidth: silverman={statistics.bandwidth_silverman}, actual={statistics.bandwidth_actual}"
        )

    layout_kwargs = dict(
        settings=settings,
        category_names=[c.name for c in categories],
        has_category_names=aggregation.has_category_names,
        measure_title=measure_name or value_col,
        category_title=category_col,
        reference_value=statistics.max,
        measurer=measurer,
        logger=logger,
    )
    data_domain = (statistics.min, statistics.max)

    with profiler.stage("layout"):
        layout = resolve_layout(viewport_width, viewport_height, value_domain=data_domain, **layout_kwargs)

    densities: dict[str, DensityResult] = {}
    if layout.value_axis.collapsed:
        logger.debug("Value axis collapsed; skipping density estimation")
    else:
        with profiler.stage("density"):
            grid = evaluation_grid(layout.value_axis.domain, violin.resolution.value)
            for c in categories:
                if c.statistics.is_empty:
                    continue
                densities[c.name] = estimate_density(
                    c.samples,
                    kernel,
                    c.statistics.bandwidth_actual,
                    grid,
                    clamp=violin.clamp,
                    series=c.name or "ALL",
                    logger=logger,
                )
            domain = extended_domain(data_domain, list(densities.values()))
            if domain != data_domain:
                logger.debug(f"Extending value-axis domain from {data_domain} to {domain}")

        with profiler.stage("layout (extended domain)"):
            layout = resolve_layout(viewport_width, viewport_height, value_domain=domain, **layout_kwargs)

    with profiler.stage("scales"):
        resolved: list[Category] = []
        for c, display_name in zip(categories, layout.category_names):
            density = densities.get(c.name)
            if density is None:
                resolved.append(replace(c, display_name=display_name))
                continue
            resolved.append(
                replace(
                    c,
                    display_name=display_name,
                    density=density.points,
                    interpolate_min=density.interpolate_min,
                    interpolate_max=density.interpolate_max,
                    half_width_scale=(
                        silhouette_scale(density.points, layout.violin_plot.width)
                        if layout.violin_plot is not None
                        else None
                    ),
                )
            )

    logger.info(
        f"Built view model: {len(resolved)} categories, {statistics.count} samples, "
        f"reduced={aggregation.categories_reduced}, "
        f"collapsed=(value={layout.value_axis.collapsed}, category={layout.category_axis.collapsed})"
    )
    return ViewModel(
        should_render=True,
        categories=tuple(resolved),
        has_category_names=aggregation.has_category_names,
        categories_reduced=aggregation.categories_reduced,
        category_collapsed_count=layout.category_collapsed_count,
        categories_all_collapsed=layout.categories_all_collapsed,
        statistics=statistics,
        value_axis=layout.value_axis,
        category_axis=layout.category_axis,
        violin_plot=layout.violin_plot,
        box_plot=layout.box_plot,
        barcode_plot=layout.barcode_plot,
        measure_name=measure_name or value_col,
        category_name=category_col,
        profiling=profiler.entries,
    )
