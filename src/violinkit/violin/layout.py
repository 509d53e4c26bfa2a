"""
Layout resolution: allocate viewport pixels between the value axis (vertical,
numeric), the category axis (horizontal, banded) and the plot bands.

Steps:
  1. Category-axis vertical space = title height + label height + top padding.
  2. Value-axis height = viewport height - half the value font size - that
     space. Below height_limit, free the category title, then the category
     labels, then collapse the value axis (re-checking after each step).
  3. Re-tailor the value-axis title against the resolved height.
  4. Value-axis ticks (3/5/8 by height), nice domain unless start/end is
     fixed, width = widest of first/last tick label + left padding + rotated
     title height. Category width = viewport width - value-axis width; below
     width_limit, free the value title, then its labels, then collapse the
     category axis.
  5. Re-tailor the category title against the category width and labels
     against the band width.
  6. Violin/box/barcode geometry from the band width and inner paddings.

resolve_layout() is a pure function of its inputs and may be called on its
own whenever only the viewport changes.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from violinkit.utils.logging import get_logger
from violinkit.violin.formatting import create_formatter, value_axis_title
from violinkit.violin.models import (
    AxisGeometry,
    BarcodePlotGeometry,
    BoxPlotGeometry,
    Dimensions,
    DisplayName,
    ViolinPlotGeometry,
)
from violinkit.violin.scales import band_layout, nice_domain, ticks
from violinkit.violin.settings import AxisSettings, DataPointOptions, ViolinSettings
from violinkit.violin.text_measurement import (
    ApproximateTextMeasurer,
    FontSpec,
    TextMeasurer,
    tailor_display_name,
)

logger = get_logger(__name__)

CATEGORY_AXIS_PADDING_TOP = 5
VALUE_AXIS_PADDING_LEFT = 5
BARCODE_TOOLTIP_RATIO = 1.4


@dataclass(frozen=True)
class LayoutResult:
    value_axis: AxisGeometry
    category_axis: AxisGeometry
    violin_plot: Optional[ViolinPlotGeometry]
    box_plot: Optional[BoxPlotGeometry]
    barcode_plot: Optional[BarcodePlotGeometry]
    category_names: tuple[DisplayName, ...]
    category_collapsed_count: int
    categories_all_collapsed: bool

    @property
    def collapsed(self) -> bool:
        return self.value_axis.collapsed or self.category_axis.collapsed


def recommended_tick_count(height: float) -> int:
    """Tick count for a vertical axis of the given pixel height."""
    if height < 150:
        return 3
    if height < 300:
        return 5
    return 8


def value_domain_with_overrides(
    domain: tuple[float, float],
    axis: AxisSettings,
) -> tuple[float, float]:
    """Apply fixed start/end values; a degenerate domain is widened around its value."""
    lo = axis.start if axis.start is not None else domain[0]
    hi = axis.end if axis.end is not None else domain[1]
    if lo == hi:
        pad = abs(lo) * 0.1 if lo != 0 else 1.0
        if axis.start is None:
            lo -= pad
        if axis.end is None:
            hi += pad
    return float(lo), float(hi)


def _title_shown(axis: AxisSettings, title: Optional[DisplayName]) -> bool:
    return (
        axis.show
        and axis.show_title
        and title is not None
        and not title.collapsed
        and title.tailored_name != ""
    )


def _tailor_labels(
    names: Sequence[str],
    font: FontSpec,
    width: float,
    measurer: TextMeasurer,
) -> tuple[tuple[DisplayName, ...], int, bool]:
    labels = tuple(tailor_display_name(n, font, width, measurer) for n in names)
    collapsed = sum(1 for d in labels if d.collapsed)
    return labels, collapsed, bool(labels) and collapsed == len(labels)


# -----------------------------------------------------------------------------
# Plot-band geometry
# -----------------------------------------------------------------------------


def violin_geometry(band_width: float, inner_padding: float) -> ViolinPlotGeometry:
    return ViolinPlotGeometry(
        category_width=band_width,
        width=band_width - band_width * (inner_padding / 100),
    )


def box_geometry(violin: ViolinPlotGeometry, options: DataPointOptions) -> BoxPlotGeometry:
    """Box geometry inside a violin; the mean marker is dropped if it cannot fit."""
    width = violin.width - violin.width * (options.inner_padding / 100)
    max_mean_radius = options.max_mean_radius
    max_mean_diameter = max_mean_radius * 2
    scaled_mean_radius = width / 5
    scaled_mean_diameter = scaled_mean_radius * 2
    if min(scaled_mean_diameter, max_mean_diameter) >= width:
        actual_mean_diameter = 0.0
    else:
        actual_mean_diameter = min(scaled_mean_diameter, max_mean_diameter)
    x_left = violin.category_width / 2 - width / 2
    x_right = violin.category_width / 2 + width / 2
    return BoxPlotGeometry(
        width=width,
        max_mean_radius=max_mean_radius,
        max_mean_diameter=max_mean_diameter,
        scaled_mean_radius=scaled_mean_radius,
        scaled_mean_diameter=scaled_mean_diameter,
        actual_mean_radius=actual_mean_diameter / 2,
        actual_mean_diameter=actual_mean_diameter,
        x_left=x_left,
        x_right=x_right,
        feature_x_left=x_left + options.stroke_width / 2,
        feature_x_right=x_right - options.stroke_width / 2,
    )


def barcode_geometry(violin: ViolinPlotGeometry, box: BoxPlotGeometry) -> BarcodePlotGeometry:
    tooltip_width = box.width * BARCODE_TOOLTIP_RATIO
    return BarcodePlotGeometry(
        width=box.width,
        x_left=box.x_left,
        x_right=box.x_right,
        tooltip_width=tooltip_width,
        feature_x_left=violin.category_width / 2 - tooltip_width / 2,
        feature_x_right=violin.category_width / 2 + tooltip_width / 2,
    )


# -----------------------------------------------------------------------------
# Resolution
# -----------------------------------------------------------------------------


def _resolve(
    viewport_width: float,
    viewport_height: float,
    settings: ViolinSettings,
    *,
    value_domain: tuple[float, float],
    category_names: Sequence[str],
    has_category_names: bool,
    value_title_text: str,
    category_title_text: str,
    reference_value: float,
    labels_all_collapsed: bool,
    measurer: TextMeasurer,
    logger: logging.Logger,
) -> LayoutResult:
    va = settings.value_axis
    ca = settings.category_axis
    value_font = FontSpec(va.font_family, va.font_size)
    value_title_font = FontSpec(va.title_font_family, va.title_font_size)
    category_font = FontSpec(ca.font_family, ca.font_size)
    category_title_font = FontSpec(ca.title_font_family, ca.title_font_size)

    value_title = (
        tailor_display_name(value_title_text, value_title_font, viewport_height, measurer)
        if va.show_title
        else None
    )
    category_title = (
        tailor_display_name(category_title_text, category_title_font, viewport_width, measurer)
        if ca.show_title
        else None
    )

    # Category axis: vertical space
    cat_title_h = (
        measurer.measure(category_title.tailored_name, category_title_font).height
        if _title_shown(ca, category_title)
        else 0.0
    )
    labels_shown = ca.show and has_category_names and ca.show_labels and not labels_all_collapsed
    label_text = category_names[0] if category_names else ""
    cat_label_h = measurer.measure(label_text, category_font).height if labels_shown else 0.0
    cat_h = cat_title_h + cat_label_h + (CATEGORY_AXIS_PADDING_TOP if labels_shown else 0.0)
    logger.debug(f"Category axis height: title={cat_title_h}, labels={cat_label_h}, total={cat_h}")

    # Value axis: height cascade
    y_pad = va.font_size / 2
    y_height = viewport_height - y_pad - cat_h
    value_collapsed = False
    if y_height < va.height_limit and cat_title_h > 0:
        logger.debug("Freeing category-axis title to make room for the value axis")
        y_height += cat_title_h
        cat_h -= cat_title_h
        cat_title_h = 0.0
    if y_height < va.height_limit and cat_title_h == 0 and cat_label_h > 0:
        logger.debug("Freeing category-axis labels to make room for the value axis")
        y_height += cat_h  # labels and their top padding
        cat_label_h = 0.0
        cat_h = 0.0
    if y_height < va.height_limit and cat_h == 0:
        logger.debug(f"Value axis too short to render ({y_height} < {va.height_limit})")
        value_collapsed = True

    domain = value_domain_with_overrides(value_domain, va)
    formatter = create_formatter(va.label_display_units, reference_value, va.precision)

    if value_collapsed:
        value_title_w = 0.0
        value_label_w = 0.0
        tick_values: tuple[float, ...] = ()
        ticks_formatted: tuple[str, ...] = ()
    else:
        if value_title is not None:
            value_title = tailor_display_name(value_title_text, value_title_font, y_height, measurer)
        tick_count = recommended_tick_count(y_height)
        if va.start is None and va.end is None:
            domain = nice_domain(domain[0], domain[1], tick_count)
        tick_values = tuple(float(t) for t in ticks(domain[0], domain[1], tick_count))
        ticks_formatted = tuple(formatter.format(t) if va.show_labels else "" for t in tick_values)
        value_title_w = (
            measurer.measure(value_title.tailored_name, value_title_font).height
            if _title_shown(va, value_title)
            else 0.0
        )
        if va.show and va.show_labels and ticks_formatted:
            value_label_w = (
                max(
                    measurer.measure(ticks_formatted[0], value_font).width,
                    measurer.measure(ticks_formatted[-1], value_font).width,
                )
                + VALUE_AXIS_PADDING_LEFT
            )
        else:
            value_label_w = 0.0
    value_w = value_title_w + value_label_w
    logger.debug(f"Value axis width: title={value_title_w}, labels={value_label_w}, total={value_w}")

    # Category axis: width cascade
    x_width = viewport_width - value_w
    if x_width < ca.width_limit and value_title_w > 0:
        logger.debug("Freeing value-axis title to make room for the category axis")
        x_width += value_title_w
        value_w -= value_title_w
        value_title_w = 0.0
    if x_width < ca.width_limit and value_title_w == 0 and value_label_w > 0:
        logger.debug("Freeing value-axis labels to make room for the category axis")
        x_width += value_label_w
        value_label_w = 0.0
        value_w = 0.0
    category_collapsed = x_width < ca.width_limit and value_w == 0
    if category_collapsed:
        logger.debug(f"Category axis too narrow to render ({x_width} < {ca.width_limit})")
    if value_label_w == 0:
        ticks_formatted = tuple("" for _ in ticks_formatted)

    if category_title is not None:
        category_title = tailor_display_name(category_title_text, category_title_font, max(0.0, x_width), measurer)

    if value_collapsed:
        value_axis = AxisGeometry(domain=domain, collapsed=True, title=value_title)
    else:
        value_axis = AxisGeometry(
            domain=domain,
            range=(y_height, y_pad),
            collapsed=False,
            title=value_title,
            title_dimensions=Dimensions(width=value_title_w, height=y_height, x=-y_height / 2, y=0.0),
            label_dimensions=Dimensions(width=value_label_w),
            dimensions=Dimensions(width=value_w, height=y_height, x=value_title_w, y=y_pad),
            ticks=tick_values,
            ticks_formatted=ticks_formatted,
        )

    names = tuple(category_names)
    if value_collapsed or category_collapsed:
        labels, collapsed_count, all_collapsed = _tailor_labels(
            names, category_font, viewport_width / max(1, len(names)), measurer
        )
        category_axis = AxisGeometry(
            domain=names,
            collapsed=category_collapsed,
            title=category_title,
        )
        return LayoutResult(
            value_axis=value_axis,
            category_axis=category_axis,
            violin_plot=None,
            box_plot=None,
            barcode_plot=None,
            category_names=labels,
            category_collapsed_count=collapsed_count,
            categories_all_collapsed=all_collapsed,
        )

    bands = band_layout(len(names), x_width)
    labels, collapsed_count, all_collapsed = _tailor_labels(names, category_font, bands.band_width, measurer)
    category_axis = AxisGeometry(
        domain=names,
        range=(0.0, x_width),
        collapsed=False,
        title=category_title,
        title_dimensions=Dimensions(height=cat_title_h, x=value_w + x_width / 2, y=viewport_height - cat_title_h),
        label_dimensions=Dimensions(height=cat_label_h),
        dimensions=Dimensions(width=x_width, height=cat_h),
        band_width=bands.band_width,
        band_offsets=bands.offsets,
    )
    violin = violin_geometry(bands.band_width, settings.violin.inner_padding)
    box = box_geometry(violin, settings.data_points)
    return LayoutResult(
        value_axis=value_axis,
        category_axis=category_axis,
        violin_plot=violin,
        box_plot=box,
        barcode_plot=barcode_geometry(violin, box),
        category_names=labels,
        category_collapsed_count=collapsed_count,
        categories_all_collapsed=all_collapsed,
    )


def resolve_layout(
    viewport_width: float,
    viewport_height: float,
    settings: ViolinSettings,
    *,
    value_domain: tuple[float, float],
    category_names: Sequence[str] = (),
    has_category_names: bool = False,
    measure_title: str = "",
    category_title: Optional[str] = None,
    reference_value: float = math.nan,
    measurer: Optional[TextMeasurer] = None,
    logger: logging.Logger = logger,
) -> LayoutResult:
    """Resolve axis and plot-band geometry for a viewport.

    Args:
        viewport_width: Available width in px.
        viewport_height: Available height in px.
        settings: Plot settings; axis limits, fonts, titles and paddings are read from here.
        value_domain: (min, max) of the value axis before niceness/overrides.
        category_names: Category names in display order.
        has_category_names: False when the data has no category column.
        measure_title: Default value-axis title (measure name).
        category_title: Default category-axis title (category column name).
        reference_value: Value used to pick automatic display units (usually the data max).
        measurer: Text measurer; defaults to ApproximateTextMeasurer.
        logger: Logger for cascade decisions.

    Returns:
        LayoutResult. When either axis collapsed, plot geometry is None.
    """
    measurer = measurer or ApproximateTextMeasurer()
    va = settings.value_axis
    ca = settings.category_axis
    formatter = create_formatter(va.label_display_units, reference_value, va.precision)
    value_title_text = value_axis_title(va.title_text or measure_title, va.title_style, formatter)
    category_title_text = ca.title_text or category_title or ""

    names = list(category_names)
    _, _, all_collapsed = _tailor_labels(
        names,
        FontSpec(ca.font_family, ca.font_size),
        viewport_width / max(1, len(names)),
        measurer,
    )

    kwargs = dict(
        value_domain=value_domain,
        category_names=names,
        has_category_names=has_category_names,
        value_title_text=value_title_text,
        category_title_text=category_title_text,
        reference_value=reference_value,
        measurer=measurer,
        logger=logger,
    )
    result = _resolve(viewport_width, viewport_height, settings, labels_all_collapsed=all_collapsed, **kwargs)
    # Label collapse state can change once band widths are known
    if not result.collapsed and result.categories_all_collapsed != all_collapsed:
        logger.debug("Category label collapse changed with band width; resolving again")
        result = _resolve(
            viewport_width,
            viewport_height,
            settings,
            labels_all_collapsed=result.categories_all_collapsed,
            **kwargs,
        )
    return result
