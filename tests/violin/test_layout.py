"""Unit tests for the layout resolver and plot-band geometry."""

import pytest

from violinkit.violin.layout import (
    BARCODE_TOOLTIP_RATIO,
    box_geometry,
    recommended_tick_count,
    resolve_layout,
    violin_geometry,
)
from violinkit.violin.models import AxisGeometry
from violinkit.violin.settings import DataPointOptions, ViolinSettings

NAMES = ["A", "B"]
LABEL_HEIGHT = 11 * 1.2  # default font size with ApproximateTextMeasurer


def _layout(width, height, settings=None, **kwargs):
    kwargs.setdefault("value_domain", (0.0, 10.0))
    kwargs.setdefault("category_names", NAMES)
    kwargs.setdefault("has_category_names", True)
    kwargs.setdefault("reference_value", 10.0)
    return resolve_layout(width, height, settings or ViolinSettings(), **kwargs)


def _sizes(axis: AxisGeometry):
    for dims in (axis.dimensions, axis.title_dimensions, axis.label_dimensions):
        yield dims.width
        yield dims.height


@pytest.mark.parametrize("height, expected", [(100, 3), (149.9, 3), (150, 5), (299, 5), (300, 8), (900, 8)])
def test_recommended_tick_count(height, expected):
    assert recommended_tick_count(height) == expected


def test_tiny_viewport_collapses_both_axes():
    result = _layout(50, 50)
    assert result.value_axis.collapsed is True
    assert result.category_axis.collapsed is True
    assert result.violin_plot is None
    assert result.box_plot is None
    assert result.barcode_plot is None
    assert all(v == 0 for v in _sizes(result.value_axis))
    assert all(v == 0 for v in _sizes(result.category_axis))


def test_comfortable_viewport_geometry():
    result = _layout(600, 400)
    va, ca = result.value_axis, result.category_axis
    assert not va.collapsed and not ca.collapsed
    assert va.domain == (0.0, 10.0)
    assert len(va.ticks) == 11
    assert va.ticks_formatted[-1] == "10"
    assert va.dimensions.height == pytest.approx(400 - 5.5 - LABEL_HEIGHT - 5)
    assert va.label_dimensions.width == pytest.approx(2 * 11 * 0.55 + 5)
    assert ca.dimensions.width == pytest.approx(600 - va.dimensions.width)
    assert ca.band_width == 291.0
    assert ca.band_offsets == (0.0, 291.0)

    assert result.violin_plot.category_width == 291.0
    assert result.violin_plot.width == pytest.approx(291 * 0.8)
    assert result.box_plot.width == pytest.approx(291 * 0.8 * 0.25)
    assert result.box_plot.actual_mean_radius == pytest.approx(3.0)
    assert result.box_plot.x_left == pytest.approx(291 / 2 - result.box_plot.width / 2)
    assert result.barcode_plot.tooltip_width == pytest.approx(result.box_plot.width * BARCODE_TOOLTIP_RATIO)
    assert result.category_collapsed_count == 0
    assert result.categories_all_collapsed is False


def _with_category_title():
    settings = ViolinSettings()
    settings.category_axis.show_title = True
    return settings


def test_height_cascade_frees_category_title_first():
    result = _layout(600, 105, _with_category_title(), category_title="Group")
    ca = result.category_axis
    assert result.value_axis.collapsed is False
    assert ca.title_dimensions.height == 0
    assert ca.label_dimensions.height == pytest.approx(LABEL_HEIGHT)


def test_height_cascade_frees_labels_second():
    result = _layout(600, 90, _with_category_title(), category_title="Group")
    ca = result.category_axis
    assert result.value_axis.collapsed is False
    assert ca.title_dimensions.height == 0
    assert ca.label_dimensions.height == 0
    assert ca.dimensions.height == 0


def test_freed_labels_return_their_padding_to_value_axis():
    result = _layout(600, 90, _with_category_title(), category_title="Group")
    # whole viewport height minus the half-font top pad
    assert result.value_axis.range[0] == pytest.approx(90 - 11 / 2)


def test_height_cascade_collapses_value_axis_last():
    result = _layout(600, 70, _with_category_title(), category_title="Group")
    assert result.value_axis.collapsed is True
    assert result.violin_plot is None


def test_category_title_kept_with_room():
    result = _layout(600, 400, _with_category_title(), category_title="Group")
    ca = result.category_axis
    assert ca.title.tailored_name == "Group"
    assert ca.title_dimensions.height == pytest.approx(LABEL_HEIGHT)


def _with_value_title():
    settings = ViolinSettings()
    settings.value_axis.show_title = True
    return settings


def test_width_cascade_frees_value_title_first():
    result = _layout(100, 400, _with_value_title(), measure_title="Value")
    va = result.value_axis
    assert result.category_axis.collapsed is False
    assert va.title_dimensions.width == 0
    assert va.label_dimensions.width == pytest.approx(2 * 11 * 0.55 + 5)


def test_width_cascade_frees_value_labels_second():
    result = _layout(80, 400, _with_value_title(), measure_title="Value")
    va = result.value_axis
    assert result.category_axis.collapsed is False
    assert va.label_dimensions.width == 0
    assert va.dimensions.width == 0
    assert set(va.ticks_formatted) == {""}


def test_width_cascade_collapses_category_axis_last():
    result = _layout(60, 400, _with_value_title(), measure_title="Value")
    assert result.value_axis.collapsed is False
    assert result.category_axis.collapsed is True
    assert result.violin_plot is None


def test_value_title_kept_with_room():
    result = _layout(600, 400, _with_value_title(), measure_title="Value")
    va = result.value_axis
    assert va.title.tailored_name == "Value"
    assert va.title_dimensions.width == pytest.approx(LABEL_HEIGHT)
    assert va.dimensions.x == va.title_dimensions.width


@pytest.mark.parametrize(
    "width, height",
    [(10, 10), (50, 50), (80, 300), (300, 80), (120, 120), (600, 400), (1000, 1000)],
)
def test_sizes_never_negative(width, height):
    result = _layout(width, height, _with_category_title(), category_title="Group")
    assert all(v >= 0 for v in _sizes(result.value_axis))
    assert all(v >= 0 for v in _sizes(result.category_axis))


def test_fixed_start_end_are_not_niced():
    settings = ViolinSettings()
    settings.value_axis.start = 0.0
    settings.value_axis.end = 50.0
    result = _layout(600, 400, settings, value_domain=(3.0, 47.0))
    assert result.value_axis.domain == (0.0, 50.0)


def test_degenerate_domain_is_widened():
    result = _layout(600, 400, value_domain=(5.0, 5.0))
    lo, hi = result.value_axis.domain
    assert lo < 5.0 < hi


def test_all_labels_collapsed_frees_label_space():
    names = [f"category {i}" for i in range(10)]
    result = _layout(150, 400, category_names=names)
    assert result.categories_all_collapsed is True
    assert result.category_collapsed_count == 10
    assert result.category_axis.label_dimensions.height == 0
    assert result.value_axis.dimensions.height == pytest.approx(400 - 5.5)


def test_no_category_names_reserves_no_label_space():
    result = _layout(600, 400, category_names=[""], has_category_names=False)
    assert result.category_axis.dimensions.height == 0


def test_resolve_layout_is_idempotent():
    assert _layout(320, 240) == _layout(320, 240)


def test_box_geometry_drops_mean_marker_without_room():
    box = box_geometry(violin_geometry(0.0, 20), DataPointOptions())
    assert box.width == 0
    assert box.actual_mean_diameter == 0


def test_box_geometry_scales_mean_marker():
    violin = violin_geometry(50.0, 20)
    box = box_geometry(violin, DataPointOptions(inner_padding=75))
    # box width 10 -> scaled radius 2 < max radius 3
    assert box.width == pytest.approx(10.0)
    assert box.actual_mean_radius == pytest.approx(2.0)
    assert box.feature_x_left == pytest.approx(box.x_left + 1.0)
