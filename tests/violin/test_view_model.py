"""End-to-end tests for ViewModel assembly."""

import math

import numpy as np
import pandas as pd
import pytest

from violinkit.violin.algorithms.bandwidth import SIGMA_EPSILON
from violinkit.violin.algorithms.kernels import KERNELS
from violinkit.violin.algorithms.aggregate import samples_frame
from violinkit.violin.settings import Kernel, SortBy, SortOrder, ViolinSettings
from violinkit.violin.view_model import build_view_model


def test_outlier_series(outlier_df):
    vm = build_view_model(outlier_df)
    assert vm.should_render is True
    assert vm.plot_available is True
    assert vm.has_category_names is False
    assert len(vm.categories) == 1

    c = vm.categories[0]
    s = c.statistics
    assert s.quartile1 == pytest.approx(2.25)
    assert s.median == pytest.approx(3.5)
    assert s.quartile3 == pytest.approx(4.75)
    assert s.quartile3 < s.confidence_upper <= 100.0
    assert s.bandwidth_actual > 0.0

    h = s.bandwidth_actual
    assert c.density[0].y == 0.0
    assert c.density[-1].y == 0.0
    assert 100.0 < c.interpolate_max <= 100.0 + h
    assert 1.0 - h <= c.interpolate_min < 1.0

    lo, hi = vm.value_axis.domain
    assert lo <= c.interpolate_min
    assert hi >= c.interpolate_max


def test_zero_variance_category_does_not_fail(two_category_df):
    vm = build_view_model(two_category_df, category_col="category")
    assert [c.name for c in vm.categories] == ["A", "B"]
    a = vm.categories[0]
    assert a.statistics.count == 4
    assert a.statistics.bandwidth_actual > 0.0
    peak = max(a.density, key=lambda p: p.y)
    assert peak.x == pytest.approx(1.0)


@pytest.mark.parametrize("value", [42.1, 1.003, 1234.567])
def test_constant_series_off_tick_renders_spike(value):
    vm = build_view_model(samples_frame([value] * 4))
    (c,) = vm.categories
    peak = max(c.density, key=lambda p: p.y)
    assert peak.x == pytest.approx(value)
    assert peak.y > 0.0
    assert c.density[0].y == 0.0 and c.density[-1].y == 0.0


def test_zero_variance_category_bandwidth_by_category(two_category_df):
    settings = ViolinSettings()
    settings.violin.bandwidth_by_category = True
    vm = build_view_model(two_category_df, settings, category_col="category")
    a, b = vm.categories
    expected = KERNELS[Kernel.EPANECHNIKOV].factor * SIGMA_EPSILON * 4 ** (-1 / 5)
    assert a.statistics.bandwidth_actual == pytest.approx(expected)
    assert b.statistics.bandwidth_actual > a.statistics.bandwidth_actual
    # narrow spike at 1
    assert a.interpolate_max - a.interpolate_min < 0.5
    assert 0.5 < a.interpolate_min < 1.0 < a.interpolate_max < 1.5


def test_tiny_viewport_collapses_without_geometry(two_category_df):
    vm = build_view_model(two_category_df, category_col="category", viewport_width=50, viewport_height=50)
    assert vm.should_render is True
    assert vm.plot_available is False
    assert vm.value_axis.collapsed is True
    assert vm.category_axis.collapsed is True
    assert vm.violin_plot is None
    assert vm.box_plot is None
    assert vm.barcode_plot is None


def test_category_limit_reduces(five_category_df):
    vm = build_view_model(five_category_df, ViolinSettings(category_limit=2), category_col="category")
    assert len(vm.categories) == 2
    assert vm.categories_reduced is True
    assert vm.total_samples == vm.statistics.count == 4


@pytest.mark.parametrize(
    "data",
    [
        None,
        pd.DataFrame({"value": []}),
        pd.DataFrame({"other": [1, 2]}),
        pd.DataFrame({"value": [np.nan, "x", np.inf]}),
    ],
)
def test_unusable_input_does_not_render(data):
    vm = build_view_model(data)
    assert vm.should_render is False
    assert vm.categories == ()


def test_missing_category_column_does_not_render(outlier_df):
    vm = build_view_model(outlier_df, category_col="group")
    assert vm.should_render is False
    assert vm.profiling == ()


def test_clamp_keeps_density_within_sample_extent(two_category_df):
    settings = ViolinSettings()
    settings.violin.clamp = True
    vm = build_view_model(two_category_df, settings, category_col="category")
    for c in vm.categories:
        xs = [p.x for p in c.density]
        assert min(xs) == c.statistics.min
        assert max(xs) == c.statistics.max


def test_counts_sum_and_quartiles_ordered(five_category_df):
    vm = build_view_model(five_category_df, category_col="category")
    assert sum(c.statistics.count for c in vm.categories) == vm.statistics.count == 10
    for c in vm.categories:
        assert c.statistics.quartile1 <= c.statistics.median <= c.statistics.quartile3
        assert all(p.y >= 0 for p in c.density)


def test_sorting_by_median_descending(five_category_df):
    settings = ViolinSettings(sort_by=SortBy.MEDIAN, sort_order=SortOrder.DESCENDING)
    vm = build_view_model(five_category_df, settings, category_col="category")
    assert [c.name for c in vm.categories] == ["c5", "c4", "c3", "c2", "c1"]


def test_silhouette_scale_fits_violin_width(two_category_df):
    vm = build_view_model(two_category_df, category_col="category")
    for c in vm.categories:
        peak = max(p.y for p in c.density)
        assert c.half_width_scale(peak) == pytest.approx(vm.violin_plot.width / 2)


def test_display_names_resolved(two_category_df):
    vm = build_view_model(two_category_df, category_col="category")
    assert [c.display_name.tailored_name for c in vm.categories] == ["A", "B"]
    assert vm.category_collapsed_count == 0


def test_profiling_records_each_stage(outlier_df):
    vm = build_view_model(outlier_df)
    names = [e.name for e in vm.profiling]
    assert names[0] == "aggregate"
    for stage in ("bandwidth", "layout", "density", "scales"):
        assert stage in names
    assert all(e.duration_ms >= 0 for e in vm.profiling)
    assert all(e.end >= e.start for e in vm.profiling)


def test_measure_and_category_names(two_category_df):
    vm = build_view_model(two_category_df, category_col="category", measure_name="Weight")
    assert vm.measure_name == "Weight"
    assert vm.category_name == "category"


def test_custom_column_names():
    df = pd.DataFrame({"weight": [1.0, 2.0, 3.0], "species": ["x", "y", "x"]})
    vm = build_view_model(df, value_col="weight", category_col="species")
    assert vm.should_render
    assert {c.name: c.statistics.count for c in vm.categories} == {"x": 2, "y": 1}
    assert vm.measure_name == "weight"


def test_single_sample_series():
    vm = build_view_model(samples_frame([42.0]))
    assert vm.should_render
    c = vm.categories[0]
    assert math.isnan(c.statistics.deviation)
    assert c.statistics.bandwidth_actual > 0
    assert c.density[0].y == 0.0 and c.density[-1].y == 0.0
