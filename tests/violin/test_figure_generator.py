"""Tests for Plotly figure export of a ViewModel."""

import numpy as np

from violinkit.violin.algorithms.aggregate import samples_frame
from violinkit.violin.figure_generator import PLACEHOLDER_TEXT, FigureGenerator
from violinkit.violin.models import ViewModel
from violinkit.violin.settings import ComboPlotType, ViolinSettings
from violinkit.violin.view_model import build_view_model


def test_make_figure_returns_plotly_dict(two_category_df):
    vm = build_view_model(two_category_df, category_col="category")
    fig = FigureGenerator().make_figure(vm)
    assert isinstance(fig, dict)
    assert "data" in fig and "layout" in fig
    assert len(fig["data"]) > 0
    assert list(fig["layout"]["xaxis"]["ticktext"]) == ["A", "B"]
    assert list(fig["layout"]["yaxis"]["range"]) == list(vm.value_axis.domain)


def test_violin_silhouette_is_mirrored(outlier_df):
    vm = build_view_model(outlier_df)
    fig = FigureGenerator().make_figure(vm)
    violin = fig["data"][0]
    xs = list(violin["x"])
    n = len(xs) // 2
    for left, right in zip(xs[:n], reversed(xs[n:])):
        assert abs(left + right) < 1e-9  # centred on category 0


def test_placeholder_for_empty_view_model():
    fig = FigureGenerator().make_figure(ViewModel.empty())
    assert fig["layout"]["annotations"][0]["text"] == PLACEHOLDER_TEXT
    assert len(fig["data"]) == 0


def test_placeholder_for_collapsed_axes(two_category_df):
    vm = build_view_model(two_category_df, category_col="category", viewport_width=50, viewport_height=50)
    fig = FigureGenerator().make_figure(vm)
    assert fig["layout"]["annotations"][0]["text"] == PLACEHOLDER_TEXT


def test_barcode_and_column_plots(two_category_df):
    for plot_type in (ComboPlotType.BARCODE, ComboPlotType.COLUMN):
        settings = ViolinSettings()
        settings.data_points.plot_type = plot_type
        vm = build_view_model(two_category_df, settings, category_col="category")
        fig = FigureGenerator(settings).make_figure(vm)
        names = {trace.get("name") for trace in fig["data"]}
        expected = "samples" if plot_type is ComboPlotType.BARCODE else "column"
        assert expected in names


def test_zero_width_bands_give_finite_traces():
    n = 100
    values = list(range(2 * n))
    categories = [f"c{i // 2:03d}" for i in values]
    vm = build_view_model(samples_frame(values, categories), category_col="category", viewport_width=120)
    assert vm.plot_available is True
    assert vm.violin_plot.category_width == 0
    fig = FigureGenerator().make_figure(vm)
    for trace in fig["data"]:
        xs = [x for x in trace["x"] if x is not None]
        assert np.all(np.isfinite(np.asarray(xs, dtype=float)))
