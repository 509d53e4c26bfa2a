"""Plotly figure generation from a resolved ViewModel.

This module provides the FigureGenerator class for turning a ViewModel into a
Plotly figure dictionary: mirrored violin silhouettes per category plus the
configured combo plot (box, min/max column or barcode). The ViewModel already
holds every pixel decision, so the figure only translates band-relative pixel
widths into category-axis units.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import plotly.graph_objects as go

from violinkit.utils.logging import get_logger
from violinkit.violin.models import Category, ViewModel
from violinkit.violin.settings import ComboPlotType, ViolinSettings

logger = get_logger(__name__)

PLACEHOLDER_TEXT = "Not enough space or data to display the plot"
BOX_FILL_COLOUR = "rgba(0, 0, 0, 0.6)"
FEATURE_COLOUR = "#ffffff"


class FigureGenerator:
    """Generates Plotly figure dictionaries from a ViewModel.

    Attributes:
        settings: Plot settings (combo plot type, stroke width).
    """

    def __init__(self, settings: Optional[ViolinSettings] = None) -> None:
        self.settings = settings or ViolinSettings()

    def make_figure(self, vm: ViewModel) -> dict:
        """Generate a Plotly figure dictionary for the view model.

        Returns a placeholder figure (annotation only) when the view model
        should not render or an axis collapsed.
        """
        if not vm.plot_available:
            logger.info(
                f"FigureGenerator.make_figure: placeholder (should_render={vm.should_render}, "
                f"value_collapsed={vm.value_axis.collapsed}, category_collapsed={vm.category_axis.collapsed})"
            )
            return self._figure_placeholder(vm)

        plot_type = self.settings.data_points.plot_type
        logger.info(
            f"FigureGenerator.make_figure: categories={len(vm.categories)}, plot_type={plot_type.value}"
        )
        fig = go.Figure()
        for i, c in enumerate(vm.categories):
            if c.statistics.is_empty:
                continue
            self._add_violin(fig, vm, i, c)
            if plot_type is ComboPlotType.BOX:
                self._add_box(fig, vm, i, c)
            elif plot_type is ComboPlotType.COLUMN:
                self._add_column(fig, vm, i, c)
            elif plot_type is ComboPlotType.BARCODE:
                self._add_barcode(fig, vm, i, c)

        fig.update_layout(**self._layout(vm))
        return fig.to_dict()

    # -------------------------------------------------------------------------
    # Traces
    # -------------------------------------------------------------------------

    def _units(self, vm: ViewModel, px: float) -> float:
        """Convert a band-relative pixel width to category-axis units (1 unit = one band)."""
        band = vm.violin_plot.category_width
        return px / band if band > 0 else 0.0

    def _add_violin(self, fig: go.Figure, vm: ViewModel, i: int, c: Category) -> None:
        if not c.density or c.half_width_scale is None:
            return
        xs = np.array([p.x for p in c.density])
        half = np.asarray(c.half_width_scale(np.array([p.y for p in c.density])), dtype=float)
        band = vm.violin_plot.category_width
        half_units = half / band if band > 0 else np.zeros_like(half)
        fig.add_trace(go.Scatter(
            x=np.concatenate([i - half_units, (i + half_units)[::-1]]),
            y=np.concatenate([xs, xs[::-1]]),
            mode="lines",
            fill="toself",
            fillcolor=c.colour,
            line=dict(color=c.colour, width=1.5),
            name=c.display_name.formatted_name,
            hoverinfo="skip",
            showlegend=False,
        ))

    def _add_rect(self, fig: go.Figure, i: int, half: float, y0: float, y1: float, name: str) -> None:
        fig.add_trace(go.Scatter(
            x=[i - half, i + half, i + half, i - half, i - half],
            y=[y0, y0, y1, y1, y0],
            mode="lines",
            fill="toself",
            fillcolor=BOX_FILL_COLOUR,
            line=dict(color=BOX_FILL_COLOUR, width=self.settings.data_points.stroke_width),
            name=name,
            hoverinfo="skip",
            showlegend=False,
        ))

    def _add_median_and_mean(self, fig: go.Figure, vm: ViewModel, i: int, c: Category) -> None:
        box = vm.box_plot
        s = c.statistics
        left = self._units(vm, box.feature_x_left) - 0.5
        right = self._units(vm, box.feature_x_right) - 0.5
        fig.add_trace(go.Scatter(
            x=[i + left, i + right],
            y=[s.median, s.median],
            mode="lines",
            line=dict(color=FEATURE_COLOUR, width=self.settings.data_points.stroke_width),
            name="median",
            showlegend=False,
        ))
        if box.actual_mean_diameter > 0:
            fig.add_trace(go.Scatter(
                x=[i],
                y=[s.mean],
                mode="markers",
                marker=dict(size=box.actual_mean_diameter, color=FEATURE_COLOUR),
                name="mean",
                showlegend=False,
            ))

    def _add_box(self, fig: go.Figure, vm: ViewModel, i: int, c: Category) -> None:
        s = c.statistics
        half = self._units(vm, vm.box_plot.width) / 2
        fig.add_trace(go.Scatter(
            x=[i, i, None, i, i],
            y=[s.confidence_lower, s.quartile1, None, s.quartile3, s.confidence_upper],
            mode="lines",
            line=dict(color=BOX_FILL_COLOUR, width=self.settings.data_points.stroke_width / 2),
            name="whiskers",
            hoverinfo="skip",
            showlegend=False,
        ))
        self._add_rect(fig, i, half, s.quartile1, s.quartile3, "box")
        self._add_median_and_mean(fig, vm, i, c)

    def _add_column(self, fig: go.Figure, vm: ViewModel, i: int, c: Category) -> None:
        s = c.statistics
        half = self._units(vm, vm.box_plot.width) / 2
        self._add_rect(fig, i, half, s.min, s.max, "column")
        self._add_median_and_mean(fig, vm, i, c)

    def _add_barcode(self, fig: go.Figure, vm: ViewModel, i: int, c: Category) -> None:
        barcode = vm.barcode_plot
        left = i + self._units(vm, barcode.x_left) - 0.5
        right = i + self._units(vm, barcode.x_right) - 0.5
        pairs = c.samples_aggregated or tuple((v, 1) for v in sorted(set(c.samples)))
        x: list[Optional[float]] = []
        y: list[Optional[float]] = []
        for value, _count in pairs:
            x.extend([left, right, None])
            y.extend([value, value, None])
        fig.add_trace(go.Scatter(
            x=x,
            y=y,
            mode="lines",
            line=dict(color=BOX_FILL_COLOUR, width=1),
            name="samples",
            customdata=[count for _value, count in pairs for _ in range(3)],
            hovertemplate="value=%{y}<br>count=%{customdata}<extra></extra>",
            showlegend=False,
        ))

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------

    def _layout(self, vm: ViewModel) -> dict:
        va = vm.value_axis
        ca = vm.category_axis
        show_category_labels = vm.has_category_names and not vm.categories_all_collapsed
        layout = dict(
            margin=dict(l=40, r=20, t=20, b=40),
            showlegend=False,
            uirevision="keep",
            xaxis=dict(
                tickmode="array",
                tickvals=list(range(len(vm.categories))),
                ticktext=[
                    c.display_name.tailored_name if show_category_labels else ""
                    for c in vm.categories
                ],
                range=[-0.5, len(vm.categories) - 0.5],
                zeroline=False,
            ),
            yaxis=dict(
                range=list(va.domain),
                tickmode="array",
                tickvals=list(va.ticks),
                ticktext=list(va.ticks_formatted),
                zeroline=False,
            ),
        )
        if va.title is not None and va.title_dimensions.width > 0:
            layout["yaxis"]["title"] = dict(text=va.title.tailored_name)
        if ca.title is not None and ca.title_dimensions.height > 0:
            layout["xaxis"]["title"] = dict(text=ca.title.tailored_name)
        return layout

    def _figure_placeholder(self, vm: ViewModel) -> dict:
        fig = go.Figure()
        fig.add_annotation(
            text=PLACEHOLDER_TEXT,
            x=0.5,
            y=0.5,
            xref="paper",
            yref="paper",
            showarrow=False,
        )
        fig.update_layout(
            xaxis=dict(visible=False),
            yaxis=dict(visible=False),
            margin=dict(l=0, r=0, t=0, b=0),
            showlegend=False,
        )
        return fig.to_dict()
