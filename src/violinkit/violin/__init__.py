"""Violin plot pipeline: aggregation, bandwidth, density, layout and view model."""

from violinkit.violin.algorithms.aggregate import samples_frame
from violinkit.violin.figure_generator import FigureGenerator
from violinkit.violin.layout import LayoutResult, resolve_layout
from violinkit.violin.models import Category, Statistics, ViewModel
from violinkit.violin.report import statistics_report, statistics_table
from violinkit.violin.settings import ViolinSettings
from violinkit.violin.settings_config import ViolinConfig
from violinkit.violin.view_model import build_view_model

__all__ = [
    "Category",
    "FigureGenerator",
    "LayoutResult",
    "Statistics",
    "ViewModel",
    "ViolinConfig",
    "ViolinSettings",
    "build_view_model",
    "resolve_layout",
    "samples_frame",
    "statistics_report",
    "statistics_table",
]
