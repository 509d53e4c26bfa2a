"""Configuration state for violin plot view model generation.

This module defines the enums and dataclasses that hold every configurable
parameter of the pipeline (kernel, resolution, clamping, bandwidth, sorting,
axes, plot bands, colours, data limits) and serializes them to/from plain
dicts for JSON persistence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from violinkit.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_FONT_SIZE = 11
DEFAULT_FONT_FAMILY = '"Segoe UI", wf_segoe-ui_normal, helvetica, arial, sans-serif'
DEFAULT_FILL_COLOUR = "#636EFA"


class Kernel(Enum):
    """Kernel window functions available for density estimation."""
    EPANECHNIKOV = "epanechnikov"
    GAUSSIAN = "gaussian"
    QUARTIC = "quartic"


class Resolution(Enum):
    """Density evaluation resolution; value is the requested tick count."""
    LOWEST = 25
    LOW = 50
    MEDIUM = 100
    HIGH = 150
    HIGHEST = 200


class SortBy(Enum):
    CATEGORY = "category"
    SAMPLES = "samples"
    MEDIAN = "median"
    MEAN = "mean"
    MIN = "min"
    MAX = "max"


class SortOrder(Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class ComboPlotType(Enum):
    """Plot drawn inside each violin."""
    BOX = "boxPlot"
    BARCODE = "barcodePlot"
    COLUMN = "columnPlot"


class TitleStyle(Enum):
    """How the value-axis title combines the measure name and display unit."""
    TITLE = "title"
    UNIT = "unit"
    BOTH = "both"


E = TypeVar("E", bound=Enum)


def _enum_or_default(enum_cls: Type[E], raw: Any, default: E) -> E:
    """Parse an enum value, falling back to default (with a warning) if unknown."""
    if isinstance(raw, enum_cls):
        return raw
    if raw is None:
        return default
    try:
        return enum_cls(raw)
    except ValueError:
        logger.warning(f"Unknown {enum_cls.__name__} value {raw!r}, using {default.value!r}")
        return default


def _optional_float(raw: Any) -> Optional[float]:
    if raw is None:
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning(f"Expected a number, got {raw!r}; ignoring")
        return None


@dataclass
class AxisSettings:
    """Settings for one axis (value axis or category axis).

    height_limit applies to the value axis (minimum plot height in px) and
    width_limit to the category axis (minimum plot width in px).
    """
    show: bool = True
    show_labels: bool = True
    font_family: str = DEFAULT_FONT_FAMILY
    font_size: float = DEFAULT_FONT_SIZE
    label_display_units: float = 0  # 0 = auto, 1 = none, else divisor (1e3, 1e6, ...)
    precision: Optional[int] = None
    show_title: bool = False
    title_style: TitleStyle = TitleStyle.TITLE
    title_text: Optional[str] = None
    title_font_family: str = DEFAULT_FONT_FAMILY
    title_font_size: float = DEFAULT_FONT_SIZE
    height_limit: float = 75
    width_limit: float = 75
    start: Optional[float] = None  # value axis only: fixed domain start
    end: Optional[float] = None  # value axis only: fixed domain end

    def to_dict(self) -> dict[str, Any]:
        return {
            "show": self.show,
            "show_labels": self.show_labels,
            "font_family": self.font_family,
            "font_size": self.font_size,
            "label_display_units": self.label_display_units,
            "precision": self.precision,
            "show_title": self.show_title,
            "title_style": self.title_style.value,
            "title_text": self.title_text,
            "title_font_family": self.title_font_family,
            "title_font_size": self.title_font_size,
            "height_limit": self.height_limit,
            "width_limit": self.width_limit,
            "start": self.start,
            "end": self.end,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AxisSettings":
        default = cls()
        precision = data.get("precision")
        return cls(
            show=bool(data.get("show", default.show)),
            show_labels=bool(data.get("show_labels", default.show_labels)),
            font_family=str(data.get("font_family", default.font_family)),
            font_size=float(data.get("font_size", default.font_size)),
            label_display_units=float(data.get("label_display_units", default.label_display_units)),
            precision=int(precision) if precision is not None else None,
            show_title=bool(data.get("show_title", default.show_title)),
            title_style=_enum_or_default(TitleStyle, data.get("title_style"), default.title_style),
            title_text=data.get("title_text"),  # Can be None
            title_font_family=str(data.get("title_font_family", default.title_font_family)),
            title_font_size=float(data.get("title_font_size", default.title_font_size)),
            height_limit=float(data.get("height_limit", default.height_limit)),
            width_limit=float(data.get("width_limit", default.width_limit)),
            start=_optional_float(data.get("start")),
            end=_optional_float(data.get("end")),
        )


@dataclass
class ViolinOptions:
    """Density estimation and violin band options."""
    inner_padding: float = 20  # % of the category band left empty around the violin
    clamp: bool = False  # hard-truncate at the sample extent instead of converging
    resolution: Resolution = Resolution.LOWEST
    kernel: Kernel = Kernel.EPANECHNIKOV
    specify_bandwidth: bool = False
    bandwidth: Optional[float] = None
    bandwidth_by_category: bool = False
    category_bandwidths: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "inner_padding": self.inner_padding,
            "clamp": self.clamp,
            "resolution": self.resolution.name.lower(),
            "kernel": self.kernel.value,
            "specify_bandwidth": self.specify_bandwidth,
            "bandwidth": self.bandwidth,
            "bandwidth_by_category": self.bandwidth_by_category,
            "category_bandwidths": dict(self.category_bandwidths),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ViolinOptions":
        default = cls()
        resolution_raw = data.get("resolution")
        if isinstance(resolution_raw, str):
            resolution = Resolution.__members__.get(resolution_raw.upper())
            if resolution is None:
                logger.warning(f"Unknown Resolution value {resolution_raw!r}, using {default.resolution.name.lower()!r}")
                resolution = default.resolution
        else:
            resolution = _enum_or_default(Resolution, resolution_raw, default.resolution)
        bandwidths = data.get("category_bandwidths")
        if not isinstance(bandwidths, dict):
            bandwidths = {}
        return cls(
            inner_padding=float(data.get("inner_padding", default.inner_padding)),
            clamp=bool(data.get("clamp", default.clamp)),
            resolution=resolution,
            kernel=_enum_or_default(Kernel, data.get("kernel"), default.kernel),
            specify_bandwidth=bool(data.get("specify_bandwidth", default.specify_bandwidth)),
            bandwidth=_optional_float(data.get("bandwidth")),
            bandwidth_by_category=bool(data.get("bandwidth_by_category", default.bandwidth_by_category)),
            category_bandwidths={str(k): float(v) for k, v in bandwidths.items()},
        )


@dataclass
class DataPointOptions:
    """Options for the plot drawn inside each violin (box, barcode or column)."""
    plot_type: ComboPlotType = ComboPlotType.BOX
    inner_padding: float = 75  # % of the violin width left empty around the box
    stroke_width: float = 2
    max_mean_radius: float = 3

    def to_dict(self) -> dict[str, Any]:
        return {
            "plot_type": self.plot_type.value,
            "inner_padding": self.inner_padding,
            "stroke_width": self.stroke_width,
            "max_mean_radius": self.max_mean_radius,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DataPointOptions":
        default = cls()
        return cls(
            plot_type=_enum_or_default(ComboPlotType, data.get("plot_type"), default.plot_type),
            inner_padding=float(data.get("inner_padding", default.inner_padding)),
            stroke_width=float(data.get("stroke_width", default.stroke_width)),
            max_mean_radius=float(data.get("max_mean_radius", default.max_mean_radius)),
        )


@dataclass
class ViolinSettings:
    """Full configuration for one violin plot.

    Nested sections mirror the property groups of the visual: value axis,
    category axis, violin, data points (box/barcode), sorting, colours and
    data limits.
    """
    value_axis: AxisSettings = field(default_factory=AxisSettings)
    category_axis: AxisSettings = field(default_factory=AxisSettings)
    violin: ViolinOptions = field(default_factory=ViolinOptions)
    data_points: DataPointOptions = field(default_factory=DataPointOptions)
    sort_by: SortBy = SortBy.CATEGORY
    sort_order: SortOrder = SortOrder.ASCENDING
    colour_by_category: bool = False
    default_fill_colour: str = DEFAULT_FILL_COLOUR
    category_colours: dict[str, str] = field(default_factory=dict)  # manual per-category overrides
    category_limit: int = 100

    def to_dict(self) -> dict[str, Any]:
        """Serialize ViolinSettings to a JSON-friendly dictionary."""
        return {
            "value_axis": self.value_axis.to_dict(),
            "category_axis": self.category_axis.to_dict(),
            "violin": self.violin.to_dict(),
            "data_points": self.data_points.to_dict(),
            "sort_by": self.sort_by.value,
            "sort_order": self.sort_order.value,
            "colour_by_category": self.colour_by_category,
            "default_fill_colour": self.default_fill_colour,
            "category_colours": dict(self.category_colours),
            "category_limit": self.category_limit,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ViolinSettings":
        """Deserialize ViolinSettings from a dictionary.

        Missing sections or keys use defaults; unknown enum strings fall back
        to defaults with a warning.

        Raises:
            ValueError: If category_limit is not a positive integer.
        """
        default = cls()

        def _section(key: str) -> dict[str, Any]:
            raw = data.get(key)
            return raw if isinstance(raw, dict) else {}

        category_limit = int(data.get("category_limit", default.category_limit))
        if category_limit < 1:
            raise ValueError(f"category_limit must be >= 1, got {category_limit}")
        colours = data.get("category_colours")
        if not isinstance(colours, dict):
            colours = {}
        return cls(
            value_axis=AxisSettings.from_dict(_section("value_axis")),
            category_axis=AxisSettings.from_dict(_section("category_axis")),
            violin=ViolinOptions.from_dict(_section("violin")),
            data_points=DataPointOptions.from_dict(_section("data_points")),
            sort_by=_enum_or_default(SortBy, data.get("sort_by"), default.sort_by),
            sort_order=_enum_or_default(SortOrder, data.get("sort_order"), default.sort_order),
            colour_by_category=bool(data.get("colour_by_category", default.colour_by_category)),
            default_fill_colour=str(data.get("default_fill_colour", default.default_fill_colour)),
            category_colours={str(k): str(v) for k, v in colours.items()},
            category_limit=category_limit,
        )
