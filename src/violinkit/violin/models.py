"""Immutable data model handed from the pipeline to the rendering layer.

Every type here is a frozen dataclass. Pipeline stages never mutate a
snapshot; they build a new one with dataclasses.replace().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from violinkit.utils.profiling import ProfileEntry
from violinkit.violin.scales import LinearScale

NAN = float("nan")


@dataclass(frozen=True)
class Statistics:
    """Summary statistics for one sample set.

    Quantiles use linear interpolation between order statistics. deviation is
    the sample standard deviation (ddof=1) and is NaN for fewer than 2 samples.
    An empty sample set has count 0 and NaN everywhere else.
    """

    count: int = 0
    min: float = NAN
    max: float = NAN
    mean: float = NAN
    median: float = NAN
    quartile1: float = NAN
    quartile3: float = NAN
    confidence_lower: float = NAN  # 5th percentile
    confidence_upper: float = NAN  # 95th percentile
    deviation: float = NAN
    iqr: float = NAN
    span: float = NAN
    bandwidth_silverman: float = NAN
    bandwidth_actual: float = NAN

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def to_dict(self) -> dict[str, float]:
        return {
            "count": self.count,
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "median": self.median,
            "quartile1": self.quartile1,
            "quartile3": self.quartile3,
            "confidence_lower": self.confidence_lower,
            "confidence_upper": self.confidence_upper,
            "deviation": self.deviation,
            "iqr": self.iqr,
            "span": self.span,
            "bandwidth_silverman": self.bandwidth_silverman,
            "bandwidth_actual": self.bandwidth_actual,
        }


@dataclass(frozen=True)
class DensityPoint:
    x: float
    y: float


@dataclass(frozen=True)
class DisplayName:
    """A label, its measured width, and its tailored (ellipsized) form."""

    formatted_name: str
    formatted_width: float = 0.0
    tailored_name: str = ""
    tailored_width: float = 0.0
    collapsed: bool = False


@dataclass(frozen=True)
class Category:
    """One violin: samples, statistics, density curve and colour."""

    name: str
    display_name: DisplayName
    sort_order: int
    colour: str
    samples: tuple[float, ...]
    statistics: Statistics
    samples_aggregated: tuple[tuple[float, int], ...] = ()  # (value, count), barcode plots only
    density: tuple[DensityPoint, ...] = ()
    interpolate_min: float = NAN
    interpolate_max: float = NAN
    half_width_scale: Optional[LinearScale] = None  # density y -> px from the violin centre line


@dataclass(frozen=True)
class Dimensions:
    width: float = 0.0
    height: float = 0.0
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class AxisGeometry:
    """Resolved geometry for one axis.

    For the value axis, domain is the numeric (min, max) and ticks are the
    tick values; for the category axis, domain holds the category names and
    band_offsets the left pixel edge of each band.
    """

    domain: tuple = ()
    range: tuple[float, float] = (0.0, 0.0)
    collapsed: bool = False
    title: Optional[DisplayName] = None
    title_dimensions: Dimensions = field(default_factory=Dimensions)
    label_dimensions: Dimensions = field(default_factory=Dimensions)
    dimensions: Dimensions = field(default_factory=Dimensions)
    ticks: tuple[float, ...] = ()
    ticks_formatted: tuple[str, ...] = ()
    band_width: float = 0.0
    band_offsets: tuple[float, ...] = ()


@dataclass(frozen=True)
class ViolinPlotGeometry:
    category_width: float
    width: float


@dataclass(frozen=True)
class BoxPlotGeometry:
    width: float
    max_mean_radius: float
    max_mean_diameter: float
    scaled_mean_radius: float
    scaled_mean_diameter: float
    actual_mean_radius: float
    actual_mean_diameter: float
    x_left: float
    x_right: float
    feature_x_left: float
    feature_x_right: float


@dataclass(frozen=True)
class BarcodePlotGeometry:
    width: float
    x_left: float
    x_right: float
    tooltip_width: float
    feature_x_left: float
    feature_x_right: float


@dataclass(frozen=True)
class ViewModel:
    """Everything the rendering layer needs to paint one violin plot.

    should_render is False when the input was unusable; in that case every
    other field keeps its empty default. Plot geometry is None when either
    axis collapsed, and the renderer shows a placeholder instead.
    """

    should_render: bool = False
    categories: tuple[Category, ...] = ()
    has_category_names: bool = False
    categories_reduced: bool = False
    category_collapsed_count: int = 0
    categories_all_collapsed: bool = False
    statistics: Statistics = field(default_factory=Statistics)
    value_axis: AxisGeometry = field(default_factory=AxisGeometry)
    category_axis: AxisGeometry = field(default_factory=AxisGeometry)
    violin_plot: Optional[ViolinPlotGeometry] = None
    box_plot: Optional[BoxPlotGeometry] = None
    barcode_plot: Optional[BarcodePlotGeometry] = None
    measure_name: str = ""
    category_name: Optional[str] = None
    profiling: tuple[ProfileEntry, ...] = ()

    @classmethod
    def empty(cls, profiling: tuple[ProfileEntry, ...] = ()) -> "ViewModel":
        """Minimal view model signalling "do not render"."""
        return cls(should_render=False, profiling=profiling)

    @property
    def plot_available(self) -> bool:
        """True if both axes survived layout and band geometry exists."""
        return (
            self.should_render
            and not self.value_axis.collapsed
            and not self.category_axis.collapsed
            and self.violin_plot is not None
        )

    @property
    def total_samples(self) -> int:
        return sum(c.statistics.count for c in self.categories)
