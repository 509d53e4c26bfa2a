"""Value-axis label formatting: display units, precision and title style."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from violinkit.violin.settings import TitleStyle

# (divisor, tick suffix, unit title), largest first
DISPLAY_UNITS: tuple[tuple[float, str, str], ...] = (
    (1e12, "T", "Trillions"),
    (1e9, "bn", "Billions"),
    (1e6, "M", "Millions"),
    (1e3, "K", "Thousands"),
)

AUTO_UNITS = 0
NO_UNITS = 1


@dataclass(frozen=True)
class ValueFormatter:
    """Formats tick values, e.g. 1500 -> "1.5K" with thousands units."""

    divisor: float = 1.0
    suffix: str = ""
    unit_title: Optional[str] = None
    precision: Optional[int] = None

    def format(self, value: float) -> str:
        scaled = value / self.divisor
        if scaled == 0:
            scaled = 0.0  # avoid "-0"
        if self.precision is not None:
            text = f"{scaled:,.{self.precision}f}"
        else:
            text = f"{scaled:,.10f}".rstrip("0").rstrip(".")
        return f"{text}{self.suffix}"


def create_formatter(
    display_units: float,
    reference_value: float,
    precision: Optional[int] = None,
) -> ValueFormatter:
    """Build a formatter for the configured display units.

    display_units: 0 picks units from reference_value (usually the data
    maximum), 1 disables units, anything else is used as the divisor.
    """
    if display_units == NO_UNITS:
        return ValueFormatter(precision=precision)
    if display_units == AUTO_UNITS:
        magnitude = abs(reference_value) if reference_value == reference_value else 0.0
        for divisor, suffix, title in DISPLAY_UNITS:
            if magnitude >= divisor:
                return ValueFormatter(divisor, suffix, title, precision)
        return ValueFormatter(precision=precision)
    for divisor, suffix, title in DISPLAY_UNITS:
        if display_units == divisor:
            return ValueFormatter(divisor, suffix, title, precision)
    return ValueFormatter(divisor=float(display_units), precision=precision)


def value_axis_title(title: str, style: TitleStyle, formatter: ValueFormatter) -> str:
    """Combine the measure title with the display unit according to style."""
    if formatter.unit_title is None:
        return title
    if style is TitleStyle.UNIT:
        return formatter.unit_title
    if style is TitleStyle.BOTH:
        return f"{title} ({formatter.unit_title})"
    return title
