"""Text measurement collaborator used by the layout resolver.

The layout resolver never measures text itself. It calls a TextMeasurer:

- ``measure(text, font) -> TextSize``
- ``tailor(text, font, max_width) -> str`` (truncate with an ellipsis)

Host applications plug in their own measurer (browser, Qt, PIL, ...).
ApproximateTextMeasurer is a deterministic stand-in based on average glyph
width, good enough for headless use and tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from violinkit.violin.models import DisplayName

ELLIPSIS = "..."


@dataclass(frozen=True)
class FontSpec:
    family: str
    size: float  # px


@dataclass(frozen=True)
class TextSize:
    width: float
    height: float


class TextMeasurer(Protocol):
    def measure(self, text: str, font: FontSpec) -> TextSize: ...

    def tailor(self, text: str, font: FontSpec, max_width: float) -> str: ...


class ApproximateTextMeasurer:
    """Measures text as ``len(text) * size * char_width_ratio`` wide.

    Height is one line (``size * line_height_ratio``) regardless of content,
    so an empty string still has a height, like SVG text measurement.
    """

    def __init__(self, char_width_ratio: float = 0.55, line_height_ratio: float = 1.2) -> None:
        self.char_width_ratio = char_width_ratio
        self.line_height_ratio = line_height_ratio

    def measure(self, text: str, font: FontSpec) -> TextSize:
        return TextSize(
            width=len(text) * font.size * self.char_width_ratio,
            height=font.size * self.line_height_ratio,
        )

    def tailor(self, text: str, font: FontSpec, max_width: float) -> str:
        if self.measure(text, font).width <= max_width:
            return text
        # Longest prefix that still fits together with the ellipsis
        lo, hi = 0, len(text)
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if self.measure(text[:mid] + ELLIPSIS, font).width <= max_width:
                lo = mid
            else:
                hi = mid - 1
        return text[:lo] + ELLIPSIS


def tailor_display_name(
    formatted_name: str,
    font: FontSpec,
    bounding_width: float,
    measurer: TextMeasurer,
) -> DisplayName:
    """Measure a label and ellipsize it to ``bounding_width`` if needed.

    The result is collapsed when nothing but the ellipsis survives.
    """
    formatted_width = measurer.measure(formatted_name, font).width
    if formatted_width > bounding_width:
        tailored_name = measurer.tailor(formatted_name, font, max(0.0, bounding_width))
        tailored_width = measurer.measure(tailored_name, font).width
    else:
        tailored_name = formatted_name
        tailored_width = formatted_width
    return DisplayName(
        formatted_name=formatted_name,
        formatted_width=formatted_width,
        tailored_name=tailored_name,
        tailored_width=tailored_width,
        collapsed=tailored_name == ELLIPSIS,
    )
