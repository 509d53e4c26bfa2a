"""Category colour assignment.

With colour_by_category, categories cycle through the Plotly qualitative
palette in first-seen order and manual per-category overrides win. Otherwise
every category uses the default fill colour.
"""

from __future__ import annotations

from typing import Sequence

from plotly.colors import qualitative

from violinkit.violin.settings import ViolinSettings

CATEGORY_PALETTE: tuple[str, ...] = tuple(qualitative.Plotly)


def palette_colour(index: int) -> str:
    return CATEGORY_PALETTE[index % len(CATEGORY_PALETTE)]


def assign_colours(names: Sequence[str], settings: ViolinSettings) -> dict[str, str]:
    """Map each category name to its fill colour."""
    if not settings.colour_by_category:
        return {name: settings.default_fill_colour for name in names}
    return {
        name: settings.category_colours.get(name, palette_colour(i))
        for i, name in enumerate(names)
    }
