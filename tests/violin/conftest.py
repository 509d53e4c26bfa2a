"""Fixtures for violin pipeline tests."""

from __future__ import annotations

import pandas as pd
import pytest

from violinkit.violin.algorithms.aggregate import samples_frame
from violinkit.violin.settings import ViolinSettings


@pytest.fixture
def outlier_df() -> pd.DataFrame:
    """Single series with one far outlier."""
    return samples_frame([1, 2, 3, 4, 5, 100])


@pytest.fixture
def two_category_df() -> pd.DataFrame:
    """Category "A" has zero variance, "B" is spread out."""
    return samples_frame(
        [1, 1, 1, 1, 1, 2, 3, 4, 5],
        ["A", "A", "A", "A", "B", "B", "B", "B", "B"],
    )


@pytest.fixture
def five_category_df() -> pd.DataFrame:
    return samples_frame(
        [1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
        ["c1", "c1", "c2", "c2", "c3", "c3", "c4", "c4", "c5", "c5"],
    )


@pytest.fixture
def settings() -> ViolinSettings:
    return ViolinSettings()
