"""Shared pytest fixtures: competition results tables and CSV fixtures."""

from pathlib import Path

import pandas as pd
import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture()
def results_sample_csv() -> Path:
    return FIXTURES_DIR / "results_sample.csv"


@pytest.fixture()
def results_wide_csv() -> Path:
    return FIXTURES_DIR / "results_wide.csv"


@pytest.fixture()
def cr_small() -> pd.DataFrame:
    """Three games with 3, 2 and 1 players."""
    return pd.DataFrame({
        "game": [1, 1, 1, 2, 2, 3],
        "player": [1, 2, 3, 1, 3, 2],
        "score": [10, 8, 5, 3, 7, 4],
    })


@pytest.fixture()
def cr_missing() -> pd.DataFrame:
    """One game with a named player and two players without identity."""
    return pd.DataFrame({
        "game": ["a1", "a1", "a1"],
        "player": [1, None, None],
        "score": [1, 2, 3],
    })


@pytest.fixture()
def cr_factor() -> pd.DataFrame:
    """Players 1 and 3 never meet; the player domain is closed to {1, 2, 3}."""
    return pd.DataFrame({
        "game": [1, 1, 2, 2],
        "player": pd.Categorical([1, 2, 2, 3], categories=[1, 2, 3]),
        "score": [5, 3, 4, 6],
    })
