"""Tests for headtohead.h2h."""

import numpy as np
import pandas as pd
import pytest

from headtohead.h2h import H2H_FUNS, h2h_long, h2h_mat, num_wins
from headtohead.models import PlayerDomain
from headtohead.util import (
    AggregationError,
    ContractViolationError,
    MalformedInputError,
)


def _pick(*names: str) -> dict:
    return {name: H2H_FUNS[name] for name in names}


def _cell(res: pd.DataFrame, p1, p2, column: str):
    row = res[(res["player1"] == p1) & (res["player2"] == p2)]
    assert len(row) == 1
    return row[column].item()


class TestNumWins:
    def test_strict_wins(self) -> None:
        assert num_wins([1, 2, 3], [3, 2, 1]) == 1

    def test_half_for_draw(self) -> None:
        assert num_wins([1, 2, 3], [3, 2, 1], half_for_draw=True) == 1.5

    def test_missing_scores_ignored(self) -> None:
        assert num_wins([np.nan, 2], [1, 1], half_for_draw=True) == 1


class TestH2HLong:
    def test_one_row_per_observed_pair(self, cr_small: pd.DataFrame) -> None:
        res = h2h_long(cr_small, _pick("num"))
        assert res.columns.tolist() == ["player1", "player2", "num"]
        assert list(zip(res["player1"], res["player2"])) == [
            (1, 1), (1, 2), (1, 3),
            (2, 1), (2, 2), (2, 3),
            (3, 1), (3, 2), (3, 3),
        ]

    def test_num_counts_matchups(self, cr_small: pd.DataFrame) -> None:
        res = h2h_long(cr_small, _pick("num"))
        assert _cell(res, 1, 3, "num") == 2
        assert _cell(res, 1, 2, "num") == 1
        assert _cell(res, 2, 2, "num") == 2

    def test_preset_statistics(self, cr_small: pd.DataFrame) -> None:
        res = h2h_long(
            cr_small,
            _pick("num_wins", "mean_score_diff", "sum_score", "mean_score_diff_pos"),
        )
        assert _cell(res, 1, 3, "num_wins") == 1
        assert _cell(res, 3, 1, "num_wins") == 1
        assert _cell(res, 2, 1, "num_wins") == 0
        assert _cell(res, 1, 3, "mean_score_diff") == pytest.approx(0.5)
        assert _cell(res, 1, 3, "sum_score") == 13
        assert _cell(res, 3, 1, "mean_score_diff_pos") == 0

    def test_statistic_columns_in_request_order(self, cr_small: pd.DataFrame) -> None:
        res = h2h_long(cr_small, _pick("sum_score", "num"))
        assert res.columns.tolist() == ["player1", "player2", "sum_score", "num"]

    def test_no_statistics(self, cr_small: pd.DataFrame) -> None:
        res = h2h_long(cr_small)
        assert res.columns.tolist() == ["player1", "player2"]
        assert len(res) == 9

    def test_custom_function(self, cr_small: pd.DataFrame) -> None:
        res = h2h_long(cr_small, {"games": lambda m: sorted(m["game"].unique())[0]})
        assert _cell(res, 1, 3, "games") == 1

    def test_missing_players_collapse_into_unknown(self, cr_missing: pd.DataFrame) -> None:
        res = h2h_long(cr_missing, _pick("num"))
        assert len(res) == 4
        assert res["player1"].isna().tolist() == [False, False, True, True]
        assert res["player2"].isna().tolist() == [False, True, False, True]
        assert res["num"].tolist() == [1, 2, 2, 4]

    def test_unorderable_players_raise(self) -> None:
        cr = pd.DataFrame({
            "game": [1, 1, 2, 2],
            "player": ["x", 1, "x", 2],
            "score": [1, 0, 2, 3],
        })
        with pytest.raises(MalformedInputError, match="ordered"):
            h2h_long(cr, _pick("num"))

    def test_closed_domain_fill(self, cr_factor: pd.DataFrame) -> None:
        res = h2h_long(
            cr_factor, _pick("mean_score_diff"), fill={"mean_score_diff": -100},
        )
        assert len(res) == 9
        assert _cell(res, 1, 3, "mean_score_diff") == -100
        assert _cell(res, 3, 1, "mean_score_diff") == -100
        assert _cell(res, 1, 2, "mean_score_diff") == 2

    def test_closed_domain_without_fill(self, cr_factor: pd.DataFrame) -> None:
        res = h2h_long(cr_factor, _pick("mean_score_diff"))
        assert len(res) == 9
        assert np.isnan(_cell(res, 1, 3, "mean_score_diff"))

    def test_closed_domain_order_and_dtype(self, cr_factor: pd.DataFrame) -> None:
        res = h2h_long(cr_factor, _pick("num"))
        assert list(zip(res["player1"], res["player2"])) == PlayerDomain.of([1, 2, 3]).pairs()
        assert isinstance(res["player1"].dtype, pd.CategoricalDtype)
        assert res["player1"].cat.categories.tolist() == [1, 2, 3]

    def test_unobserved_level_gets_rows(self) -> None:
        cr = pd.DataFrame({
            "game": [1, 1],
            "player": pd.Categorical(["a", "b"], categories=["a", "b", "c"]),
            "score": [1, 0],
        })
        res = h2h_long(cr, _pick("num"), fill={"num": 0})
        assert len(res) == 9
        assert _cell(res, "c", "c", "num") == 0

    def test_explicit_domain(self, cr_small: pd.DataFrame) -> None:
        res = h2h_long(cr_small, _pick("num"), fill={"num": 0}, players=[1, 2, 3, 4])
        assert len(res) == 16
        assert _cell(res, 4, 1, "num") == 0
        assert _cell(res, 1, 3, "num") == 2

    def test_fill_never_touches_observed_pairs(self) -> None:
        cr = pd.DataFrame({
            "game": [1, 1],
            "player": pd.Categorical([1, 2], categories=[1, 2, 3]),
            "score": [1, 0],
        })
        res = h2h_long(cr, {"nothing": lambda m: np.nan}, fill={"nothing": 7})
        assert np.isnan(_cell(res, 1, 2, "nothing"))
        assert _cell(res, 1, 3, "nothing") == 7

    def test_unknown_fill_key_raises(self, cr_small: pd.DataFrame) -> None:
        with pytest.raises(ContractViolationError, match="nope"):
            h2h_long(cr_small, _pick("num"), fill={"nope": 0})

    def test_failing_statistic_tagged_with_pair(self, cr_small: pd.DataFrame) -> None:
        def picky(m: pd.DataFrame) -> int:
            if (m["player1"].iloc[0], m["player2"].iloc[0]) == (2, 3):
                raise ValueError("no")
            return 0

        with pytest.raises(AggregationError) as exc_info:
            h2h_long(cr_small, {"picky": picky})
        assert exc_info.value.group == (2, 3)
        assert exc_info.value.column == "picky"
        assert isinstance(exc_info.value.__cause__, ValueError)


class TestH2HMat:
    def test_square_matrix(self, cr_small: pd.DataFrame) -> None:
        mat = h2h_mat(cr_small, _pick("num"))
        assert mat.shape == (3, 3)
        assert mat.index.tolist() == [1, 2, 3]
        assert mat.columns.tolist() == [1, 2, 3]
        assert mat.loc[1, 3] == 2

    def test_rows_are_player1(self, cr_small: pd.DataFrame) -> None:
        mat = h2h_mat(cr_small, _pick("num_wins"))
        assert mat.loc[1, 2] == 1
        assert mat.loc[2, 1] == 0

    def test_fill_in_closed_domain(self, cr_factor: pd.DataFrame) -> None:
        mat = h2h_mat(cr_factor, _pick("mean_score_diff"), fill=-100)
        assert mat.loc[1, 3] == -100
        assert mat.loc[1, 2] == 2

    def test_empty_cells_without_fill(self) -> None:
        cr = pd.DataFrame({
            "game": [1, 1, 2, 2],
            "player": ["a", "b", "b", "c"],
            "score": [1, 0, 2, 3],
        })
        mat = h2h_mat(cr, _pick("num"))
        assert np.isnan(mat.loc["a", "c"])
        assert mat.loc["a", "b"] == 1

    def test_two_statistics_rejected(self, cr_small: pd.DataFrame) -> None:
        with pytest.raises(ContractViolationError, match="exactly one"):
            h2h_mat(cr_small, _pick("num", "num_wins"))

    def test_no_statistic_rejected(self, cr_small: pd.DataFrame) -> None:
        with pytest.raises(ContractViolationError):
            h2h_mat(cr_small, {})

    def test_unknown_bucket_is_last_row_and_column(self, cr_missing: pd.DataFrame) -> None:
        mat = h2h_mat(cr_missing, _pick("num"))
        assert mat.shape == (2, 2)
        assert mat.index.isna().tolist() == [False, True]
        assert mat.columns.isna().tolist() == [False, True]
        assert mat.iloc[0, 0] == 1
        assert mat.iloc[0, 1] == 2
        assert mat.iloc[1, 0] == 2
        assert mat.iloc[1, 1] == 4
