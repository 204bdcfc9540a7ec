"""Grouped summaries of tables and joining them back onto rows."""

import logging
from typing import Any, Callable, Mapping, Sequence

import pandas as pd

from headtohead.formats import as_longcr
from headtohead.models import GAME, PLAYER, SCORE
from headtohead.util import (
    AggregationError,
    MalformedInputError,
    require_columns,
)

logger = logging.getLogger(__name__)

SummaryFun = Callable[[pd.DataFrame], Any]

SUMMARY_FUNS: dict[str, SummaryFun] = {
    "min_score": lambda g: g[SCORE].min(),
    "max_score": lambda g: g[SCORE].max(),
    "mean_score": lambda g: g[SCORE].mean(),
    "median_score": lambda g: g[SCORE].median(),
    "sd_score": lambda g: g[SCORE].std(),
    "sum_score": lambda g: g[SCORE].sum(),
    "num_games": lambda g: g[GAME].nunique(dropna=False),
    "num_players": lambda g: g[PLAYER].nunique(dropna=False),
}


def _as_columns(by: str | Sequence[str]) -> list[str]:
    return [by] if isinstance(by, str) else list(by)


def _check_orderable(tbl: pd.DataFrame, by: list[str]) -> None:
    for col in by:
        keys = tbl[col]
        if isinstance(keys.dtype, pd.CategoricalDtype):
            continue
        try:
            sorted(keys.dropna().unique())
        except TypeError as e:
            raise MalformedInputError(
                f"Group keys in '{col}' cannot be ordered: {e}"
            ) from e


def summarise_groups(
    tbl: pd.DataFrame,
    by: str | Sequence[str],
    funs: Mapping[str, SummaryFun],
) -> pd.DataFrame:
    """Apply every function of ``funs`` to each group of ``tbl``.

    Returns one row per distinct key combination, sorted by key with missing
    keys grouped together and placed last. Columns are the keys followed by
    one column per function, in request order.
    """
    by = _as_columns(by)
    require_columns(tbl, by)
    _check_orderable(tbl, by)

    rows = []
    grouped = tbl.groupby(by, sort=True, dropna=False, observed=True)
    for key, group in grouped:
        key = key if isinstance(key, tuple) else (key,)
        row = dict(zip(by, key))
        for name, fun in funs.items():
            try:
                row[name] = fun(group)
            except Exception as e:
                raise AggregationError(key, name, e) from e
        rows.append(row)

    res = pd.DataFrame(rows, columns=by + list(funs))
    logger.debug("Summarised %d rows into %d groups by %s", len(tbl), len(res), by)
    return res


def summarise_item(
    tbl: pd.DataFrame,
    item: str | Sequence[str],
    funs: Mapping[str, SummaryFun],
    prefix: str = "",
) -> pd.DataFrame:
    res = summarise_groups(tbl, item, funs)
    if prefix:
        res = res.rename(columns={name: f"{prefix}{name}" for name in funs})
    return res


def summarise_game(
    cr_data, funs: Mapping[str, SummaryFun], prefix: str = ""
) -> pd.DataFrame:
    return summarise_item(as_longcr(cr_data), GAME, funs, prefix)


def summarise_player(
    cr_data, funs: Mapping[str, SummaryFun], prefix: str = ""
) -> pd.DataFrame:
    return summarise_item(as_longcr(cr_data), PLAYER, funs, prefix)


def join_item_summary(
    tbl: pd.DataFrame,
    item: str | Sequence[str],
    funs: Mapping[str, SummaryFun],
    prefix: str = "",
) -> pd.DataFrame:
    """Left-join the summary of ``item`` groups onto every row of ``tbl``."""
    summary = summarise_item(tbl, item, funs, prefix)
    return tbl.merge(summary, on=_as_columns(item), how="left")


def join_game_summary(
    cr_data, funs: Mapping[str, SummaryFun], prefix: str = ""
) -> pd.DataFrame:
    return join_item_summary(as_longcr(cr_data), GAME, funs, prefix)


def join_player_summary(
    cr_data, funs: Mapping[str, SummaryFun], prefix: str = ""
) -> pd.DataFrame:
    return join_item_summary(as_longcr(cr_data), PLAYER, funs, prefix)
