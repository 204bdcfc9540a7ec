"""Head-to-head statistics between pairs of players."""

import logging
from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd

from headtohead.codec import long_to_mat
from headtohead.formats import as_longcr, validate_longcr
from headtohead.matchups import get_matchups
from headtohead.models import (
    PAIR_COLUMNS,
    PLAYER,
    PLAYER1,
    PLAYER2,
    SCORE1,
    SCORE2,
    IdentityMode,
    PlayerDomain,
    identity_labels,
)
from headtohead.summary import SummaryFun, summarise_groups
from headtohead.util import ContractViolationError

logger = logging.getLogger(__name__)


def num_wins(score1, score2, half_for_draw: bool = False) -> float:
    """Number of times ``score1`` beats ``score2``.

    With ``half_for_draw`` every draw adds 0.5. Comparisons involving a
    missing score count as neither win nor draw.
    """
    score1 = np.asarray(score1)
    score2 = np.asarray(score2)
    wins = np.sum(score1 > score2)
    if half_for_draw:
        wins = wins + 0.5 * np.sum(score1 == score2)
    return wins


def _score_diff(matchups: pd.DataFrame) -> pd.Series:
    return matchups[SCORE1] - matchups[SCORE2]


H2H_FUNS: dict[str, SummaryFun] = {
    "mean_score_diff": lambda m: _score_diff(m).mean(),
    "mean_score_diff_pos": lambda m: max(_score_diff(m).mean(), 0),
    "mean_score": lambda m: m[SCORE1].mean(),
    "sum_score_diff": lambda m: _score_diff(m).sum(),
    "sum_score_diff_pos": lambda m: max(_score_diff(m).sum(), 0),
    "sum_score": lambda m: m[SCORE1].sum(),
    "num_wins": lambda m: num_wins(m[SCORE1], m[SCORE2], half_for_draw=False),
    "num_wins2": lambda m: num_wins(m[SCORE1], m[SCORE2], half_for_draw=True),
    "num": lambda m: len(m),
}


def _resolve_domain(
    players_col: pd.Series,
    players: PlayerDomain | Iterable[Any] | None,
) -> PlayerDomain | None:
    if players is None:
        return PlayerDomain.from_series(players_col)
    if isinstance(players, PlayerDomain):
        return players
    return PlayerDomain.of(players)


def _complete_pairs(
    res: pd.DataFrame,
    domain: PlayerDomain,
    fill: Mapping[str, Any],
) -> pd.DataFrame:
    """Add a row for every ordered pair of the domain, in domain order.

    Pairs outside the domain (the unknown bucket among them) follow after.
    ``fill`` is applied to the added rows only.
    """
    grid = pd.DataFrame(domain.pairs(), columns=PAIR_COLUMNS, dtype=object)
    in_domain = (
        res[PLAYER1].isin(domain.levels) & res[PLAYER2].isin(domain.levels)
    )
    observed = res[in_domain].astype({PLAYER1: object, PLAYER2: object})

    completed = grid.merge(observed, on=PAIR_COLUMNS, how="left", indicator=True)
    holes = completed["_merge"] == "left_only"
    completed = completed.drop(columns="_merge")
    for name, default in fill.items():
        completed[name] = completed[name].where(~holes, default)

    logger.debug(
        "Completed %d observed pairs to %d domain pairs",
        int(in_domain.sum()), len(grid),
    )
    outside = res[~in_domain].astype({PLAYER1: object, PLAYER2: object})
    if outside.empty:
        return completed
    return pd.concat([completed, outside], ignore_index=True)


def _restore_player_dtype(
    res: pd.DataFrame, domain: PlayerDomain | None
) -> pd.DataFrame:
    for col in PAIR_COLUMNS:
        values = res[col]
        covered = domain is not None and all(
            v in domain for v in values.dropna().unique()
        )
        if covered:
            res[col] = pd.Categorical(values, categories=list(domain.levels))
        else:
            res[col] = values.infer_objects()
    return res


def h2h_long(
    cr_data,
    funs: Mapping[str, SummaryFun] | None = None,
    fill: Mapping[str, Any] | None = None,
    players: PlayerDomain | Iterable[Any] | None = None,
) -> pd.DataFrame:
    """Compute head-to-head statistics in long format.

    Every function in ``funs`` receives the matchups of one ordered pair of
    players (columns ``game, player1, score1, player2, score2, ...``) and
    returns a scalar. Rows with a missing player are merged into a single
    unknown player, shown as NaN and sorted last.

    When a closed player domain is known, either through ``players`` or a
    categorical ``player`` column, every ordered pair of the domain appears in
    the output. Pairs without matchups get missing statistics, replaced by
    ``fill[<column>]`` when given.
    """
    cr = validate_longcr(as_longcr(cr_data))
    funs = dict(funs or {})
    fill = dict(fill or {})
    unknown = [name for name in fill if name not in funs]
    if unknown:
        raise ContractViolationError(
            f"fill refers to unknown statistics: {', '.join(unknown)}"
        )

    domain = _resolve_domain(cr[PLAYER], players)
    matchups = get_matchups(cr)
    for col in PAIR_COLUMNS:
        matchups[col] = identity_labels(matchups[col], IdentityMode.UNKNOWN_BUCKET)

    res = summarise_groups(matchups, PAIR_COLUMNS, funs)
    if domain is not None:
        res = _complete_pairs(res, domain, fill)
    res = _restore_player_dtype(res, domain)

    logger.debug(
        "Computed %d head-to-head pairs with statistics %s",
        len(res), list(funs),
    )
    return res


def h2h_mat(
    cr_data,
    funs: Mapping[str, SummaryFun],
    fill: Any = None,
    players: PlayerDomain | Iterable[Any] | None = None,
) -> pd.DataFrame:
    """Compute one head-to-head statistic in matrix format.

    Rows are ``player1``, columns ``player2``. ``fill`` replaces both the
    statistic of unobserved domain pairs and empty matrix cells.
    """
    funs = dict(funs or {})
    if len(funs) != 1:
        raise ContractViolationError(
            f"h2h_mat takes exactly one statistic, got {len(funs)}"
        )
    (name,) = funs
    long_fill = {} if fill is None else {name: fill}
    res = h2h_long(cr_data, funs, fill=long_fill, players=players)
    return long_to_mat(res, PLAYER1, PLAYER2, name, fill=fill)
