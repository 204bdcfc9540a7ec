"""Matchup generation: every ordered pair of rows sharing a game."""

import logging

import numpy as np
import pandas as pd

from headtohead.formats import as_longcr, split_games, validate_longcr
from headtohead.models import (
    GAME,
    LONGCR_COLUMNS,
    MATCHUP_COLUMNS,
    PLAYER,
    PLAYER1,
    PLAYER2,
    SCORE,
    SCORE1,
    SCORE2,
)

logger = logging.getLogger(__name__)


def get_matchups(cr_data) -> pd.DataFrame:
    """Compute matchups of competition results.

    Each game with k rows yields k*k matchups: the full product of its rows
    with themselves, self-pairs included. Pairing is done per row, so players
    are resolved with IdentityMode.PER_OCCURRENCE: rows with a missing player
    are only ever self-paired with themselves. Games appear in
    first-appearance order.

    Extra columns of the input are carried per side with suffixes 1 and 2.
    """
    cr = validate_longcr(as_longcr(cr_data))

    left, right = [], []
    for rows in split_games(cr):
        left.append(np.repeat(rows, len(rows)))
        right.append(np.tile(rows, len(rows)))
    if left:
        left_pos = np.concatenate(left)
        right_pos = np.concatenate(right)
    else:
        left_pos = right_pos = np.array([], dtype=np.intp)

    side1 = cr.iloc[left_pos].reset_index(drop=True)
    side2 = cr.iloc[right_pos].reset_index(drop=True)
    res = pd.DataFrame({
        GAME: side1[GAME],
        PLAYER1: side1[PLAYER],
        SCORE1: side1[SCORE],
        PLAYER2: side2[PLAYER],
        SCORE2: side2[SCORE],
    }, columns=MATCHUP_COLUMNS)

    extras = [c for c in cr.columns if c not in LONGCR_COLUMNS]
    for suffix, side in (("1", side1), ("2", side2)):
        for col in extras:
            res[f"{col}{suffix}"] = side[col]

    logger.debug(
        "Generated %d matchups from %d rows in %d games",
        len(res), len(cr), len(left),
    )
    return res
