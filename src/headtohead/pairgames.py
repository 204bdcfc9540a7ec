"""Split multi-player games into two-player games."""

import itertools
import logging

import numpy as np
import pandas as pd

from headtohead.formats import as_longcr, split_games, validate_longcr
from headtohead.models import GAME, PLAYER, IdentityMode, identity_keys

logger = logging.getLogger(__name__)


def to_pairgames(cr_data) -> pd.DataFrame:
    """Convert competition results into pairgames.

    Every game with k rows becomes one new game per unordered pair of its
    rows, pairs taken in row order. New games are numbered 1, 2, ... so that
    all pairgames of an earlier game come before those of a later one. Games
    with fewer than two rows are dropped. Rows naming the same player are not
    paired with each other; rows with a missing player count as distinct
    players. All other columns are copied per row.
    """
    cr = validate_longcr(as_longcr(cr_data))
    identity = identity_keys(cr[PLAYER], IdentityMode.PER_OCCURRENCE)

    positions: list[int] = []
    n_dropped = 0
    n_self = 0
    for rows in split_games(cr):
        if len(rows) < 2:
            n_dropped += 1
            continue
        for i, j in itertools.combinations(rows, 2):
            if identity[i] == identity[j]:
                n_self += 1
                continue
            positions.extend((i, j))

    res = cr.iloc[positions].reset_index(drop=True)
    n_games = len(positions) // 2
    res[GAME] = np.repeat(np.arange(1, n_games + 1), 2)

    logger.debug(
        "Built %d pairgames (dropped %d single-row games, skipped %d self-pairs)",
        n_games, n_dropped, n_self,
    )
    return res
