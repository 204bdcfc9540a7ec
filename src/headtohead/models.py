"""Data models and column names."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

import numpy as np
import pandas as pd

GAME = "game"
PLAYER = "player"
SCORE = "score"

PLAYER1 = "player1"
PLAYER2 = "player2"
SCORE1 = "score1"
SCORE2 = "score2"

LONGCR_COLUMNS = [GAME, PLAYER, SCORE]
MATCHUP_COLUMNS = [GAME, PLAYER1, SCORE1, PLAYER2, SCORE2]
PAIR_COLUMNS = [PLAYER1, PLAYER2]


class IdentityMode(Enum):
    """How rows with a missing player are identified."""

    # every missing-player row is its own unnamed participant
    PER_OCCURRENCE = "per-occurrence"
    # all missing-player rows are one "unknown" participant
    UNKNOWN_BUCKET = "unknown-bucket"


@dataclass(frozen=True)
class PlayerDomain:
    """Closed universe of player identities, independent of observed data."""

    levels: tuple

    def __post_init__(self) -> None:
        if len(set(self.levels)) != len(self.levels):
            raise ValueError("PlayerDomain levels must be unique")

    @classmethod
    def of(cls, levels: Iterable[Any]) -> "PlayerDomain":
        return cls(tuple(levels))

    @classmethod
    def from_series(cls, players: pd.Series) -> "PlayerDomain | None":
        """Domain of a categorical player column, None for other dtypes."""
        if isinstance(players.dtype, pd.CategoricalDtype):
            return cls(tuple(players.cat.categories))
        return None

    def pairs(self) -> list[tuple]:
        """All ordered pairs of levels, row-major in level order."""
        return [(a, b) for a in self.levels for b in self.levels]

    def __contains__(self, player: Any) -> bool:
        return player in self.levels

    def __len__(self) -> int:
        return len(self.levels)


def _identity_codes(
    players: pd.Series, mode: IdentityMode
) -> tuple[np.ndarray, Any]:
    codes, uniques = pd.factorize(players)
    codes = codes.copy()
    missing = codes == -1
    if mode is IdentityMode.PER_OCCURRENCE:
        codes[missing] = len(uniques) + np.arange(int(missing.sum()))
    else:
        codes[missing] = len(uniques)
    return codes, uniques


def identity_keys(players: pd.Series, mode: IdentityMode) -> np.ndarray:
    """Integer identity per row; equal keys mean the same participant.

    Named players share a key. Missing players get a fresh key per row under
    PER_OCCURRENCE and one common key under UNKNOWN_BUCKET.
    """
    return _identity_codes(players, mode)[0]


def identity_labels(players: pd.Series, mode: IdentityMode) -> pd.Series:
    """Object series labelling every row by its identity under ``mode``.

    Named players keep their value and every missing player is labelled NaN.
    Under UNKNOWN_BUCKET that makes all missing rows one participant when
    grouped by label. Under PER_OCCURRENCE the labels no longer tell missing
    rows apart; use identity_keys to keep them distinct.
    """
    codes, uniques = _identity_codes(players, mode)
    labels = np.full(int(codes.max(initial=-1)) + 1, np.nan, dtype=object)
    labels[: len(uniques)] = np.asarray(uniques, dtype=object)
    return pd.Series(
        labels[codes], index=players.index, name=players.name, dtype=object
    )
