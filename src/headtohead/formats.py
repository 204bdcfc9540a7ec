"""Long and wide competition results formats.

A long table ("longcr") has one row per (game, player) observation with at
least the columns ``game``, ``player`` and ``score``. A wide table ("widecr")
has one row per game with column groups ``player<i>``, ``score<i>`` (and any
other ``<name><i>``) for every player slot i, plus an optional ``game`` column.
"""

import logging
import re

import numpy as np
import pandas as pd

from headtohead.models import GAME, LONGCR_COLUMNS, PLAYER, SCORE
from headtohead.util import MalformedInputError

logger = logging.getLogger(__name__)

_SLOT_PATTERN = re.compile(r"^(?P<name>\D.*?)(?P<slot>\d+)$")


def _slot_columns(tbl: pd.DataFrame) -> dict[str, tuple[str, int]]:
    """Map column -> (name, slot) for every column ending in a slot number."""
    found = {}
    for col in tbl.columns:
        m = _SLOT_PATTERN.match(str(col))
        if m:
            found[col] = (m.group("name"), int(m.group("slot")))
    return found


def _player_slots(tbl: pd.DataFrame) -> list[int]:
    return sorted(
        slot for name, slot in _slot_columns(tbl).values() if name == PLAYER
    )


def is_longcr(tbl) -> bool:
    return isinstance(tbl, pd.DataFrame) and set(LONGCR_COLUMNS) <= set(tbl.columns)


def is_widecr(tbl) -> bool:
    if not isinstance(tbl, pd.DataFrame) or PLAYER in tbl.columns:
        return False
    slots = _player_slots(tbl)
    return bool(slots) and all(f"{SCORE}{s}" in tbl.columns for s in slots)


def _repair_names(tbl: pd.DataFrame) -> pd.DataFrame:
    """Lower-case column names that match the standard ones in any case."""
    renames = {}
    for col in tbl.columns:
        name = str(col)
        lowered = name.lower()
        m = _SLOT_PATTERN.match(lowered)
        standard = lowered in LONGCR_COLUMNS or (
            m is not None and m.group("name") in (PLAYER, SCORE)
        )
        if standard and name != lowered and lowered not in tbl.columns:
            renames[col] = lowered
    if renames:
        logger.debug("Repaired column names: %s", renames)
        tbl = tbl.rename(columns=renames)
    return tbl


def _reorder(tbl: pd.DataFrame) -> pd.DataFrame:
    rest = [c for c in tbl.columns if c not in LONGCR_COLUMNS]
    return tbl[LONGCR_COLUMNS + rest]


def _wide_to_long(tbl: pd.DataFrame) -> pd.DataFrame:
    slot_cols = _slot_columns(tbl)
    slots = _player_slots(tbl)
    per_slot = [c for c, (_, s) in slot_cols.items() if s in slots]
    names: list[str] = [PLAYER, SCORE]
    for col in per_slot:
        name = slot_cols[col][0]
        if name not in names:
            names.append(name)
    game_level = [c for c in tbl.columns if c not in per_slot and c != GAME]

    if GAME in tbl.columns:
        games = tbl[GAME].to_numpy()
    else:
        games = np.arange(1, len(tbl) + 1)

    pieces = []
    for slot in slots:
        part = pd.DataFrame({GAME: games})
        for name in names:
            col = f"{name}{slot}"
            part[name] = tbl[col].to_numpy() if col in tbl.columns else np.nan
        for col in game_level:
            part[col] = tbl[col].to_numpy()
        part["_row"] = np.arange(len(tbl))
        part["_slot"] = slot
        pieces.append(part)

    long = pd.concat(pieces, ignore_index=True)
    long = long.sort_values(["_row", "_slot"], kind="stable")
    padding = long[PLAYER].isna() & long[SCORE].isna()
    long = long[~padding].drop(columns=["_row", "_slot"]).reset_index(drop=True)
    logger.debug(
        "Converted %d wide rows with %d slots into %d long rows",
        len(tbl), len(slots), len(long),
    )
    return long


def as_longcr(tbl, repair: bool = True) -> pd.DataFrame:
    """Convert competition results to long format.

    With ``repair`` column names are matched case-insensitively, a missing
    ``score`` column is added as NaN and the standard columns are moved first.
    """
    if not isinstance(tbl, pd.DataFrame):
        raise MalformedInputError(
            f"Expected a DataFrame, got {type(tbl).__name__}"
        )
    if repair:
        tbl = _repair_names(tbl)

    if is_widecr(tbl):
        return _wide_to_long(tbl)

    if repair and {GAME, PLAYER} <= set(tbl.columns) and SCORE not in tbl.columns:
        tbl = tbl.assign(**{SCORE: np.nan})

    if is_longcr(tbl):
        res = tbl.copy()
        return _reorder(res) if repair else res

    raise MalformedInputError(
        "Table is neither long nor wide competition results "
        f"(columns: {', '.join(map(str, tbl.columns))})"
    )


def as_widecr(tbl, repair: bool = True) -> pd.DataFrame:
    """Convert competition results to wide format.

    Each game gets as many player slots as the largest game has rows; smaller
    games are padded with missing values. Games keep their first-appearance
    order.
    """
    if isinstance(tbl, pd.DataFrame) and repair:
        tbl = _repair_names(tbl)
    if is_widecr(tbl):
        return tbl.copy()

    long = validate_longcr(as_longcr(tbl, repair=repair))
    codes, games = pd.factorize(long[GAME])
    slot = long.groupby(codes).cumcount().to_numpy() + 1
    n_slots = int(slot.max()) if len(slot) else 0
    value_cols = [c for c in long.columns if c != GAME]

    columns = {GAME: np.asarray(games)}
    for s in range(1, n_slots + 1):
        in_slot = slot == s
        part = long[in_slot].set_index(codes[in_slot])
        for name in value_cols:
            columns[f"{name}{s}"] = part[name].reindex(range(len(games))).to_numpy()
    wide = pd.DataFrame(columns)
    logger.debug(
        "Converted %d long rows into %d games with %d slots",
        len(long), len(wide), n_slots,
    )
    return wide


def validate_longcr(tbl: pd.DataFrame) -> pd.DataFrame:
    """Check that a long table has usable game identities."""
    if tbl[GAME].isna().any():
        raise MalformedInputError(
            f"Column '{GAME}' contains {int(tbl[GAME].isna().sum())} missing values"
        )
    return tbl


def split_games(tbl: pd.DataFrame) -> list[np.ndarray]:
    """Row positions of every game, games in first-appearance order.

    Positions inside a game keep their row order.
    """
    codes, _ = pd.factorize(tbl[GAME])
    order = np.argsort(codes, kind="stable")
    bounds = np.cumsum(np.bincount(codes))
    return np.split(order, bounds[:-1]) if len(order) else []
