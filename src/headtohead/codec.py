"""Conversion between long and matrix forms of pair-keyed tables."""

import logging
from typing import Any

import numpy as np
import pandas as pd
from pandas.api.types import is_numeric_dtype

from headtohead.util import (
    ContractViolationError,
    MalformedInputError,
    require_columns,
)

logger = logging.getLogger(__name__)


def _normalize_missing(keys: pd.Series) -> pd.Series:
    """Object series of keys with every missing marker replaced by NaN."""
    keys = keys.astype(object)
    return keys.where(keys.notna(), np.nan)


def _check_key_types(row_keys: pd.Series, col_keys: pd.Series) -> None:
    row_present = row_keys.dropna()
    col_present = col_keys.dropna()
    if row_present.empty or col_present.empty:
        return
    if is_numeric_dtype(row_present.infer_objects()) != is_numeric_dtype(
        col_present.infer_objects()
    ):
        raise ContractViolationError(
            f"Key columns '{row_keys.name}' and '{col_keys.name}' "
            "hold different identity types"
        )


def pair_labels(*keys: pd.Series) -> pd.Index:
    """Sorted union of distinct key values, with a missing label last."""
    pooled = pd.concat([_normalize_missing(k) for k in keys], ignore_index=True)
    present = pooled[pooled.notna()]
    try:
        labels = sorted(pd.unique(present))
    except TypeError as e:
        raise MalformedInputError(f"Key values cannot be ordered: {e}") from e

    if pooled.isna().any():
        return pd.Index(labels + [np.nan], dtype=object)
    return pd.Index(labels)


def long_to_mat(
    tbl: pd.DataFrame,
    row_key: str,
    col_key: str,
    value: str,
    fill: Any = None,
) -> pd.DataFrame:
    """Convert a long pair-keyed table into a square matrix.

    Row and column labels are both the sorted union of the values found in
    ``row_key`` and ``col_key``, so every identity that appears on either side
    of some pair gets a row and a column. Cells not covered by a row of
    ``tbl`` hold NaN, or ``fill`` when it is given. If a key pair occurs more
    than once, the last occurrence in row order wins.
    """
    require_columns(tbl, [row_key, col_key, value])
    row_keys = _normalize_missing(tbl[row_key])
    col_keys = _normalize_missing(tbl[col_key])
    _check_key_types(row_keys, col_keys)

    labels = pair_labels(row_keys, col_keys)
    n = len(labels)

    keep = ~pd.DataFrame({"r": row_keys, "c": col_keys}).duplicated(keep="last")
    n_dup = int((~keep).sum())
    if n_dup:
        logger.warning(
            "%d duplicate (%s, %s) rows; keeping last occurrence",
            n_dup, row_key, col_key,
        )
    keep = keep.to_numpy()

    lookup = pd.Index(labels, dtype=object)
    row_pos = lookup.get_indexer(row_keys[keep])
    col_pos = lookup.get_indexer(col_keys[keep])

    empty = np.nan if fill is None else fill
    cells = np.full((n, n), empty, dtype=object)
    cells[row_pos, col_pos] = tbl[value].to_numpy(dtype=object)[keep]

    mat = pd.DataFrame(cells, index=labels.copy(), columns=labels.copy())
    mat = mat.infer_objects()
    mat.index.name = row_key
    mat.columns.name = col_key
    logger.debug("Built %dx%d matrix of '%s' from %d rows", n, n, value, len(tbl))
    return mat


def mat_to_long(
    mat: pd.DataFrame | np.ndarray,
    row_key: str,
    col_key: str,
    value: str,
    drop: bool = False,
) -> pd.DataFrame:
    """Convert a square matrix into a long table with one row per cell.

    Rows are emitted row-major. With ``drop=True`` cells holding a missing
    value are left out. A plain 2D array is labelled ``0..n-1`` on both axes.
    """
    if isinstance(mat, np.ndarray):
        if mat.ndim != 2:
            raise MalformedInputError(f"Expected a 2D matrix, got {mat.ndim}D")
        mat = pd.DataFrame(mat)
    if not isinstance(mat, pd.DataFrame):
        raise MalformedInputError(
            f"Expected a DataFrame or 2D array, got {type(mat).__name__}"
        )

    n_rows, n_cols = mat.shape
    if n_rows != n_cols:
        raise MalformedInputError(
            f"Expected a square matrix, got {n_rows}x{n_cols}"
        )
    res = pd.DataFrame({
        row_key: np.repeat(mat.index.to_numpy(), n_cols),
        col_key: np.tile(mat.columns.to_numpy(), n_rows),
        value: mat.to_numpy().ravel(),
    })
    if drop:
        res = res[res[value].notna()].reset_index(drop=True)
    res = res.infer_objects()
    logger.debug("Unrolled %dx%d matrix into %d rows", n_rows, n_cols, len(res))
    return res
