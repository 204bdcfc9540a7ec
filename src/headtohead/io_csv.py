"""CSV read/write of competition results, long tables and matrices."""

import logging
from pathlib import Path

import pandas as pd
from pandas.api.types import is_numeric_dtype

from headtohead.formats import as_longcr

logger = logging.getLogger(__name__)


def _write_csv(tbl: pd.DataFrame, path: Path, index: bool) -> None:
    """Write a table to CSV with LF line endings."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tbl.to_csv(path, index=index, encoding="utf-8", lineterminator="\n")


def read_results_csv(path: Path) -> pd.DataFrame:
    """Read competition results (long or wide) and return them in long format."""
    tbl = pd.read_csv(path, encoding="utf-8")
    logger.info("Read %d rows from %s", len(tbl), path)
    return as_longcr(tbl)


def write_table_csv(tbl: pd.DataFrame, path: Path) -> None:
    _write_csv(tbl, path, index=False)
    logger.info("Wrote %d rows to %s", len(tbl), path)


def write_matrix_csv(mat: pd.DataFrame, path: Path) -> None:
    """Write a matrix with its row labels as the first column."""
    _write_csv(mat, path, index=True)
    logger.info("Wrote %dx%d matrix to %s", mat.shape[0], mat.shape[1], path)


def read_matrix_csv(path: Path) -> pd.DataFrame:
    """Read a matrix written by write_matrix_csv.

    Column labels come back as strings; they are converted to numbers when
    the row labels are numeric.
    """
    mat = pd.read_csv(path, encoding="utf-8", index_col=0)
    if is_numeric_dtype(mat.index) and len(mat.columns):
        mat.columns = pd.to_numeric(mat.columns).astype(mat.index.dtype)
    logger.info("Read %dx%d matrix from %s", mat.shape[0], mat.shape[1], path)
    return mat
