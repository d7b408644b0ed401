"""src/ssforecast/io/readers.py"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

import numpy as np
import pandas as pd

from ssforecast.validation.schemas import assert_schema, series_input_schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeriesData:
    values: np.ndarray
    regressors: np.ndarray | None
    index: pd.Index

    def __len__(self) -> int:
        return int(self.values.size)

    def split(self, holdout: int) -> tuple["SeriesData", "SeriesData"]:
        """Split off the last `holdout` observations."""
        h = int(holdout)
        if h < 0 or h >= len(self):
            raise ValueError(f"holdout must be in [0, {len(self) - 1}]; got {holdout}")
        cut = len(self) - h
        x = self.regressors
        train = SeriesData(self.values[:cut], None if x is None else x[:cut], self.index[:cut])
        test = SeriesData(self.values[cut:], None if x is None else x[cut:], self.index[cut:])
        return train, test


def read_csv(path: Path, *, dtype: dict[str, Any] | None = None) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Missing file:\n{path}")
    return pd.read_csv(path, dtype=dtype)


def _numeric(df: pd.DataFrame, cols: Sequence[str]) -> pd.DataFrame:
    out = df.copy()
    out.columns = [str(c).strip() for c in out.columns]
    for c in cols:
        out[c] = pd.to_numeric(out[c], errors="coerce")
    return out


def read_series(path: Path, *, value_col: str, regressor_cols: Sequence[str] = ()) -> SeriesData:
    """
    Read a univariate series (plus optional regressors) from CSV.

    Rows with a missing target or regressor are dropped with a warning; the
    recursion has no notion of a missing observation.
    """
    df = read_csv(path)
    df.columns = [str(c).strip() for c in df.columns]
    regressor_cols = tuple(regressor_cols)
    assert_schema(df, series_input_schema(value_col, regressor_cols))

    df = _numeric(df, (value_col, *regressor_cols))
    n_before = len(df)
    df = df.dropna(subset=[value_col, *regressor_cols])
    if len(df) < n_before:
        logger.warning("Dropped %d row(s) with missing values from %s", n_before - len(df), path)
    if df.empty:
        raise ValueError(f"No usable observations in {path} (column {value_col!r}).")

    regressors = df[list(regressor_cols)].to_numpy(dtype=float) if regressor_cols else None
    return SeriesData(values=df[value_col].to_numpy(dtype=float), regressors=regressors, index=df.index)


def read_regressors(path: Path, *, regressor_cols: Sequence[str]) -> np.ndarray:
    """Future regressor values, one row per forecast step."""
    df = read_csv(path)
    df.columns = [str(c).strip() for c in df.columns]
    cols = tuple(regressor_cols)
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise KeyError(f"future regressors: missing columns {missing}. Found: {list(df.columns)}")
    df = _numeric(df, cols)
    if df[list(cols)].isna().any().any():
        raise ValueError(f"future regressors in {path} contain missing values.")
    return df[list(cols)].to_numpy(dtype=float)
