"""src/ssforecast/validation/schemas.py"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import pandas as pd


@dataclass(frozen=True)
class SchemaSpec:
    """Minimal schema specification for a DataFrame."""
    name: str
    required_cols: tuple[str, ...]
    dtype_hints: dict[str, str] | None = None


def _missing_cols(df: pd.DataFrame, required: Iterable[str]) -> list[str]:
    return [c for c in required if c not in df.columns]


FITTED_OUTPUT = SchemaSpec(
    name="fitted_output",
    required_cols=("Step", "Actual", "Fitted", "Residual"),
    dtype_hints={"Step": "int", "Actual": "float", "Fitted": "float", "Residual": "float"},
)

FORECAST_OUTPUT = SchemaSpec(
    name="forecast_output",
    required_cols=("Horizon", "Model", "Forecast"),
    dtype_hints={"Horizon": "int", "Model": "string", "Forecast": "float"},
)


def series_input_schema(value_col: str, regressor_cols: Iterable[str] = ()) -> SchemaSpec:
    """Schema for an input series CSV: the target column plus any regressors."""
    cols = (value_col, *tuple(regressor_cols))
    return SchemaSpec(
        name="series_input",
        required_cols=cols,
        dtype_hints={c: "float" for c in cols},
    )


def assert_schema(df: pd.DataFrame, spec: SchemaSpec) -> None:
    """Raise a KeyError if required columns are missing."""
    missing = _missing_cols(df, spec.required_cols)
    if missing:
        raise KeyError(
            f"{spec.name}: missing columns {missing}. Found: {list(df.columns)}"
        )
