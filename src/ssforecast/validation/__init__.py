"""src/ssforecast/validation/__init__.py"""

from __future__ import annotations

from .checks import (
    CheckResult,
    check_exogenous,
    check_horizon,
    check_initial_block,
    check_lags,
    check_measurement,
    check_persistence,
    check_series,
    check_transition,
    check_variance,
    collect,
)
from .schemas import (
    SchemaSpec,
    assert_schema,
    series_input_schema,
    FITTED_OUTPUT,
    FORECAST_OUTPUT,
)

__all__ = [
    # checks
    "CheckResult",
    "check_exogenous",
    "check_horizon",
    "check_initial_block",
    "check_lags",
    "check_measurement",
    "check_persistence",
    "check_series",
    "check_transition",
    "check_variance",
    "collect",
    # schemas
    "SchemaSpec",
    "assert_schema",
    "series_input_schema",
    "FITTED_OUTPUT",
    "FORECAST_OUTPUT",
]
