"""src/ssforecast/validation/checks.py"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class CheckResult:
    ok: bool
    errors: tuple[str, ...]

    def raise_if_failed(self) -> None:
        if not self.ok:
            msg = "\n".join(self.errors) if self.errors else "Validation failed."
            raise ValueError(msg)


def check_series(y: np.ndarray, *, name: str = "y") -> list[str]:
    errs: list[str] = []
    if y.ndim != 1:
        errs.append(f"{name}: expected a 1-D series; got shape={y.shape}")
    elif y.size == 0:
        errs.append(f"{name}: series is empty")
    return errs


def check_transition(transition: np.ndarray, n_states: int) -> list[str]:
    if transition.shape != (n_states, n_states):
        return [f"transition: expected ({n_states}, {n_states}); got {transition.shape}"]
    return []


def check_measurement(measurement: np.ndarray, n_states: int, *, min_rows: int) -> list[str]:
    errs: list[str] = []
    if measurement.ndim != 2 or measurement.shape[1] != n_states:
        errs.append(f"measurement: expected width {n_states}; got shape={measurement.shape}")
    elif measurement.shape[0] != 1 and measurement.shape[0] < min_rows:
        errs.append(f"measurement: expected 1 or >= {min_rows} rows; got {measurement.shape[0]}")
    return errs


def check_persistence(persistence: np.ndarray, n_states: int) -> list[str]:
    if persistence.shape != (n_states,):
        return [f"persistence: expected length {n_states}; got shape={persistence.shape}"]
    return []


def check_lags(lags: np.ndarray, n_states: int) -> list[str]:
    errs: list[str] = []
    if lags.shape != (n_states,):
        errs.append(f"lags: expected one lag per state ({n_states}); got shape={lags.shape}")
    elif np.any(lags < 1):
        errs.append(f"lags: all lags must be >= 1; got {lags.tolist()}")
    return errs


def check_initial_block(states: np.ndarray, n_states: int, maxlag: int) -> list[str]:
    errs: list[str] = []
    if states.ndim != 2 or states.shape[1] != n_states:
        errs.append(f"states: expected width {n_states}; got shape={states.shape}")
        return errs
    if states.shape[0] < maxlag:
        errs.append(f"states: need at least maxlag={maxlag} rows; got {states.shape[0]}")
        return errs
    if not np.all(np.isfinite(states[:maxlag])):
        errs.append("states: initial block contains non-finite values")
    return errs


def check_variance(variance: np.ndarray, n_obs: int, n_states: int) -> list[str]:
    if variance.shape not in ((n_obs,), (n_obs, 1), (n_obs, n_states)):
        return [f"variance: expected ({n_obs},) or ({n_obs}, {n_states}); got {variance.shape}"]
    return []


def check_exogenous(
    regressors: np.ndarray,
    coefficients: np.ndarray,
    *,
    min_rows: int,
    finite: bool = True,
) -> list[str]:
    """finite=False skips the coefficient value check (shape checks only)."""
    errs: list[str] = []
    if regressors.ndim != 2:
        errs.append(f"exogenous: regressors must be 2-D; got shape={regressors.shape}")
        return errs
    k = regressors.shape[1]
    if regressors.shape[0] < min_rows:
        errs.append(f"exogenous: need >= {min_rows} regressor rows; got {regressors.shape[0]}")
    if coefficients.shape[-1] != k:
        errs.append(f"exogenous: {k} regressors but coefficients have shape={coefficients.shape}")
    elif finite and not np.all(np.isfinite(coefficients)):
        errs.append("exogenous: coefficients contain non-finite values")
    return errs


def check_horizon(horizon: int, *, n_obs: int | None = None) -> list[str]:
    errs: list[str] = []
    if horizon < 1:
        errs.append(f"horizon: must be >= 1; got {horizon}")
    elif n_obs is not None and horizon > n_obs:
        errs.append(f"horizon: {horizon} exceeds sample length {n_obs}")
    return errs


def collect(*groups: Sequence[str]) -> CheckResult:
    """Merge error lists from several checks into one result."""
    errors = tuple(e for g in groups for e in g)
    return CheckResult(ok=(len(errors) == 0), errors=errors)
