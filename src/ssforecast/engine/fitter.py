"""
src/ssforecast/engine/fitter.py

One forward pass of the single-source-of-error recursion:

    fitted[t] = w[t] . x(t - lags) + exogenous[t]
    e[t]      = y[t] - fitted[t]
    x[t]      = F . x(t - lags) + (g / v[t]) * e[t]

The state path starts with a maxlag-row initial block. Non-finite values in a
freshly written row are replaced by the row before it, so pathological
parameters never leak NaN/Inf into later steps.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from ssforecast.engine.structures import (
    ExogenousBlock,
    FitResult,
    System,
    as_series,
    as_states,
    as_system,
    check_exogenous_rows,
    gain_matrix,
)

logger = logging.getLogger(__name__)


def repair_row(matrix: np.ndarray, row: int, source: int) -> int:
    """Copy finite neighbours over non-finite entries of matrix[row]."""
    bad = ~np.isfinite(matrix[row])
    n_bad = int(bad.sum())
    if n_bad:
        matrix[row, bad] = matrix[source, bad]
    return n_bad


def observe(
    system: System,
    path: np.ndarray,
    t: int,
    lagged: np.ndarray,
    k: int,
    y_k: float,
    gain_k: np.ndarray,
    exogenous: ExogenousBlock | None,
    coef: np.ndarray | None,
) -> tuple[float, float]:
    """Fitted value and error for observation k, writing the new state into path[t]."""
    fitted = float(system.w(k) @ lagged)
    if exogenous is not None:
        fitted += exogenous.contribution(k, coef)
    error = y_k - fitted
    path[t] = system.transition @ lagged + gain_k * error
    return fitted, error


def start_coefficients(exogenous: ExogenousBlock | None, n_obs: int) -> np.ndarray | None:
    if exogenous is None:
        return None
    coefs = np.empty((n_obs + 1, exogenous.n_regressors))
    coefs[0] = exogenous.coefficient_at(0)
    return coefs


def forward_pass(
    system: System,
    path: np.ndarray,
    y: np.ndarray,
    gains: np.ndarray,
    fitted: np.ndarray,
    residuals: np.ndarray,
    exogenous: ExogenousBlock | None = None,
    coefs: np.ndarray | None = None,
) -> int:
    """Run the recursion over the whole sample in place. Returns the repair count."""
    maxlag = system.maxlag
    repaired = 0
    with np.errstate(over="ignore", invalid="ignore"):
        for k in range(y.size):
            t = k + maxlag
            lagged = system.lagged(path, t)
            coef = None if coefs is None else coefs[k]
            fitted[k], residuals[k] = observe(system, path, t, lagged, k, y[k], gains[k], exogenous, coef)
            repaired += repair_row(path, t, t - 1)
            if coefs is not None:
                coefs[k + 1] = exogenous.step(coefs[k], k, residuals[k])
                repaired += repair_row(coefs, k + 1, k)
    return repaired


def fit(
    state_init: np.ndarray,
    transition: np.ndarray,
    measurement: np.ndarray,
    persistence: np.ndarray,
    y: np.ndarray | Sequence[float],
    variance: np.ndarray | None = None,
    lags: np.ndarray | Sequence[int] | None = None,
    exogenous: ExogenousBlock | None = None,
) -> FitResult:
    """
    Fit the recursion once over y.

    Args:
        state_init: Initial block (at least maxlag rows; only the first maxlag are used).
        transition: F, (m, m).
        measurement: w, a single row (m,) or one row per observation (n, m).
        persistence: g, (m,).
        y: Observed series, length n.
        variance: Optional per-observation scale for g, (n,) or (n, m).
        lags: One lag per state component; defaults to all ones.
        exogenous: Optional regressors and coefficient state.

    Returns:
        FitResult with an (n + maxlag, m) state path whose first maxlag rows
        are the initial block, plus fitted values and residuals.

    Raises:
        ValueError: On mismatched dimensions or an empty series.
    """
    obs = as_series(y)
    n = obs.size
    system = as_system(transition, measurement, lags, persistence, rows=n)
    init = as_states(state_init, system, name="state_init")
    gains = gain_matrix(system, variance, n)
    check_exogenous_rows(exogenous, n)

    maxlag = system.maxlag
    path = np.empty((n + maxlag, system.n_states))
    path[:maxlag] = init
    fitted = np.zeros(n)
    residuals = np.zeros(n)
    coefs = start_coefficients(exogenous, n)

    repaired = forward_pass(system, path, obs, gains, fitted, residuals, exogenous, coefs)
    if repaired:
        logger.debug("Repaired %d non-finite state values during fit.", repaired)

    return FitResult(
        state_path=path,
        fitted=fitted,
        residuals=residuals,
        exogenous=None if exogenous is None else exogenous.with_path(coefs),
    )
