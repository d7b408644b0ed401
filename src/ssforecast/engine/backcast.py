"""
src/ssforecast/engine/backcast.py

Initial-state estimation by alternating forward and backward passes.

Schedule (fixed, not a convergence test): four forward passes, each followed
by a short error-free projection of maxlag rows past the sample end; the first
three are followed by a backward pass that walks the sample in reverse with
mirrored lags (row t + lag) and then re-derives the initial block. The fourth
forward pass leaves fitted values and residuals aligned with the sample.

Forward passes repair non-finite entries from the row before; backward passes
repair from the row after.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from ssforecast.engine.fitter import forward_pass, observe, repair_row, start_coefficients
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

BACKCAST_ROUNDS = 4


def _project_tail(system: System, path: np.ndarray, n_obs: int) -> int:
    maxlag = system.maxlag
    repaired = 0
    with np.errstate(over="ignore", invalid="ignore"):
        for t in range(n_obs + maxlag, n_obs + 2 * maxlag):
            path[t] = system.transition @ system.lagged(path, t)
            repaired += repair_row(path, t, t - 1)
    return repaired


def _backward_pass(
    system: System,
    path: np.ndarray,
    y: np.ndarray,
    gains: np.ndarray,
    fitted: np.ndarray,
    residuals: np.ndarray,
    exogenous: ExogenousBlock | None,
    coefs: np.ndarray | None,
) -> int:
    maxlag = system.maxlag
    repaired = 0
    with np.errstate(over="ignore", invalid="ignore"):
        for k in range(y.size - 1, -1, -1):
            t = k + maxlag
            lagged = system.mirrored(path, t)
            coef = None if coefs is None else coefs[k]
            fitted[k], residuals[k] = observe(system, path, t, lagged, k, y[k], gains[k], exogenous, coef)
            repaired += repair_row(path, t, t + 1)

        for t in range(maxlag - 1, -1, -1):
            path[t] = system.transition @ system.mirrored(path, t)
            repaired += repair_row(path, t, t + 1)
    return repaired


def fit_backcast(
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
    Same contract as fit(), but the initial block of state_init is only a
    starting point: the returned state path carries the backcast initial
    states. Exogenous coefficients follow the forward rule; backward passes
    reuse the path of the preceding forward pass.
    """
    obs = as_series(y)
    n = obs.size
    system = as_system(transition, measurement, lags, persistence, rows=n)
    init = as_states(state_init, system, name="state_init")
    gains = gain_matrix(system, variance, n)
    check_exogenous_rows(exogenous, n)

    maxlag = system.maxlag
    path = np.empty((n + 2 * maxlag, system.n_states))
    path[:maxlag] = init
    fitted = np.zeros(n)
    residuals = np.zeros(n)
    coefs = start_coefficients(exogenous, n)

    repaired = 0
    for round_ in range(BACKCAST_ROUNDS):
        repaired += forward_pass(system, path, obs, gains, fitted, residuals, exogenous, coefs)
        repaired += _project_tail(system, path, n)
        if round_ < BACKCAST_ROUNDS - 1:
            repaired += _backward_pass(system, path, obs, gains, fitted, residuals, exogenous, coefs)

    if repaired:
        logger.debug("Repaired %d non-finite state values during backcasting.", repaired)

    return FitResult(
        state_path=path[: n + maxlag].copy(),
        fitted=fitted,
        residuals=residuals,
        exogenous=None if exogenous is None else exogenous.with_path(coefs),
    )
