"""src/ssforecast/engine/forecaster.py"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ssforecast.engine.structures import (
    ExogenousBlock,
    System,
    as_system,
    as_tail,
    check_exogenous_rows,
)
from ssforecast.validation.checks import check_horizon, collect


def project(system: System, tail: np.ndarray, exogenous: ExogenousBlock | None, horizon: int) -> np.ndarray:
    """Error-free projection of an already validated system from a maxlag-row tail."""
    maxlag = system.maxlag
    path = np.zeros((horizon + maxlag, system.n_states))
    path[:maxlag] = tail
    out = np.zeros(horizon)
    coef = None if exogenous is None else exogenous.coefficient_at(0)

    with np.errstate(over="ignore", invalid="ignore"):
        for k in range(horizon):
            t = k + maxlag
            lagged = system.lagged(path, t)
            path[t] = system.transition @ lagged
            out[k] = system.w(k) @ lagged
            if exogenous is not None:
                out[k] += exogenous.contribution(k, coef)
                coef = exogenous.transition @ coef
    return out


def forecast(
    state_tail: np.ndarray,
    transition: np.ndarray,
    measurement: np.ndarray,
    lags: np.ndarray | Sequence[int] | None,
    exogenous: ExogenousBlock | None,
    horizon: int,
) -> np.ndarray:
    """
    Point forecast for `horizon` steps from the trailing maxlag rows of a state path.

    measurement may be one row or one row per forecast step; exogenous, if
    given, must carry regressors for the horizon (see ExogenousBlock.continued).
    """
    h = int(horizon)
    collect(check_horizon(h)).raise_if_failed()
    system = as_system(transition, measurement, lags, rows=h)
    tail = as_tail(state_tail, system)
    check_exogenous_rows(exogenous, h)
    return project(system, tail, exogenous, h)
