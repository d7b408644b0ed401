"""src/ssforecast/engine/multistep.py"""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

import numpy as np

from ssforecast.engine.forecaster import project
from ssforecast.engine.structures import ExogenousBlock, as_series, as_system, check_exogenous_rows
from ssforecast.validation.checks import check_horizon, check_initial_block, collect


def multi_horizon_errors(
    state_path: np.ndarray,
    transition: np.ndarray,
    measurement: np.ndarray,
    y: np.ndarray | Sequence[float],
    lags: np.ndarray | Sequence[int] | None,
    exogenous: ExogenousBlock | None,
    horizon: int,
) -> np.ndarray:
    """
    1..h step ahead errors from every origin in the sample.

    Row t holds the errors of forecasts made with the state available before
    observation t. Origins closer than h to the end only fill the horizons
    they can be checked against; the rest stay NaN, so exactly n - h + 1 rows
    are complete.
    """
    obs = as_series(y)
    n = obs.size
    h = int(horizon)
    collect(check_horizon(h, n_obs=n)).raise_if_failed()
    system = as_system(transition, measurement, lags, rows=n)
    maxlag = system.maxlag

    path = np.asarray(state_path, dtype=float)
    errs = check_initial_block(path, system.n_states, n + maxlag)
    collect([e.replace("states", "state_path", 1) for e in errs]).raise_if_failed()
    check_exogenous_rows(exogenous, n)

    errors = np.full((n, h), np.nan)
    for k in range(n):
        hh = min(h, n - k)
        sub = replace(system, measurement=system.measurement_rows(k, k + hh))
        block = None if exogenous is None else exogenous.window(k, k + hh)
        errors[k, :hh] = obs[k : k + hh] - project(sub, path[k : k + maxlag], block, hh)
    return errors
