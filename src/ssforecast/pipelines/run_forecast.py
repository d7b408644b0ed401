"""src/ssforecast/pipelines/run_forecast.py"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from ssforecast.common.config import AppConfig
from ssforecast.common.utils import get_option, safe_float, safe_int
from ssforecast.forecasting.intervals import empirical_pi, parametric_pi
from ssforecast.io.readers import read_regressors
from ssforecast.io.writers import load_payload, write_csv
from ssforecast.modeling.estimation import EstimationResult
from ssforecast.pipelines.run_fit import model_path
from ssforecast.validation.checks import check_horizon, collect
from ssforecast.validation.schemas import FORECAST_OUTPUT, assert_schema

logger = logging.getLogger(__name__)

INTERVAL_KINDS = ("parametric", "empirical", "none")


def _future_regressors(cfg: AppConfig, cols: list[str], horizon: int) -> np.ndarray:
    csv = get_option(cfg.data, "future_regressors_csv")
    if not csv:
        raise ValueError("Model uses regressors; data.future_regressors_csv is required to forecast.")
    x = read_regressors(cfg.resolve(csv), regressor_cols=cols)
    if x.shape[0] < horizon:
        raise ValueError(f"future regressors cover {x.shape[0]} steps; horizon is {horizon}.")
    return x[:horizon]


def forecast_frame(
    result: EstimationResult,
    horizon: int,
    *,
    regressors: np.ndarray | None = None,
    level: float = 0.95,
    kind: str = "parametric",
) -> pd.DataFrame:
    """
    Point forecasts, with bounds from the in-sample multi-step errors unless
    kind is 'none'. Interval horizons are limited to the sample length.
    """
    if kind not in INTERVAL_KINDS:
        raise ValueError(f"interval_kind must be one of {INTERVAL_KINDS}; got {kind!r}")
    n_obs = None if kind == "none" else result.y.size
    collect(check_horizon(horizon, n_obs=n_obs)).raise_if_failed()

    yhat = result.forecast(horizon, regressors=regressors)
    if kind == "none":
        df = pd.DataFrame({"Horizon": np.arange(1, horizon + 1, dtype=int), "Forecast": yhat})
    else:
        errors = result.horizon_errors(horizon)
        pi = parametric_pi(yhat, errors, level) if kind == "parametric" else empirical_pi(yhat, errors, level)
        df = pi.to_frame()

    df.insert(1, "Model", result.name)
    assert_schema(df, FORECAST_OUTPUT)
    return df


def run_forecast(cfg: AppConfig) -> Path:
    """Load the fitted payload and write forecasts to forecasts_dir/forecast_h{h}.csv."""
    payload = load_payload(model_path(cfg))
    result: EstimationResult = payload["result"]

    horizon = safe_int(get_option(cfg.forecast, "horizon", 10), 10)
    level = safe_float(get_option(cfg.forecast, "interval_level", 0.95), 0.95)
    kind = str(get_option(cfg.forecast, "interval_kind", "parametric")).strip().lower()

    regressors = None
    if result.fit.exogenous is not None:
        regressors = _future_regressors(cfg, list(payload.get("regressor_cols", [])), horizon)

    df = forecast_frame(result, horizon, regressors=regressors, level=level, kind=kind)

    out = cfg.path_for("forecasts_dir", "artifacts/forecasts") / f"forecast_h{horizon}.csv"
    write_csv(df, out)

    logger.info("Forecasting complete for %s (h=%d).", result.name, horizon)
    logger.info("Saved forecasts: %s", out)
    return out
