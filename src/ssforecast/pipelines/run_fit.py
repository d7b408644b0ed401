"""src/ssforecast/pipelines/run_fit.py"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from ssforecast.common.config import AppConfig
from ssforecast.common.utils import get_option, safe_int
from ssforecast.engine.structures import ExogenousBlock
from ssforecast.io.readers import SeriesData, read_series
from ssforecast.io.writers import save_payload, write_csv
from ssforecast.modeling.estimation import EstimationResult, estimate
from ssforecast.modeling.evaluation import compute_metrics
from ssforecast.modeling.local_level import LocalLevel
from ssforecast.modeling.sma import SMA
from ssforecast.validation.schemas import FITTED_OUTPUT, assert_schema

logger = logging.getLogger(__name__)

MODEL_FILE = "model.joblib"


def regressor_cols(cfg: AppConfig) -> tuple[str, ...]:
    cols = get_option(cfg.data, "regressor_cols", []) or []
    return tuple(str(c).strip() for c in cols)


def model_path(cfg: AppConfig) -> Path:
    return cfg.path_for("models_dir", "artifacts/models") / MODEL_FILE


def build_model(cfg: AppConfig, y: np.ndarray, regressors: np.ndarray | None = None) -> tuple[Any, bool]:
    """
    Builder for the configured model family plus whether it is fitted with
    backcasting. SMA has no free initials, so it is always backcast.
    """
    family = str(get_option(cfg.model, "family", "local_level")).strip().lower()
    initial = str(get_option(cfg.estimation, "initial", "backcasting")).strip().lower()

    if family == "sma":
        if regressors is not None:
            logger.warning("SMA ignores exogenous regressors.")
        order = safe_int(get_option(cfg.model, "order", 3), 3)
        return SMA(y=y, order=order), True

    if family == "local_level":
        exogenous = None
        estimate_exogenous = False
        if regressors is not None:
            exogenous = ExogenousBlock(regressors=regressors, coefficients=np.zeros(regressors.shape[1]))
            estimate_exogenous = bool(get_option(cfg.model, "estimate_exogenous", True))
        model = LocalLevel(
            y=y,
            period=safe_int(get_option(cfg.model, "period", 1), 1),
            initial=initial,
            exogenous=exogenous,
            estimate_exogenous=estimate_exogenous,
        )
        return model, initial == "backcasting"

    raise ValueError(f"Unknown model.family {family!r}; expected 'sma' or 'local_level'.")


def fit_series(cfg: AppConfig, series: SeriesData) -> EstimationResult:
    builder, backcasting = build_model(cfg, series.values, series.regressors)
    est = cfg.estimation
    return estimate(
        builder,
        series.values,
        loss=str(get_option(est, "loss", "MSE")),
        horizon=safe_int(get_option(est, "horizon", 1), 1),
        backcasting=backcasting,
        bounds=str(get_option(est, "bounds", "admissible")),
        maxiter=safe_int(get_option(est, "maxiter", 1000), 1000),
    )


def fitted_frame(result: EstimationResult) -> pd.DataFrame:
    df = pd.DataFrame(
        {
            "Step": np.arange(1, result.y.size + 1, dtype=int),
            "Actual": result.y,
            "Fitted": result.fit.fitted,
            "Residual": result.fit.residuals,
        }
    )
    assert_schema(df, FITTED_OUTPUT)
    return df


def holdout_accuracy(result: EstimationResult, train: SeriesData, test: SeriesData) -> pd.DataFrame:
    yhat = result.forecast(len(test), regressors=test.regressors)
    metrics = compute_metrics(test.values, yhat, insample=train.values)
    return pd.DataFrame([{"Model": result.name, "Holdout": len(test), **metrics.as_dict()}])


def run_fit(cfg: AppConfig) -> Path:
    """
    Estimate the configured model and persist it:
      1) read the series (and regressors) from data.series_csv
      2) hold out the last estimation.holdout points, if any
      3) estimate on the training part; score the holdout
      4) save the payload plus fitted values
    """
    series_csv = get_option(cfg.data, "series_csv")
    if not series_csv:
        raise ValueError("Missing data.series_csv in config")
    value_col = str(get_option(cfg.data, "value_col", "y"))
    cols = regressor_cols(cfg)

    series = read_series(cfg.resolve(series_csv), value_col=value_col, regressor_cols=cols)
    holdout = safe_int(get_option(cfg.estimation, "holdout", 0), 0)
    train, test = series.split(holdout)
    logger.info("Loaded %d observations (%d held out).", len(series), len(test))

    result = fit_series(cfg, train)

    metrics_dir = cfg.path_for("metrics_dir", "artifacts/metrics")
    fitted_path = write_csv(fitted_frame(result), metrics_dir / "fitted.csv")
    logger.info("Saved fitted values: %s", fitted_path)

    if len(test) > 0:
        acc = holdout_accuracy(result, train, test)
        acc_path = write_csv(acc, metrics_dir / "holdout_accuracy.csv")
        logger.info("Saved holdout accuracy: %s", acc_path)

    payload = {
        "result": result,
        "model_name": result.name,
        "value_col": value_col,
        "regressor_cols": list(cols),
        "summary": result.summary(),
    }
    out = save_payload(payload, model_path(cfg))
    logger.info("Saved model payload: %s", out)
    return out
