"""src/ssforecast/forecasting/intervals.py"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.stats import norm


@dataclass(frozen=True)
class IntervalResult:
    """
    Point forecast with per-horizon bounds.

    kind: "parametric" (normal, sigma per horizon) or "empirical" (error quantiles).
    """
    forecast: np.ndarray
    lower: np.ndarray
    upper: np.ndarray
    level: float
    kind: str

    def to_frame(self, value_col: str = "Forecast") -> pd.DataFrame:
        pct = int(round(self.level * 100))
        return pd.DataFrame(
            {
                "Horizon": np.arange(1, self.forecast.size + 1, dtype=int),
                value_col: self.forecast.astype(float),
                f"Lower_{pct}": self.lower.astype(float),
                f"Upper_{pct}": self.upper.astype(float),
                "Interval_Kind": self.kind,
                "Interval_Level": float(self.level),
            }
        )


def _check_inputs(yhat: np.ndarray, errors: np.ndarray, level: float) -> tuple[np.ndarray, np.ndarray]:
    if not 0.0 < float(level) < 1.0:
        raise ValueError(f"level must be in (0, 1); got {level}")
    f = np.asarray(yhat, dtype=float).reshape(-1)
    e = np.asarray(errors, dtype=float)
    if e.ndim == 1:
        e = e.reshape(-1, 1)
    if e.shape[1] < f.size:
        raise ValueError(f"Error matrix covers {e.shape[1]} horizons; forecast has {f.size}.")
    return f, e[:, : f.size]


def horizon_sigma(errors: np.ndarray) -> np.ndarray:
    """Root mean squared error per horizon column, ignoring undefined entries."""
    e = np.asarray(errors, dtype=float)
    if e.ndim == 1:
        e = e.reshape(-1, 1)
    return np.sqrt(np.nanmean(e ** 2, axis=0))


def parametric_pi(yhat: np.ndarray, errors: np.ndarray, level: float = 0.95) -> IntervalResult:
    """Normal bounds with a separate sigma for every horizon."""
    f, e = _check_inputs(yhat, errors, level)
    z = float(norm.ppf((1.0 + level) / 2.0))
    sigma = horizon_sigma(e)
    return IntervalResult(forecast=f, lower=f - z * sigma, upper=f + z * sigma, level=level, kind="parametric")


def empirical_pi(yhat: np.ndarray, errors: np.ndarray, level: float = 0.95) -> IntervalResult:
    """
    Bounds from the quantiles of the in-sample j-step errors, robust if
    errors are skewed or heavy tailed.
    """
    f, e = _check_inputs(yhat, errors, level)
    lo_q = np.nanquantile(e, (1.0 - level) / 2.0, axis=0)
    hi_q = np.nanquantile(e, 1.0 - (1.0 - level) / 2.0, axis=0)
    return IntervalResult(forecast=f, lower=f + lo_q, upper=f + hi_q, level=level, kind="empirical")
