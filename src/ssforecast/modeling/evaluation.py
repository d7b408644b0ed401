"""src/ssforecast/modeling/evaluation.py"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np


def _to_valid_arrays(y_true: Iterable[float], y_pred: Iterable[float]) -> tuple[np.ndarray, np.ndarray]:
    yt = np.asarray(list(y_true), dtype=float)
    yp = np.asarray(list(y_pred), dtype=float)
    if yt.shape != yp.shape:
        raise ValueError(f"Shape mismatch: actuals {yt.shape} vs forecasts {yp.shape}")
    valid = np.isfinite(yt) & np.isfinite(yp)
    return yt[valid], yp[valid]


def mean_error(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    if y_true.size == 0:
        return float("nan")
    return float(np.mean(y_true - y_pred))


def mae(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    if y_true.size == 0:
        return float("nan")
    return float(np.mean(np.abs(y_true - y_pred)))


def rmse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    if y_true.size == 0:
        return float("nan")
    return float(np.sqrt(np.mean((y_true - y_pred) ** 2)))


def smape(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    if y_true.size == 0:
        return float("nan")
    denom = (np.abs(y_true) + np.abs(y_pred)) / 2.0
    denom = np.where(denom == 0, 1.0, denom)
    return float(np.mean(np.abs(y_true - y_pred) / denom) * 100.0)


def mase(y_true: np.ndarray, y_pred: np.ndarray, insample: np.ndarray | None) -> float:
    """MAE scaled by the in-sample mean absolute first difference."""
    if y_true.size == 0 or insample is None:
        return float("nan")
    x = np.asarray(insample, dtype=float)
    x = x[np.isfinite(x)]
    if x.size < 2:
        return float("nan")
    scale = float(np.mean(np.abs(np.diff(x))))
    if scale == 0:
        return float("nan")
    return mae(y_true, y_pred) / scale


@dataclass(frozen=True)
class MetricPack:
    me: float
    mae: float
    rmse: float
    smape: float
    mase: float

    def as_dict(self) -> dict[str, float]:
        return {
            "ME": float(self.me),
            "MAE": float(self.mae),
            "RMSE": float(self.rmse),
            "SMAPE": float(self.smape),
            "MASE": float(self.mase),
        }


def compute_metrics(
    y_true: Iterable[float],
    y_pred: Iterable[float],
    *,
    insample: Iterable[float] | None = None,
) -> MetricPack:
    yt, yp = _to_valid_arrays(y_true, y_pred)
    ins = None if insample is None else np.asarray(list(insample), dtype=float)
    return MetricPack(
        me=mean_error(yt, yp),
        mae=mae(yt, yp),
        rmse=rmse(yt, yp),
        smape=smape(yt, yp),
        mase=mase(yt, yp, ins),
    )
