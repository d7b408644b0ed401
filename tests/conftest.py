"""tests/conftest.py"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import pytest
import yaml

from ssforecast.common.config import AppConfig, load_config


@pytest.fixture
def small_series() -> np.ndarray:
    return np.array([10.0, 12.0, 9.0, 11.0])


@pytest.fixture
def level_series() -> np.ndarray:
    """Random walk plus noise; a local level model is the right structure for it."""
    rng = np.random.default_rng(1234)
    level = 100.0 + np.cumsum(rng.normal(0.0, 1.0, size=60))
    return level + rng.normal(0.0, 2.0, size=60)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    # Emulate repository root in temp dir
    (tmp_path / "configs").mkdir(parents=True, exist_ok=True)
    (tmp_path / "data").mkdir(parents=True, exist_ok=True)
    return tmp_path


def default_raw_config() -> dict[str, Any]:
    return {
        "paths": {
            "data_dir": "data",
            "models_dir": "artifacts/models",
            "forecasts_dir": "artifacts/forecasts",
            "metrics_dir": "artifacts/metrics",
        },
        "logging": {"level": "INFO", "file": "artifacts/logs/test.log", "engine_level": "WARNING"},
        "data": {"series_csv": "data/series.csv", "value_col": "y", "regressor_cols": []},
        "model": {"family": "local_level", "period": 1},
        "estimation": {"loss": "MSE", "initial": "backcasting", "bounds": "admissible", "holdout": 6, "maxiter": 200},
        "forecast": {"horizon": 4, "interval_level": 0.9, "interval_kind": "parametric"},
    }


def write_config(project_root: Path, raw: dict[str, Any]) -> AppConfig:
    path = project_root / "configs" / "config.yaml"
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(raw, f)
    return load_config(path)


def write_series(project_root: Path, y: np.ndarray, **regressors: np.ndarray) -> Path:
    path = project_root / "data" / "series.csv"
    pd.DataFrame({"y": y, **regressors}).to_csv(path, index=False)
    return path


@pytest.fixture
def make_config(project_root: Path):
    """Write configs/config.yaml under the temp project root and load it."""

    def _make(**sections: dict[str, Any]) -> AppConfig:
        raw = default_raw_config()
        for name, values in sections.items():
            raw.setdefault(name, {}).update(values)
        return write_config(project_root, raw)

    return _make


@pytest.fixture
def series_csv(project_root: Path):
    """Write data/series.csv (column y plus any named regressors)."""

    def _write(y: np.ndarray, **regressors: np.ndarray) -> Path:
        return write_series(project_root, y, **regressors)

    return _write
