"""src/ssforecast/io/writers.py"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import joblib
import pandas as pd


def ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def write_csv(df: pd.DataFrame, path: Path, *, index: bool = False) -> Path:
    """Write DataFrame to CSV (ensures parent folder exists)."""
    ensure_parent_dir(path)
    df.to_csv(path, index=index)
    return path


def save_payload(payload: dict[str, Any], path: Path) -> Path:
    """Persist a fitted-model payload with joblib."""
    ensure_parent_dir(path)
    joblib.dump(payload, path)
    return path


def load_payload(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Missing model payload:\n{path}\nRun `ssforecast fit` first.")
    try:
        payload = joblib.load(path)
    except Exception as e:
        raise RuntimeError(f"Failed to load model payload at {path}: {e}") from e
    if not isinstance(payload, dict) or "result" not in payload:
        raise RuntimeError(f"Model payload at {path} has no 'result' entry.")
    return payload
