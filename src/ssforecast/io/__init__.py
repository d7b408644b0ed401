"""src/ssforecast/io/__init__.py"""

from .readers import SeriesData, read_csv, read_regressors, read_series
from .writers import ensure_parent_dir, load_payload, save_payload, write_csv

__all__ = [
    # readers
    "SeriesData",
    "read_csv",
    "read_series",
    "read_regressors",
    # writers
    "ensure_parent_dir",
    "write_csv",
    "save_payload",
    "load_payload",
]
