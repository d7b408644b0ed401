"""src/ssforecast/pipelines/__init__.py"""

from .run_fit import build_model, run_fit
from .run_forecast import forecast_frame, run_forecast

__all__ = [
    "build_model",
    "forecast_frame",
    "run_fit",
    "run_forecast",
]
