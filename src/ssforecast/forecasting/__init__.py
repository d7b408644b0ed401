"""src/ssforecast/forecasting/__init__.py"""

from .intervals import IntervalResult, empirical_pi, horizon_sigma, parametric_pi

__all__ = [
    "IntervalResult",
    "horizon_sigma",
    "parametric_pi",
    "empirical_pi",
]
