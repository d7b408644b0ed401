"""src/ssforecast/modeling/__init__.py"""

from .estimation import EstimationResult, estimate
from .evaluation import MetricPack, compute_metrics
from .local_level import LocalLevel
from .sma import SMA, sma_structure

__all__ = [
    "SMA",
    "sma_structure",
    "LocalLevel",
    "EstimationResult",
    "estimate",
    "MetricPack",
    "compute_metrics",
]
