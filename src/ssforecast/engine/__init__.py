"""src/ssforecast/engine/__init__.py"""

from .backcast import BACKCAST_ROUNDS, fit_backcast
from .cost import (
    SENTINEL,
    CostEvaluation,
    CostFunction,
    canonical_loss,
    default_normalizer,
    evaluate_cost,
    fit_structure,
    is_admissible,
    is_multistep,
    spectral_radius,
)
from .fitter import fit
from .forecaster import forecast
from .multistep import multi_horizon_errors
from .structures import ExogenousBlock, FitResult, ModelStructure

__all__ = [
    "BACKCAST_ROUNDS",
    "SENTINEL",
    "CostEvaluation",
    "CostFunction",
    "ExogenousBlock",
    "FitResult",
    "ModelStructure",
    "canonical_loss",
    "default_normalizer",
    "evaluate_cost",
    "fit",
    "fit_backcast",
    "fit_structure",
    "forecast",
    "is_admissible",
    "is_multistep",
    "multi_horizon_errors",
    "spectral_radius",
]
