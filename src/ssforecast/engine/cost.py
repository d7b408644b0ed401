"""
src/ssforecast/engine/cost.py

Scalar losses over one-step residuals or the multi-horizon error matrix, and
the CostFunction adapter that an external optimiser minimises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Sequence

import numpy as np

from ssforecast.engine.backcast import fit_backcast
from ssforecast.engine.fitter import fit
from ssforecast.engine.multistep import multi_horizon_errors
from ssforecast.engine.structures import FitResult, ModelStructure, as_series

logger = logging.getLogger(__name__)

SENTINEL = 1e100
ADMISSIBLE_TOLERANCE = 1e-10

ONE_STEP_LOSSES = ("MSE", "MAE", "HAM")
MULTISTEP_LOSSES = ("TV", "TLV", "hsteps", "GV")

LOSS_ALIASES = {
    "aTFL": "GV",
    "TMSE": "TV",
    "GTMSE": "TLV",
    "MSEh": "hsteps",
}

Bounds = Literal["admissible", "none"]
StructureBuilder = Callable[[np.ndarray], ModelStructure]


def canonical_loss(name: str) -> str:
    """Resolve aliases; raise ValueError for unknown names."""
    key = str(name).strip()
    key = LOSS_ALIASES.get(key, key)
    if key not in ONE_STEP_LOSSES + MULTISTEP_LOSSES:
        known = ONE_STEP_LOSSES + MULTISTEP_LOSSES + tuple(LOSS_ALIASES)
        raise ValueError(f"Unknown loss {name!r}; expected one of {list(known)}")
    return key


def is_multistep(name: str) -> bool:
    return canonical_loss(name) in MULTISTEP_LOSSES


def default_normalizer(y: np.ndarray | Sequence[float]) -> float:
    """Mean absolute first difference of y, or 1.0 when that is zero or undefined."""
    arr = np.asarray(y, dtype=float)
    if arr.size < 2:
        return 1.0
    value = float(np.mean(np.abs(np.diff(arr))))
    return value if np.isfinite(value) and value > 0 else 1.0


def _generalised_variance(errors: np.ndarray, normalizer: float) -> float:
    n_obs, h = errors.shape
    full_rows = n_obs - h + 1
    scaled = errors[:full_rows] / normalizer
    cov = scaled.T @ scaled / full_rows
    offset = h * np.log(normalizer ** 2)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        try:
            return float(np.log(np.prod(np.linalg.eigvalsh(cov))) + offset)
        except np.linalg.LinAlgError:
            return float(np.log(np.linalg.det(cov)) + offset)


def evaluate_cost(loss: str, errors: np.ndarray, normalizer: float = 1.0) -> float:
    """
    Reduce residuals (one-step losses) or an (n, h) error matrix (multistep
    losses) to a scalar.

    MSE/MAE/HAM: mean of e^2, |e|, |e|^0.5 over the residuals.
    TV/TLV:     sum over horizons of mean (log mean for TLV) squared error,
                using each column's valid entries (n - j of them for column j).
    hsteps:     mean squared error of the last horizon over its n - h + 1 rows.
    GV:         log of the product of eigenvalues of the covariance of the first
                n - h + 1 rows scaled by normalizer, plus h * log(normalizer^2);
                log-determinant if the eigen-decomposition fails.
    """
    key = canonical_loss(loss)
    e = np.asarray(errors, dtype=float)

    if key in ONE_STEP_LOSSES:
        e = e.reshape(-1)
        if e.size == 0:
            raise ValueError("Cannot evaluate a loss on an empty residual series.")
        if key == "MSE":
            return float(np.mean(e ** 2))
        if key == "MAE":
            return float(np.mean(np.abs(e)))
        return float(np.mean(np.abs(e) ** 0.5))

    if e.ndim == 1:
        e = e.reshape(-1, 1)
    n_obs, h = e.shape
    if n_obs < h or n_obs == 0:
        raise ValueError(f"Error matrix {e.shape} has no complete row for horizon {h}.")

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        if key == "TV":
            return float(sum(np.mean(e[: n_obs - j, j] ** 2) for j in range(h)))
        if key == "TLV":
            return float(sum(np.log(np.mean(e[: n_obs - j, j] ** 2)) for j in range(h)))
        if key == "hsteps":
            return float(np.mean(e[: n_obs - h + 1, h - 1] ** 2))
    return _generalised_variance(e, float(normalizer))


def spectral_radius(transition: np.ndarray, persistence: np.ndarray, measurement: np.ndarray) -> float:
    """Largest eigenvalue modulus of the discount matrix F - g w."""
    F = np.atleast_2d(np.asarray(transition, dtype=float))
    g = np.asarray(persistence, dtype=float).reshape(-1)
    w = np.atleast_2d(np.asarray(measurement, dtype=float))[0]
    with np.errstate(over="ignore", invalid="ignore"):
        discount = F - np.outer(g, w)
    if not np.all(np.isfinite(discount)):
        return float("inf")
    try:
        return float(np.max(np.abs(np.linalg.eigvals(discount))))
    except np.linalg.LinAlgError:
        return float("inf")


def is_admissible(structure: ModelStructure, tolerance: float = ADMISSIBLE_TOLERANCE) -> bool:
    return spectral_radius(structure.transition, structure.persistence, structure.measurement) <= 1 + tolerance


def has_finite_start(structure: ModelStructure) -> bool:
    """True when the initial block and initial regressor coefficients are all finite."""
    if not np.all(np.isfinite(structure.initial_states)):
        return False
    if structure.exogenous is None:
        return True
    return bool(np.all(np.isfinite(structure.exogenous.coefficient_at(0))))


def fit_structure(
    structure: ModelStructure,
    y: np.ndarray,
    *,
    backcasting: bool,
    variance: np.ndarray | None = None,
) -> FitResult:
    fitter = fit_backcast if backcasting else fit
    return fitter(
        structure.initial_states,
        structure.transition,
        structure.measurement,
        structure.persistence,
        y,
        variance,
        structure.lags,
        structure.exogenous,
    )


@dataclass(frozen=True)
class CostEvaluation:
    value: float
    admissible: bool = True
    spectral_radius: float | None = None


@dataclass(frozen=True)
class CostFunction:
    """
    Closure handed to an optimiser: params -> structure -> fit -> loss.

    builder maps a parameter vector to a ModelStructure. Non-finite losses come
    back as SENTINEL, as do structures with non-finite initial states or
    regressor coefficients (those are never fitted). With bounds="admissible" the spectral radius of F - g w
    is reported on each evaluation; enforcing it is up to the caller.
    """
    builder: StructureBuilder
    y: np.ndarray
    loss: str = "MSE"
    horizon: int = 1
    backcasting: bool = False
    bounds: Bounds = "none"
    normalizer: float | None = None
    variance: np.ndarray | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "y", as_series(self.y))
        object.__setattr__(self, "loss", canonical_loss(self.loss))
        if self.bounds not in ("admissible", "none"):
            raise ValueError(f"bounds must be 'admissible' or 'none'; got {self.bounds!r}")
        if self.normalizer is None:
            object.__setattr__(self, "normalizer", default_normalizer(self.y))
        if int(self.horizon) < 1:
            raise ValueError(f"horizon must be >= 1; got {self.horizon}")

    @property
    def multistep(self) -> bool:
        return self.loss in MULTISTEP_LOSSES

    def errors(self, structure: ModelStructure, result: FitResult) -> np.ndarray:
        if not self.multistep:
            return result.residuals
        return multi_horizon_errors(
            result.state_path,
            structure.transition,
            structure.measurement,
            self.y,
            structure.lags,
            result.exogenous,
            self.horizon,
        )

    def evaluate(self, params: np.ndarray | Sequence[float]) -> CostEvaluation:
        structure = self.builder(np.asarray(params, dtype=float))
        if has_finite_start(structure):
            result = fit_structure(structure, self.y, backcasting=self.backcasting, variance=self.variance)
            value = evaluate_cost(self.loss, self.errors(structure, result), self.normalizer)
        else:
            logger.debug("Non-finite initial states or coefficients at params=%s; using sentinel.", params)
            value = SENTINEL
        if not np.isfinite(value):
            logger.debug("Non-finite %s loss at params=%s; using sentinel.", self.loss, params)
            value = SENTINEL

        if self.bounds == "none":
            return CostEvaluation(value=value)
        radius = spectral_radius(structure.transition, structure.persistence, structure.measurement)
        return CostEvaluation(
            value=value,
            admissible=bool(radius <= 1 + ADMISSIBLE_TOLERANCE),
            spectral_radius=radius,
        )

    def __call__(self, params: np.ndarray | Sequence[float]) -> float:
        return self.evaluate(params).value
