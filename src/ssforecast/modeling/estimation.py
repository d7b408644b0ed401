"""src/ssforecast/modeling/estimation.py"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
from scipy.optimize import minimize

from ssforecast.engine.cost import (
    ADMISSIBLE_TOLERANCE,
    SENTINEL,
    Bounds,
    CostFunction,
    StructureBuilder,
    fit_structure,
    spectral_radius,
)
from ssforecast.engine.forecaster import forecast
from ssforecast.engine.multistep import multi_horizon_errors
from ssforecast.engine.structures import FitResult, ModelStructure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EstimationResult:
    name: str
    params: np.ndarray
    structure: ModelStructure
    fit: FitResult
    y: np.ndarray
    loss: str
    cost: float
    admissible: bool
    spectral_radius: float
    n_evaluations: int

    @property
    def maxlag(self) -> int:
        return self.structure.maxlag

    def forecast(
        self,
        horizon: int,
        regressors: np.ndarray | None = None,
        measurement: np.ndarray | None = None,
    ) -> np.ndarray:
        """
        Point forecast from the end of the sample.

        regressors are required when the model has an exogenous block; the
        last in-sample measurement row is reused unless one is given.
        """
        exogenous = None
        if self.fit.exogenous is not None:
            if regressors is None:
                raise ValueError(f"{self.name} uses exogenous regressors; future values are required.")
            x = np.asarray(regressors, dtype=float)
            exogenous = self.fit.exogenous.continued(x.reshape(x.shape[0], -1)[: int(horizon)])
        w = np.atleast_2d(self.structure.measurement)[-1] if measurement is None else measurement
        return forecast(
            self.fit.tail(self.maxlag),
            self.structure.transition,
            w,
            self.structure.lags,
            exogenous,
            horizon,
        )

    def horizon_errors(self, horizon: int) -> np.ndarray:
        return multi_horizon_errors(
            self.fit.state_path,
            self.structure.transition,
            self.structure.measurement,
            self.y,
            self.structure.lags,
            self.fit.exogenous,
            horizon,
        )

    def summary(self) -> dict[str, Any]:
        return {
            "Model": self.name,
            "Loss": self.loss,
            "Cost": float(self.cost),
            "Params": [float(p) for p in self.params],
            "Admissible": bool(self.admissible),
            "Spectral_Radius": float(self.spectral_radius),
            "Evaluations": int(self.n_evaluations),
        }


def _optimise(objective, x0: np.ndarray, maxiter: int) -> tuple[np.ndarray, float]:
    """Powell first, then Nelder-Mead from its solution; keep whichever is lower."""
    first = minimize(objective, x0, method="Powell", options={"xtol": 1e-8, "ftol": 1e-10, "maxfev": maxiter})
    second = minimize(
        objective,
        np.atleast_1d(first.x),
        method="Nelder-Mead",
        options={"xatol": 1e-8, "fatol": 1e-10, "maxiter": maxiter},
    )
    best = second if second.fun <= first.fun else first
    return np.atleast_1d(np.asarray(best.x, dtype=float)), float(best.fun)


def estimate(
    builder: StructureBuilder,
    y: np.ndarray | Sequence[float],
    *,
    loss: str = "MSE",
    horizon: int = 1,
    backcasting: bool = False,
    bounds: Bounds = "admissible",
    normalizer: float | None = None,
    variance: np.ndarray | None = None,
    x0: np.ndarray | Sequence[float] | None = None,
    maxiter: int = 1000,
    name: str | None = None,
) -> EstimationResult:
    """
    Minimise the cost of `builder` over its parameters and refit at the optimum.

    With bounds="admissible", parameter sets whose discount matrix is unstable
    are given the sentinel cost so the optimiser steers away from them.
    """
    cost = CostFunction(
        builder=builder,
        y=y,
        loss=loss,
        horizon=horizon,
        backcasting=backcasting,
        bounds=bounds,
        normalizer=normalizer,
        variance=variance,
    )
    if x0 is None:
        x0 = builder.initial_params() if hasattr(builder, "initial_params") else np.empty(0)
    start = np.asarray(x0, dtype=float).reshape(-1)
    model_name = name or getattr(builder, "name", "custom")

    evaluations = 0

    def objective(params: np.ndarray) -> float:
        nonlocal evaluations
        evaluations += 1
        ev = cost.evaluate(params)
        if bounds == "admissible" and not ev.admissible:
            return SENTINEL
        return ev.value

    if start.size == 0:
        params, value = start, objective(start)
    else:
        params, value = _optimise(objective, start, int(maxiter))

    structure = builder(params)
    result = fit_structure(structure, cost.y, backcasting=backcasting, variance=variance)
    radius = spectral_radius(structure.transition, structure.persistence, structure.measurement)
    admissible = radius <= 1 + ADMISSIBLE_TOLERANCE

    if not admissible:
        if bounds != "admissible":
            logger.warning(
                "Unstable model was estimated (spectral radius %.6f). Use bounds='admissible' to address this.",
                radius,
            )
        else:
            logger.warning(
                "Optimiser returned an unstable model (spectral radius %.6f) despite admissible bounds.",
                radius,
            )

    logger.info("Estimated %s: %s=%.6g after %d evaluations.", model_name, cost.loss, value, evaluations)

    return EstimationResult(
        name=model_name,
        params=params,
        structure=structure,
        fit=result,
        y=cost.y,
        loss=cost.loss,
        cost=value,
        admissible=bool(admissible),
        spectral_radius=radius,
        n_evaluations=evaluations,
    )
