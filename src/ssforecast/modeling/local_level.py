"""src/ssforecast/modeling/local_level.py"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np

from ssforecast.engine.structures import ExogenousBlock, ModelStructure, as_series

InitialType = Literal["optimal", "backcasting"]


@dataclass(frozen=True)
class LocalLevel:
    """
    Local level model, optionally on a seasonal lag:

        y[t] = l[t - period] + x[t] . b + e[t]
        l[t] = l[t - period] + alpha * e[t]

    Parameter vector: [alpha], then the `period` initial levels when
    initial="optimal", then the regressor coefficients when
    estimate_exogenous is set.
    """
    y: np.ndarray
    period: int = 1
    initial: InitialType = "backcasting"
    exogenous: ExogenousBlock | None = None
    estimate_exogenous: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "y", as_series(self.y))
        if int(self.period) < 1:
            raise ValueError(f"period must be >= 1; got {self.period}")
        if self.y.size < int(self.period):
            raise ValueError(f"Not enough observations ({self.y.size}) for period {self.period}.")
        if self.initial not in ("optimal", "backcasting"):
            raise ValueError(f"initial must be 'optimal' or 'backcasting'; got {self.initial!r}")
        if self.estimate_exogenous and self.exogenous is None:
            raise ValueError("estimate_exogenous requires an exogenous block.")

    @property
    def name(self) -> str:
        base = "ETSX(A,N,N)" if self.exogenous is not None else "ETS(A,N,N)"
        return base if int(self.period) == 1 else f"{base}[{int(self.period)}]"

    @property
    def n_params(self) -> int:
        n = 1
        if self.initial == "optimal":
            n += int(self.period)
        if self.estimate_exogenous:
            n += self.exogenous.n_regressors
        return n

    def _seed_levels(self) -> np.ndarray:
        m = int(self.period)
        if m == 1:
            return np.array([self.y[: min(10, self.y.size)].mean()])
        return self.y[:m].copy()

    def initial_params(self) -> np.ndarray:
        params = [np.array([0.3])]
        if self.initial == "optimal":
            params.append(self._seed_levels())
        if self.estimate_exogenous:
            params.append(np.asarray(self.exogenous.coefficient_at(0), dtype=float))
        return np.concatenate(params)

    def __call__(self, params: np.ndarray) -> ModelStructure:
        p = np.asarray(params, dtype=float).reshape(-1)
        if p.size != self.n_params:
            raise ValueError(f"{self.name}: expected {self.n_params} parameters; got {p.size}")

        m = int(self.period)
        pos = 1
        if self.initial == "optimal":
            levels = p[pos : pos + m]
            pos += m
        else:
            levels = self._seed_levels()

        exogenous = self.exogenous
        if self.estimate_exogenous:
            k = exogenous.n_regressors
            exogenous = ExogenousBlock(
                regressors=exogenous.regressors,
                coefficients=p[pos : pos + k],
                transition=exogenous.transition,
                persistence=exogenous.persistence,
            )

        return ModelStructure(
            transition=np.array([[1.0]]),
            measurement=np.array([1.0]),
            persistence=p[:1],
            lags=np.array([m]),
            initial_states=levels.reshape(m, 1),
            exogenous=exogenous,
        )
