"""src/ssforecast/engine/structures.py"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Sequence

import numpy as np

from ssforecast.validation.checks import (
    check_exogenous,
    check_initial_block,
    check_lags,
    check_measurement,
    check_persistence,
    check_series,
    check_transition,
    check_variance,
    collect,
)


@dataclass(frozen=True)
class ExogenousBlock:
    """
    Regressors plus their coefficient state.

    coefficients is either the initial (k,) vector or a (rows, k) path where
    row t holds the coefficients applied to observation t. With the default
    identity transition and zero persistence the coefficients stay fixed.
    """
    regressors: np.ndarray
    coefficients: np.ndarray
    transition: np.ndarray | None = None
    persistence: np.ndarray | None = None

    def __post_init__(self) -> None:
        x = np.asarray(self.regressors, dtype=float)
        if x.ndim == 1:
            x = x.reshape(-1, 1)
        k = x.shape[1]
        coef = np.asarray(self.coefficients, dtype=float)
        fx = np.eye(k) if self.transition is None else np.atleast_2d(np.asarray(self.transition, dtype=float))
        gx = np.zeros(k) if self.persistence is None else np.asarray(self.persistence, dtype=float).reshape(-1)

        errs = check_exogenous(x, coef, min_rows=0, finite=False)
        if fx.shape != (k, k):
            errs.append(f"exogenous: transition expected ({k}, {k}); got {fx.shape}")
        if gx.shape != (k,):
            errs.append(f"exogenous: persistence expected length {k}; got {gx.shape}")
        collect(errs).raise_if_failed()

        object.__setattr__(self, "regressors", x)
        object.__setattr__(self, "coefficients", coef)
        object.__setattr__(self, "transition", fx)
        object.__setattr__(self, "persistence", gx)

    @property
    def n_regressors(self) -> int:
        return int(self.regressors.shape[1])

    def coefficient_at(self, t: int) -> np.ndarray:
        if self.coefficients.ndim == 1:
            return self.coefficients
        return self.coefficients[t]

    def contribution(self, t: int, coef: np.ndarray) -> float:
        return float(self.regressors[t] @ coef)

    def step(self, coef: np.ndarray, t: int, error: float) -> np.ndarray:
        """Next coefficient row; zero regressor values carry no error update."""
        x = self.regressors[t]
        gain = np.divide(self.persistence, x, out=np.zeros_like(self.persistence), where=(x != 0))
        return self.transition @ coef + gain * error

    def window(self, start: int, stop: int) -> "ExogenousBlock":
        """Regressor rows [start, stop) starting from the coefficients in force at start."""
        return ExogenousBlock(
            regressors=self.regressors[start:stop],
            coefficients=self.coefficient_at(start),
            transition=self.transition,
            persistence=self.persistence,
        )

    def continued(self, regressors: np.ndarray) -> "ExogenousBlock":
        """New block over future regressors, picking up the last coefficient row."""
        last = self.coefficients if self.coefficients.ndim == 1 else self.coefficients[-1]
        return ExogenousBlock(
            regressors=regressors,
            coefficients=last,
            transition=self.transition,
            persistence=self.persistence,
        )

    def with_path(self, path: np.ndarray) -> "ExogenousBlock":
        return ExogenousBlock(
            regressors=self.regressors,
            coefficients=path,
            transition=self.transition,
            persistence=self.persistence,
        )


@dataclass(frozen=True)
class ModelStructure:
    """Structural matrices for one fit, as produced by a model builder."""
    transition: np.ndarray
    measurement: np.ndarray
    persistence: np.ndarray
    lags: np.ndarray
    initial_states: np.ndarray
    exogenous: ExogenousBlock | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "transition", np.atleast_2d(np.asarray(self.transition, dtype=float)))
        object.__setattr__(self, "measurement", np.asarray(self.measurement, dtype=float))
        object.__setattr__(self, "persistence", np.asarray(self.persistence, dtype=float).reshape(-1))
        object.__setattr__(self, "lags", np.asarray(self.lags, dtype=int).reshape(-1))
        object.__setattr__(self, "initial_states", np.asarray(self.initial_states, dtype=float))

    @property
    def n_states(self) -> int:
        return int(self.transition.shape[0])

    @property
    def maxlag(self) -> int:
        return int(self.lags.max())

    @property
    def measurement_row(self) -> np.ndarray:
        """First measurement row (the one used for stability checks)."""
        return np.atleast_2d(self.measurement)[0]


@dataclass(frozen=True)
class FitResult:
    state_path: np.ndarray
    fitted: np.ndarray
    residuals: np.ndarray
    exogenous: ExogenousBlock | None = None

    def __post_init__(self) -> None:
        # returned paths and series are read-only
        for arr in (self.state_path, self.fitted, self.residuals):
            arr.flags.writeable = False

    def __iter__(self) -> Iterator[np.ndarray]:
        yield self.state_path
        yield self.fitted
        yield self.residuals

    def tail(self, maxlag: int) -> np.ndarray:
        """The trailing maxlag rows, i.e. everything a forecast needs."""
        return self.state_path[-int(maxlag):]


@dataclass(frozen=True)
class System:
    """Validated, normalised transition system shared by the recursions."""
    transition: np.ndarray
    measurement: np.ndarray
    persistence: np.ndarray
    lags: np.ndarray
    cols: np.ndarray = field(repr=False)

    @property
    def n_states(self) -> int:
        return int(self.transition.shape[0])

    @property
    def maxlag(self) -> int:
        return int(self.lags.max())

    def w(self, t: int) -> np.ndarray:
        if self.measurement.shape[0] == 1:
            return self.measurement[0]
        return self.measurement[t]

    def lagged(self, path: np.ndarray, t: int) -> np.ndarray:
        """State components feeding row t: component i comes from row t - lag_i."""
        return path[t - self.lags, self.cols]

    def mirrored(self, path: np.ndarray, t: int) -> np.ndarray:
        """Reverse-pass lookup: component i comes from row t + lag_i."""
        return path[t + self.lags, self.cols]

    def measurement_rows(self, start: int, stop: int) -> np.ndarray:
        if self.measurement.shape[0] == 1:
            return self.measurement
        return self.measurement[start:stop]


def as_series(y: np.ndarray | Sequence[float], *, name: str = "y") -> np.ndarray:
    arr = np.asarray(y, dtype=float)
    if arr.ndim == 2 and arr.shape[1] == 1:
        arr = arr[:, 0]
    collect(check_series(arr, name=name)).raise_if_failed()
    return arr


def as_system(
    transition: np.ndarray,
    measurement: np.ndarray,
    lags: np.ndarray | Sequence[int] | None,
    persistence: np.ndarray | None = None,
    *,
    rows: int,
) -> System:
    """
    Normalise the structural inputs and raise ValueError on any mismatch.

    rows is the number of time steps the measurement must cover when it is
    given per observation.
    """
    F = np.atleast_2d(np.asarray(transition, dtype=float))
    m = F.shape[0]
    w = np.asarray(measurement, dtype=float)
    if w.ndim <= 1:
        w = w.reshape(1, -1)
    lag_arr = np.ones(m, dtype=int) if lags is None else np.asarray(lags).astype(int).reshape(-1)
    g = np.zeros(m) if persistence is None else np.asarray(persistence, dtype=float).reshape(-1)

    collect(
        check_transition(F, m),
        check_measurement(w, m, min_rows=rows),
        check_persistence(g, m),
        check_lags(lag_arr, m),
    ).raise_if_failed()

    return System(transition=F, measurement=w, persistence=g, lags=lag_arr, cols=np.arange(m))


def as_states(states: np.ndarray, system: System, *, name: str = "states") -> np.ndarray:
    """Return a copy of the first maxlag rows of an initial state block."""
    s = np.asarray(states, dtype=float)
    m = system.n_states
    if s.ndim == 1 and s.size % m == 0:
        s = s.reshape(-1, m)
    errs = check_initial_block(s, m, system.maxlag)
    collect([e.replace("states", name, 1) for e in errs]).raise_if_failed()
    return s[: system.maxlag].copy()


def as_tail(states: np.ndarray, system: System) -> np.ndarray:
    """Return a copy of the last maxlag rows of a state path."""
    s = np.asarray(states, dtype=float)
    m = system.n_states
    if s.ndim == 1 and s.size % m == 0:
        s = s.reshape(-1, m)
    collect(check_initial_block(s[-system.maxlag:] if s.ndim == 2 else s, m, system.maxlag)).raise_if_failed()
    return s[-system.maxlag:].copy()


def gain_matrix(system: System, variance: np.ndarray | None, n_obs: int) -> np.ndarray:
    """Per-observation persistence, g divided element-wise by the variance at t."""
    g = system.persistence
    if variance is None:
        return np.broadcast_to(g, (n_obs, g.size))
    v = np.asarray(variance, dtype=float)
    collect(check_variance(v, n_obs, g.size)).raise_if_failed()
    if v.ndim == 1:
        v = v[:, None]
    with np.errstate(divide="ignore", invalid="ignore"):
        return g[None, :] / v


def check_exogenous_rows(exogenous: ExogenousBlock | None, rows: int) -> None:
    if exogenous is None:
        return
    collect(check_exogenous(exogenous.regressors, exogenous.coefficient_at(0), min_rows=rows)).raise_if_failed()
