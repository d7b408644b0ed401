"""src/ssforecast/modeling/sma.py"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ssforecast.engine.structures import ModelStructure, as_series


def sma_structure(y: np.ndarray, order: int) -> ModelStructure:
    """
    Simple moving average of the given order as an SSOE system.

    The state holds partial sums so that the one-step fitted value is the mean
    of the previous `order` observations once enough history is available.
    """
    obs = as_series(y)
    n = int(order)
    if n < 1:
        raise ValueError(f"SMA order must be >= 1; got {order}")
    if obs.size < n:
        raise ValueError(f"Not enough observations ({obs.size}) for SMA({n}).")

    transition = np.zeros((n, n))
    transition[:, 0] = 1.0 / n
    transition[:-1, 1:] = np.eye(n - 1)
    measurement = np.zeros(n)
    measurement[0] = 1.0
    persistence = np.full(n, 1.0 / n)

    # Seed: level = mean of the first `order` values, lower components by back-substitution.
    seed = np.zeros((n, n))
    seed[:, 0] = obs[:n].mean()
    for i in range(1, n):
        seed[: n - i, i] = seed[1 : n - i + 1, i - 1] - seed[: n - i, 0] * transition[i - 1, 0]

    return ModelStructure(
        transition=transition,
        measurement=measurement,
        persistence=persistence,
        lags=np.ones(n, dtype=int),
        initial_states=seed[:1],
    )


@dataclass(frozen=True)
class SMA:
    """SMA(order) builder. It has no free parameters; initials are backcast."""
    y: np.ndarray
    order: int

    @property
    def name(self) -> str:
        return f"SMA({int(self.order)})"

    def initial_params(self) -> np.ndarray:
        return np.empty(0)

    def __call__(self, params: np.ndarray) -> ModelStructure:
        return sma_structure(self.y, self.order)
