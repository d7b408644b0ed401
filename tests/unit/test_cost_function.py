"""tests/unit/test_cost_function.py"""

from __future__ import annotations

import numpy as np
import pytest

from ssforecast.engine import (
    SENTINEL,
    CostFunction,
    ExogenousBlock,
    ModelStructure,
    fit,
    fit_backcast,
    is_admissible,
    multi_horizon_errors,
    spectral_radius,
)
from ssforecast.modeling import LocalLevel


def level_builder(params: np.ndarray) -> ModelStructure:
    return ModelStructure(
        transition=[[1.0]],
        measurement=[1.0],
        persistence=params[:1],
        lags=[1],
        initial_states=[[10.0]],
    )


def test_one_step_cost_matches_direct_fit(small_series) -> None:
    cost = CostFunction(builder=level_builder, y=small_series, loss="MSE")
    res = fit([10.0], [[1.0]], [1.0], [0.5], small_series)

    assert cost([0.5]) == pytest.approx(np.mean(res.residuals ** 2))


def test_backcasting_flag_switches_fitter(small_series) -> None:
    cost = CostFunction(builder=level_builder, y=small_series, loss="MAE", backcasting=True)
    res = fit_backcast([10.0], [[1.0]], [1.0], [0.5], small_series)

    assert cost([0.5]) == pytest.approx(np.mean(np.abs(res.residuals)))


def test_multistep_loss_uses_error_matrix(level_series) -> None:
    cost = CostFunction(builder=level_builder, y=level_series, loss="TMSE", horizon=3)
    res = fit([10.0], [[1.0]], [1.0], [0.3], level_series)
    errors = multi_horizon_errors(res.state_path, [[1.0]], [1.0], level_series, [1], None, 3)
    expected = sum(np.nanmean(errors[:, j] ** 2) for j in range(3))

    assert cost.multistep
    assert cost([0.3]) == pytest.approx(expected)


def test_non_finite_loss_becomes_sentinel(small_series) -> None:
    def broken(params: np.ndarray) -> ModelStructure:
        return ModelStructure([[1.0]], [np.nan], params[:1], [1], [[10.0]])

    assert CostFunction(builder=broken, y=small_series)([0.5]) == SENTINEL

    y = small_series.copy()
    y[2] = np.inf
    assert CostFunction(builder=level_builder, y=y)([0.5]) == SENTINEL


def test_admissibility_is_flagged_not_enforced(small_series) -> None:
    cost = CostFunction(builder=level_builder, y=small_series, bounds="admissible")

    stable = cost.evaluate([0.5])
    unstable = cost.evaluate([2.5])

    assert stable.admissible
    assert stable.spectral_radius == pytest.approx(0.5)
    assert not unstable.admissible
    assert unstable.spectral_radius == pytest.approx(1.5)
    assert unstable.value < SENTINEL


def test_no_bounds_skips_the_radius(small_series) -> None:
    ev = CostFunction(builder=level_builder, y=small_series).evaluate([2.5])
    assert ev.admissible
    assert ev.spectral_radius is None


def test_spectral_radius_edge_cases() -> None:
    assert spectral_radius([[1.0]], [1.0], [1.0]) == pytest.approx(0.0)
    assert spectral_radius([[1.0]], [np.inf], [1.0]) == np.inf
    assert is_admissible(level_builder(np.array([2.0])))
    assert not is_admissible(level_builder(np.array([2.1])))


def test_bad_options_raise(small_series) -> None:
    with pytest.raises(ValueError, match="bounds"):
        CostFunction(builder=level_builder, y=small_series, bounds="strict")
    with pytest.raises(ValueError, match="horizon"):
        CostFunction(builder=level_builder, y=small_series, horizon=0)
    with pytest.raises(ValueError, match="Unknown loss"):
        CostFunction(builder=level_builder, y=small_series, loss="nope")


def test_non_finite_initial_state_becomes_sentinel(level_series) -> None:
    cost = CostFunction(builder=LocalLevel(level_series, initial="optimal"), y=level_series, bounds="admissible")

    ev = cost.evaluate([0.3, np.inf])

    assert ev.value == SENTINEL
    assert ev.admissible


def test_non_finite_regressor_coefficient_becomes_sentinel(level_series) -> None:
    exo = ExogenousBlock(regressors=np.ones((level_series.size, 1)), coefficients=[0.0])
    model = LocalLevel(level_series, exogenous=exo, estimate_exogenous=True)

    assert CostFunction(builder=model, y=level_series)([0.3, np.nan]) == SENTINEL


def test_public_fitters_still_reject_non_finite_starts(small_series) -> None:
    with pytest.raises(ValueError, match="state_init"):
        fit([np.inf], [[1.0]], [1.0], [0.3], small_series)

    exo = ExogenousBlock(regressors=np.ones((small_series.size, 1)), coefficients=[np.nan])
    with pytest.raises(ValueError, match="coefficients"):
        fit_backcast([10.0], [[1.0]], [1.0], [0.3], small_series, exogenous=exo)
