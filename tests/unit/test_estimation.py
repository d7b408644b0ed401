"""tests/unit/test_estimation.py"""

from __future__ import annotations

import logging

import numpy as np
import pytest

from ssforecast.engine import CostFunction, ExogenousBlock, ModelStructure
from ssforecast.modeling import LocalLevel, estimate


def test_local_level_names_and_parameter_counts(level_series) -> None:
    exo = ExogenousBlock(regressors=np.ones((level_series.size, 2)), coefficients=[0.0, 0.0])

    assert LocalLevel(level_series).name == "ETS(A,N,N)"
    assert LocalLevel(level_series, period=4).name == "ETS(A,N,N)[4]"
    assert LocalLevel(level_series, exogenous=exo).name == "ETSX(A,N,N)"

    assert LocalLevel(level_series).n_params == 1
    assert LocalLevel(level_series, period=4, initial="optimal").n_params == 5
    assert LocalLevel(level_series, exogenous=exo, estimate_exogenous=True).n_params == 3


def test_local_level_structure(level_series) -> None:
    model = LocalLevel(level_series, period=3, initial="optimal")
    s = model(np.array([0.2, 1.0, 2.0, 3.0]))

    np.testing.assert_allclose(s.persistence, [0.2])
    np.testing.assert_array_equal(s.lags, [3])
    np.testing.assert_allclose(s.initial_states[:, 0], [1.0, 2.0, 3.0])


def test_local_level_rejects_bad_options(level_series) -> None:
    with pytest.raises(ValueError, match="period"):
        LocalLevel(level_series, period=0)
    with pytest.raises(ValueError, match="initial"):
        LocalLevel(level_series, initial="two-stage")
    with pytest.raises(ValueError, match="exogenous"):
        LocalLevel(level_series, estimate_exogenous=True)
    with pytest.raises(ValueError, match="parameters"):
        LocalLevel(level_series)(np.array([0.1, 0.2]))


@pytest.mark.parametrize("initial", ["backcasting", "optimal"])
def test_estimate_local_level_improves_on_start(level_series, initial: str) -> None:
    model = LocalLevel(level_series, initial=initial)
    backcasting = initial == "backcasting"
    start = CostFunction(builder=model, y=level_series, backcasting=backcasting)(model.initial_params())

    result = estimate(model, level_series, backcasting=backcasting, maxiter=300)

    assert result.cost <= start + 1e-9
    assert result.admissible
    assert 0.0 < result.params[0] <= 2.0
    assert result.fit.fitted.shape == level_series.shape


def test_estimated_level_forecast_is_flat(level_series) -> None:
    result = estimate(LocalLevel(level_series), level_series, backcasting=True, maxiter=200)
    out = result.forecast(5)

    np.testing.assert_allclose(out, result.fit.state_path[-1, 0])


def test_horizon_errors_and_summary(level_series) -> None:
    result = estimate(LocalLevel(level_series), level_series, loss="TMSE", horizon=3, backcasting=True, maxiter=200)
    errors = result.horizon_errors(3)

    assert result.loss == "TV"
    assert errors.shape == (level_series.size, 3)
    summary = result.summary()
    assert summary["Model"] == "ETS(A,N,N)"
    assert summary["Loss"] == "TV"
    assert summary["Admissible"] is True


def test_regression_coefficient_is_recovered(level_series) -> None:
    rng = np.random.default_rng(7)
    x = rng.normal(0.0, 5.0, size=(level_series.size, 1))
    y = level_series + 3.0 * x[:, 0]
    exo = ExogenousBlock(regressors=x, coefficients=[0.0])

    result = estimate(LocalLevel(y, exogenous=exo, estimate_exogenous=True), y, backcasting=True, maxiter=500)

    assert result.params[-1] == pytest.approx(3.0, abs=0.5)
    with pytest.raises(ValueError, match="regressors"):
        result.forecast(2)
    assert result.forecast(2, regressors=np.zeros((2, 1))).shape == (2,)


def test_unstable_model_logs_a_warning(small_series, caplog) -> None:
    def explosive(params: np.ndarray) -> ModelStructure:
        return ModelStructure([[1.0]], [1.0], [2.5], [1], [[10.0]])

    with caplog.at_level(logging.WARNING, logger="ssforecast.modeling.estimation"):
        result = estimate(explosive, small_series, bounds="none", x0=np.empty(0))

    assert not result.admissible
    assert result.spectral_radius == pytest.approx(1.5)
    assert "Unstable model" in caplog.text


def test_admissible_bounds_steer_away_from_unstable_region(level_series) -> None:
    model = LocalLevel(level_series)
    result = estimate(model, level_series, backcasting=True, bounds="admissible", x0=[1.95], maxiter=300)
    assert result.spectral_radius <= 1.0 + 1e-10
