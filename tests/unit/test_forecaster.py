"""tests/unit/test_forecaster.py"""

from __future__ import annotations

import numpy as np
import pytest

from ssforecast.engine import ExogenousBlock, fit, forecast


@pytest.mark.parametrize("horizon", [1, 3, 12])
def test_flat_forecast_from_local_level(small_series, horizon: int) -> None:
    res = fit([10.0], [[1.0]], [1.0], [1.0], small_series)
    out = forecast(res.tail(1), [[1.0]], [1.0], [1], None, horizon)

    assert out.shape == (horizon,)
    np.testing.assert_allclose(out, res.state_path[-1, 0])


def test_only_the_tail_is_needed() -> None:
    path = np.array([[100.0], [5.0]])
    out = forecast(path, [[1.0]], [1.0], None, None, 2)
    np.testing.assert_allclose(out, [5.0, 5.0])


def test_seasonal_lag_repeats_the_cycle() -> None:
    out = forecast([[5.0], [7.0]], [[1.0]], [1.0], [2], None, 5)
    np.testing.assert_allclose(out, [5.0, 7.0, 5.0, 7.0, 5.0])


def test_local_trend_extrapolates_linearly() -> None:
    F = np.array([[1.0, 1.0], [0.0, 1.0]])
    out = forecast([[10.0, 2.0]], F, [1.0, 1.0], [1, 1], None, 3)
    np.testing.assert_allclose(out, [12.0, 14.0, 16.0])


def test_measurement_may_vary_per_step() -> None:
    w = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    out = forecast([[1.0, 2.0]], np.eye(2), w, None, None, 3)
    np.testing.assert_allclose(out, [1.0, 2.0, 3.0])


def test_exogenous_contribution_is_added() -> None:
    exo = ExogenousBlock(regressors=[[1.0], [2.0]], coefficients=[3.0])
    out = forecast([[10.0]], [[1.0]], [1.0], None, exo, 2)
    np.testing.assert_allclose(out, [13.0, 16.0])


def test_forecast_leaves_tail_untouched() -> None:
    tail = np.array([[4.0]])
    forecast(tail, [[0.5]], [1.0], None, None, 3)
    np.testing.assert_array_equal(tail, [[4.0]])


def test_invalid_horizon_raises() -> None:
    with pytest.raises(ValueError, match="horizon"):
        forecast([[1.0]], [[1.0]], [1.0], None, None, 0)


def test_regressors_must_cover_the_horizon() -> None:
    exo = ExogenousBlock(regressors=[[1.0]], coefficients=[1.0])
    with pytest.raises(ValueError, match="exogenous"):
        forecast([[1.0]], [[1.0]], [1.0], None, exo, 3)
