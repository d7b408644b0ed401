"""tests/unit/test_multistep.py"""

from __future__ import annotations

import numpy as np
import pytest

from ssforecast.engine import ExogenousBlock, fit, multi_horizon_errors


@pytest.fixture
def fitted_level(level_series):
    return fit([level_series[0]], [[1.0]], [1.0], [0.4], level_series)


def test_complete_rows_and_final_origin(level_series, fitted_level) -> None:
    n, h = level_series.size, 5
    errors = multi_horizon_errors(fitted_level.state_path, [[1.0]], [1.0], level_series, [1], None, h)

    assert errors.shape == (n, h)
    complete = np.all(np.isfinite(errors), axis=1)
    assert int(complete.sum()) == n - h + 1
    assert int(np.isfinite(errors[-1]).sum()) == 1


def test_first_column_matches_one_step_residuals(level_series, fitted_level) -> None:
    errors = multi_horizon_errors(fitted_level.state_path, [[1.0]], [1.0], level_series, None, None, 3)
    np.testing.assert_allclose(errors[:, 0], fitted_level.residuals)


def test_literal_errors_for_local_level(small_series) -> None:
    res = fit([10.0], [[1.0]], [1.0], [1.0], small_series)
    errors = multi_horizon_errors(res.state_path, [[1.0]], [1.0], small_series, [1], None, 2)

    # origin t forecasts every step with state[t-1] = y[t-1] (state0 = 10)
    expected = np.array(
        [
            [0.0, 2.0],
            [2.0, -1.0],
            [-3.0, -1.0],
            [2.0, np.nan],
        ]
    )
    np.testing.assert_allclose(errors, expected)


def test_exogenous_windows_follow_coefficient_path() -> None:
    exo = ExogenousBlock(regressors=[[1.0], [2.0], [1.0]], coefficients=[2.0])
    y = np.array([3.0, 5.0, 3.0])
    res = fit([1.0], [[1.0]], [1.0], [0.0], y, exogenous=exo)
    errors = multi_horizon_errors(res.state_path, [[1.0]], [1.0], y, None, res.exogenous, 3)

    # y is exactly level 1 + 2 x, so every obtainable error is zero
    np.testing.assert_allclose(errors[np.isfinite(errors)], 0.0)


def test_horizon_longer_than_sample_raises(small_series) -> None:
    res = fit([10.0], [[1.0]], [1.0], [1.0], small_series)
    with pytest.raises(ValueError, match="horizon"):
        multi_horizon_errors(res.state_path, [[1.0]], [1.0], small_series, None, None, 5)


def test_short_state_path_raises(small_series) -> None:
    with pytest.raises(ValueError, match="state_path"):
        multi_horizon_errors(np.ones((3, 1)), [[1.0]], [1.0], small_series, None, None, 2)
