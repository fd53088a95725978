"""Tests for the tensor-product B-spline shell."""

import numpy as np
import pytest

from tpspline.core.bspline import BSpline
from tpspline.core.errors import (
    DimensionMismatchError,
    InconsistentConfigurationError,
    InvalidConfigurationError,
    InvalidParameterError,
)

KNOTS_X = np.array([0.0, 0.0, 0.0, 0.0, 1.5, 4.0, 4.0, 4.0, 4.0])
KNOTS_Y = np.array([-1.0, -1.0, -1.0, 0.0, 1.0, 1.0, 1.0])


def _dense_row(spline: BSpline, x) -> np.ndarray:
    row = spline.eval_basis(x)
    dense = np.zeros(spline.num_basis_functions)
    dense[row.indices] = row.values
    return dense


class TestBasisCounts:

    def test_per_variable_counts(self):
        spline = BSpline(2, 1, [KNOTS_X, KNOTS_Y], [3, 2])
        # len(knots) - degree - 1
        assert spline.num_basis_functions_per_variable == [5, 4]
        assert spline.num_basis_functions == 20

    def test_domain(self):
        spline = BSpline(2, 1, [KNOTS_X, KNOTS_Y], [3, 2])
        assert spline.domain == [(0.0, 4.0), (-1.0, 1.0)]

    def test_mismatched_lengths(self):
        with pytest.raises(InconsistentConfigurationError):
            BSpline(2, 1, [KNOTS_X], [3, 2])

    def test_too_few_knots(self):
        with pytest.raises(InvalidConfigurationError):
            BSpline(1, 1, [np.array([0.0, 0.0, 1.0, 1.0])], [3])

    def test_decreasing_knots(self):
        with pytest.raises(InvalidConfigurationError):
            BSpline(1, 1, [KNOTS_X[::-1]], [3])


class TestEvalBasis:

    def test_partition_of_unity(self):
        spline = BSpline(2, 1, [KNOTS_X, KNOTS_Y], [3, 2])
        for x in [(0.0, -1.0), (0.3, 0.2), (1.5, 0.0), (3.9, 0.99), (4.0, 1.0)]:
            row = spline.eval_basis(x)
            assert row.values.sum() == pytest.approx(1.0, abs=1e-12)

    def test_local_support(self):
        spline = BSpline(2, 1, [KNOTS_X, KNOTS_Y], [3, 2])
        row = spline.eval_basis([2.0, 0.5])
        assert len(row.indices) <= (3 + 1) * (2 + 1)

    def test_row_major_tensor_product(self):
        """The last input variable varies fastest in the flattened index."""
        spline_2d = BSpline(2, 1, [KNOTS_X, KNOTS_Y], [3, 2])
        spline_x = BSpline(1, 1, [KNOTS_X], [3])
        spline_y = BSpline(1, 1, [KNOTS_Y], [2])

        point = (2.5, -0.25)
        expected = np.outer(_dense_row(spline_x, [point[0]]), _dense_row(spline_y, [point[1]]))
        actual = _dense_row(spline_2d, point).reshape(5, 4)
        np.testing.assert_allclose(actual, expected, atol=1e-14)

    def test_wrong_point_length(self):
        spline = BSpline(2, 1, [KNOTS_X, KNOTS_Y], [3, 2])
        with pytest.raises(DimensionMismatchError):
            spline.eval_basis([1.0])

    def test_outside_domain(self):
        spline = BSpline(1, 1, [KNOTS_X], [3])
        with pytest.raises(InvalidParameterError):
            spline.eval_basis([5.0])


class TestEvaluation:

    def test_eval_before_fit(self):
        spline = BSpline(1, 1, [KNOTS_X], [3])
        assert not spline.is_fitted
        with pytest.raises(RuntimeError):
            spline.eval([1.0])

    def test_constant_control_points(self):
        spline = BSpline(2, 2, [KNOTS_X, KNOTS_Y], [3, 2])
        spline.set_control_points(np.tile([2.0, -1.0], (20, 1)))
        np.testing.assert_allclose(spline.eval([1.2, 0.3]), [2.0, -1.0], atol=1e-12)

    def test_call_vectorized(self):
        spline = BSpline(1, 1, [KNOTS_X], [3])
        spline.set_control_points(np.arange(5.0))
        points = np.linspace(0.0, 4.0, 7)
        values = spline(points)
        assert values.shape == (7, 1)
        np.testing.assert_allclose(values[:, 0], [spline.eval([p])[0] for p in points])

    def test_control_point_shape(self):
        spline = BSpline(1, 2, [KNOTS_X], [3])
        with pytest.raises(DimensionMismatchError):
            spline.set_control_points(np.zeros((4, 2)))
