"""Tensor-product B-spline shell.

The shell stores one knot vector and degree per input dimension and
evaluates the tensor-product basis at a point. Univariate basis values
come from ``scipy.interpolate.BSpline.design_matrix``; the multivariate
basis is their Kronecker product, flattened row-major so that the last
input dimension varies fastest.

Control points are attached after fitting. Until then the shell can
evaluate its basis but not the spline itself.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from scipy.interpolate import BSpline as _UnivariateBSpline

from tpspline.core.errors import (
    DimensionMismatchError,
    InconsistentConfigurationError,
    InvalidConfigurationError,
    InvalidParameterError,
)


@dataclass
class SparseBasisRow:
    """Nonzero basis values at one point.

    Attributes:
        indices: Flattened basis-function indices, shape (nnz,).
        values: Basis values at those indices, shape (nnz,).
    """

    indices: np.ndarray
    values: np.ndarray


def _eval_univariate_basis(
    x: float,
    knot_vector: np.ndarray,
    degree: int,
    extrapolate: bool,
) -> tuple[np.ndarray, np.ndarray]:
    """Indices and values of the nonzero univariate basis functions at x."""
    try:
        row = _UnivariateBSpline.design_matrix(
            np.array([x]), knot_vector, degree, extrapolate=extrapolate,
        )
    except ValueError as exc:
        raise InvalidParameterError(
            f"Cannot evaluate basis at x={x} for knots "
            f"[{knot_vector[0]}, ..., {knot_vector[-1]}]: {exc}"
        ) from exc
    row = row.tocsr()
    return row.indices.astype(np.int64), row.data


class BSpline:
    """Tensor-product B-spline R^dim_x -> R^dim_y.

    Usage:
        spline = BSpline(1, 1, [knots], [3])
        row = spline.eval_basis([0.5])
        spline.set_control_points(coefficients)
        y = spline.eval([0.5])
    """

    def __init__(
        self,
        dim_x: int,
        dim_y: int,
        knot_vectors: Sequence[Sequence[float]],
        degrees: Sequence[int],
    ) -> None:
        if len(knot_vectors) != dim_x or len(degrees) != dim_x:
            raise InconsistentConfigurationError(
                f"Expected {dim_x} knot vectors and degrees, got "
                f"{len(knot_vectors)} knot vectors and {len(degrees)} degrees"
            )

        self.dim_x = int(dim_x)
        self.dim_y = int(dim_y)
        self.degrees = [int(p) for p in degrees]
        self.knot_vectors = [np.asarray(t, dtype=float) for t in knot_vectors]

        for d, (t, p) in enumerate(zip(self.knot_vectors, self.degrees)):
            if t.ndim != 1 or np.any(np.diff(t) < 0.0):
                raise InvalidConfigurationError(
                    f"Knot vector {d} must be one-dimensional and non-decreasing"
                )
            if len(t) < 2 * p + 2:
                raise InvalidConfigurationError(
                    f"Knot vector {d} has {len(t)} knots; degree {p} needs at least {2 * p + 2}"
                )

        self._control_points: np.ndarray | None = None

    @property
    def num_basis_functions_per_variable(self) -> list[int]:
        return [len(t) - p - 1 for t, p in zip(self.knot_vectors, self.degrees)]

    @property
    def num_basis_functions(self) -> int:
        return int(np.prod(self.num_basis_functions_per_variable))

    @property
    def domain(self) -> list[tuple[float, float]]:
        """Per-dimension interval [t_p, t_n] on which the basis is complete."""
        return [
            (float(t[p]), float(t[len(t) - p - 1]))
            for t, p in zip(self.knot_vectors, self.degrees)
        ]

    @property
    def control_points(self) -> np.ndarray | None:
        return self._control_points

    @property
    def is_fitted(self) -> bool:
        return self._control_points is not None

    def set_control_points(self, control_points: np.ndarray) -> None:
        """Attach coefficients of shape (num_basis_functions, dim_y)."""
        cp = np.asarray(control_points, dtype=float)
        if cp.ndim == 1 and self.dim_y == 1:
            cp = cp[:, np.newaxis]
        expected = (self.num_basis_functions, self.dim_y)
        if cp.shape != expected:
            raise DimensionMismatchError(
                f"Control points must have shape {expected}, got {cp.shape}"
            )
        self._control_points = cp

    def eval_basis(self, x: Sequence[float] | float, extrapolate: bool = False) -> SparseBasisRow:
        """Evaluate the tensor-product basis at a single point.

        Only basis functions with local support at x are returned (at most
        prod(degree + 1) of them).
        """
        x_arr = np.atleast_1d(np.asarray(x, dtype=float))
        if x_arr.shape != (self.dim_x,):
            raise DimensionMismatchError(
                f"Expected point of length {self.dim_x}, got shape {x_arr.shape}"
            )

        indices = np.zeros(1, dtype=np.int64)
        values = np.ones(1)
        for x_d, t, p, n in zip(
            x_arr, self.knot_vectors, self.degrees, self.num_basis_functions_per_variable,
        ):
            idx_d, val_d = _eval_univariate_basis(float(x_d), t, p, extrapolate)
            # Row-major: previous dimensions scale by n, this one is the fastest
            indices = (indices[:, np.newaxis] * n + idx_d[np.newaxis, :]).ravel()
            values = (values[:, np.newaxis] * val_d[np.newaxis, :]).ravel()

        nonzero = values != 0.0
        return SparseBasisRow(indices=indices[nonzero], values=values[nonzero])

    def eval(self, x: Sequence[float] | float, extrapolate: bool = False) -> np.ndarray:
        """Evaluate the fitted spline at a single point, returning shape (dim_y,)."""
        if self._control_points is None:
            raise RuntimeError("B-spline has no control points; fit it before evaluating")
        row = self.eval_basis(x, extrapolate=extrapolate)
        return row.values @ self._control_points[row.indices]

    def __call__(self, points: np.ndarray, extrapolate: bool = False) -> np.ndarray:
        """Evaluate at many points.

        Args:
            points: Array of shape (p, dim_x), or shape (p,) when dim_x == 1.

        Returns:
            Array of shape (p, dim_y).
        """
        pts = np.asarray(points, dtype=float)
        if pts.ndim == 1:
            pts = pts[:, np.newaxis] if self.dim_x == 1 else pts[np.newaxis, :]
        return np.vstack([self.eval(x, extrapolate=extrapolate) for x in pts])
