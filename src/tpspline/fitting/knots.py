"""Knot vector construction from sample marginals.

Three strategies are available (see KnotSpacing):
- AS_SAMPLED: interior knots are moving averages of the sorted unique
  sample values, ends clamped. Gives one basis function per unique value,
  so a full grid is interpolated.
- EQUIDISTANT: uniform breakpoints over the sample range, ends clamped.
- EXPERIMENTAL: uniform breakpoints, ends extended at the same spacing
  instead of clamped.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from tpspline.core.data_table import DataTable
from tpspline.core.errors import InconsistentConfigurationError, InvalidConfigurationError
from tpspline.fitting.types import KnotSpacing


def clamp_breakpoints(breakpoints: np.ndarray, degree: int) -> np.ndarray:
    """Pad breakpoints so each end knot has multiplicity degree + 1."""
    return np.pad(np.asarray(breakpoints, dtype=float), degree, mode="edge")


def _unique_values(values: Sequence[float], degree: int) -> np.ndarray:
    if degree < 1:
        raise InvalidConfigurationError(f"degree must be >= 1, got {degree}")
    unique = np.unique(np.asarray(values, dtype=float))
    if len(unique) < degree + 1:
        raise InvalidConfigurationError(
            f"Only {len(unique)} unique sample values are given. A minimum of "
            f"degree + 1 = {degree + 1} unique values is required to build a "
            f"B-spline basis of degree {degree}."
        )
    return unique


def _target_count(unique: np.ndarray, degree: int, num_basis_functions: int) -> int:
    n = num_basis_functions if num_basis_functions > 1 else len(unique)
    if n < degree + 1:
        raise InvalidConfigurationError(
            f"{n} basis functions requested; degree {degree} needs at least {degree + 1}"
        )
    return n


def knot_vector_moving_average(values: Sequence[float], degree: int) -> np.ndarray:
    """Clamped knot vector with moving-average interior knots.

    With n unique values u, there are n - degree - 1 interior knots; knot
    i is the mean of u[i+1 : i+1+w] with window w = max(degree - 1, 1).
    The result has n + degree + 1 knots, i.e. n basis functions.
    """
    unique = _unique_values(values, degree)
    n = len(unique)
    window = max(degree - 1, 1)

    interior = np.array([
        unique[i + 1:i + 1 + window].mean() for i in range(n - degree - 1)
    ])
    breakpoints = np.concatenate([[unique[0]], interior, [unique[-1]]])
    return clamp_breakpoints(breakpoints, degree)


def knot_vector_equidistant(
    values: Sequence[float],
    degree: int,
    num_basis_functions: int = 1,
) -> np.ndarray:
    """Clamped knot vector with uniformly spaced breakpoints.

    Args:
        values: Sample values along one input dimension.
        degree: B-spline degree.
        num_basis_functions: Target basis-function count; values <= 1
            use the number of unique sample values.
    """
    unique = _unique_values(values, degree)
    n = _target_count(unique, degree, num_basis_functions)
    breakpoints = np.linspace(unique[0], unique[-1], n - degree + 1)
    return clamp_breakpoints(breakpoints, degree)


def knot_vector_equidistant_unclamped(
    values: Sequence[float],
    degree: int,
    num_basis_functions: int = 1,
) -> np.ndarray:
    """Uniform knot vector that extends past the sample range instead of clamping.

    The basis is complete on [t_degree, t_n], which is exactly the sample
    range.
    """
    unique = _unique_values(values, degree)
    n = _target_count(unique, degree, num_basis_functions)
    breakpoints = np.linspace(unique[0], unique[-1], n - degree + 1)
    step = breakpoints[1] - breakpoints[0]
    return np.concatenate([
        breakpoints[0] - step * np.arange(degree, 0, -1),
        breakpoints,
        breakpoints[-1] + step * np.arange(1, degree + 1),
    ])


def compute_knot_vector(
    values: Sequence[float],
    degree: int,
    num_basis_functions: int,
    knot_spacing: KnotSpacing,
) -> np.ndarray:
    """Compute a single knot vector with the selected strategy."""
    if knot_spacing is KnotSpacing.EQUIDISTANT:
        return knot_vector_equidistant(values, degree, num_basis_functions)
    if knot_spacing is KnotSpacing.EXPERIMENTAL:
        return knot_vector_equidistant_unclamped(values, degree, num_basis_functions)
    return knot_vector_moving_average(values, degree)


def default_degrees(table: DataTable, max_degree: int = 3) -> tuple[int, ...]:
    """Per-dimension degree min(max_degree, unique_values - 1)."""
    return tuple(
        min(max_degree, len(table.marginal_values(d)) - 1) for d in range(table.dim_x)
    )


def compute_knot_vectors(
    table: DataTable,
    degrees: Sequence[int],
    num_basis_functions: Sequence[int],
    knot_spacing: KnotSpacing,
) -> list[np.ndarray]:
    """Compute one knot vector per input dimension of the table."""
    if len(degrees) != table.dim_x:
        raise InconsistentConfigurationError(
            f"Got {len(degrees)} degrees for {table.dim_x} input variables"
        )
    if len(num_basis_functions) != table.dim_x:
        raise InconsistentConfigurationError(
            f"Got {len(num_basis_functions)} basis-function counts for "
            f"{table.dim_x} input variables"
        )

    return [
        compute_knot_vector(table.marginal_values(d), degrees[d], num_basis_functions[d], knot_spacing)
        for d in range(table.dim_x)
    ]
