"""Least-squares fitting of tensor-product B-splines.

Knot vectors are derived from the sample marginals, the basis matrix is
assembled sparsely, and the (optionally ridge or P-spline regularized)
system is solved with sparse LU or dense QR.
"""

from tpspline.fitting.types import (
    DENSE_SOLVE_THRESHOLD,
    BuilderConfig,
    FitOutcome,
    KnotSpacing,
    LinearSolution,
    Smoothing,
)
from tpspline.fitting.builder import Builder, compute_control_points
from tpspline.fitting.difference import second_order_difference_matrix
from tpspline.fitting.solver import solve_linear_system

__all__ = [
    "DENSE_SOLVE_THRESHOLD",
    "Builder",
    "BuilderConfig",
    "FitOutcome",
    "KnotSpacing",
    "LinearSolution",
    "Smoothing",
    "compute_control_points",
    "second_order_difference_matrix",
    "solve_linear_system",
]
