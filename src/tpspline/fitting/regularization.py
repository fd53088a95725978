"""Regularized least-squares systems.

Given basis matrix B and sample values b, the coefficients x minimize

    ||W^(1/2) (B x - b)||^2 + alpha * ||R x||^2

The smoothing mode selects R:
- NONE: no penalty, solve B x = b directly (least squares when B is tall).
- IDENTITY: R = I (Tikhonov / ridge regression).
  Normal equations: (B'B + alpha I) x = B'b.
- PSPLINE: R = D, the second-order difference matrix, which penalizes
  curvature of the coefficient field rather than its magnitude.
  Normal equations: (B'WB + alpha D'D) x = B'Wb.

W is the diagonal sample-weight matrix (identity unless weights are given).
The penalty is not scaled by the number of samples, so a given alpha
smooths less as the table grows.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
import scipy.sparse as sp

from tpspline.core.errors import InvalidConfigurationError, InvalidParameterError
from tpspline.fitting.difference import second_order_difference_matrix
from tpspline.fitting.types import Smoothing

logger = logging.getLogger(__name__)


def check_pspline_basis(num_basis_per_variable: Sequence[int]) -> None:
    """Raise if some variable has fewer than three basis functions."""
    for d, n in enumerate(num_basis_per_variable):
        if n < 3:
            raise InvalidConfigurationError(
                f"P-spline smoothing needs at least 3 basis functions per "
                f"variable; variable {d} has {n}"
            )


def weight_matrix(num_samples: int, weights: np.ndarray | None = None) -> sp.dia_matrix:
    """Diagonal weight matrix W; identity when weights is None."""
    if weights is None:
        return sp.identity(num_samples, format="dia")
    w = np.asarray(weights, dtype=float)
    if w.shape != (num_samples,):
        raise InvalidParameterError(
            f"weights must have shape ({num_samples},), got {w.shape}"
        )
    if np.any(w < 0.0) or not np.all(np.isfinite(w)):
        raise InvalidParameterError("weights must be finite and non-negative")
    return sp.diags(w, format="dia")


def build_system(
    B: sp.spmatrix,
    b: np.ndarray,
    smoothing: Smoothing,
    alpha: float,
    num_basis_per_variable: Sequence[int] | None = None,
    weights: np.ndarray | None = None,
) -> tuple[sp.csr_matrix, np.ndarray]:
    """Assemble the linear system (A, rhs) for the given smoothing mode.

    Args:
        B: Basis matrix, shape (num_samples, num_basis_functions).
        b: Sample values, shape (num_samples, dim_y).
        smoothing: Regularization mode.
        alpha: Penalty weight, >= 0.
        num_basis_per_variable: Basis-function counts per input variable;
            required for PSPLINE.
        weights: Per-sample weights (PSPLINE only).

    Returns:
        Tuple (A, rhs). For NONE, A is B itself and may be rectangular.
    """
    if smoothing is Smoothing.NONE:
        return sp.csr_matrix(B), b

    Bt = B.T.tocsr()

    if smoothing is Smoothing.IDENTITY:
        A = Bt @ B + alpha * sp.identity(B.shape[1], format="csr")
        return sp.csr_matrix(A), Bt @ b

    if num_basis_per_variable is None:
        raise InvalidConfigurationError("P-spline smoothing requires the per-variable basis layout")
    check_pspline_basis(num_basis_per_variable)

    W = weight_matrix(B.shape[0], weights)
    D = second_order_difference_matrix(num_basis_per_variable)
    logger.debug("P-spline penalty: D has shape %s, nnz=%d", D.shape, D.nnz)

    BtW = Bt @ W
    A = BtW @ B + alpha * (D.T @ D)
    return sp.csr_matrix(A), BtW @ b
