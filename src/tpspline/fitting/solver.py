"""Linear system solver: sparse LU first, dense QR fallback."""

from __future__ import annotations

import logging

import numpy as np
import scipy.linalg
import scipy.sparse as sp
from scipy.sparse.linalg import splu

from tpspline.core.errors import SolveFailureError
from tpspline.fitting.types import DENSE_SOLVE_THRESHOLD, LinearSolution

logger = logging.getLogger(__name__)


def _solve_sparse(A: sp.spmatrix, b: np.ndarray) -> np.ndarray:
    """Solve square A x = b with a sparse LU factorization."""
    lu = splu(sp.csc_matrix(A))
    x = lu.solve(np.asarray(b, dtype=float))
    if not np.all(np.isfinite(x)):
        raise RuntimeError("sparse LU produced non-finite values")
    return x


def _solve_dense(A: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Solve A x = b (least squares when A is tall) with column-pivoted QR.

    Raises:
        np.linalg.LinAlgError: If A is rank deficient or has fewer rows
            than columns.
    """
    m, n = A.shape
    if m < n:
        raise np.linalg.LinAlgError(f"underdetermined system ({m} equations, {n} unknowns)")

    q, r, perm = scipy.linalg.qr(A, mode="economic", pivoting=True)
    diag = np.abs(np.diag(r))
    tol = np.finfo(float).eps * max(m, n) * (diag[0] if diag.size else 0.0)
    if diag.size == 0 or diag[0] == 0.0 or diag[-1] <= tol:
        raise np.linalg.LinAlgError("matrix is rank deficient")

    z = scipy.linalg.solve_triangular(r, q.T @ b)
    x = np.empty_like(z)
    x[perm] = z
    if not np.all(np.isfinite(x)):
        raise np.linalg.LinAlgError("dense QR produced non-finite values")
    return x


def solve_linear_system(
    A: sp.spmatrix | np.ndarray,
    b: np.ndarray,
    dense_threshold: int = DENSE_SOLVE_THRESHOLD,
) -> LinearSolution:
    """Solve A x = b for x.

    Systems with fewer than dense_threshold equations go straight to dense
    QR. Larger systems try sparse LU first and fall back to dense QR if the
    factorization fails.

    Args:
        A: System matrix, shape (m, n). Sparse or dense.
        b: Right-hand side, shape (m,) or (m, k).
        dense_threshold: Equation count below which the dense path is used.

    Returns:
        LinearSolution with coefficients of shape (n, k) (or (n,)).

    Raises:
        SolveFailureError: If the dense solve fails.
    """
    b = np.asarray(b, dtype=float)
    num_equations = A.shape[0]

    if num_equations >= dense_threshold:
        logger.debug("Solving %s system with sparse LU", A.shape)
        try:
            return LinearSolution(coefficients=_solve_sparse(A, b), method="sparse_lu")
        except (RuntimeError, ValueError) as exc:
            logger.debug("Sparse LU failed (%s); falling back to dense QR", exc)

    logger.debug("Solving %s system with dense QR", A.shape)
    A_dense = A.toarray() if sp.issparse(A) else np.asarray(A, dtype=float)
    try:
        x = _solve_dense(A_dense, b)
    except (np.linalg.LinAlgError, ValueError) as exc:
        raise SolveFailureError(f"Failed to solve for B-spline coefficients: {exc}") from exc

    return LinearSolution(coefficients=x, method="dense_qr")
