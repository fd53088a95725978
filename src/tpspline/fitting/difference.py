"""Second-order finite-difference penalty for tensor-product coefficients.

Coefficients are laid out row-major over the input variables (the last
variable varies fastest), so variable d has stride
prod(n_{d+1}, ..., n_k). Each row of D applies the stencil [1, -2, 1]
along one variable with all other indices held fixed, which approximates
the second derivative of the spline along that axis.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import scipy.sparse as sp

from tpspline.core.errors import InvalidConfigurationError

_STENCIL = np.array([1.0, -2.0, 1.0])


def row_major_strides(sizes: Sequence[int]) -> list[int]:
    """Flattened-index stride of each dimension, last dimension fastest."""
    strides = [1] * len(sizes)
    for d in range(len(sizes) - 2, -1, -1):
        strides[d] = strides[d + 1] * sizes[d + 1]
    return strides


def second_order_difference_matrix(num_basis_per_variable: Sequence[int]) -> sp.csr_matrix:
    """Build the sparse second-order difference matrix D.

    Blocks are emitted for the last variable first. Within a block, rows
    iterate over the other variables' indices (outer) and the stencil
    position along the variable (inner).

    Args:
        num_basis_per_variable: Basis-function count n_d per input variable.

    Returns:
        Matrix of shape (sum_d (n_d - 2) * prod_{j != d} n_j, prod_d n_d).

    Raises:
        InvalidConfigurationError: If some n_d < 3.
    """
    sizes = [int(n) for n in num_basis_per_variable]
    if not sizes or any(n < 3 for n in sizes):
        raise InvalidConfigurationError(
            "Need at least three coefficients/basis functions per variable, "
            f"got {sizes}"
        )

    strides = row_major_strides(sizes)
    num_cols = int(np.prod(sizes))
    flat_index = np.arange(num_cols).reshape(sizes)

    cols = []
    for d in reversed(range(len(sizes))):
        # Leftmost index of every stencil along variable d
        bases = np.moveaxis(flat_index, d, -1)[..., :sizes[d] - 2].ravel()
        offsets = strides[d] * np.arange(3)
        cols.append((bases[:, np.newaxis] + offsets[np.newaxis, :]).ravel())

    col_index = np.concatenate(cols)
    num_rows = len(col_index) // 3
    row_index = np.repeat(np.arange(num_rows), 3)
    values = np.tile(_STENCIL, num_rows)

    return sp.coo_matrix((values, (row_index, col_index)), shape=(num_rows, num_cols)).tocsr()
