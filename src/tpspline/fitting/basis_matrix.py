"""Design matrix assembly.

Row i of the basis matrix holds the tensor-product basis evaluated at
sample i; column j is basis function j in the shell's flattened order.
"""

from __future__ import annotations

import numpy as np
import scipy.sparse as sp

from tpspline.core.bspline import BSpline
from tpspline.core.data_table import DataTable


def compute_basis_function_matrix(bspline: BSpline, table: DataTable) -> sp.csr_matrix:
    """Assemble the sparse (num_samples, num_basis_functions) basis matrix."""
    rows = []
    cols = []
    vals = []
    for i, (x, _) in enumerate(table):
        basis_row = bspline.eval_basis(x)
        rows.append(np.full(len(basis_row.indices), i, dtype=np.int64))
        cols.append(basis_row.indices)
        vals.append(basis_row.values)

    shape = (table.num_samples, bspline.num_basis_functions)
    if not rows:
        return sp.csr_matrix(shape)

    return sp.coo_matrix(
        (np.concatenate(vals), (np.concatenate(rows), np.concatenate(cols))),
        shape=shape,
    ).tocsr()


def stack_sample_values(table: DataTable) -> np.ndarray:
    """Sample outputs as a dense array of shape (num_samples, dim_y)."""
    return table.outputs
