"""Sample tables, the tensor-product B-spline shell and error types."""

from tpspline.core.bspline import BSpline, SparseBasisRow
from tpspline.core.data_table import DataTable
from tpspline.core.errors import (
    DimensionMismatchError,
    InconsistentConfigurationError,
    InvalidConfigurationError,
    InvalidParameterError,
    SolveFailureError,
    SplineFitError,
)

__all__ = [
    "BSpline",
    "DataTable",
    "DimensionMismatchError",
    "InconsistentConfigurationError",
    "InvalidConfigurationError",
    "InvalidParameterError",
    "SolveFailureError",
    "SparseBasisRow",
    "SplineFitError",
]
