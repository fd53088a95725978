"""Data types for the tensor-product B-spline builder."""

from __future__ import annotations

import enum
from dataclasses import dataclass

import numpy as np

from tpspline.core.bspline import BSpline
from tpspline.core.errors import SplineFitError

# Systems with fewer equations than this are solved densely
DENSE_SOLVE_THRESHOLD = 100


class Smoothing(enum.Enum):
    """Regularization applied to the least-squares problem."""

    NONE = "none"
    IDENTITY = "identity"
    PSPLINE = "pspline"


class KnotSpacing(enum.Enum):
    """Knot placement strategy."""

    AS_SAMPLED = "as_sampled"
    EQUIDISTANT = "equidistant"
    EXPERIMENTAL = "experimental"


@dataclass(frozen=True)
class BuilderConfig:
    """Configuration for the B-spline builder.

    Attributes:
        dim_x: Number of input variables.
        dim_y: Number of output variables.
        degrees: One degree per input variable. None selects
            min(3, unique_values - 1) per variable at fit time.
        num_basis_functions: Target basis-function count per input
            variable. 1 means "derive from the knot spacing"; only the
            equidistant strategies use it.
        knot_spacing: Knot placement strategy.
        dense_threshold: Systems with fewer equations are solved with
            dense QR; larger ones try sparse LU first.
    """

    dim_x: int
    dim_y: int = 1
    degrees: tuple[int, ...] | None = None
    num_basis_functions: tuple[int, ...] | None = None
    knot_spacing: KnotSpacing = KnotSpacing.AS_SAMPLED
    dense_threshold: int = DENSE_SOLVE_THRESHOLD

    def resolved_num_basis_functions(self) -> tuple[int, ...]:
        if self.num_basis_functions is None:
            return (1,) * self.dim_x
        return self.num_basis_functions


@dataclass
class LinearSolution:
    """Solution of A x = b.

    Attributes:
        coefficients: Solution x, shape (n, dim_y).
        method: "sparse_lu" or "dense_qr".
    """

    coefficients: np.ndarray
    method: str


@dataclass
class FitOutcome:
    """Result of Builder.try_fit: exactly one of spline and error is set."""

    spline: BSpline | None = None
    error: SplineFitError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
