"""Builder that fits tensor-product B-splines to sample tables.

Find B-spline coefficients x by solving

    min ||B x - b||^2 + alpha * ||R x||^2

where B holds the basis functions evaluated at the sample inputs, b the
sample outputs and R the regularization matrix selected by the smoothing
mode (see tpspline.fitting.regularization).
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence

import numpy as np

from tpspline.core.bspline import BSpline
from tpspline.core.data_table import DataTable
from tpspline.core.errors import (
    DimensionMismatchError,
    InconsistentConfigurationError,
    InvalidParameterError,
    SplineFitError,
)
from tpspline.fitting.basis_matrix import compute_basis_function_matrix, stack_sample_values
from tpspline.fitting.knots import compute_knot_vectors, default_degrees
from tpspline.fitting.regularization import build_system, check_pspline_basis
from tpspline.fitting.solver import solve_linear_system
from tpspline.fitting.types import (
    DENSE_SOLVE_THRESHOLD,
    BuilderConfig,
    FitOutcome,
    Smoothing,
)

logger = logging.getLogger(__name__)


def compute_control_points(
    bspline: BSpline,
    table: DataTable,
    smoothing: Smoothing,
    alpha: float,
    weights: np.ndarray | None = None,
    dense_threshold: int = DENSE_SOLVE_THRESHOLD,
) -> np.ndarray:
    """Compute control points of shape (num_basis_functions, dim_y)."""
    B = compute_basis_function_matrix(bspline, table)
    b = stack_sample_values(table)

    A, rhs = build_system(
        B, b, smoothing, alpha,
        num_basis_per_variable=bspline.num_basis_functions_per_variable,
        weights=weights,
    )

    solution = solve_linear_system(A, rhs, dense_threshold=dense_threshold)
    logger.debug(
        "Solved %d x %d system with %s", A.shape[0], A.shape[1], solution.method,
    )
    return solution.coefficients


class Builder:
    """Fits tensor-product B-splines to a DataTable.

    Setters return a new Builder, so a configured builder can be shared
    and reused across fits.

    Usage:
        spline = (
            Builder(dim_x=2)
            .degree(3)
            .knot_spacing(KnotSpacing.EQUIDISTANT)
            .num_basis_functions(8)
            .fit(table, Smoothing.PSPLINE, alpha=0.03)
        )
        y = spline.eval([0.5, 1.0])
    """

    def __init__(self, dim_x: int, dim_y: int = 1, config: BuilderConfig | None = None) -> None:
        if config is None:
            config = BuilderConfig(dim_x=dim_x, dim_y=dim_y)
        elif (config.dim_x, config.dim_y) != (dim_x, dim_y):
            raise InconsistentConfigurationError(
                f"Config is for ({config.dim_x}, {config.dim_y}) but builder "
                f"was created for ({dim_x}, {dim_y})"
            )
        self.config = config

    def _per_variable(self, value: int | Sequence[int]) -> tuple[int, ...]:
        if isinstance(value, (int, np.integer)):
            return (int(value),) * self.config.dim_x
        return tuple(int(v) for v in value)

    def _with(self, **changes) -> Builder:
        config = dataclasses.replace(self.config, **changes)
        return Builder(config.dim_x, config.dim_y, config=config)

    def degree(self, degrees: int | Sequence[int]) -> Builder:
        """Set the degree of every input variable (int) or of each one (sequence)."""
        return self._with(degrees=self._per_variable(degrees))

    def num_basis_functions(self, counts: int | Sequence[int]) -> Builder:
        """Set the target basis-function count per input variable."""
        return self._with(num_basis_functions=self._per_variable(counts))

    def knot_spacing(self, spacing: KnotSpacing) -> Builder:
        return self._with(knot_spacing=spacing)

    def dense_threshold(self, threshold: int) -> Builder:
        return self._with(dense_threshold=int(threshold))

    def _validate(
        self,
        table: DataTable,
        smoothing: Smoothing,
        alpha: float,
        weights: np.ndarray | None,
    ) -> None:
        cfg = self.config
        if table.dim_x != cfg.dim_x:
            raise DimensionMismatchError(
                f"Expected {cfg.dim_x} input variables, table has {table.dim_x}"
            )
        if table.dim_y != cfg.dim_y:
            raise DimensionMismatchError(
                f"Expected {cfg.dim_y} output variables, table has {table.dim_y}"
            )
        if not np.isfinite(alpha) or alpha < 0:
            raise InvalidParameterError(f"alpha must be non-negative, got {alpha}")
        if not isinstance(smoothing, Smoothing):
            raise InvalidParameterError(f"Unknown smoothing mode: {smoothing!r}")
        if table.num_samples == 0:
            raise InvalidParameterError("Cannot fit a B-spline to an empty table")
        if weights is not None and smoothing is not Smoothing.PSPLINE:
            raise InvalidParameterError(
                f"Sample weights are only supported with P-spline smoothing, got {smoothing.name}"
            )
        if weights is not None:
            w = np.asarray(weights, dtype=float)
            if w.shape != (table.num_samples,):
                raise InvalidParameterError(
                    f"weights must have shape ({table.num_samples},), got {w.shape}"
                )
            if not np.all(np.isfinite(w)) or np.any(w < 0.0):
                raise InvalidParameterError("weights must be finite and non-negative")

    def fit(
        self,
        table: DataTable,
        smoothing: Smoothing = Smoothing.NONE,
        alpha: float = 0.1,
        weights: np.ndarray | None = None,
    ) -> BSpline:
        """Fit a B-spline to the samples in table.

        Args:
            table: Samples to fit.
            smoothing: Regularization mode.
            alpha: Regularization weight (>= 0). Ignored for NONE.
            weights: Optional per-sample weights for P-spline smoothing.

        Returns:
            B-spline with control points attached.

        Raises:
            DimensionMismatchError: Table dimensions differ from the builder's.
            InvalidParameterError: Negative alpha, empty table, bad weights.
            InconsistentConfigurationError: Per-variable settings do not
                match dim_x.
            InvalidConfigurationError: The data or settings cannot produce a
                valid basis.
            SolveFailureError: The linear system could not be solved.
        """
        self._validate(table, smoothing, alpha, weights)
        cfg = self.config

        if not table.is_grid_complete():
            logger.info("Building B-spline from irregular (incomplete) grid")

        degrees = cfg.degrees if cfg.degrees is not None else default_degrees(table)
        knot_vectors = compute_knot_vectors(
            table, degrees, cfg.resolved_num_basis_functions(), cfg.knot_spacing,
        )
        bspline = BSpline(cfg.dim_x, cfg.dim_y, knot_vectors, degrees)

        if smoothing is Smoothing.PSPLINE:
            check_pspline_basis(bspline.num_basis_functions_per_variable)

        coefficients = compute_control_points(
            bspline, table, smoothing, alpha,
            weights=weights, dense_threshold=cfg.dense_threshold,
        )
        bspline.set_control_points(coefficients)

        logger.info(
            "Fitted B-spline: %d samples, %s basis functions, smoothing=%s, alpha=%g",
            table.num_samples,
            "x".join(str(n) for n in bspline.num_basis_functions_per_variable),
            smoothing.name,
            alpha,
        )
        return bspline

    def try_fit(
        self,
        table: DataTable,
        smoothing: Smoothing = Smoothing.NONE,
        alpha: float = 0.1,
        weights: np.ndarray | None = None,
    ) -> FitOutcome:
        """Like fit, but return fitting errors in a FitOutcome instead of raising."""
        try:
            return FitOutcome(spline=self.fit(table, smoothing, alpha, weights))
        except SplineFitError as exc:
            return FitOutcome(error=exc)
