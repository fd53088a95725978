"""Error types raised while building and fitting tensor-product B-splines."""

from __future__ import annotations


class SplineFitError(Exception):
    """Base class for all fitting errors."""


class DimensionMismatchError(SplineFitError, ValueError):
    """Raised when table and configuration dimensionality disagree."""


class InvalidParameterError(SplineFitError, ValueError):
    """Raised for invalid call arguments (e.g. negative alpha)."""


class InconsistentConfigurationError(SplineFitError, ValueError):
    """Raised when per-dimension settings do not match dim_x."""


class InvalidConfigurationError(SplineFitError, ValueError):
    """Raised when a configuration cannot produce a valid basis.

    Examples are a degree that needs more unique samples than the table
    holds, or fewer than three basis functions in some dimension under
    P-spline smoothing.
    """


class SolveFailureError(SplineFitError, RuntimeError):
    """Raised when neither the sparse nor the dense solver succeeds."""
