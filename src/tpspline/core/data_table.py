"""Sample storage for spline fitting.

A DataTable holds (x, y) pairs with fixed input and output dimension.
Samples are kept in insertion order, which is the row order of every
matrix assembled from the table.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

import numpy as np

from tpspline.core.errors import DimensionMismatchError, InvalidParameterError

logger = logging.getLogger(__name__)


class DataTable:
    """Ordered table of samples of an unknown function R^dim_x -> R^dim_y.

    Usage:
        table = DataTable(dim_x=2, dim_y=1)
        table.add_sample([0.0, 1.0], [3.5])
        for x, y in table:
            ...
    """

    def __init__(self, dim_x: int, dim_y: int = 1, allow_duplicates: bool = False) -> None:
        if dim_x < 1 or dim_y < 1:
            raise InvalidParameterError(
                f"dim_x and dim_y must be >= 1, got dim_x={dim_x}, dim_y={dim_y}"
            )
        self.dim_x = int(dim_x)
        self.dim_y = int(dim_y)
        self.allow_duplicates = allow_duplicates
        self.num_duplicates = 0
        self._inputs: list[np.ndarray] = []
        self._outputs: list[np.ndarray] = []
        self._seen: set[tuple[float, ...]] = set()
        self._stacked_inputs: np.ndarray | None = None

    @classmethod
    def from_arrays(
        cls,
        X: np.ndarray,
        Y: np.ndarray,
        allow_duplicates: bool = False,
    ) -> DataTable:
        """Build a table from input array X (m, dim_x) and outputs Y (m, dim_y).

        One-dimensional arrays are treated as a single column.
        """
        X = np.asarray(X, dtype=float)
        Y = np.asarray(Y, dtype=float)
        if X.ndim == 1:
            X = X[:, np.newaxis]
        if Y.ndim == 1:
            Y = Y[:, np.newaxis]
        if X.shape[0] != Y.shape[0]:
            raise DimensionMismatchError(
                f"X has {X.shape[0]} rows but Y has {Y.shape[0]}"
            )

        table = cls(X.shape[1], Y.shape[1], allow_duplicates=allow_duplicates)
        for x, y in zip(X, Y):
            table.add_sample(x, y)
        return table

    def add_sample(self, x: Sequence[float] | float, y: Sequence[float] | float) -> None:
        """Append one sample.

        Samples whose input vector is already present are skipped (and
        counted in ``num_duplicates``) unless the table allows duplicates.
        """
        x_arr = np.atleast_1d(np.asarray(x, dtype=float))
        y_arr = np.atleast_1d(np.asarray(y, dtype=float))

        if x_arr.shape != (self.dim_x,):
            raise DimensionMismatchError(
                f"Expected input vector of length {self.dim_x}, got shape {x_arr.shape}"
            )
        if y_arr.shape != (self.dim_y,):
            raise DimensionMismatchError(
                f"Expected output vector of length {self.dim_y}, got shape {y_arr.shape}"
            )
        if not (np.all(np.isfinite(x_arr)) and np.all(np.isfinite(y_arr))):
            raise InvalidParameterError(f"Sample contains non-finite values: x={x_arr}, y={y_arr}")

        key = tuple(x_arr.tolist())
        if key in self._seen and not self.allow_duplicates:
            self.num_duplicates += 1
            logger.warning("Skipping duplicate sample at x=%s", key)
            return

        self._seen.add(key)
        self._inputs.append(x_arr)
        self._outputs.append(y_arr)
        self._stacked_inputs = None

    @property
    def num_samples(self) -> int:
        return len(self._inputs)

    def __len__(self) -> int:
        return len(self._inputs)

    def __iter__(self) -> Iterator[tuple[np.ndarray, np.ndarray]]:
        return zip(self._inputs, self._outputs)

    @property
    def inputs(self) -> np.ndarray:
        """Input vectors stacked as a read-only array of shape (num_samples, dim_x)."""
        if self._stacked_inputs is None:
            if self._inputs:
                stacked = np.vstack(self._inputs)
            else:
                stacked = np.empty((0, self.dim_x))
            stacked.flags.writeable = False
            self._stacked_inputs = stacked
        return self._stacked_inputs

    @property
    def outputs(self) -> np.ndarray:
        """Output vectors stacked as an array of shape (num_samples, dim_y)."""
        if not self._outputs:
            return np.empty((0, self.dim_y))
        return np.vstack(self._outputs)

    def marginal_values(self, dim: int) -> np.ndarray:
        """Sorted unique values taken by input dimension ``dim``."""
        if not 0 <= dim < self.dim_x:
            raise InvalidParameterError(f"dim must be in [0, {self.dim_x}), got {dim}")
        return np.unique(self.inputs[:, dim])

    def is_grid_complete(self) -> bool:
        """True if the distinct inputs cover the full Cartesian grid of marginals."""
        if not self._inputs:
            return False
        grid_size = 1
        for d in range(self.dim_x):
            grid_size *= len(self.marginal_values(d))
        return len(self._seen) == grid_size
