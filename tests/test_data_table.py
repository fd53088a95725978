"""Tests for the sample table."""

import numpy as np
import pytest

from tpspline.core.data_table import DataTable
from tpspline.core.errors import DimensionMismatchError, InvalidParameterError


def _grid_table(nx: int = 3, ny: int = 4) -> DataTable:
    table = DataTable(dim_x=2, dim_y=1)
    for x in range(nx):
        for y in range(ny):
            table.add_sample([float(x), float(y)], [x + 10.0 * y])
    return table


class TestAddSample:

    def test_samples_kept_in_insertion_order(self):
        table = DataTable(dim_x=1)
        for x in [3.0, 1.0, 2.0]:
            table.add_sample(x, 2.0 * x)
        xs = [float(x[0]) for x, _ in table]
        ys = [float(y[0]) for _, y in table]
        assert xs == [3.0, 1.0, 2.0]
        assert ys == [6.0, 2.0, 4.0]
        assert table.num_samples == 3
        assert len(table) == 3

    def test_wrong_input_length(self):
        table = DataTable(dim_x=2)
        with pytest.raises(DimensionMismatchError):
            table.add_sample([1.0], [0.0])

    def test_wrong_output_length(self):
        table = DataTable(dim_x=1, dim_y=2)
        with pytest.raises(DimensionMismatchError):
            table.add_sample([1.0], [0.0])

    def test_non_finite_rejected(self):
        table = DataTable(dim_x=1)
        with pytest.raises(InvalidParameterError):
            table.add_sample([np.nan], [0.0])

    def test_duplicates_skipped(self):
        table = DataTable(dim_x=1)
        table.add_sample(1.0, 1.0)
        table.add_sample(1.0, 5.0)
        assert table.num_samples == 1
        assert table.num_duplicates == 1
        np.testing.assert_allclose(table.outputs, [[1.0]])

    def test_duplicates_allowed(self):
        table = DataTable(dim_x=1, allow_duplicates=True)
        table.add_sample(1.0, 1.0)
        table.add_sample(1.0, 5.0)
        assert table.num_samples == 2
        assert table.num_duplicates == 0

    def test_invalid_dimensions(self):
        with pytest.raises(InvalidParameterError):
            DataTable(dim_x=0)


class TestGrid:

    def test_marginal_values_sorted_unique(self):
        table = DataTable(dim_x=2)
        table.add_sample([2.0, 0.5], 0.0)
        table.add_sample([1.0, 0.5], 0.0)
        table.add_sample([2.0, 0.1], 0.0)
        np.testing.assert_array_equal(table.marginal_values(0), [1.0, 2.0])
        np.testing.assert_array_equal(table.marginal_values(1), [0.1, 0.5])

    def test_inputs_stacked_once(self):
        table = _grid_table()
        assert table.inputs is table.inputs
        assert not table.inputs.flags.writeable

    def test_marginal_values_follow_new_samples(self):
        table = _grid_table()
        np.testing.assert_array_equal(table.marginal_values(0), [0.0, 1.0, 2.0])
        table.add_sample([7.0, 0.0], [0.0])
        np.testing.assert_array_equal(table.marginal_values(0), [0.0, 1.0, 2.0, 7.0])
        assert table.inputs.shape == (13, 2)

    def test_marginal_values_bad_dim(self):
        with pytest.raises(InvalidParameterError):
            _grid_table().marginal_values(2)

    def test_complete_grid(self):
        assert _grid_table().is_grid_complete()

    def test_incomplete_grid(self):
        table = DataTable(dim_x=2)
        table.add_sample([0.0, 0.0], 0.0)
        table.add_sample([1.0, 1.0], 0.0)
        assert not table.is_grid_complete()

    def test_empty_table_is_not_complete(self):
        assert not DataTable(dim_x=1).is_grid_complete()


class TestFromArrays:

    def test_shapes(self):
        X = np.array([[0.0, 1.0], [1.0, 1.0], [2.0, 0.0]])
        Y = np.array([1.0, 2.0, 3.0])
        table = DataTable.from_arrays(X, Y)
        assert (table.dim_x, table.dim_y) == (2, 1)
        np.testing.assert_array_equal(table.inputs, X)
        np.testing.assert_array_equal(table.outputs, Y[:, np.newaxis])

    def test_one_dimensional_inputs(self):
        table = DataTable.from_arrays(np.arange(4.0), np.arange(4.0) ** 2)
        assert table.dim_x == 1
        assert table.num_samples == 4

    def test_row_count_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            DataTable.from_arrays(np.zeros((3, 1)), np.zeros((2, 1)))
