"""Tests for the column-access layer."""

import numpy as np
import pandas as pd
import pytest
import scipy.sparse as sp

from pair_permutation_tests import ColumnAccessor, resolve_accessor, score_cells
from pair_permutation_tests._matrix._dense import DenseAccessor
from pair_permutation_tests._matrix._sparse import SparseAccessor


class _ListAccessor:
    """Minimal out-of-core style accessor over a list of columns."""

    def __init__(self, columns):
        self.columns = [np.asarray(c) for c in columns]
        self.reads = 0

    @property
    def n_rows(self):
        return len(self.columns[0])

    @property
    def n_cols(self):
        return len(self.columns)

    @property
    def dtype(self):
        return np.dtype(np.float64)

    @property
    def column_labels(self):
        return None

    def get_column(self, index, out):
        self.reads += 1
        out[:] = self.columns[index]
        return out


class TestResolveAccessor:
    """Tests for resolve_accessor dispatch."""

    def test_ndarray_is_dense(self):
        assert isinstance(resolve_accessor(np.zeros((3, 2))), DenseAccessor)

    def test_nested_list_is_dense(self):
        acc = resolve_accessor([[1, 2], [3, 4], [5, 6]])
        assert isinstance(acc, DenseAccessor)
        assert (acc.n_rows, acc.n_cols) == (3, 2)

    def test_dataframe_is_dense(self):
        acc = resolve_accessor(pd.DataFrame({"a": [1.0, 2.0], "b": [3.0, 4.0]}))
        assert isinstance(acc, DenseAccessor)
        assert acc.column_labels == ["a", "b"]

    @pytest.mark.parametrize("fmt", [sp.csr_matrix, sp.csc_matrix, sp.coo_matrix, sp.csr_array])
    def test_sparse_is_sparse(self, fmt):
        acc = resolve_accessor(fmt(np.eye(3)))
        assert isinstance(acc, SparseAccessor)

    def test_custom_accessor_passthrough(self):
        custom = _ListAccessor([[1.0, 2.0], [3.0, 4.0]])
        assert isinstance(custom, ColumnAccessor)
        assert resolve_accessor(custom) is custom

    def test_ndarray_is_not_an_accessor(self):
        assert not isinstance(np.zeros((2, 2)), ColumnAccessor)


class TestDenseAccessor:
    """Tests for DenseAccessor."""

    @pytest.mark.parametrize(
        "dtype, expected",
        [
            (np.int32, np.int64),
            (np.uint16, np.int64),
            (np.bool_, np.int64),
            (np.float32, np.float64),
            (np.float64, np.float64),
        ],
    )
    def test_buffer_dtype_tag(self, dtype, expected):
        acc = DenseAccessor(np.ones((3, 2), dtype=dtype))
        assert acc.dtype == np.dtype(expected)

    def test_get_column(self):
        values = np.arange(12).reshape(4, 3)
        acc = DenseAccessor(values)
        out = np.empty(4, dtype=acc.dtype)
        result = acc.get_column(1, out)
        assert result is out
        np.testing.assert_array_equal(out, [1, 4, 7, 10])

    def test_unlabelled_array(self):
        assert DenseAccessor(np.zeros((2, 2))).column_labels is None

    def test_complex_rejected(self):
        with pytest.raises(TypeError, match="integer or real"):
            DenseAccessor(np.zeros((2, 2), dtype=complex))


class TestSparseAccessor:
    """Tests for SparseAccessor."""

    def test_matches_dense(self):
        rng = np.random.default_rng(0)
        dense = rng.poisson(0.7, size=(20, 6))
        acc = SparseAccessor(sp.csr_matrix(dense))
        assert acc.dtype == np.dtype(np.int64)
        out = np.empty(20, dtype=acc.dtype)
        for j in range(6):
            np.testing.assert_array_equal(acc.get_column(j, out), dense[:, j])

    def test_buffer_is_cleared_between_columns(self):
        dense = np.array([[1.0, 0.0], [2.0, 0.0]])
        acc = SparseAccessor(sp.csc_matrix(dense))
        out = np.empty(2)
        acc.get_column(0, out)
        acc.get_column(1, out)
        np.testing.assert_array_equal(out, [0.0, 0.0])

    def test_duplicate_entries_summed_without_touching_input(self):
        data = np.array([1.0, 2.0, 5.0])
        indices = np.array([0, 0, 1])
        indptr = np.array([0, 2, 3])
        mat = sp.csc_matrix((data, indices, indptr), shape=(2, 2))
        acc = SparseAccessor(mat)
        out = np.empty(2)
        np.testing.assert_array_equal(acc.get_column(0, out), [3.0, 0.0])
        np.testing.assert_array_equal(acc.get_column(1, out), [0.0, 5.0])
        assert mat.nnz == 3

    def test_rejects_dense(self):
        with pytest.raises(TypeError, match="scipy.sparse"):
            SparseAccessor(np.zeros((2, 2)))


class TestCustomAccessorInEngine:
    """A user-supplied accessor drives the engine like built-in storage."""

    def test_same_scores_as_dense(self):
        rng = np.random.default_rng(1)
        dense = rng.standard_normal((10, 4))
        custom = _ListAccessor(dense.T)
        kwargs = dict(iterations=20, min_iterations=1, min_pairs=1, random_state=3)
        marker1 = [0, 1, 2, 3]
        marker2 = [1, 2, 3, 0]
        used = [2, 4, 6, 8]
        expected = score_cells(dense, None, marker1, marker2, used, **kwargs)
        got = score_cells(custom, None, marker1, marker2, used, **kwargs)
        np.testing.assert_array_equal(got, expected)
        # One column read per cell.
        assert custom.reads == 4
