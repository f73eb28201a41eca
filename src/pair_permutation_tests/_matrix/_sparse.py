"""Sparse accessor for ``scipy.sparse`` matrices and arrays.

Single-cell count matrices are usually stored sparse.  The accessor
converts the input to CSC once, after which a column read is a scatter
of that column's explicit entries into a zeroed buffer — O(nnz in the
column) rather than O(n_genes) work beyond the zero fill.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import scipy.sparse as sp

from . import _buffer_dtype


class SparseAccessor:
    """Column reads from a compressed-sparse genes x cells matrix."""

    def __init__(self, matrix: Any) -> None:
        if not sp.issparse(matrix):
            raise TypeError(f"Expected a scipy.sparse matrix, got {type(matrix).__name__}.")
        if matrix.ndim != 2:
            raise ValueError(
                f"Expression matrix must be two-dimensional (genes x cells), "
                f"got {matrix.ndim} dimension(s)."
            )
        self._dtype = _buffer_dtype(matrix.dtype)
        csc = sp.csc_matrix(matrix)
        # Scatter assumes one entry per (row, column); duplicates must be summed
        # first, on a copy so the caller's matrix is left untouched.
        if not csc.has_canonical_format:
            csc = csc.copy()
            csc.sum_duplicates()
        self._csc = csc

    @property
    def n_rows(self) -> int:
        return self._csc.shape[0]

    @property
    def n_cols(self) -> int:
        return self._csc.shape[1]

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def column_labels(self) -> None:
        return None

    def get_column(self, index: int, out: np.ndarray) -> np.ndarray:
        start, stop = self._csc.indptr[index], self._csc.indptr[index + 1]
        out[:] = 0
        out[self._csc.indices[start:stop]] = self._csc.data[start:stop]
        return out
