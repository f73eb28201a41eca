"""Column-access layer over expression matrices.

The permutation driver never indexes an expression matrix directly.
It asks a :class:`ColumnAccessor` for one column at a time, copied into
a buffer the driver owns, so the same scoring loop serves dense arrays,
labelled DataFrames and sparse storage alike.

Dispatch follows the runtime type of the matrix passed by the caller:

1. Objects that already satisfy :class:`ColumnAccessor` are used as-is.
   This is the hook for out-of-core storage (HDF5, Zarr, …): wrap it in
   a class exposing the four members below.
2. ``scipy.sparse`` matrices and arrays → :class:`SparseAccessor`
   (converted once to CSC so each column is a contiguous slice).
3. ``pandas.DataFrame`` (and Polars frames, converted at the boundary)
   → :class:`DenseAccessor` carrying the column labels.
4. Anything ``np.asarray`` can turn into a 2-D numeric array →
   :class:`DenseAccessor`.

Integer vs. real storage
~~~~~~~~~~~~~~~~~~~~~~~~
Each accessor reports a ``dtype`` tag: ``int64`` for integer or boolean
storage, ``float64`` otherwise.  The driver allocates its working
buffers with this dtype, so counts are compared as integers and
normalised values as doubles, without a second copy of the engine per
numeric type.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

import numpy as np
import scipy.sparse as sp

from .._compat import _polars_to_pandas

# ------------------------------------------------------------------ #
# ColumnAccessor
# ------------------------------------------------------------------ #


@runtime_checkable
class ColumnAccessor(Protocol):
    """Interface that every matrix accessor must implement.

    Rows are genes and columns are cells.  Accessors are read-only:
    the engine never writes back into the matrix.

    Attributes:
        n_rows: Number of genes.
        n_cols: Number of cells.
        dtype: Working-buffer dtype (``int64`` or ``float64``).
        column_labels: Cell labels, or ``None`` when the storage is
            unlabelled.
    """

    @property
    def n_rows(self) -> int: ...

    @property
    def n_cols(self) -> int: ...

    @property
    def dtype(self) -> np.dtype: ...

    @property
    def column_labels(self) -> Sequence[Any] | None: ...

    def get_column(self, index: int, out: np.ndarray) -> np.ndarray:
        """Copy column *index* into *out* and return *out*.

        Args:
            index: 0-based cell index in ``[0, n_cols)``.
            out: Buffer of shape ``(n_rows,)`` and dtype ``dtype``.

        Returns:
            The filled buffer.
        """
        ...


def _buffer_dtype(dtype: np.dtype) -> np.dtype:
    """Map a storage dtype onto the working-buffer dtype tag.

    Raises:
        TypeError: If the storage is not numeric.
    """
    dtype = np.dtype(dtype)
    if dtype.kind in "biu":
        return np.dtype(np.int64)
    if dtype.kind == "f":
        return np.dtype(np.float64)
    raise TypeError(
        f"Expression matrix must hold integer or real values, got dtype {dtype}."
    )


# ------------------------------------------------------------------ #
# Accessor resolution
# ------------------------------------------------------------------ #


def resolve_accessor(matrix: Any) -> ColumnAccessor:
    """Return a :class:`ColumnAccessor` for *matrix*.

    Args:
        matrix: A genes x cells matrix: NumPy array, pandas or Polars
            DataFrame, SciPy sparse matrix/array, or an object that
            already implements :class:`ColumnAccessor`.

    Returns:
        An accessor ready for column reads.

    Raises:
        TypeError: If the matrix is not numeric.
        ValueError: If the matrix is not two-dimensional.
    """
    if isinstance(matrix, ColumnAccessor):
        return matrix

    if sp.issparse(matrix):
        from ._sparse import SparseAccessor

        return SparseAccessor(matrix)

    from ._dense import DenseAccessor

    return DenseAccessor(_polars_to_pandas(matrix))


__all__ = ["ColumnAccessor", "resolve_accessor"]
