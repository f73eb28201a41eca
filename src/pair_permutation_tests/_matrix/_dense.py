"""Dense accessor for NumPy arrays and pandas DataFrames."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from . import _buffer_dtype


class DenseAccessor:
    """Column reads from an in-memory dense genes x cells matrix.

    The values are held in Fortran order so that every column read is
    a single contiguous copy.  A DataFrame keeps its column labels,
    which end up as the cell labels of the result object.
    """

    def __init__(self, matrix: Any) -> None:
        labels: list[Any] | None = None
        if isinstance(matrix, pd.DataFrame):
            labels = list(matrix.columns)
            values = matrix.to_numpy()
        else:
            values = np.asarray(matrix)

        if values.ndim != 2:
            raise ValueError(
                f"Expression matrix must be two-dimensional (genes x cells), "
                f"got {values.ndim} dimension(s)."
            )

        self._dtype = _buffer_dtype(values.dtype)
        self._values = np.asfortranarray(values)
        self._labels = labels

    @property
    def n_rows(self) -> int:
        return self._values.shape[0]

    @property
    def n_cols(self) -> int:
        return self._values.shape[1]

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def column_labels(self) -> list[Any] | None:
        return self._labels

    def get_column(self, index: int, out: np.ndarray) -> np.ndarray:
        out[:] = self._values[:, index]
        return out
