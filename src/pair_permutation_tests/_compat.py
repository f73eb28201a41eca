"""Input compatibility layer for optional Polars support.

Expression matrices may be passed as NumPy arrays, pandas DataFrames or
SciPy sparse matrices.  This module adds transparent support for Polars
DataFrames: when a user passes a ``polars.DataFrame`` (or
``polars.LazyFrame``) it is converted to ``pandas.DataFrame`` at the
boundary so that the matrix accessors only ever see pandas or NumPy
objects.

Polars is **not** a required dependency.  If it is not installed, the
converter simply passes every other object through untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeAlias

import pandas as pd

if TYPE_CHECKING:
    import polars as pl

    DataFrameLike: TypeAlias = pd.DataFrame | pl.DataFrame | pl.LazyFrame
else:
    DataFrameLike: TypeAlias = pd.DataFrame

# Runtime detection — avoids a hard dependency on Polars.
try:
    import polars as pl

    _HAS_POLARS = True
except ImportError:
    _HAS_POLARS = False


def _is_polars_frame(obj: Any) -> bool:
    """Return ``True`` if *obj* is a Polars DataFrame or LazyFrame."""
    if not _HAS_POLARS:
        return False
    return isinstance(obj, (pl.DataFrame, pl.LazyFrame))


def _polars_to_pandas(obj: Any) -> Any:
    """Convert a Polars frame to :class:`pandas.DataFrame`.

    Accepted types:
        * ``polars.DataFrame`` — converted via ``.to_pandas()``.
        * ``polars.LazyFrame`` — collected then converted.
        * anything else — returned as-is.

    Polars frames have no row index, so the converted frame carries a
    default ``RangeIndex`` over genes and the Polars column names as
    cell labels.
    """
    if not _is_polars_frame(obj):
        return obj
    if isinstance(obj, pl.LazyFrame):
        return obj.collect().to_pandas()
    return obj.to_pandas()
