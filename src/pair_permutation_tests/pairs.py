"""Compact gene-level marker pairs into the used-gene index space.

Pairs are usually curated as gene identifiers (or matrix row numbers),
while the engine wants every pair expressed as positions into the
small subset of genes that appear in *some* pair.  For pairs
``[("g1", "g7"), ("g7", "g3")]`` over a matrix whose rows are
``g0 … g9``::

    used    = [1, 3, 7]      # sorted unique rows, ascending
    marker1 = [0, 2]         # g1 -> 0, g7 -> 2
    marker2 = [2, 1]         # g7 -> 2, g3 -> 1
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np
import pandas as pd


def _to_rows(members: Any, genes: pd.Index | None, what: str) -> np.ndarray:
    """Map one side of the pair list onto matrix row numbers."""
    if genes is None:
        arr = np.asarray(members)
        if arr.size and arr.dtype.kind not in "iu":
            raise TypeError(
                f"{what} must be integer row indices when no gene labels are given, "
                f"got dtype {arr.dtype}"
            )
        return arr.astype(np.intp).ravel()

    rows = genes.get_indexer(pd.Index(members))
    if (rows < 0).any():
        missing = [m for m, r in zip(members, rows, strict=True) if r < 0]
        raise ValueError(f"{what} contains genes not found in the matrix: {missing[:5]}")
    return rows.astype(np.intp)


def prepare_marker_pairs(
    first: Sequence[Any],
    second: Sequence[Any],
    genes: Sequence[Any] | pd.Index | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Build ``(used, marker1, marker2)`` from gene-level pairs.

    Args:
        first: First gene of each pair.
        second: Second gene of each pair, same length as *first*.
        genes: Row labels of the expression matrix (e.g.
            ``DataFrame.index``).  When given, *first* and *second* are
            looked up as labels; otherwise they are taken as 0-based
            row numbers.

    Returns:
        ``used`` — sorted unique row numbers appearing in any pair;
        ``marker1``/``marker2`` — positions of each pair member in
        ``used``.

    Raises:
        ValueError: If the two sides differ in length, a label is not
            among *genes*, or *genes* holds duplicate labels.
    """
    if len(first) != len(second):
        raise ValueError(
            f"first ({len(first)}) and second ({len(second)}) must have the same length"
        )

    index: pd.Index | None = None
    if genes is not None:
        index = pd.Index(genes)
        if not index.is_unique:
            raise ValueError("gene labels must be unique to resolve marker pairs")

    rows1 = _to_rows(first, index, "first")
    rows2 = _to_rows(second, index, "second")

    used, inverse = np.unique(np.concatenate([rows1, rows2]), return_inverse=True)
    inverse = inverse.astype(np.intp).ravel()
    n_pairs = rows1.shape[0]
    return used.astype(np.intp), inverse[:n_pairs], inverse[n_pairs:]
