"""Typed result object for per-cell shuffle scores.

A frozen dataclass that provides:

* **Attribute access** — ``result.scores``, ``result.n_resolved``, etc.
* **Dict-like access** — ``result["scores"]``, ``result.get("key")``,
  ``"key" in result`` for consumers that prefer bracket syntax.
* **Serialisation** — ``.to_dict()`` returns a plain ``dict[str, Any]``
  with all NumPy types converted to native Python (``nan`` stays a
  Python ``float('nan')``).
* **Tabulation** — ``.to_frame()`` returns one row per scored cell.

The result is frozen to communicate that it is a snapshot of a
completed run; the arrays it holds should not be mutated either.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar

import numpy as np
import pandas as pd

# ------------------------------------------------------------------ #
# Serialisation helper
# ------------------------------------------------------------------ #


def _numpy_to_python(obj: Any) -> Any:
    """Recursively convert NumPy scalars/arrays to Python-native types.

    Handles nested dicts, lists, np.ndarray, np.integer, and
    np.floating so that :meth:`to_dict` returns plain Python objects.
    """
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (np.integer, np.bool_)):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, dict):
        return {k: _numpy_to_python(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        converted = [_numpy_to_python(item) for item in obj]
        return type(obj)(converted)
    return obj


# ------------------------------------------------------------------ #
# Dict-compatibility mixin
# ------------------------------------------------------------------ #


class _DictAccessMixin:
    """Dict-like access convenience for result dataclasses.

    Supports three access patterns:

    1. ``result["key"]``     — raises ``KeyError`` on miss
    2. ``result.get(key, d)`` — returns *d* on miss (default ``None``)
    3. ``"key" in result``   — membership test
    """

    # Fields to exclude from to_dict() serialisation.
    _EXCLUDE_FROM_DICT: ClassVar[frozenset[str]] = frozenset()

    def __getitem__(self, key: str) -> Any:
        """Attribute lookup via bracket syntax."""
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        """Attribute lookup with a fallback default."""
        return getattr(self, key, default)

    def __contains__(self, key: object) -> bool:
        """Membership test: ``"key" in result``."""
        if not isinstance(key, str):
            return False
        return hasattr(self, key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary of Python-native values."""
        result: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            if f.name in self._EXCLUDE_FROM_DICT:
                continue
            result[f.name] = _numpy_to_python(getattr(self, f.name))
        return result


# ------------------------------------------------------------------ #
# ShuffleScoreResult
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class ShuffleScoreResult(_DictAccessMixin):
    """Per-cell outcome of a shuffle-score run.

    Returned by :func:`~pair_permutation_tests.shuffle_scores` and
    :meth:`~pair_permutation_tests.ShuffleScoreEngine.run`.  Every
    array has one entry per requested cell, in request order.
    """

    # ---- Scores ----------------------------------------------------
    scores: np.ndarray
    """Fraction of resolved shuffles scoring strictly below the observed
    score; ``nan`` when the observed score is undefined or fewer than
    ``min_iterations`` shuffles resolved."""

    observed: np.ndarray
    """Unshuffled proportion score per cell (``nan`` when undefined)."""

    # ---- Permutation tallies ---------------------------------------
    n_below: np.ndarray
    """Resolved shuffles whose score fell below the observed score."""

    n_resolved: np.ndarray
    """Shuffles with a defined score (zero for skipped cells)."""

    # ---- Cell identity ---------------------------------------------
    cells: np.ndarray
    """0-based column indices of the scored cells."""

    cell_labels: list[Any] | None
    """Column labels of the scored cells, when the matrix carries them."""

    # ---- Settings --------------------------------------------------
    iterations: int
    """Number of shuffles attempted per cell."""

    min_iterations: int
    """Minimum resolved shuffles for a defined score."""

    min_pairs: int
    """Minimum informative pairs for a defined proportion."""

    @property
    def n_missing(self) -> int:
        """Number of cells whose score is ``nan``."""
        return int(np.count_nonzero(np.isnan(self.scores)))

    def to_frame(self) -> pd.DataFrame:
        """Tabulate the per-cell fields, indexed by cell label.

        Unlabelled matrices are indexed by the 0-based cell index.
        """
        index = pd.Index(
            self.cell_labels if self.cell_labels is not None else self.cells,
            name="cell",
        )
        return pd.DataFrame(
            {
                "score": self.scores,
                "observed": self.observed,
                "n_below": self.n_below,
                "n_resolved": self.n_resolved,
            },
            index=index,
        )
