"""Shuffle-score engine — per-cell permutation null for proportion scores.

The :class:`ShuffleScoreEngine` centralises everything that happens
*before* the per-cell loop runs:

1. **Matrix resolution** — wrap the expression matrix in a
   :class:`~pair_permutation_tests._matrix.ColumnAccessor`.
2. **Input validation** — marker lengths, marker/used/cell index
   ranges and integer settings are all checked up front, so a bad call
   fails before any cell is scored.
3. **Parallelism and random streams** — resolve ``n_jobs`` and the
   random generator.

:meth:`ShuffleScoreEngine.run` then scores each requested cell:

* the column is read into a genes-long buffer and projected onto the
  used-gene subset (only genes that appear in a pair are ever shuffled,
  so the inner loop costs O(n_used), not O(n_genes));
* the unshuffled proportion is computed exactly; cells where it is
  undefined are skipped without drawing any random numbers;
* the subset is shuffled ``iterations`` times and each shuffle is
  scored in early-exit mode against the observed score;
* shuffles with an undefined score are discarded rather than counted
  as ties, and the output is ``below / resolved`` once at least
  ``min_iterations`` shuffles resolved.

Random streams
--------------
With ``n_jobs == 1`` a single generator is consumed in strict cell
order.  With ``n_jobs != 1`` the engine spawns one child generator per
requested cell (``Generator.spawn``) and fans cells out over
``joblib.Parallel``; results are then reproducible for a fixed seed and
identical for every worker count, but are a different draw from the
serial run.
"""

from __future__ import annotations

import logging
import warnings
from typing import Any

import numpy as np
from joblib import Parallel, delayed

from ._config import resolve_n_jobs
from ._matrix import ColumnAccessor, resolve_accessor
from ._results import ShuffleScoreResult
from ._typing import MatrixLike, RandomState
from ._validation import as_index_array, check_integer_scalar, check_range
from .proportion import BELOW, proportion_score
from .shuffle import shuffle_in_place

logger = logging.getLogger(__name__)


class ShuffleScoreEngine:
    """Builder that validates inputs and runs the per-cell shuffle loop.

    Construct an engine, then call :meth:`run`.  Calling :meth:`run`
    twice continues the same random stream, so the second result is a
    fresh draw rather than a repeat.

    Attributes:
        accessor: Column accessor over the expression matrix.
        cells: 0-based indices of the cells to score, in output order.
        marker1: First member of each pair, as positions into *used*.
        marker2: Second member of each pair, as positions into *used*.
        used: Gene rows participating in at least one pair.
        iterations: Shuffles per cell.
        min_iterations: Minimum resolved shuffles for a defined score.
        min_pairs: Minimum informative pairs for a defined proportion.
        n_jobs: Resolved worker count.
    """

    def __init__(
        self,
        matrix: MatrixLike | ColumnAccessor,
        marker1: Any,
        marker2: Any,
        used: Any,
        *,
        cells: Any = None,
        iterations: int = 1000,
        min_iterations: int = 100,
        min_pairs: int = 50,
        random_state: RandomState = None,
        n_jobs: int | None = None,
        one_based: bool = False,
    ) -> None:
        self.accessor = resolve_accessor(matrix)
        n_genes = self.accessor.n_rows

        # ---- Marker pairs -----------------------------------------
        self.marker1 = as_index_array(marker1, "first marker indices")
        self.marker2 = as_index_array(marker2, "second marker indices")
        if self.marker1.shape[0] != self.marker2.shape[0]:
            raise ValueError("vectors of markers must be of the same length")
        self.used = as_index_array(used, "used gene indices")

        # ---- Integer settings -------------------------------------
        self.iterations = check_integer_scalar(iterations, "number of iterations")
        self.min_iterations = check_integer_scalar(
            min_iterations, "minimum number of iterations"
        )
        self.min_pairs = check_integer_scalar(min_pairs, "minimum number of pairs")
        if self.iterations < 0:
            raise ValueError(
                f"number of iterations must be non-negative, got {self.iterations}"
            )

        # ---- Index ranges -----------------------------------------
        n_used = self.used.shape[0]
        check_range(self.marker1, n_used, "first marker indices are out of range")
        check_range(self.marker2, n_used, "second marker indices are out of range")
        check_range(self.used, n_genes, "used gene indices are out of range")

        if cells is None:
            self.cells = np.arange(self.accessor.n_cols, dtype=np.intp)
        else:
            self.cells = as_index_array(cells, "cell indices")
            if one_based:
                self.cells = self.cells - 1
        check_range(self.cells, self.accessor.n_cols, "cell indices are out of range")

        # ---- Execution --------------------------------------------
        self.n_jobs = resolve_n_jobs(n_jobs)
        self._rng = np.random.default_rng(random_state)

        if self.iterations < self.min_iterations:
            warnings.warn(
                f"iterations ({self.iterations}) is smaller than min_iterations "
                f"({self.min_iterations}); every cell will be reported as missing.",
                UserWarning,
                stacklevel=2,
            )

    # ---------------------------------------------------------------- #
    # Per-cell scoring
    # ---------------------------------------------------------------- #

    def _score_cell(
        self,
        cell: int,
        rng: np.random.Generator,
        all_exprs: np.ndarray | None = None,
        current: np.ndarray | None = None,
    ) -> tuple[float, int, int]:
        """Return ``(observed, n_below, n_resolved)`` for one cell.

        *all_exprs* and *current* are reusable working buffers; they are
        allocated here when not supplied (one pair per parallel task).
        """
        dtype = self.accessor.dtype
        if all_exprs is None:
            all_exprs = np.empty(self.accessor.n_rows, dtype=dtype)
        if current is None:
            current = np.empty(self.used.shape[0], dtype=dtype)

        self.accessor.get_column(int(cell), all_exprs)
        np.take(all_exprs, self.used, out=current)

        observed = proportion_score(current, self.marker1, self.marker2, self.min_pairs)
        if np.isnan(observed):
            return np.nan, 0, 0

        below = 0
        total = 0
        for _ in range(self.iterations):
            shuffle_in_place(current, rng)
            outcome = proportion_score(
                current, self.marker1, self.marker2, self.min_pairs, threshold=observed
            )
            if not np.isnan(outcome):
                if outcome == BELOW:
                    below += 1
                total += 1
        return observed, below, total

    def run(self) -> ShuffleScoreResult:
        """Score every requested cell.

        Returns:
            A :class:`~pair_permutation_tests.ShuffleScoreResult` with one
            entry per requested cell.
        """
        n_cells = self.cells.shape[0]
        observed = np.full(n_cells, np.nan)
        n_below = np.zeros(n_cells, dtype=np.int64)
        n_resolved = np.zeros(n_cells, dtype=np.int64)

        if self.n_jobs == 1:
            dtype = self.accessor.dtype
            all_exprs = np.empty(self.accessor.n_rows, dtype=dtype)
            current = np.empty(self.used.shape[0], dtype=dtype)
            outcomes = [
                self._score_cell(cell, self._rng, all_exprs, current)
                for cell in self.cells
            ]
        else:
            streams = self._rng.spawn(n_cells)
            logger.debug(
                "Scoring %d cells with n_jobs=%d on per-cell random streams",
                n_cells,
                self.n_jobs,
            )
            outcomes = Parallel(n_jobs=self.n_jobs, prefer="threads")(
                delayed(self._score_cell)(cell, stream)
                for cell, stream in zip(self.cells, streams, strict=True)
            )

        for k, (obs, below, total) in enumerate(outcomes):
            observed[k] = obs
            n_below[k] = below
            n_resolved[k] = total

        # total == 0 with min_iterations <= 0 would be 0/0.
        scores = np.full(n_cells, np.nan)
        defined = (n_resolved >= self.min_iterations) & (n_resolved > 0)
        scores[defined] = n_below[defined] / n_resolved[defined]

        logger.debug(
            "Scored %d cells: %d without a defined observed score, %d missing overall",
            n_cells,
            int(np.count_nonzero(np.isnan(observed))),
            int(np.count_nonzero(~defined)),
        )

        labels = self.accessor.column_labels
        return ShuffleScoreResult(
            scores=scores,
            observed=observed,
            n_below=n_below,
            n_resolved=n_resolved,
            cells=self.cells.copy(),
            cell_labels=[labels[c] for c in self.cells] if labels is not None else None,
            iterations=self.iterations,
            min_iterations=self.min_iterations,
            min_pairs=self.min_pairs,
        )


# ------------------------------------------------------------------ #
# Functional entry points
# ------------------------------------------------------------------ #


def shuffle_scores(
    matrix: MatrixLike | ColumnAccessor,
    cells: Any,
    marker1: Any,
    marker2: Any,
    used: Any,
    iterations: int = 1000,
    min_iterations: int = 100,
    min_pairs: int = 50,
    *,
    random_state: RandomState = None,
    n_jobs: int | None = None,
    one_based: bool = False,
) -> ShuffleScoreResult:
    """Score cells against a shuffled null and return per-cell detail.

    Args:
        matrix: Genes x cells expression matrix (NumPy, pandas, Polars,
            SciPy sparse, or a custom
            :class:`~pair_permutation_tests.ColumnAccessor`).
        cells: Cells to score, or ``None`` for every column.
        marker1: First member of each pair, as positions into *used*.
        marker2: Second member of each pair, as positions into *used*.
        used: Gene row indices appearing in at least one pair.
        iterations: Shuffles per cell.
        min_iterations: Minimum resolved shuffles for a defined score.
        min_pairs: Minimum informative pairs for a defined proportion.
        random_state: Seed or :class:`numpy.random.Generator`.  A
            generator is advanced in place and never reseeded.
        n_jobs: Worker count; ``None`` uses
            :func:`~pair_permutation_tests.get_n_jobs`.
        one_based: Interpret *cells* as 1-based indices.

    Returns:
        A :class:`~pair_permutation_tests.ShuffleScoreResult`.

    Raises:
        ValueError: If marker lengths differ, any index is out of range,
            or an integer setting is malformed.
        TypeError: If an index array or the matrix is not numeric.
    """
    engine = ShuffleScoreEngine(
        matrix,
        marker1,
        marker2,
        used,
        cells=cells,
        iterations=iterations,
        min_iterations=min_iterations,
        min_pairs=min_pairs,
        random_state=random_state,
        n_jobs=n_jobs,
        one_based=one_based,
    )
    return engine.run()


def score_cells(
    matrix: MatrixLike | ColumnAccessor,
    cells: Any,
    marker1: Any,
    marker2: Any,
    used: Any,
    iterations: int = 1000,
    min_iterations: int = 100,
    min_pairs: int = 50,
    *,
    random_state: RandomState = None,
    n_jobs: int | None = None,
    one_based: bool = False,
) -> np.ndarray:
    """Return the per-cell shuffle score vector (``nan`` = missing).

    Thin wrapper around :func:`shuffle_scores`; see there for the
    parameters.
    """
    return shuffle_scores(
        matrix,
        cells,
        marker1,
        marker2,
        used,
        iterations,
        min_iterations,
        min_pairs,
        random_state=random_state,
        n_jobs=n_jobs,
        one_based=one_based,
    ).scores
