"""pair_permutation_tests — Shuffle-based significance for pairwise marker scores.

Scores each cell by the proportion of marker pairs whose first gene is
more highly expressed than the second, and ranks that score against a
null built by shuffling the cell's own values.  Shuffled cells are
scored with early termination against the observed score, and a chained
shuffle utility produces whole null distributions of permutations.

Public API:
    .. autosummary::
        score_cells
        shuffle_scores
        ShuffleScoreEngine
        ShuffleScoreResult
        proportion_score
        BELOW
        ABOVE
        shuffle_in_place
        chained_shuffle
        prepare_marker_pairs
        ColumnAccessor
        resolve_accessor
        get_n_jobs
        set_n_jobs
"""

from ._config import get_n_jobs, set_n_jobs
from ._matrix import ColumnAccessor, resolve_accessor
from ._results import ShuffleScoreResult
from .engine import ShuffleScoreEngine, score_cells, shuffle_scores
from .pairs import prepare_marker_pairs
from .proportion import ABOVE, BELOW, proportion_score
from .shuffle import chained_shuffle, shuffle_in_place

__all__ = [
    "ABOVE",
    "BELOW",
    "ColumnAccessor",
    "ShuffleScoreEngine",
    "ShuffleScoreResult",
    "chained_shuffle",
    "get_n_jobs",
    "prepare_marker_pairs",
    "proportion_score",
    "resolve_accessor",
    "score_cells",
    "set_n_jobs",
    "shuffle_in_place",
    "shuffle_scores",
]

__version__ = "0.1.0"
