"""Pairwise proportion scores with early termination against a threshold.

Given one cell's values and a list of marker pairs ``(a_i, b_i)``, the
proportion score is

    score = #{i : v[a_i] > v[b_i]} / #{i : v[a_i] != v[b_i]}

Tied pairs are *uninformative* and dropped from both numerator and
denominator.  When fewer than ``min_pairs`` pairs are informative the
score is undefined and reported as ``nan``; a cell with no informative
pair at all is undefined whatever ``min_pairs`` says.

Early-exit mode
---------------
The permutation driver never needs the exact score of a shuffled cell,
only whether it lands below or above the observed score.  With a
threshold supplied, the scorer walks the pairs in order and, at every
checkpoint, bounds the final proportion assuming every remaining pair
resolves in the most extreme direction:

    best  = (first + leftovers + 1) / (total + leftovers)
    worst = (first - 1)             / (total + leftovers)

If even ``best`` is below the threshold the answer is :data:`BELOW`;
if even ``worst`` is above it the answer is :data:`ABOVE`.  The ``±1``
terms keep a proportion that would land exactly on the threshold from
being decided early through floating-point error, so the early answer
always matches the full computation.

Checkpoints occur at each pair position where the running informative
count is positive, at least ``min_pairs`` and a multiple of 100.  The
count does not move on tied pairs, so a run of ties after a multiple of
100 produces one checkpoint per tie, each with fewer leftovers.

Block evaluation
~~~~~~~~~~~~~~~~
Pairs are processed in blocks of :data:`_BLOCK_SIZE`.  Inside a block the
comparisons, running counts and bounds are computed with vectorised
NumPy cumulative sums; the first decisive checkpoint in the block gives
the answer and no later block is touched.  The block size only affects
speed, never the result.
"""

from __future__ import annotations

import numpy as np

BELOW = -1.0
"""Indicator: the proportion is below the threshold."""

ABOVE = 1.0
"""Indicator: the proportion is at or above the threshold."""

# Checkpoint cadence, in informative pairs.
_CHECK_EVERY = 100

_BLOCK_SIZE = 2048


def _decide(
    cum_first: np.ndarray,
    cum_total: np.ndarray,
    leftovers: np.ndarray,
    min_pairs: int,
    threshold: float,
) -> float | None:
    """Return the first decisive checkpoint outcome in a block, if any."""
    checkpoint = (
        (cum_total > 0) & (cum_total >= min_pairs) & (cum_total % _CHECK_EVERY == 0)
    )
    if not checkpoint.any():
        return None

    first = cum_first[checkpoint]
    left = leftovers[checkpoint]
    max_total = cum_total[checkpoint] + left

    below = (first + left + 1) / max_total < threshold
    above = (first > 0) & ((first - 1) / max_total > threshold)
    decided = below | above
    if not decided.any():
        return None

    hit = int(np.argmax(decided))
    return BELOW if below[hit] else ABOVE


def proportion_score(
    values: np.ndarray,
    marker1: np.ndarray,
    marker2: np.ndarray,
    min_pairs: int,
    threshold: float | None = None,
) -> float:
    """Score one cell by the proportion of pairs whose first value is larger.

    Args:
        values: Per-gene values for one cell, indexed by position in the
            used-gene subset.
        marker1: Positions of the first member of each pair.
        marker2: Positions of the second member of each pair, same
            length as *marker1*.
        min_pairs: Minimum number of informative (non-tied) pairs for
            the score to be defined.
        threshold: Optional comparison value.  When given (and not
            ``nan``) the function returns :data:`BELOW` or
            :data:`ABOVE` instead of the proportion, stopping early once
            the outcome can no longer change.

    Returns:
        The proportion in ``[0, 1]``, :data:`BELOW`/:data:`ABOVE` in
        threshold mode, or ``nan`` if fewer than *min_pairs* pairs are
        informative.

    Note:
        Index arrays are trusted here; range checks happen once per
        call in :class:`~pair_permutation_tests.engine.ShuffleScoreEngine`.
    """
    values = np.asarray(values)
    marker1 = np.asarray(marker1, dtype=np.intp)
    marker2 = np.asarray(marker2, dtype=np.intp)
    n_pairs = marker1.shape[0]
    short_cut = threshold is not None and not np.isnan(threshold)

    if not short_cut:
        first = values[marker1]
        second = values[marker2]
        was_total = int(np.count_nonzero(first != second))
        was_first = int(np.count_nonzero(first > second))
        if was_total < min_pairs or was_total == 0:
            return np.nan
        return was_first / was_total

    was_first = 0
    was_total = 0
    for start in range(0, n_pairs, _BLOCK_SIZE):
        stop = min(start + _BLOCK_SIZE, n_pairs)
        first = values[marker1[start:stop]]
        second = values[marker2[start:stop]]

        # NaN != x is True and NaN > x is False: such pairs are informative
        # but never count towards the first-greater tally.
        cum_total = was_total + np.cumsum(first != second, dtype=np.int64)
        cum_first = was_first + np.cumsum(first > second, dtype=np.int64)
        leftovers = n_pairs - np.arange(start + 1, stop + 1, dtype=np.int64)

        outcome = _decide(cum_first, cum_total, leftovers, min_pairs, threshold)
        if outcome is not None:
            return outcome

        was_total = int(cum_total[-1])
        was_first = int(cum_first[-1])

    if was_total < min_pairs or was_total == 0:
        return np.nan
    output = was_first / was_total
    return BELOW if output < threshold else ABOVE
