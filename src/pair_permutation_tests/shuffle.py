"""Uniform random permutations: single in-place shuffles and chained batches.

Single shuffle
--------------
:func:`shuffle_in_place` is a thin, explicit wrapper around
``numpy.random.Generator.shuffle``, which runs one Fisher–Yates pass
over the buffer.  Every arrangement is equally likely and the number of
draws taken from the generator depends only on the buffer length, so a
fixed seed and a fixed call order reproduce the same permutations.

Chained shuffles
----------------
:func:`chained_shuffle` builds a null distribution of ``iterations``
permutations of one vector.  Rather than copying the original vector
into every output column before shuffling, column ``i`` is a copy of
column ``i - 1`` shuffled again:

    col_0 = shuffle(vector)
    col_i = shuffle(col_{i-1})      for i > 0

Why this is still a valid null
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
A uniform shuffle maps *any* fixed arrangement of a multiset to a
uniformly random arrangement of that multiset.  Since the shuffle draws
are independent of the arrangement fed in, each column is uniform and
independent of all earlier columns.  Note the guarantee is between
columns: column 0 is independent of the input's *order* only in the
sense that any input order gives the same distribution.

The output is allocated in Fortran order so each column is contiguous
and the in-place shuffle touches a single cache-friendly block; a column
is fully written before it becomes the source of the next one.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from ._typing import RandomState
from ._validation import check_integer_scalar

logger = logging.getLogger(__name__)


def shuffle_in_place(buffer: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Permute *buffer* uniformly at random, in place.

    Args:
        buffer: One-dimensional array to shuffle.  Mutated.
        rng: Random source; advanced by exactly one Fisher–Yates pass.

    Returns:
        The same *buffer*, for chaining.
    """
    rng.shuffle(buffer)
    return buffer


def chained_shuffle(
    vector: Any,
    iterations: int,
    random_state: RandomState = None,
) -> np.ndarray:
    """Generate ``iterations`` chained permutations of *vector*.

    Args:
        vector: One-dimensional numeric input of length *n*.
        iterations: Number of permutations (output columns).
        random_state: Seed or :class:`numpy.random.Generator`.  A
            generator is consumed in place and never reseeded, so two
            back-to-back calls sharing one generator draw from the same
            evolving stream.

    Returns:
        Float64 array of shape ``(n, iterations)``; every column is a
        permutation of *vector*.

    Raises:
        ValueError: If *vector* is not one-dimensional or *iterations*
            is not a non-negative integer.
    """
    n_iter = check_integer_scalar(iterations, "number of iterations")
    if n_iter < 0:
        raise ValueError(f"number of iterations must be non-negative, got {n_iter}")

    source = np.asarray(vector, dtype=np.float64)
    if source.ndim != 1:
        raise ValueError(
            f"vector must be one-dimensional, got shape {source.shape}"
        )

    rng = np.random.default_rng(random_state)
    out = np.empty((source.shape[0], n_iter), dtype=np.float64, order="F")

    for i in range(n_iter):
        column = out[:, i]
        column[:] = source
        shuffle_in_place(column, rng)
        source = column

    logger.debug("Generated %d chained permutations of length %d", n_iter, out.shape[0])
    return out
