"""Boundary checks shared by the public entry points.

Every check raises immediately with a message naming the offending
argument; nothing is clamped or silently dropped.
"""

from __future__ import annotations

from numbers import Integral
from typing import Any

import numpy as np


def check_integer_scalar(value: Any, what: str) -> int:
    """Return *value* as a Python ``int``.

    Accepts Python and NumPy integers, and length-1 integer arrays.

    Raises:
        ValueError: If *value* is not a single integer.
    """
    arr = np.asarray(value)
    if arr.size != 1 or arr.ndim > 1:
        raise ValueError(f"{what} must be an integer scalar")
    item = arr.reshape(()).item()
    if isinstance(item, bool) or not isinstance(item, Integral):
        raise ValueError(f"{what} must be an integer scalar")
    return int(item)


def as_index_array(values: Any, what: str) -> np.ndarray:
    """Return *values* as a 1-D ``intp`` array.

    Integral floats are rejected: indices must arrive as integers.

    Raises:
        TypeError: If *values* does not hold integers.
        ValueError: If *values* is not one-dimensional.
    """
    arr = np.asarray(values)
    if arr.ndim != 1:
        raise ValueError(f"{what} must be one-dimensional, got shape {arr.shape}")
    if arr.size == 0:
        return np.empty(0, dtype=np.intp)
    if arr.dtype.kind not in "iu":
        raise TypeError(f"{what} must contain integers, got dtype {arr.dtype}")
    return arr.astype(np.intp, copy=False)


def check_range(indices: np.ndarray, upper: int, message: str) -> None:
    """Require every entry of *indices* to lie in ``[0, upper)``.

    Raises:
        ValueError: With *message* if any index is out of range.
    """
    if indices.size and (indices.min() < 0 or indices.max() >= upper):
        raise ValueError(message)
