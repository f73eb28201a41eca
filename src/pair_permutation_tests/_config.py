"""Parallelism configuration for the pair_permutation_tests package.

Controls how many workers the permutation driver uses when the caller
does not pass ``n_jobs`` explicitly.

Resolution order (first match wins):
    1. Programmatic override via :func:`set_n_jobs`.
    2. The ``PAIR_PERMUTATION_TESTS_N_JOBS`` environment variable.
    3. The default of ``1`` (serial, single shared random stream).

Any non-zero integer is accepted; negative values follow the joblib
convention (``-1`` = all cores).

Examples:
    Parallelise every call from the shell::

        export PAIR_PERMUTATION_TESTS_N_JOBS=-1

    Parallelise programmatically::

        import pair_permutation_tests
        pair_permutation_tests.set_n_jobs(4)

    Restore the default resolution order::

        pair_permutation_tests.set_n_jobs(None)
"""

from __future__ import annotations

import os
from numbers import Integral

_ENV_VAR = "PAIR_PERMUTATION_TESTS_N_JOBS"
_DEFAULT_N_JOBS = 1

# Sentinel indicating "no programmatic override has been set".
_n_jobs_override: int | None = None


def _parse_n_jobs(value: object, *, source: str) -> int:
    """Validate *value* as a joblib-style worker count."""
    msg = f"n_jobs from {source} must be a non-zero integer, got {value!r}"
    if isinstance(value, str):
        try:
            n_jobs = int(value.strip())
        except ValueError:
            raise ValueError(msg) from None
    elif isinstance(value, Integral) and not isinstance(value, bool):
        n_jobs = int(value)
    else:
        raise ValueError(msg)
    if n_jobs == 0:
        raise ValueError(f"n_jobs from {source} must be non-zero (use 1 for serial runs)")
    return n_jobs


def get_n_jobs() -> int:
    """Return the active default worker count.

    Resolution order:
        1. Value set by :func:`set_n_jobs`.
        2. ``PAIR_PERMUTATION_TESTS_N_JOBS`` environment variable.
        3. ``1``.

    Returns:
        A non-zero integer.

    Raises:
        ValueError: If the environment variable holds an invalid value.
    """
    # 1. Programmatic override
    if _n_jobs_override is not None:
        return _n_jobs_override

    # 2. Environment variable
    env = os.environ.get(_ENV_VAR, "").strip()
    if env:
        return _parse_n_jobs(env, source=_ENV_VAR)

    # 3. Serial default
    return _DEFAULT_N_JOBS


def set_n_jobs(n_jobs: int | None) -> None:
    """Override the default worker count.

    Args:
        n_jobs: A non-zero integer, or ``None`` to restore the default
            resolution order.

    Raises:
        ValueError: If *n_jobs* is zero or not an integer.
    """
    global _n_jobs_override
    if n_jobs is None:
        _n_jobs_override = None
        return
    _n_jobs_override = _parse_n_jobs(n_jobs, source="set_n_jobs()")


def resolve_n_jobs(n_jobs: int | None) -> int:
    """Return *n_jobs* if given, otherwise the configured default."""
    if n_jobs is None:
        return get_n_jobs()
    return _parse_n_jobs(n_jobs, source="the n_jobs argument")
