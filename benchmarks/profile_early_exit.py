"""Profile early-exit scoring against full scoring across pair-list sizes.

For each number of marker pairs, times ``proportion_score`` on shuffled
values in exact mode and in threshold mode (threshold = the unshuffled
score), and reports the per-call speed-up of threshold mode.

Usage::

    python benchmarks/profile_early_exit.py          # full grid
    python benchmarks/profile_early_exit.py --quick   # reduced grid for smoke test

Outputs:
    benchmarks/results/early_exit_profile.csv
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import numpy as np
import pandas as pd

# Ensure the package is importable when running from the repo root.
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from pair_permutation_tests.proportion import proportion_score  # noqa: E402

# ------------------------------------------------------------------ #
# Configuration
# ------------------------------------------------------------------ #

N_PAIRS_FULL = [100, 1_000, 5_000, 20_000, 100_000]
N_PAIRS_QUICK = [100, 1_000, 5_000]

N_USED = 500
SHUFFLES = 200
MIN_PAIRS = 50
SEED = 42

RESULTS_DIR = Path(__file__).resolve().parent / "results"


# ------------------------------------------------------------------ #
# Benchmark helpers
# ------------------------------------------------------------------ #


def _benchmark_one(n_pairs: int, seed: int) -> dict:
    """Time exact vs. threshold scoring for one pair-list size."""
    rng = np.random.default_rng(seed)
    values = rng.poisson(3.0, size=N_USED).astype(np.float64)
    marker1 = rng.integers(0, N_USED, size=n_pairs)
    marker2 = rng.integers(0, N_USED, size=n_pairs)
    observed = proportion_score(values, marker1, marker2, MIN_PAIRS)

    shuffled = [rng.permutation(values) for _ in range(SHUFFLES)]

    t0 = time.perf_counter()
    for v in shuffled:
        proportion_score(v, marker1, marker2, MIN_PAIRS)
    exact_s = time.perf_counter() - t0

    t0 = time.perf_counter()
    for v in shuffled:
        proportion_score(v, marker1, marker2, MIN_PAIRS, threshold=observed)
    threshold_s = time.perf_counter() - t0

    return {
        "n_pairs": n_pairs,
        "observed": observed,
        "exact_ms_per_call": 1e3 * exact_s / SHUFFLES,
        "threshold_ms_per_call": 1e3 * threshold_s / SHUFFLES,
        "speedup": exact_s / threshold_s if threshold_s > 0 else np.nan,
    }


def run_grid(n_values: list[int]) -> pd.DataFrame:
    """Run the benchmark grid and return a DataFrame of results."""
    rows = []
    for i, n_pairs in enumerate(n_values, start=1):
        row = _benchmark_one(n_pairs, SEED)
        rows.append(row)
        print(
            f"  [{i:2d}/{len(n_values)}] pairs={n_pairs:7,d}, "
            f"exact={row['exact_ms_per_call']:.3f}ms, "
            f"threshold={row['threshold_ms_per_call']:.3f}ms, "
            f"speedup={row['speedup']:.2f}x"
        )
    return pd.DataFrame(rows)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--quick", action="store_true", help="reduced grid")
    args = parser.parse_args()

    n_values = N_PAIRS_QUICK if args.quick else N_PAIRS_FULL
    print(f"Profiling early exit over {len(n_values)} pair-list sizes")
    df = run_grid(n_values)

    RESULTS_DIR.mkdir(parents=True, exist_ok=True)
    out = RESULTS_DIR / "early_exit_profile.csv"
    df.to_csv(out, index=False)
    print(f"Wrote {out}")


if __name__ == "__main__":
    main()
