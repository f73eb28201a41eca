"""Edge-case tests for input validation at the public boundary.

Covers: mismatched marker lengths, out-of-range marker / used / cell
indices, malformed integer settings, non-integral index arrays and
malformed matrices.  Every failure must raise before any scoring.
"""

import numpy as np
import pandas as pd
import pytest

from pair_permutation_tests import ShuffleScoreEngine, score_cells

# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _matrix(n_genes: int = 5, n_cells: int = 4, seed: int = 42) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.standard_normal((n_genes, n_cells))


def _call(**overrides):
    kwargs = dict(
        matrix=_matrix(),
        cells=None,
        marker1=[0, 1],
        marker2=[1, 2],
        used=[0, 2, 4],
        iterations=10,
        min_iterations=1,
        min_pairs=1,
    )
    kwargs.update(overrides)
    return score_cells(**kwargs)


# ------------------------------------------------------------------ #
# 1. Marker pairs
# ------------------------------------------------------------------ #


class TestMarkerValidation:
    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError, match="same length"):
            _call(marker1=[0, 1, 2], marker2=[1, 2])

    def test_first_marker_too_large(self) -> None:
        with pytest.raises(ValueError, match="first marker indices are out of range"):
            _call(marker1=[0, 3])

    def test_first_marker_negative(self) -> None:
        with pytest.raises(ValueError, match="first marker indices are out of range"):
            _call(marker1=[-1, 0])

    def test_second_marker_too_large(self) -> None:
        with pytest.raises(ValueError, match="second marker indices are out of range"):
            _call(marker2=[1, 3])

    def test_markers_must_be_integers(self) -> None:
        with pytest.raises(TypeError, match="must contain integers"):
            _call(marker1=[0.0, 1.0])

    def test_markers_must_be_one_dimensional(self) -> None:
        with pytest.raises(ValueError, match="one-dimensional"):
            _call(marker1=[[0, 1]], marker2=[[1, 2]])

    def test_markers_with_empty_used(self) -> None:
        with pytest.raises(ValueError, match="first marker indices are out of range"):
            _call(used=[])


# ------------------------------------------------------------------ #
# 2. Used genes and cells
# ------------------------------------------------------------------ #


class TestIndexValidation:
    def test_used_too_large(self) -> None:
        with pytest.raises(ValueError, match="used gene indices are out of range"):
            _call(used=[0, 2, 5])

    def test_used_negative(self) -> None:
        with pytest.raises(ValueError, match="used gene indices are out of range"):
            _call(used=[0, -2, 4])

    def test_cell_too_large(self) -> None:
        with pytest.raises(ValueError, match="cell indices are out of range"):
            _call(cells=[0, 4])

    def test_one_based_zero_is_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="cell indices are out of range"):
            ShuffleScoreEngine(_matrix(), [0], [1], [0, 1], cells=[0, 1], one_based=True)

    def test_one_based_upper_bound(self) -> None:
        engine = ShuffleScoreEngine(_matrix(), [0], [1], [0, 1], cells=[4], one_based=True)
        np.testing.assert_array_equal(engine.cells, [3])


# ------------------------------------------------------------------ #
# 3. Integer settings
# ------------------------------------------------------------------ #


class TestIntegerSettings:
    @pytest.mark.parametrize(
        "name, label",
        [
            ("iterations", "number of iterations"),
            ("min_iterations", "minimum number of iterations"),
            ("min_pairs", "minimum number of pairs"),
        ],
    )
    def test_float_rejected(self, name, label) -> None:
        with pytest.raises(ValueError, match=f"{label} must be an integer scalar"):
            _call(**{name: 1.5})

    def test_vector_rejected(self) -> None:
        with pytest.raises(ValueError, match="must be an integer scalar"):
            _call(iterations=[10, 20])

    def test_bool_rejected(self) -> None:
        with pytest.raises(ValueError, match="must be an integer scalar"):
            _call(min_pairs=True)

    def test_negative_iterations(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            _call(iterations=-5)


# ------------------------------------------------------------------ #
# 4. Matrix
# ------------------------------------------------------------------ #


class TestMatrixValidation:
    def test_one_dimensional_matrix(self) -> None:
        with pytest.raises(ValueError, match="two-dimensional"):
            _call(matrix=np.arange(5.0))

    def test_string_matrix(self) -> None:
        with pytest.raises(TypeError, match="integer or real"):
            _call(matrix=np.array([["a", "b"], ["c", "d"]]))

    def test_mixed_dataframe(self) -> None:
        df = pd.DataFrame({"c1": [1.0, 2.0, 3.0, 4.0, 5.0], "c2": list("abcde")})
        with pytest.raises(TypeError, match="integer or real"):
            _call(matrix=df)

    def test_zero_cells(self) -> None:
        scores = _call(matrix=np.empty((5, 0)))
        assert scores.shape == (0,)
