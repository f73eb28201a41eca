"""Shared type aliases for the pair_permutation_tests package."""

import numpy as np
import pandas as pd
import scipy.sparse as sp

# Expression matrices accepted by the public API (genes x cells).
MatrixLike = np.ndarray | pd.DataFrame | sp.spmatrix | sp.sparray

# Random sources accepted by the shuffling entry points.
RandomState = int | np.random.Generator | None
