"""
Kernel initialization strategies.

- ``random``: k distinct rows picked uniformly at random, copied.
- ``quantile``: per-dimension quantile pivots of the sorted data. The
  resulting kernels are synthetic points, their coordinates usually come from
  different rows.
"""

import time
from typing import Optional, Tuple

import numpy as np

from .errors import ConfigurationError

INIT_METHODS = ("random", "quantile")


def make_rng(random_state: Optional[int] = None) -> np.random.Generator:
    """Seeded generator; falls back to the wall clock when no seed is given."""
    if random_state is None:
        random_state = time.time_ns()
    return np.random.default_rng(random_state)


def _check_k(k: int) -> None:
    if k < 1:
        raise ConfigurationError(f"Number of clusters must be at least 1, got {k}")


def random_kernels(
    X: np.ndarray, k: int, rng: np.random.Generator
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Pick k distinct rows of X uniformly at random.

    Draws a row index, rejects it if an earlier kernel already uses it, and
    draws again. Each kernel is a copy of its row so the kernels can be
    updated in place without touching X.

    Args:
        X: Data of shape (n_samples, n_features)
        k: Number of kernels
        rng: Random generator

    Returns:
        (kernels of shape (k, n_features), source row indices of shape (k,))
    """
    _check_k(k)
    n_samples = X.shape[0]
    if k > n_samples:
        raise ConfigurationError(
            f"Cannot pick {k} distinct kernels from {n_samples} rows; "
            "use fewer clusters or quantile seeding"
        )

    chosen = []
    seen = set()
    while len(chosen) < k:
        row = int(rng.integers(n_samples))
        if row in seen:
            continue
        seen.add(row)
        chosen.append(row)

    indices = np.array(chosen, dtype=np.intp)
    return X[indices].copy(), indices


def quantile_pivots(n_samples: int, k: int) -> np.ndarray:
    """Rank positions floor((2j / 2k) * n) for j in [0, k)."""
    _check_k(k)
    j = np.arange(k, dtype=np.float64)
    return np.floor((2.0 * j) / (2.0 * k) * n_samples).astype(np.intp)


def quantile_kernels(X: np.ndarray, k: int) -> np.ndarray:
    """
    Build k kernels from evenly spaced ranks of each dimension.

    For every dimension the column is sorted on its own and kernel j takes the
    value found at rank ``quantile_pivots(n, k)[j]``.

    Args:
        X: Data of shape (n_samples, n_features)
        k: Number of kernels

    Returns:
        Kernels of shape (k, n_features)
    """
    n_samples, n_features = X.shape
    pivots = quantile_pivots(n_samples, k)
    kernels = np.empty((k, n_features), dtype=np.float64)
    for dim in range(n_features):
        column = np.sort(X[:, dim])
        kernels[:, dim] = column[pivots]
    return kernels


def init_kernels(
    X: np.ndarray, k: int, method: str, rng: Optional[np.random.Generator] = None
) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Initialize kernels with the named method.

    Returns:
        (kernels, source row indices or None for quantile seeding)
    """
    if method == "random":
        return random_kernels(X, k, rng if rng is not None else make_rng())
    elif method == "quantile":
        return quantile_kernels(X, k), None
    else:
        raise ConfigurationError(
            f"Unknown initialization method: {method!r} (expected one of {INIT_METHODS})"
        )
