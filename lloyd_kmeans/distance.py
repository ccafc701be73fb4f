"""
Euclidean distance with degeneracy guards.

Both helpers fail loudly with ``NumericDegeneracyError`` when a squared sum
comes out negative or a distance is NaN, reporting the vectors involved.
"""

from typing import Optional, Sequence, Union

import numpy as np

from .errors import NumericDegeneracyError

ArrayLike = Union[np.ndarray, Sequence[float]]

# Upper bound on the size of the (rows, n_clusters, n_features) temporary
CHUNK_ELEMENTS = 1 << 20


def format_vector(v: ArrayLike) -> str:
    """Render a vector as ``[1.00, 2.50, ...]`` for diagnostics."""
    return "[" + ", ".join(f"{float(x):0.2f}" for x in np.ravel(v)) + "]"


def euclidean_distance(p: ArrayLike, q: ArrayLike) -> float:
    """
    Euclidean distance between two vectors of equal length.

    Args:
        p: First vector
        q: Second vector

    Returns:
        sqrt(sum((p - q) ** 2))

    Raises:
        NumericDegeneracyError: if the squared sum is negative or the result is NaN
    """
    p = np.asarray(p, dtype=np.float64)
    q = np.asarray(q, dtype=np.float64)
    if p.shape != q.shape:
        raise ValueError(f"Vectors differ in shape: {p.shape} vs {q.shape}")

    diff = p - q
    total = float(np.dot(diff, diff))
    if total < 0:
        raise NumericDegeneracyError(
            f"Squared distance was negative ({total})\n"
            f"p: {format_vector(p)}\n"
            f"q: {format_vector(q)}"
        )
    out = np.sqrt(total)
    if np.isnan(out):
        raise NumericDegeneracyError(
            f"Squared distance was {total} and its root was {out}\n"
            "The input vectors were probably at fault:\n"
            f"p: {format_vector(p)}\n"
            f"q: {format_vector(q)}"
        )
    return float(out)


def pairwise_distances(
    X: np.ndarray, kernels: np.ndarray, chunk_rows: Optional[int] = None
) -> np.ndarray:
    """
    Distance from every row of X to every kernel.

    Args:
        X: Data of shape (n_samples, n_features)
        kernels: Kernels of shape (n_clusters, n_features)
        chunk_rows: Rows per block, sized from CHUNK_ELEMENTS if None

    Returns:
        Distance table of shape (n_samples, n_clusters)
    """
    n_samples = X.shape[0]
    n_clusters, n_features = kernels.shape
    if chunk_rows is None:
        chunk_rows = max(1, CHUNK_ELEMENTS // max(1, n_clusters * n_features))

    squared = np.empty((n_samples, n_clusters), dtype=np.float64)
    for start in range(0, n_samples, chunk_rows):
        block = X[start:start + chunk_rows]
        # Broadcasting: (rows, 1, n_features) - (1, n_clusters, n_features)
        diff = block[:, np.newaxis, :] - kernels[np.newaxis, :, :]
        squared[start:start + chunk_rows] = np.sum(diff * diff, axis=2)

    negative = squared < 0
    if np.any(negative):
        row, kernel = np.argwhere(negative)[0]
        raise NumericDegeneracyError(
            f"Squared distance between row {row} and kernel {kernel} was negative "
            f"({squared[row, kernel]})\n"
            f"row: {format_vector(X[row])}\n"
            f"kernel: {format_vector(kernels[kernel])}"
        )

    distances = np.sqrt(squared)
    bad = np.isnan(distances)
    if np.any(bad):
        row, kernel = np.argwhere(bad)[0]
        raise NumericDegeneracyError(
            f"Distance between row {row} and kernel {kernel} was "
            f"{distances[row, kernel]} (squared sum {squared[row, kernel]})\n"
            "The input vectors were probably at fault:\n"
            f"row: {format_vector(X[row])}\n"
            f"kernel: {format_vector(kernels[kernel])}"
        )
    return distances
