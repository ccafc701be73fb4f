"""
K-means clustering of numeric rows using Lloyd's algorithm.
"""

from .version import __version__
from .errors import (
    KMeansError,
    NumericDegeneracyError,
    ConfigurationError,
    InputParseError,
    NotFittedError,
)
from .distance import euclidean_distance, pairwise_distances
from .initializers import random_kernels, quantile_kernels, quantile_pivots, init_kernels
from .kmeans import KMeans, LloydState, lloyd_iteration, run_lloyd, k_means

__all__ = [
    "__version__",
    "KMeans",
    "LloydState",
    "lloyd_iteration",
    "run_lloyd",
    "k_means",
    "euclidean_distance",
    "pairwise_distances",
    "random_kernels",
    "quantile_kernels",
    "quantile_pivots",
    "init_kernels",
    "KMeansError",
    "NumericDegeneracyError",
    "ConfigurationError",
    "InputParseError",
    "NotFittedError",
]
