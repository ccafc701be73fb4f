"""
K-means clustering by iterative kernel relocation (Lloyd's algorithm).

Each round assigns every row to its nearest kernel, moves every kernel with
followers to the mean of those followers, and measures the total movement.
The loop stops when the movement drops below ``tol`` or after ``max_iters``
rounds.
"""

import sys
from typing import List, Optional

import numpy as np

from .distance import euclidean_distance, pairwise_distances
from .errors import ConfigurationError, NotFittedError, NumericDegeneracyError
from .initializers import init_kernels, make_rng

DEFAULT_TOL = float(np.finfo(np.float64).eps)
DEFAULT_MAX_ITERS = 2500


class LloydState:
    """
    Scratch state of a single clustering run.

    Holds the kernels (mutated in place every round), the snapshot taken
    before each update, the follower accumulators, the current assignment and
    the movement bookkeeping.
    """

    def __init__(self, kernels: np.ndarray, n_samples: int):
        self.kernels = np.array(kernels, dtype=np.float64)
        n_clusters, n_features = self.kernels.shape
        self.previous = np.empty_like(self.kernels)
        self.counts = np.zeros(n_clusters, dtype=np.int64)
        self.sums = np.zeros((n_clusters, n_features), dtype=np.float64)
        self.labels = np.zeros(n_samples, dtype=np.intp)
        self.movement = float("inf")
        self.n_iter = 0
        self.movement_history: List[float] = []

    @property
    def n_clusters(self) -> int:
        return self.kernels.shape[0]


def _check_matrix(X) -> np.ndarray:
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2:
        raise ConfigurationError(
            f"Expected a 2-D matrix of shape (n_samples, n_features), got {X.ndim}-D input"
        )
    if X.shape[0] == 0:
        raise ConfigurationError("No rows to cluster")
    if X.shape[1] == 0:
        raise ConfigurationError("Rows have no columns to cluster on")
    return X


def assign_rows(X: np.ndarray, kernels: np.ndarray) -> np.ndarray:
    """Index of the nearest kernel for each row; ties go to the lowest index."""
    distances = pairwise_distances(X, kernels)
    # argmin returns the first minimum, same as a strict less-than scan
    return np.argmin(distances, axis=1)


def lloyd_iteration(X: np.ndarray, state: LloydState) -> float:
    """
    Run one assignment/update round on ``state`` and return its movement.

    Kernels without followers keep their previous position.
    """
    np.copyto(state.previous, state.kernels)
    state.counts.fill(0)
    state.sums.fill(0.0)

    # Assignment step
    state.labels[:] = assign_rows(X, state.kernels)
    state.counts += np.bincount(state.labels, minlength=state.n_clusters)
    np.add.at(state.sums, state.labels, X)

    # Update step
    followed = state.counts > 0
    state.kernels[followed] = state.sums[followed] / state.counts[followed, np.newaxis]

    movement = 0.0
    for ki in range(state.n_clusters):
        prev_movement = movement
        current = euclidean_distance(state.previous[ki], state.kernels[ki])
        movement += current
        if np.isnan(movement):
            raise NumericDegeneracyError(
                f"Movement was nan: previous total was {prev_movement} "
                f"and kernel {ki} moved {current}"
            )

    state.movement = movement
    state.movement_history.append(movement)
    state.n_iter += 1
    return movement


def run_lloyd(
    X: np.ndarray,
    kernels: np.ndarray,
    tol: float = DEFAULT_TOL,
    max_iters: int = DEFAULT_MAX_ITERS,
    verbose: bool = False,
) -> LloydState:
    """
    Iterate until the kernels stop moving or ``max_iters`` rounds have run.

    Args:
        X: Data of shape (n_samples, n_features)
        kernels: Initial kernels of shape (n_clusters, n_features), copied
        tol: Stop once total movement is below this value
        max_iters: Hard cap on the number of rounds
        verbose: Whether to print progress information to stderr

    Returns:
        The final state
    """
    if max_iters < 1:
        raise ConfigurationError(f"max_iters must be at least 1, got {max_iters}")
    if not tol >= 0:
        raise ConfigurationError(f"tol must be a non-negative number, got {tol}")

    state = LloydState(kernels, X.shape[0])
    if state.kernels.shape[1] != X.shape[1]:
        raise ConfigurationError(
            f"Kernels have {state.kernels.shape[1]} features but data has {X.shape[1]}"
        )

    while state.movement >= tol and state.n_iter < max_iters:
        lloyd_iteration(X, state)
        if verbose and state.n_iter % 100 == 0:
            print(f"Iteration {state.n_iter}, movement: {state.movement:.6g}", file=sys.stderr)

    if verbose:
        if state.movement < tol:
            print(f"Converged after {state.n_iter} iterations", file=sys.stderr)
        else:
            print(
                f"Stopped at the {max_iters} iteration cap, movement {state.movement:.6g}",
                file=sys.stderr,
            )
    return state


class KMeans:
    """
    K-means clustering with Lloyd iterations.

    Features:
    - Random-row or quantile kernel initialization
    - Convergence on total kernel movement, bounded by an iteration cap
    - Empty clusters keep their last kernel position
    """

    def __init__(
        self,
        n_clusters: int,
        max_iters: int = DEFAULT_MAX_ITERS,
        tol: float = DEFAULT_TOL,
        init: str = 'random',
        random_state: Optional[int] = None,
        verbose: bool = False
    ):
        """
        Initialize K-means clustering.

        Args:
            n_clusters: Number of clusters
            max_iters: Maximum number of iterations
            tol: Movement below which the kernels are considered settled
            init: Initialization method ('random' or 'quantile')
            random_state: Seed for random initialization (clock-derived if None)
            verbose: Whether to print progress information
        """
        self.n_clusters = n_clusters
        self.max_iters = max_iters
        self.tol = tol
        self.init = init
        self.random_state = random_state
        self.verbose = verbose

        # Results
        self.cluster_centers_ = None
        self.labels_ = None
        self.inertia_ = None
        self.n_iter_ = None
        self.movement_ = None
        self.movement_history_ = None
        self.converged_ = None
        self.init_kernels_ = None
        self.init_indices_ = None
        self.cluster_sizes_ = None

    def fit(self, X: np.ndarray) -> 'KMeans':
        """
        Fit K-means clustering to the data.

        Args:
            X: Input data of shape (n_samples, n_features)

        Returns:
            self
        """
        X = _check_matrix(X)

        if self.verbose:
            print(
                f"Fitting K-means with {self.n_clusters} clusters on {X.shape[0]} samples "
                f"({self.init} initialization)...",
                file=sys.stderr,
            )

        rng = make_rng(self.random_state) if self.init == 'random' else None
        kernels, indices = init_kernels(X, self.n_clusters, self.init, rng)
        self.init_kernels_ = kernels.copy()
        self.init_indices_ = indices

        state = run_lloyd(X, kernels, tol=self.tol, max_iters=self.max_iters, verbose=self.verbose)

        self.cluster_centers_ = state.kernels
        self.labels_ = state.labels
        self.n_iter_ = state.n_iter
        self.movement_ = state.movement
        self.movement_history_ = state.movement_history
        self.converged_ = state.movement < self.tol
        self.cluster_sizes_ = state.counts
        self.inertia_ = self._calculate_inertia(X, state.labels, state.kernels)

        if self.verbose:
            print(f"Final inertia: {self.inertia_:.2f}", file=sys.stderr)

        return self

    @staticmethod
    def _calculate_inertia(X: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> float:
        """Within-cluster sum of squares."""
        assigned = centroids[labels]
        return float(np.sum((X - assigned) ** 2))

    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        Predict cluster labels for new data.

        Args:
            X: Input data of shape (n_samples, n_features)

        Returns:
            Cluster labels
        """
        if self.cluster_centers_ is None:
            raise NotFittedError("Model must be fitted before prediction")
        X = _check_matrix(X)
        if X.shape[1] != self.cluster_centers_.shape[1]:
            raise ConfigurationError(
                f"Model was fitted on {self.cluster_centers_.shape[1]} features, got {X.shape[1]}"
            )
        return assign_rows(X, self.cluster_centers_)

    def fit_predict(self, X: np.ndarray) -> np.ndarray:
        """
        Fit the model and return the assignment of each row.

        Args:
            X: Input data of shape (n_samples, n_features)

        Returns:
            Cluster labels in input row order
        """
        return self.fit(X).labels_

    def get_cluster_info(self) -> dict:
        """Get information about the clustering results."""
        if self.cluster_centers_ is None:
            raise NotFittedError("Model must be fitted first")

        sizes = self.cluster_sizes_
        return {
            'n_clusters': self.n_clusters,
            'inertia': self.inertia_,
            'n_iterations': self.n_iter_,
            'converged': self.converged_,
            'movement': self.movement_,
            'cluster_sizes': {i: int(s) for i, s in enumerate(sizes)},
            'empty_clusters': [i for i, s in enumerate(sizes) if s == 0],
            'avg_cluster_size': float(np.mean(sizes)),
            'min_cluster_size': int(np.min(sizes)),
            'max_cluster_size': int(np.max(sizes)),
        }


def k_means(
    X: np.ndarray,
    k: int,
    generate_kernels: bool = False,
    max_iters: int = DEFAULT_MAX_ITERS,
    tol: float = DEFAULT_TOL,
    random_state: Optional[int] = None,
    verbose: bool = False,
) -> np.ndarray:
    """
    Cluster the rows of X into k groups.

    Args:
        X: Input data of shape (n_samples, n_features)
        k: Number of clusters
        generate_kernels: Use quantile seeding instead of random rows

    Returns:
        Assignment vector of length n_samples with values in [0, k)
    """
    model = KMeans(
        n_clusters=k,
        max_iters=max_iters,
        tol=tol,
        init='quantile' if generate_kernels else 'random',
        random_state=random_state,
        verbose=verbose,
    )
    return model.fit_predict(X)
