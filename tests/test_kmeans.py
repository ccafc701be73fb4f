import numpy as np
import pytest

from lloyd_kmeans import KMeans, k_means
from lloyd_kmeans.distance import euclidean_distance
from lloyd_kmeans.errors import ConfigurationError, NotFittedError, NumericDegeneracyError
from lloyd_kmeans.kmeans import DEFAULT_MAX_ITERS, DEFAULT_TOL, LloydState, lloyd_iteration, run_lloyd


def _blobs(seed=0):
    rng = np.random.default_rng(seed)
    return np.vstack([
        rng.normal(loc=0.0, scale=0.5, size=(100, 4)),
        rng.normal(loc=6.0, scale=0.5, size=(100, 4)),
        rng.normal(loc=-6.0, scale=0.5, size=(100, 4)),
    ])


def test_defaults():
    assert DEFAULT_MAX_ITERS == 2500
    assert DEFAULT_TOL == np.finfo(np.float64).eps
    model = KMeans(n_clusters=3)
    assert model.max_iters == 2500
    assert model.tol == DEFAULT_TOL
    assert model.init == 'random'


def test_four_points_quantile():
    X = np.array([[0, 0], [0, 1], [10, 0], [10, 1]], dtype=np.float64)
    model = KMeans(n_clusters=2, init='quantile').fit(X)
    assert model.labels_.tolist() == [0, 0, 1, 1]
    assert np.allclose(model.cluster_centers_, [[0.0, 0.5], [10.0, 0.5]])
    assert model.converged_
    assert model.n_iter_ <= 3


def test_k_means_function_generate_kernels():
    X = np.array([[0, 0], [0, 1], [10, 0], [10, 1]], dtype=np.float64)
    labels = k_means(X, 2, generate_kernels=True)
    assert labels.tolist() == [0, 0, 1, 1]


def test_single_cluster_moves_to_mean_in_one_round():
    rng = np.random.default_rng(5)
    X = rng.normal(size=(40, 3))
    model = KMeans(n_clusters=1, random_state=0).fit(X)
    mean = X.mean(axis=0)
    assert np.allclose(model.cluster_centers_[0], mean)
    assert model.labels_.tolist() == [0] * 40
    # First round relocates the kernel, the second confirms it stays put
    assert model.movement_history_[0] == pytest.approx(
        euclidean_distance(model.init_kernels_[0], model.cluster_centers_[0])
    )
    assert model.movement_history_[1] == 0.0
    assert model.n_iter_ == 2
    assert model.converged_


def test_labels_in_range():
    X = _blobs(1)
    for k in (1, 2, 3, 7):
        for init in ('random', 'quantile'):
            labels = KMeans(n_clusters=k, init=init, random_state=k).fit_predict(X)
            assert labels.shape == (300,)
            assert labels.min() >= 0
            assert labels.max() < k


def test_separated_blobs_are_recovered():
    X = _blobs(2)
    labels = KMeans(n_clusters=3, init='quantile').fit_predict(X)
    groups = [set(labels[i * 100:(i + 1) * 100].tolist()) for i in range(3)]
    assert all(len(g) == 1 for g in groups)
    assert len(set.union(*groups)) == 3


def test_iteration_is_deterministic():
    X = _blobs(3)
    kernels = X[[0, 1, 2]].copy()
    a = run_lloyd(X, kernels)
    b = run_lloyd(X, kernels)
    assert np.array_equal(a.labels, b.labels)
    assert np.array_equal(a.kernels, b.kernels)
    assert a.movement_history == b.movement_history
    # Initial kernels are copied, not mutated
    assert np.array_equal(kernels, X[[0, 1, 2]])


def test_movement_non_negative_and_capped():
    X = _blobs(4)
    state = run_lloyd(X, X[:5].copy(), max_iters=3)
    assert state.n_iter <= 3
    assert all(m >= 0 for m in state.movement_history)


def test_iteration_cap_stops_early():
    X = _blobs(5)
    model = KMeans(n_clusters=3, max_iters=1, random_state=0).fit(X)
    assert model.n_iter_ == 1
    assert not model.converged_


def test_ties_go_to_lowest_kernel_and_empty_kernel_freezes():
    X = np.array([[1.0, 1.0], [2.0, 2.0], [3.0, 3.0]])
    kernels = np.array([[0.0, 0.0], [0.0, 0.0]])
    state = LloydState(kernels, X.shape[0])
    movement = lloyd_iteration(X, state)
    assert state.labels.tolist() == [0, 0, 0]
    assert state.counts.tolist() == [3, 0]
    assert np.allclose(state.kernels[0], [2.0, 2.0])
    assert state.kernels[1].tolist() == [0.0, 0.0]
    assert movement == pytest.approx(np.sqrt(8.0))


def test_accumulators_reset_each_round():
    X = np.array([[0.0], [1.0], [10.0], [11.0]])
    state = LloydState(np.array([[0.0], [11.0]]), 4)
    lloyd_iteration(X, state)
    lloyd_iteration(X, state)
    assert state.counts.tolist() == [2, 2]
    assert state.sums.tolist() == [[1.0], [21.0]]
    assert state.n_iter == 2


def test_empty_cluster_reported():
    X = np.array([[0.0], [0.0], [1.0]])
    model = KMeans(n_clusters=3, init='quantile').fit(X)
    info = model.get_cluster_info()
    assert sum(info['cluster_sizes'].values()) == 3
    assert info['empty_clusters'] == [1]


def test_random_init_k_greater_than_n_raises():
    X = np.zeros((3, 2))
    with pytest.raises(ConfigurationError):
        KMeans(n_clusters=4, init='random').fit(X)


def test_quantile_init_allows_k_greater_than_n():
    X = np.array([[0.0, 0.0], [5.0, 5.0]])
    labels = KMeans(n_clusters=4, init='quantile').fit_predict(X)
    assert labels.max() < 4


def test_invalid_inputs():
    with pytest.raises(ConfigurationError):
        KMeans(n_clusters=0).fit(np.zeros((3, 2)))
    with pytest.raises(ConfigurationError):
        KMeans(n_clusters=1).fit(np.zeros(3))
    with pytest.raises(ConfigurationError):
        KMeans(n_clusters=1).fit(np.zeros((0, 2)))
    with pytest.raises(ConfigurationError):
        KMeans(n_clusters=1, init='bogus').fit(np.zeros((3, 2)))
    with pytest.raises(ConfigurationError):
        KMeans(n_clusters=1, max_iters=0).fit(np.zeros((3, 2)))
    for tol in (float("nan"), -1.0):
        with pytest.raises(ConfigurationError):
            KMeans(n_clusters=2, init="quantile", tol=tol).fit(np.zeros((4, 2)))


def test_nan_input_is_fatal():
    X = np.array([[0.0, 0.0], [np.nan, 1.0], [2.0, 2.0]])
    with pytest.raises(NumericDegeneracyError):
        KMeans(n_clusters=2, init='quantile').fit(X)


def test_predict():
    X = np.array([[0, 0], [0, 1], [10, 0], [10, 1]], dtype=np.float64)
    model = KMeans(n_clusters=2, init='quantile').fit(X)
    assert model.predict([[1.0, 0.0], [9.0, 1.0]]).tolist() == [0, 1]
    with pytest.raises(ConfigurationError):
        model.predict([[1.0, 0.0, 3.0]])


def test_unfitted_model():
    model = KMeans(n_clusters=2)
    with pytest.raises(NotFittedError):
        model.predict([[0.0, 0.0]])
    with pytest.raises(NotFittedError):
        model.get_cluster_info()


def test_cluster_info():
    X = _blobs(6)
    model = KMeans(n_clusters=3, init='quantile').fit(X)
    info = model.get_cluster_info()
    assert info['n_clusters'] == 3
    assert info['n_iterations'] == model.n_iter_
    assert info['inertia'] == pytest.approx(model.inertia_)
    assert sum(info['cluster_sizes'].values()) == 300
    assert info['converged']


def test_random_init_records_distinct_rows():
    X = _blobs(7)
    model = KMeans(n_clusters=5, random_state=11).fit(X)
    assert len(set(model.init_indices_.tolist())) == 5
    assert np.array_equal(model.init_kernels_, X[model.init_indices_])


def test_independent_runs_do_not_share_state():
    X1 = np.array([[0.0], [1.0], [10.0], [11.0]])
    X2 = np.array([[0.0, 0.0], [5.0, 5.0], [6.0, 6.0]])
    a = KMeans(n_clusters=2, init='quantile').fit(X1)
    b = KMeans(n_clusters=2, init='quantile').fit(X2)
    assert a.labels_.tolist() == [0, 0, 1, 1]
    assert b.labels_.tolist() == [0, 1, 1]
    assert a.cluster_centers_.shape == (2, 1)
