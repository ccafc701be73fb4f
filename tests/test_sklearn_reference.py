import numpy as np
from sklearn.cluster import KMeans as SKLearnKMeans
from sklearn.metrics import adjusted_rand_score

from lloyd_kmeans import KMeans
from lloyd_kmeans.initializers import quantile_kernels


def test_matches_sklearn_lloyd_from_same_kernels():
    rng = np.random.default_rng(42)
    X = np.vstack([
        rng.normal(loc=0.0, scale=0.5, size=(200, 8)),
        rng.normal(loc=5.0, scale=0.5, size=(200, 8)),
        rng.normal(loc=-4.0, scale=0.5, size=(200, 8)),
    ])

    ours = KMeans(n_clusters=3, init='quantile').fit(X)

    ref = SKLearnKMeans(
        n_clusters=3,
        init=quantile_kernels(X, 3),
        n_init=1,
        max_iter=300,
        tol=0.0,
        algorithm='lloyd',
    ).fit(X)

    assert adjusted_rand_score(ours.labels_, ref.labels_) == 1.0
    assert np.allclose(ours.cluster_centers_, ref.cluster_centers_, atol=1e-8)
    rel_diff = abs(ours.inertia_ - ref.inertia_) / ref.inertia_
    assert rel_diff < 1e-6
