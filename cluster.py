# 3. cluster.py

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.cluster import hierarchy
from sklearn.cluster import KMeans
from sklearn.metrics import silhouette_score

from config import HCLUST_COLUMN, KMEANS_COLUMN, LINKAGE_METHODS
from errors import ConfigError, DegenerateInputError
from preprocess import scale_features, select_features

logger = logging.getLogger(__name__)


@dataclass
class ClusterFit:
    """Result of one clustering run. Labels are 1-based."""
    labels: np.ndarray
    centers: np.ndarray
    wss: float
    sizes: dict
    model: object = None


def within_cluster_ss(X, labels):
    """Total squared Euclidean distance of each row to its cluster mean."""
    X = np.asarray(X, dtype=float)
    total = 0.0
    for label in np.unique(labels):
        members = X[labels == label]
        total += float(((members - members.mean(axis=0)) ** 2).sum())
    return total


def check_clusterable(X, k):
    X = np.asarray(X, dtype=float)
    if k < 1:
        raise DegenerateInputError(f"Cluster count must be >= 1, got {k}")
    n_distinct = np.unique(X, axis=0).shape[0]
    if n_distinct < k:
        raise DegenerateInputError(
            f"Cannot form {k} clusters from {n_distinct} distinct row(s)"
        )
    if X.shape[0] > 1:
        flat = np.flatnonzero(X.std(axis=0) == 0)
        if flat.size:
            raise DegenerateInputError(f"Zero-variance feature column(s) at index {flat.tolist()}")
    return X


class ClusteringEngine(ABC):
    """A clustering backend that partitions rows of X into k groups."""

    name = "engine"

    @abstractmethod
    def fit(self, X, k):
        """Return a ClusterFit for X partitioned into k clusters."""


class KMeansEngine(ClusteringEngine):
    name = "kmeans"

    def __init__(self, seed=11, n_init=25):
        self.seed = seed
        self.n_init = n_init

    def fit(self, X, k):
        X = check_clusterable(X, k)
        model = KMeans(n_clusters=k, random_state=self.seed, n_init=self.n_init)
        labels = model.fit_predict(X) + 1
        return ClusterFit(
            labels=labels,
            centers=model.cluster_centers_,
            wss=float(model.inertia_),
            sizes=_sizes(labels),
            model=model,
        )


class HierarchicalEngine(ClusteringEngine):
    name = "hierarchical"

    def __init__(self, method="ward"):
        if method not in LINKAGE_METHODS:
            raise ConfigError(f"Unknown linkage '{method}'")
        self.method = method
        self.linkage_matrix_ = None

    def build_tree(self, X):
        self.linkage_matrix_ = hierarchy.linkage(X, method=self.method, metric="euclidean")
        return self.linkage_matrix_

    def fit(self, X, k):
        X = check_clusterable(X, k)
        if X.shape[0] < 2:
            labels = np.ones(X.shape[0], dtype=int)
        else:
            Z = self.build_tree(X)
            labels = hierarchy.fcluster(Z, t=k, criterion="maxclust")
        found = np.unique(labels).size
        if found != k:
            raise DegenerateInputError(
                f"Cutting the {self.method} tree yields {found} cluster(s), not {k}"
            )
        centers = np.vstack([X[labels == c].mean(axis=0) for c in range(1, k + 1)])
        return ClusterFit(
            labels=labels,
            centers=centers,
            wss=within_cluster_ss(X, labels),
            sizes=_sizes(labels),
        )


def _sizes(labels):
    values, counts = np.unique(labels, return_counts=True)
    return {int(v): int(c) for v, c in zip(values, counts)}


# ========== Cluster count selection ==========

def elbow_curve(X, max_k=10, engine=None):
    """
    Total within-cluster sum of squares for k = 1..max_k.

    The elbow itself is left to the reader of the curve.
    """
    engine = engine or KMeansEngine()
    rows = []
    for k in range(1, max_k + 1):
        fit = engine.fit(X, k)
        rows.append({"k": k, "wss": fit.wss})
        logger.debug(f"{engine.name} k={k}: WSS={fit.wss:.3f}")
    return pd.DataFrame(rows, columns=["k", "wss"])


def silhouette_curve(X, max_k=10, seed=11):
    """
    Mean silhouette score of k-means partitions for k = 2..max_k.

    Silhouette needs at most n_samples - 1 clusters, so a scan reaching
    len(X) raises DegenerateInputError rather than being shortened.
    """
    n_samples = len(X)
    if max_k >= n_samples:
        raise DegenerateInputError(
            f"Silhouette scan up to k={max_k} needs more than {max_k} rows, got {n_samples}"
        )
    engine = KMeansEngine(seed=seed)
    rows = []
    for k in range(2, max_k + 1):
        fit = engine.fit(X, k)
        score = silhouette_score(X, fit.labels)
        rows.append({"k": k, "silhouette": float(score)})
    return pd.DataFrame(rows, columns=["k", "silhouette"])


def recommend_k(silhouette):
    if silhouette.empty:
        raise DegenerateInputError("Silhouette curve is empty; max_k must be at least 2")
    best = silhouette.loc[silhouette["silhouette"].idxmax()]
    return int(best["k"])


# ========== Final fits ==========

def fit_kmeans(df, features, k=3, seed=11, scale=True):
    """
    Fit k-means on `features` and append KMeans_Cluster to a copy of `df`.

    Returns:
        (pd.DataFrame, ClusterFit, StandardScaler or None)
    """
    X = select_features(df, features)
    scaler = None
    if scale:
        X, scaler = scale_features(X)
    fit = KMeansEngine(seed=seed).fit(X, k)

    out = df.copy()
    out[KMEANS_COLUMN] = fit.labels
    logger.info(f"KMeans (k={k}) total WSS: {fit.wss:.2f}, sizes: {fit.sizes}")
    return out, fit, scaler


def fit_hierarchical(df, features, k=3, linkage="ward", scale=True):
    """
    Cut a hierarchical merge tree over `features` into k groups.

    Labels are written as unordered Cluster_<n> categories in HClust_Cluster.

    Returns:
        (pd.DataFrame, ClusterFit, np.ndarray linkage matrix)
    """
    X = select_features(df, features)
    if scale:
        X, _ = scale_features(X)
    engine = HierarchicalEngine(method=linkage)
    fit = engine.fit(X, k)

    out = df.copy()
    names = [f"Cluster_{n}" for n in range(1, k + 1)]
    out[HCLUST_COLUMN] = pd.Categorical([f"Cluster_{n}" for n in fit.labels], categories=names)
    logger.info(f"Hierarchical ({linkage}, k={k}) total WSS: {fit.wss:.2f}, sizes: {fit.sizes}")
    return out, fit, engine.linkage_matrix_


def compare_clusterings(df, rows=KMEANS_COLUMN, columns=HCLUST_COLUMN):
    """Co-occurrence counts of two label columns. Label ids are not aligned."""
    return pd.crosstab(df[rows], df[columns])
