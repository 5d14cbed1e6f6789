"""
Intra-cluster distance energy.

The energy of a cluster is the sum of Euclidean distances over every unordered
pair of its members. The annealing objective is the mean of the cluster
energies. All kernels accumulate in single precision.
"""

import numpy as np
from numba import njit


def pairwise_distance(data: np.ndarray, i: int, j: int) -> np.float32:
    """
    Euclidean distance between two rows of the data matrix.

    Parameters
    ----------
    data : np.ndarray
        float32 matrix of shape (n_rows, n_cols).
    i, j : int
        Row indices.

    Returns
    -------
    np.float32
        sqrt(sum((data[i] - data[j]) ** 2)).
    """
    return np.float32(_pairwise_distance(data, i, j))


def cluster_energy(data: np.ndarray, assignment: np.ndarray, k: int) -> np.float32:
    """
    Sum of pairwise distances between all members of cluster ``k``.

    Empty and single-member clusters have an energy of exactly 0.0.

    Parameters
    ----------
    data : np.ndarray
        float32 matrix of shape (n_rows, n_cols).
    assignment : np.ndarray
        Cluster index of every row.
    k : int
        Cluster whose energy is computed.

    Returns
    -------
    np.float32
        Energy of the cluster.
    """
    return np.float32(_cluster_energy(data, assignment, k))


def cluster_energies(data: np.ndarray, assignment: np.ndarray, n_clusters: int) -> np.ndarray:
    """
    Recompute the energy of every cluster from scratch.

    Returns
    -------
    np.ndarray
        float32 array of length ``n_clusters``.
    """
    energies = np.zeros(n_clusters, dtype=np.float32)
    _fill_cluster_energies(data, assignment, energies)
    return energies


def total_energy(energies: np.ndarray) -> np.float32:
    """Mean of the cluster energies (the quantity being minimized)."""
    return np.float32(np.mean(energies, dtype=np.float32))


@njit
def _pairwise_distance(data: np.ndarray, i: int, j: int) -> float:
    acc = np.float32(0.0)
    for c in range(data.shape[1]):
        diff = data[i, c] - data[j, c]
        acc += diff * diff
    return np.sqrt(acc)


@njit
def _cluster_energy(data: np.ndarray, assignment: np.ndarray, k: int) -> float:
    n = assignment.shape[0]
    members = np.empty(n, dtype=np.int64)
    m = 0
    for i in range(n):
        if assignment[i] == k:
            members[m] = i
            m += 1

    energy = np.float32(0.0)
    for a in range(m):
        for b in range(a + 1, m):
            energy += _pairwise_distance(data, members[a], members[b])
    return energy


@njit
def _fill_cluster_energies(data: np.ndarray, assignment: np.ndarray, energies: np.ndarray) -> None:
    for k in range(energies.shape[0]):
        energies[k] = _cluster_energy(data, assignment, k)
