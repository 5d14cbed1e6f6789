"""
Simulated annealing clustering.

This module provides the annealing engine that moves rows between a fixed
number of clusters so as to minimize the mean intra-cluster distance energy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

from ._energy import cluster_energies, cluster_energy, total_energy
from ._normalize import normalize_rows


@dataclass(frozen=True)
class AnnealerConfig:
    """
    Immutable settings of an annealing run.

    Parameters
    ----------
    n_clusters : int
        Number of clusters K. Must be at least 2.
    temperature : float, optional
        Starting temperature. Default is 1.0.
    cooling_factor : float, optional
        Multiplicative temperature decay applied after every iteration,
        strictly between 0 and 1. Default is 0.999.
    max_iter : int, optional
        Number of iterations performed by ``ClusterAnnealer.run``. Default 10000.
    seed : Optional[int], optional
        Seed of the random source, for reproducible runs.
    """

    n_clusters: int
    temperature: float = 1.0
    cooling_factor: float = 0.999
    max_iter: int = 10000
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if int(self.n_clusters) != self.n_clusters or self.n_clusters < 2:
            raise ValueError(f"n_clusters must be an integer >= 2, got {self.n_clusters}")
        # stored in single precision, so validate what will be stored
        with np.errstate(over='ignore', under='ignore'):
            temperature = np.float32(self.temperature)
            cooling_factor = np.float32(self.cooling_factor)
        if not np.isfinite(temperature) or temperature <= 0:
            raise ValueError(f"temperature must be a positive number, got {self.temperature}")
        if not 0 < cooling_factor < 1:
            raise ValueError(f"cooling_factor must lie strictly between 0 and 1, got {self.cooling_factor}")
        if int(self.max_iter) != self.max_iter or self.max_iter < 0:
            raise ValueError(f"max_iter must be a non-negative integer, got {self.max_iter}")


class AnnealerState(Enum):
    INITIALIZED = "initialized"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True)
class AnnealingSnapshot:
    """Point-in-time summary of an annealer."""

    iteration: int
    temperature: float
    total_energy: float
    cluster_count: int


class ClusterAnnealer:
    """
    Cluster the rows of a numeric matrix by simulated annealing.

    Each iteration moves one randomly chosen row to a different, randomly
    chosen cluster. Only the energies of the two clusters involved are
    recomputed. The move is kept when it lowers the total energy, and
    otherwise with the Metropolis probability exp(-delta / temperature).
    Rejected moves are rolled back completely. The temperature is multiplied
    by the cooling factor after every iteration.

    Parameters
    ----------
    labels : Sequence[str]
        One name per row of ``data``.
    data : np.ndarray
        Matrix of shape (n_rows, n_cols). A float32 copy is kept, so the
        caller's array is never modified.
    config : AnnealerConfig
        Run settings.
    initial_assignment : Optional[Sequence[int]], optional
        Starting cluster (0-indexed) of every row. Drawn uniformly at random
        from the seeded source when omitted.

    Attributes
    ----------
    data : np.ndarray
        Owned float32 matrix.
    assignment : np.ndarray
        Current cluster index of every row.
    energies : np.ndarray
        Cached float32 energy of every cluster.
    temperature : np.float32
        Current temperature.
    state : AnnealerState
        Lifecycle state.
    trace_ : List[AnnealingSnapshot]
        Snapshots recorded by ``run`` when ``trace_every`` is set.
    """

    def __init__(self, labels: Sequence[str], data: np.ndarray, config: AnnealerConfig,
                 initial_assignment: Optional[Sequence[int]] = None):
        matrix = np.array(data, dtype=np.float32, order='C', copy=True)
        if matrix.ndim != 2:
            raise ValueError("Data must be a 2-D matrix of shape (n_rows, n_cols)")
        if matrix.shape[0] == 0 or matrix.shape[1] == 0:
            raise ValueError("Data must contain at least one row and one column")
        if not np.all(np.isfinite(matrix)):
            raise ValueError("Data contains NaN or infinite values")
        labels = [str(label) for label in labels]
        if len(labels) != matrix.shape[0]:
            raise ValueError(f"Got {len(labels)} labels for {matrix.shape[0]} rows")

        rng = np.random.default_rng(config.seed)
        if initial_assignment is None:
            assignment = rng.integers(0, config.n_clusters, size=matrix.shape[0]).astype(np.int64)
        else:
            requested = np.asarray(initial_assignment)
            assignment = requested.astype(np.int64)
            if not np.array_equal(assignment, requested):
                raise ValueError("initial_assignment values must be whole cluster numbers")
            if assignment.shape != (matrix.shape[0],):
                raise ValueError("initial_assignment must hold exactly one cluster per row")
            if assignment.min() < 0 or assignment.max() >= config.n_clusters:
                raise ValueError(f"initial_assignment values must lie in [0, {config.n_clusters})")

        self.labels: List[str] = labels
        self.data = matrix
        self.config = config
        self.assignment = assignment
        self.energies = cluster_energies(self.data, self.assignment, config.n_clusters)
        self.temperature = np.float32(config.temperature)
        self.state = AnnealerState.INITIALIZED
        self.iterations_ = 0
        self.accepted_ = 0
        self.rejected_ = 0
        self.trace_: List[AnnealingSnapshot] = []

        self._rng = rng
        self._cooling_factor = np.float32(config.cooling_factor)
        self._total = total_energy(self.energies)

    @property
    def n_clusters(self) -> int:
        return self.config.n_clusters

    def normalize(self) -> None:
        """
        Min-max normalize every row of the owned matrix in place and refresh
        the cached energies.
        """
        normalize_rows(self.data)
        self.energies = cluster_energies(self.data, self.assignment, self.n_clusters)
        self._total = total_energy(self.energies)

    def cluster_energy(self, k: int) -> np.float32:
        """Cached energy of cluster ``k``."""
        return self.energies[k]

    def total_energy(self) -> np.float32:
        """Mean of the cached cluster energies."""
        return self._total

    def recompute_energies(self) -> np.ndarray:
        """Energies of all clusters computed from scratch. The cache is left untouched."""
        return cluster_energies(self.data, self.assignment, self.n_clusters)

    def cluster_sizes(self) -> np.ndarray:
        return np.bincount(self.assignment, minlength=self.n_clusters)

    def step(self) -> bool:
        """
        Perform a single annealing iteration.

        Returns
        -------
        bool
            True if the proposed move was kept.
        """
        row = int(self._rng.integers(self.data.shape[0]))
        src = int(self.assignment[row])
        dst = src
        while dst == src:
            dst = int(self._rng.integers(self.n_clusters))

        old_total = self._total
        old_src_energy = self.energies[src]
        old_dst_energy = self.energies[dst]

        self.assignment[row] = dst
        self.energies[src] = cluster_energy(self.data, self.assignment, src)
        self.energies[dst] = cluster_energy(self.data, self.assignment, dst)
        new_total = total_energy(self.energies)

        if new_total < old_total:
            accepted = True
        else:
            accepted = bool(self._rng.random() < self._acceptance_probability(new_total - old_total))

        if accepted:
            self._total = new_total
            self.accepted_ += 1
        else:
            self.assignment[row] = src
            self.energies[src] = old_src_energy
            self.energies[dst] = old_dst_energy
            self.rejected_ += 1

        self.temperature = np.float32(self.temperature * self._cooling_factor)
        self.iterations_ += 1
        return accepted

    def run(self, iterations: Optional[int] = None, trace_every: int = 0) -> int:
        """
        Run a fixed number of annealing iterations.

        Parameters
        ----------
        iterations : Optional[int], optional
            Number of iterations. Defaults to ``config.max_iter``.
        trace_every : int, optional
            If positive, append a snapshot to ``trace_`` every ``trace_every``
            iterations and after the last one.

        Returns
        -------
        int
            Number of iterations executed, always equal to the number requested.
        """
        if iterations is None:
            iterations = self.config.max_iter
        if iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {iterations}")
        if trace_every < 0:
            raise ValueError(f"trace_every must be non-negative, got {trace_every}")

        self.state = AnnealerState.RUNNING
        for i in range(1, iterations + 1):
            self.step()
            if trace_every and i % trace_every == 0:
                self.trace_.append(self.report())
        if trace_every and iterations % trace_every != 0:
            self.trace_.append(self.report())
        self.state = AnnealerState.STOPPED

        return iterations

    def report(self) -> AnnealingSnapshot:
        """Current temperature, total energy and cluster count."""
        return AnnealingSnapshot(
            iteration=self.iterations_,
            temperature=float(self.temperature),
            total_energy=float(self._total),
            cluster_count=self.n_clusters,
        )

    def _acceptance_probability(self, delta: np.float32) -> np.float32:
        # a collapsed temperature overflows the exponent; that is a probability of 0
        with np.errstate(over='ignore', divide='ignore', invalid='ignore'):
            return np.exp(-(delta / self.temperature))
