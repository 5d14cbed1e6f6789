from __future__ import annotations

import numpy as np
from annealclstr import AnnealerConfig, perform_clustering


def _generate_profiles(n: int, length: int, noise: float, phase: float, rng: np.random.Generator) -> np.ndarray:
    t = np.arange(length) / length
    base = np.sin(2 * np.pi * t + phase)
    return base + rng.normal(0.0, noise, size=(n, length))


def demo() -> None:
    # Three groups of noisy sine profiles with different phase shifts
    rng = np.random.default_rng(7)
    data = np.vstack([
        _generate_profiles(n=20, length=16, noise=0.1, phase=0.0, rng=rng),
        _generate_profiles(n=20, length=16, noise=0.1, phase=2.0, rng=rng),
        _generate_profiles(n=20, length=16, noise=0.1, phase=4.0, rng=rng),
    ])
    labels = [f"row_{i}" for i in range(data.shape[0])]

    config = AnnealerConfig(n_clusters=3, temperature=1.0, cooling_factor=0.999, max_iter=5000, seed=42)
    annealer, cluster_list = perform_clustering(labels, data, config)

    print("Final state:", annealer.report())
    for clust in cluster_list:
        print(f"Cluster {clust.cluster_id}: {clust.number_of_members} members, representative {clust.best_representative_member}")


if __name__ == "__main__":
    demo()
