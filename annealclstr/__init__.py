"""
Top-level for annealclstr clustering package.

This package clusters the rows of a numeric table by simulated annealing.
End users should use the main functions: read_table, perform_clustering,
write_assignment, and related utilities.
"""

from .annealer import (
    AnnealerConfig,
    AnnealerState,
    AnnealingSnapshot,
    ClusterAnnealer
)

from .clusterer import (
    read_table,
    write_assignment,
    read_assignment,
    perform_clustering,
    create_cluster_list,
    Cluster
)

from .plotting import (
    plot_clusters,
    save_cluster_plots
)

from .experiment_controller import (
    experiment_controller
)

__all__ = [
    "AnnealerConfig",
    "AnnealerState",
    "AnnealingSnapshot",
    "ClusterAnnealer",
    "read_table",
    "write_assignment",
    "read_assignment",
    "perform_clustering",
    "create_cluster_list",
    "Cluster",
    "plot_clusters",
    "save_cluster_plots",
    "experiment_controller"
]

__version__ = "0.1.0"
