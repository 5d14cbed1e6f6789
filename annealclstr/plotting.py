"""
Plotting utilities for clustering results.

This module provides functions for drawing the member rows of each cluster as
line charts across the table columns.
"""
import matplotlib.pyplot as plt
import numpy as np
import math
import os
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .clusterer import Cluster


def plot_clusters(cluster_list: List["Cluster"], title: str = 'annealing', mode: str = 'show', fname: str = 'results') -> None:
    """
    Plot cluster members on separate subplots using matplotlib.

    This function creates a grid of subplots where each subplot shows all rows
    belonging to a specific cluster, drawn as lines across the columns.

    Parameters
    ----------
    cluster_list : List[Cluster]
        List of Cluster objects.
    title : str, default='annealing'
        Window title of the figure.
    mode : str, default='show'
        Display mode for the plot:

        - 'show': Display the plot interactively using matplotlib.pyplot.show()
        - 'save': Save the plot to a PNG file without displaying it

    fname : str, default='results'
        Base filename for saving the plot (without extension). Only used when
        mode='save'. The file will be saved as '{fname}.png'.
    """
    if mode not in ('show', 'save'):
        raise ValueError(f"Unknown plot mode: {mode}")

    main_fig = plt.figure(figsize=(14,10))
    main_fig.canvas.manager.set_window_title(title)
    no_plots = len(cluster_list)
    no_cols = 4
    no_rows = max(1, int(math.ceil(float(no_plots) / no_cols)))
    i = 1

    for clust in cluster_list:
        sub_plot = main_fig.add_subplot(no_rows, no_cols, i)
        i = i + 1
        _draw_members(sub_plot, clust)

    plt.tight_layout()
    if mode=='show':
        plt.show()
    elif mode=='save':
        plt.savefig('{0}.png'.format(fname))
        plt.close(main_fig)


def save_cluster_plots(cluster_list: List["Cluster"], output_dir: str, prefix: str = 'cluster') -> List[str]:
    """
    Render one line chart per cluster and save each as a PNG file.

    Parameters
    ----------
    cluster_list : List[Cluster]
        List of Cluster objects.
    output_dir : str
        Directory receiving the images. Created if it does not exist.
    prefix : str, default='cluster'
        File name prefix; files are named '{prefix}_{cluster_id}.png'.

    Returns
    -------
    List[str]
        Paths of the written images, in cluster order.
    """
    os.makedirs(output_dir, exist_ok=True)
    paths = []

    for clust in cluster_list:
        fig, ax = plt.subplots(figsize=(8, 5))
        _draw_members(ax, clust)
        ax.set_xlabel('Column')
        ax.set_ylabel('Value')
        fig.tight_layout()

        path = os.path.join(output_dir, f'{prefix}_{clust.cluster_id}.png')
        fig.savefig(path)
        plt.close(fig)
        paths.append(path)

    return paths


def _draw_members(ax, clust: "Cluster") -> None:
    t = np.arange(clust.data_of_members.shape[1])
    for each_row in clust.data_of_members:
        ax.plot(t, each_row, linewidth=2)

    ax.set_title(f'Cluster no: {clust.cluster_id} ({clust.number_of_members} members)', weight='bold')
