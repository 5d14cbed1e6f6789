"""
Annealing-based clustering module.

This module provides methods for importing delimited tables, clustering their
rows with the simulated annealing engine, and exporting and post-processing
the resulting cluster assignments.
"""

import os
import re
import numpy as np
import pandas as pd
from scipy.spatial.distance import pdist, squareform
from typing import List, Optional, Sequence, Tuple
from .annealer import AnnealerConfig, ClusterAnnealer

_ASSIGNMENT_HEADER = ('Rowname', 'Cluster')
_NUMBER = re.compile(r'^[+-]?((\d+\.?\d*|\.\d+)([eE][+-]?\d+)?|inf|infinity|nan)$', re.IGNORECASE)
_FLOAT32_MAX = float(np.finfo(np.float32).max)


def read_table(file_path: str, sep: str = ',') -> Tuple[List[str], np.ndarray]:
    """
    Import a delimited text table of labelled numeric rows.

    The file must have the following structure:

    Column 1: Label/name of each row (e.g. "gene_1", "Run 1")

    Column 2 onwards: numeric values of that row

    An optional header line is recognised by an empty first field and skipped.
Values are plain decimal or scientific notation (e.g. ``-1.5``, ``2e3``) and must
fit in single precision.

    Example data structure (``sep=','``):

    +---------+---------+---------+-----+
    |         | c1      | c2      | ... |
    +=========+=========+=========+=====+
    | gene_1  | 10.5    | 12.3    | ... |
    +---------+---------+---------+-----+
    | gene_2  | 11.2    | 13.1    | ... |
    +---------+---------+---------+-----+

    Parameters
    ----------
    ``file_path`` : str
        Path to the delimited text file.
    ``sep`` : str, default=','
        Single-character column delimiter.

    Returns
    -------
    Tuple[List[str], np.ndarray]
        Row labels and the float32 matrix of values, parallel-indexed.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Could not find file: {file_path}")

    if len(sep) != 1:
        raise ValueError(f"Delimiter must be a single character, got {sep!r}")

    try:
        df_data = pd.read_csv(file_path, sep=sep, header=None, dtype=str, na_filter=False, skip_blank_lines=True)
    except pd.errors.EmptyDataError:
        raise ValueError(f"File contains no data: {file_path}")
    except pd.errors.ParserError as e:
        raise ValueError(f"Malformed table in {file_path}: {e}")

    all_rows = df_data.values.tolist()

    if all_rows and _is_blank(all_rows[0][0]):
        all_rows = all_rows[1:]

    if not all_rows:
        raise ValueError(f"File contains no data rows: {file_path}")
    if len(all_rows[0]) < 2:
        raise ValueError(f"Rows of {file_path} have a label but no values")

    labels = []
    data = np.empty((len(all_rows), len(all_rows[0]) - 1), dtype=np.float32)

    for row_no, row in enumerate(all_rows):
        label = row[0]
        if _is_blank(label):
            raise ValueError(f"Missing row label on data row {row_no + 1} of {file_path}")
        label = label.strip()
        labels.append(label)

        for col_no, cell in enumerate(row[1:]):
            if _is_blank(cell):
                raise ValueError(f"Missing value in row '{label}', column {col_no + 1}")
            if not _NUMBER.match(cell.strip()):
                raise ValueError(f"Non-numeric value {cell.strip()!r} in row '{label}', column {col_no + 1}")
            value = float(cell)
            # finite as a double can still overflow single precision
            if not np.isfinite(value) or abs(value) > _FLOAT32_MAX:
                raise ValueError(f"Non-finite value {cell.strip()!r} in row '{label}', column {col_no + 1}")
            data[row_no, col_no] = value

    return labels, data


def write_assignment(file_path: str, labels: Sequence[str], assignment: Sequence[int], sep: str = ',') -> None:
    """
    Export a cluster assignment as a delimited text file.

    The file has the header ``Rowname<sep>Cluster`` and one line per row.
    Cluster numbers are written 1-indexed.

    Parameters
    ----------
    ``file_path`` : str
        Destination path.
    ``labels`` : Sequence[str]
        Row labels.
    ``assignment`` : Sequence[int]
        0-indexed cluster of every row.
    ``sep`` : str, default=','
        Column delimiter.
    """
    if len(labels) != len(assignment):
        raise ValueError("Number of labels and cluster assignments are not equal")

    df = pd.DataFrame({
        _ASSIGNMENT_HEADER[0]: list(labels),
        _ASSIGNMENT_HEADER[1]: np.asarray(assignment, dtype=np.int64) + 1,
    })
    df.to_csv(file_path, sep=sep, index=False)


def read_assignment(file_path: str, sep: str = ',') -> Tuple[List[str], np.ndarray]:
    """
    Import a cluster assignment written by ``write_assignment``.

    Returns
    -------
    Tuple[List[str], np.ndarray]
        Row labels and 0-indexed cluster numbers.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Could not find file: {file_path}")

    df = pd.read_csv(file_path, sep=sep, dtype={_ASSIGNMENT_HEADER[0]: str}, keep_default_na=False)
    if tuple(df.columns) != _ASSIGNMENT_HEADER:
        raise ValueError(f"Expected header {sep.join(_ASSIGNMENT_HEADER)!r} in {file_path}")

    clusters = df[_ASSIGNMENT_HEADER[1]].to_numpy(dtype=np.int64)
    if clusters.size and clusters.min() < 1:
        raise ValueError("Cluster numbers in an assignment file start at 1")

    return df[_ASSIGNMENT_HEADER[0]].tolist(), clusters - 1


def perform_clustering(labels: Sequence[str], data: np.ndarray, config: AnnealerConfig, normalize: bool = True,
                       trace_every: int = 0) -> Tuple[ClusterAnnealer, List['Cluster']]:
    """
    Cluster the rows of a matrix by simulated annealing.

    Parameters
    ----------
    ``labels`` : Sequence[str]
        Row labels.
    ``data`` : np.ndarray
        Matrix of shape (n_rows, n_cols).
    ``config`` : AnnealerConfig
        Number of clusters, temperature schedule, iteration budget and seed.
    ``normalize`` : bool, default=True
        If True, min-max normalizes every row before annealing.
    ``trace_every`` : int, default=0
        Record an ``AnnealingSnapshot`` every ``trace_every`` iterations.

    Returns
    -------
    Tuple[ClusterAnnealer, List[Cluster]]
        The finished annealer and one Cluster object per cluster.
    """
    annealer = ClusterAnnealer(labels, data, config)
    if normalize:
        annealer.normalize()
    annealer.run(config.max_iter, trace_every=trace_every)

    return annealer, create_cluster_list(annealer)


def create_cluster_list(annealer: ClusterAnnealer) -> List['Cluster']:
    """
    Create Cluster objects from the current state of an annealer.

    Parameters
    ----------
    annealer : ClusterAnnealer
        Annealer whose assignment is summarised.

    Returns
    -------
    List[Cluster]
        One Cluster per cluster index, empty clusters included.
    """
    cluster_list = []

    for k in range(annealer.n_clusters):
        indices = np.where(annealer.assignment == k)[0]
        members = annealer.data[indices]
        member_labels = [annealer.labels[idx] for idx in indices.tolist()]

        representative = None
        if indices.shape[0] == 1:
            representative = member_labels[0]
        elif indices.shape[0] > 1:
            # member with the lowest summed distance to the rest of its cluster
            row_sum = squareform(pdist(members, metric='euclidean')).sum(axis=0)
            representative = member_labels[int(row_sum.argmin())]

        cluster_list.append(Cluster(k + 1, indices, member_labels, members, float(annealer.energies[k]), representative))

    return cluster_list


def _is_blank(cell: Optional[str]) -> bool:
    return not isinstance(cell, str) or cell.strip() == ''


class Cluster:
    """
    Container for clustering results.

    Attributes
    ----------
    cluster_id : int
        Cluster number, 1-indexed as in the exported assignment file.
    indices_of_members : np.ndarray
        Original row indices of cluster members.
    number_of_members : int
        Number of members in cluster.
    labels_of_members : List[str]
        Labels of all cluster members.
    data_of_members : np.ndarray
        Rows of all cluster members, shape (number_of_members, n_cols).
    energy : float
        Sum of pairwise distances between members.
    best_representative_member : Optional[str]
        Label of the member closest to all others, None for an empty cluster.
    """

    def __init__(self, cluster_id: int, indices_of_members: np.ndarray, labels_of_members: List[str],
                 data_of_members: np.ndarray, energy: float, best_representative_member: Optional[str]):
        self.cluster_id = cluster_id
        self.indices_of_members = indices_of_members
        self.number_of_members = self.indices_of_members.size
        self.labels_of_members = labels_of_members
        self.data_of_members = data_of_members
        self.energy = energy
        self.best_representative_member = best_representative_member
