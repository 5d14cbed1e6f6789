"""
pytest suite for table import, assignment export and cluster summaries.
"""

import numpy as np
import pytest

from annealclstr.annealer import AnnealerConfig, AnnealerState, ClusterAnnealer
from annealclstr.clusterer import (
    create_cluster_list,
    perform_clustering,
    read_assignment,
    read_table,
    write_assignment,
)


def _make_matrix(n_rows: int, n_cols: int, seed: int = 0) -> np.ndarray:
    """Deterministic float32 matrix with values in [0, 1)."""
    rng = np.random.default_rng(seed)
    return rng.random((n_rows, n_cols), dtype=np.float32)


def _make_labels(n_rows: int):
    return [f"row_{i}" for i in range(n_rows)]


def _write(tmp_path, text: str, name: str = "table.csv") -> str:
    path = tmp_path / name
    path.write_text(text)
    return str(path)


# =========================================================================
# read_table
# =========================================================================


def test_read_table_skips_header(table_path):
    labels, data = read_table(table_path)
    assert labels == ["a", "b", "c", "d"]
    assert data.dtype == np.float32
    assert data.shape == (4, 3)
    np.testing.assert_array_equal(data[1], [4.0, 5.0, 6.0])
    np.testing.assert_array_equal(data[3], [-1.0, 0.0, 1.0])


def test_read_table_without_header(tmp_path):
    labels, data = read_table(_write(tmp_path, "x,1,2\ny,3,4\n"))
    assert labels == ["x", "y"]
    np.testing.assert_array_equal(data, [[1.0, 2.0], [3.0, 4.0]])


def test_read_table_custom_delimiter(tmp_path):
    labels, data = read_table(_write(tmp_path, "\tc1\tc2\n1\t0.25\t0.5\n2\t1e3\t-7\n", "table.tsv"), sep="\t")
    assert labels == ["1", "2"]
    np.testing.assert_array_equal(data, [[0.25, 0.5], [1000.0, -7.0]])


def test_read_table_non_numeric_cell(tmp_path):
    with pytest.raises(ValueError, match="abc"):
        read_table(_write(tmp_path, ",c1,c2\na,1.0,abc\n"))


def test_read_table_missing_label(tmp_path):
    with pytest.raises(ValueError, match="Missing row label"):
        read_table(_write(tmp_path, ",c1,c2\na,1.0,2.0\n,3.0,4.0\n"))


def test_read_table_missing_value(tmp_path):
    with pytest.raises(ValueError, match="Missing value"):
        read_table(_write(tmp_path, "a,1.0,2.0\nb,3.0,\n"))


def test_read_table_short_row(tmp_path):
    with pytest.raises(ValueError):
        read_table(_write(tmp_path, "a,1.0,2.0\nb,3.0\n"))


def test_read_table_long_row(tmp_path):
    with pytest.raises(ValueError):
        read_table(_write(tmp_path, "a,1.0,2.0\nb,3.0,4.0,5.0\n"))


def test_read_table_non_finite_value(tmp_path):
    with pytest.raises(ValueError, match="Non-finite"):
        read_table(_write(tmp_path, "a,1.0,inf\n"))


@pytest.mark.parametrize("cell", ["1e40", "-1e39", "nan"])
def test_read_table_value_outside_single_precision(tmp_path, cell):
    with pytest.raises(ValueError, match="Non-finite value .* row 'a', column 1"):
        read_table(_write(tmp_path, f"a,{cell},2\nb,1,2\n"))


@pytest.mark.parametrize("cell", ["1_000", "0x10", "1.5f", "--1"])
def test_read_table_rejects_non_decimal_spellings(tmp_path, cell):
    with pytest.raises(ValueError, match="Non-numeric"):
        read_table(_write(tmp_path, f"a,{cell},2\n"))


def test_read_table_accepts_scientific_notation(tmp_path):
    _, data = read_table(_write(tmp_path, "a,+1.5E2,-.5,3.,1e-3\n"))
    np.testing.assert_allclose(data, [[150.0, -0.5, 3.0, 1e-3]], rtol=1e-6)


@pytest.mark.parametrize("text", ["", ",c1,c2\n", "a\nb\n"])
def test_read_table_without_data(tmp_path, text):
    with pytest.raises(ValueError):
        read_table(_write(tmp_path, text))


def test_read_table_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_table(str(tmp_path / "nope.csv"))


def test_read_table_rejects_long_delimiter(table_path):
    with pytest.raises(ValueError):
        read_table(table_path, sep="::")


# =========================================================================
# Assignment files
# =========================================================================


def test_write_assignment_is_one_indexed(tmp_path):
    path = str(tmp_path / "assignment.csv")
    write_assignment(path, ["a", "b", "c"], np.array([0, 2, 1]))
    with open(path) as f:
        lines = f.read().splitlines()
    assert lines == ["Rowname,Cluster", "a,1", "b,3", "c,2"]


@pytest.mark.parametrize("sep", [",", "\t", ";"])
def test_assignment_round_trip(tmp_path, sep):
    labels = ["a", "b", "001", "NA"]
    assignment = np.array([3, 0, 1, 0])
    path = str(tmp_path / "assignment.txt")
    write_assignment(path, labels, assignment, sep=sep)
    read_labels, read_clusters = read_assignment(path, sep=sep)
    assert read_labels == labels
    np.testing.assert_array_equal(read_clusters, assignment)


def test_write_assignment_length_mismatch(tmp_path):
    with pytest.raises(ValueError):
        write_assignment(str(tmp_path / "a.csv"), ["a"], [0, 1])


def test_read_assignment_bad_header(tmp_path):
    with pytest.raises(ValueError, match="header"):
        read_assignment(_write(tmp_path, "Name,Group\na,1\n"))


def test_read_assignment_zero_cluster(tmp_path):
    with pytest.raises(ValueError):
        read_assignment(_write(tmp_path, "Rowname,Cluster\na,0\n"))


# =========================================================================
# Cluster summaries
# =========================================================================


def test_create_cluster_list():
    data = np.array([[0.0], [1.0], [10.0], [50.0]], dtype=np.float32)
    annealer = ClusterAnnealer(["p", "q", "r", "s"], data, AnnealerConfig(n_clusters=3),
                               initial_assignment=[0, 0, 0, 1])
    cluster_list = create_cluster_list(annealer)

    assert [clust.cluster_id for clust in cluster_list] == [1, 2, 3]
    first, second, third = cluster_list

    assert first.number_of_members == 3
    assert first.labels_of_members == ["p", "q", "r"]
    assert first.best_representative_member == "q"
    assert first.energy == pytest.approx(1.0 + 10.0 + 9.0)
    assert first.data_of_members.shape == (3, 1)

    assert second.best_representative_member == "s"
    assert second.energy == 0.0

    assert third.number_of_members == 0
    assert third.best_representative_member is None
    assert third.data_of_members.shape == (0, 1)


def test_perform_clustering():
    config = AnnealerConfig(n_clusters=3, max_iter=500, seed=11)
    annealer, cluster_list = perform_clustering(_make_labels(30), _make_matrix(30, 6, seed=11) * 4.0, config,
                                                trace_every=100)
    assert annealer.state is AnnealerState.STOPPED
    assert annealer.iterations_ == 500
    assert annealer.data.max() <= 1.0
    assert len(annealer.trace_) == 5
    assert len(cluster_list) == 3
    assert sum(clust.number_of_members for clust in cluster_list) == 30


def test_perform_clustering_without_normalization():
    data = _make_matrix(12, 3, seed=2) * 5.0
    config = AnnealerConfig(n_clusters=2, max_iter=10, seed=2)
    annealer, _ = perform_clustering(_make_labels(12), data, config, normalize=False)
    np.testing.assert_array_equal(annealer.data, data)
