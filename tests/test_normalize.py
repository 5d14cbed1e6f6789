import numpy as np
import pytest

from annealclstr._normalize import normalize_rows


def _make_matrix(n_rows: int, n_cols: int, seed: int = 0) -> np.ndarray:
    """Deterministic float32 matrix with values in [0, 1)."""
    rng = np.random.default_rng(seed)
    return rng.random((n_rows, n_cols), dtype=np.float32)


def test_rows_are_rescaled_to_unit_range():
    data = _make_matrix(10, 8, seed=5) * 50.0 - 20.0
    normalize_rows(data)
    for row in data:
        assert row.min() == 0.0
        assert row.max() == pytest.approx(1.0)


def test_normalization_is_per_row_and_in_place():
    data = np.array([[2.0, 4.0, 6.0], [10.0, 0.0, 5.0]], dtype=np.float32)
    result = normalize_rows(data)
    assert result is None
    np.testing.assert_allclose(data, [[0.0, 0.5, 1.0], [1.0, 0.0, 0.5]])


def test_constant_row_maps_to_zero():
    data = np.array([[3.0, 3.0, 3.0], [1.0, 2.0, 3.0]], dtype=np.float32)
    normalize_rows(data)
    np.testing.assert_array_equal(data[0], [0.0, 0.0, 0.0])
    np.testing.assert_allclose(data[1], [0.0, 0.5, 1.0])


def test_single_column_is_constant():
    data = np.array([[7.0], [-2.0]], dtype=np.float32)
    normalize_rows(data)
    np.testing.assert_array_equal(data, [[0.0], [0.0]])


def test_rejects_non_matrix():
    with pytest.raises(ValueError):
        normalize_rows(np.zeros(4, dtype=np.float32))
