import numpy as np
from numba import njit


def normalize_rows(data: np.ndarray) -> None:
    """
    Min-max normalize every row of ``data`` in place such that
    y_i = (x_i - min(x)) / (max(x) - min(x))

    A constant row has no spread and is mapped to all zeros.

    Parameters
    ----------
    data : np.ndarray
        2-D floating point matrix, modified in place.
    """
    if data.ndim != 2:
        raise ValueError("Data must be a 2-D matrix")
    if data.size == 0:
        return
    _normalize_rows(data)


@njit
def _normalize_rows(data: np.ndarray) -> None:
    for r in range(data.shape[0]):
        # min and max in one sweep
        lo = data[r, 0]
        hi = data[r, 0]
        for c in range(1, data.shape[1]):
            v = data[r, c]
            if v < lo:
                lo = v
            elif v > hi:
                hi = v

        span = hi - lo
        for c in range(data.shape[1]):
            if span > 0:
                data[r, c] = (data[r, c] - lo) / span
            else:
                data[r, c] = 0.0
