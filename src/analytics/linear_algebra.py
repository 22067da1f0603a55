"""Small dense linear-algebra helpers for the regression layer.

The inverse is a hand-rolled Gauss-Jordan elimination rather than
``np.linalg.inv`` so the pivot choice and the singularity threshold are
fixed and reproducible:

    for each column i:
        swap in the row (≥ i) with the largest |A[k, i]|
        |pivot| < 1e-10  →  SingularMatrixError
        scale row i so the pivot is 1
        eliminate column i from every other row
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from constants import SINGULAR_PIVOT_EPS
from errors import SingularMatrixError


def _as_matrix(a) -> np.ndarray:
    m = np.asarray(a, dtype=np.float64)
    if m.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got {m.ndim} dimension(s)")
    return m


def transpose(a) -> np.ndarray:
    return _as_matrix(a).T.copy()


def matmul(a, b) -> np.ndarray:
    left, right = _as_matrix(a), _as_matrix(b)
    if left.shape[1] != right.shape[0]:
        raise ValueError(f"Cannot multiply {left.shape} by {right.shape}")
    return left @ right


def matvec(a, v: Sequence[float]) -> np.ndarray:
    m = _as_matrix(a)
    vec = np.asarray(v, dtype=np.float64)
    if m.shape[1] != vec.shape[0]:
        raise ValueError(f"Cannot multiply {m.shape} by vector of length {vec.shape[0]}")
    return m @ vec


def invert(matrix, eps: float = SINGULAR_PIVOT_EPS) -> np.ndarray:
    """Inverse via Gauss-Jordan elimination with partial pivoting."""
    a = _as_matrix(matrix)
    n = a.shape[0]
    if n == 0 or a.shape[1] != n:
        raise ValueError(f"Matrix must be square for inversion, got {a.shape}")

    aug = np.hstack([a, np.eye(n)])
    for i in range(n):
        pivot_row = i + int(np.argmax(np.abs(aug[i:, i])))
        if pivot_row != i:
            aug[[i, pivot_row]] = aug[[pivot_row, i]]

        pivot = aug[i, i]
        if abs(pivot) < eps:
            raise SingularMatrixError(f"Matrix is singular (pivot column {i})", column=i)

        aug[i] /= pivot
        for k in range(n):
            if k != i:
                aug[k] -= aug[k, i] * aug[i]

    return aug[:, n:]
