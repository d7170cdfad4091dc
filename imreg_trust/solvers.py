"""Direct solvers for dense linear systems ``A x = b``.

Two factorisations are provided, both returned in compact form: every
factor is stored in a single square array.

* Crout: ``A = L U`` where ``L`` is lower triangular (diagonal included)
  and ``U`` is unit upper triangular. ``L`` sits on and below the
  diagonal; the strict upper part of ``U`` sits above it.
* LDL^T: ``A = L D L^T`` for symmetric ``A``, where ``L`` is unit lower
  triangular. ``D`` sits on the diagonal, ``L`` below it, and ``L^T``
  is mirrored above it.
"""

from __future__ import annotations

import numpy as np

__all__ = [
    "crout_decomposition",
    "solve_lower_triangular",
    "solve_unit_upper_triangular",
    "crout_solve",
    "ldl_decomposition",
    "forward_substitution",
    "backward_substitution",
    "solve_diagonal",
    "cholesky_solve",
]


def _square(matrix) -> np.ndarray:
    a = np.array(matrix, dtype=float)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError("expected a square matrix")
    if a.shape[0] == 0:
        raise ValueError("matrix must not be empty")
    return a


def _system(matrix, rhs) -> tuple[np.ndarray, np.ndarray]:
    a = _square(matrix)
    b = np.array(rhs, dtype=float)
    if b.ndim != 1 or b.size != a.shape[0]:
        raise ValueError(
            f"right-hand side of shape {b.shape} does not match matrix of shape {a.shape}"
        )
    return a, b


def _check_pivot(value: float, index: int) -> None:
    if value == 0.0:
        raise np.linalg.LinAlgError(f"zero pivot at position {index}")


def crout_decomposition(matrix) -> np.ndarray:
    """Return the compact Crout factorisation ``A = L U`` of a square matrix."""
    a = _square(matrix)
    n = a.shape[0]
    for i in range(n):
        a[i, i] -= a[i, :i] @ a[:i, i]
        a[i + 1 :, i] -= a[i + 1 :, :i] @ a[:i, i]
        if i + 1 < n:
            _check_pivot(a[i, i], i)
            a[i, i + 1 :] = (a[i, i + 1 :] - a[i, :i] @ a[:i, i + 1 :]) / a[i, i]
    return a


def solve_lower_triangular(lower, rhs) -> np.ndarray:
    """Solve ``L x = b`` using the lower triangle (diagonal included) of ``lower``."""
    a, b = _system(lower, rhs)
    x = np.zeros_like(b)
    for j in range(b.size):
        _check_pivot(a[j, j], j)
        x[j] = (b[j] - a[j, :j] @ x[:j]) / a[j, j]
    return x


def solve_unit_upper_triangular(upper, rhs) -> np.ndarray:
    """Solve ``U x = b`` where ``U`` is the unit upper triangle of ``upper``."""
    a, b = _system(upper, rhs)
    x = np.zeros_like(b)
    for j in reversed(range(b.size)):
        x[j] = b[j] - a[j, j + 1 :] @ x[j + 1 :]
    return x


def crout_solve(matrix, rhs) -> np.ndarray:
    """Solve ``A x = b`` through the Crout factorisation of ``A``."""
    a, b = _system(matrix, rhs)
    factors = crout_decomposition(a)
    return solve_unit_upper_triangular(factors, solve_lower_triangular(factors, b))


def ldl_decomposition(matrix) -> np.ndarray:
    """Return the compact ``L D L^T`` factorisation of a symmetric matrix.

    Only the lower triangle of the input is read.
    """
    a = _square(matrix)
    n = a.shape[0]
    for i in range(n):
        diag = np.diag(a)[:i]
        row = a[i, :i]
        a[i, i] -= np.sum(row * row * diag)
        if i + 1 < n:
            _check_pivot(a[i, i], i)
            a[i + 1 :, i] = (a[i + 1 :, i] - a[i + 1 :, :i] @ (row * diag)) / a[i, i]
            a[i, i + 1 :] = a[i + 1 :, i]
    return a


def forward_substitution(matrix, rhs) -> np.ndarray:
    """Solve ``L x = b`` where ``L`` is the unit lower triangle of ``matrix``."""
    a, b = _system(matrix, rhs)
    x = np.zeros_like(b)
    for j in range(b.size):
        x[j] = b[j] - a[j, :j] @ x[:j]
    return x


def backward_substitution(matrix, rhs) -> np.ndarray:
    """Solve ``U x = b`` where ``U`` is the unit upper triangle of ``matrix``."""
    return solve_unit_upper_triangular(matrix, rhs)


def solve_diagonal(matrix, rhs) -> np.ndarray:
    """Solve ``D x = b`` using only the diagonal of ``matrix``."""
    a, b = _system(matrix, rhs)
    diagonal = np.diag(a)
    zero = np.flatnonzero(diagonal == 0.0)
    if zero.size:
        _check_pivot(0.0, int(zero[0]))
    return b / diagonal


def cholesky_solve(matrix, rhs) -> np.ndarray:
    """Solve ``A x = b`` for symmetric ``A`` through its ``L D L^T`` factorisation."""
    a, b = _system(matrix, rhs)
    factors = ldl_decomposition(a)
    y = forward_substitution(factors, b)
    z = solve_diagonal(factors, y)
    return backward_substitution(factors, z)