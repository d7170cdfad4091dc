"""Dense linear-algebra helpers and shared constants for the optimiser."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

DIM = 6
"""Number of parameters of the affine transformation being estimated."""

IMG_SIZE = 254
"""Side length, in pixels, of the square images being registered."""

PI = math.pi

_MIN_SENTINEL = 1e9
_MAX_SENTINEL = 0.0


@dataclass(frozen=True)
class SolverConfig:
    """Settings shared by the optimisation methods."""

    max_iter: int = 300
    eps: float = float(np.finfo(float).eps)

    def __post_init__(self) -> None:
        if self.max_iter < 0:
            raise ValueError("max_iter must be non-negative")
        if self.eps < 0:
            raise ValueError("eps must be non-negative")


def _as_vector(values) -> np.ndarray:
    vector = np.asarray(values, dtype=float)
    if vector.ndim != 1:
        raise ValueError("expected a one-dimensional vector")
    return vector


def _as_matrix(values) -> np.ndarray:
    matrix = np.asarray(values, dtype=float)
    if matrix.ndim != 2:
        raise ValueError("expected a two-dimensional matrix")
    return matrix


def quadratic_form(matrix, vector) -> float:
    """Return x^T A x."""
    a = _as_matrix(matrix)
    x = _as_vector(vector)
    if a.shape != (x.size, x.size):
        raise ValueError(
            f"matrix of shape {a.shape} does not match vector of length {x.size}"
        )
    return float(x @ (a @ x))


def matrix_min(matrix) -> float:
    """Smallest entry of the matrix, never above 1e9."""
    data = np.asarray(matrix, dtype=float)
    if data.size == 0:
        return _MIN_SENTINEL
    return float(min(_MIN_SENTINEL, data.min()))


def matrix_max(matrix) -> float:
    """Largest entry of the matrix, never below 0."""
    data = np.asarray(matrix, dtype=float)
    if data.size == 0:
        return _MAX_SENTINEL
    return float(max(_MAX_SENTINEL, data.max()))


def add_to_diagonal(matrix, value) -> np.ndarray:
    """Return a copy of the matrix with ``value`` added to its diagonal."""
    result = _as_matrix(matrix).copy()
    count = min(result.shape)
    result[np.arange(count), np.arange(count)] += value
    return result


def rosenbrock(x) -> float:
    """Generalised Rosenbrock function."""
    v = _as_vector(x)
    head, tail = v[:-1], v[1:]
    return float(np.sum(100.0 * (tail - head**2) ** 2 + (1.0 - head) ** 2))


def euclidean(a, b) -> float:
    """Euclidean distance between two vectors."""
    u = _as_vector(a)
    v = _as_vector(b)
    if u.shape != v.shape:
        raise ValueError("vectors must have the same length")
    return float(np.sqrt(np.sum((u - v) ** 2)))


def partial_derivative(x, index) -> float:
    """Analytic partial derivative of the two-dimensional Rosenbrock function."""
    v = _as_vector(x)
    if index == 0:
        return float(-400.0 * v[0] * (v[1] - v[0] ** 2) - 2.0 * (1.0 - v[0]))
    if index == 1:
        return float(200.0 * (v[1] - v[0] ** 2))
    return 0.0


def mixed_partial_derivative(x, i, j) -> float:
    """Analytic second derivative of the two-dimensional Rosenbrock function."""
    v = _as_vector(x)
    if i == 0 and j == 0:
        return float(-400.0 * (v[1] - v[0] ** 2) + 800.0 * v[0] ** 2 + 2.0)
    if i == 1 and j == 1:
        return 200.0
    if {i, j} == {0, 1}:
        return float(-400.0 * v[0])
    return 0.0