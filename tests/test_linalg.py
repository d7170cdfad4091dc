import math

import numpy as np
import pytest

from imreg_trust.linalg import (
    DIM,
    SolverConfig,
    add_to_diagonal,
    euclidean,
    matrix_max,
    matrix_min,
    mixed_partial_derivative,
    partial_derivative,
    quadratic_form,
    rosenbrock,
)


def _numeric_grad(f, x, index, h=1e-6):
    plus = np.array(x, dtype=float)
    minus = np.array(x, dtype=float)
    plus[index] += h
    minus[index] -= h
    return (f(plus) - f(minus)) / (2 * h)


def test_solver_config_rejects_negative_iterations():
    with pytest.raises(ValueError):
        SolverConfig(max_iter=-1)


def test_solver_config_keeps_values():
    config = SolverConfig(max_iter=10, eps=1e-3)
    assert config.max_iter == 10
    assert config.eps == 1e-3


def test_quadratic_form_identity_is_squared_norm():
    x = np.array([1.0, -2.0, 3.0, 0.5, 4.0, -1.0])
    assert quadratic_form(np.eye(6), x) == pytest.approx(float(x @ x))


def test_quadratic_form_matches_matrix_product():
    rng = np.random.default_rng(0)
    a = rng.normal(size=(6, 6))
    x = rng.normal(size=6)
    assert quadratic_form(a, x) == pytest.approx(float(x @ a @ x))


def test_quadratic_form_shape_mismatch():
    with pytest.raises(ValueError):
        quadratic_form(np.eye(3), np.ones(4))


def test_matrix_min_is_capped_by_sentinel():
    assert matrix_min(np.full((2, 2), 5e9)) == 1e9


def test_matrix_min_finds_smallest():
    m = np.array([[3.0, -7.0], [2.0, 9.0]])
    assert matrix_min(m) == -7.0


def test_matrix_max_never_below_zero():
    assert matrix_max(np.full((3, 3), -4.0)) == 0.0


def test_matrix_max_finds_largest():
    m = np.array([[3.0, -7.0], [2.0, 9.0]])
    assert matrix_max(m) == 9.0


def test_add_to_diagonal_leaves_input_untouched():
    m = np.arange(9, dtype=float).reshape(3, 3)
    original = m.copy()
    result = add_to_diagonal(m, 10.0)
    assert np.array_equal(m, original)
    assert np.allclose(np.diag(result), np.diag(m) + 10.0)
    off = ~np.eye(3, dtype=bool)
    assert np.array_equal(result[off], m[off])


def test_rosenbrock_minimum_at_ones():
    assert rosenbrock(np.ones(DIM)) == 0.0


def test_rosenbrock_positive_elsewhere():
    assert rosenbrock(np.zeros(DIM)) > 0.0


def test_euclidean_properties():
    a = np.array([1.0, 2.0, 3.0])
    b = np.array([-1.0, 0.5, 2.0])
    c = np.array([4.0, 4.0, -1.0])
    assert euclidean(a, a) == 0.0
    assert euclidean(a, b) == pytest.approx(euclidean(b, a))
    assert euclidean(a, c) <= euclidean(a, b) + euclidean(b, c) + 1e-12
    assert euclidean(a, b) == pytest.approx(math.sqrt(float(np.sum((a - b) ** 2))))


def test_euclidean_length_mismatch():
    with pytest.raises(ValueError):
        euclidean([1.0, 2.0], [1.0])


@pytest.mark.parametrize("point", [(0.3, -0.8), (1.0, 1.0), (-1.2, 2.0)])
@pytest.mark.parametrize("index", [0, 1])
def test_partial_derivative_matches_finite_difference(point, index):
    expected = _numeric_grad(rosenbrock, point, index)
    assert partial_derivative(point, index) == pytest.approx(expected, rel=1e-5, abs=1e-4)


def test_partial_derivative_other_index_is_zero():
    assert partial_derivative((0.5, 0.7), 2) == 0.0


@pytest.mark.parametrize("point", [(0.3, -0.8), (-1.2, 2.0)])
@pytest.mark.parametrize("i,j", [(0, 0), (0, 1), (1, 0), (1, 1)])
def test_mixed_partial_matches_finite_difference(point, i, j):
    expected = _numeric_grad(lambda p: partial_derivative(p, i), point, j)
    assert mixed_partial_derivative(point, i, j) == pytest.approx(expected, rel=1e-5, abs=1e-3)


def test_mixed_partial_is_symmetric_and_zero_outside():
    point = (0.4, 1.3)
    assert mixed_partial_derivative(point, 0, 1) == mixed_partial_derivative(point, 1, 0)
    assert mixed_partial_derivative(point, 2, 0) == 0.0