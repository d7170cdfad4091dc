"""Affine warping of images and the registration error with its derivatives.

The six parameters ``alpha`` describe the displacement

    x' = x + (a0 * x + a1 * y + a2)
    y' = y + (a3 * x + a4 * y + a5)

in centred pixel coordinates, where the pixel in row ``i`` and column ``j``
of an ``n x n`` image sits at ``(j - n // 2, n // 2 - i)``.
"""

from __future__ import annotations

import numpy as np

from .linalg import DIM
from .pgm import write_pgm

__all__ = [
    "coord_transformation",
    "bilinear_interpolation",
    "grad_x_product",
    "grad_x_alpha_product",
    "pixel_coordinates",
    "render_image",
    "print_image",
    "error_function",
    "error_gradient",
    "error_hessian",
]


def _as_points(values) -> np.ndarray:
    points = np.asarray(values, dtype=float)
    if points.ndim not in (1, 2) or points.shape[-1] != 2:
        raise ValueError("expected a point of shape (2,) or points of shape (n, 2)")
    return points


def _as_alpha(values) -> np.ndarray:
    alpha = np.asarray(values, dtype=float)
    if alpha.shape != (DIM,):
        raise ValueError(f"expected {DIM} transformation parameters")
    return alpha


def _as_image(image) -> np.ndarray:
    data = np.asarray(image, dtype=float)
    if data.ndim != 2 or data.size == 0:
        raise ValueError("expected a non-empty two-dimensional image")
    return data


def _as_square(image) -> np.ndarray:
    data = _as_image(image)
    if data.shape[0] != data.shape[1]:
        raise ValueError("expected a square image")
    return data


def _unpack_gradients(gradients) -> tuple[np.ndarray, np.ndarray]:
    grad_x, grad_y = gradients
    return _as_image(grad_x), _as_image(grad_y)


def _scalar_or_array(value):
    result = np.asarray(value)
    return float(result) if result.ndim == 0 else result


def coord_transformation(x, alpha) -> np.ndarray:
    """Apply the affine displacement ``alpha`` to one point or an array of points."""
    points = _as_points(x)
    a = _as_alpha(alpha)
    x0, x1 = points[..., 0], points[..., 1]
    return np.stack(
        [
            x0 + x0 * a[0] + x1 * a[1] + a[2],
            x1 + x0 * a[3] + x1 * a[4] + a[5],
        ],
        axis=-1,
    )


def bilinear_interpolation(point, image):
    """Sample ``image`` at centred coordinates, wrapping around its borders.

    The interpolated value is rounded down to an integer value.
    """
    data = _as_image(image)
    points = _as_points(point)
    if not np.all(np.isfinite(points)):
        raise ValueError("coordinates must be finite")
    rows, cols = data.shape
    px, py = points[..., 0], points[..., 1]
    delta1 = px - np.floor(px)
    delta2 = py - np.floor(py)
    j = np.trunc(px).astype(np.int64) - cols // 2
    i = rows // 2 - np.trunc(py).astype(np.int64)
    i0, i1 = i % rows, (i + 1) % rows
    j0, j1 = j % cols, (j + 1) % cols
    value = (
        (1 - delta1) * (1 - delta2) * data[i0, j0]
        + (1 - delta1) * delta2 * data[i0, j1]
        + delta1 * (1 - delta2) * data[i1, j0]
        + delta1 * delta2 * data[i1, j1]
    )
    return _scalar_or_array(np.floor(value))


def grad_x_product(gradients, x, point) -> np.ndarray:
    """Product of the image gradient at ``point`` with the Jacobian at ``x``."""
    grad_x, grad_y = _unpack_gradients(gradients)
    xs = _as_points(x)
    g0 = np.asarray(bilinear_interpolation(point, grad_x))
    g1 = np.asarray(bilinear_interpolation(point, grad_y))
    x0, x1 = xs[..., 0], xs[..., 1]
    return np.stack([x0 * g0, x1 * g0, g0, x0 * g1, x1 * g1, g1], axis=-1)


def grad_x_alpha_product(gradients, x, point, alpha):
    """Image gradient at ``point`` dotted with the displacement of ``x`` by ``alpha``."""
    grad_x, grad_y = _unpack_gradients(gradients)
    xs = _as_points(x)
    a = _as_alpha(alpha)
    g0 = np.asarray(bilinear_interpolation(point, grad_x))
    g1 = np.asarray(bilinear_interpolation(point, grad_y))
    x0, x1 = xs[..., 0], xs[..., 1]
    value = g0 * (x0 * a[0] + x1 * a[1] + a[2]) + g1 * (x0 * a[3] + x1 * a[4] + a[5])
    return _scalar_or_array(value)


def pixel_coordinates(size) -> np.ndarray:
    """Centred coordinates of every pixel of a ``size x size`` image, row by row."""
    if size <= 0:
        raise ValueError("size must be positive")
    half = size // 2
    i, j = np.divmod(np.arange(size * size), size)
    return np.column_stack([j - half, half - i]).astype(float)


def render_image(image, alpha) -> np.ndarray:
    """Warp a square image by ``alpha``."""
    data = _as_square(image)
    size = data.shape[0]
    coords = pixel_coordinates(size)
    warped = coord_transformation(coords, alpha)
    return np.asarray(bilinear_interpolation(warped, data)).reshape(size, size)


def print_image(image, alpha, path) -> np.ndarray:
    """Warp a square image by ``alpha``, save it as PGM and return it."""
    rendered = render_image(image, alpha)
    write_pgm(path, rendered)
    return rendered


def _linearised_terms(image, gradients, reference, alpha, step):
    data = _as_square(image)
    ref = _as_square(reference)
    if ref.shape != data.shape:
        raise ValueError("image and reference must have the same shape")
    step_vector = _as_alpha(step)
    coords = pixel_coordinates(data.shape[0])
    warped = coord_transformation(coords, alpha)
    jacobian = grad_x_product(gradients, coords, warped)
    residual = (
        ref.ravel()
        - np.asarray(bilinear_interpolation(warped, data))
        - jacobian @ step_vector
    )
    return residual, jacobian


def error_function(image, gradients, reference, alpha, step) -> float:
    """Linearised squared error of ``image`` warped by ``alpha`` plus ``step``."""
    residual, _ = _linearised_terms(image, gradients, reference, alpha, step)
    return float(0.5 * np.sum(residual * residual))


def error_gradient(image, gradients, reference, alpha, step) -> np.ndarray:
    """Gradient of :func:`error_function` with respect to ``step``."""
    residual, jacobian = _linearised_terms(image, gradients, reference, alpha, step)
    return -(residual @ jacobian)


def error_hessian(gradients, alpha) -> np.ndarray:
    """Gauss-Newton Hessian of :func:`error_function` with respect to ``step``."""
    grad_x, grad_y = _unpack_gradients(gradients)
    _as_square(grad_x)
    if grad_y.shape != grad_x.shape:
        raise ValueError("gradient images must have the same shape")
    coords = pixel_coordinates(grad_x.shape[0])
    warped = coord_transformation(coords, alpha)
    jacobian = grad_x_product((grad_x, grad_y), coords, warped)
    return jacobian.T @ jacobian