"""Dogleg approximation of the trust-region subproblem."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .linalg import add_to_diagonal, quadratic_form
from .solvers import crout_solve

__all__ = ["StepKind", "DoglegStep", "dogleg"]

_DIAGONAL_SHIFT = 10.0


class StepKind(Enum):
    """Which part of the dogleg path the step was taken from."""

    NEWTON = "pB"
    GRADIENT = "pU"
    DOGLEG = "tao"


@dataclass(frozen=True)
class DoglegStep:
    """A step proposed by :func:`dogleg` and the branch that produced it."""

    step: np.ndarray
    kind: StepKind


def _inputs(gradient, hessian) -> tuple[np.ndarray, np.ndarray]:
    g = np.asarray(gradient, dtype=float)
    if g.ndim != 1 or g.size == 0:
        raise ValueError("gradient must be a non-empty one-dimensional vector")
    b = np.asarray(hessian, dtype=float)
    if b.shape != (g.size, g.size):
        raise ValueError(
            f"hessian of shape {b.shape} does not match gradient of length {g.size}"
        )
    return g, b


def dogleg(delta, gradient, hessian) -> DoglegStep:
    """Approximate the minimiser of the quadratic model inside a ball of radius ``delta``.

    While the model has negative curvature along the gradient, a constant is
    added to the Hessian's diagonal until it no longer does.
    """
    if delta < 0:
        raise ValueError("trust-region radius must be non-negative")
    g, b = _inputs(gradient, hessian)

    while quadratic_form(b, g) < 0:
        b = add_to_diagonal(b, _DIAGONAL_SHIFT)

    gtg = float(g @ g)
    gtbg = quadratic_form(b, g)
    if gtbg == 0.0:
        raise ValueError("the model has zero curvature along the gradient")

    p_u = -(gtg / gtbg) * g
    p_u_norm = float(np.linalg.norm(p_u))
    p_b = crout_solve(b, -g)

    if np.linalg.norm(p_b) <= delta:
        return DoglegStep(p_b, StepKind.NEWTON)

    if p_u_norm >= delta:
        return DoglegStep(p_u * (delta / p_u_norm), StepKind.GRADIENT)

    direction = p_b - p_u
    qa = float(direction @ direction)
    qb = 2.0 * float(p_u @ direction)
    qc = float(p_u @ p_u) - delta * delta
    root = math.sqrt(qb * qb - 4.0 * qa * qc)
    k = max((-qb - root) / (2.0 * qa) + 1.0, (-qb + root) / (2.0 * qa) + 1.0)

    if 0.0 <= k <= 1.0:
        step = k * p_u
    elif 1.0 <= k <= 2.0:
        step = p_u + (k - 1.0) * direction
    else:
        step = np.zeros_like(g)
    return DoglegStep(step, StepKind.DOGLEG)