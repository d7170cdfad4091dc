"""Trust-region registration of one image onto a reference image."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from .dogleg import StepKind, dogleg
from .imaging import error_function, error_gradient, error_hessian, print_image
from .linalg import DIM

__all__ = ["IterationRecord", "TrustRegionResult", "model", "initial_alpha", "trust_region"]

_INITIAL_THETA = 0.0
_INITIAL_SHIFT_X = 10.0
_INITIAL_SHIFT_Y = -10.0


@dataclass(frozen=True)
class IterationRecord:
    """What happened in one pass of the trust-region loop."""

    kind: StepKind
    product: float
    radius: float
    error: float
    accepted: bool
    delta: float


@dataclass
class TrustRegionResult:
    """Final parameters, error and the trace of the optimisation."""

    alpha: np.ndarray
    error: float
    iterations: int
    history: list[IterationRecord] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)


def model(step, gradient, hessian) -> float:
    """Decrease predicted by the quadratic model: ``-(g^T p + p^T B p / 2)``."""
    p = np.asarray(step, dtype=float)
    g = np.asarray(gradient, dtype=float)
    b = np.asarray(hessian, dtype=float)
    if p.shape != g.shape or p.ndim != 1 or b.shape != (p.size, p.size):
        raise ValueError("step, gradient and hessian have inconsistent shapes")
    return float(-(p @ g) - 0.5 * (p @ (b @ p)))


def initial_alpha(theta, shift_x, shift_y) -> np.ndarray:
    """Parameters of a rotation by ``theta`` followed by a translation."""
    cos_term = math.cos(theta) - 1.0
    sin_term = math.sin(theta)
    return np.array([cos_term, sin_term, shift_x, -sin_term, cos_term, shift_y], dtype=float)


def trust_region(
    image,
    gradients,
    reference,
    output_dir=None,
    max_iterations=300,
    epsilon=1000.0,
    delta=0.5,
    delta_max=1.0,
    threshold=0.1,
) -> TrustRegionResult:
    """Estimate the affine parameters that carry ``image`` onto ``reference``.

    When ``output_dir`` is given, the warped image is saved there as
    ``output0.pgm`` and again as ``output<k>.pgm`` after every accepted step.
    """
    if delta_max <= 0:
        raise ValueError("delta_max must be positive")
    if not 0 < delta < delta_max:
        raise ValueError("delta must lie strictly between 0 and delta_max")
    if not 0 <= threshold < 0.25:
        raise ValueError("threshold must lie in [0, 0.25)")

    out = Path(output_dir) if output_dir is not None else None
    if out is not None:
        out.mkdir(parents=True, exist_ok=True)

    alpha = initial_alpha(_INITIAL_THETA, _INITIAL_SHIFT_X, _INITIAL_SHIFT_Y)
    step = np.zeros(DIM)
    written: list[Path] = []
    history: list[IterationRecord] = []

    def save(index: int) -> None:
        if out is not None:
            path = out / f"output{index}.pgm"
            print_image(image, alpha, path)
            written.append(path)

    save(0)
    fk_prev = error_function(image, gradients, reference, alpha, step)
    k = 1

    while fk_prev > epsilon and k < max_iterations:
        gradient = error_gradient(image, gradients, reference, alpha, step)
        if not np.any(gradient):
            break
        hessian = error_hessian(gradients, alpha)
        proposal = dogleg(delta, gradient, hessian)
        step = proposal.step

        fk_new = error_function(image, gradients, reference, alpha, step)
        predicted = model(step, gradient, hessian)
        if predicted == 0.0:
            break
        radius = (fk_prev - fk_new) / predicted

        if radius < 0.25:
            delta *= 0.25
        elif radius > 0.75 and abs(float(np.linalg.norm(step)) - delta) < 0.01:
            delta = min(2.0 * delta, delta_max)

        accepted = radius > threshold
        if accepted:
            alpha = alpha + step
            fk_prev = fk_new
            save(k)
            k += 1

        history.append(
            IterationRecord(
                kind=proposal.kind,
                product=float(gradient @ step),
                radius=float(radius),
                error=float(fk_prev),
                accepted=accepted,
                delta=float(delta),
            )
        )

    return TrustRegionResult(
        alpha=alpha,
        error=float(fk_prev),
        iterations=k - 1,
        history=history,
        written=written,
    )