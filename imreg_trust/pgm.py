"""Reading and writing plain (ASCII) PGM images, plus image derivatives."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from .linalg import matrix_max, matrix_min

__all__ = [
    "PGMError",
    "read_pgm",
    "write_pgm",
    "image_gradient",
    "image_hessian",
    "normalize_image",
]

_HEADER_COMMENT = "#Created by imreg_trust"
_MAX_GRAY = 255


class PGMError(Exception):
    """Raised when a PGM file cannot be read."""


def _as_image(image) -> np.ndarray:
    data = np.asarray(image, dtype=float)
    if data.ndim != 2:
        raise ValueError("expected a two-dimensional image")
    return data


def read_pgm(path) -> np.ndarray:
    """Read an ASCII PGM file into a ``(rows, cols)`` float array.

    The first line (the magic number) is skipped, as are the comment lines
    that directly follow it.
    """
    try:
        text = Path(path).read_text(encoding="latin-1")
    except OSError as exc:
        raise PGMError(f"Could not open file: {path}") from exc

    lines = text.splitlines()
    if not lines:
        raise PGMError(f"{path}: file is empty")

    body_start = 1
    while body_start < len(lines) and lines[body_start].startswith("#"):
        body_start += 1
    tokens = " ".join(lines[body_start:]).split()

    if len(tokens) < 3:
        raise PGMError(f"{path}: incomplete header")
    try:
        cols = int(tokens[0])
        rows = int(tokens[1])
        float(tokens[2])
    except ValueError as exc:
        raise PGMError(f"{path}: malformed header") from exc
    if rows < 0 or cols < 0:
        raise PGMError(f"{path}: negative image dimensions")

    count = rows * cols
    values = tokens[3 : 3 + count]
    if len(values) < count:
        raise PGMError(
            f"{path}: expected {count} pixel values, found {len(values)}"
        )
    try:
        pixels = np.array([float(value) for value in values], dtype=float)
    except ValueError as exc:
        raise PGMError(f"{path}: malformed pixel value") from exc
    return pixels.reshape(rows, cols)


def write_pgm(path, image) -> None:
    """Write an image as an ASCII PGM file, truncating values to integers."""
    data = _as_image(image)
    if not np.all(np.isfinite(data)):
        raise ValueError("image contains non-finite values")
    rows, cols = data.shape
    pixels = np.trunc(data).astype(np.int64)
    with open(path, "w", encoding="ascii", newline="\n") as handle:
        handle.write(f"P2\n{_HEADER_COMMENT}\n{cols} {rows}\n{_MAX_GRAY}\n")
        for row in pixels:
            handle.write("".join(f"{int(value)} " for value in row))
            handle.write("\n")


def image_gradient(image) -> tuple[np.ndarray, np.ndarray]:
    """Central-difference gradient ``(d/dx, d/dy)`` with wrap-around borders.

    The horizontal derivative wraps periodically. The vertical derivative of
    the last row is taken against the second row rather than the first.
    """
    data = _as_image(image)
    if data.shape[0] < 2 or data.shape[1] < 2:
        raise ValueError("image must be at least 2x2")
    grad_x = 0.5 * (np.roll(data, -1, axis=1) - np.roll(data, 1, axis=1))
    grad_y = 0.5 * (np.roll(data, -1, axis=0) - np.roll(data, 1, axis=0))
    grad_y[-1] = 0.5 * (data[1] - data[-2])
    return grad_x, grad_y


def image_hessian(gradient_x, gradient_y) -> tuple[np.ndarray, ...]:
    """Second derivatives ``(xx, xy, yx, yy)`` from the two gradient images."""
    xx, xy = image_gradient(gradient_x)
    yx, yy = image_gradient(gradient_y)
    return xx, xy, yx, yy


def normalize_image(image) -> np.ndarray:
    """Scale an image linearly onto the range 0..255."""
    data = _as_image(image)
    maxi = matrix_max(data)
    mini = matrix_min(data)
    if maxi == mini:
        raise ValueError("cannot normalise an image whose range is empty")
    return 255.0 * (data - mini) / (maxi - mini)