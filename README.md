# imreg-trust

Registers one grayscale image against a reference image. The match is an affine
transformation with six parameters, and a trust-region method with dogleg steps
finds it. Images are read from and written to plain-text (P2) PGM files.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

```python
from imreg_trust.pgm import read_pgm, image_gradient
from imreg_trust.trust_region import trust_region

image = read_pgm("moving.pgm")
reference = read_pgm("reference.pgm")
gradients = image_gradient(image)

result = trust_region(image, gradients, reference, output_dir="out")
print(result.alpha, result.error, result.iterations)
for record in result.history:
    print(record.kind, record.product, record.radius, record.error)
```

Both images must be square and the same size.

`trust_region` starts from no rotation and a shift of (10, -10)
(`initial_alpha(0.0, 10.0, -10.0)`). At each iteration it builds the linearised
least-squares error, its gradient and its Gauss–Newton Hessian, and proposes a
step with `dogleg`. The step is accepted when the ratio of the actual to the
predicted reduction is above `threshold`. The trust radius `delta` is cut to a
quarter when that ratio is below 0.25. It is doubled, up to `delta_max`, when
the ratio is above 0.75 and the step reached the edge of the region.

The loop stops in any of these cases:

- the error falls to `epsilon` or below (default 1000);
- `max_iterations` is reached (default 300);
- the gradient is zero;
- the model predicts no reduction.

When `output_dir` is given, the warped image is saved there as `output0.pgm` for
the starting guess, and then as `output1.pgm`, `output2.pgm`, and so on after each
accepted step.

The result is a `TrustRegionResult` with these fields:

- `alpha`: the final parameters.
- `error`: the final error.
- `iterations`: the number of accepted steps.
- `history`: a list of `IterationRecord`s. Each record holds the step kind, the
  inner product of the gradient and the step, the reduction ratio, the current
  error, whether the step was accepted, and the trust radius.
- `written`: the paths of the images that were saved.

## Modules

- `imreg_trust.linalg`: the constants `DIM` and `IMG_SIZE`, and `SolverConfig`.
  It also has the helpers `quadratic_form`, `matrix_min`, `matrix_max`,
  `add_to_diagonal` and `euclidean`, and the Rosenbrock test function with its
  analytic derivatives (`rosenbrock`, `partial_derivative`,
  `mixed_partial_derivative`).
- `imreg_trust.solvers`: compact Crout LU and LDLᵀ factorisations
  (`crout_decomposition`, `ldl_decomposition`) and the matching triangular and
  diagonal solvers. `crout_solve` and `cholesky_solve` solve a whole system. A
  zero pivot raises `numpy.linalg.LinAlgError`.
- `imreg_trust.pgm`: `read_pgm`, `write_pgm`, `image_gradient` (central
  differences with wrap-around), `image_hessian` and `normalize_image`. A file
  that cannot be opened or parsed raises `PGMError`.
- `imreg_trust.imaging`: `coord_transformation`, wrap-around
  `bilinear_interpolation` (the result is rounded down), `pixel_coordinates`,
  `render_image` and `print_image`, and `error_function`, `error_gradient` and
  `error_hessian`.
- `imreg_trust.dogleg`: `dogleg(delta, gradient, hessian)` returns a
  `DoglegStep`. The step's `kind` is a `StepKind`: `NEWTON`, `GRADIENT` or
  `DOGLEG`.
- `imreg_trust.trust_region`: `model`, `initial_alpha`, `trust_region`,
  `TrustRegionResult` and `IterationRecord`.

## Limitations

The package installs no command-line program. To register two files, call
`trust_region` from Python as shown above. It prints nothing while it runs; the
per-iteration values are in `result.history`.