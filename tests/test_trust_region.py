import numpy as np
import pytest

from imreg_trust.imaging import error_function
from imreg_trust.pgm import image_gradient, read_pgm
from imreg_trust.trust_region import initial_alpha, model, trust_region

SIZE = 16


def _pattern():
    i, j = np.mgrid[0:SIZE, 0:SIZE]
    return (
        120.0
        + 60.0 * np.sin(2 * np.pi * j / SIZE)
        + 50.0 * np.cos(2 * np.pi * i / SIZE)
        + 20.0 * np.sin(2 * np.pi * (i + 2 * j) / SIZE)
    )


def test_model_is_zero_for_zero_step():
    g = np.arange(6.0)
    assert model(np.zeros(6), g, np.eye(6)) == 0.0


def test_model_pinned_value():
    p = np.array([1.0, 0, 0, 0, 0, 0])
    g = np.array([2.0, 0, 0, 0, 0, 0])
    assert model(p, g, np.eye(6)) == pytest.approx(-2.5)


def test_model_shape_mismatch():
    with pytest.raises(ValueError):
        model(np.zeros(6), np.zeros(5), np.eye(6))


def test_initial_alpha_default_start():
    np.testing.assert_allclose(initial_alpha(0.0, 10.0, -10.0), [0, 0, 10, 0, 0, -10])


def test_initial_alpha_rotation_structure():
    alpha = initial_alpha(0.3, 1.0, 2.0)
    assert alpha[3] == -alpha[1]
    assert alpha[4] == alpha[0]
    assert (alpha[0] + 1) ** 2 + alpha[1] ** 2 == pytest.approx(1.0)


def test_no_iterations_when_error_below_epsilon(tmp_path):
    image = _pattern()
    grads = image_gradient(image)
    result = trust_region(image, grads, image, tmp_path, epsilon=1e18)
    start = initial_alpha(0.0, 10.0, -10.0)
    assert result.iterations == 0
    assert result.history == []
    np.testing.assert_allclose(result.alpha, start)
    assert result.error == pytest.approx(
        error_function(image, grads, image, start, np.zeros(6))
    )
    assert result.written == [tmp_path / "output0.pgm"]
    assert read_pgm(tmp_path / "output0.pgm").shape == (SIZE, SIZE)


def test_without_output_dir_nothing_is_written(tmp_path):
    image = _pattern()
    result = trust_region(image, image_gradient(image), image, None, max_iterations=1)
    assert result.written == []
    assert result.iterations == 0


def test_accepted_steps_never_increase_error(tmp_path):
    image = _pattern()
    reference = np.roll(image, 1, axis=1)
    grads = image_gradient(image)
    start = initial_alpha(0.0, 10.0, -10.0)
    initial_error = error_function(image, grads, reference, start, np.zeros(6))
    result = trust_region(
        image, grads, reference, tmp_path, max_iterations=4, epsilon=0.0
    )
    accepted = [record for record in result.history if record.accepted]
    assert result.iterations == len(accepted)
    assert result.iterations <= 3
    assert result.error <= initial_error
    errors = [record.error for record in accepted]
    assert errors == sorted(errors, reverse=True)
    assert len(result.written) == result.iterations + 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"delta": 0.0},
        {"delta": 2.0, "delta_max": 1.0},
        {"delta_max": 0.0},
        {"threshold": 0.3},
        {"threshold": -0.1},
    ],
)
def test_invalid_parameters(kwargs):
    image = _pattern()
    with pytest.raises(ValueError):
        trust_region(image, image_gradient(image), image, **kwargs)