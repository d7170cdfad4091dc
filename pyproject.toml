[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imreg-trust"
version = "0.1.0"
description = "Affine registration of PGM images with a dogleg trust-region optimiser"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["image registration", "trust region", "dogleg", "pgm", "optimization"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Processing",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["imreg_trust"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
