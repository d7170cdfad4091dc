"""Affine registration of PGM images with a dogleg trust-region optimiser."""

__version__ = "0.1.0"
__all__ = ["__version__"]