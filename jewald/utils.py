"""Utility functions."""

from ._src.utils import complex_erfc, forward_derivative, safe_real

__all__ = ["complex_erfc", "forward_derivative", "safe_real"]
