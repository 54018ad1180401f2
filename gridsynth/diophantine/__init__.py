"""
Norm equation solver over Z[omega].
"""

from .diophantine import (
    solve_norm_equation,
    gcd_zomega,
    gcd_zsqrt2,
    sqrt_minus_one_mod,
)

__all__ = [
    "solve_norm_equation",
    "gcd_zomega",
    "gcd_zsqrt2",
    "sqrt_minus_one_mod",
]
