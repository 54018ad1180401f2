"""
Rz approximation drivers and result record.
"""

from .rzapproximation import (
    RzApproximation,
    find_rz_approximation,
    find_fast_rz_approximation,
    approximate_rz,
)

__all__ = [
    "RzApproximation",
    "find_rz_approximation",
    "find_fast_rz_approximation",
    "approximate_rz",
]
