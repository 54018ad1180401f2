"""
One- and two-dimensional grid point solvers.
"""

from .gridsolvers import (
    solve_one_dim,
    solve_two_dim,
    solve_two_dim_boxes,
    candidate_count_estimate,
)

__all__ = [
    "solve_one_dim",
    "solve_two_dim",
    "solve_two_dim_boxes",
    "candidate_count_estimate",
]
