"""
gridsynth — Top-level package for Clifford+T approximation of Z-rotations.
"""

# Core utilities
from .utils import (
    PrecisionContext,
    ZSqrt2,
    ZOmega,
    UnitaryMatrix,
    SCHEMA_VERSION,
    APPROXIMATION_JSON_SCHEMA,
)

# Geometry and search
from .regions import Interval, UprightRectangle, Ellipse, SearchState, plot_grid_problem
from .gridoperators import GridOperator, optimize_skew
from .gridsolvers import solve_one_dim, solve_two_dim, solve_two_dim_boxes
from .diophantine import solve_norm_equation

# Drivers
from .rzapproximation import (
    RzApproximation,
    find_rz_approximation,
    find_fast_rz_approximation,
    approximate_rz,
)

__all__ = [
    "PrecisionContext",
    "ZSqrt2",
    "ZOmega",
    "UnitaryMatrix",

    # JSON Schema
    "SCHEMA_VERSION",
    "APPROXIMATION_JSON_SCHEMA",

    # Geometry and search
    "Interval",
    "UprightRectangle",
    "Ellipse",
    "SearchState",
    "plot_grid_problem",
    "GridOperator",
    "optimize_skew",
    "solve_one_dim",
    "solve_two_dim",
    "solve_two_dim_boxes",
    "solve_norm_equation",

    # Drivers
    "RzApproximation",
    "find_rz_approximation",
    "find_fast_rz_approximation",
    "approximate_rz",
]
