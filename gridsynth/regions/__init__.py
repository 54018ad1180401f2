"""
Bounding regions: intervals, upright rectangles, ellipses and search states.
"""

from .regions import (
    Bound,
    Interval,
    UprightRectangle,
    Ellipse,
    SearchState,
)

from .plotting import (
    ellipse_outline,
    plot_grid_problem,
)

__all__ = [
    "Bound",
    "Interval",
    "UprightRectangle",
    "Ellipse",
    "SearchState",
    "ellipse_outline",
    "plot_grid_problem",
]
