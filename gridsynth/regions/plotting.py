"""Matplotlib views of grid problems."""

from __future__ import annotations

from typing import Iterable, Optional

import matplotlib.pyplot as plt
import numpy as np

from ..utils.rings import ZOmega
from .regions import Ellipse, SearchState


def ellipse_outline(ellipse: Ellipse, num_points: int = 200) -> np.ndarray:
    """Return ``(num_points, 2)`` points on the boundary of ``ellipse``.

    The boundary is :math:`c + L^{-T} (\\cos t, \\sin t)` where
    :math:`D = L L^T` is the Cholesky factorization of the quadratic form.
    """
    a, b, d = (float(x) for x in ellipse.D)
    cx, cy = (float(x) for x in ellipse.center)
    L = np.linalg.cholesky(np.array([[a, b], [b, d]]))
    t = np.linspace(0.0, 2.0 * np.pi, num_points)
    circle = np.vstack([np.cos(t), np.sin(t)])
    points = np.linalg.solve(L.T, circle)
    return (points + np.array([[cx], [cy]])).T


def plot_grid_problem(
    state: SearchState,
    candidates: Optional[Iterable[ZOmega]] = None,
    show_boxes: bool = True,
) -> None:
    """Draw both ellipses of a search state side by side.

    The left panel shows the first ellipse with the candidates ``u``; the
    right panel shows the second ellipse with their conjugates ``u•``.

    Args:
        state: Search state to draw.
        candidates: Optional lattice points to scatter on top.
        show_boxes: Whether to draw the bounding boxes of the ellipses.
    """
    precision = state.first.precision
    points = list(candidates) if candidates is not None else []

    fig = plt.figure(figsize=(10, 5))
    for idx, (ellipse, title) in enumerate(
        ((state.first, "first ellipse"), (state.second, "second ellipse"))
    ):
        ax = fig.add_subplot(1, 2, idx + 1)
        outline = ellipse_outline(ellipse)
        ax.plot(outline[:, 0], outline[:, 1], color="tab:blue")

        if show_boxes:
            box = ellipse.bounding_box()
            x0, x1 = float(box.x.lo), float(box.x.hi)
            y0, y1 = float(box.y.lo), float(box.y.hi)
            ax.plot([x0, x1, x1, x0, x0], [y0, y0, y1, y1, y0], ls="--", color="gray")

        if points:
            shown = points if idx == 0 else [u.adj2() for u in points]
            xs = [float(u.real(precision)) for u in shown]
            ys = [float(u.imag(precision)) for u in shown]
            ax.scatter(xs, ys, marker="o", s=12, color="tab:red", zorder=3)

        ax.set_title(title)
        ax.set_aspect("equal", adjustable="datalim")

    plt.tight_layout()
    plt.show()
