"""Lattice point enumeration for grid problems.

* :func:`solve_one_dim` – all :math:`\\alpha \\in \\mathbb{Z}[\\sqrt{2}]` with
  :math:`\\alpha \\in A` and :math:`\\alpha^\\bullet \\in B`.
* :func:`solve_two_dim` – all :math:`u \\in \\mathbb{Z}[\\omega]` with
  :math:`u \\in E_1` and :math:`u^\\bullet \\in E_2` for a pair of ellipses.
* :func:`solve_two_dim_boxes` – candidates for a pair of upright rectangles,
  a cheaper over-approximation of the ellipse problem.

Every :math:`u \\in \\mathbb{Z}[\\omega]` can be written uniquely as
:math:`u = \\alpha + i\\beta + w\\omega` with :math:`\\alpha, \\beta \\in
\\mathbb{Z}[\\sqrt{2}]` and :math:`w \\in \\{0, 1\\}`, which reduces the
two-dimensional problems to one-dimensional ones, one per coset ``w``.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, List, Optional

from ..regions.regions import Interval, SearchState, UprightRectangle
from ..utils.precision import PrecisionContext
from ..utils.rings import LAMBDA, ZOmega, ZSqrt2

logger = logging.getLogger(__name__)


def solve_one_dim(
    A: Interval,
    B: Interval,
    precision: PrecisionContext,
    tol: Optional[Any] = None,
) -> List[ZSqrt2]:
    """Solve the one-dimensional grid problem for intervals ``A`` and ``B``.

    The problem is first rescaled by a power :math:`\\lambda^n` of the
    fundamental unit so that the width of ``A`` lies in
    :math:`[\\lambda^{-1}, 1)`; ``B`` is rescaled by :math:`(\\lambda^\\bullet)^n`
    accordingly. For each integer ``b`` in the range allowed by
    :math:`\\alpha - \\alpha^\\bullet = 2b\\sqrt{2}` the compatible values of
    ``a`` are then read off directly.

    Args:
        A: Interval for :math:`\\alpha = a + b\\sqrt{2}`.
        B: Interval for :math:`\\alpha^\\bullet = a - b\\sqrt{2}`.
        precision: Numeric context.
        tol: Boundary tolerance; defaults to ``precision.tol``.

    Returns:
        List[ZSqrt2]: Every solution, each exactly once.
    """
    mp = precision.mp
    tol = precision.tol if tol is None else tol

    width = A.width
    n = int(mp.floor(-mp.log(width) / precision.log_lambda)) if width > 0 else 0

    A_scaled = A.rescale(precision.lambda_**n)
    B_scaled = B.rescale(precision.lambda_conj**n)
    x0, x1 = A_scaled.lo, A_scaled.hi
    y0, y1 = B_scaled.lo, B_scaled.hi

    two_sqrt2 = 2 * precision.sqrt2
    b_min = int(mp.ceil((x0 - y1) / two_sqrt2 - tol))
    b_max = int(mp.floor((x1 - y0) / two_sqrt2 + tol))

    unscale = LAMBDA ** (-n)
    solutions: List[ZSqrt2] = []
    for b in range(b_min, b_max + 1):
        b_sqrt2 = b * precision.sqrt2
        lo = max(x0 - b_sqrt2, y0 + b_sqrt2)
        hi = min(x1 - b_sqrt2, y1 + b_sqrt2)
        for a in range(int(mp.ceil(lo - tol)), int(mp.floor(hi + tol)) + 1):
            alpha = a + b_sqrt2
            if not (A_scaled.contains(alpha, tol) and B_scaled.contains(a - b_sqrt2, tol)):
                continue
            solution = ZSqrt2(a, b) * unscale
            if A.contains(solution.decimal(precision), tol) and B.contains(
                solution.conj().decimal(precision), tol
            ):
                solutions.append(solution)

    return solutions


def solve_two_dim(
    state: SearchState,
    eps: Any,
    precision: PrecisionContext,
    tol: Optional[Any] = None,
) -> Iterator[ZOmega]:
    """Enumerate :math:`u \\in \\mathbb{Z}[\\omega]` inside both ellipses of ``state``.

    Both ellipses are fattened by ``eps`` before their bounding boxes and
    slices are taken, so that no lattice point near the boundary is lost.
    The real parts come from a one-dimensional solve on the x-extents;
    for each of them the imaginary parts come from a one-dimensional solve
    on the vertical slices of the fattened ellipses. Each candidate is then
    checked against the true ellipses with tolerance ``tol``.

    Yields:
        ZOmega: Candidates ``u`` with ``u`` in ``state.first`` and
        ``u.adj2()`` in ``state.second``.
    """
    tol = precision.tol if tol is None else tol
    first, second = state.first, state.second
    fat_first, fat_second = first.fatten(eps), second.fatten(eps)
    box_first, box_second = fat_first.bounding_box(), fat_second.bounding_box()

    for shift in (0, 1):
        offset = shift * precision.inv_sqrt2
        alphas = solve_one_dim(box_first.x - offset, box_second.x + offset, precision, tol)
        for alpha in alphas:
            slice_first = fat_first.y_slice(alpha.decimal(precision) + offset)
            slice_second = fat_second.y_slice(alpha.conj().decimal(precision) - offset)
            if slice_first is None or slice_second is None:
                continue
            betas = solve_one_dim(slice_first - offset, slice_second + offset, precision, tol)
            for beta in betas:
                u = ZOmega.from_real_imag(alpha, beta, shift)
                u_conj = u.adj2()
                if first.contains(u.real(precision), u.imag(precision), tol) and second.contains(
                    u_conj.real(precision), u_conj.imag(precision), tol
                ):
                    yield u


def solve_two_dim_boxes(
    box_first: UprightRectangle,
    box_second: UprightRectangle,
    eps: Any,
    precision: PrecisionContext,
    tol: Optional[Any] = None,
) -> Iterator[ZOmega]:
    """Enumerate lattice candidates for a pair of upright rectangles.

    The rectangles are fattened by ``eps``. The plain lattice
    :math:`\\mathbb{Z}[\\sqrt{2}] + i\\mathbb{Z}[\\sqrt{2}]` is searched first,
    then the shifted coset :math:`\\omega + \\mathbb{Z}[\\sqrt{2}] +
    i\\mathbb{Z}[\\sqrt{2}]`, whose real and imaginary parts are offset by
    :math:`\\pm 1/\\sqrt{2}`. Candidates are not re-checked against any
    ellipse; the caller filters them.

    Yields:
        ZOmega: Candidates ``u`` with ``u`` in ``box_first`` and
        ``u.adj2()`` in ``box_second`` (both fattened).
    """
    tol = precision.tol if tol is None else tol
    A_x, A_y = box_first.x.fatten(eps), box_first.y.fatten(eps)
    B_x, B_y = box_second.x.fatten(eps), box_second.y.fatten(eps)

    for shift in (0, 1):
        offset = shift * precision.inv_sqrt2
        alphas = solve_one_dim(A_x - offset, B_x + offset, precision, tol)
        betas = solve_one_dim(A_y - offset, B_y + offset, precision, tol)
        logger.debug(
            "Coset %d: %d x %d candidates from bounding boxes.", shift, len(alphas), len(betas)
        )
        for alpha in alphas:
            for beta in betas:
                yield ZOmega.from_real_imag(alpha, beta, shift)


def candidate_count_estimate(A: Interval, B: Interval, precision: PrecisionContext) -> int:
    """Rough number of solutions of the one-dimensional problem ``(A, B)``.

    The solutions have density :math:`1/(2\\sqrt{2})` in the product
    ``A × B`` of the two embeddings.
    """
    area = A.width * B.width
    return int(precision.mp.floor(area / (2 * precision.sqrt2))) + 1
