"""Grid operators and the skew optimizer.

A grid operator is a real :math:`2 \\times 2` matrix

.. math::

    G = \\begin{pmatrix} a & b \\\\ c & d \\end{pmatrix}, \\qquad
    m = m_0 + \\frac{m_1}{\\sqrt{2}}, \\quad m_0, m_1 \\in \\mathbb{Z},

with :math:`a_0 + b_0 + c_0 + d_0` even and all :math:`m_1` of the same
parity. Such matrices map the lattice :math:`\\mathbb{Z}[\\omega]` (seen as
points of the plane) onto itself; *special* grid operators
(determinant :math:`\\pm 1`) are invertible over the lattice.

The skew optimizer composes special grid operators that turn a pair of
ellipses into an almost upright pair, so that bounding boxes become tight
and the enumeration in :mod:`gridsynth.gridsolvers` only sees few false
candidates.

Public API:

* :class:`GridOperator` – exact grid operator, named generators and algebra.
* :func:`optimize_skew` – compose the skew-reducing operator of a state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Tuple, Union

from ..regions.regions import Ellipse, SearchState
from ..utils.precision import PrecisionContext
from ..utils.rings import LAMBDA, ZOmega, ZSqrt2

logger = logging.getLogger(__name__)

Entry = Tuple[int, int]


def _dot(x: Entry, y: Entry, u: Entry, v: Entry, sign: int = 1) -> Entry:
    """``x*y + sign*u*v`` for entries of the form ``m0 + m1/sqrt(2)``.

    The halved term ``(x1*y1 + sign*u1*v1) / 2`` is integral by the parity
    conditions on grid operators.
    """
    return (
        x[0] * y[0] + sign * u[0] * v[0] + (x[1] * y[1] + sign * u[1] * v[1]) // 2,
        x[0] * y[1] + x[1] * y[0] + sign * (u[0] * v[1] + u[1] * v[0]),
    )


def _entry_scale(x: Entry, s: ZSqrt2) -> Entry:
    """``x * (s.a + s.b*sqrt(2))``."""
    return (x[0] * s.a + x[1] * s.b, x[1] * s.a + 2 * x[0] * s.b)


@dataclass(frozen=True)
class GridOperator:
    """
    Exact grid operator with entries ``(m0, m1)`` meaning :math:`m_0 + m_1/\\sqrt{2}`.

    Raises:
        ValueError: If the entries violate the grid operator parity conditions.
    """

    a: Entry
    b: Entry
    c: Entry
    d: Entry

    _NAMED: ClassVar[Dict[str, Tuple[Entry, Entry, Entry, Entry]]] = {
        "I": ((1, 0), (0, 0), (0, 0), (1, 0)),
        "R": ((0, 1), (0, -1), (0, 1), (0, 1)),
        "A": ((1, 0), (-2, 0), (0, 0), (1, 0)),
        "B": ((1, 0), (0, 2), (0, 0), (1, 0)),
        "K": ((-1, 1), (0, -1), (1, 1), (0, 1)),
        "U": ((1, 2), (0, 0), (0, 0), (-1, 2)),
        "X": ((0, 0), (1, 0), (1, 0), (0, 0)),
        "Z": ((1, 0), (0, 0), (0, 0), (-1, 0)),
    }

    def __post_init__(self) -> None:
        entries = (self.a, self.b, self.c, self.d)
        object.__setattr__(self, "a", tuple(self.a))
        object.__setattr__(self, "b", tuple(self.b))
        object.__setattr__(self, "c", tuple(self.c))
        object.__setattr__(self, "d", tuple(self.d))
        if sum(m[0] for m in entries) % 2 != 0:
            raise ValueError(f"Invalid grid operator {entries}: a0 + b0 + c0 + d0 must be even.")
        if len({m[1] % 2 for m in entries}) != 1:
            raise ValueError(f"Invalid grid operator {entries}: a1, b1, c1, d1 must share parity.")

    # ---- construction ---------------------------------------------------------

    @classmethod
    def named(cls, name: str) -> "GridOperator":
        """Named generator: one of ``I, R, A, B, K, U, X, Z``."""
        try:
            return cls(*cls._NAMED[name])
        except KeyError:
            raise ValueError(
                f"Unknown grid operator {name!r}. Valid values: {sorted(cls._NAMED)}"
            ) from None

    @classmethod
    def identity(cls) -> "GridOperator":
        return cls.named("I")

    # ---- algebra ----------------------------------------------------------------

    def __mul__(self, other: Union["GridOperator", ZOmega]) -> Union["GridOperator", ZOmega]:
        if isinstance(other, GridOperator):
            return self._mul_operator(other)
        if isinstance(other, ZOmega):
            return self._mul_zomega(other)
        raise TypeError(f"Cannot multiply GridOperator with {type(other)}")

    def _mul_operator(self, other: "GridOperator") -> "GridOperator":
        return GridOperator(
            _dot(self.a, other.a, self.b, other.c),
            _dot(self.a, other.b, self.b, other.d),
            _dot(self.c, other.a, self.d, other.c),
            _dot(self.c, other.b, self.d, other.d),
        )

    def _mul_zomega(self, z: ZOmega) -> ZOmega:
        # Lattice coordinates: Re z = x1 + x2/sqrt(2), Im z = y1 + y2/sqrt(2).
        x1, x2 = z.a, z.b - z.d
        y1, y2 = z.c, z.b + z.d
        a, b, c, d = self.a, self.b, self.c, self.d

        re_int = a[0] * x1 + b[0] * y1 + (a[1] * x2 + b[1] * y2) // 2
        re_rt = a[0] * x2 + a[1] * x1 + b[0] * y2 + b[1] * y1
        im_int = c[0] * x1 + d[0] * y1 + (c[1] * x2 + d[1] * y2) // 2
        im_rt = c[0] * x2 + c[1] * x1 + d[0] * y2 + d[1] * y1

        return ZOmega(re_int, (re_rt + im_rt) // 2, im_int, (im_rt - re_rt) // 2)

    def __pow__(self, n: int) -> "GridOperator":
        if n < 0:
            return self.inverse() ** (-n)
        result, base = GridOperator.identity(), self
        while n:
            if n & 1:
                result = result * base
            base = base * base
            n >>= 1
        return result

    @property
    def determinant(self) -> Entry:
        return _dot(self.a, self.d, self.b, self.c, sign=-1)

    @property
    def is_special(self) -> bool:
        det0, det1 = self.determinant
        return det1 == 0 and det0 in (1, -1)

    def inverse(self) -> "GridOperator":
        """Exact inverse; only special operators are invertible."""
        if not self.is_special:
            raise ValueError("Grid operator needs to be special to have an inverse.")
        s = self.determinant[0]
        return GridOperator(
            (s * self.d[0], s * self.d[1]),
            (-s * self.b[0], -s * self.b[1]),
            (-s * self.c[0], -s * self.c[1]),
            (s * self.a[0], s * self.a[1]),
        )

    def transpose(self) -> "GridOperator":
        return GridOperator(self.a, self.c, self.b, self.d)

    def adj2(self) -> "GridOperator":
        """:math:`\\sqrt{2}`-conjugate: every :math:`m_1` changes sign."""
        return GridOperator(
            (self.a[0], -self.a[1]),
            (self.b[0], -self.b[1]),
            (self.c[0], -self.c[1]),
            (self.d[0], -self.d[1]),
        )

    def shift(self, k: int) -> "GridOperator":
        """Conjugate by the shift :math:`\\sigma^k`:
        :math:`\\begin{pmatrix} \\lambda^k a & b \\\\ c & \\lambda^{-k} d \\end{pmatrix}`."""
        return GridOperator(
            _entry_scale(self.a, LAMBDA**k),
            self.b,
            self.c,
            _entry_scale(self.d, LAMBDA ** (-k)),
        )

    # ---- numeric views ---------------------------------------------------------

    def to_matrix(self, precision: PrecisionContext) -> Tuple[Tuple[Any, Any], Tuple[Any, Any]]:
        r = precision.inv_sqrt2
        a, b, c, d = (m[0] + m[1] * r for m in (self.a, self.b, self.c, self.d))
        return ((a, b), (c, d))

    def apply_to_ellipse(self, ellipse: Ellipse) -> Ellipse:
        """:math:`G^T D G` with center :math:`G^{-1} c`."""
        return ellipse.transform(self.to_matrix(ellipse.precision))

    def apply_to_state(self, state: SearchState) -> SearchState:
        return state.apply_grid_operator(self)

    def __repr__(self) -> str:
        return f"GridOperator(a={self.a}, b={self.b}, c={self.c}, d={self.d})"


# =============================================================================
# Skew optimizer
# =============================================================================


def _reduce_skew_step(state: SearchState) -> Tuple[GridOperator, SearchState]:
    """One step of the step lemma on a normalized state."""
    precision = state.first.precision
    mp = precision.mp
    op = GridOperator.identity()
    sign = 1

    if state.second.D[1] < 0:
        op = op * GridOperator.named("Z")
    if state.first.z + state.second.z < 0:
        sign = -1
        op = op * GridOperator.named("X")

    bias = state.bias
    if abs(bias) > 2:
        n = int(mp.nint((1 - sign * bias) / 4))
        op = op * GridOperator.named("U") ** n

    inner = GridOperator.identity()
    current = state.apply_grid_operator(op)

    k = 0
    if abs(current.bias) > 1:
        k = int(mp.floor((1 - current.bias) / 2))
        current = current.shift(k)
        if current.second.D[1] < 0:
            z_op = GridOperator.named("Z")
            current = current.apply_grid_operator(z_op)
            inner = inner * z_op
        if current.first.z + current.second.z < 0:
            x_op = GridOperator.named("X")
            current = current.apply_grid_operator(x_op)
            inner = inner * x_op

    first, second = current.first, current.second
    z1, z2 = first.z, second.z

    if -0.8 <= z1 <= 0.8 and -0.8 <= z2 <= 0.8:
        inner = inner * GridOperator.named("R")
    elif first.D[1] >= 0:
        if z1 <= 0.3 and z2 >= 0.8:
            inner = inner * GridOperator.named("K")
        elif z1 >= 0.8 and z2 <= 0.3:
            inner = inner * GridOperator.named("K").adj2()
        elif z1 >= 0.3 and z2 >= 0.3:
            n = max(1, int(mp.floor(precision.lambda_ ** min(z1, z2) / 2)))
            inner = inner * GridOperator.named("A") ** n
        else:
            raise RuntimeError(f"Skew could not be reduced for state {current}.")
    else:
        if z1 >= -0.2 and z2 >= -0.2:
            n = max(1, int(mp.floor(precision.lambda_ ** min(z1, z2) / precision.sqrt2)))
            inner = inner * GridOperator.named("B") ** n
        else:
            raise RuntimeError(f"Skew could not be reduced for state {current}.")

    if k != 0:
        inner = inner.shift(k)

    op = op * inner
    return op, state.apply_grid_operator(op)


def optimize_skew(state: SearchState, max_steps: int = 10_000) -> GridOperator:
    """Compose a special grid operator that makes ``state`` nearly upright.

    Both ellipses are first normalized to determinant 1. The step lemma is
    then applied until the skew :math:`b_1^2 + b_2^2` drops below 15; each
    step reduces it by at least 10%, so the number of steps grows only
    logarithmically with the initial skew.

    Args:
        state: Pair of ellipses to straighten.
        max_steps: Hard cap on the number of steps.

    Returns:
        GridOperator: The composed special operator ``G``. Applying ``G`` to
        ``state`` yields a state of skew below 15.

    Raises:
        RuntimeError: If a step fails to decrease the skew.
    """
    grid_op = GridOperator.identity()
    current = state.normalize()
    steps = 0
    while (skew := current.skew) >= 15:
        if steps >= max_steps:
            raise RuntimeError(f"Skew optimization did not converge in {max_steps} steps.")
        step_op, current = _reduce_skew_step(current)
        grid_op = grid_op * step_op
        steps += 1
        if current.skew > 0.9 * skew:
            raise RuntimeError(f"Skew was not decreased for state {current}.")

    logger.debug("Skew optimization finished after %d steps (skew=%s).", steps, current.skew)
    return grid_op
