"""Bounding regions used by the grid search.

The search for lattice points works with three kinds of convex regions:

* :class:`Interval` – a closed interval ``[lo, hi]`` over any numeric bound
  type implementing the :class:`Bound` protocol.
* :class:`UprightRectangle` – an axis-aligned product of two intervals.
* :class:`Ellipse` – a centered, positive-definite quadratic form

  .. math::

      E = \\{p : (p - c)^T D (p - c) \\le 1\\}, \\qquad
      D = \\begin{pmatrix} a & b \\\\ b & d \\end{pmatrix}.

A :class:`SearchState` pairs two ellipses: the epsilon-region around the
target direction and the unit-disk companion seen through the
:math:`\\sqrt{2}`-conjugation.

Every region is immutable; transforms return new objects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, Optional, Protocol, Tuple, TypeVar

from ..utils.precision import PrecisionContext

if TYPE_CHECKING:
    from ..gridoperators.gridoperators import GridOperator

logger = logging.getLogger(__name__)


class Bound(Protocol):
    """Numeric type usable as an interval bound."""

    def __add__(self, other: Any) -> Any: ...

    def __sub__(self, other: Any) -> Any: ...

    def __mul__(self, other: Any) -> Any: ...

    def __truediv__(self, other: Any) -> Any: ...

    def __lt__(self, other: Any) -> bool: ...


BoundT = TypeVar("BoundT", bound=Bound)

Matrix2 = Tuple[Tuple[Any, Any], Tuple[Any, Any]]


# =============================================================================
# Intervals and rectangles
# =============================================================================


@dataclass(frozen=True)
class Interval(Generic[BoundT]):
    """Closed interval ``[lo, hi]``.

    Raises:
        ValueError: If ``lo > hi``.
    """

    lo: BoundT
    hi: BoundT

    def __post_init__(self) -> None:
        if self.hi < self.lo:
            raise ValueError(f"Invalid interval: lo={self.lo} is larger than hi={self.hi}.")

    @property
    def width(self) -> BoundT:
        return self.hi - self.lo

    def fatten(self, d: Any) -> "Interval[BoundT]":
        """Widen both ends by ``d``."""
        return Interval(self.lo - d, self.hi + d)

    def rescale(self, s: Any) -> "Interval[BoundT]":
        """Multiply both bounds by ``s``; a negative ``s`` swaps the bounds."""
        lo, hi = self.lo * s, self.hi * s
        if hi < lo:
            lo, hi = hi, lo
        return Interval(lo, hi)

    def shift(self, d: Any) -> "Interval[BoundT]":
        return Interval(self.lo + d, self.hi + d)

    def contains(self, x: Any, tol: Optional[Any] = None) -> bool:
        """Containment with a tolerance band at the boundary.

        With a tolerance, ``x`` is accepted if ``(hi - x)(x - lo) > 0`` or
        ``|(hi - x)(x - lo)| < tol``. Without one, this is the plain closed
        interval test.
        """
        if tol is None:
            return not (x < self.lo) and not (self.hi < x)
        prod = (self.hi - x) * (x - self.lo)
        return prod > 0 or abs(prod) < tol

    def __add__(self, d: Any) -> "Interval[BoundT]":
        return self.shift(d)

    def __sub__(self, d: Any) -> "Interval[BoundT]":
        return self.shift(-d)

    def __mul__(self, s: Any) -> "Interval[BoundT]":
        return self.rescale(s)

    __rmul__ = __mul__

    def __truediv__(self, s: Any) -> "Interval[BoundT]":
        return self.rescale(1 / s)


@dataclass(frozen=True)
class UprightRectangle(Generic[BoundT]):
    """Axis-aligned rectangle ``x × y``."""

    x: Interval[BoundT]
    y: Interval[BoundT]

    @classmethod
    def from_bounds(cls, x0: Any, x1: Any, y0: Any, y1: Any) -> "UprightRectangle":
        return cls(Interval(x0, x1), Interval(y0, y1))

    @property
    def area(self) -> Any:
        return self.x.width * self.y.width

    def fatten(self, d: Any) -> "UprightRectangle[BoundT]":
        return UprightRectangle(self.x.fatten(d), self.y.fatten(d))

    def rescale(self, sx: Any, sy: Optional[Any] = None) -> "UprightRectangle[BoundT]":
        sy = sx if sy is None else sy
        return UprightRectangle(self.x.rescale(sx), self.y.rescale(sy))

    def shift(self, dx: Any, dy: Any) -> "UprightRectangle[BoundT]":
        return UprightRectangle(self.x.shift(dx), self.y.shift(dy))

    def contains(self, x: Any, y: Any, tol: Optional[Any] = None) -> bool:
        return self.x.contains(x, tol) and self.y.contains(y, tol)


# =============================================================================
# Ellipses
# =============================================================================


@dataclass(frozen=True)
class Ellipse:
    """
    Ellipse given by a center and a positive-definite quadratic form.

    Attributes:
        center (Tuple[mpf, mpf]): Center :math:`c` of the ellipse.
        D (Tuple[mpf, mpf, mpf]): Entries ``(a, b, d)`` of the symmetric
            matrix :math:`D = [[a, b], [b, d]]`.
        precision (PrecisionContext): Numeric context used for all
            derived quantities.

    Raises:
        ValueError: If ``D`` is not positive definite.
    """

    center: Tuple[Any, Any]
    D: Tuple[Any, Any, Any]
    precision: PrecisionContext = field(default_factory=PrecisionContext, repr=False, compare=False)

    def __post_init__(self) -> None:
        mpf = self.precision.mp.mpf
        cx, cy = self.center
        a, b, d = self.D
        object.__setattr__(self, "center", (mpf(cx), mpf(cy)))
        object.__setattr__(self, "D", (mpf(a), mpf(b), mpf(d)))

        a, b, d = self.D
        if not (a > 0 and d > 0 and a * d - b * b > 0):
            raise ValueError(f"Quadratic form {self.D} is not positive definite.")

    # ---- constructors -------------------------------------------------------

    @classmethod
    def from_axes(
        cls,
        center: Tuple[Any, Any],
        axis_along: Any,
        axis_across: Any,
        angle: Any,
        precision: PrecisionContext,
    ) -> "Ellipse":
        """Ellipse with semi-axis ``axis_along`` pointing at ``angle`` and
        semi-axis ``axis_across`` perpendicular to it."""
        mp = precision.mp
        if not (axis_along > 0 and axis_across > 0):
            raise ValueError("Semi-axes must be positive.")
        ct, st = mp.cos(angle), mp.sin(angle)
        p = 1 / mp.mpf(axis_along) ** 2
        q = 1 / mp.mpf(axis_across) ** 2
        D = (ct * ct * p + st * st * q, ct * st * (p - q), st * st * p + ct * ct * q)
        return cls(center, D, precision)

    @classmethod
    def epsilon_region(cls, theta: Any, eps: Any, precision: PrecisionContext) -> "Ellipse":
        """Smallest ellipse enclosing the epsilon-region at angle ``theta``.

        The region is the circular segment of the unit disk cut off by
        :math:`\\langle p, e^{i\\theta} \\rangle \\ge 1 - \\epsilon^2/2`. Its
        bounding ellipse is centered at :math:`(1 - \\epsilon^2/3) e^{i\\theta}`,
        with radial semi-axis :math:`\\epsilon^2/3` and tangential semi-axis
        :math:`\\frac{2}{\\sqrt{3}}\\epsilon\\sqrt{1 - \\epsilon^2/4}`.
        """
        mp = precision.mp
        theta, eps = mp.mpf(theta), mp.mpf(eps)
        if not eps > 0:
            raise ValueError(f"eps must be positive, got {eps}.")
        r0 = (3 - eps * eps) / 3
        radial = eps * eps / 3
        tangential = 2 / mp.sqrt(3) * eps * mp.sqrt(1 - eps * eps / 4)
        center = (r0 * mp.cos(theta), r0 * mp.sin(theta))
        return cls.from_axes(center, radial, tangential, theta, precision)

    @classmethod
    def unit_disk(cls, precision: PrecisionContext) -> "Ellipse":
        return cls((0, 0), (1, 0, 1), precision)

    # ---- derived quantities ---------------------------------------------------

    @property
    def determinant(self) -> Any:
        a, b, d = self.D
        return a * d - b * b

    def _eigenvalues(self) -> Tuple[Any, Any]:
        a, b, d = self.D
        mp = self.precision.mp
        mean = (a + d) / 2
        radius = mp.sqrt(((a - d) / 2) ** 2 + b * b)
        return mean - radius, mean + radius

    @property
    def semi_major_axis(self) -> Any:
        small, _ = self._eigenvalues()
        return 1 / self.precision.mp.sqrt(small)

    @property
    def semi_minor_axis(self) -> Any:
        _, large = self._eigenvalues()
        return 1 / self.precision.mp.sqrt(large)

    @property
    def angle(self) -> Any:
        """Direction of the semi-major axis, in ``(-pi/2, pi/2]``.

        The direction is undefined for a circle; 0 is returned in that case
        and callers should not rely on it.
        """
        a, b, d = self.D
        return self.precision.mp.atan2(-2 * b, d - a) / 2

    @property
    def area(self) -> Any:
        return self.precision.pi / self.precision.mp.sqrt(self.determinant)

    @property
    def uprightness(self) -> Any:
        a, _, d = self.D
        return self.precision.pi / 4 * self.precision.mp.sqrt(self.determinant / (a * d))

    @property
    def z(self) -> Any:
        a, _, d = self.D
        mp = self.precision.mp
        return mp.log(d / a) / (2 * self.precision.log_lambda)

    @property
    def e(self) -> Any:
        a, _, d = self.D
        return self.precision.mp.sqrt(a * d)

    @property
    def skew_b(self) -> Any:
        """Off-diagonal entry of ``D`` normalized to determinant 1."""
        return self.D[1] / self.precision.mp.sqrt(self.determinant)

    # ---- transforms -----------------------------------------------------------

    def rescale(self, s: Any) -> "Ellipse":
        """Scale the ellipse geometrically by ``s`` about the origin."""
        a, b, d = self.D
        s2 = s * s
        cx, cy = self.center
        return Ellipse((s * cx, s * cy), (a / s2, b / s2, d / s2), self.precision)

    def shift(self, dx: Any, dy: Any) -> "Ellipse":
        cx, cy = self.center
        return Ellipse((cx + dx, cy + dy), self.D, self.precision)

    def fatten(self, m: Any) -> "Ellipse":
        """Grow every semi-axis by ``m`` while keeping center and axes.

        ``D`` is replaced by :math:`f(D)` with
        :math:`f(\\mu) = (\\mu^{-1/2} + m)^{-2}`, applied through the
        spectral decomposition :math:`f(D) = \\alpha I + \\beta D`.
        """
        mp = self.precision.mp
        mu1, mu2 = self._eigenvalues()
        f1 = 1 / (1 / mp.sqrt(mu1) + m) ** 2
        f2 = 1 / (1 / mp.sqrt(mu2) + m) ** 2
        a, b, d = self.D
        if mu2 - mu1 < self.precision.tol * mu2:
            return Ellipse(self.center, (f1, 0, f1), self.precision)
        beta = (f2 - f1) / (mu2 - mu1)
        alpha = f1 - beta * mu1
        return Ellipse(self.center, (alpha + beta * a, beta * b, alpha + beta * d), self.precision)

    def normalize(self) -> Tuple["Ellipse", Any]:
        """Rescale to area :math:`\\pi` (determinant 1); returns ``(ellipse, scale)``."""
        scale = self.precision.mp.sqrt(self.precision.mp.sqrt(self.determinant))
        return self.rescale(scale), scale

    def transform(self, M: Matrix2) -> "Ellipse":
        """Pull the ellipse back through the linear map ``M``.

        The result is :math:`M^{-1}(E)`: quadratic form :math:`M^T D M`,
        center :math:`M^{-1} c`.
        """
        (p, q), (r, s) = M
        a, b, d = self.D
        D = (
            a * p * p + 2 * b * p * r + d * r * r,
            a * p * q + b * (p * s + q * r) + d * r * s,
            a * q * q + 2 * b * q * s + d * s * s,
        )
        det = p * s - q * r
        cx, cy = self.center
        center = ((s * cx - q * cy) / det, (p * cy - r * cx) / det)
        return Ellipse(center, D, self.precision)

    # ---- queries ---------------------------------------------------------------

    def quadratic_form(self, x: Any, y: Any) -> Any:
        a, b, d = self.D
        dx, dy = x - self.center[0], y - self.center[1]
        return a * dx * dx + 2 * b * dx * dy + d * dy * dy

    def contains(self, x: Any, y: Any, tol: Optional[Any] = None) -> bool:
        tol = self.precision.tol if tol is None else tol
        value = self.quadratic_form(x, y)
        return value < 1 or abs(value - 1) < tol

    def contains_complex(self, z: Any, tol: Optional[Any] = None) -> bool:
        return self.contains(z.real, z.imag, tol)

    def bounding_box(self) -> UprightRectangle:
        """Smallest upright rectangle containing the ellipse, from ``D`` alone."""
        a, _, d = self.D
        mp = self.precision.mp
        det = self.determinant
        half_x, half_y = mp.sqrt(d / det), mp.sqrt(a / det)
        cx, cy = self.center
        return UprightRectangle.from_bounds(cx - half_x, cx + half_x, cy - half_y, cy + half_y)

    def y_slice(self, x: Any) -> Optional[Interval]:
        """Interval of ``y`` with ``(x, y)`` in the ellipse, or None."""
        a, b, d = self.D
        dx = x - self.center[0]
        disc = (b * dx) ** 2 - d * (a * dx * dx - 1)
        if disc < 0:
            return None
        root = self.precision.mp.sqrt(disc)
        cy = self.center[1]
        return Interval(cy + (-b * dx - root) / d, cy + (-b * dx + root) / d)

    def x_slice(self, y: Any) -> Optional[Interval]:
        """Interval of ``x`` with ``(x, y)`` in the ellipse, or None."""
        a, b, d = self.D
        dy = y - self.center[1]
        disc = (b * dy) ** 2 - a * (d * dy * dy - 1)
        if disc < 0:
            return None
        root = self.precision.mp.sqrt(disc)
        cx = self.center[0]
        return Interval(cx + (-b * dy - root) / a, cx + (-b * dy + root) / a)


# =============================================================================
# Search state
# =============================================================================


@dataclass(frozen=True)
class SearchState:
    """Ordered pair of ellipses searched simultaneously.

    A ring element :math:`u` solves the state if :math:`u \\in` ``first`` and
    its :math:`\\sqrt{2}`-conjugate :math:`u^\\bullet \\in` ``second``.
    """

    first: Ellipse
    second: Ellipse

    @property
    def skew(self) -> Any:
        return self.first.skew_b**2 + self.second.skew_b**2

    @property
    def bias(self) -> Any:
        return self.second.z - self.first.z

    def normalize(self) -> "SearchState":
        return SearchState(self.first.normalize()[0], self.second.normalize()[0])

    def rescale(self, scale_first: Any, scale_second: Any) -> "SearchState":
        return SearchState(self.first.rescale(scale_first), self.second.rescale(scale_second))

    def apply_grid_operator(self, G: "GridOperator") -> "SearchState":
        """Transform by ``G`` (first ellipse) and ``G•`` (second ellipse)."""
        precision = self.first.precision
        return SearchState(
            self.first.transform(G.to_matrix(precision)),
            self.second.transform(G.adj2().to_matrix(precision)),
        )

    def shift(self, k: int) -> "SearchState":
        """Shift the pair by :math:`k`: ``z`` of the first ellipse drops by ``k``,
        ``z`` of the second one grows by ``k``."""
        lam_k = self.first.precision.lambda_**k
        a1, b1, d1 = self.first.D
        a2, b2, d2 = self.second.D
        sign = -1 if k % 2 else 1
        return SearchState(
            Ellipse(self.first.center, (a1 * lam_k, b1, d1 / lam_k), self.first.precision),
            Ellipse(self.second.center, (a2 / lam_k, sign * b2, d2 * lam_k), self.second.precision),
        )
