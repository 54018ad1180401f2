"""Exact arithmetic in the rings :math:`\\mathbb{Z}[\\sqrt{2}]` and :math:`\\mathbb{Z}[\\omega]`.

Two small value types are provided:

* :class:`ZSqrt2` – elements :math:`a + b\\sqrt{2}` with integer ``a, b``.
* :class:`ZOmega` – elements :math:`a + b\\omega + c\\omega^2 + d\\omega^3`
  with :math:`\\omega = e^{i\\pi/4}` and integer coefficients.

All ring operations are exact (Python integers never overflow). Decimal
embeddings are only produced on request, at the precision of a
:class:`~gridsynth.utils.precision.PrecisionContext`.

Conventions:

* ``conj`` is complex conjugation (on :class:`ZSqrt2` it is the identity
  embedding's partner, i.e. :math:`a - b\\sqrt{2}`, kept for symmetry with
  the literature which writes it as a bullet).
* ``adj2`` is the :math:`\\sqrt{2}`-conjugation :math:`\\sqrt{2} \\mapsto -\\sqrt{2}`,
  which sends :math:`\\omega \\mapsto -\\omega`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union


def _round_div(num: int, den: int) -> int:
    """Integer ``num / den`` rounded to the nearest integer (halves upwards)."""
    if den == 0:
        raise ZeroDivisionError("division by zero in ring arithmetic")
    if den < 0:
        num, den = -num, -den
    return (2 * num + den) // (2 * den)


def _sign_of(a: int, b: int) -> int:
    """Exact sign of the real number ``a + b*sqrt(2)``."""
    if a >= 0 and b >= 0:
        return 0 if a == 0 and b == 0 else 1
    if a <= 0 and b <= 0:
        return -1
    # Opposite signs: compare a^2 with 2 b^2.
    diff = a * a - 2 * b * b
    if a > 0:
        return 1 if diff > 0 else -1
    return -1 if diff > 0 else 1


# =============================================================================
# Z[sqrt(2)]
# =============================================================================


@dataclass(frozen=True)
class ZSqrt2:
    """Element :math:`a + b\\sqrt{2}` of :math:`\\mathbb{Z}[\\sqrt{2}]`."""

    a: int = 0
    b: int = 0

    def __post_init__(self) -> None:
        for name in ("a", "b"):
            if not isinstance(getattr(self, name), int):
                raise TypeError(f"ZSqrt2.{name} must be an integer.")

    # ---- arithmetic ---------------------------------------------------------

    @staticmethod
    def _coerce(other: Any) -> "ZSqrt2":
        if isinstance(other, ZSqrt2):
            return other
        if isinstance(other, int):
            return ZSqrt2(other, 0)
        return NotImplemented

    def __add__(self, other: Union["ZSqrt2", int]) -> "ZSqrt2":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return ZSqrt2(self.a + other.a, self.b + other.b)

    __radd__ = __add__

    def __neg__(self) -> "ZSqrt2":
        return ZSqrt2(-self.a, -self.b)

    def __sub__(self, other: Union["ZSqrt2", int]) -> "ZSqrt2":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return ZSqrt2(self.a - other.a, self.b - other.b)

    def __rsub__(self, other: Union["ZSqrt2", int]) -> "ZSqrt2":
        return -self + other

    def __mul__(self, other: Union["ZSqrt2", int]) -> "ZSqrt2":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return ZSqrt2(
            self.a * other.a + 2 * self.b * other.b,
            self.a * other.b + self.b * other.a,
        )

    __rmul__ = __mul__

    def __pow__(self, n: int) -> "ZSqrt2":
        if n < 0:
            if not self.is_unit():
                raise ValueError(f"Negative powers are only defined for units, got {self}.")
            return self.inverse() ** (-n)
        result, base = ZSqrt2(1, 0), self
        while n:
            if n & 1:
                result = result * base
            base = base * base
            n >>= 1
        return result

    def inverse(self) -> "ZSqrt2":
        """Inverse of a unit (``ValueError`` otherwise)."""
        n = self.norm()
        if n not in (1, -1):
            raise ValueError(f"{self} is not a unit of Z[sqrt(2)].")
        return ZSqrt2(self.a * n, -self.b * n)

    # ---- conjugation and norm ----------------------------------------------

    def conj(self) -> "ZSqrt2":
        """:math:`\\sqrt{2}`-conjugate :math:`a - b\\sqrt{2}`."""
        return ZSqrt2(self.a, -self.b)

    adj2 = conj

    def norm(self) -> int:
        """Field norm :math:`a^2 - 2b^2`."""
        return self.a * self.a - 2 * self.b * self.b

    def is_unit(self) -> bool:
        return self.norm() in (1, -1)

    # ---- exact ordering ----------------------------------------------------

    def sign(self) -> int:
        return _sign_of(self.a, self.b)

    def _cmp(self, other: Union["ZSqrt2", int]) -> int:
        other = self._coerce(other)
        if other is NotImplemented:
            raise TypeError(f"Cannot compare ZSqrt2 with {type(other)}")
        return (self - other).sign()

    def __lt__(self, other: Union["ZSqrt2", int]) -> bool:
        return self._cmp(other) < 0

    def __le__(self, other: Union["ZSqrt2", int]) -> bool:
        return self._cmp(other) <= 0

    def __gt__(self, other: Union["ZSqrt2", int]) -> bool:
        return self._cmp(other) > 0

    def __ge__(self, other: Union["ZSqrt2", int]) -> bool:
        return self._cmp(other) >= 0

    def is_totally_positive(self) -> bool:
        """True if both real embeddings are non-negative."""
        return self.sign() >= 0 and self.conj().sign() >= 0

    # ---- division ----------------------------------------------------------

    def __divmod__(self, other: "ZSqrt2") -> Tuple["ZSqrt2", "ZSqrt2"]:
        """Euclidean division with a rounded quotient, ``|N(r)| < |N(other)|``."""
        other = self._coerce(other)
        n = other.norm()
        num = self * other.conj()
        q = ZSqrt2(_round_div(num.a, n), _round_div(num.b, n))
        return q, self - q * other

    def __mod__(self, other: "ZSqrt2") -> "ZSqrt2":
        return divmod(self, other)[1]

    def divides(self, other: Union["ZSqrt2", int]) -> bool:
        """True if ``self`` divides ``other`` in the ring."""
        other = self._coerce(other)
        if self == ZSqrt2(0, 0):
            return other == ZSqrt2(0, 0)
        n = self.norm()
        num = other * self.conj()
        return num.a % n == 0 and num.b % n == 0

    def exact_div(self, other: Union["ZSqrt2", int]) -> "ZSqrt2":
        """Exact quotient ``self / other``; raises ``ValueError`` if inexact."""
        other = self._coerce(other)
        if not other.divides(self):
            raise ValueError(f"{other} does not divide {self}.")
        n = other.norm()
        num = self * other.conj()
        return ZSqrt2(num.a // n, num.b // n)

    # ---- conversions -------------------------------------------------------

    def decimal(self, precision: Any) -> Any:
        """Decimal value at the precision of ``precision``."""
        return self.a + self.b * precision.sqrt2

    def to_zomega(self) -> "ZOmega":
        # sqrt(2) = omega - omega^3
        return ZOmega(self.a, self.b, 0, -self.b)

    def __repr__(self) -> str:
        return f"ZSqrt2({self.a}, {self.b})"


# =============================================================================
# Z[omega]
# =============================================================================


@dataclass(frozen=True)
class ZOmega:
    """Element :math:`a + b\\omega + c\\omega^2 + d\\omega^3` of :math:`\\mathbb{Z}[\\omega]`."""

    a: int = 0
    b: int = 0
    c: int = 0
    d: int = 0

    def __post_init__(self) -> None:
        for name in ("a", "b", "c", "d"):
            if not isinstance(getattr(self, name), int):
                raise TypeError(f"ZOmega.{name} must be an integer.")

    @classmethod
    def from_real_imag(cls, alpha: ZSqrt2, beta: ZSqrt2, shift: int = 0) -> "ZOmega":
        """Build :math:`\\alpha + i\\beta + \\mathrm{shift}\\cdot\\omega`.

        With ``shift`` in ``{0, 1}`` this enumerates both cosets of
        :math:`\\mathbb{Z}[\\sqrt{2}] + i\\mathbb{Z}[\\sqrt{2}]` inside
        :math:`\\mathbb{Z}[\\omega]`.
        """
        return cls(alpha.a, alpha.b + beta.b + shift, beta.a, beta.b - alpha.b)

    @property
    def coefficients(self) -> Tuple[int, int, int, int]:
        return (self.a, self.b, self.c, self.d)

    # ---- arithmetic ---------------------------------------------------------

    @staticmethod
    def _coerce(other: Any) -> "ZOmega":
        if isinstance(other, ZOmega):
            return other
        if isinstance(other, ZSqrt2):
            return other.to_zomega()
        if isinstance(other, int):
            return ZOmega(other)
        return NotImplemented

    def __add__(self, other: Union["ZOmega", ZSqrt2, int]) -> "ZOmega":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return ZOmega(self.a + other.a, self.b + other.b, self.c + other.c, self.d + other.d)

    __radd__ = __add__

    def __neg__(self) -> "ZOmega":
        return ZOmega(-self.a, -self.b, -self.c, -self.d)

    def __sub__(self, other: Union["ZOmega", ZSqrt2, int]) -> "ZOmega":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return ZOmega(self.a - other.a, self.b - other.b, self.c - other.c, self.d - other.d)

    def __rsub__(self, other: Union["ZOmega", ZSqrt2, int]) -> "ZOmega":
        return -self + other

    def __mul__(self, other: Union["ZOmega", ZSqrt2, int]) -> "ZOmega":
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        x0, x1, x2, x3 = self.coefficients
        y0, y1, y2, y3 = other.coefficients
        # omega^4 = -1
        return ZOmega(
            x0 * y0 - x1 * y3 - x2 * y2 - x3 * y1,
            x0 * y1 + x1 * y0 - x2 * y3 - x3 * y2,
            x0 * y2 + x1 * y1 + x2 * y0 - x3 * y3,
            x0 * y3 + x1 * y2 + x2 * y1 + x3 * y0,
        )

    __rmul__ = __mul__

    def __pow__(self, n: int) -> "ZOmega":
        if n < 0:
            raise ValueError("Negative powers of ZOmega are not supported.")
        result, base = ZOmega(1), self
        while n:
            if n & 1:
                result = result * base
            base = base * base
            n >>= 1
        return result

    # ---- conjugations and norms ---------------------------------------------

    def conj(self) -> "ZOmega":
        """Complex conjugate."""
        return ZOmega(self.a, -self.d, -self.c, -self.b)

    def adj2(self) -> "ZOmega":
        """:math:`\\sqrt{2}`-conjugate (:math:`\\omega \\mapsto -\\omega`)."""
        return ZOmega(self.a, -self.b, self.c, -self.d)

    def norm_zsqrt2(self) -> ZSqrt2:
        """Relative norm :math:`u u^\\dagger` as an element of :math:`\\mathbb{Z}[\\sqrt{2}]`."""
        return (self * self.conj()).to_zsqrt2()

    def norm(self) -> int:
        """Absolute field norm (a non-negative integer)."""
        return self.norm_zsqrt2().norm()

    def to_zsqrt2(self) -> ZSqrt2:
        if self.c != 0 or self.d != -self.b:
            raise ValueError(f"{self} does not lie in Z[sqrt(2)].")
        return ZSqrt2(self.a, self.b)

    # ---- reduction -----------------------------------------------------------

    def is_divisible_by_delta(self) -> bool:
        """Divisibility by :math:`\\delta = 1 + \\omega`."""
        return (self.a + self.b + self.c + self.d) % 2 == 0

    def is_reducible(self) -> bool:
        """Divisibility by :math:`\\sqrt{2}`, the square of :math:`\\delta` up to a unit."""
        return (self.a - self.c) % 2 == 0 and (self.b - self.d) % 2 == 0

    def reduce(self) -> "ZOmega":
        """Exact division by :math:`\\sqrt{2}`."""
        if not self.is_reducible():
            raise ValueError(f"{self} is not divisible by sqrt(2).")
        return ZOmega(
            (self.b - self.d) // 2,
            (self.a + self.c) // 2,
            (self.b + self.d) // 2,
            (self.c - self.a) // 2,
        )

    def __divmod__(self, other: "ZOmega") -> Tuple["ZOmega", "ZOmega"]:
        """Euclidean division with a coefficient-wise rounded quotient.

        The rounding error has coefficients in ``(-1/2, 1/2]``, which bounds
        its norm strictly below 1, so ``N(r) < N(other)``.
        """
        other = self._coerce(other)
        rel = other.norm_zsqrt2()
        n = rel.norm()
        if n == 0:
            raise ZeroDivisionError("division by zero in Z[omega]")
        num = self * other.conj() * rel.conj().to_zomega()
        q = ZOmega(*(_round_div(x, n) for x in num.coefficients))
        return q, self - q * other

    def __mod__(self, other: "ZOmega") -> "ZOmega":
        return divmod(self, other)[1]

    # ---- decimal embedding ---------------------------------------------------

    def real(self, precision: Any) -> Any:
        return self.a + (self.b - self.d) * precision.inv_sqrt2

    def imag(self, precision: Any) -> Any:
        return self.c + (self.b + self.d) * precision.inv_sqrt2

    def decimal(self, precision: Any) -> Any:
        """Complex value at the precision of ``precision``."""
        return precision.mp.mpc(self.real(precision), self.imag(precision))

    def __repr__(self) -> str:
        return f"ZOmega({self.a}, {self.b}, {self.c}, {self.d})"


OMEGA = ZOmega(0, 1, 0, 0)
DELTA = ZOmega(1, 1, 0, 0)
LAMBDA = ZSqrt2(1, 1)
LAMBDA_INV = ZSqrt2(-1, 1)
