"""Exact single-qubit unitaries over :math:`\\mathbb{Z}[1/\\sqrt{2}, i]`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

import numpy as np

from .rings import ZOmega, ZSqrt2


@dataclass(frozen=True)
class UnitaryMatrix:
    """
    Matrix record :math:`(u, t, k)` for

    .. math::

        U = \\frac{1}{\\sqrt{2}^k}
            \\begin{pmatrix} u & -t^\\dagger \\\\ t & u^\\dagger \\end{pmatrix}.

    A valid record satisfies :math:`u u^\\dagger + t t^\\dagger = 2^k` exactly.
    The empty record ``(0, 0, 0)`` stands for "no solution".

    Attributes:
        u (ZOmega): Diagonal entry numerator.
        t (ZOmega): Off-diagonal entry numerator.
        k (int): Scale exponent (power of :math:`\\sqrt{2}` in the denominator).
    """

    u: ZOmega
    t: ZOmega
    k: int

    def __post_init__(self) -> None:
        if not isinstance(self.k, int) or self.k < 0:
            raise ValueError(f"Scale exponent k must be a non-negative integer, got {self.k!r}.")

    @classmethod
    def empty(cls) -> "UnitaryMatrix":
        return cls(ZOmega(), ZOmega(), 0)

    @property
    def is_empty(self) -> bool:
        return self.u == ZOmega() and self.t == ZOmega() and self.k == 0

    def is_unitary(self) -> bool:
        """Exact check of :math:`u u^\\dagger + t t^\\dagger = 2^k`."""
        return self.u.norm_zsqrt2() + self.t.norm_zsqrt2() == ZSqrt2(2**self.k, 0)

    def entries(self, precision: Any) -> Tuple[Any, Any]:
        """Decimal values ``(u / sqrt(2)^k, t / sqrt(2)^k)``."""
        scale = precision.sqrt2**self.k
        return self.u.decimal(precision) / scale, self.t.decimal(precision) / scale

    def to_numpy(self, precision: Any) -> np.ndarray:
        """Dense ``complex128`` representation of the matrix."""
        u_val, t_val = self.entries(precision)
        u_c, t_c = complex(u_val), complex(t_val)
        return np.array(
            [[u_c, -t_c.conjugate()], [t_c, u_c.conjugate()]],
            dtype=np.complex128,
        )
