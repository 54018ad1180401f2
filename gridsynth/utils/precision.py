"""Numeric precision context for grid synthesis.

Every geometric and trigonometric quantity in the search is an
arbitrary-precision real number. The working precision, the tolerance
used by boundary tests and a handful of derived constants are bundled in
a single immutable :class:`PrecisionContext` that is built once and then
handed to every component that needs it.

Example:

    >>> ctx = PrecisionContext.for_epsilon(1e-10)
    >>> ctx.digits
    59
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional

import mpmath

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrecisionContext:
    """
    Immutable arbitrary-precision configuration.

    Attributes:
        digits (int): Number of significant decimal digits used by the
            private :class:`mpmath.MPContext`.
        tol (Optional[Any]): Tolerance band used by containment tests. If
            None, it defaults to ``10**-(digits - 2)``.
        mp (mpmath.MPContext): Private mpmath context with ``dps = digits``.
        pi, sqrt2, inv_sqrt2, lambda_, lambda_conj, log_lambda: Constants
            evaluated at the working precision. ``lambda_`` is the
            fundamental unit :math:`1 + \\sqrt{2}` and ``lambda_conj`` its
            :math:`\\sqrt{2}`-conjugate :math:`1 - \\sqrt{2}`.
    """

    digits: int = 50
    tol: Optional[Any] = None

    mp: Any = field(init=False, repr=False, compare=False)
    pi: Any = field(init=False, repr=False, compare=False)
    sqrt2: Any = field(init=False, repr=False, compare=False)
    inv_sqrt2: Any = field(init=False, repr=False, compare=False)
    lambda_: Any = field(init=False, repr=False, compare=False)
    lambda_conj: Any = field(init=False, repr=False, compare=False)
    log_lambda: Any = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.digits, int) or self.digits < 1:
            raise ValueError(f"digits must be a positive integer, got {self.digits!r}.")

        mp = mpmath.MPContext()
        mp.dps = self.digits
        object.__setattr__(self, "mp", mp)

        tol = mp.mpf(10) ** (-(self.digits - 2)) if self.tol is None else mp.mpf(self.tol)
        if tol <= 0:
            raise ValueError(f"tol must be positive, got {self.tol!r}.")
        object.__setattr__(self, "tol", tol)

        sqrt2 = mp.sqrt(2)
        object.__setattr__(self, "pi", +mp.pi)
        object.__setattr__(self, "sqrt2", sqrt2)
        object.__setattr__(self, "inv_sqrt2", 1 / sqrt2)
        object.__setattr__(self, "lambda_", 1 + sqrt2)
        object.__setattr__(self, "lambda_conj", 1 - sqrt2)
        object.__setattr__(self, "log_lambda", mp.log(1 + sqrt2))

        logger.debug("Initialized precision context with %d digits.", self.digits)

    @classmethod
    def for_epsilon(cls, eps: Any) -> "PrecisionContext":
        """Build a context precise enough for an error budget ``eps``.

        The number of digits is ``4 * ceil(-log10(eps)) + 19``, which keeps
        the tolerance far below the smallest geometric feature of the
        epsilon-region.
        """
        eps_f = float(eps)
        if not eps_f > 0:
            raise ValueError(f"eps must be positive, got {eps!r}.")
        prec = max(1, math.ceil(-math.log10(eps_f)))
        return cls(digits=4 * prec + 19)

    def real(self, x: Any) -> Any:
        """Convert ``x`` (int, float, str or mpf) to the context's real type."""
        return self.mp.mpf(x)

    def is_zero(self, x: Any) -> bool:
        return abs(x) < self.tol
