"""Norm equation solver.

Given :math:`\\xi \\in \\mathbb{Z}[\\sqrt{2}]`, :func:`solve_norm_equation`
looks for :math:`t \\in \\mathbb{Z}[\\omega]` with

.. math::

    t t^\\dagger = \\xi.

A solution exists only if :math:`\\xi` is totally positive and every prime
factor of :math:`\\xi` lifts to :math:`\\mathbb{Z}[\\omega]`. Failing either
condition is an ordinary outcome and is reported as ``None``.

The construction factors the integer norm :math:`N(\\xi) = a^2 - 2b^2` with
sympy and treats each rational prime :math:`p` according to its residue
modulo 8:

* :math:`p \\equiv 3, 5`: inert in :math:`\\mathbb{Z}[\\sqrt{2}]`; splits in
  :math:`\\mathbb{Z}[\\omega]` as :math:`t_p t_p^\\dagger`.
* :math:`p \\equiv 1`: splits as :math:`\\eta\\eta^\\bullet`, and both factors
  split again in :math:`\\mathbb{Z}[\\omega]`.
* :math:`p \\equiv 7`: splits as :math:`\\eta\\eta^\\bullet`, neither factor
  splits further, so each must occur to an even power.

The remaining unit is absorbed as a power of :math:`\\lambda = 1 + \\sqrt{2}`.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from sympy.ntheory import factorint, isprime, sqrt_mod

from ..utils.rings import DELTA, LAMBDA, LAMBDA_INV, ZOmega, ZSqrt2

logger = logging.getLogger(__name__)

_ZERO_SQRT2 = ZSqrt2(0, 0)
_ONE_SQRT2 = ZSqrt2(1, 0)
_I = ZOmega(0, 0, 1, 0)


def gcd_zsqrt2(x: ZSqrt2, y: ZSqrt2) -> ZSqrt2:
    """Greatest common divisor in :math:`\\mathbb{Z}[\\sqrt{2}]` (up to a unit)."""
    while y != _ZERO_SQRT2:
        x, y = y, x % y
    return x


def gcd_zomega(x: ZOmega, y: ZOmega) -> ZOmega:
    """Greatest common divisor in :math:`\\mathbb{Z}[\\omega]` (up to a unit).

    Each rounded division leaves ``N(r) < N(y)``, so the loop terminates.
    """
    zero = ZOmega()
    while y != zero:
        x, y = y, x % y
    return x


def sqrt_minus_one_mod(p: int) -> Optional[int]:
    """Square root of -1 modulo ``p``, or None if -1 is not a residue."""
    return sqrt_mod(p - 1, p)


def _root_of_minus_one(eta: ZSqrt2, p: int) -> Optional[ZSqrt2]:
    """Element ``u`` of Z[sqrt(2)] with ``u^2 = -1`` modulo the prime ``eta`` above ``p``."""
    if p % 8 in (1, 5):
        r = sqrt_minus_one_mod(p)
        return None if r is None else ZSqrt2(r, 0)
    if p % 8 == 3:
        # (c*sqrt(2))^2 = 2c^2 = -1 needs c^2 = -1/2 = (sqrt(-2)/2)^2.
        r = sqrt_mod(p - 2, p)
        if r is None:
            return None
        inv2 = (p + 1) // 2
        return ZSqrt2(0, (r * inv2) % p)
    return None


def _split_prime(p: int) -> Optional[ZSqrt2]:
    """Prime ``eta`` of Z[sqrt(2)] above a split rational prime ``p``."""
    x = sqrt_mod(2, p)
    if x is None:
        return None
    return gcd_zsqrt2(ZSqrt2(p, 0), ZSqrt2(x, 1))


def _multiplicity(value: ZSqrt2, factor: ZSqrt2) -> Tuple[ZSqrt2, int]:
    """Divide ``factor`` out of ``value`` as often as possible."""
    count = 0
    while factor.divides(value):
        value = value.exact_div(factor)
        count += 1
    return value, count


def _lift(eta: ZSqrt2, p: int) -> Optional[ZOmega]:
    """``t`` with ``t t^dagger`` an associate of ``eta``."""
    u = _root_of_minus_one(eta, p)
    if u is None:
        return None
    return gcd_zomega(eta.to_zomega(), u.to_zomega() + _I)


def _unit_exponent(v: ZSqrt2) -> Optional[int]:
    """``m`` with ``v == LAMBDA**(2m)``, or None if ``v`` is no such unit."""
    if not (v.is_unit() and v.is_totally_positive()):
        return None
    m = 0
    lam2, lam2_inv = LAMBDA * LAMBDA, LAMBDA_INV * LAMBDA_INV
    while v > 1:
        v = v * lam2_inv
        m += 1
    while v < 1:
        v = v * lam2
        m -= 1
    return m if v == _ONE_SQRT2 else None


def solve_norm_equation(xi: ZSqrt2, factor_limit: Optional[int] = None) -> Optional[ZOmega]:
    """Find ``t`` in Z[omega] with ``t * t.conj() == xi``.

    Args:
        xi: Right-hand side in :math:`\\mathbb{Z}[\\sqrt{2}]`.
        factor_limit: Optional trial division bound handed to
            :func:`sympy.factorint`. Cofactors that are left composite make
            the solver give up on ``xi``.

    Returns:
        Optional[ZOmega]: A solution ``t`` satisfying the equation exactly,
        or None if no solution exists or none could be constructed.
    """
    if xi == _ZERO_SQRT2:
        return ZOmega()
    if not (xi.sign() > 0 and xi.conj().sign() > 0):
        return None

    t = ZOmega(1)
    rest = xi

    # sqrt(2) = delta * delta^dagger * lambda^-1
    while rest.a % 2 == 0:
        rest = ZSqrt2(rest.b, rest.a // 2)
        t = t * DELTA

    n = rest.norm()
    factors = factorint(abs(n), limit=factor_limit) if factor_limit else factorint(abs(n))

    for p, e in sorted(factors.items()):
        if not isprime(p):
            logger.debug("Could not factor %d completely (cofactor %d).", n, p)
            return None

        if p % 8 in (3, 5):
            if e % 2:
                return None
            rest, count = _multiplicity(rest, ZSqrt2(p, 0))
            t_p = _lift(ZSqrt2(p, 0), p)
            if t_p is None:
                return None
            t = t * t_p**count
            continue

        eta = _split_prime(p)
        if eta is None:
            return None
        eta_conj = eta.conj()
        rest, m1 = _multiplicity(rest, eta)
        rest, m2 = _multiplicity(rest, eta_conj)

        if p % 8 == 7:
            if m1 % 2 or m2 % 2:
                return None
            t = t * eta.to_zomega() ** (m1 // 2) * eta_conj.to_zomega() ** (m2 // 2)
        else:
            t_eta, t_eta_conj = _lift(eta, p), _lift(eta_conj, p)
            if t_eta is None or t_eta_conj is None:
                return None
            t = t * t_eta**m1 * t_eta_conj**m2

    tt = t.norm_zsqrt2()
    if not tt.divides(xi):
        logger.debug("Partial solution %s does not divide %s.", t, xi)
        return None
    m = _unit_exponent(xi.exact_div(tt))
    if m is None:
        return None
    t = t * (LAMBDA**m if m >= 0 else LAMBDA_INV ** (-m)).to_zomega()

    if t.norm_zsqrt2() != xi:
        return None
    return t
