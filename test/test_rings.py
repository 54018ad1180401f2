# test_rings.py
import math

import numpy as np
import pytest

from gridsynth import PrecisionContext, ZOmega, ZSqrt2
from gridsynth.utils.rings import DELTA, LAMBDA, LAMBDA_INV, OMEGA

SQRT2_ZOMEGA = ZSqrt2(0, 1).to_zomega()


def _random_zomega(rng, bound=20):
    return ZOmega(*(int(x) for x in rng.integers(-bound, bound + 1, size=4)))


# ---------------------------------------------------------------------------
# Precision context
# ---------------------------------------------------------------------------


def test_precision_context_for_epsilon_and_validation():
    ctx = PrecisionContext.for_epsilon(2e-10)
    assert ctx.digits == 59
    assert ctx.tol == ctx.mp.mpf(10) ** -57
    assert abs(ctx.sqrt2 * ctx.inv_sqrt2 - 1) < ctx.tol
    assert abs(ctx.lambda_ * ctx.lambda_conj + 1) < ctx.tol

    with pytest.raises(ValueError):
        PrecisionContext(digits=0)
    with pytest.raises(ValueError):
        PrecisionContext(digits=30, tol=-1)
    with pytest.raises(ValueError):
        PrecisionContext.for_epsilon(0)


def test_precision_contexts_are_independent():
    """Two contexts must not share mpmath state."""
    low, high = PrecisionContext(digits=15), PrecisionContext(digits=60)
    assert low.mp.dps == 15
    assert high.mp.dps == 60
    assert abs(high.sqrt2**2 - 2) < high.mp.mpf(10) ** -55


# ---------------------------------------------------------------------------
# Z[sqrt(2)]
# ---------------------------------------------------------------------------


def test_zsqrt2_arithmetic_and_units():
    assert LAMBDA * LAMBDA_INV == ZSqrt2(1, 0)
    assert ZSqrt2(3, 2).norm() == 1
    assert LAMBDA**2 == ZSqrt2(3, 2)
    assert LAMBDA**-2 == ZSqrt2(3, -2)
    assert ZSqrt2(1, 2) + 3 == ZSqrt2(4, 2)
    assert 3 - ZSqrt2(1, 2) == ZSqrt2(2, -2)
    assert 2 * ZSqrt2(1, 2) == ZSqrt2(2, 4)

    with pytest.raises(ValueError):
        ZSqrt2(2, 0) ** -1
    with pytest.raises(TypeError):
        ZSqrt2(1.5, 0)


def test_zsqrt2_exact_sign_matches_float():
    """Exact ordering agrees with floating point away from zero."""
    rng = np.random.default_rng(7)
    for a, b in rng.integers(-1000, 1001, size=(500, 2)):
        a, b = int(a), int(b)
        value = a + b * math.sqrt(2)
        expected = 0 if (a == 0 and b == 0) else (1 if value > 0 else -1)
        assert ZSqrt2(a, b).sign() == expected

    assert ZSqrt2(-1, 1) > 0
    assert ZSqrt2(3, -2) > 0
    assert ZSqrt2(-3, 2) < 0
    assert ZSqrt2(1, -1) < ZSqrt2(0, 0)


def test_zsqrt2_total_positivity():
    assert ZSqrt2(3, 1).is_totally_positive()
    assert not ZSqrt2(1, 1).is_totally_positive()
    assert not ZSqrt2(-3, 1).is_totally_positive()


def test_zsqrt2_euclidean_division():
    rng = np.random.default_rng(11)
    for _ in range(200):
        x = ZSqrt2(*(int(v) for v in rng.integers(-500, 501, size=2)))
        y = ZSqrt2(*(int(v) for v in rng.integers(-50, 51, size=2)))
        if y == ZSqrt2(0, 0):
            continue
        q, r = divmod(x, y)
        assert q * y + r == x
        assert abs(r.norm()) < abs(y.norm())


def test_zsqrt2_exact_division():
    x = ZSqrt2(5, 3) * ZSqrt2(7, -2)
    assert ZSqrt2(7, -2).divides(x)
    assert x.exact_div(ZSqrt2(7, -2)) == ZSqrt2(5, 3)
    with pytest.raises(ValueError):
        ZSqrt2(5, 0).exact_div(ZSqrt2(3, 0))


# ---------------------------------------------------------------------------
# Z[omega]
# ---------------------------------------------------------------------------


def test_zomega_powers_of_omega():
    assert OMEGA**4 == ZOmega(-1)
    assert OMEGA**8 == ZOmega(1)
    assert SQRT2_ZOMEGA * SQRT2_ZOMEGA == ZOmega(2)


def test_zomega_multiplication_matches_complex_embedding():
    ctx = PrecisionContext(digits=30)
    rng = np.random.default_rng(3)
    for _ in range(50):
        x, y = _random_zomega(rng), _random_zomega(rng)
        expected = complex(x.decimal(ctx)) * complex(y.decimal(ctx))
        assert complex((x * y).decimal(ctx)) == pytest.approx(expected, abs=1e-9)


def test_zomega_conjugations():
    ctx = PrecisionContext(digits=30)
    u = ZOmega(1, -2, 3, 5)
    assert complex(u.conj().decimal(ctx)) == pytest.approx(complex(u.decimal(ctx)).conjugate())
    assert u.conj().conj() == u
    assert u.adj2().adj2() == u
    # sqrt(2)-conjugation is a ring homomorphism
    v = ZOmega(-4, 0, 2, 1)
    assert (u * v).adj2() == u.adj2() * v.adj2()


def test_zomega_norms():
    assert DELTA.norm_zsqrt2() == ZSqrt2(2, 1)
    assert DELTA.norm() == 2
    u = ZOmega(3, 1, -2, 4)
    assert u.norm() == u.norm_zsqrt2().norm()
    assert u.norm() > 0
    with pytest.raises(ValueError):
        OMEGA.to_zsqrt2()


def test_from_real_imag_covers_both_cosets():
    ctx = PrecisionContext(digits=30)
    alpha, beta = ZSqrt2(1, 2), ZSqrt2(3, -1)
    for shift in (0, 1):
        u = ZOmega.from_real_imag(alpha, beta, shift)
        offset = shift * ctx.inv_sqrt2
        assert abs(u.real(ctx) - (alpha.decimal(ctx) + offset)) < ctx.tol
        assert abs(u.imag(ctx) - (beta.decimal(ctx) + offset)) < ctx.tol
    assert ZOmega.from_real_imag(ZSqrt2(), ZSqrt2(), 1) == OMEGA


# ---------------------------------------------------------------------------
# Reduction
# ---------------------------------------------------------------------------


def test_reduce_is_exact_division_by_sqrt2():
    u = ZOmega(1, 2, 3, 4)
    v = u * SQRT2_ZOMEGA
    assert v.is_reducible()
    assert v.reduce() == u
    assert not ZOmega(1).is_reducible()
    with pytest.raises(ValueError):
        ZOmega(1).reduce()


def test_delta_divisibility():
    assert (ZOmega(2, 1, 0, 3) * DELTA).is_divisible_by_delta()
    assert not ZOmega(1).is_divisible_by_delta()


def test_reduction_terminates_in_bounded_steps():
    """Each reduction divides the norm by 4, so the loop is logarithmic."""
    rng = np.random.default_rng(5)
    for _ in range(100):
        base = _random_zomega(rng)
        if base == ZOmega():
            continue
        m = int(rng.integers(0, 12))
        u = base * SQRT2_ZOMEGA**m

        steps = 0
        while u.is_reducible():
            u = u.reduce()
            steps += 1

        assert steps >= m
        assert 4**steps <= (base * SQRT2_ZOMEGA**m).norm()
        assert not u.is_reducible()


def test_zomega_euclidean_division():
    rng = np.random.default_rng(13)
    for _ in range(200):
        x = _random_zomega(rng, bound=100)
        y = _random_zomega(rng, bound=10)
        if y == ZOmega():
            continue
        q, r = divmod(x, y)
        assert q * y + r == x
        assert r.norm() < y.norm()


def test_zomega_division_on_half_integer_quotients():
    """Every coefficient of x / y sits exactly on a rounding boundary."""
    y = ZOmega(2)
    for signs in ((1, 1, 1, 1), (1, -1, 1, -1), (-1, 1, 1, -1), (1, 1, -1, -1)):
        x = ZOmega(*signs)
        q, r = divmod(x, y)
        assert q * y + r == x
        assert r.norm() < y.norm(), f"{x} mod {y} left norm {r.norm()}"


def test_precision_helpers():
    ctx = PrecisionContext(digits=30)
    assert ctx.is_zero(ctx.real(10) ** -29)
    assert not ctx.is_zero(ctx.real("1e-20"))
    assert ctx.real("0.5") == ctx.mp.mpf(1) / 2
