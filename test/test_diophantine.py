# test_diophantine.py
import numpy as np
import pytest

import gridsynth.diophantine.diophantine as diophantine
from gridsynth import ZOmega, ZSqrt2, solve_norm_equation
from gridsynth.diophantine import gcd_zomega, gcd_zsqrt2, sqrt_minus_one_mod


def _check(xi, t):
    assert t is not None, f"no solution for {xi}"
    assert t.norm_zsqrt2() == xi, f"t t* = {t.norm_zsqrt2()} != {xi}"


def test_zero_and_non_positive_inputs():
    assert solve_norm_equation(ZSqrt2(0, 0)) == ZOmega()
    assert solve_norm_equation(ZSqrt2(-1, 0)) is None
    # 1 + sqrt(2) > 0 but its conjugate 1 - sqrt(2) < 0
    assert solve_norm_equation(ZSqrt2(1, 1)) is None


@pytest.mark.parametrize("value", [1, 2, 3, 4, 5, 9, 17, 41, 255, 3 * 17 * 17])
def test_solvable_integers(value):
    """Rational integers whose odd prime factors are 1, 3 or 5 mod 8."""
    xi = ZSqrt2(value, 0)
    _check(xi, solve_norm_equation(xi))


@pytest.mark.parametrize("value", [7, 23, 7 * 17])
def test_odd_multiplicity_of_seven_mod_eight_is_unsolvable(value):
    assert solve_norm_equation(ZSqrt2(value, 0)) is None


def test_even_multiplicity_of_seven_mod_eight_is_solvable():
    xi = ZSqrt2(49, 0)
    _check(xi, solve_norm_equation(xi))


def test_units_are_solvable():
    lam2 = ZSqrt2(3, 2)
    _check(lam2, solve_norm_equation(lam2))
    _check(ZSqrt2(3, -2), solve_norm_equation(ZSqrt2(3, -2)))
    _check(ZSqrt2(2, 1), solve_norm_equation(ZSqrt2(2, 1)))


def test_norms_of_random_elements():
    """xi = u u* always has a solution; returned solutions are exact."""
    rng = np.random.default_rng(53)
    total, found = 0, 0
    for _ in range(60):
        u = ZOmega(*(int(x) for x in rng.integers(-30, 31, size=4)))
        if u == ZOmega():
            continue
        xi = u.norm_zsqrt2()
        t = solve_norm_equation(xi)
        total += 1
        if t is not None:
            found += 1
            assert t.norm_zsqrt2() == xi
    assert found == total, f"{total - found} of {total} solvable norms were missed"


def test_unfactored_cofactor_gives_up(monkeypatch):
    """A composite cofactor left by a bounded factorization is not a solution."""
    xi = ZSqrt2(3 * 5, 0)
    monkeypatch.setattr(diophantine, "factorint", lambda n, limit=None: {n: 1})
    assert solve_norm_equation(xi, factor_limit=2) is None


def test_factor_limit_does_not_break_small_inputs():
    xi = ZSqrt2(17 * 3, 0)
    _check(xi, solve_norm_equation(xi, factor_limit=1000))


def test_gcd_helpers():
    g = gcd_zsqrt2(ZSqrt2(7, 0), ZSqrt2(3, 1))
    assert abs(g.norm()) == 7
    assert g.divides(ZSqrt2(7, 0))
    assert g.divides(ZSqrt2(3, 1))

    # 3 = (1 + i sqrt(2))(1 - i sqrt(2)) and 2 sqrt(2) + i = i (1 - 2 i sqrt(2))
    g = gcd_zomega(ZOmega(3), ZOmega(0, 2, 1, -2))
    assert g is not None
    assert g.norm_zsqrt2() == ZSqrt2(3, 0)


def test_sqrt_minus_one_mod():
    r = sqrt_minus_one_mod(13)
    assert r is not None and (r * r + 1) % 13 == 0
    assert sqrt_minus_one_mod(7) is None
