# test_rzapproximation.py
from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import numpy as np
import pytest

from gridsynth import (
    APPROXIMATION_JSON_SCHEMA,
    SCHEMA_VERSION,
    PrecisionContext,
    RzApproximation,
    UnitaryMatrix,
    ZOmega,
    approximate_rz,
    find_fast_rz_approximation,
    find_rz_approximation,
)

ANGLES = [0.3, 1.0, -2.0, 2.9]


def _assert_valid(result, eps):
    assert result.solution_found
    assert result.matrix.is_unitary(), "u u* + t t* must equal 2^k exactly"
    err = result.error()
    assert err < eps, f"error {err} exceeds eps={eps}"


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("finder", [find_rz_approximation, find_fast_rz_approximation])
def test_zero_angle_is_identity(finder):
    result = finder(0.0, 1e-3)
    assert result.solution_found
    assert result.scale_exponent == 0
    assert result.u == ZOmega(1)
    assert result.t == ZOmega()
    assert result.error() < 1e-20


@pytest.mark.parametrize("theta", ANGLES)
def test_fast_search_meets_error_budget(theta):
    eps = 1e-2
    result = find_fast_rz_approximation(theta, eps)
    _assert_valid(result, eps)


@pytest.mark.parametrize("theta", ANGLES)
def test_exact_and_fast_agree_on_scale_exponent(theta):
    eps = 1e-2
    exact = find_rz_approximation(theta, eps)
    fast = find_fast_rz_approximation(theta, eps)
    _assert_valid(exact, eps)
    _assert_valid(fast, eps)
    assert exact.scale_exponent == fast.scale_exponent
    assert exact.search_exponent == fast.search_exponent


def test_tighter_budget_needs_no_smaller_exponent():
    for theta in (0.4, -1.3, 2.2):
        exponents = []
        for eps in (1e-1, 1e-2, 1e-3):
            result = find_fast_rz_approximation(theta, eps)
            _assert_valid(result, eps)
            exponents.append(result.scale_exponent)
        assert exponents == sorted(exponents), f"theta={theta}: {exponents}"


def test_minimal_exponent_from_kmin_zero():
    """No smaller exponent admits a solution once one is found."""
    theta, eps = 0.7, 1e-2
    result = find_fast_rz_approximation(theta, eps)
    k = result.scale_exponent
    assert result.search_exponent == k
    if k > 0:
        earlier = find_fast_rz_approximation(theta, eps, kmax=k - 1)
        assert not earlier.solution_found


def test_explicit_precision_is_used():
    ctx = PrecisionContext(digits=40)
    result = find_fast_rz_approximation(0.5, 1e-2, precision=ctx)
    assert result.precision is ctx
    _assert_valid(result, 1e-2)


@pytest.mark.parametrize("finder", [find_rz_approximation, find_fast_rz_approximation])
def test_both_strategies_exhaust_together(finder):
    result = finder(0.7, 1e-3, kmax=2)
    assert not result.solution_found
    assert result.matrix.is_empty
    assert result.search_exponent is None


@pytest.mark.parametrize("finder", [find_rz_approximation, find_fast_rz_approximation])
@pytest.mark.parametrize("theta", [0.3, 2.0, -3.0])
@pytest.mark.parametrize("eps", [1.0, 1.5, 1.9])
def test_coarse_error_budgets_are_accepted(finder, theta, eps):
    result = finder(theta, eps)
    _assert_valid(result, eps)
    assert result.scale_exponent == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"eps": 0},
        {"eps": -0.1},
        {"eps": 2.0},
        {"eps": 3.5},
        {"eps": 1e-2, "kmin": -1},
        {"eps": 1e-2, "kmin": 5, "kmax": 4},
    ],
)
def test_invalid_arguments_raise(kwargs):
    with pytest.raises(ValueError):
        find_rz_approximation(0.5, **kwargs)
    with pytest.raises(ValueError):
        find_fast_rz_approximation(0.5, **kwargs)


def test_approximate_rz_dispatch():
    fast = approximate_rz(1.1, 1e-2)
    exact = approximate_rz(1.1, 1e-2, method="exact")
    assert fast.scale_exponent == exact.scale_exponent
    with pytest.raises(ValueError):
        approximate_rz(1.1, 1e-2, method="slow")


# ---------------------------------------------------------------------------
# Reporting and JSON
# ---------------------------------------------------------------------------


def test_to_numpy_is_unitary():
    result = find_fast_rz_approximation(1.0, 1e-2)
    U = result.to_numpy()
    assert U.shape == (2, 2)
    assert U.dtype == np.complex128
    assert np.allclose(U @ U.conj().T, np.eye(2), atol=1e-12)
    assert abs(U[0, 0] - np.exp(1j)) < 1e-2


def test_json_payload_matches_schema():
    result = find_fast_rz_approximation(0.3, 1e-2)
    payload = result.to_json_dict()
    jsonschema.validate(instance=payload, schema=APPROXIMATION_JSON_SCHEMA)
    assert payload["schema_version"] == SCHEMA_VERSION
    assert payload["matrix"]["k"] == result.scale_exponent
    assert payload["values"] is not None

    missing = RzApproximation.not_found(0.3, 1e-2, result.precision).to_json_dict()
    jsonschema.validate(instance=missing, schema=APPROXIMATION_JSON_SCHEMA)
    assert missing["values"] is None


def test_json_round_trip(tmp_path: Path):
    result = find_fast_rz_approximation(-2.0, 1e-2)
    out = result.save_json(tmp_path / "nested" / "rz.json")
    assert out.exists()

    loaded = RzApproximation.load_json(out)
    assert loaded.matrix == result.matrix
    assert loaded.solution_found
    assert loaded.search_exponent == result.search_exponent
    assert abs(loaded.theta - result.theta) < 1e-20
    assert loaded.error() < 1e-2


def test_save_json_into_directory(tmp_path: Path):
    result = find_fast_rz_approximation(0.3, 1e-1)
    out = result.save_json(tmp_path)
    assert out == tmp_path / "rz_approximation.json"
    with out.open("r", encoding="utf-8") as f:
        assert json.load(f)["solution_found"] is True


def test_from_json_rejects_invalid_payloads():
    payload = find_fast_rz_approximation(0.3, 1e-2).to_json_dict()

    broken = dict(payload)
    del broken["matrix"]
    with pytest.raises(ValueError):
        RzApproximation.from_json_dict(broken)

    tampered = json.loads(json.dumps(payload))
    tampered["matrix"]["k"] += 1
    with pytest.raises(ValueError):
        RzApproximation.from_json_dict(tampered)

    no_exponent = json.loads(json.dumps(payload))
    no_exponent["search_exponent"] = None
    with pytest.raises(ValueError):
        RzApproximation.from_json_dict(no_exponent)


def test_from_json_rejects_matrix_on_missing_solution():
    payload = find_fast_rz_approximation(0.3, 1e-2).to_json_dict()

    mislabeled = json.loads(json.dumps(payload))
    mislabeled["solution_found"] = False
    mislabeled["values"] = None
    with pytest.raises(ValueError):
        RzApproximation.from_json_dict(mislabeled)

    missing = RzApproximation.not_found(0.3, 1e-2, PrecisionContext(digits=30)).to_json_dict()
    missing["search_exponent"] = 4
    with pytest.raises(ValueError):
        RzApproximation.from_json_dict(missing)

    loaded = RzApproximation.from_json_dict(
        RzApproximation.not_found(0.3, 1e-2, PrecisionContext(digits=30)).to_json_dict()
    )
    assert not loaded.solution_found
    assert loaded.matrix.is_empty


def test_from_json_warns_on_schema_version_mismatch(caplog):
    payload = find_fast_rz_approximation(0.3, 1e-1).to_json_dict()
    payload["schema_version"] = "0.0.1"
    with caplog.at_level("WARNING"):
        loaded = RzApproximation.from_json_dict(payload)
    assert loaded.solution_found
    assert "schema version" in caplog.text


def test_unitary_matrix_validation():
    with pytest.raises(ValueError):
        UnitaryMatrix(ZOmega(1), ZOmega(), -1)
    assert UnitaryMatrix.empty().is_empty
    assert UnitaryMatrix(ZOmega(1), ZOmega(), 0).is_unitary()
    assert not UnitaryMatrix(ZOmega(1), ZOmega(1), 0).is_unitary()


def test_decimal_entries_match_numpy_matrix():
    result = find_fast_rz_approximation(0.9, 1e-2)
    U = result.to_numpy()
    assert abs(complex(result.u_val) - U[0, 0]) < 1e-12
    assert abs(complex(result.t_val) - U[1, 0]) < 1e-12
    assert abs(complex(result.z) - np.exp(0.9j)) < 1e-12
