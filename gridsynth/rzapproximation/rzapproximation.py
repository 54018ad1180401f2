"""Approximation of Z-rotations by exact Clifford+T unitaries.

The driver looks for :math:`u, t \\in \\mathbb{Z}[\\omega]` and the smallest
scale exponent :math:`k` with

.. math::

    u u^\\dagger + t t^\\dagger = 2^k, \\qquad
    \\left|\\frac{u}{\\sqrt{2}^k} - e^{i\\theta}\\right|^2
    + \\left|\\frac{t}{\\sqrt{2}^k}\\right|^2 < \\epsilon^2 .

For every :math:`k` the candidates :math:`u` are the lattice points of the
epsilon-region scaled by :math:`\\sqrt{2}^k` whose
:math:`\\sqrt{2}`-conjugates lie in the correspondingly scaled unit disk.
A candidate that passes the projection test is reduced to its smallest
denominator, and :math:`t` is completed by the norm equation solver.

Public API:

* :class:`RzApproximation` – result record with reporting and JSON helpers.
* :func:`find_rz_approximation` – search with exact ellipse enumeration.
* :func:`find_fast_rz_approximation` – search with bounding-box enumeration.
* :func:`approximate_rz` – dispatch on a method name.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Union

import jsonschema
import numpy as np

from ..diophantine.diophantine import solve_norm_equation
from ..gridoperators.gridoperators import GridOperator, optimize_skew
from ..gridsolvers.gridsolvers import solve_two_dim, solve_two_dim_boxes
from ..regions.regions import Ellipse, SearchState
from ..utils.approximationschema import APPROXIMATION_JSON_SCHEMA, SCHEMA_VERSION
from ..utils.precision import PrecisionContext
from ..utils.rings import ZOmega, ZSqrt2
from ..utils.unitarymatrix import UnitaryMatrix

logger = logging.getLogger(__name__)

DEFAULT_KMAX = 1000


@dataclass(frozen=True)
class RzApproximation:
    """
    Result of an Rz approximation search.

    Attributes:
        matrix (UnitaryMatrix): Exact record ``(u, t, k)``; empty if no
            solution was found.
        theta: Target angle (radians) at the working precision.
        eps: Error budget at the working precision.
        precision (PrecisionContext): Context the search ran with.
        solution_found (bool): Whether ``matrix`` holds a solution. Always
            check this before using the matrix fields.
        search_exponent (Optional[int]): Loop exponent at which the
            solution was found (before reduction), or None.
    """

    matrix: UnitaryMatrix
    theta: Any
    eps: Any
    precision: PrecisionContext = field(repr=False, compare=False)
    solution_found: bool = True
    search_exponent: Optional[int] = None

    @classmethod
    def not_found(cls, theta: Any, eps: Any, precision: PrecisionContext) -> "RzApproximation":
        return cls(UnitaryMatrix.empty(), theta, eps, precision, solution_found=False)

    # ---- matrix fields ---------------------------------------------------------

    @property
    def u(self) -> ZOmega:
        return self.matrix.u

    @property
    def t(self) -> ZOmega:
        return self.matrix.t

    @property
    def scale_exponent(self) -> int:
        return self.matrix.k

    @property
    def u_val(self) -> Any:
        return self.matrix.entries(self.precision)[0]

    @property
    def t_val(self) -> Any:
        return self.matrix.entries(self.precision)[1]

    @property
    def z(self) -> Any:
        """Target point :math:`e^{i\\theta}`."""
        return self.precision.mp.expj(self.theta)

    def error(self) -> Any:
        """Distance :math:`\\sqrt{|u_{val} - z|^2 + |t_{val}|^2}` to the target."""
        mp = self.precision.mp
        u_val, t_val = self.matrix.entries(self.precision)
        return mp.sqrt(abs(u_val - self.z) ** 2 + abs(t_val) ** 2)

    def to_numpy(self) -> np.ndarray:
        return self.matrix.to_numpy(self.precision)

    # ---- JSON ----------------------------------------------------------------

    def to_json_dict(self) -> Dict[str, Any]:
        """JSON-ready representation validated against :data:`APPROXIMATION_JSON_SCHEMA`."""
        values = None
        if self.solution_found:
            u_val, t_val = self.matrix.entries(self.precision)
            values = {
                "u": {"real": str(u_val.real), "imag": str(u_val.imag)},
                "t": {"real": str(t_val.real), "imag": str(t_val.imag)},
                "error": str(self.error()),
            }
        payload = {
            "schema_version": SCHEMA_VERSION,
            "theta": str(self.theta),
            "eps": str(self.eps),
            "digits": self.precision.digits,
            "solution_found": self.solution_found,
            "search_exponent": self.search_exponent,
            "matrix": {
                "u": list(self.u.coefficients),
                "t": list(self.t.coefficients),
                "k": self.scale_exponent,
            },
            "values": values,
        }
        jsonschema.validate(instance=payload, schema=APPROXIMATION_JSON_SCHEMA)
        return payload

    @classmethod
    def from_json_dict(cls, payload: Dict[str, Any]) -> "RzApproximation":
        """Rebuild a record from :meth:`to_json_dict` output.

        Raises:
            ValueError: If the payload does not match the schema, a found
                solution violates :math:`u u^\\dagger + t t^\\dagger = 2^k`, or
                ``solution_found`` disagrees with the stored matrix and
                search exponent.
        """
        try:
            jsonschema.validate(instance=payload, schema=APPROXIMATION_JSON_SCHEMA)
        except jsonschema.ValidationError as exc:
            raise ValueError(f"Invalid approximation payload: {exc.message}") from exc

        if payload["schema_version"] != SCHEMA_VERSION:
            logger.warning(
                "Loading approximation with schema version %s (current: %s).",
                payload["schema_version"],
                SCHEMA_VERSION,
            )

        precision = PrecisionContext(digits=payload["digits"])
        matrix = UnitaryMatrix(
            ZOmega(*payload["matrix"]["u"]),
            ZOmega(*payload["matrix"]["t"]),
            payload["matrix"]["k"],
        )
        solution_found = payload["solution_found"]
        search_exponent = payload.get("search_exponent")
        if solution_found:
            if not matrix.is_unitary():
                raise ValueError("Stored matrix does not satisfy u u* + t t* = 2^k.")
            if search_exponent is None:
                raise ValueError("A found solution must record its search exponent.")
        else:
            if not matrix.is_empty:
                raise ValueError("A record without a solution must carry the empty matrix.")
            if search_exponent is not None:
                raise ValueError("A record without a solution has no search exponent.")

        return cls(
            matrix=matrix,
            theta=precision.real(payload["theta"]),
            eps=precision.real(payload["eps"]),
            precision=precision,
            solution_found=solution_found,
            search_exponent=search_exponent,
        )

    def save_json(self, filepath: Union[str, Path] = "rz_approximation.json") -> Path:
        """Write the record to ``filepath``.

        If ``filepath`` is an existing directory or has no suffix, the file
        ``rz_approximation.json`` is written inside it. Parent directories
        are created as needed.

        Returns:
            Path: The path written to.
        """
        path = Path(filepath)
        if path.is_dir() or path.suffix == "":
            path = path / "rz_approximation.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(self.to_json_dict(), f, indent=2)
        logger.info("Saved approximation to %s.", path)
        return path

    @classmethod
    def load_json(cls, filepath: Union[str, Path]) -> "RzApproximation":
        with Path(filepath).open("r", encoding="utf-8") as f:
            return cls.from_json_dict(json.load(f))


# =============================================================================
# Search drivers
# =============================================================================

# Enumerator signature: (k, scale_first, scale_second) -> candidates
Enumerator = Callable[[int, Any, Any], Iterable[ZOmega]]


def _prepare(
    theta: Any,
    eps: Any,
    precision: Optional[PrecisionContext],
    kmin: int,
    kmax: int,
):
    eps_f = float(eps)
    if not eps_f > 0:
        raise ValueError(f"eps must be positive, got {eps!r}.")
    if not eps_f < 2:
        raise ValueError(f"eps must be smaller than 2, got {eps!r}.")
    if kmin < 0:
        raise ValueError(f"kmin must be non-negative, got {kmin}.")
    if kmin > kmax:
        raise ValueError(f"kmin={kmin} must not exceed kmax={kmax}.")
    precision = PrecisionContext.for_epsilon(eps_f) if precision is None else precision
    return precision, precision.real(theta), precision.real(eps)


def _scales(k: int, precision: PrecisionContext):
    """Scale factors of the two ellipses for exponent ``k``."""
    if k % 2 == 0:
        scale = precision.mp.mpf(2) ** (k // 2)
        return scale, scale
    scale = precision.mp.mpf(2) ** ((k - 1) // 2) * precision.sqrt2
    return scale, -scale


def _search(
    theta: Any,
    eps: Any,
    precision: PrecisionContext,
    G: GridOperator,
    enumerate_candidates: Enumerator,
    kmin: int,
    kmax: int,
    factor_limit: Optional[int],
) -> RzApproximation:
    mp = precision.mp
    cos_t, sin_t = mp.cos(theta), mp.sin(theta)
    threshold = 1 - eps * eps / 2

    for k in range(kmin, kmax + 1):
        scale_first, scale_second = _scales(k, precision)
        accepted = 0
        for scaled_candidate in enumerate_candidates(k, scale_first, scale_second):
            candidate = G * scaled_candidate
            projection = (
                candidate.real(precision) * cos_t + candidate.imag(precision) * sin_t
            ) / scale_first
            if not projection > threshold:
                continue
            accepted += 1

            reduced_k = k
            while reduced_k > 0 and candidate.is_reducible():
                candidate = candidate.reduce()
                reduced_k -= 1

            xi = ZSqrt2(2**reduced_k, 0) - candidate.norm_zsqrt2()
            t = solve_norm_equation(xi, factor_limit=factor_limit)
            if t is not None:
                matrix = UnitaryMatrix(candidate, t, reduced_k)
                logger.info(
                    "Found approximation with k=%d (search exponent %d).", reduced_k, k
                )
                return RzApproximation(matrix, theta, eps, precision, True, k)

        logger.debug("k=%d: %d candidates passed the projection test.", k, accepted)

    logger.warning("No approximation found up to kmax=%d.", kmax)
    return RzApproximation.not_found(theta, eps, precision)


def _search_state(theta: Any, eps: Any, precision: PrecisionContext) -> SearchState:
    return SearchState(
        Ellipse.epsilon_region(theta, eps, precision),
        Ellipse.unit_disk(precision),
    )


def _trivial(theta: Any, eps: Any, precision: PrecisionContext, tol: Any) -> Optional[RzApproximation]:
    if abs(theta) < tol:
        return RzApproximation(UnitaryMatrix(ZOmega(1), ZOmega(), 0), theta, eps, precision, True, 0)
    return None


def find_rz_approximation(
    theta: Any,
    eps: Any,
    precision: Optional[PrecisionContext] = None,
    kmin: int = 0,
    kmax: int = DEFAULT_KMAX,
    tol: Optional[Any] = None,
    factor_limit: Optional[int] = None,
) -> RzApproximation:
    """Approximate :math:`e^{i\\theta}` using exact ellipse enumeration.

    Args:
        theta: Target angle in radians.
        eps: Error budget, ``0 < eps < 2``.
        precision: Numeric context; derived from ``eps`` if None.
        kmin: First scale exponent tried.
        kmax: Last scale exponent tried (inclusive).
        tol: Boundary tolerance; defaults to ``precision.tol``.
        factor_limit: Optional factoring bound for the norm equation solver.

    Returns:
        RzApproximation: The first solution found, or a record with
        ``solution_found == False`` if every ``k`` up to ``kmax`` failed.

    Raises:
        ValueError: On invalid ``eps``, ``kmin`` or ``kmax``.
    """
    precision, theta, eps = _prepare(theta, eps, precision, kmin, kmax)
    tol = precision.tol if tol is None else tol
    logger.info("Approximating Rz(theta=%s) with eps=%s (exact ellipses).", theta, eps)

    trivial = _trivial(theta, eps, precision, tol)
    if trivial is not None:
        return trivial

    state = _search_state(theta, eps, precision)
    G = optimize_skew(state)
    state = state.apply_grid_operator(G)

    def enumerate_candidates(k: int, scale_first: Any, scale_second: Any) -> Iterable[ZOmega]:
        return solve_two_dim(state.rescale(scale_first, scale_second), eps, precision, tol)

    return _search(theta, eps, precision, G, enumerate_candidates, kmin, kmax, factor_limit)


def find_fast_rz_approximation(
    theta: Any,
    eps: Any,
    precision: Optional[PrecisionContext] = None,
    kmin: int = 0,
    kmax: int = DEFAULT_KMAX,
    tol: Optional[Any] = None,
    factor_limit: Optional[int] = None,
) -> RzApproximation:
    """Approximate :math:`e^{i\\theta}` using bounding-box enumeration.

    Same contract as :func:`find_rz_approximation`. The candidates come
    from the fattened bounding boxes of the skew-corrected ellipses
    (plain and shifted coset), so more of them fail the projection test,
    but each ``k`` is cheaper to enumerate.
    """
    precision, theta, eps = _prepare(theta, eps, precision, kmin, kmax)
    tol = precision.tol if tol is None else tol
    logger.info("Approximating Rz(theta=%s) with eps=%s (bounding boxes).", theta, eps)

    trivial = _trivial(theta, eps, precision, tol)
    if trivial is not None:
        return trivial

    state = _search_state(theta, eps, precision)
    G = optimize_skew(state)
    state = state.apply_grid_operator(G)
    box_first = state.first.bounding_box()
    box_second = state.second.bounding_box()

    def enumerate_candidates(k: int, scale_first: Any, scale_second: Any) -> Iterable[ZOmega]:
        return solve_two_dim_boxes(
            box_first.rescale(scale_first),
            box_second.rescale(scale_second),
            eps,
            precision,
            tol,
        )

    return _search(theta, eps, precision, G, enumerate_candidates, kmin, kmax, factor_limit)


_METHODS: Dict[str, Callable[..., RzApproximation]] = {
    "exact": find_rz_approximation,
    "fast": find_fast_rz_approximation,
}


def approximate_rz(theta: Any, eps: Any, method: str = "fast", **kwargs: Any) -> RzApproximation:
    """Run the search with ``method`` in ``{"exact", "fast"}``."""
    try:
        finder = _METHODS[method]
    except KeyError:
        raise ValueError(f"Unknown method {method!r}. Valid values: {sorted(_METHODS)}") from None
    return finder(theta, eps, **kwargs)
