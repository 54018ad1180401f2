"""
Utility sub-package: precision context, exact rings, matrix record and JSON schema.
"""

from .precision import PrecisionContext

from .rings import (
    ZSqrt2,
    ZOmega,
    OMEGA,
    DELTA,
    LAMBDA,
    LAMBDA_INV,
)

from .unitarymatrix import UnitaryMatrix

from .approximationschema import (
    SCHEMA_VERSION,
    APPROXIMATION_JSON_SCHEMA,
)

__all__ = [
    "PrecisionContext",
    "ZSqrt2",
    "ZOmega",
    "OMEGA",
    "DELTA",
    "LAMBDA",
    "LAMBDA_INV",
    "UnitaryMatrix",
    "SCHEMA_VERSION",
    "APPROXIMATION_JSON_SCHEMA",
]
