SCHEMA_VERSION = "0.1.0"

_ZOMEGA_SCHEMA = {
    "type": "array",
    "description": "Integer coefficients (a, b, c, d) of a + b*w + c*w^2 + d*w^3, w = exp(i*pi/4).",
    "items": {"type": "integer"},
    "minItems": 4,
    "maxItems": 4,
}

_COMPLEX_SCHEMA = {
    "type": "object",
    "required": ["real", "imag"],
    "properties": {
        "real": {"type": "string"},
        "imag": {"type": "string"},
    },
}

APPROXIMATION_JSON_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Rz Approximation Record",
    "type": "object",
    "required": [
        "schema_version",
        "theta",
        "eps",
        "digits",
        "solution_found",
        "matrix",
    ],
    "properties": {
        "schema_version": {"type": "string"},
        "theta": {
            "type": "string",
            "description": "Target rotation angle in radians, as a decimal string.",
        },
        "eps": {
            "type": "string",
            "description": "Error budget, as a decimal string.",
        },
        "digits": {"type": "integer", "minimum": 1},
        "solution_found": {"type": "boolean"},
        "search_exponent": {"type": ["integer", "null"], "minimum": 0},
        "matrix": {
            "type": "object",
            "description": "Exact record (u, t, k) of (1/sqrt(2)^k) [[u, -t*], [t, u*]].",
            "required": ["u", "t", "k"],
            "properties": {
                "u": _ZOMEGA_SCHEMA,
                "t": _ZOMEGA_SCHEMA,
                "k": {"type": "integer", "minimum": 0},
            },
        },
        "values": {
            "type": ["object", "null"],
            "description": "Decimal entries and approximation error, for reporting only.",
            "required": ["u", "t", "error"],
            "properties": {
                "u": _COMPLEX_SCHEMA,
                "t": _COMPLEX_SCHEMA,
                "error": {"type": "string"},
            },
        },
    },
}
