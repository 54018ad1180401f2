"""
Grid operators and the skew optimizer.
"""

from .gridoperators import GridOperator, optimize_skew

__all__ = ["GridOperator", "optimize_skew"]
