"""
Numerical solvers used by the pedigree layout.

This module provides:
- solve_qp: Goldfarb-Idnani dual active-set quadratic programming
"""

from .quadprog import (
    QPDependentConstraintsError,
    QPError,
    QPInfeasibleError,
    QPNotPositiveDefiniteError,
    QPResult,
    solve_qp,
)

__all__ = [
    "solve_qp",
    "QPResult",
    "QPError",
    "QPInfeasibleError",
    "QPNotPositiveDefiniteError",
    "QPDependentConstraintsError",
]
