"""
Dense strictly convex quadratic programming.

Solves::

    minimize    0.5 * x^T D x + d^T x
    subject to  A[:, :meq]^T x == b[:meq]
                A[:, meq:]^T x >= b[meq:]

with the dual active-set method of Goldfarb and Idnani:

"A numerically stable dual method for solving strictly convex quadratic
programs" by D. Goldfarb and A. Idnani (1983), Mathematical Programming 27.

The factorisation is kept as ``J = L^-T`` (with ``D = L L^T``) and an upper
triangular ``R``; constraints are added and dropped with Givens rotations.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

_EPS = float(np.finfo(float).eps)


class QPError(ArithmeticError):
    """Base exception for quadratic programming failures."""

    pass


class QPInfeasibleError(QPError):
    """Raised when the constraints admit no solution."""

    pass


class QPNotPositiveDefiniteError(QPError):
    """Raised when the objective matrix is not positive definite."""

    pass


class QPDependentConstraintsError(QPError):
    """Raised when the equality constraints are linearly dependent."""

    pass


@dataclass
class QPResult:
    """Result of a quadratic program."""

    solution: np.ndarray  # Minimiser
    value: float  # Objective value at the minimiser
    unconstrained_solution: np.ndarray  # Minimiser without constraints
    lagrangian: np.ndarray  # One multiplier per constraint (0 if inactive)
    active: list[int]  # Indices of the constraints active at the solution
    iterations: int  # Number of primal/dual steps taken


class _Factorization:
    """Working state of the dual method: J, R, the active set and multipliers."""

    def __init__(self, J: np.ndarray) -> None:
        n = J.shape[0]
        self.n = n
        self.J = J
        self.R = np.zeros((n, n))
        self.r_norm = 1.0
        self.active: list[int] = []
        # u[:size] belong to the active set, u[size] to the constraint being added
        self.u = np.zeros(n + 1)

    @property
    def size(self) -> int:
        return len(self.active)

    def directions(self, normal: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return ``d = J^T normal``, the primal step z and the dual step r."""
        q = self.size
        d = self.J.T @ normal
        z = self.J[:, q:] @ d[q:]
        r = _back_substitute(self.R[:q, :q], d[:q])
        return d, z, r

    def add(self, d: np.ndarray, constraint: int) -> bool:
        """Append ``constraint`` given ``d = J^T normal``. False if dependent."""
        q = self.size
        J = self.J
        for j in range(self.n - 1, q, -1):
            cc, ss = d[j - 1], d[j]
            h = math.hypot(cc, ss)
            if h < _EPS:
                continue
            d[j] = 0.0
            cc, ss = cc / h, ss / h
            if cc < 0:
                cc, ss = -cc, -ss
                d[j - 1] = -h
            else:
                d[j - 1] = h
            xny = ss / (1.0 + cc)
            t1 = J[:, j - 1].copy()
            t2 = J[:, j].copy()
            J[:, j - 1] = t1 * cc + t2 * ss
            J[:, j] = xny * (t1 + J[:, j - 1]) - t2

        if q >= self.n or abs(d[q]) <= _EPS * self.r_norm:
            return False
        self.R[: q + 1, q] = d[: q + 1]
        self.r_norm = max(self.r_norm, abs(d[q]))
        self.active.append(constraint)
        return True

    def drop(self, constraint: int) -> None:
        """Remove ``constraint`` from the active set and restore triangularity."""
        q = self.size
        k = self.active.index(constraint)
        R, J = self.R, self.J

        del self.active[k]
        self.u[k:q] = self.u[k + 1 : q + 1].copy()
        self.u[q] = 0.0
        R[:, k : q - 1] = R[:, k + 1 : q].copy()
        R[:, q - 1] = 0.0
        q -= 1

        for j in range(k, q):
            cc, ss = R[j, j], R[j + 1, j]
            h = math.hypot(cc, ss)
            if h < _EPS:
                continue
            cc, ss = cc / h, ss / h
            R[j + 1, j] = 0.0
            if cc < 0:
                R[j, j] = -h
                cc, ss = -cc, -ss
            else:
                R[j, j] = h
            xny = ss / (1.0 + cc)
            t1 = R[j, j + 1 : q].copy()
            t2 = R[j + 1, j + 1 : q].copy()
            R[j, j + 1 : q] = t1 * cc + t2 * ss
            R[j + 1, j + 1 : q] = xny * (t1 + R[j, j + 1 : q]) - t2
            t1 = J[:, j].copy()
            t2 = J[:, j + 1].copy()
            J[:, j] = t1 * cc + t2 * ss
            J[:, j + 1] = xny * (J[:, j] + t1) - t2


def _back_substitute(R: np.ndarray, d: np.ndarray) -> np.ndarray:
    """Solve the upper triangular system ``R r = d``."""
    q = len(d)
    r = np.zeros(q)
    for i in range(q - 1, -1, -1):
        r[i] = (d[i] - R[i, i + 1 :] @ r[i + 1 :]) / R[i, i]
    return r


def _most_violated(
    slack: np.ndarray, active: Sequence[int], excluded: np.ndarray, meq: int
) -> Optional[int]:
    """Index of the most violated inactive inequality, or None."""
    if slack.size == 0:
        return None
    candidates = slack.copy()
    candidates[:meq] = 0.0
    candidates[list(active)] = 0.0
    candidates[excluded] = 0.0
    p = int(np.argmin(candidates))
    return p if candidates[p] < 0 else None


def solve_qp(
    D: np.ndarray,
    d: np.ndarray,
    A: Optional[np.ndarray] = None,
    b: Optional[np.ndarray] = None,
    meq: int = 0,
    max_iter: Optional[int] = None,
) -> QPResult:
    """
    Minimise ``0.5 x^T D x + d^T x`` subject to ``A^T x >= b``.

    Args:
        D: Symmetric positive definite (n, n) matrix
        d: Linear term, length n
        A: Constraint matrix (n, m); column i is the normal of constraint i.
            None for an unconstrained problem.
        b: Constraint bounds, length m
        meq: The first ``meq`` constraints are equalities
        max_iter: Cap on primal/dual steps (default ``50 * (n + m) + 100``)

    Returns:
        QPResult with the solution, objective value and multipliers.

    Raises:
        QPNotPositiveDefiniteError: If D is not positive definite
        QPDependentConstraintsError: If the equality constraints are dependent
        QPInfeasibleError: If no point satisfies the constraints
        QPError: If the iteration cap is reached or shapes are inconsistent

    Example:
        >>> import numpy as np
        >>> fit = solve_qp(np.eye(2), np.zeros(2), np.eye(2), np.ones(2))
        >>> fit.solution.tolist()
        [1.0, 1.0]
    """
    D = np.array(D, dtype=float)
    d = np.array(d, dtype=float).reshape(-1)
    n = D.shape[0]
    if D.ndim != 2 or D.shape != (n, n) or d.shape != (n,):
        raise QPError(f"D must be (n, n) and d length n, got {D.shape} and {d.shape}")

    if A is None:
        A = np.zeros((n, 0))
        b = np.zeros(0)
    A = np.array(A, dtype=float).reshape(n, -1)
    b = np.zeros(A.shape[1]) if b is None else np.array(b, dtype=float).reshape(-1)
    m = A.shape[1]
    if b.shape != (m,):
        raise QPError(f"b must have one entry per constraint column ({m}), got {b.shape}")
    if not 0 <= meq <= m:
        raise QPError(f"meq must be in [0, {m}], got {meq}")
    if max_iter is None:
        max_iter = 50 * (n + m) + 100

    try:
        L = np.linalg.cholesky(D)
    except np.linalg.LinAlgError as exc:
        raise QPNotPositiveDefiniteError(
            "matrix D in quadratic function is not positive definite!"
        ) from exc

    L_inv = np.linalg.inv(L)
    tolerance = max(m, 1) * _EPS * float(np.trace(D)) * float(np.trace(L_inv)) * 100.0

    x = -np.linalg.solve(D, d)
    x_unconstrained = x.copy()
    state = _Factorization(L_inv.T.copy())
    iterations = 0

    # Equality constraints are added unconditionally
    for i in range(meq):
        normal = A[:, i]
        dvec, z, r = state.directions(normal)
        q = state.size
        t2 = 0.0
        if abs(float(z @ z)) > _EPS:
            t2 = (b[i] - float(normal @ x)) / float(z @ normal)
        x = x + t2 * z
        state.u[q] = t2
        state.u[:q] -= t2 * r
        if not state.add(dvec, i):
            raise QPDependentConstraintsError("constraints are linearly dependent")
        iterations += 1

    finished = False
    while not finished:
        slack = A.T @ x - b
        psi = float(np.minimum(slack[meq:], 0.0).sum())
        if abs(psi) <= tolerance:
            break

        saved_active = list(state.active)
        saved_u = state.u.copy()
        saved_x = x.copy()
        excluded = np.zeros(m, dtype=bool)

        p = _most_violated(slack, state.active, excluded, meq)
        if p is None:
            break

        while True:
            normal = A[:, p]
            state.u[state.size] = 0.0

            # Take partial steps (dropping blocking constraints) until a full step
            while True:
                iterations += 1
                if iterations > max_iter:
                    raise QPError(f"solve_qp did not converge in {max_iter} iterations")
                q = state.size
                dvec, z, r = state.directions(normal)

                t1 = math.inf
                blocking: Optional[int] = None
                for k in range(meq, q):
                    if r[k] > 0 and state.u[k] / r[k] < t1:
                        t1 = state.u[k] / r[k]
                        blocking = state.active[k]

                t2 = math.inf
                if abs(float(z @ z)) > _EPS:
                    t2 = -slack[p] / float(z @ normal)
                    if t2 < 0:
                        t2 = math.inf

                t = min(t1, t2)
                if math.isinf(t):
                    raise QPInfeasibleError("constraints are inconsistent, no solution!")

                if math.isinf(t2):
                    # Step in dual space only
                    state.u[:q] -= t * r
                    state.u[q] += t
                    state.drop(blocking)
                    continue

                x = x + t * z
                state.u[:q] -= t * r
                state.u[q] += t
                if t2 <= t1:
                    break

                state.drop(blocking)
                slack[p] = float(normal @ x - b[p])

            if state.add(dvec, p):
                break

            # Degenerate: restore the saved point and try another constraint
            excluded[p] = True
            state = _restore(L_inv, A, saved_active, saved_u)
            x = saved_x.copy()
            slack = A.T @ x - b
            p = _most_violated(slack, state.active, excluded, meq)
            if p is None:
                finished = True
                break

    lagrangian = np.zeros(m)
    for k, i in enumerate(state.active):
        lagrangian[i] = state.u[k]
    return QPResult(
        solution=x,
        value=float(0.5 * x @ D @ x + d @ x),
        unconstrained_solution=x_unconstrained,
        lagrangian=lagrangian,
        active=sorted(state.active),
        iterations=iterations,
    )


def _restore(
    L_inv: np.ndarray,
    A: np.ndarray,
    active: Sequence[int],
    u: np.ndarray,
) -> _Factorization:
    """Rebuild the factorisation for a saved active set."""
    state = _Factorization(L_inv.T.copy())
    for i in active:
        state.add(state.J.T @ A[:, i], i)
    state.u[: len(active)] = u[: len(active)]
    return state


__all__ = [
    "QPError",
    "QPInfeasibleError",
    "QPNotPositiveDefiniteError",
    "QPDependentConstraintsError",
    "QPResult",
    "solve_qp",
]
