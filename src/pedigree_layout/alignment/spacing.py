"""
Final horizontal spacing by quadratic programming.

Port of the kinship2 ``alignped4`` step. The alignment engine fixes the left
to right order of every row; this step chooses the actual positions. Each
marriage and each parent-child link contributes a squared penalty:

- spouses are pulled towards each other (weight ``sqrt(align[1])``)
- each child is pulled under the midpoint of its parents
  (weight ``sqrt(k ** -align[0])`` for a sibship of size k)

subject to neighbours on a row being at least 1 apart and every row fitting
in ``[0, width - 1]``.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from ..solver import solve_qp
from ..types import AlignmentArrays

DEFAULT_PENALTIES = (1.5, 2.0)

# Weight of the term that pins the widest row in place
_ANCHOR_WEIGHT = 1e-5

# Ridge added to the Hessian so that it is strictly positive definite
_RIDGE = 1e-8


def _penalties(align: Union[bool, Sequence[float]]) -> tuple[float, float]:
    if isinstance(align, bool) or align is None:
        return DEFAULT_PENALTIES
    values = tuple(float(a) for a in align)
    if len(values) != 2:
        raise ValueError(f"align must hold two penalties, got {len(values)}")
    return values[0], values[1]


def optimize_positions(
    alignment: AlignmentArrays,
    spouse: Sequence[Sequence[bool]],
    width: float = 10,
    align: Union[bool, Sequence[float]] = True,
) -> tuple[tuple[float, ...], ...]:
    """
    Compute final slot positions for an alignment.

    Args:
        alignment: Output of the alignment engine
        spouse: Per-slot flag, True if the slot is married to its right
            neighbour
        width: Maximum layout width; widened to fit the longest row
        align: True for the default penalties, or ``(child, spouse)``
            penalty exponents/weights

    Returns:
        New positions, one row per generation.

    Example:
        >>> from pedigree_layout.types import AlignmentArrays
        >>> arrays = AlignmentArrays(
        ...     nid=[[0, 1], [2]], pos=[[0, 1], [0]],
        ...     fam=[[0, 0], [1]], spouse=[[True, False], [False]],
        ... )
        >>> [round(p, 3) for p in optimize_positions(arrays, arrays.spouse)[1]]
        [0.5]
    """
    child_penalty, spouse_penalty = _penalties(align)
    counts = alignment.n
    total = sum(counts)
    if total == 0:
        return alignment.pos

    width = max(float(width), max(counts) + 0.01)

    # Number the plotting points sequentially
    offsets = np.concatenate([[0], np.cumsum(counts)[:-1]]).astype(int)

    def ident(level: int, slot: int) -> int:
        return int(offsets[level]) + slot

    rows: list[np.ndarray] = []

    # Keep spouses close
    weight = np.sqrt(spouse_penalty)
    for level, flags in enumerate(spouse):
        for slot, married in enumerate(flags):
            if married and slot + 1 < counts[level]:
                row = np.zeros(total)
                row[ident(level, slot)] = weight
                row[ident(level, slot + 1)] = -weight
                rows.append(row)

    # Keep kids close to their parents
    for level in range(1, alignment.depth):
        fam = alignment.fam[level]
        for family in dict.fromkeys(f for f in fam if f > 0):
            who = [slot for slot, f in enumerate(fam) if f == family]
            penalty = np.sqrt(len(who) ** -child_penalty)
            for slot in who:
                row = np.zeros(total)
                row[ident(level, slot)] = -penalty
                row[ident(level - 1, family - 1)] += penalty / 2
                row[ident(level - 1, family)] += penalty / 2
                rows.append(row)

    # Pin the first slot of the widest row
    anchor = np.zeros(total)
    anchor[ident(counts.index(max(counts)), 0)] = _ANCHOR_WEIGHT
    rows.append(anchor)
    pmat = np.vstack(rows)

    columns: list[np.ndarray] = []
    bounds: list[float] = []
    for level, nn in enumerate(counts):
        if nn == 0:
            continue
        for slot in range(nn - 1):
            col = np.zeros(total)
            col[ident(level, slot)] = -1.0
            col[ident(level, slot + 1)] = 1.0
            columns.append(col)
            bounds.append(1.0)
        first = np.zeros(total)
        first[ident(level, 0)] = 1.0
        columns.append(first)
        bounds.append(0.0)
        last = np.zeros(total)
        last[ident(level, nn - 1)] = -1.0
        columns.append(last)
        bounds.append(1.0 - width)

    D = pmat.T @ pmat + _RIDGE * np.eye(total)
    fit = solve_qp(D, np.zeros(total), np.column_stack(columns), np.array(bounds))

    return tuple(
        tuple(float(fit.solution[ident(level, slot)]) for slot in range(nn))
        for level, nn in enumerate(counts)
    )


__all__ = ["DEFAULT_PENALTIES", "optimize_positions"]
