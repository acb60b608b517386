"""
Pedigree graph utilities.

This module provides reusable functions for walking a pedigree before layout:
- Ancestor cycle detection
- Ancestor sets and upward closure
- Children and parent-pair lookup
- Ranking of hint values

These utilities are used internally by the layout stages but can also be
used directly for pedigree analysis.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np

from .types import NO_PARENT


def _parents(i: int, father_index: Sequence[int], mother_index: Sequence[int]) -> list[int]:
    return [p for p in (father_index[i], mother_index[i]) if p != NO_PARENT]


# =============================================================================
# Cycle Detection
# =============================================================================


def detect_ancestor_cycle(
    father_index: Sequence[int],
    mother_index: Sequence[int],
) -> Optional[list[int]]:
    """
    Find a chain of individuals in which someone is their own ancestor.

    Uses DFS over child -> parent links. Returns the first cycle found,
    or None if the pedigree is acyclic.

    Args:
        father_index: Father index per individual (-1 for none)
        mother_index: Mother index per individual (-1 for none)

    Returns:
        List of individual indices forming a cycle (first element repeated
        at the end), or None.

    Example:
        >>> detect_ancestor_cycle([1, 0, -1], [2, 2, -1])
        [0, 1, 0]
    """
    n = len(father_index)

    # DFS states: 0=unvisited, 1=visiting, 2=visited
    state = [0] * n

    for start in range(n):
        if state[start]:
            continue
        path: list[int] = []
        stack: list[tuple[int, Iterable[int]]] = [(start, iter(_parents(start, father_index, mother_index)))]
        state[start] = 1
        path.append(start)
        while stack:
            node, parents = stack[-1]
            advanced = False
            for parent in parents:
                if not 0 <= parent < n:
                    continue
                if state[parent] == 1:
                    cycle_start = path.index(parent)
                    return path[cycle_start:] + [parent]
                if state[parent] == 0:
                    state[parent] = 1
                    path.append(parent)
                    stack.append((parent, iter(_parents(parent, father_index, mother_index))))
                    advanced = True
                    break
            if not advanced:
                stack.pop()
                path.pop()
                state[node] = 2

    return None


def has_ancestor_cycle(father_index: Sequence[int], mother_index: Sequence[int]) -> bool:
    """Check whether anyone in the pedigree is their own ancestor."""
    return detect_ancestor_cycle(father_index, mother_index) is not None


# =============================================================================
# Ancestors
# =============================================================================


def chase_up(
    individuals: Iterable[int],
    father_index: Sequence[int],
    mother_index: Sequence[int],
) -> list[int]:
    """
    Return the given individuals plus all of their ancestors.

    Order is first-seen: the input individuals, then parents generation by
    generation. Duplicates are removed.
    """
    result: list[int] = []
    seen: set[int] = set()
    frontier = list(individuals)
    while frontier:
        new: list[int] = []
        for i in frontier:
            if i in seen:
                continue
            seen.add(i)
            result.append(i)
            new.extend(p for p in (mother_index[i], father_index[i]) if p != NO_PARENT)
        frontier = new
    return result


def ancestors(
    individual: int,
    father_index: Sequence[int],
    mother_index: Sequence[int],
) -> set[int]:
    """All ancestors of ``individual``, excluding the individual."""
    found = set(chase_up([individual], father_index, mother_index))
    found.discard(individual)
    return found


def share_ancestor(
    first: int,
    second: int,
    father_index: Sequence[int],
    mother_index: Sequence[int],
) -> bool:
    """True if the two individuals have at least one common ancestor."""
    return bool(
        ancestors(first, father_index, mother_index)
        & ancestors(second, father_index, mother_index)
    )


# =============================================================================
# Families
# =============================================================================


def children_of(
    first: int,
    second: int,
    father_index: Sequence[int],
    mother_index: Sequence[int],
) -> list[int]:
    """Children of the couple ``first`` and ``second``, in index order."""
    return [
        j
        for j in range(len(father_index))
        if (father_index[j] == first and mother_index[j] == second)
        or (father_index[j] == second and mother_index[j] == first)
    ]


def parent_pairs(father_index: Sequence[int], mother_index: Sequence[int]) -> list[tuple[int, int]]:
    """Unique (father, mother) pairs with at least one child, first-seen order."""
    seen: set[tuple[int, int]] = set()
    pairs: list[tuple[int, int]] = []
    for dad, mom in zip(father_index, mother_index):
        if dad != NO_PARENT and mom != NO_PARENT and (dad, mom) not in seen:
            seen.add((dad, mom))
            pairs.append((dad, mom))
    return pairs


# =============================================================================
# Ranking
# =============================================================================


def rank(values: Sequence[float]) -> list[float]:
    """
    Rank values from 1, giving tied values the mean of their ranks.

    Example:
        >>> rank([10, 30, 20, 20])
        [1.0, 4.0, 2.5, 2.5]
    """
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return []
    order = np.argsort(arr, kind="mergesort")
    sorted_vals = arr[order]
    ranks = np.empty(arr.size, dtype=float)
    start = 0
    while start < arr.size:
        stop = start
        while stop + 1 < arr.size and sorted_vals[stop + 1] == sorted_vals[start]:
            stop += 1
        ranks[order[start : stop + 1]] = (start + stop) / 2 + 1
        start = stop + 1
    return ranks.tolist()


__all__ = [
    "detect_ancestor_cycle",
    "has_ancestor_cycle",
    "chase_up",
    "ancestors",
    "share_ancestor",
    "children_of",
    "parent_pairs",
    "rank",
]
