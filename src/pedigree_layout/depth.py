"""
Generation depth assignment.

Computes, for every individual, the generation row it is drawn on: founders
are at depth 0 and each child sits strictly below both parents. Optionally
pulls partners who share a child onto the same row, shifting the shallower
partner's ancestors down.

Port of the kinship2 ``kindepth`` algorithm.
"""

from __future__ import annotations

from typing import Sequence

from .preprocessing import chase_up, detect_ancestor_cycle, parent_pairs
from .types import NO_PARENT
from .validation import CyclicPedigreeError, DepthAlignmentError, validate_parent_indices


def compute_depths(
    father_index: Sequence[int],
    mother_index: Sequence[int],
    align_spouses: bool = False,
) -> list[int]:
    """
    Compute the generation depth of every individual.

    Depth is the longest chain of parent links up to a founder, found by
    repeated relaxation sweeps. A pedigree that has not converged after
    ``n + 1`` sweeps contains an ancestor cycle.

    Args:
        father_index: Father index per individual (-1 for none)
        mother_index: Mother index per individual (-1 for none)
        align_spouses: Move partners who share a child onto the same row

    Returns:
        Depth per individual.

    Raises:
        InvalidParentReferenceError: If a parent index is out of range
        CyclicPedigreeError: If someone is their own ancestor
        DepthAlignmentError: If spouse alignment leaves no founder row
    """
    validate_parent_indices(father_index, mother_index, strict=True)
    n = len(father_index)
    if n == 0:
        return []

    depth = [0] * n
    for _sweep in range(n + 1):
        changed = False
        for i in range(n):
            parents = [p for p in (father_index[i], mother_index[i]) if p != NO_PARENT]
            if not parents:
                continue
            d = max(depth[p] for p in parents) + 1
            if d != depth[i]:
                depth[i] = d
                changed = True
        if not changed:
            break
    else:
        cycle = detect_ancestor_cycle(father_index, mother_index) or []
        raise CyclicPedigreeError(
            f"Impossible pedigree: someone is their own ancestor (cycle {cycle})",
            cycle=cycle,
        )

    if not align_spouses:
        return depth

    return _align_spouse_depths(depth, father_index, mother_index)


def _align_spouse_depths(
    depth: list[int],
    father_index: Sequence[int],
    mother_index: Sequence[int],
) -> list[int]:
    """Pull partners who share a child onto the deeper partner's row."""
    n = len(depth)
    depth = list(depth)
    pairs = parent_pairs(father_index, mother_index)
    dads = [p[0] for p in pairs]
    moms = [p[1] for p in pairs]
    done = [False] * len(pairs)

    while True:
        pending = [i for i in range(len(pairs)) if not done[i] and depth[dads[i]] != depth[moms[i]]]
        if not pending:
            break

        # Fix the shallowest mismatched marriage first
        who = min(pending, key=lambda i: max(depth[dads[i]], depth[moms[i]]))
        good, bad = moms[who], dads[who]
        if depth[dads[who]] > depth[moms[who]]:
            good, bad = dads[who], moms[who]

        abad = chase_up([bad], father_index, mother_index)
        marriages = dads.count(bad) + moms.count(bad)
        if len(abad) == 1 and marriages == 1:
            # Solitary marry-in
            depth[bad] = depth[good]
        else:
            agood = _extended_family(good, who, depth, dads, moms, father_index, mother_index)
            if not set(abad) & set(agood):
                shift = depth[good] - depth[bad]
                for i in abad:
                    depth[i] += shift
                _repair_children(depth, father_index, mother_index)

        for i in range(len(pairs)):
            if dads[i] == bad or moms[i] == bad:
                done[i] = True

    if n and min(depth) > 0:
        raise DepthAlignmentError("Spouse alignment left no individual at generation 0")
    return depth


def _extended_family(
    good: int,
    skip: int,
    depth: Sequence[int],
    dads: Sequence[int],
    moms: Sequence[int],
    father_index: Sequence[int],
    mother_index: Sequence[int],
) -> list[int]:
    """
    Ancestors of ``good``, their other spouses and those spouses' ancestors,
    plus any of their children drawn at or above ``good``'s row.
    """
    n = len(depth)
    tdad = [d for i, d in enumerate(dads) if i != skip]
    tmom = [m for i, m in enumerate(moms) if i != skip]
    agood = chase_up([good], father_index, mother_index)

    while True:
        members = set(agood)
        spouses = [tmom[i] for i in range(len(tdad)) if tdad[i] in members]
        spouses += [tdad[i] for i in range(len(tmom)) if tmom[i] in members]
        temp = chase_up(list(dict.fromkeys(agood + spouses)), father_index, mother_index)

        members = set(temp)
        for j in range(n):
            if depth[j] > depth[good] or j in members:
                continue
            if mother_index[j] in members or father_index[j] in members:
                temp.append(j)
                members.add(j)

        if len(temp) == len(agood):
            return temp
        agood = temp


def _repair_children(depth: list[int], father_index: Sequence[int], mother_index: Sequence[int]) -> None:
    """Push children down until each is strictly below both parents."""
    n = len(depth)
    for level in range(n + 1):
        current = {j for j in range(n) if depth[j] == level}
        any_child = False
        for j in range(n):
            if mother_index[j] in current or father_index[j] in current:
                any_child = True
                depth[j] = max(level + 1, depth[j])
        if not any_child:
            break


__all__ = ["compute_depths"]
