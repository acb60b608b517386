"""
Recursive subtree alignment.

Port of the kinship2 ``alignped1`` and ``alignped2`` steps:

- align_family lays out one individual, their spouses, and (recursively)
  the children of each marriage.
- align_siblings lays out a sibship in hint order and merges the blocks
  left to right.

The spouse accumulator is passed in and handed back on the returned
AlignmentArrays; a marriage is removed from it once it has been drawn, so
each couple is expanded only once.
"""

from __future__ import annotations

import sys
from typing import Sequence

from ..preprocessing import children_of
from ..types import AlignmentArrays, SpouseEntry
from ..validation import (
    AlignmentError,
    InvalidHintShapeError,
    InvalidParentReferenceError,
    ValidationError,
    validate_parent_indices,
)
from .merge import merge_alignments

# Sex codes used by the side and anchor columns of the spouse accumulator
_MALE = 1
_FEMALE = 2

# Each generation costs a few stack frames (family, sibship, merge)
MAX_GENERATIONS = (sys.getrecursionlimit() - 100) // 3


def check_generation_count(level: Sequence[int]) -> None:
    """
    Refuse pedigrees too deep to lay out recursively.

    Raises:
        AlignmentError: If ``level`` spans more than MAX_GENERATIONS rows
    """
    generations = max(level, default=-1) + 1
    if generations > MAX_GENERATIONS:
        raise AlignmentError(
            f"Pedigree has {generations} generations, more than the {MAX_GENERATIONS} that can be aligned"
        )


def _check_inputs(
    individuals: Sequence[int],
    father_index: Sequence[int],
    mother_index: Sequence[int],
    level: Sequence[int],
    order: Sequence[float],
) -> None:
    n = len(father_index)
    validate_parent_indices(father_index, mother_index, strict=True)
    if len(level) != n:
        raise ValidationError(f"Expected {n} depths, got {len(level)}")
    if len(order) != n:
        raise InvalidHintShapeError(f"Expected {n} sort keys, got {len(order)}")
    for x in individuals:
        if not 0 <= x < n:
            raise InvalidParentReferenceError(
                f"Individual index {x} out of bounds [0, {n})", index=x
            )
    check_generation_count(level)


def _find_spouses(
    x: int, level: Sequence[int], spouselist: Sequence[SpouseEntry]
) -> tuple[int, list[int]]:
    """Return x's sex code and the accumulator rows of marriages drawn with x."""
    sex = _MALE if any(entry.male == x for entry in spouselist) else _FEMALE
    rows = []
    for k, entry in enumerate(spouselist):
        if sex == _MALE:
            if entry.male == x and entry.anchor in (0, entry.side):
                rows.append(k)
        elif entry.female == x and (entry.anchor == 0 or entry.anchor != entry.side):
            rows.append(k)

    # Marriages that cross generations are drawn on the lower row
    lev = level[x]
    return sex, [k for k in rows if level[_partner(spouselist[k], x)] <= lev]


def _partner(entry: SpouseEntry, x: int) -> int:
    return entry.female if entry.male == x else entry.male


def _split_sides(
    x: int, sex: int, rows: Sequence[int], spouselist: Sequence[SpouseEntry]
) -> tuple[list[int], list[int]]:
    left: list[int] = []
    right: list[int] = []
    undecided: list[int] = []
    for k in rows:
        entry = spouselist[k]
        partner = _partner(entry, x)
        if entry.side == 3 - sex:
            left.append(partner)
        elif entry.side == sex:
            right.append(partner)
        else:
            undecided.append(partner)

    if undecided:
        nleft = (len(rows) + (sex == _FEMALE)) // 2 - len(left)
        take = max(0, min(nleft, len(undecided)))
        left.extend(undecided[:take])
        right = undecided[take:] + right
    return left, right


def _align_family(
    x: int,
    father_index: Sequence[int],
    mother_index: Sequence[int],
    level: Sequence[int],
    order: Sequence[float],
    packed: bool,
    spouselist: tuple[SpouseEntry, ...],
) -> AlignmentArrays:
    maxlev = max(level) + 1
    lev = level[x]
    empty = AlignmentArrays.empty(maxlev, spouselist)

    sex, rows = _find_spouses(x, level, spouselist)
    if not rows:
        return empty.with_row(lev, [x], [0.0])

    left, right = _split_sides(x, sex, rows, spouselist)
    spouses = left + right
    nspouse = len(spouses)
    row = left + [x] + right
    parent_pos = [float(j) for j in range(nspouse + 1)]
    flags = [True] * nspouse + [False]

    consumed = set(rows)
    spouselist = tuple(e for k, e in enumerate(spouselist) if k not in consumed)

    result = None
    for i, partner in enumerate(spouses):
        children = children_of(x, partner, father_index, mother_index)
        if not children:
            continue
        shallow = [c for c in children if level[c] <= lev]
        if shallow:
            raise AlignmentError(
                f"Children {shallow} of {x} and {partner} are not below their parents' generation"
            )

        block = _align_siblings(
            children, father_index, mother_index, level, order, packed, spouselist
        )
        spouselist = block.spouselist

        # Parentage of the kids on the next row
        below = lev + 1
        members = set(children)
        fam_row = [
            i + 1 if ind in members else f
            for ind, f in zip(block.nid[below], block.fam[below])
        ]
        block = block.with_fam_row(below, fam_row)

        if not packed:
            # Line the kids up below their parents
            kids = [block.pos[below][j] for j, f in enumerate(fam_row) if f == i + 1]
            if kids:
                kidmean = sum(kids) / len(kids)
                parmean = (parent_pos[i] + parent_pos[i + 1]) / 2
                if kidmean > parmean:
                    for j in range(i, nspouse + 1):
                        parent_pos[j] += kidmean - parmean
                else:
                    block = block.shifted(parmean - kidmean, start_level=below)

        result = block if result is None else merge_alignments(result, block, packed)

    if result is None:
        result = empty
    return result.with_row(lev, row, parent_pos, spouse=flags).with_spouselist(spouselist)


def _align_siblings(
    siblings: Sequence[int],
    father_index: Sequence[int],
    mother_index: Sequence[int],
    level: Sequence[int],
    order: Sequence[float],
    packed: bool,
    spouselist: tuple[SpouseEntry, ...],
) -> AlignmentArrays:
    if not siblings:
        raise AlignmentError("Cannot align an empty sibship")

    ordered = sorted(siblings, key=lambda s: order[s])
    result = _align_family(
        ordered[0], father_index, mother_index, level, order, packed, spouselist
    )
    spouselist = result.spouselist
    mylev = level[ordered[0]]

    for sib in ordered[1:]:
        block = _align_family(sib, father_index, mother_index, level, order, packed, spouselist)
        spouselist = block.spouselist
        # A sib who only re-enters the row already drawn adds nothing
        if block.n[mylev] > 1 or sib not in result.nid[mylev]:
            result = merge_alignments(result, block, packed)

    return result.with_spouselist(spouselist)


def align_family(
    x: int,
    father_index: Sequence[int],
    mother_index: Sequence[int],
    level: Sequence[int],
    order: Sequence[float],
    packed: bool = True,
    spouselist: Sequence[SpouseEntry] = (),
) -> AlignmentArrays:
    """
    Lay out one individual and all of their descendants.

    The individual's spouses (marriages in ``spouselist`` drawn with them)
    are placed on the same row, left or right according to the side and
    anchor codes. The children of each marriage are laid out with
    align_siblings and merged left to right beneath the couple.

    Args:
        x: Individual to lay out
        father_index: Father index per individual (-1 for none)
        mother_index: Mother index per individual (-1 for none)
        level: Generation row of each individual
        order: Sort key of each individual
        packed: Pack rows tightly instead of centring kids under parents
        spouselist: Marriages not yet drawn

    Returns:
        AlignmentArrays with one row per generation. Its ``spouselist`` is
        the accumulator with the marriages drawn here removed.

    Raises:
        InvalidParentReferenceError: If an index is out of range
        InvalidHintShapeError: If ``order`` has the wrong length
        AlignmentError: If a child is not below its parents' generation, or
            the pedigree has more than MAX_GENERATIONS generations
    """
    _check_inputs([x], father_index, mother_index, level, order)
    return _align_family(
        x, father_index, mother_index, level, order, packed, tuple(spouselist)
    )


def align_siblings(
    siblings: Sequence[int],
    father_index: Sequence[int],
    mother_index: Sequence[int],
    level: Sequence[int],
    order: Sequence[float],
    packed: bool = True,
    spouselist: Sequence[SpouseEntry] = (),
) -> AlignmentArrays:
    """
    Lay out a sibship in increasing ``order`` and merge it left to right.

    A sibling whose own block has a single slot on the sibling row, and who
    is already on that row of the blocks merged so far (a marry-in reached
    again through inbreeding), is not merged a second time.

    Raises:
        InvalidParentReferenceError: If an index is out of range
        InvalidHintShapeError: If ``order`` has the wrong length
        AlignmentError: If ``siblings`` is empty, or the pedigree has more
            than MAX_GENERATIONS generations
    """
    _check_inputs(siblings, father_index, mother_index, level, order)
    return _align_siblings(
        siblings, father_index, mother_index, level, order, packed, tuple(spouselist)
    )


__all__ = ["align_family", "align_siblings", "check_generation_count", "MAX_GENERATIONS"]
