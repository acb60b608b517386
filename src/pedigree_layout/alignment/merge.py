"""
Side-by-side merge of two alignment blocks.

Port of the kinship2 ``alignped3`` step. The right block is appended to the
left one generation by generation. When the left block's last individual on a
row is the right block's first (the same person reached through two
marriages), the two slots are collapsed into one.
"""

from __future__ import annotations

from ..types import AlignmentArrays, SpouseEntry
from ..validation import AlignmentError


def _merged_spouselist(left: AlignmentArrays, right: AlignmentArrays) -> tuple[SpouseEntry, ...]:
    seen: set[SpouseEntry] = set()
    merged: list[SpouseEntry] = []
    for entry in left.spouselist + right.spouselist:
        if entry not in seen:
            seen.add(entry)
            merged.append(entry)
    return tuple(merged)


def _unpacked_slide(left: AlignmentArrays, right: AlignmentArrays, space: float) -> float:
    """Smallest shift that keeps every row of ``right`` clear of ``left``."""
    slide = 0.0
    for level in range(left.depth):
        if not left.nid[level] or not right.nid[level]:
            continue
        gap = left.pos[level][-1] - right.pos[level][0]
        if left.nid[level][-1] != right.nid[level][0]:
            gap += space
        slide = max(slide, gap)
    return slide


def merge_alignments(
    left: AlignmentArrays,
    right: AlignmentArrays,
    packed: bool,
    space: float = 1,
) -> AlignmentArrays:
    """
    Place ``right`` to the right of ``left``.

    Packed mode shifts each row of ``right`` independently so that it starts
    ``space`` after the last slot of the same row in ``left``. Unpacked mode
    applies one slide to the whole of ``right`` so that subtrees keep their
    shape.

    Family pointers of ``right`` are renumbered: a non-zero pointer on row
    ``level + 1`` is increased by the number of slots ``left`` contributes to
    row ``level`` (less one when the rows overlap).

    Args:
        left: Block placed on the left
        right: Block placed on the right
        packed: Pack rows independently
        space: Minimum gap between the two blocks

    Returns:
        A new AlignmentArrays; the inputs are unchanged.

    Raises:
        AlignmentError: If the blocks do not have the same number of rows
    """
    if left.depth != right.depth:
        raise AlignmentError(
            f"Cannot merge alignments with {left.depth} and {right.depth} generations"
        )

    nid = [list(row) for row in left.nid]
    pos = [list(row) for row in left.pos]
    fam = [list(row) for row in left.fam]
    spouse = [list(row) for row in left.spouse]
    right_fam = [list(row) for row in right.fam]

    slide = 0.0 if packed else _unpacked_slide(left, right, space)

    for level in range(left.depth):
        n1 = len(nid[level])
        n2 = len(right.nid[level])
        if n2 == 0:
            continue

        overlap = 0
        if n1 > 0 and nid[level][-1] == right.nid[level][0]:
            overlap = 1
            left_fam = fam[level][-1]
            fam[level][-1] = max(left_fam, right_fam[level][0])
            spouse[level][-1] = spouse[level][-1] or right.spouse[level][0]
            if not packed and right_fam[level][0] > 0:
                if left_fam > 0:
                    pos[level][-1] = (right.pos[level][0] + slide + pos[level][-1]) / 2
                else:
                    pos[level][-1] = right.pos[level][0] + slide

        if packed:
            slide = 0.0 if n1 == 0 else pos[level][n1 - 1] + space - overlap

        nid[level].extend(right.nid[level][overlap:])
        pos[level].extend(p + slide for p in right.pos[level][overlap:])
        fam[level].extend(right_fam[level][overlap:])
        spouse[level].extend(right.spouse[level][overlap:])

        if level + 1 < left.depth:
            # Look ahead: children of this row point into the merged row
            shift = n1 - overlap
            right_fam[level + 1] = [f + shift if f else 0 for f in right_fam[level + 1]]

    return AlignmentArrays(
        nid=nid,
        pos=pos,
        fam=fam,
        spouse=spouse,
        spouselist=_merged_spouselist(left, right),
    )


__all__ = ["merge_alignments"]
