"""
Display hints: validation and automatic generation.

Hints steer the alignment engine: ``order`` gives every individual a sort
key used to arrange siblings and founding couples, and ``spouse`` pins
particular marriages to the left or right of an individual and to the
family (anchor) they should be drawn with.

autohint is a port of the kinship2 ``autohint`` routine. It starts from a
plain sibling order, runs a trial layout, and for every individual drawn
twice on a row (a marry-in connecting two families) pushes the two copies
towards each other and adds spouse hints anchoring each marriage to the
right copy.
"""

from __future__ import annotations

from collections import Counter
from numbers import Integral
from typing import Any, Mapping, Optional, Sequence, Union

from .base import as_pedigree
from .depth import compute_depths
from .preprocessing import rank
from .types import Hints, PedigreeInput, PedigreeLayout, PedigreeLike, RelationCode, Sex, SpouseHint
from .validation import (
    InvalidHintShapeError,
    InvalidSpouseIndexError,
    InvalidSpousePairingError,
)


class HintWarning(UserWarning):
    """Warning issued when automatic hints cannot be computed."""

    pass


HintsLike = Union[Hints, Mapping[str, Any]]


def _is_index(value: Any) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def _as_hints(hints: HintsLike) -> Hints:
    if isinstance(hints, Hints):
        return hints
    return Hints(order=hints.get("order"), spouse=hints.get("spouse") or ())


def check_hint(hints: HintsLike, sex: Sequence[Union[Sex, str]]) -> Hints:
    """
    Validate a hints object against the pedigree's sexes.

    Args:
        hints: Hints, or a mapping with ``order`` and ``spouse`` keys
        sex: Sex of each individual

    Returns:
        The hints, unchanged

    Raises:
        InvalidHintShapeError: If ``order`` is missing or has the wrong
            length, or an anchor is not 0, 1 or 2
        InvalidSpouseIndexError: If a spouse hint references an individual
            outside the pedigree, or an index is not an integer
        InvalidSpousePairingError: If a spouse hint does not pair a male
            with a female
    """
    hints = _as_hints(hints)
    n = len(sex)
    if hints.order is None:
        raise InvalidHintShapeError("Missing order component")
    if len(hints.order) != n:
        raise InvalidHintShapeError(
            f"Wrong length for order component: got {len(hints.order)}, expected {n}"
        )

    bad_index = [
        idx
        for sp in hints.spouse
        for idx in (sp.left, sp.right)
        if not _is_index(idx) or not 0 <= idx < n
    ]
    if bad_index:
        raise InvalidSpouseIndexError(f"Invalid spouse value: {bad_index}", indices=bad_index)

    parsed = [Sex.parse(s) for s in sex]
    bad_pairs = [
        (sp.left, sp.right)
        for sp in hints.spouse
        if {parsed[sp.left], parsed[sp.right]} != {Sex.MALE, Sex.FEMALE}
    ]
    if bad_pairs:
        raise InvalidSpousePairingError(
            f"A marriage is not male/female: {bad_pairs}", pairs=bad_pairs
        )

    bad_anchor = [sp.anchor for sp in hints.spouse if sp.anchor not in (0, 1, 2)]
    if bad_anchor:
        raise InvalidHintShapeError(f"Invalid anchor value: {bad_anchor}")

    return hints


# =============================================================================
# Automatic hints
# =============================================================================


def _twin_sets(pedigree: PedigreeInput) -> tuple[dict[int, int], list[int]]:
    """Map each twin to the smallest index of its twin set, plus birth order."""
    n = len(pedigree)
    twinord = [1] * n
    relations = pedigree.twin_relations
    members = list(dict.fromkeys(i for r in relations for i in (r.id1, r.id2)))
    twinset = {i: i for i in members}
    for _ in range(max(1, len(members) - 1)):
        for rel in relations:
            newid = min(twinset[rel.id1], twinset[rel.id2])
            twinset[rel.id1] = newid
            twinset[rel.id2] = newid
            twinord[rel.id2] = max(twinord[rel.id2], twinord[rel.id1] + 1)
    return twinset, twinord


def _initial_order(
    depth: Sequence[int],
    order: Optional[Sequence[float]],
    twinset: Mapping[int, int],
    twinord: Sequence[int],
) -> list[float]:
    n = len(depth)
    horder = [float(v) for v in order] if order is not None else [0.0] * n

    # Number the unordered individuals of each generation left to right
    for d in dict.fromkeys(depth):
        who = [i for i in range(n) if depth[i] == d and horder[i] == 0]
        for k, i in enumerate(who):
            horder[i] = float(k + 1)

    if twinset:
        # Twins get adjacent fractional keys, then re-rank per generation
        for setid in dict.fromkeys(twinset.values()):
            who = [i for i, s in twinset.items() if s == setid]
            mean = sum(horder[i] for i in who) / len(who)
            for i in who:
                horder[i] = mean + twinord[i] / 100
        for d in dict.fromkeys(depth):
            who = [i for i in range(n) if depth[i] == d]
            for i, r in zip(who, rank([horder[i] for i in who])):
                horder[i] = r
    return horder


class _HintBuilder:
    """Working state for the duplicate fix-up passes of autohint."""

    def __init__(
        self,
        pedigree: PedigreeInput,
        horder: list[float],
        twinset: dict[int, int],
    ) -> None:
        self.pedigree = pedigree
        self.horder = horder
        self.twinset = twinset
        self.mono = [
            (r.id1, r.id2) for r in pedigree.twin_relations if r.code == RelationCode.MZ_TWIN
        ]

    # -------------------------------------------------------------------------
    # Layout queries
    # -------------------------------------------------------------------------

    def find_spouse(self, mypos: int, layout: PedigreeLayout, lev: int) -> Optional[int]:
        """Slot of the first opposite-sex member of mypos's marriage group."""
        flags = layout.spouse[lev]
        lpos = mypos
        while lpos > 0 and flags[lpos - 1]:
            lpos -= 1
        rpos = mypos
        while rpos < len(flags) - 1 and flags[rpos]:
            rpos += 1
        if lpos == rpos:
            return None

        sex = self.pedigree.sex
        mysex = sex[layout.nid[lev][mypos]]
        for p in range(lpos, rpos + 1):
            if sex[layout.nid[lev][p]] != mysex:
                return p
        return None

    @staticmethod
    def find_sibs(mypos: int, layout: PedigreeLayout, lev: int) -> list[int]:
        family = layout.fam[lev][mypos]
        if family == 0:
            return []
        return [j for j, f in enumerate(layout.fam[lev]) if f == family]

    def _family_edge(self, slot: int, layout: PedigreeLayout, lev: int, last: bool) -> Optional[int]:
        if layout.fam[lev][slot] == 0:
            spouse = self.find_spouse(slot, layout, lev)
            if spouse is None or layout.fam[lev][spouse] == 0:
                return None
            slot = spouse
        sibs = self.find_sibs(slot, layout, lev)
        return max(sibs) if last else min(sibs)

    def duplicate_pairs(self, layout: PedigreeLayout, lev: int) -> list[tuple[int, int, int]]:
        """
        Consecutive copies of every individual drawn twice on a row.

        Each entry is ``(left slot, right slot, anchor)``; pairs whose
        families do not touch come first, then the closest pairs.
        """
        idlist = layout.nid[lev]
        counts = Counter(idlist)
        pairs: list[tuple[int, int, int]] = []
        for ind in dict.fromkeys(idlist):
            if counts[ind] < 2:
                continue
            where = [j for j, v in enumerate(idlist) if v == ind]
            for k in range(1, len(where)):
                pairs.append((where[k - 1], where[k], 1 if k <= len(where) / 2 else 2))

        if len(pairs) <= 1:
            return pairs

        def touches(pair: tuple[int, int, int]) -> bool:
            sib1 = self._family_edge(pair[0], layout, lev, last=True)
            sib2 = self._family_edge(pair[1], layout, lev, last=False)
            return sib1 is not None and sib2 is not None and sib2 - sib1 == 1

        return sorted(pairs, key=lambda p: (touches(p), p[0] - p[1]))

    # -------------------------------------------------------------------------
    # Order updates
    # -------------------------------------------------------------------------

    def _mono_set(self, ind: int, rounds: int) -> set[int]:
        found = {ind}
        for _ in range(rounds):
            for a, b in self.mono:
                if a in found or b in found:
                    found.update((a, b))
        return found

    def shift(self, ind: int, sibs: Sequence[int], goleft: bool) -> None:
        """Move ``ind`` (and its twins) to one end of its sibship."""
        horder = self.horder
        if ind in self.twinset:
            amount = 1 + max(horder[s] for s in sibs) - min(horder[s] for s in sibs)
            step = -amount if goleft else amount
            twins = [s for s in sibs if self.twinset.get(s) == self.twinset[ind]]
            for t in twins:
                horder[t] += step
            if any(ind in pair for pair in self.mono):
                # Identical twins stay together inside the twin set
                for m in self._mono_set(ind, len(twins)):
                    horder[m] += step

        if goleft:
            horder[ind] = min(horder[s] for s in sibs) - 1
        else:
            horder[ind] = max(horder[s] for s in sibs) + 1

        for s, r in zip(sibs, rank([horder[s] for s in sibs])):
            horder[s] = r

    def spouse_hints(
        self, layout: PedigreeLayout, lev: int, pairs: Sequence[tuple[int, int, int]]
    ) -> list[SpouseHint]:
        """Fix the duplicated individuals of one row; return new spouse hints."""
        idlist = layout.nid[lev]
        added: list[SpouseHint] = []
        for pair in pairs:
            anchor = [0, 0]
            spouse: list[Optional[int]] = [None, None]
            for j in (0, 1):
                goleft = j == 1
                mypos = pair[j]
                if layout.fam[lev][mypos] > 0:
                    # Connected to the parents at this copy
                    anchor[j] = 1
                    sibs = [idlist[s] for s in self.find_sibs(mypos, layout, lev)]
                    if len(sibs) > 1:
                        self.shift(idlist[mypos], sibs, goleft)
                else:
                    spouse[j] = self.find_spouse(mypos, layout, lev)
                    if spouse[j] is not None and layout.fam[lev][spouse[j]] > 0:
                        anchor[j] = 2
                        sibs = [idlist[s] for s in self.find_sibs(spouse[j], layout, lev)]
                        if len(sibs) > 1:
                            self.shift(idlist[spouse[j]], sibs, goleft)

            id1 = idlist[pair[0]]
            id2 = idlist[spouse[0]] if spouse[0] is not None else None
            id3 = idlist[spouse[1]] if spouse[1] is not None else None
            added.extend(_marriage_hints(anchor, pair[2], id1, id2, id3))
        return added


def _marriage_hints(
    anchor: Sequence[int],
    side: int,
    id1: int,
    id2: Optional[int],
    id3: Optional[int],
) -> list[SpouseHint]:
    """Spouse hints for one duplicated individual, by the anchors of its copies."""
    key = (anchor[0], anchor[1])
    if key == (2, 1):
        wanted = [(id2, id1, side)]
    elif key == (2, 2):
        wanted = [(id2, id1, 1), (id1, id3, 2)]
    elif key in ((0, 2), (2, 0)):
        wanted = [(id2, id1, 0)]
    elif key == (0, 0):
        wanted = [(id1, id3, 0), (id2, id1, 0)]
    elif key == (0, 1):
        wanted = [(id2, id1, 2)]
    elif key == (1, 0):
        wanted = [(id1, id3, 1)]
    else:
        return []

    # A copy without a partner on the row gives nothing to anchor
    if any(left is None or right is None for left, right, _ in wanted):
        return []
    return [SpouseHint(left, right, a) for left, right, a in wanted]


def autohint(
    pedigree: PedigreeLike,
    hints: Optional[HintsLike] = None,
    packed: bool = True,
    align: Union[bool, Sequence[float]] = False,
) -> Hints:
    """
    Compute display hints for a pedigree.

    Starts from ``hints`` when given (zero order keys are filled in), clusters
    twins, then repeatedly lays the pedigree out and resolves individuals that
    are drawn twice on the same row, one generation at a time.

    Args:
        pedigree: Pedigree to lay out
        hints: Optional starting hints
        packed: Passed through to the trial layouts
        align: Passed through to the trial layouts

    Returns:
        Hints with one order key per individual and the accumulated spouse
        hints.

    Raises:
        ValidationError: If the pedigree is invalid
        AlignmentError: If a trial layout fails
    """
    from .pedigree import align_pedigree

    pedigree = as_pedigree(pedigree)
    start = _as_hints(hints) if hints is not None else Hints()
    depth = compute_depths(pedigree.father_index, pedigree.mother_index, align_spouses=True)

    twinset, twinord = _twin_sets(pedigree)
    horder = _initial_order(depth, start.order, twinset, twinord)
    spouse = list(start.spouse)

    def trial() -> PedigreeLayout:
        return align_pedigree(
            pedigree,
            packed=packed,
            align=align,
            hints=Hints(order=tuple(horder), spouse=tuple(spouse)),
        )

    builder = _HintBuilder(pedigree, horder, twinset)
    layout = trial()
    for lev in range(layout.depth):
        pairs = builder.duplicate_pairs(layout, lev)
        if not pairs:
            continue
        spouse.extend(builder.spouse_hints(layout, lev, pairs))
        layout = trial()

    return Hints(order=tuple(horder), spouse=tuple(spouse))


__all__ = ["HintWarning", "HintsLike", "check_hint", "autohint"]
