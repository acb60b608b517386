"""
End-to-end pedigree alignment.

Port of the kinship2 ``align.pedigree`` driver:

1. validate the pedigree and obtain hints (automatic when none are given)
2. assign generation depths, pulling spouses onto the same row
3. build the spouse accumulator from hints, childless marriages and parents
4. lay out each founding couple's descendants and merge the blocks
5. decode marriage flags, mark consanguineous marriages and twins
6. optionally space the rows by quadratic programming
"""

from __future__ import annotations

import warnings
from typing import Any, Callable, Optional, Sequence, Union

from .alignment import align_family, check_generation_count, merge_alignments, optimize_positions
from .base import StaticLayout, as_pedigree
from .depth import compute_depths
from .hints import HintsLike, HintWarning, autohint, check_hint
from .preprocessing import share_ancestor
from .scaling import compute_scaling
from .types import (
    NO_PARENT,
    AlignmentArrays,
    Event,
    Hints,
    PedigreeInput,
    PedigreeLayout,
    PedigreeLike,
    ScalingParams,
    Sex,
    SizeType,
    SpouseEntry,
)
from .validation import AlignmentError, ValidationError, validate_pedigree

AlignType = Union[bool, Sequence[float]]


def _spouselist(pedigree: PedigreeInput, hints: Hints) -> tuple[SpouseEntry, ...]:
    """Marriages from hints, childless spouse relations and parent pairs."""
    sex = pedigree.sex
    entries: list[SpouseEntry] = []
    for sp in hints.spouse:
        if sex[sp.left] == Sex.MALE:
            entries.append(SpouseEntry(sp.left, sp.right, side=1, anchor=sp.anchor))
        else:
            entries.append(SpouseEntry(sp.right, sp.left, side=2, anchor=sp.anchor))

    for rel in pedigree.spouse_relations:
        if sex[rel.id1] == Sex.MALE:
            entries.append(SpouseEntry(rel.id1, rel.id2))
        else:
            entries.append(SpouseEntry(rel.id2, rel.id1))

    for dad, mom in zip(pedigree.father_index, pedigree.mother_index):
        if dad != NO_PARENT and mom != NO_PARENT:
            entries.append(SpouseEntry(dad, mom))

    seen: set[tuple[int, int]] = set()
    unique: list[SpouseEntry] = []
    for entry in entries:
        if (entry.male, entry.female) not in seen:
            seen.add((entry.male, entry.female))
            unique.append(entry)
    return tuple(unique)


def _founders(
    pedigree: PedigreeInput, spouselist: Sequence[SpouseEntry], order: Sequence[float]
) -> list[int]:
    """
    Starting points for the layout, in hint order.

    Founders married more than once come first so that all their marriages
    are drawn together; otherwise each founding couple starts from the mother.
    """
    father = pedigree.father_index
    founding = [
        e for e in spouselist if father[e.male] == NO_PARENT and father[e.female] == NO_PARENT
    ]

    def repeated(values: Sequence[int]) -> list[int]:
        seen: set[int] = set()
        dups = []
        for v in values:
            if v in seen:
                dups.append(v)
            seen.add(v)
        return dups

    dup_mom = repeated([e.female for e in founding])
    dup_dad = repeated([e.male for e in founding])
    multiple = set(dup_mom) | set(dup_dad)
    found_mom = [e.female for e in founding if e.male not in multiple and e.female not in multiple]

    founders = list(dict.fromkeys(dup_mom + dup_dad + found_mom))
    return sorted(founders, key=lambda i: order[i])


def _spouse_matrix(
    alignment: AlignmentArrays, pedigree: PedigreeInput
) -> tuple[tuple[int, ...], ...]:
    """Marriage codes: 1 for a marriage, 2 if the partners share an ancestor."""
    father, mother = pedigree.father_index, pedigree.mother_index
    rows = []
    for nid, flags in zip(alignment.nid, alignment.spouse):
        row = []
        for j, married in enumerate(flags):
            if not married:
                row.append(0)
            elif j + 1 < len(nid) and share_ancestor(nid[j], nid[j + 1], father, mother):
                row.append(2)
            else:
                row.append(1)
        rows.append(tuple(row))
    return tuple(rows)


def _twin_matrix(
    alignment: AlignmentArrays, pedigree: PedigreeInput
) -> Optional[tuple[tuple[int, ...], ...]]:
    """Relation code on the left member of each twin pair drawn with its parents."""
    relations = pedigree.twin_relations
    if not relations:
        return None

    first: dict[int, tuple[int, int]] = {}
    for level, (nid, fam) in enumerate(zip(alignment.nid, alignment.fam)):
        for slot, (ind, f) in enumerate(zip(nid, fam)):
            if f > 0:
                first.setdefault(ind, (level, slot))

    twins = [[0] * len(row) for row in alignment.nid]
    for rel in relations:
        if rel.id1 in first and rel.id2 in first:
            level, slot = min(first[rel.id1], first[rel.id2])
            twins[level][slot] = int(rel.code)
    return tuple(tuple(row) for row in twins)


def _resolve_hints(
    pedigree: PedigreeInput, hints: Optional[HintsLike], packed: bool
) -> Hints:
    if hints is not None:
        return check_hint(hints, pedigree.sex)
    try:
        return autohint(pedigree, packed=packed)
    except (ValidationError, AlignmentError) as exc:
        warnings.warn(
            f"Automatic hints failed ({exc}); using the input order instead",
            HintWarning,
            stacklevel=3,
        )
        return Hints(order=tuple(float(i + 1) for i in range(len(pedigree))))


def align_pedigree(
    pedigree: PedigreeLike,
    packed: bool = True,
    width: float = 10,
    align: AlignType = True,
    hints: Optional[HintsLike] = None,
) -> PedigreeLayout:
    """
    Compute the full layout of a pedigree.

    Args:
        pedigree: PedigreeInput, or a mapping of arrays
        packed: Pack rows tightly instead of centring kids under parents
        width: Maximum layout width used by the spacing step
        align: True (default penalties), False (skip spacing), or
            ``(child, spouse)`` penalties for the spacing step
        hints: Display hints; computed with autohint when None

    Returns:
        PedigreeLayout with one row per generation.

    Raises:
        ValidationError: If the pedigree or the hints are invalid
        AlignmentError: If the pedigree cannot be aligned or has more
            than MAX_GENERATIONS generations
        QPError: If the spacing step fails

    Warns:
        HintWarning: If automatic hints fail and the input order is used

    Example:
        >>> layout = align_pedigree({
        ...     "father_index": [-1, -1, 0],
        ...     "mother_index": [-1, -1, 1],
        ...     "sex": ["male", "female", "female"],
        ... })
        >>> layout.nid
        ((0, 1), (2,))
    """
    pedigree = validate_pedigree(as_pedigree(pedigree))
    n = len(pedigree)
    if n == 0:
        return PedigreeLayout(n=(), nid=(), pos=(), fam=(), spouse=())

    father, mother = pedigree.father_index, pedigree.mother_index
    level = compute_depths(father, mother, align_spouses=True)
    check_generation_count(level)

    hints = _resolve_hints(pedigree, hints, packed)
    order = hints.order

    spouselist = _spouselist(pedigree, hints)
    result: Optional[AlignmentArrays] = None
    for founder in _founders(pedigree, spouselist, order):
        block = align_family(founder, father, mother, level, order, packed, spouselist)
        spouselist = block.spouselist
        result = block if result is None else merge_alignments(result, block, packed)

    # Individuals no marriage reaches are drawn on their own
    empty = AlignmentArrays.empty(max(level) + 1)
    placed = {ind for row in result.nid for ind in row} if result is not None else set()
    for ind in sorted((i for i in range(n) if i not in placed), key=lambda i: order[i]):
        block = empty.with_row(level[ind], [ind], [0.0])
        result = block if result is None else merge_alignments(result, block, packed)

    spouse = _spouse_matrix(result, pedigree)
    twins = _twin_matrix(result, pedigree)

    do_align = align if isinstance(align, bool) else len(align) > 0
    if do_align and max(level) > 0:
        pos = optimize_positions(result, result.spouse, width, align)
    else:
        pos = result.pos

    return PedigreeLayout(
        n=result.n,
        nid=result.nid,
        pos=pos,
        fam=result.fam,
        spouse=spouse,
        twins=twins,
    )


class PedigreeAligner(StaticLayout):
    """
    Configurable pedigree layout.

    Wraps align_pedigree in the layout-object style: configuration through
    keyword arguments and properties, start/end events, and optional drawing
    dimensions for a canvas.

    Example:
        aligner = PedigreeAligner(
            pedigree={
                "father_index": [-1, -1, 0, 0],
                "mother_index": [-1, -1, 1, 1],
                "sex": ["male", "female", "male", "female"],
            },
            size=(800, 600),
        )
        aligner.run()
        aligner.result.pos
        aligner.scaling.h_scale
    """

    def __init__(
        self,
        *,
        pedigree: Optional[PedigreeLike] = None,
        size: Optional[SizeType] = None,
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
        # Aligner-specific parameters
        packed: bool = True,
        width: float = 10,
        align: AlignType = True,
        hints: Optional[HintsLike] = None,
        symbol_size: float = 1.0,
        label_height: float = 0.0,
    ) -> None:
        """
        Initialize the aligner.

        Args:
            pedigree: PedigreeInput, or a mapping of arrays
            size: Canvas size as (width, height); enables ``scaling``
            on_start: Callback for start event
            on_end: Callback for end event
            packed: Pack rows tightly instead of centring kids under parents
            width: Maximum layout width used by the spacing step
            align: True, False, or ``(child, spouse)`` spacing penalties
            hints: Display hints; computed automatically when None
            symbol_size: Symbol size multiplier for ``scaling``
            label_height: Label line height for ``scaling``
        """
        super().__init__(pedigree=pedigree, size=size, on_start=on_start, on_end=on_end)
        self._packed: bool = bool(packed)
        self._width: float = 10.0
        self.width = width
        self._align: AlignType = align
        self._hints: Optional[HintsLike] = hints
        self._symbol_size: float = float(symbol_size)
        self._label_height: float = float(label_height)

        self.result: Optional[PedigreeLayout] = None
        self.scaling: Optional[ScalingParams] = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def packed(self) -> bool:
        """Get whether rows are packed."""
        return self._packed

    @packed.setter
    def packed(self, value: bool) -> None:
        self._packed = bool(value)

    @property
    def width(self) -> float:
        """Get maximum layout width."""
        return self._width

    @width.setter
    def width(self, value: float) -> None:
        """Set maximum layout width (must be positive)."""
        value = float(value)
        if not value > 0:
            raise ValueError(f"width must be positive, got {value}")
        self._width = value

    @property
    def align(self) -> AlignType:
        """Get spacing penalties (or whether spacing runs)."""
        return self._align

    @align.setter
    def align(self, value: AlignType) -> None:
        self._align = value

    @property
    def hints(self) -> Optional[HintsLike]:
        """Get display hints."""
        return self._hints

    @hints.setter
    def hints(self, value: Optional[HintsLike]) -> None:
        self._hints = value

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------

    def _compute(self, **kwargs: Any) -> PedigreeLayout:
        self.result = align_pedigree(
            self._pedigree,
            packed=self._packed,
            width=self._width,
            align=self._align,
            hints=self._hints,
        )
        self.scaling = None
        if self._canvas_size is not None:
            self.scaling = compute_scaling(
                self.result,
                self._canvas_size[0],
                self._canvas_size[1],
                symbol_size=self._symbol_size,
                label_height=self._label_height,
            )
        return self.result


__all__ = ["align_pedigree", "PedigreeAligner"]
