"""
Common types for the pedigree layout engine.

This module provides the data model shared by every stage of the layout:
- Sex, RelationCode: enumerations for individuals and special relations
- PedigreeInput: the family description consumed by the engine
- Hints, SpouseHint: optional caller guidance for ordering and marriages
- SpouseEntry, AlignmentArrays: intermediate per-generation alignment
- PedigreeLayout, ScalingParams: the finished result handed to a renderer
- EventType, Event: layout lifecycle events
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Any, Callable, Iterator, Mapping, Optional, Sequence, TypedDict, Union

# Marker for "no parent in this pedigree"
NO_PARENT = -1


class EventType(IntEnum):
    """
    Layout lifecycle events.

    - start: Layout computation has begun
    - end: Layout is complete
    """

    start = 0
    end = 1


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    layout: Optional["PedigreeLayout"]
    listener: Optional[Callable[[], None]]


class Sex(str, Enum):
    """Sex of an individual."""

    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Union[str, "Sex", None]) -> "Sex":
        """Convert a string (or None) into a Sex, defaulting to UNKNOWN."""
        if isinstance(value, Sex):
            return value
        if value is None:
            return cls.UNKNOWN
        key = str(value).strip().lower()
        aliases = {"m": "male", "1": "male", "f": "female", "2": "female"}
        key = aliases.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


class RelationCode(IntEnum):
    """Codes for special pairwise relations."""

    MZ_TWIN = 1
    DZ_TWIN = 2
    UNKNOWN_TWIN = 3
    SPOUSE = 4

    @property
    def is_twin(self) -> bool:
        return self < RelationCode.SPOUSE


@dataclass(frozen=True)
class Relation:
    """A special relation between individuals ``id1`` and ``id2``."""

    id1: int
    id2: int
    code: RelationCode

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", RelationCode(int(self.code)))


@dataclass(frozen=True)
class SpouseHint:
    """
    A requested marriage placement.

    Attributes:
        left: Individual to place on the left
        right: Individual to place on the right
        anchor: 0 = no anchor, 1 = anchored on the left partner's family,
            2 = anchored on the right partner's family
    """

    left: int
    right: int
    anchor: int = 0


@dataclass(frozen=True)
class Hints:
    """
    Display hints for a pedigree.

    Attributes:
        order: One sort key per individual. Siblings (and founding couples)
            are placed left to right by increasing key.
        spouse: Requested marriage placements. Entries may also be
            ``(left, right, anchor)`` tuples or mappings with
            ``left``/``leftIndex``, ``right``/``rightIndex`` and ``anchor`` keys.
    """

    order: Optional[tuple[float, ...]] = None
    spouse: tuple[SpouseHint, ...] = ()

    def __post_init__(self) -> None:
        if self.order is not None:
            object.__setattr__(self, "order", tuple(self.order))
        spouse = []
        for s in self.spouse or ():
            if isinstance(s, SpouseHint):
                spouse.append(s)
            elif isinstance(s, Mapping):
                spouse.append(
                    SpouseHint(
                        s.get("left", s.get("leftIndex")),
                        s.get("right", s.get("rightIndex")),
                        s.get("anchor", 0),
                    )
                )
            else:
                spouse.append(SpouseHint(*s))
        object.__setattr__(self, "spouse", tuple(spouse))


@dataclass(frozen=True)
class PedigreeInput:
    """
    One record per individual, arrays aligned by index.

    Attributes:
        ids: Opaque identifiers (informational only)
        father_index: Index of each individual's father, or -1
        mother_index: Index of each individual's mother, or -1
        sex: Sex of each individual
        relations: Special relations (twins, childless marriages)
    """

    ids: tuple[Any, ...]
    father_index: tuple[int, ...]
    mother_index: tuple[int, ...]
    sex: tuple[Sex, ...]
    relations: tuple[Relation, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "ids", tuple(self.ids))
        object.__setattr__(self, "father_index", tuple(int(i) for i in self.father_index))
        object.__setattr__(self, "mother_index", tuple(int(i) for i in self.mother_index))
        object.__setattr__(self, "sex", tuple(Sex.parse(s) for s in self.sex))
        relations = []
        for rel in self.relations or ():
            if isinstance(rel, Relation):
                relations.append(rel)
            elif isinstance(rel, Mapping):
                relations.append(Relation(int(rel["id1"]), int(rel["id2"]), rel["code"]))
            else:
                relations.append(Relation(*rel))
        object.__setattr__(self, "relations", tuple(relations))

    def __len__(self) -> int:
        return len(self.ids)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PedigreeInput":
        """
        Build from a mapping with camelCase or snake_case keys.

        Recognised keys: ``id``/``ids``, ``fatherIndex``/``father_index``,
        ``motherIndex``/``mother_index``, ``sex``, ``relation``/``relations``.
        """
        ids = data.get("ids", data.get("id"))
        father = data.get("father_index", data.get("fatherIndex"))
        mother = data.get("mother_index", data.get("motherIndex"))
        if ids is None:
            ids = list(range(len(father or ())))
        return cls(
            ids=ids,
            father_index=father if father is not None else [NO_PARENT] * len(ids),
            mother_index=mother if mother is not None else [NO_PARENT] * len(ids),
            sex=data.get("sex", [Sex.UNKNOWN] * len(ids)),
            relations=data.get("relations", data.get("relation")) or (),
        )

    @property
    def twin_relations(self) -> tuple[Relation, ...]:
        return tuple(r for r in self.relations if r.code.is_twin)

    @property
    def spouse_relations(self) -> tuple[Relation, ...]:
        return tuple(r for r in self.relations if r.code == RelationCode.SPOUSE)


PedigreeLike = Union[PedigreeInput, Mapping[str, Any]]


@dataclass(frozen=True)
class SpouseEntry:
    """
    One row of the spouse accumulator.

    Attributes:
        male: Individual in the male column
        female: Individual in the female column
        side: 1 if the male goes on the left, 2 if the female does,
            0 if undecided
        anchor: 0 = none, otherwise the side (1 left, 2 right) whose
            family the marriage is drawn with
    """

    male: int
    female: int
    side: int = 0
    anchor: int = 0


def _freeze(rows: Sequence[Sequence[Any]]) -> tuple[tuple[Any, ...], ...]:
    return tuple(tuple(row) for row in rows)


@dataclass(frozen=True)
class AlignmentArrays:
    """
    Intermediate per-generation layout built by the alignment engine.

    Every attribute holds one row per generation. ``fam[level][slot]`` is 0
    when no parents are drawn for the slot; a value ``k > 0`` means the
    parents occupy slots ``k - 1`` and ``k`` of row ``level - 1``.
    ``spouse[level][slot]`` is True when the slot is married to its right
    neighbour.
    """

    nid: tuple[tuple[int, ...], ...]
    pos: tuple[tuple[float, ...], ...]
    fam: tuple[tuple[int, ...], ...]
    spouse: tuple[tuple[bool, ...], ...]
    spouselist: tuple[SpouseEntry, ...] = ()

    def __post_init__(self) -> None:
        for name in ("nid", "pos", "fam", "spouse"):
            object.__setattr__(self, name, _freeze(getattr(self, name)))
        object.__setattr__(self, "spouselist", tuple(self.spouselist))
        sizes = [tuple(len(r) for r in getattr(self, name)) for name in ("nid", "pos", "fam", "spouse")]
        if any(s != sizes[0] for s in sizes[1:]):
            raise ValueError("AlignmentArrays rows must have matching lengths")

    @classmethod
    def empty(cls, depth: int, spouselist: Sequence[SpouseEntry] = ()) -> "AlignmentArrays":
        rows: list[tuple[()]] = [() for _ in range(depth)]
        return cls(nid=rows, pos=rows, fam=rows, spouse=rows, spouselist=tuple(spouselist))

    @property
    def n(self) -> tuple[int, ...]:
        """Number of occupied slots per generation."""
        return tuple(len(row) for row in self.nid)

    @property
    def depth(self) -> int:
        """Number of generation rows."""
        return len(self.nid)

    def with_row(
        self,
        level: int,
        nid: Sequence[int],
        pos: Sequence[float],
        fam: Optional[Sequence[int]] = None,
        spouse: Optional[Sequence[bool]] = None,
    ) -> "AlignmentArrays":
        """Return a copy with row ``level`` replaced."""
        size = len(nid)
        rows = {
            "nid": tuple(int(v) for v in nid),
            "pos": tuple(float(v) for v in pos),
            "fam": tuple(fam) if fam is not None else (0,) * size,
            "spouse": tuple(bool(v) for v in spouse) if spouse is not None else (False,) * size,
        }
        changes = {}
        for name, row in rows.items():
            current = list(getattr(self, name))
            current[level] = row
            changes[name] = tuple(current)
        return replace(self, **changes)

    def with_fam_row(self, level: int, fam: Sequence[int]) -> "AlignmentArrays":
        """Return a copy with the family pointers of row ``level`` replaced."""
        rows = list(self.fam)
        rows[level] = tuple(int(f) for f in fam)
        return replace(self, fam=tuple(rows))

    def with_spouselist(self, spouselist: Sequence[SpouseEntry]) -> "AlignmentArrays":
        return replace(self, spouselist=tuple(spouselist))

    def shifted(self, amount: float, start_level: int = 0) -> "AlignmentArrays":
        """Return a copy with every position from ``start_level`` down moved right."""
        pos = tuple(
            tuple(p + amount for p in row) if level >= start_level else row
            for level, row in enumerate(self.pos)
        )
        return replace(self, pos=pos)


@dataclass(frozen=True)
class PedigreeLayout:
    """
    The finished pedigree layout.

    Attributes:
        n: Number of slots per generation
        nid: Individual index per slot
        pos: Horizontal position per slot
        fam: Family pointer per slot (see AlignmentArrays)
        spouse: 0 = not married to the right neighbour, 1 = married,
            2 = married and the partners share an ancestor
        twins: None, or the relation code on the left member of each
            adjacent twin pair (0 elsewhere)
    """

    n: tuple[int, ...]
    nid: tuple[tuple[int, ...], ...]
    pos: tuple[tuple[float, ...], ...]
    fam: tuple[tuple[int, ...], ...]
    spouse: tuple[tuple[int, ...], ...]
    twins: Optional[tuple[tuple[int, ...], ...]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "n", tuple(self.n))
        for name in ("nid", "pos", "fam", "spouse"):
            object.__setattr__(self, name, _freeze(getattr(self, name)))
        if self.twins is not None:
            object.__setattr__(self, "twins", _freeze(self.twins))

    @property
    def depth(self) -> int:
        return len(self.n)

    def slots(self) -> Iterator[tuple[int, int, int, float]]:
        """Yield ``(level, slot, individual, position)`` for every occupied slot."""
        for level, row in enumerate(self.nid):
            for slot, individual in enumerate(row):
                yield level, slot, individual, self.pos[level][slot]

    def positions(self) -> dict[int, tuple[float, int]]:
        """Map each individual to ``(x, generation)`` of its first appearance."""
        result: dict[int, tuple[float, int]] = {}
        for level, _slot, individual, x in self.slots():
            result.setdefault(individual, (x, level))
        return result

    def x_range(self) -> tuple[float, float]:
        """Smallest and largest occupied position."""
        xs = [x for _l, _s, _i, x in self.slots()]
        if not xs:
            return 0.0, 0.0
        return min(xs), max(xs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "n": list(self.n),
            "nid": [list(r) for r in self.nid],
            "pos": [list(r) for r in self.pos],
            "fam": [list(r) for r in self.fam],
            "spouse": [list(r) for r in self.spouse],
            "twins": None if self.twins is None else [list(r) for r in self.twins],
        }


@dataclass(frozen=True)
class ScalingParams:
    """
    Drawing dimensions derived from a layout and a canvas.

    ``box_width`` and ``box_height`` are in layout units; ``h_scale`` and
    ``v_scale`` convert layout units to canvas units.
    """

    box_width: float
    box_height: float
    leg_height: float
    h_scale: float
    v_scale: float


SizeType = Union[Sequence[float], tuple[float, float]]

__all__ = [
    "NO_PARENT",
    "EventType",
    "Event",
    "Sex",
    "RelationCode",
    "Relation",
    "SpouseHint",
    "Hints",
    "PedigreeInput",
    "PedigreeLike",
    "SpouseEntry",
    "AlignmentArrays",
    "PedigreeLayout",
    "ScalingParams",
    "SizeType",
]
