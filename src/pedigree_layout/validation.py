"""
Input validation utilities for the pedigree layout engine.

Provides the error taxonomy shared by all stages and centralized validation
functions for pedigree structure and canvas size. Raises descriptive
exceptions on invalid input; every exception carries the offending indices
so that callers can correct the input and retry.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .types import NO_PARENT, PedigreeInput, Sex


class ValidationError(ValueError):
    """Base exception for pedigree validation errors."""

    pass


class InvalidCanvasSizeError(ValidationError):
    """Raised when canvas dimensions are invalid."""

    pass


class InvalidParentReferenceError(ValidationError):
    """Raised when a parent index points outside the pedigree."""

    def __init__(self, message: str, index: Optional[int] = None, parent: Optional[int] = None):
        super().__init__(message)
        self.index = index
        self.parent = parent


class InvalidParentSexError(ValidationError):
    """Raised when a father is not male or a mother is not female."""

    def __init__(self, message: str, index: Optional[int] = None, parent: Optional[int] = None):
        super().__init__(message)
        self.index = index
        self.parent = parent


class MissingParentError(ValidationError):
    """Raised when an individual has exactly one recorded parent."""

    def __init__(self, message: str, indices: Sequence[int] = ()):
        super().__init__(message)
        self.indices = list(indices)


class CyclicPedigreeError(ValidationError):
    """Raised when an individual is their own ancestor."""

    def __init__(self, message: str, cycle: Sequence[int] = ()):
        super().__init__(message)
        self.cycle = list(cycle)


class InvalidHintShapeError(ValidationError):
    """Raised when hints are missing a component or have the wrong length."""

    pass


class InvalidSpouseIndexError(ValidationError):
    """Raised when a spouse hint references an index outside the pedigree."""

    def __init__(self, message: str, indices: Sequence[int] = ()):
        super().__init__(message)
        self.indices = list(indices)


class InvalidSpousePairingError(ValidationError):
    """Raised when a spouse hint does not pair one male with one female."""

    def __init__(self, message: str, pairs: Sequence[tuple[int, int]] = ()):
        super().__init__(message)
        self.pairs = list(pairs)


class AlignmentError(RuntimeError):
    """Raised when the alignment engine cannot lay out a pedigree."""

    pass


class DepthAlignmentError(AlignmentError):
    """Raised when spouse alignment leaves no individual at generation 0."""

    pass


def validate_canvas_size(size: Sequence[float]) -> tuple[float, float]:
    """
    Validate canvas size dimensions.

    Args:
        size: [width, height] sequence

    Returns:
        Validated (width, height) tuple

    Raises:
        InvalidCanvasSizeError: If dimensions are invalid
    """
    if len(size) < 2:
        raise InvalidCanvasSizeError(
            f"Canvas size must have 2 elements [width, height], got {len(size)}"
        )

    width, height = float(size[0]), float(size[1])

    if not width > 0:
        raise InvalidCanvasSizeError(f"Canvas width must be positive, got {width}")
    if not height > 0:
        raise InvalidCanvasSizeError(f"Canvas height must be positive, got {height}")

    return width, height


def validate_parent_indices(
    father_index: Sequence[int],
    mother_index: Sequence[int],
    strict: bool = True,
) -> list[tuple[int, str]]:
    """
    Validate that every parent index is -1 or a valid individual index.

    Args:
        father_index: Father index per individual
        mother_index: Mother index per individual
        strict: If True, raises on invalid. If False, returns list of issues.

    Returns:
        List of (individual_index, issue_description) tuples

    Raises:
        InvalidParentReferenceError: If strict=True and an index is out of range
    """
    n = len(father_index)
    if len(mother_index) != n:
        raise InvalidParentReferenceError(
            f"father_index has {n} entries but mother_index has {len(mother_index)}"
        )

    issues: list[tuple[int, str]] = []
    first: Optional[tuple[int, int]] = None
    for i in range(n):
        for role, parent in (("father", father_index[i]), ("mother", mother_index[i])):
            if parent != NO_PARENT and not 0 <= parent < n:
                issues.append((i, f"Individual {i}: {role} index {parent} out of bounds [0, {n})"))
                if first is None:
                    first = (i, parent)

    if strict and issues:
        msg = "Invalid parent indices:\n" + "\n".join(issue[1] for issue in issues)
        raise InvalidParentReferenceError(msg, index=first[0], parent=first[1])

    return issues


def validate_pedigree(pedigree: PedigreeInput, require_both_parents: bool = True) -> PedigreeInput:
    """
    Validate a pedigree before layout.

    Checks array lengths, parent index ranges, parent sexes, and (optionally)
    that everyone has either zero or two recorded parents.

    Args:
        pedigree: Pedigree to check
        require_both_parents: Reject individuals with exactly one parent

    Returns:
        The pedigree, unchanged

    Raises:
        InvalidParentReferenceError: On length mismatch or out-of-range index
        InvalidParentSexError: If a father is not male or a mother not female
        MissingParentError: If someone has a single parent
    """
    n = len(pedigree.ids)
    for name in ("father_index", "mother_index", "sex"):
        if len(getattr(pedigree, name)) != n:
            raise InvalidParentReferenceError(
                f"{name} has {len(getattr(pedigree, name))} entries, expected {n}"
            )

    father, mother, sex = pedigree.father_index, pedigree.mother_index, pedigree.sex
    validate_parent_indices(father, mother, strict=True)

    for i in range(n):
        if father[i] != NO_PARENT and sex[father[i]] != Sex.MALE:
            raise InvalidParentSexError(
                f"Individual {i}: father {father[i]} is not male", index=i, parent=father[i]
            )
        if mother[i] != NO_PARENT and sex[mother[i]] != Sex.FEMALE:
            raise InvalidParentSexError(
                f"Individual {i}: mother {mother[i]} is not female", index=i, parent=mother[i]
            )

    if require_both_parents:
        single = [i for i in range(n) if (father[i] == NO_PARENT) != (mother[i] == NO_PARENT)]
        if single:
            raise MissingParentError(
                f"Everyone must have 0 parents or 2 parents, not just one: {single}",
                indices=single,
            )

    for rel in pedigree.relations:
        if not (0 <= rel.id1 < n and 0 <= rel.id2 < n):
            raise InvalidParentReferenceError(
                f"Relation ({rel.id1}, {rel.id2}) references an index out of bounds [0, {n})"
            )

    return pedigree


__all__ = [
    "ValidationError",
    "InvalidCanvasSizeError",
    "InvalidParentReferenceError",
    "InvalidParentSexError",
    "MissingParentError",
    "CyclicPedigreeError",
    "InvalidHintShapeError",
    "InvalidSpouseIndexError",
    "InvalidSpousePairingError",
    "AlignmentError",
    "DepthAlignmentError",
    "validate_canvas_size",
    "validate_parent_indices",
    "validate_pedigree",
]
