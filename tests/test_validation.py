"""Tests for input validation utilities."""

import pytest

from pedigree_layout import (
    InvalidCanvasSizeError,
    InvalidParentReferenceError,
    InvalidParentSexError,
    MissingParentError,
    PedigreeInput,
    ValidationError,
    validate_canvas_size,
    validate_parent_indices,
    validate_pedigree,
)


def make_pedigree(father, mother, sex, relations=()):
    return PedigreeInput(
        ids=list(range(len(father))),
        father_index=father,
        mother_index=mother,
        sex=sex,
        relations=relations,
    )


class TestValidateCanvasSize:
    """Tests for canvas size validation."""

    def test_valid_size(self):
        """Valid sizes are returned as floats."""
        assert validate_canvas_size([800, 600]) == (800.0, 600.0)

    def test_zero_width(self):
        """Zero width is rejected."""
        with pytest.raises(InvalidCanvasSizeError, match="width must be positive"):
            validate_canvas_size([0, 600])

    def test_negative_height(self):
        """Negative height is rejected."""
        with pytest.raises(InvalidCanvasSizeError, match="height must be positive"):
            validate_canvas_size([800, -1])

    def test_wrong_length(self):
        """Size must have exactly two elements."""
        with pytest.raises(InvalidCanvasSizeError, match="must have 2 elements"):
            validate_canvas_size([800])


class TestValidateParentIndices:
    """Tests for parent index validation."""

    def test_valid_indices(self):
        """In-range indices produce no issues."""
        assert validate_parent_indices([-1, -1, 0], [-1, -1, 1]) == []

    def test_out_of_range_strict(self):
        """Strict mode raises with the first offender."""
        with pytest.raises(InvalidParentReferenceError, match="Invalid parent indices") as excinfo:
            validate_parent_indices([-1, 3], [-1, 0])
        assert excinfo.value.index == 1
        assert excinfo.value.parent == 3

    def test_out_of_range_lenient(self):
        """Lenient mode lists the issues."""
        issues = validate_parent_indices([-1, 3], [-2, 0], strict=False)

        assert [i for i, _ in issues] == [0, 1]
        assert "out of bounds" in issues[0][1]

    def test_length_mismatch(self):
        """Father and mother arrays must be the same length."""
        with pytest.raises(InvalidParentReferenceError, match="entries"):
            validate_parent_indices([-1, -1], [-1])


class TestValidatePedigree:
    """Tests for whole-pedigree validation."""

    def test_valid(self):
        """A valid pedigree is returned unchanged."""
        ped = make_pedigree([-1, -1, 0], [-1, -1, 1], ["male", "female", "female"])

        assert validate_pedigree(ped) is ped

    def test_father_not_male(self):
        """A father recorded as female is rejected."""
        ped = make_pedigree([-1, -1, 0], [-1, -1, 1], ["female", "female", "male"])

        with pytest.raises(InvalidParentSexError, match="father 0 is not male"):
            validate_pedigree(ped)

    def test_mother_not_female(self):
        """A mother of unknown sex is rejected."""
        ped = make_pedigree([-1, -1, 0], [-1, -1, 1], ["male", "unknown", "male"])

        with pytest.raises(InvalidParentSexError, match="mother 1 is not female"):
            validate_pedigree(ped)

    def test_single_parent(self):
        """Everyone needs zero or two parents."""
        ped = make_pedigree([-1, -1, 0], [-1, -1, -1], ["male", "female", "male"])

        with pytest.raises(MissingParentError, match="0 parents or 2 parents") as excinfo:
            validate_pedigree(ped)
        assert excinfo.value.indices == [2]

    def test_single_parent_allowed(self):
        """The two-parent rule can be relaxed."""
        ped = make_pedigree([-1, -1, 0], [-1, -1, -1], ["male", "female", "male"])

        assert validate_pedigree(ped, require_both_parents=False) is ped

    def test_relation_out_of_range(self):
        """Relations must reference individuals in the pedigree."""
        ped = make_pedigree([-1, -1], [-1, -1], ["male", "female"], relations=[(0, 5, 4)])

        with pytest.raises(InvalidParentReferenceError, match="Relation"):
            validate_pedigree(ped)

    def test_errors_are_value_errors(self):
        """Validation errors can be caught as ValueError."""
        assert issubclass(ValidationError, ValueError)
        assert issubclass(MissingParentError, ValidationError)
