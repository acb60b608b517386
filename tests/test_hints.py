"""
Tests for display hints: validation and automatic generation.
"""

import pytest

from pedigree_layout import (
    Hints,
    InvalidHintShapeError,
    InvalidSpouseIndexError,
    InvalidSpousePairingError,
    SpouseHint,
    ValidationError,
    align_pedigree,
    autohint,
    check_hint,
)

# =============================================================================
# Test Fixtures
# =============================================================================

SEX = ["male", "female", "male", "female"]


def marry_in_pedigree():
    """Two families joined by a marriage, with a second sib in the first family."""
    # 0 x 1 -> 2, 3; 4 x 5 -> 6; 2 x 6 -> 7
    return {
        "father_index": [-1, -1, 0, 0, -1, -1, 4, 2],
        "mother_index": [-1, -1, 1, 1, -1, -1, 5, 6],
        "sex": ["male", "female", "male", "female", "male", "female", "female", "male"],
    }


def twin_pedigree():
    """A couple with identical twin sons."""
    return {
        "father_index": [-1, -1, 0, 0],
        "mother_index": [-1, -1, 1, 1],
        "sex": ["male", "female", "male", "male"],
        "relations": [(2, 3, 1)],
    }


# =============================================================================
# check_hint
# =============================================================================


class TestCheckHint:
    """Tests for hint validation."""

    def test_valid_hints_returned(self):
        """Valid hints pass through unchanged."""
        hints = Hints(order=(1, 2, 1, 2), spouse=[SpouseHint(0, 1)])

        assert check_hint(hints, SEX) is hints

    def test_mapping_accepted(self):
        """A mapping with order and spouse keys is converted."""
        hints = check_hint({"order": [1, 2, 3, 4], "spouse": [(2, 3, 1)]}, SEX)

        assert hints.order == (1, 2, 3, 4)
        assert hints.spouse == (SpouseHint(2, 3, 1),)

    def test_missing_order(self):
        """The order component is required."""
        with pytest.raises(InvalidHintShapeError, match="Missing order"):
            check_hint(Hints(), SEX)

    def test_wrong_order_length(self):
        """One order key is needed per individual."""
        with pytest.raises(InvalidHintShapeError, match="Wrong length"):
            check_hint(Hints(order=(1, 2, 3)), SEX)

    def test_spouse_index_out_of_range(self):
        """Spouse hints must name individuals in the pedigree."""
        with pytest.raises(InvalidSpouseIndexError, match="Invalid spouse value") as excinfo:
            check_hint(Hints(order=(1, 2, 3, 4), spouse=[(0, 9)]), SEX)
        assert excinfo.value.indices == [9]

    def test_mapping_spouse_entries(self):
        """Spouse entries may be mappings with short or long key names."""
        hints = check_hint(
            {
                "order": [1, 2, 3, 4],
                "spouse": [
                    {"left": 0, "right": 1, "anchor": 2},
                    {"leftIndex": 3, "rightIndex": 2},
                ],
            },
            SEX,
        )

        assert hints.spouse == (SpouseHint(0, 1, 2), SpouseHint(3, 2, 0))

    def test_mapping_spouse_missing_index(self):
        """A mapping without a right index is an index error."""
        with pytest.raises(InvalidSpouseIndexError) as excinfo:
            check_hint({"order": [1, 2, 3, 4], "spouse": [{"left": 0}]}, SEX)
        assert excinfo.value.indices == [None]

    def test_non_integer_spouse_index(self):
        """Spouse indices must be integers."""
        with pytest.raises(InvalidSpouseIndexError, match="Invalid spouse value") as excinfo:
            check_hint(Hints(order=(1, 2, 3, 4), spouse=[(0.5, 1, 0)]), SEX)
        assert excinfo.value.indices == [0.5]

    def test_string_spouse_index(self):
        """String indices are reported, not compared."""
        with pytest.raises(InvalidSpouseIndexError):
            check_hint(Hints(order=(1, 2, 3, 4), spouse=[("0", 1)]), SEX)

    def test_same_sex_marriage_hint(self):
        """A spouse hint must pair a male with a female."""
        with pytest.raises(InvalidSpousePairingError, match="not male/female") as excinfo:
            check_hint(Hints(order=(1, 2, 3, 4), spouse=[(0, 2)]), SEX)
        assert excinfo.value.pairs == [(0, 2)]

    def test_unknown_sex_in_hint(self):
        """Unknown sex cannot be half of a hinted marriage."""
        with pytest.raises(InvalidSpousePairingError):
            check_hint(Hints(order=(1, 2), spouse=[(0, 1)]), ["male", "unknown"])

    def test_bad_anchor(self):
        """Anchors are 0, 1 or 2."""
        with pytest.raises(InvalidHintShapeError, match="anchor"):
            check_hint(Hints(order=(1, 2, 3, 4), spouse=[(0, 1, 3)]), SEX)

    def test_length_checked_before_spouses(self):
        """The order length problem is reported first."""
        with pytest.raises(InvalidHintShapeError):
            check_hint(Hints(order=(1,), spouse=[(0, 2)]), SEX)

    def test_errors_are_validation_errors(self):
        """Hint errors derive from ValidationError."""
        with pytest.raises(ValidationError):
            check_hint(Hints(), SEX)


# =============================================================================
# autohint
# =============================================================================


class TestAutohint:
    """Tests for automatic hint generation."""

    def test_one_key_per_individual(self):
        """Hints cover every individual and pass validation."""
        ped = marry_in_pedigree()
        hints = autohint(ped)

        assert len(hints.order) == 8
        assert check_hint(hints, ped["sex"]) is hints

    def test_plain_order_for_simple_family(self):
        """Without duplicates the order numbers each generation."""
        hints = autohint(
            {
                "father_index": [-1, -1, 0, 0],
                "mother_index": [-1, -1, 1, 1],
                "sex": ["male", "female", "female", "male"],
            }
        )

        assert hints.order == (1, 2, 1, 2)
        assert hints.spouse == ()

    def test_trial_layout_duplicates_marry_in(self):
        """Without hints the marry-in is drawn twice on her row."""
        ped = marry_in_pedigree()
        layout = align_pedigree(ped, hints=Hints(order=(1, 2, 1, 2, 3, 4, 3, 1)), align=False)

        assert layout.nid[1] == (2, 6, 3, 6)

    def test_marry_in_resolved(self):
        """The husband moves to the end of his sibship next to his wife's family."""
        hints = autohint(marry_in_pedigree())

        assert hints.spouse == (SpouseHint(2, 6, 1),)
        assert hints.order == (1, 2, 2, 1, 3, 4, 3, 1)

    def test_resolved_layout_has_no_duplicates(self):
        """Laying out with the generated hints draws everyone once."""
        ped = marry_in_pedigree()
        layout = align_pedigree(ped, hints=autohint(ped), align=False)

        assert layout.nid == ((0, 1, 4, 5), (3, 2, 6), (7,))
        assert layout.fam == ((0, 0, 0, 0), (1, 1, 3), (2,))

    def test_twins_adjacent(self):
        """Twins get consecutive keys."""
        hints = autohint(twin_pedigree())

        assert hints.order[2:] == (1, 2)

    def test_starting_order_kept(self):
        """Non-zero starting keys are kept."""
        hints = autohint(
            {
                "father_index": [-1, -1, 0, 0],
                "mother_index": [-1, -1, 1, 1],
                "sex": ["male", "female", "female", "male"],
            },
            hints=Hints(order=(1, 2, 5, 3)),
        )

        assert hints.order == (1, 2, 5, 3)
