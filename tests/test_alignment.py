"""
Tests for the recursive alignment engine: subtree layout and block merging.
"""

import pytest

from pedigree_layout import (
    MAX_GENERATIONS,
    AlignmentArrays,
    AlignmentError,
    InvalidHintShapeError,
    InvalidParentReferenceError,
    SpouseEntry,
    ValidationError,
    align_family,
    align_pedigree,
    align_siblings,
    check_generation_count,
    merge_alignments,
)

# =============================================================================
# Test Fixtures
# =============================================================================


def single(ind, depth=1, level=0):
    """Block holding one individual."""
    return AlignmentArrays.empty(depth).with_row(level, [ind], [0.0])


def couple_with_child(dad, mom, kid):
    """Two-row block: a married couple over one child."""
    return (
        AlignmentArrays.empty(2)
        .with_row(0, [dad, mom], [0.0, 1.0], spouse=[True, False])
        .with_row(1, [kid], [0.5], fam=[1])
    )


def nuclear_family():
    """Father 0, mother 1, children 2 and 3."""
    father = [-1, -1, 0, 0]
    mother = [-1, -1, 1, 1]
    level = [0, 0, 1, 1]
    order = [1, 2, 1, 2]
    return father, mother, level, order


# =============================================================================
# merge_alignments
# =============================================================================


class TestMergeAlignments:
    """Tests for side-by-side merging of blocks."""

    def test_two_singletons(self):
        """1 + 1 individuals give a row of two, one unit apart."""
        merged = merge_alignments(single(0), single(1), packed=True)

        assert merged.n == (2,)
        assert merged.nid == ((0, 1),)
        assert merged.pos == ((0.0, 1.0),)

    def test_shared_individual_collapses(self):
        """2 + 2 with the same person at the seam give 3 slots."""
        left = AlignmentArrays.empty(1).with_row(0, [0, 1], [0.0, 1.0])
        right = AlignmentArrays.empty(1).with_row(0, [1, 2], [0.0, 1.0])
        merged = merge_alignments(left, right, packed=True)

        assert merged.n == (3,)
        assert merged.nid == ((0, 1, 2),)
        assert merged.pos == ((0.0, 1.0, 2.0),)

    def test_family_pointers_shifted(self):
        """Right family pointers move past the left parents."""
        merged = merge_alignments(
            couple_with_child(0, 1, 2), couple_with_child(3, 4, 5), packed=True
        )

        assert merged.nid == ((0, 1, 3, 4), (2, 5))
        assert merged.fam == ((0, 0, 0, 0), (1, 3))
        assert merged.spouse == ((True, False, True, False), (False, False))

    def test_packed_rows_slide_independently(self):
        """Packed mode starts each right row one unit after the left row."""
        merged = merge_alignments(
            couple_with_child(0, 1, 2), couple_with_child(3, 4, 5), packed=True
        )

        assert merged.pos == ((0.0, 1.0, 2.0, 3.0), (0.5, 2.0))

    def test_unpacked_keeps_shape(self):
        """Unpacked mode moves the whole right block by one slide."""
        merged = merge_alignments(
            couple_with_child(0, 1, 2), couple_with_child(3, 4, 5), packed=False
        )

        assert merged.pos == ((0.0, 1.0, 2.0, 3.0), (0.5, 2.5))

    def test_empty_rows_skipped(self):
        """A right block with an empty row leaves that row alone."""
        left = couple_with_child(0, 1, 2)
        right = single(3, depth=2, level=0)
        merged = merge_alignments(left, right, packed=True)

        assert merged.nid == ((0, 1, 3), (2,))
        assert merged.fam[1] == (1,)

    def test_overlap_keeps_family(self):
        """The collapsed slot keeps the larger family pointer."""
        left = (
            AlignmentArrays.empty(2)
            .with_row(0, [0, 1], [0.0, 1.0], spouse=[True, False])
            .with_row(1, [2, 3], [0.0, 1.0], fam=[1, 0], spouse=[True, False])
        )
        right = (
            AlignmentArrays.empty(2)
            .with_row(0, [4, 5], [0.0, 1.0], spouse=[True, False])
            .with_row(1, [3], [0.0], fam=[1])
        )
        merged = merge_alignments(left, right, packed=True)

        assert merged.nid[1] == (2, 3)
        assert merged.fam[1] == (1, 3)
        assert merged.spouse[1] == (True, False)

    def test_spouselist_union(self):
        """Accumulators are combined without duplicates."""
        a, b, c = SpouseEntry(0, 1), SpouseEntry(2, 3), SpouseEntry(4, 5)
        left = AlignmentArrays.empty(1, [a, b]).with_row(0, [0], [0.0])
        right = AlignmentArrays.empty(1, [b, c]).with_row(0, [6], [0.0])
        merged = merge_alignments(left, right, packed=True)

        assert merged.spouselist == (a, b, c)

    def test_inputs_unchanged(self):
        """Merging returns a new object."""
        left = couple_with_child(0, 1, 2)
        right = couple_with_child(3, 4, 5)
        merge_alignments(left, right, packed=True)

        assert left.nid == ((0, 1), (2,))
        assert right.fam == ((0, 0), (1,))

    def test_depth_mismatch(self):
        """Blocks must have the same number of rows."""
        with pytest.raises(AlignmentError, match="generations"):
            merge_alignments(single(0, depth=1), single(1, depth=2), packed=True)


# =============================================================================
# align_family
# =============================================================================


class TestAlignFamily:
    """Tests for laying out one individual and their descendants."""

    def test_lone_individual(self):
        """Someone without marriages occupies a single slot."""
        father, mother, level, order = nuclear_family()
        result = align_family(2, father, mother, level, order)

        assert result.nid == ((), (2,))
        assert result.pos == ((), (0.0,))

    def test_couple_and_children(self):
        """Couple on the top row, their kids below pointing at them."""
        father, mother, level, order = nuclear_family()
        result = align_family(1, father, mother, level, order, spouselist=[SpouseEntry(0, 1)])

        assert result.nid == ((0, 1), (2, 3))
        assert result.spouse == ((True, False), (False, False))
        assert result.fam == ((0, 0), (1, 1))
        assert result.spouselist == ()

    def test_kids_follow_order(self):
        """Siblings are placed by increasing sort key."""
        father, mother, level, _ = nuclear_family()
        result = align_family(1, father, mother, level, [1, 2, 5, 3], spouselist=[SpouseEntry(0, 1)])

        assert result.nid[1] == (3, 2)

    def test_side_codes(self):
        """Side 1 puts the male on the left, side 2 the female."""
        father, mother, level, order = nuclear_family()
        male_left = align_family(0, father, mother, level, order, spouselist=[SpouseEntry(0, 1, side=1)])
        female_left = align_family(0, father, mother, level, order, spouselist=[SpouseEntry(0, 1, side=2)])

        assert male_left.nid[0] == (0, 1)
        assert female_left.nid[0] == (1, 0)

    def test_undecided_female_puts_husband_left(self):
        """An undecided single marriage of a woman draws the husband first."""
        father, mother, level, order = nuclear_family()
        result = align_family(1, father, mother, level, order, spouselist=[SpouseEntry(0, 1)])

        assert result.nid[0] == (0, 1)

    def test_two_marriages(self):
        """A man with two wives sits between them; each family points at its couple."""
        father = [-1, -1, -1, 0, 0]
        mother = [-1, -1, -1, 1, 2]
        level = [0, 0, 0, 1, 1]
        order = [1, 2, 3, 1, 2]
        spouselist = [SpouseEntry(0, 1), SpouseEntry(0, 2)]
        result = align_family(0, father, mother, level, order, spouselist=spouselist)

        assert result.nid == ((1, 0, 2), (3, 4))
        assert result.spouse[0] == (True, True, False)
        assert result.fam[1] == (1, 2)

    def test_unpacked_centres_parents(self):
        """With three kids, unpacked mode moves the parents over them."""
        father = [-1, -1, 0, 0, 0]
        mother = [-1, -1, 1, 1, 1]
        level = [0, 0, 1, 1, 1]
        order = [1, 2, 1, 2, 3]
        result = align_family(
            1, father, mother, level, order, packed=False, spouselist=[SpouseEntry(0, 1)]
        )

        assert result.pos[0] == pytest.approx((0.5, 1.5))
        assert result.pos[1] == pytest.approx((0.0, 1.0, 2.0))

    def test_spouse_on_higher_row_ignored(self):
        """Marriages to someone deeper are drawn from the deeper partner."""
        father, mother, _, order = nuclear_family()
        level = [0, 1, 2, 2]
        result = align_family(0, father, mother, level, order, spouselist=[SpouseEntry(0, 1)])

        assert result.nid == ((0,), (), ())
        assert result.spouselist == (SpouseEntry(0, 1),)

    def test_child_not_below_parents(self):
        """Children drawn on their parents' row are an error."""
        father, mother, _, order = nuclear_family()
        with pytest.raises(AlignmentError, match="not below"):
            align_family(1, father, mother, [0, 0, 0, 0], order, spouselist=[SpouseEntry(0, 1)])

    def test_index_out_of_range(self):
        """The individual must be in the pedigree."""
        father, mother, level, order = nuclear_family()
        with pytest.raises(InvalidParentReferenceError, match="out of bounds"):
            align_family(7, father, mother, level, order)

    def test_bad_parent_index(self):
        """Parent indices are validated."""
        _, mother, level, order = nuclear_family()
        with pytest.raises(InvalidParentReferenceError, match="Invalid parent indices"):
            align_family(0, [-1, -1, 9, 0], mother, level, order)

    def test_wrong_order_length(self):
        """One sort key per individual."""
        father, mother, level, _ = nuclear_family()
        with pytest.raises(InvalidHintShapeError, match="sort keys"):
            align_family(0, father, mother, level, [1, 2])

    def test_wrong_depth_length(self):
        """One depth per individual."""
        father, mother, _, order = nuclear_family()
        with pytest.raises(ValidationError, match="depths") as excinfo:
            align_family(0, father, mother, [0, 0, 1], order)

        assert not isinstance(excinfo.value, InvalidParentReferenceError)


# =============================================================================
# align_siblings
# =============================================================================


class TestAlignSiblings:
    """Tests for sibship layout."""

    def test_siblings_in_order(self):
        """Unmarried siblings sit side by side in key order."""
        father, mother, level, _ = nuclear_family()
        result = align_siblings([2, 3], father, mother, level, [1, 2, 2, 1])

        assert result.nid == ((), (3, 2))
        assert result.pos == ((), (0.0, 1.0))

    def test_married_sibling_not_repeated(self):
        """A sib already drawn as a spouse is not added again."""
        # 2 marries his sister 3; their child is 4. 5 is another sib.
        father = [-1, -1, 0, 0, 2, 0]
        mother = [-1, -1, 1, 1, 3, 1]
        level = [0, 0, 1, 1, 2, 1]
        order = [1, 2, 1, 3, 1, 2]
        result = align_siblings(
            [2, 3, 5], father, mother, level, order, spouselist=[SpouseEntry(2, 3)]
        )

        assert result.nid[1] == (2, 3, 5)
        assert result.spouse[1] == (True, False, False)
        assert result.nid[2] == (4,)
        assert result.fam[2] == (1,)

    def test_empty_sibship(self):
        """An empty sibship cannot be aligned."""
        father, mother, level, order = nuclear_family()
        with pytest.raises(AlignmentError, match="empty"):
            align_siblings([], father, mother, level, order)


# =============================================================================
# Generation limit
# =============================================================================


def descent_line(generations):
    """A single line of descent, each son marrying a woman from outside."""
    father = [-1, -1]
    mother = [-1, -1]
    sex = ["male", "female"]
    dad, mom = 0, 1
    for g in range(1, generations):
        father.append(dad)
        mother.append(mom)
        sex.append("male")
        if g < generations - 1:
            father.append(-1)
            mother.append(-1)
            sex.append("female")
            dad, mom = len(sex) - 2, len(sex) - 1
    return {"father_index": father, "mother_index": mother, "sex": sex}


class TestGenerationLimit:
    """Tests for the bound on alignment depth."""

    def test_limit_accepted(self):
        """A pedigree exactly at the limit passes the check."""
        check_generation_count([0, MAX_GENERATIONS - 1])

    def test_limit_exceeded(self):
        """One generation too many is refused."""
        with pytest.raises(AlignmentError, match=f"{MAX_GENERATIONS + 1} generations"):
            check_generation_count([0, MAX_GENERATIONS])

    def test_empty_levels(self):
        """No individuals means no generations."""
        check_generation_count([])

    def test_align_family_refuses_deep_levels(self):
        """align_family checks the depth before recursing."""
        with pytest.raises(AlignmentError, match="generations"):
            align_family(0, [-1, -1], [-1, -1], [0, MAX_GENERATIONS], [1, 2])

    def test_moderate_line_aligned(self):
        """A long but reasonable line of descent is laid out."""
        layout = align_pedigree(descent_line(30), align=False)

        assert layout.depth == 30
        assert layout.nid[0] == (0, 1)
        assert layout.nid[-1] == (58,)

    def test_deep_line_fails_cleanly(self):
        """A line deeper than the limit raises instead of overflowing the stack."""
        with pytest.raises(AlignmentError, match=f"{MAX_GENERATIONS + 1} generations"):
            align_pedigree(descent_line(MAX_GENERATIONS + 1), align=False)
