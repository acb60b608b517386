"""
Tests for generation depth assignment.
"""

import pytest

from pedigree_layout import (
    CyclicPedigreeError,
    InvalidParentReferenceError,
    compute_depths,
)


class TestComputeDepths:
    """Tests for plain depth computation."""

    def test_empty(self):
        """Empty pedigree has no depths."""
        assert compute_depths([], []) == []

    def test_founders_only(self):
        """Everyone without parents is at depth 0."""
        assert compute_depths([-1, -1, -1], [-1, -1, -1]) == [0, 0, 0]

    def test_nuclear_family(self):
        """Children sit one row below their parents."""
        assert compute_depths([-1, -1, 0, 0], [-1, -1, 1, 1]) == [0, 0, 1, 1]

    def test_child_deeper_than_both_parents(self):
        """Depth follows the deeper parent."""
        # 0 x 1 -> 2; 2 x 3 -> 4 where 3 is a founder
        father = [-1, -1, 0, -1, 2]
        mother = [-1, -1, 1, -1, 3]
        depth = compute_depths(father, mother)

        assert depth == [0, 0, 1, 0, 2]
        for i, (dad, mom) in enumerate(zip(father, mother)):
            if dad >= 0:
                assert depth[i] > depth[dad]
                assert depth[i] > depth[mom]

    def test_children_listed_before_parents(self):
        """Index order does not matter."""
        assert compute_depths([1, -1, -1], [2, -1, -1]) == [1, 0, 0]

    def test_cycle(self):
        """Someone who is their own ancestor is rejected."""
        with pytest.raises(CyclicPedigreeError, match="own ancestor") as excinfo:
            compute_depths([1, 0, -1], [2, 2, -1])
        assert excinfo.value.cycle == [0, 1, 0]

    def test_out_of_range_parent(self):
        """Parent indices must exist."""
        with pytest.raises(InvalidParentReferenceError):
            compute_depths([-1, 5], [-1, 0])


class TestSpouseAlignment:
    """Tests for pulling partners onto the same row."""

    def test_solitary_marry_in(self):
        """A founder marrying into the family joins their partner's row."""
        father = [-1, -1, 0, -1, 2]
        mother = [-1, -1, 1, -1, 3]

        assert compute_depths(father, mother) == [0, 0, 1, 0, 2]
        assert compute_depths(father, mother, align_spouses=True) == [0, 0, 1, 1, 2]

    def test_marry_in_with_parents(self):
        """A partner with ancestors moves down together with them."""
        # 0 x 1 -> 2; 2 x 3 -> 4; 5 x 6 -> 7; 4 x 7 -> 8
        father = [-1, -1, 0, -1, 2, -1, -1, 5, 4]
        mother = [-1, -1, 1, -1, 3, -1, -1, 6, 7]
        depth = compute_depths(father, mother, align_spouses=True)

        assert depth == [0, 0, 1, 1, 2, 1, 1, 2, 3]

    def test_aligned_spouses_share_row(self):
        """Every couple with children ends up on one row."""
        father = [-1, -1, 0, -1, 2, -1, -1, 5, 4]
        mother = [-1, -1, 1, -1, 3, -1, -1, 6, 7]
        depth = compute_depths(father, mother, align_spouses=True)

        for dad, mom in zip(father, mother):
            if dad >= 0:
                assert depth[dad] == depth[mom]

    def test_someone_stays_at_top(self):
        """Alignment keeps a generation 0."""
        father = [-1, -1, 0, -1, 2, -1, -1, 5, 4]
        mother = [-1, -1, 1, -1, 3, -1, -1, 6, 7]

        assert min(compute_depths(father, mother, align_spouses=True)) == 0
