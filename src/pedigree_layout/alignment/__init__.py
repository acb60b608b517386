"""
Subtree alignment engine.

This module provides the stages that turn a pedigree into rows of slots:
- align_family: Lay out one individual and their descendants
- align_siblings: Lay out a sibship in hint order
- merge_alignments: Place two blocks side by side, collapsing overlaps
- optimize_positions: Final spacing by quadratic programming
- check_generation_count: Refuse pedigrees too deep to align
"""

from .merge import merge_alignments
from .spacing import DEFAULT_PENALTIES, optimize_positions
from .subtree import MAX_GENERATIONS, align_family, align_siblings, check_generation_count

__all__ = [
    "align_family",
    "align_siblings",
    "merge_alignments",
    "optimize_positions",
    "DEFAULT_PENALTIES",
    "check_generation_count",
    "MAX_GENERATIONS",
]
