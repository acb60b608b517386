"""
pedigree-layout: Deterministic layout of family pedigree charts.

This package converts a pedigree (individuals with father/mother links, sex,
twin and marriage relations) into rows of slots ready for drawing.

Stages:
- depth: Generation rows for every individual
- hints: Sibling order and marriage placement hints
- alignment: Recursive subtree layout, merge, and QP spacing
- solver: Dense quadratic programming
- scaling: Symbol size and canvas scale factors
"""

__version__ = "0.1.0"

# Alignment engine
from .alignment import (
    DEFAULT_PENALTIES,
    MAX_GENERATIONS,
    align_family,
    align_siblings,
    check_generation_count,
    merge_alignments,
    optimize_positions,
)

# Base classes for building layouts
from .base import BaseLayout, StaticLayout, as_pedigree

# Generation depths
from .depth import compute_depths

# Hints
from .hints import HintsLike, HintWarning, autohint, check_hint

# End-to-end driver
from .pedigree import PedigreeAligner, align_pedigree

# Pedigree utilities
from .preprocessing import (
    ancestors,
    chase_up,
    children_of,
    detect_ancestor_cycle,
    has_ancestor_cycle,
    parent_pairs,
    rank,
    share_ancestor,
)

# Drawing dimensions
from .scaling import MAX_LEG_HEIGHT, compute_scaling

# Quadratic programming
from .solver import (
    QPDependentConstraintsError,
    QPError,
    QPInfeasibleError,
    QPNotPositiveDefiniteError,
    QPResult,
    solve_qp,
)
from .types import (
    NO_PARENT,
    AlignmentArrays,
    Event,
    EventType,
    Hints,
    PedigreeInput,
    PedigreeLayout,
    PedigreeLike,
    Relation,
    RelationCode,
    ScalingParams,
    Sex,
    SizeType,
    SpouseEntry,
    SpouseHint,
)

# Validation utilities
from .validation import (
    AlignmentError,
    CyclicPedigreeError,
    DepthAlignmentError,
    InvalidCanvasSizeError,
    InvalidHintShapeError,
    InvalidParentReferenceError,
    InvalidParentSexError,
    InvalidSpouseIndexError,
    InvalidSpousePairingError,
    MissingParentError,
    ValidationError,
    validate_canvas_size,
    validate_parent_indices,
    validate_pedigree,
)

__all__ = [
    # Version
    "__version__",
    # Shared types
    "NO_PARENT",
    "Sex",
    "RelationCode",
    "Relation",
    "SpouseHint",
    "Hints",
    "PedigreeInput",
    "SpouseEntry",
    "AlignmentArrays",
    "PedigreeLayout",
    "ScalingParams",
    "EventType",
    "Event",
    # Type aliases for API
    "PedigreeLike",
    "HintsLike",
    "SizeType",
    # Base classes
    "BaseLayout",
    "StaticLayout",
    "as_pedigree",
    # Layout
    "align_pedigree",
    "PedigreeAligner",
    "compute_depths",
    "check_hint",
    "autohint",
    "HintWarning",
    "align_family",
    "align_siblings",
    "merge_alignments",
    "optimize_positions",
    "DEFAULT_PENALTIES",
    "MAX_GENERATIONS",
    "check_generation_count",
    "compute_scaling",
    "MAX_LEG_HEIGHT",
    # Solver
    "solve_qp",
    "QPResult",
    "QPError",
    "QPInfeasibleError",
    "QPNotPositiveDefiniteError",
    "QPDependentConstraintsError",
    # Preprocessing
    "detect_ancestor_cycle",
    "has_ancestor_cycle",
    "chase_up",
    "ancestors",
    "share_ancestor",
    "children_of",
    "parent_pairs",
    "rank",
    # Validation
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
