"""
Profiling script for pedigree-layout performance analysis.

This script profiles the layout pipeline on synthetic pedigrees of growing
size to identify bottlenecks in hint generation, alignment and spacing.
"""

import cProfile
import pstats
import io
from pstats import SortKey
import time
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import random


def create_pedigree(generations, max_kids=3, marry_rate=0.7, seed=42):
    """
    Create a descendant pedigree from one founding couple.

    Each child marries someone from outside the family with probability
    ``marry_rate`` and has up to ``max_kids`` children of their own.
    """
    random.seed(seed)
    father = [-1, -1]
    mother = [-1, -1]
    sex = ["male", "female"]

    def add(dad, mom, s):
        father.append(dad)
        mother.append(mom)
        sex.append(s)
        return len(sex) - 1

    couples = [(0, 1)]
    for _ in range(generations - 1):
        next_couples = []
        for dad, mom in couples:
            for _ in range(random.randint(1, max_kids)):
                kid_sex = random.choice(["male", "female"])
                kid = add(dad, mom, kid_sex)
                if random.random() < marry_rate:
                    spouse = add(-1, -1, "female" if kid_sex == "male" else "male")
                    next_couples.append((kid, spouse) if kid_sex == "male" else (spouse, kid))
        couples = next_couples or couples

    return {"father_index": father, "mother_index": mother, "sex": sex}


# =============================================================================
# Scenarios
# =============================================================================

SCENARIOS = [
    ("Small (3 generations)", dict(generations=3)),
    ("Medium (5 generations)", dict(generations=5)),
    ("Large (6 generations, 4 kids)", dict(generations=6, max_kids=4)),
    ("Sparse (8 generations, few marriages)", dict(generations=8, max_kids=2, marry_rate=0.4)),
]


def time_stages(pedigree):
    """
    Time the pipeline stage by stage.

    Returns (hints, alignment, spacing) wall times in seconds. Alignment is
    timed with the hints precomputed and spacing disabled; spacing is the
    extra cost of a full run with the same hints.
    """
    from pedigree_layout import align_pedigree, autohint

    start = time.perf_counter()
    hints = autohint(pedigree)
    t_hints = time.perf_counter() - start

    start = time.perf_counter()
    align_pedigree(pedigree, hints=hints, align=False)
    t_align = time.perf_counter() - start

    start = time.perf_counter()
    layout = align_pedigree(pedigree, hints=hints)
    t_full = time.perf_counter() - start

    return (t_hints, t_align, max(0.0, t_full - t_align)), layout


def profile_pipeline(pedigree, top=10):
    """Print the hottest functions of one full run."""
    from pedigree_layout import align_pedigree

    profiler = cProfile.Profile()
    profiler.runcall(align_pedigree, pedigree)

    stream = io.StringIO()
    pstats.Stats(profiler, stream=stream).sort_stats(SortKey.CUMULATIVE).print_stats(top)
    for line in stream.getvalue().splitlines()[5 : 6 + top]:
        if line.strip():
            print(f"    {line}")


def main():
    """Time every scenario and print a per-stage table."""
    profile = "--profile" in sys.argv[1:]

    print("pedigree-layout stage timings")
    header = f"{'Scenario':<40} {'People':>6} {'Rows':>5} {'Hints':>8} {'Align':>8} {'QP':>8}"
    print(header)
    print("-" * len(header))

    for name, params in SCENARIOS:
        pedigree = create_pedigree(**params)
        try:
            (t_hints, t_align, t_qp), layout = time_stages(pedigree)
        except Exception as e:
            print(f"{name:<40} failed: {e}")
            continue

        people = len(pedigree["sex"])
        print(
            f"{name:<40} {people:>6} {layout.depth:>5} "
            f"{t_hints:>7.3f}s {t_align:>7.3f}s {t_qp:>7.3f}s"
        )
        if profile:
            profile_pipeline(pedigree)


if __name__ == "__main__":
    main()
