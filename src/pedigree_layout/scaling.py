"""
Drawing dimensions for a finished pedigree layout.

Derives a uniform symbol size and the layout-to-canvas scale factors from the
number of generations, the horizontal extent of the layout, and the canvas
size. Port of the sizing rules of kinship2's ``plot.pedigree``.
"""

from __future__ import annotations

from .types import PedigreeLayout, ScalingParams
from .validation import InvalidCanvasSizeError, validate_canvas_size

# Connector stub length never exceeds this many layout units
MAX_LEG_HEIGHT = 0.25


def compute_scaling(
    layout: PedigreeLayout,
    plot_width: float,
    plot_height: float,
    symbol_size: float = 1.0,
    label_height: float = 0.0,
) -> ScalingParams:
    """
    Compute box and scale parameters for drawing a layout on a canvas.

    The symbol edge (in canvas units) is the smallest of four limits: the
    height of one generation less room for labels, the height left when
    symbols take one and a half row gaps, a tenth of the canvas width, and
    the width available per unit of the layout's horizontal span.

    Args:
        layout: Finished pedigree layout
        plot_width: Canvas width
        plot_height: Canvas height
        symbol_size: Multiplier for the symbol edge (0, 1]
        label_height: Height of one line of label text, in canvas units

    Returns:
        ScalingParams; ``box_width``, ``box_height`` and ``leg_height`` are
        in layout units, ``h_scale`` and ``v_scale`` convert layout units to
        canvas units.

    Raises:
        InvalidCanvasSizeError: If a dimension is not positive or the labels
            leave no room for symbols

    Example:
        >>> from pedigree_layout.types import PedigreeLayout
        >>> layout = PedigreeLayout(n=[2], nid=[[0, 1]], pos=[[0.0, 1.0]],
        ...                         fam=[[0, 0]], spouse=[[1, 0]])
        >>> compute_scaling(layout, 100, 100).leg_height <= 0.25
        True
    """
    width, height = validate_canvas_size((plot_width, plot_height))
    if not symbol_size > 0:
        raise InvalidCanvasSizeError(f"Symbol size must be positive, got {symbol_size}")
    if label_height < 0:
        raise InvalidCanvasSizeError(f"Label height must not be negative, got {label_height}")

    generations = max(1, layout.depth)
    gaps = max(1, generations - 1)
    xmin, xmax = layout.x_range()
    span = xmax - xmin
    if span == 0:
        span = 1.0

    ht1 = height / generations - 2.5 * label_height
    if ht1 <= 0:
        raise InvalidCanvasSizeError(
            f"Labels of height {label_height} leave no room for symbols "
            f"in {generations} generations of a {height} high canvas"
        )
    ht2 = height / (generations + gaps / 2)
    wd1 = 0.1 * width
    wd2 = 0.8 * width / (0.8 + span)
    box = symbol_size * min(ht1, ht2, wd1, wd2)
    if box >= width:
        raise InvalidCanvasSizeError(f"Symbols of size {box} do not fit a {width} wide canvas")

    h_scale = (width - box) / span
    v_scale = (height - (1.5 * label_height + box)) / gaps

    box_width = box / h_scale
    box_height = box / v_scale
    return ScalingParams(
        box_width=box_width,
        box_height=box_height,
        leg_height=min(MAX_LEG_HEIGHT, 1.5 * box_height),
        h_scale=h_scale,
        v_scale=v_scale,
    )


__all__ = ["MAX_LEG_HEIGHT", "compute_scaling"]
