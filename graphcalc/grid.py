import math
import sys
from typing import List, NamedTuple, Optional

import numpy as np

from .formatting import format_axis_label

# Gap in device pixels between an axis and its labels
LABEL_OFFSET = 5

# Ticks closer to zero than this are not labelled; the origin gets a single "0" instead
LABEL_EPSILON = 0.001

# Smallest span a grid can be planned for. Below it the power of ten of the step underflows to zero.
MIN_SPAN = sys.float_info.min


def grid_step(span: float) -> float:
    """
    Returns a "nice" grid spacing for an axis covering `span` units. The step is 1, 2 or 5 times a power of ten,
    chosen so that between 4 and 10 grid lines are visible at any zoom level.
    """
    if not MIN_SPAN <= span < math.inf:
        raise ValueError('span must be a finite number of at least {}, not {}'.format(MIN_SPAN, span))

    magnitude = 10.0 ** math.floor(math.log10(span))
    normalized = span / magnitude

    if normalized <= 2:
        return magnitude / 5
    if normalized <= 5:
        return magnitude / 2
    return magnitude


def ticks(low: float, high: float, step: float) -> np.ndarray:
    """ Returns every multiple of `step` in the closed interval [low, high] """
    first = math.ceil(low / step)
    last = math.floor(high / step)
    return np.arange(first, last + 1) * step


class Label(NamedTuple):
    x: float
    y: float
    text: str


class Grid(NamedTuple):
    """ Grid lines, axes and labels for one frame, all in device coordinates. """
    x_step: float
    y_step: float
    # Device x of each vertical grid line
    vertical: List[float]
    # Device y of each horizontal grid line
    horizontal: List[float]
    # Device y of the x axis, or None when y = 0 is out of view
    x_axis: Optional[float]
    # Device x of the y axis, or None when x = 0 is out of view
    y_axis: Optional[float]
    x_labels: List[Label]
    y_labels: List[Label]
    origin: Optional[Label]


def plan_grid(viewport, width: int, height: int) -> Grid:
    """
    Lay out the grid for a viewport drawn on a `width` x `height` pixel surface. Each axis picks its own step, so a
    viewport that is much wider than it is tall still gets a sensible number of lines in both directions.
    """
    x_step = grid_step(viewport.x_max - viewport.x_min)
    y_step = grid_step(viewport.y_max - viewport.y_min)
    x_values = ticks(viewport.x_min, viewport.x_max, x_step)
    y_values = ticks(viewport.y_min, viewport.y_max, y_step)

    x_axis = viewport.to_device_y(0, height) if viewport.y_min <= 0 <= viewport.y_max else None
    y_axis = viewport.to_device_x(0, width) if viewport.x_min <= 0 <= viewport.x_max else None

    # Labels follow the axes, or stick to the bottom/left edge when the axis is out of view
    x_label_y = x_axis + LABEL_OFFSET if x_axis is not None else height - LABEL_OFFSET
    y_label_x = y_axis + LABEL_OFFSET if y_axis is not None else LABEL_OFFSET

    x_labels = [
        Label(viewport.to_device_x(x, width), x_label_y, format_axis_label(x))
        for x in x_values if abs(x) > LABEL_EPSILON
    ]
    y_labels = [
        Label(y_label_x, viewport.to_device_y(y, height), format_axis_label(y))
        for y in y_values if abs(y) > LABEL_EPSILON
    ]

    origin = None
    if x_axis is not None and y_axis is not None:
        origin = Label(y_axis + LABEL_OFFSET, x_axis + LABEL_OFFSET, '0')

    return Grid(
        x_step, y_step,
        [viewport.to_device_x(x, width) for x in x_values],
        [viewport.to_device_y(y, height) for y in y_values],
        x_axis, y_axis,
        x_labels, y_labels,
        origin,
    )
