import logging
import math
from typing import Iterable, List, NamedTuple, Optional, Tuple

from .context import Context, ContextError
from .definitions import AngleMode, VariableDefinition
from .grid import MIN_SPAN, Grid, plan_grid
from .parser import ExpressionSyntaxError, Node, normalize, parse

logger = logging.getLogger(__name__)

# Name of the independent variable in plotted expressions
VARIABLE = 'x'

PALETTE = (
    '#4a90d9',  # blue
    '#2ecc71',  # green
    '#e74c3c',  # red
    '#f39c12',  # orange
    '#9b59b6',  # purple
    '#1abc9c',  # teal
    '#e91e63',  # pink
    '#00bcd4',  # cyan
)

Point = Tuple[float, float]
Segment = List[Point]


class Viewport:
    """ The visible region of the coordinate plane. x_min < x_max and y_min < y_max always hold, with finite spans. """

    def __init__(self, x_min=-10.0, x_max=10.0, y_min=-10.0, y_max=10.0):
        if not self.is_valid(x_min, x_max, y_min, y_max):
            raise ValueError('Invalid viewport [{}, {}] x [{}, {}]'.format(x_min, x_max, y_min, y_max))
        self.x_min = x_min
        self.x_max = x_max
        self.y_min = y_min
        self.y_max = y_max

    @staticmethod
    def is_valid(x_min, x_max, y_min, y_max):
        if not all(math.isfinite(b) for b in (x_min, x_max, y_min, y_max)):
            return False
        # Both spans must be finite, which the bounds alone don't guarantee (1e308 - -1e308 overflows), and wide
        # enough for a grid
        return all(MIN_SPAN <= span < math.inf for span in (x_max - x_min, y_max - y_min))

    def update(self, x_min, x_max, y_min, y_max):
        """ Set all four bounds at once. Returns False and leaves the viewport unchanged if they are invalid. """
        if not self.is_valid(x_min, x_max, y_min, y_max):
            return False
        self.x_min, self.x_max, self.y_min, self.y_max = x_min, x_max, y_min, y_max
        return True

    def to_device_x(self, x, width):
        return (x - self.x_min) / (self.x_max - self.x_min) * width

    def to_device_y(self, y, height):
        return height - (y - self.y_min) / (self.y_max - self.y_min) * height

    def copy(self):
        return Viewport(self.x_min, self.x_max, self.y_min, self.y_max)

    def __eq__(self, other):
        if not isinstance(other, Viewport):
            return NotImplemented
        return self.bounds == other.bounds

    @property
    def bounds(self):
        return self.x_min, self.x_max, self.y_min, self.y_max

    def __repr__(self):
        return '<Viewport x=[{}, {}], y=[{}, {}]>'.format(*self.bounds)


class PlottedFunction(NamedTuple):
    expression: str
    color: str


class FunctionList:
    """ The functions currently on the plot. Expressions are unique, colors cycle through ``PALETTE``. """

    def __init__(self):
        self._functions: List[PlottedFunction] = []

    def add(self, expression: str) -> Optional[PlottedFunction]:
        """ Add a function. Blank and already plotted expressions are ignored and return None. """
        if not expression.strip():
            return None
        if any(f.expression == expression for f in self._functions):
            return None

        function = PlottedFunction(expression, PALETTE[len(self._functions) % len(PALETTE)])
        self._functions.append(function)
        return function

    def remove(self, index: int) -> PlottedFunction:
        return self._functions.pop(index)

    def clear(self):
        self._functions.clear()

    def __iter__(self):
        return iter(self._functions)

    def __len__(self):
        return len(self._functions)

    def __getitem__(self, index):
        return self._functions[index]

    def __repr__(self):
        return '<{} size={}>'.format(type(self).__name__, len(self._functions))


def sample(ctx: Context, root: Node, x: float) -> float:
    """ Evaluate a parsed expression at `x`. Anything that can't be evaluated is NaN. """
    with ctx.with_scope():
        ctx.add(VariableDefinition(VARIABLE, x))
        try:
            y = root.evaluate(ctx)
        except (ContextError, TypeError, ArithmeticError, ValueError, RecursionError):
            return math.nan
    return y if isinstance(y, float) else math.nan


def plot(ctx: Context, expression: str, viewport: Viewport, width: int, height: int) -> List[Segment]:
    """
    Trace y = f(x) across a `width` x `height` pixel surface showing `viewport`.

    The expression is sampled once per pixel column, in radians. Consecutive finite samples are joined into a segment;
    a segment ends at a non-finite sample, or when the curve jumps more than the surface height between two columns,
    which is how asymptotes like those of tan(x) are kept from being drawn as vertical lines.

    :return: List of segments, each a list of (x, y) device points. Segments always have at least 2 points.
    """
    if width < 1 or height < 1:
        raise ValueError('Surface must be at least 1x1 pixels, not {}x{}'.format(width, height))

    try:
        with ctx.with_scope():
            # Declare the variable while parsing so that "2x" isn't an undefined identifier
            ctx.add(VariableDefinition(VARIABLE, math.nan))
            root = parse(ctx, normalize(expression))
    except (ExpressionSyntaxError, ContextError, RecursionError) as e:
        logger.warning('Cannot plot %r: %s', expression, e.args[0] if e.args else e)
        return []

    step = (viewport.x_max - viewport.x_min) / width
    segments = []
    segment: Segment = []
    prev_y = None

    with ctx.with_angle_mode(AngleMode.RADIANS):
        for px in range(width + 1):
            y = sample(ctx, root, viewport.x_min + px * step)

            if not math.isfinite(y):
                segments.append(segment)
                segment = []
                prev_y = None
                continue

            device_y = viewport.to_device_y(y, height)
            if prev_y is not None and abs(device_y - prev_y) > height:
                segments.append(segment)
                segment = []

            segment.append((float(px), device_y))
            prev_y = device_y

    segments.append(segment)
    segments = [s for s in segments if len(s) > 1]
    logger.debug('Plotted %r: %d segment(s)', expression, len(segments))
    return segments


def frame(ctx: Context, functions: Iterable[PlottedFunction], viewport: Viewport, width: int, height: int) \
        -> Tuple[Grid, List[Tuple[PlottedFunction, List[Segment]]]]:
    """ Everything needed to draw one frame: the grid, and the segments of each function """
    grid = plan_grid(viewport, width, height)
    curves = [(f, plot(ctx, f.expression, viewport, width, height)) for f in functions]
    return grid, curves


_style = {
    'background': '#0a1628',
    'grid': '#1a2744',
    'axes': '#3d5a80',
    'labels': '#6b7a8f',
}


def render(ctx: Context, functions: Iterable[PlottedFunction], viewport: Viewport, width=800, height=600, dpi=100):
    """
    Draw a frame onto a new matplotlib figure of `width` x `height` pixels. The figure's data coordinates are device
    coordinates, y pointing down, so the segments from ``plot()`` are drawn as they are.
    """
    import matplotlib.pyplot as plt
    from matplotlib.collections import LineCollection

    grid, curves = frame(ctx, functions, viewport, width, height)

    fig = plt.figure(figsize=(width / dpi, height / dpi), dpi=dpi, facecolor=_style['background'])
    ax = fig.add_axes((0, 0, 1, 1))
    ax.set_facecolor(_style['background'])
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_axis_off()

    # Grid lines
    lines = [[(x, 0), (x, height)] for x in grid.vertical]
    lines += [[(0, y), (width, y)] for y in grid.horizontal]
    ax.add_collection(LineCollection(lines, colors=_style['grid'], linewidths=1))

    # Axes
    axes = []
    if grid.x_axis is not None:
        axes.append([(0, grid.x_axis), (width, grid.x_axis)])
    if grid.y_axis is not None:
        axes.append([(grid.y_axis, 0), (grid.y_axis, height)])
    ax.add_collection(LineCollection(axes, colors=_style['axes'], linewidths=2))

    # Labels
    for label in grid.x_labels:
        ax.text(label.x, label.y, label.text, color=_style['labels'], fontsize=9, ha='center', va='top')
    for label in grid.y_labels:
        ax.text(label.x, label.y, label.text, color=_style['labels'], fontsize=9, ha='left', va='center')
    if grid.origin is not None:
        ax.text(grid.origin.x, grid.origin.y, grid.origin.text, color=_style['labels'], fontsize=9,
                ha='left', va='top')

    # Functions
    for function, segments in curves:
        ax.add_collection(LineCollection(segments, colors=function.color, linewidths=2, label=function.expression))

    return fig
