"""
Display formatting for results and axis labels.

Both functions are pure and never raise for a float input. Non-finite values are shown as "Error", which is also what
the evaluator reports for malformed input, so a caller only ever needs to display one string.
"""
import math

import numpy as np

ERROR = 'Error'


def format_number(value) -> str:
    """
    Format a result for display.

    - ``None``, NaN and infinities are "Error".
    - Values with a magnitude of at least 1e12, or non-zero values smaller than 1e-10, use scientific notation with 6
      digits after the point, Ex. "1.000000e+12".
    - Integers are shown without a decimal point.
    - Anything else is rounded to 12 significant digits with trailing zeros removed, Ex. "0.333333333333".
    """
    if value is None or not math.isfinite(value):
        return ERROR

    magnitude = abs(value)
    if magnitude >= 1e12 or (magnitude < 1e-10 and value != 0):
        return '{:.6e}'.format(value)

    if float(value).is_integer():
        return str(int(value))

    return np.format_float_positional(value, precision=12, unique=False, fractional=False, trim='-')


def format_axis_label(value: float) -> str:
    """ Format a grid tick value, Ex. "2.5", "-10", "1e+3", "5e-3" """
    magnitude = abs(value)
    if magnitude >= 1000 or 0 < magnitude < 0.01:
        mantissa, exponent = '{:.0e}'.format(value).split('e')
        return '{}e{}{}'.format(mantissa, exponent[0], int(exponent[1:]))

    return np.format_float_positional(value, precision=3, unique=False, fractional=False, trim='-')
