"""
Sessions hold the state a user interface needs between key presses: the expression being typed and the last result
for the scientific calculator, the pending operator for the standard one, the plotted functions and the viewport for
the grapher. The evaluation and plotting functions they call keep no state of their own.
"""
import logging
import math
import re
from typing import Optional

from .context import Context
from .definitions import AngleMode, DefinitionType
from .formatting import ERROR, format_number
from .plotting import FunctionList, PlottedFunction, Viewport, frame, render
from .utils import EvaluationResult, create_default_context, evaluate

logger = logging.getLogger(__name__)

_operator_symbols = {'+': '+', '-': '−', '*': '×', '/': '÷', '^': '^'}
_function_text = {
    'sin': 'sin(',
    'cos': 'cos(',
    'tan': 'tan(',
    'asin': 'asin(',
    'acos': 'acos(',
    'atan': 'atan(',
    'log': 'log(',
    'ln': 'ln(',
    'sqrt': 'sqrt(',
    'square': '^2',
    'factorial': '!',
}
_constant_text = {'pi': 'π', 'e': 'e'}

_trailing_operator = re.compile(r'[+−×÷^]$')
_trailing_function = re.compile(r'(sin|cos|tan|asin|acos|atan|log|ln|sqrt)\($')
_number_separators = re.compile(r'[+\-−×÷^()]')


class Calculator:
    """
    A scientific calculator's input line. Keys append to the expression, which is re-evaluated as it is typed so
    the display can show a running result. Trigonometry is in degrees unless another mode is given.
    """
    def __init__(self, ctx: Optional[Context] = None, mode: AngleMode = AngleMode.DEGREES):
        self.ctx = ctx or create_default_context()
        self.mode = mode
        self._expression = ''
        self.result = EvaluationResult(0.0)
        self.history = ''

    @property
    def expression(self):
        return self._expression

    @property
    def display(self):
        return str(self.result)

    def _evaluate(self):
        self.result = evaluate(self.ctx, self._expression, self.mode)

    def _has_result(self):
        return self.result.ok and self.result.value != 0

    def _start_from_result(self):
        """ Continue from the last result when nothing has been typed yet """
        if self._expression == '' and self._has_result():
            value = self.result.value
            self._expression = str(int(value)) if value.is_integer() and abs(value) < 1e15 else repr(value)

    def input_number(self, digit: str):
        self._expression += digit
        self._evaluate()

    def input_decimal(self):
        """ Add a decimal point, unless the number being typed already has one """
        current = _number_separators.split(self._expression)[-1]
        if '.' in current:
            return
        if current == '':
            self._expression += '0'
        self._expression += '.'

    def input_operator(self, op: str):
        symbol = _operator_symbols.get(op, op)

        if self._expression == '' and op != '-':
            if not self._has_result():
                return
            self._start_from_result()

        # Typing an operator after another one replaces it
        if _trailing_operator.search(self._expression):
            self._expression = self._expression[:-1]

        self._expression += symbol

    def input_function(self, name: str):
        text = _function_text.get(name)
        if text is None:
            return

        if name in ('square', 'factorial'):
            self._start_from_result()
        self._expression += text
        self._evaluate()

    def input_constant(self, name: str):
        self._expression += _constant_text.get(name, '')
        self._evaluate()

    def input_parenthesis(self, paren: str):
        self._expression += paren

    def calculate(self):
        """ Evaluate the expression, keep the result and start a new expression """
        if self._expression == '':
            return self.result

        self._evaluate()
        self.history = self._expression + ' ='
        logger.debug('%s %s', self.history, self.result)
        self._expression = ''
        return self.result

    def clear(self):
        self._expression = ''
        self.result = EvaluationResult(0.0)
        self.history = ''

    def backspace(self):
        """ Remove the last character, or the whole function name if the expression ends with one, Ex. "sin(" """
        if self._expression == '':
            return

        match = _trailing_function.search(self._expression)
        if match:
            self._expression = self._expression[:match.start()]
        else:
            self._expression = self._expression[:-1]

        if self._expression:
            self._evaluate()
        else:
            self.result = EvaluationResult(0.0)

    def negate(self):
        """ Toggle a minus sign in front of the expression """
        self._start_from_result()

        if self._expression.startswith(('−', '-')):
            self._expression = self._expression[1:]
        else:
            self._expression = '−' + self._expression
        self._evaluate()

    def __repr__(self):
        return '<{} expression={!r}, result={}>'.format(type(self).__name__, self._expression, self.display)


class StandardCalculator:
    """
    A four-function calculator. Unlike ``Calculator`` it holds no expression: one operator is pending at a time, and
    pressing a second operator calculates the first, so 2 + 3 × 4 gives 20.

    `entry` is the number being typed or the last result, as text. Results are computed with the context's binary
    operators.
    """
    # Digits allowed in a typed number
    MAX_DIGITS = 15

    def __init__(self, ctx: Optional[Context] = None):
        self.ctx = ctx or create_default_context()
        self.clear()

    def clear(self):
        self.entry = '0'
        self.expression = ''
        self._operand = None
        self._operator = None
        # Set after an operator or a result; the next digit starts a new number
        self._new_entry = False

    @property
    def display(self):
        return _format_entry(self.entry)

    @property
    def error(self):
        return self.entry == ERROR

    def input_number(self, digit: str):
        if self._new_entry or self.error:
            self.entry = digit
            self._new_entry = False
        elif self.entry == '0':
            self.entry = digit
        elif sum(c.isdigit() for c in self.entry) < self.MAX_DIGITS:
            self.entry += digit

    def input_decimal(self):
        if self._new_entry or self.error:
            self.entry = '0.'
            self._new_entry = False
        elif '.' not in self.entry:
            self.entry += '.'

    def input_operator(self, op: str):
        """ Set the pending operator, calculating the one already pending first. Ignored while an error is shown. """
        if self._operator is not None and not self._new_entry:
            self.calculate()
        if self.error:
            return

        self._operand = self.entry
        self._operator = op
        self._new_entry = True
        self.expression = '{} {}'.format(_format_entry(self.entry), _operator_symbols.get(op, op))

    def calculate(self):
        if self._operator is None or self._new_entry:
            return

        a, b = float(self._operand), float(self.entry)
        symbol = _operator_symbols.get(self._operator, self._operator)

        if self._operator == '/' and b == 0:
            logger.debug('Division by zero: %s / 0', self._operand)
            self.clear()
            self.entry = ERROR
            self._new_entry = True
            return

        op = self.ctx.get(self._operator, DefinitionType.BINARY_OPERATOR)
        self.expression = '{} {} {} ='.format(_format_entry(self._operand), symbol, _format_entry(self.entry))
        self.entry = _entry_text(op(a, b))
        self._operand = None
        self._operator = None
        self._new_entry = True

    def backspace(self):
        """ Remove the last typed character. A result or an error is cleared entirely. """
        if self._new_entry or self.error:
            self.clear()
            return

        self.entry = self.entry[:-1]
        if self.entry in ('', '-'):
            self.entry = '0'

    def negate(self):
        if self.entry in ('0', ERROR):
            return
        self.entry = self.entry[1:] if self.entry.startswith('-') else '-' + self.entry

    def percent(self):
        if not self.error:
            self.entry = _entry_text(float(self.entry) / 100)

    def __repr__(self):
        return '<{} entry={!r}, operator={!r}>'.format(type(self).__name__, self.entry, self._operator)


def _entry_text(value: float) -> str:
    """ Text of a result that typing can continue from, Ex. "5" rather than "5.0" """
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


def _format_entry(text: str) -> str:
    """
    Display an entry. Typed text is shown as it is ("0." while the decimal is being typed), results are rounded to 10
    decimals, and very large or small values use scientific notation.
    """
    if text == ERROR:
        return ERROR

    value = float(text)
    if not math.isfinite(value) or abs(value) >= 1e12 or (value != 0 and abs(value) < 1e-10):
        return format_number(value)

    if 'e' in text or len(text.partition('.')[2]) > 10:
        return '{:.10f}'.format(value).rstrip('0').rstrip('.')
    return text


class Grapher:
    """ The functions on a graph and the region of the plane it shows """
    def __init__(self, ctx: Optional[Context] = None, viewport: Optional[Viewport] = None):
        self.ctx = ctx or create_default_context()
        self.viewport = viewport or Viewport()
        self.functions = FunctionList()

    def add_function(self, expression: str) -> Optional[PlottedFunction]:
        function = self.functions.add(expression)
        if function is not None:
            logger.info('Plotting f(x) = %s in %s', function.expression, function.color)
        return function

    def remove_function(self, index: int) -> PlottedFunction:
        return self.functions.remove(index)

    def clear_all(self):
        self.functions.clear()

    def update_range(self, x_min, x_max, y_min, y_max) -> bool:
        """ Change the visible range. Invalid ranges are ignored and return False. """
        changed = self.viewport.update(x_min, x_max, y_min, y_max)
        if not changed:
            logger.debug('Ignoring invalid range [%s, %s] x [%s, %s]', x_min, x_max, y_min, y_max)
        return changed

    def frame(self, width: int, height: int):
        """ Grid and segments for a `width` x `height` surface, see ``plotting.frame()`` """
        return frame(self.ctx, self.functions, self.viewport, width, height)

    def draw(self, width=800, height=600):
        """ Render the graph onto a new matplotlib figure """
        return render(self.ctx, self.functions, self.viewport, width, height)

    def __repr__(self):
        return '<{} functions={}, viewport={!r}>'.format(type(self).__name__, len(self.functions), self.viewport)
