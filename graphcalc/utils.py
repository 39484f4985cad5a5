import logging
import math
import operator
import time
from enum import Enum
from functools import wraps
from typing import Dict, Iterable, Optional, Union

from .context import Context, ContextError
from .definitions import AngleMode, Associativity, BinaryOperatorDefinition, DefinitionType, FunctionDefinition, \
    PostfixOperatorDefinition, UnaryOperatorDefinition, VariableDefinition
from .formatting import format_number
from .gamma import factorial
from .parser import ExpressionSyntaxError, Node, normalize, parse
from .plotting import FunctionList, Viewport, render

__all__ = [
    'evaluate',
    'tree',
    'console',
    'graph',
    'create_default_context',
    'EvaluationResult',
    'ErrorKind',
]

logger = logging.getLogger(__name__)

# Errors that make an expression malformed, as opposed to numerically undefined
_syntax_errors = (ExpressionSyntaxError, ContextError, TypeError, RecursionError)


# --- Results --- #

class ErrorKind(Enum):
    SYNTAX = 'syntax'
    NOT_A_NUMBER = 'nan'
    INFINITE = 'inf'


class EvaluationResult:
    """
    The outcome of evaluating an expression. `value` is always a float (NaN for malformed input), `error` is None when
    the value is finite. ``str(result)`` is the display string, "Error" for every kind of error.
    """
    def __init__(self, value: float, error: Optional[ErrorKind] = None):
        self.value = value
        self.error = error

    @classmethod
    def from_value(cls, value: float):
        if math.isnan(value):
            return cls(value, ErrorKind.NOT_A_NUMBER)
        if math.isinf(value):
            return cls(value, ErrorKind.INFINITE)
        return cls(value)

    @classmethod
    def syntax_error(cls):
        return cls(math.nan, ErrorKind.SYNTAX)

    @property
    def ok(self):
        return self.error is None

    def __float__(self):
        return self.value

    def __str__(self):
        return format_number(self.value) if self.ok else format_number(None)

    def __repr__(self):
        if self.ok:
            return '<{} value={!r}>'.format(type(self).__name__, self.value)
        return '<{} error={}>'.format(type(self).__name__, self.error.value)


# --- Calc base --- #

def evaluate(ctx:Context, expression:Union[str, Node], mode:AngleMode = AngleMode.RADIANS,
             variables:Optional[Dict[str, float]] = None) -> EvaluationResult:
    """
    Evaluate an expression. Never raises for a malformed or undefined expression; the problem is reported in the
    returned result instead.

    :param ctx: Context to evaluate in, see ``create_default_context()``
    :param expression: Expression string, or a syntax tree from ``parse()``
    :param mode: Angle unit for trigonometric functions
    :param variables: Extra variables, Ex. ``{'x': 3}``
    """
    try:
        with ctx.with_scope(), ctx.with_angle_mode(mode):
            for name, value in (variables or {}).items():
                ctx.add(VariableDefinition(name, float(value)))

            if isinstance(expression, str):
                root = parse(ctx, normalize(expression))
            else:
                root = expression
            answer = root.evaluate(ctx)
    except _syntax_errors as e:
        logger.debug('Malformed expression %r: %s', expression, e)
        return EvaluationResult.syntax_error()

    result = EvaluationResult.from_value(answer)
    logger.debug('%r = %r', expression, result)
    return result

def tree(ctx:Context, expression:Union[Node, str]):
    """ Parse an expression and print the syntax tree structure. """
    import treelib

    if isinstance(expression, str):
        root = parse(ctx, normalize(expression))
    else:
        root = expression

    if len(root.children) == 1:
        # Remove singleton ListNodes
        root = root.children[0]

    t = treelib.Tree()
    parent = root.parent # temporarily remove parent
    root.parent = None
    root.add_to_tree(t, 0)
    root.parent = parent
    print('Expression ' + str(root))
    t.show()

def describe(ctx:Context, name:str) -> str:
    """
    Help text of every definition named `name`, Ex. "help: log(x, b?)\\nBase `b` logarithm of `x`, base 10 by default".
    Constants show their value. Raises ContextError if nothing is defined with that name.
    """
    found = [ctx.get(name, token_type, None) for token_type in DefinitionType]
    found = [definition for definition in found if definition is not None]
    if not found:
        raise ContextError("Name '{}' is not defined".format(name))

    entries = []
    for definition in found:
        if definition.is_constant:
            signature = '{} = {}'.format(definition.signature, format_number(definition()))
        else:
            signature = definition.signature
        entries.append('help: {}\n{}'.format(signature, definition.help_text or 'No description provided'))
    return '\n\n'.join(entries)

def console(ctx:Context, *, mode:AngleMode = AngleMode.RADIANS, show_time=False, show_tree=False, echo=False):
    """
    Start an interactive console. Besides expressions it understands:

    - ``exit``: quit
    - ``ctx``: print the context
    - ``help`` / ``help <name>``: list the built-ins, or describe one of them
    - ``deg`` / ``rad``: switch the angle mode
    - ``plot <f(x)>[; <g(x)> ...]``: show a graph of one or more functions
    """
    # noinspection PyUnresolvedReferences
    from colorama import Fore, Style, just_fix_windows_console
    just_fix_windows_console()

    def cprint(s, col):
        """ Print a message with a given color """
        print(col + str(s) + Style.RESET_ALL)
    def errprint(exc):
        """ Print an exception """
        cprint('{}: {}'.format(type(exc).__name__, str(exc)), Fore.RED)

    while True:
        try:
            exp = input(Fore.YELLOW + '>>> ' + Fore.RESET)
        except (EOFError, KeyboardInterrupt):
            break

        if exp == 'exit':
            break
        elif exp == 'ctx':
            print(ctx)
        elif exp == 'help':
            for definition in ctx.global_scope.values():
                print('{:<16}{}'.format(definition.signature, definition.help_text or ''))
        elif exp.startswith('help '):
            try:
                print(describe(ctx, exp[5:].strip()))
            except ContextError as e:
                errprint(e)
        elif exp in ('deg', 'rad'):
            mode = AngleMode.DEGREES if exp == 'deg' else AngleMode.RADIANS
            cprint('Angle mode: {}'.format(mode.name.lower()), Fore.YELLOW)
        elif exp.startswith('plot '):
            expressions = [e.strip() for e in exp[5:].split(';')]
            graph(ctx, expressions).show()
        else:
            try:
                # Parse expression first so that syntax errors can be shown with their position
                root = parse(ctx, normalize(exp))

                if echo:
                    cprint(str(root), Fore.CYAN)
                if show_tree:
                    tree(ctx, root)

                t = time.perf_counter()
                result = evaluate(ctx, root, mode)
                t = time.perf_counter() - t

                cprint(result, Style.BRIGHT if result.ok else Fore.RED)

                if show_time:
                    cprint('{:.5f}ms'.format(t*1000), Style.DIM)
            except (ExpressionSyntaxError, RecursionError) as e:
                errprint(e)
        print()

def graph(ctx:Context, functions:Union[str, Iterable[str]], xlow=-10, xhigh=10, ylow=-10, yhigh=10,
          width=800, height=600):
    """
    Graph one or more functions of x

    `functions` is an expression string or a collection of them. `xlow`, `xhigh`, `ylow`, and `yhigh` determine the
    range shown on each axis, `width` and `height` the size of the figure in pixels.

    Returns a matplotlib Figure.
    """
    if isinstance(functions, str):
        functions = [functions]

    plotted = FunctionList()
    for expression in functions:
        plotted.add(expression)

    return render(ctx, plotted, Viewport(xlow, xhigh, ylow, yhigh), width, height)


# --- Function implementations --- #

def real_valued(f):
    """
    Function wrapper that turns math domain errors into NaN and overflows into infinity, so that a function defined
    on part of the real line can be used anywhere in an expression. Example::

        sqrt = real_valued(math.sqrt)
        sqrt(-1)  # nan
    """
    @wraps(f)
    def wrapper(*args):
        try:
            return f(*args)
        except (ValueError, ZeroDivisionError):
            return math.nan
        except OverflowError:
            return math.inf
    return wrapper

def _is_odd_integer(x):
    return math.isfinite(x) and x.is_integer() and x % 2 == 1

def _div(a, b):
    """ Division where a zero divisor gives an infinity (or NaN for 0/0) rather than an error """
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1, b)
    return a / b

def _pow(a, b):
    """ `a` to the power of `b`. 0^0 is undefined. """
    if a == 0 and b == 0:
        return math.nan
    if a == 0 and b < 0:
        # 0^-n, the sign survives only for odd integer powers of -0
        return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
    try:
        return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and _is_odd_integer(b) else math.inf
    except ValueError:
        # Negative base with a fractional exponent
        return math.nan

@real_valued
def _log(x, b=10):
    if x <= 0:
        return math.nan
    if b == 10:
        return math.log10(x)
    if b == 2:
        return math.log2(x)
    return math.log(x, b)

@real_valued
def _ln(x):
    if x <= 0:
        return math.nan
    return math.log(x)

@real_valued
def _nroot(x, n):
    if x < 0 and _is_odd_integer(n):
        return -math.pow(-x, 1 / n)
    return math.pow(x, 1 / n)


# --- Context --- #

def create_default_context():
    ctx = Context()
    ctx.add_global(
        # Constants
        VariableDefinition('pi', math.pi, 'π', help_text="Ratio of a circle's circumference to its diameter"),
        VariableDefinition('e',  math.e,       help_text="Euler's number"),

        # Binary Operators
        BinaryOperatorDefinition(',', None,          0, Associativity.L_TO_R, help_text="Argument separator"),
        BinaryOperatorDefinition('+', operator.add,  4, Associativity.L_TO_R, help_text="Addition operator"),
        BinaryOperatorDefinition('-', operator.sub,  4, Associativity.L_TO_R, help_text="Subtraction operator"),
        BinaryOperatorDefinition('*', operator.mul,  6, Associativity.L_TO_R, help_text="Multiplication operator"),
        BinaryOperatorDefinition('/', _div,          6, Associativity.L_TO_R, help_text="Division operator"),
        BinaryOperatorDefinition('^', _pow,          7, Associativity.R_TO_L, help_text="Exponentiation operator"),

        # Unary operators
        UnaryOperatorDefinition('-', operator.neg, help_text="Unary negation operator"),
        UnaryOperatorDefinition('+', operator.pos, help_text="Unary plus operator"),
        PostfixOperatorDefinition('!', factorial,  help_text="Factorial operator"),

        # Basic Functions
        FunctionDefinition('abs',  'x',  abs,                      help_text="Absolute value of `x`"),
        FunctionDefinition('sqrt', 'x',  real_valued(math.sqrt),   help_text="Square root of `x`"),
        FunctionDefinition('root', 'xn', _nroot,                   help_text="`n`th root of `x`"),

        # Trigonometric Functions
        FunctionDefinition('sin',  'θ', real_valued(math.sin),  angle_in=True,  help_text="Sine of `θ`"),
        FunctionDefinition('cos',  'θ', real_valued(math.cos),  angle_in=True,  help_text="Cosine of `θ`"),
        FunctionDefinition('tan',  'θ', real_valued(math.tan),  angle_in=True,  help_text="Tangent of `θ`"),
        FunctionDefinition('asin', 'x', real_valued(math.asin), angle_out=True, help_text="Inverse sine of `x`"),
        FunctionDefinition('acos', 'x', real_valued(math.acos), angle_out=True, help_text="Inverse cosine of `x`"),
        FunctionDefinition('atan', 'x', real_valued(math.atan), angle_out=True, help_text="Inverse tangent of `x`"),

        # Exponential & Logarithmic Functions
        FunctionDefinition('exp', 'x',       real_valued(math.exp), help_text="Equivalent to `e^x`"),
        FunctionDefinition('ln',  'x',       _ln,                   help_text="Natural logarithm of `x`"),
        FunctionDefinition('log', ['x', 'b?'], _log,                help_text="Base `b` logarithm of `x`, base 10 by default"),

        # Combinatorial Functions
        FunctionDefinition('factorial', 'n', factorial, help_text="Factorial of `n`, Γ(n+1) for non-integers"),
    )
    return ctx
