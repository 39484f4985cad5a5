"""
Definitions are the entries of a Context: the constants, functions and operators an expression can use. The parser
looks them up by name and kind, and the syntax tree calls them when it is evaluated.
"""
import math
from copy import copy
from enum import Enum


def is_identifier(name:str):
    return name.isascii() and name.isidentifier()


class Associativity(Enum):
    """
    How a chain of operators with equal precedence groups: 8/4/2 is (8/4)/2 (left to right), 2^3^2 is 2^(3^2)
    (right to left).
    """
    L_TO_R = 1
    R_TO_L = 2


class DefinitionType(Enum):
    """
    Kind of a definition. A context holds at most one definition per name and kind, which is how binary minus, unary
    minus and the constant `e` can all be found unambiguously, Ex. ``ctx.get('-', DefinitionType.UNARY_OPERATOR)``.
    """
    IDENTIFIER = 0
    BINARY_OPERATOR = 1
    UNARY_OPERATOR = 2
    POSTFIX_OPERATOR = 3


class AngleMode(Enum):
    """ Unit used by angle-aware functions. Graphing uses radians, the scientific calculator uses degrees. """
    RADIANS = 0
    DEGREES = 1


class ArgumentError(Exception):
    """ Bad argument list given to a FunctionDefinition """
    def __init__(self, arg_i, msg):
        super().__init__(msg)
        self.arg_i = arg_i


class Definition:
    precedence = 5
    associativity = Associativity.R_TO_L
    token_type = DefinitionType.IDENTIFIER

    def __init__(self, name, func, args=(), n_required=None, *, display_name=None, help_text=None,
                 angle_in=False, angle_out=False):
        """
        :param name: Name the parser matches
        :param func: Callable implementing the definition, or the value of a constant
        :param args: Argument names
        :param n_required: Number of required arguments, all of them by default
        :param display_name: Name shown when a syntax tree is printed, Ex. "π" for pi
        :param help_text: Description shown by the console
        :param angle_in: The arguments are angles, converted from degrees in degrees mode
        :param angle_out: The result is an angle, converted to degrees in degrees mode
        """
        self.name = name
        self.func = func
        self.args = tuple(args)
        self.n_required = len(self.args) if n_required is None else n_required
        self.display_name = display_name
        self.help_text = help_text
        self.angle_in = angle_in
        self.angle_out = angle_out
        self.ctx = None

    @property
    def is_constant(self):
        return False

    def copy(self):
        return copy(self)

    def bind_context(self, ctx):
        """
        Angle-aware definitions read the angle mode of the context they belong to every time they are called. Context
        does the binding when a definition is added, and copies a definition that already belongs to another context.
        """
        if self.angle_in or self.angle_out:
            self.ctx = ctx

    @property
    def degrees(self):
        return self.ctx is not None and self.ctx.params.angle_mode == AngleMode.DEGREES

    def check_inputs(self, n_inputs):
        """ Raises TypeError unless the definition accepts `n_inputs` arguments """
        n_max = len(self.args)
        if self.n_required <= n_inputs <= n_max:
            return

        if self.n_required == n_max:
            expected = '{} argument{}'.format(n_max, '' if n_max == 1 else 's')
        else:
            expected = 'between {} and {} arguments'.format(self.n_required, n_max)
        raise TypeError('{} takes {}, got {}'.format(self.signature, expected, n_inputs))

    def __call__(self, *inputs):
        self.check_inputs(len(inputs))

        degrees = self.degrees
        if degrees and self.angle_in:
            inputs = [math.radians(x) for x in inputs]

        result = self.func(*inputs)
        return math.degrees(result) if degrees and self.angle_out else result

    @property
    def label(self):
        return self.display_name or self.name

    @property
    def signature(self):
        """ Ex. "log(x, b?)", optional arguments marked with '?' """
        args = [arg + '?' if i >= self.n_required else arg for i, arg in enumerate(self.args)]
        return '{}({})'.format(self.label, ', '.join(args))

    def __str__(self):
        return self.signature

    def __repr__(self):
        return '<{} {!r}>'.format(type(self).__name__, self.signature)


class FunctionDefinition(Definition):
    def __init__(self, name, args, func, display_name=None, help_text=None, angle_in=False, angle_out=False):
        """
        A function, called with parentheses.

        `args` is an iterable of argument names. A name ending in '?' is optional, and so must be every argument after
        it. Optional arguments that aren't given are left out of the call, so `func` needs defaults for them.

        `func` takes and returns floats.

        Ex. ``FunctionDefinition('log', ['x', 'b?'], _log)``, ``FunctionDefinition('sin', 'θ', math.sin,
        angle_in=True)``
        """
        if not callable(func):
            raise TypeError("'{}' is not callable, use VariableDefinition for constants".format(func))

        names = []
        n_required = None
        for i, arg in enumerate(args):
            optional = arg.endswith('?')
            arg = arg.rstrip('?')

            if not arg.isidentifier():
                raise ArgumentError(i, "Invalid argument name '{}'".format(arg))
            if optional and n_required is None:
                n_required = i
            elif not optional and n_required is not None:
                raise ArgumentError(i, "Required argument '{}' follows an optional one".format(arg))
            names.append(arg)

        super().__init__(
            name, func, names, n_required,
            display_name=display_name, help_text=help_text, angle_in=angle_in, angle_out=angle_out
        )


class VariableDefinition(Definition):
    precedence = -1

    def __init__(self, name, value, display_name=None, help_text=None):
        """ A named value, Ex. ``VariableDefinition('pi', math.pi, 'π')`` or the `x` of a plotted function """
        super().__init__(name, value, display_name=display_name, help_text=help_text)

    @property
    def is_constant(self):
        return True

    def __call__(self):
        return self.func

    @property
    def signature(self):
        return self.label


class _OperatorDefinition(Definition):
    def __init__(self, symbol, func, args, help_text=None):
        if len(symbol) != 1:
            raise ValueError("Operator symbol must be a single character, not '{}'".format(symbol))
        super().__init__(symbol, func, args, help_text=help_text)

    def __repr__(self):
        return '<{} {!r}, precedence={}>'.format(type(self).__name__, self.name, self.precedence)


class BinaryOperatorDefinition(_OperatorDefinition):
    token_type = DefinitionType.BINARY_OPERATOR

    def __init__(self, symbol, func, precedence, associativity, help_text=None):
        """
        An infix operator. `func(a, b)` gets the left and right operand.

        Operators with a higher `precedence` are applied first; `associativity` decides between operators of equal
        precedence.
        """
        super().__init__(symbol, func, 'ab', help_text)
        self.precedence = precedence
        self.associativity = associativity

    @property
    def signature(self):
        return 'a {} b'.format(self.label)


class UnaryOperatorDefinition(_OperatorDefinition):
    """ A prefix operator, Ex. negation. Binds tighter than every binary operator, exponentiation included. """
    precedence = 8
    associativity = Associativity.R_TO_L
    token_type = DefinitionType.UNARY_OPERATOR

    def __init__(self, symbol, func, precedence=None, help_text=None):
        super().__init__(symbol, func, 'x', help_text)
        if precedence is not None:
            self.precedence = precedence

    @property
    def signature(self):
        return self.name + 'x'


class PostfixOperatorDefinition(UnaryOperatorDefinition):
    """ An operator written after its operand, Ex. the factorial "5!". Binds tighter than prefix operators. """
    precedence = 9
    associativity = Associativity.L_TO_R
    token_type = DefinitionType.POSTFIX_OPERATOR

    @property
    def signature(self):
        return 'x' + self.name


_symbol_substitutions = {
    # Operator glyphs
    '×': '*',
    '·': '*',
    '÷': '/',
    '−': '-',
    '–': '-',
    '—': '-',

    # Constants & functions
    'π': 'pi',
    '√': 'sqrt',
    '²': '^2',
}

def replace_symbols(s):
    """ Spell display glyphs the way the parser reads them, Ex. ``replace_symbols("2π×3")`` returns "2pi*3" """
    return ''.join(_symbol_substitutions.get(c, c) for c in s)
