"""
Expression parser.

Parsing is a small state machine: every token class knows how to recognise itself at a position of the expression and
which token classes may follow it. Operators are placed in the syntax tree by climbing from the most recent node
until a node of lower precedence is found, so the finished tree already encodes precedence and associativity and
evaluating it is a walk from the leaves up.
"""
import re

from .context import Context
from .definitions import Associativity, BinaryOperatorDefinition, Definition, DefinitionType, \
    PostfixOperatorDefinition, UnaryOperatorDefinition, is_identifier, replace_symbols
from .formatting import format_number

# Characters that may appear in an expression once display glyphs have been replaced
_allowed = re.compile(r'[0-9A-Za-z.+\-*/^!(),\s]*')

# Exponent suffix of a number literal, Ex. the "e+12" of "1.5e+12"
_exponent = re.compile(r'e[+-]?\d+')


def normalize(expr:str):
    """
    Prepare a user-typed expression for parsing: replace display glyphs (×, ÷, −, π, ...) with their ASCII
    spelling, reject any character outside the expression alphabet, and strip whitespace.

    :raises ExpressionSyntaxError: if a disallowed character is found
    """
    expr = replace_symbols(expr)
    bad = _allowed.match(expr).end()
    if bad != len(expr):
        raise ExpressionSyntaxError("Invalid character '{}'".format(expr[bad]), expr, bad)
    return re.sub(r'\s+', '', expr)


def parse(ctx:Context, expr:str, start:int=0, end:int=None, allow_list=False):
    """
    Build the syntax tree of ``expr[start:end]``.

    :param ctx: Context that defines the available operators, constants and functions
    :param expr: Normalized expression, see ``normalize()``
    :param start: First index to parse
    :param end: Index to stop at, the end of `expr` by default
    :param allow_list: Accept a comma separated list, as found between the parentheses of a function call
    :return: ListNode whose children are the parsed expression(s)
    :raises ExpressionSyntaxError: if the expression is malformed
    """
    if end is None:
        end = len(expr)

    root = ListNode()
    node = root
    i = start
    candidates = OPERAND_START + [EndOfExpression]
    last = StartOfExpression

    while i < end:
        for token in candidates:
            node, i, following = token.parse(ctx, node, i, expr, start, end)
            if following is not None:
                candidates = following
                last = token
                break
        else:
            raise ExpressionSyntaxError(
                'Expected {} after {}'.format(_names(candidates), last.__name__), expr, i
            )

    if EndOfExpression not in candidates:
        raise ExpressionSyntaxError(
            'Expression ended early, expected {} after {}'.format(_names(candidates), last.__name__), expr, i
        )
    if not root.children:
        raise ExpressionSyntaxError('Expression is empty', expr, i)
    if len(root.children) > 1 and not allow_list:
        raise ExpressionSyntaxError('Comma outside of a function call', expr, start)

    return root


def _names(tokens):
    return 'one of [{}]'.format(', '.join(token.__name__ for token in tokens))


class ExpressionSyntaxError(Exception):
    """ A malformed expression. ``str()`` shows the expression with a caret under the offending characters. """
    def __init__(self, msg, expr, i, length=1):
        super().__init__(msg)
        self.expr = expr
        self.i = i
        self.length = max(1, length)

    def __str__(self):
        caret = ' ' * self.i + '^' * self.length
        return '\n'.join((super().__str__(), self.expr, caret))


class Token:
    """
    Something that can appear in an expression. Subclasses implement ``parse()``, and tokens that end up in the syntax
    tree inherit from Node instead.
    """
    @classmethod
    def parse(cls, ctx: Context, node: 'Node', i: int, expr: str, start: int, end: int):
        """
        Try to read a token of this type at ``expr[i]``.

        On success the token is attached to the tree, and the new working node, the index just past the token, and the
        token classes allowed next are returned. Otherwise `node` and `i` come back unchanged along with None.

        :param ctx: The context
        :param node: Working node, the node of the token parsed last
        :param i: Current index in `expr`
        :param expr: The expression
        :param start: Start of the part of `expr` being parsed
        :param end: End of the part of `expr` being parsed
        :return: Node, int, List[Token class] or None
        """
        raise NotImplementedError


class Node(Token):
    """ A token that is part of the syntax tree """
    precedence = -1
    associativity = Associativity.L_TO_R

    def __init__(self, precedence=None, associativity=None):
        self.parent = None
        self.children = []
        if precedence is not None:
            self.precedence = precedence
        if associativity is not None:
            self.associativity = associativity

    def next_expected(self):
        raise NotImplementedError

    def evaluate(self, ctx:Context):
        raise NotImplementedError

    def __str__(self):
        raise NotImplementedError('{} cannot be converted to a string'.format(type(self).__name__))

    def tree_tag(self):
        """ Label of this node in a treelib.Tree """
        raise NotImplementedError('{} has no tree tag'.format(type(self).__name__))

    def add_child(self, node):
        node.parent = self
        self.children.append(node)

    def insert_parent(self, node):
        """ Put `node` between self and its parent """
        if self.parent is not None:
            siblings = self.parent.children
            siblings[siblings.index(self)] = node
        node.parent = self.parent
        node.add_child(self)

    def higher_precedence(self, other):
        """ Whether self binds tighter than `other`, that is, must be evaluated first when they compete for an operand """
        if self.precedence != other.precedence:
            return self.precedence > other.precedence

        # Equal precedence: a left-to-right pair groups to the left. When associativities differ, the right-to-left
        # one wins.
        if self.associativity == other.associativity:
            return self.associativity == Associativity.L_TO_R
        return self.associativity == Associativity.R_TO_L

    def is_left_parenthesized(self, child):
        """ Whether the left operand `child` needs parentheses when printed """
        return isinstance(child, (BinaryOperator, UnaryOperator)) and not child.higher_precedence(self)

    def is_right_parenthesized(self, child):
        """ Whether the right operand `child` needs parentheses when printed """
        return isinstance(child, (BinaryOperator, UnaryOperator)) and self.higher_precedence(child)

    def propagate_precedence(self, op):
        """ Climb from self to the highest ancestor that `op` does not bind tighter than, and return it """
        node = self
        while node.parent is not None and node.parent.higher_precedence(op):
            node = node.parent
        return node

    def add_to_tree(self, tree, num):
        """ Copy this subtree into a treelib.Tree. `num` prefixes the tag so siblings keep their order. """
        parent = id(self.parent) if self.parent is not None else None
        tree.create_node('{} {}'.format(num, self.tree_tag()), id(self), parent)
        for n, child in enumerate(self.children):
            child.add_to_tree(tree, n)


class ListNode(Node):
    """ Root of a parse. Holds one expression, or the arguments of a function call. """
    def evaluate(self, ctx:Context):
        if not self.children:
            return None
        if len(self.children) > 1:
            raise TypeError('Expected a single value, got {}'.format(len(self.children)))
        return self.children[0].evaluate(ctx)

    def __str__(self):
        return ', '.join(str(child) for child in self.children)

    def __repr__(self):
        return '<ListNode len={}>'.format(len(self.children))

    def tree_tag(self):
        return 'ListNode()'


class StartOfExpression(Token):
    pass


class EndOfExpression(Token):
    # Never matches a character; its presence in the expected tokens means the expression may end here
    @classmethod
    def parse(cls, ctx, node, i, expr, start, end):
        return node, i, None


class BinaryOperator(Node):
    def __init__(self, op:BinaryOperatorDefinition):
        super().__init__(op.precedence, op.associativity)
        self.symbol = op.name

    @classmethod
    def parse(cls, ctx, node, i, expr, start, end):
        op = ctx.get(expr[i], DefinitionType.BINARY_OPERATOR, default=None)
        if op is None:
            return node, i, None

        binop = cls(op)
        node = node.propagate_precedence(binop)

        if binop.symbol == ',':
            # The comma has the lowest precedence, so `node` is now a complete argument. The next argument becomes
            # another child of the same list.
            return node.parent, i+1, binop.next_expected()

        node.insert_parent(binop)
        return binop, i+1, binop.next_expected()

    def next_expected(self):
        return OPERAND_START

    def evaluate(self, ctx):
        # Chains like "1+2+...+n" are left-deep; walk the left operands in a loop so their length isn't limited by the
        # recursion depth
        chain = []
        node = self
        while isinstance(node, BinaryOperator):
            chain.append(node)
            node = node.children[0]

        value = node.evaluate(ctx)
        for binop in reversed(chain):
            op = ctx.get(binop.symbol, DefinitionType.BINARY_OPERATOR)
            value = op(value, binop.children[1].evaluate(ctx))
        return value

    def __str__(self):
        left, right = self.children
        left_text = '({})'.format(left) if self.is_left_parenthesized(left) else str(left)
        right_text = '({})'.format(right) if self.is_right_parenthesized(right) else str(right)
        return left_text + self.symbol + right_text

    def __repr__(self):
        return '<{} {!r}>'.format(type(self).__name__, self.symbol)

    def tree_tag(self):
        return '{}({})'.format(type(self).__name__, self.symbol)


class UnaryOperator(Node):
    """ A prefix operator, Ex. the minus of "-x" """
    token_type = DefinitionType.UNARY_OPERATOR

    def __init__(self, op:UnaryOperatorDefinition):
        super().__init__(op.precedence, op.associativity)
        self.symbol = op.name

    @classmethod
    def parse(cls, ctx, node, i, expr, start, end):
        op = ctx.get(expr[i], DefinitionType.UNARY_OPERATOR, default=None)
        if not isinstance(op, UnaryOperatorDefinition):
            return node, i, None

        prefix = cls(op)
        node.add_child(prefix)
        return prefix, i+1, prefix.next_expected()

    def next_expected(self):
        return OPERAND_START

    def evaluate(self, ctx:Context):
        op = ctx.get(self.symbol, self.token_type)
        return op(self.children[0].evaluate(ctx))

    def __str__(self):
        operand = self.children[0]
        if self.is_right_parenthesized(operand):
            return '{}({})'.format(self.symbol, operand)
        return self.symbol + str(operand)

    def __repr__(self):
        return '<{} {!r}>'.format(type(self).__name__, self.symbol)

    def tree_tag(self):
        return '{}({})'.format(type(self).__name__, self.symbol)


class PostfixOperator(UnaryOperator):
    """
    An operator written after its operand, such as the factorial in "5!". It applies to the operand immediately to its
    left: "-3!" is -(3!) and "2^3!" is 2^(3!), while "(2+1)!" applies to the whole parenthesized expression.
    """
    token_type = DefinitionType.POSTFIX_OPERATOR

    @classmethod
    def parse(cls, ctx, node, i, expr, start, end):
        op = ctx.get(expr[i], DefinitionType.POSTFIX_OPERATOR, default=None)
        if not isinstance(op, PostfixOperatorDefinition):
            return node, i, None

        postfix = cls(op)
        node = node.propagate_precedence(postfix)
        node.insert_parent(postfix)
        return postfix, i+1, postfix.next_expected()

    def next_expected(self):
        return AFTER_OPERAND

    def __str__(self):
        operand = self.children[0]
        if isinstance(operand, (BinaryOperator, UnaryOperator)) and not isinstance(operand, PostfixOperator):
            return '({}){}'.format(operand, self.symbol)
        return str(operand) + self.symbol


class Parenthesis(Token):
    @classmethod
    def parse(cls, ctx, node, i, expr, start, end):
        if expr[i] != '(':
            return node, i, None

        close = cls.find_close(expr, i, end)

        if isinstance(node, FunctionCall):
            # Argument list. Each comma separated expression becomes an argument of the call, which stays the working
            # node.
            arguments = parse(ctx, expr, start=i+1, end=close, allow_list=True)
            for argument in arguments.children:
                node.add_child(argument)
        else:
            # Grouping. The grouped expression is attached as a single operand and becomes the working node, so
            # operators that follow climb from it and never split it.
            inner = parse(ctx, expr, start=i+1, end=close).children[0]
            node.add_child(inner)
            node = inner

        return node, close + 1, cls.next_expected()

    @classmethod
    def next_expected(cls):
        return AFTER_OPERAND

    @classmethod
    def find_close(cls, expr, i, end):
        """
        Index of the parenthesis closing the one at ``expr[i]``, searching no further than `end`.

        :raises ExpressionSyntaxError: if it is never closed
        """
        depth = 0
        for j in range(i, end):
            if expr[j] == '(':
                depth += 1
            elif expr[j] == ')':
                depth -= 1
                if depth == 0:
                    return j
        raise ExpressionSyntaxError('Unclosed parenthesis', expr, i)


class FunctionCall(Node):
    """ Call of a Function node (its first child) with the remaining children as arguments """
    @classmethod
    def parse(cls, ctx, func: 'Function', i, expr, start, end):
        if expr[i] != '(':
            # Functions are only ever called with parentheses, "sin2" is an error
            return func, i, None

        call = cls()
        func.insert_parent(call)
        if expr[i:i+2] == '()':
            return call, i+2, call.next_expected()

        _, i, _ = Parenthesis.parse(ctx, call, i, expr, start, end)
        return call, i, call.next_expected()

    def next_expected(self):
        return AFTER_OPERAND

    def evaluate(self, ctx: Context):
        func, *arguments = self.children
        definition = func.evaluate(ctx)
        return definition(*(argument.evaluate(ctx) for argument in arguments))

    def __repr__(self):
        return '<{} name={!r}, n_args={}>'.format(type(self).__name__, self.children[0].name, len(self.children) - 1)

    def __str__(self):
        return '{}({})'.format(self.children[0], ', '.join(str(argument) for argument in self.children[1:]))

    def tree_tag(self):
        return 'FunctionCall'


class Number(Node):
    """ Number literal: digits with at most one decimal point and an optional exponent. Always a float. """
    def __init__(self, value):
        super().__init__()
        self.value = value

    @classmethod
    def parse(cls, ctx, node, i, expr, start, end):
        j = i
        seen_point = False
        while j < end:
            if expr[j] == '.' and not seen_point:
                seen_point = True
            elif not expr[j].isdigit():
                break
            j += 1

        if expr[i:j] in ('', '.'):
            return node, i, None

        # An 'e' that isn't followed by digits is Euler's number, multiplied implicitly
        exponent = _exponent.match(expr, j, end)
        if exponent:
            j = exponent.end()

        number = cls(float(expr[i:j]))
        node.add_child(number)
        return number, j, number.next_expected()

    def next_expected(self):
        return AFTER_OPERAND

    def evaluate(self, ctx:Context):
        return self.value

    def __repr__(self):
        return '<Number {!r}>'.format(self.value)

    def __str__(self):
        return format_number(self.value)

    def tree_tag(self):
        return 'Number({})'.format(self)


class Identifier(Node):
    """ A name from the context, either a Variable (constants, `x`) or a Function """
    def __init__(self, definition:Definition):
        super().__init__(definition.precedence, definition.associativity)
        self.name = definition.name
        self._display_name = definition.display_name

    @classmethod
    def parse(cls, ctx, node, i, expr, start, end):
        # Read the whole run of identifier characters, remembering the longest prefix that is defined. Names written
        # together are multiplied ("pix" is pi*x), and a longer name wins over its prefix ("exp" is never e*xp). What
        # is left after the prefix is parsed as the next token.
        j = i
        definition = None
        while j < end and is_identifier(expr[i:j+1]):
            definition = ctx.get(expr[i:j+1], default=definition)
            j += 1

        if j == i:
            return node, i, None
        if definition is None:
            raise ExpressionSyntaxError("Undefined identifier '{}'".format(expr[i:j]), expr, i, j-i)

        identifier = Variable(definition) if definition.is_constant else Function(definition)
        node.add_child(identifier)
        return identifier, i + len(definition.name), identifier.next_expected()

    def __str__(self):
        return self._display_name or self.name

    def tree_tag(self):
        return '{}({})'.format(type(self).__name__, self.name)

    def __repr__(self):
        return '<{} {!r}>'.format(type(self).__name__, self.name)


class Function(Identifier):
    def next_expected(self):
        return [FunctionCall]

    def evaluate(self, ctx:Context):
        return ctx.get(self.name)


class Variable(Identifier):
    def next_expected(self):
        return AFTER_OPERAND

    def evaluate(self, ctx:Context):
        return ctx.get(self.name)()


class ImplicitMultiplication(Token):
    """ Inserts a multiplication between adjacent operands, Ex. "2x", "(1+2)(3)", "3!2" """
    @classmethod
    def parse(cls, ctx, node, i, expr, start, end):
        op = ctx.get('*', DefinitionType.BINARY_OPERATOR, default=None)
        if not isinstance(op, BinaryOperatorDefinition):
            return node, i, None

        # Two numbers are never multiplied implicitly, Ex. "2.5.3"
        if _is_numeric(expr[i]) and i > start and _is_numeric(expr[i-1]):
            return node, i, None

        mul = BinaryOperator(op)
        node = node.propagate_precedence(mul)
        node.insert_parent(mul)
        return mul, i, [Parenthesis, Number, Identifier]


def _is_numeric(ch):
    return ch.isdigit() or ch == '.'


# What may start an operand, and what may follow a complete one
OPERAND_START = [Parenthesis, UnaryOperator, Number, Identifier]
AFTER_OPERAND = [BinaryOperator, PostfixOperator, ImplicitMultiplication, EndOfExpression]
