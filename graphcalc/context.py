from contextlib import contextmanager
from typing import Iterator, List, Set, Tuple

from .definitions import AngleMode, Definition, DefinitionType

# Definitions are looked up by name and kind, so binary and unary minus can coexist
Key = Tuple[str, DefinitionType]


class ContextError(Exception):
    pass


class Params:
    # Unit used by the trigonometric functions. sin/cos/tan convert their input and asin/acos/atan their output when
    # this is DEGREES. Plotting always evaluates in RADIANS regardless of this setting.
    angle_mode = AngleMode.RADIANS


class Scope(dict):
    """ One level of the context: a mapping of (name, type) to definition. Adding a definition replaces any other
    definition with the same key. """

    @staticmethod
    def key(definition: Definition) -> Key:
        return definition.name, definition.token_type

    def add(self, definition: Definition):
        self[self.key(definition)] = definition

    def get(self, name: str, token_type: DefinitionType = DefinitionType.IDENTIFIER, default=None):
        return super().get((name, token_type), default)

    def __contains__(self, item):
        if isinstance(item, Definition):
            item = self.key(item)
        return isinstance(item, tuple) and super().__contains__(item)

    def __str__(self):
        lines = ['\t' + str(definition) for definition in self.values()]
        return 'Scope {\n' + '\n'.join(lines) + '\n}'

    def __repr__(self):
        return '<Scope size={}>'.format(len(self))


class Context:
    """
    Everything an expression can refer to. The bottom of the stack is the global scope holding the built-in constants,
    operators and functions (see ``create_default_context()``); scopes pushed on top of it hold temporary definitions,
    such as the `x` of a plotted function, and disappear when popped.
    """

    def __init__(self):
        self.params = Params()
        self.global_scope = Scope()
        self.stack: List[Scope] = [self.global_scope]

    def add(self, *definitions: Definition):
        """ Define names in the innermost scope. Built-ins can't be redefined; use ``add_global`` to change them. """
        if len(self.stack) == 1:
            raise ContextError('No scope to add to, push one with ctx.with_scope()')

        for definition in definitions:
            if definition in self.global_scope:
                raise ContextError("'{}' is a built-in and cannot be redefined".format(definition.name))
            self.stack[-1].add(self._bound(definition))

    def add_global(self, *definitions: Definition):
        for definition in definitions:
            self.global_scope.add(self._bound(definition))

    def _bound(self, definition: Definition) -> Definition:
        # A definition reads the angle mode of one context only; sharing one between contexts needs a copy
        if definition.ctx not in (None, self):
            definition = definition.copy()
        definition.bind_context(self)
        return definition

    def get(self, name: str, token_type: DefinitionType = DefinitionType.IDENTIFIER, default=ContextError):
        """ Look a name up, innermost scope first. Raises ContextError if it isn't defined and no default is given. """
        found = next(self._lookup((name, token_type)), None)
        if found is not None:
            return found
        if default is ContextError:
            raise ContextError("Name '{}' is not defined".format(name))
        return default

    def _lookup(self, key: Key) -> Iterator[Definition]:
        return (scope[key] for scope in reversed(self.stack) if key in scope)

    def __contains__(self, item):
        return any(item in scope for scope in self.stack)

    def keys(self) -> Set[Key]:
        """ Every (name, type) visible from the innermost scope """
        return {key for scope in self.stack for key in scope}

    def push_scope(self):
        self.stack.append(Scope())

    def pop_scope(self):
        if len(self.stack) == 1:
            raise ContextError('The global scope cannot be popped')
        self.stack.pop()

    @contextmanager
    def with_scope(self):
        """ Temporary definitions, Ex. ``with ctx.with_scope(): ctx.add(VariableDefinition('x', 2))`` """
        self.push_scope()
        try:
            yield
        finally:
            self.pop_scope()

    @contextmanager
    def with_angle_mode(self, mode: AngleMode):
        """ Temporarily switch the angle mode """
        previous = self.params.angle_mode
        self.params.angle_mode = mode
        try:
            yield
        finally:
            self.params.angle_mode = previous

    def __len__(self):
        """ Depth of the scope stack, 1 when only the global scope exists """
        return len(self.stack)

    def __str__(self):
        lines = [
            '\t<{} built-ins>'.format(len(self.global_scope)),
            '\t<angle mode: {}>'.format(self.params.angle_mode.name.lower()),
        ]
        for depth, scope in enumerate(self.stack[1:], 1):
            lines += ['\t' * depth + str(definition) for definition in scope.values()]
        return 'Context {\n' + '\n'.join(lines) + '\n}'

    def __repr__(self):
        return '<Context depth={}>'.format(len(self.stack))
