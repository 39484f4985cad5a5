from .context import Context, ContextError
from .definitions import AngleMode, Associativity, BinaryOperatorDefinition, DefinitionType, FunctionDefinition, \
    PostfixOperatorDefinition, UnaryOperatorDefinition, VariableDefinition
from .formatting import format_axis_label, format_number
from .gamma import factorial, gamma
from .grid import Grid, grid_step, plan_grid
from .logging_config import setup_logging
from .parser import ExpressionSyntaxError, normalize, parse
from .plotting import FunctionList, PlottedFunction, Viewport, plot, render
from .session import Calculator, Grapher, StandardCalculator
from .utils import ErrorKind, EvaluationResult, console, create_default_context, describe, evaluate, graph, tree
