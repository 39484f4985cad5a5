import math

import pytest

from graphcalc import AngleMode, ErrorKind, EvaluationResult, evaluate, parse


@pytest.mark.parametrize('expr, expected', [
    ('2+3*4', 14),
    ('(2+3)*4', 20),
    ('10-4-3', 3),
    ('2^3^2', 512),
    ('2^-1', 0.5),
    ('-2^2', 4),
    ('--2', 2),
    ('+5', 5),
    ('7/2', 3.5),
    ('2pi', 2 * math.pi),
    ('(2)(3)', 6),
    ('2(3+1)', 8),
    ('2 3', 23),
    ('1.5e3', 1500),
    ('2e2', 200),
    ('2e', 2 * math.e),
    ('3 × 4 ÷ 2 − 1', 5),
    ('√(16)', 4),
    ('3²', 9),
])
def test_arithmetic(ctx, expr, expected):
    result = evaluate(ctx, expr)
    assert result.ok
    assert result.value == pytest.approx(expected)


@pytest.mark.parametrize('expr, expected', [
    ('5!', 120),
    ('0!', 1),
    ('factorial(5)', 120),
    ('factorial(0)', 1),
    ('(2+1)!', 6),
    ('2^3!', 64),
    ('-3!', -6),
    ('3!2', 12),
    ('3!!', 720),
    ('0.5!', 0.886226925452758),
])
def test_factorial(ctx, expr, expected):
    assert evaluate(ctx, expr).value == pytest.approx(expected)


def test_factorial_overflow(ctx):
    result = evaluate(ctx, 'factorial(171)')
    assert result.error == ErrorKind.INFINITE
    assert str(result) == 'Error'


@pytest.mark.parametrize('expr, expected', [
    ('abs(-3)', 3),
    ('sqrt(2)', math.sqrt(2)),
    ('root(27, 3)', 3),
    ('root(-8, 3)', -2),
    ('exp(0)', 1),
    ('ln(e)', 1),
    ('log(1000)', 3),
    ('log(8, 2)', 3),
    ('log(81, 3)', 4),
    ('sin(pi/2)', 1),
    ('cos(0)', 1),
    ('atan(1)', math.pi / 4),
    ('sin(pi)^2 + cos(pi)^2', 1),
])
def test_functions(ctx, expr, expected):
    assert evaluate(ctx, expr).value == pytest.approx(expected)


def test_degrees(ctx):
    assert evaluate(ctx, 'sin(30)', AngleMode.DEGREES).value == pytest.approx(0.5)
    assert str(evaluate(ctx, 'sin(30)', AngleMode.DEGREES)) == '0.5'
    assert evaluate(ctx, 'cos(60)', AngleMode.DEGREES).value == pytest.approx(0.5)
    assert evaluate(ctx, 'asin(1)', AngleMode.DEGREES).value == pytest.approx(90)
    assert evaluate(ctx, 'atan(1)', AngleMode.DEGREES).value == pytest.approx(45)

    # Non-angle functions are not affected
    assert evaluate(ctx, 'sqrt(16)', AngleMode.DEGREES).value == 4


def test_angle_mode_is_restored(ctx):
    evaluate(ctx, 'sin(30)', AngleMode.DEGREES)
    assert ctx.params.angle_mode == AngleMode.RADIANS
    assert len(ctx) == 1
    assert evaluate(ctx, 'sin(30)').value == pytest.approx(math.sin(30))


def test_variables(ctx):
    assert evaluate(ctx, '2x', variables={'x': 3}).value == evaluate(ctx, '2*3').value
    assert evaluate(ctx, 'x^2+x', variables={'x': 2}).value == 6
    assert evaluate(ctx, 'x', variables={'x': 2}).ok
    assert evaluate(ctx, 'x').error == ErrorKind.SYNTAX


def test_evaluate_parsed_tree(ctx):
    root = parse(ctx, '2+3*4')
    assert evaluate(ctx, root).value == 14


def test_division_by_zero(ctx):
    result = evaluate(ctx, '1/0')
    assert result.value == math.inf
    assert result.error == ErrorKind.INFINITE
    assert str(result) == 'Error'

    assert evaluate(ctx, '-1/0').value == -math.inf
    assert evaluate(ctx, '0/0').error == ErrorKind.NOT_A_NUMBER


@pytest.mark.parametrize('expr', [
    '0^0',
    '(-8)^(1/3)',
    'sqrt(-1)',
    'ln(0)',
    'log(-1)',
    'asin(2)',
    'acos(-1.5)',
    'sin(1e400)',
    'factorial(-1)',
])
def test_undefined_is_nan(ctx, expr):
    result = evaluate(ctx, expr)
    assert math.isnan(result.value)
    assert result.error == ErrorKind.NOT_A_NUMBER
    assert str(result) == 'Error'


def test_overflow(ctx):
    assert evaluate(ctx, '10^400').value == math.inf
    assert evaluate(ctx, '(-10)^401').value == -math.inf
    assert evaluate(ctx, 'exp(1000)').value == math.inf


@pytest.mark.parametrize('expr', [
    '',
    '   ',
    '2+',
    '(2+3',
    '2+3)',
    'foo(2)',
    'sin(1, 2)',
    'log()',
    'log(1, 2, 3)',
    'sin',
    '1,2',
    '2+$',
    'import os',
    '2..5',
    '(' * 2000 + '1' + ')' * 2000,
])
def test_malformed_input(ctx, expr):
    result = evaluate(ctx, expr)
    assert result.error == ErrorKind.SYNTAX
    assert math.isnan(result.value)
    assert str(result) == 'Error'


def test_long_chains(ctx):
    assert evaluate(ctx, '+'.join(['x'] * 3000), variables={'x': 1}).value == 3000
    assert evaluate(ctx, '-'.join(['1'] * 3000)).value == -2998
    assert evaluate(ctx, '*'.join(['1.001'] * 3000)).value == pytest.approx(1.001 ** 3000)


def test_result():
    result = EvaluationResult.from_value(2.5)
    assert result.ok
    assert float(result) == 2.5
    assert str(result) == '2.5'
    assert repr(result) == '<EvaluationResult value=2.5>'
    assert repr(EvaluationResult.syntax_error()) == '<EvaluationResult error=syntax>'
